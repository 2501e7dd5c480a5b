from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from solar_bankability.financial import level_payment
from solar_bankability.inputs import CanonicalInputs
from solar_bankability.projection import Projection

logger = logging.getLogger(__name__)

BindingConstraint = Literal["DSCR", "Gearing"]


@dataclass(frozen=True)
class DebtSizing:
    total_capex: float
    pv_of_cfads: float
    max_debt_by_dscr: float
    max_debt_by_gearing: float
    final_debt: float
    equity: float
    binding_constraint: BindingConstraint
    interest_rate: float
    debt_tenor: int
    annual_debt_service: float

    @property
    def actual_gearing(self) -> float:
        return self.final_debt / self.total_capex

    def debt_service(self, year: int) -> float:
        return self.annual_debt_service if year <= self.debt_tenor else 0.0

    def dscr(self, year: int, cfads: float) -> Optional[float]:
        if year > self.debt_tenor or self.annual_debt_service == 0:
            return None
        return cfads / self.annual_debt_service


def pv_of_cfads(projection: Projection, interest_rate: float, tenor: int) -> float:
    return sum(
        projection.cfads(year) / (1 + interest_rate) ** year for year in range(1, tenor + 1)
    )


def size_debt(projection: Projection, inputs: CanonicalInputs) -> DebtSizing:
    capex = projection.total_capex()
    pv_cfads = pv_of_cfads(projection, inputs.interest_rate, inputs.debt_tenor)

    max_by_dscr = pv_cfads / inputs.target_dscr
    max_by_gearing = capex * inputs.gearing_ratio
    # A negative DSCR cap means the project cannot carry any debt.
    final_debt = max(0.0, min(max_by_dscr, max_by_gearing))
    binding: BindingConstraint = "DSCR" if max_by_dscr < max_by_gearing else "Gearing"

    annual_ds = level_payment(inputs.interest_rate, inputs.debt_tenor, final_debt)

    logger.debug(
        "Debt sizing: dscr_cap=%.2f gearing_cap=%.2f final=%.2f (%s binds), debt service=%.2f",
        max_by_dscr,
        max_by_gearing,
        final_debt,
        binding,
        annual_ds,
    )

    return DebtSizing(
        total_capex=capex,
        pv_of_cfads=pv_cfads,
        max_debt_by_dscr=max_by_dscr,
        max_debt_by_gearing=max_by_gearing,
        final_debt=final_debt,
        equity=capex - final_debt,
        binding_constraint=binding,
        interest_rate=inputs.interest_rate,
        debt_tenor=inputs.debt_tenor,
        annual_debt_service=annual_ds,
    )
