from __future__ import annotations

from typing import Sequence

from solar_bankability.inputs import CanonicalInputs
from solar_bankability.seasonal import NORTHERN_HEMISPHERE_MONTHLY_FACTORS, validate_seasonal_factors

HOURS_PER_YEAR = 8_760


class Projection:
    """Operating figures for any year (1-indexed) or month of the project life."""

    def __init__(
        self,
        inputs: CanonicalInputs,
        seasonal_factors: Sequence[float] = NORTHERN_HEMISPHERE_MONTHLY_FACTORS,
    ) -> None:
        self.inputs = inputs
        self.seasonal_factors = validate_seasonal_factors(seasonal_factors)

    def capacity_factor(self) -> float:
        return self.inputs.p50_year_0_yield / (self.inputs.capacity * HOURS_PER_YEAR)

    def total_capex(self) -> float:
        return self.inputs.capacity * self.inputs.capex_per_mw

    def energy(self, year: int) -> float:
        return self.inputs.p50_year_0_yield * (1 - self.inputs.degradation_rate) ** (year - 1)

    def ppa_price(self, year: int) -> float:
        return self.inputs.ppa_price * (1 + self.inputs.ppa_escalation) ** (year - 1)

    def revenue(self, year: int) -> float:
        return self.energy(year) * self.ppa_price(year)

    def om_cost(self, year: int) -> float:
        return (
            self.inputs.capacity
            * self.inputs.om_cost_per_mw_year
            * (1 + self.inputs.om_escalation) ** (year - 1)
        )

    def ebitda(self, year: int) -> float:
        return self.revenue(year) - self.om_cost(year)

    def cfads(self, year: int) -> float:
        # Flat tax on EBITDA; no depreciation shield.
        return self.ebitda(year) * (1 - self.inputs.tax_rate)

    def energy_month(self, year: int, month: int) -> float:
        return self.energy(year) * self.seasonal_factors[month - 1]

    def revenue_month(self, year: int, month: int) -> float:
        return self.energy_month(year, month) * self.ppa_price(year)

    def om_cost_month(self, year: int) -> float:
        return self.om_cost(year) / 12

    def ebitda_month(self, year: int, month: int) -> float:
        return self.revenue_month(year, month) - self.om_cost_month(year)

    def cfads_month(self, year: int, month: int) -> float:
        return self.ebitda_month(year, month) * (1 - self.inputs.tax_rate)

    def years(self) -> range:
        return range(1, self.inputs.project_lifetime + 1)
