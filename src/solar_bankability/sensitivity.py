from __future__ import annotations

from dataclasses import replace
from typing import Dict, Sequence

from solar_bankability.calculator import compute
from solar_bankability.inputs import FinancialInputs
from solar_bankability.seasonal import NORTHERN_HEMISPHERE_MONTHLY_FACTORS

SHIFTS = {"-10%": 0.9, "base": 1.0, "+10%": 1.1}
LEVER_LABELS = {"ppa_price": "PPA price", "capex": "CAPEX"}

# lever -> shift label -> {"project_irr", "equity_irr"}
SensitivityTable = Dict[str, Dict[str, Dict[str, float]]]


def shift_ppa_price(inputs: FinancialInputs, multiplier: float) -> FinancialInputs:
    return replace(inputs, ppa_price=inputs.ppa_price * multiplier)


def shift_capex(inputs: FinancialInputs, multiplier: float) -> FinancialInputs:
    if inputs.capex_items:
        items = tuple(replace(item, amount=item.amount * multiplier) for item in inputs.capex_items)
        return replace(inputs, capex_items=items)
    return replace(inputs, capex_per_mw=inputs.capex_per_mw * multiplier)


def irr_sensitivity(
    inputs: FinancialInputs,
    seasonal_factors: Sequence[float] = NORTHERN_HEMISPHERE_MONTHLY_FACTORS,
) -> SensitivityTable:
    """Project and equity IRR with PPA price and capital cost moved by 10% each way.

    Debt is re-sized for each case, so the equity IRR reflects the new structure.
    """
    table: SensitivityTable = {}
    for lever, shift in (("ppa_price", shift_ppa_price), ("capex", shift_capex)):
        table[lever] = {}
        for label, multiplier in SHIFTS.items():
            metrics = compute(shift(inputs, multiplier), seasonal_factors).key_metrics
            table[lever][label] = {
                "project_irr": metrics.project_irr,
                "equity_irr": metrics.equity_irr,
            }
    return table
