from typing import Any, Callable, Dict

import pytest

from solar_bankability.inputs import FinancialInputs

# Flat-profile case: no escalation, degradation or tax.
WORKED_SCENARIO: Dict[str, Any] = {
    "name": "Worked Example",
    "capacity": 10,
    "p50_year_0_yield": 20_000,
    "ppa_price": 50,
    "capex_per_mw": 1_000_000,
    "om_cost_per_mw_year": 10_000,
    "degradation_rate": 0.0,
    "ppa_escalation": 0.0,
    "om_escalation": 0.0,
    "gearing_ratio": 0.7,
    "interest_rate": 0.05,
    "debt_tenor": 10,
    "target_dscr": 1.3,
    "project_lifetime": 20,
    "tax_rate": 0.0,
    "discount_rate": 0.08,
}


@pytest.fixture
def make_inputs() -> Callable[..., FinancialInputs]:
    def _make(**overrides: Any) -> FinancialInputs:
        return FinancialInputs(**{**WORKED_SCENARIO, **overrides})

    return _make
