"""Default assumptions and scenario-file loading.

Scenario files are YAML or JSON mappings. Keys mirror ``FinancialInputs``;
financing parameters may also sit under a ``financing:`` block, and an
optional ``seasonal_factors`` list replaces the default monthly curve.
Anything left out falls back to the defaults below.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from solar_bankability.inputs import FinancialInputs
from solar_bankability.seasonal import NORTHERN_HEMISPHERE_MONTHLY_FACTORS, validate_seasonal_factors

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_ENV = "GOOGLE_SERVICE_ACCOUNT_JSON"
LOG_LEVEL_ENV = "SOLAR_BANKABILITY_LOG_LEVEL"

DEFAULT_FINANCING_PARAMETERS: Dict[str, Any] = {
    "gearing_ratio": 0.75,
    "interest_rate": 0.045,
    "debt_tenor": 15,
    "target_dscr": 1.30,
}

DEFAULT_FINANCIAL_ASSUMPTIONS: Dict[str, Any] = {
    "ppa_escalation": 0.0,
    "om_escalation": 0.01,
    "degradation_rate": 0.004,
    "tax_rate": 0.25,
    "discount_rate": 0.08,
    "project_lifetime": 25,
}

# 300 MW ground mount at a 22% capacity factor: 300 * 0.22 * 8760 MWh.
DEFAULT_FINANCIAL_INPUTS: Dict[str, Any] = {
    "name": "Utility-Scale Solar Project",
    "capacity": 300,
    "p50_year_0_yield": 577_920,
    "capex_per_mw": 850_000,
    "ppa_price": 65,
    "om_cost_per_mw_year": 12_000,
    "capex_items": [],
    "opex_items": [],
    "global_margin": 0,
    **DEFAULT_FINANCIAL_ASSUMPTIONS,
    **DEFAULT_FINANCING_PARAMETERS,
}

REQUIRED_INPUT_KEYS = {"capacity", "p50_year_0_yield", "ppa_price"}


class ScenarioConfigError(ValueError):
    """Configuration-level error for scenario loading."""


@dataclass(frozen=True)
class Scenario:
    name: str
    inputs: FinancialInputs
    seasonal_factors: Tuple[float, ...]
    source_path: str = ""


def log_level_from_env(default: str = "INFO") -> str:
    return os.getenv(LOG_LEVEL_ENV, default).upper()


def with_defaults(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill assumptions and financing terms the caller left out.

    Cost rates are not defaulted: a caller must state its own costs.
    """
    merged: Dict[str, Any] = {**DEFAULT_FINANCIAL_ASSUMPTIONS, **DEFAULT_FINANCING_PARAMETERS}
    financing = data.get("financing")
    if isinstance(financing, Mapping):
        merged.update(financing)
    merged.update({k: v for k, v in data.items() if k != "financing" and v is not None})
    return merged


def inputs_from_mapping(data: Mapping[str, Any]) -> FinancialInputs:
    return FinancialInputs.from_mapping(with_defaults(data))


def default_inputs(**overrides: Any) -> FinancialInputs:
    return FinancialInputs.from_mapping({**DEFAULT_FINANCIAL_INPUTS, **overrides})


def _load_raw_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Scenario config not found: {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ScenarioConfigError(f"Unsupported scenario config extension '{suffix}' for {path}")

    if data is None:
        raise ScenarioConfigError(f"Empty configuration in file: {path}")
    if not isinstance(data, dict):
        raise ScenarioConfigError(
            f"Expected a mapping at top level of {path}, got {type(data).__name__}"
        )
    return data


def scenario_from_mapping(data: Mapping[str, Any], source_path: str = "") -> Scenario:
    missing = sorted(REQUIRED_INPUT_KEYS - set(data.keys()))
    if missing:
        raise ScenarioConfigError(f"Scenario is missing required keys: {', '.join(missing)}")

    raw_factors = data.get("seasonal_factors")
    factors = (
        NORTHERN_HEMISPHERE_MONTHLY_FACTORS
        if raw_factors is None
        else validate_seasonal_factors(raw_factors)
    )
    fields = {k: v for k, v in data.items() if k != "seasonal_factors"}
    inputs = inputs_from_mapping(fields)
    return Scenario(name=inputs.name, inputs=inputs, seasonal_factors=factors, source_path=source_path)


def load_scenario(path: str | Path) -> Scenario:
    path = Path(path)
    data = _load_raw_config(path)
    scenario = scenario_from_mapping(data, source_path=str(path))
    logger.info("Loaded scenario '%s' from %s", scenario.name, path)
    return scenario
