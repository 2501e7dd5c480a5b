from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from solar_bankability.calculator import compute
from solar_bankability.config import REQUIRED_INPUT_KEYS, inputs_from_mapping
from solar_bankability.inputs import CostLineItem, InputValidationError
from solar_bankability.sensitivity import irr_sensitivity
from solar_bankability.sheet_export import export_to_google_sheets

logger = logging.getLogger(__name__)

COST_RATE_KEYS = {"capex_per_mw", "om_cost_per_mw_year"}

FIELD_TYPES = {
    "name": str,
    "capacity": float,
    "p50_year_0_yield": float,
    "ppa_price": float,
    "capex_per_mw": float,
    "om_cost_per_mw_year": float,
    "global_margin": float,
    "degradation_rate": float,
    "ppa_escalation": float,
    "om_escalation": float,
    "gearing_ratio": float,
    "interest_rate": float,
    "debt_tenor": int,
    "target_dscr": float,
    "project_lifetime": int,
    "tax_rate": float,
    "discount_rate": float,
}

ITEM_KEYS = {"capex_item": "capex_items", "opex_item": "opex_items"}


def parse_cost_item(value: str) -> CostLineItem:
    """Parse ``Name:amount[:margin]`` into a cost line item."""
    parts = [p.strip() for p in value.split(":")]
    if len(parts) < 2:
        raise ValueError(f"Cost item '{value}' must look like Name:amount[:margin].")
    margin = float(parts[2]) if len(parts) > 2 and parts[2] else None
    return CostLineItem(name=parts[0], amount=float(parts[1]), margin_percent=margin)


def parse_structured_message(message: str) -> Dict[str, Any]:
    """Parse newline-delimited key=value pairs from SMS/email body."""
    data: Dict[str, Any] = {}
    for raw_line in message.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if key in ITEM_KEYS:
            data.setdefault(ITEM_KEYS[key], []).append(parse_cost_item(value))
            continue
        parser = FIELD_TYPES.get(key, str)
        data[key] = parser(value)
    return data


def find_missing_fields(data: Dict[str, Any]) -> List[str]:
    missing = set(REQUIRED_INPUT_KEYS - set(data.keys()))
    if not data.get("capex_items"):
        missing |= COST_RATE_KEYS - set(data.keys())
    return sorted(missing)


def run_agent_from_data(
    data: Dict[str, Any],
    service_account_json_path: Optional[str] = None,
    sheet_title: str = "Solar Bankability Model",
) -> Dict[str, Any]:
    missing = find_missing_fields(data)
    if missing:
        return {
            "status": "needs_input",
            "missing": missing,
        }

    try:
        inputs = inputs_from_mapping(data)
    except InputValidationError as exc:
        logger.info("Rejected inputs: %s", exc)
        return {
            "status": "invalid",
            "field": exc.field,
            "error": str(exc),
        }

    result = compute(inputs)
    metrics = result.key_metrics
    sensitivity = irr_sensitivity(inputs)

    response: Dict[str, Any] = {
        "status": "ok",
        "project_irr": metrics.project_irr,
        "equity_irr": metrics.equity_irr,
        "lcoe": metrics.lcoe,
        "min_dscr": metrics.min_dscr,
        "project_npv": metrics.project_npv,
        "assessment": result.assessment.overall,
        "financing_structure": asdict(result.financing_structure),
        "sensitivity": sensitivity,
    }

    if service_account_json_path:
        response["sheet_url"] = export_to_google_sheets(
            model=result,
            inputs=inputs,
            service_account_json_path=service_account_json_path,
            spreadsheet_title=sheet_title,
            sensitivity=sensitivity,
        )
    return response
