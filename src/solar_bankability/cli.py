from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from solar_bankability.calculator import ProjectResults, compute
from solar_bankability.config import (
    DEFAULT_FINANCIAL_ASSUMPTIONS,
    DEFAULT_FINANCING_PARAMETERS,
    Scenario,
    inputs_from_mapping,
    load_scenario,
    log_level_from_env,
)
from solar_bankability.inputs import FinancialInputs
from solar_bankability.seasonal import NORTHERN_HEMISPHERE_MONTHLY_FACTORS
from solar_bankability.sensitivity import LEVER_LABELS, SensitivityTable, irr_sensitivity
from solar_bankability.sheet_export import export_to_google_sheets


@dataclass
class PromptField:
    key: str
    question: str
    parser: Callable[[str], object]
    default: Optional[object] = None


def _float(value: str) -> float:
    return float(value.strip())


def _int(value: str) -> int:
    return int(value.strip())


def collect_inputs() -> FinancialInputs:
    print("\nSolar Bankability: let's gather project details for the model.\n")

    project_fields = [
        PromptField("name", "Project name", str, "Solar Project"),
        PromptField("capacity", "Capacity (MW)", _float),
        PromptField("p50_year_0_yield", "P50 year-0 yield (MWh)", _float),
        PromptField("capex_per_mw", "CAPEX ($/MW)", _float),
        PromptField("om_cost_per_mw_year", "O&M ($/MW-year)", _float),
        PromptField("ppa_price", "PPA price ($/MWh)", _float),
        PromptField("ppa_escalation", "PPA escalation (0-1)", _float, DEFAULT_FINANCIAL_ASSUMPTIONS["ppa_escalation"]),
        PromptField("om_escalation", "O&M escalation (0-1)", _float, DEFAULT_FINANCIAL_ASSUMPTIONS["om_escalation"]),
        PromptField("degradation_rate", "Annual degradation (0-1)", _float, DEFAULT_FINANCIAL_ASSUMPTIONS["degradation_rate"]),
        PromptField("tax_rate", "Tax rate (0-1)", _float, DEFAULT_FINANCIAL_ASSUMPTIONS["tax_rate"]),
        PromptField("discount_rate", "Discount rate (0-1)", _float, DEFAULT_FINANCIAL_ASSUMPTIONS["discount_rate"]),
        PromptField("project_lifetime", "Project lifetime (years)", _int, DEFAULT_FINANCIAL_ASSUMPTIONS["project_lifetime"]),
    ]

    financing_fields = [
        PromptField("gearing_ratio", "Gearing ratio (0-1)", _float, DEFAULT_FINANCING_PARAMETERS["gearing_ratio"]),
        PromptField("interest_rate", "Debt interest rate (0-1)", _float, DEFAULT_FINANCING_PARAMETERS["interest_rate"]),
        PromptField("debt_tenor", "Debt tenor (years)", _int, DEFAULT_FINANCING_PARAMETERS["debt_tenor"]),
        PromptField("target_dscr", "Target DSCR", _float, DEFAULT_FINANCING_PARAMETERS["target_dscr"]),
    ]

    data = _collect_group("Project Assumptions", project_fields)
    data.update(_collect_group("Financing", financing_fields))
    inputs = inputs_from_mapping(data)
    _review_gaps(inputs)
    return inputs


def _collect_group(title: str, fields: list[PromptField]) -> dict[str, object]:
    print(f"\n{title}")
    print("-" * len(title))
    values: dict[str, object] = {}

    for field in fields:
        suffix = f" [{field.default}]" if field.default is not None else ""
        raw = input(f"{field.question}{suffix}: ").strip()
        if not raw and field.default is not None:
            parsed = field.default
        else:
            parsed = field.parser(raw)
        values[field.key] = parsed
    return values


def _review_gaps(inputs: FinancialInputs) -> None:
    print("\nReviewing inputs for likely gaps/flags...")
    flags: list[str] = []
    capacity_factor = inputs.p50_year_0_yield / (inputs.capacity * 8_760)
    if capacity_factor > 0.35:
        flags.append(f"Implied capacity factor {capacity_factor:.1%} is high for solar PV.")
    if inputs.project_lifetime < 15 or inputs.project_lifetime > 40:
        flags.append("Project lifetime is outside the typical 15-40 year range.")
    if inputs.target_dscr < 1.0:
        flags.append("Target DSCR below 1.0x lets debt service exceed CFADS.")

    if flags:
        print("Potential issues identified:")
        for flag in flags:
            print(f" - {flag}")
    else:
        print("No obvious gaps found. Proceeding with model build.")


def format_summary(result: ProjectResults) -> str:
    k = result.key_metrics
    f = result.financing_structure

    def _opt(value: Optional[float], fmt: str) -> str:
        return "n/a" if value is None else format(value, fmt)

    lines = [
        f"Project:            {result.project_summary.name}",
        f"Total CAPEX:        {result.project_summary.total_capex:,.0f}",
        f"Debt / Equity:      {f.final_debt:,.0f} / {f.equity:,.0f} ({f.binding_constraint} binds)",
        f"Annual debt service:{f.annual_debt_service:,.0f}",
        f"Project IRR:        {k.project_irr:.2%}",
        f"Equity IRR:         {k.equity_irr:.2%}",
        f"LCOE ($/MWh):       {k.lcoe:.2f}",
        f"Min / Avg DSCR:     {_opt(k.min_dscr, '.2f')} / {_opt(k.avg_dscr, '.2f')}",
        f"Project NPV:        {k.project_npv:,.0f}",
        f"Equity payback:     {_opt(k.equity_payback_years, '.1f')} years",
        f"Project payback:    {_opt(k.project_payback_years, '.1f')} years",
        "",
        result.assessment.overall,
    ]
    return "\n".join(lines)


def format_sensitivity(table: SensitivityTable) -> str:
    lines = [f"{'IRR sensitivity':<24}{'-10%':>9}{'base':>9}{'+10%':>9}"]
    for lever, cases in table.items():
        for metric, title in (("project_irr", "project"), ("equity_irr", "equity")):
            label = f"{LEVER_LABELS.get(lever, lever)} ({title})"
            values = "".join(f"{cases[shift][metric]:>9.2%}" for shift in ("-10%", "base", "+10%"))
            lines.append(f"{label:<24}{values}")
    return "\n".join(lines)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Solar project bankability model")
    parser.add_argument(
        "--scenario",
        help="YAML or JSON scenario file. Prompts interactively when omitted.",
    )
    parser.add_argument(
        "--service-account-json",
        help="Path to Google service account JSON credential file. Enables Sheets export.",
    )
    parser.add_argument(
        "--sheet-title",
        default="Solar Bankability Model",
        help="Title for the output Google Sheet workbook.",
    )
    parser.add_argument(
        "--log-level",
        default=log_level_from_env("WARNING"),
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.scenario:
        scenario = load_scenario(args.scenario)
    else:
        inputs = collect_inputs()
        scenario = Scenario(name=inputs.name, inputs=inputs, seasonal_factors=NORTHERN_HEMISPHERE_MONTHLY_FACTORS)

    result = compute(scenario.inputs, scenario.seasonal_factors)
    sensitivity = irr_sensitivity(scenario.inputs, scenario.seasonal_factors)

    print("\nModel build complete.\n")
    print(format_summary(result))
    print()
    print(format_sensitivity(sensitivity))

    if args.service_account_json:
        sheet_url = export_to_google_sheets(
            model=result,
            inputs=scenario.inputs,
            service_account_json_path=args.service_account_json,
            spreadsheet_title=args.sheet_title,
            sensitivity=sensitivity,
        )
        print(f"\nGoogle Sheet created: {sheet_url}")


if __name__ == "__main__":
    main()
