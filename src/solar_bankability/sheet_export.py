from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional

from solar_bankability.calculator import ProjectResults
from solar_bankability.inputs import FinancialInputs
from solar_bankability.sensitivity import LEVER_LABELS, SensitivityTable

if TYPE_CHECKING:
    import gspread

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


def load_google_client(service_account_json_path: str) -> "gspread.Client":
    import gspread
    from google.oauth2.service_account import Credentials

    credentials_info = json.loads(Path(service_account_json_path).read_text())
    creds = Credentials.from_service_account_info(credentials_info, scopes=SCOPES)
    return gspread.authorize(creds)


def export_to_google_sheets(
    model: ProjectResults,
    inputs: FinancialInputs,
    service_account_json_path: str,
    spreadsheet_title: str,
    sensitivity: Optional[SensitivityTable] = None,
) -> str:
    client = load_google_client(service_account_json_path)
    sheet = client.create(spreadsheet_title)

    assumptions_tab = sheet.sheet1
    assumptions_tab.update_title("Assumptions")
    assumptions_tab.update(range_name="A1", values=assumption_rows(inputs))

    yearly_rows = cashflow_rows(model)
    cashflow_tab = sheet.add_worksheet(title="Cash Flow", rows=len(yearly_rows) + 10, cols=12)
    cashflow_tab.update(range_name="A1", values=yearly_rows)

    monthly_rows = monthly_cashflow_rows(model)
    monthly_tab = sheet.add_worksheet(title="Monthly", rows=len(monthly_rows) + 10, cols=14)
    monthly_tab.update(range_name="A1", values=monthly_rows)

    metrics_tab = sheet.add_worksheet(title="Metrics", rows=100, cols=10)
    metrics_tab.update(range_name="A1", values=metrics_rows(model, sensitivity))

    logger.info("Exported '%s' to Google Sheets (%s)", spreadsheet_title, sheet.id)
    return f"https://docs.google.com/spreadsheets/d/{sheet.id}"


def _blank(value: Optional[float]) -> Any:
    return "" if value is None else value


def assumption_rows(inputs: FinancialInputs) -> List[List[Any]]:
    a = inputs
    rows: List[List[Any]] = [
        ["Assumption", "Value", "Notes"],
        ["Project Name", a.name, ""],
        ["Capacity (MW)", a.capacity, "Core production lever"],
        ["P50 Year-0 Yield (MWh)", a.p50_year_0_yield, "Drives annual generation"],
        ["PPA Price ($/MWh)", a.ppa_price, "Primary contracted revenue lever"],
        ["PPA Escalation", a.ppa_escalation, ""],
        ["Cost Basis", a.cost_basis, "Direct rates or itemized lines"],
        ["CAPEX ($/MW)", _blank(a.capex_per_mw), "Ignored when CAPEX items are given"],
        ["O&M ($/MW-year)", _blank(a.om_cost_per_mw_year), "Ignored when CAPEX items are given"],
        ["Global Margin (%)", a.global_margin, "Applies to CAPEX items without their own margin"],
        ["O&M Escalation", a.om_escalation, ""],
        ["Annual Degradation", a.degradation_rate, "Generation declines over time"],
        ["Gearing Ratio", a.gearing_ratio, "Debt cap as share of CAPEX"],
        ["Interest Rate", a.interest_rate, ""],
        ["Debt Tenor (years)", a.debt_tenor, ""],
        ["Target DSCR", a.target_dscr, "Debt cap from CFADS coverage"],
        ["Project Lifetime (years)", a.project_lifetime, ""],
        ["Tax Rate", a.tax_rate, "Flat on EBITDA"],
        ["Discount Rate", a.discount_rate, "Used in NPV and LCOE"],
    ]
    for item in a.capex_items:
        rows.append(["CAPEX item: " + item.name, item.amount, _blank(item.margin_percent)])
    for item in a.opex_items:
        rows.append(["OPEX item: " + item.name, item.amount, ""])
    return rows


def cashflow_rows(model: ProjectResults) -> List[List[Any]]:
    y = model.yearly_data
    rows: List[List[Any]] = [
        [
            "Year",
            "Energy MWh",
            "Revenue",
            "O&M",
            "EBITDA",
            "CFADS",
            "Debt Service",
            "DSCR",
            "FCF to Equity",
            "Cumulative FCF to Equity",
        ]
    ]
    for i, year in enumerate(y.years):
        rows.append(
            [
                year,
                y.energy_production_mwh[i],
                y.revenue[i],
                y.om_costs[i],
                y.ebitda[i],
                y.cfads[i],
                y.debt_service[i],
                _blank(y.dscr[i]),
                y.fcf_to_equity[i],
                y.cumulative_fcf_to_equity[i],
            ]
        )
    return rows


def monthly_cashflow_rows(model: ProjectResults) -> List[List[Any]]:
    rows: List[List[Any]] = [
        ["Year", "Month", "Energy MWh", "Revenue", "O&M", "EBITDA", "CFADS", "Debt Service", "DSCR", "FCF to Equity"]
    ]
    for m in model.monthly_data:
        rows.append(
            [
                m.year,
                m.month_name,
                m.energy_production_mwh,
                m.revenue,
                m.om_costs,
                m.ebitda,
                m.cfads,
                m.debt_service,
                _blank(m.dscr),
                m.fcf_to_equity,
            ]
        )
    return rows


def metrics_rows(
    model: ProjectResults, sensitivity: Optional[SensitivityTable] = None
) -> List[List[Any]]:
    k = model.key_metrics
    f = model.financing_structure
    a = model.assessment
    rows: List[List[Any]] = [
        ["Metric", "Value"],
        ["Project IRR", k.project_irr],
        ["Equity IRR", k.equity_irr],
        ["LCOE ($/MWh)", k.lcoe],
        ["Project NPV", k.project_npv],
        ["Min DSCR", _blank(k.min_dscr)],
        ["Avg DSCR", _blank(k.avg_dscr)],
        ["Equity Payback (years)", _blank(k.equity_payback_years)],
        ["Project Payback (years)", _blank(k.project_payback_years)],
        [],
        ["Financing", "Value"],
        ["Max Debt by DSCR", f.max_debt_by_dscr],
        ["Max Debt by Gearing", f.max_debt_by_gearing],
        ["Final Debt", f.final_debt],
        ["Equity", f.equity],
        ["Actual Gearing", f.actual_gearing],
        ["Binding Constraint", f.binding_constraint],
        ["Annual Debt Service", f.annual_debt_service],
        [],
        ["Assessment", ""],
        ["Project IRR", a.project_irr],
        ["Equity IRR", a.equity_irr],
        ["DSCR", a.dscr],
        ["Overall", a.overall],
    ]
    if sensitivity:
        rows.append([])
        rows.append(["Sensitivity", "Downside", "Base", "Upside"])
        for lever, cases in sensitivity.items():
            for metric, title in (("project_irr", "Project IRR"), ("equity_irr", "Equity IRR")):
                rows.append(
                    [
                        f"{LEVER_LABELS.get(lever, lever)}: {title}",
                        cases["-10%"][metric],
                        cases["base"][metric],
                        cases["+10%"][metric],
                    ]
                )
    return rows
