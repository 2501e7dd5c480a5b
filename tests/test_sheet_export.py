import pytest

from solar_bankability.calculator import compute
from solar_bankability.inputs import CostLineItem
from solar_bankability.sensitivity import irr_sensitivity
from solar_bankability.sheet_export import (
    assumption_rows,
    cashflow_rows,
    metrics_rows,
    monthly_cashflow_rows,
)


def test_cashflow_rows_cover_every_year(make_inputs) -> None:
    rows = cashflow_rows(compute(make_inputs()))

    assert rows[0][0] == "Year"
    assert len(rows) == 21
    assert rows[1][0] == 1
    # DSCR column is blank once the debt is repaid.
    assert rows[11][7] == ""
    assert rows[10][7] != ""


def test_monthly_rows(make_inputs) -> None:
    rows = monthly_cashflow_rows(compute(make_inputs()))

    assert len(rows) == 241
    assert rows[1][1] == "January"


def test_metrics_rows_blank_missing_values(make_inputs) -> None:
    rows = metrics_rows(compute(make_inputs(gearing_ratio=0.0)))
    by_label = {row[0]: row[1] for row in rows if row}

    assert by_label["Min DSCR"] == ""
    assert by_label["Binding Constraint"] == "Gearing"


def test_assumption_rows_list_cost_items(make_inputs) -> None:
    inputs = make_inputs(capex_items=[CostLineItem("EPC", 10_000_000, margin_percent=3)])
    rows = assumption_rows(inputs)

    assert ["CAPEX item: EPC", 10_000_000, 3] in rows
    assert ["Cost Basis", "itemized", "Direct rates or itemized lines"] in rows


def test_metrics_rows_append_sensitivity(make_inputs) -> None:
    inputs = make_inputs()
    model = compute(inputs)
    rows = metrics_rows(model, irr_sensitivity(inputs))

    header = rows.index(["Sensitivity", "Downside", "Base", "Upside"])
    by_label = {row[0]: row[1:] for row in rows[header + 1 :]}
    assert set(by_label) == {
        "PPA price: Project IRR",
        "PPA price: Equity IRR",
        "CAPEX: Project IRR",
        "CAPEX: Equity IRR",
    }
    downside, base, upside = by_label["PPA price: Project IRR"]
    assert downside < base < upside
    assert base == pytest.approx(model.key_metrics.project_irr)


def test_metrics_rows_without_sensitivity_stop_at_assessment(make_inputs) -> None:
    rows = metrics_rows(compute(make_inputs()))

    assert rows[-1][0] == "Overall"
