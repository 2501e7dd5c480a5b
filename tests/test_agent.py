import pytest

from solar_bankability.agent import (
    find_missing_fields,
    parse_cost_item,
    parse_structured_message,
    run_agent_from_data,
)

WORKED_MESSAGE = """
name=Demo
capacity=10
p50_year_0_yield=20000
ppa_price=50
capex_per_mw=1000000
om_cost_per_mw_year=10000
gearing_ratio=0.7
interest_rate=0.05
debt_tenor=10
# comment
"""


def test_parse_structured_message_converts_known_types() -> None:
    parsed = parse_structured_message(WORKED_MESSAGE)

    assert parsed["name"] == "Demo"
    assert parsed["capacity"] == 10.0
    assert parsed["debt_tenor"] == 10
    assert isinstance(parsed["debt_tenor"], int)


def test_parse_cost_item_lines() -> None:
    parsed = parse_structured_message(
        "capex_item=Modules:5000000\ncapex_item=Inverters:800000:12\nopex_item=O&M:120000"
    )

    assert [item.name for item in parsed["capex_items"]] == ["Modules", "Inverters"]
    assert parsed["capex_items"][0].margin_percent is None
    assert parsed["capex_items"][1].margin_percent == 12
    assert parsed["opex_items"][0].amount == 120_000


def test_parse_cost_item_rejects_bad_format() -> None:
    with pytest.raises(ValueError):
        parse_cost_item("Modules")


def test_missing_fields_detected() -> None:
    missing = find_missing_fields(parse_structured_message("name=Only Name"))

    assert "capacity" in missing
    assert "capex_per_mw" in missing


def test_itemized_message_does_not_need_rates() -> None:
    parsed = parse_structured_message(
        "capacity=10\np50_year_0_yield=20000\nppa_price=50\ncapex_item=EPC:10000000"
    )

    assert find_missing_fields(parsed) == []


def test_run_agent_without_export() -> None:
    result = run_agent_from_data(parse_structured_message(WORKED_MESSAGE))

    assert result["status"] == "ok"
    assert "sheet_url" not in result
    assert result["financing_structure"]["binding_constraint"] == "DSCR"
    # Degradation and O&M escalation pull the final tenor years below target.
    assert 0 < result["min_dscr"] < 1.3
    assert set(result["sensitivity"]) == {"ppa_price", "capex"}
    assert result["sensitivity"]["ppa_price"]["base"]["project_irr"] == result["project_irr"]


def test_run_agent_reports_invalid_inputs() -> None:
    data = parse_structured_message(WORKED_MESSAGE + "\ndebt_tenor=40\n")

    result = run_agent_from_data(data)

    assert result["status"] == "invalid"
    assert result["field"] == "debt_tenor"


def test_run_agent_needs_input() -> None:
    result = run_agent_from_data({"capacity": 10})

    assert result["status"] == "needs_input"
    assert "ppa_price" in result["missing"]
