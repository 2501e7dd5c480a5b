import pytest

from solar_bankability.calculator import compute
from solar_bankability.inputs import CostLineItem
from solar_bankability.sensitivity import irr_sensitivity, shift_capex


def test_sensitivity_table_shape_and_direction(make_inputs) -> None:
    inputs = make_inputs(tax_rate=0.25)
    table = irr_sensitivity(inputs)

    assert set(table.keys()) == {"ppa_price", "capex"}
    assert set(table["ppa_price"].keys()) == {"-10%", "base", "+10%"}
    price = table["ppa_price"]
    capex = table["capex"]
    assert price["-10%"]["project_irr"] < price["base"]["project_irr"] < price["+10%"]["project_irr"]
    assert capex["-10%"]["project_irr"] > capex["base"]["project_irr"] > capex["+10%"]["project_irr"]
    assert price["base"]["equity_irr"] == pytest.approx(compute(inputs).key_metrics.equity_irr)


def test_shift_capex_scales_items(make_inputs) -> None:
    inputs = make_inputs(capex_items=[CostLineItem("EPC", 10_000_000, margin_percent=5)])

    shifted = shift_capex(inputs, 1.1)

    assert shifted.capex_items[0].amount == pytest.approx(11_000_000)
    assert shifted.capex_items[0].margin_percent == 5
    assert inputs.capex_items[0].amount == 10_000_000
