import itertools

import pytest

from solar_bankability.financing import pv_of_cfads, size_debt
from solar_bankability.inputs import normalize
from solar_bankability.projection import Projection


def _sizing(inputs):
    canonical = normalize(inputs)
    return size_debt(Projection(canonical), canonical)


def test_worked_scenario_dscr_binds(make_inputs) -> None:
    sizing = _sizing(make_inputs())

    assert sizing.total_capex == 10_000_000
    assert sizing.pv_of_cfads == pytest.approx(6_949_530, rel=1e-4)
    assert sizing.max_debt_by_dscr == pytest.approx(5_345_792, rel=1e-4)
    assert sizing.max_debt_by_gearing == pytest.approx(7_000_000)
    assert sizing.binding_constraint == "DSCR"
    assert sizing.final_debt == sizing.max_debt_by_dscr
    assert sizing.equity == pytest.approx(4_654_208, rel=1e-4)
    assert sizing.annual_debt_service == pytest.approx(692_290, rel=1e-4)
    assert sizing.actual_gearing == pytest.approx(sizing.final_debt / 10_000_000)


def test_gearing_binds_for_strong_cash_flow(make_inputs) -> None:
    sizing = _sizing(make_inputs(ppa_price=80))

    assert sizing.binding_constraint == "Gearing"
    assert sizing.final_debt == pytest.approx(7_000_000)
    assert sizing.dscr(1, 1_500_000) > 1.3


def test_debt_service_and_dscr_stop_after_tenor(make_inputs) -> None:
    sizing = _sizing(make_inputs())

    assert sizing.debt_service(10) == sizing.annual_debt_service
    assert sizing.debt_service(11) == 0.0
    assert sizing.dscr(11, 900_000) is None
    assert sizing.dscr(10, 900_000) == pytest.approx(1.3)


def test_pv_of_cfads_uses_interest_rate(make_inputs) -> None:
    projection = Projection(normalize(make_inputs()))

    assert pv_of_cfads(projection, 0.0, 10) == pytest.approx(9_000_000)


def test_no_gearing_means_no_debt(make_inputs) -> None:
    sizing = _sizing(make_inputs(gearing_ratio=0))

    assert sizing.final_debt == 0
    assert sizing.equity == sizing.total_capex
    assert sizing.annual_debt_service == 0
    assert sizing.dscr(1, 900_000) is None


def test_loss_making_project_gets_no_debt(make_inputs) -> None:
    sizing = _sizing(make_inputs(ppa_price=1))

    assert sizing.max_debt_by_dscr < 0
    assert sizing.final_debt == 0.0
    assert sizing.equity == sizing.total_capex


@pytest.mark.parametrize(
    "gearing,ppa,dscr,tax",
    list(itertools.product([0.0, 0.3, 0.7, 1.0], [30, 50, 90], [1.1, 1.3, 2.0], [0.0, 0.25])),
)
def test_debt_respects_both_caps(make_inputs, gearing: float, ppa: float, dscr: float, tax: float) -> None:
    sizing = _sizing(
        make_inputs(
            gearing_ratio=gearing,
            ppa_price=ppa,
            target_dscr=dscr,
            tax_rate=tax,
            degradation_rate=0.005,
            om_escalation=0.02,
        )
    )

    assert 0 <= sizing.final_debt <= sizing.total_capex
    assert sizing.final_debt <= sizing.max_debt_by_gearing + 1e-6
    assert sizing.final_debt <= sizing.pv_of_cfads / dscr + 1e-6
    assert sizing.equity >= 0
