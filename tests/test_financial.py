import pytest

from solar_bankability.financial import (
    IRRConvergenceError,
    checked_irr,
    amortization_schedule,
    irr,
    level_payment,
    npv,
    pmt,
    pv,
    solve_irr,
)

def test_npv_discounts_from_period_zero() -> None:
    assert npv(0.10, [-100.0, 110.0]) == pytest.approx(0.0)
    assert npv(0.0, [1.0, 2.0, 3.0]) == pytest.approx(6.0)

def test_irr_simple_loan() -> None:
    assert irr([-100.0, 110.0]) == pytest.approx(0.10, abs=1e-8)

@pytest.mark.parametrize(
    "cashflows",
    [
        [-1_000.0, 300.0, 400.0, 500.0],
        [-10_000_000.0] + [900_000.0] * 20,
        [-4_654_000.0] + [207_700.0] * 10 + [900_000.0] * 10,
        [-500.0, -200.0, 400.0, 400.0, 400.0],
    ],
)
def test_npv_at_irr_is_zero(cashflows: list) -> None:
    rate = irr(cashflows)
    assert abs(npv(rate, cashflows)) < 1e-4

def test_irr_reports_non_convergence_without_raising() -> None:
    cashflows = [100.0, 100.0, 100.0]

    result = solve_irr(cashflows)
    assert result.converged is False
    assert result.iterations <= 100
    assert isinstance(irr(cashflows), float)

def test_irr_strict_mode_raises() -> None:
    with pytest.raises(IRRConvergenceError) as exc_info:
        irr([100.0, 100.0, 100.0], strict=True)

    assert exc_info.value.result.converged is False

def test_solve_irr_diagnostics_when_converged() -> None:
    result = solve_irr([-1_000.0, 300.0, 400.0, 500.0])

    assert result.converged is True
    assert abs(result.residual) < 1e-6
    assert 1 <= result.iterations <= 100

@pytest.mark.parametrize(
    "cashflows",
    [
        [100.0, 100.0, 100.0],
        [-1.0, 2.0, -2.0],
        [-10_000_000.0] + [-100_000.0] * 20,
    ],
)
def test_non_converged_residual_is_npv_at_returned_rate(cashflows: list) -> None:
    result = solve_irr(cashflows)

    assert result.converged is False
    assert result.residual == pytest.approx(npv(result.rate, cashflows))

def test_checked_irr_labels_the_warning(caplog) -> None:
    with caplog.at_level("WARNING", logger="solar_bankability.financial"):
        result = checked_irr([100.0, 100.0, 100.0], label="Equity IRR")

    assert result.converged is False
    assert "Equity IRR did not converge" in caplog.text

def test_checked_irr_quiet_when_converged(caplog) -> None:
    with caplog.at_level("WARNING", logger="solar_bankability.financial"):
        result = checked_irr([-100.0, 110.0], label="Project IRR")

    assert result.rate == pytest.approx(0.10, abs=1e-8)
    assert caplog.text == ""

def test_pmt_matches_spreadsheet_convention() -> None:
    assert pmt(0.05, 10, 1_000.0) == pytest.approx(-129.504575, rel=1e-6)
    assert pmt(0.0, 10, 1_000.0) == pytest.approx(-100.0)
    assert level_payment(0.05, 10, 1_000.0) == pytest.approx(129.504575, rel=1e-6)

def test_level_payment_of_nothing_is_zero() -> None:
    assert level_payment(0.05, 10, 0.0) == 0.0

def test_pv_inverts_pmt() -> None:
    payment = pmt(0.07, 15, 250_000.0)
    assert pv(0.07, 15, payment) == pytest.approx(250_000.0)
    assert pv(0.0, 4, -25.0) == pytest.approx(100.0)

@pytest.mark.parametrize("rate,nper", [(0.05, 10), (0.045, 15), (0.0, 12)])
def test_level_payment_retires_principal(rate: float, nper: int) -> None:
    rows = amortization_schedule(rate, nper, 5_000_000.0)

    assert len(rows) == nper
    assert rows[0].opening_balance == 5_000_000.0
    assert rows[-1].closing_balance == pytest.approx(0.0, abs=1e-6)
    assert sum(row.principal for row in rows) == pytest.approx(5_000_000.0)
