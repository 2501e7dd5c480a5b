from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-6
IRR_MIN_DERIVATIVE = 1e-10


@dataclass(frozen=True)
class IRRResult:
    rate: float
    iterations: int
    residual: float
    converged: bool


@dataclass(frozen=True)
class AmortizationRow:
    period: int
    opening_balance: float
    interest: float
    principal: float
    closing_balance: float


class IRRConvergenceError(ArithmeticError):
    def __init__(self, result: IRRResult) -> None:
        super().__init__(
            f"IRR did not converge after {result.iterations} iterations "
            f"(rate={result.rate:.6f}, residual={result.residual:.3e})."
        )
        self.result = result


def npv(rate: float, values: Sequence[float]) -> float:
    return sum(cf / ((1 + rate) ** period) for period, cf in enumerate(values))


def _npv_derivative(rate: float, values: Sequence[float]) -> float:
    return sum(-period * cf / ((1 + rate) ** (period + 1)) for period, cf in enumerate(values))


def _evaluate(
    function: Callable[[float, Sequence[float]], float], rate: float, values: Sequence[float]
) -> Optional[float]:
    """Return function(rate, values), or None once the rate leaves the numeric range."""
    try:
        value = function(rate, values)
    except (OverflowError, ZeroDivisionError):
        value = None
    if value is None or not math.isfinite(value):
        logger.debug("IRR step left the numeric range at rate=%r", rate)
        return None
    return value


def solve_irr(values: Sequence[float], guess: float = 0.10) -> IRRResult:
    """Newton-Raphson IRR that reports how the search ended.

    Stops when |NPV| falls under IRR_TOLERANCE, when the derivative is too flat
    to divide by, or after IRR_MAX_ITERATIONS. The last rate whose NPV could be
    evaluated is returned in every case, with the NPV at that rate as residual.
    """
    rate = guess
    evaluated_rate = guess
    residual = float("inf")
    iterations = 0

    for iterations in range(1, IRR_MAX_ITERATIONS + 1):
        value = _evaluate(npv, rate, values)
        if value is None:
            break
        evaluated_rate, residual = rate, value
        if abs(residual) < IRR_TOLERANCE:
            return IRRResult(rate=rate, iterations=iterations, residual=residual, converged=True)
        derivative = _evaluate(_npv_derivative, rate, values)
        if derivative is None or abs(derivative) < IRR_MIN_DERIVATIVE:
            break
        rate = rate - residual / derivative
    else:
        # The final step moved the rate after its NPV was taken.
        value = _evaluate(npv, rate, values)
        if value is not None:
            evaluated_rate, residual = rate, value

    return IRRResult(rate=evaluated_rate, iterations=iterations, residual=residual, converged=False)


def checked_irr(
    values: Sequence[float], guess: float = 0.10, strict: bool = False, label: str = "IRR"
) -> IRRResult:
    """Solve, then raise (strict) or warn when the search did not converge."""
    result = solve_irr(values, guess)
    if not result.converged:
        if strict:
            raise IRRConvergenceError(result)
        logger.warning(
            "%s did not converge after %d iterations (rate=%.6f, residual=%.3e)",
            label,
            result.iterations,
            result.rate,
            result.residual,
        )
    return result


def irr(values: Sequence[float], guess: float = 0.10, strict: bool = False) -> float:
    return checked_irr(values, guess, strict).rate


def pmt(rate: float, nper: int, pv: float, fv: float = 0.0) -> float:
    """Periodic payment with spreadsheet signs: a positive loan gives a negative payment."""
    if rate == 0:
        return -(pv + fv) / nper
    growth = (1 + rate) ** nper
    return -rate * (pv * growth + fv) / (growth - 1)


def pv(rate: float, nper: int, payment: float, fv: float = 0.0) -> float:
    if rate == 0:
        return -(payment * nper + fv)
    growth = (1 + rate) ** nper
    annuity = payment * (growth - 1) / rate
    return -(annuity + fv) / growth


def level_payment(rate: float, nper: int, principal: float, residual: float = 0.0) -> float:
    if principal <= 0 and residual <= 0:
        return 0.0
    return -pmt(rate, nper, principal, residual)


def amortization_schedule(rate: float, nper: int, principal: float) -> List[AmortizationRow]:
    payment = level_payment(rate, nper, principal)
    balance = principal
    rows: List[AmortizationRow] = []
    for period in range(1, nper + 1):
        interest = balance * rate
        repaid = payment - interest
        closing = balance - repaid
        rows.append(
            AmortizationRow(
                period=period,
                opening_balance=balance,
                interest=interest,
                principal=repaid,
                closing_balance=closing,
            )
        )
        balance = closing
    return rows
