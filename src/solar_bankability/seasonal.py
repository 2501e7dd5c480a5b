from __future__ import annotations

from typing import Sequence, Tuple

from solar_bankability.inputs import InputValidationError

# Share of annual energy produced in each calendar month, January first.
NORTHERN_HEMISPHERE_MONTHLY_FACTORS: Tuple[float, ...] = (
    0.04464286,
    0.05654762,
    0.07638889,
    0.09325397,
    0.11011905,
    0.12599206,
    0.12797619,
    0.11607143,
    0.09325397,
    0.07043651,
    0.04861111,
    0.03670635,
)

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

SEASONAL_SUM_TOLERANCE = 1e-6


def validate_seasonal_factors(factors: Sequence[float]) -> Tuple[float, ...]:
    try:
        values = tuple(float(f) for f in factors)
    except (TypeError, ValueError):
        raise InputValidationError("seasonal_factors", "seasonal_factors must be numbers.") from None
    if len(values) != 12:
        raise InputValidationError(
            "seasonal_factors", f"seasonal_factors must have 12 entries, found {len(values)}."
        )
    if not all(v >= 0 for v in values):
        raise InputValidationError("seasonal_factors", "seasonal_factors must be non-negative.")
    total = sum(values)
    if abs(total - 1.0) > SEASONAL_SUM_TOLERANCE:
        raise InputValidationError(
            "seasonal_factors", f"seasonal_factors must sum to 1.0, found {total:.8f}."
        )
    return values


def southern_hemisphere_factors(factors: Sequence[float] = NORTHERN_HEMISPHERE_MONTHLY_FACTORS) -> Tuple[float, ...]:
    """Shift a northern curve by six months."""
    values = validate_seasonal_factors(factors)
    return values[6:] + values[:6]
