from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple

CostBasis = Literal["direct", "itemized"]


class InputValidationError(ValueError):
    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message)
        self.field = field_name


@dataclass(frozen=True)
class CostLineItem:
    name: str
    amount: float
    category: str = "general"
    # Capital items only; None means the global margin applies.
    margin_percent: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CostLineItem":
        margin = data.get("margin_percent")
        return cls(
            name=str(data.get("name", "")),
            amount=float(data["amount"]),
            category=str(data.get("category", "general")),
            margin_percent=None if margin is None else float(margin),
        )

    def amount_with_margin(self, global_margin: float) -> float:
        margin = self.margin_percent if self.margin_percent is not None else global_margin
        return self.amount * (1 + margin / 100)


@dataclass(frozen=True)
class FinancialInputs:
    """User-entered assumptions for one project, checked once when built.

    Capital and operating cost come either as direct per-MW rates or as
    itemized lists. A non-empty ``capex_items`` selects the itemized form.
    """

    capacity: float
    p50_year_0_yield: float
    ppa_price: float
    degradation_rate: float
    ppa_escalation: float
    om_escalation: float
    gearing_ratio: float
    interest_rate: float
    debt_tenor: int
    target_dscr: float
    project_lifetime: int
    tax_rate: float
    discount_rate: float
    capex_per_mw: Optional[float] = None
    om_cost_per_mw_year: Optional[float] = None
    capex_items: Tuple[CostLineItem, ...] = ()
    opex_items: Tuple[CostLineItem, ...] = ()
    global_margin: float = 0.0
    name: str = "Solar Project"

    def __post_init__(self) -> None:
        object.__setattr__(self, "capex_items", tuple(self.capex_items))
        object.__setattr__(self, "opex_items", tuple(self.opex_items))
        _validate_scalars(self)
        resolve_cost_rates(self)

    @property
    def cost_basis(self) -> CostBasis:
        return "itemized" if self.capex_items else "direct"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FinancialInputs":
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {k: v for k, v in data.items() if k in known}
        for key in ("capex_items", "opex_items"):
            if key in values:
                values[key] = _as_items(key, values[key])
        for key in ("debt_tenor", "project_lifetime"):
            if key in values:
                values[key] = _as_int(key, values[key])
        for key in _NUMERIC_FIELDS:
            if values.get(key) is not None:
                values[key] = _as_float(key, values[key])
        missing = sorted(
            f.name for f in fields(cls) if f.name not in values and _is_required(f.name)
        )
        if missing:
            raise InputValidationError(missing[0], f"{missing[0]} is required.")
        return cls(**values)


@dataclass(frozen=True)
class CanonicalInputs:
    capacity: float
    p50_year_0_yield: float
    ppa_price: float
    capex_per_mw: float
    om_cost_per_mw_year: float
    cost_basis: CostBasis
    degradation_rate: float
    ppa_escalation: float
    om_escalation: float
    gearing_ratio: float
    interest_rate: float
    debt_tenor: int
    target_dscr: float
    project_lifetime: int
    tax_rate: float
    discount_rate: float
    name: str


@dataclass(frozen=True)
class CostItemsBreakdown:
    items: Tuple[CostLineItem, ...]
    total_capex: float
    total_opex_year_1: float


_OPTIONAL_FIELDS = {
    "capex_per_mw",
    "om_cost_per_mw_year",
    "capex_items",
    "opex_items",
    "global_margin",
    "name",
}


def _is_required(name: str) -> bool:
    return name not in _OPTIONAL_FIELDS


# Float-valued fields; the two year counts are handled by _as_int.
_NUMERIC_FIELDS = (
    "capacity",
    "p50_year_0_yield",
    "ppa_price",
    "degradation_rate",
    "ppa_escalation",
    "om_escalation",
    "gearing_ratio",
    "interest_rate",
    "target_dscr",
    "tax_rate",
    "discount_rate",
    "capex_per_mw",
    "om_cost_per_mw_year",
    "global_margin",
)


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _as_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InputValidationError(name, f"{name} must be a number, found {value!r}.") from None


def _as_items(name: str, items: Any) -> Tuple[CostLineItem, ...]:
    try:
        return tuple(
            item if isinstance(item, CostLineItem) else CostLineItem.from_mapping(item)
            for item in items or ()
        )
    except (KeyError, TypeError, ValueError, AttributeError):
        raise InputValidationError(
            name, f"{name} entries need a name and a numeric amount, found {items!r}."
        ) from None


def _as_int(name: str, value: Any) -> int:
    number = _as_float(name, value)
    if not number.is_integer():
        raise InputValidationError(name, f"{name} must be a whole number of years, found {value}.")
    return int(number)


def _validate_scalars(inputs: FinancialInputs) -> None:
    for name in _NUMERIC_FIELDS + ("debt_tenor", "project_lifetime"):
        value = getattr(inputs, name)
        if value is None and name in _OPTIONAL_FIELDS:
            continue
        if not _is_finite_number(value):
            raise InputValidationError(name, f"{name} must be a finite number, found {value!r}.")

    if not inputs.capacity > 0:
        raise InputValidationError("capacity", "capacity is required and must be greater than 0")
    if not inputs.p50_year_0_yield > 0:
        raise InputValidationError(
            "p50_year_0_yield", "p50_year_0_yield is required and must be greater than 0"
        )
    if not inputs.ppa_price >= 0:
        raise InputValidationError("ppa_price", "ppa_price cannot be negative")
    if not 0 <= inputs.degradation_rate < 1:
        raise InputValidationError("degradation_rate", "degradation_rate must be in [0, 1)")
    if not 0 <= inputs.gearing_ratio <= 1:
        raise InputValidationError("gearing_ratio", "gearing_ratio must be between 0 and 1")
    if not 0 <= inputs.tax_rate <= 1:
        raise InputValidationError("tax_rate", "tax_rate must be between 0 and 1")
    for name in ("interest_rate", "discount_rate", "ppa_escalation", "om_escalation"):
        if not getattr(inputs, name) > -1:
            raise InputValidationError(name, f"{name} must be greater than -1")
    if not inputs.target_dscr > 0:
        raise InputValidationError("target_dscr", "target_dscr must be greater than 0")
    if int(inputs.project_lifetime) != inputs.project_lifetime or inputs.project_lifetime < 1:
        raise InputValidationError(
            "project_lifetime", "project_lifetime must be a whole number of at least 1 year"
        )
    if (
        int(inputs.debt_tenor) != inputs.debt_tenor
        or not 1 <= inputs.debt_tenor <= inputs.project_lifetime
    ):
        raise InputValidationError(
            "debt_tenor", "debt_tenor must be a whole number between 1 and project_lifetime"
        )
    for name in ("capex_items", "opex_items"):
        for item in getattr(inputs, name):
            margin = item.margin_percent
            if not _is_finite_number(item.amount) or (
                margin is not None and not _is_finite_number(margin)
            ):
                raise InputValidationError(
                    name, f"{name} entry {item.name!r} must carry finite numbers"
                )


def total_itemized_capex(items: Iterable[CostLineItem], global_margin: float) -> float:
    return sum(item.amount_with_margin(global_margin) for item in items)


def total_itemized_opex(items: Iterable[CostLineItem]) -> float:
    return sum(item.amount for item in items)


def resolve_cost_rates(inputs: FinancialInputs) -> Tuple[float, float]:
    """Return (capex per MW, O&M per MW-year) for whichever cost form is in use."""
    if inputs.capex_items:
        capex = total_itemized_capex(inputs.capex_items, inputs.global_margin)
        if not capex > 0:
            raise InputValidationError(
                "capex_items", "capex_items must add up to a capital cost greater than 0"
            )
        opex = total_itemized_opex(inputs.opex_items)
        return capex / inputs.capacity, opex / inputs.capacity

    if inputs.capex_per_mw is None or not inputs.capex_per_mw > 0:
        raise InputValidationError(
            "capex_per_mw", "capex_per_mw is required and must be greater than 0"
        )
    if inputs.om_cost_per_mw_year is None or not inputs.om_cost_per_mw_year > 0:
        raise InputValidationError(
            "om_cost_per_mw_year", "om_cost_per_mw_year is required and must be greater than 0"
        )
    return float(inputs.capex_per_mw), float(inputs.om_cost_per_mw_year)


def normalize(inputs: FinancialInputs) -> CanonicalInputs:
    capex_per_mw, om_per_mw = resolve_cost_rates(inputs)
    return CanonicalInputs(
        capacity=float(inputs.capacity),
        p50_year_0_yield=float(inputs.p50_year_0_yield),
        ppa_price=float(inputs.ppa_price),
        capex_per_mw=capex_per_mw,
        om_cost_per_mw_year=om_per_mw,
        cost_basis=inputs.cost_basis,
        degradation_rate=inputs.degradation_rate,
        ppa_escalation=inputs.ppa_escalation,
        om_escalation=inputs.om_escalation,
        gearing_ratio=inputs.gearing_ratio,
        interest_rate=inputs.interest_rate,
        debt_tenor=int(inputs.debt_tenor),
        target_dscr=inputs.target_dscr,
        project_lifetime=int(inputs.project_lifetime),
        tax_rate=inputs.tax_rate,
        discount_rate=inputs.discount_rate,
        name=inputs.name,
    )


def cost_items_breakdown(inputs: FinancialInputs) -> Optional[CostItemsBreakdown]:
    if inputs.cost_basis != "itemized":
        return None
    items: List[CostLineItem] = list(inputs.capex_items) + list(inputs.opex_items)
    return CostItemsBreakdown(
        items=tuple(items),
        total_capex=total_itemized_capex(inputs.capex_items, inputs.global_margin),
        total_opex_year_1=total_itemized_opex(inputs.opex_items),
    )
