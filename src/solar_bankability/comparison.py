from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Literal, Optional, Sequence, Union

from solar_bankability.calculator import ProjectResults, compute
from solar_bankability.inputs import FinancialInputs
from solar_bankability.seasonal import NORTHERN_HEMISPHERE_MONTHLY_FACTORS

logger = logging.getLogger(__name__)

SortField = Literal[
    "name",
    "capacity",
    "total_capex",
    "total_opex",
    "equity_irr",
    "project_npv",
    "lcoe",
    "min_dscr",
]


@dataclass(frozen=True)
class DesignCase:
    """One design alternative of a project, with its own inputs."""

    design_id: str
    inputs: FinancialInputs
    is_winner: bool = False

    @property
    def name(self) -> str:
        return self.inputs.name


@dataclass(frozen=True)
class DesignComparisonRow:
    case: DesignCase
    results: ProjectResults

    @property
    def total_opex(self) -> float:
        return self.results.project_summary.om_cost_per_mw_year * self.results.project_summary.capacity_mw


_SORT_KEYS: Dict[str, Callable[[DesignComparisonRow], Union[str, float]]] = {
    "name": lambda row: row.case.name,
    "capacity": lambda row: row.results.project_summary.capacity_mw,
    "total_capex": lambda row: row.results.project_summary.total_capex,
    "total_opex": lambda row: row.total_opex,
    "equity_irr": lambda row: row.results.key_metrics.equity_irr,
    "project_npv": lambda row: row.results.key_metrics.project_npv,
    "lcoe": lambda row: row.results.key_metrics.lcoe,
    # Designs without debt have no DSCR and rank as zero.
    "min_dscr": lambda row: row.results.key_metrics.min_dscr or 0.0,
}


def compare_designs(
    cases: Sequence[DesignCase],
    sort_field: SortField = "equity_irr",
    descending: bool = True,
    seasonal_factors: Sequence[float] = NORTHERN_HEMISPHERE_MONTHLY_FACTORS,
) -> List[DesignComparisonRow]:
    if sort_field not in _SORT_KEYS:
        raise ValueError(f"Unknown sort field '{sort_field}'. Use one of: {', '.join(_SORT_KEYS)}.")
    rows = [DesignComparisonRow(case=case, results=compute(case.inputs, seasonal_factors)) for case in cases]
    logger.debug("Compared %d designs by %s", len(rows), sort_field)
    return sorted(rows, key=_SORT_KEYS[sort_field], reverse=descending)


def mark_winner(cases: Sequence[DesignCase], design_id: str) -> List[DesignCase]:
    if not any(case.design_id == design_id for case in cases):
        raise KeyError(f"No design with id '{design_id}'.")
    return [replace(case, is_winner=case.design_id == design_id) for case in cases]


def current_winner(cases: Sequence[DesignCase]) -> Optional[DesignCase]:
    return next((case for case in cases if case.is_winner), None)


def best_by(rows: Sequence[DesignComparisonRow], sort_field: SortField) -> Optional[DesignComparisonRow]:
    """Best row for a metric: lowest for costs and LCOE, highest otherwise."""
    if not rows:
        return None
    key = _SORT_KEYS[sort_field]
    if sort_field in ("lcoe", "total_capex", "total_opex"):
        return min(rows, key=key)
    return max(rows, key=key)
