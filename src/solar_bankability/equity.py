from __future__ import annotations

from typing import List, Optional, Sequence


def fcf_to_equity(cfads: float, debt_service: float) -> float:
    return cfads - debt_service


def cumulative_cash(initial_outlay: float, cash_flows: Sequence[float]) -> List[float]:
    running = -initial_outlay
    totals: List[float] = []
    for cf in cash_flows:
        running += cf
        totals.append(running)
    return totals


def payback_period(initial_outlay: float, cash_flows: Sequence[float]) -> Optional[float]:
    """Years until cumulative cash recovers the outlay, interpolated within the year.

    ``cash_flows[0]`` is year 1. Returns None when the outlay is never recovered.
    """
    # Nothing to recover counts as paid back at year 0, not at end of life.
    if initial_outlay <= 0:
        return 0.0

    cumulative = -initial_outlay
    for year, cf in enumerate(cash_flows, start=1):
        prior = cumulative
        cumulative += cf
        if prior < 0 <= cumulative:
            return (year - 1) + (-prior / cf)
    return None
