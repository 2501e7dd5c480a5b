from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from solar_bankability.equity import cumulative_cash, fcf_to_equity, payback_period
from solar_bankability.financial import IRRResult, checked_irr
from solar_bankability.financing import DebtSizing, size_debt
from solar_bankability.inputs import (
    CanonicalInputs,
    CostItemsBreakdown,
    FinancialInputs,
    cost_items_breakdown,
    normalize,
)
from solar_bankability.projection import Projection
from solar_bankability.seasonal import MONTH_NAMES, NORTHERN_HEMISPHERE_MONTHLY_FACTORS

logger = logging.getLogger(__name__)

Rating = Literal["strong", "acceptable", "weak", "no debt"]

PROJECT_IRR_STRONG = 0.08
PROJECT_IRR_ACCEPTABLE = 0.06
EQUITY_IRR_STRONG = 0.12
EQUITY_IRR_ACCEPTABLE = 0.10
DSCR_STRONG = 1.35
DSCR_ACCEPTABLE = 1.20


@dataclass(frozen=True)
class ProjectSummary:
    name: str
    capacity_mw: float
    capacity_factor: float
    p50_year_0_yield_mwh: float
    project_lifetime: int
    total_capex: float
    capex_per_mw: float
    om_cost_per_mw_year: float
    cost_basis: str


@dataclass(frozen=True)
class FinancingStructure:
    max_debt_by_dscr: float
    max_debt_by_gearing: float
    final_debt: float
    equity: float
    actual_gearing: float
    binding_constraint: str
    interest_rate: float
    debt_tenor: int
    annual_debt_service: float


@dataclass(frozen=True)
class KeyMetrics:
    project_irr: float
    equity_irr: float
    lcoe: float
    min_dscr: Optional[float]
    avg_dscr: Optional[float]
    project_npv: float
    ppa_price: float
    equity_payback_years: Optional[float]
    project_payback_years: Optional[float]
    project_irr_diagnostics: IRRResult
    equity_irr_diagnostics: IRRResult


@dataclass(frozen=True)
class FirstYearOperations:
    energy_production_mwh: float
    revenue: float
    om_costs: float
    ebitda: float
    cfads: float


@dataclass(frozen=True)
class Assessment:
    project_irr: str
    equity_irr: str
    dscr: str
    overall: str
    project_irr_rating: Rating
    equity_irr_rating: Rating
    dscr_rating: Rating
    strong_count: int


@dataclass(frozen=True)
class YearlyData:
    years: Tuple[int, ...]
    energy_production_mwh: Tuple[float, ...]
    revenue: Tuple[float, ...]
    om_costs: Tuple[float, ...]
    ebitda: Tuple[float, ...]
    cfads: Tuple[float, ...]
    fcf_to_equity: Tuple[float, ...]
    debt_service: Tuple[float, ...]
    dscr: Tuple[Optional[float], ...]
    cumulative_fcf_to_equity: Tuple[float, ...]


@dataclass(frozen=True)
class MonthlyDataPoint:
    year: int
    month: int
    month_name: str
    energy_production_mwh: float
    revenue: float
    om_costs: float
    ebitda: float
    cfads: float
    debt_service: float
    dscr: Optional[float]
    fcf_to_equity: float
    cumulative_fcf_to_equity: float


@dataclass(frozen=True)
class ProjectResults:
    project_summary: ProjectSummary
    financing_structure: FinancingStructure
    key_metrics: KeyMetrics
    first_year_operations: FirstYearOperations
    assessment: Assessment
    yearly_data: YearlyData
    monthly_data: Tuple[MonthlyDataPoint, ...]
    cost_items_breakdown: Optional[CostItemsBreakdown] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _rate(value: Optional[float], strong: float, acceptable: float) -> Rating:
    if value is None:
        return "no debt"
    if value >= strong:
        return "strong"
    if value >= acceptable:
        return "acceptable"
    return "weak"


def assess_project(project_irr: float, equity_irr: float, min_dscr: Optional[float]) -> Assessment:
    project_rating = _rate(project_irr, PROJECT_IRR_STRONG, PROJECT_IRR_ACCEPTABLE)
    equity_rating = _rate(equity_irr, EQUITY_IRR_STRONG, EQUITY_IRR_ACCEPTABLE)
    dscr_rating = _rate(min_dscr, DSCR_STRONG, DSCR_ACCEPTABLE)

    project_text = (
        f"{project_rating.capitalize()} at {project_irr * 100:.2f}% "
        f"(target: >{PROJECT_IRR_STRONG * 100:.0f}%)"
    )
    equity_text = (
        f"{equity_rating.capitalize()} at {equity_irr * 100:.2f}% "
        f"(target: >{EQUITY_IRR_STRONG * 100:.0f}%)"
    )
    if min_dscr is None:
        dscr_text = "No debt"
    else:
        dscr_text = f"{dscr_rating.capitalize()} at {min_dscr:.2f}x (minimum: >{DSCR_STRONG:.2f}x)"

    strong_count = [project_rating, equity_rating, dscr_rating].count("strong")
    if strong_count == 3:
        overall = "Project shows strong financials across all key metrics. Recommended for investment."
    elif strong_count == 2:
        overall = "Project shows acceptable financials with room for improvement. Consider optimization."
    else:
        overall = "Project financials are below targets. Review assumptions and consider restructuring."

    return Assessment(
        project_irr=project_text,
        equity_irr=equity_text,
        dscr=dscr_text,
        overall=overall,
        project_irr_rating=project_rating,
        equity_irr_rating=equity_rating,
        dscr_rating=dscr_rating,
        strong_count=strong_count,
    )


class SolarFinanceCalculator:
    """Bankability model for one set of inputs.

    The user's ``FinancialInputs`` are normalized into a separate canonical
    record, so the original stays available for editing. Every figure is
    recomputed from the inputs; nothing is cached between calls.
    """

    def __init__(
        self,
        inputs: FinancialInputs,
        seasonal_factors: Sequence[float] = NORTHERN_HEMISPHERE_MONTHLY_FACTORS,
        strict_irr: bool = False,
    ) -> None:
        self.inputs = inputs
        self.canonical: CanonicalInputs = normalize(inputs)
        self.projection = Projection(self.canonical, seasonal_factors)
        self.strict_irr = strict_irr

    def sizing(self) -> DebtSizing:
        return size_debt(self.projection, self.canonical)

    def npv_of_costs(self) -> float:
        rate = self.canonical.discount_rate
        pv_om = sum(self.projection.om_cost(t) / (1 + rate) ** t for t in self.projection.years())
        return self.projection.total_capex() + pv_om

    def npv_of_energy(self) -> float:
        rate = self.canonical.discount_rate
        return sum(self.projection.energy(t) / (1 + rate) ** t for t in self.projection.years())

    def lcoe(self) -> float:
        return self.npv_of_costs() / self.npv_of_energy()

    def project_npv(self) -> float:
        rate = self.canonical.discount_rate
        pv_cfads = sum(self.projection.cfads(t) / (1 + rate) ** t for t in self.projection.years())
        return -self.projection.total_capex() + pv_cfads

    def yearly_data(self, sizing: DebtSizing) -> YearlyData:
        years = list(self.projection.years())
        cfads = [self.projection.cfads(t) for t in years]
        debt_service = [sizing.debt_service(t) for t in years]
        fcfe = [fcf_to_equity(c, ds) for c, ds in zip(cfads, debt_service)]
        return YearlyData(
            years=tuple(years),
            energy_production_mwh=tuple(self.projection.energy(t) for t in years),
            revenue=tuple(self.projection.revenue(t) for t in years),
            om_costs=tuple(self.projection.om_cost(t) for t in years),
            ebitda=tuple(self.projection.ebitda(t) for t in years),
            cfads=tuple(cfads),
            fcf_to_equity=tuple(fcfe),
            debt_service=tuple(debt_service),
            dscr=tuple(sizing.dscr(t, c) for t, c in zip(years, cfads)),
            cumulative_fcf_to_equity=tuple(cumulative_cash(sizing.equity, fcfe)),
        )

    def monthly_data(self, sizing: DebtSizing) -> Tuple[MonthlyDataPoint, ...]:
        points: List[MonthlyDataPoint] = []
        cumulative = -sizing.equity
        for year in self.projection.years():
            debt_service = sizing.debt_service(year) / 12
            om_costs = self.projection.om_cost_month(year)
            for month in range(1, 13):
                cfads = self.projection.cfads_month(year, month)
                fcf = fcf_to_equity(cfads, debt_service)
                cumulative += fcf
                points.append(
                    MonthlyDataPoint(
                        year=year,
                        month=month,
                        month_name=MONTH_NAMES[month - 1],
                        energy_production_mwh=self.projection.energy_month(year, month),
                        revenue=self.projection.revenue_month(year, month),
                        om_costs=om_costs,
                        ebitda=self.projection.ebitda_month(year, month),
                        cfads=cfads,
                        debt_service=debt_service,
                        dscr=cfads / debt_service if debt_service != 0 else None,
                        fcf_to_equity=fcf,
                        cumulative_fcf_to_equity=cumulative,
                    )
                )
        return tuple(points)

    def calculate(self) -> ProjectResults:
        c = self.canonical
        sizing = self.sizing()
        yearly = self.yearly_data(sizing)
        capex = sizing.total_capex

        project_irr = checked_irr(
            [-capex, *yearly.cfads], strict=self.strict_irr, label="Project IRR"
        )
        equity_irr = checked_irr(
            [-sizing.equity, *yearly.fcf_to_equity], strict=self.strict_irr, label="Equity IRR"
        )

        dscr_values = [d for d in yearly.dscr if d is not None]
        min_dscr = min(dscr_values) if dscr_values else None
        avg_dscr = sum(dscr_values) / len(dscr_values) if dscr_values else None

        key_metrics = KeyMetrics(
            project_irr=project_irr.rate,
            equity_irr=equity_irr.rate,
            lcoe=self.lcoe(),
            min_dscr=min_dscr,
            avg_dscr=avg_dscr,
            project_npv=self.project_npv(),
            ppa_price=c.ppa_price,
            equity_payback_years=payback_period(sizing.equity, yearly.fcf_to_equity),
            project_payback_years=payback_period(capex, yearly.cfads),
            project_irr_diagnostics=project_irr,
            equity_irr_diagnostics=equity_irr,
        )

        logger.info(
            "%s: project IRR %.2f%%, equity IRR %.2f%%, LCOE %.2f/MWh, debt %.0f (%s binds)",
            c.name,
            key_metrics.project_irr * 100,
            key_metrics.equity_irr * 100,
            key_metrics.lcoe,
            sizing.final_debt,
            sizing.binding_constraint,
        )

        return ProjectResults(
            project_summary=ProjectSummary(
                name=c.name,
                capacity_mw=c.capacity,
                capacity_factor=self.projection.capacity_factor(),
                p50_year_0_yield_mwh=c.p50_year_0_yield,
                project_lifetime=c.project_lifetime,
                total_capex=capex,
                capex_per_mw=c.capex_per_mw,
                om_cost_per_mw_year=c.om_cost_per_mw_year,
                cost_basis=c.cost_basis,
            ),
            financing_structure=FinancingStructure(
                max_debt_by_dscr=sizing.max_debt_by_dscr,
                max_debt_by_gearing=sizing.max_debt_by_gearing,
                final_debt=sizing.final_debt,
                equity=sizing.equity,
                actual_gearing=sizing.actual_gearing,
                binding_constraint=sizing.binding_constraint,
                interest_rate=sizing.interest_rate,
                debt_tenor=sizing.debt_tenor,
                annual_debt_service=sizing.annual_debt_service,
            ),
            key_metrics=key_metrics,
            first_year_operations=FirstYearOperations(
                energy_production_mwh=yearly.energy_production_mwh[0],
                revenue=yearly.revenue[0],
                om_costs=yearly.om_costs[0],
                ebitda=yearly.ebitda[0],
                cfads=yearly.cfads[0],
            ),
            assessment=assess_project(project_irr.rate, equity_irr.rate, min_dscr),
            yearly_data=yearly,
            monthly_data=self.monthly_data(sizing),
            cost_items_breakdown=cost_items_breakdown(self.inputs),
        )


def compute(
    inputs: FinancialInputs,
    seasonal_factors: Sequence[float] = NORTHERN_HEMISPHERE_MONTHLY_FACTORS,
    strict_irr: bool = False,
) -> ProjectResults:
    return SolarFinanceCalculator(inputs, seasonal_factors, strict_irr).calculate()
