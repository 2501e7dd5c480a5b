import pytest

from solar_bankability.inputs import InputValidationError, normalize
from solar_bankability.projection import Projection
from solar_bankability.seasonal import (
    NORTHERN_HEMISPHERE_MONTHLY_FACTORS,
    southern_hemisphere_factors,
    validate_seasonal_factors,
)


def test_annual_formulas(make_inputs) -> None:
    inputs = make_inputs(
        degradation_rate=0.005,
        ppa_escalation=0.02,
        om_escalation=0.01,
        tax_rate=0.25,
    )
    projection = Projection(normalize(inputs))

    energy = 20_000 * 0.995**2
    revenue = energy * 50 * 1.02**2
    om = 10 * 10_000 * 1.01**2

    assert projection.energy(3) == pytest.approx(energy)
    assert projection.revenue(3) == pytest.approx(revenue)
    assert projection.om_cost(3) == pytest.approx(om)
    assert projection.ebitda(3) == pytest.approx(revenue - om)
    assert projection.cfads(3) == pytest.approx((revenue - om) * 0.75)


def test_year_one_is_unescalated(make_inputs) -> None:
    projection = Projection(normalize(make_inputs(degradation_rate=0.01, ppa_escalation=0.03)))

    assert projection.energy(1) == 20_000
    assert projection.revenue(1) == 1_000_000
    assert projection.total_capex() == 10_000_000
    assert projection.capacity_factor() == pytest.approx(20_000 / (10 * 8_760))


def test_monthly_energy_sums_to_annual(make_inputs) -> None:
    projection = Projection(normalize(make_inputs(degradation_rate=0.005, ppa_escalation=0.02)))

    for year in (1, 7, 20):
        monthly = sum(projection.energy_month(year, m) for m in range(1, 13))
        assert monthly == pytest.approx(projection.energy(year), rel=1e-6)
        revenue = sum(projection.revenue_month(year, m) for m in range(1, 13))
        assert revenue == pytest.approx(projection.revenue(year), rel=1e-6)


def test_monthly_om_is_even_split(make_inputs) -> None:
    projection = Projection(normalize(make_inputs(om_escalation=0.02)))

    assert projection.om_cost_month(4) == pytest.approx(projection.om_cost(4) / 12)
    cfads = sum(projection.cfads_month(4, m) for m in range(1, 13))
    assert cfads == pytest.approx(projection.cfads(4), rel=1e-6)


def test_custom_seasonal_curve(make_inputs) -> None:
    flat = [1 / 12] * 12
    projection = Projection(normalize(make_inputs()), seasonal_factors=flat)

    assert projection.energy_month(1, 6) == pytest.approx(20_000 / 12)


@pytest.mark.parametrize(
    "factors",
    [
        [0.1] * 12,
        [1 / 11] * 11,
        [0.5, -0.5] + [1 / 10] * 10,
        [float("nan")] + [1 / 11] * 11,
        ["sunny"] * 12,
    ],
)
def test_bad_seasonal_curves_rejected(factors: list) -> None:
    with pytest.raises(InputValidationError) as exc_info:
        validate_seasonal_factors(factors)

    assert exc_info.value.field == "seasonal_factors"


def test_southern_curve_is_shifted_six_months() -> None:
    southern = southern_hemisphere_factors()

    assert southern[0] == NORTHERN_HEMISPHERE_MONTHLY_FACTORS[6]
    assert sum(southern) == pytest.approx(1.0, abs=1e-6)
