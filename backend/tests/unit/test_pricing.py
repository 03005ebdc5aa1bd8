"""Unit tests: fare policy."""
import pytest

from services.pricing import PricingConfig

pytestmark = pytest.mark.unit


def test_ride_fare_for_5_km():
    fare = PricingConfig().compute_fare("ride", 5.0)
    assert fare.base_fare == pytest.approx(2.50)
    assert fare.distance_fare == pytest.approx(9.00)
    assert fare.total == pytest.approx(11.50)


@pytest.mark.parametrize("distance", [0.0, 1.0, 42.0])
def test_delivery_is_flat_rate(distance):
    fare = PricingConfig().compute_fare("delivery", distance)
    assert fare.total == pytest.approx(8.99)
    assert fare.base_fare == pytest.approx(8.99)
    assert fare.distance_fare == 0.0


def test_custom_rates():
    pricing = PricingConfig(ride_base_fare=3.0, ride_per_km=2.0, delivery_flat_rate=5.0)
    assert pricing.compute_fare("ride", 10.0).total == pytest.approx(23.0)
    assert pricing.compute_fare("delivery", 10.0).total == pytest.approx(5.0)
