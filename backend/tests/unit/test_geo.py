"""Unit tests: haversine distance."""
import pytest

from utils.geo import distance_km

pytestmark = pytest.mark.unit

SF = (37.7749, -122.4194)
LA = (34.0522, -118.2437)


def test_distance_to_self_is_zero():
    assert distance_km(*SF, *SF) == 0.0


@pytest.mark.parametrize(
    "a,b",
    [
        (SF, LA),
        ((45.5188, -122.6793), (45.5898, -122.5951)),
        ((0.0, 179.9), (0.0, -179.9)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert distance_km(*a, *b) == pytest.approx(distance_km(*b, *a))


def test_sf_to_la_about_560_km():
    """SF to LA is roughly 560 km in a straight line."""
    assert distance_km(*SF, *LA) == pytest.approx(560, rel=0.10)


def test_distance_across_antimeridian_is_short():
    assert distance_km(0.0, 179.9, 0.0, -179.9) < 25
