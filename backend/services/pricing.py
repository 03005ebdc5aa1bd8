"""Fare policy: distance-based rides, flat-rate deliveries."""
from dataclasses import dataclass

from storage.records import RIDE


@dataclass(frozen=True)
class Fare:
    base_fare: float
    distance_fare: float
    total: float


@dataclass(frozen=True)
class PricingConfig:
    """Portland-style taxi pricing."""

    ride_base_fare: float = 2.50
    ride_per_km: float = 1.80
    delivery_flat_rate: float = 8.99

    def compute_fare(self, job_type: str, distance_km: float) -> Fare:
        if job_type == RIDE:
            distance_fare = distance_km * self.ride_per_km
            return Fare(
                base_fare=self.ride_base_fare,
                distance_fare=distance_fare,
                total=self.ride_base_fare + distance_fare,
            )
        return Fare(
            base_fare=self.delivery_flat_rate,
            distance_fare=0.0,
            total=self.delivery_flat_rate,
        )
