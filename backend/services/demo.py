"""Demo traffic: random Portland rides and deliveries, capped by the active job count."""
import asyncio
import logging
import random
from typing import NamedTuple, Optional

from services.job_service import JobService
from storage.records import DeliveryDetails

LOG = logging.getLogger(__name__)


class Place(NamedTuple):
    name: str
    lat: float
    lng: float


PORTLAND_PLACES: tuple[Place, ...] = (
    Place("Pioneer Courthouse Square", 45.5188, -122.6793),
    Place("Powell's City of Books", 45.5230, -122.6814),
    Place("Union Station", 45.5289, -122.6765),
    Place("Director Park", 45.5181, -122.6850),
    Place("Tom McCall Waterfront Park", 45.5152, -122.6647),
    Place("Oregon Convention Center", 45.5289, -122.6633),
    Place("Moda Center", 45.5316, -122.6668),
    Place("Pioneer Place Mall", 45.5188, -122.6746),
    Place("Jamison Square", 45.5263, -122.6919),
    Place("Tanner Springs Park", 45.5284, -122.6925),
    Place("Division/Clinton Food Carts", 45.5048, -122.6540),
    Place("Laurelhurst Park", 45.5162, -122.6295),
    Place("Mount Tabor Summit", 45.5118, -122.5933),
    Place("Sellwood Bridge", 45.4632, -122.6681),
    Place("OHSU Waterfront Campus", 45.4983, -122.6739),
    Place("Tilikum Crossing", 45.5017, -122.6656),
    Place("Hawthorne District", 45.5122, -122.6208),
    Place("Reed College", 45.4823, -122.6319),
    Place("Lloyd Center Mall", 45.5311, -122.6536),
    Place("Alberta Arts District", 45.5581, -122.6656),
    Place("Mississippi District", 45.5459, -122.6759),
    Place("Beaumont Village", 45.5311, -122.6208),
    Place("OHSU Main Campus", 45.4993, -122.6859),
    Place("Portland State University", 45.5118, -122.6839),
    Place("Johns Landing", 45.4764, -122.6739),
    Place("Gabriel Park", 45.4511, -122.6908),
    Place("NW 23rd Avenue", 45.5298, -122.6979),
    Place("Wallace Park", 45.5298, -122.7025),
    Place("St. Johns Bridge", 45.5816, -122.7603),
    Place("Kenton District", 45.5816, -122.6908),
    Place("PDX Airport", 45.5898, -122.5951),
)

CUSTOMERS: tuple[str, ...] = tuple(f"demo-customer-{i}" for i in range(1, 21))

RESTAURANTS: tuple[str, ...] = (
    "Pok Pok",
    "Nong's Khao Man Gai",
    "Screen Door",
    "Lardo",
    "Salt & Straw",
)

# Share of generated jobs that are deliveries.
DELIVERY_SHARE = 0.3


class DemoJobGenerator:
    """Creates random jobs every min_delay_s..max_delay_s while fewer than max_active_jobs are active."""

    def __init__(
        self,
        job_service: JobService,
        *,
        region: str = "us-west-2",
        max_active_jobs: int = 25,
        idle_interval_s: float = 5.0,
        min_delay_s: float = 10.0,
        max_delay_s: float = 30.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.job_service = job_service
        self.region = region
        self.max_active_jobs = max_active_jobs
        self.idle_interval_s = idle_interval_s
        self.min_delay_s = min_delay_s
        self.max_delay_s = max_delay_s
        self._rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))
        LOG.info("Demo job generator started (max %d active jobs)", self.max_active_jobs)

    async def stop(self) -> None:
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None
        LOG.info("Demo job generator stopped")

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            delay = self.idle_interval_s
            try:
                active = await asyncio.to_thread(self.job_service.get_active_job_count)
                if active >= self.max_active_jobs:
                    LOG.info("Demo active job limit reached (%d/%d), pausing", active, self.max_active_jobs)
                else:
                    await asyncio.to_thread(self.create_random_job)
                    delay = self._rng.uniform(self.min_delay_s, self.max_delay_s)
            except Exception:
                LOG.exception("Failed to create demo job")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                continue

    def create_random_job(self):
        """Create one ride (70%) or delivery (30%) between two distinct places."""
        pickup, destination = self._rng.sample(PORTLAND_PLACES, 2)
        customer = self._rng.choice(CUSTOMERS)

        if self._rng.random() < DELIVERY_SHARE:
            details = DeliveryDetails(
                restaurant_name=self._rng.choice(RESTAURANTS),
                items=["Demo Package"],
                instructions="Demo delivery - handle with care",
            )
            job = self.job_service.create_delivery_job(
                customer, self.region, pickup.lat, pickup.lng, destination.lat, destination.lng, details
            )
        else:
            job = self.job_service.create_ride_job(
                customer, self.region, pickup.lat, pickup.lng, destination.lat, destination.lng
            )

        LOG.info("Created demo %s job %s: %s -> %s", job.job_type, job.id, pickup.name, destination.name)
        return job
