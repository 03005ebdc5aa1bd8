"""Starts a fleet of simulated vehicles, one asyncio task each, and stops them together."""
import asyncio
import logging
import random
from typing import Optional

from errors import RegistrationError
from simulator_core.clients import FleetServiceClient, JobServiceClient
from simulator_core.routing import RoutingService
from simulator_core.spawn_locations import random_spawn_location
from simulator_core.vehicle import DEFAULT_SPEED, SimulatedVehicle
from utils.telemetry import LogTelemetrySink, TelemetrySink

LOG = logging.getLogger(__name__)

STAGGER_S = 0.1


class FleetSimulator:
    """Registers vehicles sim-vehicle-1..N at random spawn points and runs their tick loops."""

    def __init__(
        self,
        *,
        fleet_client: FleetServiceClient,
        job_client: JobServiceClient,
        region: str,
        vehicle_count: int,
        routing: Optional[RoutingService] = None,
        telemetry: Optional[TelemetrySink] = None,
        speed: float = DEFAULT_SPEED,
        tick_interval_s: float = 2.0,
        stagger_s: float = STAGGER_S,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.fleet_client = fleet_client
        self.job_client = job_client
        self.region = region
        self.vehicle_count = vehicle_count
        self.routing = routing or RoutingService()
        self.telemetry = telemetry or LogTelemetrySink()
        self.speed = speed
        self.tick_interval_s = tick_interval_s
        self.stagger_s = stagger_s
        self._rng = rng or random.Random()
        self.vehicles: list[SimulatedVehicle] = []
        self._tasks: list[asyncio.Task] = []
        self._stop_event = asyncio.Event()

    def _build_vehicle(self, index: int) -> SimulatedVehicle:
        spawn = random_spawn_location(self._rng)
        vehicle = SimulatedVehicle(
            f"sim-vehicle-{index}",
            self.region,
            spawn.lat,
            spawn.lng,
            fleet_client=self.fleet_client,
            job_client=self.job_client,
            routing=self.routing,
            telemetry=self.telemetry,
            speed=self.speed,
            tick_interval_s=self.tick_interval_s,
            rng=random.Random(self._rng.random()),
        )
        LOG.info("Spawning %s at %s (%.4f, %.4f)", vehicle.id, spawn.name, spawn.lat, spawn.lng)
        return vehicle

    async def _register_unless_stopped(self, vehicle: SimulatedVehicle, stop_event: asyncio.Event) -> bool:
        """Register vehicle, or cancel the attempt and return False once stop_event is set."""
        registration = asyncio.create_task(vehicle.register_with_fleet_retry())
        stopped = asyncio.create_task(stop_event.wait())
        done, _ = await asyncio.wait({registration, stopped}, return_when=asyncio.FIRST_COMPLETED)
        if registration in done:
            stopped.cancel()
            registration.result()
            return True
        registration.cancel()
        try:
            await registration
        except (asyncio.CancelledError, RegistrationError):
            pass
        return False

    async def start(self, stop_event: Optional[asyncio.Event] = None) -> int:
        """
        Register and start each vehicle in turn. A vehicle that cannot register is skipped.
        Startup ends early when stop_event is set. Returns the count started.
        """
        stop_event = stop_event or self._stop_event
        for i in range(1, self.vehicle_count + 1):
            if stop_event.is_set():
                break
            vehicle = self._build_vehicle(i)
            try:
                registered = await self._register_unless_stopped(vehicle, stop_event)
            except RegistrationError as e:
                LOG.error("Failed to start vehicle %s: %s", vehicle.id, e)
                continue
            if not registered:
                LOG.info("Vehicle startup interrupted while registering %s", vehicle.id)
                break
            self.vehicles.append(vehicle)
            self._tasks.append(asyncio.create_task(vehicle.run(self._stop_event)))
            if i < self.vehicle_count and self.stagger_s > 0:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.stagger_s)
                except asyncio.TimeoutError:
                    pass

        LOG.info("Vehicle startup complete: %d of %d started", len(self.vehicles), self.vehicle_count)
        return len(self.vehicles)

    async def stop(self) -> None:
        self._stop_event.set()
        if self._tasks:
            await asyncio.gather(*self._tasks)
        self._tasks = []
        LOG.info("Stopped %d vehicle(s)", len(self.vehicles))
