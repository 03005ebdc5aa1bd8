"""Simulated autonomous vehicle: registration, job execution, movement, battery and charging."""
import asyncio
import logging
import math
import random
from typing import Any, Awaitable, Callable, Optional

from errors import FleetError, RegistrationError, RegistrationTimeoutError
from simulator_core.charging import find_nearest_charging_station
from simulator_core.clients import AssignedJob, FleetServiceClient, JobServiceClient
from simulator_core.routing import Route, RoutingService
from storage.records import (
    ASSIGNED,
    AVAILABLE,
    BUSY,
    CHARGING,
    DEFAULT_DRAIN_RATE_KM_PER_PERCENT,
    MAINTENANCE,
)
from utils.geo import distance_km
from utils.telemetry import JOB_STREAM, VEHICLE_STREAM, LogTelemetrySink, TelemetrySink

LOG = logging.getLogger(__name__)

# Phases within a status
IDLE = "idle"
PICKUP = "pickup"
DELIVERY = "delivery"
GOING_TO_CHARGE = "going_to_charge"
CHARGING_PHASE = "charging"
STRANDED = "stranded"

DEFAULT_SPEED = 0.00035  # degrees per tick
ARRIVAL_THRESHOLD_DEG = 0.001  # ~100 m
IDLE_MOVE_CHANCE = 0.1
IDLE_RADIUS_DEG = 0.01  # ~1.1 km
LOW_BATTERY_THRESHOLD = 30.0
EMERGENCY_BATTERY_THRESHOLD = 15.0
CHARGE_PER_TICK = 2.0
CHARGED_THRESHOLD = 95.0
ROADSIDE_ASSIST_BATTERY = 20.0
TOWED_BATTERY = 5.0

# Registration backoff
REGISTER_MAX_ATTEMPTS = 10
REGISTER_BASE_DELAY_S = 1.0
REGISTER_MAX_DELAY_S = 30.0
REGISTER_BACKOFF = 1.5
REGISTER_JITTER = 0.1
REGISTER_DEADLINE_S = 300.0


class SimulatedVehicle:
    """
    One vehicle's state machine. tick() advances it one step; run() ticks until stopped.

    Statuses and phases: available/idle, busy/pickup|delivery,
    charging/going_to_charge|charging, maintenance/stranded.
    Battery level is a float percentage and is never rounded.
    """

    def __init__(
        self,
        vehicle_id: str,
        region: str,
        start_lat: float,
        start_lng: float,
        *,
        fleet_client: FleetServiceClient,
        job_client: JobServiceClient,
        routing: Optional[RoutingService] = None,
        telemetry: Optional[TelemetrySink] = None,
        speed: float = DEFAULT_SPEED,
        tick_interval_s: float = 2.0,
        battery_level: Optional[float] = None,
        drain_rate_km_per_percent: float = DEFAULT_DRAIN_RATE_KM_PER_PERCENT,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.id = vehicle_id
        self.region = region
        self.status = AVAILABLE
        self.phase = IDLE
        self.vehicle_type = "sedan"
        self.battery_level = (
            float(battery_level) if battery_level is not None else float(self._rng.randint(60, 100))
        )
        self.drain_rate_km_per_percent = drain_rate_km_per_percent
        self.location_lat = start_lat
        self.location_lng = start_lng
        self.speed = speed
        self.tick_interval_s = tick_interval_s

        self.current_job: Optional[AssignedJob] = None
        self.target_lat = start_lat
        self.target_lng = start_lng
        self.is_moving = False
        self.route: Optional[Route] = None
        self.route_index = 0

        self.fleet_client = fleet_client
        self.job_client = job_client
        self.routing = routing or RoutingService()
        self.telemetry = telemetry or LogTelemetrySink()

    @property
    def battery_range_km(self) -> float:
        return self.battery_level * self.drain_rate_km_per_percent

    @property
    def current_job_id(self) -> Optional[str]:
        return self.current_job.id if self.current_job is not None else None

    def to_registration(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "region": self.region,
            "status": self.status,
            "battery_level": self.battery_level,
            "battery_range_km": self.battery_range_km,
            "location_lat": self.location_lat,
            "location_lng": self.location_lng,
            "vehicle_type": self.vehicle_type,
        }

    # ------------------------------------------------------------------
    # Registration

    async def register_with_fleet_retry(
        self,
        *,
        max_attempts: int = REGISTER_MAX_ATTEMPTS,
        base_delay_s: float = REGISTER_BASE_DELAY_S,
        max_delay_s: float = REGISTER_MAX_DELAY_S,
        deadline_s: float = REGISTER_DEADLINE_S,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Register with capped exponential backoff and jitter.
        Raises RegistrationTimeoutError when the deadline passes, RegistrationError after max_attempts.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + deadline_s
        delay = base_delay_s
        last_error: Optional[Exception] = None

        LOG.info("Registering vehicle %s (max %d attempts, %.0fs deadline)", self.id, max_attempts, deadline_s)
        for attempt in range(1, max_attempts + 1):
            try:
                await self.fleet_client.register_vehicle(self.to_registration())
            except FleetError as e:
                last_error = e
                LOG.warning(
                    "Vehicle %s registration attempt %d/%d failed: %s", self.id, attempt, max_attempts, e
                )
            else:
                LOG.info("Vehicle %s registered on attempt %d", self.id, attempt)
                return

            if attempt == max_attempts:
                break
            wait = min(delay + self._rng.uniform(0, delay * REGISTER_JITTER), max_delay_s)
            remaining = deadline - loop.time()
            if remaining <= wait:
                await sleep(max(remaining, 0.0))
                LOG.error("Vehicle %s registration timed out after %d attempts", self.id, attempt)
                raise RegistrationTimeoutError(
                    f"vehicle {self.id}: registration deadline of {deadline_s:.0f}s exceeded"
                ) from last_error
            await sleep(wait)
            delay = min(delay * REGISTER_BACKOFF, max_delay_s)

        LOG.error("Vehicle %s registration failed after %d attempts: %s", self.id, max_attempts, last_error)
        raise RegistrationError(
            f"vehicle {self.id}: registration failed after {max_attempts} attempts: {last_error}"
        ) from last_error

    # ------------------------------------------------------------------
    # Loop

    async def run(self, stop_event: asyncio.Event) -> None:
        """Tick every tick_interval_s until stop_event is set. Ticks never overlap."""
        while not stop_event.is_set():
            try:
                await self.tick()
            except Exception:
                LOG.exception("Vehicle %s tick failed", self.id)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.tick_interval_s)
            except asyncio.TimeoutError:
                continue

    async def tick(self) -> None:
        """Poll for work, advance the current state, report, then check the proactive charge threshold."""
        LOG.debug(
            "Vehicle %s %s/%s battery %.3f%% at (%.5f, %.5f) job %s",
            self.id,
            self.status,
            self.phase,
            self.battery_level,
            self.location_lat,
            self.location_lng,
            self.current_job_id,
        )
        await self.check_for_jobs()

        if self.status == AVAILABLE:
            self._simulate_idle()
        elif self.status == BUSY:
            await self._simulate_job()
        elif self.status == CHARGING:
            self._simulate_charging()
        elif self.status == MAINTENANCE:
            await self._simulate_maintenance()

        await self.report_to_fleet()

        if self.status == AVAILABLE and self.battery_level <= LOW_BATTERY_THRESHOLD:
            LOG.warning("Vehicle %s battery low (%.1f%%), going to charge", self.id, self.battery_level)
            await self.go_to_charge()

    # ------------------------------------------------------------------
    # Jobs

    async def check_for_jobs(self) -> None:
        if self.status != AVAILABLE or self.current_job is not None:
            return
        try:
            jobs = await self.job_client.get_assigned_jobs(self.id)
        except FleetError as e:
            LOG.error("Vehicle %s failed to check for jobs: %s", self.id, e)
            return
        for job in jobs:
            if job.status == ASSIGNED:
                await self.start_job(job)
                return

    async def start_job(self, job: AssignedJob) -> None:
        self.current_job = job
        self.status = BUSY
        self.phase = PICKUP
        await self._set_route_target(job.pickup_lat, job.pickup_lng)
        LOG.info(
            "Vehicle %s started %s job %s, pickup (%.5f, %.5f)",
            self.id,
            job.job_type,
            job.id,
            job.pickup_lat,
            job.pickup_lng,
        )
        self._emit_job_event("started", job)

    async def _simulate_job(self) -> None:
        if self.current_job is None:
            self.status = AVAILABLE
            self.phase = IDLE
            self.is_moving = False
            return

        if self.battery_level <= EMERGENCY_BATTERY_THRESHOLD:
            LOG.warning(
                "Vehicle %s battery critically low (%.1f%%), abandoning job %s to charge",
                self.id,
                self.battery_level,
                self.current_job.id,
            )
            self._abandon_job(CHARGING, GOING_TO_CHARGE)
            await self.go_to_charge()
            return

        if not self.is_moving:
            return
        self.move_along_route()
        if self.status != BUSY or self.current_job is None:
            return

        if self.distance_to_target() < ARRIVAL_THRESHOLD_DEG:
            if self.phase == PICKUP:
                self.phase = DELIVERY
                await self._set_route_target(self.current_job.destination_lat, self.current_job.destination_lng)
                LOG.info(
                    "Vehicle %s reached pickup for job %s, heading to (%.5f, %.5f)",
                    self.id,
                    self.current_job.id,
                    self.current_job.destination_lat,
                    self.current_job.destination_lng,
                )
            elif self.phase == DELIVERY:
                await self.complete_current_job()

    async def complete_current_job(self) -> None:
        job = self.current_job
        if job is None:
            return
        LOG.info("Vehicle %s completed %s job %s", self.id, job.job_type, job.id)
        try:
            await self.job_client.complete_job(job.id)
        except FleetError as e:
            LOG.error("Vehicle %s failed to report completion of job %s: %s", self.id, job.id, e)

        self.current_job = None
        self.status = AVAILABLE
        self.phase = IDLE
        self.is_moving = False

    def _abandon_job(self, status: str, phase: str) -> None:
        """Drop the current job and switch to status/phase in the same step; the vehicle is never busy without a job."""
        job = self.current_job
        self.current_job = None
        self.status = status
        self.phase = phase
        if job is not None:
            self._emit_job_event("abandoned", job)

    # ------------------------------------------------------------------
    # Idle, charging, maintenance

    def _simulate_idle(self) -> None:
        if self.is_moving:
            self.move_towards_target()
        elif self._rng.random() < IDLE_MOVE_CHANCE:
            self.set_random_target(IDLE_RADIUS_DEG)
            self.route = None
            self.is_moving = True

    def _simulate_charging(self) -> None:
        if self.phase == GOING_TO_CHARGE:
            if self.is_moving:
                self.move_along_route()
            if self.phase == GOING_TO_CHARGE and self.distance_to_target() < ARRIVAL_THRESHOLD_DEG:
                self.is_moving = False
                self.phase = CHARGING_PHASE
                LOG.info("Vehicle %s arrived at charging station, battery %.1f%%", self.id, self.battery_level)
            return

        if self.phase == CHARGING_PHASE:
            if self.battery_level < CHARGED_THRESHOLD:
                previous = self.battery_level
                self.battery_level = min(100.0, self.battery_level + CHARGE_PER_TICK)
                LOG.info(
                    "Vehicle %s charging %.1f%% -> %.1f%% (range %.1f km)",
                    self.id,
                    previous,
                    self.battery_level,
                    self.battery_range_km,
                )
            else:
                self.status = AVAILABLE
                self.phase = IDLE
                self.is_moving = False
                LOG.info("Vehicle %s charged to %.1f%%, back in service", self.id, self.battery_level)

    async def _simulate_maintenance(self) -> None:
        if self.phase != STRANDED:
            return
        LOG.info(
            "Vehicle %s requesting roadside assistance at (%.5f, %.5f)",
            self.id,
            self.location_lat,
            self.location_lng,
        )
        self.battery_level = ROADSIDE_ASSIST_BATTERY
        await self.go_to_charge()

    async def go_to_charge(self) -> None:
        station = find_nearest_charging_station(self.region, self.location_lat, self.location_lng)
        self.status = CHARGING
        self.phase = GOING_TO_CHARGE
        await self._set_route_target(station.lat, station.lng)
        LOG.info(
            "Vehicle %s going to charging station %s (%.2f km), battery %.1f%%",
            self.id,
            station.id,
            distance_km(self.location_lat, self.location_lng, station.lat, station.lng),
            self.battery_level,
        )

    # ------------------------------------------------------------------
    # Movement and battery

    async def _set_route_target(self, lat: float, lng: float) -> None:
        self.target_lat = lat
        self.target_lng = lng
        self.route = await self.routing.get_route(self.location_lat, self.location_lng, lat, lng)
        self.route_index = 0
        self.is_moving = True
        LOG.debug(
            "Vehicle %s route with %d waypoints (%.1f km, %.1f min)",
            self.id,
            len(self.route.points),
            self.route.distance / 1000,
            self.route.duration / 60,
        )

    def set_random_target(self, radius_deg: float) -> None:
        angle = self._rng.random() * 2 * math.pi
        radius = self._rng.random() * radius_deg
        self.target_lat = self.location_lat + radius * math.cos(angle)
        self.target_lng = self.location_lng + radius * math.sin(angle)

    def distance_to_target(self) -> float:
        """Planar distance to the target in degrees."""
        return math.hypot(self.target_lat - self.location_lat, self.target_lng - self.location_lng)

    def move_along_route(self) -> None:
        """Step toward the next waypoint; without a route, move straight at the target."""
        if self.battery_level <= 0:
            self.handle_battery_depletion()
            return
        if self.route is None or not self.route.points:
            self.move_towards_target()
            return

        if self.route_index >= len(self.route.points) - 1:
            self.location_lat = self.target_lat
            self.location_lng = self.target_lng
            self.is_moving = False
            self.route = None
            self.route_index = 0
            return

        prev_lat, prev_lng = self.location_lat, self.location_lng
        waypoint = self.route.points[self.route_index + 1]
        lat_diff = waypoint.lat - self.location_lat
        lng_diff = waypoint.lng - self.location_lng
        dist = math.hypot(lat_diff, lng_diff)

        if dist < self.speed:
            self.route_index += 1
            self.location_lat = waypoint.lat
            self.location_lng = waypoint.lng
        else:
            self.location_lat += lat_diff / dist * self.speed
            self.location_lng += lng_diff / dist * self.speed

        self.drain_battery(distance_km(prev_lat, prev_lng, self.location_lat, self.location_lng))

    def move_towards_target(self) -> None:
        if self.battery_level <= 0:
            self.handle_battery_depletion()
            return

        dist = self.distance_to_target()
        if dist < ARRIVAL_THRESHOLD_DEG:
            self.location_lat = self.target_lat
            self.location_lng = self.target_lng
            self.is_moving = False
            return

        prev_lat, prev_lng = self.location_lat, self.location_lng
        factor = min(self.speed, dist) / dist
        self.location_lat += (self.target_lat - self.location_lat) * factor
        self.location_lng += (self.target_lng - self.location_lng) * factor

        self.drain_battery(distance_km(prev_lat, prev_lng, self.location_lat, self.location_lng))

    def drain_battery(self, km_traveled: float) -> None:
        """Drain km_traveled / drain rate percentage points, clamped at 0."""
        if km_traveled <= 0:
            return
        used = km_traveled / self.drain_rate_km_per_percent
        self.battery_level = max(0.0, self.battery_level - used)
        if self.battery_level == 0:
            self.handle_battery_depletion()

    def handle_battery_depletion(self) -> None:
        """Empty battery: towed to a charger when heading to one, otherwise stranded."""
        LOG.error(
            "Vehicle %s battery depleted at (%.5f, %.5f) while %s/%s",
            self.id,
            self.location_lat,
            self.location_lng,
            self.status,
            self.phase,
        )
        if self.status == CHARGING and self.phase == GOING_TO_CHARGE:
            station = find_nearest_charging_station(self.region, self.location_lat, self.location_lng)
            self.location_lat = station.lat
            self.location_lng = station.lng
            self.target_lat = station.lat
            self.target_lng = station.lng
            self.is_moving = False
            self.route = None
            self.phase = CHARGING_PHASE
            self.battery_level = TOWED_BATTERY
            LOG.warning("Vehicle %s towed to charging station %s", self.id, station.id)
            return

        self.is_moving = False
        if self.current_job is not None:
            LOG.warning("Vehicle %s abandoning job %s: battery depleted", self.id, self.current_job.id)
        self._abandon_job(MAINTENANCE, STRANDED)

    # ------------------------------------------------------------------
    # Reporting

    async def report_to_fleet(self) -> None:
        """Send position, status and battery. Failures are logged; the next tick reports again."""
        try:
            await self.fleet_client.report_location(
                self.id,
                self.location_lat,
                self.location_lng,
                self.status,
                self.battery_level,
                job_id=self.current_job_id,
            )
        except FleetError as e:
            LOG.error("Vehicle %s failed to report location: %s", self.id, e)
        record: dict[str, Any] = {
            "vehicle_id": self.id,
            "latitude": self.location_lat,
            "longitude": self.location_lng,
            "status": self.status,
            "battery": self.battery_level,
        }
        if self.current_job is not None:
            record["job_id"] = self.current_job.id
        self.telemetry.emit(VEHICLE_STREAM, record)

    def _emit_job_event(self, event: str, job: AssignedJob) -> None:
        self.telemetry.emit(
            JOB_STREAM,
            {"event": event, "job_id": job.id, "job_type": job.job_type, "vehicle_id": self.id},
        )
