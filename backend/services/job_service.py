"""Job service: creates ride/delivery jobs, prices them and assigns them to vehicles."""
import itertools
import logging
import threading
from dataclasses import asdict
from typing import Any, Optional

from errors import FleetError, InvalidStateError, NoVehicleAvailableError, NotFoundError
from services.fleet_service import FleetService
from services.pricing import PricingConfig
from storage.interface import JobStorage
from storage.records import (
    ACTIVE_JOB_STATUSES,
    ASSIGNED,
    COMPLETED,
    DELIVERY,
    IN_PROGRESS,
    PENDING,
    RIDE,
    DeliveryDetails,
    Job,
    Vehicle,
)
from utils.geo import distance_km
from utils.telemetry import JOB_STREAM, LogTelemetrySink, TelemetrySink

LOG = logging.getLogger(__name__)

# Dispatch retries when the chosen vehicle is taken between selection and assignment.
MAX_DISPATCH_ATTEMPTS = 3


class JobService:
    """Job orchestrator. Storage, fleet and telemetry are injected; nothing is process-global."""

    def __init__(
        self,
        storage: JobStorage,
        fleet: FleetService,
        pricing: Optional[PricingConfig] = None,
        telemetry: Optional[TelemetrySink] = None,
    ) -> None:
        self.storage = storage
        self.fleet = fleet
        self.pricing = pricing or PricingConfig()
        self.telemetry = telemetry or LogTelemetrySink()
        # Continue numbering after jobs already in a persistent store.
        self._ids = itertools.count(len(storage.get_all_jobs()) + 1)
        self._ids_lock = threading.Lock()

    def _next_job_id(self, job_type: str) -> str:
        with self._ids_lock:
            return f"{job_type}-{next(self._ids)}"

    def create_ride_job(
        self,
        customer_id: str,
        region: str,
        pickup_lat: float,
        pickup_lng: float,
        dest_lat: float,
        dest_lng: float,
    ) -> Job:
        return self._create_job(RIDE, customer_id, region, pickup_lat, pickup_lng, dest_lat, dest_lng)

    def create_delivery_job(
        self,
        customer_id: str,
        region: str,
        pickup_lat: float,
        pickup_lng: float,
        dest_lat: float,
        dest_lng: float,
        delivery_details: Optional[DeliveryDetails] = None,
    ) -> Job:
        return self._create_job(
            DELIVERY, customer_id, region, pickup_lat, pickup_lng, dest_lat, dest_lng, delivery_details
        )

    def _create_job(
        self,
        job_type: str,
        customer_id: str,
        region: str,
        pickup_lat: float,
        pickup_lng: float,
        dest_lat: float,
        dest_lng: float,
        delivery_details: Optional[DeliveryDetails] = None,
    ) -> Job:
        """
        Persist a pending job, then try to assign it right away.
        A failed assignment leaves the job pending for the background sweep; it is not an error.
        """
        estimated_km = distance_km(pickup_lat, pickup_lng, dest_lat, dest_lng)
        fare = self.pricing.compute_fare(job_type, estimated_km)
        job = Job(
            id=self._next_job_id(job_type),
            job_type=job_type,
            customer_id=customer_id,
            region=region,
            pickup_lat=pickup_lat,
            pickup_lng=pickup_lng,
            destination_lat=dest_lat,
            destination_lng=dest_lng,
            estimated_distance_km=estimated_km,
            status=PENDING,
            delivery_details=delivery_details,
            fare_amount=fare.total,
            base_fare=fare.base_fare,
            distance_fare=fare.distance_fare,
        )
        self.storage.create_job(job)
        self._emit("created", job)
        LOG.info(
            "Created %s job %s for %s in %s: %.2f km, fare %.2f",
            job_type,
            job.id,
            customer_id,
            region,
            estimated_km,
            fare.total,
        )

        try:
            self._assign_job(job)
        except FleetError as e:
            LOG.info("Job %s left pending: %s", job.id, e)

        return self.storage.get_job(job.id)

    def _assign_job(self, job: Job) -> Vehicle:
        """
        Dispatch then assign. Assignment is a compare-and-set on the vehicle (must still be
        available), so a vehicle taken by a concurrent dispatch is skipped and dispatch retried.
        """
        for attempt in range(1, MAX_DISPATCH_ATTEMPTS + 1):
            vehicle = self.fleet.find_nearest_available_vehicle(
                job.region, job.pickup_lat, job.pickup_lng, job.estimated_distance_km
            )
            try:
                self.fleet.assign_job(vehicle.id, job.id)
            except InvalidStateError as e:
                LOG.info("Vehicle %s taken before job %s could be assigned (attempt %d): %s",
                         vehicle.id, job.id, attempt, e)
                continue

            try:
                self.storage.update_job_status(job.id, ASSIGNED, vehicle.id)
            except FleetError:
                self.fleet.complete_job(vehicle.id)
                raise

            job.status = ASSIGNED
            job.assigned_vehicle_id = vehicle.id
            self._emit("assigned", job)
            LOG.info("Job %s assigned to vehicle %s", job.id, vehicle.id)
            return vehicle

        raise NoVehicleAvailableError(
            f"job {job.id}: candidate vehicles were taken by concurrent assignments"
        )

    def process_pending_jobs(self) -> int:
        """Try to assign every pending job, oldest first. Returns how many were assigned."""
        assigned = 0
        for job in self.storage.get_jobs_by_status(PENDING):
            try:
                self._assign_job(job)
            except FleetError as e:
                LOG.info("Failed to assign pending job %s: %s", job.id, e)
                continue
            assigned += 1
        return assigned

    def complete_job(self, job_id: str) -> Job:
        """
        Mark an assigned or in-progress job completed and release its vehicle if the
        vehicle is still holding it. Raises NotFoundError / InvalidStateError.
        """
        job = self.storage.get_job(job_id)
        if job.status not in (ASSIGNED, IN_PROGRESS):
            raise InvalidStateError(f"job {job_id} is not in progress, current status: {job.status}")

        self.storage.update_job_status(job_id, COMPLETED, job.assigned_vehicle_id)

        if job.assigned_vehicle_id:
            try:
                vehicle = self.fleet.get_vehicle(job.assigned_vehicle_id)
                if vehicle.current_job_id == job_id:
                    self.fleet.complete_job(vehicle.id)
            except NotFoundError:
                LOG.warning("Job %s completed by unknown vehicle %s", job_id, job.assigned_vehicle_id)

        completed = self.storage.get_job(job_id)
        self._emit("completed", completed)
        LOG.info("Job %s completed by vehicle %s", job_id, job.assigned_vehicle_id)
        return completed

    def get_job(self, job_id: str) -> Job:
        return self.storage.get_job(job_id)

    def get_all_jobs(self) -> list[Job]:
        return self.storage.get_all_jobs()

    def get_jobs_by_status(self, status: str) -> list[Job]:
        return self.storage.get_jobs_by_status(status)

    def get_jobs_by_vehicle(self, vehicle_id: str) -> list[Job]:
        return self.storage.get_jobs_by_vehicle(vehicle_id)

    def get_active_job_count(self) -> int:
        """Jobs still pending or assigned, read live from storage."""
        return sum(1 for job in self.storage.get_all_jobs() if job.status in ACTIVE_JOB_STATUSES)

    def get_revenue(self) -> dict[str, Any]:
        """Revenue over completed jobs only, split by job type."""
        total = ride_revenue = delivery_revenue = 0.0
        ride_count = delivery_count = 0

        for job in self.storage.get_all_jobs():
            if job.status != COMPLETED:
                continue
            total += job.fare_amount
            if job.job_type == RIDE:
                ride_revenue += job.fare_amount
                ride_count += 1
            else:
                delivery_revenue += job.fare_amount
                delivery_count += 1

        return {
            "total_revenue": total,
            "ride_revenue": ride_revenue,
            "delivery_revenue": delivery_revenue,
            "completed_jobs": ride_count + delivery_count,
            "ride_count": ride_count,
            "delivery_count": delivery_count,
            "avg_ride_fare": ride_revenue / ride_count if ride_count else 0.0,
            "avg_delivery_fare": delivery_revenue / delivery_count if delivery_count else 0.0,
        }

    def _emit(self, event: str, job: Job) -> None:
        record = {
            "event": event,
            "job_id": job.id,
            "job_type": job.job_type,
            "status": job.status,
            "region": job.region,
            "customer_id": job.customer_id,
            "assigned_vehicle_id": job.assigned_vehicle_id,
            "fare_amount": job.fare_amount,
        }
        if job.delivery_details is not None:
            record["delivery_details"] = asdict(job.delivery_details)
        self.telemetry.emit(JOB_STREAM, record)
