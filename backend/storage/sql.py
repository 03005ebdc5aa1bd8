"""SQLAlchemy-backed vehicle and job storage.

Each operation runs in its own session and commits before returning, so the
database transaction is the unit of atomicity.
"""
from dataclasses import asdict
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from errors import AlreadyExistsError, InvalidStateError, NotFoundError
from models.job import Job as JobModel
from models.vehicle import Vehicle as VehicleModel
from storage.records import ASSIGNED, COMPLETED, DeliveryDetails, Job, Vehicle, resolve_reported_status, utcnow


def _vehicle_from_row(row: VehicleModel) -> Vehicle:
    return Vehicle(
        id=row.id,
        region=row.region,
        status=row.status,
        battery_level=row.battery_level,
        location_lat=row.location_lat,
        location_lng=row.location_lng,
        current_job_id=row.current_job_id,
        vehicle_type=row.vehicle_type,
        drain_rate_km_per_percent=row.drain_rate_km_per_percent,
        last_updated=row.last_updated,
    )


def _job_from_row(row: JobModel) -> Job:
    details = None
    if row.delivery_details is not None:
        details = DeliveryDetails(**row.delivery_details)
    return Job(
        id=row.id,
        job_type=row.job_type,
        customer_id=row.customer_id,
        region=row.region,
        pickup_lat=row.pickup_lat,
        pickup_lng=row.pickup_lng,
        destination_lat=row.destination_lat,
        destination_lng=row.destination_lng,
        estimated_distance_km=row.estimated_distance_km,
        status=row.status,
        assigned_vehicle_id=row.assigned_vehicle_id,
        delivery_details=details,
        fare_amount=row.fare_amount,
        base_fare=row.base_fare,
        distance_fare=row.distance_fare,
        created_at=row.created_at,
        assigned_at=row.assigned_at,
        completed_at=row.completed_at,
    )


def _apply_job(row: JobModel, job: Job) -> None:
    row.job_type = job.job_type
    row.status = job.status
    row.assigned_vehicle_id = job.assigned_vehicle_id
    row.customer_id = job.customer_id
    row.region = job.region
    row.pickup_lat = job.pickup_lat
    row.pickup_lng = job.pickup_lng
    row.destination_lat = job.destination_lat
    row.destination_lng = job.destination_lng
    row.estimated_distance_km = job.estimated_distance_km
    row.delivery_details = asdict(job.delivery_details) if job.delivery_details else None
    row.fare_amount = job.fare_amount
    row.base_fare = job.base_fare
    row.distance_fare = job.distance_fare
    row.created_at = job.created_at
    row.assigned_at = job.assigned_at
    row.completed_at = job.completed_at


class SqlVehicleStorage:
    """Fleet directory stored in the vehicle table."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _get_row(self, session: Session, vehicle_id: str) -> VehicleModel:
        row = session.get(VehicleModel, vehicle_id)
        if row is None:
            raise NotFoundError(f"vehicle {vehicle_id} not found")
        return row

    def create_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._session_factory() as session:
            if session.get(VehicleModel, vehicle.id) is not None:
                raise AlreadyExistsError(f"vehicle {vehicle.id} already exists")
            row = VehicleModel(
                id=vehicle.id,
                region=vehicle.region,
                status=vehicle.status,
                battery_level=float(vehicle.battery_level),
                drain_rate_km_per_percent=vehicle.drain_rate_km_per_percent,
                location_lat=vehicle.location_lat,
                location_lng=vehicle.location_lng,
                current_job_id=vehicle.current_job_id,
                vehicle_type=vehicle.vehicle_type,
                last_updated=utcnow(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise AlreadyExistsError(f"vehicle {vehicle.id} already exists") from e
            session.refresh(row)
            return _vehicle_from_row(row)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        with self._session_factory() as session:
            return _vehicle_from_row(self._get_row(session, vehicle_id))

    def update_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._session_factory() as session:
            row = self._get_row(session, vehicle.id)
            row.status = vehicle.status
            row.battery_level = float(vehicle.battery_level)
            row.drain_rate_km_per_percent = vehicle.drain_rate_km_per_percent
            row.location_lat = vehicle.location_lat
            row.location_lng = vehicle.location_lng
            row.current_job_id = vehicle.current_job_id
            row.vehicle_type = vehicle.vehicle_type
            row.last_updated = utcnow()
            session.commit()
            session.refresh(row)
            return _vehicle_from_row(row)

    def get_vehicles_by_region_and_status(self, region: str, status: str) -> list[Vehicle]:
        with self._session_factory() as session:
            result = session.execute(
                select(VehicleModel)
                .where(VehicleModel.region == region, VehicleModel.status == status)
                .order_by(VehicleModel.id)
            )
            return [_vehicle_from_row(r) for r in result.scalars().all()]

    def get_all_vehicles(self) -> list[Vehicle]:
        with self._session_factory() as session:
            result = session.execute(select(VehicleModel).order_by(VehicleModel.id))
            return [_vehicle_from_row(r) for r in result.scalars().all()]

    def update_vehicle_location(self, vehicle_id: str, lat: float, lng: float) -> None:
        with self._session_factory() as session:
            row = self._get_row(session, vehicle_id)
            row.location_lat = lat
            row.location_lng = lng
            row.last_updated = utcnow()
            session.commit()

    def update_vehicle_location_and_status(
        self,
        vehicle_id: str,
        lat: float,
        lng: float,
        status: str,
        battery_level: Optional[float] = None,
        job_id: Optional[str] = None,
    ) -> None:
        with self._session_factory() as session:
            row = self._get_row(session, vehicle_id)
            row.location_lat = lat
            row.location_lng = lng
            row.status, row.current_job_id = resolve_reported_status(
                row.status, row.current_job_id, status, job_id
            )
            if battery_level is not None:
                row.battery_level = float(battery_level)
            row.last_updated = utcnow()
            session.commit()

    def update_vehicle_status(
        self,
        vehicle_id: str,
        status: str,
        job_id: Optional[str] = None,
        *,
        expected_status: Optional[str] = None,
    ) -> None:
        """Single UPDATE so status and job id change together; expected_status makes it a compare-and-set."""
        with self._session_factory() as session:
            stmt = (
                update(VehicleModel)
                .where(VehicleModel.id == vehicle_id)
                .values(status=status, current_job_id=job_id, last_updated=utcnow())
            )
            if expected_status is not None:
                stmt = stmt.where(VehicleModel.status == expected_status)
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                row = self._get_row(session, vehicle_id)
                raise InvalidStateError(
                    f"vehicle {vehicle_id} is {row.status}, expected {expected_status}"
                )
            session.commit()


class SqlJobStorage:
    """Job ledger stored in the job table."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _get_row(self, session: Session, job_id: str) -> JobModel:
        row = session.get(JobModel, job_id)
        if row is None:
            raise NotFoundError(f"job {job_id} not found")
        return row

    def create_job(self, job: Job) -> Job:
        with self._session_factory() as session:
            if session.get(JobModel, job.id) is not None:
                raise AlreadyExistsError(f"job {job.id} already exists")
            row = JobModel(id=job.id)
            _apply_job(row, job)
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise AlreadyExistsError(f"job {job.id} already exists") from e
            session.refresh(row)
            return _job_from_row(row)

    def get_job(self, job_id: str) -> Job:
        with self._session_factory() as session:
            return _job_from_row(self._get_row(session, job_id))

    def update_job(self, job: Job) -> Job:
        with self._session_factory() as session:
            row = self._get_row(session, job.id)
            _apply_job(row, job)
            session.commit()
            session.refresh(row)
            return _job_from_row(row)

    def get_jobs_by_status(self, status: str) -> list[Job]:
        with self._session_factory() as session:
            result = session.execute(
                select(JobModel)
                .where(JobModel.status == status)
                .order_by(JobModel.created_at, JobModel.id)
            )
            return [_job_from_row(r) for r in result.scalars().all()]

    def get_jobs_by_vehicle(self, vehicle_id: str) -> list[Job]:
        with self._session_factory() as session:
            result = session.execute(
                select(JobModel)
                .where(JobModel.assigned_vehicle_id == vehicle_id)
                .order_by(JobModel.created_at, JobModel.id)
            )
            return [_job_from_row(r) for r in result.scalars().all()]

    def get_all_jobs(self) -> list[Job]:
        with self._session_factory() as session:
            result = session.execute(select(JobModel).order_by(JobModel.created_at, JobModel.id))
            return [_job_from_row(r) for r in result.scalars().all()]

    def update_job_status(self, job_id: str, status: str, vehicle_id: Optional[str] = None) -> None:
        with self._session_factory() as session:
            row = self._get_row(session, job_id)
            row.status = status
            if vehicle_id is not None:
                row.assigned_vehicle_id = vehicle_id
            if status == ASSIGNED:
                row.assigned_at = utcnow()
            elif status == COMPLETED:
                row.completed_at = utcnow()
            session.commit()
