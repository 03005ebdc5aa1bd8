"""Vehicle (fleet directory) API routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.deps import get_fleet_service
from errors import AlreadyExistsError, InvalidStateError, NoVehicleAvailableError, NotFoundError
from schemas.vehicles import JobAssignment, LocationUpdate, VehicleRegister, VehicleResponse
from services.fleet_service import FleetService
from storage.records import Vehicle

LOG = logging.getLogger(__name__)

router = APIRouter(tags=["vehicles"])


@router.get("/vehicles", response_model=list[VehicleResponse])
def list_vehicles(fleet: FleetService = Depends(get_fleet_service)) -> list[VehicleResponse]:
    """List all vehicles, available first."""
    return [VehicleResponse.model_validate(v) for v in fleet.get_all_vehicles()]


@router.post("/vehicles", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
def register_vehicle(
    body: VehicleRegister,
    fleet: FleetService = Depends(get_fleet_service),
) -> VehicleResponse:
    """Register a vehicle. 409 if the id is already registered."""
    vehicle = Vehicle(
        id=body.id,
        region=body.region,
        status=body.status,
        battery_level=body.battery_level,
        location_lat=body.location_lat,
        location_lng=body.location_lng,
        vehicle_type=body.vehicle_type,
    )
    try:
        created = fleet.register_vehicle(vehicle)
    except AlreadyExistsError as e:
        LOG.warning("Vehicle registration rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return VehicleResponse.model_validate(created)


@router.get("/vehicles/find", response_model=VehicleResponse)
def find_nearest_vehicle(
    region: str = Query(..., min_length=1),
    pickup_lat: float = Query(..., ge=-90, le=90),
    pickup_lng: float = Query(..., ge=-180, le=180),
    trip_distance_km: float = Query(..., ge=0),
    fleet: FleetService = Depends(get_fleet_service),
) -> VehicleResponse:
    """Nearest available vehicle with enough range for the trip. 404 if none qualifies."""
    try:
        vehicle = fleet.find_nearest_available_vehicle(region, pickup_lat, pickup_lng, trip_distance_km)
    except NoVehicleAvailableError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return VehicleResponse.model_validate(vehicle)


@router.get("/vehicles/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(vehicle_id: str, fleet: FleetService = Depends(get_fleet_service)) -> VehicleResponse:
    try:
        return VehicleResponse.model_validate(fleet.get_vehicle(vehicle_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/vehicles/{vehicle_id}/location", status_code=status.HTTP_200_OK)
def update_vehicle_location(
    vehicle_id: str,
    body: LocationUpdate,
    fleet: FleetService = Depends(get_fleet_service),
) -> dict:
    """Position report; also updates status and battery when given."""
    try:
        if body.status is None:
            fleet.update_vehicle_location(vehicle_id, body.lat, body.lng)
        else:
            fleet.update_vehicle_location_and_status(
                vehicle_id, body.lat, body.lng, body.status, body.battery_level, body.current_job_id
            )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"status": "ok"}


@router.post("/vehicles/{vehicle_id}/assign", status_code=status.HTTP_200_OK)
def assign_job(
    vehicle_id: str,
    body: JobAssignment,
    fleet: FleetService = Depends(get_fleet_service),
) -> dict:
    """Mark an available vehicle busy with a job. 409 if it is not available."""
    try:
        fleet.assign_job(vehicle_id, body.job_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return {"status": "ok"}


@router.post("/vehicles/{vehicle_id}/complete", status_code=status.HTTP_200_OK)
def complete_vehicle_job(vehicle_id: str, fleet: FleetService = Depends(get_fleet_service)) -> dict:
    """Release a vehicle back to available with no current job."""
    try:
        fleet.complete_job(vehicle_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return {"status": "ok"}
