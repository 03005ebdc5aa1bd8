"""Job API routes: create, query, complete, sweep, revenue."""
from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_job_service
from errors import InvalidStateError, NotFoundError
from schemas.jobs import ActiveJobCount, JobCreate, JobResponse, ProcessPendingResponse, RevenueResponse
from services.job_service import JobService
from storage.records import DELIVERY, JOB_STATUSES, DeliveryDetails

router = APIRouter(tags=["jobs"])


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(jobs: JobService = Depends(get_job_service)) -> list[JobResponse]:
    return [JobResponse.model_validate(j) for j in jobs.get_all_jobs()]


@router.post("/jobs", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(body: JobCreate, jobs: JobService = Depends(get_job_service)) -> JobResponse:
    """Create a job and try to assign it. Always 201; the job stays pending if no vehicle qualifies."""
    if body.job_type == DELIVERY:
        details = None
        if body.delivery_details is not None:
            details = DeliveryDetails(**body.delivery_details.model_dump())
        job = jobs.create_delivery_job(
            body.customer_id,
            body.region,
            body.pickup_lat,
            body.pickup_lng,
            body.destination_lat,
            body.destination_lng,
            details,
        )
    else:
        job = jobs.create_ride_job(
            body.customer_id,
            body.region,
            body.pickup_lat,
            body.pickup_lng,
            body.destination_lat,
            body.destination_lng,
        )
    return JobResponse.model_validate(job)


@router.get("/jobs/active-count", response_model=ActiveJobCount)
def active_job_count(jobs: JobService = Depends(get_job_service)) -> ActiveJobCount:
    return ActiveJobCount(active_jobs=jobs.get_active_job_count())


@router.post("/jobs/process-pending", response_model=ProcessPendingResponse)
def process_pending_jobs(jobs: JobService = Depends(get_job_service)) -> ProcessPendingResponse:
    """Run one pending-job sweep now."""
    return ProcessPendingResponse(assigned=jobs.process_pending_jobs())


@router.get("/jobs/status/{job_status}", response_model=list[JobResponse])
def list_jobs_by_status(job_status: str, jobs: JobService = Depends(get_job_service)) -> list[JobResponse]:
    if job_status not in JOB_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown job status '{job_status}'")
    return [JobResponse.model_validate(j) for j in jobs.get_jobs_by_status(job_status)]


@router.get("/jobs/vehicle/{vehicle_id}", response_model=list[JobResponse])
def list_jobs_for_vehicle(vehicle_id: str, jobs: JobService = Depends(get_job_service)) -> list[JobResponse]:
    """Jobs assigned to a vehicle; polled by the simulator."""
    return [JobResponse.model_validate(j) for j in jobs.get_jobs_by_vehicle(vehicle_id)]


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: str, jobs: JobService = Depends(get_job_service)) -> JobResponse:
    try:
        return JobResponse.model_validate(jobs.get_job(job_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("/jobs/{job_id}/complete", response_model=JobResponse)
def complete_job(job_id: str, jobs: JobService = Depends(get_job_service)) -> JobResponse:
    """Complete an assigned or in-progress job. 409 from any other status."""
    try:
        return JobResponse.model_validate(jobs.complete_job(job_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.get("/revenue", response_model=RevenueResponse)
def revenue(jobs: JobService = Depends(get_job_service)) -> RevenueResponse:
    return RevenueResponse(**jobs.get_revenue())
