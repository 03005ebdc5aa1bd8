"""Async HTTP clients the simulator uses to talk to the fleet and job endpoints."""
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from errors import AlreadyExistsError, InvalidStateError, NotFoundError, ServiceError, ServiceTimeoutError

LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


@dataclass
class AssignedJob:
    """The simulator's working copy of a job it has been given."""

    id: str
    job_type: str
    status: str
    pickup_lat: float
    pickup_lng: float
    destination_lat: float
    destination_lng: float

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "AssignedJob":
        return cls(
            id=data["id"],
            job_type=data.get("job_type", ""),
            status=data["status"],
            pickup_lat=float(data["pickup_lat"]),
            pickup_lng=float(data["pickup_lng"]),
            destination_lat=float(data["destination_lat"]),
            destination_lng=float(data["destination_lng"]),
        )


class _ServiceClient:
    """Shared request handling: maps timeouts and HTTP statuses onto the fleet error classes."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def _request(
        self, method: str, path: str, *, conflict_error: type = InvalidStateError, **kwargs: Any
    ) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ServiceTimeoutError(f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise ServiceError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404:
            raise NotFoundError(f"{method} {path}: {_detail(resp)}")
        if resp.status_code == 409:
            raise conflict_error(f"{method} {path}: {_detail(resp)}")
        if resp.status_code >= 400:
            raise ServiceError(f"{method} {path} returned {resp.status_code}: {_detail(resp)}")
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()


def _detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


class FleetServiceClient(_ServiceClient):
    """Vehicle registration and position reports."""

    async def register_vehicle(self, vehicle: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request("POST", "/vehicles", json=vehicle, conflict_error=AlreadyExistsError)
        return resp.json()

    async def report_location(
        self,
        vehicle_id: str,
        lat: float,
        lng: float,
        status: str,
        battery_level: Optional[float] = None,
        job_id: Optional[str] = None,
    ) -> None:
        body: dict[str, Any] = {"lat": lat, "lng": lng, "status": status}
        if battery_level is not None:
            body["battery_level"] = battery_level
        if job_id is not None:
            body["current_job_id"] = job_id
        await self._request("PUT", f"/vehicles/{vehicle_id}/location", json=body)


class JobServiceClient(_ServiceClient):
    """Assigned-job polling and completion."""

    async def get_assigned_jobs(self, vehicle_id: str) -> list[AssignedJob]:
        resp = await self._request("GET", f"/jobs/vehicle/{vehicle_id}")
        return [AssignedJob.from_json(item) for item in resp.json()]

    async def complete_job(self, job_id: str) -> None:
        await self._request("POST", f"/jobs/{job_id}/complete")
