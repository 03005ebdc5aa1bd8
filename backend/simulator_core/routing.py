"""Route planning for simulated vehicles: optional OSRM-compatible service, straight-line fallback."""
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from utils.geo import distance_km

LOG = logging.getLogger(__name__)

# Fallback route resolution and average city speed (~50 km/h).
STRAIGHT_LINE_SEGMENTS = 10
AVERAGE_SPEED_M_PER_S = 13.89


@dataclass
class RoutePoint:
    lat: float
    lng: float


@dataclass
class Route:
    """Ordered waypoints with total distance (m) and duration (s)."""

    points: list[RoutePoint] = field(default_factory=list)
    distance: float = 0.0
    duration: float = 0.0


def straight_line_route(start_lat: float, start_lng: float, end_lat: float, end_lng: float) -> Route:
    """Evenly spaced points from start to end inclusive (11 points)."""
    points = []
    for i in range(STRAIGHT_LINE_SEGMENTS + 1):
        ratio = i / STRAIGHT_LINE_SEGMENTS
        points.append(
            RoutePoint(
                lat=start_lat + (end_lat - start_lat) * ratio,
                lng=start_lng + (end_lng - start_lng) * ratio,
            )
        )
    distance_m = distance_km(start_lat, start_lng, end_lat, end_lng) * 1000
    return Route(points=points, distance=distance_m, duration=distance_m / AVERAGE_SPEED_M_PER_S)


def _parse_osrm_route(data: dict) -> Route:
    """First route of an OSRM response; GeoJSON coordinates are [lng, lat]."""
    if data.get("code") != "Ok" or not data.get("routes"):
        raise ValueError(f"no route in response (code={data.get('code')!r})")
    first = data["routes"][0]
    coordinates = first["geometry"]["coordinates"]
    if not coordinates:
        raise ValueError("route has no coordinates")
    points = [RoutePoint(lat=float(c[1]), lng=float(c[0])) for c in coordinates]
    return Route(points=points, distance=float(first["distance"]), duration=float(first["duration"]))


class RoutingService:
    """Returns a route for every request; any routing failure falls back to a straight line."""

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def get_route(self, start_lat: float, start_lng: float, end_lat: float, end_lng: float) -> Route:
        if not self.base_url:
            return straight_line_route(start_lat, start_lng, end_lat, end_lng)
        url = (
            f"{self.base_url}/route/v1/driving/"
            f"{start_lng},{start_lat};{end_lng},{end_lat}"
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url, params={"overview": "full", "geometries": "geojson"})
                resp.raise_for_status()
                return _parse_osrm_route(resp.json())
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            LOG.warning("Routing service failed, using straight line: %s", e)
            return straight_line_route(start_lat, start_lng, end_lat, end_lng)
