"""Road distance between a collection site and a warehouse.

Reads an already-fetched OSRM ``route`` response when one is available and
otherwise estimates road distance from the straight-line distance. No
network calls are made here.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from itad.config import cfg

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

LatLng = tuple[float, float]


@dataclass(slots=True, frozen=True)
class RoadDistance:
    """Road distance in kilometres.

    Attributes:
        km: Distance in kilometres.
        estimated: True when derived from straight-line distance.
    """

    km: float
    estimated: bool

    def doubled(self) -> "RoadDistance":
        return RoadDistance(km=self.km * 2, estimated=self.estimated)

    def to_dict(self) -> dict[str, Any]:
        return {"distance_km": round(self.km, 3), "estimated": self.estimated}


def haversine_km(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two (lat, lng) points in kilometres."""
    lat1, lng1 = map(math.radians, a)
    lat2, lng2 = map(math.radians, b)
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def parse_osrm_distance_km(payload: dict[str, Any] | None) -> float | None:
    """Extract the first route's distance from an OSRM response.

    Args:
        payload: Decoded OSRM ``/route/v1/driving`` JSON.

    Returns:
        Distance in kilometres, or None if the response has no usable route.
    """
    if not payload or payload.get("code") != "Ok":
        return None
    routes = payload.get("routes") or []
    if not routes:
        return None
    try:
        meters = float(routes[0]["distance"])
    except (KeyError, TypeError, ValueError):
        return None
    if meters < 0:
        return None
    return meters / 1000


def road_distance(
    origin: LatLng,
    destination: LatLng,
    osrm_payload: dict[str, Any] | None = None,
    factor: float | None = None,
) -> RoadDistance:
    """One-way road distance, preferring the routing provider's answer.

    Args:
        origin: (lat, lng) of the collection site.
        destination: (lat, lng) of the warehouse.
        osrm_payload: OSRM response for this pair, if one was fetched.
        factor: Straight-line to road multiplier for the fallback.

    Returns:
        RoadDistance, marked as estimated when the fallback was used.
    """
    km = parse_osrm_distance_km(osrm_payload)
    if km is not None:
        return RoadDistance(km=km, estimated=False)

    factor = cfg.road_distance_factor if factor is None else factor
    straight = haversine_km(origin, destination)
    estimate = straight * factor
    logger.warning(
        f"Routing unavailable, using estimated road distance ({estimate:.2f}km) "
        f"based on straight-line distance ({straight:.2f}km)"
    )
    return RoadDistance(km=estimate, estimated=True)


def round_trip_distance(
    origin: LatLng,
    destination: LatLng,
    osrm_payload: dict[str, Any] | None = None,
) -> RoadDistance:
    """Round trip from collection site to warehouse and back."""
    return road_distance(origin, destination, osrm_payload).doubled()
