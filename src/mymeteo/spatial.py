"""Great-circle distance and nearest-station search."""

from __future__ import annotations

import math
from collections.abc import Iterable

from .exceptions import EmptyCatalogError
from .station import NearestStation, StationRecord

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres.

    Uses the Haversine formula on a sphere of radius 6371 km.  All arguments
    are in decimal degrees.

    Args:
        lat1: Latitude of point 1 (decimal degrees, north positive).
        lon1: Longitude of point 1 (decimal degrees, east positive).
        lat2: Latitude of point 2.
        lon2: Longitude of point 2.

    Returns:
        Distance in kilometres.
    """
    lat1_r = math.radians(lat1)
    lat2_r = math.radians(lat2)
    dlat = lat2_r - lat1_r
    dlon = math.radians(lon2 - lon1)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    # Floating-point noise can push a just past 1.0 for antipodal points.
    a = min(1.0, a)
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


def find_nearest(latitude: float, longitude: float, stations: Iterable[StationRecord]) -> NearestStation:
    """Return the station closest to ``(latitude, longitude)``.

    A linear scan in iteration order; on an exact distance tie the station
    seen first wins.

    Raises:
        EmptyCatalogError: If *stations* is empty.
    """
    best: NearestStation | None = None
    for station in stations:
        dist = haversine_km(latitude, longitude, station.latitude, station.longitude)
        if best is None or dist < best.distance_km:
            best = NearestStation(station=station, distance_km=dist)
    if best is None:
        raise EmptyCatalogError()
    return best
