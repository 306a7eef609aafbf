"""Geographic utilities: Haversine distance and bounding-box membership."""

from __future__ import annotations

import math
from dataclasses import dataclass

from quake_intel.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class BoundingBox:
    """A latitude/longitude rectangle.

    ``lon_min > lon_max`` describes a box that crosses the antimeridian,
    e.g. ``lon_min=170, lon_max=-170`` spans the 20 degrees around 180.
    """

    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.lon_min > self.lon_max


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance in km between two points on Earth."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(min(a, 1.0)))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, symmetric in its arguments."""
    return haversine(a.latitude, a.longitude, b.latitude, b.longitude)


def wrap_longitude(lon: float) -> float:
    """Normalise a longitude in degrees into [-180, 180]."""
    if -180.0 <= lon <= 180.0:
        return lon
    wrapped = (lon + 180.0) % 360.0 - 180.0
    # 180 and -180 are the same meridian; keep the sign of the input
    if wrapped == -180.0 and lon > 0:
        return 180.0
    return wrapped


def in_bounding_box(point: GeoPoint, box: BoundingBox) -> bool:
    """Test whether *point* lies inside *box* (edges inclusive).

    Ordinary boxes require ``lon_min <= lon <= lon_max``. When the box
    crosses the antimeridian (``lon_min > lon_max``) the longitude range
    is the union of ``[lon_min, 180]`` and ``[-180, lon_max]``, so the
    test becomes ``lon >= lon_min or lon <= lon_max``.
    """
    if not box.lat_min <= point.latitude <= box.lat_max:
        return False
    lon = wrap_longitude(point.longitude)
    if box.crosses_antimeridian:
        return lon >= box.lon_min or lon <= box.lon_max
    return box.lon_min <= lon <= box.lon_max
