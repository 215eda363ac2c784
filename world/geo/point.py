"""Point-of-interest markers and great-circle distance."""

import math
from dataclasses import dataclass

from core.types import PoiName, ZoneName

EARTH_RADIUS_M: float = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance in meters between two coordinates."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlam = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True)
class PointOfInterest:
    """A named fixed location (typically a street) inside a zone."""

    name: PoiName
    zone: ZoneName
    lat: float
    lon: float

    def distance_to(self, lat: float, lon: float) -> float:
        return haversine_m(lat, lon, self.lat, self.lon)


@dataclass(frozen=True)
class NearestPoint:
    """Result of a nearest-point query."""

    point: PointOfInterest
    distance_m: float
