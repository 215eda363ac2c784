"""Rough arrival estimate towards the nearest point of interest."""

from dataclasses import dataclass
from typing import Any

from core.exceptions import GeoDataError
from world.geo.index import GeoIndex

from .ledger import LocationLedger

# Trucks crawl street by street while collecting
DEFAULT_PACE_M_PER_MIN: float = 11.1
DEFAULT_ARRIVAL_RADIUS_M: float = 15.0


@dataclass(frozen=True)
class EtaEstimate:
    vehicle_id: str
    eta_minutes: int
    next_stop: str
    distance_m: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "vehicle_id": self.vehicle_id,
            "eta_minutes": self.eta_minutes,
            "next_stop": self.next_stop,
            "distance_m": round(self.distance_m, 1),
        }


def estimate_eta(
    ledger: LocationLedger,
    geo_index: GeoIndex,
    vehicle_id: str,
    pace_m_per_min: float = DEFAULT_PACE_M_PER_MIN,
    arrival_radius_m: float = DEFAULT_ARRIVAL_RADIUS_M,
) -> EtaEstimate | None:
    """Estimate minutes until the vehicle reaches its nearest point of interest.

    Returns:
        EtaEstimate, or None if the vehicle has never reported a position

    Raises:
        GeoDataError: If no points of interest are loaded
    """
    position = ledger.get(vehicle_id)
    if position is None:
        return None

    nearest = geo_index.nearest_point(position.lat, position.lon)
    if nearest is None:
        raise GeoDataError("Street markers not loaded")

    if nearest.distance_m <= arrival_radius_m:
        eta_minutes = 0
    else:
        eta_minutes = round(nearest.distance_m / pace_m_per_min)
    return EtaEstimate(
        vehicle_id=vehicle_id,
        eta_minutes=eta_minutes,
        next_stop=nearest.point.name,
        distance_m=nearest.distance_m,
    )
