"""Polygonal service zones used for geofencing and recipient grouping."""

from dataclasses import dataclass, field

from shapely.geometry import Point, Polygon

from core.exceptions import GeoDataError
from core.types import ZoneName

LatLon = tuple[float, float]


def close_ring(ring: list[LatLon]) -> list[LatLon]:
    """Return the ring with its first vertex repeated at the end if missing."""
    if ring and ring[0] != ring[-1]:
        return [*ring, ring[0]]
    return list(ring)


@dataclass(frozen=True)
class Zone:
    """A named polygon (e.g. a barangay) with an implicitly closed boundary.

    The ring is stored as (lat, lon) pairs. Construction closes the ring and
    rejects boundaries with fewer than 3 distinct vertices.
    """

    name: ZoneName
    ring: tuple[LatLon, ...]
    color: str | None = None
    _polygon: Polygon = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(set(self.ring)) < 3:
            raise GeoDataError(
                f"Zone {self.name!r} needs at least 3 distinct vertices, got {len(set(self.ring))}"
            )
        closed = tuple(close_ring(list(self.ring)))
        object.__setattr__(self, "ring", closed)
        # shapely works in (x, y) = (lon, lat)
        object.__setattr__(self, "_polygon", Polygon([(lon, lat) for lat, lon in closed]))

    def contains(self, lat: float, lon: float) -> bool:
        """Check whether the point lies inside or on the boundary of the zone."""
        return bool(self._polygon.covers(Point(lon, lat)))
