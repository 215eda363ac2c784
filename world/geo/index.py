"""Static spatial lookup over points of interest and zones."""

import logging
from collections.abc import Iterable

from core.exceptions import GeoDataError
from core.types import ZoneName

from .point import NearestPoint, PointOfInterest
from .zone import LatLon, Zone


class GeoIndex:
    """Read-only index built once at startup.

    Both queries are linear scans in load order. Zones are assumed not to
    overlap; if they do, the first zone loaded wins.
    """

    def __init__(
        self,
        points: Iterable[PointOfInterest] = (),
        zones: Iterable[Zone] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._points: tuple[PointOfInterest, ...] = tuple(points)
        self._zones: tuple[Zone, ...] = tuple(zones)

    @classmethod
    def from_raw_zones(
        cls,
        points: Iterable[PointOfInterest],
        raw_zones: Iterable[tuple[str, list[LatLon], str | None]],
        logger: logging.Logger | None = None,
    ) -> "GeoIndex":
        """Build an index, skipping zones whose boundary is degenerate.

        Args:
            points: Points of interest in load order
            raw_zones: (name, ring, color) tuples in load order
            logger: Optional logger for skipped zones

        Returns:
            GeoIndex containing every valid zone
        """
        log = logger or logging.getLogger(__name__)
        zones: list[Zone] = []
        for name, ring, color in raw_zones:
            try:
                zones.append(Zone(name=ZoneName(name), ring=tuple(ring), color=color))
            except GeoDataError as e:
                log.warning(f"Skipping invalid zone {name!r}: {e}")
        return cls(points=points, zones=zones, logger=log)

    @property
    def points(self) -> tuple[PointOfInterest, ...]:
        return self._points

    @property
    def zones(self) -> tuple[Zone, ...]:
        return self._zones

    @property
    def is_empty(self) -> bool:
        return not self._points and not self._zones

    def point_count(self) -> int:
        return len(self._points)

    def zone_count(self) -> int:
        return len(self._zones)

    def nearest_point(self, lat: float, lon: float) -> NearestPoint | None:
        """Find the closest point of interest by great-circle distance.

        Ties keep the point that was loaded first.

        Returns:
            NearestPoint, or None if the index holds no points
        """
        best: NearestPoint | None = None
        for point in self._points:
            distance = point.distance_to(lat, lon)
            if best is None or distance < best.distance_m:
                best = NearestPoint(point=point, distance_m=distance)
        return best

    def containing_zone(self, lat: float, lon: float) -> ZoneName | None:
        """Return the name of the first zone containing the point, if any."""
        for zone in self._zones:
            if zone.contains(lat, lon):
                return zone.name
        return None
