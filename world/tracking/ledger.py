"""Last-known-position store keyed by vehicle."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from core.types import PositionSource, VehicleID


@dataclass(frozen=True)
class VehiclePosition:
    vehicle_id: VehicleID
    lat: float
    lon: float
    source: PositionSource
    timestamp: datetime
    driver_id: str | None = None
    trip_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "vehicle_id": self.vehicle_id,
            "lat": self.lat,
            "lon": self.lon,
            "source": self.source.value,
            "timestamp": self.timestamp.isoformat(),
            "driver_id": self.driver_id,
            "trip_id": self.trip_id,
        }


def _is_coordinate(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class LocationLedger:
    """Authoritative last-known position per vehicle.

    Each report replaces the previous entry for its vehicle; no history is
    kept. Entries are never removed while the process runs.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._positions: dict[VehicleID, VehiclePosition] = {}

    def record(
        self,
        vehicle_id: str,
        lat: Any,
        lon: Any,
        source: PositionSource,
        now: datetime,
        driver_id: str | None = None,
        trip_id: str | None = None,
    ) -> VehiclePosition | None:
        """Store a position report, replacing any prior entry for the vehicle.

        Invalid reports (empty vehicle id, missing or non-numeric coordinates)
        are logged and ignored.

        Returns:
            The stored position, or None if the report was rejected
        """
        if not vehicle_id or not isinstance(vehicle_id, str):
            self.logger.warning(f"Rejected position report without vehicle id: {vehicle_id!r}")
            return None
        if not _is_coordinate(lat) or not _is_coordinate(lon):
            self.logger.warning(
                f"Rejected position report for {vehicle_id}: invalid coordinates lat={lat!r} lon={lon!r}"
            )
            return None

        position = VehiclePosition(
            vehicle_id=VehicleID(vehicle_id),
            lat=float(lat),
            lon=float(lon),
            source=source,
            timestamp=now,
            driver_id=driver_id,
            trip_id=trip_id,
        )
        self._positions[position.vehicle_id] = position
        self.logger.debug(
            f"Stored location for {vehicle_id}: lat={position.lat}, lon={position.lon}, source={source.value}"
        )
        return position

    def get(self, vehicle_id: str) -> VehiclePosition | None:
        return self._positions.get(VehicleID(vehicle_id))

    def all(self) -> list[VehiclePosition]:
        return list(self._positions.values())

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._positions
