"""Garbage truck operational state derived from driver events."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from core.fsm import LoadTransition, TrackingStatus
from core.types import VehicleID

MIN_FILL_PERCENT: float = 0.0
MAX_FILL_PERCENT: float = 100.0


def clamp_percent(percent: float) -> float:
    """Clamp a reported fill level into [0, 100]."""
    return max(MIN_FILL_PERCENT, min(MAX_FILL_PERCENT, float(percent)))


@dataclass
class Truck:
    """Per-vehicle tracking flag, fill level and round-trip counter.

    A round trip is one full-to-empty cycle: reaching 100 arms the counter and
    the next report of exactly 0 completes the trip, even when partial levels
    come in between. Starting cold at 0 or repeating 0 never counts.
    """

    vehicle_id: VehicleID
    tracking_active: bool = False
    fill_percent: float = 0.0
    round_trips: int = 0
    last_fill_update_at: datetime | None = None
    trip_started_at: datetime | None = None
    reached_full: bool = False

    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus.ACTIVE if self.tracking_active else TrackingStatus.INACTIVE

    @property
    def status_text(self) -> str:
        return "Active" if self.tracking_active else "Inactive"

    def start_tracking(self, now: datetime) -> None:
        self.tracking_active = True
        self.trip_started_at = now

    def stop_tracking(self) -> None:
        self.tracking_active = False
        self.trip_started_at = None

    def update_load(self, percent: float, now: datetime) -> LoadTransition:
        """Apply a load report and return the transition it caused.

        Args:
            percent: Reported fill level, clamped to [0, 100]
            now: Time of the update

        Returns:
            FULL when the truck reaches 100%, ROUND_TRIP on a full-to-empty
            edge, NONE otherwise
        """
        self.fill_percent = clamp_percent(percent)
        self.last_fill_update_at = now

        if self.fill_percent >= MAX_FILL_PERCENT:
            self.reached_full = True
            return LoadTransition.FULL
        if self.fill_percent == MIN_FILL_PERCENT and self.reached_full:
            self.reached_full = False
            self.round_trips += 1
            self.trip_started_at = now
            return LoadTransition.ROUND_TRIP
        return LoadTransition.NONE

    def serialize_full(self) -> dict[str, Any]:
        return {
            "vehicle_id": self.vehicle_id,
            "tracking_active": self.tracking_active,
            "status": self.status.name.lower(),
            "status_text": self.status_text,
            "fill_percent": self.fill_percent,
            "round_trips": self.round_trips,
            "last_fill_update_at": (
                self.last_fill_update_at.isoformat() if self.last_fill_update_at else None
            ),
            "trip_started_at": self.trip_started_at.isoformat() if self.trip_started_at else None,
        }
