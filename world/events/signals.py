"""Outbound signals emitted to connected clients."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SignalType(str, Enum):
    """Canonical signal identifiers following the '<domain>.<signal>' protocol."""

    POSITION_BROADCAST = "position.broadcast"
    TRUCK_STATUS = "truck.status"
    TRUCK_ROUND_TRIP = "truck.round_trip"
    TRUCK_FULL = "truck.full"
    SCHEDULE_UPDATED = "schedule.updated"
    FLEET_SNAPSHOT = "fleet.snapshot"
    ERROR = "error"


class Signal(BaseModel):
    """Signal emitted from the server to clients.

    Signals follow the format: {"signal": "domain.signal", "data": {...}}.
    """

    signal: str
    data: dict[str, Any] = Field(default_factory=dict)

    def model_dump(self, **_kwargs: Any) -> dict[str, Any]:
        """Override model_dump to ensure consistent format."""
        return {"signal": self.signal, "data": self.data}


def create_position_broadcast_signal(report: dict[str, Any]) -> Signal:
    """Re-emit a position report for live map rendering."""
    return Signal(signal=SignalType.POSITION_BROADCAST.value, data=dict(report))


def create_truck_status_signal(
    vehicle_id: str, status_text: str | None = None, percent_full: float | None = None
) -> Signal:
    """Create a truck status signal; only the fields that changed are included."""
    data: dict[str, Any] = {"vehicle_id": vehicle_id}
    if status_text is not None:
        data["status_text"] = status_text
    if percent_full is not None:
        data["percent_full"] = percent_full
    return Signal(signal=SignalType.TRUCK_STATUS.value, data=data)


def create_round_trip_signal(vehicle_id: str, count: int) -> Signal:
    return Signal(
        signal=SignalType.TRUCK_ROUND_TRIP.value, data={"vehicle_id": vehicle_id, "count": count}
    )


def create_truck_full_signal(vehicle_id: str) -> Signal:
    return Signal(
        signal=SignalType.TRUCK_FULL.value, data={"vehicle_id": vehicle_id, "percent_full": 100}
    )


def create_schedule_updated_signal(data: dict[str, Any] | None = None) -> Signal:
    return Signal(signal=SignalType.SCHEDULE_UPDATED.value, data=data or {})


def create_fleet_snapshot_signal(
    positions: list[dict[str, Any]], trucks: list[dict[str, Any]]
) -> Signal:
    """Create the snapshot sent to a newly connected client."""
    return Signal(
        signal=SignalType.FLEET_SNAPSHOT.value,
        data={"positions": positions, "trucks": trucks},
    )


def create_error_signal(error_message: str, code: str = "GENERIC_ERROR") -> Signal:
    """Create an error signal: {"signal": "error", "data": {"code": ..., "message": ...}}."""
    return Signal(signal=SignalType.ERROR.value, data={"code": code, "message": error_message})
