"""Inbound client events, validated at the connection boundary."""

import math
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from core.types import PositionSource


class EventType(str, Enum):
    """Canonical inbound event identifiers ('<domain>.<event>')."""

    POSITION_REPORT = "position.report"
    TRACKING_STARTED = "tracking.started"
    TRACKING_STOPPED = "tracking.stopped"
    LOAD_UPDATE = "load.update"
    SCHEDULE_UPDATE = "schedule.update"


# Event names used by the legacy browser clients
LEGACY_EVENT_NAMES: dict[str, EventType] = {
    "update-location": EventType.POSITION_REPORT,
    "driver:tracking_started": EventType.TRACKING_STARTED,
    "driver:tracking_stopped": EventType.TRACKING_STOPPED,
    "driver:load_update": EventType.LOAD_UPDATE,
    "schedule-update": EventType.SCHEDULE_UPDATE,
}


class _VehicleEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vehicle_id: str = Field(
        min_length=1, validation_alias=AliasChoices("vehicle_id", "vehicleId", "truckId")
    )

    @field_validator("vehicle_id")
    @classmethod
    def _strip_vehicle_id(cls, value: str) -> str:
        vehicle_id = value.strip()
        if not vehicle_id:
            raise ValueError("vehicle_id must be non-empty")
        return vehicle_id


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    return value


class PositionReport(_VehicleEvent):
    event: Literal["position.report"] = "position.report"
    lat: float = Field(ge=-90, le=90, validation_alias=AliasChoices("lat", "latitude"))
    lon: float = Field(ge=-180, le=180, validation_alias=AliasChoices("lon", "lng", "longitude"))
    source: PositionSource = PositionSource.DEVICE
    driver_id: str | None = Field(default=None, validation_alias=AliasChoices("driver_id", "driverId"))
    trip_id: str | None = Field(default=None, validation_alias=AliasChoices("trip_id", "tripId"))
    # Fields as the client sent them, re-broadcast untouched
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _keep_raw(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {**data, "raw": {k: v for k, v in data.items() if k not in ("event", "raw")}}
        return data

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _numeric_coordinate(cls, value: Any) -> Any:
        return _reject_bool(value)

    @field_validator("lat", "lon")
    @classmethod
    def _finite_coordinate(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinate must be finite")
        return value

    @field_validator("source", mode="before")
    @classmethod
    def _default_unknown_source(cls, value: Any) -> Any:
        if not isinstance(value, str) or value not in {s.value for s in PositionSource}:
            return PositionSource.DEVICE
        return value

    def broadcast_payload(self) -> dict[str, Any]:
        return dict(self.raw)


class TrackingStarted(_VehicleEvent):
    event: Literal["tracking.started"] = "tracking.started"


class TrackingStopped(_VehicleEvent):
    event: Literal["tracking.stopped"] = "tracking.stopped"


class LoadUpdate(_VehicleEvent):
    event: Literal["load.update"] = "load.update"
    percent_full: float = Field(validation_alias=AliasChoices("percent_full", "percentFull"))
    timestamp: datetime | None = None

    @field_validator("percent_full", mode="before")
    @classmethod
    def _numeric_percent(cls, value: Any) -> Any:
        return _reject_bool(value)

    @field_validator("percent_full")
    @classmethod
    def _finite_percent(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("percent_full must be finite")
        return value


class ScheduleUpdate(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    event: Literal["schedule.update"] = "schedule.update"


InboundEvent = Annotated[
    PositionReport | TrackingStarted | TrackingStopped | LoadUpdate | ScheduleUpdate,
    Field(discriminator="event"),
]

_inbound_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


class EventParser:
    """Parser for validating raw client messages into typed events."""

    def parse(self, raw: Any) -> InboundEvent:
        """Parse and validate a raw message.

        Accepts ``{"event": "position.report", "data": {...}}`` as well as a
        flat object with the event fields next to ``event``. Legacy event
        names are mapped to their canonical form.

        Raises:
            ValueError: If the message is not an object or names no event
            ValidationError: If the event fields fail validation
        """
        if not isinstance(raw, dict):
            raise ValueError("Message must be a JSON object")
        if "event" not in raw:
            raise ValueError("Missing required field: 'event'")

        name = raw["event"]
        if isinstance(name, str) and name in LEGACY_EVENT_NAMES:
            name = LEGACY_EVENT_NAMES[name].value

        data = raw.get("data", {})
        if not isinstance(data, dict):
            raise ValueError("'data' must be a dictionary")

        fields = {k: v for k, v in raw.items() if k not in ("event", "data")}
        return _inbound_adapter.validate_python({**fields, **data, "event": name})
