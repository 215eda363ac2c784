"""Inbound event models and outbound signal factories."""

from .inbound import (
    EventParser,
    EventType,
    InboundEvent,
    LoadUpdate,
    PositionReport,
    ScheduleUpdate,
    TrackingStarted,
    TrackingStopped,
)
from .signals import Signal, SignalType

__all__ = [
    "EventParser",
    "EventType",
    "InboundEvent",
    "LoadUpdate",
    "PositionReport",
    "ScheduleUpdate",
    "Signal",
    "SignalType",
    "TrackingStarted",
    "TrackingStopped",
]
