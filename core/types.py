from enum import Enum
from typing import NewType

# IDs
VehicleID = NewType("VehicleID", str)
ZoneName = NewType("ZoneName", str)
PoiName = NewType("PoiName", str)


class PositionSource(str, Enum):
    """Where a position report originated."""

    DEVICE = "device"
    SIMULATOR = "simulator"
    DRAG = "drag"
    GEOLOCATION = "geolocation"


class ProximityEventType(str, Enum):
    """Kinds of notification-worthy proximity events."""

    ZONE_ENTRY = "zone-entry"
    POI_ARRIVAL = "poi-arrival"


class DispatchStatus(str, Enum):
    """Result of a single notification dispatch attempt."""

    SENT = "SENT"
    COOLDOWN = "COOLDOWN"
    NO_RECIPIENTS = "NO_RECIPIENTS"
    DIRECTORY_ERROR = "DIRECTORY_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
