from enum import Enum, auto


class TrackingStatus(Enum):
    INACTIVE = auto()
    ACTIVE = auto()


class LoadTransition(Enum):
    NONE = auto()
    FULL = auto()
    ROUND_TRIP = auto()
