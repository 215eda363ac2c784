"""Exception hierarchy for the tracking core."""


class TrackerError(Exception):
    """Base exception for all tracking core errors."""


class GeoDataError(TrackerError):
    """Zone or point-of-interest data is missing or malformed."""


class DirectoryError(TrackerError):
    """The user directory could not be queried."""

    def __init__(self, message: str, *, zone: str = "") -> None:
        self.zone = zone
        super().__init__(message)


class TransportError(TrackerError):
    """The outbound message transport rejected or dropped a publish."""

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)
