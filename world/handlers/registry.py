"""Registry for mapping inbound event identifiers to handler functions."""

from world.events.inbound import EventType

from .base import EventHandler
from .driver import DriverEventHandler, ScheduleEventHandler
from .position import PositionEventHandler


class EventRegistry:
    """Registry for mapping event identifiers to handler functions."""

    def __init__(self) -> None:
        """Initialize the registry with all event handlers."""
        self._handlers: dict[str, EventHandler] = {}
        self._register_all()

    def _register_all(self) -> None:
        """Register all event handlers."""
        self.register(EventType.POSITION_REPORT, PositionEventHandler.handle_report)

        self.register(EventType.TRACKING_STARTED, DriverEventHandler.handle_tracking_started)
        self.register(EventType.TRACKING_STOPPED, DriverEventHandler.handle_tracking_stopped)
        self.register(EventType.LOAD_UPDATE, DriverEventHandler.handle_load_update)

        self.register(EventType.SCHEDULE_UPDATE, ScheduleEventHandler.handle_update)

    def register(self, event: EventType | str, handler: EventHandler) -> None:
        """Register a handler for an event.

        Args:
            event: Event identifier (`EventType` or `<domain>.<event>` string)
            handler: Coroutine function taking (event, context)
        """
        key = event.value if isinstance(event, EventType) else event
        self._handlers[key] = handler

    def get_handler(self, event: EventType | str) -> EventHandler | None:
        key = event.value if isinstance(event, EventType) else event
        return self._handlers.get(key)

    def has_handler(self, event: EventType | str) -> bool:
        key = event.value if isinstance(event, EventType) else event
        return key in self._handlers


def create_default_registry() -> EventRegistry:
    """Create and return a default event registry with all handlers registered."""
    return EventRegistry()
