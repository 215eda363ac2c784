"""Turn proximity events into batched SMS commands, with per-key cooldown."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from core.messages import SmsCommand
from core.types import DispatchStatus, ProximityEventType
from world.tracking.proximity import ProximityEvent

from .directory import UserDirectory
from .phones import normalize_phones
from .transport import DEFAULT_SMS_TOPIC, MessageTransport

DEFAULT_COOLDOWN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def format_message(zone_name: str, poi_name: str | None = None) -> str:
    """Human-readable notification text naming the zone and, if known, the street."""
    if poi_name:
        return f"Truck is in Brgy {zone_name}, Street: {poi_name}"
    return f"Truck is in Brgy {zone_name}"


def cooldown_key(event: ProximityEvent) -> str:
    if event.type == ProximityEventType.POI_ARRIVAL:
        return f"poi:{event.zone_name}:{event.poi_name}"
    return f"zone:{event.zone_name}"


@dataclass(frozen=True)
class DispatchOutcome:
    """What happened to one dispatch attempt."""

    status: DispatchStatus
    key: str
    recipients: tuple[str, ...] = ()
    message: str | None = None
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.status == DispatchStatus.SENT


@dataclass
class NotificationDispatcher:
    """Rate-limited notification sender.

    Each event maps to a cooldown key; a key fires at most once per
    ``cooldown`` window. The key is reserved while its dispatch awaits the
    directory and the transport, so concurrent reports cannot double-send.
    Directory and transport failures are logged and reported in the outcome,
    never raised.
    """

    directory: UserDirectory
    transport: MessageTransport
    topic: str = DEFAULT_SMS_TOPIC
    cooldown: timedelta = DEFAULT_COOLDOWN
    clock: Callable[[], datetime] = _utcnow
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    _last_fired: dict[str, datetime] = field(default_factory=dict, init=False)
    _in_flight: set[str] = field(default_factory=set, init=False)

    def last_fired(self, key: str) -> datetime | None:
        return self._last_fired.get(key)

    def is_cooling_down(self, key: str, now: datetime | None = None) -> bool:
        if key in self._in_flight:
            return True
        last = self._last_fired.get(key)
        if last is None:
            return False
        return (now or self.clock()) - last < self.cooldown

    async def dispatch(self, event: ProximityEvent) -> DispatchOutcome:
        """Send a notification for one event unless its key is cooling down."""
        return await self._dispatch(event, extra_keys=())

    async def dispatch_all(self, events: list[ProximityEvent]) -> list[DispatchOutcome]:
        """Dispatch the events produced by one position evaluation.

        A zone entry and a point-of-interest arrival in the same zone are sent
        as one message naming both; the zone key is stamped along with the
        point key, and both stay reserved until the send completes. If either key
        is cooling down the events go out separately.
        """
        zone_entries = {
            e.zone_name: e for e in events if e.type == ProximityEventType.ZONE_ENTRY
        }
        outcomes: list[DispatchOutcome] = []

        for event in events:
            if event.type != ProximityEventType.POI_ARRIVAL:
                continue
            companion = zone_entries.get(event.zone_name)
            extra: tuple[str, ...] = ()
            if companion is not None and not self.is_cooling_down(cooldown_key(companion)):
                extra = (cooldown_key(companion),)
            outcome = await self._dispatch(event, extra_keys=extra)
            outcomes.append(outcome)
            if extra and outcome.status != DispatchStatus.COOLDOWN:
                zone_entries.pop(event.zone_name, None)

        for event in zone_entries.values():
            outcomes.append(await self._dispatch(event, extra_keys=()))
        return outcomes

    async def _dispatch(self, event: ProximityEvent, extra_keys: tuple[str, ...]) -> DispatchOutcome:
        key = cooldown_key(event)
        now = self.clock()
        if self.is_cooling_down(key, now):
            self.logger.debug(f"Notification for {key} on cooldown")
            return DispatchOutcome(status=DispatchStatus.COOLDOWN, key=key)

        reserved = (key, *extra_keys)
        self._in_flight.update(reserved)
        try:
            try:
                raw_numbers = await self.directory.lookup_phones_by_zone(event.zone_name)
            except Exception as e:
                self.logger.error(f"Directory lookup failed for zone {event.zone_name}: {e}")
                return DispatchOutcome(status=DispatchStatus.DIRECTORY_ERROR, key=key, error=str(e))

            recipients = tuple(normalize_phones(raw_numbers))
            if not recipients:
                self.logger.info(f"No valid phone numbers for zone {event.zone_name}")
                return DispatchOutcome(status=DispatchStatus.NO_RECIPIENTS, key=key)

            message = format_message(event.zone_name, event.poi_name)
            command = SmsCommand(message=message, recipients=recipients)
            status = DispatchStatus.SENT
            error: str | None = None
            try:
                await self.transport.publish(self.topic, command.to_payload())
                self.logger.info(
                    f"Sent notification {key} to {len(recipients)} recipients in {event.zone_name}"
                )
            except Exception as e:
                self.logger.error(f"Failed to publish notification {key}: {e}")
                status = DispatchStatus.TRANSPORT_ERROR
                error = str(e)

            for stamped in (key, *extra_keys):
                self._last_fired[stamped] = now
            return DispatchOutcome(
                status=status, key=key, recipients=recipients, message=message, error=error
            )
        finally:
            self._in_flight.difference_update(reserved)
