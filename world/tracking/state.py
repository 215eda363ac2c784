"""Explicit container for the process's live tracking state."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from agents.fleet import TruckFleet
from world.geo.index import GeoIndex
from world.notify.directory import UserDirectory
from world.notify.dispatcher import DEFAULT_COOLDOWN, NotificationDispatcher
from world.notify.transport import DEFAULT_SMS_TOPIC, MessageTransport

from .ledger import LocationLedger
from .proximity import DEFAULT_POI_THRESHOLD_M, ProximityEngine


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class TrackingState:
    """Everything the event handlers read and mutate.

    Nothing here is persisted; a restart starts from an empty ledger, empty
    cooldowns and a fleet with zero round trips.
    """

    geo_index: GeoIndex
    ledger: LocationLedger
    proximity: ProximityEngine
    fleet: TruckFleet
    dispatcher: NotificationDispatcher
    clock: Callable[[], datetime] = field(default=_utcnow)

    @classmethod
    def create(
        cls,
        geo_index: GeoIndex,
        directory: UserDirectory,
        transport: MessageTransport,
        topic: str = DEFAULT_SMS_TOPIC,
        cooldown: timedelta = DEFAULT_COOLDOWN,
        poi_threshold_m: float = DEFAULT_POI_THRESHOLD_M,
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> "TrackingState":
        """Wire up a fresh state around a loaded geo index and I/O adapters."""
        log = logger or logging.getLogger(__name__)
        return cls(
            geo_index=geo_index,
            ledger=LocationLedger(logger=log),
            proximity=ProximityEngine(geo_index=geo_index, poi_threshold_m=poi_threshold_m, logger=log),
            fleet=TruckFleet(clock=clock, logger=log),
            dispatcher=NotificationDispatcher(
                directory=directory,
                transport=transport,
                topic=topic,
                cooldown=cooldown,
                clock=clock,
                logger=log,
            ),
            clock=clock,
        )
