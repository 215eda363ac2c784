"""Base types for inbound event handlers."""

import logging
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Protocol

from world.events.signals import Signal
from world.tracking.state import TrackingState


class Broadcaster(Protocol):
    """Delivers signals to connected clients."""

    async def broadcast(self, signal: Signal, exclude: str | None = None) -> None: ...


Spawner = Callable[[Coroutine[Any, Any, Any]], Any]


@dataclass
class HandlerContext:
    """Context passed to event handlers containing required dependencies."""

    state: TrackingState
    broadcaster: Broadcaster
    spawn: Spawner
    logger: logging.Logger
    connection_id: str | None = None


EventHandler = Callable[[Any, HandlerContext], Awaitable[None]]


async def broadcast_all(context: HandlerContext, signals: list[Signal]) -> None:
    """Broadcast signals to every client, including the sender, in order."""
    for signal in signals:
        await context.broadcaster.broadcast(signal)
