"""Handlers for driver-originated status and load events."""

from world.events.inbound import LoadUpdate, ScheduleUpdate, TrackingStarted, TrackingStopped
from world.events.signals import create_schedule_updated_signal

from .base import HandlerContext, broadcast_all


class DriverEventHandler:
    """Feeds the truck state machine and broadcasts the resulting signals to all clients."""

    @staticmethod
    async def handle_tracking_started(event: TrackingStarted, context: HandlerContext) -> None:
        await broadcast_all(context, context.state.fleet.tracking_started(event.vehicle_id))

    @staticmethod
    async def handle_tracking_stopped(event: TrackingStopped, context: HandlerContext) -> None:
        await broadcast_all(context, context.state.fleet.tracking_stopped(event.vehicle_id))

    @staticmethod
    async def handle_load_update(event: LoadUpdate, context: HandlerContext) -> None:
        await broadcast_all(
            context, context.state.fleet.load_update(event.vehicle_id, event.percent_full)
        )


class ScheduleEventHandler:
    """Relays schedule changes so other viewers refresh their schedule."""

    @staticmethod
    async def handle_update(event: ScheduleUpdate, context: HandlerContext) -> None:
        context.logger.info("schedule.update received, broadcasting...")
        await context.broadcaster.broadcast(
            create_schedule_updated_signal(dict(event.model_extra or {})),
            exclude=context.connection_id,
        )
