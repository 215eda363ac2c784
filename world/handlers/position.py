"""Handler for position reports."""

from world.events.inbound import PositionReport
from world.events.signals import create_position_broadcast_signal

from .base import HandlerContext


class PositionEventHandler:
    """Ledger write, proximity evaluation, notification and re-broadcast."""

    @staticmethod
    async def handle_report(event: PositionReport, context: HandlerContext) -> None:
        """Handle a position report.

        The report is stored, evaluated for proximity events, and re-broadcast
        to every client except the sender. Notifications are dispatched in a
        background task so slow directory or transport calls never hold up
        other reports.
        """
        state = context.state
        position = state.ledger.record(
            event.vehicle_id,
            event.lat,
            event.lon,
            event.source,
            state.clock(),
            driver_id=event.driver_id,
            trip_id=event.trip_id,
        )
        if position is None:
            return

        proximity_events = state.proximity.evaluate(position.vehicle_id, position.lat, position.lon)
        if proximity_events:
            context.spawn(state.dispatcher.dispatch_all(proximity_events))

        await context.broadcaster.broadcast(
            create_position_broadcast_signal(event.broadcast_payload()),
            exclude=context.connection_id,
        )
