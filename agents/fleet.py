"""Registry of truck state machines and fleet-wide aggregates."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from core.fsm import LoadTransition
from core.types import VehicleID
from world.events.signals import (
    Signal,
    create_round_trip_signal,
    create_truck_full_signal,
    create_truck_status_signal,
)

from .transports.truck import Truck


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TruckFleet:
    """Holds one Truck per vehicle id, created on first status or load event.

    The event methods mutate state and return the signals that should be
    broadcast to every connected client, in order.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._trucks: dict[VehicleID, Truck] = {}

    def _truck(self, vehicle_id: str) -> Truck:
        vid = VehicleID(vehicle_id)
        truck = self._trucks.get(vid)
        if truck is None:
            truck = Truck(vehicle_id=vid)
            self._trucks[vid] = truck
        return truck

    def tracking_started(self, vehicle_id: str) -> list[Signal]:
        truck = self._truck(vehicle_id)
        truck.start_tracking(self._clock())
        self.logger.info(f"Truck {vehicle_id} started tracking")
        signals = [
            create_truck_status_signal(
                vehicle_id, status_text=truck.status_text, percent_full=truck.fill_percent
            )
        ]
        if truck.round_trips:
            signals.append(create_round_trip_signal(vehicle_id, truck.round_trips))
        return signals

    def tracking_stopped(self, vehicle_id: str) -> list[Signal]:
        truck = self._truck(vehicle_id)
        truck.stop_tracking()
        self.logger.info(f"Truck {vehicle_id} stopped tracking")
        return [create_truck_status_signal(vehicle_id, status_text=truck.status_text)]

    def load_update(self, vehicle_id: str, percent: float) -> list[Signal]:
        truck = self._truck(vehicle_id)
        transition = truck.update_load(percent, self._clock())
        self.logger.info(f"Load update for {vehicle_id}: {truck.fill_percent}%")

        signals = [create_truck_status_signal(vehicle_id, percent_full=truck.fill_percent)]
        if transition == LoadTransition.FULL:
            signals.append(create_truck_full_signal(vehicle_id))
        elif transition == LoadTransition.ROUND_TRIP:
            self.logger.info(f"Incremented round trips for {vehicle_id} to {truck.round_trips}")
            signals.append(create_round_trip_signal(vehicle_id, truck.round_trips))
        return signals

    def stats_of(self, vehicle_id: str) -> Truck | None:
        return self._trucks.get(VehicleID(vehicle_id))

    def all(self) -> list[Truck]:
        return list(self._trucks.values())

    def total_round_trips(self) -> int:
        return sum(truck.round_trips for truck in self._trucks.values())

    def latest_fill_percent(self) -> float | None:
        """Fill level of the truck whose load was reported most recently."""
        updated = [t for t in self._trucks.values() if t.last_fill_update_at is not None]
        if not updated:
            return None
        latest = max(updated, key=lambda t: t.last_fill_update_at or datetime.min.replace(tzinfo=UTC))
        return latest.fill_percent

    def __len__(self) -> int:
        return len(self._trucks)
