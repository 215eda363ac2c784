"""FastAPI WebSocket server relaying truck positions and state to clients."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.exceptions import GeoDataError
from world.events.inbound import EventParser
from world.events.signals import Signal, create_error_signal, create_fleet_snapshot_signal
from world.handlers.base import HandlerContext
from world.handlers.registry import EventRegistry, create_default_registry
from world.tracking.eta import DEFAULT_PACE_M_PER_MIN, estimate_eta
from world.tracking.state import TrackingState


def encode_signal(signal: Signal) -> str:
    return orjson.dumps(signal.model_dump()).decode()


class ConnectionManager:
    """Manages WebSocket connections keyed by connection id."""

    def __init__(self) -> None:
        self.active_connections: dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_ids(self) -> set[str]:
        return set(self.active_connections)

    async def connect(self, websocket: WebSocket, connection_id: str) -> None:
        """Accept a client and register it under ``connection_id``."""
        await websocket.accept()
        async with self._lock:
            self.active_connections[connection_id] = websocket
        logging.info(f"Client connected: {connection_id} ({len(self.active_connections)} online)")

    async def disconnect(self, connection_id: str) -> None:
        """Forget a client; unknown ids are ignored."""
        async with self._lock:
            self.active_connections.pop(connection_id, None)
        logging.info(f"Client disconnected: {connection_id}")

    async def send_personal_message(self, message: str, websocket: WebSocket) -> None:
        """Send one encoded signal to a single client."""
        try:
            await websocket.send_text(message)
        except Exception as e:
            logging.error(f"Failed to send to client: {e}")

    async def send_to(self, connection_id: str, message: str) -> None:
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            logging.warning(f"Connection {connection_id} not found")
            return
        await self.send_personal_message(message, websocket)

    async def broadcast(self, message: str, exclude: str | None = None) -> None:
        """Broadcast a message to all connected WebSockets, optionally skipping one."""
        if not self.active_connections:
            return

        connections_to_remove = []

        for connection_id, connection in list(self.active_connections.items()):
            if connection_id == exclude:
                continue
            try:
                await connection.send_text(message)
            except Exception as e:
                logging.error(f"Dropping client {connection_id} after failed send: {e}")
                connections_to_remove.append(connection_id)

        # Prune dead clients
        async with self._lock:
            for connection_id in connections_to_remove:
                self.active_connections.pop(connection_id, None)


class TrackingServer:
    """WebSocket server for drivers and map viewers (events in, signals out)."""

    def __init__(
        self,
        state: TrackingState,
        registry: EventRegistry | None = None,
        eta_pace_m_per_min: float = DEFAULT_PACE_M_PER_MIN,
        logger: logging.Logger | None = None,
    ) -> None:
        self.state = state
        self.registry = registry or create_default_registry()
        self.eta_pace_m_per_min = eta_pace_m_per_min
        self.logger = logger or logging.getLogger(__name__)
        self.manager = ConnectionManager()
        self.parser = EventParser()
        self.app = FastAPI(title="TrashTrack Tracking API")
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup FastAPI routes."""

        @self.app.websocket("/ws")  # type: ignore[misc]
        async def websocket_endpoint(websocket: WebSocket) -> None:
            """WebSocket endpoint for drivers and viewers."""
            connection_id = f"conn_{id(websocket)}"
            await self.manager.connect(websocket, connection_id)

            await self._send_snapshot_to_client(websocket, connection_id)

            try:
                while True:
                    data = await websocket.receive_text()
                    await self._handle_client_message(data, connection_id)

            except WebSocketDisconnect:
                await self.manager.disconnect(connection_id)
            except Exception as e:
                self.logger.error(f"WebSocket error for {connection_id}: {e}", exc_info=True)
                await self.manager.disconnect(connection_id)

        @self.app.get("/health")  # type: ignore[misc]
        async def health_check() -> dict[str, Any]:
            """Liveness plus loaded geography and client count."""
            return {
                "status": "healthy",
                "service": "trashtrack-tracking",
                "zones": self.state.geo_index.zone_count(),
                "points": self.state.geo_index.point_count(),
                "connections": len(self.manager.active_connections),
            }

        @self.app.get("/eta/{vehicle_id}")  # type: ignore[misc]
        async def eta(vehicle_id: str) -> JSONResponse:
            """Estimate minutes until the truck reaches its nearest stop."""
            try:
                estimate = estimate_eta(
                    self.state.ledger,
                    self.state.geo_index,
                    vehicle_id,
                    pace_m_per_min=self.eta_pace_m_per_min,
                )
            except GeoDataError as e:
                self.logger.warning(f"ETA unavailable for {vehicle_id}: {e}")
                return JSONResponse(
                    status_code=503,
                    content={"eta_minutes": -1, "next_stop": "Unknown", "error": str(e)},
                )
            if estimate is None:
                return JSONResponse(
                    status_code=404,
                    content={"eta_minutes": -1, "next_stop": "Unknown", "error": "No location data"},
                )
            return JSONResponse(content=estimate.to_dict())

        @self.app.get("/stats/trucks")  # type: ignore[misc]
        async def truck_stats() -> dict[str, Any]:
            """Fleet-wide aggregates plus per-truck state."""
            fleet = self.state.fleet
            return {
                "total_round_trips": fleet.total_round_trips(),
                "latest_fill_percent": fleet.latest_fill_percent(),
                "trucks": [truck.serialize_full() for truck in fleet.all()],
            }

        @self.app.get("/stats/trucks/{vehicle_id}")  # type: ignore[misc]
        async def truck_stats_one(vehicle_id: str) -> JSONResponse:
            truck = self.state.fleet.stats_of(vehicle_id)
            if truck is None:
                return JSONResponse(status_code=404, content={"error": f"Unknown truck: {vehicle_id}"})
            return JSONResponse(content=truck.serialize_full())

    async def broadcast(self, signal: Signal, exclude: str | None = None) -> None:
        """Encode and broadcast a signal, skipping ``exclude`` if given."""
        await self.manager.broadcast(encode_signal(signal), exclude=exclude)
        self.logger.debug(f"Broadcasted signal: {signal.signal}")

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run a coroutine in the background, logging anything it raises."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_task_done)
        return task

    def _on_background_task_done(self, task: asyncio.Task[Any]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(f"Background task failed: {exc}", exc_info=exc)

    async def drain_background_tasks(self) -> None:
        """Wait for in-flight background tasks (notifications) to finish."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def _handle_client_message(self, message: str, connection_id: str) -> None:
        """Decode, validate and route one client message."""
        try:
            data = orjson.loads(message)
        except orjson.JSONDecodeError as e:
            self.logger.warning(f"Invalid JSON from {connection_id}: {e}")
            await self.manager.send_to(
                connection_id, encode_signal(create_error_signal("Invalid JSON format", "INVALID_JSON"))
            )
            return

        try:
            event = self.parser.parse(data)
        except (ValidationError, ValueError) as e:
            self.logger.warning(f"Dropped malformed event from {connection_id}: {e}")
            return

        handler = self.registry.get_handler(event.event)
        if handler is None:
            self.logger.warning(f"No handler for event {event.event} from {connection_id}")
            return

        context = HandlerContext(
            state=self.state,
            broadcaster=self,
            spawn=self.spawn,
            logger=self.logger,
            connection_id=connection_id,
        )
        try:
            await handler(event, context)
            self.logger.debug(f"Handled {event.event} from {connection_id}")
        except Exception as e:
            self.logger.error(f"Error handling {event.event} from {connection_id}: {e}", exc_info=True)

    async def _send_snapshot_to_client(self, websocket: WebSocket, connection_id: str) -> None:
        """Send known positions and truck states to a newly connected client."""
        try:
            snapshot = create_fleet_snapshot_signal(
                positions=[p.to_dict() for p in self.state.ledger.all()],
                trucks=[t.serialize_full() for t in self.state.fleet.all()],
            )
            await self.manager.send_personal_message(encode_signal(snapshot), websocket)
            self.logger.info(
                f"Sent fleet.snapshot to {connection_id} "
                f"({len(snapshot.data['positions'])} positions, {len(snapshot.data['trucks'])} trucks)"
            )
        except Exception as e:
            self.logger.error(f"Error sending snapshot to client {connection_id}: {e}", exc_info=True)

    def get_app(self) -> FastAPI:
        """Get the FastAPI application."""
        return self.app
