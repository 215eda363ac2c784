"""Main entry point for running the tracking server."""

import asyncio
import logging
import sys
from typing import Any

import uvicorn

from core.exceptions import DirectoryError

from world.config import TrackerSettings
from world.io.geo_loader import load_geo_index
from world.io.websocket_server import TrackingServer
from world.notify.directory import HttpUserDirectory, StaticUserDirectory, UserDirectory
from world.notify.transport import MqttTransport
from world.tracking.state import TrackingState


def build_directory(settings: TrackerSettings, logger: logging.Logger) -> UserDirectory:
    """Pick the recipient directory configured in settings."""
    if settings.directory_url:
        logger.info(f"Using user directory at {settings.directory_url}")
        return HttpUserDirectory(settings.directory_url, logger=logger)
    if settings.roster_path:
        logger.info(f"Using static roster from {settings.roster_path}")
        try:
            return StaticUserDirectory.from_file(settings.roster_path)
        except DirectoryError as e:
            logger.error(f"Failed to load roster, starting with an empty directory: {e}")
            return StaticUserDirectory()
    logger.warning("No user directory configured, notifications will have no recipients")
    return StaticUserDirectory()


class TrackerRunner:
    """Orchestrates the geo index, MQTT transport and WebSocket server."""

    def __init__(self, settings: TrackerSettings) -> None:
        self.settings = settings

        # Setup logging
        logging.basicConfig(
            level=getattr(logging, settings.log_level),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[
                logging.StreamHandler(sys.stdout),
            ],
        )
        self.logger = logging.getLogger(__name__)

        geo_index = load_geo_index(settings.zones_path, settings.points_path, logger=self.logger)
        self.directory = build_directory(settings, self.logger)
        self.transport = MqttTransport(
            host=settings.mqtt_host,
            port=settings.mqtt_port,
            username=settings.mqtt_username,
            password=settings.mqtt_password,
            logger=self.logger,
        )
        self.state = TrackingState.create(
            geo_index=geo_index,
            directory=self.directory,
            transport=self.transport,
            topic=settings.mqtt_topic,
            cooldown=settings.cooldown,
            poi_threshold_m=settings.poi_threshold_m,
            logger=self.logger,
        )
        self.server = TrackingServer(
            state=self.state,
            eta_pace_m_per_min=settings.eta_pace_m_per_min,
            logger=self.logger,
        )

    def start(self) -> None:
        """Start the transport and serve until interrupted."""
        self.logger.info("Starting TrashTrack tracking server...")
        self.transport.start()
        try:
            asyncio.run(self._serve())
        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt")
        finally:
            self.shutdown()

    async def _serve(self) -> None:
        config = uvicorn.Config(
            app=self.server.get_app(),
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level.lower(),
            access_log=False,
        )
        server = uvicorn.Server(config)
        self.logger.info(f"Tracking server listening on {self.settings.host}:{self.settings.port}")
        try:
            await server.serve()
        finally:
            await self.server.drain_background_tasks()
            if isinstance(self.directory, HttpUserDirectory):
                await self.directory.close()

    def shutdown(self) -> None:
        """Stop the transport."""
        self.logger.info("Shutting down tracking server...")
        self.transport.stop()
        self.logger.info("Tracking server shutdown complete")

    def get_status(self) -> dict[str, Any]:
        """Get the current status of the tracking server."""
        return {
            "mqtt_connected": self.transport.is_connected,
            "connections": len(self.server.manager.active_connections),
            "vehicles_tracked": len(self.state.ledger),
            "trucks": len(self.state.fleet),
            "zones": self.state.geo_index.zone_count(),
            "points": self.state.geo_index.point_count(),
        }


def main() -> None:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="TrashTrack tracking server")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    parser.add_argument("--log-level", default=None, help="Log level")
    parser.add_argument("--zones", default=None, help="Zone polygon JSON file")
    parser.add_argument("--points", default=None, help="Point-of-interest JSON file")
    args = parser.parse_args()

    settings = TrackerSettings.from_env(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        zones_path=args.zones,
        points_path=args.points,
    )

    runner = TrackerRunner(settings)
    try:
        runner.start()
    except Exception as e:
        logging.error(f"Error in tracking server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
