"""Outbound message transports for SMS commands."""

import logging
from typing import Any, Protocol, cast

import paho.mqtt.client as mqtt

from core.exceptions import TransportError

DEFAULT_SMS_TOPIC = "trashtracktify/sms/send"


class MessageTransport(Protocol):
    """Fire-and-forget publisher; raises TransportError when a publish fails."""

    async def publish(self, topic: str, payload: str) -> None: ...


class MqttTransport:
    """paho-mqtt publisher running its network loop on a background thread."""

    def __init__(
        self,
        host: str,
        port: int = 1883,
        client_id: str = "",
        username: str | None = None,
        password: str | None = None,
        keepalive: int = 60,
        qos: int = 0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.client_id = client_id
        self.username = username
        self.password = password
        self.keepalive = keepalive
        self.qos = qos
        self.logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def start(self) -> None:
        """Connect asynchronously and start the network loop."""
        self.stop()
        self.logger.info(f"[MQTT] Connecting to broker at {self.host}:{self.port}...")

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self.client_id,
        )
        client.enable_logger(self.logger)
        if self.username:
            client.username_pw_set(self.username, self.password)

        def on_connect(
            _client: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self.logger.warning(f"[MQTT] Connect failed: {reason_code}")
                return
            self._connected = True
            self.logger.info("[MQTT] Connected to broker")

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            self._connected = False
            self.logger.info(f"[MQTT] Disconnected from broker: {reason_code}")

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect

        try:
            client.connect_async(self.host, self.port, keepalive=self.keepalive)
        except (OSError, ValueError) as e:
            self.logger.error(f"[MQTT] Connection error: {e}")
        client.loop_start()
        self._client = client

    def stop(self) -> None:
        """Disconnect and stop the network loop if running."""
        client = self._client
        self._client = None
        self._connected = False
        if client is None:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
            self.logger.info("[MQTT] Network loop stopped")

    async def publish(self, topic: str, payload: str) -> None:
        client = self._client
        if client is None or not self._connected:
            raise TransportError("MQTT client not connected, command dropped", topic=topic)
        info = client.publish(topic, payload, qos=self.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(f"MQTT publish failed: {mqtt.error_string(info.rc)}", topic=topic)
        self.logger.info(f"[MQTT] Published to {topic}: {payload[:50]}...")
