"""Runtime settings for the tracking server."""

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "TRASHTRACK_"


class TrackerSettings(BaseModel):
    """Settings with declarative validation.

    Every field can be set from the environment as ``TRASHTRACK_<FIELD>``
    (e.g. ``TRASHTRACK_MQTT_HOST``).
    """

    # Server
    host: str = Field(default="localhost", description="Interface to bind")
    port: int = Field(default=8000, ge=1, le=65535, description="Port to bind")
    log_level: str = Field(default="INFO", description="Root log level")

    # Geography
    zones_path: str | None = Field(default=None, description="Zone polygon JSON file")
    points_path: str | None = Field(default=None, description="Point-of-interest JSON file")

    # Recipients
    directory_url: str | None = Field(
        default=None, description="Base URL of the registration service exposing /users"
    )
    roster_path: str | None = Field(
        default=None, description="Static roster JSON file, used when no directory URL is set"
    )

    # Transport
    mqtt_host: str = Field(default="broker.hivemq.com", description="MQTT broker host")
    mqtt_port: int = Field(default=1883, ge=1, le=65535, description="MQTT broker port")
    mqtt_topic: str = Field(default="trashtracktify/sms/send", description="SMS command topic")
    mqtt_username: str | None = None
    mqtt_password: str | None = None

    # Notification policy
    cooldown_s: float = Field(default=300.0, gt=0, description="Minimum seconds between repeats per key")
    poi_threshold_m: float = Field(default=15.0, gt=0, description="Arrival radius around a point")
    eta_pace_m_per_min: float = Field(default=11.1, gt=0, description="Assumed collection pace")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def cooldown(self) -> timedelta:
        return timedelta(seconds=self.cooldown_s)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "TrackerSettings":
        """Build settings from ``TRASHTRACK_*`` variables, then apply overrides."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
