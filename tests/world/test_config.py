"""Tests for tracker settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from world.config import TrackerSettings


class TestTrackerSettings:
    """Test TrackerSettings defaults, validation and environment loading."""

    def test_defaults(self) -> None:
        settings = TrackerSettings()
        assert settings.port == 8000
        assert settings.log_level == "INFO"
        assert settings.mqtt_host == "broker.hivemq.com"
        assert settings.mqtt_topic == "trashtracktify/sms/send"
        assert settings.cooldown == timedelta(minutes=5)
        assert settings.poi_threshold_m == 15.0

    def test_log_level_normalised(self) -> None:
        assert TrackerSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self) -> None:
        with pytest.raises(ValidationError, match="Unknown log level"):
            TrackerSettings(log_level="chatty")

    def test_port_range(self) -> None:
        with pytest.raises(ValidationError):
            TrackerSettings(port=70000)

    def test_cooldown_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TrackerSettings(cooldown_s=0)

    def test_from_env(self) -> None:
        settings = TrackerSettings.from_env(
            {
                "TRASHTRACK_PORT": "9001",
                "TRASHTRACK_MQTT_HOST": "mqtt.local",
                "TRASHTRACK_COOLDOWN_S": "60",
                "TRASHTRACK_ROSTER_PATH": "",
                "UNRELATED": "x",
            }
        )
        assert settings.port == 9001
        assert settings.mqtt_host == "mqtt.local"
        assert settings.cooldown == timedelta(seconds=60)
        assert settings.roster_path is None

    def test_overrides_win_over_env(self) -> None:
        settings = TrackerSettings.from_env({"TRASHTRACK_PORT": "9001"}, port=9100, host=None)
        assert settings.port == 9100
        assert settings.host == "localhost"
