"""Tests for inbound event parsing."""

import pytest
from pydantic import ValidationError

from core.types import PositionSource
from world.events.inbound import (
    EventParser,
    LoadUpdate,
    PositionReport,
    ScheduleUpdate,
    TrackingStarted,
    TrackingStopped,
)


class TestPositionReport:
    """Test PositionReport validation."""

    def test_valid_report(self) -> None:
        report = PositionReport(vehicle_id="T1", lat=14.6675, lon=120.949, source="simulator")
        assert report.vehicle_id == "T1"
        assert report.source == PositionSource.SIMULATOR

    def test_unknown_source_defaults_to_device(self) -> None:
        report = PositionReport(vehicle_id="T1", lat=14.6675, lon=120.949, source="carrier-pigeon")
        assert report.source == PositionSource.DEVICE

    def test_missing_source_defaults_to_device(self) -> None:
        report = PositionReport(vehicle_id="T1", lat=14.6675, lon=120.949)
        assert report.source == PositionSource.DEVICE

    def test_latitude_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            PositionReport(vehicle_id="T1", lat=91, lon=120.949)

    def test_boolean_coordinate_rejected(self) -> None:
        with pytest.raises(ValidationError, match="boolean"):
            PositionReport(vehicle_id="T1", lat=True, lon=120.949)

    def test_nan_coordinate_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PositionReport(vehicle_id="T1", lat=float("nan"), lon=120.949)

    def test_blank_vehicle_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PositionReport(vehicle_id="   ", lat=14.6675, lon=120.949)

    def test_broadcast_payload_is_verbatim(self) -> None:
        report = PositionReport(vehicle_id="T1", lat=14.6675, lon=120.949, driver_id="D1")
        assert report.broadcast_payload() == {"vehicle_id": "T1", "lat": 14.6675, "lon": 120.949, "driver_id": "D1"}

    def test_raw_fields_not_dumped(self) -> None:
        report = PositionReport(vehicle_id="T1", lat=14.6675, lon=120.949)
        assert "raw" not in report.model_dump()


class TestEventParser:
    """Test EventParser."""

    def setup_method(self) -> None:
        self.parser = EventParser()

    def test_enveloped_position_report(self) -> None:
        event = self.parser.parse(
            {"event": "position.report", "data": {"vehicle_id": "T1", "lat": 14.6675, "lon": 120.949}}
        )
        assert isinstance(event, PositionReport)
        assert event.lat == 14.6675

    def test_flat_position_report(self) -> None:
        event = self.parser.parse({"event": "position.report", "vehicle_id": "T1", "lat": 14.6, "lon": 120.9})
        assert isinstance(event, PositionReport)

    def test_legacy_position_report(self) -> None:
        event = self.parser.parse(
            {"event": "update-location", "data": {"truckId": "T1", "latitude": 14.6675, "longitude": 120.949}}
        )
        assert isinstance(event, PositionReport)
        assert event.vehicle_id == "T1"
        assert event.lon == 120.949

    def test_legacy_report_rebroadcast_with_client_keys(self) -> None:
        data = {"truckId": "T1", "latitude": 14.6675, "longitude": 120.949, "speed": 12, "source": "drag"}
        event = self.parser.parse({"event": "update-location", "data": data})
        assert isinstance(event, PositionReport)
        assert event.broadcast_payload() == data

    def test_tracking_events(self) -> None:
        started = self.parser.parse({"event": "tracking.started", "data": {"vehicle_id": "T1"}})
        stopped = self.parser.parse({"event": "driver:tracking_stopped", "data": {"truckId": "T1"}})
        assert isinstance(started, TrackingStarted)
        assert isinstance(stopped, TrackingStopped)

    def test_load_update(self) -> None:
        event = self.parser.parse({"event": "driver:load_update", "data": {"truckId": "T1", "percentFull": 75}})
        assert isinstance(event, LoadUpdate)
        assert event.percent_full == 75.0
        assert event.timestamp is None

    def test_schedule_update_keeps_extra_fields(self) -> None:
        event = self.parser.parse({"event": "schedule.update", "data": {"barangay": "Acacia", "day": "Monday"}})
        assert isinstance(event, ScheduleUpdate)
        assert event.model_extra == {"barangay": "Acacia", "day": "Monday"}

    def test_missing_event(self) -> None:
        with pytest.raises(ValueError, match="Missing required field: 'event'"):
            self.parser.parse({"data": {}})

    def test_non_object_message(self) -> None:
        with pytest.raises(ValueError, match="must be a JSON object"):
            self.parser.parse(["position.report"])

    def test_data_must_be_dict(self) -> None:
        with pytest.raises(ValueError, match="'data' must be a dictionary"):
            self.parser.parse({"event": "position.report", "data": "T1"})

    def test_unknown_event(self) -> None:
        with pytest.raises(ValidationError):
            self.parser.parse({"event": "truck.teleport", "data": {"vehicle_id": "T1"}})

    def test_missing_coordinates(self) -> None:
        with pytest.raises(ValidationError):
            self.parser.parse({"event": "position.report", "data": {"vehicle_id": "T1", "lat": 14.6}})
