"""Tests for loading zone and point-of-interest data files."""

import json
import logging
from pathlib import Path

import pytest

from core.exceptions import GeoDataError
from world.io.geo_loader import get_data_directory, load_geo_index, parse_points, parse_zones


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data))
    return path


class TestParsePoints:
    """Test point-of-interest parsing."""

    def test_grouped_by_zone(self) -> None:
        points = parse_points({"Acacia": [{"name": "Basilio St", "coords": [14.6675, 120.949]}]})
        assert len(points) == 1
        assert points[0].name == "Basilio St"
        assert points[0].zone == "Acacia"
        assert points[0].lat == 14.6675

    def test_flat_list(self) -> None:
        points = parse_points([{"name": "Orchids St", "zone": "Tugatog", "lat": 14.663, "lon": 120.955}])
        assert len(points) == 1
        assert points[0].zone == "Tugatog"
        assert points[0].lon == 120.955

    def test_invalid_entries_skipped(self) -> None:
        points = parse_points(
            {
                "Acacia": [
                    {"name": "No Coords"},
                    {"name": "Text Coords", "coords": ["14.6", "120.9"]},
                    {"name": "Short", "coords": [14.6]},
                    {"coords": [14.6, 120.9]},
                    {"name": "Good", "coords": [14.6, 120.9]},
                ]
            }
        )
        assert [p.name for p in points] == ["Good"]

    def test_rejects_unknown_shape(self) -> None:
        with pytest.raises(GeoDataError):
            parse_points("not points")


class TestParseZones:
    """Test zone polygon parsing."""

    def test_coords_become_ring(self) -> None:
        zones = parse_zones([{"name": "Acacia", "color": "blue", "coords": [[0, 0], [0, 1], [1, 1]]}])
        assert zones == [("Acacia", [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)], "blue")]

    def test_ring_alias(self) -> None:
        zones = parse_zones([{"name": "Acacia", "ring": [[0, 0], [0, 1], [1, 1]]}])
        assert zones[0][1] == [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]
        assert zones[0][2] is None

    def test_non_list_coordinates_skipped(self) -> None:
        zones = parse_zones(
            [
                {"name": "Acacia", "coords": 5},
                {"name": "Tugatog", "coords": [[0, 0], [0, 1], [1, 1]]},
            ]
        )
        assert [name for name, _, _ in zones] == ["Tugatog"]

    def test_nameless_zone_skipped(self) -> None:
        assert parse_zones([{"coords": [[0, 0], [0, 1], [1, 1]]}]) == []

    def test_rejects_non_list(self) -> None:
        with pytest.raises(GeoDataError):
            parse_zones({"name": "Acacia"})


class TestLoadGeoIndex:
    """Test loading the index from disk."""

    def test_loads_both_files(self, tmp_path: Path) -> None:
        zones = _write(
            tmp_path / "polygon.json",
            [{"name": "Acacia", "coords": [[14.669, 120.947], [14.669, 120.952], [14.665, 120.952], [14.665, 120.947]]}],
        )
        points = _write(tmp_path / "streets.json", {"Acacia": [{"name": "Basilio St", "coords": [14.6675, 120.949]}]})

        index = load_geo_index(zones, points)

        assert index.zone_count() == 1
        assert index.point_count() == 1
        assert index.containing_zone(14.6675, 120.949) == "Acacia"

    def test_missing_files_give_empty_index(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR):
            index = load_geo_index(tmp_path / "missing.json", tmp_path / "also_missing.json")
        assert index.is_empty
        assert "Failed to load zone data" in caplog.text
        assert "Failed to load point-of-interest data" in caplog.text

    def test_malformed_zone_entry_does_not_abort_loading(self, tmp_path: Path) -> None:
        zones = _write(tmp_path / "polygon.json", [{"name": "Acacia", "coords": 5}])
        points = _write(tmp_path / "streets.json", {"Acacia": [{"name": "Basilio St", "coords": [14.6675, 120.949]}]})

        index = load_geo_index(zones, points)

        assert index.zone_count() == 0
        assert index.point_count() == 1

    def test_unreadable_path_gives_empty_index(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR):
            index = load_geo_index(tmp_path, tmp_path)
        assert index.is_empty
        assert "Cannot read data file" in caplog.text

    def test_corrupt_zone_file_keeps_points(self, tmp_path: Path) -> None:
        zones = tmp_path / "polygon.json"
        zones.write_text("{not json")
        points = _write(tmp_path / "streets.json", {"Acacia": [{"name": "Basilio St", "coords": [14.6675, 120.949]}]})

        index = load_geo_index(zones, points)

        assert index.zone_count() == 0
        assert index.point_count() == 1

    def test_bundled_data_loads(self) -> None:
        data_dir = get_data_directory()
        index = load_geo_index(data_dir / "polygon.json", data_dir / "streets.json")
        assert index.zone_count() == 3
        assert index.containing_zone(14.6675, 120.949) == "Acacia"
