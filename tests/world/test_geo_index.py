"""Tests for geography primitives and the geo index."""

import logging

import pytest

from core.exceptions import GeoDataError
from core.types import PoiName, ZoneName
from world.geo.index import GeoIndex
from world.geo.point import EARTH_RADIUS_M, PointOfInterest, haversine_m
from world.geo.zone import Zone, close_ring

# One meter of latitude along a meridian
ONE_METER_LAT = 1.0 / (EARTH_RADIUS_M * 3.141592653589793 / 180.0)

UNIT_SQUARE = ((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0))


def _poi(name: str, zone: str, lat: float, lon: float) -> PointOfInterest:
    return PointOfInterest(name=PoiName(name), zone=ZoneName(zone), lat=lat, lon=lon)


class TestHaversine:
    """Test great-circle distance."""

    def test_one_meter_along_meridian(self) -> None:
        distance = haversine_m(14.6675, 120.949, 14.6675 + ONE_METER_LAT, 120.949)
        assert distance == pytest.approx(1.0, abs=0.5)

    def test_zero_distance(self) -> None:
        assert haversine_m(14.6675, 120.949, 14.6675, 120.949) == 0.0

    def test_one_degree_of_latitude(self) -> None:
        assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)

    def test_symmetric(self) -> None:
        a = haversine_m(14.66, 120.95, 14.67, 120.96)
        b = haversine_m(14.67, 120.96, 14.66, 120.95)
        assert a == pytest.approx(b)


class TestZone:
    """Test zone construction and containment."""

    def test_ring_is_closed_on_construction(self) -> None:
        zone = Zone(name=ZoneName("Square"), ring=UNIT_SQUARE)
        assert zone.ring[0] == zone.ring[-1]
        assert len(zone.ring) == 5

    def test_already_closed_ring_is_kept(self) -> None:
        ring = [*UNIT_SQUARE, UNIT_SQUARE[0]]
        assert close_ring(ring) == ring

    def test_point_inside_square(self) -> None:
        zone = Zone(name=ZoneName("Square"), ring=UNIT_SQUARE)
        assert zone.contains(0.5, 0.5)

    def test_point_outside_square(self) -> None:
        zone = Zone(name=ZoneName("Square"), ring=UNIT_SQUARE)
        assert not zone.contains(2.0, 2.0)

    def test_boundary_counts_as_inside(self) -> None:
        zone = Zone(name=ZoneName("Square"), ring=UNIT_SQUARE)
        assert zone.contains(0.0, 0.5)
        assert zone.contains(1.0, 1.0)

    def test_degenerate_ring_rejected(self) -> None:
        with pytest.raises(GeoDataError, match="at least 3 distinct vertices"):
            Zone(name=ZoneName("Line"), ring=((0.0, 0.0), (1.0, 1.0), (0.0, 0.0)))

    def test_ring_keeps_lat_lon_order(self) -> None:
        zone = Zone(name=ZoneName("Square"), ring=UNIT_SQUARE, color="blue")
        assert zone.color == "blue"
        assert zone.ring[1] == (0.0, 1.0)


class TestGeoIndex:
    """Test nearest-point and containing-zone queries."""

    def setup_method(self) -> None:
        self.points = [
            _poi("Basilio St", "Acacia", 14.6675, 120.9490),
            _poi("Sanciangco St", "Acacia", 14.6662, 120.9505),
            _poi("Orchids St", "Tugatog", 14.6630, 120.9550),
        ]
        self.index = GeoIndex.from_raw_zones(
            self.points,
            [
                ("Acacia", [(14.669, 120.947), (14.669, 120.952), (14.665, 120.952), (14.665, 120.947)], "blue"),
                ("Tugatog", [(14.665, 120.953), (14.665, 120.960), (14.660, 120.960), (14.660, 120.953)], None),
            ],
        )

    def test_counts(self) -> None:
        assert self.index.point_count() == 3
        assert self.index.zone_count() == 2
        assert not self.index.is_empty

    def test_nearest_point(self) -> None:
        nearest = self.index.nearest_point(14.6676, 120.9490)
        assert nearest is not None
        assert nearest.point.name == "Basilio St"
        assert nearest.distance_m == pytest.approx(11.1, abs=0.5)

    def test_nearest_point_tie_keeps_first_loaded(self) -> None:
        index = GeoIndex(points=[_poi("First", "Z", 0.0, 1.0), _poi("Second", "Z", 0.0, -1.0)])
        nearest = index.nearest_point(0.0, 0.0)
        assert nearest is not None
        assert nearest.point.name == "First"

    def test_containing_zone(self) -> None:
        assert self.index.containing_zone(14.667, 120.950) == "Acacia"
        assert self.index.containing_zone(14.662, 120.955) == "Tugatog"

    def test_containing_zone_outside_all(self) -> None:
        assert self.index.containing_zone(14.70, 121.00) is None

    def test_overlapping_zones_first_loaded_wins(self) -> None:
        index = GeoIndex.from_raw_zones(
            [],
            [("A", list(UNIT_SQUARE), None), ("B", list(UNIT_SQUARE), None)],
        )
        assert index.containing_zone(0.5, 0.5) == "A"

    def test_invalid_zone_skipped_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            index = GeoIndex.from_raw_zones([], [("Broken", [(0.0, 0.0)], None), ("Square", list(UNIT_SQUARE), None)])
        assert [z.name for z in index.zones] == ["Square"]
        assert "Skipping invalid zone 'Broken'" in caplog.text

    def test_empty_index_queries_return_none(self) -> None:
        index = GeoIndex()
        assert index.is_empty
        assert index.nearest_point(14.0, 121.0) is None
        assert index.containing_zone(14.0, 121.0) is None
