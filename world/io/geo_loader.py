"""Load zone polygons and point-of-interest markers from JSON data files."""

import logging
import math
from pathlib import Path
from typing import Any

import orjson

from core.exceptions import GeoDataError
from core.types import PoiName, ZoneName
from world.geo.index import GeoIndex
from world.geo.point import PointOfInterest
from world.geo.zone import LatLon

DEFAULT_ZONES_FILE = "polygon.json"
DEFAULT_POINTS_FILE = "streets.json"


def get_data_directory() -> Path:
    """Get the default data directory (``data/`` in the workspace root)."""
    return Path(__file__).parent.parent.parent / "data"


def _read_json(path: Path) -> Any:
    try:
        return orjson.loads(path.read_bytes())
    except FileNotFoundError as e:
        raise GeoDataError(f"Data file not found: {path}") from e
    except OSError as e:
        raise GeoDataError(f"Cannot read data file {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise GeoDataError(f"Invalid JSON in {path}: {e}") from e


def _as_coord_pair(raw: Any) -> LatLon | None:
    """Return (lat, lon) if ``raw`` is a pair of finite numbers."""
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        return None
    lat, lon = raw
    if isinstance(lat, bool) or isinstance(lon, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return float(lat), float(lon)


def parse_points(data: Any, logger: logging.Logger | None = None) -> list[PointOfInterest]:
    """Parse point-of-interest data.

    Two shapes are accepted:
    - grouped by zone: ``{"Acacia": [{"name": ..., "coords": [lat, lon]}, ...]}``
    - flat: ``[{"name": ..., "zone": ..., "lat": ..., "lon": ...}, ...]``

    Entries with missing or non-numeric coordinates are skipped.
    """
    log = logger or logging.getLogger(__name__)
    entries: list[tuple[Any, Any, Any]] = []

    if isinstance(data, dict):
        for zone, items in data.items():
            if not isinstance(items, list):
                log.warning(f"Point group for zone {zone!r} is not a list, skipping")
                continue
            for item in items:
                if isinstance(item, dict):
                    entries.append((item.get("name"), zone, item.get("coords")))
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                entries.append((item.get("name"), item.get("zone"), [item.get("lat"), item.get("lon")]))
    else:
        raise GeoDataError("Point data must be an object grouped by zone or a list")

    points: list[PointOfInterest] = []
    for name, zone, coords in entries:
        pair = _as_coord_pair(coords)
        if not name or not zone or pair is None:
            log.warning(f"Skipping invalid point of interest: name={name!r} zone={zone!r}")
            continue
        points.append(
            PointOfInterest(name=PoiName(str(name)), zone=ZoneName(str(zone)), lat=pair[0], lon=pair[1])
        )
    return points


def parse_zones(data: Any, logger: logging.Logger | None = None) -> list[tuple[str, list[LatLon], str | None]]:
    """Parse zone polygon data into (name, ring, color) tuples.

    Expected shape: ``[{"name": ..., "color": ..., "coords": [[lat, lon], ...]}, ...]``
    (``ring`` is accepted as an alias of ``coords``). Vertices that are not
    numeric pairs are dropped; ring validity is checked when the zone is built.
    """
    log = logger or logging.getLogger(__name__)
    if not isinstance(data, list):
        raise GeoDataError("Zone data must be a list")

    zones: list[tuple[str, list[LatLon], str | None]] = []
    for item in data:
        if not isinstance(item, dict) or not item.get("name"):
            log.warning(f"Skipping zone entry without a name: {item!r}")
            continue
        raw_ring = item.get("coords", item.get("ring")) or []
        if not isinstance(raw_ring, list):
            log.warning(f"Skipping zone {item['name']!r}: coordinates must be a list")
            continue
        ring = [pair for pair in (_as_coord_pair(c) for c in raw_ring) if pair is not None]
        color = item.get("color")
        zones.append((str(item["name"]), ring, str(color) if color is not None else None))
    return zones


def load_geo_index(
    zones_path: Path | str | None = None,
    points_path: Path | str | None = None,
    logger: logging.Logger | None = None,
) -> GeoIndex:
    """Load the geo index from disk.

    Geography problems never abort startup: each missing or corrupt file is
    logged and contributes nothing, so spatial queries degrade to "no match".
    """
    log = logger or logging.getLogger(__name__)
    data_dir = get_data_directory()
    zones_file = Path(zones_path) if zones_path else data_dir / DEFAULT_ZONES_FILE
    points_file = Path(points_path) if points_path else data_dir / DEFAULT_POINTS_FILE

    raw_zones: list[tuple[str, list[LatLon], str | None]] = []
    try:
        raw_zones = parse_zones(_read_json(zones_file), log)
    except GeoDataError as e:
        log.error(f"Failed to load zone data: {e}")

    points: list[PointOfInterest] = []
    try:
        points = parse_points(_read_json(points_file), log)
    except GeoDataError as e:
        log.error(f"Failed to load point-of-interest data: {e}")

    index = GeoIndex.from_raw_zones(points, raw_zones, logger=log)
    log.info(f"Geo index loaded: {index.zone_count()} zones, {index.point_count()} points")
    return index
