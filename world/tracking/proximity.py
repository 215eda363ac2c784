"""Turn position reports into edge-triggered zone and point-of-interest events."""

import logging
from dataclasses import dataclass, field

from core.types import PoiName, ProximityEventType, VehicleID, ZoneName
from world.geo.index import GeoIndex

DEFAULT_POI_THRESHOLD_M: float = 15.0


@dataclass(frozen=True)
class ProximityEvent:
    """A notification-worthy transition for one vehicle."""

    type: ProximityEventType
    vehicle_id: VehicleID
    zone_name: ZoneName
    lat: float
    lon: float
    poi_name: PoiName | None = None
    distance_m: float | None = None


@dataclass
class VehicleProximityMemory:
    """What the engine last observed for a vehicle."""

    last_zone: ZoneName | None = None
    last_nearby_poi: tuple[ZoneName, PoiName] | None = None


@dataclass
class ProximityEngine:
    """Edge-triggered geofence evaluation over a GeoIndex.

    A zone-entry event fires when the containing zone changes to a new zone
    (leaving a zone resets memory silently). A POI-arrival event fires when
    the nearest point is within ``poi_threshold_m`` and differs from the last
    point the vehicle was near; moving out of range re-arms the point.
    """

    geo_index: GeoIndex
    poi_threshold_m: float = DEFAULT_POI_THRESHOLD_M
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    _memory: dict[VehicleID, VehicleProximityMemory] = field(default_factory=dict, init=False)

    def memory_of(self, vehicle_id: str) -> VehicleProximityMemory:
        memory = self._memory.get(VehicleID(vehicle_id))
        if memory is None:
            memory = VehicleProximityMemory()
            self._memory[VehicleID(vehicle_id)] = memory
        return memory

    def evaluate(self, vehicle_id: str, lat: float, lon: float) -> list[ProximityEvent]:
        """Evaluate a new position and return the events it triggers (possibly none)."""
        vid = VehicleID(vehicle_id)
        memory = self.memory_of(vid)
        events: list[ProximityEvent] = []

        zone = self.geo_index.containing_zone(lat, lon)
        if zone != memory.last_zone:
            memory.last_zone = zone
            if zone is not None:
                self.logger.info(f"{vid} entered zone {zone}")
                events.append(
                    ProximityEvent(
                        type=ProximityEventType.ZONE_ENTRY,
                        vehicle_id=vid,
                        zone_name=zone,
                        lat=lat,
                        lon=lon,
                    )
                )

        nearest = self.geo_index.nearest_point(lat, lon)
        if nearest is None or nearest.distance_m > self.poi_threshold_m:
            memory.last_nearby_poi = None
        else:
            key = (nearest.point.zone, nearest.point.name)
            if key != memory.last_nearby_poi:
                memory.last_nearby_poi = key
                self.logger.info(
                    f"{vid} arrived at {nearest.point.name} ({nearest.point.zone}), "
                    f"{nearest.distance_m:.1f} m"
                )
                events.append(
                    ProximityEvent(
                        type=ProximityEventType.POI_ARRIVAL,
                        vehicle_id=vid,
                        zone_name=nearest.point.zone,
                        poi_name=nearest.point.name,
                        lat=lat,
                        lon=lon,
                        distance_m=nearest.distance_m,
                    )
                )

        return events
