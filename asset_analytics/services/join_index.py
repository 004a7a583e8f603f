# asset_analytics/services/join_index.py
"""
JoinIndex: id → entity lookup maps and parent-chain resolution.

Built once per request from the EntityStore tables. Resolution never raises:
a dangling id resolves to a sentinel entity named "Unknown <Kind>".
"""

from dataclasses import dataclass
from typing import Optional

from asset_analytics.schemas.entities import (
    Asset, Building, Dataset, Department, Floor, GeofenceZone, Zone,
)
from asset_analytics.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_ID = "unknown"

UNKNOWN_ZONE = Zone(id=UNKNOWN_ID, name="Unknown Zone")
UNKNOWN_FLOOR = Floor(id=UNKNOWN_ID, name="Unknown Floor")
UNKNOWN_BUILDING = Building(id=UNKNOWN_ID, name="Unknown Building")
UNKNOWN_DEPARTMENT = Department(id=UNKNOWN_ID, name="Unknown Department")


@dataclass(frozen=True)
class ResolvedLocation:
    zone: Zone
    floor: Floor
    building: Building

    @property
    def is_complete(self) -> bool:
        return UNKNOWN_ID not in (self.zone.id, self.floor.id, self.building.id)


class JoinIndex:
    def __init__(self, tables: Dataset):
        self.tables = tables
        self.assets = {a.id: a for a in tables.assets}
        self.departments = {d.id: d for d in tables.departments}
        self.zones = {z.id: z for z in tables.zones}
        self.floors = {f.id: f for f in tables.floors}
        self.buildings = {b.id: b for b in tables.buildings}
        self.geofences = {g.id: g for g in tables.geofence_zones}
        self.tagged_assets = [a for a in tables.assets if a.is_tagged]
        self.tagged_ids = {a.id for a in self.tagged_assets}
        logger.debug(f"JoinIndex built: {len(self.assets)} assets ({len(self.tagged_assets)} tagged), "
                     f"{len(self.zones)} zones, {len(self.geofences)} geofences")

    def asset(self, asset_id: str) -> Optional[Asset]:
        return self.assets.get(asset_id)

    def zone(self, zone_id: Optional[str]) -> Zone:
        return self.zones.get(zone_id, UNKNOWN_ZONE)

    def zone_name(self, zone_id: Optional[str]) -> str:
        return self.zone(zone_id).name

    def resolve_location(self, asset: Asset) -> ResolvedLocation:
        """
        Resolve asset → zone → floor → building.
        The zone's own floor / the floor's own building take precedence over the
        asset's denormalized ids; those are only used when the chain is broken.
        """
        zone = self.zone(asset.location.zone_id)
        floor_id = zone.floor_id or asset.location.floor_id
        floor = self.floors.get(floor_id) or self.floors.get(asset.location.floor_id, UNKNOWN_FLOOR)
        building_id = floor.building_id or asset.location.building_id
        building = self.buildings.get(building_id) or self.buildings.get(
            asset.location.building_id, UNKNOWN_BUILDING)
        return ResolvedLocation(zone=zone, floor=floor, building=building)

    def resolve_department(self, asset: Asset) -> Department:
        return self.departments.get(asset.department_id, UNKNOWN_DEPARTMENT)

    def department_name(self, department_id: str) -> str:
        return self.departments.get(department_id, UNKNOWN_DEPARTMENT).name

    def active_geofences(self) -> list[GeofenceZone]:
        return [g for g in self.tables.geofence_zones if g.active]

    def geofence_for_zone(self, zone_id: str) -> Optional[GeofenceZone]:
        """First active geofence covering the physical zone, by list order."""
        for g in self.tables.geofence_zones:
            if g.active and zone_id in g.zone_ids:
                return g
        return None
