# asset_analytics/schemas/entities.py
"""
Entity tables read from the JSON dataset.
Field names are snake_case in Python and camelCase on the wire (seed.json keys).
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

AssetStatus = Literal["available", "in-use", "maintenance", "lost"]
MaintenanceStatus = Literal["pending", "in-progress", "completed", "overdue"]
GeofenceType = Literal["restricted", "authorized", "high-security", "maintenance-only"]
Priority = Literal["low", "medium", "high", "critical"]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Department(CamelModel):
    id: str
    name: str
    facility_id: Optional[str] = None


class Building(CamelModel):
    id: str
    name: str
    facility_id: Optional[str] = None


class Floor(CamelModel):
    id: str
    name: str
    building_id: Optional[str] = None


class Zone(CamelModel):
    id: str
    name: str
    floor_id: Optional[str] = None


class AssetLocation(CamelModel):
    building_id: Optional[str] = None
    floor_id: Optional[str] = None
    zone_id: Optional[str] = None


class Asset(CamelModel):
    id: str
    name: str
    type: str
    category: Optional[str] = None
    department_id: str
    location: AssetLocation = Field(default_factory=AssetLocation)
    status: AssetStatus
    utilization: float = Field(default=0, ge=0, le=100)
    last_active: UtcDatetime
    tag_id: Optional[str] = None
    value: Optional[float] = None
    purchase_date: Optional[str] = None
    maintenance_due: Optional[str] = None
    serial_number: Optional[str] = None

    @property
    def is_tagged(self) -> bool:
        return bool(self.tag_id)


class MovementLog(CamelModel):
    id: str
    asset_id: str
    from_zone_id: str
    to_zone_id: str
    timestamp: UtcDatetime
    authorized: bool = True
    moved_by: Optional[str] = None
    reason: Optional[str] = None


class MaintenanceTask(CamelModel):
    id: str
    asset_id: str
    type: Optional[str] = None
    description: Optional[str] = None
    status: MaintenanceStatus
    scheduled_date: UtcDatetime
    completed_date: Optional[UtcDatetime] = None
    assigned_to: Optional[str] = None
    priority: Optional[str] = None


class WorkingHours(CamelModel):
    enabled: bool = False
    start_time: str = "00:00"
    end_time: str = "23:59"
    days_of_week: list[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5, 6])


class GeofenceZone(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    type: GeofenceType
    zone_ids: list[str] = Field(default_factory=list)
    asset_ids: list[str] = Field(default_factory=list)
    priority: Priority = "medium"
    active: bool = True
    alert_on_entry: bool = False
    alert_on_exit: bool = False
    allowed_roles: list[str] = Field(default_factory=list)
    working_hours: Optional[WorkingHours] = None


class User(CamelModel):
    id: str
    name: str
    role: Optional[str] = None
    department_id: Optional[str] = None


class Dataset(CamelModel):
    """All tables of one seed.json load. Unknown top-level keys are ignored."""
    departments: list[Department] = Field(default_factory=list)
    buildings: list[Building] = Field(default_factory=list)
    floors: list[Floor] = Field(default_factory=list)
    zones: list[Zone] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    movement_logs: list[MovementLog] = Field(default_factory=list)
    maintenance_tasks: list[MaintenanceTask] = Field(default_factory=list)
    geofence_zones: list[GeofenceZone] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)


class AssetAction(CamelModel):
    """Body of the asset action endpoint: the only mutation the engine accepts."""
    status: Optional[AssetStatus] = None
    last_active: Optional[UtcDatetime] = None
