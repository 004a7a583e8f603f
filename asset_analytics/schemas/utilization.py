# asset_analytics/schemas/utilization.py
from datetime import datetime
from typing import Optional

from asset_analytics.schemas.entities import CamelModel


class DailyUtilization(CamelModel):
    date: str
    utilization: float


class DepartmentUtilization(CamelModel):
    department_id: str
    department_name: str
    avg_utilization: int                  # raw computed average
    display_utilization: int              # after presentation banding (== avg when banding is off)
    banded: bool = False
    total_assets: int
    underutilized: int
    active: int
    idle: int
    in_maintenance: int
    available_count: int
    pending_maintenance_count: int
    # Stacked bar percentages, always sum to 100 when total_assets > 0
    available: int
    under_maintenance: int
    pending_maintenance: int
    utilization_trend: list[DailyUtilization] = []


class AssetTypeUtilization(CamelModel):
    type: str
    avg_utilization: int
    total_assets: int
    underutilized: int
    utilization_rate: int


class RedistributionSuggestion(CamelModel):
    id: str
    asset_id: str
    asset_name: str
    asset_type: str
    current_utilization: float
    from_department: str
    from_department_id: str
    to_department: str
    to_department_id: str
    potential_impact: str
    priority: str
    estimated_savings: int
    reason: str


class IdleAsset(CamelModel):
    id: str
    name: str
    type: str
    utilization: float
    location: str
    department_id: str
    last_active: datetime
    idle_days: int


class TopIdleAsset(CamelModel):
    id: str
    name: str
    type: str
    department: str
    department_id: str
    utilization: float
    location: str
    last_used: datetime
    idle_duration: int
    recommended_action: str
    value: float
    status: str


class UtilizationTrendPoint(CamelModel):
    date: str
    display_date: str
    utilization: int
    maintenance_events: int
    tooltip: Optional[str] = None


class MaintenanceImpactSlice(CamelModel):
    name: str
    value: int
    count: int
    color: str


class MovementAlert(CamelModel):
    id: str
    asset_id: str
    asset_name: str
    asset_type: str
    from_location: str
    to_location: str
    timestamp: datetime
    alert_type: str
    severity: str
    status: str
    moved_by: str


class UtilizationStats(CamelModel):
    total: int
    to_locate: int
    located: int
    flagged: int
    underutilized: int
    avg_utilization: int


class UtilizationAnalytics(CamelModel):
    department_utilization: list[DepartmentUtilization]
    asset_type_utilization: list[AssetTypeUtilization]
    redistribution_suggestions: list[RedistributionSuggestion]
    idle_assets: list[IdleAsset]
    top10_idle_assets: list[TopIdleAsset]
    utilization_trend: list[UtilizationTrendPoint]
    maintenance_impact: list[MaintenanceImpactSlice]
    movement_alerts: list[MovementAlert]


class UtilizationDashboard(CamelModel):
    stats: UtilizationStats
    utilization: UtilizationAnalytics
