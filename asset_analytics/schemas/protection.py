# asset_analytics/schemas/protection.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from asset_analytics.schemas.entities import CamelModel, GeofenceZone

Severity = Literal["low", "medium", "high", "critical"]
ViolationType = Literal["entry", "exit", "unauthorized_presence", "after_hours"]
ViolationStatus = Literal["active", "investigating", "resolved", "false_positive"]
AlertType = Literal["geofence_violation", "movement_anomaly", "theft_risk", "unauthorized_access", "asset_missing"]
AlertStatus = Literal["new", "acknowledged", "investigating", "resolved"]
Urgency = Literal["immediate", "within_hour", "within_day", "routine"]
Impact = Literal["minimal", "moderate", "significant", "critical"]
PatternType = Literal["normal", "unusual", "suspicious", "emergency"]
TimeRange = Literal["1h", "24h", "7d", "30d"]


class Violation(CamelModel):
    id: str
    geofence_zone_id: str
    geofence_zone_name: str
    asset_id: str
    asset_name: str
    asset_type: str
    violation_type: ViolationType
    severity: Severity
    timestamp: datetime
    movement_log_id: str
    from_zone_id: str
    from_zone_name: str
    to_zone_id: str
    to_zone_name: str
    detected_by: Optional[str] = None
    status: ViolationStatus
    alert_sent: bool = False
    alert_recipients: list[str] = []
    response_time: Optional[int] = None      # minutes, resolved only
    action_taken: Optional[str] = None
    estimated_risk: int = Field(ge=1, le=10)
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None


class AlertLocation(CamelModel):
    building_id: str
    building_name: str
    floor_id: str
    floor_name: str
    zone_id: str
    zone_name: str


class AlertMetadata(CamelModel):
    risk_score: int
    confidence: int
    pattern_match: Optional[str] = None
    trigger_condition: Optional[str] = None


class ProtectionAlert(CamelModel):
    id: str
    type: AlertType
    asset_id: str
    asset_name: str
    asset_type: str
    asset_value: Optional[float] = None
    message: str
    description: str
    severity: Severity
    status: AlertStatus
    created_at: datetime
    target_roles: list[str] = ["biomedical", "admin"]
    location: Optional[AlertLocation] = None
    violation_id: Optional[str] = None
    geofence_zone_id: Optional[str] = None
    metadata: Optional[AlertMetadata] = None
    action_required: bool
    urgency: Urgency
    estimated_impact: Impact


class PatternMovement(CamelModel):
    timestamp: datetime
    from_zone_id: str
    from_zone_name: str
    to_zone_id: str
    to_zone_name: str
    duration: int              # minutes spent in zone
    velocity: Optional[float] = None


class AnomalyIndicators(CamelModel):
    after_hours: bool = False
    unauthorized_zones: bool = False
    rapid_movement: bool = False
    pattern_deviation: bool = False
    frequency_anomaly: bool = False


class MovementPattern(CamelModel):
    id: str
    asset_id: str
    asset_name: str
    asset_type: str
    pattern_type: PatternType
    description: str
    detected_at: datetime
    confidence: int
    risk_level: Severity
    movement_count: int
    movements: list[PatternMovement] = []
    anomaly_indicators: AnomalyIndicators
    alert_generated: bool = False
    review_status: str = "pending"


class ViolationTypeCount(CamelModel):
    type: str
    count: int
    percentage: int


class ViolationTrendPoint(CamelModel):
    date: str
    violations: int
    resolved: int


class GeofenceEffectiveness(CamelModel):
    zone_id: str
    zone_name: str
    violation_count: int
    response_rate: int
    average_response_time: int


class AlertCounts(CamelModel):
    today: int
    this_week: int
    this_month: int


class ProtectionMetrics(CamelModel):
    total_protected_assets: int
    active_geofences: int
    violations_today: int
    violations_this_week: int
    violations_this_month: int
    high_value_assets_at_risk: int
    average_response_time: int
    false_positive_rate: float
    alerts_generated: AlertCounts
    compliance_score: int                  # fleet-level, from configured population
    fully_compliant_assets: int
    total_monitored_assets: int
    top_violation_types: list[ViolationTypeCount]
    violation_trend: list[ViolationTrendPoint]
    geofence_effectiveness: list[GeofenceEffectiveness]


class RiskAsset(CamelModel):
    asset_id: str
    asset_name: str
    asset_type: str
    value: float
    risk_score: int = Field(ge=0, le=100)
    location: str
    last_violation: Optional[datetime] = None
    violation_count: int


class ProtectionCoverage(CamelModel):
    department_id: str
    department_name: str
    total_assets: int
    protected_assets: int
    coverage: int
    violations: int


class ProtectionDashboard(CamelModel):
    time_range: TimeRange
    metrics: ProtectionMetrics
    recent_violations: list[Violation]
    active_alerts: list[ProtectionAlert]
    movement_patterns: list[MovementPattern]
    risk_assets: list[RiskAsset]
    protection_coverage: list[ProtectionCoverage]


class AssetProtectionSummary(CamelModel):
    total_violations: int
    active_alerts: int
    recent_movements: int
    risk_level: Severity


class GeofenceStatus(CamelModel):
    in_authorized_zone: bool
    last_geofence_violation: Optional[datetime] = None
    authorized_zones: list[str] = []


class AssetProtectionDetail(CamelModel):
    asset_id: str
    violations: list[Violation]
    alerts: list[ProtectionAlert]
    movement_patterns: list[MovementPattern]
    risk_score: int = Field(ge=0, le=100)
    compliance_status: Literal["compliant", "at-risk", "non-compliant", "not-monitored"]
    summary: AssetProtectionSummary
    geofence_status: Optional[GeofenceStatus] = None


class GeofenceList(CamelModel):
    zones: list[GeofenceZone]
    total_zones: int
    active_zones: int
    inactive_zones: int
