# asset_analytics/services/alert_service.py
"""
Shared alert construction service.
Used by protection_service (fleet and per-asset alerts) and report_service.

The severity → (urgency, estimated impact, action required) mapping lives in
exactly one table here; everything that classifies an alert goes through
response_profile().
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from asset_analytics.schemas.entities import Asset
from asset_analytics.schemas.protection import (
    AlertLocation, AlertMetadata, ProtectionAlert, Violation,
)
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import (
    ALERT_STATUS_WEIGHTS, SEVERITIES, WeightedSampler,
)
from asset_analytics.utils.logger import get_logger

logger = get_logger(__name__)

STANDALONE_ALERT_TYPES = ("geofence_violation", "movement_anomaly", "theft_risk",
                          "unauthorized_access", "asset_missing")


@dataclass(frozen=True)
class ResponseProfile:
    urgency: str
    estimated_impact: str
    action_required: bool


SEVERITY_RESPONSE = {
    "critical": ResponseProfile("immediate", "critical", True),
    "high": ResponseProfile("within_hour", "significant", True),
    "medium": ResponseProfile("within_day", "moderate", False),
    "low": ResponseProfile("routine", "minimal", False),
}


def response_profile(severity: str) -> ResponseProfile:
    """Unknown severities are treated as routine."""
    return SEVERITY_RESPONSE.get(severity, SEVERITY_RESPONSE["low"])


def alert_location(index: JoinIndex, asset: Asset) -> Optional[AlertLocation]:
    """Full building/floor/zone location, or None when the chain does not resolve."""
    loc = index.resolve_location(asset)
    if not loc.is_complete:
        return None
    return AlertLocation(
        building_id=loc.building.id, building_name=loc.building.name,
        floor_id=loc.floor.id, floor_name=loc.floor.name,
        zone_id=loc.zone.id, zone_name=loc.zone.name,
    )


def _asset_value(asset: Asset, sampler: WeightedSampler) -> float:
    return asset.value or sampler.randint(5000, 34999)


def alert_from_violation(violation: Violation, asset: Asset, index: JoinIndex,
                         sampler: WeightedSampler, seq: int,
                         status: Optional[str] = None) -> Optional[ProtectionAlert]:
    """
    geofence_violation alert carrying the violation's severity.
    Returns None when the asset's location chain is broken.
    """
    location = alert_location(index, asset)
    if location is None:
        return None

    profile = response_profile(violation.severity)
    return ProtectionAlert(
        id=f"alert-{violation.id}-{seq}",
        type="geofence_violation",
        asset_id=asset.id,
        asset_name=asset.name,
        asset_type=asset.type,
        asset_value=_asset_value(asset, sampler),
        message=f"Security boundary violation: {asset.name}",
        description=f"Asset {asset.name} violated {violation.geofence_zone_name} security boundary",
        severity=violation.severity,
        status=status or sampler.sample(ALERT_STATUS_WEIGHTS),
        created_at=violation.timestamp,
        location=location,
        violation_id=violation.id,
        geofence_zone_id=violation.geofence_zone_id,
        metadata=AlertMetadata(
            risk_score=violation.estimated_risk * 15,
            confidence=sampler.randint(75, 94),
            pattern_match="boundary_violation",
            trigger_condition="asset_zone_boundary_crossed",
        ),
        action_required=profile.action_required,
        urgency=profile.urgency,
        estimated_impact=profile.estimated_impact,
    )


def standalone_alert(asset: Asset, index: JoinIndex, sampler: WeightedSampler, now: datetime,
                     alert_id: str, window_hours: int = 48,
                     severities=SEVERITIES) -> Optional[ProtectionAlert]:
    """Monitoring alert not triggered by a violation, created within the last `window_hours`."""
    location = alert_location(index, asset)
    if location is None:
        return None

    alert_type = sampler.choice(STANDALONE_ALERT_TYPES)
    severity = sampler.choice(severities)
    status = "resolved" if sampler.chance(0.7) else sampler.choice(("new", "acknowledged", "investigating"))
    profile = response_profile(severity)
    readable = alert_type.replace("_", " ")
    return ProtectionAlert(
        id=alert_id,
        type=alert_type,
        asset_id=asset.id,
        asset_name=asset.name,
        asset_type=asset.type,
        asset_value=_asset_value(asset, sampler),
        message=f"Security alert: {asset.name}",
        description=f"Automated security monitoring detected {readable} for {asset.name}",
        severity=severity,
        status=status,
        created_at=now - timedelta(seconds=sampler.uniform(0, window_hours * 3600)),
        location=location,
        metadata=AlertMetadata(risk_score=sampler.randint(20, 79), confidence=sampler.randint(70, 94)),
        action_required=profile.action_required,
        urgency=profile.urgency,
        estimated_impact=profile.estimated_impact,
    )


def is_open(alert: ProtectionAlert) -> bool:
    return alert.status != "resolved"
