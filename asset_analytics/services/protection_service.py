# asset_analytics/services/protection_service.py
"""
ProtectionRiskEngine: simulated geofence violations, alerts and movement
patterns over the movement-log history of tagged assets, plus the fleet metrics
and per-asset risk scoring built on them.

Pipeline per request:
  movements in window → violations → alerts → patterns → metrics / risk rollups

Violations and alerts are synthesized with a WeightedSampler; pass a seeded
sampler for reproducible output. The fleet compliance score in the metrics is
computed from the configured population, not from per-asset compliance status.
"""

import math
from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Optional

from asset_analytics.config import settings
from asset_analytics.schemas.entities import Asset, MovementLog
from asset_analytics.schemas.protection import (
    AlertCounts, AnomalyIndicators, AssetProtectionDetail, AssetProtectionSummary,
    GeofenceEffectiveness, GeofenceList, GeofenceStatus, MovementPattern, PatternMovement,
    ProtectionAlert, ProtectionCoverage, ProtectionDashboard, ProtectionMetrics, RiskAsset,
    Violation, ViolationTrendPoint, ViolationTypeCount,
)
from asset_analytics.services import alert_service
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import (
    ASSET_SEVERITY_WEIGHTS, RISK_BUCKET_WEIGHTS, SEVERITY_WEIGHTS, VIOLATION_STATUS_WEIGHTS,
    WeightedSampler,
)
from asset_analytics.utils.logger import get_logger
from asset_analytics.utils.numbers import round_half_up

logger = get_logger(__name__)

TIME_WINDOWS = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_TIME_RANGE = "24h"

VIOLATION_TYPES = ("entry", "exit", "unauthorized_presence", "after_hours")
PATTERN_TYPES = ("normal", "unusual", "suspicious", "emergency")
REVIEW_STATUSES = ("pending", "reviewed", "cleared", "escalated")
ALERT_RECIPIENTS = ["security@hospital.com", "biomedical@hospital.com"]
UNASSIGNED_GEOFENCE = ("geo-unassigned", "Unassigned Security Zone")

PATTERN_DESCRIPTIONS = {
    "normal": "Standard movement pattern detected for {name}",
    "unusual": "Unusual movement pattern detected for {name} - deviates from normal usage",
    "suspicious": "Suspicious movement pattern detected for {name} - potential security concern",
    "emergency": "Emergency movement pattern detected for {name} - immediate attention required",
}

# indicator → probability, only drawn for anomalous patterns
FLEET_INDICATOR_CHANCE = {
    "after_hours": 0.3,
    "unauthorized_zones": 0.5,
    "rapid_movement": 0.4,
    "pattern_deviation": 0.6,
    "frequency_anomaly": 0.3,
}
ASSET_INDICATOR_CHANCE = {
    "after_hours": 0.4,
    "unauthorized_zones": 0.3,
    "rapid_movement": 0.2,
}

SEVERITY_POINTS = {"critical": 25, "high": 15, "medium": 8, "low": 3}
PATTERN_POINTS = {"high": 15, "medium": 8, "low": 2}
BUSY_MOVEMENT_COUNT = 50       # > 50 movements: +10
QUIET_MOVEMENT_COUNT = 5       # < 5 movements: +8

PATTERN_CHANCE = 0.3
ASSET_VIOLATION_CHANCE = 0.08
RISK_ASSET_SHARE = 0.12
RISK_ASSET_CAP = 50


# ── Windowing ───────────────────────────────────────────────────────────────

def window_start(time_range: str, now: datetime) -> datetime:
    return now - TIME_WINDOWS.get(time_range, TIME_WINDOWS[DEFAULT_TIME_RANGE])


def movements_in_window(index: JoinIndex, start: datetime) -> list[MovementLog]:
    return [log for log in index.tables.movement_logs
            if log.asset_id in index.tagged_ids and log.timestamp >= start]


def violation_chance(movement_count: int) -> float:
    """Per-movement probability, capped so at most ~VIOLATION_CAP violations are synthesized."""
    if movement_count <= 0:
        return 0.0
    return min(settings.MAX_VIOLATION_CHANCE, settings.VIOLATION_CAP / movement_count)


# ── Violations ──────────────────────────────────────────────────────────────

def _geofence_for(movement: MovementLog, index: JoinIndex, sampler: WeightedSampler) -> tuple[str, str]:
    geofence = index.geofence_for_zone(movement.to_zone_id)
    if geofence is None:
        active = index.active_geofences()
        if not active:
            return UNASSIGNED_GEOFENCE
        geofence = sampler.choice(active)
    return geofence.id, geofence.name


def build_violation(movement: MovementLog, asset: Asset, index: JoinIndex, sampler: WeightedSampler,
                    now: datetime, severity: str, status: str) -> Violation:
    geofence_id, geofence_name = _geofence_for(movement, index, sampler)
    resolved = status == "resolved"
    return Violation(
        id=f"violation-{movement.id}",
        geofence_zone_id=geofence_id,
        geofence_zone_name=geofence_name,
        asset_id=asset.id,
        asset_name=asset.name,
        asset_type=asset.type,
        violation_type=sampler.choice(VIOLATION_TYPES),
        severity=severity,
        timestamp=movement.timestamp,
        movement_log_id=movement.id,
        from_zone_id=movement.from_zone_id,
        from_zone_name=index.zone_name(movement.from_zone_id),
        to_zone_id=movement.to_zone_id,
        to_zone_name=index.zone_name(movement.to_zone_id),
        detected_by=f"Reader-{sampler.randint(1, 20)}",
        status=status,
        alert_sent=sampler.chance(0.9),
        alert_recipients=list(ALERT_RECIPIENTS),
        response_time=sampler.randint(5, 50) if resolved else None,
        action_taken="Asset relocated to authorized zone" if resolved else None,
        estimated_risk=sampler.randint(1, 6),
        resolved_at=now - timedelta(seconds=sampler.uniform(0, 86400)) if resolved else None,
        resolved_by="Security Team" if resolved else None,
    )


def generate_violations(index: JoinIndex, movements: list[MovementLog], sampler: WeightedSampler,
                        now: datetime) -> list[Violation]:
    chance = violation_chance(len(movements))
    violations = []
    for movement in movements:
        if not sampler.chance(chance):
            continue
        asset = index.asset(movement.asset_id)
        if asset is None:
            continue
        violations.append(build_violation(
            movement, asset, index, sampler, now,
            severity=sampler.sample(SEVERITY_WEIGHTS),
            status=sampler.sample(VIOLATION_STATUS_WEIGHTS),
        ))
    violations.sort(key=lambda v: v.timestamp, reverse=True)
    return violations


# ── Alerts ──────────────────────────────────────────────────────────────────

def generate_alerts(index: JoinIndex, violations: list[Violation], sampler: WeightedSampler,
                    now: datetime) -> list[ProtectionAlert]:
    alerts = []
    for seq, violation in enumerate(violations):
        if not sampler.chance(settings.ALERT_FROM_VIOLATION_CHANCE):
            continue
        asset = index.asset(violation.asset_id)
        alert = alert_service.alert_from_violation(violation, asset, index, sampler, seq) if asset else None
        if alert is not None:
            alerts.append(alert)

    if index.tagged_assets:
        for i in range(sampler.randint(3, 7)):
            asset = sampler.choice(index.tagged_assets)
            alert = alert_service.standalone_alert(asset, index, sampler, now, alert_id=f"alert-standalone-{i}")
            if alert is not None:
                alerts.append(alert)

    alerts.sort(key=lambda a: a.created_at, reverse=True)
    return alerts


# ── Movement patterns ───────────────────────────────────────────────────────

def _indicators(anomalous: bool, chances: dict, sampler: WeightedSampler) -> AnomalyIndicators:
    if not anomalous:
        return AnomalyIndicators()
    return AnomalyIndicators(**{name: sampler.chance(p) for name, p in chances.items()})


def _pattern_movements(moves: list[MovementLog], index: JoinIndex, sampler: WeightedSampler) -> list[PatternMovement]:
    return [
        PatternMovement(
            timestamp=m.timestamp,
            from_zone_id=m.from_zone_id,
            from_zone_name=index.zone_name(m.from_zone_id),
            to_zone_id=m.to_zone_id,
            to_zone_name=index.zone_name(m.to_zone_id),
            duration=sampler.randint(5, 124),
            velocity=round(sampler.uniform(1, 6), 2),
        )
        for m in moves[:5]
    ]


def detect_movement_patterns(index: JoinIndex, movements: list[MovementLog], sampler: WeightedSampler,
                             now: datetime) -> list[MovementPattern]:
    by_asset = defaultdict(list)
    for log in movements:
        by_asset[log.asset_id].append(log)

    patterns = []
    for seq, (asset_id, moves) in enumerate(by_asset.items()):
        if len(moves) <= 2 or not sampler.chance(PATTERN_CHANCE):
            continue
        asset = index.asset(asset_id)
        if asset is None:
            continue

        pattern_type = sampler.choice(PATTERN_TYPES)
        anomalous = pattern_type != "normal"
        patterns.append(MovementPattern(
            id=f"pattern-{asset_id}-{seq}",
            asset_id=asset.id,
            asset_name=asset.name,
            asset_type=asset.type,
            pattern_type=pattern_type,
            description=PATTERN_DESCRIPTIONS[pattern_type].format(name=asset.name),
            detected_at=now,
            confidence=sampler.randint(0, 29) + (70 if anomalous else 50),
            risk_level=sampler.choice(("medium", "high", "critical")) if anomalous else "low",
            movement_count=len(moves),
            movements=_pattern_movements(moves, index, sampler),
            anomaly_indicators=_indicators(anomalous, FLEET_INDICATOR_CHANCE, sampler),
            alert_generated=anomalous and sampler.chance(0.8),
            review_status=sampler.choice(REVIEW_STATUSES),
        ))
    return patterns


# ── Scoring ─────────────────────────────────────────────────────────────────

def asset_risk_score(violations: list[Violation], patterns: list[MovementPattern], movement_count: int) -> int:
    """Severity points + pattern points + movement-frequency penalty, clamped to [0, 100]."""
    score = sum(SEVERITY_POINTS.get(v.severity, 0) for v in violations)
    score += sum(PATTERN_POINTS.get(p.risk_level, 0) for p in patterns)
    if movement_count > BUSY_MOVEMENT_COUNT:
        score += 10
    elif movement_count < QUIET_MOVEMENT_COUNT:
        score += 8
    return max(0, min(100, score))


def compliance_status(violations: list[Violation], alerts: list[ProtectionAlert], risk_score: int) -> str:
    active_violations = sum(1 for v in violations if v.status == "active")
    active_alerts = sum(1 for a in alerts if alert_service.is_open(a))
    if active_violations > 2 or active_alerts > 1 or risk_score >= 75:
        return "non-compliant"
    if active_violations > 0 or active_alerts > 0 or risk_score >= 25:
        return "at-risk"
    return "compliant"


def risk_level_for_score(score: int) -> str:
    if score >= 75:
        return "critical"
    if score >= 50:
        return "high"
    if score >= 25:
        return "medium"
    return "low"


def _bucket_score(sampler: WeightedSampler) -> int:
    upper = sampler.sample(RISK_BUCKET_WEIGHTS)
    return sampler.randint(upper - 24, upper)


def risk_assets(index: JoinIndex, violations: list[Violation], sampler: WeightedSampler) -> list[RiskAsset]:
    tagged = index.tagged_assets
    cap = min(RISK_ASSET_CAP, math.floor(len(tagged) * RISK_ASSET_SHARE))
    selected = [a for a in tagged if sampler.chance(RISK_ASSET_SHARE)][:cap]

    by_asset = defaultdict(list)
    for v in violations:
        by_asset[v.asset_id].append(v)

    rows = []
    for asset in selected:
        asset_violations = by_asset.get(asset.id, [])
        rows.append(RiskAsset(
            asset_id=asset.id,
            asset_name=asset.name,
            asset_type=asset.type,
            value=asset.value or sampler.randint(10000, 59999),
            risk_score=_bucket_score(sampler),
            location=index.zone(asset.location.zone_id).name,
            last_violation=asset_violations[0].timestamp if asset_violations else None,
            violation_count=len(asset_violations),
        ))
    rows.sort(key=lambda r: r.risk_score, reverse=True)
    return rows


def protection_coverage(index: JoinIndex, violations: list[Violation]) -> list[ProtectionCoverage]:
    totals = Counter(a.department_id for a in index.tables.assets)
    protected = Counter(a.department_id for a in index.tagged_assets)
    violation_counts = Counter()
    for v in violations:
        asset = index.asset(v.asset_id)
        if asset is not None and asset.is_tagged:
            violation_counts[asset.department_id] += 1

    return [
        ProtectionCoverage(
            department_id=dept.id,
            department_name=dept.name,
            total_assets=totals[dept.id],
            protected_assets=protected[dept.id],
            coverage=round_half_up(protected[dept.id] / totals[dept.id] * 100) if totals[dept.id] else 0,
            violations=violation_counts[dept.id],
        )
        for dept in index.tables.departments
    ]


# ── Fleet metrics ───────────────────────────────────────────────────────────

def geofence_effectiveness(index: JoinIndex, violations: list[Violation], limit: int = 3) -> list[GeofenceEffectiveness]:
    by_zone = defaultdict(list)
    for v in violations:
        by_zone[v.geofence_zone_id].append(v)

    rows = []
    for geofence in index.active_geofences():
        zone_violations = by_zone.get(geofence.id, [])
        handled = [v for v in zone_violations if v.status in ("resolved", "false_positive")]
        timed = [v.response_time for v in zone_violations if v.response_time is not None]
        rows.append(GeofenceEffectiveness(
            zone_id=geofence.id,
            zone_name=geofence.name,
            violation_count=len(zone_violations),
            response_rate=round_half_up(len(handled) / len(zone_violations) * 100) if zone_violations else 0,
            average_response_time=round_half_up(sum(timed) / len(timed)) if timed else 0,
        ))
    rows.sort(key=lambda r: r.violation_count, reverse=True)
    return rows[:limit]


def top_violation_types(violations: list[Violation], limit: int = 5) -> list[ViolationTypeCount]:
    counts = Counter(v.violation_type for v in violations)
    total = len(violations)
    rows = [
        ViolationTypeCount(type=vtype.replace("_", " "), count=count,
                           percentage=round_half_up(count / total * 100) if total else 0)
        for vtype, count in counts.items()
    ]
    rows.sort(key=lambda r: r.count, reverse=True)
    return rows[:limit]


def violation_trend(violations: list[Violation], now: datetime, days: int = 7) -> list[ViolationTrendPoint]:
    per_day = Counter(v.timestamp.date() for v in violations)
    resolved_per_day = Counter(v.timestamp.date() for v in violations if v.status == "resolved")
    points = []
    for i in range(days - 1, -1, -1):
        day = (now - timedelta(days=i)).date()
        points.append(ViolationTrendPoint(date=day.isoformat(), violations=per_day[day],
                                          resolved=resolved_per_day[day]))
    return points


def calculate_metrics(index: JoinIndex, violations: list[Violation], alerts: list[ProtectionAlert],
                      now: datetime) -> ProtectionMetrics:
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week = now - timedelta(days=7)
    month = now - timedelta(days=30)

    def since(items, attr, start):
        return sum(1 for item in items if getattr(item, attr) >= start)

    resolved = [v for v in violations if v.status == "resolved"]
    avg_response = sum(v.response_time or 0 for v in resolved) / len(resolved) if resolved else 0
    false_positives = sum(1 for v in violations if v.status == "false_positive")
    fp_rate = false_positives / len(violations) * 100 if violations else 0

    tagged_count = len(index.tagged_assets)
    if index.tables.geofence_zones:
        active_geofences = len(index.active_geofences())
    else:
        active_geofences = tagged_count // 800 + 5

    total_monitored = settings.TOTAL_MONITORED_ASSETS
    compliant = settings.FULLY_COMPLIANT_ASSETS
    return ProtectionMetrics(
        total_protected_assets=tagged_count,
        active_geofences=active_geofences,
        violations_today=since(violations, "timestamp", today),
        violations_this_week=since(violations, "timestamp", week),
        violations_this_month=since(violations, "timestamp", month),
        high_value_assets_at_risk=math.floor(tagged_count * 0.08),
        average_response_time=round_half_up(avg_response),
        false_positive_rate=round(fp_rate, 2),
        alerts_generated=AlertCounts(
            today=since(alerts, "created_at", today),
            this_week=since(alerts, "created_at", week),
            this_month=since(alerts, "created_at", month),
        ),
        compliance_score=round_half_up(compliant / total_monitored * 100) if total_monitored else 0,
        fully_compliant_assets=compliant,
        total_monitored_assets=total_monitored,
        top_violation_types=top_violation_types(violations),
        violation_trend=violation_trend(violations, now),
        geofence_effectiveness=geofence_effectiveness(index, violations),
    )


def build_protection_dashboard(index: JoinIndex, sampler: WeightedSampler, time_range: str = DEFAULT_TIME_RANGE,
                               now: Optional[datetime] = None) -> ProtectionDashboard:
    now = now or datetime.now(timezone.utc)
    movements = movements_in_window(index, window_start(time_range, now))
    violations = generate_violations(index, movements, sampler, now)
    alerts = generate_alerts(index, violations, sampler, now)
    patterns = detect_movement_patterns(index, movements, sampler, now)
    metrics = calculate_metrics(index, violations, alerts, now)

    logger.info(
        f"[PROTECTION] range={time_range} movements={len(movements)} violations={len(violations)} "
        f"alerts={len(alerts)} patterns={len(patterns)}"
    )
    return ProtectionDashboard(
        time_range=time_range,
        metrics=metrics,
        recent_violations=violations[:10],
        active_alerts=[a for a in alerts if alert_service.is_open(a)][:15],
        movement_patterns=patterns[:8],
        risk_assets=risk_assets(index, violations, sampler)[:10],
        protection_coverage=protection_coverage(index, violations),
    )


# ── Per-asset detail ────────────────────────────────────────────────────────

def _asset_patterns(asset: Asset, moves: list[MovementLog], index: JoinIndex, sampler: WeightedSampler,
                    now: datetime) -> list[MovementPattern]:
    if len(moves) < 3:
        return []
    patterns = []
    for i in range(sampler.randint(1, 2)):
        pattern_type = sampler.choice(("normal", "unusual", "suspicious"))
        anomalous = pattern_type != "normal"
        patterns.append(MovementPattern(
            id=f"pattern-{asset.id}-{i}",
            asset_id=asset.id,
            asset_name=asset.name,
            asset_type=asset.type,
            pattern_type=pattern_type,
            description=f"{pattern_type.capitalize()} movement pattern detected",
            detected_at=now,
            confidence=sampler.randint(0, 29) + (65 if anomalous else 45),
            risk_level=sampler.choice(("medium", "high")) if anomalous else "low",
            movement_count=len(moves),
            anomaly_indicators=_indicators(anomalous, ASSET_INDICATOR_CHANCE, sampler),
        ))
    return patterns


def _geofence_status(asset: Asset, index: JoinIndex, violations: list[Violation]) -> GeofenceStatus:
    zone_id = asset.location.zone_id
    covering = [g for g in index.active_geofences() if zone_id in g.zone_ids]
    blocked = any(g.type in ("restricted", "high-security") and asset.id not in g.asset_ids for g in covering)
    authorized = [g.name for g in index.active_geofences()
                  if g.type == "authorized" and (asset.id in g.asset_ids or zone_id in g.zone_ids)]
    return GeofenceStatus(
        in_authorized_zone=not blocked,
        last_geofence_violation=violations[0].timestamp if violations else None,
        authorized_zones=authorized,
    )


def build_asset_protection(index: JoinIndex, asset_id: str, sampler: WeightedSampler,
                           now: Optional[datetime] = None) -> Optional[AssetProtectionDetail]:
    """Per-asset protection view over the last 30 days. None when the asset is unknown."""
    now = now or datetime.now(timezone.utc)
    asset = index.asset(asset_id)
    if asset is None:
        return None

    if not asset.is_tagged:
        return AssetProtectionDetail(
            asset_id=asset.id, violations=[], alerts=[], movement_patterns=[], risk_score=0,
            compliance_status="not-monitored",
            summary=AssetProtectionSummary(total_violations=0, active_alerts=0, recent_movements=0, risk_level="low"),
        )

    start = now - TIME_WINDOWS["30d"]
    moves = [m for m in index.tables.movement_logs if m.asset_id == asset.id and m.timestamp >= start]

    violations = []
    for movement in moves:
        if sampler.chance(ASSET_VIOLATION_CHANCE):
            status = "resolved" if sampler.chance(0.8) else "active"
            violations.append(build_violation(movement, asset, index, sampler, now,
                                              severity=sampler.sample(ASSET_SEVERITY_WEIGHTS), status=status))
    violations.sort(key=lambda v: v.timestamp, reverse=True)

    alerts = []
    for seq, violation in enumerate(violations):
        if sampler.chance(settings.ALERT_FROM_VIOLATION_CHANCE):
            status = "resolved" if violation.status == "resolved" else "new"
            alert = alert_service.alert_from_violation(violation, asset, index, sampler, seq, status=status)
            if alert is not None:
                alerts.append(alert)
    for i in range(sampler.randint(1, 3)):
        alert = alert_service.standalone_alert(asset, index, sampler, now, alert_id=f"alert-additional-{asset.id}-{i}",
                                               window_hours=7 * 24, severities=("low", "medium", "high"))
        if alert is not None:
            alerts.append(alert)
    alerts.sort(key=lambda a: a.created_at, reverse=True)

    patterns = _asset_patterns(asset, moves, index, sampler, now)
    score = asset_risk_score(violations, patterns, len(moves))
    return AssetProtectionDetail(
        asset_id=asset.id,
        violations=violations[:10],
        alerts=alerts[:5],
        movement_patterns=patterns[:3],
        risk_score=score,
        compliance_status=compliance_status(violations, alerts, score),
        summary=AssetProtectionSummary(
            total_violations=len(violations),
            active_alerts=sum(1 for a in alerts if alert_service.is_open(a)),
            recent_movements=len(moves),
            risk_level=risk_level_for_score(score),
        ),
        geofence_status=_geofence_status(asset, index, violations),
    )


def list_geofences(index: JoinIndex) -> GeofenceList:
    zones = index.tables.geofence_zones
    active = sum(1 for g in zones if g.active)
    return GeofenceList(zones=zones, total_zones=len(zones), active_zones=active, inactive_zones=len(zones) - active)
