# asset_analytics/services/utilization_service.py
"""
UtilizationAnalyzer: department / asset-type utilization rollups, idle asset
extraction, maintenance impact and movement alerts for the utilization dashboard.

Only tagged assets are visible here. Raw department averages are kept in
avg_utilization; the optional banding pass writes display_utilization only.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from asset_analytics.config import settings
from asset_analytics.schemas.entities import Asset, Dataset
from asset_analytics.schemas.utilization import (
    AssetTypeUtilization, DepartmentUtilization, IdleAsset, MaintenanceImpactSlice,
    MovementAlert, TopIdleAsset, UtilizationAnalytics, UtilizationDashboard, UtilizationStats,
)
from asset_analytics.services import redistribution_service, trend_service
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler
from asset_analytics.utils.logger import get_logger
from asset_analytics.utils.numbers import round_half_up

logger = get_logger(__name__)

MS_PER_DAY = 86_400_000
TOP_BAND = (5, 90, 7)          # count, floor, jitter: "fully utilized"
IDLE_BAND = (3, 25, 12)        # count, floor, jitter: "critically idle" 25–37
MODERATE_BAND = (3, 45, 12)    # count, floor, jitter: "moderate" 45–57


def safe_ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0


def pct(part: float, whole: float) -> int:
    return round_half_up(safe_ratio(part, whole) * 100)


def idle_days(last_active: datetime, now: datetime) -> int:
    """Whole days since last activity; never negative."""
    elapsed_ms = (now - last_active).total_seconds() * 1000
    return max(0, math.floor(elapsed_ms / MS_PER_DAY))


def recommended_action(days_idle: int) -> str:
    if days_idle > 30:
        return "Consider Redistribution"
    if days_idle > 14:
        return "Schedule Utilization Review"
    return "Monitor Usage Pattern"


def stacked_percentages(in_maintenance: int, pending_maintenance: int, total: int) -> tuple[int, int, int]:
    """
    (available, under maintenance, pending maintenance) percentages summing to 100.
    Available is the remainder, never rounded on its own. An empty group is all zeros.
    """
    if not total:
        return 0, 0, 0
    under = pct(in_maintenance, total)
    pending = pct(pending_maintenance, total)
    if under + pending > 100:
        pending = 100 - under
    return max(0, 100 - under - pending), under, pending


@dataclass
class DepartmentGroup:
    assets: list = field(default_factory=list)
    total_utilization: float = 0
    underutilized: int = 0
    active: int = 0
    in_maintenance: int = 0
    available: int = 0
    pending_maintenance: int = 0

    def add(self, asset: Asset):
        self.assets.append(asset)
        self.total_utilization += asset.utilization
        if asset.utilization < settings.UNDERUTILIZED_THRESHOLD:
            self.underutilized += 1
        else:
            self.active += 1
        if asset.status == "maintenance":
            self.in_maintenance += 1
        if asset.status == "available":
            self.available += 1

    @property
    def avg_utilization(self) -> int:
        return round_half_up(safe_ratio(self.total_utilization, len(self.assets)))


def group_by_department(assets: list[Asset], tables: Dataset) -> dict[str, DepartmentGroup]:
    groups: dict[str, DepartmentGroup] = defaultdict(DepartmentGroup)
    by_id = {}
    for asset in assets:
        groups[asset.department_id].add(asset)
        by_id[asset.id] = asset
    for task in tables.maintenance_tasks:
        asset = by_id.get(task.asset_id)
        if asset is not None and task.status == "pending":
            groups[asset.department_id].pending_maintenance += 1
    return dict(groups)


def department_utilization(index: JoinIndex, sampler: WeightedSampler, now: datetime,
                           include_empty: bool = False) -> list[DepartmentUtilization]:
    """
    Per-department rollup sorted by raw average, descending.
    include_empty adds zero-filled rows for departments that own no tagged assets.
    """
    groups = group_by_department(index.tagged_assets, index.tables)
    if include_empty:
        for dept in index.tables.departments:
            groups.setdefault(dept.id, DepartmentGroup())

    rows = []
    for dept_id, group in groups.items():
        total = len(group.assets)
        available, under, pending = stacked_percentages(group.in_maintenance, group.pending_maintenance, total)
        avg = group.avg_utilization
        rows.append(DepartmentUtilization(
            department_id=dept_id,
            department_name=index.department_name(dept_id),
            avg_utilization=avg,
            display_utilization=avg,
            total_assets=total,
            underutilized=group.underutilized,
            active=group.active,
            idle=group.underutilized,
            in_maintenance=group.in_maintenance,
            available_count=group.available,
            pending_maintenance_count=group.pending_maintenance,
            available=available,
            under_maintenance=under,
            pending_maintenance=pending,
            utilization_trend=trend_service.department_trend(avg, sampler, now) if total else [],
        ))
    rows.sort(key=lambda r: r.avg_utilization, reverse=True)
    return rows


def apply_display_bands(rows: list[DepartmentUtilization], sampler: WeightedSampler) -> list[DepartmentUtilization]:
    """
    Presentation-only pass so every UI filter bucket has results: the top ≤5
    rows are lifted to ≥90, the bottom ≤3 capped into 25–37, and the ≤3 above
    those set to 45–57. Writes display_utilization; avg_utilization is untouched.
    Expects rows sorted descending.
    """
    n = len(rows)
    if not n:
        return rows

    top_count, top_floor, top_jitter = TOP_BAND
    top_count = min(top_count, n)
    for row in rows[:top_count]:
        row.display_utilization = max(row.display_utilization, top_floor + sampler.randint(0, top_jitter))
        row.banded = True

    idle_count, idle_floor, idle_jitter = IDLE_BAND
    idle_count = min(idle_count, n)
    for i in range(idle_count):
        row = rows[n - 1 - i]
        row.display_utilization = min(row.display_utilization, idle_floor + sampler.randint(0, idle_jitter))
        row.banded = True

    mod_count, mod_floor, mod_jitter = MODERATE_BAND
    mod_count = min(mod_count, max(0, n - idle_count - top_count))
    for i in range(mod_count):
        row = rows[n - 1 - idle_count - i]
        row.display_utilization = mod_floor + sampler.randint(0, mod_jitter)
        row.banded = True
    return rows


def asset_type_utilization(assets: list[Asset]) -> list[AssetTypeUtilization]:
    totals = defaultdict(lambda: [0, 0.0, 0])   # count, utilization sum, underutilized
    for asset in assets:
        entry = totals[asset.type]
        entry[0] += 1
        entry[1] += asset.utilization
        if asset.utilization < settings.UNDERUTILIZED_THRESHOLD:
            entry[2] += 1

    rows = [
        AssetTypeUtilization(
            type=asset_type,
            avg_utilization=round_half_up(safe_ratio(util_sum, count)),
            total_assets=count,
            underutilized=under,
            utilization_rate=pct(count - under, count),
        )
        for asset_type, (count, util_sum, under) in totals.items()
    ]
    rows.sort(key=lambda r: r.avg_utilization)
    return rows


def top_idle_assets(index: JoinIndex, now: datetime, limit: int = 10) -> list[TopIdleAsset]:
    """Available tagged assets under the idle threshold, least utilized first."""
    candidates = [a for a in index.tagged_assets
                  if a.utilization < settings.IDLE_THRESHOLD and a.status == "available"]
    candidates.sort(key=lambda a: a.utilization)
    result = []
    for asset in candidates[:limit]:
        days = idle_days(asset.last_active, now)
        result.append(TopIdleAsset(
            id=asset.id,
            name=asset.name,
            type=asset.type,
            department=index.resolve_department(asset).name,
            department_id=asset.department_id,
            utilization=asset.utilization,
            location=index.zone_name(asset.location.zone_id),
            last_used=asset.last_active,
            idle_duration=days,
            recommended_action=recommended_action(days),
            value=asset.value or 0,
            status=asset.status,
        ))
    return result


def idle_assets(index: JoinIndex, now: datetime, threshold: int = 20, limit: int = 10) -> list[IdleAsset]:
    candidates = [a for a in index.tagged_assets if a.utilization < threshold and a.status == "available"]
    candidates.sort(key=lambda a: a.utilization)
    return [
        IdleAsset(
            id=a.id, name=a.name, type=a.type, utilization=a.utilization,
            location=index.zone_name(a.location.zone_id), department_id=a.department_id,
            last_active=a.last_active, idle_days=idle_days(a.last_active, now),
        )
        for a in candidates[:limit]
    ]


def maintenance_impact(index: JoinIndex) -> list[MaintenanceImpactSlice]:
    tagged = index.tagged_assets
    total = len(tagged)
    available = sum(1 for a in tagged if a.status == "available")
    under = sum(1 for a in tagged if a.status == "maintenance")
    pending = sum(1 for t in index.tables.maintenance_tasks
                  if t.status == "pending" and t.asset_id in index.tagged_ids)
    return [
        MaintenanceImpactSlice(name="Available", value=pct(available, total), count=available, color="#059669"),
        MaintenanceImpactSlice(name="Under Maintenance", value=pct(under, total), count=under, color="#dc2626"),
        MaintenanceImpactSlice(name="Pending Maintenance", value=pct(pending, total), count=pending, color="#d97706"),
    ]


def movement_alerts(index: JoinIndex, sampler: WeightedSampler, now: datetime,
                    window_hours: int = 48, flag_chance: float = 0.15, limit: int = 15) -> list[MovementAlert]:
    """Unauthorized movements plus a random share flagged as abnormal, newest first."""
    since = now - timedelta(hours=window_hours)
    flagged = [
        log for log in index.tables.movement_logs
        if log.asset_id in index.tagged_ids and log.timestamp > since
        and (not log.authorized or sampler.chance(flag_chance))
    ]
    flagged.sort(key=lambda log: log.timestamp, reverse=True)

    alerts = []
    for log in flagged[:limit]:
        asset = index.asset(log.asset_id)
        if not log.authorized:
            alert_type = "Unauthorized Movement"
        else:
            alert_type = "Out-of-Zone Event" if sampler.chance(0.6) else "Abnormal Movement Pattern"
        alerts.append(MovementAlert(
            id=log.id,
            asset_id=log.asset_id,
            asset_name=asset.name if asset else "Unknown Asset",
            asset_type=asset.type if asset else "Unknown",
            from_location=index.zone_name(log.from_zone_id),
            to_location=index.zone_name(log.to_zone_id),
            timestamp=log.timestamp,
            alert_type=alert_type,
            severity="high" if not log.authorized else "medium",
            status="resolved" if sampler.chance(0.3) else "pending",
            moved_by=log.moved_by or "Unknown User",
        ))
    return alerts


def utilization_stats(index: JoinIndex) -> UtilizationStats:
    tagged = index.tagged_assets
    total = len(tagged)
    located = sum(1 for a in tagged if a.status != "lost")
    overdue_ids = {t.asset_id for t in index.tables.maintenance_tasks if t.status == "overdue"}
    flagged = sum(1 for a in tagged if a.status == "lost" or a.id in overdue_ids)
    return UtilizationStats(
        total=total,
        to_locate=total - located,
        located=located,
        flagged=flagged,
        underutilized=sum(1 for a in tagged if a.utilization < settings.UNDERUTILIZED_THRESHOLD),
        avg_utilization=round_half_up(safe_ratio(sum(a.utilization for a in tagged), total)),
    )


def build_utilization_dashboard(index: JoinIndex, sampler: WeightedSampler,
                                now: Optional[datetime] = None) -> UtilizationDashboard:
    now = now or datetime.now(timezone.utc)
    stats = utilization_stats(index)

    departments = department_utilization(index, sampler, now)
    if settings.UTILIZATION_BANDING:
        apply_display_bands(departments, sampler)

    suggestions = redistribution_service.plan_redistribution(departments, index, sampler)
    analytics = UtilizationAnalytics(
        department_utilization=departments,
        asset_type_utilization=asset_type_utilization(index.tagged_assets),
        redistribution_suggestions=suggestions,
        idle_assets=idle_assets(index, now),
        top10_idle_assets=top_idle_assets(index, now),
        utilization_trend=trend_service.utilization_trend(
            stats.avg_utilization, index.tables.maintenance_tasks, sampler, now),
        maintenance_impact=maintenance_impact(index),
        movement_alerts=movement_alerts(index, sampler, now),
    )
    logger.info(
        f"[UTILIZATION] departments={len(departments)} suggestions={len(suggestions)} "
        f"top_idle={len(analytics.top10_idle_assets)} avg={stats.avg_utilization}%"
    )
    return UtilizationDashboard(stats=stats, utilization=analytics)
