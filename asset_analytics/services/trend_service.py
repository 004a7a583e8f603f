# asset_analytics/services/trend_service.py
"""
TrendSynthesizer: bounded, seasonally-shaped time series for dashboard charts.

Every series combines some of: a sinusoidal weekly/seasonal component, a
day-of-week or hour-of-day activity table, bounded uniform jitter, and
event-driven depressions. Each value is clamped to the series' SeriesBounds
before it is returned.
"""

import math
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from asset_analytics.schemas.compliance import NoncomplianceTrendPoint
from asset_analytics.schemas.entities import MaintenanceTask, MovementLog
from asset_analytics.schemas.trend import (
    AccuracyPoint, AccuracySummary, AccuracyTrend, VisibilityPoint, VisibilityTrend,
)
from asset_analytics.schemas.utilization import DailyUtilization, UtilizationTrendPoint
from asset_analytics.services.weighted_sampler import WeightedSampler
from asset_analytics.utils.logger import get_logger
from asset_analytics.utils.numbers import round_half_up

logger = get_logger(__name__)


@dataclass(frozen=True)
class SeriesBounds:
    low: float
    high: float

    def clamp(self, value: float) -> float:
        return max(self.low, min(self.high, value))


DEPARTMENT_TREND_BOUNDS = SeriesBounds(20, 95)
NONCOMPLIANCE_RATE_BOUNDS = SeriesBounds(40, 50)
ACCURACY_BOUNDS = SeriesBounds(60, 95)
UTILIZATION_CEILING = 95

# Indexed Sunday=0 … Saturday=6
WEEKDAY_ACTIVITY = (0.9, 1.0, 1.2, 1.2, 1.1, 0.8, 0.7)

MAINTENANCE_HEAVY_DAY = 5      # > 5 events: -15
MAINTENANCE_BUSY_DAY = 2       # > 2 events: -5


def _sunday_index(day: date) -> int:
    return (day.weekday() + 1) % 7


def _is_weekend(day: date) -> bool:
    return _sunday_index(day) in (0, 6)


def maintenance_events_by_day(tasks: Iterable[MaintenanceTask]) -> Counter:
    """Tasks scheduled or completed on each calendar day (a task counts once per day)."""
    counts = Counter()
    for task in tasks:
        days = {task.scheduled_date.date()}
        if task.completed_date:
            days.add(task.completed_date.date())
        for day in days:
            counts[day] += 1
    return counts


def maintenance_depression(events: int) -> int:
    if events > MAINTENANCE_HEAVY_DAY:
        return 15
    if events > MAINTENANCE_BUSY_DAY:
        return 5
    return 0


def utilization_trend(baseline: float, tasks: Iterable[MaintenanceTask], sampler: WeightedSampler,
                      now: datetime, days: int = 30) -> list[UtilizationTrendPoint]:
    """Daily fleet utilization around `baseline`, depressed on heavy maintenance days."""
    events_by_day = maintenance_events_by_day(tasks)
    bounds = SeriesBounds(min(baseline * 0.3, 25), UTILIZATION_CEILING)
    points = []
    for i in range(days):
        day = (now - timedelta(days=days - 1 - i)).date()
        weekly = math.sin((i / 7) * 2 * math.pi) * 8
        weekend = -5 if _is_weekend(day) else 0
        events = events_by_day.get(day, 0)
        value = baseline + weekly + weekend + sampler.jitter(10) - maintenance_depression(events)
        points.append(UtilizationTrendPoint(
            date=day.isoformat(),
            display_date=day.strftime("%m/%d"),
            utilization=round_half_up(bounds.clamp(value)),
            maintenance_events=events,
            tooltip=f"{events} maintenance tasks scheduled" if events > MAINTENANCE_HEAVY_DAY else None,
        ))
    heavy = sum(1 for p in points if p.maintenance_events > MAINTENANCE_HEAVY_DAY)
    logger.debug(f"Utilization trend: {days} days around {baseline}, {heavy} heavy maintenance days")
    return points


def department_trend(avg_utilization: float, sampler: WeightedSampler, now: datetime,
                     days: int = 7) -> list[DailyUtilization]:
    return [
        DailyUtilization(
            date=(now - timedelta(days=days - 1 - i)).date().isoformat(),
            utilization=DEPARTMENT_TREND_BOUNDS.clamp(avg_utilization + sampler.randint(-15, 14)),
        )
        for i in range(days)
    ]


def noncompliance_trend(total_monitored: int, sampler: WeightedSampler, now: datetime,
                        days: int = 30, baseline: float = 48,
                        improvement: float = 3) -> list[NoncomplianceTrendPoint]:
    """Non-compliance rate improving linearly from `baseline` with ±1% daily jitter."""
    points = []
    for i in range(days):
        day = (now - timedelta(days=days - 1 - i)).date()
        progress = i / (days - 1) if days > 1 else 0
        rate = NONCOMPLIANCE_RATE_BOUNDS.clamp(baseline - max(0, progress * improvement) + sampler.jitter(2))
        points.append(NoncomplianceTrendPoint(
            date=day.isoformat(),
            noncompliant=math.floor(rate / 100 * total_monitored),
            non_compliance_rate=round_half_up(rate),
        ))
    return points


def _hourly_activity(hour: int, sampler: WeightedSampler) -> float:
    if 6 <= hour <= 18:
        return 0.15 + math.sin((hour - 6) * math.pi / 12) * 0.08   # peaks around noon
    if 19 <= hour <= 23:
        return 0.08 + sampler.uniform(0, 0.04)
    return 0.03 + sampler.uniform(0, 0.02)


def _daily_activity(day: date, sampler: WeightedSampler) -> float:
    if _is_weekend(day):
        return 0.06 + sampler.uniform(0, 0.04)
    return (0.12 + sampler.uniform(0, 0.08)) * WEEKDAY_ACTIVITY[_sunday_index(day)]


def _monthly_activity(day: date, sampler: WeightedSampler) -> float:
    multiplier = 1 + math.sin((day.day / 30) * math.pi) * 0.2
    return (0.10 + sampler.uniform(0, 0.08)) * multiplier


def visibility_trend(movement_logs: Iterable[MovementLog], total_assets: int, range_: str,
                     sampler: WeightedSampler, now: datetime) -> VisibilityTrend:
    """
    Scanned / not-scanned assets per period. The observed count of distinct
    moving assets is a floor; the activity table supplies a realistic baseline.
    """
    hourly = range_ == "day"
    periods = 24 if hourly else 30 if range_ == "month" else 7

    seen: dict = {}
    for log in movement_logs:
        key = log.timestamp.replace(minute=0, second=0, microsecond=0) if hourly else log.timestamp.date()
        seen.setdefault(key, set()).add(log.asset_id)

    bounds = SeriesBounds(0, total_assets)
    trend = []
    for i in range(periods - 1, -1, -1):
        if hourly:
            start = (now - timedelta(hours=i)).replace(minute=0, second=0, microsecond=0)
            rate = _hourly_activity(start.hour, sampler)
            label = start.strftime("%H:00")
            period = f"{start.hour}:00-{(start + timedelta(hours=1)).hour}:00"
            actual = len(seen.get(start, ()))
        else:
            start = (now - timedelta(days=i)).date()
            rate = _monthly_activity(start, sampler) if range_ == "month" else _daily_activity(start, sampler)
            label = period = start.strftime("%m/%d")
            actual = len(seen.get(start, ()))

        scanned = int(bounds.clamp(max(actual, math.floor(total_assets * rate))))
        trend.append(VisibilityPoint(date=label, scanned=scanned,
                                     not_scanned=total_assets - scanned, period=period))
    logger.debug(f"Visibility trend ({range_}): {periods} periods over {total_assets} assets")
    return VisibilityTrend(range=range_, total_assets=total_assets, trend=trend)


def _months_back(now: datetime, count: int) -> date:
    month_index = now.year * 12 + (now.month - 1) - count
    return date(month_index // 12, month_index % 12 + 1, 1)


def accuracy_trend(sampler: WeightedSampler, now: datetime, months: int = 12,
                   baseline: float = 75) -> AccuracyTrend:
    """Monthly predictive-maintenance accuracy: seasonal swing plus steady improvement."""
    points = []
    for i in range(months):
        seasonal = math.sin((i / months) * 2 * math.pi) * 8
        value = ACCURACY_BOUNDS.clamp(baseline + seasonal + i * 1.5 + sampler.jitter(10))
        points.append(AccuracyPoint(
            month=_months_back(now, months - 1 - i).strftime("%b %y"),
            accuracy=round_half_up(value),
            predictions_count=sampler.randint(20, 49),
        ))

    half = months // 2
    first = sum(p.accuracy for p in points[:half]) / max(1, half)
    second = sum(p.accuracy for p in points[half:]) / max(1, months - half)
    direction = "improving" if second > first else "declining" if second < first else "stable"
    logger.debug(f"Accuracy trend: {months} months, {direction}")
    return AccuracyTrend(
        trend=points,
        summary=AccuracySummary(
            avg_accuracy=round_half_up(sum(p.accuracy for p in points) / max(1, months)),
            total_predictions=sum(p.predictions_count for p in points),
            trend=direction,
        ),
    )
