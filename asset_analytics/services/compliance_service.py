# asset_analytics/services/compliance_service.py
"""
ComplianceRiskScorer: fleet risk distribution, department rollup, per-asset
risk records and the 30-day non-compliance trend.

The monitored population (total / fully compliant / high / medium) comes from
configuration, not from the live asset count, so the headline compliance score
stays stable across datasets. Department ratios are random within 45–65%;
which sampled assets are non-compliant is deterministic (first share by index).
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from asset_analytics.config import settings
from asset_analytics.schemas.compliance import (
    ComplianceDashboard, ComplianceRiskRecord, ComplianceSummary, DepartmentRisk, RiskBucket,
)
from asset_analytics.services import trend_service
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import COMPLIANCE_LEVEL_WEIGHTS, WeightedSampler
from asset_analytics.utils.logger import get_logger
from asset_analytics.utils.numbers import round_half_up

logger = get_logger(__name__)

ISSUE_VOCABULARY = (
    "Overdue maintenance",
    "Missing calibration",
    "Expired certification",
    "Safety inspection required",
    "Documentation incomplete",
    "Performance degradation",
    "Recall notice pending",
    "Software update required",
    "Battery replacement needed",
    "Filter replacement overdue",
)

# level → (score low, score high, issue count low, issue count high), inclusive
LEVEL_PROFILE = {
    "High": (75, 99, 3, 5),
    "Medium": (40, 69, 2, 3),
    "Low": (10, 39, 1, 2),
}
LEVEL_SCORE_WEIGHT = {"High": 85, "Medium": 55, "Low": 25}

DEPT_COMPLIANT_RANGE = (0.45, 0.65)
DEPT_HIGH_SHARE = 0.15
DEPT_MEDIUM_SHARE = 0.35


def reconcile_counts(total: int, high: int, medium: int) -> tuple[int, int, int]:
    """(high, medium, low) that sum to `total`; low takes the remainder, high/medium shrink if they overflow."""
    total = max(0, total)
    high = min(max(0, high), total)
    medium = min(max(0, medium), total - high)
    return high, medium, total - high - medium


def largest_remainder_percentages(counts: list[int]) -> list[int]:
    """
    Integer percentages summing to exactly 100 (or all zeros for an empty population).
    Floors every share, then hands the leftover points to the largest remainders,
    ties broken by list order.
    """
    total = sum(counts)
    if total <= 0:
        return [0] * len(counts)
    raw = [c * 100 / total for c in counts]
    floors = [math.floor(r) for r in raw]
    leftover = 100 - sum(floors)
    order = sorted(range(len(counts)), key=lambda i: (raw[i] - floors[i]), reverse=True)
    for i in order[:leftover]:
        floors[i] += 1
    return floors


def risk_distribution(high: int, medium: int, low: int) -> list[RiskBucket]:
    levels = ("Low", "Medium", "High")
    counts = [low, medium, high]
    percentages = largest_remainder_percentages(counts)
    return [RiskBucket(level=level, count=count, percentage=p)
            for level, count, p in zip(levels, counts, percentages)]


def department_rollup(index: JoinIndex, sampler: WeightedSampler) -> list[DepartmentRisk]:
    departments = index.tables.departments
    if not departments:
        return []

    per_dept = settings.TOTAL_MONITORED_ASSETS // len(departments)
    rows = []
    for dept in departments:
        compliant = math.floor(per_dept * sampler.uniform(*DEPT_COMPLIANT_RANGE))
        non_compliant = per_dept - compliant
        high = math.floor(non_compliant * DEPT_HIGH_SHARE)
        medium = math.floor(non_compliant * DEPT_MEDIUM_SHARE)
        rows.append(DepartmentRisk(
            department_id=dept.id,
            department=dept.name,
            compliant=compliant,
            total=per_dept,
            score=round_half_up(compliant / per_dept * 100) if per_dept else 0,
            high=high,
            medium=medium,
            low=non_compliant - high - medium,
        ))
    return rows


def _issues_for(level: str, sampler: WeightedSampler) -> list[str]:
    _, _, fewest, most = LEVEL_PROFILE[level]
    return sampler.subset(ISSUE_VOCABULARY, sampler.randint(fewest, most))


def asset_risk_records(index: JoinIndex, sampler: WeightedSampler, now: datetime) -> list[ComplianceRiskRecord]:
    sample = index.tagged_assets[:settings.COMPLIANCE_SAMPLE_SIZE]
    non_compliant_count = math.floor(len(sample) * settings.NONCOMPLIANT_SHARE)

    records = []
    for asset in sample[:non_compliant_count]:
        level = sampler.sample(COMPLIANCE_LEVEL_WEIGHTS)
        low_score, high_score, _, _ = LEVEL_PROFILE[level]
        issues = _issues_for(level, sampler)
        records.append(ComplianceRiskRecord(
            asset_id=asset.id,
            asset_name=asset.name,
            asset_type=asset.type,
            department_id=asset.department_id,
            department_name=index.resolve_department(asset).name,
            risk_level=level,
            risk_score=sampler.randint(low_score, high_score),
            issues=issues,
            missed_maintenance="Yes" if "Overdue maintenance" in issues else "No",
            overdue_calibration="Yes" if "Missing calibration" in issues else "No",
            recall_flag="Recall notice pending" in issues,
            last_inspection=now - timedelta(days=sampler.uniform(0, 30)),
            next_due=now + timedelta(days=sampler.uniform(0, 60)),
        ))
    return records


def build_summary(index: JoinIndex, sampler: WeightedSampler, now: datetime) -> ComplianceSummary:
    total = settings.TOTAL_MONITORED_ASSETS
    compliant = min(settings.FULLY_COMPLIANT_ASSETS, total)
    non_compliant = total - compliant
    high, medium, low = reconcile_counts(non_compliant, settings.HIGH_RISK_ASSETS, settings.MEDIUM_RISK_ASSETS)

    weighted = high * LEVEL_SCORE_WEIGHT["High"] + medium * LEVEL_SCORE_WEIGHT["Medium"] + low * LEVEL_SCORE_WEIGHT["Low"]
    return ComplianceSummary(
        overall_score=round_half_up(compliant / total * 100) if total else 0,
        total_assets=total,
        fully_compliant=compliant,
        non_compliant=non_compliant,
        overdue_maintenance=math.floor(non_compliant * 0.3),
        recall_actions=math.floor(non_compliant * 0.05),
        average_risk_score=round_half_up(weighted / non_compliant) if non_compliant else 0,
        risk_by_department=department_rollup(index, sampler),
        noncompliance_trend=trend_service.noncompliance_trend(total, sampler, now),
        risk_distribution=risk_distribution(high, medium, low),
    )


def build_compliance_dashboard(index: JoinIndex, sampler: WeightedSampler,
                               now: Optional[datetime] = None) -> ComplianceDashboard:
    now = now or datetime.now(timezone.utc)
    summary = build_summary(index, sampler, now)
    records = asset_risk_records(index, sampler, now)
    logger.info(
        f"[COMPLIANCE] score={summary.overall_score}% non_compliant={summary.non_compliant} "
        f"asset_risks={len(records)}"
    )
    return ComplianceDashboard(summary=summary, asset_risks=records)
