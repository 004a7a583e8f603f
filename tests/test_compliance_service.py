# tests/test_compliance_service.py
"""Unit tests for the compliance risk scorer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from asset_analytics.config import settings
from asset_analytics.services import compliance_service
from asset_analytics.services.compliance_service import (
    LEVEL_PROFILE, largest_remainder_percentages, reconcile_counts, risk_distribution,
)


class TestRiskDistribution:
    def test_counts_partition_noncompliant(self):
        high, medium, low = reconcile_counts(2262, 325, 770)
        buckets = risk_distribution(high, medium, low)
        assert [b.level for b in buckets] == ["Low", "Medium", "High"]
        assert sum(b.count for b in buckets) == 2262
        assert sum(b.percentage for b in buckets) == 100

    def test_overflowing_fixed_counts_are_shrunk(self):
        assert reconcile_counts(100, 80, 50) == (80, 20, 0)
        assert reconcile_counts(0, 325, 770) == (0, 0, 0)

    def test_largest_remainder_sums_to_100(self):
        assert largest_remainder_percentages([1, 1, 1]) == [34, 33, 33]
        for counts in ([7, 0, 0], [1, 2, 3], [999, 1, 1], [5, 5, 5, 5, 5, 5, 5]):
            assert sum(largest_remainder_percentages(counts)) == 100

    def test_empty_population(self):
        assert largest_remainder_percentages([0, 0, 0]) == [0, 0, 0]


class TestSummary:
    def test_fixed_population_numbers(self, index, sampler, now):
        summary = compliance_service.build_summary(index, sampler, now)
        assert summary.total_assets == 5005
        assert summary.fully_compliant == 2743
        assert summary.non_compliant == 2262
        assert summary.overall_score == 55
        assert summary.overdue_maintenance == 678
        assert summary.recall_actions == 113
        assert sum(b.count for b in summary.risk_distribution) == summary.non_compliant

    def test_department_rollup_bounds(self, index, sampler):
        rows = compliance_service.department_rollup(index, sampler)
        per_dept = settings.TOTAL_MONITORED_ASSETS // len(index.tables.departments)
        assert len(rows) == 4
        for row in rows:
            assert row.total == per_dept
            assert 0.45 * per_dept - 1 <= row.compliant <= 0.65 * per_dept
            assert row.high + row.medium + row.low == per_dept - row.compliant
            assert row.low >= 0

    def test_noncompliance_trend_bounded(self, index, sampler, now):
        trend = compliance_service.build_summary(index, sampler, now).noncompliance_trend
        assert len(trend) == 30
        assert all(40 <= p.non_compliance_rate <= 50 for p in trend)


class TestAssetRiskRecords:
    def test_first_share_of_tagged_sample_is_noncompliant(self, index, sampler, now):
        records = compliance_service.asset_risk_records(index, sampler, now)
        # 12 tagged assets → floor(12 × 0.45) = 5, taken in dataset order
        assert [r.asset_id for r in records] == [a.id for a in index.tagged_assets[:5]]

    def test_scores_match_level_ranges(self, index, sampler, now):
        for r in compliance_service.asset_risk_records(index, sampler, now):
            low, high, fewest, most = LEVEL_PROFILE[r.risk_level]
            assert low <= r.risk_score <= high
            assert fewest <= len(r.issues) <= most
            assert r.missed_maintenance == ("Yes" if "Overdue maintenance" in r.issues else "No")
            assert r.recall_flag == ("Recall notice pending" in r.issues)
            assert r.last_inspection <= now <= r.next_due

    def test_deterministic_with_same_seed(self, index, now):
        from conftest import make_sampler
        first = compliance_service.build_compliance_dashboard(index, make_sampler(5), now)
        second = compliance_service.build_compliance_dashboard(index, make_sampler(5), now)
        assert first == second
