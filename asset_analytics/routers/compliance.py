# asset_analytics/routers/compliance.py
"""Compliance dashboard and predictive-maintenance accuracy trend."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from asset_analytics.schemas.compliance import ComplianceDashboard
from asset_analytics.schemas.trend import AccuracyTrend
from asset_analytics.services import compliance_service, trend_service
from asset_analytics.services.entity_store import get_index
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler, get_sampler

router = APIRouter()


@router.get("/dashboard/compliance", response_model=ComplianceDashboard,
            summary="Fleet compliance score, risk distribution and per-asset risk records")
def get_compliance_dashboard(index: JoinIndex = Depends(get_index),
                             sampler: WeightedSampler = Depends(get_sampler)):
    return compliance_service.build_compliance_dashboard(index, sampler)


@router.get("/maintenance/trend", response_model=AccuracyTrend, summary="12-month prediction accuracy")
def get_accuracy_trend(sampler: WeightedSampler = Depends(get_sampler)):
    return trend_service.accuracy_trend(sampler, datetime.now(timezone.utc))
