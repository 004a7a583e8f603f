# asset_analytics/routers/utilization.py
"""Asset utilization dashboard and the scanned / not-scanned visibility trend."""

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query

from asset_analytics.schemas.trend import VisibilityTrend
from asset_analytics.schemas.utilization import UtilizationDashboard
from asset_analytics.services import trend_service, utilization_service
from asset_analytics.services.entity_store import get_index
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler, get_sampler

router = APIRouter()


@router.get("/dashboard/utilization", response_model=UtilizationDashboard,
            summary="Department / asset-type utilization, idle assets and redistribution suggestions")
def get_utilization_dashboard(index: JoinIndex = Depends(get_index),
                              sampler: WeightedSampler = Depends(get_sampler)):
    return utilization_service.build_utilization_dashboard(index, sampler)


@router.get("/dashboard/visibility", response_model=VisibilityTrend, summary="Scanned vs not-scanned tagged assets")
def get_visibility_trend(range_: Literal["day", "week", "month"] = Query("week", alias="range"),
                         index: JoinIndex = Depends(get_index),
                         sampler: WeightedSampler = Depends(get_sampler)):
    """day = 24 hourly points, week = 7 daily points, month = 30 daily points."""
    return trend_service.visibility_trend(
        index.tables.movement_logs, len(index.tagged_assets), range_, sampler, datetime.now(timezone.utc)
    )
