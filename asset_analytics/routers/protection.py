# asset_analytics/routers/protection.py
"""Asset protection: fleet dashboard, per-asset detail and geofence configuration."""

from fastapi import APIRouter, Depends, HTTPException, Query

from asset_analytics.schemas.protection import (
    AssetProtectionDetail, GeofenceList, ProtectionDashboard, TimeRange,
)
from asset_analytics.services import protection_service
from asset_analytics.services.entity_store import get_index
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler, get_sampler

router = APIRouter()


@router.get("/dashboard/protection", response_model=ProtectionDashboard,
            summary="Violations, alerts, movement patterns and risk assets for a time window")
def get_protection_dashboard(time_range: TimeRange = Query("24h", alias="timeRange"),
                             index: JoinIndex = Depends(get_index),
                             sampler: WeightedSampler = Depends(get_sampler)):
    return protection_service.build_protection_dashboard(index, sampler, time_range)


@router.get("/protection/assets/{asset_id}", response_model=AssetProtectionDetail,
            summary="30-day protection view for one asset")
def get_asset_protection(asset_id: str,
                         index: JoinIndex = Depends(get_index),
                         sampler: WeightedSampler = Depends(get_sampler)):
    detail = protection_service.build_asset_protection(index, asset_id, sampler)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_id}' not found")
    return detail


@router.get("/protection/geofences", response_model=GeofenceList, summary="Configured geofence zones")
def get_geofences(index: JoinIndex = Depends(get_index)):
    return protection_service.list_geofences(index)
