# asset_analytics/routers/assets.py
"""Asset action endpoint: the only write path into the dataset."""

from fastapi import APIRouter, Depends, HTTPException

from asset_analytics.schemas.entities import Asset, AssetAction
from asset_analytics.services.entity_store import EntityStore, get_store

router = APIRouter()


@router.put("/assets/{asset_id}/action", response_model=Asset, summary="Update asset status / lastActive")
def update_asset(asset_id: str, body: AssetAction, store: EntityStore = Depends(get_store)):
    """
    Apply a status and/or lastActive change. The dataset file is rewritten and
    the cached tables are invalidated, so the next dashboard read sees the change.
    """
    asset = store.update_asset(asset_id, status=body.status, last_active=body.last_active)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_id}' not found")
    return asset


@router.post("/assets/cache/invalidate", summary="Drop the cached dataset")
def invalidate_cache(store: EntityStore = Depends(get_store)):
    """Call after editing the dataset file out-of-band; the next read reloads it."""
    store.invalidate()
    return {"status": "invalidated"}
