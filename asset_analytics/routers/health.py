# asset_analytics/routers/health.py
"""
System health check endpoint.
Returns status of backend + report DB + dataset.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from asset_analytics.database import get_db
from asset_analytics.services.entity_store import EntityStore, EntityStoreError, get_store

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), store: EntityStore = Depends(get_store)):
    """
    Returns:
    - Backend status
    - Report archive database connectivity
    - Dataset table sizes
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backend": "ok",
        "database": "unknown",
        "dataset": {},
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # Check dataset
    try:
        tables = store.tables
        result["dataset"] = {
            "assets": len(tables.assets),
            "taggedAssets": sum(1 for a in tables.assets if a.is_tagged),
            "departments": len(tables.departments),
            "zones": len(tables.zones),
            "movementLogs": len(tables.movement_logs),
            "maintenanceTasks": len(tables.maintenance_tasks),
            "geofenceZones": len(tables.geofence_zones),
        }
    except EntityStoreError as e:
        result["dataset"] = {"error": str(e)}
        result["status"] = "degraded"

    return result
