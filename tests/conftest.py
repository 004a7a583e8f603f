# tests/conftest.py
"""Shared fixtures: a small in-memory hospital dataset and a seeded sampler."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random
from datetime import datetime, timedelta, timezone

import pytest

from asset_analytics.schemas.entities import (
    Asset, AssetLocation, Building, Dataset, Department, Floor, GeofenceZone,
    MaintenanceTask, MovementLog, Zone,
)
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler

NOW = datetime.now(timezone.utc).replace(microsecond=0)
SEED = 1234


def make_asset(asset_id, department_id="dept-icu", utilization=50.0, status="in-use",
               zone_id="zone-icu-a", idle_days=1, tagged=True, asset_type="Infusion Pump", value=5000):
    return Asset(
        id=asset_id,
        name=f"{asset_type} {asset_id}",
        type=asset_type,
        department_id=department_id,
        location=AssetLocation(zone_id=zone_id),
        status=status,
        utilization=utilization,
        last_active=NOW - timedelta(days=idle_days),
        tag_id=f"TAG-{asset_id}" if tagged else None,
        value=value,
    )


def make_movement(log_id, asset_id, from_zone="zone-icu-a", to_zone="zone-icu-b",
                  hours_ago=1.0, authorized=True):
    return MovementLog(
        id=log_id,
        asset_id=asset_id,
        from_zone_id=from_zone,
        to_zone_id=to_zone,
        timestamp=NOW - timedelta(hours=hours_ago),
        authorized=authorized,
        moved_by="user-1",
    )


def make_task(task_id, asset_id, status="pending", days_from_now=0):
    return MaintenanceTask(
        id=task_id,
        asset_id=asset_id,
        status=status,
        scheduled_date=NOW + timedelta(days=days_from_now),
    )


def make_sampler(seed=SEED):
    return WeightedSampler(random.Random(seed))


def build_dataset() -> Dataset:
    """
    ICU runs hot (~90%), Radiology is idle (~28%), Surgery sits in between and
    Oncology owns no assets. asset-13 points at a department and zone that do
    not exist; asset-12 is untagged.
    """
    assets = [
        make_asset("asset-01", "dept-icu", 92, "in-use", asset_type="Ventilator"),
        make_asset("asset-02", "dept-icu", 88, "in-use", asset_type="Ventilator"),
        make_asset("asset-03", "dept-icu", 95, "in-use"),
        make_asset("asset-04", "dept-icu", 85, "maintenance"),
        make_asset("asset-05", "dept-rad", 10, "available", zone_id="zone-rad-a", idle_days=35,
                   asset_type="Ultrasound", value=45000),
        make_asset("asset-06", "dept-rad", 15, "available", zone_id="zone-rad-a", idle_days=20),
        make_asset("asset-07", "dept-rad", 25, "available", zone_id="zone-rad-b", idle_days=3),
        make_asset("asset-08", "dept-rad", 60, "in-use", zone_id="zone-rad-b"),
        make_asset("asset-09", "dept-surg", 50, "in-use", zone_id="zone-rad-a"),
        make_asset("asset-10", "dept-surg", 45, "maintenance", zone_id="zone-rad-a"),
        make_asset("asset-11", "dept-surg", 70, "available", zone_id="zone-icu-b"),
        make_asset("asset-12", "dept-surg", 5, "available", tagged=False),
        make_asset("asset-13", "dept-missing", 40, "lost", zone_id="zone-missing"),
    ]
    movement_logs = [
        make_movement("mv-01", "asset-01", "zone-icu-a", "zone-icu-b", hours_ago=1),
        make_movement("mv-02", "asset-01", "zone-icu-b", "zone-rad-a", hours_ago=3),
        make_movement("mv-03", "asset-01", "zone-rad-a", "zone-rad-b", hours_ago=5, authorized=False),
        make_movement("mv-04", "asset-01", "zone-rad-b", "zone-icu-a", hours_ago=7),
        make_movement("mv-05", "asset-05", "zone-rad-a", "zone-rad-b", hours_ago=2),
        make_movement("mv-06", "asset-09", "zone-icu-a", "zone-rad-a", hours_ago=30),
        make_movement("mv-07", "asset-12", "zone-icu-a", "zone-icu-b", hours_ago=1),
        make_movement("mv-08", "asset-02", "zone-icu-a", "zone-icu-b", hours_ago=24 * 10),
    ]
    maintenance_tasks = [
        make_task("task-01", "asset-05", "pending"),
        make_task("task-02", "asset-09", "pending"),
        make_task("task-03", "asset-10", "overdue", days_from_now=-5),
        make_task("task-04", "asset-01", "completed", days_from_now=-2),
    ]
    geofence_zones = [
        GeofenceZone(id="geo-restricted", name="Radiology Hot Lab", type="restricted",
                     zone_ids=["zone-rad-b"], priority="high"),
        GeofenceZone(id="geo-icu", name="ICU Authorized", type="authorized",
                     zone_ids=["zone-icu-a"], asset_ids=["asset-01"], priority="medium"),
        GeofenceZone(id="geo-retired", name="Old Storage", type="maintenance-only",
                     zone_ids=["zone-rad-a"], active=False),
    ]
    return Dataset(
        departments=[
            Department(id="dept-icu", name="ICU"),
            Department(id="dept-rad", name="Radiology"),
            Department(id="dept-surg", name="Surgery"),
            Department(id="dept-onc", name="Oncology"),
        ],
        buildings=[Building(id="bld-main", name="Main Hospital")],
        floors=[
            Floor(id="fl-1", name="Floor 1", building_id="bld-main"),
            Floor(id="fl-2", name="Floor 2", building_id="bld-main"),
        ],
        zones=[
            Zone(id="zone-icu-a", name="ICU Bay A", floor_id="fl-1"),
            Zone(id="zone-icu-b", name="ICU Bay B", floor_id="fl-1"),
            Zone(id="zone-rad-a", name="Radiology Suite", floor_id="fl-2"),
            Zone(id="zone-rad-b", name="Radiology Storage", floor_id="fl-2"),
        ],
        assets=assets,
        movement_logs=movement_logs,
        maintenance_tasks=maintenance_tasks,
        geofence_zones=geofence_zones,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def dataset():
    return build_dataset()


@pytest.fixture
def index(dataset):
    return JoinIndex(dataset)


@pytest.fixture
def sampler():
    return make_sampler()
