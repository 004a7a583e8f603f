# scripts/setup/generate_seed.py
"""
Generate a synthetic hospital dataset for the EntityStore.
Writes camelCase JSON to DATA_PATH (default data/seed.json).
Usage: python scripts/setup/generate_seed.py --assets 1500 --movements 8000 --seed 7
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse
import json
import random
from datetime import datetime, timedelta, timezone

from asset_analytics.config import settings
from asset_analytics.schemas.entities import (
    Asset, AssetLocation, Building, Dataset, Department, Floor, GeofenceZone,
    MaintenanceTask, MovementLog, User, WorkingHours, Zone,
)
from asset_analytics.services.weighted_sampler import WeightedSampler

BUILDINGS = ["Main Hospital", "Outpatient Center", "Research Wing"]
FLOORS_PER_BUILDING = 4
ZONE_KINDS = ["Ward", "Storage", "Corridor", "Nurse Station", "Procedure Room"]
DEPARTMENTS = ["ICU", "Emergency", "Radiology", "Cardiology", "Surgery",
               "Pediatrics", "Oncology", "Orthopedics", "Neurology", "Laboratory"]
ASSET_TYPES = {
    "Infusion Pump": ("Therapeutic", 4000),
    "Patient Monitor": ("Monitoring", 12000),
    "Ventilator": ("Life Support", 30000),
    "Wheelchair": ("Mobility", 800),
    "Defibrillator": ("Life Support", 15000),
    "Ultrasound": ("Imaging", 45000),
    "ECG Machine": ("Diagnostic", 9000),
    "Hospital Bed": ("Mobility", 6000),
}
STATUS_WEIGHTS = (("available", 0.45), ("in-use", 0.4), ("maintenance", 0.12), ("lost", 0.03))
TASK_STATUS_WEIGHTS = (("pending", 0.3), ("in-progress", 0.2), ("completed", 0.4), ("overdue", 0.1))
GEOFENCE_TYPES = ["restricted", "authorized", "high-security", "maintenance-only"]


def build_dataset(sampler: WeightedSampler, asset_count: int, movement_count: int,
                  tagged_share: float, now: datetime) -> Dataset:
    buildings = [Building(id=f"bld-{i + 1}", name=name) for i, name in enumerate(BUILDINGS)]
    floors = [
        Floor(id=f"{b.id}-fl-{n}", name=f"{b.name} Floor {n}", building_id=b.id)
        for b in buildings for n in range(1, FLOORS_PER_BUILDING + 1)
    ]
    zones = [
        Zone(id=f"{f.id}-zn-{k + 1}", name=f"{f.name} {kind}", floor_id=f.id)
        for f in floors for k, kind in enumerate(ZONE_KINDS)
    ]
    floor_by_id = {f.id: f for f in floors}
    departments = [Department(id=f"dept-{i + 1}", name=name) for i, name in enumerate(DEPARTMENTS)]

    assets = []
    for i in range(asset_count):
        asset_type = sampler.choice(list(ASSET_TYPES))
        category, base_value = ASSET_TYPES[asset_type]
        zone = sampler.choice(zones)
        floor = floor_by_id[zone.floor_id]
        assets.append(Asset(
            id=f"asset-{i + 1:05d}",
            name=f"{asset_type} {i + 1:05d}",
            type=asset_type,
            category=category,
            department_id=sampler.choice(departments).id,
            location=AssetLocation(building_id=floor.building_id, floor_id=floor.id, zone_id=zone.id),
            status=sampler.sample(STATUS_WEIGHTS),
            utilization=round(sampler.uniform(0, 100), 1),
            last_active=now - timedelta(hours=sampler.uniform(0, 60 * 24)),
            tag_id=f"TAG-{i + 1:05d}" if sampler.chance(tagged_share) else None,
            value=round(base_value * sampler.uniform(0.7, 1.4)),
            purchase_date=(now - timedelta(days=sampler.randint(90, 3650))).date().isoformat(),
            maintenance_due=(now + timedelta(days=sampler.randint(-30, 180))).date().isoformat(),
            serial_number=f"SN-{sampler.randint(100000, 999999)}",
        ))

    movement_logs = []
    for i in range(movement_count):
        asset = sampler.choice(assets)
        from_zone, to_zone = sampler.subset(zones, 2)
        movement_logs.append(MovementLog(
            id=f"mv-{i + 1:06d}",
            asset_id=asset.id,
            from_zone_id=from_zone.id,
            to_zone_id=to_zone.id,
            timestamp=now - timedelta(seconds=sampler.uniform(0, 30 * 86400)),
            authorized=sampler.chance(0.95),
            moved_by=f"user-{sampler.randint(1, 20)}",
        ))
    movement_logs.sort(key=lambda m: m.timestamp)

    maintenance_tasks = []
    for i, asset in enumerate(sampler.subset(assets, int(asset_count * 0.3))):
        status = sampler.sample(TASK_STATUS_WEIGHTS)
        scheduled = now + timedelta(days=sampler.randint(-30, 30))
        maintenance_tasks.append(MaintenanceTask(
            id=f"task-{i + 1:05d}",
            asset_id=asset.id,
            type=sampler.choice(["preventive", "corrective", "calibration"]),
            status=status,
            scheduled_date=scheduled,
            completed_date=scheduled + timedelta(hours=sampler.randint(1, 48)) if status == "completed" else None,
            assigned_to=f"user-{sampler.randint(1, 20)}",
            priority=sampler.choice(["low", "medium", "high", "critical"]),
        ))

    geofence_zones = []
    for i in range(8):
        gtype = GEOFENCE_TYPES[i % len(GEOFENCE_TYPES)]
        geofence_zones.append(GeofenceZone(
            id=f"geo-{i + 1}",
            name=f"{gtype.replace('-', ' ').title()} Zone {i + 1}",
            type=gtype,
            zone_ids=[z.id for z in sampler.subset(zones, sampler.randint(2, 6))],
            asset_ids=[a.id for a in sampler.subset(assets, sampler.randint(0, 10))],
            priority=sampler.choice(["low", "medium", "high", "critical"]),
            active=i < 7,
            alert_on_entry=gtype != "authorized",
            alert_on_exit=gtype == "authorized",
            allowed_roles=["admin", "biomedical"],
            working_hours=WorkingHours(enabled=gtype == "restricted", start_time="07:00", end_time="19:00",
                                       days_of_week=[1, 2, 3, 4, 5]),
        ))

    users = [
        User(id=f"user-{i}", name=f"Staff Member {i}", role=sampler.choice(["nurse", "biomedical", "admin"]),
             department_id=sampler.choice(departments).id)
        for i in range(1, 21)
    ]

    return Dataset(
        departments=departments, buildings=buildings, floors=floors, zones=zones, assets=assets,
        movement_logs=movement_logs, maintenance_tasks=maintenance_tasks,
        geofence_zones=geofence_zones, users=users,
    )


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic asset dataset")
    parser.add_argument("--assets", type=int, default=1200)
    parser.add_argument("--movements", type=int, default=6000)
    parser.add_argument("--tagged-share", type=float, default=0.85)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--out", default=settings.DATA_PATH)
    args = parser.parse_args()

    sampler = WeightedSampler(random.Random(args.seed))
    dataset = build_dataset(sampler, args.assets, args.movements, args.tagged_share, datetime.now(timezone.utc))

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(dataset.model_dump(mode="json", by_alias=True, exclude_none=True), f)

    tagged = sum(1 for a in dataset.assets if a.is_tagged)
    print(f"✅ Wrote {args.out}")
    print(f"   assets={len(dataset.assets)} (tagged={tagged}) zones={len(dataset.zones)} "
          f"movements={len(dataset.movement_logs)} tasks={len(dataset.maintenance_tasks)} "
          f"geofences={len(dataset.geofence_zones)}")


if __name__ == "__main__":
    main()
