# tests/test_routers.py
"""HTTP tests: the app with the store, sampler and database dependencies overridden."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import build_dataset, make_sampler
from asset_analytics.database import create_tables, get_db
from asset_analytics.main import app
from asset_analytics.services.entity_store import EntityStore, EntityStoreError, get_store
from asset_analytics.services.weighted_sampler import get_sampler

API = "/api/v1"


@pytest.fixture
def store():
    return EntityStore.from_dataset(build_dataset())


@pytest.fixture
def client(store):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    TestSession = sessionmaker(bind=engine)

    def override_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_sampler] = lambda: make_sampler()
    app.dependency_overrides[get_db] = override_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    engine.dispose()


class TestDashboards:
    def test_utilization(self, client):
        resp = client.get(f"{API}/dashboard/utilization")
        assert resp.status_code == 200
        body = resp.json()
        assert body["stats"]["total"] == 12
        assert "redistributionSuggestions" in body["utilization"]

    def test_visibility(self, client):
        resp = client.get(f"{API}/dashboard/visibility", params={"range": "day"})
        assert resp.status_code == 200
        assert len(resp.json()["trend"]) == 24

    def test_protection(self, client):
        resp = client.get(f"{API}/dashboard/protection", params={"timeRange": "7d"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["timeRange"] == "7d"
        assert body["metrics"]["complianceScore"] == 55

    def test_protection_rejects_unknown_range(self, client):
        assert client.get(f"{API}/dashboard/protection", params={"timeRange": "2h"}).status_code == 422

    def test_compliance(self, client):
        resp = client.get(f"{API}/dashboard/compliance")
        assert resp.status_code == 200
        summary = resp.json()["summary"]
        assert summary["overallScore"] == 55
        assert sum(b["percentage"] for b in summary["riskDistribution"]) == 100

    def test_maintenance_trend(self, client):
        resp = client.get(f"{API}/maintenance/trend")
        assert resp.status_code == 200
        assert len(resp.json()["trend"]) == 12


class TestProtectionDetail:
    def test_asset_detail(self, client):
        resp = client.get(f"{API}/protection/assets/asset-01")
        assert resp.status_code == 200
        assert resp.json()["assetId"] == "asset-01"

    def test_unknown_asset(self, client):
        assert client.get(f"{API}/protection/assets/asset-nope").status_code == 404

    def test_geofences(self, client):
        body = client.get(f"{API}/protection/geofences").json()
        assert body["totalZones"] == 3
        assert body["activeZones"] == 2


class TestReports:
    def test_generate_list_download(self, client):
        created = client.post(f"{API}/compliance/reports", json={"departmentId": "dept-icu"})
        assert created.status_code == 201
        report_id = created.json()["id"]
        assert report_id.startswith("CR-")

        listed = client.get(f"{API}/compliance/reports").json()
        assert [r["id"] for r in listed] == [report_id]
        assert listed[0]["departmentId"] == "dept-icu"

        csv_resp = client.get(f"{API}/compliance/reports/{report_id}/csv")
        assert csv_resp.status_code == 200
        assert csv_resp.headers["content-type"].startswith("text/csv")
        assert csv_resp.text.splitlines()[0] == "Asset,Department,Missed Maintenance,Overdue Calibration,Recall,Risk Score"

        html_resp = client.get(f"{API}/compliance/reports/{report_id}/html")
        assert html_resp.status_code == 200
        assert report_id in html_resp.text

    def test_generate_without_body(self, client):
        assert client.post(f"{API}/compliance/reports").status_code == 201

    def test_unknown_report(self, client):
        assert client.get(f"{API}/compliance/reports/CR-0/csv").status_code == 404


class TestAssetAction:
    def test_update_status(self, client, store):
        resp = client.put(f"{API}/assets/asset-05/action", json={"status": "in-use"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "in-use"
        assert next(a for a in store.tables.assets if a.id == "asset-05").status == "in-use"

    def test_update_last_active(self, client):
        resp = client.put(f"{API}/assets/asset-05/action", json={"lastActive": "2026-01-01T08:00:00Z"})
        assert resp.status_code == 200
        assert resp.json()["lastActive"].startswith("2026-01-01T08:00:00")

    def test_unknown_asset(self, client):
        assert client.put(f"{API}/assets/asset-nope/action", json={"status": "lost"}).status_code == 404

    def test_invalid_status(self, client):
        assert client.put(f"{API}/assets/asset-05/action", json={"status": "borrowed"}).status_code == 422


class TestErrors:
    def test_dataset_failure_is_500(self, client):
        def broken_store():
            raise EntityStoreError("Dataset not found: data/seed.json")

        app.dependency_overrides[get_store] = broken_store
        resp = client.get(f"{API}/dashboard/compliance")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}

    def test_health(self, client):
        body = client.get(f"{API}/health").json()
        assert body["database"] == "ok"
        assert body["dataset"]["assets"] == 13
        assert body["dataset"]["taggedAssets"] == 12

    def test_failed_asset_write_is_500(self, client, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(build_dataset().model_dump_json(by_alias=True, exclude_none=True), encoding="utf-8")
        file_store = EntityStore(str(path))
        path.unlink()

        app.dependency_overrides[get_store] = lambda: file_store
        resp = client.put(f"{API}/assets/asset-05/action", json={"status": "lost"})
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}
        asset = next(a for a in file_store.tables.assets if a.id == "asset-05")
        assert asset.status == "available"
