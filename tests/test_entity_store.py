# tests/test_entity_store.py
"""Unit tests for the dataset repository: load, cache, invalidate and the asset write path."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
import pytest
from datetime import datetime, timezone
from conftest import build_dataset
from asset_analytics.services.entity_store import EntityStore, EntityStoreError


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "seed.json"
    raw = build_dataset().model_dump(mode="json", by_alias=True, exclude_none=True)
    raw["facilities"] = [{"id": "fac-1"}]      # not modelled, must survive rewrites
    path.write_text(json.dumps(raw), encoding="utf-8")
    return path


class TestEntityStore:
    def test_loads_camel_case_file(self, seed_file):
        store = EntityStore(str(seed_file))
        assert len(store.tables.assets) == 13
        assert store.tables.movement_logs[0].asset_id == "asset-01"

    def test_missing_file(self, tmp_path):
        with pytest.raises(EntityStoreError):
            EntityStore(str(tmp_path / "nope.json"))

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(EntityStoreError):
            EntityStore(str(path))

    def test_invalid_entities(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"assets": [{"id": "a-1"}]}), encoding="utf-8")
        with pytest.raises(EntityStoreError):
            EntityStore(str(path))

    def test_invalidate_reloads_lazily(self, seed_file):
        store = EntityStore(str(seed_file))
        raw = json.loads(seed_file.read_text(encoding="utf-8"))
        raw["assets"] = raw["assets"][:2]
        seed_file.write_text(json.dumps(raw), encoding="utf-8")

        assert len(store.tables.assets) == 13      # still cached
        store.invalidate()
        assert len(store.tables.assets) == 2

    def test_update_asset_persists(self, seed_file):
        store = EntityStore(str(seed_file))
        stamp = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        updated = store.update_asset("asset-05", status="in-use", last_active=stamp)
        assert updated.status == "in-use"

        reread = EntityStore(str(seed_file))
        asset = next(a for a in reread.tables.assets if a.id == "asset-05")
        assert asset.status == "in-use"
        assert asset.last_active == stamp
        assert json.loads(seed_file.read_text(encoding="utf-8"))["facilities"] == [{"id": "fac-1"}]

    def test_update_unknown_asset(self, seed_file):
        assert EntityStore(str(seed_file)).update_asset("asset-nope", status="lost") is None

    def test_in_memory_store_keeps_tables_on_invalidate(self):
        store = EntityStore.from_dataset(build_dataset())
        store.invalidate()
        assert len(store.tables.assets) == 13

    def test_failed_write_keeps_cached_asset(self, seed_file):
        store = EntityStore(str(seed_file))
        seed_file.unlink()

        with pytest.raises(EntityStoreError):
            store.update_asset("asset-05", status="lost")

        asset = next(a for a in store.tables.assets if a.id == "asset-05")
        assert asset.status == "available"
        assert not os.path.exists(f"{seed_file}.tmp")

    def test_in_memory_update_changes_tables(self):
        store = EntityStore.from_dataset(build_dataset())
        store.update_asset("asset-05", status="lost")
        asset = next(a for a in store.tables.assets if a.id == "asset-05")
        assert asset.status == "lost"
