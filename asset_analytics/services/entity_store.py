# asset_analytics/services/entity_store.py
"""
EntityStore: the read-mostly repository over the JSON dataset.

Loads data/seed.json once on construction and keeps the parsed tables cached.
invalidate() drops the cache (the next read reloads lazily), reload() re-reads
immediately. update_asset() is the only write path and is used by the asset
action endpoint.
"""

import json
import os
import threading
from datetime import datetime
from typing import Optional

from fastapi import Depends
from pydantic import ValidationError

from asset_analytics.config import settings
from asset_analytics.schemas.entities import Dataset
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.utils.logger import get_logger

logger = get_logger(__name__)


class EntityStoreError(RuntimeError):
    """Dataset could not be read or parsed. The request fails as a whole."""


class EntityStore:
    def __init__(self, path: Optional[str] = None, dataset: Optional[Dataset] = None):
        self.path = settings.DATA_PATH if path is None else path
        self._lock = threading.Lock()
        self._tables: Optional[Dataset] = dataset
        if self._tables is None:
            self.reload()

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> "EntityStore":
        """In-memory store with no backing file (tests, scripts)."""
        return cls(path="", dataset=dataset)

    @property
    def tables(self) -> Dataset:
        if self._tables is None:
            self.reload()
        return self._tables

    def reload(self) -> Dataset:
        with self._lock:
            self._tables = self._read()
            return self._tables

    def invalidate(self):
        if not self.path:
            return  # in-memory tables are the only copy
        with self._lock:
            self._tables = None
        logger.info("Dataset cache cleared")

    def _read(self) -> Dataset:
        if not self.path:
            raise EntityStoreError("In-memory store has no dataset file to read")
        logger.info(f"Loading dataset from {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            data = Dataset.model_validate(raw)
        except FileNotFoundError as e:
            logger.error(f"Dataset not found at {self.path}: run scripts/setup/generate_seed.py first")
            raise EntityStoreError(f"Dataset not found: {self.path}") from e
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Dataset at {self.path} is malformed: {e}")
            raise EntityStoreError(f"Dataset malformed: {self.path}") from e

        logger.info(
            f"Dataset loaded: assets={len(data.assets)} zones={len(data.zones)} "
            f"movements={len(data.movement_logs)} tasks={len(data.maintenance_tasks)}"
        )
        return data

    def update_asset(self, asset_id: str, status: Optional[str] = None,
                     last_active: Optional[datetime] = None):
        """
        Apply a status / lastActive update to one asset and persist it.
        Returns the updated asset, or None if the id is unknown.
        The file is written before the cache changes; a failed write leaves both untouched.
        """
        tables = self.tables
        position = next((i for i, a in enumerate(tables.assets) if a.id == asset_id), None)
        if position is None:
            return None

        changes = {}
        if status is not None:
            changes["status"] = status
        if last_active is not None:
            changes["last_active"] = last_active
        updated = tables.assets[position].model_copy(update=changes)
        assets = list(tables.assets)
        assets[position] = updated

        if self.path:
            self._write(assets)
            self.invalidate()
        else:
            tables.assets[position] = updated
        logger.info(f"Asset {asset_id} updated: {sorted(changes)}")
        return updated

    def _write(self, assets: list):
        tmp_path = f"{self.path}.tmp"
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            # Keep any top-level keys the engine does not model
            raw["assets"] = [a.model_dump(mode="json", by_alias=True, exclude_none=True) for a in assets]
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(raw, f)
            os.replace(tmp_path, self.path)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not write dataset {self.path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise EntityStoreError(f"Dataset write failed: {self.path}") from e


_store: Optional[EntityStore] = None


def get_store() -> EntityStore:
    """FastAPI dependency: the process-wide store, created on first use."""
    global _store
    if _store is None:
        _store = EntityStore()
    return _store


def get_index(store: EntityStore = Depends(get_store)) -> JoinIndex:
    """FastAPI dependency: a JoinIndex over the current tables, built per request."""
    return JoinIndex(store.tables)
