"""Storage backends for administrator overrides of stored feed columns."""

import json
import sqlite3
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseOverrideStore(ABC):
    """Abstract override store, keyed by variant id."""

    @abstractmethod
    def get(self, variant_id: int) -> Optional[Dict[str, Any]]:
        """Get the overrides saved for a variant."""

    @abstractmethod
    def set(self, variant_id: int, values: Dict[str, Any]) -> None:
        """Replace the overrides saved for a variant."""


class InMemoryOverrideStore(BaseOverrideStore):
    """In-memory store for development/testing."""

    def __init__(self):
        self._store: dict[int, Dict[str, Any]] = {}

    def get(self, variant_id: int) -> Optional[Dict[str, Any]]:
        values = self._store.get(variant_id)
        return dict(values) if values is not None else None

    def set(self, variant_id: int, values: Dict[str, Any]) -> None:
        self._store[variant_id] = dict(values)


class SQLiteOverrideStore(BaseOverrideStore):
    """SQLite-based store for persistence across restarts."""

    def __init__(self, db_path: str = "google_products.db"):
        self.db_path = db_path
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._init_db()

    def _init_db(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS google_products (
                variant_id INTEGER PRIMARY KEY,
                overrides TEXT NOT NULL,
                updated_at REAL NOT NULL
            )
            """
        )
        self._conn.commit()

    def get(self, variant_id: int) -> Optional[Dict[str, Any]]:
        row = self._conn.execute(
            "SELECT overrides FROM google_products WHERE variant_id = ?",
            (variant_id,),
        ).fetchone()
        if not row:
            return None
        return json.loads(row[0])

    def set(self, variant_id: int, values: Dict[str, Any]) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO google_products (variant_id, overrides, updated_at) VALUES (?, ?, ?)",
            (variant_id, json.dumps(values), time.time()),
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
