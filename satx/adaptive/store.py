"""
Learner Model Persistence.

The engine persists a single opaque blob under one key. Stores only
need get/set/remove:
- SqliteKeyValueStore: local SQLite file (~/.satx/state.db)
- MemoryKeyValueStore: in-process dict, for tests and throwaway sessions

ModelRepository adds the fail-open rules on top: unreadable data loads
as "no model", failed writes are logged and dropped.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Protocol

from loguru import logger

from satx.adaptive.models import LearnerModel

MODEL_KEY = "satx_user_model_v1"

# =============================================================================
# Key-Value Stores
# =============================================================================


class KeyValueStore(Protocol):
    """Minimal storage primitives the engine needs."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class SqliteKeyValueStore:
    """
    SQLite-backed key-value store.

    One table, one row per key. The connection is opened lazily so that
    constructing a store never touches the disk beyond creating its
    parent directory.
    """

    DEFAULT_DB_PATH = Path.home() / ".satx" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the store.

        Args:
            db_path: Custom database path (defaults to ~/.satx/state.db)
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            self._conn.commit()
            logger.debug(f"SqliteKeyValueStore opened at {self.db_path}")
        return self._conn

    def get(self, key: str) -> str | None:
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """,
            (key, value),
        )
        self.conn.commit()

    def remove(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None


# =============================================================================
# Model Repository
# =============================================================================


class ModelRepository:
    """Reads and writes the whole LearnerModel under a single key."""

    def __init__(self, store: KeyValueStore, key: str = MODEL_KEY):
        self.store = store
        self.key = key

    def load(self) -> LearnerModel | None:
        """
        Load the persisted model.

        Returns:
            The model, or None if nothing usable is stored
        """
        try:
            raw = self.store.get(self.key)
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Failed to read learner model: {e}")
            return None

        if not raw:
            return None

        try:
            return LearnerModel.from_dict(json.loads(raw))
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable learner model: {e}")
            return None

    def save(self, model: LearnerModel) -> bool:
        """
        Persist the model.

        Returns:
            True if the write succeeded
        """
        try:
            self.store.set(self.key, json.dumps(model.to_dict()))
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Failed to persist learner model: {e}")
            return False
        return True

    def clear(self) -> None:
        try:
            self.store.remove(self.key)
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Failed to clear learner model: {e}")
