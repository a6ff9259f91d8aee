"""Key-value persistence backends for engine state.

Every backend speaks the same two-operation contract: ``read(key)`` returns a
JSON-compatible value or ``None``, ``write(key, value)`` stores one. Backends
raise on I/O failure; callers decide whether a failure is fatal.
"""

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

logger = logging.getLogger(__name__)


class PersistenceStore(ABC):
    """Generic JSON key-value store."""

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """Return the stored value for key, or None if nothing is stored."""
        pass

    @abstractmethod
    def write(self, key: str, value: Any):
        """Store a JSON-serializable value under key."""
        pass

    def get_health(self) -> bool:
        return True


class MemoryStore(PersistenceStore):
    """In-process store, values are round-tripped through JSON on write."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def read(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, value: Any):
        self._data[key] = json.dumps(value)

    def keys(self):
        return list(self._data.keys())


class JsonFileStore(PersistenceStore):
    """One JSON file per key inside a data directory."""

    def __init__(self, storage_path: Path):
        self.storage_path = Path(storage_path)
        self._lock = threading.Lock()

    def _file_for(self, key: str) -> Path:
        return self.storage_path / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        file_path = self._file_for(key)
        if not file_path.exists():
            return None
        with open(file_path, 'r') as f:
            return json.load(f)

    def write(self, key: str, value: Any):
        self.storage_path.mkdir(parents=True, exist_ok=True)
        file_path = self._file_for(key)
        tmp_path = file_path.with_suffix(".json.tmp")
        with self._lock:
            with open(tmp_path, 'w') as f:
                json.dump(value, f, indent=2)
            tmp_path.replace(file_path)

    def get_health(self) -> bool:
        return not self.storage_path.exists() or self.storage_path.is_dir()


class SQLiteStore(PersistenceStore):
    """Key-value table in a SQLite database file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

    def read(self, key: str) -> Optional[Any]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def write(self, key: str, value: Any):
        payload = json.dumps(value)
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, payload),
            )

    def get_health(self) -> bool:
        try:
            with self._get_connection() as conn:
                conn.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.error(f"SQLite store unavailable: {e}")
            return False


def create_store(backend: str, data_dir: Optional[Path] = None) -> PersistenceStore:
    """Build a persistence backend by name."""
    if backend == "memory":
        return MemoryStore()
    if data_dir is None:
        raise ValueError(f"Storage backend '{backend}' needs a data directory")
    if backend == "sqlite":
        return SQLiteStore(Path(data_dir) / "lead_engine.db")
    if backend == "json":
        return JsonFileStore(Path(data_dir))
    raise ValueError(f"Unknown storage backend: {backend}")
