from __future__ import annotations

import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS cache ("
    "  namespace TEXT NOT NULL,"
    "  key TEXT NOT NULL,"
    "  value TEXT NOT NULL,"
    "  expires_at REAL NOT NULL,"
    "  PRIMARY KEY (namespace, key)"
    ")"
)


class SqliteCacheStore:
    """SQLite-backed :class:`~dfs_projector.cache.protocol.CacheStore`.

    One connection is shared by every caller and serialized with a lock.
    """

    def __init__(self, db_path: Path | str, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        if str(db_path) == ":memory:":
            target = ":memory:"
        else:
            path = Path(db_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)
        self._conn = sqlite3.connect(target, check_same_thread=False)
        self._conn.execute("PRAGMA busy_timeout=5000")
        if target != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(_SCHEMA)
        self._conn.commit()

    def get(self, namespace: str, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value, expires_at FROM cache WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
            if row is None:
                return None
            value, expires_at = row
            if self._clock() >= expires_at:
                self._conn.execute("DELETE FROM cache WHERE namespace = ? AND key = ?", (namespace, key))
                self._conn.commit()
                return None
            return value

    def put(self, namespace: str, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO cache (namespace, key, value, expires_at) VALUES (?, ?, ?, ?)",
                (namespace, key, value, self._clock() + ttl_seconds),
            )
            self._conn.commit()

    def invalidate(self, namespace: str, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._conn.execute("DELETE FROM cache WHERE namespace = ?", (namespace,))
            else:
                self._conn.execute("DELETE FROM cache WHERE namespace = ? AND key = ?", (namespace, key))
            self._conn.commit()

    def clear(self) -> int:
        """Delete every entry; returns how many were removed."""
        with self._lock:
            removed = self._conn.execute("DELETE FROM cache").rowcount
            self._conn.commit()
        logger.info("Cleared %d cache entries", removed)
        return removed

    def purge_expired(self) -> int:
        with self._lock:
            removed = self._conn.execute("DELETE FROM cache WHERE expires_at <= ?", (self._clock(),)).rowcount
            self._conn.commit()
        logger.debug("Purged %d expired cache entries", removed)
        return removed

    def namespaces(self) -> dict[str, int]:
        """Live entry count per namespace."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT namespace, COUNT(*) FROM cache WHERE expires_at > ? GROUP BY namespace ORDER BY namespace",
                (self._clock(),),
            ).fetchall()
        return {namespace: count for namespace, count in rows}

    def close(self) -> None:
        with self._lock:
            self._conn.close()
