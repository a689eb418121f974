"""
Local Cache Service.

Read/write access to the ``local_storage`` key-value table in the local
SQLite database.  Values are plain strings; callers serialise their own
payloads (the onboarding tracker stores a JSON task list under
``tasks_{userId}`` and an epoch-millisecond timestamp under
``tasks_{userId}_timestamp``).

This is a documented exception to the Repository pattern because
``local_storage`` holds client-side cache state, not domain data::

    CREATE TABLE IF NOT EXISTS local_storage (
        key   TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

from __future__ import annotations

import sqlite3
from typing import Mapping, Optional

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger


class LocalCacheService:
    """String key-value store, last-write-wins under the database write lock.

    Parameters
    ----------
    db:
        Initialised ``DatabaseManager`` with active SQLite connection.
    logger:
        Structured logger instance.
    """

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    # ------------------------------------------------------------------
    # Generic key-value access
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """Read a value by key.  Returns ``None`` if not found."""
        try:
            row = self._db.sqlite.execute(
                "SELECT value FROM local_storage WHERE key = ?",
                (key,),
            ).fetchone()
            return row["value"] if row is not None else None
        except sqlite3.Error as exc:
            self._logger.warning("Failed to read local_storage[%s]: %s", key, exc)
            return None

    def set(self, key: str, value: str) -> bool:
        """Upsert a single value.  Returns ``True`` on success."""
        return self.set_many({key: value})

    def set_many(self, items: Mapping[str, str]) -> bool:
        """Upsert several values in one transaction.

        Either every key is written or none is, so a payload and its
        timestamp never disagree.
        """
        try:
            with self._db.batch_write():
                for key, value in items.items():
                    self._db.sqlite.execute(
                        """
                        INSERT INTO local_storage (key, value)
                        VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET
                            value      = excluded.value,
                            updated_at = CURRENT_TIMESTAMP
                        """,
                        (key, value),
                    )
            self._logger.debug("local_storage updated: %s", ", ".join(items))
            return True
        except sqlite3.Error as exc:
            self._logger.error(
                "Failed to write local_storage[%s]: %s", ", ".join(items), exc,
            )
            return False

    def remove(self, *keys: str) -> None:
        """Delete *keys*; missing keys are ignored."""
        if not keys:
            return
        try:
            with self._db.batch_write():
                self._db.sqlite.executemany(
                    "DELETE FROM local_storage WHERE key = ?",
                    [(key,) for key in keys],
                )
        except sqlite3.Error as exc:
            self._logger.warning(
                "Failed to clear local_storage[%s]: %s", ", ".join(keys), exc,
            )
