"""
Outbound write queue.

Writes that cannot reach Supabase are parked in the local ``sync_queue``
table as JSON and replayed later by the sync worker.  Each row moves
through three states:

    pending -> synced
    pending -> permanently_failed   (after ``MAX_ATTEMPTS`` failed replays)

A failed replay below the limit leaves the row ``pending`` with its
``attempts`` counter bumped and the last error recorded.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from typing import Any, Union

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.utils.string_helpers import JsonValue

PENDING: str = "pending"
SYNCED: str = "synced"
PERMANENTLY_FAILED: str = "permanently_failed"

MAX_ATTEMPTS: int = 5

Payload = Union[dict[str, JsonValue], list[dict[str, JsonValue]]]


@dataclass(frozen=True)
class QueuedWrite:
    """One ``sync_queue`` row as handed to the replayer."""

    queue_id: int
    table_name: str
    operation: str
    entity_id: str
    raw_payload: str
    attempts: int

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "QueuedWrite":
        return cls(
            queue_id=row["id"],
            table_name=row["table_name"],
            operation=row["operation"],
            entity_id=row["entity_id"],
            raw_payload=row["payload"],
            attempts=row["attempts"],
        )

    def payload(self) -> Any:
        """Decode the stored JSON; raises ``ValueError`` when unreadable."""
        try:
            return json.loads(self.raw_payload)
        except (json.JSONDecodeError, TypeError) as exc:
            raise ValueError(f"Malformed JSON payload: {exc}") from exc

    def describe(self) -> str:
        return f"{self.operation} {self.table_name}/{self.entity_id}"


class SyncQueue:
    """SQLite-backed store for deferred Supabase writes.

    All statements run under ``DatabaseManager.write_lock``.  ``enqueue``
    honours an active ``batch_write`` and leaves the commit to it.
    """

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    def enqueue(self, table_name: str, operation: str, entity_id: str, payload: Payload) -> bool:
        """Park one write.  Returns ``False`` when SQLite refused it."""
        try:
            with self._db.write_lock:
                self._db.sqlite.execute(
                    "INSERT INTO sync_queue (table_name, operation, entity_id, payload) "
                    "VALUES (?, ?, ?, ?)",
                    (table_name, operation, entity_id, json.dumps(payload, default=str)),
                )
                if not self._db.in_batch:
                    self._db.sqlite.commit()
        except sqlite3.Error as exc:
            self._logger.warning(
                "Could not queue %s %s/%s for sync: %s", operation, table_name, entity_id, exc,
            )
            return False
        self._logger.info("Queued for sync: %s %s/%s", operation, table_name, entity_id)
        return True

    def pending(self, limit: int) -> list[QueuedWrite]:
        """Oldest pending rows first."""
        with self._db.write_lock:
            rows = self._db.sqlite.execute(
                "SELECT id, table_name, operation, entity_id, payload, attempts "
                "FROM sync_queue WHERE status = ? "
                "ORDER BY created_at ASC, id ASC LIMIT ?",
                (PENDING, limit),
            ).fetchall()
        return [QueuedWrite.from_row(row) for row in rows]

    def mark_synced(self, item: QueuedWrite) -> None:
        self._set_state(item.queue_id, SYNCED, item.attempts + 1, None)

    def record_failure(self, item: QueuedWrite, error: str) -> str:
        """Count a failed replay and return the row's new status."""
        attempts = item.attempts + 1
        status = PERMANENTLY_FAILED if attempts >= MAX_ATTEMPTS else PENDING
        self._set_state(item.queue_id, status, attempts, error)
        return status

    def pending_count(self) -> int:
        """Rows still waiting; ``0`` if the table cannot be read."""
        with self._db.write_lock:
            try:
                row = self._db.sqlite.execute(
                    "SELECT COUNT(*) FROM sync_queue WHERE status = ?", (PENDING,),
                ).fetchone()
            except sqlite3.Error:
                self._logger.debug("sync_queue count failed", exc_info=True)
                return 0
        return int(row[0]) if row else 0

    def _set_state(self, queue_id: int, status: str, attempts: int, error: str | None) -> None:
        with self._db.write_lock:
            self._db.sqlite.execute(
                "UPDATE sync_queue SET status = ?, attempts = ?, error_message = ?, "
                "attempted_at = CURRENT_TIMESTAMP WHERE id = ?",
                (status, attempts, error, queue_id),
            )
            self._db.sqlite.commit()
