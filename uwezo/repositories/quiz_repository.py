"""
Quiz Attempt Repository.

Append-only writes to ``quiz_attempts``.  An attempt that cannot reach
Supabase is queued for the sync worker; grading never depends on it.
"""

from __future__ import annotations

import uuid

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.repositories.base_repository import BaseRepository
from uwezo.utils.string_helpers import JsonValue


class QuizRepository(BaseRepository):
    """Data access layer for quiz attempts."""

    TABLE = "quiz_attempts"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def record_attempt(self, payload: dict[str, JsonValue]) -> bool:
        """Insert one attempt.  Returns ``False`` when it had to be queued."""
        try:
            self.supabase.table(self.TABLE).insert(payload).execute()
            return True
        except Exception as exc:
            self._logger.error("Failed to save quiz attempt: %s", exc)
            self._queue_for_sync("insert", str(uuid.uuid4()), payload)
            return False
