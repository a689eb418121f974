"""
Base Repository.

Shared plumbing for the repositories: client access, Supabase-first reads
with a local fallback, and parking of writes that Supabase refused.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Optional, TypeVar

from postgrest.exceptions import APIError
from supabase import Client as SupabaseClient

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.sync_queue import Payload, SyncQueue

T = TypeVar("T")

# PostgREST: "JSON object requested, multiple (or no) rows returned".
NOT_FOUND_CODE: str = "PGRST116"


def is_not_found(exc: BaseException) -> bool:
    """``True`` when *exc* is PostgREST's single-row not-found error."""
    return isinstance(exc, APIError) and exc.code == NOT_FOUND_CODE


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger
        self._sync_queue = SyncQueue(db, logger)

    @property
    def supabase(self) -> SupabaseClient:
        return self._db.supabase

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._db.sqlite

    @property
    def is_online(self) -> bool:
        return self._db.is_online

    def _read_with_fallback(
        self,
        remote: Callable[[], Optional[T]],
        default: Callable[[], T],
        *,
        label: str,
        local: Optional[Callable[[], Optional[T]]] = None,
        on_remote: Optional[Callable[[T], None]] = None,
    ) -> T:
        """Read from Supabase, else from SQLite, else return ``default()``.

        ``None`` from either source means "nothing here, keep going".
        A remote exception is logged and treated the same way, so callers
        never see network errors on reads.  ``on_remote`` runs on a remote
        hit (cache warming); its failures are logged, not raised.
        """
        try:
            value = remote()
        except Exception as exc:
            self._logger.warning("Supabase read failed for %s: %s", label, exc)
            value = None
        if value is not None:
            if on_remote is not None:
                try:
                    on_remote(value)
                except Exception as exc:
                    self._logger.warning("Cache refresh after %s failed: %s", label, exc)
            return value

        if local is not None:
            try:
                value = local()
            except sqlite3.Error as exc:
                self._logger.error("Local read failed for %s: %s", label, exc)
                value = None
            if value is not None:
                return value

        return default()

    def _commit(self) -> None:
        """Commit unless a ``batch_write`` block owns the transaction."""
        if not self._db.in_batch:
            self.sqlite.commit()

    def _queue_for_sync(
        self,
        operation: str,
        entity_id: str,
        payload: Payload,
        *,
        table: Optional[str] = None,
    ) -> None:
        """Park a write Supabase refused; the sync worker replays it later."""
        self._sync_queue.enqueue(table or self.TABLE, operation, entity_id, payload)
