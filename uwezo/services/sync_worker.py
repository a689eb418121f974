"""
Sync Worker Service.

Replays the local ``sync_queue`` to Supabase on a daemon thread.
Repositories park writes there when Supabase is unreachable (first
sign-in profile rows, onboarding task state, quiz attempts) so the UI
never waits on the network.

The thread sleeps ``SYNC_BASE_INTERVAL_S`` between drains.  Every failed
cycle doubles the sleep, up to ``SYNC_MAX_INTERVAL_S``.  A cycle fails when
it raises, or when it had queued rows and none of them replayed; a cycle
that syncs at least one row resets the backoff.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from supabase import Client as SupabaseClient

from uwezo.config import AppConfig
from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.services.base_service import BaseService
from uwezo.sync_queue import PERMANENTLY_FAILED, QueuedWrite, SyncQueue

Replayer = Callable[[SupabaseClient, str, str, str, Any], None]


def _insert(client: SupabaseClient, table: str, conflict: str, entity_id: str, payload: Any) -> None:
    client.table(table).insert(payload).execute()


def _update(client: SupabaseClient, table: str, conflict: str, entity_id: str, payload: Any) -> None:
    client.table(table).update(payload).eq("id", entity_id).execute()


def _upsert(client: SupabaseClient, table: str, conflict: str, entity_id: str, payload: Any) -> None:
    client.table(table).upsert(payload, on_conflict=conflict).execute()


def _insert_missing(client: SupabaseClient, table: str, conflict: str, entity_id: str, payload: Any) -> None:
    # Existing rows win; only absent keys are written.
    client.table(table).upsert(payload, on_conflict=conflict, ignore_duplicates=True).execute()


class SyncWorkerService(BaseService):
    """Drains queued writes to Supabase, on demand or on a daemon thread."""

    BATCH_SIZE: int = 50
    _JOIN_TIMEOUT_S: float = 10.0

    REPLAYERS: dict[str, Replayer] = {
        "insert": _insert,
        "update": _update,
        "upsert": _upsert,
        "insert_missing": _insert_missing,
    }

    # Replayable tables and their upsert conflict targets.
    CONFLICT_TARGETS: dict[str, str] = {
        "user_profiles": "user_id",
        "user_tasks": "user_id,task_id",
        "companies": "id",
        "job_openings": "id",
        "job_applications": "id",
        "quiz_attempts": "id",
    }

    def __init__(
        self,
        db: DatabaseManager,
        config: AppConfig,
        logger: StructuredLogger,
        queue: Optional[SyncQueue] = None,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._queue = queue or SyncQueue(db, logger)
        self._base_interval_s: float = config.SYNC_BASE_INTERVAL_S
        self._max_interval_s: float = config.SYNC_MAX_INTERVAL_S
        self._consecutive_failures: int = 0
        self._wake = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # -- lifecycle ----------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Spawn the daemon thread; no-op while one is alive."""
        if self.is_running:
            return
        self._wake.clear()
        self._consecutive_failures = 0
        self._thread = threading.Thread(target=self._loop, name="uwezo-sync", daemon=True)
        self._thread.start()
        self._logger.info("Sync worker started.", extra={"event": "SYNC_STARTED"})

    def stop(self) -> None:
        if self._thread is None:
            return
        self._wake.set()
        self._thread.join(timeout=self._JOIN_TIMEOUT_S)
        if self._thread.is_alive():
            self._logger.warning("Sync worker did not exit within %.0f s.", self._JOIN_TIMEOUT_S)
        else:
            self._logger.info("Sync worker stopped.", extra={"event": "SYNC_STOPPED"})
        self._thread = None

    def pending_count(self) -> int:
        return self._queue.pending_count()

    def sync_now(self) -> int:
        """Replay one batch on the calling thread and return how many rows synced."""
        if not self._db.is_online:
            return 0
        synced, _ = self._drain()
        return synced

    # -- loop ---------------------------------------------------------------

    def _loop(self) -> None:
        while not self._wake.wait(timeout=self._calculate_backoff_interval()):
            self._run_cycle()

    def _run_cycle(self) -> None:
        if not self._db.is_online:
            return
        try:
            synced, attempted = self._drain()
        except Exception:
            self._consecutive_failures += 1
            self._logger.warning("Sync cycle failed.", exc_info=True)
            return
        if synced:
            self._consecutive_failures = 0
        elif attempted:
            self._consecutive_failures += 1
            self._logger.warning(
                "None of %d queued writes replayed; backing off.", attempted,
            )

    def _calculate_backoff_interval(self) -> float:
        if not self._consecutive_failures:
            return self._base_interval_s
        delay = self._base_interval_s * 2 ** min(self._consecutive_failures, 6)
        return min(delay, self._max_interval_s)

    def _drain(self) -> tuple[int, int]:
        """Replay one batch; returns ``(synced, attempted)``."""
        batch = self._queue.pending(self.BATCH_SIZE)
        synced = sum(1 for item in batch if self._replay(item))
        if synced:
            self._logger.info("Synced %d of %d queued writes.", synced, len(batch))
        return synced, len(batch)

    def _replay(self, item: QueuedWrite) -> bool:
        try:
            replayer = self.REPLAYERS.get(item.operation)
            if replayer is None:
                raise ValueError(f"Unknown sync operation: {item.operation}")
            conflict = self.CONFLICT_TARGETS.get(item.table_name)
            if conflict is None:
                raise ValueError(f"Disallowed sync target table: {item.table_name}")
            replayer(self._db.supabase, item.table_name, conflict, item.entity_id, item.payload())
        except Exception as exc:
            status = self._queue.record_failure(item, str(exc))
            level = self._logger.error if status == PERMANENTLY_FAILED else self._logger.warning
            level("Replay of %s failed (%s): %s", item.describe(), status, exc)
            return False

        self._queue.mark_synced(item)
        self._logger.debug("Replayed %s", item.describe())
        return True
