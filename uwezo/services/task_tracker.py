"""
Onboarding Task Tracker.

Maintains the ordered onboarding checklist for a user, with per-task
completion state.  The merged list is cached in ``local_storage`` under
``tasks_{userId}`` (JSON) together with ``tasks_{userId}_timestamp``
(epoch milliseconds).

Read path (``load``):
    1. A cache entry younger than the freshness window is returned as-is;
       Supabase is not consulted.
    2. Otherwise the list is rebuilt from the remote ``tasks`` catalog
       merged with the user's ``user_tasks`` rows.  When a task has both a
       remote row and a cached state, the later ``updated_at`` wins, which
       covers writes still waiting in the sync queue.
    3. With no remote catalog, the stale cache is reused; with no cache
       either, the built-in seven-task catalog is used.
    The result is written back to the cache with a fresh timestamp.

Write path (``set_completion``) updates the cached list immediately and
upserts ``user_tasks``; an unreachable backend queues the upsert for the
sync worker.  The cache timestamp is left alone, so a toggle does not
extend the freshness window.
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Callable, Optional

from pydantic import ValidationError

from uwezo.logger import StructuredLogger
from uwezo.models.enums import TaskType
from uwezo.models.onboarding import (
    DEFAULT_TASKS,
    TaskProgress,
    TaskWithProgress,
    UserTaskState,
    progress_percentage,
)
from uwezo.repositories.task_repository import TaskRepository
from uwezo.services.base_service import BaseService
from uwezo.services.local_cache import LocalCacheService
from uwezo.utils.audit import log_audit_event
from uwezo.utils.general import epoch_millis, parse_iso, utc_now_iso


def cache_key(user_id: str) -> str:
    return f"tasks_{user_id}"


def timestamp_key(user_id: str) -> str:
    return f"tasks_{user_id}_timestamp"


class OnboardingTaskTracker(BaseService):
    """Per-user onboarding checklist with a freshness-windowed local cache.

    Parameters
    ----------
    cache:
        Key-value store backed by the SQLite ``local_storage`` table.
    repo:
        Repository for the remote ``tasks`` and ``user_tasks`` tables.
    logger:
        Structured logger instance.
    freshness_window_s:
        Age (seconds) under which a cache entry is served without a
        remote read.
    clock:
        Returns the current time in seconds since the epoch.
    """

    def __init__(
        self,
        cache: LocalCacheService,
        repo: TaskRepository,
        logger: StructuredLogger,
        freshness_window_s: float = 300.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(logger)
        self._cache = cache
        self._repo = repo
        self._window_ms: int = int(freshness_window_s * 1000)
        self._clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load(self, user_id: str) -> list[TaskWithProgress]:
        """Return the checklist for *user_id*, ordered by ``order_index``."""
        cached, written_at = self._read_cache(user_id)
        now_ms = epoch_millis(self._clock())
        if cached is not None and written_at is not None and now_ms - written_at < self._window_ms:
            self._logger.debug("Serving cached tasks for %s", user_id)
            return cached

        tasks = self._rebuild(user_id, cached)
        self._write_cache(user_id, tasks)
        return tasks

    def progress(self, tasks: list[TaskWithProgress]) -> TaskProgress:
        completed = sum(1 for task in tasks if task.completed)
        return TaskProgress(
            completed=completed,
            total=len(tasks),
            percentage=progress_percentage(completed, len(tasks)),
        )

    def find_by_type(
        self, tasks: list[TaskWithProgress], task_type: TaskType,
    ) -> Optional[TaskWithProgress]:
        return next((task for task in tasks if task.task_type == task_type), None)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_completion(
        self,
        user_id: str,
        task_id: str,
        completed: bool,
        metadata: Optional[dict[str, object]] = None,
    ) -> list[TaskWithProgress]:
        """Mark *task_id* completed (or not) and return the updated list.

        Unknown task ids leave the list unchanged.  Toggling back to
        ``False`` is allowed and overwrites the previous state.
        """
        tasks = self.load(user_id)
        index = next((i for i, task in enumerate(tasks) if task.id == task_id), None)
        if index is None:
            self._logger.warning("Unknown onboarding task %s for %s", task_id, user_id)
            return tasks

        now = utc_now_iso()
        previous = tasks[index].user_task
        state = UserTaskState(
            id=previous.id if previous is not None else str(uuid.uuid4()),
            user_id=user_id,
            task_id=task_id,
            completed=completed,
            completed_at=now if completed else None,
            metadata=dict(metadata or {}),
            created_at=previous.created_at if previous is not None else now,
            updated_at=now,
        )
        updated = list(tasks)
        updated[index] = tasks[index].model_copy(
            update={"completed": completed, "user_task": state},
        )

        self._write_tasks(user_id, updated)
        synced = self._repo.upsert_state(state)
        log_audit_event(
            self._logger,
            action="TASK_COMPLETED" if completed else "TASK_REOPENED",
            entity_type="UserTask",
            entity_id=task_id,
            user_id=user_id,
            details={"synced": synced},
        )
        return updated

    def clear(self, user_id: str) -> None:
        """Drop the cached checklist so the next ``load`` rebuilds it."""
        self._cache.remove(cache_key(user_id), timestamp_key(user_id))

    # ------------------------------------------------------------------
    # Cache plumbing
    # ------------------------------------------------------------------

    def _rebuild(
        self, user_id: str, cached: Optional[list[TaskWithProgress]],
    ) -> list[TaskWithProgress]:
        catalog = self._repo.fetch_catalog()
        if catalog:
            remote_states = self._repo.fetch_user_states(user_id)
            cached_states = {
                task.id: task.user_task
                for task in (cached or [])
                if task.user_task is not None
            }
            return [
                TaskWithProgress.from_task(
                    task, _newer(remote_states.get(task.id), cached_states.get(task.id)),
                )
                for task in sorted(catalog, key=lambda t: t.order_index)
            ]

        if cached:
            self._logger.info("Remote catalog unavailable; reusing cached tasks.")
            return cached

        self._logger.info("Remote catalog unavailable; using default tasks.")
        return [TaskWithProgress.from_task(task) for task in DEFAULT_TASKS]

    def _read_cache(
        self, user_id: str,
    ) -> tuple[Optional[list[TaskWithProgress]], Optional[int]]:
        raw = self._cache.get(cache_key(user_id))
        if raw is None:
            return None, None
        try:
            tasks = [TaskWithProgress.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, ValidationError) as exc:
            self._logger.warning("Discarding unreadable task cache for %s: %s", user_id, exc)
            return None, None

        raw_ts = self._cache.get(timestamp_key(user_id))
        try:
            written_at = int(raw_ts) if raw_ts is not None else None
        except ValueError:
            written_at = None
        return tasks, written_at

    def _write_cache(self, user_id: str, tasks: list[TaskWithProgress]) -> None:
        payload = json.dumps([task.model_dump(mode="json") for task in tasks])
        self._cache.set_many({
            cache_key(user_id): payload,
            timestamp_key(user_id): str(epoch_millis(self._clock())),
        })

    def _write_tasks(self, user_id: str, tasks: list[TaskWithProgress]) -> None:
        """Replace the cached list, keeping the rebuild timestamp."""
        payload = json.dumps([task.model_dump(mode="json") for task in tasks])
        self._cache.set(cache_key(user_id), payload)


def _newer(
    remote: Optional[UserTaskState], cached: Optional[UserTaskState],
) -> Optional[UserTaskState]:
    """Whichever state was updated last; the remote row wins ties."""
    if remote is None or cached is None:
        return remote or cached
    remote_at = parse_iso(remote.updated_at)
    cached_at = parse_iso(cached.updated_at)
    if remote_at is not None and cached_at is not None and cached_at > remote_at:
        return cached
    return remote
