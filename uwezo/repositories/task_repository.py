"""
Onboarding Task Repository.

Reads the ``tasks`` catalog and the per-user ``user_tasks`` rows from
Supabase, and writes completion state back.  There is no SQLite mirror of
either table: the onboarding tracker keeps its own cached snapshot in
``local_storage``.

Supabase stores ``tasks.id`` and ``user_tasks.task_id`` as integers; the
client works with string ids throughout, so the conversion happens here.
"""

from __future__ import annotations

from typing import Optional

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models.onboarding import OnboardingTask, UserTaskState
from uwezo.repositories.base_repository import BaseRepository
from uwezo.utils.string_helpers import JsonValue


def _remote_task_id(task_id: str) -> JsonValue:
    """Integer ids go over the wire as integers; anything else as-is."""
    return int(task_id) if task_id.isdigit() else task_id


class TaskRepository(BaseRepository):
    """Data access layer for the onboarding catalog and user task state."""

    TABLE = "tasks"
    USER_TASKS_TABLE = "user_tasks"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_catalog(self) -> list[OnboardingTask]:
        """Return the remote catalog ordered by ``order_index``.

        An empty list means "unavailable or empty"; the tracker treats
        both the same way.
        """
        def _supabase() -> list[OnboardingTask]:
            response = (
                self.supabase.table(self.TABLE)
                .select("*")
                .order("order_index")
                .execute()
            )
            return [self._to_task(row) for row in (response.data or [])]

        return self._read_with_fallback(
            remote=_supabase,
            default=list,
            label="fetch_catalog (tasks)",
        )

    def fetch_user_states(self, user_id: str) -> dict[str, UserTaskState]:
        """Return ``{task_id: UserTaskState}`` for *user_id*."""
        def _supabase() -> dict[str, UserTaskState]:
            response = (
                self.supabase.table(self.USER_TASKS_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .execute()
            )
            states = [self._to_state(row) for row in (response.data or [])]
            return {state.task_id: state for state in states}

        return self._read_with_fallback(
            remote=_supabase,
            default=dict,
            label="fetch_user_states (user_tasks)",
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_state(self, state: UserTaskState) -> bool:
        """Write *state* to ``user_tasks`` keyed on ``(user_id, task_id)``.

        Returns ``True`` when Supabase accepted the write.  On failure the
        upsert is queued for the sync worker and ``False`` is returned.
        """
        payload: dict[str, JsonValue] = {
            "user_id": state.user_id,
            "task_id": _remote_task_id(state.task_id),
            "completed": state.completed,
            "completed_at": state.completed_at,
            "metadata": dict(state.metadata),
            "updated_at": state.updated_at,
        }
        try:
            self.supabase.table(self.USER_TASKS_TABLE).upsert(
                payload, on_conflict="user_id,task_id",
            ).execute()
            return True
        except Exception as exc:
            self._logger.error(
                "Failed to save task %s for %s in Supabase: %s",
                state.task_id, state.user_id, exc,
            )
            self._queue_for_sync(
                "upsert",
                f"{state.user_id}:{state.task_id}",
                payload,
                table=self.USER_TASKS_TABLE,
            )
            return False

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _to_task(row: dict[str, JsonValue]) -> OnboardingTask:
        return OnboardingTask(
            id=str(row["id"]),
            title=row.get("title") or "",
            description=row.get("description") or "",
            task_type=row["task_type"],
            is_required=bool(row.get("is_required", True)),
            order_index=int(row.get("order_index") or 0),
        )

    @staticmethod
    def _to_state(row: dict[str, JsonValue]) -> UserTaskState:
        return UserTaskState(
            id=str(row["id"]),
            user_id=row["user_id"],
            task_id=str(row["task_id"]),
            completed=bool(row.get("completed")),
            completed_at=row.get("completed_at"),
            metadata=row.get("metadata") or {},
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )
