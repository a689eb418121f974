"""
Onboarding task tracker: cache freshness, catalog fallback, merging, and
completion writes (online and queued).
"""

from __future__ import annotations

import json

import pytest

from uwezo.models.enums import TaskType
from uwezo.models.onboarding import progress_percentage
from uwezo.repositories.task_repository import TaskRepository
from uwezo.services.local_cache import LocalCacheService
from uwezo.services.task_tracker import (
    OnboardingTaskTracker,
    cache_key,
    timestamp_key,
)
from uwezo.sync_queue import SyncQueue

T0 = 1_700_000_000.0

CATALOG = [
    {"id": 2, "title": "Sign Contract", "task_type": "contract", "order_index": 2},
    {"id": 1, "title": "Sign NDA", "task_type": "nda", "order_index": 1},
    {"id": 3, "title": "Aptitude Quiz", "task_type": "quiz", "order_index": 3},
]


class Clock:
    def __init__(self, now: float = T0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()


def _tracker(db, logger, clock) -> OnboardingTaskTracker:
    return OnboardingTaskTracker(
        cache=LocalCacheService(db=db, logger=logger),
        repo=TaskRepository(db=db, logger=logger),
        logger=logger,
        freshness_window_s=300.0,
        clock=clock,
    )


# ===========================================================================
# Progress arithmetic
# ===========================================================================

@pytest.mark.parametrize(
    "completed, total, expected",
    [
        (0, 7, 0),
        (0, 0, 0),
        (7, 7, 100),
        (2, 7, 29),
        (1, 8, 13),  # 12.5 rounds half up
        (1, 3, 33),
    ],
)
def test_progress_percentage(completed: int, total: int, expected: int) -> None:
    assert progress_percentage(completed, total) == expected


# ===========================================================================
# Read path
# ===========================================================================

def test_builds_from_remote_catalog_in_order(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG)
    fake_supabase.respond("user_tasks", [{
        "id": "ut-1", "user_id": "user-1", "task_id": 2, "completed": True,
        "completed_at": "2024-01-01T00:00:00+00:00",
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }])
    tracker = _tracker(db, logger, clock)

    tasks = tracker.load("user-1")

    assert [t.id for t in tasks] == ["1", "2", "3"]
    assert [t.completed for t in tasks] == [False, True, False]
    assert tracker.progress(tasks).percentage == 33


def test_fresh_cache_skips_remote_reads(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG)
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")
    reads_before = len(fake_supabase.executed)

    clock.now = T0 + 4 * 60
    tasks = tracker.load("user-1")

    assert len(fake_supabase.executed) == reads_before
    assert len(tasks) == 3


def test_stale_cache_triggers_rebuild(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG, CATALOG)
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")

    clock.now = T0 + 6 * 60
    tracker.load("user-1")

    assert len(fake_supabase.queries("tasks")) == 2


def test_cache_holds_json_and_millisecond_timestamp(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG)
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")

    cache = LocalCacheService(db=db, logger=logger)
    payload = json.loads(cache.get(cache_key("user-1")))
    assert [item["id"] for item in payload] == ["1", "2", "3"]
    assert cache.get(timestamp_key("user-1")) == str(int(T0 * 1000))


def test_no_catalog_and_no_cache_uses_default_tasks(db, fake_supabase, logger, clock) -> None:
    tracker = _tracker(db, logger, clock)

    tasks = tracker.load("user-1")

    assert len(tasks) == 7
    assert [t.order_index for t in tasks] == [1, 2, 3, 4, 5, 6, 7]
    assert not any(t.completed for t in tasks)
    assert tracker.find_by_type(tasks, TaskType.QUIZ).id == "5"


def test_offline_with_stale_cache_reuses_cache(offline_db, logger, clock) -> None:
    tracker = _tracker(offline_db, logger, clock)
    tracker.set_completion("user-1", "1", True)

    clock.now = T0 + 60 * 60
    tasks = tracker.load("user-1")

    assert tasks[0].completed is True
    assert len(tasks) == 7


def test_cached_completion_survives_rebuild_without_remote_row(
    db, fake_supabase, logger, clock,
) -> None:
    fake_supabase.respond("tasks", CATALOG)
    fake_supabase.respond("user_tasks", [], RuntimeError("boom"))
    fake_supabase.respond("tasks", CATALOG)
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")
    tracker.set_completion("user-1", "3", True)

    clock.now = T0 + 10 * 60
    tasks = tracker.load("user-1")

    assert {t.id: t.completed for t in tasks}["3"] is True


def _remote_state(task_id: int, completed: bool, updated_at: str) -> dict:
    return {
        "id": f"ut-{task_id}", "user_id": "user-1", "task_id": task_id,
        "completed": completed,
        "completed_at": updated_at if completed else None,
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": updated_at,
    }


def test_newer_cached_state_beats_stale_remote_row(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG, CATALOG)
    fake_supabase.respond(
        "user_tasks",
        [],
        RuntimeError("boom"),
        [_remote_state(3, False, "2024-01-01T00:00:00+00:00")],
    )
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")
    tracker.set_completion("user-1", "3", True)

    clock.now = T0 + 10 * 60
    tasks = tracker.load("user-1")

    assert {t.id: t.completed for t in tasks}["3"] is True


def test_newer_remote_row_beats_cached_state(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG, CATALOG)
    fake_supabase.respond(
        "user_tasks",
        [],
        RuntimeError("boom"),
        [_remote_state(3, False, "2999-01-01T00:00:00Z")],
    )
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")
    tracker.set_completion("user-1", "3", True)

    clock.now = T0 + 10 * 60
    tasks = tracker.load("user-1")

    assert {t.id: t.completed for t in tasks}["3"] is False


def test_unreadable_cache_is_discarded(db, fake_supabase, logger, clock) -> None:
    LocalCacheService(db=db, logger=logger).set(cache_key("user-1"), "not json")
    tracker = _tracker(db, logger, clock)

    tasks = tracker.load("user-1")

    assert len(tasks) == 7


# ===========================================================================
# Write path
# ===========================================================================

def test_set_completion_upserts_user_task(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG)
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")

    updated = tracker.set_completion("user-1", "2", True)

    assert {t.id: t.completed for t in updated}["2"] is True
    upserts = fake_supabase.queries("user_tasks", "upsert")
    assert len(upserts) == 1
    args, kwargs = upserts[0].op("upsert")
    assert args[0]["task_id"] == 2
    assert args[0]["completed"] is True
    assert kwargs["on_conflict"] == "user_id,task_id"
    assert SyncQueue(db, logger).pending_count() == 0


def test_toggle_back_clears_completed_at(db, fake_supabase, logger, clock) -> None:
    tracker = _tracker(db, logger, clock)
    tracker.set_completion("user-1", "1", True)

    updated = tracker.set_completion("user-1", "1", False)

    assert updated[0].completed is False
    assert updated[0].user_task.completed_at is None


def test_completion_does_not_extend_freshness(db, fake_supabase, logger, clock) -> None:
    fake_supabase.respond("tasks", CATALOG, CATALOG)
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")

    clock.now = T0 + 4 * 60
    tracker.set_completion("user-1", "2", True)
    cache = LocalCacheService(db=db, logger=logger)
    assert cache.get(timestamp_key("user-1")) == str(int(T0 * 1000))

    clock.now = T0 + 6 * 60
    tasks = tracker.load("user-1")

    assert len(fake_supabase.queries("tasks")) == 2
    assert {t.id: t.completed for t in tasks}["2"] is True


def test_offline_completion_is_queued(offline_db, logger, clock) -> None:
    tracker = _tracker(offline_db, logger, clock)

    updated = tracker.set_completion("user-1", "4", True)

    assert {t.id: t.completed for t in updated}["4"] is True
    row = offline_db.sqlite.execute(
        "SELECT table_name, operation, entity_id FROM sync_queue",
    ).fetchone()
    assert tuple(row) == ("user_tasks", "upsert", "user-1:4")


def test_unknown_task_leaves_list_unchanged(db, fake_supabase, logger, clock) -> None:
    tracker = _tracker(db, logger, clock)

    tasks = tracker.set_completion("user-1", "missing", True)

    assert not any(t.completed for t in tasks)
    assert fake_supabase.queries("user_tasks", "upsert") == []


def test_clear_forces_rebuild(db, fake_supabase, logger, clock) -> None:
    tracker = _tracker(db, logger, clock)
    tracker.load("user-1")
    tracker.clear("user-1")

    fake_supabase.respond("tasks", CATALOG)
    tasks = tracker.load("user-1")

    assert len(tasks) == 3
