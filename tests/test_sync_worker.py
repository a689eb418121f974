"""Sync worker: replaying queued writes, retry accounting, backoff."""

from __future__ import annotations

import json

import pytest

from uwezo.services.sync_worker import SyncWorkerService
from uwezo.sync_queue import SyncQueue


def _enqueue(db, table: str, operation: str, entity_id: str, payload) -> None:
    with db.write_lock:
        db.sqlite.execute(
            "INSERT INTO sync_queue (table_name, operation, entity_id, payload) "
            "VALUES (?, ?, ?, ?)",
            (table, operation, entity_id, payload if isinstance(payload, str) else json.dumps(payload)),
        )
        db.sqlite.commit()


def _statuses(db) -> list[str]:
    return [row["status"] for row in db.sqlite.execute("SELECT status FROM sync_queue ORDER BY id")]


def test_replays_each_operation(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "user_tasks", "upsert", "user-1:4", {"user_id": "user-1", "task_id": 4})
    _enqueue(db, "user_profiles", "insert_missing", "user-1", {"user_id": "user-1"})
    _enqueue(db, "quiz_attempts", "insert", "a-1", {"score": 80})
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)

    assert worker.sync_now() == 3

    assert _statuses(db) == ["synced", "synced", "synced"]
    task_upsert = fake_supabase.queries("user_tasks", "upsert")[0].op("upsert")
    assert task_upsert[1] == {"on_conflict": "user_id,task_id"}
    profile_upsert = fake_supabase.queries("user_profiles", "upsert")[0].op("upsert")
    assert profile_upsert[1] == {"on_conflict": "user_id", "ignore_duplicates": True}
    assert len(fake_supabase.queries("quiz_attempts", "insert")) == 1
    assert SyncQueue(db, logger).pending_count() == 0


def test_update_targets_entity_id(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "job_openings", "update", "job-1", {"is_active": False})
    SyncWorkerService(db=db, config=app_config, logger=logger).sync_now()

    query = fake_supabase.queries("job_openings", "update")[0]
    assert query.op("eq")[0] == ("id", "job-1")


def test_failed_replay_stays_pending_with_attempt_count(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "quiz_attempts", "insert", "a-1", {"score": 80})
    fake_supabase.respond("quiz_attempts", ConnectionError("offline"))
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)

    assert worker.sync_now() == 0

    row = db.sqlite.execute("SELECT status, attempts, error_message FROM sync_queue").fetchone()
    assert row["status"] == "pending"
    assert row["attempts"] == 1
    assert row["error_message"] == "offline"


def test_gives_up_after_max_attempts(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "quiz_attempts", "insert", "a-1", {"score": 80})
    fake_supabase.respond("quiz_attempts", *[ConnectionError("offline")] * 5)
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)

    for _ in range(5):
        worker.sync_now()

    assert _statuses(db) == ["permanently_failed"]
    assert worker.sync_now() == 0


def test_disallowed_table_and_bad_json_fail(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "secrets", "insert", "x", {"a": 1})
    _enqueue(db, "quiz_attempts", "insert", "y", "{not json")
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)

    assert worker.sync_now() == 0
    assert fake_supabase.executed == []


def test_offline_sync_does_nothing(offline_db, logger, app_config) -> None:
    _enqueue(offline_db, "quiz_attempts", "insert", "a-1", {"score": 80})

    assert SyncWorkerService(db=offline_db, config=app_config, logger=logger).sync_now() == 0
    assert SyncQueue(offline_db, logger).pending_count() == 1


def test_backoff_doubles_and_caps(db, logger, app_config) -> None:
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)
    assert worker._calculate_backoff_interval() == 30.0

    worker._consecutive_failures = 1
    assert worker._calculate_backoff_interval() == 60.0

    worker._consecutive_failures = 10
    assert worker._calculate_backoff_interval() == 300.0


def test_start_and_stop(db, logger, app_config) -> None:
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)

    worker.start()
    worker.start()
    assert worker.is_running

    worker.stop()
    assert not worker.is_running


def test_unknown_operation_counts_as_failure(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "user_tasks", "delete", "user-1:4", {"user_id": "user-1"})

    assert SyncWorkerService(db=db, config=app_config, logger=logger).sync_now() == 0
    row = db.sqlite.execute("SELECT attempts, error_message FROM sync_queue").fetchone()
    assert row["attempts"] == 1
    assert "Unknown sync operation" in row["error_message"]


def test_enqueue_inside_rolled_back_batch_is_discarded(db, logger) -> None:
    queue = SyncQueue(db, logger)

    with pytest.raises(RuntimeError):
        with db.batch_write():
            queue.enqueue("user_tasks", "upsert", "user-1:4", {"user_id": "user-1"})
            raise RuntimeError("boom")

    assert queue.pending_count() == 0


def test_cycle_with_no_successful_replays_backs_off(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "quiz_attempts", "insert", "a-1", {"score": 80})
    fake_supabase.respond("quiz_attempts", ConnectionError("offline"), ConnectionError("offline"))
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)

    worker._run_cycle()
    assert worker._consecutive_failures == 1
    assert worker._calculate_backoff_interval() == 60.0

    worker._run_cycle()
    assert worker._consecutive_failures == 2


def test_successful_cycle_resets_backoff(db, fake_supabase, logger, app_config) -> None:
    _enqueue(db, "quiz_attempts", "insert", "a-1", {"score": 80})
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)
    worker._consecutive_failures = 3

    worker._run_cycle()

    assert worker._consecutive_failures == 0


def test_empty_queue_is_not_a_failure(db, logger, app_config) -> None:
    worker = SyncWorkerService(db=db, config=app_config, logger=logger)
    worker._consecutive_failures = 2

    worker._run_cycle()

    assert worker._consecutive_failures == 2
