"""SQLite transaction grouping across threads."""

from __future__ import annotations

import threading
import time

import pytest

from uwezo.services.local_cache import LocalCacheService


class Boom(Exception):
    pass


def test_nested_batch_joins_outer_transaction(db, logger) -> None:
    cache = LocalCacheService(db=db, logger=logger)

    with pytest.raises(Boom):
        with db.batch_write():
            cache.set("outer", "1")
            assert db.in_batch
            raise Boom

    assert cache.get("outer") is None
    assert not db.in_batch


def test_other_thread_is_not_inside_the_batch(db) -> None:
    seen: list[bool] = []

    with db.batch_write():
        worker = threading.Thread(target=lambda: seen.append(db.in_batch))
        worker.start()
        worker.join(timeout=5)

    assert seen == [False]


def test_rollback_does_not_discard_another_threads_write(db, logger) -> None:
    cache = LocalCacheService(db=db, logger=logger)
    entered = threading.Event()
    release = threading.Event()
    errors: list[BaseException] = []

    def failing_batch() -> None:
        try:
            with db.batch_write():
                cache.set("tasks_user-1", "[1]")
                entered.set()
                release.wait(timeout=5)
                raise Boom
        except Boom as exc:
            errors.append(exc)

    first = threading.Thread(target=failing_batch)
    first.start()
    assert entered.wait(timeout=5)

    second = threading.Thread(target=lambda: cache.set("tasks_user-2", "[]"))
    second.start()
    time.sleep(0.1)
    release.set()

    first.join(timeout=5)
    second.join(timeout=5)

    assert len(errors) == 1
    assert cache.get("tasks_user-1") is None
    assert cache.get("tasks_user-2") == "[]"
