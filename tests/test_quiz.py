"""Aptitude quiz grading and its effect on the onboarding checklist."""

from __future__ import annotations

import pytest

from uwezo.models.quiz import SAMPLE_APTITUDE_QUIZ
from uwezo.repositories.quiz_repository import QuizRepository
from uwezo.repositories.task_repository import TaskRepository
from uwezo.services.local_cache import LocalCacheService
from uwezo.services.quiz_service import QuizService
from uwezo.services.task_tracker import OnboardingTaskTracker

ALL_CORRECT = {q.id: q.correct_answer for q in SAMPLE_APTITUDE_QUIZ.questions}


@pytest.fixture
def tracker(db, logger) -> OnboardingTaskTracker:
    return OnboardingTaskTracker(
        cache=LocalCacheService(db=db, logger=logger),
        repo=TaskRepository(db=db, logger=logger),
        logger=logger,
    )


@pytest.fixture
def service(db, logger, tracker) -> QuizService:
    return QuizService(repo=QuizRepository(db=db, logger=logger), tracker=tracker, logger=logger)


def test_sample_quiz_is_worth_seventy_points() -> None:
    assert SAMPLE_APTITUDE_QUIZ.max_points == 70


def test_all_correct_scores_100(service) -> None:
    result = service.grade(ALL_CORRECT)
    assert (result.earned_points, result.score, result.passed) == (70, 100, True)


def test_unanswered_questions_earn_nothing(service) -> None:
    result = service.grade({})
    assert result.score == 0
    assert not result.passed


def test_passing_threshold_is_inclusive(service) -> None:
    # q2 (15) + q4 (15) + q5 (20) = 50 of 70 -> 71%
    answers = {"q2": "5 minutes", "q4": "13", "q5": "Ocean"}
    assert service.grade(answers).passed

    # q1 (10) + q3 (10) + q5 (20) = 40 of 70 -> 57%
    answers = {"q1": "32", "q3": "Carrot", "q5": "Ocean"}
    assert not service.grade(answers).passed


def test_elapsed_time_rounds_up_to_minutes(service) -> None:
    assert service.grade({}, seconds_elapsed=61).time_taken_minutes == 2
    assert service.grade({}).time_taken_minutes is None


def test_passing_submit_completes_quiz_task(service, tracker, fake_supabase) -> None:
    result = service.submit("user-1", ALL_CORRECT, seconds_elapsed=300)

    assert result.passed
    quiz_task = next(t for t in tracker.load("user-1") if t.id == "5")
    assert quiz_task.completed
    assert quiz_task.user_task.metadata == {"score": 100}
    attempt = fake_supabase.queries("quiz_attempts", "insert")[0].op("insert")[0][0]
    assert attempt["score"] == 100
    assert attempt["time_taken_minutes"] == 5


def test_failing_submit_leaves_task_open(service, tracker, fake_supabase) -> None:
    service.submit("user-1", {"q1": "24"})

    assert fake_supabase.queries("user_tasks", "upsert") == []
    assert not any(t.completed for t in tracker.load("user-1"))


def test_attempt_is_queued_when_offline(offline_db, logger) -> None:
    tracker = OnboardingTaskTracker(
        cache=LocalCacheService(db=offline_db, logger=logger),
        repo=TaskRepository(db=offline_db, logger=logger),
        logger=logger,
    )
    service = QuizService(
        repo=QuizRepository(db=offline_db, logger=logger), tracker=tracker, logger=logger,
    )

    service.submit("user-1", ALL_CORRECT)

    tables = [
        row["table_name"]
        for row in offline_db.sqlite.execute("SELECT table_name FROM sync_queue ORDER BY id")
    ]
    assert tables == ["quiz_attempts", "user_tasks"]
