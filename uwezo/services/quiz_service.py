"""
Aptitude Quiz Service.

Grades the built-in aptitude quiz, records the attempt in
``quiz_attempts`` (best effort), and completes the onboarding ``quiz``
task when the attempt passes.
"""

from __future__ import annotations

import math
from typing import Optional

from uwezo.logger import StructuredLogger
from uwezo.models.enums import TaskType
from uwezo.models.onboarding import progress_percentage
from uwezo.models.quiz import SAMPLE_APTITUDE_QUIZ, Quiz, QuizResult
from uwezo.repositories.quiz_repository import QuizRepository
from uwezo.services.base_service import BaseService
from uwezo.services.task_tracker import OnboardingTaskTracker
from uwezo.utils.general import utc_now_iso
from uwezo.utils.string_helpers import JsonValue


class QuizService(BaseService):
    """Grading and persistence for one quiz.

    Parameters
    ----------
    repo:
        Quiz attempt repository.
    tracker:
        Onboarding tracker, used to complete the ``quiz`` task.
    logger:
        Structured logger instance.
    quiz:
        The quiz being taken; defaults to the built-in aptitude quiz.
    """

    def __init__(
        self,
        repo: QuizRepository,
        tracker: OnboardingTaskTracker,
        logger: StructuredLogger,
        quiz: Quiz = SAMPLE_APTITUDE_QUIZ,
    ) -> None:
        super().__init__(logger)
        self._repo = repo
        self._tracker = tracker
        self._quiz = quiz

    @property
    def quiz(self) -> Quiz:
        return self._quiz

    def grade(
        self,
        answers: dict[str, str],
        seconds_elapsed: Optional[float] = None,
    ) -> QuizResult:
        """Score *answers* (``{question_id: option}``) against the key.

        Unanswered questions earn nothing.  The percentage is rounded half
        up, and the attempt passes at or above ``passing_score``.
        """
        earned = sum(
            question.points
            for question in self._quiz.questions
            if answers.get(question.id) == question.correct_answer
        )
        max_points = self._quiz.max_points
        score = progress_percentage(earned, max_points)
        minutes = (
            math.ceil(seconds_elapsed / 60) if seconds_elapsed is not None else None
        )
        return QuizResult(
            quiz_id=self._quiz.id,
            earned_points=earned,
            max_points=max_points,
            score=score,
            passed=score >= self._quiz.passing_score,
            time_taken_minutes=minutes,
        )

    def submit(
        self,
        user_id: str,
        answers: dict[str, str],
        seconds_elapsed: Optional[float] = None,
    ) -> QuizResult:
        """Grade, record the attempt, and complete the quiz task on a pass."""
        result = self.grade(answers, seconds_elapsed)
        payload: dict[str, JsonValue] = {
            "user_id": user_id,
            "quiz_id": result.quiz_id,
            "answers": dict(answers),
            "score": result.score,
            "passed": result.passed,
            "completed_at": utc_now_iso(),
            "time_taken_minutes": result.time_taken_minutes,
        }
        self._repo.record_attempt(payload)
        self._logger.info(
            "Quiz %s submitted by %s: %s%% (%s)",
            result.quiz_id, user_id, result.score,
            "passed" if result.passed else "failed",
            extra={"event": "QUIZ_SUBMITTED", "user_id": user_id},
        )

        if result.passed:
            task = self._tracker.find_by_type(self._tracker.load(user_id), TaskType.QUIZ)
            if task is not None:
                self._tracker.set_completion(
                    user_id, task.id, True, metadata={"score": result.score},
                )
        return result
