"""
Aptitude Quiz Models.

The built-in aptitude quiz and the grading result recorded in
``quiz_attempts``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class QuizQuestion(BaseModel):
    id: str
    question: str
    options: list[str] = Field(default_factory=list)
    correct_answer: str
    points: int = Field(default=10, ge=0)


class Quiz(BaseModel):
    id: str
    title: str
    description: str = ""
    passing_score: int = Field(default=70, ge=0, le=100)
    time_limit_minutes: Optional[int] = None
    questions: list[QuizQuestion]

    @property
    def max_points(self) -> int:
        return sum(q.points for q in self.questions)


class QuizResult(BaseModel):
    """Outcome of grading one set of answers."""

    quiz_id: str
    earned_points: int
    max_points: int
    score: int  # percentage, rounded half-up
    passed: bool
    time_taken_minutes: Optional[int] = None


SAMPLE_APTITUDE_QUIZ: Quiz = Quiz(
    id="sample-aptitude-quiz",
    title="General Aptitude Quiz",
    description="Test your problem-solving and analytical skills",
    passing_score=70,
    time_limit_minutes=15,
    questions=[
        QuizQuestion(
            id="q1",
            question="What comes next in the sequence: 2, 4, 8, 16, ?",
            options=["24", "32", "20", "18"],
            correct_answer="32",
            points=10,
        ),
        QuizQuestion(
            id="q2",
            question=(
                "If it takes 5 machines 5 minutes to make 5 widgets, how long "
                "would it take 100 machines to make 100 widgets?"
            ),
            options=["5 minutes", "100 minutes", "10 minutes", "1 minute"],
            correct_answer="5 minutes",
            points=15,
        ),
        QuizQuestion(
            id="q3",
            question="Which word does NOT belong with the others?",
            options=["Apple", "Orange", "Banana", "Carrot"],
            correct_answer="Carrot",
            points=10,
        ),
        QuizQuestion(
            id="q4",
            question="What is the next number in the series: 1, 1, 2, 3, 5, 8, ?",
            options=["11", "13", "15", "10"],
            correct_answer="13",
            points=15,
        ),
        QuizQuestion(
            id="q5",
            question=(
                'If you rearrange the letters "CIFAIPC" you would have the '
                "name of a(n):"
            ),
            options=["Ocean", "State", "City", "Animal"],
            correct_answer="Ocean",
            points=20,
        ),
    ],
)
