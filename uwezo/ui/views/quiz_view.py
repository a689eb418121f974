"""Aptitude Quiz View.

Renders the built-in quiz with a countdown.  When time runs out the
answers given so far are submitted automatically.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.quiz import QuizResult
from uwezo.services.quiz_service import QuizService
from uwezo.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_SUBHEADING,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class QuizView(ctk.CTkFrame):
    """Timed multiple-choice quiz.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    quiz_service:
        Grades and records the attempt.
    session:
        Used to read the current user's id.
    navigate:
        Shell navigation callback (back to onboarding).
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        quiz_service: QuizService,
        session: SessionManager,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._quiz_service = quiz_service
        self._user_id = session.user_id or ""
        self._navigate = navigate
        self._logger = logger

        self._started_at: float = time.monotonic()
        self._answers: dict[str, ctk.StringVar] = {}
        self._timer_job: Optional[str] = None
        self._submitted: bool = False

        self._build_ui()
        self._tick()

    def destroy(self) -> None:
        if self._timer_job is not None:
            self.after_cancel(self._timer_job)
            self._timer_job = None
        super().destroy()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        quiz = self._quiz_service.quiz

        header = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            header, text=quiz.title, font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 4))
        ctk.CTkLabel(
            header,
            text=f"{quiz.description}. Passing score: {quiz.passing_score}%.",
            font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD)
        self._timer_label = ctk.CTkLabel(
            header, text="", font=FONT_SUBHEADING, text_color=TEXT_PRIMARY, anchor="w",
        )
        self._timer_label.pack(fill="x", padx=PADDING_MD, pady=(4, PADDING_MD))

        body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_LG)

        for number, question in enumerate(quiz.questions, start=1):
            card = ctk.CTkFrame(body, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
            card.pack(fill="x", pady=4)
            ctk.CTkLabel(
                card, text=f"{number}. {question.question}", font=FONT_SUBHEADING,
                text_color=TEXT_PRIMARY, anchor="w", justify="left", wraplength=700,
            ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 4))
            var = ctk.StringVar(value="")
            self._answers[question.id] = var
            for option in question.options:
                ctk.CTkRadioButton(
                    card, text=option, value=option, variable=var, font=FONT_BODY,
                ).pack(anchor="w", padx=PADDING_LG, pady=2)

        footer = ctk.CTkFrame(self, fg_color="transparent")
        footer.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)
        self._result_label = ctk.CTkLabel(footer, text="", font=FONT_SUBHEADING, anchor="w")
        self._result_label.pack(side="left")
        self._submit_button = ctk.CTkButton(
            footer,
            text="Submit Answers",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_submit,
        )
        self._submit_button.pack(side="right")

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        limit = self._quiz_service.quiz.time_limit_minutes
        if limit is None or self._submitted:
            self._timer_label.configure(text="")
            return
        remaining = int(limit * 60 - (time.monotonic() - self._started_at))
        if remaining <= 0:
            self._timer_label.configure(text="Time is up", text_color=ERROR_TEXT)
            self._timer_job = None
            self._handle_submit()
            return
        minutes, seconds = divmod(remaining, 60)
        self._timer_label.configure(text=f"Time remaining: {minutes:02d}:{seconds:02d}")
        self._timer_job = self.after(1000, self._tick)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _handle_submit(self) -> None:
        if self._submitted:
            return
        self._submitted = True
        self._submit_button.configure(state="disabled", text="Submitting...")
        answers = {qid: var.get() for qid, var in self._answers.items() if var.get()}
        elapsed = time.monotonic() - self._started_at

        def _worker() -> None:
            result = self._quiz_service.submit(self._user_id, answers, elapsed)
            self.after(0, self._show_result, result)

        threading.Thread(target=_worker, name="quiz-submit", daemon=True).start()

    def _show_result(self, result: QuizResult) -> None:
        verdict = "Passed" if result.passed else "Not passed"
        self._result_label.configure(
            text=f"{verdict}: {result.score}% ({result.earned_points}/{result.max_points} points)",
            text_color=SUCCESS_TEXT if result.passed else ERROR_TEXT,
        )
        self._submit_button.configure(
            state="normal",
            text="Back to Onboarding",
            command=lambda: self._navigate(routing.ONBOARDING),
        )
