"""Onboarding Checklist View.

Shows the signed-in user's onboarding tasks with an overall progress bar.
Agreements, the profile form and the aptitude quiz open their own
screens; other tasks are marked done from here.  Completed tasks are
shown as such and cannot be reopened from the checklist.  All reads and
writes go through ``OnboardingTaskTracker`` on a worker thread.
"""

from __future__ import annotations

import threading
from typing import Callable

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.enums import TaskType
from uwezo.models.onboarding import TaskWithProgress
from uwezo.services.task_tracker import OnboardingTaskTracker
from uwezo.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_SMALL,
    FONT_SUBHEADING,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

# Tasks finished on their own screen: button label and route.
_TASK_ROUTES: dict[TaskType, tuple[str, str]] = {
    TaskType.NDA: ("Review & Sign", routing.NDA),
    TaskType.CONTRACT: ("Review & Sign", routing.CONTRACT),
    TaskType.FORM: ("Open Profile", routing.PROFILE),
    TaskType.QUIZ: ("Take Quiz", routing.QUIZ),
}


class OnboardingView(ctk.CTkFrame):
    """Onboarding checklist with progress.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    tracker:
        Task tracker owning the cached checklist.
    session:
        Used to read the current user's id.
    navigate:
        Shell navigation callback (opens task screens).
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        tracker: OnboardingTaskTracker,
        session: SessionManager,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._tracker = tracker
        self._user_id = session.user_id or ""
        self._navigate = navigate
        self._logger = logger

        self._build_ui()
        self._load_async()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        header = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))

        ctk.CTkLabel(
            header, text="Your Onboarding", font=FONT_HEADING,
            text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 4))

        self._progress_label = ctk.CTkLabel(
            header, text="Loading tasks...", font=FONT_BODY,
            text_color=TEXT_SECONDARY, anchor="w",
        )
        self._progress_label.pack(fill="x", padx=PADDING_MD)

        self._progress_bar = ctk.CTkProgressBar(header, progress_color=ACCENT_PRIMARY)
        self._progress_bar.set(0)
        self._progress_bar.pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, PADDING_MD))

        self._list_frame = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list_frame.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    def _render_tasks(self, tasks: list[TaskWithProgress]) -> None:
        for child in self._list_frame.winfo_children():
            child.destroy()

        progress = self._tracker.progress(tasks)
        self._progress_label.configure(
            text=f"{progress.completed} of {progress.total} tasks completed "
                 f"({progress.percentage}%)",
        )
        self._progress_bar.set(progress.percentage / 100)

        for task in tasks:
            self._render_task(task)

    def _render_task(self, task: TaskWithProgress) -> None:
        card = ctk.CTkFrame(self._list_frame, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(fill="x", pady=4)

        text_frame = ctk.CTkFrame(card, fg_color="transparent")
        text_frame.pack(side="left", fill="x", expand=True, padx=PADDING_MD, pady=PADDING_SM)

        title = task.title + ("" if task.is_required else "  (optional)")
        ctk.CTkLabel(
            text_frame, text=title, font=FONT_SUBHEADING,
            text_color=SUCCESS_TEXT if task.completed else TEXT_PRIMARY, anchor="w",
        ).pack(fill="x")
        ctk.CTkLabel(
            text_frame, text=task.description, font=FONT_SMALL,
            text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x")

        if task.completed:
            ctk.CTkLabel(
                card, text="✓ Completed", font=FONT_BODY, text_color=SUCCESS_TEXT,
            ).pack(side="right", padx=PADDING_MD)
            return

        route = _TASK_ROUTES.get(task.task_type)
        if route is not None:
            label, target = route
            command: Callable[[], None] = lambda: self._navigate(target)
        else:
            label, command = "Mark Done", lambda: self._complete_async(task.id)
        ctk.CTkButton(
            card,
            text=label,
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            width=130,
            command=command,
        ).pack(side="right", padx=PADDING_MD)

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _load_async(self) -> None:
        def _worker() -> None:
            tasks = self._tracker.load(self._user_id)
            self.after(0, self._render_tasks, tasks)

        threading.Thread(target=_worker, name="onboarding-load", daemon=True).start()

    def _complete_async(self, task_id: str) -> None:
        def _worker() -> None:
            tasks = self._tracker.set_completion(self._user_id, task_id, True)
            self.after(0, self._render_tasks, tasks)

        threading.Thread(target=_worker, name="onboarding-complete", daemon=True).start()
