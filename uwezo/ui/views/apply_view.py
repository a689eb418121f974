"""Apply View.

Opened from an ``/apply/{job_id}`` link or the "Apply" button on the
employee dashboard.  Shows the posting, collects a CV link and cover
letter, gives the applicant the ``employee`` role if needed, and submits
the application.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.jobs import JobApplication, JobApplicationForm, JobOpening
from uwezo.models.service_models import ServiceResult
from uwezo.services.applications import ApplicationService
from uwezo.ui.components.cards import Section
from uwezo.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class ApplyView(ctk.CTkFrame):
    """Job application screen.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    applications:
        Apply-flow service.
    session:
        Used to read the current user's id.
    route:
        The ``/apply/{job_id}`` route being shown.
    navigate:
        Shell navigation callback.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        applications: ApplicationService,
        session: SessionManager,
        route: str,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._applications = applications
        self._user_id = session.user_id or ""
        self._job_id: Optional[str] = routing.job_id_from_route(route)
        self._navigate = navigate
        self._logger = logger

        self._body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)
        self._status_label = ctk.CTkLabel(
            self._body, text="Loading job opening...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        )
        self._status_label.pack(pady=PADDING_LG)

        if self._job_id is None:
            self._show_unavailable("This application link is not valid.")
        else:
            threading.Thread(target=self._load_job, name="apply-load", daemon=True).start()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_job(self) -> None:
        result = self._applications.load_open_job(self._job_id)
        self.after(0, self._handle_job_loaded, result)

    def _handle_job_loaded(self, result: ServiceResult[JobOpening]) -> None:
        if not result.success or result.data is None:
            self._show_unavailable(result.error or "Job not found.")
            return
        self._render_form(result.data)

    def _show_unavailable(self, message: str) -> None:
        self._status_label.configure(text=f"Job Not Available. {message}", text_color=ERROR_TEXT)
        self._back_button()

    def _back_button(self) -> None:
        ctk.CTkButton(
            self._body,
            text="Go to Dashboard",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=lambda: self._navigate(routing.EMPLOYEE_DASHBOARD),
        ).pack(pady=PADDING_SM)

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def _render_form(self, job: JobOpening) -> None:
        self._status_label.destroy()

        ctk.CTkLabel(
            self._body, text=job.title, font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x")
        subtitle = "  ·  ".join(
            part for part in (job.company_name, job.location, job.employment_type) if part
        )
        ctk.CTkLabel(
            self._body, text=subtitle, font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", pady=(0, PADDING_SM))

        about = Section(self._body, "About the role")
        about.pack(fill="x", pady=PADDING_SM)
        ctk.CTkLabel(
            about.body, text=job.description, font=FONT_BODY, text_color=TEXT_PRIMARY,
            anchor="w", justify="left", wraplength=700,
        ).pack(fill="x")
        if job.requirements:
            ctk.CTkLabel(
                about.body, text=f"Requirements: {job.requirements}", font=FONT_SMALL,
                text_color=TEXT_SECONDARY, anchor="w", justify="left", wraplength=700,
            ).pack(fill="x", pady=(PADDING_SM, 0))

        form = Section(self._body, "Your application")
        form.pack(fill="x", pady=PADDING_SM)
        ctk.CTkLabel(
            form.body, text="CV LINK (OPTIONAL)", font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(0, 4))
        self._cv_entry = ctk.CTkEntry(
            form.body, placeholder_text="https://...", font=FONT_BODY,
            border_color=INPUT_BORDER, corner_radius=CORNER_RADIUS,
        )
        self._cv_entry.pack(fill="x")
        ctk.CTkLabel(
            form.body, text="COVER LETTER", font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 4))
        self._cover_box = ctk.CTkTextbox(
            form.body, height=140, font=FONT_BODY, border_width=1, border_color=INPUT_BORDER,
        )
        self._cover_box.pack(fill="x")

        self._message_label = ctk.CTkLabel(form.body, text="", font=FONT_SMALL, anchor="w")
        self._message_label.pack(fill="x", pady=(PADDING_SM, 0))
        self._submit_button = ctk.CTkButton(
            form.body,
            text="Submit Application",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_submit,
        )
        self._submit_button.pack(anchor="e", pady=(PADDING_SM, 0))

    def _handle_submit(self) -> None:
        form = JobApplicationForm(
            cv_url=self._cv_entry.get().strip() or None,
            cover_letter=self._cover_box.get("1.0", "end").strip(),
        )
        self._submit_button.configure(state="disabled", text="Submitting...")
        self._message_label.configure(text="")

        def _worker() -> None:
            self._applications.ensure_employee_role(self._user_id)
            result = self._applications.submit_application(self._job_id, self._user_id, form)
            self.after(0, self._handle_result, result)

        threading.Thread(target=_worker, name="apply-submit", daemon=True).start()

    def _handle_result(self, result: ServiceResult[JobApplication]) -> None:
        if result.success:
            self._message_label.configure(
                text="Application submitted! You can track it on your dashboard.",
                text_color=SUCCESS_TEXT,
            )
            self._submit_button.configure(
                state="normal",
                text="Go to Dashboard",
                command=lambda: self._navigate(routing.EMPLOYEE_DASHBOARD),
            )
            return
        self._message_label.configure(
            text=result.error or "Failed to submit application. Please try again.",
            text_color=ERROR_TEXT,
        )
        self._submit_button.configure(state="normal", text="Submit Application")
