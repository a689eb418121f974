"""Employer Dashboard View.

Stats, the employer's job postings with copyable application links, and
the applications those postings received.  Read-only; data comes from
``DashboardService`` on a worker thread.
"""

from __future__ import annotations

import threading
from typing import Callable

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.jobs import EmployerDashboard, JobOpening
from uwezo.services.dashboard import DashboardService
from uwezo.ui.components.cards import Section, StatCard, StatusBadge
from uwezo.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_SMALL,
    PADDING_LG,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class EmployerDashboardView(ctk.CTkFrame):
    """Dashboard for users with the ``employer`` role.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    dashboard:
        Aggregation service.
    session:
        Used to read the current user's id.
    navigate:
        Shell navigation callback (opens the create-job form).
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        dashboard: DashboardService,
        session: SessionManager,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._dashboard = dashboard
        self._user_id = session.user_id or ""
        self._navigate = navigate
        self._logger = logger

        self._build_header()
        self._body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        ctk.CTkLabel(
            self._body, text="Loading dashboard...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        ).pack(pady=PADDING_LG)

        self._load_async()

    def _build_header(self) -> None:
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            header, text="Employer Dashboard", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(side="left")
        ctk.CTkButton(
            header,
            text="+  Post New Job",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=lambda: self._navigate(routing.EMPLOYER_CREATE_JOB),
        ).pack(side="right")

    def _load_async(self) -> None:
        def _worker() -> None:
            data = self._dashboard.employer_dashboard(self._user_id)
            self.after(0, self._render, data)

        threading.Thread(target=_worker, name="employer-dashboard", daemon=True).start()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, data: EmployerDashboard) -> None:
        for child in self._body.winfo_children():
            child.destroy()

        stats_row = ctk.CTkFrame(self._body, fg_color="transparent")
        stats_row.pack(fill="x", pady=(0, PADDING_SM))
        for column, (label, value) in enumerate((
            ("Total Jobs", data.stats.total_jobs),
            ("Active Jobs", data.stats.active_jobs),
            ("Applications", data.stats.total_applications),
            ("Pending Review", data.stats.pending_applications),
        )):
            stats_row.grid_columnconfigure(column, weight=1)
            StatCard(stats_row, label, value).grid(
                row=0, column=column, sticky="ew", padx=(0 if column == 0 else PADDING_SM, 0),
            )

        jobs_section = Section(self._body, "Your Job Postings")
        jobs_section.pack(fill="x", pady=PADDING_SM)
        if not data.jobs:
            jobs_section.show_empty("You have not posted any jobs yet.")
        for job in data.jobs:
            self._render_job(jobs_section.body, job)

        apps_section = Section(self._body, "Recent Applications")
        apps_section.pack(fill="x", pady=PADDING_SM)
        if not data.applications:
            apps_section.show_empty("No applications received yet.")
        for application in data.applications:
            row = ctk.CTkFrame(apps_section.body, fg_color="transparent")
            row.pack(fill="x", pady=2)
            ctk.CTkLabel(
                row,
                text=f"{application.applicant_name}  ·  {application.job_title or 'Unknown job'}",
                font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w",
            ).pack(side="left")
            StatusBadge(row, str(application.status)).pack(side="right")

    def _render_job(self, parent: ctk.CTkFrame, job: JobOpening) -> None:
        row = ctk.CTkFrame(parent, fg_color="transparent")
        row.pack(fill="x", pady=4)

        text = ctk.CTkFrame(row, fg_color="transparent")
        text.pack(side="left", fill="x", expand=True)
        ctk.CTkLabel(
            text, text=job.title, font=FONT_BUTTON, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x")
        details = [job.location or "Remote", job.employment_type or "", f"{job.application_count} applications"]
        if not job.is_active:
            details.append("closed")
        ctk.CTkLabel(
            text, text="  ·  ".join(d for d in details if d), font=FONT_SMALL,
            text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x")

        ctk.CTkButton(
            row,
            text="Copy Link",
            font=FONT_SMALL,
            width=90,
            fg_color="transparent",
            border_width=1,
            border_color=ACCENT_PRIMARY,
            text_color=ACCENT_PRIMARY,
            hover_color="#e8eefc",
            command=lambda: self._copy_link(job),
        ).pack(side="right")

    def _copy_link(self, job: JobOpening) -> None:
        link = self._dashboard.application_link(job.id)
        self.clipboard_clear()
        self.clipboard_append(link)
        self._logger.info("Copied application link for job %s", job.id)
