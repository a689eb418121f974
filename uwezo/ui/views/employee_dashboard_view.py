"""Employee Dashboard View.

Application stats, the user's own applications, and the jobs still open
for applications.  "Apply" opens the apply screen for that job.
"""

from __future__ import annotations

import threading
from typing import Callable

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.jobs import EmployeeDashboard, JobOpening
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


class EmployeeDashboardView(ctk.CTkFrame):
    """Dashboard for users with the ``employee`` (or ``independent``) role.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    dashboard:
        Aggregation service.
    session:
        Used to read the current user's id.
    navigate:
        Shell navigation callback.
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

        ctk.CTkLabel(
            self, text="My Job Search", font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))

        self._body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        ctk.CTkLabel(
            self._body, text="Loading dashboard...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        ).pack(pady=PADDING_LG)

        threading.Thread(target=self._load, name="employee-dashboard", daemon=True).start()

    def _load(self) -> None:
        data = self._dashboard.employee_dashboard(self._user_id)
        self.after(0, self._render, data)

    def _render(self, data: EmployeeDashboard) -> None:
        for child in self._body.winfo_children():
            child.destroy()

        stats_row = ctk.CTkFrame(self._body, fg_color="transparent")
        stats_row.pack(fill="x", pady=(0, PADDING_SM))
        for column, (label, value) in enumerate((
            ("Applications", data.stats.total_applications),
            ("Pending", data.stats.pending),
            ("Reviewing", data.stats.reviewing),
            ("Approved", data.stats.approved),
            ("Open Jobs", data.stats.available_jobs),
        )):
            stats_row.grid_columnconfigure(column, weight=1)
            StatCard(stats_row, label, value).grid(
                row=0, column=column, sticky="ew", padx=(0 if column == 0 else PADDING_SM, 0),
            )

        apps_section = Section(self._body, "My Applications")
        apps_section.pack(fill="x", pady=PADDING_SM)
        if not data.applications:
            apps_section.show_empty("You have not applied for any jobs yet.")
        for application in data.applications:
            row = ctk.CTkFrame(apps_section.body, fg_color="transparent")
            row.pack(fill="x", pady=2)
            title = application.job_title or "Unknown job"
            if application.company_name:
                title += f"  ·  {application.company_name}"
            ctk.CTkLabel(
                row, text=title, font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w",
            ).pack(side="left")
            StatusBadge(row, str(application.status)).pack(side="right")

        jobs_section = Section(self._body, "Available Jobs")
        jobs_section.pack(fill="x", pady=PADDING_SM)
        if not data.available_jobs:
            jobs_section.show_empty("No open positions right now. Check back soon.")
        applied = {application.job_opening_id for application in data.applications}
        for job in data.available_jobs:
            self._render_job(jobs_section.body, job, already_applied=job.id in applied)

    def _render_job(self, parent: ctk.CTkFrame, job: JobOpening, already_applied: bool) -> None:
        row = ctk.CTkFrame(parent, fg_color="transparent")
        row.pack(fill="x", pady=4)

        text = ctk.CTkFrame(row, fg_color="transparent")
        text.pack(side="left", fill="x", expand=True)
        ctk.CTkLabel(
            text, text=job.title, font=FONT_BUTTON, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x")
        details = [job.company_name or "", job.location or "Remote", job.employment_type or ""]
        if job.application_deadline:
            details.append(f"apply by {job.application_deadline[:10]}")
        ctk.CTkLabel(
            text, text="  ·  ".join(d for d in details if d), font=FONT_SMALL,
            text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x")

        ctk.CTkButton(
            row,
            text="Applied" if already_applied else "Apply",
            font=FONT_SMALL,
            width=90,
            state="disabled" if already_applied else "normal",
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=lambda: self._navigate(routing.apply_route(job.id)),
        ).pack(side="right")
