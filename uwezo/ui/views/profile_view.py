"""Profile View.

Read-only summary of the signed-in user's profile and, for employers,
the companies they own.
"""

from __future__ import annotations

import threading
from typing import Optional

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models.enums import UserRole
from uwezo.models.jobs import Company
from uwezo.models.user_profile import UserProfile
from uwezo.services.job_posting import JobPostingService
from uwezo.services.profile_provisioning import ProfileProvisioningService
from uwezo.ui.components.cards import Section
from uwezo.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    FONT_HEADING,
    FONT_SMALL,
    PADDING_LG,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class ProfileView(ctk.CTkFrame):
    """Profile details and owned companies.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    profiles:
        Reads the stored profile.
    job_posting:
        Lists the companies owned by the user.
    session:
        Used to read the current user's id and email.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        profiles: ProfileProvisioningService,
        job_posting: JobPostingService,
        session: SessionManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._profiles = profiles
        self._job_posting = job_posting
        self._session = session
        self._logger = logger

        ctk.CTkLabel(
            self, text="My Profile", font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        self._body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

        threading.Thread(target=self._load, name="profile-load", daemon=True).start()

    def _load(self) -> None:
        user_id = self._session.user_id or ""
        profile = self._profiles.get_profile(user_id)
        companies: list[Company] = []
        if profile is not None and profile.role == UserRole.EMPLOYER:
            companies = self._job_posting.list_companies(user_id)
        self.after(0, self._render, profile, companies)

    def _render(self, profile: Optional[UserProfile], companies: list[Company]) -> None:
        details = Section(self._body, "Details")
        details.pack(fill="x", pady=PADDING_SM)
        if profile is None:
            details.show_empty("Your profile could not be loaded.")
            return

        user = self._session.get_current_user()
        rows = (
            ("Name", profile.full_name or user.display_name),
            ("Email", profile.email or user.email or ""),
            ("Role", str(profile.role).capitalize() if profile.role else "Not selected"),
        )
        for label, value in rows:
            row = ctk.CTkFrame(details.body, fg_color="transparent")
            row.pack(fill="x", pady=2)
            ctk.CTkLabel(
                row, text=label, width=80, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
            ).pack(side="left")
            ctk.CTkLabel(
                row, text=value, font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w",
            ).pack(side="left")

        if profile.role != UserRole.EMPLOYER:
            return
        section = Section(self._body, "Companies")
        section.pack(fill="x", pady=PADDING_SM)
        if not companies:
            section.show_empty("No companies yet.")
        for company in companies:
            extra = "  ·  ".join(p for p in (company.industry, company.size_range) if p)
            ctk.CTkLabel(
                section.body,
                text=f"{company.name}  ·  {extra}" if extra else company.name,
                font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w",
            ).pack(fill="x", pady=2)
