"""Role Selection View.

Shown on the landing route while the resolver reports ``unselected``.
The user picks employer, employee, or independent; employers also name
their company.  On success the resolver is updated by the service and
the shell redirects to the matching dashboard.
"""

from __future__ import annotations

import threading
from typing import Optional

import customtkinter as ctk

from uwezo.config import AppConfig
from uwezo.logger import StructuredLogger
from uwezo.models.enums import UserRole
from uwezo.models.user_profile import RoleSelection
from uwezo.services.role_selection import RoleSelectionService
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
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_INPUT_HEIGHT: int = 40

_ROLE_DESCRIPTIONS: dict[UserRole, str] = {
    UserRole.EMPLOYER: "Post jobs and review applicants for your company.",
    UserRole.EMPLOYEE: "Complete onboarding and apply for open positions.",
    UserRole.INDEPENDENT: "Freelance work and your own onboarding track.",
}


class RoleSelectionView(ctk.CTkFrame):
    """Role picker with the employer company details form.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    role_selection:
        Service that validates and persists the selection.
    user_id:
        The signed-in user's id.
    config:
        Supplies the company size and industry choices.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        role_selection: RoleSelectionService,
        user_id: str,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._role_selection = role_selection
        self._user_id = user_id
        self._config = config
        self._logger = logger

        self._role_var = ctk.StringVar(value="")
        self._size_var = ctk.StringVar(value="")
        self._industry_var = ctk.StringVar(value="")
        self._company_entry: Optional[ctk.CTkEntry] = None
        self._company_frame: Optional[ctk.CTkFrame] = None
        self._submit_button: Optional[ctk.CTkButton] = None
        self._error_label: Optional[ctk.CTkLabel] = None

        self._build_ui()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        card = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(padx=PADDING_LG, pady=PADDING_LG, fill="x")

        ctk.CTkLabel(
            card, text="Welcome! How will you use Uwezo Career?",
            font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 4))
        ctk.CTkLabel(
            card, text="Choose a role to continue. You can only choose once.",
            font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))

        for role, description in _ROLE_DESCRIPTIONS.items():
            row = ctk.CTkFrame(card, fg_color="transparent")
            row.pack(fill="x", padx=PADDING_MD, pady=4)
            ctk.CTkRadioButton(
                row,
                text=str(role).capitalize(),
                value=str(role),
                variable=self._role_var,
                font=FONT_BUTTON,
                command=self._on_role_changed,
            ).pack(side="left")
            ctk.CTkLabel(
                row, text=description, font=FONT_SMALL, text_color=TEXT_SECONDARY,
            ).pack(side="left", padx=(PADDING_MD, 0))

        # --- Employer-only company details ---
        self._company_frame = ctk.CTkFrame(card, fg_color="transparent")

        ctk.CTkLabel(
            self._company_frame, text="COMPANY NAME", font=FONT_LABEL,
            text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 4))
        self._company_entry = ctk.CTkEntry(
            self._company_frame,
            placeholder_text="e.g. Acme Ltd",
            font=FONT_BODY,
            border_color=INPUT_BORDER,
            height=_INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
        )
        self._company_entry.pack(fill="x")

        ctk.CTkLabel(
            self._company_frame, text="COMPANY SIZE", font=FONT_LABEL,
            text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 4))
        ctk.CTkOptionMenu(
            self._company_frame,
            values=list(self._config.COMPANY_SIZES),
            variable=self._size_var,
            font=FONT_BODY,
        ).pack(fill="x")

        ctk.CTkLabel(
            self._company_frame, text="INDUSTRY", font=FONT_LABEL,
            text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 4))
        ctk.CTkOptionMenu(
            self._company_frame,
            values=list(self._config.INDUSTRIES),
            variable=self._industry_var,
            font=FONT_BODY,
        ).pack(fill="x")

        # --- Footer ---
        self._footer = ctk.CTkFrame(card, fg_color="transparent")
        self._footer.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_MD))

        self._error_label = ctk.CTkLabel(
            self._footer, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w",
        )
        self._error_label.pack(fill="x")

        self._submit_button = ctk.CTkButton(
            self._footer,
            text="Continue  →",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=44,
            corner_radius=CORNER_RADIUS,
            command=self._handle_submit,
        )
        self._submit_button.pack(anchor="e", pady=(PADDING_SM, 0))

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_role_changed(self) -> None:
        self._error_label.configure(text="")
        if self._role_var.get() == UserRole.EMPLOYER:
            self._company_frame.pack(fill="x", padx=PADDING_MD, before=self._footer)
        else:
            self._company_frame.pack_forget()

    def _handle_submit(self) -> None:
        raw_role = self._role_var.get()
        selection = RoleSelection(
            role=UserRole(raw_role) if raw_role else None,
            company_name=self._company_entry.get(),
            company_size=self._size_var.get(),
            industry=self._industry_var.get(),
        )
        error = self._role_selection.validate(selection)
        if error is not None:
            self._error_label.configure(text=error)
            return

        self._error_label.configure(text="")
        self._submit_button.configure(state="disabled", text="Saving...")
        threading.Thread(
            target=self._submit, args=(selection,), daemon=True,
        ).start()

    def _submit(self, selection: RoleSelection) -> None:
        """Background thread: persist the selection.

        On success the resolver listener makes the shell redirect, which
        destroys this view; only failures are reported here.
        """
        result = self._role_selection.select_role(self._user_id, selection)
        if not result.success:
            message = result.error or "Failed to set up your role. Please try again."
            self.after(0, lambda: self._show_failure(message))

    def _show_failure(self, message: str) -> None:
        self._error_label.configure(text=message)
        self._submit_button.configure(state="normal", text="Continue  →")
