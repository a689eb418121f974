"""Create Job Form View.

Collects the job posting fields, validates them through
``JobOpeningForm``, and submits a single create request via
``JobPostingService``.  Validation problems are shown inline and nothing
is written.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Callable, Optional

import customtkinter as ctk
from pydantic import ValidationError

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.enums import EmploymentType
from uwezo.models.jobs import Company, JobOpeningForm
from uwezo.services.job_posting import JobPostingService
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

_INPUT_HEIGHT: int = 36
_NO_COMPANY: str = "Select a company"

_FIELD_LABELS: dict[str, str] = {
    "title": "Job title",
    "description": "Description",
    "positions_available": "Positions available",
    "application_deadline": "Application deadline",
}


def format_validation_error(exc: ValidationError) -> str:
    """First validation problem as a short sentence for the form."""
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error["loc"] else ""
    label = _FIELD_LABELS.get(field, field.replace("_", " ").capitalize())
    if error["type"] == "string_too_short":
        return f"{label} is required"
    return f"{label}: {error['msg']}"


class JobFormView(ctk.CTkFrame):
    """Create-job form for employers.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    job_posting:
        Service that validates the company and writes the posting.
    session:
        Used to read the current user's id.
    navigate:
        Shell navigation callback (back to the dashboard).
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        job_posting: JobPostingService,
        session: SessionManager,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._job_posting = job_posting
        self._user_id = session.user_id or ""
        self._navigate = navigate
        self._logger = logger

        self._companies: list[Company] = []
        self._company_var = ctk.StringVar(value=_NO_COMPANY)
        self._type_var = ctk.StringVar(value=str(EmploymentType.FULL_TIME))
        self._link_var = ctk.BooleanVar(value=True)
        self._entries: dict[str, ctk.CTkEntry] = {}
        self._textboxes: dict[str, ctk.CTkTextbox] = {}
        self._company_menu: Optional[ctk.CTkOptionMenu] = None

        self._build_ui()
        threading.Thread(target=self._load_companies, name="job-form-companies", daemon=True).start()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            header, text="Post a New Job", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(side="left")
        ctk.CTkButton(
            header,
            text="←  Back",
            font=FONT_BODY,
            width=80,
            fg_color="transparent",
            text_color=TEXT_SECONDARY,
            hover_color="#e5e7eb",
            command=lambda: self._navigate(routing.EMPLOYER_DASHBOARD),
        ).pack(side="right")

        card = ctk.CTkScrollableFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_SM))

        self._label(card, "COMPANY")
        self._company_menu = ctk.CTkOptionMenu(
            card, values=[_NO_COMPANY], variable=self._company_var, font=FONT_BODY,
        )
        self._company_menu.pack(fill="x", padx=PADDING_MD)

        self._entry(card, "title", "JOB TITLE", "e.g. Junior Data Analyst")
        self._textbox(card, "description", "DESCRIPTION")
        self._textbox(card, "requirements", "REQUIREMENTS (OPTIONAL)")
        self._entry(card, "location", "LOCATION", "e.g. Nairobi or Remote")

        self._label(card, "EMPLOYMENT TYPE")
        ctk.CTkOptionMenu(
            card,
            values=[str(t) for t in EmploymentType],
            variable=self._type_var,
            font=FONT_BODY,
        ).pack(fill="x", padx=PADDING_MD)

        self._entry(card, "salary_range", "SALARY RANGE (OPTIONAL)", "e.g. KES 60,000 - 80,000")
        self._entry(card, "positions_available", "POSITIONS AVAILABLE", "1")
        self._entry(card, "application_deadline", "APPLICATION DEADLINE (YYYY-MM-DD)", "")

        ctk.CTkCheckBox(
            card,
            text="Generate a shareable application link",
            variable=self._link_var,
            font=FONT_BODY,
        ).pack(anchor="w", padx=PADDING_MD, pady=(PADDING_MD, PADDING_MD))

        footer = ctk.CTkFrame(self, fg_color="transparent")
        footer.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_LG))
        self._error_label = ctk.CTkLabel(
            footer, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w",
        )
        self._error_label.pack(side="left", fill="x", expand=True)
        self._submit_button = ctk.CTkButton(
            footer,
            text="Create Job Posting",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=40,
            command=self._handle_submit,
        )
        self._submit_button.pack(side="right")

    def _label(self, parent: ctk.CTkFrame, text: str) -> None:
        ctk.CTkLabel(
            parent, text=text, font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 4))

    def _entry(self, parent: ctk.CTkFrame, name: str, label: str, placeholder: str) -> None:
        self._label(parent, label)
        entry = ctk.CTkEntry(
            parent,
            placeholder_text=placeholder,
            font=FONT_BODY,
            border_color=INPUT_BORDER,
            height=_INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
        )
        entry.pack(fill="x", padx=PADDING_MD)
        self._entries[name] = entry

    def _textbox(self, parent: ctk.CTkFrame, name: str, label: str) -> None:
        self._label(parent, label)
        box = ctk.CTkTextbox(
            parent, height=90, font=FONT_BODY, border_width=1, border_color=INPUT_BORDER,
        )
        box.pack(fill="x", padx=PADDING_MD)
        self._textboxes[name] = box

    # ------------------------------------------------------------------
    # Company picker
    # ------------------------------------------------------------------

    def _load_companies(self) -> None:
        companies = self._job_posting.list_companies(self._user_id)
        self.after(0, self._show_companies, companies)

    def _show_companies(self, companies: list[Company]) -> None:
        self._companies = companies
        names = [company.name for company in companies] or [_NO_COMPANY]
        self._company_menu.configure(values=names)
        selected = self._job_posting.auto_selected_company(companies)
        if selected is not None:
            self._company_var.set(companies[0].name)

    def _selected_company_id(self) -> Optional[str]:
        name = self._company_var.get()
        return next((c.id for c in self._companies if c.name == name), None)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def _read_form(self) -> JobOpeningForm:
        """Build the form model; raises ``ValueError`` on bad input."""
        positions_raw = self._entries["positions_available"].get().strip() or "1"
        deadline_raw = self._entries["application_deadline"].get().strip()
        return JobOpeningForm(
            title=self._entries["title"].get(),
            description=self._textboxes["description"].get("1.0", "end"),
            requirements=self._textboxes["requirements"].get("1.0", "end"),
            location=self._entries["location"].get(),
            employment_type=EmploymentType(self._type_var.get()),
            salary_range=self._entries["salary_range"].get(),
            positions_available=int(positions_raw),
            application_deadline=date.fromisoformat(deadline_raw) if deadline_raw else None,
            company_id=self._selected_company_id(),
        )

    def _handle_submit(self) -> None:
        try:
            form = self._read_form()
        except ValidationError as exc:
            self._error_label.configure(text=format_validation_error(exc))
            return
        except ValueError:
            self._error_label.configure(
                text="Positions must be a whole number and the deadline a YYYY-MM-DD date",
            )
            return

        self._error_label.configure(text="")
        self._submit_button.configure(state="disabled", text="Creating...")
        generate_link = self._link_var.get()

        def _worker() -> None:
            result = self._job_posting.create_job(self._user_id, form, generate_link)
            self.after(0, self._handle_result, result.success, result.error)

        threading.Thread(target=_worker, name="job-create", daemon=True).start()

    def _handle_result(self, success: bool, error: Optional[str]) -> None:
        if success:
            self._navigate(routing.EMPLOYER_DASHBOARD)
            return
        self._error_label.configure(text=error or "Failed to create job posting. Please try again.")
        self._submit_button.configure(state="normal", text="Create Job Posting")
