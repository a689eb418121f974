"""Agreement View.

One screen for both onboarding agreements.  The NDA shows a single
document; the contract first asks for the engagement type and shows the
matching text.  Signing means typing a full name and ticking the terms
box.  An agreement that is already signed opens on its signature.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Optional

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.models import routing
from uwezo.models.agreements import ENGAGEMENT_TYPES, SignedAgreement
from uwezo.models.enums import TaskType
from uwezo.models.service_models import ServiceResult
from uwezo.services.signing import AgreementSigningService
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
    FONT_SUBHEADING,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_SELECT_PROMPT = "Select your engagement type"

_COPY: dict[TaskType, dict[str, str]] = {
    TaskType.NDA: {
        "title": "Non-Disclosure Agreement",
        "intro": "Please read the agreement carefully and sign below.",
        "agree": "I have read and agree to the terms and conditions of this "
                 "Non-Disclosure Agreement. Typing my name above serves as my "
                 "digital signature.",
        "button": "Sign NDA",
        "done": "NDA Signed",
    },
    TaskType.CONTRACT: {
        "title": "Sign Your Employment Contract",
        "intro": "Select your engagement type, read the agreement carefully, "
                 "and sign below.",
        "agree": "I have read and agree to the terms and conditions of this "
                 "contract. Typing my name above serves as my digital signature.",
        "button": "Sign Contract",
        "done": "Contract Signed",
    },
}


def _signed_on(signed_at: str) -> str:
    try:
        return datetime.fromisoformat(signed_at).astimezone().strftime("%d %B %Y, %H:%M")
    except ValueError:
        return signed_at


class AgreementView(ctk.CTkFrame):
    """Read-and-sign screen for the NDA or the contract.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    signing:
        Renders the documents and records signatures.
    session:
        Used to read the current user's id.
    navigate:
        Shell navigation callback (back to onboarding).
    logger:
        Structured logger instance.
    task_type:
        ``TaskType.NDA`` or ``TaskType.CONTRACT``.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        signing: AgreementSigningService,
        session: SessionManager,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
        task_type: TaskType,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._signing = signing
        self._user_id = session.user_id or ""
        self._navigate = navigate
        self._logger = logger
        self._task_type = task_type
        self._copy = _COPY[task_type]

        self._type_var = ctk.StringVar(value=_SELECT_PROMPT)
        self._agree_var = ctk.BooleanVar(value=False)
        self._body: Optional[ctk.CTkFrame] = None

        self._build_header()
        threading.Thread(target=self._load_signature, name="agreement-load", daemon=True).start()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_header(self) -> None:
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            header, text=self._copy["title"], font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(side="left")
        ctk.CTkButton(
            header,
            text="←  Back",
            font=FONT_BODY,
            width=80,
            fg_color="transparent",
            text_color=TEXT_SECONDARY,
            hover_color="#e5e7eb",
            command=lambda: self._navigate(routing.ONBOARDING),
        ).pack(side="right")

    def _fresh_body(self) -> ctk.CTkFrame:
        if self._body is not None:
            self._body.destroy()
        self._body = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        return self._body

    def _label(self, parent: ctk.CTkFrame, text: str) -> None:
        ctk.CTkLabel(
            parent, text=text, font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 4))

    def _build_form(self) -> None:
        body = self._fresh_body()
        ctk.CTkLabel(
            body, text=self._copy["intro"], font=FONT_BODY,
            text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0))

        if self._task_type == TaskType.CONTRACT:
            self._label(body, "ENGAGEMENT TYPE")
            ctk.CTkOptionMenu(
                body,
                values=list(ENGAGEMENT_TYPES),
                variable=self._type_var,
                font=FONT_BODY,
                command=lambda _choice: self._show_document(),
            ).pack(fill="x", padx=PADDING_MD)

        self._label(body, "AGREEMENT")
        self._document = ctk.CTkTextbox(
            body, height=260, font=FONT_SMALL, wrap="word",
            border_width=1, border_color=INPUT_BORDER,
        )
        self._document.pack(fill="both", expand=True, padx=PADDING_MD)
        self._show_document()

        self._label(body, "FULL NAME (DIGITAL SIGNATURE)")
        self._name_entry = ctk.CTkEntry(
            body,
            placeholder_text="Enter your full legal name",
            font=FONT_BODY,
            border_color=INPUT_BORDER,
            corner_radius=CORNER_RADIUS,
        )
        self._name_entry.pack(fill="x", padx=PADDING_MD)

        ctk.CTkCheckBox(
            body, text=self._copy["agree"], variable=self._agree_var, font=FONT_SMALL,
        ).pack(anchor="w", padx=PADDING_MD, pady=PADDING_MD)

        footer = ctk.CTkFrame(body, fg_color="transparent")
        footer.pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))
        self._error_label = ctk.CTkLabel(
            footer, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w",
        )
        self._error_label.pack(side="left", fill="x", expand=True)
        self._submit_button = ctk.CTkButton(
            footer,
            text=self._copy["button"],
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=40,
            command=self._handle_submit,
        )
        self._submit_button.pack(side="right")

    def _show_document(self) -> None:
        if self._task_type == TaskType.NDA:
            text = self._signing.nda_text()
        else:
            text = self._signing.contract_text(self._type_var.get())
        self._document.configure(state="normal")
        self._document.delete("1.0", "end")
        self._document.insert("1.0", text)
        self._document.configure(state="disabled")

    def _build_signed(self, signed: SignedAgreement) -> None:
        body = self._fresh_body()
        ctk.CTkLabel(
            body, text=f"✓  {self._copy['done']}", font=FONT_HEADING,
            text_color=SUCCESS_TEXT, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 4))
        what = "NDA" if self._task_type == TaskType.NDA else f"{signed.type} agreement"
        ctk.CTkLabel(
            body, text=f"Thank you. The {what} was signed successfully.",
            font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD)
        ctk.CTkLabel(
            body, text=signed.signature, font=FONT_SUBHEADING,
            text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0))
        ctk.CTkLabel(
            body, text=f"Signed on {_signed_on(signed.signed_at)}",
            font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _load_signature(self) -> None:
        signed = self._signing.signature_for(self._user_id, self._task_type)
        self.after(0, self._show_loaded, signed)

    def _show_loaded(self, signed: Optional[SignedAgreement]) -> None:
        if signed is None:
            self._build_form()
        else:
            self._build_signed(signed)

    def _handle_submit(self) -> None:
        full_name = self._name_entry.get()
        agree = self._agree_var.get()
        engagement = self._type_var.get()
        if engagement == _SELECT_PROMPT:
            engagement = ""

        self._error_label.configure(text="")
        self._submit_button.configure(state="disabled", text="Signing...")

        def _worker() -> None:
            if self._task_type == TaskType.NDA:
                result = self._signing.sign_nda(self._user_id, full_name, agree)
            else:
                result = self._signing.sign_contract(self._user_id, engagement, full_name, agree)
            self.after(0, self._handle_result, result)

        threading.Thread(target=_worker, name="agreement-sign", daemon=True).start()

    def _handle_result(self, result: ServiceResult[SignedAgreement]) -> None:
        if result.success and result.data is not None:
            self._build_signed(result.data)
            return
        self._error_label.configure(text=result.error or "Could not record your signature.")
        self._submit_button.configure(state="normal", text=self._copy["button"])
