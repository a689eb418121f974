"""Login View: Authentication Screen.

Starts Google OAuth sign-in through ``AuthService``, opens the provider
page in the system browser, and completes the sign-in once the user
pastes back the redirect URL (or the bare code) from their browser.

This module contains no business logic.  It gathers inputs, delegates
to ``AuthService``, and displays results.
"""

from __future__ import annotations

import threading
import tkinter as tk
import webbrowser
from typing import Callable, Optional

import customtkinter as ctk

from uwezo.logger import StructuredLogger
from uwezo.services.auth_service import AuthService
from uwezo.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BRAND,
    FONT_BUTTON,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from uwezo.utils.string_helpers import extract_auth_code

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_CARD_WIDTH: int = 420
_INPUT_HEIGHT: int = 44
_BUTTON_HEIGHT: int = 48
_BRAND_ICON_SIZE: int = 56


class LoginView(ctk.CTkFrame):
    """Full-screen sign-in frame.

    Parameters
    ----------
    parent:
        The root ``CTk`` window this frame belongs to.
    auth_service:
        Authentication service owning the OAuth flow.
    on_login_success:
        Callback invoked (on the main thread) after a successful sign-in.
    logger:
        Structured JSON logger.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        auth_service: AuthService,
        on_login_success: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)

        self._parent: ctk.CTk = parent
        self._auth_service: AuthService = auth_service
        self._on_login_success: Callable[[], None] = on_login_success
        self._logger: StructuredLogger = logger

        self._google_button: Optional[ctk.CTkButton] = None
        self._code_entry: Optional[ctk.CTkEntry] = None
        self._complete_button: Optional[ctk.CTkButton] = None
        self._error_label: Optional[ctk.CTkLabel] = None
        self._info_label: Optional[ctk.CTkLabel] = None

        self._build_ui()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def show_message(self, message: str, is_error: bool = True) -> None:
        """Display *message* under the sign-in controls."""
        if is_error:
            self._show_error(message)
        else:
            self._show_info(message)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self.pack(fill="both", expand=True)

        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)
        self.grid_rowconfigure(2, weight=1)
        self.grid_columnconfigure(0, weight=1)

        card = ctk.CTkFrame(
            self,
            width=_CARD_WIDTH,
            fg_color=CONTENT_CARD_BG,
            corner_radius=16,
            border_width=1,
            border_color="#e0e0e0",
        )
        card.grid(row=1, column=0)

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        icon_frame = ctk.CTkFrame(
            inner,
            width=_BRAND_ICON_SIZE,
            height=_BRAND_ICON_SIZE,
            corner_radius=14,
            fg_color=ACCENT_PRIMARY,
        )
        icon_frame.pack(pady=(0, 12))
        icon_frame.pack_propagate(False)

        ctk.CTkLabel(
            icon_frame,
            text="U",
            font=("Segoe UI", 24, "bold"),
            text_color=TEXT_LIGHT,
        ).place(relx=0.5, rely=0.5, anchor="center")

        ctk.CTkLabel(
            inner, text="Uwezo Career", font=FONT_BRAND, text_color=TEXT_PRIMARY,
        ).pack(pady=(0, 2))
        ctk.CTkLabel(
            inner,
            text="Your path from onboarding to your next job",
            font=("Segoe UI", 12),
            text_color=TEXT_SECONDARY,
        ).pack(pady=(0, PADDING_LG))

        # -- Step 1: open the provider page --
        self._google_button = ctk.CTkButton(
            inner,
            text="Continue with Google",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=_BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_start_sign_in,
        )
        self._google_button.pack(fill="x", pady=(0, PADDING_LG))

        # -- Step 2: paste the redirect back --
        ctk.CTkLabel(
            inner,
            text="SIGN-IN CODE OR REDIRECT URL",
            font=FONT_LABEL,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(0, 4))

        self._code_entry = ctk.CTkEntry(
            inner,
            placeholder_text="Paste the address your browser landed on",
            font=FONT_BODY,
            fg_color=CONTENT_CARD_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            height=_INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
        )
        self._code_entry.pack(fill="x", pady=(0, PADDING_MD))
        self._code_entry.bind("<Return>", self._on_enter_key)

        self._complete_button = ctk.CTkButton(
            inner,
            text="Complete Sign In  →",
            font=FONT_BUTTON,
            fg_color="transparent",
            hover_color="#e8eefc",
            text_color=ACCENT_PRIMARY,
            border_color=ACCENT_PRIMARY,
            border_width=2,
            height=_BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_complete_sign_in,
        )
        self._complete_button.pack(fill="x", pady=(0, PADDING_SM))

        self._error_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=ERROR_TEXT,
            wraplength=_CARD_WIDTH - 100,
        )
        self._error_label.pack(fill="x")
        self._error_label.pack_forget()

        self._info_label = ctk.CTkLabel(
            inner, text="", font=FONT_SMALL, text_color=SUCCESS_TEXT,
            wraplength=_CARD_WIDTH - 100,
        )
        self._info_label.pack(fill="x")
        self._info_label.pack_forget()

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event[tk.Misc]) -> None:
        self._handle_complete_sign_in()

    def _handle_start_sign_in(self) -> None:
        self._clear_messages()
        self._set_loading(True)
        threading.Thread(target=self._start_sign_in, daemon=True).start()

    def _start_sign_in(self) -> None:
        """Background thread: ask the provider for its sign-in URL."""
        try:
            result = self._auth_service.sign_in_with_oauth()
            if result.success and result.redirect_url:
                url = result.redirect_url
                webbrowser.open(url)
                self.after(0, lambda: self._show_info(
                    "Finish signing in with Google in your browser, then paste "
                    "the address it lands on below."
                ))
            else:
                message = result.error_message or "Could not start sign-in."
                self.after(0, lambda: self._show_error(message))
        except Exception as exc:
            error_msg = str(exc)
            self.after(
                0, lambda msg=error_msg: self._show_error(f"Sign-in failed: {msg}"),
            )
        finally:
            self.after(0, lambda: self._set_loading(False))

    def _handle_complete_sign_in(self) -> None:
        auth_code = extract_auth_code(self._code_entry.get())
        if not auth_code:
            self._show_error("Paste the sign-in code from your browser.")
            return

        self._clear_messages()
        self._set_loading(True)
        threading.Thread(
            target=self._complete_sign_in, args=(auth_code,), daemon=True,
        ).start()

    def _complete_sign_in(self, auth_code: str) -> None:
        """Background thread: exchange the code for a session."""
        try:
            result = self._auth_service.complete_oauth_sign_in(auth_code)
            if result.success:
                self.after(0, self._on_login_success)
            else:
                message = result.error_message or "Sign-in failed."
                self.after(0, lambda: self._show_error(message))
        except Exception as exc:
            error_msg = str(exc)
            self.after(
                0, lambda msg=error_msg: self._show_error(f"Sign-in failed: {msg}"),
            )
        finally:
            self.after(0, lambda: self._set_loading(False))

    # ------------------------------------------------------------------
    # UI Helper Methods
    # ------------------------------------------------------------------

    def _show_error(self, message: str) -> None:
        if self._info_label is not None:
            self._info_label.pack_forget()
        if self._error_label is not None:
            self._error_label.configure(text=message)
            self._error_label.pack(fill="x")

    def _show_info(self, message: str) -> None:
        if self._error_label is not None:
            self._error_label.pack_forget()
        if self._info_label is not None:
            self._info_label.configure(text=message)
            self._info_label.pack(fill="x")

    def _clear_messages(self) -> None:
        for label in (self._error_label, self._info_label):
            if label is not None:
                label.configure(text="")
                label.pack_forget()

    def _set_loading(self, loading: bool) -> None:
        """Disable both buttons while a request is in flight."""
        state = "disabled" if loading else "normal"
        if self._google_button is not None:
            self._google_button.configure(state=state)
        if self._complete_button is not None:
            self._complete_button.configure(
                state=state,
                text="Signing in..." if loading else "Complete Sign In  →",
            )
