"""Left-hand navigation for a signed-in user whose role is known.

Shows who is signed in, one button per route the role may open, the
connection state, and Log Out.  Clicks are handed to the callbacks the
shell passes in.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from uwezo.auth import SessionManager
from uwezo.logger import StructuredLogger
from uwezo.ui.theme import (
    ACCENT_PRIMARY,
    FONT_BODY,
    FONT_SIDEBAR,
    FONT_SIDEBAR_ACTIVE,
    FONT_SMALL,
    LOGOUT_HOVER,
    LOGOUT_PRIMARY,
    PADDING_MD,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    SIDEBAR_BG,
    SIDEBAR_HOVER,
    SIDEBAR_TEXT,
    SIDEBAR_WIDTH,
    STATUS_OFFLINE,
    STATUS_ONLINE,
    TEXT_LIGHT,
)
from uwezo.utils.string_helpers import initials

_AVATAR_PX: int = 40
_ROUTE_BUTTON_HEIGHT: int = 40


def _divider(parent: ctk.CTkFrame, **pack: object) -> None:
    ctk.CTkFrame(parent, height=1, fg_color=SIDEBAR_HOVER).pack(fill="x", padx=PADDING_MD, **pack)


class SidebarNav(ctk.CTkFrame):
    """Navigation column packed to the left of the shell's content area."""

    def __init__(
        self,
        parent: ctk.CTk,
        on_route_selected: Callable[[str], None],
        on_logout: Callable[[], None],
        session: SessionManager,
        role_label: str,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, width=SIDEBAR_WIDTH, fg_color=SIDEBAR_BG, corner_radius=0)
        self.pack_propagate(False)
        self._on_route_selected = on_route_selected
        self._logger = logger
        self._route_buttons: dict[str, ctk.CTkButton] = {}
        self._highlighted: Optional[str] = None

        user = session.get_current_user()
        self._identity(user.display_name, role_label)
        _divider(self, pady=PADDING_SM)

        self._routes = ctk.CTkFrame(self, fg_color="transparent")
        self._routes.pack(fill="both", expand=True, pady=PADDING_SM)

        footer = ctk.CTkFrame(self, fg_color="transparent")
        footer.pack(side="bottom", fill="x", padx=PADDING_SM, pady=PADDING_SM)
        _divider(self, side="bottom")

        self._connection = ctk.CTkLabel(
            footer, text="", font=FONT_SMALL, text_color=SIDEBAR_TEXT, anchor="w",
        )
        self._connection.pack(fill="x", padx=PADDING_SM, pady=(0, PADDING_SM))
        ctk.CTkButton(
            footer,
            text="  ⏻   Log Out",
            anchor="w",
            font=FONT_BODY,
            height=36,
            corner_radius=6,
            fg_color="transparent",
            hover_color=LOGOUT_HOVER,
            text_color=LOGOUT_PRIMARY,
            command=on_logout,
        ).pack(fill="x")
        self.set_online(True)

    def _identity(self, name: str, role_label: str) -> None:
        block = ctk.CTkFrame(self, fg_color="transparent")
        block.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))

        badge = ctk.CTkFrame(
            block,
            width=_AVATAR_PX,
            height=_AVATAR_PX,
            corner_radius=_AVATAR_PX // 2,
            fg_color=ACCENT_PRIMARY,
        )
        badge.pack(side="left", padx=(0, 10))
        badge.pack_propagate(False)
        ctk.CTkLabel(
            badge, text=initials(name), font=FONT_SIDEBAR_ACTIVE, text_color=TEXT_LIGHT,
        ).place(relx=0.5, rely=0.5, anchor="center")

        names = ctk.CTkFrame(block, fg_color="transparent")
        names.pack(side="left", fill="x", expand=True)
        for text, font, colour in (
            (name, FONT_SIDEBAR_ACTIVE, TEXT_LIGHT),
            (role_label, FONT_SMALL, SIDEBAR_TEXT),
        ):
            ctk.CTkLabel(names, text=text, font=font, text_color=colour, anchor="w").pack(fill="x")

    # ------------------------------------------------------------------

    def add_route(self, route: str, display_name: str, icon: str) -> None:
        button = ctk.CTkButton(
            self._routes,
            text=f"  {icon}   {display_name}",
            anchor="w",
            font=FONT_SIDEBAR,
            height=_ROUTE_BUTTON_HEIGHT,
            corner_radius=6,
            fg_color="transparent",
            hover_color=SIDEBAR_HOVER,
            text_color=SIDEBAR_TEXT,
            command=lambda: self._on_route_selected(route),
        )
        button.pack(fill="x", padx=PADDING_SM, pady=2)
        self._route_buttons[route] = button

    def set_active(self, route: Optional[str]) -> None:
        """Highlight the button for *route*; ``None`` clears the highlight."""
        previous = self._route_buttons.get(self._highlighted or "")
        if previous is not None:
            previous.configure(fg_color="transparent", font=FONT_SIDEBAR)
        current = self._route_buttons.get(route or "")
        if current is not None:
            current.configure(fg_color=SIDEBAR_ACTIVE, font=FONT_SIDEBAR_ACTIVE)
        self._highlighted = route

    def set_online(self, online: bool) -> None:
        self._connection.configure(
            text="●  Online" if online else "●  Offline (changes will sync later)",
            text_color=STATUS_ONLINE if online else STATUS_OFFLINE,
        )
