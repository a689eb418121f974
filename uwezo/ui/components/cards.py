"""Dashboard Card Components.

Small presentational widgets shared by the employer and employee
dashboards: a stat tile, a status badge, and a titled section.
"""

from __future__ import annotations

import customtkinter as ctk

from uwezo.ui.theme import (
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_SMALL,
    FONT_STAT,
    FONT_SUBHEADING,
    PADDING_MD,
    PADDING_SM,
    STATUS_COLORS,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class StatCard(ctk.CTkFrame):
    """A single figure with its caption."""

    def __init__(self, parent: ctk.CTkFrame, label: str, value: int) -> None:
        super().__init__(parent, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        ctk.CTkLabel(
            self, text=str(value), font=FONT_STAT, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0))
        ctk.CTkLabel(
            self, text=label, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))


class StatusBadge(ctk.CTkLabel):
    """Coloured pill for an application status."""

    def __init__(self, parent: ctk.CTkFrame, status: str) -> None:
        super().__init__(
            parent,
            text=f" {status.capitalize()} ",
            font=FONT_SMALL,
            text_color=TEXT_LIGHT,
            fg_color=STATUS_COLORS.get(status, TEXT_SECONDARY),
            corner_radius=10,
        )


class Section(ctk.CTkFrame):
    """Card with a heading; children go into ``body``."""

    def __init__(self, parent: ctk.CTkFrame, title: str) -> None:
        super().__init__(parent, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        ctk.CTkLabel(
            self, text=title, font=FONT_SUBHEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))
        self.body = ctk.CTkFrame(self, fg_color="transparent")
        self.body.pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))

    def show_empty(self, message: str) -> None:
        ctk.CTkLabel(
            self.body, text=message, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x")
