"""Colours, fonts and sizes shared by every Uwezo Career widget.

Navy navigation column, light grey content, blue accent.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette: dark sidebar + light content
# ---------------------------------------------------------------------------

SIDEBAR_BG: Final[str] = "#14213d"
SIDEBAR_HOVER: Final[str] = "#1f3360"
SIDEBAR_ACTIVE: Final[str] = "#274690"
SIDEBAR_TEXT: Final[str] = "#e0e0e0"

CONTENT_BG: Final[str] = "#f4f5f7"
CONTENT_CARD_BG: Final[str] = "#ffffff"

ACCENT_PRIMARY: Final[str] = "#2563eb"
ACCENT_HOVER: Final[str] = "#1d4ed8"
TEXT_PRIMARY: Final[str] = "#111827"
TEXT_SECONDARY: Final[str] = "#6b7280"
TEXT_LIGHT: Final[str] = "#ffffff"

# Status indicators
STATUS_ONLINE: Final[str] = "#16a34a"
STATUS_OFFLINE: Final[str] = "#dc2626"

# Application status badges
STATUS_COLORS: Final[dict[str, str]] = {
    "pending": "#ca8a04",
    "reviewing": "#2563eb",
    "approved": "#16a34a",
    "rejected": "#dc2626",
}

# Input / form
INPUT_BORDER: Final[str] = "#d1d5db"
ERROR_TEXT: Final[str] = "#dc3545"
SUCCESS_TEXT: Final[str] = "#16a34a"
LOGOUT_PRIMARY: Final[str] = "#e74c3c"
LOGOUT_HOVER: Final[str] = "#3a1a1a"

# ---------------------------------------------------------------------------
# Fonts (Segoe UI; Tk falls back to the system font elsewhere)
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_TITLE: Final[tuple[str, int, str]] = (FONT_FAMILY, 26, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_SUBHEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 15, "bold")
FONT_STAT: Final[tuple[str, int, str]] = (FONT_FAMILY, 24, "bold")
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_SIDEBAR: Final[tuple[str, int]] = (FONT_FAMILY, 14)
FONT_SIDEBAR_ACTIVE: Final[tuple[str, int, str]] = (FONT_FAMILY, 14, "bold")
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

SIDEBAR_WIDTH: Final[int] = 240
LOGIN_WINDOW_WIDTH: Final[int] = 480
LOGIN_WINDOW_HEIGHT: Final[int] = 640
MAIN_WINDOW_WIDTH: Final[int] = 1200
MAIN_WINDOW_HEIGHT: Final[int] = 780
CORNER_RADIUS: Final[int] = 8
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24
