"""
String Helpers.

JSON value typing for payloads crossing the Supabase/SQLite boundary and
small normalisers for free-text form input.
"""

from __future__ import annotations

from typing import Optional, Union
from urllib.parse import parse_qs, urlsplit

__all__ = ["JsonValue", "blank_to_none", "extract_auth_code", "initials", "join_url"]

# ---------------------------------------------------------------------------
# Recursive JSON value type
# ---------------------------------------------------------------------------

JsonValue = Union[
    str,
    int,
    float,
    bool,
    None,
    dict[str, "JsonValue"],
    list["JsonValue"],
]


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Strip *value*; return ``None`` when nothing is left."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def initials(name: str) -> str:
    """First and last initials of *name*, ``"?"`` when it is blank."""
    words = name.split()
    if not words:
        return "?"
    if len(words) == 1:
        return words[0][0].upper()
    return (words[0][0] + words[-1][0]).upper()


def join_url(base: str, *parts: str) -> str:
    """Join URL path segments onto *base* with exactly one slash between each.

    ``join_url("https://x.io/", "apply", "")`` yields
    ``"https://x.io/apply/"``: an empty trailing part keeps the trailing
    slash, which the two-step job posting relies on for its placeholder
    link.
    """
    url = base.rstrip("/")
    for part in parts:
        url = f"{url}/{part.strip('/')}"
    return url


def extract_auth_code(text: str) -> Optional[str]:
    """Pull the OAuth ``code`` out of a pasted redirect URL or bare code.

    ``"http://localhost:3000/protected?code=abc&state=x"`` and ``"abc"``
    both yield ``"abc"``.
    """
    text = text.strip()
    if not text:
        return None
    if "://" not in text and "?" not in text:
        return text
    codes = parse_qs(urlsplit(text).query).get("code")
    return codes[0] if codes else None
