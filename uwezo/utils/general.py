"""General Utility Functions."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional

__all__ = ["epoch_millis", "parse_iso", "utc_now_iso"]


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the format Supabase returns)."""
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Returns ``None`` for empty or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def epoch_millis(seconds: float | None = None) -> int:
    """Convert *seconds* since the epoch (default: now) to whole milliseconds."""
    if seconds is None:
        seconds = time.time()
    return int(seconds * 1000)
