"""
Audit trail.

State changes a user would ask about later (role chosen, job posted or
edited, application sent, onboarding task ticked) go through
:func:`log_audit_event`.  The event always becomes an ``AUDIT`` log line;
callers that pass a SQLite connection also get an ``audit_log`` row.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Optional, Union

from pydantic import BaseModel, Field

from uwezo.logger import StructuredLogger
from uwezo.utils.general import utc_now_iso

__all__ = ["AuditEvent", "log_audit_event", "persist_audit_event"]

# Scalars only.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=utc_now_iso)

    def as_row(self) -> tuple[str, str, str, str, str, str]:
        return (
            self.timestamp,
            self.action,
            self.entity_type,
            self.entity_id,
            self.user_id,
            json.dumps(self.details, default=str),
        )


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> AuditEvent:
    """Record *action* on ``entity_type``/``entity_id`` by *user_id*.

    A failed ``audit_log`` insert is logged as a warning; the caller's
    operation has already happened and is not undone.
    """
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        details=details or {},
    )
    logger.info(
        "AUDIT %s %s/%s",
        action, entity_type, entity_id,
        extra={"event": action, "user_id": user_id, "details": event.details},
    )
    if conn is not None:
        try:
            persist_audit_event(conn, event)
        except sqlite3.Error as exc:
            logger.warning("audit_log insert failed for %s: %s", action, exc)
    return event


def persist_audit_event(conn: sqlite3.Connection, event: AuditEvent) -> None:
    conn.execute(
        "INSERT INTO audit_log (timestamp, action, entity_type, entity_id, user_id, details) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        event.as_row(),
    )
    conn.commit()
