"""Shared utility functions and models for the Uwezo client.

Convenience re-exports so consumers can import directly from
``uwezo.utils`` while full module imports remain supported.
"""

from uwezo.utils.audit import AuditEvent, log_audit_event
from uwezo.utils.general import epoch_millis, utc_now_iso
from uwezo.utils.string_helpers import JsonValue, blank_to_none, extract_auth_code, initials, join_url

__all__ = [
    "AuditEvent",
    "JsonValue",
    "blank_to_none",
    "epoch_millis",
    "extract_auth_code",
    "initials",
    "join_url",
    "log_audit_event",
    "utc_now_iso",
]
