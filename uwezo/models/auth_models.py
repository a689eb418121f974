"""
Authentication Pipeline Models.

Pydantic models and enumerations for the auth request/response
contracts between ``AuthService`` and the UI layer.

Every auth operation returns a structured, inspectable result rather
than raw strings or exception side-channels.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Authentication error categories.

    Used by ``AuthService`` to classify Supabase errors and by the
    UI layer to decide which feedback to display.
    """

    OAUTH_FAILED = "oauth_failed"
    INVALID_AUTH_CODE = "invalid_auth_code"
    USER_BANNED = "user_banned"
    NETWORK_ERROR = "network_error"
    OFFLINE = "offline"
    SESSION_EXPIRED = "session_expired"
    PROVISIONING_FAILED = "provisioning_failed"
    UNKNOWN_ERROR = "unknown_error"


# ---------------------------------------------------------------------------
# Supabase error-code mapping
# ---------------------------------------------------------------------------

SUPABASE_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "flow_state_not_found": (
        AuthErrorCode.INVALID_AUTH_CODE,
        "This sign-in link has already been used. Start sign-in again.",
    ),
    "flow_state_expired": (
        AuthErrorCode.INVALID_AUTH_CODE,
        "This sign-in link has expired. Start sign-in again.",
    ),
    "bad_code_verifier": (
        AuthErrorCode.INVALID_AUTH_CODE,
        "The sign-in code does not match this device. Start sign-in again.",
    ),
    "invalid_grant": (
        AuthErrorCode.INVALID_AUTH_CODE,
        "The sign-in code is invalid. Start sign-in again.",
    ),
    "provider_disabled": (
        AuthErrorCode.OAUTH_FAILED,
        "Google sign-in is not enabled for this project.",
    ),
    "user_banned": (
        AuthErrorCode.USER_BANNED,
        "Your account has been suspended. Contact support.",
    ),
}


# ---------------------------------------------------------------------------
# Session identity
# ---------------------------------------------------------------------------

class AuthUser(BaseModel):
    """Identity portion of a Supabase session."""

    id: str
    email: Optional[str] = None
    user_metadata: dict[str, object] = Field(default_factory=dict)

    model_config = {"from_attributes": True}

    @property
    def display_name(self) -> str:
        """Best-effort human name from the provider metadata."""
        for key in ("full_name", "name"):
            value = self.user_metadata.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        if self.email:
            return self.email.split("@")[0]
        return "User"


class AuthSession(BaseModel):
    """Opaque credential plus identity.

    Owned by the auth provider; the application only holds it in memory
    for the lifetime of the sign-in and never writes it to disk.
    """

    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None
    user: AuthUser

    model_config = {"from_attributes": True}

    @property
    def expires_at_dt(self) -> Optional[datetime]:
        if self.expires_at is None:
            return None
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

    def is_expired(self, leeway: timedelta = timedelta(seconds=30)) -> bool:
        """``True`` once the access token is within *leeway* of expiry."""
        expiry = self.expires_at_dt
        if expiry is None:
            return False
        return datetime.now(timezone.utc) >= expiry - leeway


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for sign-in, sign-out and session refresh.

    The UI layer inspects ``success`` to decide the happy-path vs.
    error-path rendering, and uses ``error_code`` to conditionally
    show extra controls.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable error description (``None`` on success).
    user_id:
        The Supabase UUID of the authenticated user.
    email:
        The user's email address.
    full_name:
        Display name taken from the provider metadata.
    redirect_url:
        Provider URL to open in the browser (OAuth start only).
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    redirect_url: Optional[str] = None

    model_config = {"from_attributes": True}
