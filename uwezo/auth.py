"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the current Supabase
session (``AuthSession`` model) for the lifetime of a sign-in.  The
session lives in memory only; the auth provider owns persistence.

Usage::

    from uwezo.auth import SessionManager

    session = SessionManager()
    session.set_session(auth_session)
    user = session.get_current_user()
"""

from __future__ import annotations

import threading
from typing import Optional

from uwezo.models.auth_models import AuthSession, AuthUser


class SessionManager:
    """Injectable holder for the current authenticated session.

    Pass a single ``SessionManager`` through the dependency-injection
    layer so every component shares the same session.  ``generation``
    increases on every sign-in and sign-out, which lets background work
    started under an earlier session recognise that it is stale.
    """

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._session: Optional[AuthSession] = None
        self._generation: int = 0

    def set_session(self, session: AuthSession) -> None:
        """Record *session* as the current sign-in.

        A token refresh for the same user keeps the generation; a
        different user starts a new one.
        """
        with self._lock:
            previous = self._session
            self._session = session
            if previous is None or previous.user.id != session.user.id:
                self._generation += 1

    def get_session(self) -> Optional[AuthSession]:
        with self._lock:
            return self._session

    def get_current_user(self) -> AuthUser:
        """Return the authenticated user.

        Raises:
            RuntimeError: If no user is currently authenticated.
        """
        with self._lock:
            if self._session is None:
                raise RuntimeError(
                    "No user is currently authenticated. Sign-in required."
                )
            return self._session.user

    @property
    def user_id(self) -> Optional[str]:
        with self._lock:
            return self._session.user.id if self._session is not None else None

    @property
    def access_token(self) -> Optional[str]:
        """Return the current access token, or ``None`` if not set."""
        with self._lock:
            return self._session.access_token if self._session is not None else None

    @property
    def refresh_token(self) -> Optional[str]:
        """Return the refresh token for session renewal."""
        with self._lock:
            return self._session.refresh_token if self._session is not None else None

    @property
    def is_token_expired(self) -> bool:
        """``True`` when the access token has expired or was never set."""
        with self._lock:
            if self._session is None:
                return True
            return self._session.is_expired()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def clear(self) -> None:
        """Drop the session, ending the sign-in."""
        with self._lock:
            if self._session is not None:
                self._generation += 1
            self._session = None

    @property
    def is_authenticated(self) -> bool:
        """``True`` when a user is currently signed in."""
        with self._lock:
            return self._session is not None
