"""
Authentication Service.

Single orchestrator for every authentication concern in the Uwezo
client: OAuth sign-in, session restore, sign-out, token refresh, error
classification, and forwarding of Supabase auth-state notifications.

Sits between the UI layer and the Supabase auth client so that
``LoginView`` remains a thin form handler.  Sign-in is redirect based:
``sign_in_with_oauth`` returns the provider URL to open in the browser
and ``complete_oauth_sign_in`` exchanges the returned code for a session
(PKCE flow).

All methods return typed ``AuthResult`` models; the UI never inspects
raw exceptions.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from uwezo.auth import SessionManager
from uwezo.config import AppConfig
from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    AuthSession,
    AuthUser,
    SUPABASE_ERROR_MAP,
)
from uwezo.models.enums import AuthEvent
from uwezo.services.profile_provisioning import (
    ProfileProvisioningError,
    ProfileProvisioningService,
)

AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


def to_auth_session(raw: Any) -> Optional[AuthSession]:
    """Convert a ``gotrue`` session object into an ``AuthSession``."""
    if raw is None or getattr(raw, "user", None) is None:
        return None
    user = raw.user
    return AuthSession(
        access_token=raw.access_token,
        refresh_token=raw.refresh_token,
        expires_at=raw.expires_at,
        user=AuthUser(
            id=str(user.id),
            email=user.email,
            user_metadata=dict(user.user_metadata or {}),
        ),
    )


class AuthService:
    """Centralised authentication service.

    Receives all infrastructure dependencies via ``__init__`` and
    exposes pure request → result methods for every auth flow.

    Parameters
    ----------
    db:
        Initialised database manager (Supabase + SQLite).
    session:
        Injectable session holder for the authenticated user.
    provisioning:
        Creates the ``user_profiles`` row on first sign-in.
    config:
        Application settings (OAuth provider and redirect URL).
    logger:
        Structured JSON logger for audit-grade logging.
    """

    def __init__(
        self,
        db: DatabaseManager,
        session: SessionManager,
        provisioning: ProfileProvisioningService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        self._db: DatabaseManager = db
        self._session: SessionManager = session
        self._provisioning: ProfileProvisioningService = provisioning
        self._config: AppConfig = config
        self._logger: StructuredLogger = logger

        self._listeners: list[AuthListener] = []
        self._listeners_lock: threading.Lock = threading.Lock()
        self._subscription: Any = None

    @property
    def session(self) -> SessionManager:
        return self._session

    # ==================================================================
    # Session restore
    # ==================================================================

    def restore_session(self) -> Optional[AuthSession]:
        """Load the session the auth client already holds, if any.

        Returns ``None`` when signed out or when the backend is
        unreachable.
        """
        if not self._db.is_online:
            return None
        try:
            current = to_auth_session(self._db.supabase.auth.get_session())
        except Exception as exc:
            self._logger.warning("Could not restore session: %s", exc)
            return None

        if current is None:
            return None
        self._session.set_session(current)
        self._logger.info(
            "Session restored for %s", current.user.email or current.user.id,
            extra={"event": "SESSION_RESTORED", "user_id": current.user.id},
        )
        return current

    # ==================================================================
    # Auth-state notifications
    # ==================================================================

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register *listener* for auth-state changes.

        Returns a zero-argument callable that removes the listener.
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def start_listening(self) -> None:
        """Subscribe once to the Supabase client's auth-state stream."""
        if self._subscription is not None or not self._db.is_online:
            return
        self._subscription = self._db.supabase.auth.on_auth_state_change(
            self._on_auth_state_change,
        )

    def stop_listening(self) -> None:
        if self._subscription is None:
            return
        try:
            self._subscription.unsubscribe()
        except Exception as exc:
            self._logger.debug("Auth subscription already closed: %s", exc)
        self._subscription = None

    def _on_auth_state_change(self, event: str, raw_session: Any) -> None:
        try:
            auth_event = AuthEvent(str(event))
        except ValueError:
            self._logger.debug("Ignoring auth event %s", event)
            return

        current = to_auth_session(raw_session)
        if auth_event == AuthEvent.SIGNED_OUT or current is None:
            self._session.clear()
        else:
            self._session.set_session(current)
        self._notify(auth_event, current)

    def _notify(self, event: AuthEvent, current: Optional[AuthSession]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, current)
            except Exception as exc:
                self._logger.error(
                    "Auth listener failed on %s: %s", event, exc, exc_info=True,
                )

    # ==================================================================
    # OAuth sign-in
    # ==================================================================

    def sign_in_with_oauth(self, provider: Optional[str] = None) -> AuthResult:
        """Start a redirect-based OAuth sign-in.

        Returns
        -------
        AuthResult
            ``redirect_url`` holds the provider URL to open in the
            browser; the provider redirects back to
            ``AppConfig.oauth_redirect_url`` with a ``code``.
        """
        provider = provider or self._config.OAUTH_PROVIDER
        if not self._db.is_online:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.OFFLINE,
                error_message="Cannot reach the server. Check your internet connection.",
            )
        try:
            response = self._db.supabase.auth.sign_in_with_oauth({
                "provider": provider,
                "options": {"redirect_to": self._config.oauth_redirect_url},
            })
        except Exception as exc:
            return self._classify_auth_error(exc, "OAUTH_START_FAILED")

        self._logger.info(
            "OAuth sign-in started with %s", provider,
            extra={"event": "OAUTH_START"},
        )
        return AuthResult(success=True, redirect_url=response.url)

    def complete_oauth_sign_in(self, auth_code: str) -> AuthResult:
        """Exchange the OAuth ``code`` for a session and provision the profile."""
        auth_code = auth_code.strip()
        if not auth_code:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.INVALID_AUTH_CODE,
                error_message="Paste the sign-in code from your browser.",
            )
        try:
            response = self._db.supabase.auth.exchange_code_for_session(
                {"auth_code": auth_code},
            )
        except RuntimeError:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.OFFLINE,
                error_message="Cannot reach the server. Check your internet connection.",
            )
        except Exception as exc:
            return self._classify_auth_error(exc, "LOGIN_FAILED")

        current = to_auth_session(response.session)
        if current is None:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.OAUTH_FAILED,
                error_message="Sign-in did not return a session. Start sign-in again.",
            )

        self._session.set_session(current)
        try:
            self._provisioning.ensure_profile(current.user)
        except ProfileProvisioningError as exc:
            self._session.clear()
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.PROVISIONING_FAILED,
                error_message=f"Could not set up your profile: {exc.message}",
            )

        self._logger.info(
            "User authenticated: %s", current.user.display_name,
            extra={
                "event": "LOGIN",
                "email": current.user.email,
                "user_id": current.user.id,
            },
        )
        return AuthResult(
            success=True,
            user_id=current.user.id,
            email=current.user.email,
            full_name=current.user.display_name,
        )

    def _classify_auth_error(self, exc: Exception, event: str) -> AuthResult:
        """Map a Supabase or network exception to a structured ``AuthResult``."""
        if isinstance(exc, (ConnectionError, TimeoutError)):
            self._logger.warning(
                "Network error during sign-in: %s", exc,
                extra={"event": "LOGIN_NETWORK_ERROR"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message="Cannot reach the server. Check your internet connection.",
            )

        error_str = str(exc).lower()
        code = str(getattr(exc, "code", "") or "").lower()
        for code_key, (error_code, human_message) in SUPABASE_ERROR_MAP.items():
            if code_key == code or code_key in error_str:
                self._logger.warning(
                    "Auth error (%s): %s", code_key, exc,
                    extra={"event": event, "error_code": code_key},
                )
                return AuthResult(
                    success=False,
                    error_code=error_code,
                    error_message=human_message,
                )

        self._logger.warning(
            "Unknown auth error: %s", exc,
            extra={"event": event, "error_code": "unknown"},
        )
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.UNKNOWN_ERROR,
            error_message="An unexpected error occurred. Please try again later.",
        )

    # ==================================================================
    # Sign-out
    # ==================================================================

    def sign_out(self) -> None:
        """Server-side sign-out, then clear local state.

        The server call is best effort so that offline sign-out still
        works.
        """
        user_id = self._session.user_id or "unknown"
        try:
            self._db.supabase.auth.sign_out()
        except RuntimeError:
            self._logger.debug("Offline; skipping server-side sign_out for %s.", user_id)
        except Exception as exc:
            self._logger.warning("Server-side sign_out failed for %s: %s", user_id, exc)

        had_session = self._session.is_authenticated
        self._session.clear()
        self._logger.info(
            "User signed out: %s", user_id,
            extra={"event": "LOGOUT", "user_id": user_id},
        )
        # Offline sign-out never reaches the auth stream; notify directly.
        if had_session and self._subscription is None:
            self._notify(AuthEvent.SIGNED_OUT, None)

    # ==================================================================
    # Token refresh
    # ==================================================================

    def refresh_session_token(self) -> AuthResult:
        """Attempt to refresh the access token.

        Distinguishes auth errors (expired/revoked refresh token →
        ``SESSION_EXPIRED``) from transient network errors (silently
        skip, retry next cycle).

        Returns
        -------
        AuthResult
            ``success=True`` when no action was needed or the refresh
            succeeded.  ``success=False`` with
            ``error_code=SESSION_EXPIRED`` when the refresh token is
            permanently invalid.
        """
        if not self._session.is_authenticated:
            return AuthResult(success=True)

        if not self._session.is_token_expired:
            return AuthResult(success=True)

        if not self._db.is_online:
            return AuthResult(success=True)

        refresh_token: Optional[str] = self._session.refresh_token
        if not refresh_token:
            return AuthResult(success=True)

        try:
            response = self._db.supabase.auth.refresh_session(refresh_token)
            refreshed = to_auth_session(response.session)
            if refreshed is not None:
                self._session.set_session(refreshed)
                self._logger.info("Session token refreshed.")
            return AuthResult(success=True)

        except (ConnectionError, TimeoutError):
            self._logger.debug("Network error during token refresh; will retry.")
            return AuthResult(success=True)

        except Exception as exc:
            self._logger.warning(
                "Token refresh failed (auth error): %s. Forcing sign-out.", exc,
                extra={"event": "SESSION_EXPIRED"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.SESSION_EXPIRED,
                error_message="Your session has expired. Please sign in again.",
            )
