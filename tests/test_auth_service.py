"""
Session provider: OAuth sign-in, restore, sign-out, token refresh, and
auth-state notifications.
"""

from __future__ import annotations

import time

import pytest

from uwezo.models.auth_models import AuthErrorCode
from uwezo.models.enums import AuthEvent
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.auth_service import AuthService
from uwezo.services.profile_provisioning import ProfileProvisioningService


def _service(db, session, config, logger) -> AuthService:
    return AuthService(
        db=db,
        session=session,
        provisioning=ProfileProvisioningService(
            repo=ProfileRepository(db=db, logger=logger), logger=logger,
        ),
        config=config,
        logger=logger,
    )


@pytest.fixture
def auth(db, session, app_config, logger) -> AuthService:
    return _service(db, session, app_config, logger)


# ===========================================================================
# Sign-in
# ===========================================================================

def test_sign_in_returns_provider_url(auth, fake_supabase) -> None:
    result = auth.sign_in_with_oauth()

    assert result.success
    assert result.redirect_url == fake_supabase.auth.oauth_url
    credentials = fake_supabase.auth.oauth_calls[0]
    assert credentials["provider"] == "google"
    assert credentials["options"]["redirect_to"] == "https://uwezo.example.com/protected"


def test_sign_in_offline(offline_db, session, app_config, logger) -> None:
    result = _service(offline_db, session, app_config, logger).sign_in_with_oauth()

    assert not result.success
    assert result.error_code == AuthErrorCode.OFFLINE


def test_complete_sign_in_sets_session_and_provisions_profile(
    auth, session, fake_supabase, db, raw_session,
) -> None:
    fake_supabase.auth.exchange_outcome = raw_session()

    result = auth.complete_oauth_sign_in("  code-123 ")

    assert result.success
    assert result.full_name == "Amina Odhiambo"
    assert fake_supabase.auth.exchange_calls == [{"auth_code": "code-123"}]
    assert session.user_id == "user-1"
    upsert = fake_supabase.queries("user_profiles", "upsert")[0].op("upsert")
    assert upsert[0][0]["first_name"] == "Amina"
    assert upsert[0][0]["last_name"] == "Odhiambo"
    assert upsert[1]["ignore_duplicates"] is True
    row = db.sqlite.execute("SELECT role_selected FROM user_profiles").fetchone()
    assert row["role_selected"] == 0


def test_complete_sign_in_queues_profile_when_write_fails(auth, raw_session, fake_supabase, db) -> None:
    fake_supabase.auth.exchange_outcome = raw_session()
    fake_supabase.respond("user_profiles", ConnectionError("offline"))

    result = auth.complete_oauth_sign_in("code-123")

    assert result.success
    row = db.sqlite.execute("SELECT table_name, operation FROM sync_queue").fetchone()
    assert tuple(row) == ("user_profiles", "insert_missing")


def test_blank_code_is_rejected(auth, fake_supabase) -> None:
    result = auth.complete_oauth_sign_in("   ")

    assert result.error_code == AuthErrorCode.INVALID_AUTH_CODE
    assert fake_supabase.auth.exchange_calls == []


def test_known_provider_error_is_classified(auth, fake_supabase, session) -> None:
    fake_supabase.auth.exchange_outcome = Exception("flow_state_expired: code too old")

    result = auth.complete_oauth_sign_in("code-123")

    assert result.error_code == AuthErrorCode.INVALID_AUTH_CODE
    assert "expired" in result.error_message
    assert not session.is_authenticated


def test_network_error_is_classified(auth, fake_supabase) -> None:
    fake_supabase.auth.exchange_outcome = ConnectionError("reset")

    assert auth.complete_oauth_sign_in("c").error_code == AuthErrorCode.NETWORK_ERROR


def test_unknown_error(auth, fake_supabase) -> None:
    fake_supabase.auth.exchange_outcome = Exception("something odd")

    assert auth.complete_oauth_sign_in("c").error_code == AuthErrorCode.UNKNOWN_ERROR


# ===========================================================================
# Restore and notifications
# ===========================================================================

def test_restore_session(auth, raw_session, fake_supabase, session) -> None:
    fake_supabase.auth.current_session = raw_session(user_id="user-9")

    restored = auth.restore_session()

    assert restored is not None
    assert session.user_id == "user-9"


def test_restore_without_session(auth, session) -> None:
    assert auth.restore_session() is None
    assert not session.is_authenticated


def test_auth_events_reach_subscribers(auth, raw_session, fake_supabase, session) -> None:
    events: list[AuthEvent] = []
    auth.subscribe(lambda event, current: events.append(event))
    auth.start_listening()

    fake_supabase.auth.listener("SIGNED_IN", raw_session())
    fake_supabase.auth.listener("SIGNED_OUT", None)

    assert events == [AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT]
    assert not session.is_authenticated


def test_stop_listening_unsubscribes(auth, fake_supabase) -> None:
    auth.start_listening()
    auth.stop_listening()

    assert fake_supabase.auth.unsubscribed


def test_failing_listener_does_not_block_others(auth, raw_session, fake_supabase) -> None:
    seen: list[AuthEvent] = []

    def _broken(event, current):
        raise ValueError("listener bug")

    auth.subscribe(_broken)
    auth.subscribe(lambda event, current: seen.append(event))
    auth.start_listening()

    fake_supabase.auth.listener("SIGNED_IN", raw_session())

    assert seen == [AuthEvent.SIGNED_IN]


# ===========================================================================
# Sign-out and refresh
# ===========================================================================

def test_sign_out_clears_session_even_if_server_fails(auth, raw_session, fake_supabase, session) -> None:
    fake_supabase.auth.exchange_outcome = raw_session()
    auth.complete_oauth_sign_in("code")
    fake_supabase.auth.sign_out_error = ConnectionError("offline")

    auth.sign_out()

    assert fake_supabase.auth.sign_out_calls == 1
    assert not session.is_authenticated


def test_sign_out_without_subscription_notifies_directly(auth, raw_session, fake_supabase) -> None:
    fake_supabase.auth.exchange_outcome = raw_session()
    auth.complete_oauth_sign_in("code")
    events: list[AuthEvent] = []
    auth.subscribe(lambda event, current: events.append(event))

    auth.sign_out()

    assert events == [AuthEvent.SIGNED_OUT]


def test_refresh_skipped_while_token_valid(auth, raw_session, fake_supabase, session) -> None:
    fake_supabase.auth.exchange_outcome = raw_session(expires_at=int(time.time()) + 3600)
    auth.complete_oauth_sign_in("code")
    fake_supabase.auth.refresh_outcome = Exception("should not be called")

    assert auth.refresh_session_token().success


def test_refresh_renews_expired_token(auth, raw_session, fake_supabase, session) -> None:
    fake_supabase.auth.exchange_outcome = raw_session(expires_at=int(time.time()) - 10)
    auth.complete_oauth_sign_in("code")
    renewed = raw_session(expires_at=int(time.time()) + 3600)
    fake_supabase.auth.refresh_outcome = renewed

    result = auth.refresh_session_token()

    assert result.success
    assert not session.is_token_expired


def test_revoked_refresh_token_expires_session(auth, raw_session, fake_supabase) -> None:
    fake_supabase.auth.exchange_outcome = raw_session(expires_at=int(time.time()) - 10)
    auth.complete_oauth_sign_in("code")
    fake_supabase.auth.refresh_outcome = Exception("invalid refresh token")

    result = auth.refresh_session_token()

    assert result.error_code == AuthErrorCode.SESSION_EXPIRED


def test_network_error_during_refresh_is_retried_later(auth, raw_session, fake_supabase) -> None:
    fake_supabase.auth.exchange_outcome = raw_session(expires_at=int(time.time()) - 10)
    auth.complete_oauth_sign_in("code")
    fake_supabase.auth.refresh_outcome = TimeoutError()

    assert auth.refresh_session_token().success
