"""
Role resolver state machine: transitions, redirect policy, and the
one-lookup-per-session guarantee.
"""

from __future__ import annotations

import threading

from postgrest.exceptions import APIError

from uwezo.models import routing
from uwezo.models.enums import RoleStatus, UserRole
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.role_resolver import RoleResolver


def _resolver(db, logger) -> RoleResolver:
    return RoleResolver(repo=ProfileRepository(db=db, logger=logger), logger=logger)


# ===========================================================================
# Lookup outcomes
# ===========================================================================

def test_starts_in_checking(db, logger) -> None:
    resolver = _resolver(db, logger)
    assert resolver.status == RoleStatus.CHECKING
    assert resolver.role is None
    assert resolver.is_checking


def test_employer_on_landing_redirects_to_employer_dashboard(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", {"role": "employer", "role_selected": True})
    resolver = _resolver(db, logger)

    redirect = resolver.refresh("user-1", routing.LANDING)

    assert resolver.status == RoleStatus.RESOLVED
    assert resolver.role == UserRole.EMPLOYER
    assert redirect is not None
    assert redirect.target == routing.EMPLOYER_DASHBOARD


def test_independent_lands_on_employee_dashboard(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", {"role": "independent", "role_selected": True})
    resolver = _resolver(db, logger)

    redirect = resolver.refresh("user-1", routing.LANDING)

    assert redirect is not None
    assert redirect.target == routing.EMPLOYEE_DASHBOARD


def test_resolved_off_landing_does_not_redirect(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", {"role": "employee", "role_selected": True})
    resolver = _resolver(db, logger)

    assert resolver.refresh("user-1", routing.ONBOARDING) is None
    assert resolver.status == RoleStatus.RESOLVED


def test_missing_profile_is_unselected(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", None)
    resolver = _resolver(db, logger)

    assert resolver.refresh("user-1", routing.LANDING) is None
    assert resolver.status == RoleStatus.UNSELECTED


def test_not_found_error_is_unselected(db, fake_supabase, logger) -> None:
    fake_supabase.respond(
        "user_profiles", APIError({"code": "PGRST116", "message": "no rows"}),
    )
    resolver = _resolver(db, logger)

    resolver.refresh("user-1", routing.LANDING)

    assert resolver.status == RoleStatus.UNSELECTED


def test_role_without_selected_flag_is_unselected(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", {"role": "employer", "role_selected": False})
    resolver = _resolver(db, logger)

    resolver.refresh("user-1", routing.LANDING)

    assert resolver.status == RoleStatus.UNSELECTED
    assert resolver.role is None


def test_unselected_inside_gated_subtree_redirects_to_landing(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", {"role": None, "role_selected": False})
    resolver = _resolver(db, logger)

    redirect = resolver.refresh("user-1", routing.EMPLOYER_DASHBOARD + "/jobs")

    assert redirect is not None
    assert redirect.target == routing.LANDING


def test_lookup_failure_is_unselected_without_redirect(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", ConnectionError("network down"))
    resolver = _resolver(db, logger)

    assert resolver.refresh("user-1", routing.EMPLOYER_DASHBOARD) is None
    assert resolver.status == RoleStatus.UNSELECTED


def test_offline_lookup_is_unselected(offline_db, logger) -> None:
    resolver = _resolver(offline_db, logger)

    resolver.refresh("user-1", routing.LANDING)

    assert resolver.status == RoleStatus.UNSELECTED


# ===========================================================================
# Idempotence and concurrency
# ===========================================================================

def test_repeat_refresh_with_same_result_returns_no_redirect(db, fake_supabase, logger) -> None:
    fake_supabase.respond(
        "user_profiles",
        {"role": "employer", "role_selected": True},
        {"role": "employer", "role_selected": True},
    )
    resolver = _resolver(db, logger)
    events: list[RoleStatus] = []
    resolver.subscribe(lambda status, role: events.append(status))

    assert resolver.refresh("user-1", routing.LANDING) is not None
    assert resolver.refresh("user-1", routing.LANDING) is None
    assert events == [RoleStatus.RESOLVED]


def test_overlapping_refresh_issues_one_lookup(db, fake_supabase, logger) -> None:
    """A second refresh while the first is in flight is skipped."""
    repo = ProfileRepository(db=db, logger=logger)
    started = threading.Event()
    release = threading.Event()
    calls: list[str] = []

    def _slow_lookup(user_id):
        calls.append(user_id)
        started.set()
        release.wait(timeout=5)
        return None

    repo.fetch_role_selection = _slow_lookup
    resolver = RoleResolver(repo=repo, logger=logger)

    worker = threading.Thread(target=resolver.refresh, args=("user-1", routing.LANDING))
    worker.start()
    assert started.wait(timeout=5)

    assert resolver.refresh("user-1", routing.LANDING) is None
    release.set()
    worker.join(timeout=5)

    assert calls == ["user-1"]
    assert resolver.status == RoleStatus.UNSELECTED


def test_reset_discards_stale_lookup(db, logger) -> None:
    repo = ProfileRepository(db=db, logger=logger)
    resolver = RoleResolver(repo=repo, logger=logger)

    def _lookup_then_sign_out(user_id):
        resolver.reset()
        return None

    repo.fetch_role_selection = _lookup_then_sign_out

    assert resolver.refresh("user-1", routing.EMPLOYER_DASHBOARD) is None
    assert resolver.status == RoleStatus.CHECKING


# ===========================================================================
# Manual override and navigation
# ===========================================================================

def test_set_role_resolves_without_network(db, fake_supabase, logger) -> None:
    resolver = _resolver(db, logger)

    redirect = resolver.set_role(UserRole.EMPLOYER)

    assert resolver.status == RoleStatus.RESOLVED
    assert redirect is not None
    assert redirect.target == routing.EMPLOYER_DASHBOARD
    assert fake_supabase.executed == []


def test_set_role_overrides_previous_role(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", {"role": "employer", "role_selected": True})
    resolver = _resolver(db, logger)
    resolver.refresh("user-1", routing.ONBOARDING)

    resolver.set_role(UserRole.EMPLOYEE)

    assert resolver.role == UserRole.EMPLOYEE


def test_navigate_to_landing_after_resolution_redirects(db, logger) -> None:
    resolver = _resolver(db, logger)
    resolver.set_role(UserRole.EMPLOYEE)

    redirect = resolver.navigate(routing.LANDING)

    assert redirect is not None
    assert redirect.target == routing.EMPLOYEE_DASHBOARD
    assert resolver.navigate(routing.PROFILE) is None


def test_navigate_while_checking_never_redirects(db, logger) -> None:
    resolver = _resolver(db, logger)
    assert resolver.navigate(routing.EMPLOYER_DASHBOARD) is None
    assert resolver.navigate(routing.LANDING) is None


def test_reset_notifies_and_returns_to_checking(db, logger) -> None:
    resolver = _resolver(db, logger)
    resolver.set_role(UserRole.EMPLOYER)
    events: list[RoleStatus] = []
    resolver.subscribe(lambda status, role: events.append(status))

    resolver.reset()

    assert resolver.status == RoleStatus.CHECKING
    assert resolver.role is None
    assert events == [RoleStatus.CHECKING]


def test_unsubscribe_stops_notifications(db, logger) -> None:
    resolver = _resolver(db, logger)
    events: list[RoleStatus] = []
    unsubscribe = resolver.subscribe(lambda status, role: events.append(status))
    unsubscribe()

    resolver.set_role(UserRole.EMPLOYEE)

    assert events == []
