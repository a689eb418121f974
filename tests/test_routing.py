"""Route helpers, the route registry, and entry-point deep links."""

from __future__ import annotations

import pytest

from uwezo.models import routing
from uwezo.models.enums import TaskType, UserRole

# ===========================================================================
# Route helpers
# ===========================================================================


@pytest.mark.parametrize(
    "route, prefix, expected",
    [
        ("/protected/employer", "/protected/employer", True),
        ("/protected/employer/create", "/protected/employer", True),
        ("/protected/employerx", "/protected/employer", False),
        ("/protected", "/protected/employer", False),
    ],
)
def test_is_under(route: str, prefix: str, expected: bool) -> None:
    assert routing.is_under(route, prefix) is expected


def test_role_gated_subtrees() -> None:
    assert routing.is_role_gated(routing.EMPLOYER_CREATE_JOB)
    assert routing.is_role_gated(routing.PROFILE)
    assert not routing.is_role_gated(routing.LANDING)
    assert not routing.is_role_gated(routing.ONBOARDING)


def test_dashboard_for_role() -> None:
    assert routing.dashboard_for(UserRole.EMPLOYER) == routing.EMPLOYER_DASHBOARD
    assert routing.dashboard_for(UserRole.EMPLOYEE) == routing.EMPLOYEE_DASHBOARD
    assert routing.dashboard_for(UserRole.INDEPENDENT) == routing.EMPLOYEE_DASHBOARD


def test_apply_route_round_trip() -> None:
    assert routing.job_id_from_route(routing.apply_route("job-7")) == "job-7"
    assert routing.job_id_from_route("/apply/") is None
    assert routing.job_id_from_route(routing.PROFILE) is None


# ===========================================================================
# Route registry (needs customtkinter importable)
# ===========================================================================

def _registry(logger):
    pytest.importorskip("customtkinter")
    from uwezo.ui.route_registry import RouteRegistry

    registry = RouteRegistry(logger=logger)
    view = lambda parent, route, navigate: None  # noqa: E731
    registry.register(routing.EMPLOYER_DASHBOARD, "Dashboard", "D", view, frozenset({"employer"}))
    registry.register(routing.EMPLOYER_CREATE_JOB, "Post a Job", "P", view, frozenset({"employer"}))
    registry.register(routing.PROFILE, "Profile", "U", view)
    registry.register(routing.APPLY, "Apply", "A", view, in_sidebar=False)
    return registry


def test_match_prefers_longest_prefix(logger) -> None:
    registry = _registry(logger)

    assert registry.match(routing.EMPLOYER_CREATE_JOB).display_name == "Post a Job"
    assert registry.match(routing.EMPLOYER_DASHBOARD + "/jobs").display_name == "Dashboard"
    assert registry.match(routing.apply_route("j1")).display_name == "Apply"
    assert registry.match(routing.LANDING) is None


def test_sidebar_is_filtered_by_role(logger) -> None:
    registry = _registry(logger)

    employer = [e.display_name for e in registry.sidebar_entries("employer")]
    employee = [e.display_name for e in registry.sidebar_entries("employee")]

    assert employer == ["Dashboard", "Post a Job", "Profile"]
    assert employee == ["Profile"]
    assert registry.sidebar_entries(None) == []


# ===========================================================================
# Deep links on the command line
# ===========================================================================

def test_initial_route_from_argv() -> None:
    pytest.importorskip("customtkinter")
    from main import _initial_route

    assert _initial_route(["main.py"]) is None
    assert _initial_route(["main.py", "/apply/job-1"]) == "/apply/job-1"
    assert _initial_route(["main.py", "https://uwezo.example.com/apply/job-1"]) == "/apply/job-1"
    assert _initial_route(["main.py", "--verbose"]) is None


# ===========================================================================
# Onboarding task screens
# ===========================================================================

def test_agreement_routes_sit_under_onboarding() -> None:
    for route in (routing.NDA, routing.CONTRACT, routing.QUIZ):
        assert routing.is_under(route, routing.ONBOARDING)
        assert not routing.is_role_gated(route)


def test_checklist_opens_task_screens() -> None:
    pytest.importorskip("customtkinter")
    from uwezo.ui.views.onboarding_view import _TASK_ROUTES

    targets = {task_type: route for task_type, (_label, route) in _TASK_ROUTES.items()}

    assert targets == {
        TaskType.NDA: routing.NDA,
        TaskType.CONTRACT: routing.CONTRACT,
        TaskType.FORM: routing.PROFILE,
        TaskType.QUIZ: routing.QUIZ,
    }
