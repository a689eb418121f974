"""
Route Surface.

Route constants for the client and the ``RedirectAction`` value the role
resolver hands to the routing layer.  The resolver decides *where* to go;
``AppShell`` decides *how* to get there.
"""

from __future__ import annotations

from typing import Final, Optional

from pydantic import BaseModel

from uwezo.models.enums import UserRole

LOGIN: Final[str] = "/login"
LANDING: Final[str] = "/protected"
EMPLOYER_DASHBOARD: Final[str] = "/protected/employer"
EMPLOYER_CREATE_JOB: Final[str] = "/protected/employer/create"
EMPLOYEE_DASHBOARD: Final[str] = "/protected/employee"
PROFILE: Final[str] = "/protected/profile"
ONBOARDING: Final[str] = "/protected/onboarding"
QUIZ: Final[str] = "/protected/onboarding/quiz"
NDA: Final[str] = "/protected/onboarding/nda"
CONTRACT: Final[str] = "/protected/onboarding/contract"

# Subtrees that only make sense once a role has been chosen.
ROLE_GATED_PREFIXES: Final[tuple[str, ...]] = (
    EMPLOYER_DASHBOARD,
    EMPLOYEE_DASHBOARD,
    PROFILE,
)


def is_under(route: str, prefix: str) -> bool:
    """``True`` when *route* equals *prefix* or is nested beneath it."""
    return route == prefix or route.startswith(prefix.rstrip("/") + "/")


def is_role_gated(route: str) -> bool:
    return any(is_under(route, prefix) for prefix in ROLE_GATED_PREFIXES)


def dashboard_for(role: Optional[UserRole]) -> str:
    """Dashboard route for *role*; everything but employer lands on employee."""
    if role == UserRole.EMPLOYER:
        return EMPLOYER_DASHBOARD
    return EMPLOYEE_DASHBOARD


class RedirectAction(BaseModel):
    """Instruction to replace the current route with ``target``."""

    target: str
    reason: str = ""

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Public application links: /apply/{job_id}
# ---------------------------------------------------------------------------

APPLY: Final[str] = "/apply"


def apply_route(job_id: str) -> str:
    return f"{APPLY}/{job_id}"


def job_id_from_route(route: str) -> Optional[str]:
    """The ``job_id`` in ``/apply/{job_id}``, or ``None`` for other routes."""
    if not is_under(route, APPLY):
        return None
    job_id = route[len(APPLY):].strip("/")
    return job_id or None
