"""
Shared Enumerations for Uwezo Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents, so rows read
straight from Supabase (``role == "employer"``) compare naturally.
"""

from __future__ import annotations
from enum import StrEnum


class UserRole(StrEnum):
    """Roles a user may select after signing in.

    The role gates which dashboard the user sees.  ``INDEPENDENT`` users
    share the employee dashboard.
    """

    EMPLOYER = "employer"
    EMPLOYEE = "employee"
    INDEPENDENT = "independent"


class RoleStatus(StrEnum):
    """Resolution status of the signed-in user's role."""

    CHECKING = "checking"
    UNSELECTED = "unselected"
    RESOLVED = "resolved"


class TaskType(StrEnum):
    """Kinds of onboarding checklist items."""

    NDA = "nda"
    CONTRACT = "contract"
    CV_ANALYSIS = "cv_analysis"
    FORM = "form"
    QUIZ = "quiz"
    VIDEO_INTRO = "video_intro"
    CHAT = "chat"


class ApplicationStatus(StrEnum):
    """Review states of a job application."""

    PENDING = "pending"
    REVIEWING = "reviewing"
    APPROVED = "approved"
    REJECTED = "rejected"


class EmploymentType(StrEnum):
    """Employment types offered on a job opening."""

    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class AuthEvent(StrEnum):
    """Auth state change notifications emitted by Supabase."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
