"""
Data Models Package.

Re-exports the Pydantic models and enumerations most callers need:
    from uwezo.models import UserProfile, TaskWithProgress, JobOpening
    from uwezo.models import UserRole, RoleStatus, ApplicationStatus
"""

from uwezo.models.enums import (
    ApplicationStatus,
    AuthEvent,
    EmploymentType,
    RoleStatus,
    TaskType,
    UserRole,
)
from uwezo.models.jobs import (
    Company,
    EmployeeDashboard,
    EmployerDashboard,
    JobApplication,
    JobOpening,
    JobOpeningForm,
)
from uwezo.models.onboarding import OnboardingTask, TaskWithProgress, UserTaskState
from uwezo.models.routing import RedirectAction
from uwezo.models.service_models import ServiceResult
from uwezo.models.user_profile import UserProfile

__all__ = [
    "ApplicationStatus",
    "AuthEvent",
    "Company",
    "EmployeeDashboard",
    "EmployerDashboard",
    "EmploymentType",
    "JobApplication",
    "JobOpening",
    "JobOpeningForm",
    "OnboardingTask",
    "RedirectAction",
    "RoleStatus",
    "ServiceResult",
    "TaskType",
    "TaskWithProgress",
    "UserProfile",
    "UserRole",
    "UserTaskState",
]
