"""
Job Application Service.

The apply flow: load an open posting, make sure the applicant carries the
``employee`` role, then submit the application as ``pending``.
"""

from __future__ import annotations

from postgrest.exceptions import APIError

from uwezo.logger import StructuredLogger
from uwezo.models.enums import ApplicationStatus, UserRole
from uwezo.models.jobs import JobApplication, JobApplicationForm, JobOpening
from uwezo.models.service_models import ServiceResult
from uwezo.repositories.application_repository import (
    UNIQUE_VIOLATION_CODE,
    ApplicationRepository,
)
from uwezo.repositories.job_repository import JobRepository
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.base_service import INVALID_INPUT, NOT_FOUND, BaseService
from uwezo.services.role_resolver import RoleResolver
from uwezo.utils.audit import log_audit_event
from uwezo.utils.string_helpers import JsonValue, blank_to_none


class ApplicationService(BaseService):
    """Apply-for-a-job workflow.

    Parameters
    ----------
    jobs:
        Job opening repository.
    applications:
        Job application repository.
    profiles:
        Profile repository, for the automatic ``employee`` role.
    resolver:
        Role resolver kept in step with the automatic role.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        jobs: JobRepository,
        applications: ApplicationRepository,
        profiles: ProfileRepository,
        resolver: RoleResolver,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._jobs = jobs
        self._applications = applications
        self._profiles = profiles
        self._resolver = resolver

    def load_open_job(self, job_id: str) -> ServiceResult[JobOpening]:
        job = self._jobs.get_open(job_id)
        if job is None:
            return self._failure("This job opening may have expired or been removed.", NOT_FOUND)
        return ServiceResult(success=True, data=job)

    def ensure_employee_role(self, user_id: str) -> bool:
        """Give *user_id* the ``employee`` role unless they already have it.

        Returns ``True`` when the user ends up with ``employee`` selected.
        Lookup or write failures are logged and reported as ``False``;
        they never block the application itself.
        """
        try:
            profile = self._profiles.fetch_role_selection(user_id)
        except Exception as exc:
            self._logger.error("Error checking user role for %s: %s", user_id, exc)
            return False

        if profile is not None and profile.role_selected and profile.role == UserRole.EMPLOYEE:
            return True

        try:
            self._profiles.save_role_selection(user_id, UserRole.EMPLOYEE)
        except Exception as exc:
            self._logger.error("Error setting employee role for %s: %s", user_id, exc)
            return False

        self._resolver.set_role(UserRole.EMPLOYEE)
        log_audit_event(
            self._logger,
            action="ROLE_SELECTED",
            entity_type="UserProfile",
            entity_id=user_id,
            user_id=user_id,
            details={"role": str(UserRole.EMPLOYEE), "automatic": True},
        )
        return True

    def submit_application(
        self,
        job_id: str,
        applicant_id: str,
        form: JobApplicationForm,
    ) -> ServiceResult[JobApplication]:
        """Insert a ``pending`` application for *job_id*.

        A second application to the same job is rejected by the database
        and reported as ``status_code=400``.
        """
        payload: dict[str, JsonValue] = {
            "job_opening_id": job_id,
            "applicant_id": applicant_id,
            "cv_url": blank_to_none(form.cv_url),
            "cover_letter": blank_to_none(form.cover_letter),
            "aptitude_score": form.aptitude_score,
            "status": str(ApplicationStatus.PENDING),
        }
        try:
            application = self._applications.create(payload)
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION_CODE:
                return self._failure("You have already applied for this job.", INVALID_INPUT)
            return self._submit_failed(job_id, exc)
        except Exception as exc:
            return self._submit_failed(job_id, exc)

        log_audit_event(
            self._logger,
            action="APPLICATION_SUBMITTED",
            entity_type="JobApplication",
            entity_id=application.id,
            user_id=applicant_id,
            details={"job_opening_id": job_id},
            conn=self._applications.sqlite,
        )
        return ServiceResult(success=True, data=application, status_code=201)

    def _submit_failed(
        self, job_id: str, exc: Exception,
    ) -> ServiceResult[JobApplication]:
        self._logger.error("Error submitting application for job %s: %s", job_id, exc)
        return self._failure("Failed to submit application. Please try again.")
