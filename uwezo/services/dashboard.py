"""
Dashboard Aggregation Service.

Read-only aggregations for the two role dashboards.  Every figure is a
plain count over what Supabase returned; a failed read degrades to an
empty dashboard rather than an error screen.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from uwezo.config import AppConfig
from uwezo.logger import StructuredLogger
from uwezo.models.enums import ApplicationStatus
from uwezo.models.jobs import (
    EmployeeDashboard,
    EmployeeStats,
    EmployerDashboard,
    EmployerStats,
    JobApplication,
    JobOpening,
)
from uwezo.repositories.application_repository import ApplicationRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.services.base_service import BaseService
from uwezo.utils.string_helpers import join_url


def employer_stats(
    jobs: list[JobOpening], applications: list[JobApplication],
) -> EmployerStats:
    return EmployerStats(
        total_jobs=len(jobs),
        active_jobs=sum(1 for job in jobs if job.is_active),
        total_applications=len(applications),
        pending_applications=sum(
            1 for app in applications if app.status == ApplicationStatus.PENDING
        ),
    )


def employee_stats(
    applications: list[JobApplication], available_jobs: list[JobOpening],
) -> EmployeeStats:
    def _count(status: ApplicationStatus) -> int:
        return sum(1 for app in applications if app.status == status)

    return EmployeeStats(
        total_applications=len(applications),
        pending=_count(ApplicationStatus.PENDING),
        reviewing=_count(ApplicationStatus.REVIEWING),
        approved=_count(ApplicationStatus.APPROVED),
        rejected=_count(ApplicationStatus.REJECTED),
        available_jobs=len(available_jobs),
    )


class DashboardService(BaseService):
    """Builds ``EmployerDashboard`` and ``EmployeeDashboard`` snapshots.

    Parameters
    ----------
    jobs:
        Job opening repository.
    applications:
        Job application repository.
    config:
        Application settings (``SITE_URL`` for application links).
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        jobs: JobRepository,
        applications: ApplicationRepository,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._jobs = jobs
        self._applications = applications
        self._config = config

    def application_link(self, job_id: str) -> str:
        """Public URL candidates use to apply for *job_id*."""
        return join_url(self._config.SITE_URL, "apply", job_id)

    def employer_dashboard(
        self, employer_id: str, company_id: Optional[str] = None,
    ) -> EmployerDashboard:
        """Jobs posted by *employer_id* and the applications they received."""
        try:
            jobs = self._jobs.list_for_employer(employer_id, company_id=company_id)
            applications = self._applications.list_for_jobs([job.id for job in jobs])
        except Exception as exc:
            self._logger.error(
                "Error loading employer dashboard for %s: %s", employer_id, exc,
                extra={"event": "DASHBOARD_LOAD_FAILED", "user_id": employer_id},
            )
            return EmployerDashboard(company_id=company_id)

        return EmployerDashboard(
            jobs=jobs,
            applications=applications,
            stats=employer_stats(jobs, applications),
            company_id=company_id,
        )

    def employee_dashboard(
        self, applicant_id: str, now: Optional[datetime] = None,
    ) -> EmployeeDashboard:
        """The applicant's own applications and the jobs still open."""
        try:
            pairs = self._applications.list_for_applicant(applicant_id)
            available = self._jobs.list_open(now=now)
        except Exception as exc:
            self._logger.error(
                "Error loading employee dashboard for %s: %s", applicant_id, exc,
                extra={"event": "DASHBOARD_LOAD_FAILED", "user_id": applicant_id},
            )
            return EmployeeDashboard()

        applications = [application for application, _job in pairs]
        return EmployeeDashboard(
            applications=applications,
            available_jobs=available,
            stats=employee_stats(applications, available),
        )
