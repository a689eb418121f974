"""
Job Posting Service.

Backs the create-job form.  A posting is written in two steps when an
application link is requested: the insert carries the placeholder
``{SITE_URL}/apply/`` (the id is not known yet), then an update sets the
final ``{SITE_URL}/apply/{id}``.
"""

from __future__ import annotations

from typing import Optional

from uwezo.config import AppConfig
from uwezo.logger import StructuredLogger
from uwezo.models.jobs import Company, JobOpening, JobOpeningForm
from uwezo.models.service_models import ServiceResult
from uwezo.repositories.company_repository import CompanyRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.services.base_service import INVALID_INPUT, NOT_FOUND, BaseService
from uwezo.utils.audit import log_audit_event
from uwezo.utils.string_helpers import JsonValue, blank_to_none, join_url

# Columns an employer may change after posting.
EDITABLE_FIELDS: frozenset[str] = frozenset({
    "title",
    "description",
    "requirements",
    "location",
    "employment_type",
    "salary_range",
    "positions_available",
    "application_deadline",
    "is_active",
    "application_link",
    "company_id",
})


class JobPostingService(BaseService):
    """Creates and edits job openings.

    Parameters
    ----------
    jobs:
        Job opening repository.
    companies:
        Company repository (company picker).
    config:
        Application settings (``SITE_URL``).
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        jobs: JobRepository,
        companies: CompanyRepository,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._jobs = jobs
        self._companies = companies
        self._config = config

    # ------------------------------------------------------------------
    # Company picker
    # ------------------------------------------------------------------

    def list_companies(self, owner_id: str) -> list[Company]:
        return self._companies.list_by_owner(owner_id)

    @staticmethod
    def auto_selected_company(companies: list[Company]) -> Optional[str]:
        """The company to preselect: the only one, if there is exactly one."""
        return companies[0].id if len(companies) == 1 else None

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    def create_job(
        self,
        employer_id: str,
        form: JobOpeningForm,
        generate_link: bool = True,
    ) -> ServiceResult[JobOpening]:
        """Insert a job opening for *employer_id*.

        Returns ``status_code=400`` without writing when no company is
        selected.  When *generate_link* is set, a second write stores the
        id-bearing application link; if only that second write fails the
        job still counts as created and keeps the placeholder link.
        """
        if form.company_id is None:
            return self._failure("Please select a company", INVALID_INPUT)

        payload: dict[str, JsonValue] = {
            "title": form.title,
            "description": form.description,
            "requirements": blank_to_none(form.requirements),
            "location": blank_to_none(form.location),
            "employment_type": str(form.employment_type),
            "salary_range": blank_to_none(form.salary_range),
            "positions_available": form.positions_available,
            "application_deadline": (
                form.application_deadline.isoformat()
                if form.application_deadline is not None else None
            ),
            "company_id": form.company_id,
            "employer_id": employer_id,
            "is_active": True,
            "application_link": (
                join_url(self._config.SITE_URL, "apply", "") if generate_link else None
            ),
        }

        try:
            job = self._jobs.create(payload)
        except Exception as exc:
            self._logger.error(
                "Error creating job for %s: %s", employer_id, exc,
                extra={"event": "JOB_CREATE_FAILED", "user_id": employer_id},
            )
            return self._failure("Failed to create job posting. Please try again.")

        if generate_link:
            link = join_url(self._config.SITE_URL, "apply", job.id)
            try:
                updated = self._jobs.update(job.id, {"application_link": link})
                job = updated if updated is not None else job.model_copy(
                    update={"application_link": link},
                )
            except Exception as exc:
                self._logger.warning(
                    "Job %s created but its application link was not saved: %s",
                    job.id, exc,
                )

        log_audit_event(
            self._logger,
            action="JOB_CREATED",
            entity_type="JobOpening",
            entity_id=job.id,
            user_id=employer_id,
            details={"title": job.title, "company_id": job.company_id},
            conn=self._jobs.sqlite,
        )
        return ServiceResult(success=True, data=job, status_code=201)

    def update_job(
        self,
        job_id: str,
        changes: dict[str, JsonValue],
        user_id: Optional[str] = None,
    ) -> ServiceResult[JobOpening]:
        """Apply *changes* to an existing posting in a single request."""
        unknown = sorted(set(changes) - EDITABLE_FIELDS)
        if unknown:
            return self._failure(f"Fields cannot be edited: {', '.join(unknown)}", INVALID_INPUT)
        if not changes:
            return self._failure("Nothing to update", INVALID_INPUT)

        try:
            job = self._jobs.update(job_id, changes)
        except Exception as exc:
            self._logger.error("Error updating job %s: %s", job_id, exc)
            return self._failure("Failed to update job posting. Please try again.")
        if job is None:
            return self._failure("Job not found", NOT_FOUND)

        log_audit_event(
            self._logger,
            action="JOB_UPDATED",
            entity_type="JobOpening",
            entity_id=job_id,
            user_id=user_id or job.employer_id or "unknown",
            details={"fields": ", ".join(sorted(changes))},
        )
        return ServiceResult(success=True, data=job)
