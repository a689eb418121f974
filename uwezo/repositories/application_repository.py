"""
Job Application Repository.

Handles ``job_applications`` access via Supabase, including the joins the
two dashboards render (applicant name and job title for employers; job and
company for applicants).
"""

from __future__ import annotations

from typing import Optional

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models.jobs import JobApplication, JobOpening
from uwezo.repositories.base_repository import BaseRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.utils.string_helpers import JsonValue

_EMPLOYER_SELECT = (
    "*, "
    "user_profiles!job_applications_applicant_id_fkey(first_name, last_name, email), "
    "job_openings!job_applications_job_opening_id_fkey(title)"
)
_APPLICANT_SELECT = (
    "*, "
    "job_openings(id, title, description, location, employment_type, "
    "salary_range, companies(name, industry))"
)

# Postgres unique_violation, raised for a second application to the same job.
UNIQUE_VIOLATION_CODE: str = "23505"


class ApplicationRepository(BaseRepository):
    """Data access layer for ``JobApplication`` entities."""

    TABLE = "job_applications"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def list_for_jobs(self, job_ids: list[str]) -> list[JobApplication]:
        """Applications to any of *job_ids*, most recent first."""
        if not job_ids:
            return []
        response = (
            self.supabase.table(self.TABLE)
            .select(_EMPLOYER_SELECT)
            .in_("job_opening_id", job_ids)
            .order("applied_at", desc=True)
            .execute()
        )
        return [self._parse_for_employer(row) for row in (response.data or [])]

    def list_for_applicant(
        self, applicant_id: str,
    ) -> list[tuple[JobApplication, Optional[JobOpening]]]:
        """The applicant's own applications paired with the joined job."""
        response = (
            self.supabase.table(self.TABLE)
            .select(_APPLICANT_SELECT)
            .eq("applicant_id", applicant_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [self._parse_for_applicant(row) for row in (response.data or [])]

    def create(self, payload: dict[str, JsonValue]) -> JobApplication:
        """Insert an application.  Raises on failure, including duplicates."""
        response = self.supabase.table(self.TABLE).insert(payload).execute()
        application = self._parse_base(response.data[0])
        self._logger.info(
            "Application submitted: job=%s applicant=%s",
            payload.get("job_opening_id"), payload.get("applicant_id"),
        )
        return application

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_base(row: dict[str, JsonValue]) -> JobApplication:
        data = {k: v for k, v in row.items() if k in JobApplication.model_fields}
        data["id"] = str(row["id"])
        data["job_opening_id"] = str(row["job_opening_id"])
        if data.get("status") is None:
            data.pop("status", None)
        return JobApplication(**data)

    def _parse_for_employer(self, row: dict[str, JsonValue]) -> JobApplication:
        application = self._parse_base(row)
        updates: dict[str, Optional[str]] = {}
        applicant = row.get("user_profiles")
        if isinstance(applicant, dict):
            updates["applicant_first_name"] = applicant.get("first_name")
            updates["applicant_last_name"] = applicant.get("last_name")
            updates["applicant_email"] = applicant.get("email")
        job = row.get("job_openings")
        if isinstance(job, dict):
            updates["job_title"] = job.get("title")
        return application.model_copy(update=updates)

    def _parse_for_applicant(
        self, row: dict[str, JsonValue],
    ) -> tuple[JobApplication, Optional[JobOpening]]:
        application = self._parse_base(row)
        job_row = row.get("job_openings")
        if not isinstance(job_row, dict) or job_row.get("id") is None:
            return application, None
        job = JobRepository.parse_job(job_row)
        application = application.model_copy(
            update={"job_title": job.title, "company_name": job.company_name},
        )
        return application, job
