"""
Job Opening Repository.

Handles ``job_openings`` access via Supabase.  Job postings are owned by
the hosted store; the dashboards read them fresh on every load and
degrade to empty lists when Supabase is unreachable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models.jobs import JobOpening
from uwezo.repositories.base_repository import BaseRepository, is_not_found
from uwezo.utils.string_helpers import JsonValue

# Joins used by the various screens.
_WITH_APPLICATION_COUNT = "*, job_applications(count)"
_WITH_COMPANY = "*, companies(name, industry)"


class JobRepository(BaseRepository):
    """Data access layer for ``JobOpening`` entities."""

    TABLE = "job_openings"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_for_employer(
        self, employer_id: str, company_id: Optional[str] = None,
    ) -> list[JobOpening]:
        """Jobs posted by *employer_id*, newest first, with application counts.

        Raises on Supabase failure so the dashboard can tell "no jobs"
        from "could not load".
        """
        query = (
            self.supabase.table(self.TABLE)
            .select(_WITH_APPLICATION_COUNT)
            .eq("employer_id", employer_id)
        )
        if company_id:
            query = query.eq("company_id", company_id)
        response = query.order("created_at", desc=True).execute()
        return [self.parse_job(row) for row in (response.data or [])]

    def list_open(self, now: Optional[datetime] = None) -> list[JobOpening]:
        """Active jobs whose application deadline has not passed."""
        cutoff = (now or datetime.now(timezone.utc)).isoformat()
        response = (
            self.supabase.table(self.TABLE)
            .select(_WITH_COMPANY)
            .eq("is_active", True)
            .gte("application_deadline", cutoff)
            .order("created_at", desc=True)
            .execute()
        )
        return [self.parse_job(row) for row in (response.data or [])]

    def get_open(self, job_id: str) -> Optional[JobOpening]:
        """The active job *job_id*, or ``None`` if missing or closed."""
        def _supabase() -> Optional[JobOpening]:
            try:
                response = (
                    self.supabase.table(self.TABLE)
                    .select(_WITH_COMPANY)
                    .eq("id", job_id)
                    .eq("is_active", True)
                    .maybe_single()
                    .execute()
                )
            except Exception as exc:
                if is_not_found(exc):
                    return None
                raise
            if response is None or not response.data:
                return None
            return self.parse_job(response.data)

        return self._read_with_fallback(
            remote=_supabase,
            default=lambda: None,
            label="get_open (job_openings)",
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, payload: dict[str, JsonValue]) -> JobOpening:
        """Insert a job and return the stored row.  Raises on failure."""
        response = self.supabase.table(self.TABLE).insert(payload).execute()
        job = self.parse_job(response.data[0])
        self._logger.info("Job opening created: %s", job.id)
        return job

    def update(self, job_id: str, changes: dict[str, JsonValue]) -> Optional[JobOpening]:
        """Apply *changes* to *job_id*.

        Returns the updated row, or ``None`` when no row matched.  Raises
        on Supabase failure.
        """
        response = (
            self.supabase.table(self.TABLE)
            .update(changes)
            .eq("id", job_id)
            .execute()
        )
        rows = response.data or []
        if not rows:
            return None
        return self.parse_job(rows[0])

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def parse_job(row: dict[str, JsonValue]) -> JobOpening:
        """Flatten the ``job_applications(count)`` and ``companies`` joins."""
        data = {k: v for k, v in row.items() if k in JobOpening.model_fields}
        data["id"] = str(row["id"])
        if row.get("company_id") is not None:
            data["company_id"] = str(row["company_id"])
        if data.get("positions_available") is None:
            data.pop("positions_available", None)
        if data.get("is_active") is None:
            data.pop("is_active", None)

        counts = row.get("job_applications")
        if isinstance(counts, list) and counts and isinstance(counts[0], dict):
            data["application_count"] = int(counts[0].get("count") or 0)

        company = row.get("companies")
        if isinstance(company, dict):
            data["company_name"] = company.get("name")
            data["company_industry"] = company.get("industry")
        return JobOpening(**data)
