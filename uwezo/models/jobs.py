"""
Job Posting & Application Models.

Plain records owned by Supabase (``companies``, ``job_openings``,
``job_applications``) plus the aggregates the dashboards render.  The only
derived values are counts; everything else is read and written wholesale.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from uwezo.models.enums import ApplicationStatus, EmploymentType

__all__ = [
    "Company",
    "EmployeeDashboard",
    "EmployeeStats",
    "EmployerDashboard",
    "EmployerStats",
    "JobApplication",
    "JobApplicationForm",
    "JobOpening",
    "JobOpeningForm",
]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class Company(BaseModel):
    """A company owned by an employer account."""

    id: str
    name: str
    industry: Optional[str] = None
    size_range: Optional[str] = None
    owner_id: Optional[str] = None

    model_config = {"from_attributes": True}


class JobOpening(BaseModel):
    """A job posting.

    ``application_count`` is filled from the ``job_applications(count)``
    aggregate on the employer dashboard; ``company_name`` and
    ``company_industry`` from the ``companies`` join elsewhere.
    """

    id: str
    title: str
    description: str = ""
    requirements: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    salary_range: Optional[str] = None
    positions_available: int = 1
    application_deadline: Optional[str] = None
    is_active: bool = True
    application_link: Optional[str] = None
    employer_id: Optional[str] = None
    company_id: Optional[str] = None
    created_at: Optional[str] = None
    application_count: int = 0
    company_name: Optional[str] = None
    company_industry: Optional[str] = None

    model_config = {"from_attributes": True}


class JobApplication(BaseModel):
    """An application to a job opening, with joined display fields."""

    id: str
    job_opening_id: str
    applicant_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    cv_url: Optional[str] = None
    cover_letter: Optional[str] = None
    aptitude_score: Optional[int] = None
    applied_at: Optional[str] = None
    applicant_first_name: Optional[str] = None
    applicant_last_name: Optional[str] = None
    applicant_email: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None

    model_config = {"from_attributes": True}

    @property
    def applicant_name(self) -> str:
        parts = [p for p in (self.applicant_first_name, self.applicant_last_name) if p]
        return " ".join(parts) or (self.applicant_email or "Unknown applicant")


# ---------------------------------------------------------------------------
# Form inputs
# ---------------------------------------------------------------------------

class JobOpeningForm(BaseModel):
    """Fields collected by the create-job form.

    ``company_id`` is optional here so that a missing selection reaches
    the service and is reported inline rather than as a validation error.
    """

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requirements: str = ""
    location: str = ""
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    salary_range: str = ""
    positions_available: int = Field(default=1, ge=1)
    application_deadline: Optional[date] = None
    company_id: Optional[str] = None

    @field_validator(
        "title", "description", "requirements", "location", "salary_range",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("company_id")
    @classmethod
    def _blank_company_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class JobApplicationForm(BaseModel):
    """Fields submitted from the apply screen."""

    cv_url: Optional[str] = None
    cover_letter: str = ""
    aptitude_score: Optional[int] = Field(default=None, ge=0, le=100)


# ---------------------------------------------------------------------------
# Dashboard aggregates
# ---------------------------------------------------------------------------

class EmployerStats(BaseModel):
    total_jobs: int = 0
    active_jobs: int = 0
    total_applications: int = 0
    pending_applications: int = 0


class EmployerDashboard(BaseModel):
    """Everything the employer dashboard renders."""

    jobs: list[JobOpening] = Field(default_factory=list)
    applications: list[JobApplication] = Field(default_factory=list)
    stats: EmployerStats = Field(default_factory=EmployerStats)
    company_id: Optional[str] = None


class EmployeeStats(BaseModel):
    total_applications: int = 0
    pending: int = 0
    reviewing: int = 0
    approved: int = 0
    rejected: int = 0
    available_jobs: int = 0


class EmployeeDashboard(BaseModel):
    """Everything the employee dashboard renders."""

    applications: list[JobApplication] = Field(default_factory=list)
    available_jobs: list[JobOpening] = Field(default_factory=list)
    stats: EmployeeStats = Field(default_factory=EmployeeStats)
