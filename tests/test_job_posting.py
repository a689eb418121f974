"""
Job posting: form validation, the two-step create with application
link, and edits.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from uwezo.models.jobs import JobOpeningForm
from uwezo.repositories.company_repository import CompanyRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.services.job_posting import JobPostingService


def _service(db, logger, config) -> JobPostingService:
    return JobPostingService(
        jobs=JobRepository(db=db, logger=logger),
        companies=CompanyRepository(db=db, logger=logger),
        config=config,
        logger=logger,
    )


def _form(**overrides) -> JobOpeningForm:
    fields = {
        "title": "Junior Data Analyst",
        "description": "Clean and analyse sales data.",
        "location": "Nairobi",
        "company_id": "company-1",
    }
    fields.update(overrides)
    return JobOpeningForm(**fields)


def _job_row(job_id: str = "job-42", **overrides) -> dict:
    row = {
        "id": job_id,
        "title": "Junior Data Analyst",
        "description": "Clean and analyse sales data.",
        "company_id": "company-1",
        "employer_id": "user-1",
        "is_active": True,
        "application_link": "https://uwezo.example.com/apply/",
    }
    row.update(overrides)
    return row


# ===========================================================================
# Form validation
# ===========================================================================

def test_blank_title_is_rejected() -> None:
    with pytest.raises(ValidationError):
        _form(title="   ")


def test_positions_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        _form(positions_available=0)


def test_blank_company_becomes_none() -> None:
    assert _form(company_id="  ").company_id is None


# ===========================================================================
# Create
# ===========================================================================

def test_create_with_link_writes_twice(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond(
        "job_openings",
        [_job_row()],
        [_job_row(application_link="https://uwezo.example.com/apply/job-42")],
    )
    service = _service(db, logger, app_config)

    result = service.create_job("user-1", _form(), generate_link=True)

    assert result.success
    assert result.status_code == 201
    inserts = fake_supabase.queries("job_openings", "insert")
    updates = fake_supabase.queries("job_openings", "update")
    assert len(inserts) == 1
    assert len(updates) == 1
    assert inserts[0].op("insert")[0][0]["application_link"] == "https://uwezo.example.com/apply/"
    assert updates[0].op("update")[0][0] == {
        "application_link": "https://uwezo.example.com/apply/job-42",
    }
    assert result.data.application_link.endswith("/apply/job-42")


def test_create_without_link_writes_once(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", [_job_row(application_link=None)])
    service = _service(db, logger, app_config)

    result = service.create_job("user-1", _form(), generate_link=False)

    assert result.success
    assert len(fake_supabase.queries("job_openings")) == 1
    payload = fake_supabase.queries("job_openings", "insert")[0].op("insert")[0][0]
    assert payload["application_link"] is None
    assert payload["employer_id"] == "user-1"
    assert payload["is_active"] is True


def test_missing_company_writes_nothing(db, fake_supabase, logger, app_config) -> None:
    service = _service(db, logger, app_config)

    result = service.create_job("user-1", _form(company_id=None))

    assert not result.success
    assert result.status_code == 400
    assert result.error == "Please select a company"
    assert fake_supabase.executed == []


def test_failed_link_update_keeps_the_job(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", [_job_row()], RuntimeError("timeout"))
    service = _service(db, logger, app_config)

    result = service.create_job("user-1", _form())

    assert result.success
    assert result.data.id == "job-42"


def test_failed_insert_reports_503(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", ConnectionError("offline"))
    service = _service(db, logger, app_config)

    result = service.create_job("user-1", _form())

    assert not result.success
    assert result.status_code == 503


def test_create_is_audited(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", [_job_row()], [_job_row()])
    _service(db, logger, app_config).create_job("user-1", _form())

    row = db.sqlite.execute("SELECT action, entity_id FROM audit_log").fetchone()
    assert tuple(row) == ("JOB_CREATED", "job-42")


# ===========================================================================
# Companies and edits
# ===========================================================================

def test_single_company_is_preselected(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("companies", [{"id": 7, "name": "Acme", "owner_id": "user-1"}])
    service = _service(db, logger, app_config)

    companies = service.list_companies("user-1")

    assert [c.id for c in companies] == ["7"]
    assert service.auto_selected_company(companies) == "7"


def test_several_companies_are_not_preselected(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("companies", [
        {"id": 1, "name": "Acme"}, {"id": 2, "name": "Beta"},
    ])
    service = _service(db, logger, app_config)

    assert service.auto_selected_company(service.list_companies("user-1")) is None


def test_update_rejects_unknown_fields(db, fake_supabase, logger, app_config) -> None:
    result = _service(db, logger, app_config).update_job("job-42", {"employer_id": "x"})

    assert result.status_code == 400
    assert fake_supabase.executed == []


def test_update_missing_job_is_404(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", [])

    result = _service(db, logger, app_config).update_job("job-42", {"is_active": False})

    assert result.status_code == 404
