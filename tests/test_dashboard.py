"""Dashboard aggregation for employers and applicants."""

from __future__ import annotations

from uwezo.models.enums import ApplicationStatus
from uwezo.repositories.application_repository import ApplicationRepository
from uwezo.repositories.job_repository import JobRepository
from uwezo.services.dashboard import DashboardService


def _service(db, logger, config) -> DashboardService:
    return DashboardService(
        jobs=JobRepository(db=db, logger=logger),
        applications=ApplicationRepository(db=db, logger=logger),
        config=config,
        logger=logger,
    )


# ===========================================================================
# Employer
# ===========================================================================

def test_employer_stats_count_jobs_and_applications(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", [
        {"id": "j1", "title": "Analyst", "is_active": True, "job_applications": [{"count": 2}]},
        {"id": "j2", "title": "Driver", "is_active": False, "job_applications": [{"count": 1}]},
    ])
    fake_supabase.respond("job_applications", [
        {
            "id": "a1", "job_opening_id": "j1", "applicant_id": "u2", "status": "pending",
            "user_profiles": {"first_name": "Baraka", "last_name": "Mwangi", "email": "b@x.io"},
            "job_openings": {"title": "Analyst"},
        },
        {"id": "a2", "job_opening_id": "j1", "applicant_id": "u3", "status": "approved"},
        {"id": "a3", "job_opening_id": "j2", "applicant_id": "u4", "status": "pending"},
    ])
    service = _service(db, logger, app_config)

    dashboard = service.employer_dashboard("user-1")

    assert dashboard.stats.total_jobs == 2
    assert dashboard.stats.active_jobs == 1
    assert dashboard.stats.total_applications == 3
    assert dashboard.stats.pending_applications == 2
    assert dashboard.jobs[0].application_count == 2
    assert dashboard.applications[0].applicant_name == "Baraka Mwangi"
    assert dashboard.applications[0].job_title == "Analyst"
    args, _ = fake_supabase.queries("job_applications")[0].op("in_")
    assert args == ("job_opening_id", ["j1", "j2"])


def test_employer_with_no_jobs_skips_application_query(db, fake_supabase, logger, app_config) -> None:
    dashboard = _service(db, logger, app_config).employer_dashboard("user-1")

    assert dashboard.stats.total_jobs == 0
    assert fake_supabase.queries("job_applications") == []


def test_company_filter_is_applied(db, fake_supabase, logger, app_config) -> None:
    _service(db, logger, app_config).employer_dashboard("user-1", company_id="c-1")

    eqs = [args for name, args, _ in fake_supabase.queries("job_openings")[0].ops if name == "eq"]
    assert ("company_id", "c-1") in eqs


def test_employer_dashboard_degrades_to_empty(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_openings", ConnectionError("offline"))

    dashboard = _service(db, logger, app_config).employer_dashboard("user-1")

    assert dashboard.jobs == []
    assert dashboard.stats.total_jobs == 0


def test_application_link(db, logger, app_config) -> None:
    service = _service(db, logger, app_config)
    assert service.application_link("j1") == "https://uwezo.example.com/apply/j1"


# ===========================================================================
# Employee
# ===========================================================================

def test_employee_stats_by_status(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_applications", [
        {
            "id": "a1", "job_opening_id": "j1", "applicant_id": "user-1", "status": "pending",
            "job_openings": {
                "id": "j1", "title": "Analyst", "companies": {"name": "Acme", "industry": "Tech"},
            },
        },
        {"id": "a2", "job_opening_id": "j2", "applicant_id": "user-1", "status": "reviewing"},
        {"id": "a3", "job_opening_id": "j3", "applicant_id": "user-1", "status": "rejected"},
    ])
    fake_supabase.respond("job_openings", [
        {"id": "j4", "title": "Cook"}, {"id": "j5", "title": "Teller"},
    ])

    dashboard = _service(db, logger, app_config).employee_dashboard("user-1")

    stats = dashboard.stats
    assert (stats.total_applications, stats.pending, stats.reviewing) == (3, 1, 1)
    assert (stats.approved, stats.rejected, stats.available_jobs) == (0, 1, 2)
    assert dashboard.applications[0].status == ApplicationStatus.PENDING
    assert dashboard.applications[0].company_name == "Acme"


def test_open_jobs_query_filters_active_and_deadline(db, fake_supabase, logger, app_config) -> None:
    _service(db, logger, app_config).employee_dashboard("user-1")

    query = fake_supabase.queries("job_openings")[0]
    assert query.op("eq")[0] == ("is_active", True)
    assert query.op("gte")[0][0] == "application_deadline"


def test_employee_dashboard_degrades_to_empty(db, fake_supabase, logger, app_config) -> None:
    fake_supabase.respond("job_applications", RuntimeError("boom"))

    dashboard = _service(db, logger, app_config).employee_dashboard("user-1")

    assert dashboard.applications == []
    assert dashboard.stats.total_applications == 0
