"""Role selection: validation, persistence, company creation, resolver hand-off."""

from __future__ import annotations

from uwezo.models import routing
from uwezo.models.enums import RoleStatus, UserRole
from uwezo.models.user_profile import RoleSelection
from uwezo.repositories.company_repository import CompanyRepository
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.role_resolver import RoleResolver
from uwezo.services.role_selection import RoleSelectionService


def _wire(db, logger) -> tuple[RoleSelectionService, RoleResolver]:
    profiles = ProfileRepository(db=db, logger=logger)
    resolver = RoleResolver(repo=profiles, logger=logger)
    service = RoleSelectionService(
        profiles=profiles,
        companies=CompanyRepository(db=db, logger=logger),
        resolver=resolver,
        logger=logger,
    )
    return service, resolver


def test_no_role_is_rejected(db, fake_supabase, logger) -> None:
    service, _ = _wire(db, logger)

    result = service.select_role("user-1", RoleSelection())

    assert result.status_code == 400
    assert result.error == "Please select a role"
    assert fake_supabase.executed == []


def test_employer_needs_company_details(db, fake_supabase, logger) -> None:
    service, _ = _wire(db, logger)

    result = service.select_role(
        "user-1", RoleSelection(role=UserRole.EMPLOYER, company_name="Acme"),
    )

    assert result.error == "Please fill in all company details"
    assert fake_supabase.executed == []


def test_employee_selection_saves_and_redirects(db, fake_supabase, logger) -> None:
    service, resolver = _wire(db, logger)

    result = service.select_role("user-1", RoleSelection(role=UserRole.EMPLOYEE))

    assert result.success
    assert resolver.status == RoleStatus.RESOLVED
    assert result.data.redirect.target == routing.EMPLOYEE_DASHBOARD
    upsert = fake_supabase.queries("user_profiles", "upsert")[0].op("upsert")
    assert upsert[0][0]["role"] == "employee"
    assert upsert[0][0]["role_selected"] is True
    assert upsert[0][0]["company_name"] is None
    assert fake_supabase.queries("companies") == []


def test_employer_selection_creates_company(db, fake_supabase, logger) -> None:
    fake_supabase.respond("companies", [{"id": 9, "name": "Acme Ltd", "owner_id": "user-1"}])
    service, resolver = _wire(db, logger)

    result = service.select_role("user-1", RoleSelection(
        role=UserRole.EMPLOYER,
        company_name=" Acme Ltd ",
        company_size="11-50",
        industry="Technology",
    ))

    assert result.success
    assert resolver.role == UserRole.EMPLOYER
    company = fake_supabase.queries("companies", "insert")[0].op("insert")[0][0]
    assert company == {
        "name": "Acme Ltd",
        "industry": "Technology",
        "size_range": "11-50",
        "owner_id": "user-1",
    }
    cached = db.sqlite.execute(
        "SELECT role, role_selected FROM user_profiles WHERE user_id = 'user-1'",
    ).fetchone()
    assert tuple(cached) == ("employer", 1)


def test_backend_failure_leaves_resolver_untouched(db, fake_supabase, logger) -> None:
    fake_supabase.respond("user_profiles", ConnectionError("offline"))
    service, resolver = _wire(db, logger)

    result = service.select_role("user-1", RoleSelection(role=UserRole.INDEPENDENT))

    assert not result.success
    assert result.status_code == 503
    assert resolver.status == RoleStatus.CHECKING


def test_offline_selection_fails(offline_db, logger) -> None:
    service, resolver = _wire(offline_db, logger)

    result = service.select_role("user-1", RoleSelection(role=UserRole.EMPLOYEE))

    assert result.status_code == 503
    assert resolver.role is None
