"""
Role Selection Service.

Handles the "Welcome to Uwezo!" screen: persists the chosen role, creates
the employer's company, and hands the new role to the ``RoleResolver`` so
the user is routed without a second profile lookup.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from uwezo.logger import StructuredLogger
from uwezo.models.enums import UserRole
from uwezo.models.routing import RedirectAction
from uwezo.models.service_models import ServiceResult
from uwezo.models.user_profile import RoleSelection, UserProfile
from uwezo.repositories.company_repository import CompanyRepository
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.base_service import INVALID_INPUT, BaseService
from uwezo.services.role_resolver import RoleResolver
from uwezo.utils.audit import log_audit_event
from uwezo.utils.string_helpers import blank_to_none


class RoleSelectionOutcome(BaseModel):
    """Saved profile plus the route change the selection implies."""

    profile: UserProfile
    redirect: Optional[RedirectAction] = None


class RoleSelectionService(BaseService):
    """Persists explicit role choices.

    Parameters
    ----------
    profiles:
        Profile repository (``user_profiles``).
    companies:
        Company repository, used for employers only.
    resolver:
        Role resolver that receives the manual override.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        companies: CompanyRepository,
        resolver: RoleResolver,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._profiles = profiles
        self._companies = companies
        self._resolver = resolver

    @staticmethod
    def validate(selection: RoleSelection) -> Optional[str]:
        """Return the inline error for *selection*, or ``None`` if valid."""
        if selection.role is None:
            return "Please select a role"
        if selection.role == UserRole.EMPLOYER and not (
            selection.company_name.strip()
            and selection.company_size.strip()
            and selection.industry.strip()
        ):
            return "Please fill in all company details"
        return None

    def select_role(
        self, user_id: str, selection: RoleSelection,
    ) -> ServiceResult[RoleSelectionOutcome]:
        """Save *selection* for *user_id* and update the resolver.

        Validation failures return ``status_code=400`` without writing
        anything.  A backend failure returns ``status_code=503`` and
        leaves the resolver untouched.
        """
        error = self.validate(selection)
        if error is not None:
            return self._failure(error, INVALID_INPUT)

        role = selection.role
        is_employer = role == UserRole.EMPLOYER
        company_name = blank_to_none(selection.company_name) if is_employer else None
        company_size = blank_to_none(selection.company_size) if is_employer else None
        industry = blank_to_none(selection.industry) if is_employer else None

        try:
            profile = self._profiles.save_role_selection(
                user_id,
                role,
                company_name=company_name,
                company_size=company_size,
                industry=industry,
            )
            if is_employer:
                self._companies.create(
                    name=company_name,
                    owner_id=user_id,
                    industry=industry,
                    size_range=company_size,
                )
        except Exception as exc:
            self._logger.error(
                "Error setting up role for %s: %s", user_id, exc,
                extra={"event": "ROLE_SELECTION_FAILED", "user_id": user_id},
            )
            return self._failure("Failed to set up your role. Please try again.")

        log_audit_event(
            self._logger,
            action="ROLE_SELECTED",
            entity_type="UserProfile",
            entity_id=user_id,
            user_id=user_id,
            details={"role": str(role), "company_name": company_name},
            conn=self._profiles.sqlite,
        )
        redirect = self._resolver.set_role(role)
        return ServiceResult(
            success=True,
            data=RoleSelectionOutcome(profile=profile, redirect=redirect),
        )
