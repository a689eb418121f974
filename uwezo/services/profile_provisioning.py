"""
Profile Provisioning Service.

Ensures every authenticated user has a ``user_profiles`` row.  The row is
created lazily on first sign-in with no role (``role_selected = false``)
so the role resolver sends the user to role selection.

Provisioning strategy:
    - Never overwrite an existing row: the role, once chosen, belongs to
      the role-selection flow alone.
    - Name fields are seeded from the OAuth provider metadata.
    - Offline sign-ins still succeed; the insert is queued for the sync
      worker by the repository.
"""

from __future__ import annotations

from typing import Optional

from uwezo.logger import StructuredLogger
from uwezo.models.auth_models import AuthUser
from uwezo.models.user_profile import UserProfile
from uwezo.repositories.profile_repository import ProfileRepository
from uwezo.services.base_service import BaseService


class ProfileProvisioningError(Exception):
    """Raised when a profile row could not be ensured for a signed-in user."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


def split_full_name(full_name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Split a provider display name into ``(first, last)``."""
    if not full_name or not full_name.strip():
        return None, None
    first, _, last = full_name.strip().partition(" ")
    return first, (last.strip() or None)


class ProfileProvisioningService(BaseService):
    """Creates the ``user_profiles`` row for a user on first sign-in."""

    def __init__(self, repo: ProfileRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._repo = repo

    def ensure_profile(self, user: AuthUser) -> UserProfile:
        """Ensure a profile row exists for *user*.

        Args:
            user: Identity from the freshly established session.

        Returns:
            The profile as known after provisioning.

        Raises:
            ProfileProvisioningError: If the local or remote write failed
                in a way the sync queue cannot absorb.
        """
        given = user.user_metadata.get("given_name")
        family = user.user_metadata.get("family_name")
        if isinstance(given, str) and given.strip():
            first_name: Optional[str] = given.strip()
            last_name = family.strip() if isinstance(family, str) and family.strip() else None
        else:
            first_name, last_name = split_full_name(user.display_name)

        try:
            profile = self._repo.create_if_missing(
                user_id=user.id,
                email=user.email,
                first_name=first_name,
                last_name=last_name,
            )
        except Exception as exc:
            self._logger.error(
                "Profile provisioning failed for %s: %s", user.id, exc,
                exc_info=True,
            )
            raise ProfileProvisioningError(
                f"Unexpected error during profile provisioning: {exc}",
                original_error=exc,
            ) from exc

        self._logger.info(
            "Profile provisioned for %s", user.email or user.id,
            extra={"event": "PROFILE_PROVISIONED", "user_id": user.id},
        )
        return profile

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """The stored profile for *user_id* (remote first, local copy offline)."""
        return self._repo.get_by_user_id(user_id)
