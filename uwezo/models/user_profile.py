"""
User Profile Model.

One row per authenticated user in ``user_profiles``.  The row is created
lazily on first sign-in with no role, and the role only changes through
the explicit role-selection flow.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, model_validator

from uwezo.models.enums import UserRole


class UserProfile(BaseModel):
    """Represents a user's persisted role selection and profile details.

    ``role_selected`` distinguishes "no role chosen yet" from "role
    explicitly chosen"; a selected profile must carry a role.
    """

    user_id: str  # Supabase UUID
    role: Optional[UserRole] = None
    role_selected: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    company_size: Optional[str] = None
    industry: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _selected_requires_role(self) -> "UserProfile":
        if self.role_selected and self.role is None:
            raise ValueError("role_selected is true but role is null")
        return self

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts)


class RoleSelection(BaseModel):
    """Validated input from the role-selection screen.

    Company fields are only meaningful (and then required) for employers;
    the check lives in ``RoleSelectionService`` so that the UI receives an
    inline message instead of a validation exception.
    """

    role: Optional[UserRole] = None
    company_name: str = ""
    company_size: str = ""
    industry: str = ""
