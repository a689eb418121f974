"""
Service Layer Data Transfer Objects.

Generic result envelope returned by every service method that the UI
calls, so views never inspect raw exceptions.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

__all__ = ["ServiceResult"]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[JobOpening]``).  ``status_code`` follows HTTP
    conventions: ``400`` for user-input problems that block a write,
    ``404`` for missing records, ``503`` when the backend is unreachable.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
