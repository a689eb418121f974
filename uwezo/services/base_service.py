"""
Base Service Class.

Services receive their repositories through ``__init__`` and report to
the UI through ``ServiceResult``.  The base class holds the logger and
builds the failure envelope so every service words its status codes the
same way.
"""

from __future__ import annotations

from typing import Any

from uwezo.logger import StructuredLogger
from uwezo.models.service_models import ServiceResult

# status_code values used by ServiceResult failures.
INVALID_INPUT: int = 400
NOT_FOUND: int = 404
UNAVAILABLE: int = 503


class BaseService:
    """Base class for all service classes."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger

    @staticmethod
    def _failure(error: str, status_code: int = UNAVAILABLE) -> ServiceResult[Any]:
        return ServiceResult(success=False, error=error, status_code=status_code)
