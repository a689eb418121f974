"""
Company Repository.

Companies are created during employer role selection and picked from a
list on the create-job form.  Supabase only; the list is small and always
read fresh.
"""

from __future__ import annotations

from typing import Optional

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models.jobs import Company
from uwezo.repositories.base_repository import BaseRepository
from uwezo.utils.string_helpers import JsonValue


class CompanyRepository(BaseRepository):
    """Data access layer for ``Company`` entities."""

    TABLE = "companies"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    def list_by_owner(self, owner_id: str) -> list[Company]:
        """Companies owned by *owner_id*, alphabetically."""
        def _supabase() -> list[Company]:
            response = (
                self.supabase.table(self.TABLE)
                .select("id, name, industry, size_range, owner_id")
                .eq("owner_id", owner_id)
                .order("name")
                .execute()
            )
            return [self._to_company(row) for row in (response.data or [])]

        return self._read_with_fallback(
            remote=_supabase,
            default=list,
            label="list_by_owner (companies)",
        )

    def create(
        self,
        name: str,
        owner_id: str,
        industry: Optional[str] = None,
        size_range: Optional[str] = None,
    ) -> Company:
        """Insert a company row.  Raises on failure; nothing is queued."""
        payload: dict[str, JsonValue] = {
            "name": name,
            "industry": industry,
            "size_range": size_range,
            "owner_id": owner_id,
        }
        response = self.supabase.table(self.TABLE).insert(payload).execute()
        company = self._to_company(response.data[0])
        self._logger.info("Company created: %s (%s)", company.id, company.name)
        return company

    @staticmethod
    def _to_company(row: dict[str, JsonValue]) -> Company:
        return Company(
            id=str(row["id"]),
            name=row.get("name") or "",
            industry=row.get("industry"),
            size_range=row.get("size_range"),
            owner_id=row.get("owner_id"),
        )
