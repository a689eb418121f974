"""
User Profile Repository.

Handles ``user_profiles`` access via Supabase (primary) and SQLite
(read-through copy).  The role lookup used by the role resolver is
Supabase-only and distinguishes "no row" from every other failure.
"""

from __future__ import annotations

from typing import Optional

from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.models.enums import UserRole
from uwezo.models.user_profile import UserProfile
from uwezo.repositories.base_repository import BaseRepository, is_not_found
from uwezo.utils.general import utc_now_iso
from uwezo.utils.string_helpers import JsonValue

_CACHE_COLUMNS: tuple[str, ...] = (
    "user_id",
    "role",
    "role_selected",
    "first_name",
    "last_name",
    "email",
    "company_name",
    "company_size",
    "industry",
)


class ProfileRepository(BaseRepository):
    """Data access layer for ``UserProfile`` rows.

    Profiles are never deleted from the client; the row is created by
    :meth:`create_if_missing` on first sign-in and mutated only through
    :meth:`save_role_selection`.
    """

    TABLE = "user_profiles"

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_role_selection(self, user_id: str) -> Optional[UserProfile]:
        """Read ``{role, role_selected}`` for *user_id* from Supabase.

        Returns ``None`` when the profile row does not exist (empty result
        or PostgREST ``PGRST116``).  Any other failure, including offline
        mode, propagates to the caller.
        """
        try:
            response = (
                self.supabase.table(self.TABLE)
                .select("role, role_selected")
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            if is_not_found(exc):
                return None
            raise

        if response is None or not response.data:
            return None

        role = response.data.get("role")
        profile = UserProfile(
            user_id=user_id,
            role=role,
            role_selected=bool(response.data.get("role_selected")) and role is not None,
        )
        self._cache_role_to_sqlite(profile)
        return profile

    def get_by_user_id(self, user_id: str) -> Optional[UserProfile]:
        """Fetch the full profile.  Tries Supabase first, falls back to SQLite."""
        def _supabase() -> Optional[UserProfile]:
            try:
                response = (
                    self.supabase.table(self.TABLE)
                    .select("*")
                    .eq("user_id", user_id)
                    .maybe_single()
                    .execute()
                )
            except Exception as exc:
                if is_not_found(exc):
                    return None
                raise
            if response is None or not response.data:
                return None
            return self._to_profile(response.data)

        def _sqlite() -> Optional[UserProfile]:
            row = self.sqlite.execute(
                f"SELECT {', '.join(_CACHE_COLUMNS)} FROM {self.TABLE} WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            return UserProfile(**dict(row)) if row else None

        return self._read_with_fallback(
            remote=_supabase,
            default=lambda: None,
            label="get_by_user_id (user_profiles)",
            local=_sqlite,
            on_remote=self._cache_to_sqlite,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_if_missing(
        self,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> UserProfile:
        """Insert an unselected profile row, leaving existing rows untouched.

        Uses ``ignore_duplicates`` so a concurrent sign-in (or the
        database trigger) that already created the row wins.  When
        Supabase is unreachable the insert is queued for the sync worker.
        """
        profile = UserProfile(
            user_id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )
        payload: dict[str, JsonValue] = {
            "user_id": user_id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "role": None,
            "role_selected": False,
        }
        try:
            self.supabase.table(self.TABLE).upsert(
                payload, on_conflict="user_id", ignore_duplicates=True,
            ).execute()
            self._logger.info("Profile ensured for user %s", user_id)
        except Exception as exc:
            self._logger.error("Failed to create profile in Supabase: %s", exc)
            self._queue_for_sync("insert_missing", user_id, payload)
        self._cache_to_sqlite(profile, overwrite=False)
        return profile

    def save_role_selection(
        self,
        user_id: str,
        role: UserRole,
        company_name: Optional[str] = None,
        company_size: Optional[str] = None,
        industry: Optional[str] = None,
    ) -> UserProfile:
        """Persist an explicit role choice (``role_selected = true``).

        Raises whatever Supabase raises: the role-selection screen reports
        the failure instead of pretending the role was saved.
        """
        payload: dict[str, JsonValue] = {
            "user_id": user_id,
            "role": str(role),
            "role_selected": True,
            "company_name": company_name,
            "company_size": company_size,
            "industry": industry,
            "updated_at": utc_now_iso(),
        }
        self.supabase.table(self.TABLE).upsert(
            payload, on_conflict="user_id",
        ).execute()

        profile = UserProfile(
            user_id=user_id,
            role=role,
            role_selected=True,
            company_name=company_name,
            company_size=company_size,
            industry=industry,
        )
        self._cache_role_to_sqlite(profile)
        self._logger.info("Role saved for user %s: %s", user_id, role)
        return profile

    # ------------------------------------------------------------------
    # Local cache helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_profile(data: dict[str, JsonValue]) -> UserProfile:
        fields = {k: v for k, v in data.items() if k in UserProfile.model_fields}
        fields["role_selected"] = bool(fields.get("role_selected"))
        return UserProfile(**fields)

    def _cache_to_sqlite(self, profile: UserProfile, overwrite: bool = True) -> None:
        """Write-through the full profile row."""
        values = (
            profile.user_id,
            str(profile.role) if profile.role else None,
            int(profile.role_selected),
            profile.first_name,
            profile.last_name,
            profile.email,
            profile.company_name,
            profile.company_size,
            profile.industry,
        )
        verb = "INSERT OR REPLACE" if overwrite else "INSERT OR IGNORE"
        with self._db.write_lock:
            self.sqlite.execute(
                f"{verb} INTO {self.TABLE} ({', '.join(_CACHE_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in _CACHE_COLUMNS)})",
                values,
            )
            self._commit()

    def _cache_role_to_sqlite(self, profile: UserProfile) -> None:
        """Update only the role columns, creating the row if absent."""
        try:
            with self._db.write_lock:
                self.sqlite.execute(
                    f"""
                    INSERT INTO {self.TABLE} (user_id, role, role_selected)
                    VALUES (?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        role = excluded.role,
                        role_selected = excluded.role_selected,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (
                        profile.user_id,
                        str(profile.role) if profile.role else None,
                        int(profile.role_selected),
                    ),
                )
                self._commit()
        except Exception as exc:
            self._logger.warning(
                "Failed to cache role for %s locally: %s", profile.user_id, exc,
            )
