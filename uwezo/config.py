"""
Application Configuration.

Pydantic Settings model for the Uwezo Career client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar, Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Public site (application links embed this) ---
    SITE_URL: str = "http://localhost:3000"

    # --- OAuth ---
    OAUTH_PROVIDER: str = "google"
    OAUTH_REDIRECT_PATH: str = "/protected"

    # --- Onboarding task cache ---
    TASK_CACHE_TTL_S: float = 300.0  # 5 minutes

    # --- Local store ---
    LOCAL_DB_PATH: str = "uwezo_local.db"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "uwezo.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    # --- Sync worker ---
    SYNC_BASE_INTERVAL_S: float = 30.0
    SYNC_MAX_INTERVAL_S: float = 300.0

    # Company size buckets offered to employers.  ClassVar so
    # pydantic-settings does not try to load them from the environment.
    COMPANY_SIZES: ClassVar[tuple[str, ...]] = (
        "1-10", "11-50", "51-200", "201-1000", "1000+",
    )
    INDUSTRIES: ClassVar[tuple[str, ...]] = (
        "Technology", "Healthcare", "Finance", "Education", "Manufacturing",
        "Retail", "Construction", "Consulting", "Media", "Government",
        "Non-profit", "Agriculture", "Transportation", "Energy", "Other",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        so operators get a log line telling them which values are
        placeholders.
        """
        _log = logging.getLogger("uwezo.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found. All configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty. Supabase connectivity is disabled; "
                "the app will operate in offline-only mode."
            )

        return self

    @property
    def oauth_redirect_url(self) -> str:
        """Absolute URL the identity provider redirects back to."""
        return self.absolute_url(self.OAUTH_REDIRECT_PATH)

    def absolute_url(self, path: str) -> str:
        """Join *path* onto ``SITE_URL`` without doubling slashes."""
        return f"{self.SITE_URL.rstrip('/')}/{path.lstrip('/')}"


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern so the fast path skips the lock once initialised.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
