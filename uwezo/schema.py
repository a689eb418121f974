"""
Local SQLite schema.

:func:`initialize_schema` runs on every start.  A fresh file gets every
table at once; an older file is rolled forward through ``_MIGRATIONS``.
Either path bumps ``schema_version`` in the same transaction, so a failed
upgrade leaves the file at its previous version and is retried on the
next start.

Tables
------
schema_version   single row, the applied version
sync_queue       writes waiting to be replayed to Supabase
audit_log        local record of role choices and job postings
local_storage    key/value cache (onboarding task lists and their stamps)
user_profiles    read-through copy of the Supabase table
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable

from uwezo.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

CURRENT_SCHEMA_VERSION: int = 2

_VERSION_TABLE = """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

_TABLES: dict[str, str] = {
    "sync_queue": """
        CREATE TABLE IF NOT EXISTS sync_queue (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            table_name TEXT NOT NULL,
            operation TEXT NOT NULL,
            entity_id TEXT NOT NULL,
            payload TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'synced', 'permanently_failed')),
            attempts INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            attempted_at TIMESTAMP,
            error_message TEXT
        )
    """,
    "audit_log": """
        CREATE TABLE IF NOT EXISTS audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp TEXT NOT NULL,
            action TEXT NOT NULL,
            entity_type TEXT NOT NULL,
            entity_id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            details TEXT DEFAULT '{}',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "local_storage": """
        CREATE TABLE IF NOT EXISTS local_storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    "user_profiles": """
        CREATE TABLE IF NOT EXISTS user_profiles (
            user_id TEXT PRIMARY KEY,
            role TEXT CHECK (role IS NULL OR role IN ('employer', 'employee', 'independent')),
            role_selected INTEGER NOT NULL DEFAULT 0,
            first_name TEXT,
            last_name TEXT,
            email TEXT,
            company_name TEXT,
            company_size TEXT,
            industry TEXT,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (role_selected = 0 OR role IS NOT NULL)
        )
    """,
}

_INDEXES: tuple[str, ...] = (
    "CREATE INDEX IF NOT EXISTS idx_sync_queue_status ON sync_queue(status)",
)


def _stored_version(conn: sqlite3.Connection) -> int:
    conn.execute(_VERSION_TABLE)
    conn.commit()
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row is not None else 0


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    # PRAGMA cannot take a bound parameter, so only known names get here.
    if table not in _TABLES:
        raise ValueError(f"Unknown table: {table!r}")
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}


def _add_missing_columns(
    conn: sqlite3.Connection, table: str, columns: dict[str, str],
) -> list[str]:
    present = _columns(conn, table)
    added = []
    for name, ddl in columns.items():
        if name not in present:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
            added.append(name)
    return added


def _create_tables(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    for ddl in _TABLES.values():
        conn.execute(ddl)
    for ddl in _INDEXES:
        conn.execute(ddl)
    logger.info("Created %d tables.", len(_TABLES))


def _migrate_to_v2(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Employer company columns on ``user_profiles``; retry counter on ``sync_queue``."""
    # Tables introduced after v1 come in through their IF NOT EXISTS DDL.
    _create_tables(conn, logger)
    added = _add_missing_columns(
        conn, "user_profiles",
        {"company_name": "TEXT", "company_size": "TEXT", "industry": "TEXT"},
    )
    added += _add_missing_columns(
        conn, "sync_queue", {"attempts": "INTEGER NOT NULL DEFAULT 0"},
    )
    logger.info("Migrated to v2; added columns: %s", ", ".join(added) or "none")


# target version -> migration
_MIGRATIONS: dict[int, Callable[[sqlite3.Connection, StructuredLogger], None]] = {
    2: _migrate_to_v2,
}


def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Bring *conn* up to :data:`CURRENT_SCHEMA_VERSION`.  Idempotent."""
    current = _stored_version(conn)
    if current >= CURRENT_SCHEMA_VERSION:
        logger.debug("Schema already at version %d.", current)
        return

    logger.info("Upgrading local schema %d -> %d.", current, CURRENT_SCHEMA_VERSION)
    try:
        if current == 0:
            _create_tables(conn, logger)
        else:
            for target in sorted(v for v in _MIGRATIONS if current < v <= CURRENT_SCHEMA_VERSION):
                _MIGRATIONS[target](conn, logger)
        conn.execute(
            "INSERT INTO schema_version (id, version) VALUES (1, ?) "
            "ON CONFLICT(id) DO UPDATE SET version = excluded.version, "
            "applied_at = CURRENT_TIMESTAMP",
            (CURRENT_SCHEMA_VERSION,),
        )
        conn.commit()
    except Exception:
        conn.rollback()
        logger.error("Schema upgrade failed; still at version %d.", current, exc_info=True)
        raise
