"""Local SQLite schema: creation, idempotence, migration, constraints."""

from __future__ import annotations

import sqlite3

import pytest

from uwezo.schema import CURRENT_SCHEMA_VERSION, initialize_schema


def _tables(conn: sqlite3.Connection) -> set[str]:
    return {
        row[0]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }


def test_fresh_database_gets_every_table(db) -> None:
    assert {"schema_version", "sync_queue", "audit_log", "local_storage", "user_profiles"} <= _tables(db.sqlite)
    version = db.sqlite.execute("SELECT version FROM schema_version").fetchone()[0]
    assert version == CURRENT_SCHEMA_VERSION


def test_initialize_is_idempotent(db, logger) -> None:
    initialize_schema(db.sqlite, logger)
    initialize_schema(db.sqlite, logger)

    assert db.sqlite.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0] == 1


def test_v1_database_is_migrated(logger) -> None:
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript(
        """
        CREATE TABLE schema_version (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            version INTEGER NOT NULL,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        INSERT INTO schema_version (id, version) VALUES (1, 1);
        CREATE TABLE user_profiles (
            user_id TEXT PRIMARY KEY,
            role TEXT,
            role_selected INTEGER NOT NULL DEFAULT 0
        );
        CREATE TABLE sync_queue (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            table_name TEXT NOT NULL,
            operation TEXT NOT NULL,
            entity_id TEXT NOT NULL,
            payload TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            attempted_at TIMESTAMP,
            error_message TEXT
        );
        """
    )

    initialize_schema(conn, logger)

    columns = {row[1] for row in conn.execute("PRAGMA table_info(user_profiles)")}
    assert {"company_name", "company_size", "industry"} <= columns
    queue_columns = {row[1] for row in conn.execute("PRAGMA table_info(sync_queue)")}
    assert "attempts" in queue_columns
    assert conn.execute("SELECT version FROM schema_version").fetchone()[0] == CURRENT_SCHEMA_VERSION
    conn.close()


def test_selected_profile_requires_role(db) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        db.sqlite.execute(
            "INSERT INTO user_profiles (user_id, role, role_selected) VALUES ('u', NULL, 1)",
        )


def test_unknown_role_is_rejected(db) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        db.sqlite.execute(
            "INSERT INTO user_profiles (user_id, role, role_selected) VALUES ('u', 'admin', 1)",
        )


def test_unknown_sync_status_is_rejected(db) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        db.sqlite.execute(
            "INSERT INTO sync_queue (table_name, operation, entity_id, payload, status) "
            "VALUES ('user_tasks', 'upsert', 'x', '{}', 'lost')",
        )
