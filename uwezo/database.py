"""
Connections: Supabase (authoritative) and SQLite (local companion).

Supabase holds profiles, companies, job openings, applications, onboarding
tasks and quiz attempts, and handles sign-in.  The SQLite file holds what
the client needs when Supabase is out of reach: the ``local_storage``
cache, a copy of ``user_profiles``, the audit trail and the outbound
``sync_queue``.

No queries live here; repositories own them.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from supabase import Client as SupabaseClient
from supabase import ClientOptions, create_client

from uwezo.logger import StructuredLogger


class DatabaseManager:
    """Owns the Supabase client (when configured) and the SQLite connection.

    Missing credentials, or a client that fails to build, leave the
    manager offline: ``is_online`` is ``False`` and ``supabase`` raises
    ``RuntimeError``, which repositories treat like any other remote
    failure.  The auth client uses the PKCE flow so the desktop app can
    trade the OAuth redirect's ``code`` for a session.

    Pass *client* to inject a ready-made Supabase client (tests do).
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        sqlite_path: Path,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger = logger
        self._write_lock = threading.RLock()
        self._batch_owner: Optional[int] = None
        self._closed = False
        self._supabase: Optional[SupabaseClient] = client or self._build_client(
            supabase_url, supabase_key,
        )
        self._sqlite_conn: sqlite3.Connection = self._open_sqlite(sqlite_path)

    def _build_client(self, url: str, key: str) -> Optional[SupabaseClient]:
        if not (url and key):
            self._logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set; working offline.")
            return None
        try:
            client = create_client(url, key, options=ClientOptions(flow_type="pkce"))
        except (ValueError, TypeError) as exc:
            self._logger.warning("Rejected Supabase credentials (%s); working offline.", exc)
            return None
        except Exception:
            self._logger.error("Could not create the Supabase client; working offline.", exc_info=True)
            return None
        self._logger.info("Connected to Supabase at %s", url)
        return client

    def _open_sqlite(self, path: Path) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
        except PermissionError as exc:
            raise PermissionError(
                f"Cannot open the local database at '{path}'. Check that the file "
                "and its folder are writable and not locked by another program."
            ) from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys = ON;")
        self._logger.info("Local database: %s", path)
        return conn

    # ------------------------------------------------------------------

    @property
    def supabase(self) -> SupabaseClient:
        if self._supabase is None:
            raise RuntimeError("Supabase is not configured; the client is offline.")
        return self._supabase

    @property
    def is_online(self) -> bool:
        return self._supabase is not None

    @property
    def sqlite(self) -> sqlite3.Connection:
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Held around every SQLite write, from any thread."""
        return self._write_lock

    @property
    def in_batch(self) -> bool:
        """``True`` when the calling thread owns an open ``batch_write``."""
        return self._batch_owner == threading.get_ident()

    @contextmanager
    def batch_write(self) -> Iterator[None]:
        """Group writes into one transaction.

        Inside the block, repositories skip their own commits; the block
        commits once on exit or rolls back if it raises.  Nested use from
        the owning thread joins the outer batch; other threads wait on the
        write lock until it closes.
        """
        with self._write_lock:
            if self._batch_owner == threading.get_ident():
                yield
                return

            self._batch_owner = threading.get_ident()
            try:
                yield
            except Exception:
                self._sqlite_conn.rollback()
                self._logger.warning("Batch write rolled back.", exc_info=True)
                raise
            else:
                self._sqlite_conn.commit()
            finally:
                self._batch_owner = None

    def close(self) -> None:
        """Close SQLite.  Later calls do nothing."""
        with self._write_lock:
            if self._closed:
                return
            self._sqlite_conn.close()
            self._closed = True
        self._logger.info("Local database closed.")
