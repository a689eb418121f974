"""
Shared fixtures for the Uwezo Career test suite.

``FakeSupabase`` mimics the chained ``table(...).select(...).eq(...)``
builder of ``supabase-py`` closely enough for the repositories: each
``execute()`` pops the next scripted outcome for that table (a response
object, ``None``, or an exception to raise) and records the chain that
produced it.
"""

from __future__ import annotations

import uuid
from collections import defaultdict, deque
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Optional

import pytest

import uwezo.config
from uwezo.auth import SessionManager
from uwezo.config import AppConfig
from uwezo.database import DatabaseManager
from uwezo.logger import StructuredLogger
from uwezo.schema import initialize_schema


# ---------------------------------------------------------------------------
# Fake Supabase client
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, data: Any = None) -> None:
        self.data = data


class FakeQuery:
    """One ``table(name)`` builder chain."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self._client = client
        self.table = table
        self.ops: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def _chain(self, name: str, *args: Any, **kwargs: Any) -> "FakeQuery":
        self.ops.append((name, args, kwargs))
        return self

    def select(self, *args: Any, **kwargs: Any) -> "FakeQuery":
        return self._chain("select", *args, **kwargs)

    def eq(self, *args: Any) -> "FakeQuery":
        return self._chain("eq", *args)

    def in_(self, *args: Any) -> "FakeQuery":
        return self._chain("in_", *args)

    def gte(self, *args: Any) -> "FakeQuery":
        return self._chain("gte", *args)

    def order(self, *args: Any, **kwargs: Any) -> "FakeQuery":
        return self._chain("order", *args, **kwargs)

    def maybe_single(self) -> "FakeQuery":
        return self._chain("maybe_single")

    def insert(self, *args: Any, **kwargs: Any) -> "FakeQuery":
        return self._chain("insert", *args, **kwargs)

    def update(self, *args: Any, **kwargs: Any) -> "FakeQuery":
        return self._chain("update", *args, **kwargs)

    def upsert(self, *args: Any, **kwargs: Any) -> "FakeQuery":
        return self._chain("upsert", *args, **kwargs)

    def op(self, name: str) -> Optional[tuple[tuple[Any, ...], dict[str, Any]]]:
        """Arguments of the first *name* call in the chain, if any."""
        for op_name, args, kwargs in self.ops:
            if op_name == name:
                return args, kwargs
        return None

    def execute(self) -> Any:
        self._client.executed.append(self)
        outcome = self._client.next_outcome(self.table)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeAuth:
    """Stand-in for ``client.auth`` (gotrue)."""

    def __init__(self) -> None:
        self.current_session: Any = None
        self.oauth_url: str = "https://accounts.example.com/o/oauth2/auth?x=1"
        self.oauth_calls: list[dict[str, Any]] = []
        self.exchange_calls: list[dict[str, Any]] = []
        self.exchange_outcome: Any = None
        self.refresh_outcome: Any = None
        self.sign_out_error: Optional[BaseException] = None
        self.sign_out_calls: int = 0
        self.listener: Any = None
        self.unsubscribed: bool = False

    def get_session(self) -> Any:
        return self.current_session

    def on_auth_state_change(self, callback: Any) -> Any:
        self.listener = callback

        def _unsubscribe() -> None:
            self.unsubscribed = True

        return SimpleNamespace(unsubscribe=_unsubscribe)

    def sign_in_with_oauth(self, credentials: dict[str, Any]) -> Any:
        self.oauth_calls.append(credentials)
        return SimpleNamespace(url=self.oauth_url)

    def exchange_code_for_session(self, params: dict[str, Any]) -> Any:
        self.exchange_calls.append(params)
        if isinstance(self.exchange_outcome, BaseException):
            raise self.exchange_outcome
        return SimpleNamespace(session=self.exchange_outcome)

    def sign_out(self) -> None:
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error

    def refresh_session(self, refresh_token: str) -> Any:
        if isinstance(self.refresh_outcome, BaseException):
            raise self.refresh_outcome
        return SimpleNamespace(session=self.refresh_outcome)


class FakeSupabase:
    """Scripted Supabase client.

    ``respond(table, *outcomes)`` queues outcomes for *table*; an empty
    queue yields an empty result set.
    """

    def __init__(self) -> None:
        self._outcomes: dict[str, deque[Any]] = defaultdict(deque)
        self.executed: list[FakeQuery] = []
        self.auth = FakeAuth()

    def respond(self, table: str, *outcomes: Any) -> None:
        for outcome in outcomes:
            if isinstance(outcome, (BaseException, FakeResponse)) or outcome is None:
                self._outcomes[table].append(outcome)
            else:
                self._outcomes[table].append(FakeResponse(outcome))

    def next_outcome(self, table: str) -> Any:
        queue = self._outcomes[table]
        return queue.popleft() if queue else FakeResponse([])

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def queries(self, table: str, op: Optional[str] = None) -> list[FakeQuery]:
        """Executed chains against *table*, optionally only those using *op*."""
        return [
            q for q in self.executed
            if q.table == table and (op is None or q.op(op) is not None)
        ]


def make_raw_session(
    user_id: str = "user-1",
    email: str = "amina@example.com",
    full_name: str = "Amina Odhiambo",
    expires_at: Optional[int] = None,
) -> SimpleNamespace:
    """A gotrue-shaped session object."""
    return SimpleNamespace(
        access_token="access-token",
        refresh_token="refresh-token",
        expires_at=expires_at,
        user=SimpleNamespace(
            id=user_id,
            email=email,
            user_metadata={"full_name": full_name},
        ),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def app_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    """Isolated settings: no ``.env``, log file under ``tmp_path``."""
    config = AppConfig(
        _env_file=None,
        SUPABASE_URL="",
        SITE_URL="https://uwezo.example.com",
        LOG_FILE=str(tmp_path / "uwezo.log"),
    )
    monkeypatch.setattr(uwezo.config, "_config_instance", config)
    return config


@pytest.fixture
def logger(tmp_path: Path) -> StructuredLogger:
    return StructuredLogger(
        name=f"test-{uuid.uuid4().hex}",
        log_file=str(tmp_path / "test.log"),
    )


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def db(fake_supabase: FakeSupabase, logger: StructuredLogger):
    """Online database: fake Supabase plus an in-memory SQLite store."""
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=Path(":memory:"),
        logger=logger,
        client=fake_supabase,
    )
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def offline_db(logger: StructuredLogger):
    """Offline database: no Supabase client at all."""
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=Path(":memory:"),
        logger=logger,
    )
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def session() -> SessionManager:
    return SessionManager()


@pytest.fixture
def raw_session():
    """Factory for gotrue-shaped session objects."""
    return make_raw_session
