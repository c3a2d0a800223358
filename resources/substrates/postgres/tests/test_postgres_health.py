"""Tests for Postgres substrate readiness probes and session helpers."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError, OperationalError

from packages.serverhub_shared.errors import ErrorCategory, codes
from resources.substrates.postgres.config import PostgresSettings
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.errors import normalize_postgres_error
from resources.substrates.postgres.health import ping
from resources.substrates.postgres.session import (
    ServiceSchemaSessionProvider,
    create_session_factory,
)


class _FakeDialect:
    name = "postgresql"


class _FakeConnection:
    """Minimal context-managed connection double capturing execute calls."""

    dialect = _FakeDialect()

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, object] | None]] = []

    def __enter__(self) -> "_FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def execute(self, statement, params=None) -> None:
        self.calls.append((str(statement), params))


class _FakeEngine:
    """Minimal engine double exposing ``connect``."""

    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    def connect(self) -> _FakeConnection:
        return self._conn


def test_ping_applies_statement_timeout_via_set_config() -> None:
    """Ping should set statement timeout with set_config then run SELECT 1."""
    conn = _FakeConnection()
    engine = _FakeEngine(conn)

    assert ping(engine, timeout_seconds=1.2) is True
    assert conn.calls[0] == (
        "SELECT set_config('statement_timeout', :timeout_value, false)",
        {"timeout_value": "1200ms"},
    )
    assert conn.calls[1] == ("SELECT 1", None)


def test_ping_returns_false_when_connection_or_query_fails() -> None:
    """Ping should degrade cleanly on probe exceptions."""

    class _FailingConnection(_FakeConnection):
        def execute(self, statement, params=None) -> None:
            del statement, params
            raise OperationalError("SELECT 1", {}, Exception("refused"))

    engine = _FakeEngine(_FailingConnection())
    assert ping(engine, timeout_seconds=1.0) is False


def test_ping_reports_ready_for_in_memory_sqlite() -> None:
    """An in-memory SQLite engine should answer the probe."""
    engine = create_postgres_engine(PostgresSettings(url="sqlite://"))
    try:
        assert ping(engine) is True
    finally:
        engine.dispose()


def test_in_memory_sqlite_engine_shares_one_database() -> None:
    """Separate connections from an in-memory engine see the same tables."""
    engine = create_postgres_engine(PostgresSettings(url="sqlite://"))
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE marks (name TEXT)"))
        conn.execute(text("INSERT INTO marks VALUES ('seen')"))

    with engine.connect() as conn:
        assert conn.execute(text("SELECT name FROM marks")).scalar_one() == "seen"


def test_schema_session_provider_commits_and_rolls_back() -> None:
    """Sessions should commit on success and roll back on error."""
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE marks (name TEXT)"))
    provider = ServiceSchemaSessionProvider(
        session_factory=create_session_factory(engine), schema="audit_trail"
    )

    with provider.session() as db:
        db.execute(text("INSERT INTO marks VALUES ('kept')"))
    with pytest.raises(RuntimeError):
        with provider.session() as db:
            db.execute(text("INSERT INTO marks VALUES ('dropped')"))
            raise RuntimeError("abort")

    with engine.connect() as conn:
        names = [row[0] for row in conn.execute(text("SELECT name FROM marks"))]
    assert names == ["kept"]


def test_schema_session_provider_rejects_malformed_schema() -> None:
    """Schema names with punctuation should be rejected."""
    engine = create_engine("sqlite://")
    with pytest.raises(ValueError):
        ServiceSchemaSessionProvider(
            session_factory=create_session_factory(engine), schema="audit; drop"
        )


def test_normalize_postgres_error_maps_integrity_and_operational() -> None:
    """Integrity errors map to conflicts and operational errors to dependency."""
    conflict = normalize_postgres_error(IntegrityError("insert", {}, Exception("dup")))
    unavailable = normalize_postgres_error(
        OperationalError("connect", {}, Exception("down"))
    )

    assert conflict.category == ErrorCategory.CONFLICT
    assert conflict.code == codes.ALREADY_EXISTS
    assert unavailable.code == codes.DEPENDENCY_UNAVAILABLE
    assert unavailable.retryable is True
