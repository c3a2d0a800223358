"""SQL repository and wiring tests against an in-memory SQLite engine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from packages.serverhub_shared.config import ServerHubSettings
from packages.serverhub_shared.ids import new_ulid
from resources.substrates.postgres import SessionProvider, create_session_factory
from services.provisioning.audit_trail.config import AuditTrailSettings
from services.provisioning.audit_trail.data import migrate
from services.provisioning.audit_trail.data.repository import (
    InMemoryAuditLogRepository,
    SqlAuditLogRepository,
)
from services.provisioning.audit_trail.data.schema import metadata
from services.provisioning.audit_trail.domain import (
    AuditLogQuery,
    AuditEntrySpec,
    AuditLogRow,
    AuditOperationType,
    AuditResourceType,
    AuditSeverity,
)
from services.provisioning.audit_trail.implementation import (
    DefaultAuditTrailRecorder,
)
from services.provisioning.audit_trail.service import build_audit_trail_recorder


@pytest.fixture
def repository() -> SqlAuditLogRepository:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    return SqlAuditLogRepository(
        SessionProvider(session_factory=create_session_factory(engine))
    )


def _row(**changes: object) -> AuditLogRow:
    values: dict[str, object] = {
        "id": new_ulid(),
        "operation_type": AuditOperationType.CREATE,
        "resource_type": AuditResourceType.USER,
        "resource_id": "u1",
        "resource_name": "alice",
        "actor_id": "admin",
        "metadata": {"shell": "/bin/bash"},
        "success": True,
        "severity": AuditSeverity.INFO,
        "created_at": datetime.now(UTC),
    }
    values.update(changes)
    return AuditLogRow(**values)


def test_append_and_find_round_trips_row(repository) -> None:
    row = _row()
    repository.append(row=row)

    rows, total = repository.find(query=AuditLogQuery(actor_id="admin"), limit=10, offset=0)

    assert total == 1
    assert rows == (row,)


def test_find_filters_success_and_operation_types(repository) -> None:
    now = datetime.now(UTC)
    ok = _row(created_at=now - timedelta(seconds=2))
    failed = _row(success=False, severity=AuditSeverity.ERROR, created_at=now - timedelta(seconds=1))
    login = _row(operation_type=AuditOperationType.LOGIN, resource_type=None, created_at=now)
    for row in (ok, failed, login):
        repository.append(row=row)

    rows, total = repository.find(query=AuditLogQuery(success=False), limit=10, offset=0)
    assert (rows, total) == ((failed,), 1)

    rows, total = repository.find(
        query=AuditLogQuery(operation_types=frozenset({AuditOperationType.LOGIN})),
        limit=10,
        offset=0,
    )
    assert rows == (login,)

    rows, total = repository.find(query=AuditLogQuery(), limit=2, offset=0)
    assert total == 3
    assert rows == (login, failed)


def test_delete_older_than_counts_removed_rows(repository) -> None:
    now = datetime.now(UTC)
    repository.append(row=_row(created_at=now - timedelta(days=10)))
    repository.append(row=_row(created_at=now))

    assert repository.delete_older_than(cutoff=now - timedelta(days=1)) == 1
    assert repository.count() == 1


def test_recorder_over_sql_repository_writes_terminal_row(repository) -> None:
    recorder = DefaultAuditTrailRecorder(
        settings=AuditTrailSettings(), repository=repository
    )
    entry = AuditEntrySpec(
        operation_type=AuditOperationType.CREATE,
        resource_type=AuditResourceType.USER,
        resource_id="u1",
        resource_name="alice",
    )

    with recorder.operation("create-user-1", entry):
        pass

    rows, total = recorder.logs_for_resource(AuditResourceType.USER, "u1")
    assert total == 1
    assert rows[0].operation_id == "create-user-1"
    assert rows[0].success is True


def test_build_with_memory_backend_uses_in_memory_repository() -> None:
    settings = ServerHubSettings(
        components={"service": {"audit_trail": {"backend": "memory"}}}
    )

    recorder = build_audit_trail_recorder(settings=settings)

    assert isinstance(recorder, DefaultAuditTrailRecorder)
    assert isinstance(recorder._repository, InMemoryAuditLogRepository)


def test_run_migrations_upgrades_to_head_without_schema_on_sqlite() -> None:
    settings = ServerHubSettings(
        components={"substrate": {"postgres": {"url": "sqlite://"}}}
    )
    calls: list[tuple[str, str]] = []

    migrate.run_migrations(
        settings=settings,
        upgrade_fn=lambda config, revision: calls.append(
            (config.get_main_option("script_location"), revision)
        ),
    )

    assert calls == [(str(migrate.MIGRATIONS_DIR), "head")]


def test_run_migrations_wraps_upgrade_failures() -> None:
    settings = ServerHubSettings(
        components={"substrate": {"postgres": {"url": "sqlite://"}}}
    )

    def failing_upgrade(config, revision) -> None:
        raise RuntimeError("bad revision")

    with pytest.raises(migrate.MigrationExecutionError):
        migrate.run_migrations(settings=settings, upgrade_fn=failing_upgrade)
