"""Audit log repository implementations."""

from __future__ import annotations

import threading
from datetime import datetime

from sqlalchemy import ColumnElement, and_, delete, func, insert, select, true

from resources.substrates.postgres.session import SessionProvider
from services.provisioning.audit_trail.data.mappers import (
    audit_row_to_values,
    values_to_audit_row,
)
from services.provisioning.audit_trail.data.schema import audit_logs
from services.provisioning.audit_trail.domain import AuditLogQuery, AuditLogRow
from services.provisioning.audit_trail.interfaces import AuditLogRepository


def _matches(row: AuditLogRow, query: AuditLogQuery) -> bool:
    """Return whether one row satisfies every set filter on ``query``."""
    if query.actor_id is not None and row.actor_id != query.actor_id:
        return False
    if query.resource_type is not None and row.resource_type != query.resource_type:
        return False
    if query.resource_id is not None and row.resource_id != query.resource_id:
        return False
    if query.operation_id is not None and row.operation_id != query.operation_id:
        return False
    if (
        query.operation_types is not None
        and row.operation_type not in query.operation_types
    ):
        return False
    if query.success is not None and row.success != query.success:
        return False
    return True


class InMemoryAuditLogRepository(AuditLogRepository):
    """Append-only in-memory audit persistence."""

    def __init__(self) -> None:
        self._rows: list[AuditLogRow] = []
        self._lock = threading.Lock()

    def append(self, *, row: AuditLogRow) -> None:
        """Persist one audit row in append order."""
        with self._lock:
            self._rows.append(row)

    def find(
        self, *, query: AuditLogQuery, limit: int, offset: int
    ) -> tuple[tuple[AuditLogRow, ...], int]:
        """Return one newest-first page of matching rows and the match count."""
        with self._lock:
            matched = [row for row in self._rows if _matches(row, query)]
        matched.sort(key=lambda row: (row.created_at, row.id), reverse=True)
        return tuple(matched[offset : offset + limit]), len(matched)

    def delete_older_than(self, *, cutoff: datetime) -> int:
        """Drop rows created before ``cutoff``."""
        with self._lock:
            kept = [row for row in self._rows if row.created_at >= cutoff]
            deleted = len(self._rows) - len(kept)
            self._rows = kept
        return deleted

    def count(self) -> int:
        """Return number of persisted rows."""
        with self._lock:
            return len(self._rows)

    def list_rows(self) -> tuple[AuditLogRow, ...]:
        """Expose immutable audit rows for tests and diagnostics."""
        with self._lock:
            return tuple(self._rows)


class SqlAuditLogRepository(AuditLogRepository):
    """SQL repository over the ``audit_logs`` table."""

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions

    def append(self, *, row: AuditLogRow) -> None:
        """Persist one audit row."""
        with self._sessions.session() as session:
            session.execute(insert(audit_logs).values(**audit_row_to_values(row)))

    def find(
        self, *, query: AuditLogQuery, limit: int, offset: int
    ) -> tuple[tuple[AuditLogRow, ...], int]:
        """Return one newest-first page of matching rows and the match count."""
        where = _where_clause(query)
        with self._sessions.session() as session:
            total = session.scalar(
                select(func.count()).select_from(audit_logs).where(where)
            )
            result = session.execute(
                select(audit_logs)
                .where(where)
                .order_by(audit_logs.c.created_at.desc(), audit_logs.c.id.desc())
                .limit(limit)
                .offset(offset)
            )
            rows = tuple(values_to_audit_row(item) for item in result.mappings())
        return rows, int(total or 0)

    def delete_older_than(self, *, cutoff: datetime) -> int:
        """Delete rows created before ``cutoff``."""
        with self._sessions.session() as session:
            result = session.execute(
                delete(audit_logs).where(audit_logs.c.created_at < cutoff)
            )
            return int(result.rowcount or 0)

    def count(self) -> int:
        """Return total persisted row count."""
        with self._sessions.session() as session:
            return int(session.scalar(select(func.count()).select_from(audit_logs)))


def _where_clause(query: AuditLogQuery) -> ColumnElement[bool]:
    """Translate an ``AuditLogQuery`` into one SQL boolean expression."""
    columns = audit_logs.c
    clauses: list[ColumnElement[bool]] = []
    if query.actor_id is not None:
        clauses.append(columns.actor_id == query.actor_id)
    if query.resource_type is not None:
        clauses.append(columns.resource_type == query.resource_type.value)
    if query.resource_id is not None:
        clauses.append(columns.resource_id == query.resource_id)
    if query.operation_id is not None:
        clauses.append(columns.operation_id == query.operation_id)
    if query.operation_types is not None:
        clauses.append(
            columns.operation_type.in_(
                sorted(item.value for item in query.operation_types)
            )
        )
    if query.success is not None:
        clauses.append(columns.success == query.success)
    if not clauses:
        return true()
    return and_(*clauses)
