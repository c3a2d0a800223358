"""Concrete Audit Trail Recorder implementation."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from packages.serverhub_shared.errors import exception_to_error
from packages.serverhub_shared.ids import new_ulid
from packages.serverhub_shared.logging import fields, get_logger, log_context
from services.provisioning.audit_trail.config import AuditTrailSettings
from services.provisioning.audit_trail.domain import (
    SECURITY_OPERATION_TYPES,
    WARNING_SECURITY_EVENTS,
    AuditContext,
    AuditEntrySpec,
    AuditLogQuery,
    AuditLogRow,
    AuditOperationType,
    AuditResourceType,
    AuditSeverity,
    OperationScope,
)
from services.provisioning.audit_trail.errors import OperationStateError
from services.provisioning.audit_trail.interfaces import AuditLogRepository
from services.provisioning.audit_trail.service import AuditPage, AuditTrailRecorder

_LOGGER = get_logger(__name__)

_SEVERITY_LEVELS = {
    AuditSeverity.INFO: logging.INFO,
    AuditSeverity.WARNING: logging.WARNING,
    AuditSeverity.ERROR: logging.ERROR,
    AuditSeverity.CRITICAL: logging.ERROR,
}


class DefaultAuditTrailRecorder(AuditTrailRecorder):
    """Recorder whose pending-operation map belongs to the instance."""

    def __init__(
        self,
        *,
        settings: AuditTrailSettings,
        repository: AuditLogRepository,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._pending: dict[str, float] = {}
        self._lock = threading.Lock()

    def start_operation(self, operation_id: str) -> None:
        """Mark ``operation_id`` as pending."""
        with self._lock:
            if operation_id in self._pending:
                raise OperationStateError(
                    f"operation already pending: {operation_id}",
                    operation_id=operation_id,
                )
            self._pending[operation_id] = time.monotonic()

    def is_pending(self, operation_id: str) -> bool:
        """Return whether ``operation_id`` awaits its terminal row."""
        with self._lock:
            return operation_id in self._pending

    def log(
        self,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
        *,
        operation_id: str | None = None,
    ) -> AuditLogRow:
        """Write one row now; persistence errors propagate to the caller."""
        try:
            return self._write(entry, context, operation_id=operation_id)
        except Exception:
            _LOGGER.error(
                "audit write failed",
                exc_info=True,
                extra={
                    fields.EVENT: fields.AUDIT_WRITE_FAILED_EVENT,
                    fields.OPERATION_TYPE: entry.operation_type.value,
                },
            )
            raise

    def log_operation_complete(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
    ) -> AuditLogRow | None:
        """Write the successful terminal row for a pending operation."""
        duration_ms = self._finish(operation_id)
        return self._write_terminal(
            operation_id,
            entry,
            context,
            lambda: entry.model_copy(
                update={"success": True, "duration_ms": duration_ms}
            ),
        )

    def log_operation_failed(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        error: BaseException,
        context: AuditContext | None = None,
    ) -> AuditLogRow | None:
        """Write the failed terminal row for a pending operation."""
        duration_ms = self._finish(operation_id)
        return self._write_terminal(
            operation_id,
            entry,
            context,
            lambda: _failed_entry(entry, error, duration_ms),
        )

    def log_security_event(
        self,
        operation_type: AuditOperationType,
        description: str,
        context: AuditContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLogRow:
        """Write one security event row immediately."""
        severity = (
            AuditSeverity.WARNING
            if operation_type in WARNING_SECURITY_EVENTS
            else AuditSeverity.INFO
        )
        return self.log(
            AuditEntrySpec(
                operation_type=operation_type,
                resource_type=AuditResourceType.SYSTEM,
                description=description,
                metadata=metadata,
                severity=severity,
            ),
            context,
        )

    @contextmanager
    def operation(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
    ) -> Iterator[OperationScope]:
        """Start ``operation_id`` and finalize it exactly once on exit."""
        self.start_operation(operation_id)
        scope = OperationScope(
            operation_id=operation_id,
            entry=entry,
            context=context or AuditContext(),
        )
        with log_context({fields.OPERATION_ID: operation_id}):
            try:
                yield scope
            except BaseException as exc:
                scope.row = self.log_operation_failed(
                    operation_id, scope.entry, exc, scope.context
                )
                raise
            scope.row = self.log_operation_complete(
                operation_id, scope.entry, scope.context
            )

    def logs_for_actor(
        self, actor_id: str, *, limit: int | None = None, offset: int = 0
    ) -> AuditPage:
        """Return rows written for one actor, newest first."""
        return self._page(AuditLogQuery(actor_id=actor_id), limit, offset)

    def logs_for_resource(
        self,
        resource_type: AuditResourceType,
        resource_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> AuditPage:
        """Return rows referencing one resource, newest first."""
        return self._page(
            AuditLogQuery(resource_type=resource_type, resource_id=resource_id),
            limit,
            offset,
        )

    def security_logs(self, *, limit: int | None = None, offset: int = 0) -> AuditPage:
        """Return security-relevant rows, newest first."""
        return self._page(
            AuditLogQuery(operation_types=SECURITY_OPERATION_TYPES), limit, offset
        )

    def failed_operations(
        self, *, limit: int | None = None, offset: int = 0
    ) -> AuditPage:
        """Return failed rows, newest first."""
        return self._page(AuditLogQuery(success=False), limit, offset)

    def cleanup_old_logs(self, days_to_keep: int | None = None) -> int:
        """Delete rows older than ``days_to_keep`` days."""
        days = self._settings.retention_days if days_to_keep is None else days_to_keep
        if days < 0:
            raise ValueError("days_to_keep must be >= 0")
        cutoff = datetime.now(UTC) - timedelta(days=days)
        deleted = self._repository.delete_older_than(cutoff=cutoff)
        if deleted > 0:
            _LOGGER.info(
                "audit rows purged",
                extra={"deleted": deleted, "days_to_keep": days},
            )
        return deleted

    def _finish(self, operation_id: str) -> int:
        """Remove ``operation_id`` from the pending map; return elapsed ms."""
        with self._lock:
            started = self._pending.pop(operation_id, None)
        if started is None:
            raise OperationStateError(
                f"operation not pending: {operation_id}",
                operation_id=operation_id,
            )
        return max(0, int((time.monotonic() - started) * 1000))

    def _write_terminal(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        context: AuditContext | None,
        terminal: Callable[[], AuditEntrySpec],
    ) -> AuditLogRow | None:
        """Build and persist a terminal row; failures are logged and swallowed."""
        try:
            return self._write(terminal(), context, operation_id=operation_id)
        except Exception:
            _LOGGER.error(
                "audit write failed",
                exc_info=True,
                extra={
                    fields.EVENT: fields.AUDIT_WRITE_FAILED_EVENT,
                    fields.OPERATION_ID: operation_id,
                    fields.OPERATION_TYPE: entry.operation_type.value,
                },
            )
            return None

    def _write(
        self,
        entry: AuditEntrySpec,
        context: AuditContext | None,
        *,
        operation_id: str | None,
    ) -> AuditLogRow:
        """Build, persist, and echo one row."""
        ctx = context or AuditContext()
        row = AuditLogRow(
            id=new_ulid(),
            operation_id=operation_id,
            created_at=datetime.now(UTC),
            **ctx.model_dump(),
            **entry.model_dump(),
        )
        self._repository.append(row=row)
        self._echo(row)
        return row

    def _echo(self, row: AuditLogRow) -> None:
        """Mirror a written row as one structured log line."""
        message = f"[AUDIT] {row.operation_type.value}"
        if row.resource_type is not None:
            message += f" {row.resource_type.value}"
        if row.resource_name:
            message += f' "{row.resource_name}"'
        message += f": {row.description or 'No description'}"

        _LOGGER.log(
            _SEVERITY_LEVELS[row.severity],
            message,
            extra={
                fields.EVENT: fields.AUDIT_RECORD_EVENT,
                fields.AUDIT_ID: row.id,
                fields.ACTOR_ID: row.actor_id,
                fields.SUCCESS: row.success,
            },
        )

    def _page(
        self, query: AuditLogQuery, limit: int | None, offset: int
    ) -> AuditPage:
        """Clamp paging arguments and delegate to the repository."""
        size = self._settings.default_page_size if limit is None else limit
        if size <= 0 or offset < 0:
            raise ValueError("limit must be > 0 and offset must be >= 0")
        size = min(size, self._settings.max_page_size)
        return self._repository.find(query=query, limit=size, offset=offset)


def _failed_entry(
    entry: AuditEntrySpec, error: BaseException, duration_ms: int
) -> AuditEntrySpec:
    """Refine ``entry`` into the failure row, tagging the normalized error code."""
    detail = exception_to_error(error)
    metadata: dict[str, Any] = dict(entry.metadata or {})
    metadata.setdefault("error_code", detail.code)
    metadata.setdefault("error_category", detail.category.value)
    return entry.model_copy(
        update={
            "success": False,
            "error_message": str(error) or type(error).__name__,
            "severity": AuditSeverity.ERROR,
            "duration_ms": duration_ms,
            "metadata": metadata,
        }
    )
