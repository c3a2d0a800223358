"""Authoritative in-process Python API for the Audit Trail Recorder."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

from packages.serverhub_shared.config import ServerHubSettings
from packages.serverhub_shared.ids import new_ulid
from services.provisioning.audit_trail.domain import (
    AuditContext,
    AuditEntrySpec,
    AuditLogRow,
    AuditOperationType,
    AuditResourceType,
    OperationScope,
)

AuditPage = tuple[tuple[AuditLogRow, ...], int]


def operation_id_for(action: str) -> str:
    """Return a fresh operation id such as ``create-domain-<ulid>``."""
    return f"{action}-{new_ulid()}"


class AuditTrailRecorder(ABC):
    """Public API for bracketing operations with one terminal audit row."""

    @abstractmethod
    def start_operation(self, operation_id: str) -> None:
        """Mark ``operation_id`` as pending without writing a row."""

    @abstractmethod
    def log(
        self,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
        *,
        operation_id: str | None = None,
    ) -> AuditLogRow:
        """Write one unpaired row; persistence errors propagate."""

    @abstractmethod
    def log_operation_complete(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
    ) -> AuditLogRow | None:
        """Write the successful terminal row for a pending operation.

        Returns None when the row could not be persisted; the failure is
        logged rather than raised.
        """

    @abstractmethod
    def log_operation_failed(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        error: BaseException,
        context: AuditContext | None = None,
    ) -> AuditLogRow | None:
        """Write the failed terminal row for a pending operation.

        Returns None when the row could not be persisted; the failure is
        logged rather than raised.
        """

    @abstractmethod
    def log_security_event(
        self,
        operation_type: AuditOperationType,
        description: str,
        context: AuditContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLogRow:
        """Write one security event row immediately."""

    @abstractmethod
    def operation(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
    ) -> AbstractContextManager[OperationScope]:
        """Start ``operation_id`` and finalize it exactly once on block exit."""

    @abstractmethod
    def is_pending(self, operation_id: str) -> bool:
        """Return whether ``operation_id`` was started and not yet finalized."""

    @abstractmethod
    def logs_for_actor(
        self, actor_id: str, *, limit: int | None = None, offset: int = 0
    ) -> AuditPage:
        """Return rows written for one actor, newest first."""

    @abstractmethod
    def logs_for_resource(
        self,
        resource_type: AuditResourceType,
        resource_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> AuditPage:
        """Return rows referencing one resource, newest first."""

    @abstractmethod
    def security_logs(self, *, limit: int | None = None, offset: int = 0) -> AuditPage:
        """Return login, logout, permission, and password rows, newest first."""

    @abstractmethod
    def failed_operations(
        self, *, limit: int | None = None, offset: int = 0
    ) -> AuditPage:
        """Return failed rows, newest first."""

    @abstractmethod
    def cleanup_old_logs(self, days_to_keep: int | None = None) -> int:
        """Delete rows older than the retention window; return the count."""


def build_audit_trail_recorder(*, settings: ServerHubSettings) -> AuditTrailRecorder:
    """Build the default recorder and its configured repository."""
    from services.provisioning.audit_trail.config import resolve_audit_trail_settings
    from services.provisioning.audit_trail.data.repository import (
        InMemoryAuditLogRepository,
        SqlAuditLogRepository,
    )
    from services.provisioning.audit_trail.data.runtime import AuditTrailPostgresRuntime
    from services.provisioning.audit_trail.implementation import (
        DefaultAuditTrailRecorder,
    )

    resolved = resolve_audit_trail_settings(settings)
    if resolved.backend == "memory":
        repository = InMemoryAuditLogRepository()
    else:
        runtime = AuditTrailPostgresRuntime.from_settings(settings)
        repository = SqlAuditLogRepository(runtime.schema_sessions)
    return DefaultAuditTrailRecorder(settings=resolved, repository=repository)
