"""The five-call surface provisioning workflows build on.

``ProvisioningCore`` bundles the command gateway, saga orchestrator, and
audit recorder so a workflow receives one object instead of three.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from packages.serverhub_shared.config import ServerHubSettings
from services.provisioning.audit_trail import (
    AuditContext,
    AuditEntrySpec,
    AuditLogRow,
    AuditTrailRecorder,
)
from services.provisioning.command_gateway import CommandGateway, CommandResult
from services.provisioning.saga import RollbackAction, SagaOrchestrator

T = TypeVar("T")


@dataclass(frozen=True)
class ProvisioningCore:
    """Gateway, saga orchestrator, and audit recorder for one process."""

    gateway: CommandGateway
    saga: SagaOrchestrator
    audit: AuditTrailRecorder

    def execute(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        stdin: str | None = None,
        run_as: str | None = None,
    ) -> CommandResult:
        """Run one host command; a non-zero exit is a failed result, not an error."""
        return self.gateway.execute(program, args, stdin=stdin, run_as=run_as)

    def with_transaction(self, unit_of_work: Callable[[str], T]) -> T:
        """Run ``unit_of_work(transaction_id)`` in a saga that compensates on failure."""
        return self.saga.with_transaction(unit_of_work)

    def add_rollback_action(self, transaction_id: str, action: RollbackAction) -> None:
        """Register a compensation on an open saga."""
        self.saga.add_rollback_action(transaction_id, action)

    def start_operation(self, operation_id: str) -> None:
        """Mark an audited operation as pending and start its clock."""
        self.audit.start_operation(operation_id)

    def log_operation_complete(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        context: AuditContext | None = None,
    ) -> AuditLogRow | None:
        """Write the success row for a pending operation."""
        return self.audit.log_operation_complete(operation_id, entry, context)

    def log_operation_failed(
        self,
        operation_id: str,
        entry: AuditEntrySpec,
        error: BaseException,
        context: AuditContext | None = None,
    ) -> AuditLogRow | None:
        """Write the failure row for a pending operation."""
        return self.audit.log_operation_failed(operation_id, entry, error, context)


def build_provisioning_core(*, settings: ServerHubSettings) -> ProvisioningCore:
    """Build the default gateway, orchestrator, and recorder from settings."""
    from services.provisioning.audit_trail import build_audit_trail_recorder
    from services.provisioning.command_gateway import build_command_gateway
    from services.provisioning.saga import build_saga_orchestrator

    gateway = build_command_gateway(settings=settings)
    return ProvisioningCore(
        gateway=gateway,
        saga=build_saga_orchestrator(settings=settings, gateway=gateway),
        audit=build_audit_trail_recorder(settings=settings),
    )
