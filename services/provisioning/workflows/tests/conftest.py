"""Fixtures wiring workflows to a scripted gateway and in-memory stores."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

from services.provisioning.audit_trail import AuditTrailSettings, DefaultAuditTrailRecorder
from services.provisioning.audit_trail.data import InMemoryAuditLogRepository
from services.provisioning.command_gateway import (
    CommandGateway,
    CommandInvocation,
    CommandResult,
)
from services.provisioning.saga import DefaultSagaOrchestrator, SagaSettings
from services.provisioning.workflows import (
    DomainWorkflow,
    SystemUserWorkflow,
    WorkflowSettings,
)
from services.provisioning.workflows.data import (
    InMemoryDomainStore,
    InMemorySystemUserStore,
)

GETENT_PASSWD = (
    "root:x:0:0:root:/root:/bin/bash\n"
    "nobody:x:65534:65534:nobody:/nonexistent:/usr/sbin/nologin\n"
    "existing:x:1000:1000::/home/existing:/bin/bash\n"
)


class ScriptedGateway(CommandGateway):
    """Gateway fake returning scripted results and recording every call.

    Programs without a script succeed, except ``id`` which reports an unknown
    user so conflict checks pass.
    """

    def __init__(self) -> None:
        self.invocations: list[CommandInvocation] = []
        self.side_effects: dict[str, Callable[[CommandInvocation], None]] = {}
        self._scripts: dict[str, list[tuple[int, str, str]]] = {
            "id": [(1, "", "id: no such user\n")],
            "getent": [(0, GETENT_PASSWD, "")],
        }

    def script(
        self, program: str, *, exit_code: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        """Queue one result for ``program``; the last queued result repeats."""
        self._scripts.setdefault(program, []).append((exit_code, stdout, stderr))

    def replace(
        self, program: str, *, exit_code: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self._scripts[program] = [(exit_code, stdout, stderr)]

    def run(self, invocation: CommandInvocation) -> CommandResult:
        self.invocations.append(invocation)
        effect = self.side_effects.get(invocation.program)
        if effect is not None:
            effect(invocation)
        queue = self._scripts.get(invocation.program, [])
        exit_code, stdout, stderr = (0, "", "")
        if queue:
            exit_code, stdout, stderr = queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(
            program=invocation.program,
            argv=(invocation.program, *invocation.args),
            run_as=invocation.run_as,
            success=exit_code == 0,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_ms=0,
        )

    def calls(self) -> list[tuple[str, ...]]:
        """Return each invocation as ``(program, *args)``."""
        return [(inv.program, *inv.args) for inv in self.invocations]


@dataclass
class WorkflowHarness:
    gateway: ScriptedGateway
    audit: DefaultAuditTrailRecorder
    audit_rows: InMemoryAuditLogRepository
    users: InMemorySystemUserStore
    domains: InMemoryDomainStore
    saga: DefaultSagaOrchestrator
    system_user_workflow: SystemUserWorkflow
    domain_workflow: DomainWorkflow
    settings: WorkflowSettings


@pytest.fixture
def harness(tmp_path: Path) -> WorkflowHarness:
    settings = WorkflowSettings(
        home_root=str(tmp_path / "home"),
        apache_sites_available=str(tmp_path / "sites-available"),
        apache_sites_enabled=str(tmp_path / "sites-enabled"),
    )
    gateway = ScriptedGateway()
    audit_rows = InMemoryAuditLogRepository()
    audit = DefaultAuditTrailRecorder(
        settings=AuditTrailSettings(backend="memory"), repository=audit_rows
    )
    saga = DefaultSagaOrchestrator(
        settings=SagaSettings(snapshot_dir=str(tmp_path / "snapshots"))
    )
    users = InMemorySystemUserStore()
    domains = InMemoryDomainStore()
    system_user_workflow = SystemUserWorkflow(
        settings=settings, gateway=gateway, saga=saga, audit=audit, store=users
    )
    domain_workflow = DomainWorkflow(
        settings=settings,
        gateway=gateway,
        saga=saga,
        audit=audit,
        store=domains,
        system_users=system_user_workflow,
    )
    return WorkflowHarness(
        gateway=gateway,
        audit=audit,
        audit_rows=audit_rows,
        users=users,
        domains=domains,
        saga=saga,
        system_user_workflow=system_user_workflow,
        domain_workflow=domain_workflow,
        settings=settings,
    )
