"""End-to-end tests for the five-call provisioning surface."""

from __future__ import annotations

from pathlib import Path

import pytest

from packages.serverhub_shared.config import ServerHubSettings
from services.provisioning.audit_trail import (
    AuditEntrySpec,
    AuditOperationType,
    AuditResourceType,
    DefaultAuditTrailRecorder,
)
from services.provisioning.command_gateway import (
    CommandSpawnError,
    SubprocessCommandGateway,
)
from services.provisioning.core import ProvisioningCore, build_provisioning_core
from services.provisioning.saga import DefaultSagaOrchestrator
from services.provisioning.workflows import build_provisioning_workflows


class _Step3Failed(RuntimeError):
    pass


@pytest.fixture
def core(tmp_path: Path) -> ProvisioningCore:
    settings = ServerHubSettings(
        components={
            "service": {
                "audit_trail": {"backend": "memory"},
                "saga": {"snapshot_dir": str(tmp_path / "snapshots")},
                "command_gateway": {"privileged_programs": []},
            }
        }
    )
    return build_provisioning_core(settings=settings)


def test_build_wires_default_components(core) -> None:
    assert isinstance(core.gateway, SubprocessCommandGateway)
    assert isinstance(core.saga, DefaultSagaOrchestrator)
    assert isinstance(core.audit, DefaultAuditTrailRecorder)


def test_rollback_b_then_a_then_original_error(core) -> None:
    ran: list[str] = []
    entry = AuditEntrySpec(
        operation_type=AuditOperationType.CREATE,
        resource_type=AuditResourceType.DOMAIN,
        resource_name="example.com",
    )

    def unit_of_work(transaction_id: str) -> None:
        core.execute("true")
        core.add_rollback_action(transaction_id, lambda: ran.append("A"))
        core.execute("true")
        core.add_rollback_action(transaction_id, lambda: ran.append("B"))
        raise _Step3Failed("step 3 failed")

    core.start_operation("op-1")
    with pytest.raises(_Step3Failed, match="step 3 failed") as excinfo:
        try:
            core.with_transaction(unit_of_work)
        except Exception as exc:
            core.log_operation_failed("op-1", entry, exc)
            raise

    assert ran == ["B", "A"]
    assert str(excinfo.value) == "step 3 failed"
    rows, total = core.audit.failed_operations()
    assert total == 1
    assert rows[0].operation_id == "op-1"
    assert rows[0].error_message == "step 3 failed"


def test_success_path_completes_operation_without_compensation(core) -> None:
    ran: list[str] = []
    entry = AuditEntrySpec(operation_type=AuditOperationType.SYSTEM_COMMAND)

    core.start_operation("op-2")
    result = core.with_transaction(
        lambda transaction_id: (
            core.add_rollback_action(transaction_id, lambda: ran.append("undo")),
            core.execute("cat", stdin="hello").stdout,
        )[1]
    )
    row = core.log_operation_complete("op-2", entry)

    assert result == "hello"
    assert ran == []
    assert row is not None and row.success is True


def test_spawn_failure_is_distinct_from_non_zero_exit(core) -> None:
    assert core.execute("false").success is False
    with pytest.raises(CommandSpawnError):
        core.execute("serverhub-missing-binary")


def test_workflows_build_on_core(core) -> None:
    settings = ServerHubSettings()

    workflows = build_provisioning_workflows(settings=settings, core=core)

    assert workflows.domains is not None
    assert workflows.system_users is not None


def test_interrupt_inside_audited_transaction_compensates_and_records(core) -> None:
    ran: list[str] = []
    entry = AuditEntrySpec(
        operation_type=AuditOperationType.CREATE,
        resource_type=AuditResourceType.USER,
        resource_name="alice",
    )

    with pytest.raises(KeyboardInterrupt):
        with core.audit.operation("op-k", entry), core.saga.transaction() as saga:
            core.add_rollback_action(saga.transaction_id, lambda: ran.append("userdel"))
            raise KeyboardInterrupt

    assert ran == ["userdel"]
    assert core.saga.active_transaction_count() == 0
    rows, total = core.audit.failed_operations()
    assert total == 1
    assert rows[0].operation_id == "op-k"


def test_snapshot_through_gateway_restores_file(core, tmp_path: Path) -> None:
    config = tmp_path / "site.conf"
    config.write_text("listen 80;\n", encoding="utf-8")

    def unit_of_work(transaction_id: str) -> None:
        core.saga.snapshot_file(transaction_id, config)
        config.write_text("listen 8080;\n", encoding="utf-8")
        raise _Step3Failed("reload failed")

    with pytest.raises(_Step3Failed):
        core.with_transaction(unit_of_work)

    assert config.read_text(encoding="utf-8") == "listen 80;\n"
    assert list((tmp_path / "snapshots").iterdir()) == []


@pytest.mark.parametrize(
    "name",
    [
        "execute",
        "with_transaction",
        "add_rollback_action",
        "start_operation",
        "log_operation_complete",
        "log_operation_failed",
    ],
)
def test_public_calls_are_documented(name: str) -> None:
    doc = getattr(ProvisioningCore, name).__doc__

    assert doc is not None and doc.strip()
