"""Tests for tenant account creation, rollback, and removal."""

from __future__ import annotations

import re

import pytest

from services.provisioning.audit_trail import (
    AuditContext,
    AuditOperationType,
    AuditResourceType,
    AuditSeverity,
)
from services.provisioning.workflows import (
    CreateSystemUserRequest,
    ProvisioningError,
    ResourceConflictError,
    ResourceNotFoundError,
)


def test_create_runs_steps_in_order_and_records_success(harness) -> None:
    context = AuditContext(actor_id="admin-1")
    home = f"{harness.settings.home_root}/alice"

    record = harness.system_user_workflow.create(
        CreateSystemUserRequest(username="alice"), context
    )

    calls = harness.gateway.calls()
    assert calls[:3] == [
        ("id", "alice"),
        ("getent", "passwd"),
        ("useradd", "-m", "-d", home, "-s", "/bin/bash", "-u", "1001", "alice"),
    ]
    assert [call[2] for call in calls if call[0] == "mkdir"] == [
        f"{home}/public_html",
        f"{home}/logs",
        f"{home}/tmp",
        f"{home}/ssl",
        f"{home}/.ssh",
    ]
    assert ("chown", "-R", "alice:alice", home) in calls

    tee = harness.gateway.invocations[-1]
    assert tee.program == "tee"
    assert tee.run_as == "alice"
    assert "Account: alice" in tee.stdin

    assert record.uid == 1001 and record.gid == 1001
    assert harness.users.list_records() == (record,)

    (row,) = harness.audit_rows.list_rows()
    assert row.success is True
    assert row.operation_type is AuditOperationType.CREATE
    assert row.resource_type is AuditResourceType.USER
    assert row.resource_id == record.id
    assert row.actor_id == "admin-1"
    assert row.transaction_id is not None
    assert row.operation_id.startswith("create-system-user-")
    assert row.description == "Created system user alice (UID: 1001)"


def test_password_is_piped_to_chpasswd(harness) -> None:
    harness.system_user_workflow.create(
        CreateSystemUserRequest(username="alice", password="s3cret")
    )

    chpasswd = next(i for i in harness.gateway.invocations if i.program == "chpasswd")
    assert chpasswd.args == ()
    assert chpasswd.stdin == "alice:s3cret"


def test_sftp_only_switches_shell(harness) -> None:
    record = harness.system_user_workflow.create(
        CreateSystemUserRequest(username="alice", sftp_only=True)
    )

    assert ("usermod", "-s", "/usr/sbin/nologin", "alice") in harness.gateway.calls()
    assert record.shell == "/usr/sbin/nologin"
    assert record.sftp_only is True


def test_useradd_failure_reports_stderr_and_needs_no_rollback(harness) -> None:
    harness.gateway.replace("useradd", exit_code=9, stderr="useradd: user exists\n")

    with pytest.raises(ProvisioningError, match="Failed to create system user: useradd: user exists"):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    programs = [call[0] for call in harness.gateway.calls()]
    assert "userdel" not in programs
    assert harness.users.list_records() == ()
    (row,) = harness.audit_rows.list_rows()
    assert row.success is False
    assert row.severity is AuditSeverity.ERROR
    assert "useradd: user exists" in row.error_message


def test_directory_failure_undoes_earlier_steps_newest_first(harness) -> None:
    home = f"{harness.settings.home_root}/alice"
    harness.gateway.script("mkdir")
    harness.gateway.script("mkdir")
    harness.gateway.script("mkdir", exit_code=1, stderr="mkdir: No space left on device\n")

    with pytest.raises(ProvisioningError, match=re.escape(f"Failed to create directory {home}/tmp")):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    calls = harness.gateway.calls()
    failed_at = calls.index(("mkdir", "-p", f"{home}/tmp"))
    assert calls[failed_at + 1 :] == [
        ("rm", "-rf", f"{home}/logs"),
        ("rm", "-rf", f"{home}/public_html"),
        ("userdel", "-r", "-f", "alice"),
    ]
    assert harness.saga.active_transaction_count() == 0
    (row,) = harness.audit_rows.list_rows()
    assert row.success is False


def test_sftp_shell_failure_rolls_back_account(harness) -> None:
    harness.gateway.replace("usermod", exit_code=6, stderr="usermod: shell not allowed\n")

    with pytest.raises(ProvisioningError, match="Failed to set SFTP shell: usermod: shell not allowed"):
        harness.system_user_workflow.create(
            CreateSystemUserRequest(username="alice", sftp_only=True)
        )

    assert harness.gateway.calls()[-1] == ("userdel", "-r", "-f", "alice")
    assert harness.users.list_records() == ()
    (row,) = harness.audit_rows.list_rows()
    assert row.success is False
    assert "usermod: shell not allowed" in row.error_message


def test_permission_failure_rolls_back_directories_and_account(harness) -> None:
    home = f"{harness.settings.home_root}/alice"
    harness.gateway.replace("chmod", exit_code=1, stderr="chmod: Operation not permitted\n")

    with pytest.raises(ProvisioningError, match=re.escape(f"Failed to set permissions on {home}")):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    calls = harness.gateway.calls()
    failed_at = calls.index(("chmod", "750", home))
    assert calls[failed_at + 1 :] == [
        ("rm", "-rf", f"{home}/.ssh"),
        ("rm", "-rf", f"{home}/ssl"),
        ("rm", "-rf", f"{home}/tmp"),
        ("rm", "-rf", f"{home}/logs"),
        ("rm", "-rf", f"{home}/public_html"),
        ("userdel", "-r", "-f", "alice"),
    ]
    assert harness.users.list_records() == ()
    (row,) = harness.audit_rows.list_rows()
    assert row.success is False


def test_ownership_failure_stops_before_permissions(harness) -> None:
    harness.gateway.replace("chown", exit_code=1, stderr="chown: invalid user\n")

    with pytest.raises(ProvisioningError, match="Failed to set home ownership: chown: invalid user"):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    programs = [call[0] for call in harness.gateway.calls()]
    assert "chmod" not in programs
    assert "tee" not in programs
    assert programs[-1] == "userdel"


def test_existing_record_conflicts_before_any_command(harness) -> None:
    harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))
    before = len(harness.gateway.invocations)

    with pytest.raises(ResourceConflictError, match='User "alice" already exists'):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    assert len(harness.gateway.invocations) == before


def test_existing_host_account_conflicts_without_audit_row(harness) -> None:
    harness.gateway.replace("id", stdout="uid=1000(existing)\n")

    with pytest.raises(ResourceConflictError, match="already exists on this server"):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="existing"))

    assert harness.audit_rows.list_rows() == ()


def test_uid_allocation_skips_stored_and_host_uids(harness) -> None:
    harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))
    second = harness.system_user_workflow.create(CreateSystemUserRequest(username="bob"))

    assert second.uid == 1002


def test_uid_range_exhaustion_fails_operation(harness) -> None:
    harness.gateway.replace("getent", stdout="last:x:60000:60000::/home/last:/bin/sh\n")

    with pytest.raises(ProvisioningError, match="No available UIDs"):
        harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    assert "useradd" not in [call[0] for call in harness.gateway.calls()]


def test_delete_tolerates_missing_host_account(harness) -> None:
    record = harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))
    harness.gateway.replace("userdel", exit_code=6, stderr="userdel: user 'alice' does not exist\n")

    harness.system_user_workflow.delete(record.id)

    assert harness.users.list_records() == ()
    rows = harness.audit_rows.list_rows()
    assert rows[-1].operation_type is AuditOperationType.DELETE
    assert rows[-1].success is True


def test_delete_failure_keeps_record_and_audits_failure(harness) -> None:
    record = harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))
    harness.gateway.replace(
        "userdel",
        exit_code=8,
        stderr="userdel: user alice is currently used by process 42\n",
    )

    with pytest.raises(ProvisioningError, match="Failed to delete system user"):
        harness.system_user_workflow.delete(record.id)

    assert harness.users.get(record.id) == record
    assert harness.audit_rows.list_rows()[-1].success is False


def test_delete_unknown_user_raises_not_found(harness) -> None:
    with pytest.raises(ResourceNotFoundError):
        harness.system_user_workflow.delete("01ARZ3NDEKTSV4RRFFQ69G5FAV")


def test_set_password_logs_security_event_before_chpasswd(harness) -> None:
    record = harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))

    harness.system_user_workflow.set_password(
        record.id, "n3w-pass", AuditContext(actor_id="admin-1")
    )

    row = harness.audit_rows.list_rows()[-1]
    assert row.operation_type is AuditOperationType.PASSWORD_RESET
    assert row.metadata == {"system_user_id": record.id}
    assert harness.gateway.invocations[-1].stdin == "alice:n3w-pass"


def test_set_password_failure_raises(harness) -> None:
    record = harness.system_user_workflow.create(CreateSystemUserRequest(username="alice"))
    harness.gateway.replace("chpasswd", exit_code=1, stderr="chpasswd: (line 1) password rejected\n")

    with pytest.raises(ProvisioningError, match="Failed to set password"):
        harness.system_user_workflow.set_password(record.id, "weak")
