"""Tenant Unix account provisioning workflow."""

from __future__ import annotations

from datetime import UTC, datetime

from packages.serverhub_shared.ids import new_ulid
from packages.serverhub_shared.logging import get_logger
from services.provisioning.audit_trail import (
    AuditContext,
    AuditEntrySpec,
    AuditOperationType,
    AuditResourceType,
    AuditTrailRecorder,
    operation_id_for,
)
from services.provisioning.command_gateway import CommandGateway, CommandResult
from services.provisioning.saga import SagaHandle, SagaOrchestrator
from services.provisioning.workflows.config import WorkflowSettings
from services.provisioning.workflows.domain import (
    CreateSystemUserRequest,
    SystemUserRecord,
)
from services.provisioning.workflows.errors import (
    ProvisioningError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from services.provisioning.workflows.interfaces import SystemUserStore
from services.provisioning.workflows.paths import HostPathLayout

_LOGGER = get_logger(__name__)

_DEFAULT_INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Welcome</title>
</head>
<body>
    <h1>Welcome!</h1>
    <p>This site is ready for configuration.</p>
    <p><small>Account: {username}</small></p>
</body>
</html>
"""


class SystemUserWorkflow:
    """Create and remove tenant accounts with saga-backed rollback."""

    def __init__(
        self,
        *,
        settings: WorkflowSettings,
        gateway: CommandGateway,
        saga: SagaOrchestrator,
        audit: AuditTrailRecorder,
        store: SystemUserStore,
    ) -> None:
        self._settings = settings
        self._layout = HostPathLayout.from_settings(settings)
        self._gateway = gateway
        self._saga = saga
        self._audit = audit
        self._store = store

    def create(
        self,
        request: CreateSystemUserRequest,
        context: AuditContext | None = None,
    ) -> SystemUserRecord:
        """Create the account, its home layout, and its record."""
        username = request.username
        if self._store.find_by_username(username) is not None:
            raise ResourceConflictError(f'User "{username}" already exists')
        if self._gateway.execute("id", [username]).success:
            raise ResourceConflictError(
                f'System user "{username}" already exists on this server'
            )

        entry = AuditEntrySpec(
            operation_type=AuditOperationType.CREATE,
            resource_type=AuditResourceType.USER,
            resource_name=username,
            description=f"Create system user {username}",
        )
        with (
            self._audit.operation(
                operation_id_for("create-system-user"), entry, context
            ) as scope,
            self._saga.transaction() as saga,
        ):
            scope.bind_transaction(saga.transaction_id)
            uid = self._next_uid()
            home = self._layout.user_home(username)
            shell = request.shell or self._settings.default_shell

            self._require(
                self._gateway.execute(
                    "useradd",
                    ["-m", "-d", home, "-s", shell, "-u", str(uid), username],
                ),
                "Failed to create system user",
            )
            saga.add_rollback_action(
                lambda: self._undo("userdel", ["-r", "-f", username])
            )

            if request.password:
                self._set_password(username, request.password)

            self._create_directory_structure(username, saga)

            if request.sftp_only:
                shell = self._settings.sftp_shell
                self._require(
                    self._gateway.execute("usermod", ["-s", shell, username]),
                    "Failed to set SFTP shell",
                )

            record = SystemUserRecord(
                id=new_ulid(),
                username=username,
                uid=uid,
                gid=uid,
                home_directory=home,
                shell=shell,
                ssh_enabled=request.ssh_enabled,
                sftp_only=request.sftp_only,
                owner_id=request.owner_id,
                created_at=datetime.now(UTC),
            )
            self._store.save(record)
            saga.add_rollback_action(lambda: self._store.delete(record.id))

            scope.update(
                resource_id=record.id,
                description=f"Created system user {username} (UID: {uid})",
            )
            _LOGGER.info(
                "system user created", extra={"username": username, "uid": uid}
            )
            return record

    def delete(self, user_id: str, context: AuditContext | None = None) -> None:
        """Remove the account, its home directory, and its record."""
        record = self._store.get(user_id)
        if record is None:
            raise ResourceNotFoundError("System user not found")

        entry = AuditEntrySpec(
            operation_type=AuditOperationType.DELETE,
            resource_type=AuditResourceType.USER,
            resource_id=user_id,
            resource_name=record.username,
            description=f"Deleted system user {record.username}",
        )
        with self._audit.operation(
            operation_id_for("delete-system-user"), entry, context
        ):
            result = self._gateway.execute("userdel", ["-r", "-f", record.username])
            if not result.success and "does not exist" not in result.stderr:
                raise ProvisioningError(
                    f"Failed to delete system user: {result.stderr.strip()}"
                )
            self._store.delete(user_id)
            _LOGGER.info("system user deleted", extra={"username": record.username})

    def set_password(
        self,
        user_id: str,
        password: str,
        context: AuditContext | None = None,
    ) -> None:
        """Record a password-reset security event, then set the password."""
        record = self._store.get(user_id)
        if record is None:
            raise ResourceNotFoundError("System user not found")

        self._audit.log_security_event(
            AuditOperationType.PASSWORD_RESET,
            f"Password changed for system user {record.username}",
            context,
            {"system_user_id": user_id},
        )
        self._set_password(record.username, password)

    def _next_uid(self) -> int:
        """Return one past the highest UID in range across records and passwd."""
        low, high = self._settings.min_uid, self._settings.max_uid
        highest = max(self._store.max_uid() or low - 1, low - 1)

        result = self._gateway.execute("getent", ["passwd"])
        if result.success:
            for line in result.stdout.splitlines():
                parts = line.split(":")
                if len(parts) < 3 or not parts[2].isdigit():
                    continue
                uid = int(parts[2])
                if low <= uid <= high:
                    highest = max(highest, uid)

        if highest + 1 > high:
            raise ProvisioningError("No available UIDs")
        return highest + 1

    def _set_password(self, username: str, password: str) -> None:
        self._require(
            self._gateway.execute("chpasswd", stdin=f"{username}:{password}"),
            "Failed to set password",
        )

    def _create_directory_structure(self, username: str, saga: SagaHandle) -> None:
        """Create the home layout, fix ownership, and seed ``index.html``."""
        home = self._layout.user_home(username)
        public_html = self._layout.public_html(username)
        ssh_dir = self._layout.ssh_dir(username)

        for directory in (
            public_html,
            self._layout.log_dir(username),
            self._layout.tmp_dir(username),
            self._layout.ssl_dir(username),
            ssh_dir,
        ):
            self._require(
                self._gateway.execute("mkdir", ["-p", directory]),
                f"Failed to create directory {directory}",
            )
            saga.add_rollback_action(
                lambda directory=directory: self._undo("rm", ["-rf", directory])
            )

        self._require(
            self._gateway.execute("chown", ["-R", f"{username}:{username}", home]),
            "Failed to set home ownership",
        )
        for mode, path in (("750", home), ("755", public_html), ("700", ssh_dir)):
            self._require(
                self._gateway.execute("chmod", [mode, path]),
                f"Failed to set permissions on {path}",
            )

        index = self._gateway.execute(
            "tee",
            [f"{public_html}/index.html"],
            stdin=_DEFAULT_INDEX_HTML.format(username=username),
            run_as=username,
        )
        if not index.success:
            _LOGGER.warning(
                "default index.html not written",
                extra={"username": username, "stderr": index.stderr.strip()},
            )

    def _undo(self, program: str, args: list[str]) -> None:
        """Run a compensating command; a non-zero exit is logged only."""
        result = self._gateway.execute(program, args)
        if not result.success:
            _LOGGER.warning(
                "compensating command exited non-zero",
                extra={"program": program, "stderr": result.stderr.strip()},
            )

    @staticmethod
    def _require(result: CommandResult, message: str) -> CommandResult:
        if not result.success:
            raise ProvisioningError(f"{message}: {result.stderr.strip()}")
        return result
