"""Hosted domain provisioning workflow."""

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
from services.provisioning.command_gateway import CommandGateway
from services.provisioning.saga import SagaHandle, SagaOrchestrator
from services.provisioning.workflows.config import WorkflowSettings
from services.provisioning.workflows.domain import (
    CreateDomainRequest,
    CreateSystemUserRequest,
    DomainRecord,
    DomainStatus,
    RuntimeType,
    username_for_domain,
)
from services.provisioning.workflows.errors import (
    ProvisioningError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from services.provisioning.workflows.interfaces import DomainStore
from services.provisioning.workflows.paths import HostPathLayout
from services.provisioning.workflows.system_users import SystemUserWorkflow
from services.provisioning.workflows.vhost import VhostSpec, render_vhost

_LOGGER = get_logger(__name__)


class DomainWorkflow:
    """Create and remove hosted domains.

    Domain creation provisions the tenant account through
    ``SystemUserWorkflow`` as one step. That nested call runs its own saga and
    audit operation; the outer saga undoes it by deleting the account.
    """

    def __init__(
        self,
        *,
        settings: WorkflowSettings,
        gateway: CommandGateway,
        saga: SagaOrchestrator,
        audit: AuditTrailRecorder,
        store: DomainStore,
        system_users: SystemUserWorkflow,
    ) -> None:
        self._settings = settings
        self._layout = HostPathLayout.from_settings(settings)
        self._gateway = gateway
        self._saga = saga
        self._audit = audit
        self._store = store
        self._system_users = system_users

    def create(
        self,
        request: CreateDomainRequest,
        context: AuditContext | None = None,
    ) -> DomainRecord:
        """Provision account, vhost, and record; activate after Apache reloads."""
        name = request.name
        if self._store.find_by_name(name) is not None:
            raise ResourceConflictError(f'Domain "{name}" already exists')

        entry = AuditEntrySpec(
            operation_type=AuditOperationType.CREATE,
            resource_type=AuditResourceType.DOMAIN,
            resource_name=name,
            description=f"Create domain {name}",
        )
        with (
            self._audit.operation(operation_id_for("create-domain"), entry, context) as scope,
            self._saga.transaction() as saga,
        ):
            scope.bind_transaction(saga.transaction_id)
            username = username_for_domain(name)

            user = self._system_users.create(
                CreateSystemUserRequest(
                    username=username,
                    ssh_enabled=True,
                    sftp_only=False,
                    owner_id=request.owner_id,
                ),
                context,
            )
            saga.add_rollback_action(
                lambda: self._system_users.delete(user.id, context)
            )

            php_version = None
            if request.runtime is RuntimeType.PHP:
                php_version = request.php_version or self._settings.default_php_version
            record = DomainRecord(
                id=new_ulid(),
                name=name,
                status=DomainStatus.PENDING,
                document_root=self._layout.public_html(username),
                runtime=request.runtime,
                php_version=php_version,
                www_redirect=request.www_redirect,
                system_user_id=user.id,
                owner_id=request.owner_id,
                created_at=datetime.now(UTC),
            )
            self._store.save(record)
            saga.add_rollback_action(lambda: self._store.delete(record.id))

            content = render_vhost(
                VhostSpec(
                    domain=name,
                    document_root=record.document_root,
                    username=username,
                    runtime=request.runtime,
                    php_version=php_version or self._settings.default_php_version,
                    node_port=request.node_port or 3000,
                    www_redirect=request.www_redirect,
                    custom_error_pages=request.custom_error_pages,
                ),
                self._layout,
            )
            self._write_vhost(name, content, saga)
            self._enable_site(name, saga)

            configtest = self._gateway.execute("apachectl", ["configtest"])
            if not configtest.success:
                raise ProvisioningError(
                    f"Apache configuration error: {configtest.stderr.strip()}"
                )
            self._reload_apache()

            record = record.model_copy(update={"status": DomainStatus.ACTIVE})
            self._store.save(record)

            scope.update(
                resource_id=record.id,
                description=f"Created domain {name}",
                metadata={"system_user_id": user.id},
            )
            _LOGGER.info("domain created", extra={"domain": name})
            return record

    def delete(self, domain_id: str, context: AuditContext | None = None) -> None:
        """Disable the site, drop its vhost, reload, and remove the account."""
        record = self._store.get(domain_id)
        if record is None:
            raise ResourceNotFoundError("Domain not found")

        entry = AuditEntrySpec(
            operation_type=AuditOperationType.DELETE,
            resource_type=AuditResourceType.DOMAIN,
            resource_id=domain_id,
            resource_name=record.name,
            description=f"Deleted domain {record.name}",
        )
        with self._audit.operation(operation_id_for("delete-domain"), entry, context):
            self._disable_site(record.name)
            self._delete_vhost(record.name)
            self._reload_apache()
            self._system_users.delete(record.system_user_id, context)
            self._store.delete(domain_id)
            _LOGGER.info("domain deleted", extra={"domain": record.name})

    def _write_vhost(self, name: str, content: str, saga: SagaHandle) -> str:
        """Snapshot the current vhost file, then overwrite it."""
        path = self._layout.vhost_path(name)
        saga.snapshot_file(path)
        result = self._gateway.execute("tee", [path], stdin=content)
        if not result.success:
            raise ProvisioningError(f"Failed to write vhost file: {result.stderr.strip()}")
        _LOGGER.info("vhost written", extra={"path": path})
        return path

    def _enable_site(self, name: str, saga: SagaHandle) -> None:
        if not self._settings.use_a2ensite:
            return
        result = self._gateway.execute("a2ensite", [f"{name}.conf"])
        if not result.success:
            raise ProvisioningError(f"Failed to enable site: {result.stderr.strip()}")
        saga.add_rollback_action(lambda: self._disable_site(name))

    def _disable_site(self, name: str) -> None:
        if not self._settings.use_a2ensite:
            self._gateway.execute("rm", ["-f", self._layout.vhost_path(name)])
            return
        result = self._gateway.execute("a2dissite", [f"{name}.conf"])
        if not result.success and "does not exist" not in result.stderr:
            raise ProvisioningError(f"Failed to disable site: {result.stderr.strip()}")

    def _delete_vhost(self, name: str) -> None:
        result = self._gateway.execute("rm", ["-f", self._layout.vhost_path(name)])
        if not result.success:
            _LOGGER.warning(
                "vhost file not removed",
                extra={"domain": name, "stderr": result.stderr.strip()},
            )
        if self._settings.use_a2ensite:
            self._gateway.execute("rm", ["-f", self._layout.vhost_enabled_path(name)])

    def _reload_apache(self) -> None:
        result = self._gateway.execute("systemctl", ["reload", self._layout.apache_service])
        if not result.success:
            raise ProvisioningError(f"Failed to reload Apache: {result.stderr.strip()}")
