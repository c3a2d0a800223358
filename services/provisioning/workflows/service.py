"""Wiring for the provisioning workflows over one core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from packages.serverhub_shared.config import ServerHubSettings
from services.provisioning.workflows.domains import DomainWorkflow
from services.provisioning.workflows.interfaces import DomainStore, SystemUserStore
from services.provisioning.workflows.system_users import SystemUserWorkflow

if TYPE_CHECKING:
    from services.provisioning.core import ProvisioningCore


@dataclass(frozen=True)
class ProvisioningWorkflows:
    """Workflows sharing one gateway, saga orchestrator, and recorder."""

    system_users: SystemUserWorkflow
    domains: DomainWorkflow


def build_provisioning_workflows(
    *,
    settings: ServerHubSettings,
    core: ProvisioningCore,
    user_store: SystemUserStore | None = None,
    domain_store: DomainStore | None = None,
) -> ProvisioningWorkflows:
    """Build workflows over ``core``; stores default to in-memory."""
    from services.provisioning.workflows.config import resolve_workflow_settings
    from services.provisioning.workflows.data import (
        InMemoryDomainStore,
        InMemorySystemUserStore,
    )

    resolved = resolve_workflow_settings(settings)
    system_users = SystemUserWorkflow(
        settings=resolved,
        gateway=core.gateway,
        saga=core.saga,
        audit=core.audit,
        store=user_store or InMemorySystemUserStore(),
    )
    domains = DomainWorkflow(
        settings=resolved,
        gateway=core.gateway,
        saga=core.saga,
        audit=core.audit,
        store=domain_store or InMemoryDomainStore(),
        system_users=system_users,
    )
    return ProvisioningWorkflows(system_users=system_users, domains=domains)
