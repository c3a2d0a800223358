"""Provisioning workflow package exports."""

from services.provisioning.workflows.config import (
    SERVICE_COMPONENT_ID,
    WorkflowSettings,
    resolve_workflow_settings,
)
from services.provisioning.workflows.domain import (
    CreateDomainRequest,
    CreateSystemUserRequest,
    DomainRecord,
    DomainStatus,
    RuntimeType,
    SystemUserRecord,
    SystemUserStatus,
    username_for_domain,
)
from services.provisioning.workflows.domains import DomainWorkflow
from services.provisioning.workflows.errors import (
    ProvisioningError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from services.provisioning.workflows.interfaces import DomainStore, SystemUserStore
from services.provisioning.workflows.paths import HostPathLayout
from services.provisioning.workflows.service import (
    ProvisioningWorkflows,
    build_provisioning_workflows,
)
from services.provisioning.workflows.system_users import SystemUserWorkflow
from services.provisioning.workflows.vhost import VhostSpec, render_vhost

__all__ = [
    "SERVICE_COMPONENT_ID",
    "CreateDomainRequest",
    "CreateSystemUserRequest",
    "DomainRecord",
    "DomainStatus",
    "DomainStore",
    "DomainWorkflow",
    "HostPathLayout",
    "ProvisioningError",
    "ProvisioningWorkflows",
    "ResourceConflictError",
    "ResourceNotFoundError",
    "RuntimeType",
    "SystemUserRecord",
    "SystemUserStatus",
    "SystemUserStore",
    "SystemUserWorkflow",
    "VhostSpec",
    "WorkflowSettings",
    "build_provisioning_workflows",
    "render_vhost",
    "resolve_workflow_settings",
    "username_for_domain",
]
