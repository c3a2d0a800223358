"""Audit Trail Recorder package exports."""

from services.provisioning.audit_trail.config import (
    SERVICE_COMPONENT_ID,
    AuditTrailSettings,
    resolve_audit_trail_settings,
)
from services.provisioning.audit_trail.domain import (
    SECURITY_OPERATION_TYPES,
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
from services.provisioning.audit_trail.implementation import (
    DefaultAuditTrailRecorder,
)
from services.provisioning.audit_trail.interfaces import AuditLogRepository
from services.provisioning.audit_trail.service import (
    AuditPage,
    AuditTrailRecorder,
    build_audit_trail_recorder,
    operation_id_for,
)

__all__ = [
    "SECURITY_OPERATION_TYPES",
    "SERVICE_COMPONENT_ID",
    "AuditContext",
    "AuditEntrySpec",
    "AuditLogQuery",
    "AuditLogRepository",
    "AuditLogRow",
    "AuditOperationType",
    "AuditPage",
    "AuditResourceType",
    "AuditSeverity",
    "AuditTrailRecorder",
    "AuditTrailSettings",
    "DefaultAuditTrailRecorder",
    "OperationScope",
    "OperationStateError",
    "build_audit_trail_recorder",
    "operation_id_for",
    "resolve_audit_trail_settings",
]
