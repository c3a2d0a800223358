"""Audit trail data layer exports."""

from services.provisioning.audit_trail.data.repository import (
    InMemoryAuditLogRepository,
    SqlAuditLogRepository,
)
from services.provisioning.audit_trail.data.runtime import (
    AuditTrailPostgresRuntime,
    audit_trail_postgres_schema,
)
from services.provisioning.audit_trail.data.schema import audit_logs, metadata

__all__ = [
    "AuditTrailPostgresRuntime",
    "InMemoryAuditLogRepository",
    "SqlAuditLogRepository",
    "audit_logs",
    "audit_trail_postgres_schema",
    "metadata",
]
