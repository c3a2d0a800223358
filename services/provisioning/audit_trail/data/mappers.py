"""Mapping helpers between SQL rows and audit domain rows."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from services.provisioning.audit_trail.domain import (
    AuditLogRow,
    AuditOperationType,
    AuditResourceType,
    AuditSeverity,
)


def audit_row_to_values(row: AuditLogRow) -> dict[str, Any]:
    """Convert an ``AuditLogRow`` into insert values for ``audit_logs``."""
    values = row.model_dump(mode="python")
    values["operation_type"] = row.operation_type.value
    values["resource_type"] = (
        row.resource_type.value if row.resource_type is not None else None
    )
    values["severity"] = row.severity.value
    return values


def values_to_audit_row(values: Mapping[str, Any]) -> AuditLogRow:
    """Convert a selected ``audit_logs`` row mapping into an ``AuditLogRow``."""
    created_at = values.get("created_at")
    if isinstance(created_at, datetime):
        normalized_created_at = (
            created_at if created_at.tzinfo is not None else created_at.replace(tzinfo=UTC)
        )
    else:
        normalized_created_at = datetime.now(UTC)

    resource_type = values.get("resource_type")
    return AuditLogRow(
        id=str(values["id"]),
        operation_id=values.get("operation_id"),
        operation_type=AuditOperationType(values["operation_type"]),
        resource_type=AuditResourceType(resource_type) if resource_type else None,
        resource_id=values.get("resource_id"),
        resource_name=values.get("resource_name"),
        actor_id=values.get("actor_id"),
        actor_email=values.get("actor_email"),
        ip_address=values.get("ip_address"),
        user_agent=values.get("user_agent"),
        transaction_id=values.get("transaction_id"),
        description=values.get("description"),
        old_value=values.get("old_value"),
        new_value=values.get("new_value"),
        metadata=values.get("metadata"),
        success=bool(values.get("success", True)),
        error_message=values.get("error_message"),
        severity=AuditSeverity(values.get("severity") or AuditSeverity.INFO.value),
        duration_ms=values.get("duration_ms"),
        created_at=normalized_created_at,
    )
