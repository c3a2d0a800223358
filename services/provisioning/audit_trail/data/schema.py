"""Table models for the audit trail."""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

from packages.serverhub_shared.ids import ulid_primary_key_column

metadata = MetaData()

audit_logs = Table(
    "audit_logs",
    metadata,
    ulid_primary_key_column("id", length_constraint_name="ck_audit_logs_id_ulid_16"),
    Column("operation_id", String(128), nullable=True),
    Column("operation_type", String(32), nullable=False),
    Column("resource_type", String(32), nullable=True),
    Column("resource_id", String(128), nullable=True),
    Column("resource_name", String(255), nullable=True),
    Column("actor_id", String(128), nullable=True),
    Column("actor_email", String(255), nullable=True),
    Column("ip_address", String(64), nullable=True),
    Column("user_agent", String(512), nullable=True),
    Column("transaction_id", String(26), nullable=True),
    Column("description", Text, nullable=True),
    Column("old_value", JSON, nullable=True),
    Column("new_value", JSON, nullable=True),
    Column("metadata", JSON, nullable=True),
    Column("success", Boolean, nullable=False),
    Column("error_message", Text, nullable=True),
    Column("severity", String(16), nullable=False, server_default="INFO"),
    Column("duration_ms", Integer, nullable=True),
    Column(
        "created_at", DateTime(timezone=True), nullable=False, server_default=func.now()
    ),
    Index("ix_audit_logs_actor_created", "actor_id", "created_at"),
    Index("ix_audit_logs_operation_type_created", "operation_type", "created_at"),
    Index("ix_audit_logs_resource", "resource_type", "resource_id"),
    Index("ix_audit_logs_severity_created", "severity", "created_at"),
    Index("ix_audit_logs_operation_id", "operation_id"),
)
