"""create audit trail tables"""

from __future__ import annotations

from alembic import context, op
import sqlalchemy as sa

from packages.serverhub_shared.ids import UlidBinary, ulid_length_check

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

_DEFAULT_SCHEMA = "audit_trail"


def _schema() -> str | None:
    """Return the owned schema on PostgreSQL; other dialects use the default."""
    if op.get_bind().dialect.name != "postgresql":
        return None
    return context.config.attributes.get("schema_name", _DEFAULT_SCHEMA)


def upgrade() -> None:
    """Create the audit_logs table and its lookup indexes."""
    schema = _schema()

    op.create_table(
        "audit_logs",
        sa.Column("id", UlidBinary(), primary_key=True, nullable=False),
        sa.Column("operation_id", sa.String(length=128), nullable=True),
        sa.Column("operation_type", sa.String(length=32), nullable=False),
        sa.Column("resource_type", sa.String(length=32), nullable=True),
        sa.Column("resource_id", sa.String(length=128), nullable=True),
        sa.Column("resource_name", sa.String(length=255), nullable=True),
        sa.Column("actor_id", sa.String(length=128), nullable=True),
        sa.Column("actor_email", sa.String(length=255), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column("transaction_id", sa.String(length=26), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "severity", sa.String(length=16), nullable=False, server_default="INFO"
        ),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        ulid_length_check("id", "ck_audit_logs_id_ulid_16"),
        schema=schema,
    )
    op.create_index(
        "ix_audit_logs_actor_created",
        "audit_logs",
        ["actor_id", "created_at"],
        schema=schema,
    )
    op.create_index(
        "ix_audit_logs_operation_type_created",
        "audit_logs",
        ["operation_type", "created_at"],
        schema=schema,
    )
    op.create_index(
        "ix_audit_logs_resource",
        "audit_logs",
        ["resource_type", "resource_id"],
        schema=schema,
    )
    op.create_index(
        "ix_audit_logs_severity_created",
        "audit_logs",
        ["severity", "created_at"],
        schema=schema,
    )
    op.create_index(
        "ix_audit_logs_operation_id", "audit_logs", ["operation_id"], schema=schema
    )


def downgrade() -> None:
    """Drop the audit_logs table."""
    op.drop_table("audit_logs", schema=_schema())
