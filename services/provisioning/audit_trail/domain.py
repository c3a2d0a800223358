"""Domain contracts for audit entries, contexts, and persisted rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditOperationType(str, Enum):
    """Kinds of audited operations."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_RESET = "PASSWORD_RESET"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    SYSTEM_COMMAND = "SYSTEM_COMMAND"
    CONFIG_CHANGE = "CONFIG_CHANGE"
    BACKUP = "BACKUP"
    RESTORE = "RESTORE"
    SSL_REQUEST = "SSL_REQUEST"
    SSL_RENEWAL = "SSL_RENEWAL"
    SERVICE_START = "SERVICE_START"
    SERVICE_STOP = "SERVICE_STOP"
    SERVICE_RESTART = "SERVICE_RESTART"
    FIREWALL_CHANGE = "FIREWALL_CHANGE"


class AuditResourceType(str, Enum):
    """Kinds of resources an audit entry can reference."""

    USER = "USER"
    DOMAIN = "DOMAIN"
    DATABASE = "DATABASE"
    APP = "APP"
    DNS_ZONE = "DNS_ZONE"
    DNS_RECORD = "DNS_RECORD"
    SSL_CERTIFICATE = "SSL_CERTIFICATE"
    MAIL_DOMAIN = "MAIL_DOMAIN"
    MAILBOX = "MAILBOX"
    MAIL_ALIAS = "MAIL_ALIAS"
    BACKUP = "BACKUP"
    CRON_JOB = "CRON_JOB"
    SERVICE = "SERVICE"
    FIREWALL = "FIREWALL"
    SYSTEM = "SYSTEM"


class AuditSeverity(str, Enum):
    """Severity recorded on each audit row."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


SECURITY_OPERATION_TYPES = frozenset(
    {
        AuditOperationType.LOGIN,
        AuditOperationType.LOGOUT,
        AuditOperationType.LOGIN_FAILED,
        AuditOperationType.PERMISSION_DENIED,
        AuditOperationType.PASSWORD_RESET,
    }
)

WARNING_SECURITY_EVENTS = frozenset(
    {AuditOperationType.LOGIN_FAILED, AuditOperationType.PERMISSION_DENIED}
)


class AuditContext(BaseModel):
    """Who performed an operation and which saga it ran in."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str | None = None
    actor_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    transaction_id: str | None = None


class AuditEntrySpec(BaseModel):
    """Caller-supplied description of one audited operation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    operation_type: AuditOperationType
    resource_type: AuditResourceType | None = None
    resource_id: str | None = None
    resource_name: str | None = None
    description: str | None = None
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    success: bool = True
    error_message: str | None = None
    severity: AuditSeverity = AuditSeverity.INFO
    duration_ms: int | None = Field(default=None, ge=0)


class AuditLogRow(BaseModel):
    """One persisted, append-only audit row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=26, max_length=26)
    operation_id: str | None = None
    operation_type: AuditOperationType
    resource_type: AuditResourceType | None = None
    resource_id: str | None = None
    resource_name: str | None = None
    actor_id: str | None = None
    actor_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    transaction_id: str | None = None
    description: str | None = None
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    success: bool
    error_message: str | None = None
    severity: AuditSeverity
    duration_ms: int | None = None
    created_at: datetime


class AuditLogQuery(BaseModel):
    """Filter for audit row lookups; unset fields do not constrain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str | None = None
    resource_type: AuditResourceType | None = None
    resource_id: str | None = None
    operation_id: str | None = None
    operation_types: frozenset[AuditOperationType] | None = None
    success: bool | None = None


@dataclass
class OperationScope:
    """Mutable handle yielded by ``AuditTrailRecorder.operation``.

    The workflow refines ``entry`` and ``context`` while the operation runs;
    the terminal row is written from their final values. ``row`` holds the
    written row after the scope exits, or None when the write failed.
    """

    operation_id: str
    entry: AuditEntrySpec
    context: AuditContext
    row: AuditLogRow | None = None

    def update(self, **changes: Any) -> None:
        """Replace fields on the terminal entry."""
        self.entry = self.entry.model_copy(update=changes)

    def bind_transaction(self, transaction_id: str) -> None:
        """Correlate this operation with a saga id."""
        self.context = self.context.model_copy(update={"transaction_id": transaction_id})
