"""Persistence protocol for the Audit Trail Recorder."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from services.provisioning.audit_trail.domain import AuditLogQuery, AuditLogRow


class AuditLogRepository(Protocol):
    """Protocol for append-only audit row persistence."""

    def append(self, *, row: AuditLogRow) -> None:
        """Persist one audit row."""

    def find(
        self, *, query: AuditLogQuery, limit: int, offset: int
    ) -> tuple[tuple[AuditLogRow, ...], int]:
        """Return one newest-first page of matching rows and the total match count."""

    def delete_older_than(self, *, cutoff: datetime) -> int:
        """Delete rows created before ``cutoff`` and return how many were removed."""

    def count(self) -> int:
        """Return total persisted row count."""
