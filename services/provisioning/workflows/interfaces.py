"""Protocols for workflow resource record persistence."""

from __future__ import annotations

from typing import Protocol

from services.provisioning.workflows.domain import DomainRecord, SystemUserRecord


class SystemUserStore(Protocol):
    """Persistence for tenant account records."""

    def get(self, user_id: str) -> SystemUserRecord | None:
        """Return one record by id."""

    def find_by_username(self, username: str) -> SystemUserRecord | None:
        """Return one record by username."""

    def save(self, record: SystemUserRecord) -> None:
        """Insert or replace one record."""

    def delete(self, user_id: str) -> None:
        """Remove one record if present."""

    def max_uid(self) -> int | None:
        """Return the highest stored UID, if any."""


class DomainStore(Protocol):
    """Persistence for hosted domain records."""

    def get(self, domain_id: str) -> DomainRecord | None:
        """Return one record by id."""

    def find_by_name(self, name: str) -> DomainRecord | None:
        """Return one record by domain name."""

    def save(self, record: DomainRecord) -> None:
        """Insert or replace one record."""

    def delete(self, domain_id: str) -> None:
        """Remove one record if present."""
