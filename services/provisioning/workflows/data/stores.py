"""In-memory record stores for tenant accounts and domains."""

from __future__ import annotations

import threading

from services.provisioning.workflows.domain import DomainRecord, SystemUserRecord
from services.provisioning.workflows.interfaces import DomainStore, SystemUserStore


class InMemorySystemUserStore(SystemUserStore):
    """Lock-guarded dict of account records keyed by id."""

    def __init__(self) -> None:
        self._records: dict[str, SystemUserRecord] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> SystemUserRecord | None:
        with self._lock:
            return self._records.get(user_id)

    def find_by_username(self, username: str) -> SystemUserRecord | None:
        with self._lock:
            return next(
                (r for r in self._records.values() if r.username == username), None
            )

    def save(self, record: SystemUserRecord) -> None:
        with self._lock:
            self._records[record.id] = record

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._records.pop(user_id, None)

    def max_uid(self) -> int | None:
        with self._lock:
            return max((r.uid for r in self._records.values()), default=None)

    def list_records(self) -> tuple[SystemUserRecord, ...]:
        """Expose stored records for tests and diagnostics."""
        with self._lock:
            return tuple(self._records.values())


class InMemoryDomainStore(DomainStore):
    """Lock-guarded dict of domain records keyed by id."""

    def __init__(self) -> None:
        self._records: dict[str, DomainRecord] = {}
        self._lock = threading.Lock()

    def get(self, domain_id: str) -> DomainRecord | None:
        with self._lock:
            return self._records.get(domain_id)

    def find_by_name(self, name: str) -> DomainRecord | None:
        with self._lock:
            return next((r for r in self._records.values() if r.name == name), None)

    def save(self, record: DomainRecord) -> None:
        with self._lock:
            self._records[record.id] = record

    def delete(self, domain_id: str) -> None:
        with self._lock:
            self._records.pop(domain_id, None)

    def list_records(self) -> tuple[DomainRecord, ...]:
        """Expose stored records for tests and diagnostics."""
        with self._lock:
            return tuple(self._records.values())
