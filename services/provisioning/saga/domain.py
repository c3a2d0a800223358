"""Domain types shared by saga orchestrator callers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from services.provisioning.saga.service import SagaOrchestrator

RollbackAction = Callable[[], None]
"""Zero-argument compensation registered after its forward step succeeded."""


class SagaState(str, Enum):
    """Lifecycle state of one saga."""

    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class FileSnapshot:
    """Backup copy taken before a file was overwritten."""

    original_path: Path
    backup_path: Path


@dataclass(frozen=True)
class SagaHandle:
    """Caller-facing handle for one open saga."""

    transaction_id: str
    orchestrator: SagaOrchestrator

    def add_rollback_action(self, action: RollbackAction) -> None:
        """Register a compensation on this saga."""
        self.orchestrator.add_rollback_action(self.transaction_id, action)

    def snapshot_file(self, path: str | Path) -> None:
        """Snapshot ``path`` so rollback restores or removes it."""
        self.orchestrator.snapshot_file(self.transaction_id, path)
