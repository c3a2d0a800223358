"""Authoritative in-process Python API for the saga orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Callable, TypeVar

from packages.serverhub_shared.config import ServerHubSettings
from services.provisioning.command_gateway import CommandGateway
from services.provisioning.saga.domain import RollbackAction, SagaHandle

T = TypeVar("T")


class SagaOrchestrator(ABC):
    """Public API for running units of work with reverse-order compensation."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[SagaHandle]:
        """Open a saga for the duration of a ``with`` block.

        Normal exit commits. An exception runs every registered compensation
        in reverse order and then propagates unchanged.
        """

    @abstractmethod
    def add_rollback_action(self, transaction_id: str, action: RollbackAction) -> None:
        """Append a compensation to an open saga."""

    @abstractmethod
    def snapshot_file(self, transaction_id: str, path: str | Path) -> None:
        """Register a compensation that restores ``path`` to its current state."""

    @abstractmethod
    def is_transaction_active(self, transaction_id: str) -> bool:
        """Return whether a saga with this id is registered."""

    @abstractmethod
    def active_transaction_count(self) -> int:
        """Return the number of registered sagas."""

    def with_transaction(self, unit_of_work: Callable[[str], T]) -> T:
        """Run ``unit_of_work(transaction_id)`` inside a fresh saga."""
        with self.transaction() as saga:
            return unit_of_work(saga.transaction_id)


def build_saga_orchestrator(
    *, settings: ServerHubSettings, gateway: CommandGateway | None = None
) -> SagaOrchestrator:
    """Build the default in-process orchestrator from typed settings.

    Passing the command gateway routes snapshot file operations through it.
    """
    from services.provisioning.saga.config import resolve_saga_settings
    from services.provisioning.saga.implementation import DefaultSagaOrchestrator

    return DefaultSagaOrchestrator(
        settings=resolve_saga_settings(settings), gateway=gateway
    )
