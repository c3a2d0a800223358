"""In-process saga orchestrator with LIFO compensation."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from packages.serverhub_shared.ids import new_ulid
from packages.serverhub_shared.logging import fields, get_logger, log_context
from services.provisioning.command_gateway import CommandGateway
from services.provisioning.saga.config import SagaSettings
from services.provisioning.saga.domain import (
    FileSnapshot,
    RollbackAction,
    SagaHandle,
    SagaState,
)
from services.provisioning.saga.errors import (
    SnapshotError,
    TransactionStateError,
    UnknownTransactionError,
)
from services.provisioning.saga.files import FileOps, GatewayFileOps, LocalFileOps
from services.provisioning.saga.service import SagaOrchestrator

_LOGGER = get_logger(__name__)


@dataclass
class _Saga:
    """Mutable saga record owned by one orchestrator."""

    transaction_id: str
    started_at: datetime
    state: SagaState = SagaState.OPEN
    actions: list[RollbackAction] = field(default_factory=list)
    snapshots: list[FileSnapshot] = field(default_factory=list)


class DefaultSagaOrchestrator(SagaOrchestrator):
    """Track open sagas in a lock-guarded registry and compensate on failure.

    With a ``gateway``, snapshot copies and restores run as gateway commands;
    without one they use the local filesystem directly.
    """

    def __init__(
        self, *, settings: SagaSettings, gateway: CommandGateway | None = None
    ) -> None:
        self._snapshot_dir = Path(settings.snapshot_dir)
        self._files: FileOps = (
            GatewayFileOps(gateway) if gateway is not None else LocalFileOps()
        )
        self._sagas: dict[str, _Saga] = {}
        self._lock = threading.Lock()

    @contextmanager
    def transaction(self) -> Iterator[SagaHandle]:
        """Open a saga, commit on normal exit, compensate on any exception."""
        saga = _Saga(transaction_id=new_ulid(), started_at=datetime.now(UTC))
        with self._lock:
            self._sagas[saga.transaction_id] = saga

        try:
            with log_context({fields.TRANSACTION_ID: saga.transaction_id}):
                _LOGGER.debug(
                    "saga started", extra={fields.EVENT: fields.SAGA_STARTED_EVENT}
                )
                try:
                    yield SagaHandle(transaction_id=saga.transaction_id, orchestrator=self)
                except BaseException as exc:
                    self._compensate(saga, exc)
                    raise
                self._commit(saga)
        finally:
            with self._lock:
                self._sagas.pop(saga.transaction_id, None)

    def add_rollback_action(self, transaction_id: str, action: RollbackAction) -> None:
        """Append a compensation to an open saga."""
        saga = self._open_saga(transaction_id)
        saga.actions.append(action)

    def snapshot_file(self, transaction_id: str, path: str | Path) -> None:
        """Back up ``path`` (or note its absence) and register the restore."""
        saga = self._open_saga(transaction_id)
        original = Path(path)

        files = self._files
        if not files.exists(original):
            saga.actions.append(lambda: files.remove(original))
            return

        backup = self._snapshot_dir / (
            f"{transaction_id}-{original.name}-{time.time_ns()}"
        )
        try:
            files.ensure_dir(self._snapshot_dir)
            files.copy(original, backup)
        except OSError as exc:
            raise SnapshotError(
                f"cannot snapshot {original}: {exc}", transaction_id=transaction_id
            ) from exc
        snapshot = FileSnapshot(original_path=original, backup_path=backup)
        saga.snapshots.append(snapshot)
        saga.actions.append(lambda: self._restore(snapshot))
        _LOGGER.debug(
            "file snapshot created",
            extra={"path": str(original), "backup_path": str(backup)},
        )

    def is_transaction_active(self, transaction_id: str) -> bool:
        """Return whether a saga with this id is registered."""
        with self._lock:
            return transaction_id in self._sagas

    def active_transaction_count(self) -> int:
        """Return the number of registered sagas."""
        with self._lock:
            return len(self._sagas)

    def _open_saga(self, transaction_id: str) -> _Saga:
        """Return the saga for ``transaction_id`` if it still accepts work."""
        with self._lock:
            saga = self._sagas.get(transaction_id)
        if saga is None:
            raise UnknownTransactionError(
                f"transaction not found: {transaction_id}",
                transaction_id=transaction_id,
            )
        if saga.state is not SagaState.OPEN:
            raise TransactionStateError(
                f"transaction {transaction_id} is {saga.state.value}",
                transaction_id=transaction_id,
            )
        return saga

    def _commit(self, saga: _Saga) -> None:
        """Discard compensations and remove snapshot backups."""
        saga.state = SagaState.COMMITTED
        saga.actions.clear()
        for snapshot in saga.snapshots:
            try:
                self._files.remove(snapshot.backup_path)
            except OSError:
                _LOGGER.warning(
                    "snapshot cleanup failed",
                    exc_info=True,
                    extra={"backup_path": str(snapshot.backup_path)},
                )
        _LOGGER.debug(
            "saga committed", extra={fields.EVENT: fields.SAGA_COMMITTED_EVENT}
        )

    def _compensate(self, saga: _Saga, error: BaseException) -> None:
        """Run every compensation newest first; failures become notes on ``error``."""
        saga.state = SagaState.ROLLED_BACK
        actions = list(reversed(saga.actions))
        saga.actions.clear()
        _LOGGER.warning(
            "saga rolling back",
            extra={
                "compensations": len(actions),
                "error_type": type(error).__name__,
            },
        )

        failures = 0
        for position, action in enumerate(actions, start=1):
            try:
                action()
            except Exception as comp_exc:
                failures += 1
                _LOGGER.error(
                    "compensation failed",
                    exc_info=True,
                    extra={
                        fields.EVENT: fields.SAGA_COMPENSATION_FAILED_EVENT,
                        "position": position,
                    },
                )
                error.add_note(
                    f"compensation {position}/{len(actions)} failed: "
                    f"{type(comp_exc).__name__}: {comp_exc}"
                )

        _LOGGER.warning(
            "saga rolled back",
            extra={
                fields.EVENT: fields.SAGA_ROLLED_BACK_EVENT,
                "compensations": len(actions),
                "compensation_failures": failures,
            },
        )

    def _restore(self, snapshot: FileSnapshot) -> None:
        """Copy a backup over its original and drop the backup."""
        self._files.copy(snapshot.backup_path, snapshot.original_path)
        self._files.remove(snapshot.backup_path)
