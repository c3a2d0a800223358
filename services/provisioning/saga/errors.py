"""Exceptions raised by the saga orchestrator."""

from __future__ import annotations

from packages.serverhub_shared.errors import ErrorCategory, ServerHubError, codes


class SagaError(ServerHubError):
    """Base class for saga bookkeeping errors."""

    def __init__(self, message: str, *, transaction_id: str) -> None:
        super().__init__(message)
        self.transaction_id = transaction_id


class UnknownTransactionError(SagaError):
    """No saga with the given id is registered."""

    code = codes.UNKNOWN_TRANSACTION
    category = ErrorCategory.NOT_FOUND


class TransactionStateError(SagaError):
    """The saga exists but no longer accepts compensations."""

    code = codes.TRANSACTION_STATE
    category = ErrorCategory.CONFLICT


class SnapshotError(SagaError):
    """A file snapshot could not be taken or restored."""

    code = codes.SNAPSHOT_FAILED
    category = ErrorCategory.DEPENDENCY
