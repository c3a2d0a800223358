"""Saga orchestrator package exports."""

from services.provisioning.saga.config import (
    SERVICE_COMPONENT_ID,
    SagaSettings,
    resolve_saga_settings,
)
from services.provisioning.saga.domain import (
    FileSnapshot,
    RollbackAction,
    SagaHandle,
    SagaState,
)
from services.provisioning.saga.errors import (
    SagaError,
    SnapshotError,
    TransactionStateError,
    UnknownTransactionError,
)
from services.provisioning.saga.implementation import DefaultSagaOrchestrator
from services.provisioning.saga.service import (
    SagaOrchestrator,
    build_saga_orchestrator,
)

__all__ = [
    "SERVICE_COMPONENT_ID",
    "DefaultSagaOrchestrator",
    "FileSnapshot",
    "RollbackAction",
    "SagaError",
    "SagaHandle",
    "SagaOrchestrator",
    "SagaSettings",
    "SagaState",
    "SnapshotError",
    "TransactionStateError",
    "UnknownTransactionError",
    "build_saga_orchestrator",
    "resolve_saga_settings",
]
