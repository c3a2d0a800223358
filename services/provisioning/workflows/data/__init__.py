"""Workflow record store implementations."""

from services.provisioning.workflows.data.stores import (
    InMemoryDomainStore,
    InMemorySystemUserStore,
)

__all__ = ["InMemoryDomainStore", "InMemorySystemUserStore"]
