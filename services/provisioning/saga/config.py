"""Pydantic settings for the saga orchestrator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.serverhub_shared.config import (
    ServerHubSettings,
    resolve_component_settings,
)

SERVICE_COMPONENT_ID = "service_saga"


class SagaSettings(BaseModel):
    """Saga orchestrator runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    snapshot_dir: str = Field(default="/tmp/serverhub-snapshots", min_length=1)


def resolve_saga_settings(settings: ServerHubSettings) -> SagaSettings:
    """Resolve saga settings from ``components.service.saga``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=SagaSettings,
    )
