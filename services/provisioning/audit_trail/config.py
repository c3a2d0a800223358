"""Pydantic settings for the Audit Trail Recorder."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.serverhub_shared.config import (
    ServerHubSettings,
    resolve_component_settings,
)

SERVICE_COMPONENT_ID = "service_audit_trail"


class AuditTrailSettings(BaseModel):
    """Audit trail persistence and query settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: Literal["postgres", "memory"] = "postgres"
    schema_name: str = Field(default="audit_trail", min_length=1)
    retention_days: int = Field(default=90, gt=0)
    default_page_size: int = Field(default=100, gt=0)
    max_page_size: int = Field(default=500, gt=0)

    @model_validator(mode="after")
    def _page_sizes_are_ordered(self) -> "AuditTrailSettings":
        """Require the default page size to fit within the maximum."""
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must be <= max_page_size")
        return self


def resolve_audit_trail_settings(settings: ServerHubSettings) -> AuditTrailSettings:
    """Resolve audit settings from ``components.service.audit_trail``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=AuditTrailSettings,
    )
