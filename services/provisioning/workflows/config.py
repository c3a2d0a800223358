"""Pydantic settings for provisioning workflows and host path layout."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.serverhub_shared.config import (
    ServerHubSettings,
    resolve_component_settings,
)

SERVICE_COMPONENT_ID = "service_workflows"


class WorkflowSettings(BaseModel):
    """Host layout and account defaults used by provisioning workflows."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    home_root: str = Field(default="/home", min_length=1)
    apache_sites_available: str = Field(
        default="/etc/apache2/sites-available", min_length=1
    )
    apache_sites_enabled: str = Field(
        default="/etc/apache2/sites-enabled", min_length=1
    )
    apache_service: str = Field(default="apache2", min_length=1)
    use_a2ensite: bool = True
    default_shell: str = "/bin/bash"
    sftp_shell: str = "/usr/sbin/nologin"
    min_uid: int = Field(default=1000, ge=1)
    max_uid: int = Field(default=60000, ge=1)
    default_php_version: str = "8.2"

    @model_validator(mode="after")
    def _uid_range_is_ordered(self) -> "WorkflowSettings":
        """Require a non-empty UID allocation range."""
        if self.min_uid > self.max_uid:
            raise ValueError("min_uid must be <= max_uid")
        return self


def resolve_workflow_settings(settings: ServerHubSettings) -> WorkflowSettings:
    """Resolve workflow settings from ``components.service.workflows``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=WorkflowSettings,
    )
