"""Pydantic settings for the Command Execution Gateway."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from packages.serverhub_shared.config import (
    ServerHubSettings,
    resolve_component_settings,
)

SERVICE_COMPONENT_ID = "service_command_gateway"

DEFAULT_PRIVILEGED_PROGRAMS = (
    "useradd",
    "userdel",
    "usermod",
    "chpasswd",
    "chown",
    "chmod",
    "mkdir",
    "rm",
    "tee",
    "cp",
    "a2ensite",
    "a2dissite",
    "apachectl",
    "systemctl",
)


class CommandGatewaySettings(BaseModel):
    """Command gateway runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    identity_switch: Literal["native", "sudo"] = "native"
    sudo_path: str = Field(default="sudo", min_length=1)
    privileged_programs: tuple[str, ...] = DEFAULT_PRIVILEGED_PROGRAMS
    allowed_programs: tuple[str, ...] = ()
    max_output_bytes: int = Field(default=10 * 1024 * 1024, gt=0)


def resolve_command_gateway_settings(
    settings: ServerHubSettings,
) -> CommandGatewaySettings:
    """Resolve gateway settings from ``components.service.command_gateway``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=CommandGatewaySettings,
    )
