"""Command Execution Gateway package exports."""

from services.provisioning.command_gateway.config import (
    SERVICE_COMPONENT_ID,
    CommandGatewaySettings,
    resolve_command_gateway_settings,
)
from services.provisioning.command_gateway.domain import (
    CommandInvocation,
    CommandResult,
)
from services.provisioning.command_gateway.errors import (
    CommandAttemptError,
    CommandNotAllowedError,
    CommandSpawnError,
    IdentitySwitchError,
)
from services.provisioning.command_gateway.implementation import (
    SubprocessCommandGateway,
)
from services.provisioning.command_gateway.service import (
    CommandGateway,
    build_command_gateway,
)

__all__ = [
    "SERVICE_COMPONENT_ID",
    "CommandAttemptError",
    "CommandGateway",
    "CommandGatewaySettings",
    "CommandInvocation",
    "CommandNotAllowedError",
    "CommandResult",
    "CommandSpawnError",
    "IdentitySwitchError",
    "SubprocessCommandGateway",
    "build_command_gateway",
    "resolve_command_gateway_settings",
]
