"""Authoritative in-process Python API for the Command Execution Gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from packages.serverhub_shared.config import ServerHubSettings
from services.provisioning.command_gateway.domain import (
    CommandInvocation,
    CommandResult,
)


class CommandGateway(ABC):
    """Public API for running external programs, optionally as another user."""

    def execute(
        self,
        program: str,
        args: Sequence[str] = (),
        *,
        stdin: str | None = None,
        run_as: str | None = None,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> CommandResult:
        """Run ``program`` with ``args`` and return its result.

        Returns normally on non-zero exit. Raises ``CommandAttemptError`` when
        the process could not be started under the requested identity.
        """
        return self.run(
            CommandInvocation(
                program=program,
                args=tuple(args),
                stdin=stdin,
                run_as=run_as,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                timeout_seconds=timeout_seconds,
            )
        )

    @abstractmethod
    def run(self, invocation: CommandInvocation) -> CommandResult:
        """Run one prepared invocation."""


def build_command_gateway(*, settings: ServerHubSettings) -> CommandGateway:
    """Build the default subprocess-backed gateway from typed settings."""
    from services.provisioning.command_gateway.config import (
        resolve_command_gateway_settings,
    )
    from services.provisioning.command_gateway.implementation import (
        SubprocessCommandGateway,
    )

    return SubprocessCommandGateway(
        settings=resolve_command_gateway_settings(settings)
    )
