"""Attempt-failure exceptions raised by the Command Execution Gateway.

A non-zero exit is never an exception; these types cover the cases where no
process ran under the requested identity at all.
"""

from __future__ import annotations

from packages.serverhub_shared.errors import ErrorCategory, ServerHubError, codes


class CommandAttemptError(ServerHubError):
    """Base class for failures to start a command."""

    code = codes.DEPENDENCY_FAILURE
    category = ErrorCategory.DEPENDENCY

    def __init__(self, message: str, *, program: str) -> None:
        super().__init__(message)
        self.program = program


class CommandSpawnError(CommandAttemptError):
    """The program could not be found or spawned."""

    code = codes.COMMAND_SPAWN_FAILED


class IdentitySwitchError(CommandAttemptError):
    """The requested run-as identity could not be assumed."""

    code = codes.IDENTITY_SWITCH_REJECTED
    category = ErrorCategory.POLICY

    def __init__(self, message: str, *, program: str, run_as: str | None) -> None:
        super().__init__(message, program=program)
        self.run_as = run_as


class CommandNotAllowedError(CommandAttemptError):
    """The program is outside the configured allowlist."""

    code = codes.COMMAND_NOT_ALLOWED
    category = ErrorCategory.POLICY
