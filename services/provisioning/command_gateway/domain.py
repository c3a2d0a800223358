"""Domain contracts for command invocations and their results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CommandInvocation(BaseModel):
    """One request to run an external program as an argv vector."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    program: str = Field(min_length=1)
    args: tuple[str, ...] = ()
    stdin: str | None = Field(default=None, repr=False)
    run_as: str | None = None
    cwd: str | None = None
    env: dict[str, str] | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)


class CommandResult(BaseModel):
    """Outcome of one spawned process.

    ``success`` is True exactly when the process exited with code 0. A process
    killed at its deadline has ``exit_code=None`` and ``timed_out=True``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    program: str
    argv: tuple[str, ...]
    run_as: str | None = None
    success: bool
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = Field(ge=0)
    timed_out: bool = False
