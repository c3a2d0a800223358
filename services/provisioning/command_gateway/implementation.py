"""Subprocess-backed Command Execution Gateway implementation."""

from __future__ import annotations

import errno
import os
import pwd
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from packages.serverhub_shared.logging import fields, get_logger
from services.provisioning.command_gateway.config import CommandGatewaySettings
from services.provisioning.command_gateway.domain import (
    CommandInvocation,
    CommandResult,
)
from services.provisioning.command_gateway.errors import (
    CommandNotAllowedError,
    CommandSpawnError,
    IdentitySwitchError,
)
from services.provisioning.command_gateway.service import CommandGateway

_LOGGER = get_logger(__name__)
_REDACTED = "****"
_SECRET_FLAG_PREFIXES = ("--password=", "--passwd=")


@dataclass(frozen=True)
class _Identity:
    """Resolved OS identity for a run-as request."""

    name: str
    uid: int
    gid: int
    home: str
    groups: tuple[int, ...]


@dataclass(frozen=True)
class _SpawnPlan:
    """Final argv and process options for one invocation."""

    argv: tuple[str, ...]
    env: dict[str, str]
    spawn_kwargs: dict[str, Any]
    via_sudo: bool
    identity: _Identity | None


def redact_argv(argv: Sequence[str]) -> list[str]:
    """Mask password-like arguments for logging."""
    redacted: list[str] = []
    for arg in argv:
        if arg.startswith("-p") and len(arg) > 2 and not arg.startswith("--"):
            redacted.append(f"-p{_REDACTED}")
            continue
        prefix = next((p for p in _SECRET_FLAG_PREFIXES if arg.startswith(p)), None)
        if prefix is not None:
            redacted.append(f"{prefix}{_REDACTED}")
            continue
        redacted.append(arg)
    return redacted


def cap_output(text: str, max_bytes: int) -> str:
    """Keep only the trailing half of ``max_bytes`` when output exceeds it."""
    encoded = text.encode("utf-8", errors="replace")
    if len(encoded) <= max_bytes:
        return text
    return encoded[-(max_bytes // 2) :].decode("utf-8", errors="ignore")


class SubprocessCommandGateway(CommandGateway):
    """Run each invocation as exactly one child process via ``subprocess``."""

    def __init__(self, *, settings: CommandGatewaySettings) -> None:
        self._settings = settings
        self._privileged = frozenset(settings.privileged_programs)
        self._allowed = frozenset(settings.allowed_programs)

    def run(self, invocation: CommandInvocation) -> CommandResult:
        """Spawn the invocation and collect its exit status and output."""
        self._require_allowed(invocation.program)
        plan = self._plan(invocation)
        log_argv = " ".join(redact_argv(plan.argv))

        started = time.monotonic()
        try:
            completed = subprocess.run(
                plan.argv,
                input=invocation.stdin,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=invocation.cwd,
                env=plan.env,
                timeout=invocation.timeout_seconds,
                check=False,
                **plan.spawn_kwargs,
            )
        except subprocess.TimeoutExpired as exc:
            return self._timed_out(invocation, plan, exc, started, log_argv)
        except OSError as exc:
            if plan.identity is not None and exc.errno == errno.EPERM:
                raise IdentitySwitchError(
                    f"cannot switch to user {invocation.run_as!r}: {exc}",
                    program=invocation.program,
                    run_as=invocation.run_as,
                ) from exc
            _LOGGER.error(
                "command spawn failed",
                extra={fields.PROGRAM: invocation.program, "argv": log_argv},
            )
            raise CommandSpawnError(
                f"cannot spawn {invocation.program!r}: {exc}",
                program=invocation.program,
            ) from exc

        duration_ms = _elapsed_ms(started)
        if (
            plan.via_sudo
            and completed.returncode == 1
            and completed.stderr.lstrip().startswith("sudo:")
        ):
            raise IdentitySwitchError(
                f"sudo refused to run {invocation.program!r}: "
                f"{completed.stderr.strip()}",
                program=invocation.program,
                run_as=invocation.run_as,
            )

        result = CommandResult(
            program=invocation.program,
            argv=plan.argv,
            run_as=invocation.run_as,
            success=completed.returncode == 0,
            exit_code=completed.returncode,
            stdout=cap_output(completed.stdout, self._settings.max_output_bytes),
            stderr=cap_output(completed.stderr, self._settings.max_output_bytes),
            duration_ms=duration_ms,
        )
        self._log_result(result, log_argv)
        return result

    def _require_allowed(self, program: str) -> None:
        """Reject programs outside a configured allowlist."""
        if not self._allowed:
            return
        if os.path.basename(program) in self._allowed or program in self._allowed:
            return
        _LOGGER.error("command not allowed", extra={fields.PROGRAM: program})
        raise CommandNotAllowedError(
            f"command {program!r} is not in the allowed program list",
            program=program,
        )

    def _plan(self, invocation: CommandInvocation) -> _SpawnPlan:
        """Compute the argv and process options for one invocation."""
        argv: tuple[str, ...] = (invocation.program, *invocation.args)
        env = dict(os.environ)
        if invocation.env:
            env.update(invocation.env)

        identity = self._resolve_identity(invocation)
        if identity is None:
            # An explicit run_as for the caller itself must not be escalated.
            if (
                invocation.run_as is None
                and os.geteuid() != 0
                and os.path.basename(invocation.program) in self._privileged
            ):
                return _SpawnPlan(
                    argv=(self._settings.sudo_path, "-n", "--", *argv),
                    env=env,
                    spawn_kwargs={},
                    via_sudo=True,
                    identity=None,
                )
            return _SpawnPlan(
                argv=argv, env=env, spawn_kwargs={}, via_sudo=False, identity=None
            )

        if self._settings.identity_switch == "sudo":
            return _SpawnPlan(
                argv=(self._settings.sudo_path, "-n", "-u", identity.name, "--", *argv),
                env=env,
                spawn_kwargs={},
                via_sudo=True,
                identity=identity,
            )

        if os.geteuid() != 0:
            raise IdentitySwitchError(
                f"switching to user {identity.name!r} requires root",
                program=invocation.program,
                run_as=identity.name,
            )
        env.update(HOME=identity.home, USER=identity.name, LOGNAME=identity.name)
        return _SpawnPlan(
            argv=argv,
            env=env,
            spawn_kwargs={
                "user": identity.uid,
                "group": identity.gid,
                "extra_groups": list(identity.groups),
            },
            via_sudo=False,
            identity=identity,
        )

    def _resolve_identity(self, invocation: CommandInvocation) -> _Identity | None:
        """Look up the run-as user; None when no switch is needed."""
        if invocation.run_as is None:
            return None
        try:
            entry = pwd.getpwnam(invocation.run_as)
        except KeyError as exc:
            raise IdentitySwitchError(
                f"unknown user {invocation.run_as!r}",
                program=invocation.program,
                run_as=invocation.run_as,
            ) from exc

        if entry.pw_uid == os.geteuid():
            return None
        return _Identity(
            name=entry.pw_name,
            uid=entry.pw_uid,
            gid=entry.pw_gid,
            home=entry.pw_dir,
            groups=tuple(os.getgrouplist(entry.pw_name, entry.pw_gid)),
        )

    def _timed_out(
        self,
        invocation: CommandInvocation,
        plan: _SpawnPlan,
        exc: subprocess.TimeoutExpired,
        started: float,
        log_argv: str,
    ) -> CommandResult:
        """Build the result for a child killed at its deadline."""
        stderr = _as_text(exc.stderr)
        result = CommandResult(
            program=invocation.program,
            argv=plan.argv,
            run_as=invocation.run_as,
            success=False,
            exit_code=None,
            stdout=cap_output(_as_text(exc.stdout), self._settings.max_output_bytes),
            stderr=cap_output(
                f"Command timed out after {invocation.timeout_seconds}s\n{stderr}",
                self._settings.max_output_bytes,
            ),
            duration_ms=_elapsed_ms(started),
            timed_out=True,
        )
        _LOGGER.warning(
            "command timed out",
            extra={
                fields.PROGRAM: invocation.program,
                "argv": log_argv,
                fields.DURATION_MS: result.duration_ms,
            },
        )
        return result

    def _log_result(self, result: CommandResult, log_argv: str) -> None:
        """Emit one structured line per executed command."""
        extra = {
            fields.EVENT: fields.COMMAND_EXECUTED_EVENT,
            fields.PROGRAM: result.program,
            "argv": log_argv,
            fields.RUN_AS: result.run_as,
            fields.EXIT_CODE: result.exit_code,
            fields.DURATION_MS: result.duration_ms,
            fields.SUCCESS: result.success,
        }
        if result.success:
            _LOGGER.info("command executed", extra=extra)
        else:
            _LOGGER.warning("command exited non-zero", extra=extra)


def _as_text(value: str | bytes | None) -> str:
    """Decode partial output captured before a timeout."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _elapsed_ms(started: float) -> int:
    return max(0, int((time.monotonic() - started) * 1000))
