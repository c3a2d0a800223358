"""File operations behind saga snapshots.

``LocalFileOps`` touches the filesystem as the control-plane process.
``GatewayFileOps`` routes the same operations through the command gateway so
they get the same privilege handling as the forward writes they undo.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from services.provisioning.command_gateway import CommandGateway, CommandResult


class FileOps(Protocol):
    """Minimal file operations needed to snapshot and restore one file."""

    def exists(self, path: Path) -> bool: ...

    def ensure_dir(self, path: Path) -> None: ...

    def copy(self, source: Path, target: Path) -> None: ...

    def remove(self, path: Path) -> None: ...


class LocalFileOps:
    def exists(self, path: Path) -> bool:
        return path.exists()

    def ensure_dir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True, mode=0o700)

    def copy(self, source: Path, target: Path) -> None:
        shutil.copy2(source, target)

    def remove(self, path: Path) -> None:
        path.unlink(missing_ok=True)


class GatewayFileOps:
    """File operations executed as ``test``/``mkdir``/``cp``/``rm`` commands.

    A non-zero exit raises ``OSError`` with the command's stderr.
    """

    def __init__(self, gateway: CommandGateway) -> None:
        self._gateway = gateway

    def exists(self, path: Path) -> bool:
        return self._gateway.execute("test", ["-e", str(path)]).success

    def ensure_dir(self, path: Path) -> None:
        self._check(self._gateway.execute("mkdir", ["-p", "-m", "700", str(path)]))

    def copy(self, source: Path, target: Path) -> None:
        self._check(self._gateway.execute("cp", ["-p", str(source), str(target)]))

    def remove(self, path: Path) -> None:
        self._check(self._gateway.execute("rm", ["-f", str(path)]))

    @staticmethod
    def _check(result: CommandResult) -> None:
        if not result.success:
            raise OSError(
                f"{result.program} exited {result.exit_code}: {result.stderr.strip()}"
            )
