"""Configuration loading with deterministic precedence.

The cascade is always:
1) CLI params
2) Environment variables
3) ~/.config/serverhub/serverhub.yaml (or an explicit ``config_path``)
4) Built-in model defaults

Environment variable format:
- Prefix: ``SERVERHUB_``
- Nested keys: ``__`` separator
- Example: ``SERVERHUB_LOGGING__LEVEL=DEBUG`` -> ``logging.level = "DEBUG"``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Mapping

from .models import ServerHubSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> ServerHubSettings:
    """Load ``ServerHubSettings`` by applying the standard precedence cascade.

    A missing YAML file is treated as empty. ``cli_params`` are passed as init
    kwargs and therefore win over every other source.
    """
    settings_cls: type[ServerHubSettings] = ServerHubSettings
    if config_path is not None:
        settings_cls = _with_config_path(Path(config_path))

    init_kwargs = dict(cli_params) if cli_params is not None else {}
    return settings_cls(**init_kwargs)


def _with_config_path(path: Path) -> type[ServerHubSettings]:
    """Return a settings subclass that reads YAML from ``path``."""

    class _PathBoundSettings(ServerHubSettings):
        _config_path: ClassVar[Path] = path

    return _PathBoundSettings
