"""Public API for shared ServerHub configuration utilities."""

from .loader import load_settings
from .models import (
    COMPONENT_KINDS,
    DEFAULT_CONFIG_PATH,
    ComponentNamespaceSettings,
    ComponentsSettings,
    LoggingSettings,
    ServerHubSettings,
    resolve_component_settings,
)

__all__ = [
    "COMPONENT_KINDS",
    "DEFAULT_CONFIG_PATH",
    "ComponentNamespaceSettings",
    "ComponentsSettings",
    "LoggingSettings",
    "ServerHubSettings",
    "load_settings",
    "resolve_component_settings",
]
