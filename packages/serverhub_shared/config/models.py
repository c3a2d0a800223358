"""Typed settings tree for the provisioning core.

Each component owns a pydantic model resolved from
``components.<kind>.<name>``; the root model only validates the tree shape.
"""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "serverhub" / "serverhub.yaml"

COMPONENT_KINDS = ("service", "substrate")
_FLAT_PREFIXES = tuple(f"{kind}_" for kind in COMPONENT_KINDS)


class LoggingSettings(BaseModel):
    """Process-wide log level and output format."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "serverhub"
    environment: str = "dev"


class ComponentNamespaceSettings(BaseModel):
    """Open mapping of component name to raw settings for one kind."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """``components`` subtree grouped by kind."""

    model_config = ConfigDict(extra="allow")

    service: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    substrate: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_component_keys(cls, value: object) -> object:
        """Reject ``service_saga`` style keys; they belong under ``service.saga``."""
        flat = [
            key
            for key in (value if isinstance(value, dict) else ())
            if isinstance(key, str) and key.startswith(_FLAT_PREFIXES)
        ]
        if flat:
            kind, _, name = flat[0].partition("_")
            raise ValueError(
                f"components.{flat[0]} is invalid; use components.{kind}.{name} instead"
            )
        return value


class ServerHubSettings(BaseSettings):
    """Root settings for one ServerHub process."""

    model_config = SettingsConfigDict(
        env_prefix="SERVERHUB_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """CLI kwargs win over environment, which wins over YAML."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: ServerHubSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Validate ``components.<kind>.<name>`` into the component's own model.

    A component with no configured section gets the model defaults.
    """
    kind, separator, name = component_id.partition("_")
    if not separator or kind not in COMPONENT_KINDS or not name:
        raise ValueError(
            f"component id must look like '<kind>_<name>' with kind in "
            f"{COMPONENT_KINDS}: {component_id!r}"
        )

    section = settings.components.model_dump(mode="python").get(kind) or {}
    raw = section.get(name) if isinstance(section, dict) else None
    if raw is not None and not isinstance(raw, dict):
        raise TypeError(f"components.{kind}.{name} must be a mapping")
    return model.model_validate(raw or {})
