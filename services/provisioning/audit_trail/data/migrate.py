"""Schema bootstrap and Alembic upgrade for the audit trail tables."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import text

from packages.serverhub_shared.config import ServerHubSettings
from packages.serverhub_shared.logging import get_logger
from resources.substrates.postgres import create_postgres_engine
from resources.substrates.postgres.config import resolve_postgres_settings
from services.provisioning.audit_trail.data.runtime import audit_trail_postgres_schema

_LOGGER = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"


class MigrationExecutionError(RuntimeError):
    """Raised when the audit trail migration run fails."""


def migration_config() -> Config:
    """Return the Alembic config for the audit trail migrations."""
    config = Config(str(MIGRATIONS_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    return config


def bootstrap_schema(settings: ServerHubSettings) -> str | None:
    """Create the audit schema on PostgreSQL; return its name, or None elsewhere."""
    postgres_settings = resolve_postgres_settings(settings)
    if postgres_settings.is_sqlite:
        return None

    schema = audit_trail_postgres_schema(settings)
    if not schema.replace("_", "").isalnum():
        raise ValueError("audit schema must be alphanumeric/underscore")
    engine = create_postgres_engine(postgres_settings)
    try:
        with engine.begin() as connection:
            connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
    finally:
        engine.dispose()
    return schema


def run_migrations(
    *,
    settings: ServerHubSettings,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> None:
    """Bootstrap the schema and upgrade the audit tables to head."""
    schema = bootstrap_schema(settings)
    try:
        upgrade_fn(migration_config(), "head")
    except Exception as exc:
        raise MigrationExecutionError("audit trail migration failed") from exc
    _LOGGER.info("audit trail migrations applied", extra={"schema": schema or ""})
