"""Audit-trail-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from packages.serverhub_shared.config import ServerHubSettings
from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    create_postgres_engine,
    create_session_factory,
    ping,
)
from resources.substrates.postgres.config import resolve_postgres_settings
from services.provisioning.audit_trail.config import resolve_audit_trail_settings


@dataclass(frozen=True)
class AuditTrailPostgresRuntime:
    """Concrete audit trail handle for schema-scoped Postgres access."""

    engine: Engine
    session_factory: sessionmaker[Session]
    schema_sessions: ServiceSchemaSessionProvider
    health_timeout_seconds: float

    @classmethod
    def from_settings(cls, settings: ServerHubSettings) -> "AuditTrailPostgresRuntime":
        """Build audit trail DB runtime from typed application settings."""
        postgres_config = resolve_postgres_settings(settings)
        engine = create_postgres_engine(postgres_config)
        session_factory = create_session_factory(engine)
        return cls(
            engine=engine,
            session_factory=session_factory,
            schema_sessions=ServiceSchemaSessionProvider(
                session_factory=session_factory,
                schema=audit_trail_postgres_schema(settings),
            ),
            health_timeout_seconds=postgres_config.health_timeout_seconds,
        )

    def is_healthy(self) -> bool:
        """Return ``True`` when backing Postgres connection is reachable."""
        return ping(self.engine, timeout_seconds=self.health_timeout_seconds)


def audit_trail_postgres_schema(settings: ServerHubSettings) -> str:
    """Resolve the audit-trail-owned schema name from settings."""
    return resolve_audit_trail_settings(settings).schema_name
