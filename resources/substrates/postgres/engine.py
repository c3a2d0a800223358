"""SQLAlchemy engine construction for the audit database."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from packages.serverhub_shared.logging import get_logger
from resources.substrates.postgres.config import PostgresSettings

_LOGGER = get_logger(__name__)


def create_postgres_engine(config: PostgresSettings) -> Engine:
    """Build an engine from settings.

    PostgreSQL URLs get the configured pool and psycopg connect arguments.
    SQLite URLs skip both; an in-memory SQLite URL is pinned to one shared
    connection so every session sees the same database.
    """
    if config.is_sqlite:
        if config.url in {"sqlite://", "sqlite:///:memory:"}:
            return create_engine(
                config.url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(config.url)

    engine = create_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_pre_ping=config.pool_pre_ping,
        connect_args={
            "connect_timeout": int(config.connect_timeout_seconds),
            "sslmode": config.sslmode,
        },
    )
    _LOGGER.debug(
        "postgres engine created",
        extra={"pool_size": config.pool_size, "sslmode": config.sslmode},
    )
    return engine
