"""Readiness probe for the audit database."""

from __future__ import annotations

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from packages.serverhub_shared.logging import get_logger

_LOGGER = get_logger(__name__)

_SET_STATEMENT_TIMEOUT = text(
    "SELECT set_config('statement_timeout', :timeout_value, false)"
)


def ping(engine: Engine, *, timeout_seconds: float = 1.0) -> bool:
    """Run ``SELECT 1`` under a statement timeout; False when unreachable."""
    try:
        with engine.connect() as conn:
            if conn.dialect.name == "postgresql":
                timeout_ms = max(1, int(timeout_seconds * 1000))
                conn.execute(_SET_STATEMENT_TIMEOUT, {"timeout_value": f"{timeout_ms}ms"})
            conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        _LOGGER.warning(
            "postgres ping failed",
            extra={"exception_type": type(exc).__name__},
        )
        return False
    return True
