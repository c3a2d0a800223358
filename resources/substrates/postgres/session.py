"""Session factories and transaction-scoped session providers."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, text
from sqlalchemy.orm import Session, sessionmaker

_SCHEMA_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Bind a session factory that keeps loaded rows usable after commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Commit when the block exits cleanly, roll back when it raises."""
    with session_factory() as session, session.begin():
        yield session


class SessionProvider:
    """Hand out one transaction-scoped session per ``with`` block."""

    def __init__(self, *, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        with transactional_session(self._session_factory) as db:
            self._prepare(db)
            yield db

    def _prepare(self, db: Session) -> None:
        del db


class ServiceSchemaSessionProvider(SessionProvider):
    """Session provider that pins ``search_path`` to one owned schema.

    The pin is transaction-local and only issued on PostgreSQL.
    """

    def __init__(self, *, session_factory: sessionmaker[Session], schema: str) -> None:
        if not _SCHEMA_NAME.match(schema):
            raise ValueError(f"invalid postgres schema name: {schema!r}")
        super().__init__(session_factory=session_factory)
        self._schema = schema

    @property
    def schema(self) -> str:
        return self._schema

    def _prepare(self, db: Session) -> None:
        if db.get_bind().dialect.name == "postgresql":
            db.execute(text(f"SET LOCAL search_path TO {self._schema}, public"))
