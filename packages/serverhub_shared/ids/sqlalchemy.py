"""SQLAlchemy column helpers for ULID primary keys.

Ids are stored as 16-byte binaries on every dialect and surface as canonical
26-char strings in Python.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import CheckConstraint, Column, LargeBinary
from sqlalchemy.types import TypeDecorator

from .ulid import ULID_BYTES_LENGTH, ulid_from_bytes, ulid_to_bytes


class UlidBinary(TypeDecorator[str]):
    """Store ULID strings as fixed 16-byte binary values."""

    impl = LargeBinary(ULID_BYTES_LENGTH)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> bytes | None:
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray)):
            if len(value) != ULID_BYTES_LENGTH:
                raise ValueError("ULID bytes must be exactly 16 bytes")
            return bytes(value)
        return ulid_to_bytes(str(value))

    def process_result_value(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return ulid_from_bytes(bytes(value))


def ulid_primary_key_column(
    name: str = "id",
    *,
    length_constraint_name: str | None = None,
) -> Column[str]:
    """Return a ULID primary-key column with a 16-byte length check."""
    constraint = ulid_length_check(
        name,
        length_constraint_name or f"ck_{name}_ulid_16",
    )
    return Column(name, UlidBinary(), constraint, primary_key=True, nullable=False)


def ulid_length_check(column_name: str, constraint_name: str) -> CheckConstraint:
    """Return a CHECK constraint enforcing fixed 16-byte ULID storage.

    ``length`` counts bytes for binary operands on both PostgreSQL and SQLite.
    """
    return CheckConstraint(
        f"length({column_name}) = {ULID_BYTES_LENGTH}",
        name=constraint_name,
    )
