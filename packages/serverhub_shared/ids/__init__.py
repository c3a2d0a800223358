"""Shared ULID primitives for ids and binary primary keys."""

from packages.serverhub_shared.ids.sqlalchemy import (
    UlidBinary,
    ulid_length_check,
    ulid_primary_key_column,
)
from packages.serverhub_shared.ids.ulid import (
    ULID_BYTES_LENGTH,
    ULID_STR_LENGTH,
    is_ulid,
    new_ulid,
    new_ulid_bytes,
    ulid_from_bytes,
    ulid_timestamp_ms,
    ulid_to_bytes,
)

__all__ = [
    "ULID_BYTES_LENGTH",
    "ULID_STR_LENGTH",
    "UlidBinary",
    "is_ulid",
    "new_ulid",
    "new_ulid_bytes",
    "ulid_from_bytes",
    "ulid_length_check",
    "ulid_primary_key_column",
    "ulid_timestamp_ms",
    "ulid_to_bytes",
]
