"""Correlation fields attached to every log record.

Saga and audit scopes bind ``transaction_id`` and ``operation_id`` here so
commands executed inside them are logged with the ids of the operation that
ran them. Values live in a ``ContextVar`` and are always strings.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})
_FIELDS: ContextVar[Mapping[str, str]] = ContextVar("serverhub_log_fields", default=_EMPTY)


def _merged(values: Mapping[str, object]) -> Mapping[str, str]:
    merged = dict(_FIELDS.get())
    merged.update({str(k): str(v) for k, v in values.items() if v is not None})
    return MappingProxyType(merged)


def get_context() -> dict[str, str]:
    """Return the bound fields as a new plain dict."""
    return dict(_FIELDS.get())


def bind_context(**values: object) -> None:
    """Bind fields for the rest of the current context; ``None`` is skipped."""
    if values:
        _FIELDS.set(_merged(values))


def clear_context(*keys: str) -> None:
    """Drop the named fields, or every field when none are named."""
    if not keys:
        _FIELDS.set(_EMPTY)
        return
    remaining = {k: v for k, v in _FIELDS.get().items() if k not in keys}
    _FIELDS.set(MappingProxyType(remaining))


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind fields for one block and restore the previous set afterwards."""
    token = _FIELDS.set(_merged(values))
    try:
        yield
    finally:
        _FIELDS.reset(token)
