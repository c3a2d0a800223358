"""Category-specific constructors for ``ErrorDetail`` values.

Each helper fixes the category and a default code so call sites only name
what differs. Only dependency failures are retryable by default.
"""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail

Metadata = Mapping[str, str] | None


def _detail(
    category: ErrorCategory,
    code: str,
    message: str,
    *,
    retryable: bool = False,
    metadata: Metadata = None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata=dict(metadata or {}),
    )


def validation_error(
    message: str, *, code: str = codes.VALIDATION_ERROR, metadata: Metadata = None
) -> ErrorDetail:
    return _detail(ErrorCategory.VALIDATION, code, message, metadata=metadata)


def not_found_error(
    message: str, *, code: str = codes.NOT_FOUND, metadata: Metadata = None
) -> ErrorDetail:
    return _detail(ErrorCategory.NOT_FOUND, code, message, metadata=metadata)


def conflict_error(
    message: str, *, code: str = codes.CONFLICT, metadata: Metadata = None
) -> ErrorDetail:
    return _detail(ErrorCategory.CONFLICT, code, message, metadata=metadata)


def policy_error(
    message: str, *, code: str = codes.POLICY_VIOLATION, metadata: Metadata = None
) -> ErrorDetail:
    """Permission and authorization failures on the managed host."""
    return _detail(ErrorCategory.POLICY, code, message, metadata=metadata)


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Metadata = None,
) -> ErrorDetail:
    """Failures of host tools, Apache, or the audit database."""
    return _detail(
        ErrorCategory.DEPENDENCY,
        code,
        message,
        retryable=retryable,
        metadata=metadata,
    )


def internal_error(
    message: str, *, code: str = codes.INTERNAL_ERROR, metadata: Metadata = None
) -> ErrorDetail:
    return _detail(ErrorCategory.INTERNAL, code, message, metadata=metadata)
