"""Exception normalization utilities for shared error contracts."""

from __future__ import annotations

from . import codes
from .factories import (
    dependency_error,
    internal_error,
    not_found_error,
    policy_error,
    validation_error,
)
from .types import ErrorDetail, ServerHubError


def exception_to_error(exc: BaseException) -> ErrorDetail:
    """Normalize a Python exception into a shared ``ErrorDetail``.

    ``ServerHubError`` subclasses declare their own code and category. Other
    exceptions fall back to a conservative builtin-type mapping.
    """
    metadata = {"exception_type": type(exc).__name__}
    message = str(exc) or type(exc).__name__

    if isinstance(exc, ServerHubError):
        return ErrorDetail(
            code=exc.code,
            message=message,
            category=exc.category,
            retryable=exc.retryable,
            metadata=metadata,
        )

    if isinstance(exc, ValueError):
        return validation_error(message, code=codes.INVALID_ARGUMENT, metadata=metadata)

    if isinstance(exc, KeyError):
        return not_found_error(message, code=codes.RESOURCE_NOT_FOUND, metadata=metadata)

    if isinstance(exc, PermissionError):
        return policy_error(message, code=codes.PERMISSION_DENIED, metadata=metadata)

    if isinstance(exc, TimeoutError):
        return dependency_error(
            message,
            code=codes.DEPENDENCY_TIMEOUT,
            retryable=True,
            metadata=metadata,
        )

    if isinstance(exc, ConnectionError):
        return dependency_error(
            message,
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    return internal_error(
        message,
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
