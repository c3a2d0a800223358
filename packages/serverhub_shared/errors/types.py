"""Canonical shared error types for ServerHub components.

``ErrorDetail`` is the transport-agnostic error shape recorded in audit
metadata. ``ServerHubError`` is the exception base class that carries enough
information to be normalized into an ``ErrorDetail`` without type sniffing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Mapping

from . import codes


class ErrorCategory(str, Enum):
    """High-level error categories shared across component boundaries."""

    UNSPECIFIED = "unspecified"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """Structured error object used in audit metadata and logs."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)


class ServerHubError(Exception):
    """Base class for errors raised by ServerHub components.

    Subclasses override ``code`` and ``category``; ``exception_to_error`` reads
    them directly.
    """

    code: ClassVar[str] = codes.INTERNAL_ERROR
    category: ClassVar[ErrorCategory] = ErrorCategory.INTERNAL
    retryable: ClassVar[bool] = False
