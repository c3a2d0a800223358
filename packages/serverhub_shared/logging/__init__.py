"""Structured logging for ServerHub components.

One stdout handler per process, JSON or key=value lines, with correlation ids
from ``log_context`` merged into every record.
"""

from . import fields
from .config import configure_logging, get_logger
from .context import bind_context, clear_context, get_context, log_context

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "fields",
    "get_context",
    "get_logger",
    "log_context",
]
