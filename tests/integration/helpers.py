"""Shared helpers for integration tests."""

from __future__ import annotations

import os


def real_host_tests_enabled() -> bool:
    """Return True when real-host integration tests are explicitly enabled."""
    raw = os.getenv("SERVERHUB_RUN_INTEGRATION_REAL", "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def running_as_root() -> bool:
    """Return True when the test process has an effective uid of 0."""
    return os.geteuid() == 0
