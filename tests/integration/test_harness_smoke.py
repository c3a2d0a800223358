"""Smoke tests for the integration harness fixture layer."""

from __future__ import annotations

from tests.integration.helpers import real_host_tests_enabled


def test_real_host_flag_defaults_disabled(monkeypatch) -> None:
    """Real-host integration mode should be opt-in by environment flag."""
    monkeypatch.delenv("SERVERHUB_RUN_INTEGRATION_REAL", raising=False)
    assert real_host_tests_enabled() is False

    monkeypatch.setenv("SERVERHUB_RUN_INTEGRATION_REAL", "1")
    assert real_host_tests_enabled() is True
