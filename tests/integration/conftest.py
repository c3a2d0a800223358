"""Shared fixtures for integration-oriented test modules."""

from __future__ import annotations

import pwd

import pytest

from tests.integration.helpers import real_host_tests_enabled, running_as_root


@pytest.fixture
def real_host() -> None:
    """Skip unless real-host integration tests are enabled."""
    if not real_host_tests_enabled():
        pytest.skip("real-host integration tests disabled")


@pytest.fixture
def root_host(real_host: None) -> None:
    """Skip unless the real-host suite runs as root."""
    del real_host
    if not running_as_root():
        pytest.skip("identity switching tests require root")


@pytest.fixture
def unprivileged_user(root_host: None) -> pwd.struct_passwd:
    """Return the ``nobody`` account used as a run-as target."""
    del root_host
    try:
        return pwd.getpwnam("nobody")
    except KeyError:
        pytest.skip("host has no 'nobody' account")
