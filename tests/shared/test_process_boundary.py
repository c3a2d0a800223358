"""Static checks that process spawning stays behind the command gateway."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.shared.static_analysis_helpers import ImportGraph

_REPO_ROOT = Path(__file__).resolve().parents[2]
_GATEWAY = "services.provisioning.command_gateway"
_PROCESS_MODULES = ("subprocess", "pty", "asyncio.subprocess")
_COMPONENT_INTERNALS = (
    "services.provisioning.command_gateway.implementation",
    "services.provisioning.saga.implementation",
    "services.provisioning.audit_trail.implementation",
)


@pytest.fixture(scope="module")
def graph() -> ImportGraph:
    return ImportGraph(_REPO_ROOT)


def test_only_the_gateway_spawns_processes(graph: ImportGraph) -> None:
    violations = [
        line
        for line in graph.violations(sources=None, targets=_PROCESS_MODULES)
        if not line.startswith(f"{_GATEWAY}.") and not line.startswith(f"{_GATEWAY}:")
    ]

    assert violations == []


def test_gateway_is_the_process_spawner(graph: ImportGraph) -> None:
    assert graph.violations(sources=_GATEWAY, targets=("subprocess",))


def test_workflows_use_component_public_api_only(graph: ImportGraph) -> None:
    assert graph.violations(
        sources="services.provisioning.workflows", targets=_COMPONENT_INTERNALS
    ) == []


def test_relative_imports_resolve_to_absolute_modules(graph: ImportGraph) -> None:
    targets = {
        edge.target
        for edge in graph.edges
        if edge.source == "packages.serverhub_shared.errors.factories"
    }

    assert "packages.serverhub_shared.errors.types" in targets
