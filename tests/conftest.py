"""Pytest configuration and shared fixtures.

Fixtures are organized by category:
- Graph fixtures: Pre-built graphs used across the suite
- File fixtures: Graph definition and config files on disk
- Infrastructure fixtures: Logging reset between tests
"""

import logging
from pathlib import Path

import pytest
import structlog

from dagplan.dependency.graph import DAG
from dagplan.dependency.strdag import StringDAG
from dagplan.observability.logger import clear_all_context

SERVICES_YAML = """\
nodes:
  - name: web
    dependencies: [api, cache, net]
    labels: [frontend]
  - name: api
    dependencies: [db, cache, net]
    labels: [backend, http]
  - name: db
    dependencies: [net]
  - name: cache
  - name: mesh
    dependencies: [net]
  - name: net
"""


# =============================================================================
# Graph Fixtures
# =============================================================================


@pytest.fixture
def services_graph() -> StringDAG:
    """The web/api/db/cache/mesh/net example graph.

    Plan: cache, net -> db, mesh -> api -> web
    """
    graph = StringDAG()
    graph.add("web", dependencies=["api", "cache", "net"])
    graph.add("api", dependencies=["db", "cache", "net"])
    graph.add("db", dependencies=["net"])
    graph.add("cache")
    graph.add("mesh", dependencies=["net"])
    graph.add("net")
    return graph


@pytest.fixture
def cyclic_graph() -> DAG[str]:
    """a depends on b, b on c, c on a."""
    graph: DAG[str] = DAG()
    graph.add("a", dependencies=["b"])
    graph.add("b", dependencies=["c"])
    graph.add("c", dependencies=["a"])
    return graph


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def services_file(tmp_path: Path) -> Path:
    """Definition file for the services graph."""
    path = tmp_path / "services.yaml"
    path.write_text(SERVICES_YAML)
    return path


@pytest.fixture
def cyclic_file(tmp_path: Path) -> Path:
    """Definition file containing a cycle."""
    path = tmp_path / "cyclic.yaml"
    path.write_text(
        "nodes:\n"
        "  - {name: a, dependencies: [b]}\n"
        "  - {name: b, dependencies: [c]}\n"
        "  - {name: c, dependencies: [a]}\n"
    )
    return path


# =============================================================================
# Infrastructure Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by a test."""
    yield
    structlog.reset_defaults()
    clear_all_context()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
