"""Dependency graph, leveled planning and scope resolution."""

from .graph import DAG
from .options import (
    AddOptions,
    GraphOptions,
    SortOptions,
    capacity,
    dependencies,
    labels,
    node,
    nodes,
    only,
    with_dependencies,
    without_dependencies,
)
from .planner import ScopeResolver
from .strdag import StringDAG
from .topology import NodeInfo, Topology

__all__ = [
    "DAG",
    "StringDAG",
    "NodeInfo",
    "Topology",
    "ScopeResolver",
    "GraphOptions",
    "AddOptions",
    "SortOptions",
    "capacity",
    "node",
    "nodes",
    "dependencies",
    "labels",
    "only",
    "with_dependencies",
    "without_dependencies",
]
