"""dagplan - parallelism-aware dependency ordering with scoped plans."""

import logging

from .dependency import (
    DAG,
    AddOptions,
    GraphOptions,
    NodeInfo,
    SortOptions,
    StringDAG,
    Topology,
    capacity,
    dependencies,
    labels,
    node,
    nodes,
    only,
    with_dependencies,
    without_dependencies,
)
from .utils.exceptions import (
    Cycle,
    CycleDetectedError,
    DAGError,
    DefinitionError,
    UndefinedDependencyError,
    UndefinedDependentError,
    UndefinedNodeError,
    UnhandledDependency,
    UnhandledDependencyError,
)

__version__ = "0.1.0"

# Silent until the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DAG",
    "StringDAG",
    "NodeInfo",
    "Topology",
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
    "Cycle",
    "UnhandledDependency",
    "DAGError",
    "UndefinedNodeError",
    "UndefinedDependencyError",
    "UndefinedDependentError",
    "CycleDetectedError",
    "UnhandledDependencyError",
    "DefinitionError",
]
