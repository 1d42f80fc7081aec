"""Custom exceptions for dagplan.

Exception Hierarchy:
-------------------
DAGError (base)
├── UndefinedNodeError              # Edge references a key never added as a node
│   ├── UndefinedDependencyError    # ...as the dependency (edge source)
│   └── UndefinedDependentError     # ...as the dependent (edge target)
├── CycleDetectedError              # Unresolved edges left after leveling
├── UnhandledDependencyError        # Scoped plan misses a dependency, no policy given
└── DefinitionError                 # Graph definition file is malformed

Usage Guidelines:
----------------
1. All three planning errors are terminal for the sort that raised them.
   No partial plan is ever returned alongside an error.

2. Retrying a sort without changing the graph or the scope options always
   fails the same way. Recover from UnhandledDependencyError by choosing a
   policy explicitly (with_dependencies / without_dependencies) or by adding
   the dependency to the selection.

3. Build-time mistakes (adding a node twice, removing an edge from a key that
   never had one) are not exceptions. The graph methods return False.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .keys import keys_to_strings, quote_key


@dataclass
class Cycle:
    """
    A witness path through a circular dependency.

    The path starts and ends at the same key. It is one cycle found in the
    unresolved part of the graph, not necessarily the shortest one and not
    the only one.
    """

    path: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return " -> ".join(keys_to_strings(self.path))


@dataclass
class UnhandledDependency:
    """A dependency outside the selection together with the selected nodes needing it."""

    id: Any
    dependents: list[Any] = field(default_factory=list)


class DAGError(Exception):
    """Base exception for all dagplan errors."""

    pass


class UndefinedNodeError(DAGError):
    """Raised when an edge refers to a key that was never added as a node."""

    def __init__(self, message: str, undefined_node: Any) -> None:
        """
        Initialize UndefinedNodeError.

        Args:
            message: Error message.
            undefined_node: The key that is missing from the node set.
        """
        super().__init__(message)
        self.undefined_node = undefined_node


class UndefinedDependencyError(UndefinedNodeError):
    """Raised when a node depends on a key that was never added as a node."""

    def __init__(self, undefined_node: Any, dependents: list[Any]) -> None:
        """
        Initialize UndefinedDependencyError.

        Args:
            undefined_node: The unregistered dependency.
            dependents: Nodes that declared a dependency on it.
        """
        message = (
            f"undefined node {quote_key(undefined_node)} is depended by node(s): "
            f"{', '.join(keys_to_strings(dependents))}"
        )
        super().__init__(message, undefined_node)
        self.dependents = dependents


class UndefinedDependentError(UndefinedNodeError):
    """Raised when dependencies were declared for a key that was never added as a node."""

    def __init__(self, undefined_node: Any, dependencies: list[Any]) -> None:
        """
        Initialize UndefinedDependentError.

        Args:
            undefined_node: The unregistered dependent.
            dependencies: Nodes it was declared to depend on.
        """
        message = (
            f"undefined node {quote_key(undefined_node)} depends on node(s): "
            f"{', '.join(keys_to_strings(dependencies))}"
        )
        super().__init__(message, undefined_node)
        self.dependencies = dependencies


class CycleDetectedError(DAGError):
    """
    Raised when the graph contains at least one circular dependency.

    Only a single witness cycle is reported per sort. When several disjoint
    cycles exist, the one reachable from the smallest unresolved key is the
    one named here; the others are not analyzed.
    """

    def __init__(self, cycle: Cycle) -> None:
        """
        Initialize CycleDetectedError.

        Args:
            cycle: Witness path of the detected cycle.
        """
        super().__init__(f"cycle detected: {cycle}")
        self.cycle = cycle


class UnhandledDependencyError(DAGError):
    """
    Raised when a selected node depends on a node outside the selection.

    Only the first offending dependency found is reported, even if the
    selection misses several.
    """

    def __init__(self, unhandled_dependencies: list[UnhandledDependency]) -> None:
        """
        Initialize UnhandledDependencyError.

        Args:
            unhandled_dependencies: Offending dependencies. Must not be empty.
        """
        if not unhandled_dependencies:
            raise ValueError("unhandled_dependencies must not be empty")
        self.unhandled_dependencies = unhandled_dependencies
        super().__init__(self._format(unhandled_dependencies[0]))

    @staticmethod
    def _format(dependency: UnhandledDependency) -> str:
        dependents = [quote_key(d) for d in dependency.dependents]

        if len(dependents) < 3:
            joined = " and ".join(dependents)
        else:
            joined = ", ".join(dependents[:-1]) + ", and " + dependents[-1]

        return f"{quote_key(dependency.id)} depended by {joined} is not included"


class DefinitionError(DAGError):
    """Raised when a graph definition file cannot be loaded."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize DefinitionError.

        Args:
            message: Error message.
            path: Optional path of the offending file.
            original_error: Optional original exception that caused this error.
        """
        super().__init__(message)
        self.path = path
        self.original_error = original_error

    def __str__(self) -> str:
        """
        Return string representation with the file path if available.

        Returns:
            str: Error message prefixed with the path if set.
        """
        if self.path:
            return f"{self.path}: {self.args[0]}"
        return str(self.args[0]) if self.args else "invalid graph definition"
