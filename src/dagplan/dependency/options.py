"""Option values for building graphs, adding nodes and sorting.

Options are plain dataclasses merged left to right: boolean flags can only be
switched on by a later option, list fields accumulate, scalar values are
overridden by the last option that sets them.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GraphOptions:
    """
    Construction options for a DAG.

    Attributes:
        capacity: Expected number of nodes (sizing hint, never a limit)
        nodes: Keys registered as nodes right after construction
    """

    capacity: int | None = None
    nodes: list[Any] = field(default_factory=list)

    def merge(self, other: "GraphOptions") -> "GraphOptions":
        """Return a new value with ``other`` applied on top of this one."""
        return GraphOptions(
            capacity=other.capacity if other.capacity is not None else self.capacity,
            nodes=[*self.nodes, *other.nodes],
        )


@dataclass
class AddOptions:
    """
    Options for ``DAG.add``.

    Attributes:
        dependencies: Keys the added node depends on
        labels: Descriptive labels attached to the node
    """

    dependencies: list[Any] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)

    def merge(self, other: "AddOptions") -> "AddOptions":
        """Return a new value with ``other`` applied on top of this one."""
        return AddOptions(
            dependencies=[*self.dependencies, *other.dependencies],
            labels=[*self.labels, *other.labels],
        )


@dataclass
class SortOptions:
    """
    Scope options for ``DAG.sort`` / ``DAG.plan``.

    Attributes:
        only: Restrict the plan to these keys (empty means every node)
        with_dependencies: Pull dependencies of selected nodes into the plan
        without_dependencies: Leave dependencies of selected nodes out of the plan
    """

    only: list[Any] = field(default_factory=list)
    with_dependencies: bool = False
    without_dependencies: bool = False

    def merge(self, other: "SortOptions") -> "SortOptions":
        """Return a new value with ``other`` applied on top of this one."""
        return SortOptions(
            only=[*self.only, *other.only],
            with_dependencies=self.with_dependencies or other.with_dependencies,
            without_dependencies=self.without_dependencies or other.without_dependencies,
        )

    @property
    def scoped(self) -> bool:
        """Whether the plan is restricted to a selection."""
        return bool(self.only)


def capacity(n: int) -> GraphOptions:
    """Presize hint for the node list."""
    return GraphOptions(capacity=n)


def node(*keys: Any) -> GraphOptions:
    """Register ``keys`` as nodes at construction time."""
    return GraphOptions(nodes=list(keys))


def nodes(keys: list[Any]) -> GraphOptions:
    """Register ``keys`` as nodes at construction time."""
    return GraphOptions(nodes=list(keys))


def dependencies(*keys: Any) -> AddOptions:
    """Declare dependencies of the node being added."""
    return AddOptions(dependencies=list(keys))


def labels(names: list[str]) -> AddOptions:
    """Attach labels to the node being added."""
    return AddOptions(labels=list(names))


def only(*keys: Any) -> SortOptions:
    """Restrict the plan to ``keys``. Repeated use accumulates."""
    return SortOptions(only=list(keys))


def with_dependencies() -> SortOptions:
    """Include unselected dependencies of selected nodes."""
    return SortOptions(with_dependencies=True)


def without_dependencies() -> SortOptions:
    """Exclude unselected dependencies of selected nodes."""
    return SortOptions(without_dependencies=True)
