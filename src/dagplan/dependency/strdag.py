"""String-keyed graph.

Same operations as ``DAG``; every key passed in is converted with ``str()``,
so plans, errors and diagrams always carry plain strings.
"""

from dataclasses import replace
from typing import Any

from .graph import DAG
from .options import (
    AddOptions,
    GraphOptions,
    SortOptions,
    capacity,
    labels,
    with_dependencies,
    without_dependencies,
)
from .options import dependencies as _dependencies
from .options import nodes as _nodes
from .options import only as _only
from .topology import Topology

__all__ = [
    "StringDAG",
    "capacity",
    "dependencies",
    "labels",
    "nodes",
    "only",
    "with_dependencies",
    "without_dependencies",
]


def _strs(keys: Any) -> list[str]:
    return [str(k) for k in keys or []]


def nodes(ids: list[Any]) -> GraphOptions:
    """Register ``ids`` as nodes at construction time."""
    return _nodes(_strs(ids))


def dependencies(ids: list[Any]) -> AddOptions:
    """Declare dependencies of the node being added."""
    return _dependencies(*_strs(ids))


def only(*ids: Any) -> SortOptions:
    """Restrict the plan to ``ids``."""
    return _only(*_strs(ids))


class StringDAG(DAG[str]):
    """A ``DAG`` whose keys are plain strings."""

    def add_node(self, key: Any) -> bool:
        return super().add_node(str(key))

    def add_edge(self, from_key: Any, to_key: Any) -> bool:
        return super().add_edge(str(from_key), str(to_key))

    def add_label(self, key: Any, *labels: str) -> None:
        super().add_label(str(key), *labels)

    def add(self, key: Any, *options: AddOptions, **kwargs: Any) -> bool:
        return super().add(str(key), *options, **kwargs)

    def remove_edge(self, from_key: Any, to_key: Any) -> bool:
        return super().remove_edge(str(from_key), str(to_key))

    def dependents(self, key: Any) -> list[str]:
        return super().dependents(str(key))

    def labels(self, key: Any) -> list[str]:
        return super().labels(str(key))

    def num_inputs(self, key: Any) -> int:
        return super().num_inputs(str(key))

    def __contains__(self, key: object) -> bool:
        return super().__contains__(str(key))

    def sort(
        self,
        *options: SortOptions,
        only: list[Any] | None = None,
        with_dependencies: bool = False,
        without_dependencies: bool = False,
    ) -> Topology:
        coerced = [replace(option, only=_strs(option.only)) for option in options]
        return super().sort(
            *coerced,
            only=_strs(only),
            with_dependencies=with_dependencies,
            without_dependencies=without_dependencies,
        )
