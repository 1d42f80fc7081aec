"""Scope Resolver - restrict a leveled plan to a selection of nodes.

Overview:
--------
The resolver takes the full, unfiltered levels of a graph and a SortOptions
value and keeps only the nodes the caller asked for. Dependencies of selected
nodes that fall outside the selection are never guessed about: the caller
chooses a policy.

Dependency Policies:
-------------------
- with_dependencies: pull the dependency into the plan and treat it as
  selected, so its own dependencies are evaluated the same way
- without_dependencies: leave the dependency out (the plan then has an
  accepted gap upstream of a selected node)
- neither: fail with UnhandledDependencyError naming the dependency and the
  selected nodes needing it

Processing Order:
----------------
Levels are walked from the most downstream to the most upstream one. Whether
a node is needed is only known once every node depending on it was decided,
and all of those sit in later levels.
Within a level nodes are visited in key order, so the reported unhandled
dependency does not depend on registration order.

Example:
-------
Given:
  cache, net -> db, mesh -> api -> web

  only("db", "mesh")                          -> error: "net" depended by "db" and "mesh" is not included
  only("db", "mesh") + without_dependencies() -> db, mesh
  only("db", "mesh") + with_dependencies()    -> net -> db, mesh
"""

from collections.abc import Mapping
from typing import Any, Generic

from ..observability.logger import get_logger
from ..utils.exceptions import UnhandledDependency, UnhandledDependencyError
from ..utils.keys import K
from .options import SortOptions
from .topology import NodeInfo, Topology

logger = get_logger(__name__)


class ScopeResolver(Generic[K]):
    """
    Filters leveled sort output against a selection and dependency policy.

    Attributes:
        outputs: Original (unconsumed) edge buckets of the graph
        options: Scope options of this sort
    """

    def __init__(self, outputs: Mapping[K, Mapping[K, Any]], options: SortOptions) -> None:
        """
        Initialize the resolver.

        Args:
            outputs: Edge buckets as they were before leveling consumed them
            options: Scope options of this sort
        """
        self.outputs = outputs
        self.options = options

    def resolve(self, levels: list[list[NodeInfo[K]]]) -> Topology:
        """
        Build the final topology.

        Args:
            levels: All levels of the graph, as produced by the leveler

        Returns:
            Topology with every level sorted by key and empty levels dropped

        Raises:
            UnhandledDependencyError: A selected node depends on an unselected
                one and no dependency policy was given
        """
        selected: set[K] | None = set(self.options.only) if self.options.scoped else None

        if selected is not None:
            known = {info.id for level in levels for info in level}
            for key in self.options.only:
                if key not in known:
                    logger.warning("Selected node is not in the graph", node=str(key))

        resolved: list[list[NodeInfo[K]]] = [[] for _ in levels]

        for index in range(len(levels) - 1, -1, -1):
            ordered = sorted(levels[index], key=lambda info: info.id)
            resolved[index] = [info for info in ordered if self._include(info, selected)]

        topology = Topology.from_levels(resolved)

        logger.debug(
            "Resolved plan scope",
            scoped=selected is not None,
            levels=len(topology),
            dropped_levels=len(levels) - len(topology),
        )

        return topology

    def _include(self, info: NodeInfo[K], selected: set[K] | None) -> bool:
        """
        Decide whether a node belongs in the plan, growing ``selected`` if needed.

        Raises:
            UnhandledDependencyError: See ``resolve``
        """
        if selected is None or info.id in selected:
            return True

        if self.options.without_dependencies:
            return False

        dependents = sorted(d for d in self.outputs.get(info.id, {}) if d in selected)
        if not dependents:
            return False

        if not self.options.with_dependencies:
            raise UnhandledDependencyError(
                [UnhandledDependency(id=info.id, dependents=dependents)]
            )

        logger.debug(
            "Including dependency of selected node(s)",
            node=str(info.id),
            dependents=[str(d) for d in dependents],
        )
        selected.add(info.id)
        return True
