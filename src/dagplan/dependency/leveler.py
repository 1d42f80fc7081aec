"""Leveler - layered topological sort with cycle witness reconstruction.

The leveler works on a private ``GraphSnapshot`` so that consuming edges during
the sort never touches the live graph.

ALGORITHM (multi-source layered Kahn's):
1. Seed the frontier with every node that has no remaining inputs
2. Pop nodes from the frontier (FIFO); for each outgoing edge:
   - remove the edge from the snapshot
   - record parent/child on both NodeInfos
   - decrement the target's remaining inputs; at zero, push the target on
     the NEXT frontier
3. When the frontier is empty, the next frontier becomes the new level

Example:
    cache, net -> db, mesh -> api -> web

    - Level 0: cache, net   (no dependencies)
    - Level 1: db, mesh     (need net)
    - Level 2: api          (needs db, cache, net)
    - Level 3: web          (needs api, cache, net)

A node only lands in level k once ALL of its inputs were consumed, so no two
nodes in a level depend on each other.
"""

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic

from ..observability.logger import TRACE, get_logger
from ..utils.exceptions import (
    Cycle,
    CycleDetectedError,
    UndefinedDependencyError,
    UndefinedDependentError,
)
from ..utils.keys import K
from .topology import NodeInfo

logger = get_logger(__name__)
# Per-edge events go through the stdlib logger, which knows the TRACE level
edge_logger = logging.getLogger(__name__)


@dataclass
class GraphSnapshot(Generic[K]):
    """
    Private working copy of a graph's nodes and edges.

    Attributes:
        nodes: Registered keys in registration order
        outputs: Edge buckets, ``outputs[a][b]`` means "b depends on a"
        num_inputs: Remaining-input count per key
    """

    nodes: list[K] = field(default_factory=list)
    outputs: dict[K, dict[K, None]] = field(default_factory=dict)
    num_inputs: dict[K, int] = field(default_factory=dict)

    @classmethod
    def capture(
        cls,
        nodes: Iterable[K],
        outputs: dict[K, dict[K, None]],
        num_inputs: dict[K, int],
    ) -> "GraphSnapshot[K]":
        """Copy the given state so later mutation of either side is independent."""
        return cls(
            nodes=list(nodes),
            outputs={src: dict(targets) for src, targets in outputs.items()},
            num_inputs=dict(num_inputs),
        )

    def copy(self) -> "GraphSnapshot[K]":
        """Return an independent copy of this snapshot."""
        return GraphSnapshot.capture(self.nodes, self.outputs, self.num_inputs)

    def remove_edge(self, src: K, dst: K) -> None:
        """Consume the edge ``src -> dst``."""
        del self.outputs[src][dst]
        self.num_inputs[dst] -= 1

    def unresolved_edges(self) -> int:
        """Total number of edges that were never consumed."""
        return sum(self.num_inputs.values())


def check_undefined_nodes(snapshot: GraphSnapshot[Any]) -> None:
    """
    Validate that every edge endpoint is a registered node.

    Edge sources are checked first, then edge targets.

    Raises:
        UndefinedDependencyError: If an edge source was never registered
        UndefinedDependentError: If an edge target was never registered
    """
    registered = set(snapshot.nodes)

    for src, targets in snapshot.outputs.items():
        if src not in registered and targets:
            raise UndefinedDependencyError(src, sorted(targets))

    undefined_targets: dict[Any, list[Any]] = {}
    for src, targets in snapshot.outputs.items():
        for dst in targets:
            if dst not in registered:
                undefined_targets.setdefault(dst, []).append(src)

    for dst, sources in undefined_targets.items():
        raise UndefinedDependentError(dst, sorted(sources))


def level_graph(snapshot: GraphSnapshot[K]) -> tuple[list[list[NodeInfo[K]]], dict[K, NodeInfo[K]]]:
    """
    Group the snapshot's nodes into dependency levels.

    Consumes edges of ``snapshot``. Nodes caught in (or downstream of) a cycle
    are left unleveled with their remaining inputs still counted; use
    ``find_cycle`` afterwards.

    Args:
        snapshot: Working copy to consume

    Returns:
        Tuple of (levels, NodeInfo per key)
    """
    infos: dict[K, NodeInfo[K]] = {}
    current: deque[NodeInfo[K]] = deque()

    for key in snapshot.nodes:
        info = NodeInfo(id=key)
        infos[key] = info
        if snapshot.num_inputs.get(key, 0) == 0:
            current.append(info)

    levels: list[list[NodeInfo[K]]] = []
    level: list[NodeInfo[K]] = []
    next_frontier: deque[NodeInfo[K]] = deque()

    while current:
        info = current.popleft()
        level.append(info)

        for target in list(snapshot.outputs.get(info.id, {})):
            snapshot.remove_edge(info.id, target)
            edge_logger.log(TRACE, "Consumed edge %s -> %s", info.id, target)

            target_info = infos[target]
            target_info.parent_ids.append(info.id)
            info.child_ids.append(target)

            if snapshot.num_inputs[target] == 0:
                next_frontier.append(target_info)

        if not current:
            levels.append(level)
            level = []
            current, next_frontier = next_frontier, deque()

    logger.debug(
        "Leveled graph",
        nodes=len(infos),
        levels=len(levels),
        unresolved_edges=snapshot.unresolved_edges(),
    )

    return levels, infos


def find_cycle(snapshot: GraphSnapshot[K]) -> Cycle | None:
    """
    Reconstruct one cycle from the edges a leveling pass could not consume.

    Nodes whose remaining edges only lead out of the unresolved set are pruned
    first, so every node left in the core has an edge to another core node and
    the forward walk always closes a loop. The walk starts from the smallest
    core key and follows the first remaining edge of each node.

    Args:
        snapshot: Snapshot after ``level_graph`` consumed it

    Returns:
        The witness cycle, or None if every edge was consumed
    """
    if snapshot.unresolved_edges() == 0:
        return None

    core = {key for key, count in snapshot.num_inputs.items() if count > 0}

    out_degree = {
        key: sum(1 for dst in snapshot.outputs.get(key, {}) if dst in core) for key in core
    }
    in_core_sources: dict[K, list[K]] = {key: [] for key in core}
    for src in core:
        for dst in snapshot.outputs.get(src, {}):
            if dst in core:
                in_core_sources[dst].append(src)

    dead_ends = deque(key for key, degree in out_degree.items() if degree == 0)
    while dead_ends:
        key = dead_ends.popleft()
        core.discard(key)
        for src in in_core_sources[key]:
            if src in core:
                out_degree[src] -= 1
                if out_degree[src] == 0:
                    dead_ends.append(src)

    if not core:
        raise RuntimeError(
            f"invalid state: unresolved edges remain but no cycle was found: "
            f"nodes={sorted(key for key, count in snapshot.num_inputs.items() if count > 0)}"
        )

    current = min(core)
    seen: set[K] = set()
    path: list[K] = []

    while current not in seen:
        seen.add(current)
        path.append(current)
        current = next(dst for dst in snapshot.outputs[current] if dst in core)

    # Drop the lead-in before the loop so the path starts where it ends
    path = path[path.index(current) :]
    path.append(current)

    return Cycle(path=path)


def sort_levels(snapshot: GraphSnapshot[K]) -> list[list[NodeInfo[K]]]:
    """
    Validate, level, and cycle-check a snapshot.

    Args:
        snapshot: Working copy to consume

    Returns:
        All levels of the graph, unfiltered

    Raises:
        UndefinedDependencyError: Edge from an unregistered key
        UndefinedDependentError: Edge to an unregistered key
        CycleDetectedError: The graph has a circular dependency
    """
    check_undefined_nodes(snapshot)

    levels, _ = level_graph(snapshot)

    cycle = find_cycle(snapshot)
    if cycle is not None:
        logger.debug("Cycle detected", path=[str(k) for k in cycle.path])
        raise CycleDetectedError(cycle)

    return levels
