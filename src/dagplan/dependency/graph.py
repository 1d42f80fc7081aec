"""Dependency Graph - node/edge store with leveled, scope-aware planning.

Edges point from a dependency to its dependent: ``add_edge("db", "api")``
means "api depends on db", so db is ordered before api.

Nodes and edges may be declared in any order. An edge may mention a key that
is not (yet) a node; this is only reported when a plan is requested.
"""

from collections.abc import Iterator
from io import StringIO
from typing import IO, Generic

from ..observability.logger import get_logger
from ..utils.keys import K
from .dot import write_dot
from .leveler import GraphSnapshot, sort_levels
from .options import AddOptions, GraphOptions, SortOptions
from .planner import ScopeResolver
from .topology import Topology

logger = get_logger(__name__)


class DAG(Generic[K]):
    """
    Directed acyclic graph of node keys with labels.

    Features:
    - Set semantics for edges and labels (re-adding is a no-op)
    - Parallel-aware ordering: nodes are grouped into levels
    - Scoped plans via ``only`` with an explicit dependency policy
    - Cycle detection with a witness path
    - Diagram export in DOT format

    Not safe for concurrent mutation. Sorting never mutates the graph, so
    concurrent sorts of an unmodified graph are safe.
    """

    def __init__(
        self,
        *options: GraphOptions,
        capacity: int | None = None,
        nodes: list[K] | None = None,
    ) -> None:
        """
        Initialize a graph.

        Args:
            *options: Construction options, applied left to right
            capacity: Expected number of nodes
            nodes: Keys to register as nodes

        Raises:
            ValueError: If capacity is negative
        """
        opts = GraphOptions()
        for option in options:
            opts = opts.merge(option)
        opts = opts.merge(GraphOptions(capacity=capacity, nodes=list(nodes or [])))

        if opts.capacity is not None and opts.capacity < 0:
            raise ValueError(f"capacity must not be negative: {opts.capacity}")

        self.capacity = opts.capacity or 0
        self._nodes: list[K] = []
        self._registered: set[K] = set()
        # outputs[a][b] means b depends on a; inner dicts keep insertion order
        self._outputs: dict[K, dict[K, None]] = {}
        self._num_inputs: dict[K, int] = {}
        self._labels: dict[K, dict[str, None]] = {}

        self.add_nodes(*opts.nodes)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_node(self, key: K) -> bool:
        """
        Register a node.

        Args:
            key: Node key

        Returns:
            False if the key was already registered, True otherwise
        """
        if key in self._registered:
            logger.debug("Node already in graph", node=str(key))
            return False

        self._registered.add(key)
        self._nodes.append(key)
        self._outputs.setdefault(key, {})
        self._num_inputs.setdefault(key, 0)
        return True

    def add_nodes(self, *keys: K) -> bool:
        """Register several nodes, stopping at the first one already registered."""
        for key in keys:
            if not self.add_node(key):
                return False
        return True

    def add_edge(self, from_key: K, to_key: K) -> bool:
        """
        Add the edge ``from_key -> to_key`` ("to_key depends on from_key").

        Neither key has to be a registered node yet.

        Returns:
            True (the edge exists afterwards)
        """
        targets = self._outputs.setdefault(from_key, {})
        if to_key not in targets:
            targets[to_key] = None
            self._num_inputs[to_key] = self._num_inputs.get(to_key, 0) + 1
        return True

    def add_dependency(self, sub: K, *deps: K) -> bool:
        """Declare that ``sub`` depends on each of ``deps``."""
        for dep in deps:
            if not self.add_edge(dep, sub):
                return False
        return True

    def add_dependencies(self, sub: K, deps: list[K]) -> bool:
        """Declare that ``sub`` depends on each of ``deps``."""
        return self.add_dependency(sub, *deps)

    def add_label(self, key: K, *labels: str) -> None:
        """Attach descriptive labels to a node."""
        bucket = self._labels.setdefault(key, {})
        for label in labels:
            bucket[label] = None

    def add_labels(self, key: K, labels: list[str]) -> None:
        """Attach descriptive labels to a node."""
        self.add_label(key, *labels)

    def add(
        self,
        key: K,
        *options: AddOptions,
        dependencies: list[K] | None = None,
        labels: list[str] | None = None,
    ) -> bool:
        """
        Register a node together with its dependencies and labels.

        Dependencies and labels are added even if the node was already
        registered.

        Args:
            key: Node key
            *options: Add options, applied left to right
            dependencies: Keys the node depends on
            labels: Labels to attach

        Returns:
            Whether the node was newly registered
        """
        opts = AddOptions()
        for option in options:
            opts = opts.merge(option)
        opts = opts.merge(
            AddOptions(dependencies=list(dependencies or []), labels=list(labels or []))
        )

        added = self.add_node(key)
        self.add_dependencies(key, opts.dependencies)
        self.add_labels(key, opts.labels)
        return added

    def remove_edge(self, from_key: K, to_key: K) -> bool:
        """
        Remove the edge ``from_key -> to_key`` if present.

        Returns:
            False if ``from_key`` never had an edge bucket, True otherwise
        """
        targets = self._outputs.get(from_key)
        if targets is None:
            return False

        if to_key in targets:
            del targets[to_key]
            self._num_inputs[to_key] -= 1
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> list[K]:
        """Registered keys in registration order."""
        return list(self._nodes)

    def edges(self) -> Iterator[tuple[K, K]]:
        """Yield ``(dependency, dependent)`` pairs in insertion order."""
        for src, targets in self._outputs.items():
            for dst in targets:
                yield src, dst

    def dependents(self, key: K) -> list[K]:
        """Direct dependents of ``key`` in insertion order."""
        return list(self._outputs.get(key, {}))

    def labels(self, key: K) -> list[str]:
        """Labels attached to ``key``, sorted."""
        return sorted(self._labels.get(key, {}))

    def num_inputs(self, key: K) -> int:
        """Number of edges pointing at ``key``."""
        return self._num_inputs.get(key, 0)

    def __contains__(self, key: object) -> bool:
        return key in self._registered

    def __len__(self) -> int:
        return len(self._nodes)

    def snapshot(self) -> GraphSnapshot[K]:
        """Private copy of the graph state for a single sort."""
        return GraphSnapshot.capture(self._nodes, self._outputs, self._num_inputs)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def sort(
        self,
        *options: SortOptions,
        only: list[K] | None = None,
        with_dependencies: bool = False,
        without_dependencies: bool = False,
    ) -> Topology:
        """
        Sort the nodes into levels that can be processed in order.

        Args:
            *options: Scope options, applied left to right
            only: Restrict the plan to these keys
            with_dependencies: Pull in unselected dependencies of selected nodes
            without_dependencies: Leave out unselected dependencies of selected nodes

        Returns:
            The leveled topology

        Raises:
            UndefinedDependencyError: An edge comes from an unregistered key
            UndefinedDependentError: An edge goes to an unregistered key
            CycleDetectedError: The graph contains a cycle
            UnhandledDependencyError: A selected node depends on an unselected
                one and no dependency policy was chosen
        """
        opts = SortOptions()
        for option in options:
            opts = opts.merge(option)
        opts = opts.merge(
            SortOptions(
                only=list(only or []),
                with_dependencies=with_dependencies,
                without_dependencies=without_dependencies,
            )
        )

        # Two copies: the leveler consumes one, the resolver needs original edges
        working = self.snapshot()
        original = working.copy()

        levels = sort_levels(working)
        topology = ScopeResolver(original.outputs, opts).resolve(levels)

        logger.debug(
            "Sorted dependency graph",
            nodes=len(self._nodes),
            levels=len(topology),
            scoped=opts.scoped,
        )

        return topology

    def plan(
        self,
        *options: SortOptions,
        only: list[K] | None = None,
        with_dependencies: bool = False,
        without_dependencies: bool = False,
    ) -> Topology:
        """Alias of ``sort``."""
        return self.sort(
            *options,
            only=only,
            with_dependencies=with_dependencies,
            without_dependencies=without_dependencies,
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def write_dot_to(self, stream: IO[str]) -> None:
        """Write the graph as a DOT digraph to ``stream``."""
        write_dot(self._nodes, self._outputs, self._labels, stream)

    def to_dot(self) -> str:
        """
        Generate DOT format representation of the dependency graph.

        Returns:
            String containing the Graphviz DOT definition
        """
        buffer = StringIO()
        self.write_dot_to(buffer)
        return buffer.getvalue()

