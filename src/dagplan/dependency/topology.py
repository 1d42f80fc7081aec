"""Sort results: per-node info and the leveled topology."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Generic

from ..utils.keys import K, format_key, keys_to_strings


@dataclass(eq=False)
class NodeInfo(Generic[K]):
    """
    A node as seen by one sort.

    Attributes:
        id: Node key
        parent_ids: Dependencies of this node, in the order they unlocked it
        child_ids: Dependents of this node, in the order it unlocked them
    """

    id: K
    parent_ids: list[K] = field(default_factory=list)
    child_ids: list[K] = field(default_factory=list)

    def __str__(self) -> str:
        return format_key(self.id)


class Topology(list[list[NodeInfo[Any]]]):
    """
    Ordered levels of a sort result.

    Every dependency of a node in level ``k`` lies in a level before ``k``.
    Nodes sharing a level have no dependency path between them and may be
    processed in parallel.
    """

    def __str__(self) -> str:
        return " -> ".join(
            ", ".join(keys_to_strings(sorted(info.id for info in level))) for level in self
        )

    def keys(self) -> list[list[Any]]:
        """Level keys, each level sorted by key."""
        return [sorted(info.id for info in level) for level in self]

    def level_of(self, key: Any) -> int:
        """
        Return the index of the level holding ``key``.

        Raises:
            KeyError: If ``key`` is not part of this topology.
        """
        for index, level in enumerate(self):
            if any(info.id == key for info in level):
                return index
        raise KeyError(key)

    def flatten(self) -> list[Any]:
        """All keys in plan order."""
        return [key for level in self.keys() for key in level]

    @classmethod
    def from_levels(cls, levels: Iterable[list[NodeInfo[Any]]]) -> "Topology":
        """Build a topology, dropping empty levels."""
        return cls(level for level in levels if level)
