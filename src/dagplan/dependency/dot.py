"""DOT export of a dependency graph.

Output format (one statement per line):

    digraph DAG {
    rankdir="LR"
    "api" [shape=record, label="{api|{backend}}"]
    "db" [shape=record, label="{db}"]
    "db" -> "api"
    }

Nodes are written sorted by key, labels sorted lexicographically, and edges
grouped by dependency with both sides sorted by key. Only edges whose
dependency is a registered node are written.
"""

from collections.abc import Iterable, Mapping
from typing import IO, Any

from ..utils.keys import format_key, quote_key


class DotWriter:
    """Writes nodes and edges, each at most once."""

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream
        self._nodes_written: set[Any] = set()
        self._edges_written: set[tuple[Any, Any]] = set()

    def header(self) -> None:
        self.stream.write('digraph DAG {\nrankdir="LR"\n')

    def footer(self) -> None:
        self.stream.write("}\n")

    def node(self, key: Any, labels: Iterable[str]) -> None:
        if key in self._nodes_written:
            return
        self._nodes_written.add(key)

        names = sorted(labels)
        if names:
            label = f"{{{format_key(key)}|{{{'|'.join(names)}}}}}"
        else:
            label = f"{{{format_key(key)}}}"

        self.stream.write(f"{quote_key(key)} [shape=record, label={quote_key(label)}]\n")

    def edge(self, src: Any, dst: Any) -> None:
        if (src, dst) in self._edges_written:
            return
        self._edges_written.add((src, dst))
        self.stream.write(f"{quote_key(src)} -> {quote_key(dst)}\n")


def write_dot(
    nodes: Iterable[Any],
    outputs: Mapping[Any, Mapping[Any, Any]],
    labels: Mapping[Any, Iterable[str]],
    stream: IO[str],
) -> None:
    """
    Write a graph as a DOT digraph.

    Args:
        nodes: Registered node keys
        outputs: Edge buckets, ``outputs[a][b]`` means "b depends on a"
        labels: Labels per node key
        stream: Text stream to write to
    """
    writer = DotWriter(stream)
    ordered = sorted(nodes)

    writer.header()

    for key in ordered:
        writer.node(key, labels.get(key, ()))

    for src in ordered:
        for dst in sorted(outputs.get(src, {})):
            writer.edge(src, dst)

    writer.footer()
