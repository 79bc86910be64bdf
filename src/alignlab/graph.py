# Copyright (c) Syntropy Systems
"""Minimal graph and alignment file handling."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from typing_extensions import TypeAlias

from alignlab.errors import ConfigError, MissingFile

if TYPE_CHECKING:
    from collections.abc import Iterable

Alignment: TypeAlias = dict[str, str]

GRAPH_SUFFIX = ".el"


@dataclass
class Graph:
    """Undirected graph identified by name."""

    name: str
    edges: set[frozenset[str]] = field(default_factory=set)
    nodes: list[str] = field(default_factory=list)

    @classmethod
    def from_edges(cls, name: str, edges: Iterable[tuple[str, str]]) -> Graph:
        """Build a graph from (u, v) pairs, keeping first-seen node order."""
        graph = cls(name=name)
        seen: set[str] = set()
        for u, v in edges:
            for node in (u, v):
                if node not in seen:
                    seen.add(node)
                    graph.nodes.append(node)
            if u != v:
                graph.edges.add(frozenset((u, v)))
        return graph

    @classmethod
    def load(cls, path: Path, name: str | None = None) -> Graph:
        """Load an edge list file with one 'u v' pair per line."""
        if not path.exists():
            msg = f"Graph file not found: {path}"
            raise MissingFile(msg)

        pairs: list[tuple[str, str]] = []
        with path.open() as f:
            for lineno, raw_line in enumerate(f, 1):
                tokens = raw_line.split()
                if not tokens or tokens[0].startswith("#"):
                    continue
                if len(tokens) < 2:
                    msg = f"{path}:{lineno}: expected 'u v', got {raw_line.strip()!r}"
                    raise ConfigError(msg)
                pairs.append((tokens[0], tokens[1]))

        return cls.from_edges(name or path.stem, pairs)

    def has_edge(self, u: str, v: str) -> bool:
        return frozenset((u, v)) in self.edges

    def edge_count(self) -> int:
        return len(self.edges)

    def induced_edge_count(self, nodes: Iterable[str]) -> int:
        """Count edges with both endpoints in nodes."""
        subset = set(nodes)
        return sum(1 for edge in self.edges if edge <= subset)


def load_graph(graphs_dir: Path, name: str) -> Graph:
    """Load graph `name` from `<graphs_dir>/<name>.el`."""
    return Graph.load(graphs_dir / f"{name}{GRAPH_SUFFIX}", name=name)


def load_alignment(path: Path) -> Alignment:
    """Read an alignment file with one 'g1_node g2_node' pair per line."""
    if not path.exists():
        msg = f"Alignment file not found: {path}"
        raise MissingFile(msg)

    alignment: Alignment = {}
    with path.open() as f:
        for raw_line in f:
            tokens = raw_line.split()
            if len(tokens) >= 2:
                alignment[tokens[0]] = tokens[1]
    return alignment


def write_alignment(alignment: Alignment, path: Path) -> None:
    """Write an alignment in the format read by load_alignment.

    The file appears at `path` only once complete; collectors treat its
    existence as the job having finished.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w") as f:
            for u, v in alignment.items():
                _ = f.write(f"{u}\t{v}\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


@dataclass(frozen=True)
class NetworkPair:
    """Ordered (G1, G2) identity pair."""

    g1: str
    g2: str

    @property
    def label(self) -> str:
        return f"{self.g1}-{self.g2}"
