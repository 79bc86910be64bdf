# Copyright (c) Syntropy Systems
"""Alignment quality measures and weighted measure combinations."""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from typing_extensions import TypeAlias, override

from alignlab.errors import ConfigError, MissingFile

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from alignlab.graph import Alignment, Graph


class Measure(ABC):
    """Scoring function over an alignment of a fixed graph pair."""

    name: str = ""
    # Local measures score node pairs independently of topology
    local: bool = False

    def __init__(self, g1: Graph, g2: Graph) -> None:
        self.g1 = g1
        self.g2 = g2

    @abstractmethod
    def eval(self, alignment: Alignment) -> float:
        """Score an alignment."""

    def conserved_edges(self, alignment: Alignment) -> int:
        """Count G1 edges mapped onto G2 edges."""
        count = 0
        for edge in self.g1.edges:
            u, v = tuple(edge)
            if u in alignment and v in alignment:
                if self.g2.has_edge(alignment[u], alignment[v]):
                    count += 1
        return count

    def image_edges(self, alignment: Alignment) -> int:
        """Count edges of the G2 subgraph induced by the alignment image."""
        return self.g2.induced_edge_count(alignment.values())


class EdgeCorrectness(Measure):
    name = "ec"

    @override
    def eval(self, alignment: Alignment) -> float:
        total = self.g1.edge_count()
        if total == 0:
            return 0.0
        return self.conserved_edges(alignment) / total


class InducedConservedStructure(Measure):
    name = "ics"

    @override
    def eval(self, alignment: Alignment) -> float:
        induced = self.image_edges(alignment)
        if induced == 0:
            return 0.0
        return self.conserved_edges(alignment) / induced


class SymmetricSubstructureScore(Measure):
    name = "s3"

    @override
    def eval(self, alignment: Alignment) -> float:
        conserved = self.conserved_edges(alignment)
        denominator = self.g1.edge_count() + self.image_edges(alignment) - conserved
        if denominator == 0:
            return 0.0
        return conserved / denominator


class SequenceSimilarity(Measure):
    """Mean node similarity of aligned pairs, over all G1 nodes."""

    name = "sequence"
    local = True

    def __init__(
        self,
        g1: Graph,
        g2: Graph,
        similarities: Mapping[tuple[str, str], float],
    ) -> None:
        super().__init__(g1, g2)
        self.similarities = similarities

    @classmethod
    def from_file(cls, g1: Graph, g2: Graph, path: Path) -> SequenceSimilarity:
        """Load 'u v score' lines."""
        if not path.exists():
            msg = f"Similarity file not found: {path}"
            raise MissingFile(msg)
        similarities: dict[tuple[str, str], float] = {}
        with path.open() as f:
            for raw_line in f:
                tokens = raw_line.split()
                if len(tokens) >= 3:
                    similarities[(tokens[0], tokens[1])] = float(tokens[2])
        return cls(g1, g2, similarities)

    @override
    def eval(self, alignment: Alignment) -> float:
        if not self.g1.nodes:
            return 0.0
        total = sum(self.similarities.get((u, v), 0.0) for u, v in alignment.items())
        return total / len(self.g1.nodes)


MeasureLoader: TypeAlias = Callable[["Graph", "Graph", str], Measure]

TOPOLOGY_MEASURES: dict[str, type[Measure]] = {
    "ec": EdgeCorrectness,
    "ics": InducedConservedStructure,
    "s3": SymmetricSubstructureScore,
}


def load_measure(
    g1: Graph,
    g2: Graph,
    name: str,
    similarity_dir: Path | None = None,
) -> Measure:
    """Build the measure called `name` for the pair (g1, g2)."""
    if name in TOPOLOGY_MEASURES:
        return TOPOLOGY_MEASURES[name](g1, g2)
    if name == SequenceSimilarity.name:
        base = similarity_dir if similarity_dir is not None else Path("sequence")
        return SequenceSimilarity.from_file(g1, g2, base / f"{g1.name}_{g2.name}.sim")
    msg = f"Unknown measure: {name}"
    raise ConfigError(msg)


class MeasureCombination:
    """Non-negative weighted sum over a fixed set of measures."""

    def __init__(self, weighted: Iterable[tuple[Measure, float]]) -> None:
        self._measures: dict[str, Measure] = {}
        self._weights: dict[str, float] = {}
        for measure, weight in weighted:
            if measure.name in self._measures:
                msg = f"Duplicate measure in combination: {measure.name}"
                raise ConfigError(msg)
            if weight < 0:
                msg = f"Negative weight for measure {measure.name}: {weight}"
                raise ConfigError(msg)
            self._measures[measure.name] = measure
            self._weights[measure.name] = float(weight)

    def __contains__(self, name: object) -> bool:
        return name in self._measures

    @property
    def names(self) -> list[str]:
        return list(self._measures)

    def get_measure(self, name: str) -> Measure:
        if name not in self._measures:
            msg = f"Measure '{name}' is not part of the objective"
            raise ConfigError(msg)
        return self._measures[name]

    def weights(self) -> dict[str, float]:
        return dict(self._weights)

    def set_weights(self, weights: Mapping[str, float]) -> None:
        """Replace the whole weight vector; the measure set is fixed."""
        if set(weights) != set(self._weights):
            msg = (
                f"Weights must cover exactly {sorted(self._weights)}, "
                f"got {sorted(weights)}"
            )
            raise ConfigError(msg)
        for name, weight in weights.items():
            if weight < 0:
                msg = f"Negative weight for measure {name}: {weight}"
                raise ConfigError(msg)
        self._weights = {name: float(weights[name]) for name in self._weights}

    def eval(self, alignment: Alignment) -> float:
        return sum(
            self._weights[name] * measure.eval(alignment)
            for name, measure in self._measures.items()
            if self._weights[name] > 0
        )

    def eval_all(self, alignment: Alignment) -> dict[str, float]:
        """Score every measure individually."""
        return {name: m.eval(alignment) for name, m in self._measures.items()}

    def format_weights(self) -> str:
        return ", ".join(f"{name}={w:g}" for name, w in self._weights.items())
