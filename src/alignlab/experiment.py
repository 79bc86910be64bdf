# Copyright (c) Syntropy Systems
"""Experiment data collection, rankings and reports.

An experiment scores every (measure, method, network pair) cell from the
alignment files listed in the experiment file. Replicate scores are averaged.
Cells whose files are missing stay unresolved and render as a placeholder.
"""
from __future__ import annotations

import csv
import logging
from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.table import Table
from typing_extensions import TypeAlias

from alignlab.config import AlignlabConfig
from alignlab.errors import MissingResult
from alignlab.graph import Graph, load_alignment, load_graph
from alignlab.measures import load_measure
from alignlab.models.experiment import ExperimentSpec

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from alignlab.graph import NetworkPair
    from alignlab.measures import Measure, MeasureLoader

logger = logging.getLogger(__name__)

UNRESOLVED = "-"
DEFAULT_PRECISION = 6
REPORT_WIDTH = 200
# Upper bound used only to measure a table at its natural width
MEASURE_WIDTH = 100_000

Cell: TypeAlias = Optional[float]
GraphLoader: TypeAlias = Callable[[str], Graph]


def scores_to_rankings(row: Sequence[Cell]) -> list[Cell]:
    """Replace scores with competition ranks (highest score is rank 1).

    Tied scores share the position of the first of them; the next lower score
    is ranked after all of them, so [10, 10, 5] -> [1, 1, 3]. Unresolved cells
    stay unresolved and take no rank.
    """
    resolved = sorted((score for score in row if score is not None), reverse=True)
    first_position: dict[float, int] = {}
    for position, score in enumerate(resolved, 1):
        first_position.setdefault(score, position)
    return [None if score is None else float(first_position[score]) for score in row]


def format_cell(value: Cell, precision: int) -> str:
    if value is None:
        return UNRESOLVED
    return f"{value:.{precision}f}"


def report_width(tables: Iterable[Table]) -> int:
    """Width at which every table renders without shrinking a column."""
    measuring = Console(width=MEASURE_WIDTH)
    return max([REPORT_WIDTH, *(measuring.measure(table).maximum for table in tables)])


class DataCube:
    """Scores indexed [measure][method][network pair].

    The shape is fixed at construction. A cell is written at most once; a new
    collection pass starts from a new cube.
    """

    def __init__(
        self,
        measures: Sequence[str],
        methods: Sequence[str],
        pairs: Sequence[str],
    ) -> None:
        self.measures = list(measures)
        self.methods = list(methods)
        self.pairs = list(pairs)
        self._cells: list[list[list[Cell]]] = [
            [[None for _ in self.pairs] for _ in self.methods] for _ in self.measures
        ]
        self._written: set[tuple[int, int, int]] = set()

    @property
    def shape(self) -> tuple[int, int, int]:
        return len(self.measures), len(self.methods), len(self.pairs)

    def get(self, measure: int, method: int, pair: int) -> Cell:
        return self._cells[measure][method][pair]

    def set(self, measure: int, method: int, pair: int, value: Cell) -> None:
        key = (measure, method, pair)
        if key in self._written:
            msg = (
                f"cell ({self.measures[measure]}, {self.methods[method]}, "
                f"{self.pairs[pair]}) already written"
            )
            raise ValueError(msg)
        self._written.add(key)
        self._cells[measure][method][pair] = value

    def unresolved(self) -> list[tuple[str, str, str]]:
        """(measure, method, pair) labels of cells without a score."""
        return [
            (measure, method, pair)
            for i, measure in enumerate(self.measures)
            for j, method in enumerate(self.methods)
            for k, pair in enumerate(self.pairs)
            if self._cells[i][j][k] is None
        ]

    def pair_row(self, measure: int, pair: int) -> list[Cell]:
        """Values of every method for one measure and network pair."""
        return [self._cells[measure][j][pair] for j in range(len(self.methods))]

    def copy(self) -> DataCube:
        cube = DataCube(self.measures, self.methods, self.pairs)
        cube._cells = [[list(col) for col in plane] for plane in self._cells]
        cube._written = set(self._written)
        return cube

    def rank_in_place(self) -> None:
        """Turn every (measure, pair) row across methods into ranks."""
        for i in range(len(self.measures)):
            for k in range(len(self.pairs)):
                ranks = scores_to_rankings(self.pair_row(i, k))
                for j, rank in enumerate(ranks):
                    self._cells[i][j][k] = rank

    def mean_over_pairs(self, measure: int, method: int) -> Cell:
        values = [v for v in self._cells[measure][method] if v is not None]
        if not values:
            return None
        return sum(values) / len(values)


class Experiment:
    """Scores alignment files over measures x methods x network pairs."""

    def __init__(
        self,
        spec: ExperimentSpec,
        precision: int = DEFAULT_PRECISION,
        graph_loader: GraphLoader | None = None,
        measure_loader: MeasureLoader | None = None,
        config: AlignlabConfig | None = None,
    ) -> None:
        config = config or AlignlabConfig()
        self.spec = spec
        self.precision = precision
        self.graphs_dir = spec.resolve(spec.graphs_dir or config.graphs_dir)
        self.similarity_dir = spec.resolve(spec.similarity_dir or config.similarity_dir)
        if graph_loader is None:
            graph_loader = partial(load_graph, self.graphs_dir)
        if measure_loader is None:
            measure_loader = partial(load_measure, similarity_dir=self.similarity_dir)

        self._graph_loader = graph_loader
        self._measure_loader = measure_loader
        self._graphs: dict[str, Graph] = {}
        self._measures: dict[tuple[str, NetworkPair], Measure] = {}
        self.data = self._new_cube()

    @classmethod
    def from_yaml(
        cls,
        path: Path,
        precision: int = DEFAULT_PRECISION,
        config: AlignlabConfig | None = None,
    ) -> Experiment:
        return cls(ExperimentSpec.from_yaml(path), precision=precision, config=config)

    def _new_cube(self) -> DataCube:
        return DataCube(
            self.spec.measures,
            self.spec.methods,
            [pair.label for pair in self.spec.pairs],
        )

    def _graph(self, name: str) -> Graph:
        if name not in self._graphs:
            self._graphs[name] = self._graph_loader(name)
        return self._graphs[name]

    def _measure(self, name: str, pair: NetworkPair) -> Measure:
        key = (name, pair)
        if key not in self._measures:
            self._measures[key] = self._measure_loader(
                self._graph(pair.g1), self._graph(pair.g2), name
            )
        return self._measures[key]

    def _cell_files(self, pair_index: int, method: str) -> list[Path]:
        files = self.spec.alignment_files(pair_index, method)
        missing = [path for path in files if not path.exists()]
        if missing:
            pair = self.spec.pairs[pair_index]
            msg = (
                f"{len(missing)} of {len(files)} alignment file(s) missing for "
                f"{method} on {pair.label}: {', '.join(str(p) for p in missing)}"
            )
            raise MissingResult(msg)
        return files

    def collect_data(self) -> DataCube:
        """Score every cell; missing alignments leave the cell unresolved."""
        cube = self._new_cube()
        pairs = self.spec.pairs
        for i, measure_name in enumerate(self.spec.measures):
            for j, method in enumerate(self.spec.methods):
                for k, pair in enumerate(pairs):
                    try:
                        files = self._cell_files(k, method)
                    except MissingResult as e:
                        logger.warning("%s: %s", measure_name, e)
                        cube.set(i, j, k, None)
                        continue

                    measure = self._measure(measure_name, pair)
                    scores = [measure.eval(load_alignment(path)) for path in files]
                    cube.set(i, j, k, sum(scores) / len(scores))
                    logger.debug(
                        "%s %s %s: %d replicate(s)", measure_name, method, pair.label, len(scores)
                    )

        self.data = cube
        return cube

    def _rankings(self) -> DataCube:
        ranked = self.data.copy()
        ranked.rank_in_place()
        return ranked

    def _score_table(self, measure: int) -> Table:
        table = Table(title=self.data.measures[measure], header_style="bold")
        table.add_column("network pair", style="dim")
        for method in self.data.methods:
            table.add_column(method, justify="right")
        for k, pair in enumerate(self.data.pairs):
            row = self.data.pair_row(measure, k)
            table.add_row(pair, *[format_cell(v, self.precision) for v in row])
        return table

    def _ranking_table(self, ranked: DataCube, measure: int) -> Table:
        table = Table(
            title=f"{ranked.measures[measure]} rankings", header_style="bold"
        )
        table.add_column("network pair", style="dim")
        for method in ranked.methods:
            table.add_column(method, justify="right")
        for k, pair in enumerate(ranked.pairs):
            row = ranked.pair_row(measure, k)
            table.add_row(pair, *[format_cell(v, self.precision) for v in row])
        table.add_row(
            "mean rank",
            *[
                format_cell(ranked.mean_over_pairs(measure, j), self.precision)
                for j in range(len(ranked.methods))
            ],
            style="bold",
        )
        return table

    def _tables(self) -> list[tuple[Table, Table]]:
        """(scores, rankings) table pair per measure."""
        ranked = self._rankings()
        return [
            (self._score_table(i), self._ranking_table(ranked, i))
            for i in range(len(self.data.measures))
        ]

    def _print_tables(self, console: Console, tables: list[tuple[Table, Table]]) -> None:
        for scores, rankings in tables:
            console.print(scores)
            console.print(rankings)
            console.print()

    def render(self, console: Console) -> None:
        """Render score and ranking tables, one block per measure."""
        self._print_tables(console, self._tables())

    def print_data(self, output: Path) -> None:
        """Write the plain-text report; wide tables widen the page."""
        tables = self._tables()
        width = report_width(table for pair in tables for table in pair)
        with output.open("w", encoding="utf-8") as f:
            console = Console(file=f, width=width, no_color=True, highlight=False)
            self._print_tables(console, tables)

    def print_data_csv(self, output: Path) -> None:
        """Write the CSV report: scores block then rankings block per measure."""
        ranked = self._rankings()
        with output.open("w", newline="") as f:
            writer = csv.writer(f)
            for i, measure in enumerate(self.data.measures):
                writer.writerow([measure, *self.data.methods])
                for k, pair in enumerate(self.data.pairs):
                    row = self.data.pair_row(i, k)
                    writer.writerow([pair, *[format_cell(v, self.precision) for v in row]])
                writer.writerow([])

                writer.writerow([f"{measure} rankings", *ranked.methods])
                for k, pair in enumerate(ranked.pairs):
                    row = ranked.pair_row(i, k)
                    writer.writerow([pair, *[format_cell(v, self.precision) for v in row]])
                writer.writerow([
                    "mean rank",
                    *[
                        format_cell(ranked.mean_over_pairs(i, j), self.precision)
                        for j in range(len(ranked.methods))
                    ],
                ])
                writer.writerow([])
