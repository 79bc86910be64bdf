# Copyright (c) Syntropy Systems
"""Two-parameter grid sweeps run as cluster jobs.

Submission and collection are separate passes. `submit_scripts_to_cluster`
writes one job script per (k, l) grid point and hands it to the scheduler
without waiting. `collect_data` can be run any number of times later; it scores
whichever output alignments exist and leaves the others unresolved.
"""
from __future__ import annotations

import csv
import itertools
import logging
import shlex
import stat
import subprocess
from dataclasses import dataclass
from enum import Enum
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from alignlab.config import AlignlabConfig
from alignlab.errors import SubmissionError
from alignlab.experiment import format_cell, report_width
from alignlab.graph import NetworkPair, load_alignment, load_graph
from alignlab.measures import load_measure
from alignlab.models.sweep import SweepSpec

if TYPE_CHECKING:
    from collections.abc import Iterator

    from alignlab.experiment import GraphLoader
    from alignlab.measures import Measure, MeasureLoader

logger = logging.getLogger(__name__)

SCRIPTS_DIR = "scripts"
ALIGNMENTS_DIR = "alignments"
LOGS_DIR = "logs"
ALIGNMENT_SUFFIX = ".align"


class GridPointState(str, Enum):
    """Lifecycle of one grid point; completion is seen only as a file."""

    NOT_SUBMITTED = "not_submitted"
    SUBMITTED = "submitted"
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass
class GridPoint:
    """One (k, l) configuration of the sweep."""

    k: float
    l: float  # noqa: E741
    script_name: str
    alignment_path: Path
    state: GridPointState = GridPointState.NOT_SUBMITTED
    score: float | None = None


def format_value(value: float) -> str:
    """Render a grid value for file names; distinct floats stay distinct."""
    return repr(float(value))


def generate_grid(k_values: list[float], l_values: list[float]) -> Iterator[tuple[float, float]]:
    """All (k, l) combinations, k-major."""
    yield from itertools.product(k_values, l_values)


class ParameterSweep:
    """Grid of jobs over two method options on one network pair."""

    def __init__(
        self,
        spec: SweepSpec,
        config: AlignlabConfig | None = None,
        graph_loader: GraphLoader | None = None,
        measure_loader: MeasureLoader | None = None,
        workdir: Path | None = None,
    ) -> None:
        config = config or AlignlabConfig()
        self.spec = spec
        self.precision = config.precision_decimals
        self.submit_command = spec.submit_command or config.submit_command
        self.graphs_dir = spec.resolve(spec.graphs_dir or config.graphs_dir)
        self.similarity_dir = spec.resolve(spec.similarity_dir or config.similarity_dir)
        self.folder = spec.folder_path
        self.workdir = workdir or Path.cwd()

        if graph_loader is None:
            graph_loader = partial(load_graph, self.graphs_dir)
        if measure_loader is None:
            measure_loader = partial(load_measure, similarity_dir=self.similarity_dir)
        self._graph_loader = graph_loader
        self._measure_loader = measure_loader
        self._measure: Measure | None = None

        self.grid: list[list[GridPoint]] = [
            [
                GridPoint(
                    k=k,
                    l=l,
                    script_name=self.script_name(k, l),
                    alignment_path=self.alignment_path(k, l),
                )
                for l in spec.l_values  # noqa: E741
            ]
            for k in spec.k_values
        ]

    @classmethod
    def from_yaml(cls, path: Path, config: AlignlabConfig | None = None) -> ParameterSweep:
        return cls(SweepSpec.from_yaml(path), config=config)

    @property
    def pair(self) -> NetworkPair:
        return NetworkPair(self.spec.g1, self.spec.g2)

    def points(self) -> list[GridPoint]:
        return [point for row in self.grid for point in row]

    def point(self, k: float, l: float) -> GridPoint:  # noqa: E741
        i = self.spec.k_values.index(k)
        j = self.spec.l_values.index(l)
        return self.grid[i][j]

    def script_name(self, k: float, l: float) -> str:  # noqa: E741
        return (
            f"{self.spec.method}_{self.spec.g1}_{self.spec.g2}"
            f"_k{format_value(k)}_l{format_value(l)}"
        )

    def script_path(self, k: float, l: float) -> Path:  # noqa: E741
        return self.folder / SCRIPTS_DIR / f"{self.script_name(k, l)}.sh"

    def alignment_path(self, k: float, l: float) -> Path:  # noqa: E741
        return self.folder / ALIGNMENTS_DIR / f"{self.script_name(k, l)}{ALIGNMENT_SUFFIX}"

    def align_command(self, k: float, l: float) -> list[str]:  # noqa: E741
        """Command a grid point job runs."""
        spec = self.spec
        argv = [
            *shlex.split(spec.program),
            "--g1", spec.g1,
            "--g2", spec.g2,
            "--method", spec.method,
            "--graphs-dir", str(self.graphs_dir),
            "--similarity-dir", str(self.similarity_dir),
            "--output", str(self.alignment_path(k, l)),
        ]
        for measure, weight in spec.objective_weights().items():
            argv.extend(["--measure", f"{measure}={weight}"])
        options = {
            "t": spec.minutes,
            **spec.options,
            spec.k_option: format_value(k),
            spec.l_option: format_value(l),
        }
        for key, value in options.items():
            rendered = str(value).lower() if isinstance(value, bool) else str(value)
            argv.extend(["--set", f"{key}={rendered}"])
        return argv

    def make_script(self, k: float, l: float) -> Path:  # noqa: E741
        """Write the job script for (k, l) and return its path."""
        path = self.script_path(k, l)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.alignment_path(k, l).parent.mkdir(parents=True, exist_ok=True)
        log_path = self.folder / LOGS_DIR / f"{self.script_name(k, l)}.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)

        lines = [
            "#!/bin/bash",
            f"cd {shlex.quote(str(self.workdir))}",
            f"{shlex.join(self.align_command(k, l))} > {shlex.quote(str(log_path))} 2>&1",
        ]
        _ = path.write_text("\n".join(lines) + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
        return path

    def submit_script(self, k: float, l: float) -> None:  # noqa: E741
        """Hand the (k, l) script to the scheduler; does not wait for the job."""
        argv = [*self.submit_command, str(self.script_path(k, l))]
        try:
            result = subprocess.run(  # noqa: S603
                argv,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            msg = f"Could not run submit command {shlex.join(argv)}: {e}"
            raise SubmissionError(msg) from e
        if result.returncode != 0:
            msg = (
                f"Submit command {shlex.join(argv)} exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
            raise SubmissionError(msg)
        logger.info("Submitted %s %s", self.script_name(k, l), result.stdout.strip())

    def submit_scripts_to_cluster(self) -> list[GridPoint]:
        """Write and submit one script per grid point."""
        submitted: list[GridPoint] = []
        for k, l in generate_grid(self.spec.k_values, self.spec.l_values):  # noqa: E741
            point = self.point(k, l)
            _ = self.make_script(k, l)
            self.submit_script(k, l)
            point.state = GridPointState.SUBMITTED
            submitted.append(point)
        return submitted

    def _get_measure(self) -> Measure:
        if self._measure is None:
            g1 = self._graph_loader(self.spec.g1)
            g2 = self._graph_loader(self.spec.g2)
            self._measure = self._measure_loader(g1, g2, self.spec.measure)
        return self._measure

    def score_for(self, k: float, l: float) -> float | None:  # noqa: E741
        """Score of the (k, l) output alignment, or None if it does not exist yet."""
        path = self.alignment_path(k, l)
        if not path.exists():
            return None
        return self._get_measure().eval(load_alignment(path))

    def collect_data(self) -> list[list[GridPoint]]:
        """Score every grid point whose output alignment exists."""
        for point in self.points():
            point.score = self.score_for(point.k, point.l)
            if point.score is not None:
                point.state = GridPointState.COMPLETED
            elif self.script_path(point.k, point.l).exists():
                point.state = GridPointState.PENDING
            else:
                point.state = GridPointState.NOT_SUBMITTED

        pending = sum(1 for p in self.points() if p.score is None)
        if pending:
            logger.info("%d of %d grid points not available yet", pending, len(self.points()))
        return self.grid

    def _table(self) -> Table:
        title = f"{self.spec.measure} {self.spec.method} {self.pair.label}"
        table = Table(title=title, header_style="bold")
        table.add_column(f"{self.spec.k_option} \\ {self.spec.l_option}", style="dim")
        for l in self.spec.l_values:  # noqa: E741
            table.add_column(format_value(l), justify="right")
        for k, row in zip(self.spec.k_values, self.grid):
            table.add_row(
                format_value(k), *[format_cell(p.score, self.precision) for p in row]
            )
        return table

    def render(self, console: Console) -> None:
        console.print(self._table())

    def print_data(self, output: Path) -> None:
        """Write the grid as a plain-text table (rows k, columns l)."""
        table = self._table()
        with output.open("w", encoding="utf-8") as f:
            console = Console(
                file=f, width=report_width([table]), no_color=True, highlight=False
            )
            console.print(table)

    def print_data_csv(self, output: Path) -> None:
        with output.open("w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    f"{self.spec.k_option}\\{self.spec.l_option}",
                    *[format_value(l) for l in self.spec.l_values],  # noqa: E741
                ]
            )
            for k, row in zip(self.spec.k_values, self.grid):
                writer.writerow([format_value(k), *[format_cell(p.score, self.precision) for p in row]])
