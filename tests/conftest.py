# Copyright (c) Syntropy Systems
"""Pytest fixtures for alignlab tests."""

import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

from alignlab.graph import Alignment, Graph
from alignlab.measures import Measure

# Store original cwd at module load time
_original_cwd = Path.cwd()


class LiteralScore(Measure):
    """Measure that reads its score from a 'score <value>' alignment line."""

    name = "literal"

    def eval(self, alignment: Alignment) -> float:
        return float(alignment["score"])


def _literal_measure_loader(g1: Graph, g2: Graph, name: str) -> Measure:
    return LiteralScore(g1, g2)


def _empty_graph_loader(name: str) -> Graph:
    return Graph(name=name)


@pytest.fixture
def measure_loader() -> Callable[[Graph, Graph, str], Measure]:
    """Measure loader whose scores come straight from the alignment files."""
    return _literal_measure_loader


@pytest.fixture
def graph_loader() -> Callable[[str], Graph]:
    """Graph loader that needs no graph files."""
    return _empty_graph_loader


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def alignlab_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary alignlab project directory."""
    project_dir = temp_dir / ".alignlab"
    project_dir.mkdir()
    config = {
        "precision_decimals": 3,
        "score_table": "scores.cnf",
        "submit_command": ["true"],
        "graphs_dir": "networks",
        "similarity_dir": "sequence",
    }
    with (project_dir / "config.yaml").open("w") as f:
        yaml.dump(config, f)
    (temp_dir / "networks").mkdir(exist_ok=True)

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def triangle_graphs(temp_dir: Path) -> Path:
    """Two small graphs as edge lists; returns the graphs directory."""
    graphs_dir = temp_dir / "networks"
    graphs_dir.mkdir(exist_ok=True)
    (graphs_dir / "small.el").write_text("a b\nb c\nc a\n")
    (graphs_dir / "large.el").write_text("x y\ny z\nz w\nw x\n")
    return graphs_dir
