# Copyright (c) Syntropy Systems
"""Configuration management for alignlab."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

PROJECT_DIR_NAME = ".alignlab"


@dataclass
class AlignlabConfig:
    """Configuration for alignlab."""

    # Decimal digits used in every rendered score, rank and grid value
    precision_decimals: int = 6

    # Reference scores used for beta-normalization
    score_table: str = "topologySequenceScoreTable.cnf"

    # Command prefix used to hand a job script to the cluster scheduler
    submit_command: list[str] = field(default_factory=lambda: ["qsub"])

    # Method name -> external aligner executable
    aligners: dict[str, str] = field(default_factory=dict)

    graphs_dir: str = "networks"
    similarity_dir: str = "sequence"


def find_project_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .alignlab directory by walking up from start_path.

    Returns None if no .alignlab directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        project_dir = current / PROJECT_DIR_NAME
        if project_dir.is_dir():
            return project_dir
        current = current.parent

    # Check root
    project_dir = current / PROJECT_DIR_NAME
    if project_dir.is_dir():
        return project_dir

    return None


def load_config(project_dir: Path | None = None) -> AlignlabConfig:
    """Load configuration from .alignlab/config.yaml or defaults.

    Looks for config in:
    1. Provided project_dir
    2. Nearest .alignlab directory walking up
    3. Defaults
    """
    config = AlignlabConfig()

    if project_dir is None:
        project_dir = find_project_dir()
    if project_dir is None:
        return config

    config_path = project_dir / "config.yaml"
    if not config_path.exists():
        return config

    with config_path.open() as f:
        data = cast("dict[str, object]", yaml.safe_load(f) or {})

    precision = data.get("precision_decimals")
    if isinstance(precision, int):
        config.precision_decimals = precision
    score_table = data.get("score_table")
    if isinstance(score_table, str):
        config.score_table = _resolve(project_dir, score_table)
    submit_command = data.get("submit_command")
    if isinstance(submit_command, str):
        config.submit_command = submit_command.split()
    elif isinstance(submit_command, list):
        config.submit_command = [str(token) for token in submit_command]
    aligners = data.get("aligners")
    if isinstance(aligners, dict):
        config.aligners = {
            str(name): str(path)
            for name, path in cast("dict[object, object]", aligners).items()
        }
    graphs_dir = data.get("graphs_dir")
    if isinstance(graphs_dir, str):
        config.graphs_dir = _resolve(project_dir, graphs_dir)
    similarity_dir = data.get("similarity_dir")
    if isinstance(similarity_dir, str):
        config.similarity_dir = _resolve(project_dir, similarity_dir)

    return config


def _resolve(project_dir: Path, value: str) -> str:
    """Resolve a path relative to the project root (parent of .alignlab)."""
    path = Path(value)
    if path.is_absolute():
        return str(path)
    return str(project_dir.parent / path)
