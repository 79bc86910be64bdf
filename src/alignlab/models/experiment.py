# Copyright (c) Syntropy Systems
"""Experiment file schema."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field, PrivateAttr, model_validator
from typing_extensions import Self

from alignlab.graph import NetworkPair

from .base import AlignlabBaseModel, load_yaml_model


class Layout(str, Enum):
    """How replicate alignment files are listed."""

    FILES = "files"  # explicit file (or list of files) per cell
    FOLDER = "folder"  # folder holding replicates 0..replicates-1


class NetworkEntry(AlignlabBaseModel):
    """One network pair and its alignment files per method."""

    g1: str
    g2: str
    alignments: dict[str, str | list[str]] = Field(default_factory=dict)

    @property
    def pair(self) -> NetworkPair:
        return NetworkPair(self.g1, self.g2)


class ExperimentSpec(AlignlabBaseModel):
    """Measures x methods x network pairs to score."""

    measures: list[str] = Field(min_length=1)
    methods: list[str] = Field(min_length=1)
    networks: list[NetworkEntry] = Field(min_length=1)
    layout: Layout = Layout.FILES
    replicates: int = Field(default=10, ge=1)
    suffix: str = ".align"
    # Unset directories fall back to the project config
    graphs_dir: str | None = None
    similarity_dir: str | None = None

    _base_dir: Path = PrivateAttr(default_factory=Path)

    @model_validator(mode="after")
    def _check_cells(self) -> Self:
        for entry in self.networks:
            for method in self.methods:
                if method not in entry.alignments:
                    msg = (
                        f"network pair {entry.pair.label} has no alignments "
                        f"for method '{method}'"
                    )
                    raise ValueError(msg)
                value = entry.alignments[method]
                if self.layout is Layout.FOLDER and not isinstance(value, str):
                    msg = (
                        f"network pair {entry.pair.label}, method '{method}': "
                        "folder layout takes one folder per cell"
                    )
                    raise ValueError(msg)
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> ExperimentSpec:
        """Load an experiment file; relative paths resolve against its folder."""
        spec = load_yaml_model(cls, path)
        spec._base_dir = path.parent
        return spec

    @property
    def pairs(self) -> list[NetworkPair]:
        return [entry.pair for entry in self.networks]

    def resolve(self, value: str) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return self._base_dir / path

    def alignment_files(self, pair_index: int, method: str) -> list[Path]:
        """Replicate alignment files for one (network pair, method) cell."""
        value = self.networks[pair_index].alignments[method]
        if self.layout is Layout.FOLDER:
            folder = self.resolve(str(value))
            return [folder / f"{i}{self.suffix}" for i in range(self.replicates)]
        if isinstance(value, str):
            return [self.resolve(value)]
        return [self.resolve(item) for item in value]
