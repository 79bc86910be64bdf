# Copyright (c) Syntropy Systems
"""Parameter sweep file schema."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from pydantic import Field, PrivateAttr, field_validator
from typing_extensions import TypeAlias

from .base import AlignlabBaseModel, load_yaml_model

OptionScalar: TypeAlias = Union[str, int, float, bool]


class SweepSpec(AlignlabBaseModel):
    """Two-parameter grid over one method on one network pair."""

    measure: str
    g1: str
    g2: str
    method: str = "sana"
    # Command that runs one alignment on a cluster node
    program: str = "alignlab align"
    k_values: list[float] = Field(min_length=1)
    l_values: list[float] = Field(min_length=1)
    # Method options the k and l axes are bound to
    k_option: str = "k"
    l_option: str = "l"
    minutes: float = Field(default=5.0, gt=0)
    folder: str = "sweep"
    # Fixed options passed to every grid point
    options: dict[str, OptionScalar] = Field(default_factory=dict)
    # Objective weights; defaults to the swept measure alone
    objective: dict[str, float] = Field(default_factory=dict)
    submit_command: list[str] | None = None
    graphs_dir: str | None = None
    similarity_dir: str | None = None

    _base_dir: Path = PrivateAttr(default_factory=Path)

    @field_validator("k_values", "l_values")
    @classmethod
    def _unique(cls, values: list[float]) -> list[float]:
        if len(set(values)) != len(values):
            msg = f"grid values must be distinct, got {values}"
            raise ValueError(msg)
        return values

    @classmethod
    def from_yaml(cls, path: Path) -> SweepSpec:
        """Load a sweep file; relative paths resolve against its folder."""
        spec = load_yaml_model(cls, path)
        spec._base_dir = path.parent
        return spec

    def resolve(self, value: str) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return self._base_dir / path

    @property
    def folder_path(self) -> Path:
        return self.resolve(self.folder)

    def objective_weights(self) -> dict[str, float]:
        return dict(self.objective) if self.objective else {self.measure: 1.0}
