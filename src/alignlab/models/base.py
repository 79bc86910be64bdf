# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for alignlab."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from alignlab.errors import ConfigError, MissingFile

ModelT = TypeVar("ModelT", bound="AlignlabBaseModel")


class AlignlabBaseModel(BaseModel):
    """Base model with shared config for alignlab schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="forbid",
        populate_by_name=True,
    )


def load_yaml_model(model: type[ModelT], path: Path) -> ModelT:
    """Load and validate a YAML file, reporting problems as ConfigError."""
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise MissingFile(msg)

    with path.open() as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {path}: {e}"
            raise ConfigError(msg) from e

    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        msg = f"Invalid config {path}: {e}"
        raise ConfigError(msg) from e
