# Copyright (c) Syntropy Systems
"""Empirical topology/sequence baseline scores."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from alignlab.errors import ConfigError, LookupNotFound, MissingFile

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreTableEntry:
    """One row of the score table."""

    method: str
    g1: str
    g2: str
    topology: float
    sequence: float


class ScoreTable:
    """Read-only lookup of baseline scores keyed by (method, g1, g2).

    The file is read on the first lookup and cached; a missing file is
    reported then, not at construction.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._entries: tuple[ScoreTableEntry, ...] | None = None

    @classmethod
    def from_entries(cls, entries: Iterable[ScoreTableEntry]) -> ScoreTable:
        """Build an in-memory table."""
        table = cls("<memory>")
        table._entries = tuple(entries)
        return table

    def load(self) -> tuple[ScoreTableEntry, ...]:
        """Read the table file if it has not been read yet."""
        if self._entries is not None:
            return self._entries

        if not self.path.exists():
            msg = f"Couldn't find score table file {self.path}"
            raise MissingFile(msg)

        entries: list[ScoreTableEntry] = []
        with self.path.open() as f:
            for lineno, raw_line in enumerate(f, 1):
                tokens = raw_line.split()
                if not tokens or tokens[0].startswith("#"):
                    continue
                if len(tokens) < 5:
                    msg = (
                        f"{self.path}:{lineno}: expected "
                        "'method g1 g2 topology sequence'"
                    )
                    raise ConfigError(msg)
                try:
                    topology = float(tokens[3])
                    sequence = float(tokens[4])
                except ValueError as e:
                    msg = f"{self.path}:{lineno}: non-numeric score"
                    raise ConfigError(msg) from e
                entries.append(
                    ScoreTableEntry(tokens[0], tokens[1], tokens[2], topology, sequence)
                )

        logger.debug("Loaded %d score table rows from %s", len(entries), self.path)
        self._entries = tuple(entries)
        return self._entries

    def lookup(self, method: str, g1: str, g2: str) -> tuple[float, float]:
        """Return (topology, sequence) baseline scores for an exact key match."""
        for entry in self.load():
            if entry.method == method and entry.g1 == g1 and entry.g2 == g2:
                return entry.topology, entry.sequence
        msg = f"Couldn't find entry in {self.path} for {method} {g1} {g2}"
        raise LookupNotFound(msg)
