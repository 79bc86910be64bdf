# Copyright (c) Syntropy Systems
"""Alignment method variants.

Search internals live in external aligner executables. Each variant here holds
its validated configuration, turns it into an argv, runs the aligner and reads
back the alignment it wrote. Evaluation-only and random alignments are
produced in process.
"""
from __future__ import annotations

import logging
import random
import shlex
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from typing_extensions import override

from alignlab.errors import AlignerError, ConfigError, MissingFile
from alignlab.graph import load_alignment

if TYPE_CHECKING:
    from alignlab.graph import Alignment, Graph
    from alignlab.measures import MeasureCombination

logger = logging.getLogger(__name__)

OUTPUT_NAME = "alignment.align"


class Method(ABC):
    """Named alignment procedure over a fixed graph pair."""

    name: str = ""

    def __init__(self, g1: Graph, g2: Graph) -> None:
        self.g1 = g1
        self.g2 = g2

    @abstractmethod
    def produce_alignment(self) -> Alignment:
        """Run the method and return the alignment it found."""


class EvaluationOnly(Method):
    """Reads a precomputed alignment instead of searching."""

    name = "none"

    def __init__(self, g1: Graph, g2: Graph, alignment_file: Path) -> None:
        super().__init__(g1, g2)
        self.alignment_file = alignment_file

    @override
    def produce_alignment(self) -> Alignment:
        return load_alignment(self.alignment_file)


class RandomAligner(Method):
    """Maps G1 nodes onto a random injective choice of G2 nodes."""

    name = "random"

    def __init__(self, g1: Graph, g2: Graph, seed: int | None = None) -> None:
        super().__init__(g1, g2)
        self.seed = seed

    @override
    def produce_alignment(self) -> Alignment:
        if len(self.g1.nodes) > len(self.g2.nodes):
            msg = (
                f"Cannot align {self.g1.name} ({len(self.g1.nodes)} nodes) into "
                f"smaller {self.g2.name} ({len(self.g2.nodes)} nodes)"
            )
            raise AlignerError(msg)
        rng = random.Random(self.seed)  # noqa: S311
        image = rng.sample(self.g2.nodes, len(self.g1.nodes))
        return dict(zip(self.g1.nodes, image))


class ExternalMethod(Method):
    """Method executed by an external aligner program."""

    def __init__(
        self,
        g1: Graph,
        g2: Graph,
        executable: str | None = None,
        minutes: float | None = None,
    ) -> None:
        super().__init__(g1, g2)
        self.executable = executable
        self.minutes = minutes

    def method_args(self) -> list[str]:
        """Method-specific argv tokens."""
        return []

    def argv(self, output: Path) -> list[str]:
        """Full aligner command line."""
        if self.executable is None:
            msg = f"No aligner executable configured for method '{self.name}'"
            raise ConfigError(msg)
        argv = [*shlex.split(self.executable), "-g1", self.g1.name, "-g2", self.g2.name]
        if self.minutes is not None:
            argv.extend(["-t", str(self.minutes)])
        argv.extend(self.method_args())
        argv.extend(["-o", str(output)])
        return argv

    @override
    def produce_alignment(self) -> Alignment:
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / OUTPUT_NAME
            argv = self.argv(output)
            logger.info("Running %s: %s", self.name, shlex.join(argv))
            try:
                result = subprocess.run(  # noqa: S603
                    argv,
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except OSError as e:
                msg = f"Could not start aligner for '{self.name}': {e}"
                raise AlignerError(msg) from e
            if result.returncode != 0:
                msg = (
                    f"Aligner for '{self.name}' exited with {result.returncode}: "
                    f"{result.stderr.strip()}"
                )
                raise AlignerError(msg)
            try:
                return load_alignment(output)
            except MissingFile as e:
                msg = f"Aligner for '{self.name}' wrote no alignment"
                raise AlignerError(msg) from e


def _objective_args(objective: MeasureCombination) -> list[str]:
    weights = ",".join(f"{name}={w:g}" for name, w in objective.weights().items())
    return ["-objective", weights]


class GreedyLCCS(ExternalMethod):
    name = "greedylccs"

    def __init__(
        self, g1: Graph, g2: Graph, start_alignment: str, executable: str | None = None
    ) -> None:
        super().__init__(g1, g2, executable)
        self.start_alignment = start_alignment

    @override
    def method_args(self) -> list[str]:
        return ["-startalignment", self.start_alignment]


class WeightedAlignmentVoter(ExternalMethod):
    name = "wave"

    def __init__(
        self, g1: Graph, g2: Graph, node_similarity: str, executable: str | None = None
    ) -> None:
        super().__init__(g1, g2, executable)
        self.node_similarity = node_similarity

    @override
    def method_args(self) -> list[str]:
        return ["-wavenodesim", self.node_similarity]


class LGraalWrapper(ExternalMethod):
    name = "lgraal"

    def __init__(  # noqa: PLR0913
        self,
        g1: Graph,
        g2: Graph,
        alpha: float,
        iterations: float,
        seconds: float,
        executable: str | None = None,
    ) -> None:
        super().__init__(g1, g2, executable)
        self.alpha = alpha
        self.iterations = iterations
        self.seconds = seconds

    @override
    def method_args(self) -> list[str]:
        return [
            "-alpha", str(self.alpha),
            "-iterations", str(self.iterations),
            "-seconds", str(self.seconds),
        ]


class HubAlignWrapper(ExternalMethod):
    name = "hubalign"

    def __init__(
        self, g1: Graph, g2: Graph, alpha: float, executable: str | None = None
    ) -> None:
        super().__init__(g1, g2, executable)
        # HubAlign's own parameter, already inverted by the caller
        self.alpha = alpha

    @override
    def method_args(self) -> list[str]:
        return ["-alpha", str(self.alpha)]


class TabuSearch(ExternalMethod):
    name = "tabu"

    def __init__(  # noqa: PLR0913
        self,
        g1: Graph,
        g2: Graph,
        minutes: float,
        objective: MeasureCombination,
        ntabus: int,
        nneighbors: int,
        node_tabus: bool,  # noqa: FBT001
        executable: str | None = None,
    ) -> None:
        super().__init__(g1, g2, executable, minutes)
        self.objective = objective
        self.ntabus = ntabus
        self.nneighbors = nneighbors
        self.node_tabus = node_tabus

    @override
    def method_args(self) -> list[str]:
        args = [
            *_objective_args(self.objective),
            "-ntabus", str(self.ntabus),
            "-nneighbors", str(self.nneighbors),
        ]
        if self.node_tabus:
            args.append("-nodetabus")
        return args


class HillClimbing(ExternalMethod):
    name = "hc"

    def __init__(
        self,
        g1: Graph,
        g2: Graph,
        objective: MeasureCombination,
        start_alignment: str,
        executable: str | None = None,
    ) -> None:
        super().__init__(g1, g2, executable)
        self.objective = objective
        self.start_alignment = start_alignment

    @override
    def method_args(self) -> list[str]:
        return [*_objective_args(self.objective), "-startalignment", self.start_alignment]


@dataclass(frozen=True)
class RestartScheme:
    """Restart schedule for annealing searches."""

    warm_temperature: float
    iterations_per_step: int
    candidates: int
    candidate_temperature: float
    final_temperature: float


@runtime_checkable
class RestartCapable(Protocol):
    """Capability of methods that support a restart schedule."""

    def enable_restart_scheme(self, scheme: RestartScheme) -> None:
        ...


class SimulatedAnnealing(ExternalMethod):
    """Annealing search with optional automatic temperature calibration.

    Temperatures left as None are calibrated by the aligner before the search
    begins, once `set_*_automatically` has been called for them.
    """

    name = "sana"

    def __init__(  # noqa: PLR0913
        self,
        g1: Graph,
        g2: Graph,
        t_initial: float | None,
        t_decay: float | None,
        minutes: float,
        objective: MeasureCombination,
        executable: str | None = None,
    ) -> None:
        super().__init__(g1, g2, executable, minutes)
        self.t_initial = t_initial
        self.t_decay = t_decay
        self.objective = objective
        self.restart: RestartScheme | None = None
        self.auto_t_initial = False
        self.auto_t_decay = False

    def enable_restart_scheme(self, scheme: RestartScheme) -> None:
        if self.restart is not None:
            msg = "sana: restart scheme is already enabled"
            raise ConfigError(msg)
        self.restart = scheme

    def set_t_initial_automatically(self) -> None:
        if self.auto_t_initial or self.t_initial is not None:
            msg = "sana: initial temperature is already set"
            raise ConfigError(msg)
        self.auto_t_initial = True

    def set_t_decay_automatically(self) -> None:
        if self.auto_t_decay or self.t_decay is not None:
            msg = "sana: temperature decay is already set"
            raise ConfigError(msg)
        self.auto_t_decay = True

    @override
    def method_args(self) -> list[str]:
        if self.t_initial is None and not self.auto_t_initial:
            msg = "sana: initial temperature is neither set nor automatic"
            raise ConfigError(msg)
        if self.t_decay is None and not self.auto_t_decay:
            msg = "sana: temperature decay is neither set nor automatic"
            raise ConfigError(msg)

        args = [
            *_objective_args(self.objective),
            "-tinitial", "auto" if self.auto_t_initial else str(self.t_initial),
            "-tdecay", "auto" if self.auto_t_decay else str(self.t_decay),
        ]
        if self.restart is not None:
            args.extend([
                "-restart",
                "-tnew", str(self.restart.warm_temperature),
                "-iterperstep", str(self.restart.iterations_per_step),
                "-numcand", str(self.restart.candidates),
                "-tcand", str(self.restart.candidate_temperature),
                "-tfin", str(self.restart.final_temperature),
            ])
        return args
