# Copyright (c) Syntropy Systems
"""Construction of alignment methods from resolved options."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable, NamedTuple

from typing_extensions import TypeAlias

from alignlab.errors import ConfigError
from alignlab.graph import NetworkPair
from alignlab.methods import (
    EvaluationOnly,
    GreedyLCCS,
    HillClimbing,
    HubAlignWrapper,
    LGraalWrapper,
    RandomAligner,
    RestartCapable,
    RestartScheme,
    SimulatedAnnealing,
    TabuSearch,
    WeightedAlignmentVoter,
)
from alignlab.objective import update_objective, wrapper_alpha
from alignlab.options import (
    get_bool,
    get_float,
    get_float_or_auto,
    get_int,
    get_str,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from alignlab.graph import Graph
    from alignlab.measures import MeasureCombination
    from alignlab.methods import Method
    from alignlab.options import MethodOptions
    from alignlab.scores import ScoreTable


class BuildContext(NamedTuple):
    """Everything a method constructor may draw on."""

    g1: Graph
    g2: Graph
    options: MethodOptions
    objective: MeasureCombination
    score_table: ScoreTable | None
    executable: str | None

    @property
    def pair(self) -> NetworkPair:
        return NetworkPair(self.g1.name, self.g2.name)


MethodConstructor: TypeAlias = Callable[[BuildContext], "Method"]

METHODS: dict[str, MethodConstructor] = {}


def register_method(name: str) -> Callable[[MethodConstructor], MethodConstructor]:
    """Register a constructor under a method name."""

    def decorator(constructor: MethodConstructor) -> MethodConstructor:
        METHODS[name] = constructor
        return constructor

    return decorator


def build_method(  # noqa: PLR0913
    g1: Graph,
    g2: Graph,
    method_name: str,
    options: MethodOptions,
    objective: MeasureCombination,
    score_table: ScoreTable | None = None,
    aligners: Mapping[str, str] | None = None,
) -> Method:
    """Build the method `method_name` for (g1, g2).

    A non-empty `eval` option always yields an evaluation-only method for that
    alignment file, whatever `method_name` says.
    """
    eval_file = options.get("eval")
    if eval_file:
        return EvaluationOnly(g1, g2, Path(str(eval_file)))

    constructor = METHODS.get(method_name)
    if constructor is None:
        msg = f"unknown method: {method_name}"
        raise ConfigError(msg)

    executable = (aligners or {}).get(method_name)
    method = constructor(
        BuildContext(g1, g2, options, objective, score_table, executable)
    )

    if get_bool(options, "restart", method_name):
        if not isinstance(method, RestartCapable):
            msg = f"{method_name}: restart scheme not supported"
            raise ConfigError(msg)
        method.enable_restart_scheme(
            RestartScheme(
                warm_temperature=get_float(options, "tnew", method_name),
                iterations_per_step=get_int(options, "iterperstep", method_name),
                candidates=get_int(options, "numcand", method_name),
                candidate_temperature=get_float(options, "tcand", method_name),
                final_temperature=get_float(options, "tfin", method_name),
            )
        )
    return method


@register_method("none")
def _init_none(ctx: BuildContext) -> Method:
    alignment_file = get_str(ctx.options, "startalignment", "none")
    return EvaluationOnly(ctx.g1, ctx.g2, Path(alignment_file))


@register_method("random")
def _init_random(ctx: BuildContext) -> Method:
    seed = None
    if ctx.options.get("seed") is not None:
        seed = get_int(ctx.options, "seed", "random")
    return RandomAligner(ctx.g1, ctx.g2, seed=seed)


@register_method("greedylccs")
def _init_greedy(ctx: BuildContext) -> Method:
    start = get_str(ctx.options, "startalignment", "greedylccs")
    return GreedyLCCS(ctx.g1, ctx.g2, start, ctx.executable)


@register_method("wave")
def _init_wave(ctx: BuildContext) -> Method:
    node_sim = get_str(ctx.options, "wavenodesim", "wave")
    measure = ctx.objective.get_measure(node_sim)
    if not measure.local:
        msg = f"wave: wavenodesim '{node_sim}' is not a local measure"
        raise ConfigError(msg)
    return WeightedAlignmentVoter(ctx.g1, ctx.g2, node_sim, ctx.executable)


@register_method("lgraal")
def _init_lgraal(ctx: BuildContext) -> Method:
    alpha = wrapper_alpha("lgraal", ctx.pair, ctx.options, ctx.score_table)
    iterations = get_float(ctx.options, "lgraaliter", "lgraal")
    seconds = get_float(ctx.options, "t", "lgraal") * 60
    return LGraalWrapper(ctx.g1, ctx.g2, alpha, iterations, seconds, ctx.executable)


@register_method("hubalign")
def _init_hubalign(ctx: BuildContext) -> Method:
    alpha = wrapper_alpha("hubalign", ctx.pair, ctx.options, ctx.score_table)
    return HubAlignWrapper(ctx.g1, ctx.g2, 1 - alpha, ctx.executable)


@register_method("tabu")
def _init_tabu(ctx: BuildContext) -> Method:
    update_objective("tabu", ctx.pair, ctx.options, ctx.objective, ctx.score_table)
    return TabuSearch(
        ctx.g1,
        ctx.g2,
        minutes=get_float(ctx.options, "t", "tabu"),
        objective=ctx.objective,
        ntabus=get_int(ctx.options, "ntabus", "tabu"),
        nneighbors=get_int(ctx.options, "nneighbors", "tabu"),
        node_tabus=get_bool(ctx.options, "nodetabus", "tabu"),
        executable=ctx.executable,
    )


@register_method("hc")
def _init_hill_climbing(ctx: BuildContext) -> Method:
    start = get_str(ctx.options, "startalignment", "hc")
    return HillClimbing(ctx.g1, ctx.g2, ctx.objective, start, ctx.executable)


@register_method("sana")
def _init_sana(ctx: BuildContext) -> Method:
    update_objective("sana", ctx.pair, ctx.options, ctx.objective, ctx.score_table)

    t_initial = get_float_or_auto(ctx.options, "tinitial", "sana")
    t_decay = get_float_or_auto(ctx.options, "tdecay", "sana")
    sana = SimulatedAnnealing(
        ctx.g1,
        ctx.g2,
        t_initial=t_initial,
        t_decay=t_decay,
        minutes=get_float(ctx.options, "t", "sana"),
        objective=ctx.objective,
        executable=ctx.executable,
    )

    if t_initial is None:
        sana.set_t_initial_automatically()
    if t_decay is None:
        sana.set_t_decay_automatically()
    return sana
