# Copyright (c) Syntropy Systems
"""Objective calibration: alpha derivation and alpha-based weighting.

The tradeoff between a topology measure and the remaining (sequence) measures
is expressed as a single weight alpha. It is either given directly or derived
from beta and the empirical baseline scores in the score table:

    alpha = beta*top / (beta*top + (1-beta)*seq)
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from alignlab.errors import ConfigError, DivisionUndefined
from alignlab.options import get_float, get_str

if TYPE_CHECKING:
    from alignlab.graph import NetworkPair
    from alignlab.measures import MeasureCombination
    from alignlab.options import MethodOptions
    from alignlab.scores import ScoreTable

logger = logging.getLogger(__name__)

GENERIC = "generic"
DIRECT = "alpha"
BETA = "beta"

KNOWN_TOPOLOGY_MEASURES = ("ec", "s3", "wec")


def derive_alpha(
    mode: str,
    *,
    alpha: float | None = None,
    beta: float | None = None,
    method_id: str | None = None,
    pair: NetworkPair | None = None,
    score_table: ScoreTable | None = None,
) -> float:
    """Derive the topology weight alpha.

    Args:
        mode: "alpha" returns `alpha` unchanged; "beta" normalizes `beta`
            through the baseline scores of (method_id, pair)
        alpha: Direct alpha (mode "alpha")
        beta: Tradeoff parameter (mode "beta")
        method_id: Score table method key (mode "beta")
        pair: Network pair (mode "beta")
        score_table: Baseline scores (mode "beta")

    Returns:
        The derived alpha

    """
    if mode == DIRECT:
        if alpha is None:
            msg = "objective mode 'alpha' requires a value for 'alpha'"
            raise ConfigError(msg)
        # No range validation
        return alpha

    if mode == BETA:
        if beta is None:
            msg = "objective mode 'beta' requires a value for 'beta'"
            raise ConfigError(msg)
        if method_id is None or pair is None or score_table is None:
            msg = "objective mode 'beta' requires a method id, network pair and score table"
            raise ConfigError(msg)

        topology, sequence = score_table.lookup(method_id, pair.g1, pair.g2)
        top_factor = beta * topology
        seq_factor = (1 - beta) * sequence
        denominator = top_factor + seq_factor
        if denominator == 0:
            msg = (
                f"beta-normalization undefined for {method_id} {pair.g1} {pair.g2} "
                f"with beta={beta}: topology and sequence factors sum to zero"
            )
            raise DivisionUndefined(msg)
        return top_factor / denominator

    msg = f"unknown value of objfuntype: {mode}"
    raise ConfigError(msg)


def apply_alpha_weights(
    combination: MeasureCombination,
    topology_measure: str,
    alpha: float,
) -> None:
    """Give `topology_measure` weight alpha and the rest 1 - alpha.

    The other measures keep their relative proportions. If they all weigh
    zero, 1 - alpha is split equally among them.
    """
    if topology_measure not in combination:
        msg = f"topology measure '{topology_measure}' is not part of the objective"
        raise ConfigError(msg)

    current = combination.weights()
    others = [name for name in current if name != topology_measure]
    other_total = sum(current[name] for name in others)

    weights = {topology_measure: alpha}
    for name in others:
        if other_total > 0:
            weights[name] = (1 - alpha) * current[name] / other_total
        else:
            weights[name] = (1 - alpha) / len(others)

    combination.set_weights(weights)
    logger.info("Objective weights: %s", combination.format_weights())


def _alpha_from_options(
    mode: str,
    method_id: str,
    pair: NetworkPair,
    options: MethodOptions,
    score_table: ScoreTable | None,
) -> float:
    if mode == DIRECT:
        return derive_alpha(DIRECT, alpha=get_float(options, "alpha", method_id))
    if mode == BETA:
        return derive_alpha(
            BETA,
            beta=get_float(options, "beta", method_id),
            method_id=method_id,
            pair=pair,
            score_table=score_table,
        )
    msg = f"unknown value of objfuntype: {mode}"
    raise ConfigError(msg)


def update_objective(
    method_name: str,
    pair: NetworkPair,
    options: MethodOptions,
    combination: MeasureCombination,
    score_table: ScoreTable | None = None,
) -> None:
    """Adjust objective weights according to the objfuntype option.

    "generic" keeps the configured weights. "alpha" and "beta" switch to
    alpha-based weighting around the `topmeasure` option; for "beta" the score
    table key is the method name followed by the topology measure name.
    """
    mode = str(options.get("objfuntype", GENERIC))
    if mode == GENERIC:
        pass
    elif mode in (DIRECT, BETA):
        top_measure = get_str(options, "topmeasure", method_name)
        if top_measure not in KNOWN_TOPOLOGY_MEASURES:
            logger.warning("topmeasure is %s", top_measure)
        alpha = _alpha_from_options(
            mode, method_name + top_measure, pair, options, score_table
        )
        apply_alpha_weights(combination, top_measure, alpha)
    else:
        msg = f"unknown value of objfuntype: {mode}"
        raise ConfigError(msg)

    logger.info("=== %s -- optimize: %s ===", method_name, combination.format_weights())


def wrapper_alpha(
    method_name: str,
    pair: NetworkPair,
    options: MethodOptions,
    score_table: ScoreTable | None = None,
) -> float:
    """Alpha for aligners that take the tradeoff as a single number."""
    mode = str(options.get("objfuntype", GENERIC))
    if mode == GENERIC:
        msg = f"generic objective function not supported for {method_name}"
        raise ConfigError(msg)
    return _alpha_from_options(mode, method_name, pair, options, score_table)
