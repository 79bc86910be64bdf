"""Tests for alpha derivation and objective weighting."""

import logging

import pytest

from alignlab.errors import ConfigError, DivisionUndefined, LookupNotFound
from alignlab.graph import Graph, NetworkPair
from alignlab.measures import (
    EdgeCorrectness,
    MeasureCombination,
    SequenceSimilarity,
    SymmetricSubstructureScore,
)
from alignlab.objective import (
    apply_alpha_weights,
    derive_alpha,
    update_objective,
    wrapper_alpha,
)
from alignlab.scores import ScoreTable, ScoreTableEntry

PAIR = NetworkPair("yeast", "human")


def make_table(top: float = 0.4, seq: float = 0.2, method: str = "sanaec") -> ScoreTable:
    return ScoreTable.from_entries([ScoreTableEntry(method, "yeast", "human", top, seq)])


def make_objective(**weights: float) -> MeasureCombination:
    g1 = Graph(name="yeast")
    g2 = Graph(name="human")
    factories = {
        "ec": lambda: EdgeCorrectness(g1, g2),
        "s3": lambda: SymmetricSubstructureScore(g1, g2),
        "sequence": lambda: SequenceSimilarity(g1, g2, {}),
    }
    return MeasureCombination((factories[name](), w) for name, w in weights.items())


class TestDeriveAlpha:
    """Tests for derive_alpha."""

    def beta_alpha(self, beta, table=None):
        return derive_alpha(
            "beta",
            beta=beta,
            method_id="sanaec",
            pair=PAIR,
            score_table=table or make_table(),
        )

    def test_direct_mode_passthrough(self):
        """Test direct alpha is returned unchanged, without range checks."""
        assert derive_alpha("alpha", alpha=0.7) == 0.7
        assert derive_alpha("alpha", alpha=1.5) == 1.5

    def test_beta_formula(self):
        """Test beta-normalization against the baseline scores."""
        # 0.5*0.4 / (0.5*0.4 + 0.5*0.2)
        assert self.beta_alpha(0.5) == pytest.approx(2 / 3)

    def test_beta_bounds(self):
        """Test beta=1 gives 1 and beta=0 gives 0 with positive baselines."""
        assert self.beta_alpha(1.0) == pytest.approx(1.0)
        assert self.beta_alpha(0.0) == pytest.approx(0.0)

    def test_beta_monotonic(self):
        """Test alpha grows with beta."""
        values = [self.beta_alpha(b / 10) for b in range(11)]
        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_zero_denominator(self):
        """Test zero baselines make normalization undefined."""
        with pytest.raises(DivisionUndefined):
            self.beta_alpha(0.5, table=make_table(top=0.0, seq=0.0))
        with pytest.raises(DivisionUndefined):
            self.beta_alpha(1.0, table=make_table(top=0.0, seq=0.3))

    def test_missing_entry(self):
        """Test missing score table rows propagate."""
        with pytest.raises(LookupNotFound):
            derive_alpha(
                "beta",
                beta=0.5,
                method_id="tabuec",
                pair=PAIR,
                score_table=make_table(),
            )

    def test_unknown_mode(self):
        """Test unknown modes name the value."""
        with pytest.raises(ConfigError, match="unknown value of objfuntype: gamma"):
            derive_alpha("gamma", alpha=0.5)

    def test_missing_parameters(self):
        """Test each mode requires its parameter."""
        with pytest.raises(ConfigError):
            derive_alpha("alpha")
        with pytest.raises(ConfigError):
            derive_alpha("beta", beta=0.5)


class TestApplyAlphaWeights:
    """Tests for apply_alpha_weights."""

    def test_single_other_measure(self):
        """Test the remaining measure gets 1 - alpha."""
        objective = make_objective(ec=1.0, sequence=0.0)
        apply_alpha_weights(objective, "ec", 0.8)
        weights = objective.weights()
        assert weights["ec"] == pytest.approx(0.8)
        assert weights["sequence"] == pytest.approx(0.2)

    def test_proportions_kept(self):
        """Test other measures keep their relative weights."""
        objective = make_objective(ec=0.5, s3=3.0, sequence=1.0)
        apply_alpha_weights(objective, "ec", 0.6)
        weights = objective.weights()
        assert weights["ec"] == pytest.approx(0.6)
        assert weights["s3"] == pytest.approx(0.3)
        assert weights["sequence"] == pytest.approx(0.1)
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_topology_measure_must_be_present(self):
        """Test alpha weighting needs the topology measure in the objective."""
        objective = make_objective(s3=1.0, sequence=1.0)
        with pytest.raises(ConfigError, match="'ec'"):
            apply_alpha_weights(objective, "ec", 0.5)


class TestUpdateObjective:
    """Tests for update_objective."""

    def test_generic_keeps_weights(self):
        """Test generic mode leaves weights alone."""
        objective = make_objective(ec=0.3, sequence=0.7)
        update_objective("sana", PAIR, {"objfuntype": "generic"}, objective)
        assert objective.weights() == {"ec": 0.3, "sequence": 0.7}

    def test_default_is_generic(self):
        """Test a missing objfuntype means generic."""
        objective = make_objective(ec=0.3, sequence=0.7)
        update_objective("sana", PAIR, {}, objective)
        assert objective.weights() == {"ec": 0.3, "sequence": 0.7}

    def test_alpha_mode(self):
        """Test direct alpha mode reweights around topmeasure."""
        objective = make_objective(ec=1.0, sequence=1.0)
        options = {"objfuntype": "alpha", "alpha": 0.25, "topmeasure": "ec"}
        update_objective("tabu", PAIR, options, objective)
        assert objective.weights()["ec"] == pytest.approx(0.25)
        assert objective.weights()["sequence"] == pytest.approx(0.75)

    def test_beta_mode_uses_method_and_measure_key(self):
        """Test beta mode looks up method name + topmeasure."""
        objective = make_objective(ec=1.0, sequence=0.0)
        options = {"objfuntype": "beta", "beta": 0.5, "topmeasure": "ec"}
        update_objective("sana", PAIR, options, objective, make_table(method="sanaec"))
        assert objective.weights()["ec"] == pytest.approx(2 / 3)

        other = make_objective(ec=1.0, sequence=0.0)
        with pytest.raises(LookupNotFound, match="tabuec"):
            update_objective("tabu", PAIR, options, other, make_table(method="sanaec"))

    def test_unknown_topmeasure_warns(self, caplog):
        """Test an unusual topmeasure is allowed but logged."""
        objective = make_objective(sequence=1.0, s3=0.0)
        options = {"objfuntype": "alpha", "alpha": 0.5, "topmeasure": "sequence"}
        with caplog.at_level(logging.WARNING, logger="alignlab.objective"):
            update_objective("sana", PAIR, options, objective)
        assert "topmeasure is sequence" in caplog.text

    def test_missing_topmeasure(self):
        """Test alpha and beta modes require topmeasure."""
        objective = make_objective(ec=1.0)
        with pytest.raises(ConfigError, match="topmeasure"):
            update_objective("sana", PAIR, {"objfuntype": "alpha", "alpha": 0.5}, objective)

    def test_unknown_mode(self):
        """Test unknown objfuntype values are rejected."""
        objective = make_objective(ec=1.0)
        with pytest.raises(ConfigError, match="unknown value of objfuntype: weird"):
            update_objective("sana", PAIR, {"objfuntype": "weird"}, objective)


class TestWrapperAlpha:
    """Tests for wrapper_alpha."""

    def test_generic_not_supported(self):
        """Test wrapper aligners reject the generic objective."""
        with pytest.raises(ConfigError, match="not supported for lgraal"):
            wrapper_alpha("lgraal", PAIR, {"objfuntype": "generic"})

    def test_beta_uses_wrapper_name(self):
        """Test the score table key is the wrapper name alone."""
        options = {"objfuntype": "beta", "beta": 1.0}
        assert wrapper_alpha(
            "hubalign", PAIR, options, make_table(method="hubalign")
        ) == pytest.approx(1.0)
