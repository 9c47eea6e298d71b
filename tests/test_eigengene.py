"""Tests for eigengene extraction."""

import numpy as np
import pandas as pd
import pytest

from causal_grn.dag_builder import build_dag
from causal_grn.eigengene import (
    compute_eigengene,
    correlate_with_phenotype,
    regulator_eigengenes,
)


@pytest.fixture
def expression():
    """40 samples; G1–G3 follow a shared signal, N1 is noise."""
    rng = np.random.default_rng(11)
    samples = [f"S{i}" for i in range(40)]
    signal = rng.normal(size=40)
    expr = pd.DataFrame({
        "G1": signal + 0.1 * rng.normal(size=40),
        "G2": 2 * signal + 0.1 * rng.normal(size=40),
        "G3": signal + 5 + 0.1 * rng.normal(size=40),
        "N1": rng.normal(size=40),
    }, index=samples)
    return expr, pd.Series(signal, index=samples, name="trait")


class TestComputeEigengene:
    """Test PC1 summaries."""

    def test_tracks_shared_signal(self, expression):
        expr, trait = expression
        eg, var = compute_eigengene(expr, ["G1", "G2", "G3"])

        assert list(eg.index) == list(expr.index)
        assert var > 0.9
        assert np.corrcoef(eg, trait)[0, 1] > 0.95

    def test_sign_follows_mean_expression(self, expression):
        expr, _ = expression
        eg, _ = compute_eigengene(expr, ["G1", "G2"])
        mean_z = ((expr[["G1", "G2"]] - expr[["G1", "G2"]].mean()) / expr[["G1", "G2"]].std()).mean(axis=1)
        assert np.corrcoef(eg, mean_z)[0, 1] > 0

    def test_missing_genes_ignored(self, expression):
        expr, _ = expression
        a, _ = compute_eigengene(expr, ["G1", "G2", "absent"])
        b, _ = compute_eigengene(expr, ["G1", "G2"])
        pd.testing.assert_series_equal(a, b)

    def test_too_few_genes(self, expression):
        expr, _ = expression
        with pytest.raises(ValueError, match="at least two genes"):
            compute_eigengene(expr, ["G1", "absent"])

    def test_too_few_samples(self, expression):
        expr, _ = expression
        with pytest.raises(ValueError, match="two samples"):
            compute_eigengene(expr.iloc[:1], ["G1", "G2"])


class TestPhenotypeCorrelation:
    """Test correlation with a phenotype."""

    def test_pearson_and_spearman(self, expression):
        expr, trait = expression
        eg, _ = compute_eigengene(expr, ["G1", "G2", "G3"])

        r, p = correlate_with_phenotype(eg, trait)
        assert r > 0.95 and p < 1e-10
        rho, _ = correlate_with_phenotype(eg, trait, method="spearman")
        assert rho > 0.9

    def test_unknown_method(self, expression):
        expr, trait = expression
        eg, _ = compute_eigengene(expr, ["G1", "G2"])
        with pytest.raises(ValueError, match="Unknown method"):
            correlate_with_phenotype(eg, trait, method="kendall")


class TestRegulatorEigengenes:
    """Test eigengenes of DAG target sets."""

    def test_regulator_eigengenes(self, expression, edge_factory):
        expr, trait = expression
        df = edge_factory([
            ("TF", "G1", 0.9), ("TF", "G2", 0.8), ("TF", "G3", 0.7),
            ("MIR", "N1", 0.6),
        ])
        edges, _, _ = build_dag(df)

        eigengenes, summary = regulator_eigengenes(expr, edges, ["TF", "MIR"], phenotype=trait)

        assert list(eigengenes.columns) == ["TF"]
        assert summary["regulator"].tolist() == ["TF"]
        assert summary.loc[0, "n_targets"] == 3
        assert summary.loc[0, "r"] > 0.95
