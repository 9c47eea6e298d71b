"""Shared fixtures for causal_grn tests."""

import numpy as np
import pandas as pd
import pytest


def make_edges(rows, extra=None):
    """Build a canonical edge table from (source, target, score) tuples."""
    df = pd.DataFrame(rows, columns=["source", "target", "score"])
    if extra:
        for col, values in extra.items():
            df[col] = values
    return df


@pytest.fixture
def triangle_edges():
    return make_edges([("A", "B", 0.9), ("B", "C", 0.8), ("C", "A", 0.7)])


@pytest.fixture
def interleaved_triangles():
    return make_edges([
        ("A", "B", 0.9),
        ("X", "Y", 0.85),
        ("B", "C", 0.8),
        ("Y", "Z", 0.75),
        ("C", "A", 0.7),
        ("Z", "X", 0.65),
    ])


@pytest.fixture
def random_edges():
    """Dense random edge list over 12 genes, ranked by descending score."""
    rng = np.random.default_rng(7)
    genes = [f"G{i}" for i in range(12)]
    n = 150
    df = pd.DataFrame({
        "source": rng.choice(genes, size=n),
        "target": rng.choice(genes, size=n),
        "score": rng.random(n),
    })
    return df.sort_values("score", ascending=False, kind="stable")


@pytest.fixture
def findr_table():
    """Raw BioFindr-style output with upstream column names."""
    return pd.DataFrame({
        "Source": ["TF1", "TF1", "TF2", "TF2", "TF3", "MIR1"],
        "Target": ["G1", "TF2", "TF1", "G2", "G3", "G1"],
        "Probability": [0.95, 0.9, 0.85, 0.6, 0.4, 0.99],
        "qvalue": [0.01, 0.02, 0.03, 0.04, 0.2, 0.001],
    })


@pytest.fixture
def edge_factory():
    return make_edges
