"""Eigengene summaries of gene subsets.

The eigengene of a gene set is the first principal component of the
standardised expression of those genes across samples. It condenses a
regulator's causal target set into a single per-sample signal that can
be correlated with a phenotype (e.g. a clinical trait or disease status).

The sign of a principal component is arbitrary, so the eigengene is
oriented to correlate positively with the average standardised
expression of the gene set.
"""

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd
from scipy.stats import pearsonr, spearmanr
from sklearn.decomposition import PCA

from .network_analysis import regulator_targets

log = logging.getLogger(__name__)


def compute_eigengene(
    expr: pd.DataFrame,
    genes: Iterable,
) -> tuple[pd.Series, float]:
    """Compute the eigengene of a gene subset.

    Args:
        expr: Expression matrix of shape (n_samples × n_genes), genes as
            columns.
        genes: Genes to summarise. Genes absent from expr are ignored.

    Returns:
        Tuple (eigengene, explained_variance_ratio): a Series indexed by
        sample, and the fraction of variance explained by PC1.

    Raises:
        ValueError: If fewer than two genes are present in expr, or expr
            has fewer than two samples.
    """
    present = [g for g in dict.fromkeys(genes) if g in expr.columns]
    if len(present) < 2:
        raise ValueError(
            f"Need at least two genes present in the expression matrix, got {len(present)}"
        )
    if expr.shape[0] < 2:
        raise ValueError("Need at least two samples to compute an eigengene")

    X = expr[present].to_numpy(dtype=float)
    std = X.std(axis=0, ddof=1)
    std[std == 0] = 1.0
    Z = (X - X.mean(axis=0)) / std

    pca = PCA(n_components=1)
    pc1 = pca.fit_transform(Z)[:, 0]

    # Orient PC1 with the mean standardised expression
    if np.dot(pc1, Z.mean(axis=1)) < 0:
        pc1 = -pc1

    return pd.Series(pc1, index=expr.index, name="eigengene"), float(pca.explained_variance_ratio_[0])


def correlate_with_phenotype(
    eigengene: pd.Series,
    phenotype: pd.Series,
    method: str = "pearson",
) -> tuple[float, float]:
    """Correlate an eigengene with a per-sample phenotype.

    Samples are aligned on the index; samples missing from either series
    or with a missing phenotype are dropped.

    Args:
        eigengene: Eigengene indexed by sample.
        phenotype: Numeric phenotype indexed by sample.
        method: 'pearson' or 'spearman'.

    Returns:
        Tuple (r, p_value).
    """
    aligned = pd.concat([eigengene, phenotype], axis=1, join="inner").dropna()
    if method == "pearson":
        r, p = pearsonr(aligned.iloc[:, 0], aligned.iloc[:, 1])
    elif method == "spearman":
        r, p = spearmanr(aligned.iloc[:, 0], aligned.iloc[:, 1])
    else:
        raise ValueError(f"Unknown method '{method}'. Choose: pearson, spearman.")
    return float(r), float(p)


def regulator_eigengenes(
    expr: pd.DataFrame,
    edges: pd.DataFrame,
    regulators: Iterable,
    phenotype: Optional[pd.Series] = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Compute eigengenes for the DAG target sets of several regulators.

    Regulators with fewer than two measured targets are skipped.

    Args:
        expr: Expression matrix (samples × genes).
        edges: Augmented edge table from build_dag().
        regulators: Regulators whose in-DAG target sets are summarised.
        phenotype: Optional phenotype to correlate each eigengene with.

    Returns:
        Tuple (eigengenes, summary): eigengenes is a samples × regulators
        DataFrame; summary has one row per regulator with columns
        ['regulator', 'n_targets', 'explained_variance'] plus 'r' and
        'pvalue' when a phenotype is given.
    """
    series = {}
    records = []
    for reg in regulators:
        targets = regulator_targets(edges, reg)
        measured = [t for t in targets if t in expr.columns]
        if len(measured) < 2:
            log.info("Skipping %s: %d measured targets", reg, len(measured))
            continue
        eg, var = compute_eigengene(expr, sorted(measured))
        series[reg] = eg
        rec = {"regulator": reg, "n_targets": len(measured), "explained_variance": var}
        if phenotype is not None:
            rec["r"], rec["pvalue"] = correlate_with_phenotype(eg, phenotype)
        records.append(rec)

    columns = ["regulator", "n_targets", "explained_variance"]
    if phenotype is not None:
        columns += ["r", "pvalue"]
    eigengenes = pd.DataFrame(series, index=expr.index)
    return eigengenes, pd.DataFrame(records, columns=columns)
