"""Validation of predicted causal targets against reference target sets.

A regulator's predicted targets (its out-edges in the causal DAG) are
compared with an independent reference, such as targets supported by
TF ChIP-seq peaks or by a knockdown experiment. Overlap significance is
assessed with the hypergeometric distribution:

  N = background genes (all genes that could have been predicted)
  K = reference targets within the background
  n = predicted targets within the background
  k = predicted ∩ reference

  p = P(X ≥ k),  X ~ Hypergeom(N, K, n)

Fold enrichment is k / E[X] with E[X] = n·K / N. P-values across
regulators are corrected with Benjamini-Hochberg.
"""

import logging
from typing import Iterable

import pandas as pd
from scipy.stats import hypergeom

from .utils.stats import apply_bh_correction, jaccard_similarity

log = logging.getLogger(__name__)


def hypergeometric_overlap(
    predicted: Iterable,
    reference: Iterable,
    background: Iterable,
) -> tuple[int, float, float, float]:
    """Test whether predicted targets overlap a reference set more than chance.

    Both gene sets are first restricted to the background.

    Args:
        predicted: Predicted target genes.
        reference: Reference (known) target genes.
        background: Gene universe.

    Returns:
        Tuple (overlap, expected, fold_enrichment, p_value). When the
        expected overlap is zero, fold_enrichment is NaN and p_value 1.
    """
    background = set(background)
    predicted = set(predicted) & background
    reference = set(reference) & background

    N, K, n = len(background), len(reference), len(predicted)
    k = len(predicted & reference)
    expected = n * K / N if N else 0.0
    if expected == 0:
        return k, 0.0, float("nan"), 1.0

    p_value = float(hypergeom.sf(k - 1, N, K, n))
    return k, expected, k / expected, p_value


def validate_regulators(
    edges: pd.DataFrame,
    reference_targets: dict,
    background: Iterable,
    source_col: str = "source",
    target_col: str = "target",
    in_dag_only: bool = True,
    min_targets: int = 1,
) -> pd.DataFrame:
    """Test each regulator's predicted targets against its reference set.

    Args:
        edges: Edge table, typically the augmented output of build_dag().
        reference_targets: Dict mapping regulator → iterable of reference
            target genes. Regulators without an entry are skipped.
        background: Gene universe for the hypergeometric test.
        source_col: Column with regulator names.
        target_col: Column with target gene names.
        in_dag_only: Only count edges accepted into the DAG.
        min_targets: Minimum number of predicted targets to test a regulator.

    Returns:
        DataFrame with one row per tested regulator and columns
        ['regulator', 'n_predicted', 'n_reference', 'overlap', 'expected',
        'fold_enrichment', 'jaccard', 'pvalue', 'FDR', 'neg_log10_FDR'],
        sorted by p-value.
    """
    if in_dag_only and "in_dag" in edges.columns:
        edges = edges[edges["in_dag"]]
    background = set(background)

    records = []
    for regulator, targets in edges.groupby(source_col)[target_col]:
        if regulator not in reference_targets:
            continue
        predicted = set(targets) & background
        if len(predicted) < min_targets:
            continue
        reference = set(reference_targets[regulator]) & background
        overlap, expected, fold, pval = hypergeometric_overlap(
            predicted, reference, background
        )
        records.append({
            "regulator": regulator,
            "n_predicted": len(predicted),
            "n_reference": len(reference),
            "overlap": overlap,
            "expected": expected,
            "fold_enrichment": fold,
            "jaccard": jaccard_similarity(predicted, reference),
            "pvalue": pval,
        })

    columns = ["regulator", "n_predicted", "n_reference", "overlap", "expected",
               "fold_enrichment", "jaccard", "pvalue"]
    result = apply_bh_correction(pd.DataFrame(records, columns=columns))
    log.info("Validated %d regulators against reference targets", len(result))
    return result.sort_values("pvalue", kind="stable").reset_index(drop=True)
