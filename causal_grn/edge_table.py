"""Preparation of ranked causal edge tables.

BioFindr's `findr` returns one row per regulator–target pair with a
posterior probability of a causal interaction and a q-value (Bayesian
FDR). Before a DAG can be built from that table it has to be:

  1. Harmonised: upstream column names are mapped onto the canonical
     ['source', 'target', 'score'] columns used throughout this package.
  2. Validated: every row needs a source, a target and a numeric score.
  3. Thresholded: only edges with q-value ≤ FDR are kept.
  4. Restricted: optionally, only permitted regulators (e.g. TFs or
     microRNAs) may appear as edge sources.
  5. Ranked: sorted by descending score. The sort is stable, so rows
     with tied scores keep their input order.

The DAG builder never sorts on its own; `rank_edges` (or `prepare_edges`)
is how callers satisfy its descending-score precondition.
"""

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

log = logging.getLogger(__name__)

# Column names produced by BioFindr.findr for DataFrame input
FINDR_COLUMNS = {
    "Source": "source",
    "Target": "target",
    "Probability": "score",
    "qvalue": "qvalue",
}


class InvalidInputError(ValueError):
    """Raised when an edge table cannot be turned into a DAG.

    Attributes:
        row: Label of the offending row, or None when the problem concerns
            the table as a whole (e.g. a missing column).
    """

    def __init__(self, message: str, row=None):
        super().__init__(message)
        self.row = row


# ── Harmonisation and validation ──────────────────────────────────────────────

def standardize_columns(
    df: pd.DataFrame,
    column_map: Optional[dict] = None,
) -> pd.DataFrame:
    """Rename upstream columns to the canonical edge-table names.

    Columns not mentioned in the mapping are passed through untouched.

    Args:
        df: Raw edge table.
        column_map: Mapping of upstream → canonical names. Defaults to the
            BioFindr output columns.

    Returns:
        Copy of df with renamed columns.
    """
    mapping = FINDR_COLUMNS if column_map is None else column_map
    return df.rename(columns={k: v for k, v in mapping.items() if k in df.columns})


def validate_edges(
    df: pd.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
    score_col: str = "score",
    require_sorted: bool = True,
) -> None:
    """Check that an edge table satisfies the DAG builder's preconditions.

    Checks, in order: required columns present; no missing source or target
    names; scores present and numeric; scores non-increasing down the table
    (when require_sorted). Equal consecutive scores are allowed; ties are
    resolved by row order.

    Args:
        df: Edge table.
        source_col: Column with source vertex names.
        target_col: Column with target vertex names.
        score_col: Column with confidence scores.
        require_sorted: Whether to enforce descending score order.

    Raises:
        InvalidInputError: Identifying the first offending row.
    """
    missing = [c for c in (source_col, target_col, score_col) if c not in df.columns]
    if missing:
        raise InvalidInputError(f"Edge table missing columns: {missing}")

    for col in (source_col, target_col):
        null = df[col].isna()
        if null.any():
            row = df.index[null.to_numpy().argmax()]
            raise InvalidInputError(f"Edge at row {row!r} has no {col} name", row=row)

    scores = pd.to_numeric(df[score_col], errors="coerce")
    bad = scores.isna()
    if bad.any():
        pos = bad.to_numpy().argmax()
        row = df.index[pos]
        raise InvalidInputError(
            f"Edge at row {row!r} has missing or non-numeric score "
            f"{df[score_col].iloc[pos]!r}",
            row=row,
        )

    if require_sorted and len(scores) > 1:
        values = scores.to_numpy(dtype=float)
        rising = np.flatnonzero(values[1:] > values[:-1])
        if rising.size:
            row = df.index[rising[0] + 1]
            raise InvalidInputError(
                f"Edges are not sorted by descending {score_col}: row {row!r} "
                f"({values[rising[0] + 1]}) follows a lower score "
                f"({values[rising[0]]}); rank the table with rank_edges() first",
                row=row,
            )


# ── Filtering ─────────────────────────────────────────────────────────────────

def filter_by_fdr(
    df: pd.DataFrame,
    fdr: float = 0.05,
    qvalue_col: str = "qvalue",
) -> pd.DataFrame:
    """Retain edges whose q-value is at or below the FDR threshold.

    Args:
        df: Edge table with a q-value column.
        fdr: Target false discovery rate.
        qvalue_col: Name of the q-value column.

    Returns:
        Filtered DataFrame.
    """
    if qvalue_col not in df.columns:
        raise InvalidInputError(f"Edge table missing columns: ['{qvalue_col}']")
    return df[df[qvalue_col] <= fdr].copy()


def filter_by_regulators(
    df: pd.DataFrame,
    regulators: Iterable,
    source_col: str = "source",
) -> pd.DataFrame:
    """Keep only edges whose source is a permitted regulator."""
    return df[df[source_col].isin(set(regulators))].copy()


def remove_self_loops(
    df: pd.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
) -> pd.DataFrame:
    """Remove edges where a gene is listed as regulating itself."""
    return df[df[source_col] != df[target_col]].copy()


# ── Ranking ───────────────────────────────────────────────────────────────────

def rank_edges(df: pd.DataFrame, score_col: str = "score") -> pd.DataFrame:
    """Sort edges by descending score, keeping input order among ties.

    Args:
        df: Edge table.
        score_col: Column to rank by.

    Returns:
        Sorted copy of df. The original index labels are preserved so that
        rows can still be traced back to the input.
    """
    return df.sort_values(score_col, ascending=False, kind="stable")


def deduplicate_edges(
    df: pd.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
) -> pd.DataFrame:
    """Keep the first occurrence of every (source, target) pair.

    Applied after rank_edges() this keeps the highest-scoring instance.
    """
    return df.drop_duplicates(subset=[source_col, target_col], keep="first")


def prepare_edges(
    df: pd.DataFrame,
    column_map: Optional[dict] = None,
    fdr: Optional[float] = None,
    regulators: Optional[Iterable] = None,
    drop_self_loops: bool = False,
    drop_duplicates: bool = False,
) -> pd.DataFrame:
    """Turn a raw findr output table into a ranked edge list.

    Applies in order: harmonise columns → validate → FDR filter →
    regulator filter → self-loop removal → stable ranking → deduplication.
    Each filtering step is skipped when its argument is None/False.

    Args:
        df: Raw edge table.
        column_map: Upstream → canonical column mapping (default: BioFindr).
        fdr: q-value threshold, or None to keep all edges.
        regulators: Permitted edge sources, or None to allow any.
        drop_self_loops: Remove self-loops up front instead of leaving them
            for the DAG builder to exclude.
        drop_duplicates: Keep only the best-scoring row per pair.

    Returns:
        Ranked edge table ready for build_dag().
    """
    edges = standardize_columns(df, column_map)
    validate_edges(edges, require_sorted=False)
    edges = edges.assign(score=pd.to_numeric(edges["score"]))
    n_raw = len(edges)

    if fdr is not None:
        edges = filter_by_fdr(edges, fdr=fdr)
    if regulators is not None:
        edges = filter_by_regulators(edges, regulators)
    if drop_self_loops:
        edges = remove_self_loops(edges)

    edges = rank_edges(edges)
    if drop_duplicates:
        edges = deduplicate_edges(edges)

    log.info("Prepared %d of %d edges (fdr=%s)", len(edges), n_raw, fdr)
    return edges
