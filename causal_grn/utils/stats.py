"""Shared statistical functions used across analysis modules."""

from typing import Optional
import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests


def apply_bh_correction(
    df: pd.DataFrame,
    pvalue_col: str = "pvalue",
    group_cols: Optional[list] = None,
) -> pd.DataFrame:
    """Apply Benjamini-Hochberg FDR correction to a p-value column.

    Adds 'FDR' and 'neg_log10_FDR' columns to the DataFrame. When group_cols
    is specified, correction is applied independently within each group
    (e.g., per reference collection).

    Args:
        df: DataFrame containing a column of p-values.
        pvalue_col: Name of the column containing raw p-values.
        group_cols: Optional list of column names defining groups for
            within-group correction.

    Returns:
        Copy of df with 'FDR' and 'neg_log10_FDR' columns added.
    """
    df = df.reset_index(drop=True)
    if df.empty:
        df["FDR"] = pd.Series(dtype=float)
        df["neg_log10_FDR"] = pd.Series(dtype=float)
        return df

    if group_cols:
        fdr_vals = np.ones(len(df))
        for _, idx in df.groupby(group_cols).groups.items():
            pvals = df.loc[idx, pvalue_col].fillna(1.0).values
            _, fdr, _, _ = multipletests(pvals, method="fdr_bh")
            fdr_vals[idx] = fdr
        df["FDR"] = fdr_vals
    else:
        pvals = df[pvalue_col].fillna(1.0).values
        _, fdr, _, _ = multipletests(pvals, method="fdr_bh")
        df["FDR"] = fdr

    df["neg_log10_FDR"] = -np.log10(df["FDR"].clip(lower=np.finfo(float).tiny))
    return df


def jaccard_similarity(set_a: set, set_b: set) -> float:
    """Compute Jaccard similarity between two sets.

    Measures overlap between a predicted and a reference target gene set.
    A value of 1 indicates identical sets; 0 indicates no overlap.

    Args:
        set_a: First set of elements.
        set_b: Second set of elements.

    Returns:
        Jaccard index in [0, 1]. Returns 0 if both sets are empty.
    """
    if not set_a and not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)
