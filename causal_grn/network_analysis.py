"""Downstream analysis of a causal GRN DAG.

Once the ranked edge list has been reduced to a DAG, the usual questions
are which regulators drive the network and how it is layered:

  - Regulator summary: per regulator, the number of candidate edges, the
    number accepted into the DAG (causal out-degree) and their mean score.
    Regulators with many accepted targets are candidate hub regulators.
  - Centrality: PageRank, degree, betweenness and closeness centrality of
    every node in the DAG.
  - Topological generations: the layer of each gene in the DAG (layer 0 =
    genes with no accepted causal parent).
"""

import logging
from typing import Hashable, Optional, Sequence

import networkx as nx
import pandas as pd

log = logging.getLogger(__name__)


# ── Graph conversion ──────────────────────────────────────────────────────────

def to_named_graph(G: nx.DiGraph, vertex_names: Sequence[Hashable]) -> nx.DiGraph:
    """Relabel an index-based DAG with vertex names.

    Args:
        G: DAG over integer vertex indices, as returned by build_dag().
        vertex_names: Index → name mapping from build_dag().

    Returns:
        Copy of G whose nodes are vertex names.
    """
    return nx.relabel_nodes(G, dict(enumerate(vertex_names)), copy=True)


def is_acyclic(G: nx.DiGraph) -> bool:
    """Return True if G has no directed cycle."""
    return nx.is_directed_acyclic_graph(G)


# ── Regulator-level summaries ─────────────────────────────────────────────────

def regulator_summary(
    edges: pd.DataFrame,
    source_col: str = "source",
    score_col: str = "score",
) -> pd.DataFrame:
    """Summarise candidate and accepted edges per regulator.

    Args:
        edges: Augmented edge table from build_dag() (needs 'in_dag').
        source_col: Column with regulator names.
        score_col: Column with edge scores.

    Returns:
        DataFrame with columns ['regulator', 'n_edges', 'n_dag_edges',
        'n_excluded', 'mean_score', 'mean_dag_score'], sorted by
        n_dag_edges descending then regulator name.
    """
    columns = ["regulator", "n_edges", "n_dag_edges", "n_excluded",
               "mean_score", "mean_dag_score"]
    if edges.empty:
        return pd.DataFrame(columns=columns)

    df = edges[[source_col, score_col, "in_dag"]].copy()
    df["dag_score"] = df[score_col].where(df["in_dag"])
    grouped = df.groupby(source_col, sort=False)

    summary = pd.DataFrame({
        "n_edges": grouped.size(),
        "n_dag_edges": grouped["in_dag"].sum().astype(int),
        "mean_score": grouped[score_col].mean(),
        "mean_dag_score": grouped["dag_score"].mean(),
    })
    summary["n_excluded"] = summary["n_edges"] - summary["n_dag_edges"]
    summary = summary.rename_axis("regulator").reset_index()

    return (
        summary[columns]
        .sort_values(["n_dag_edges", "regulator"], ascending=[False, True])
        .reset_index(drop=True)
    )


def top_regulators(
    edges: pd.DataFrame,
    n: int = 10,
    source_col: str = "source",
    score_col: str = "score",
) -> list:
    """Return the n regulators with the most accepted causal targets."""
    summary = regulator_summary(edges, source_col=source_col, score_col=score_col)
    summary = summary[summary["n_dag_edges"] > 0]
    return summary["regulator"].head(n).tolist()


def regulator_targets(
    edges: pd.DataFrame,
    regulator: Hashable,
    in_dag_only: bool = True,
    source_col: str = "source",
    target_col: str = "target",
) -> set:
    """Return the set of target genes for a given regulator.

    Args:
        edges: Edge table (augmented output of build_dag() if in_dag_only).
        regulator: Regulator name.
        in_dag_only: Only return targets of edges accepted into the DAG.

    Returns:
        Set of target gene names.
    """
    mask = edges[source_col] == regulator
    if in_dag_only:
        mask &= edges["in_dag"].astype(bool)
    return set(edges.loc[mask, target_col])


# ── Graph-level metrics ───────────────────────────────────────────────────────

def compute_centrality_metrics(G: nx.DiGraph) -> pd.DataFrame:
    """Compute four centrality metrics for all nodes in the network.

    - PageRank: importance based on incoming causal edges, weighted by score.
    - Degree centrality: fraction of all other nodes connected to this node.
    - Betweenness centrality: fraction of shortest paths passing through
      this node; identifies regulatory bottlenecks.
    - Closeness centrality: inverse average distance from other nodes.

    Args:
        G: Directed NetworkX graph (named or index-based).

    Returns:
        DataFrame with columns ['node', 'pagerank', 'degree', 'betweenness',
        'closeness'], one row per node.
    """
    columns = ["node", "pagerank", "degree", "betweenness", "closeness"]
    if G.number_of_nodes() == 0:
        return pd.DataFrame(columns=columns)

    pr = nx.pagerank(G, weight="weight")
    deg = nx.degree_centrality(G)
    btwn = nx.betweenness_centrality(G)
    close = nx.closeness_centrality(G)

    return pd.DataFrame({
        "node": list(pr.keys()),
        "pagerank": list(pr.values()),
        "degree": [deg[n] for n in pr],
        "betweenness": [btwn[n] for n in pr],
        "closeness": [close[n] for n in pr],
    })


def topological_generations(
    G: nx.DiGraph,
    vertex_names: Optional[Sequence[Hashable]] = None,
) -> pd.DataFrame:
    """Assign each node its generation (layer) in the DAG.

    Args:
        G: Directed acyclic graph.
        vertex_names: Optional index → name mapping; adds a 'name' column.

    Returns:
        DataFrame with columns ['node', 'generation'] (and 'name' when
        vertex_names is given), ordered by generation then node.
    """
    records = []
    for gen, nodes in enumerate(nx.topological_generations(G)):
        for node in sorted(nodes):
            rec = {"node": node, "generation": gen}
            if vertex_names is not None:
                rec["name"] = vertex_names[node]
            records.append(rec)

    columns = ["node", "generation"] + (["name"] if vertex_names is not None else [])
    return pd.DataFrame(records, columns=columns)
