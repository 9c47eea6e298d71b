"""Greedy construction of a causal DAG from a ranked edge list.

A causal GRN inferred edge-by-edge (e.g. by BioFindr) is generally not
acyclic: reciprocal or circular relations appear whenever several genes
share a common upstream signal. Bayesian network and pathway analyses
require a DAG, so the ranked edge list is turned into one greedily:

  1. Every vertex name is given a dense integer index in first-seen
     order (rows top-down, source before target).
  2. Edges are visited in the given order, i.e. by descending confidence.
  3. An edge u → v is accepted unless v can already reach u through the
     edges accepted so far (which would close a cycle). Self-loops are
     always excluded.

The result is a maximal acyclic subgraph that respects the ranking. It is
not guaranteed to be a maximum-weight one (that problem is NP-hard), but
it is deterministic for a given ordered input, and no lower-ranked edge
can ever evict a higher-ranked one.

Ties: rows with equal scores are taken in input order. Use
edge_table.rank_edges(), which sorts stably, to produce such an order.
"""

import logging
from typing import Hashable, Sequence

import networkx as nx
import numpy as np
import pandas as pd

from .edge_table import InvalidInputError, deduplicate_edges, validate_edges
from .topo_order import IncrementalTopoOrder

log = logging.getLogger(__name__)

METHODS = ("reachability", "incremental")
DUPLICATE_POLICIES = ("evaluate", "drop")


def index_vertices(
    sources: Sequence[Hashable],
    targets: Sequence[Hashable],
) -> list:
    """Assign integer indices to vertex names in first-seen order.

    Args:
        sources: Source names, one per edge.
        targets: Target names, one per edge.

    Returns:
        List of vertex names; position i holds the name of vertex i.
    """
    seen: dict = {}
    for u, v in zip(sources, targets):
        seen.setdefault(u, len(seen))
        seen.setdefault(v, len(seen))
    return list(seen)


def vertex_index(vertex_names: Sequence[Hashable]) -> dict:
    """Invert an index → name list into a name → index dict."""
    return {name: i for i, name in enumerate(vertex_names)}


def build_dag(
    edges: pd.DataFrame,
    source_col: str = "source",
    target_col: str = "target",
    score_col: str = "score",
    method: str = "reachability",
    duplicates: str = "evaluate",
) -> tuple[pd.DataFrame, list, nx.DiGraph]:
    """Build a DAG by inserting ranked edges and skipping cycle-closing ones.

    The input must already be sorted by descending score; the function
    validates this but never reorders rows. Any passthrough columns are
    kept as they are.

    Args:
        edges: Edge table with source, target and score columns.
        source_col: Column with source vertex names.
        target_col: Column with target vertex names.
        score_col: Column with confidence scores.
        method: Cycle test, either 'reachability' (path search from target to
            source in the current DAG) or 'incremental' (Pearce–Kelly
            topological order maintenance). Both give identical results.
        duplicates: How repeated (source, target) pairs are treated.
            'evaluate' tests every row; a repeat of an accepted pair is
            marked in_dag as a redundant edge and the graph keeps the first
            (highest) score. 'drop' removes every row after the first
            occurrence of its pair before building.

    Returns:
        Tuple of (augmented_edges, vertex_names, dag):
          - augmented_edges: copy of the input with 'source_index',
            'target_index' (int) and 'in_dag' (bool) columns appended.
          - vertex_names: list mapping vertex index → name.
          - dag: nx.DiGraph over vertex indices containing exactly the
            accepted edges. Nodes carry a 'name' attribute, edges a
            'weight' attribute holding the edge's score.

    Raises:
        InvalidInputError: If a required column is missing, a row lacks a
            name or numeric score, or scores are not in descending order.
            Raised before any graph is built.
        ValueError: If method or duplicates is not recognised.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown method '{method}'. Choose: {', '.join(METHODS)}.")
    if duplicates not in DUPLICATE_POLICIES:
        raise ValueError(
            f"Unknown duplicates policy '{duplicates}'. "
            f"Choose: {', '.join(DUPLICATE_POLICIES)}."
        )

    validate_edges(edges, source_col, target_col, score_col, require_sorted=True)

    out = edges.copy()
    if duplicates == "drop":
        out = deduplicate_edges(out, source_col, target_col)

    sources = out[source_col].tolist()
    targets = out[target_col].tolist()
    scores = pd.to_numeric(out[score_col]).tolist()

    vertex_names = index_vertices(sources, targets)
    name_to_idx = vertex_index(vertex_names)
    src_idx = [name_to_idx[u] for u in sources]
    tgt_idx = [name_to_idx[v] for v in targets]

    dag = nx.DiGraph()
    dag.add_nodes_from((i, {"name": name}) for i, name in enumerate(vertex_names))

    if method == "incremental":
        order = IncrementalTopoOrder(range(len(vertex_names)))
        accepts = order.add_edge
    else:
        def accepts(u, v):
            return u != v and not nx.has_path(dag, v, u)

    in_dag = []
    for u, v, score in zip(src_idx, tgt_idx, scores):
        if dag.has_edge(u, v):
            # redundant repeat of an accepted pair
            in_dag.append(True)
            continue
        if accepts(u, v):
            dag.add_edge(u, v, weight=score)
            in_dag.append(True)
        else:
            log.debug("Excluded %s → %s (score=%s): closes a cycle",
                      vertex_names[u], vertex_names[v], score)
            in_dag.append(False)

    out["source_index"] = pd.Series(src_idx, index=out.index, dtype="int64")
    out["target_index"] = pd.Series(tgt_idx, index=out.index, dtype="int64")
    out["in_dag"] = pd.Series(in_dag, index=out.index, dtype="bool")

    n_kept = int(sum(in_dag))
    log.info(
        "DAG: %d vertices, %d of %d edges accepted, %d excluded",
        len(vertex_names), n_kept, len(out), len(out) - n_kept,
    )
    return out, vertex_names, dag


def excluded_edge_cycle(
    augmented_edges: pd.DataFrame,
    row,
    vertex_names: Sequence[Hashable],
) -> list:
    """Explain why an edge was left out of the DAG.

    Replays the accepted edges that precede `row` and returns the path from
    the edge's target back to its source through them, which is the cycle
    the edge would have closed.

    Args:
        augmented_edges: Output table of build_dag().
        row: Index label of an excluded edge.
        vertex_names: Vertex mapping returned by build_dag().

    Returns:
        List of vertex names [source, target, ..., source] forming the
        cycle. For a self-loop this is [source, source].

    Raises:
        ValueError: If the edge at `row` is part of the DAG.
    """
    pos = augmented_edges.index.get_loc(row)
    if isinstance(pos, (slice, np.ndarray)):
        raise InvalidInputError(f"Row label {row!r} is not unique", row=row)
    record = augmented_edges.iloc[pos]
    if record["in_dag"]:
        raise ValueError(f"Edge at row {row!r} is part of the DAG")

    u, v = int(record["source_index"]), int(record["target_index"])
    if u == v:
        return [vertex_names[u], vertex_names[u]]

    earlier = augmented_edges.iloc[:pos]
    earlier = earlier[earlier["in_dag"]]
    g = nx.DiGraph()
    g.add_edges_from(zip(earlier["source_index"].tolist(), earlier["target_index"].tolist()))
    path = nx.shortest_path(g, v, u)
    return [vertex_names[u]] + [vertex_names[i] for i in path]
