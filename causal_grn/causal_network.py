"""Causal GRN DAG construction from BioFindr output.

Pipeline overview:
  1. Obtain a scored edge table, either from a file written by BioFindr
     (`findr(dt, dm, FDR=...)` exported to CSV/Arrow) or from any callable
     implementing the EdgeScorer protocol.
  2. Harmonise column names (Source/Target/Probability/qvalue →
     source/target/score/qvalue), apply the FDR threshold and optionally
     restrict edge sources to a list of permitted regulators.
  3. Rank edges by descending posterior probability. Ties keep file order.
  4. Greedily insert edges into a DAG, excluding any edge that would close
     a directed cycle with higher-ranked edges.
  5. Write the augmented edge table (with source_index, target_index and
     in_dag columns), the vertex mapping and a per-regulator summary.

Usage:
    python -m causal_grn.causal_network --config configs/default_config.yaml \\
        --edge-file results/findr/edges.csv \\
        --output-dir results/dag/
"""

import argparse
import logging
from pathlib import Path
from typing import Optional, Protocol

import pandas as pd

from .dag_builder import build_dag
from .edge_table import FINDR_COLUMNS, prepare_edges
from .network_analysis import regulator_summary
from .utils.io import load_config, load_edges, load_gene_list, save_table

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
log = logging.getLogger(__name__)


class EdgeScorer(Protocol):
    """Upstream producer of a scored edge table.

    Any callable returning a DataFrame with source, target and score
    columns (upstream names are fine; they are mapped via column_map)
    qualifies, e.g. a thin wrapper around a BioFindr call.
    """

    def __call__(self) -> pd.DataFrame:
        ...


# ── Full pipeline ─────────────────────────────────────────────────────────────

def run_dag_pipeline(
    output_dir: str | Path,
    edge_path: Optional[str | Path] = None,
    scorer: Optional[EdgeScorer] = None,
    column_map: Optional[dict] = None,
    fdr: Optional[float] = 0.05,
    regulators: Optional[list] = None,
    method: str = "reachability",
    duplicates: str = "evaluate",
) -> dict:
    """Build a causal DAG from a ranked edge table and save the results.

    Exactly one of edge_path or scorer must be given.

    Args:
        output_dir: Directory for the output CSVs.
        edge_path: Path to an edge table (CSV, TSV, Arrow or Parquet).
        scorer: Callable returning a scored edge table.
        column_map: Upstream → canonical column mapping (default: BioFindr).
        fdr: q-value threshold; None keeps every edge.
        regulators: Optional list of permitted edge sources.
        method: Cycle test passed to build_dag().
        duplicates: Duplicate-pair policy passed to build_dag().

    Returns:
        Dict with keys 'edges' (augmented table), 'vertices' (index/name
        table), 'graph' (nx.DiGraph over indices) and 'summary'
        (per-regulator summary).
    """
    if (edge_path is None) == (scorer is None):
        raise ValueError("Provide exactly one of edge_path or scorer.")

    if edge_path is not None:
        log.info("Loading edges from %s", edge_path)
        raw = load_edges(edge_path, required=())
    else:
        raw = scorer()

    mapping = FINDR_COLUMNS if column_map is None else column_map
    has_qvalue = "qvalue" in raw.rename(columns=mapping).columns
    if fdr is not None and not has_qvalue:
        log.warning("No q-value column found; skipping FDR threshold %.3g", fdr)
        fdr = None

    ranked = prepare_edges(raw, column_map=mapping, fdr=fdr, regulators=regulators)
    edges, vertex_names, dag = build_dag(ranked, method=method, duplicates=duplicates)

    vertices = pd.DataFrame({"index": range(len(vertex_names)), "name": vertex_names})
    summary = regulator_summary(edges)

    output_dir = Path(output_dir)
    save_table(edges, output_dir / "dag_edges.csv")
    save_table(vertices, output_dir / "dag_vertices.csv")
    save_table(summary, output_dir / "regulator_summary.csv")
    log.info(
        "Saved DAG with %d vertices and %d edges to %s",
        dag.number_of_nodes(), dag.number_of_edges(), output_dir,
    )

    return {"edges": edges, "vertices": vertices, "graph": dag, "summary": summary}


# ── CLI ───────────────────────────────────────────────────────────────────────

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Build a causal GRN DAG from a ranked BioFindr edge table."
    )
    parser.add_argument("--config", help="Path to YAML config file.")
    parser.add_argument("--edge-file", help="Edge table (CSV/TSV/Arrow/Parquet).")
    parser.add_argument("--output-dir", help="Output directory.")
    parser.add_argument("--regulators", default=None,
                        help="File listing permitted edge sources (one per line).")
    parser.add_argument("--fdr", type=float, default=0.05)
    parser.add_argument("--method", choices=["reachability", "incremental"],
                        default="reachability")
    parser.add_argument("--duplicates", choices=["evaluate", "drop"], default="evaluate")
    args = parser.parse_args()

    cfg = load_config(args.config) if args.config else {}
    dag_cfg = cfg.get("dag", {})
    paths_cfg = cfg.get("paths", {})

    edge_file = args.edge_file or paths_cfg.get("edge_file")
    output_dir = args.output_dir or paths_cfg.get("output_dir")
    if not edge_file or not output_dir:
        parser.error("--edge-file and --output-dir are required (or set them under paths:)")

    reg_file = args.regulators or paths_cfg.get("regulators")
    regulators = load_gene_list(reg_file) if reg_file else None

    run_dag_pipeline(
        output_dir=output_dir,
        edge_path=edge_file,
        column_map=dag_cfg.get("columns"),
        fdr=dag_cfg.get("fdr", args.fdr),
        regulators=regulators,
        method=dag_cfg.get("method", args.method),
        duplicates=dag_cfg.get("duplicates", args.duplicates),
    )


if __name__ == "__main__":
    main()
