"""
causal_grn: Causal gene regulatory network construction from ranked
BioFindr edge tables.

Analyses:
    1. edge_table       — Column harmonisation, FDR filtering and ranking
    2. dag_builder      — Greedy maximum-weight acyclic subgraph
    3. network_analysis — Regulator summaries and centrality
    4. validation       — Hypergeometric overlap with reference targets
    5. eigengene        — PC1 summaries of regulator target sets
    6. causal_network   — End-to-end pipeline and CLI
"""

__version__ = "0.1.0"
