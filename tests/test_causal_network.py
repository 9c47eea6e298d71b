"""Tests for the end-to-end DAG pipeline."""

import sys

import pandas as pd
import pytest
import yaml

from causal_grn import causal_network
from causal_grn.causal_network import run_dag_pipeline
from causal_grn.utils.io import load_config, load_edges, load_table


class TestRunDagPipeline:
    """Test the pipeline on small findr-style tables."""

    def test_from_csv(self, tmp_path, findr_table):
        edge_path = tmp_path / "edges.csv"
        findr_table.to_csv(edge_path, index=False)

        result = run_dag_pipeline(tmp_path / "out", edge_path=edge_path, fdr=0.05)

        edges = result["edges"]
        assert len(edges) == 5
        # TF2 → TF1 would close TF1 → TF2 → TF1
        excluded = edges.loc[~edges["in_dag"], ["source", "target"]].values.tolist()
        assert excluded == [["TF2", "TF1"]]
        assert result["graph"].number_of_edges() == 4

        for name in ("dag_edges.csv", "dag_vertices.csv", "regulator_summary.csv"):
            assert (tmp_path / "out" / name).exists()

        saved = pd.read_csv(tmp_path / "out" / "dag_edges.csv")
        assert {"source_index", "target_index", "in_dag"} <= set(saved.columns)
        vertices = pd.read_csv(tmp_path / "out" / "dag_vertices.csv")
        assert vertices["name"].tolist()[0] == "MIR1"

    def test_from_scorer(self, tmp_path, findr_table):
        result = run_dag_pipeline(
            tmp_path, scorer=lambda: findr_table, regulators=["TF1", "TF2"],
            method="incremental",
        )
        assert set(result["edges"]["source"]) == {"TF1", "TF2"}

    def test_without_qvalue_skips_fdr(self, tmp_path, findr_table):
        table = findr_table.drop(columns="qvalue")
        result = run_dag_pipeline(tmp_path, scorer=lambda: table, fdr=0.05)
        assert len(result["edges"]) == len(table)

    def test_requires_exactly_one_source(self, tmp_path, findr_table):
        with pytest.raises(ValueError, match="exactly one"):
            run_dag_pipeline(tmp_path)
        with pytest.raises(ValueError, match="exactly one"):
            run_dag_pipeline(tmp_path, edge_path="x.csv", scorer=lambda: findr_table)

    def test_cli_with_config(self, tmp_path, findr_table, monkeypatch):
        edge_path = tmp_path / "edges.tsv"
        findr_table.to_csv(edge_path, sep="\t", index=False)
        config = {
            "paths": {"edge_file": str(edge_path), "output_dir": str(tmp_path / "cli")},
            "dag": {"fdr": None, "duplicates": "drop"},
        }
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump(config))

        monkeypatch.setattr(sys, "argv", ["causal_network", "--config", str(config_path)])
        causal_network.main()

        saved = pd.read_csv(tmp_path / "cli" / "dag_edges.csv")
        assert len(saved) == len(findr_table)


class TestIO:
    """Test table and config loading."""

    def test_load_edges_missing_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame({"source": ["A"]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="missing columns"):
            load_edges(path)

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported"):
            load_table(tmp_path / "edges.xlsx")

    def test_arrow_round_trip(self, tmp_path, findr_table):
        path = tmp_path / "edges.arrow"
        findr_table.to_feather(path)
        assert load_edges(path, required=("Source", "Target", "Probability")).shape == findr_table.shape

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")
