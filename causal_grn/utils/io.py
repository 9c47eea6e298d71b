"""I/O helpers for loading and saving edge tables and configuration."""

from pathlib import Path
import pandas as pd
import yaml

ARROW_SUFFIXES = {".arrow", ".feather", ".ipc"}
PARQUET_SUFFIXES = {".parquet", ".pq"}


def load_table(path: str | Path) -> pd.DataFrame:
    """Load a tabular file, choosing the reader from the file suffix.

    BioFindr tutorial data are distributed as Arrow IPC files; results are
    usually exchanged as CSV or TSV.

    Args:
        path: Path to a .csv, .tsv, .txt, .arrow/.feather/.ipc or .parquet file.

    Returns:
        DataFrame with the file contents.

    Raises:
        ValueError: If the suffix is not recognised.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in ARROW_SUFFIXES:
        return pd.read_feather(path)
    if suffix in PARQUET_SUFFIXES:
        return pd.read_parquet(path)
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix in {".tsv", ".txt"}:
        return pd.read_csv(path, sep="\t")
    raise ValueError(f"Unsupported table format: {path.name}")


def load_edges(path: str | Path, required: tuple = ("source", "target", "score")) -> pd.DataFrame:
    """Load an edge table (source–target–score plus any extra columns).

    Args:
        path: Path to an edge table readable by load_table().
        required: Columns that must be present. Pass the upstream names
            (e.g. ('Source', 'Target', 'Probability')) for raw findr output.

    Returns:
        DataFrame with all columns of the file.

    Raises:
        ValueError: If required columns are missing.
    """
    df = load_table(path)
    missing = set(required) - set(df.columns)
    if missing:
        raise ValueError(f"Edge file missing columns: {sorted(missing)}")
    return df


def save_table(df: pd.DataFrame, path: str | Path) -> Path:
    """Save a DataFrame to CSV, creating parent directories.

    Args:
        df: Table to write (index is not written).
        path: Output path for the CSV file.

    Returns:
        The output path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def load_gene_list(path: str | Path) -> list[str]:
    """Read a one-gene-per-line text file (e.g. a regulator list)."""
    with open(path) as f:
        return [line.strip() for line in f if line.strip()]


def load_config(path: str | Path) -> dict:
    """Load a YAML configuration file.

    Args:
        path: Path to a YAML config file.

    Returns:
        Dictionary of configuration parameters.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}
