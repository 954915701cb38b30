"""Data loading functions for variantcv.

Tables are parsed by pandas (CSV), pyarrow (Parquet) and scipy (ARFF); this
module only maps them onto a :class:`Dataset`.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.io import arff

from variantcv.data.dataset import Dataset
from variantcv.exceptions import LoadError

logger = logging.getLogger(__name__)

# Flag to track PyArrow availability
_PYARROW_AVAILABLE: Optional[bool] = None


class DataFormat(str, Enum):
    CSV = "csv"
    ARFF = "arff"
    PARQUET = "parquet"
    PARQUET_DATASET = "parquet_dataset"


_SUFFIX_FORMATS = {
    ".csv": DataFormat.CSV,
    ".arff": DataFormat.ARFF,
    ".parquet": DataFormat.PARQUET,
}


def infer_format(path: Path) -> DataFormat:
    """Format from the file suffix; a directory is read as a parquet dataset."""
    path = Path(path)
    if path.is_dir():
        return DataFormat.PARQUET_DATASET
    try:
        return _SUFFIX_FORMATS[path.suffix.lower()]
    except KeyError:
        raise ValueError(
            f"Cannot infer data format from path: {path}. "
            f"Expected one of {sorted(_SUFFIX_FORMATS)} or a parquet dataset directory."
        ) from None


def validate_parquet_available() -> None:
    """
    Check if PyArrow is available for Parquet operations.

    Raises
    ------
    ImportError
        If PyArrow is not installed with helpful installation message
    """
    global _PYARROW_AVAILABLE

    if _PYARROW_AVAILABLE is None:
        try:
            import pyarrow  # noqa: F401

            _PYARROW_AVAILABLE = True
        except ImportError:
            _PYARROW_AVAILABLE = False

    if not _PYARROW_AVAILABLE:
        raise ImportError(
            "PyArrow is required for Parquet support but is not installed.\n"
            "Install with: pip install variantcv[parquet] or pip install pyarrow"
        )


def load_table(path: Path, fmt: Optional[DataFormat] = None) -> Tuple[pd.DataFrame, str]:
    """
    Load a raw table and its relation name.

    Returns
    -------
    frame : pd.DataFrame
        Loaded records with a fresh RangeIndex
    relation : str
        Relation name (ARFF header) or file stem
    """
    path = Path(path)
    fmt = fmt or infer_format(path)

    logger.info(f"Loading table from {path} (format: {fmt.value})")

    if fmt == DataFormat.CSV:
        return pd.read_csv(path), path.stem
    elif fmt == DataFormat.ARFF:
        return _load_arff(path)
    elif fmt == DataFormat.PARQUET:
        validate_parquet_available()
        import pyarrow.parquet as pq

        return pq.read_table(path).to_pandas(), path.stem
    elif fmt == DataFormat.PARQUET_DATASET:
        validate_parquet_available()
        return _load_parquet_dataset(path), path.name
    else:
        raise ValueError(f"Unsupported format: {fmt}")


def load_dataset(
    path: Union[Path, str],
    label_col: Optional[str] = None,
    name: Optional[str] = None,
    fmt: Optional[DataFormat] = None,
) -> Dataset:
    """
    Load a labelled dataset from CSV, ARFF, Parquet, or a Parquet dataset directory.

    Parameters
    ----------
    path : Path or str
        Path to data file or directory
    label_col : str, optional
        Label column; defaults to the last column
    name : str, optional
        Dataset name; defaults to the ARFF relation name or file stem
    fmt : DataFormat, optional
        Explicit format; inferred from the path if omitted

    Returns
    -------
    Dataset
        Records with ids 0..n-1 in file order

    Raises
    ------
    LoadError
        If the file does not exist or cannot be parsed
    SchemaError
        If the label column is missing
    """
    path = Path(path)
    if not path.exists():
        raise LoadError(f"Data path not found: {path}")

    try:
        frame, relation = load_table(path, fmt=fmt)
    except (ImportError, ValueError, NotImplementedError, OSError, arff.ArffError) as exc:
        raise LoadError(f"Failed to load {path}: {exc}") from exc

    if frame.shape[1] == 0:
        raise LoadError(f"No attributes found in {path}")

    frame = frame.reset_index(drop=True)
    label = label_col if label_col is not None else str(frame.columns[-1])
    if label in frame.columns:
        missing = frame[label].isna()
        if missing.any():
            logger.warning(f"Dropping {int(missing.sum())} rows with missing labels")
            frame = frame.loc[~missing].reset_index(drop=True)

    dataset = Dataset(frame, label_col=label, name=name or relation)
    logger.info(
        f"Loaded dataset '{dataset.name}': {dataset.n_records} records, "
        f"{len(dataset.feature_names)} features, classes={dataset.class_names}"
    )
    return dataset


def _load_arff(path: Path) -> Tuple[pd.DataFrame, str]:
    """Load an ARFF file, keeping nominal attributes in declared category order."""
    data, meta = arff.loadarff(str(path))
    columns = {}
    for col in meta.names():
        kind, values = meta[col]
        raw = data[col]
        if kind == "nominal":
            decoded = [v.decode("utf-8") if isinstance(v, bytes) else str(v) for v in raw]
            decoded = [np.nan if v == "?" else v for v in decoded]
            columns[col] = pd.Categorical(decoded, categories=list(values))
        else:
            columns[col] = np.asarray(raw, dtype=float)
    return pd.DataFrame(columns, columns=meta.names()), meta.name


def _load_parquet_dataset(path: Path, glob_pattern: str = "**/*.parquet") -> pd.DataFrame:
    """Load Parquet dataset directory (chunked files, optional hive partitioning)."""
    import pyarrow.dataset as ds

    parquet_files: List[Path] = [
        f for f in path.glob(glob_pattern) if not f.name.startswith(".") and not f.name.startswith("_")
    ]
    if not parquet_files:
        raise ValueError(
            f"No parquet files found in {path} matching pattern '{glob_pattern}'. "
            "Ensure the directory contains .parquet files."
        )

    logger.info(f"Found {len(parquet_files)} parquet files in dataset directory")
    return ds.dataset(path, format="parquet").to_table().to_pandas()
