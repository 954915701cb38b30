"""
Data layer for variantcv.

Example usage:
    from variantcv.data import load_dataset, imbalance

    dataset = load_dataset(Path("variants.arff"))
    fold = dataset.attribute("fold")

    synthetic = imbalance(generate_synthetic_dataset(10000), n_minority=50)
"""

from variantcv.data.dataset import Attribute, Dataset
from variantcv.data.loaders import DataFormat, infer_format, load_dataset, load_table, validate_parquet_available
from variantcv.data.synthetic import count_classes, generate_synthetic_dataset, imbalance

__all__ = [
    # Core types
    "Attribute",
    "Dataset",
    "DataFormat",
    # Loaders
    "infer_format",
    "load_dataset",
    "load_table",
    "validate_parquet_available",
    # Synthetic data
    "generate_synthetic_dataset",
    "imbalance",
    "count_classes",
]
