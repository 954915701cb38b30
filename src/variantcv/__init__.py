"""
variantcv: cross-validation harness for imbalanced genomic variant classification.

This package provides:
- Group-aware (pre-assigned fold id) and stratified K-fold cross-validation
- Resampling ensembles of random forests (hyperSMURF) and plain random forests
- Synthetic imbalanced datasets for controlled experiments
- Merged held-out prediction tables and pooled confusion-matrix reports
- A Typer CLI
"""

__version__ = "0.1.0"

from variantcv.config import ClassifierConfig, CVConfig, SyntheticConfig
from variantcv.data import Dataset, load_dataset
from variantcv.training import run_cross_validation, run_dataset_experiments, run_synthetic_experiment

__all__ = [
    "__version__",
    "ClassifierConfig",
    "CVConfig",
    "SyntheticConfig",
    "Dataset",
    "load_dataset",
    "run_cross_validation",
    "run_dataset_experiments",
    "run_synthetic_experiment",
]
