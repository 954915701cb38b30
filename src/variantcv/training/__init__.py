"""Cross-validation runner and experiment entry points."""

from variantcv.training.cross_validation import (
    CrossValidationRunner,
    CVResult,
    FoldOutcome,
    run_cross_validation,
)
from variantcv.training.experiments import (
    ExperimentResult,
    evaluate_dataset,
    make_factory,
    run_dataset_experiments,
    run_synthetic_experiment,
)

__all__ = [
    "CrossValidationRunner",
    "CVResult",
    "FoldOutcome",
    "run_cross_validation",
    "ExperimentResult",
    "evaluate_dataset",
    "make_factory",
    "run_dataset_experiments",
    "run_synthetic_experiment",
]
