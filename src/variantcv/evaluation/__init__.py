"""Held-out prediction collection."""

from variantcv.evaluation.predictions import (
    FoldPredictions,
    PredictionCollector,
    PredictionTable,
    probability_column,
)

__all__ = [
    "FoldPredictions",
    "PredictionCollector",
    "PredictionTable",
    "probability_column",
]
