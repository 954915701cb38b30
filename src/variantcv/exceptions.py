"""Exceptions raised by the cross-validation harness."""

from __future__ import annotations

from typing import Optional


class VariantCVError(Exception):
    """Base class for all variantcv errors."""


class SchemaError(VariantCVError, ValueError):
    """Raised when a required attribute (label, fold id) is missing or mistyped."""


class LoadError(VariantCVError):
    """Raised when a dataset file cannot be read or parsed."""


class ClassifierTrainingError(VariantCVError):
    """
    Raised when a classifier fails while training or predicting a fold.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, fold_index: Optional[int] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.fold_index = fold_index
        self.stage = stage

    def __reduce__(self):
        # keep fold/stage when the error crosses a joblib worker boundary
        return (self.__class__, (self.args[0], self.fold_index, self.stage))


class HarnessInvariantError(VariantCVError, RuntimeError):
    """Raised when fold partitions overlap or do not cover the dataset."""
