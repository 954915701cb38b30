"""Per-fold and aggregated confusion counts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix


@dataclass
class FoldMetrics:
    """Confusion counts of one fold (rows actual, columns predicted)."""

    fold_index: int
    confusion: np.ndarray
    n_train: int = 0

    @classmethod
    def from_labels(
        cls,
        fold_index: int,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        class_names: List,
        n_train: int = 0,
    ) -> FoldMetrics:
        if len(y_true) == 0:
            return cls.empty(fold_index, len(class_names), n_train)
        cm = confusion_matrix(np.asarray(y_true), np.asarray(y_pred), labels=list(class_names))
        return cls(fold_index=fold_index, confusion=cm.astype(int), n_train=n_train)

    @classmethod
    def empty(cls, fold_index: int, n_classes: int, n_train: int = 0) -> FoldMetrics:
        return cls(fold_index=fold_index, confusion=np.zeros((n_classes, n_classes), dtype=int), n_train=n_train)

    @property
    def n_test(self) -> int:
        return int(self.confusion.sum())

    @property
    def n_correct(self) -> int:
        return int(np.trace(self.confusion))

    @property
    def accuracy(self) -> float:
        if self.n_test == 0:
            return float("nan")
        return self.n_correct / self.n_test

    def to_row(self) -> Dict[str, Any]:
        return {
            "fold": self.fold_index,
            "n_train": self.n_train,
            "n_test": self.n_test,
            "n_correct": self.n_correct,
            "accuracy": self.accuracy,
        }


@dataclass
class AggregateMetrics:
    """
    All folds of one cross-validation run.

    The pooled confusion matrix is the element-wise sum of the fold matrices,
    so it does not depend on the order folds were added in.
    """

    class_names: List
    folds: List[FoldMetrics] = field(default_factory=list)

    def add(self, fold: FoldMetrics) -> None:
        self.folds.append(fold)

    @property
    def n_folds(self) -> int:
        return len(self.folds)

    @property
    def confusion(self) -> np.ndarray:
        n_classes = len(self.class_names)
        total = np.zeros((n_classes, n_classes), dtype=int)
        for fold in self.folds:
            total += fold.confusion
        return total

    @property
    def n_records(self) -> int:
        return int(self.confusion.sum())

    def to_frame(self) -> pd.DataFrame:
        """Per-fold counts and accuracy, one row per fold."""
        return pd.DataFrame(
            [fold.to_row() for fold in sorted(self.folds, key=lambda f: f.fold_index)],
            columns=["fold", "n_train", "n_test", "n_correct", "accuracy"],
        )
