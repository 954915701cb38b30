"""Held-out prediction collection across cross-validation folds."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["record_id", "fold", "actual", "predicted"]


def probability_column(class_name) -> str:
    return f"prob_{class_name}"


@dataclass
class FoldPredictions:
    """
    Predictions for one fold's test records.

    Parameters
    ----------
    fold_index : int
        Fold the records were held out in
    record_ids : np.ndarray
        Ids of the test records
    actual : np.ndarray
        True labels
    predicted : np.ndarray
        Predicted labels
    probabilities : np.ndarray
        Shape (n_records, n_classes)
    attributes : pd.DataFrame, optional
        Test record attributes to carry into the merged table
    """

    fold_index: int
    record_ids: np.ndarray
    actual: np.ndarray
    predicted: np.ndarray
    probabilities: np.ndarray
    attributes: Optional[pd.DataFrame] = None

    def __post_init__(self):
        n = len(self.record_ids)
        if len(self.actual) != n or len(self.predicted) != n or len(self.probabilities) != n:
            raise ValueError(
                f"Fold {self.fold_index}: record_ids, actual, predicted and probabilities must have equal length"
            )

    @property
    def n_records(self) -> int:
        return len(self.record_ids)

    @classmethod
    def empty(cls, fold_index: int, n_classes: int) -> FoldPredictions:
        return cls(
            fold_index=fold_index,
            record_ids=np.array([], dtype=int),
            actual=np.array([], dtype=object),
            predicted=np.array([], dtype=object),
            probabilities=np.zeros((0, n_classes), dtype=float),
        )

    def to_frame(self, class_names: List) -> pd.DataFrame:
        """One row per record: ids, labels, probability vector and correctness flags."""
        proba = np.asarray(self.probabilities, dtype=float).reshape(self.n_records, len(class_names))
        frame = pd.DataFrame({
            "record_id": np.asarray(self.record_ids),
            "fold": np.full(self.n_records, self.fold_index, dtype=int),
            "actual": np.asarray(self.actual, dtype=object),
            "predicted": np.asarray(self.predicted, dtype=object),
        })
        for i, cls in enumerate(class_names):
            frame[probability_column(cls)] = proba[:, i]
        frame["correct"] = frame["actual"].to_numpy() == frame["predicted"].to_numpy()
        frame["misclassified"] = ~frame["correct"]

        if self.attributes is not None:
            attrs = self.attributes.reset_index(drop=True)
            clashing = [c for c in attrs.columns if c in frame.columns]
            if clashing:
                attrs = attrs.rename(columns={c: f"attr_{c}" for c in clashing})
            frame = pd.concat([frame, attrs], axis=1)
        return frame


@dataclass
class PredictionTable:
    """
    Merged held-out predictions of a cross-validation run.

    Rows are in insertion order (fold 0 records first, then fold 1, ...).
    ``record_id`` traces each row back to the input dataset.
    """

    frame: pd.DataFrame
    class_names: List

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def n_rows(self) -> int:
        return len(self.frame)

    @property
    def probability_columns(self) -> List[str]:
        return [probability_column(cls) for cls in self.class_names]

    @property
    def record_ids(self) -> np.ndarray:
        return self.frame["record_id"].to_numpy()

    def probabilities(self) -> np.ndarray:
        """Probability matrix, shape (n_rows, n_classes)."""
        return self.frame[self.probability_columns].to_numpy(dtype=float)

    @property
    def correct(self) -> np.ndarray:
        return self.frame["correct"].to_numpy(dtype=bool)

    @property
    def misclassified(self) -> np.ndarray:
        return self.frame["misclassified"].to_numpy(dtype=bool)

    @property
    def accuracy(self) -> float:
        if self.n_rows == 0:
            return float("nan")
        return float(self.correct.mean())

    def in_record_order(self) -> PredictionTable:
        """Copy of the table sorted by record id."""
        frame = self.frame.sort_values("record_id", kind="mergesort").reset_index(drop=True)
        return PredictionTable(frame=frame, class_names=list(self.class_names))

    def for_fold(self, fold_index: int) -> pd.DataFrame:
        return self.frame[self.frame["fold"] == fold_index]

    def confusion_matrix(self) -> np.ndarray:
        """Confusion counts computed directly from the rows (rows actual, columns predicted)."""
        n_classes = len(self.class_names)
        if self.n_rows == 0:
            return np.zeros((n_classes, n_classes), dtype=int)
        return confusion_matrix(
            self.frame["actual"].to_numpy(),
            self.frame["predicted"].to_numpy(),
            labels=list(self.class_names),
        )

    def to_csv(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.frame.to_csv(path, index=False)
        logger.info(f"Saved {self.n_rows} predictions to {path}")


class PredictionCollector:
    """
    Accumulate per-fold predictions into one PredictionTable.

    Each record may be predicted once; appending a record id twice or
    appending after :meth:`finalize` raises.
    """

    def __init__(self, class_names: List):
        self.class_names = list(class_names)
        self._frames: List[pd.DataFrame] = []
        self._seen: Set = set()
        self._finalized = False

    @property
    def n_rows(self) -> int:
        return len(self._seen)

    def append(self, fold_predictions: FoldPredictions) -> None:
        if self._finalized:
            raise RuntimeError("PredictionCollector already finalized.")

        ids = [rid.item() if hasattr(rid, "item") else rid for rid in fold_predictions.record_ids]
        duplicates = sorted(self._seen.intersection(ids))
        if duplicates or len(set(ids)) != len(ids):
            raise ValueError(
                f"Fold {fold_predictions.fold_index}: records already predicted: {duplicates[:10]}"
            )
        self._seen.update(ids)
        self._frames.append(fold_predictions.to_frame(self.class_names))
        logger.debug(f"Collected {len(ids)} predictions for fold {fold_predictions.fold_index}")

    def finalize(self) -> PredictionTable:
        self._finalized = True
        frames = [f for f in self._frames if len(f)]
        if frames:
            frame = pd.concat(frames, ignore_index=True)
        else:
            columns = BASE_COLUMNS + [probability_column(c) for c in self.class_names] + ["correct", "misclassified"]
            frame = pd.DataFrame(columns=columns)
        return PredictionTable(frame=frame, class_names=list(self.class_names))
