"""Classifier capability consumed by the cross-validation harness."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np

from variantcv.data.dataset import Dataset
from variantcv.exceptions import SchemaError

logger = logging.getLogger(__name__)


@dataclass
class TrainedModel:
    """A fitted estimator plus the schema it was trained on."""

    estimator: Any
    class_names: List
    feature_names: List[str] = field(default_factory=list)


class Classifier(ABC):
    """
    Configurable classifier with separate train and predict steps.

    Subclasses declare ``name`` and ``default_options`` and build a fresh,
    unfitted scikit-learn compatible estimator in :meth:`build_estimator`.
    ``train`` never mutates the classifier itself, so one configured instance
    can be trained repeatedly; the harness still asks its factory for a new
    instance per fold.
    """

    name: str = "classifier"
    default_options: Dict[str, Any] = {}
    # training needs both classes present
    needs_two_classes: bool = False

    def __init__(self, **options: Any):
        self._options: Dict[str, Any] = dict(self.default_options)
        self.configure(**options)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"

    def configure(self, **options: Any) -> Classifier:
        """Update options; unknown option names raise ``ValueError``."""
        unknown = sorted(set(options) - set(self.default_options))
        if unknown:
            raise ValueError(
                f"Unknown option(s) {unknown} for classifier '{self.name}'. "
                f"Valid options: {sorted(self.default_options)}"
            )
        self._options.update(options)
        return self

    def get_options(self) -> Dict[str, Any]:
        return dict(self._options)

    def describe(self) -> str:
        """One-line identity: name and options."""
        opts = " ".join(f"{k}={v}" for k, v in self._options.items())
        return f"{self.name} {opts}".strip()

    @abstractmethod
    def build_estimator(self, class_counts: np.ndarray) -> Any:
        """Return an unfitted estimator for training data with these class sizes."""

    def train(self, dataset: Dataset) -> TrainedModel:
        """Fit a new estimator on ``dataset`` and return it as a TrainedModel."""
        if dataset.n_records == 0:
            raise ValueError("Cannot train on an empty dataset.")

        X = dataset.feature_matrix()
        y = dataset.label_codes()
        counts = np.bincount(y, minlength=dataset.n_classes)
        logger.debug(f"Training {self.name} on {len(y)} records, class counts={counts.tolist()}")

        estimator = self.build_estimator(counts)
        estimator.fit(X, y)
        return TrainedModel(
            estimator=estimator,
            class_names=list(dataset.class_names),
            feature_names=list(dataset.feature_names),
        )

    def predict(self, model: TrainedModel, dataset: Dataset) -> Tuple[np.ndarray, np.ndarray]:
        """
        Predict labels and class-probability vectors.

        Returns
        -------
        labels : np.ndarray
            Predicted class label per record (argmax of the distribution)
        probabilities : np.ndarray
            Shape (n_records, n_classes), columns in ``model.class_names`` order
        """
        if list(dataset.feature_names) != model.feature_names:
            raise SchemaError(
                f"Feature mismatch: model trained on {model.feature_names[:5]}..., "
                f"got {dataset.feature_names[:5]}..."
            )

        n_classes = len(model.class_names)
        probabilities = np.zeros((dataset.n_records, n_classes), dtype=float)
        if dataset.n_records:
            raw = model.estimator.predict_proba(dataset.feature_matrix())
            # classes absent from the training fold keep probability 0
            probabilities[:, np.asarray(model.estimator.classes_, dtype=int)] = raw

        labels = np.asarray(model.class_names, dtype=object)[probabilities.argmax(axis=1)]
        return labels, probabilities
