"""Cross-validation runner."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from joblib import Parallel, delayed

from variantcv.data.dataset import Dataset
from variantcv.evaluation.predictions import FoldPredictions, PredictionCollector, PredictionTable
from variantcv.exceptions import ClassifierTrainingError, HarnessInvariantError
from variantcv.metrics.confusion import AggregateMetrics, FoldMetrics
from variantcv.models.base import Classifier
from variantcv.splitting.folds import FoldMode, FoldPartitioner, assert_disjoint, fold_summary

logger = logging.getLogger(__name__)

ClassifierFactoryFn = Callable[[], Classifier]


@dataclass
class FoldOutcome:
    """Predictions and confusion counts of one fold."""

    fold_index: int
    predictions: FoldPredictions
    metrics: FoldMetrics


@dataclass
class CVResult:
    """Merged output of a cross-validation run."""

    predictions: PredictionTable
    metrics: AggregateMetrics
    fold_ids: np.ndarray


class CrossValidationRunner:
    """
    Run K-fold cross-validation of a classifier on a dataset.

    Each fold trains a fresh classifier obtained from ``classifier_factory``
    on the fold's training records and predicts its held-out records. Fold
    results are merged in fold order into one PredictionTable and one
    AggregateMetrics.

    Parameters
    ----------
    partitioner : FoldPartitioner
        Fold assignment policy
    classifier_factory : Callable[[], Classifier]
        Returns a new, identically configured classifier on every call
    n_jobs : int
        Folds processed concurrently (1 = sequential)
    keep_attributes : bool
        Carry test-record attributes into the prediction table
    """

    def __init__(
        self,
        partitioner: FoldPartitioner,
        classifier_factory: ClassifierFactoryFn,
        n_jobs: int = 1,
        keep_attributes: bool = False,
    ):
        self.partitioner = partitioner
        self.classifier_factory = classifier_factory
        self.n_jobs = n_jobs
        self.keep_attributes = keep_attributes

    def run(self, dataset: Dataset) -> CVResult:
        n_folds = self.partitioner.n_folds
        logger.info(
            f"Running {n_folds}-fold cross-validation ({self.partitioner.mode}) "
            f"on '{dataset.name}' ({dataset.n_records} records)"
        )

        fold_ids = self.partitioner.assign(dataset)
        logger.debug(f"Fold assignment:\n{fold_summary(dataset, fold_ids)}")

        if self.n_jobs == 1:
            outcomes = [self._run_fold(dataset, fold_ids, k) for k in range(n_folds)]
        else:
            outcomes = Parallel(n_jobs=self.n_jobs)(
                delayed(self._run_fold)(dataset, fold_ids, k) for k in range(n_folds)
            )

        # merge in fold order regardless of completion order
        outcomes = sorted(outcomes, key=lambda o: o.fold_index)
        collector = PredictionCollector(dataset.class_names)
        metrics = AggregateMetrics(class_names=list(dataset.class_names))
        for outcome in outcomes:
            collector.append(outcome.predictions)
            metrics.add(outcome.metrics)
        table = collector.finalize()

        _check_coverage(dataset, table)
        logger.info(f"Cross-validation complete: {table.n_rows} predictions, accuracy={table.accuracy:.4f}")
        return CVResult(predictions=table, metrics=metrics, fold_ids=fold_ids)

    def _run_fold(self, dataset: Dataset, fold_ids: np.ndarray, fold_index: int) -> FoldOutcome:
        n_folds = self.partitioner.n_folds
        class_names = list(dataset.class_names)
        logger.info(f"Training fold {fold_index + 1} of {n_folds}...")

        train, test = self.partitioner.for_fold(dataset, fold_index, fold_ids)
        assert_disjoint(train, test, f"fold {fold_index + 1}")

        if test.n_records == 0:
            logger.warning(f"Fold {fold_index + 1} of {n_folds} has no test records; skipping")
            return FoldOutcome(
                fold_index=fold_index,
                predictions=FoldPredictions.empty(fold_index, len(class_names)),
                metrics=FoldMetrics.empty(fold_index, len(class_names), n_train=train.n_records),
            )

        classifier = self.classifier_factory()
        try:
            model = classifier.train(train)
        except Exception as e:
            raise ClassifierTrainingError(
                f"Training failed in fold {fold_index + 1} of {n_folds}: {e}",
                fold_index=fold_index,
                stage="train",
            ) from e

        try:
            predicted, probabilities = classifier.predict(model, test)
        except Exception as e:
            raise ClassifierTrainingError(
                f"Prediction failed in fold {fold_index + 1} of {n_folds}: {e}",
                fold_index=fold_index,
                stage="predict",
            ) from e

        actual = np.asarray(test.labels(), dtype=object)
        predictions = FoldPredictions(
            fold_index=fold_index,
            record_ids=test.record_ids,
            actual=actual,
            predicted=predicted,
            probabilities=probabilities,
            attributes=test.features() if self.keep_attributes else None,
        )
        metrics = FoldMetrics.from_labels(fold_index, actual, predicted, class_names, n_train=train.n_records)
        logger.debug(f"Fold {fold_index + 1}: {metrics.n_correct}/{metrics.n_test} correct")
        return FoldOutcome(fold_index=fold_index, predictions=predictions, metrics=metrics)


def _check_coverage(dataset: Dataset, table: PredictionTable) -> None:
    """Every input record must have been predicted exactly once."""
    predicted = table.record_ids.tolist()
    if len(predicted) != len(set(predicted)):
        raise HarnessInvariantError("Some records were predicted more than once.")
    missing = sorted(set(dataset.record_ids.tolist()) - set(predicted))
    if missing:
        raise HarnessInvariantError(
            f"{len(missing)} records were never in a test fold (e.g. {missing[:10]})"
        )


def run_cross_validation(
    dataset: Dataset,
    classifier_factory: ClassifierFactoryFn,
    n_folds: int,
    mode: FoldMode = "group",
    fold_col: str = "fold",
    random_state: int = 42,
    n_jobs: int = 1,
    keep_attributes: bool = False,
) -> CVResult:
    """
    Cross-validate ``classifier_factory`` on ``dataset``.

    Parameters
    ----------
    dataset : Dataset
        Labelled records
    classifier_factory : Callable[[], Classifier]
        Fresh classifier per fold
    n_folds : int
        Number of folds
    mode : {"group", "stratified"}
        Fold assignment policy
    fold_col : str
        Fold-id attribute for group mode
    random_state : int
        Seed for stratified assignment
    n_jobs : int
        Folds processed concurrently
    keep_attributes : bool
        Carry test-record attributes into the prediction table

    Returns
    -------
    CVResult
        Merged predictions, aggregate metrics and the fold assignment
    """
    partitioner = FoldPartitioner(n_folds, mode=mode, fold_col=fold_col, random_state=random_state)
    runner = CrossValidationRunner(partitioner, classifier_factory, n_jobs=n_jobs, keep_attributes=keep_attributes)
    return runner.run(dataset)
