"""Fold assignment and train/test partitioning for cross-validation."""

from __future__ import annotations

import logging
from typing import Iterator, Literal, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold

from variantcv.data.dataset import Dataset
from variantcv.exceptions import HarnessInvariantError, SchemaError

logger = logging.getLogger(__name__)

FoldMode = Literal["group", "stratified"]
FOLD_MODES = ("group", "stratified")


def group_fold_ids(dataset: Dataset, fold_col: str, n_folds: int) -> np.ndarray:
    """
    Read pre-assigned fold ids from a dataset attribute.

    Raises
    ------
    SchemaError
        If the attribute is absent, has missing or non-integer values, or
        holds ids outside ``0..n_folds-1``.
    """
    attribute = dataset.attribute(fold_col)
    series = dataset.frame[attribute.name]
    if attribute.kind != "numeric":
        series = series.astype(object).where(series.notna(), None)
    numeric = pd.to_numeric(series, errors="coerce")

    bad = numeric.isna()
    if bad.any():
        examples = sorted(map(str, dataset.frame.loc[bad, attribute.name].unique()))[:5]
        raise SchemaError(
            f"Fold attribute '{attribute.name}' must hold integer fold ids; "
            f"found {int(bad.sum())} missing or non-numeric values (e.g. {examples})"
        )

    values = numeric.to_numpy(dtype=float)
    if not np.all(np.mod(values, 1) == 0):
        raise SchemaError(f"Fold attribute '{attribute.name}' has non-integer values.")

    ids = values.astype(int)
    out_of_range = sorted(set(ids[(ids < 0) | (ids >= n_folds)].tolist()))
    if out_of_range:
        raise SchemaError(
            f"Fold attribute '{attribute.name}' has ids outside 0..{n_folds - 1}: {out_of_range[:10]}"
        )
    return ids


def stratified_fold_ids(dataset: Dataset, n_folds: int, random_state: int) -> np.ndarray:
    """
    Assign class-stratified fold ids with a seeded shuffle.

    Fold k is the k-th test split of ``StratifiedKFold(shuffle=True)``.
    """
    if n_folds > dataset.n_records:
        raise ValueError(f"Cannot split {dataset.n_records} records into {n_folds} folds.")

    ids = np.full(dataset.n_records, -1, dtype=int)
    splitter = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=random_state)
    X_dummy = np.zeros((dataset.n_records, 1), dtype=np.float32)
    for fold_idx, (_, te_idx) in enumerate(splitter.split(X_dummy, dataset.label_codes())):
        ids[te_idx] = fold_idx
    return ids


class FoldPartitioner:
    """
    Split a dataset into (train, test) pairs, one per fold.

    Parameters
    ----------
    n_folds : int
        Number of folds K
    mode : {"group", "stratified"}
        ``group`` reads fold ids from ``fold_col``; ``stratified`` assigns them
        with a seeded stratified k-fold
    fold_col : str
        Name of the fold-id attribute (group mode)
    random_state : int
        Seed for the stratified shuffle
    """

    def __init__(
        self,
        n_folds: int,
        mode: FoldMode = "group",
        fold_col: str = "fold",
        random_state: int = 42,
    ):
        if mode not in FOLD_MODES:
            raise ValueError(f"Unsupported fold mode: {mode}. Expected one of {FOLD_MODES}")
        if n_folds < 1:
            raise ValueError(f"n_folds must be >= 1, got {n_folds}")
        if mode == "stratified" and n_folds < 2:
            raise ValueError("Stratified cross-validation needs at least 2 folds.")

        self.n_folds = n_folds
        self.mode = mode
        self.fold_col = fold_col
        self.random_state = random_state

    def __repr__(self) -> str:
        return (
            f"FoldPartitioner(n_folds={self.n_folds}, mode={self.mode!r}, "
            f"fold_col={self.fold_col!r}, random_state={self.random_state})"
        )

    def assign(self, dataset: Dataset) -> np.ndarray:
        """Fold id per record, in the dataset's row order."""
        if self.mode == "group":
            return group_fold_ids(dataset, self.fold_col, self.n_folds)
        return stratified_fold_ids(dataset, self.n_folds, self.random_state)

    def for_fold(
        self,
        dataset: Dataset,
        fold_index: int,
        fold_ids: Optional[np.ndarray] = None,
    ) -> Tuple[Dataset, Dataset]:
        """
        Return the (train, test) pair for one fold.

        Test holds the records whose fold id equals ``fold_index``; train holds
        all others. In group mode the fold attribute is removed from both so a
        classifier never sees it as a feature.
        """
        if not 0 <= fold_index < self.n_folds:
            raise ValueError(f"fold_index must be in 0..{self.n_folds - 1}, got {fold_index}")
        if fold_ids is None:
            fold_ids = self.assign(dataset)

        test_mask = np.asarray(fold_ids) == fold_index
        train = dataset.take(~test_mask)
        test = dataset.take(test_mask)
        if self.mode == "group":
            train = train.drop_attribute(self.fold_col)
            test = test.drop_attribute(self.fold_col)
        return train, test

    def split(self, dataset: Dataset) -> Iterator[Tuple[int, Dataset, Dataset]]:
        """Yield ``(fold_index, train, test)`` for every fold."""
        fold_ids = self.assign(dataset)
        for fold_index in range(self.n_folds):
            train, test = self.for_fold(dataset, fold_index, fold_ids)
            yield fold_index, train, test


def for_fold(
    dataset: Dataset,
    fold_index: int,
    n_folds: int,
    mode: FoldMode = "group",
    fold_col: str = "fold",
    random_state: int = 42,
) -> Tuple[Dataset, Dataset]:
    """Functional form of :meth:`FoldPartitioner.for_fold`."""
    partitioner = FoldPartitioner(n_folds, mode=mode, fold_col=fold_col, random_state=random_state)
    return partitioner.for_fold(dataset, fold_index)


def assert_disjoint(train: Dataset, test: Dataset, context: str) -> None:
    """Raise if any record appears in both train and test sets."""
    overlap = sorted(set(train.record_ids.tolist()).intersection(test.record_ids.tolist()))
    if overlap:
        raise HarnessInvariantError(f"Train/test overlap detected ({context}): {overlap[:10]}")


def fold_summary(dataset: Dataset, fold_ids: np.ndarray) -> pd.DataFrame:
    """Aggregate record counts per fold and class for inspection."""
    df = pd.DataFrame({"fold": np.asarray(fold_ids), "label": dataset.labels().to_numpy()})
    return df.groupby(["fold", "label"]).size().reset_index(name="count")
