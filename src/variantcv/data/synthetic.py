"""Synthetic imbalanced datasets for evaluating resampling ensembles."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd
from sklearn.datasets import make_classification

from variantcv.data.dataset import Dataset
from variantcv.exceptions import SchemaError

logger = logging.getLogger(__name__)


def generate_synthetic_dataset(
    n_examples: int = 10000,
    n_attributes: int = 20,
    random_state: int = 42,
    name: str = "SyntheticData",
) -> Dataset:
    """
    Generate a balanced binary dataset of numeric attributes.

    Parameters
    ----------
    n_examples : int
        Number of records to generate (before any imbalancing)
    n_attributes : int
        Number of numeric attributes (at least 2)
    random_state : int
        Random seed
    name : str
        Relation name

    Returns
    -------
    Dataset
        Attributes ``a0..a{n-1}`` and label ``class`` with classes ``c0``, ``c1``
    """
    if n_examples < 2:
        raise ValueError(f"n_examples must be >= 2, got {n_examples}")
    if n_attributes < 2:
        raise ValueError(f"n_attributes must be >= 2, got {n_attributes}")

    X, y = make_classification(
        n_samples=n_examples,
        n_features=n_attributes,
        n_informative=max(2, n_attributes // 2),
        n_redundant=0,
        n_classes=2,
        flip_y=0.0,
        random_state=random_state,
    )
    frame = pd.DataFrame(X, columns=[f"a{i}" for i in range(n_attributes)])
    frame["class"] = pd.Categorical.from_codes(y, categories=["c0", "c1"])
    return Dataset(frame, label_col="class", name=name)


def count_classes(dataset: Dataset) -> Dict[object, int]:
    """Class sizes in class order."""
    return dataset.class_counts()


def imbalance(
    dataset: Dataset,
    n_minority: int,
    random_state: int = 42,
    minority_class: Optional[object] = None,
    rng: Optional[np.random.RandomState] = None,
) -> Dataset:
    """
    Keep only ``n_minority`` records of the minority class.

    Records are visited in a seeded random order; the first ``n_minority``
    records of the minority class are kept, later ones dropped, and every
    record of the other classes is kept. The result is shuffled again with
    the same generator so the two classes are interleaved.

    Parameters
    ----------
    dataset : Dataset
        Labelled input dataset
    n_minority : int
        Number of minority records to keep
    random_state : int
        Seed for the shuffles (ignored when ``rng`` is given)
    minority_class : optional
        Class to constrain; defaults to the first class
    rng : np.random.RandomState, optional
        Generator to draw both shuffles from

    Returns
    -------
    Dataset
        New dataset with ``min(n_minority, available) + count(others)`` records
        and record ids renumbered 0..n-1
    """
    if n_minority < 0:
        raise ValueError(f"n_minority must be >= 0, got {n_minority}")

    if minority_class is None:
        if not dataset.class_names:
            raise SchemaError("Dataset has no label classes to imbalance.")
        minority_class = dataset.class_names[0]
    elif minority_class not in dataset.class_names:
        raise SchemaError(f"Class '{minority_class}' not in {dataset.class_names}")

    rng = rng if rng is not None else np.random.RandomState(random_state)
    logger.info(f"Before imbalancing: {list(count_classes(dataset).values())}")

    order = rng.permutation(dataset.n_records)
    labels = dataset.labels().to_numpy()[order]
    is_minority = labels == minority_class
    keep = ~is_minority | (np.cumsum(is_minority) <= n_minority)

    selected = order[keep]
    selected = selected[rng.permutation(len(selected))]

    result = Dataset(
        dataset.frame.iloc[selected].reset_index(drop=True),
        label_col=dataset.label_col,
        name=dataset.name,
    )
    logger.info(f"After imbalancing: {list(count_classes(result).values())}")
    return result
