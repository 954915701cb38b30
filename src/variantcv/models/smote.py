"""Percentage-based SMOTE oversampling that handles small minority classes gracefully."""

from __future__ import annotations

import logging
from typing import Dict, Union

import numpy as np
from imblearn.over_sampling import SMOTE

logger = logging.getLogger(__name__)


def oversampling_targets(class_counts: np.ndarray, percentage: float) -> Dict[int, int]:
    """
    Target size of the minority class after adding ``percentage`` percent synthetic records.

    Parameters
    ----------
    class_counts : np.ndarray
        Records per class index
    percentage : float
        Synthetic records to add, as a percentage of the minority size
        (200 triples the minority class)

    Returns
    -------
    Dict[int, int]
        Class index -> desired count; empty when no oversampling applies
    """
    counts = np.asarray(class_counts)
    present = np.flatnonzero(counts > 0)
    if percentage <= 0 or len(present) < 2:
        return {}

    minority = int(present[np.argmin(counts[present])])
    n_minority = int(counts[minority])
    n_new = int(round(n_minority * percentage / 100.0))
    if n_new < 1:
        return {}
    return {minority: n_minority + n_new}


def make_oversampler(
    class_counts: np.ndarray,
    percentage: float,
    k_max: int = 5,
    random_state: int = 42,
) -> Union[SMOTE, str]:
    """
    Build a SMOTE step for the given training class sizes.

    ``k_neighbors`` is adapted down to ``minority - 1``. When SMOTE is not
    applicable (percentage 0, a single class, or a minority of one record)
    ``"passthrough"`` is returned so the step can sit in an imblearn Pipeline.
    """
    targets = oversampling_targets(class_counts, percentage)
    if not targets:
        logger.debug("No oversampling requested or applicable, passing through")
        return "passthrough"

    minority = next(iter(targets))
    n_minority = int(np.asarray(class_counts)[minority])
    if n_minority <= 1:
        logger.debug(f"Minority class too small ({n_minority}), passing through")
        return "passthrough"

    k = max(1, min(k_max, n_minority - 1))
    logger.debug(f"SMOTE with k={k}: class {minority} {n_minority} -> {targets[minority]} records")
    return SMOTE(sampling_strategy=targets, k_neighbors=k, random_state=random_state)
