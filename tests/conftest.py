"""Pytest configuration and fixtures."""

import pytest
import numpy as np
import pandas as pd

from variantcv.data import Dataset


def make_grouped_frame(n_records: int = 100, n_folds: int = 10, n_features: int = 5, seed: int = 42) -> pd.DataFrame:
    """Binary records with a pre-assigned ``fold`` column; the label is the last column."""
    rng = np.random.RandomState(seed)
    y = np.array(["neg"] * n_records, dtype=object)
    y[::5] = "pos"

    X = rng.randn(n_records, n_features)
    X[y == "pos"] += 1.5
    frame = pd.DataFrame(X, columns=[f"feature_{i}" for i in range(n_features)])
    frame["fold"] = np.arange(n_records) % n_folds
    frame["label"] = y
    return frame


@pytest.fixture
def grouped_frame():
    """100 records, folds 0..9 with 10 records each, 20 positives."""
    return make_grouped_frame()


@pytest.fixture
def grouped_dataset(grouped_frame):
    return Dataset(grouped_frame, name="grouped")


@pytest.fixture
def stratified_dataset():
    """Imbalanced binary dataset without a fold column (90 neg / 30 pos)."""
    rng = np.random.RandomState(0)
    n_records = 120
    y = np.array(["neg"] * 90 + ["pos"] * 30, dtype=object)
    X = rng.randn(n_records, 4)
    X[y == "pos"] += 2.0
    frame = pd.DataFrame(X, columns=[f"feature_{i}" for i in range(4)])
    frame["label"] = y
    return Dataset(frame, name="stratified")


@pytest.fixture
def temp_outdir(tmp_path):
    """Provide temporary output directory."""
    outdir = tmp_path / "derived"
    outdir.mkdir()
    return outdir
