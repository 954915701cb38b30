"""Tests for variantcv.data.loaders module."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from variantcv.data import DataFormat, infer_format, load_dataset, load_table
from variantcv.exceptions import LoadError, SchemaError

ARFF_TEXT = """% Mendelian-like variants
@relation mendelian

@attribute conservation numeric
@attribute gc_content numeric
@attribute fold numeric
@attribute class {1,0}

@data
0.91,0.40,0,1
0.12,0.55,0,0
0.33,?,1,0
0.87,0.61,1,1
0.05,0.47,2,0
0.22,0.52,2,0
"""


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def variants_df():
    """Small variant table with a fold column and a string label."""
    np.random.seed(42)
    n_samples = 30
    df = pd.DataFrame(np.random.randn(n_samples, 3), columns=["score_a", "score_b", "score_c"])
    df["fold"] = np.arange(n_samples) % 3
    df["label"] = np.where(np.arange(n_samples) % 5 == 0, "pathogenic", "benign")
    return df


@pytest.fixture
def temp_csv_file(tmp_path, variants_df):
    csv_path = tmp_path / "variants.csv"
    variants_df.to_csv(csv_path, index=False)
    return csv_path


@pytest.fixture
def temp_arff_file(tmp_path):
    arff_path = tmp_path / "mendelian.arff"
    arff_path.write_text(ARFF_TEXT)
    return arff_path


@pytest.fixture
def temp_parquet_file(tmp_path, variants_df):
    pytest.importorskip("pyarrow")
    parquet_path = tmp_path / "variants.parquet"
    variants_df.to_parquet(parquet_path, index=False)
    return parquet_path


@pytest.fixture
def temp_parquet_dataset(tmp_path, variants_df):
    """Directory with chunked parquet files."""
    pytest.importorskip("pyarrow")
    dataset_dir = tmp_path / "variants_dataset"
    dataset_dir.mkdir()
    for i in range(3):
        chunk = variants_df.iloc[i * 10 : (i + 1) * 10]
        chunk.to_parquet(dataset_dir / f"part-{i:03d}.parquet", index=False)
    return dataset_dir


# ============================================================================
# Test infer_format
# ============================================================================


class TestInferFormat:
    """Tests for format inference from paths."""

    def test_infer_csv(self, tmp_path):
        csv_path = tmp_path / "data.csv"
        csv_path.touch()
        assert infer_format(csv_path) == DataFormat.CSV

    def test_infer_arff(self, tmp_path):
        arff_path = tmp_path / "data.ARFF"
        arff_path.touch()
        assert infer_format(arff_path) == DataFormat.ARFF

    def test_infer_directory(self, tmp_path):
        assert infer_format(tmp_path) == DataFormat.PARQUET_DATASET

    def test_infer_unknown(self, tmp_path):
        unknown_path = tmp_path / "data.xyz"
        unknown_path.touch()
        with pytest.raises(ValueError, match="Cannot infer data format"):
            infer_format(unknown_path)


# ============================================================================
# Test load_table / load_dataset
# ============================================================================


class TestLoadTable:
    """Tests for load_table function."""

    def test_load_csv(self, temp_csv_file, variants_df):
        frame, relation = load_table(temp_csv_file)
        assert frame.shape == variants_df.shape
        assert relation == "variants"

    def test_load_arff_relation_name(self, temp_arff_file):
        frame, relation = load_table(temp_arff_file)
        assert relation == "mendelian"
        assert list(frame.columns) == ["conservation", "gc_content", "fold", "class"]


class TestLoadDataset:
    """Tests for load_dataset function."""

    def test_label_defaults_to_last_column(self, temp_csv_file):
        dataset = load_dataset(temp_csv_file)
        assert dataset.label_col == "label"
        assert dataset.class_names == ["benign", "pathogenic"]
        assert dataset.class_counts() == {"benign": 24, "pathogenic": 6}

    def test_record_ids_follow_file_order(self, temp_csv_file):
        dataset = load_dataset(temp_csv_file)
        np.testing.assert_array_equal(dataset.record_ids, np.arange(30))

    def test_explicit_label_and_name(self, temp_csv_file):
        dataset = load_dataset(temp_csv_file, label_col="fold", name="by_fold")
        assert dataset.label_col == "fold"
        assert dataset.name == "by_fold"
        assert dataset.class_names == [0, 1, 2]

    def test_arff_keeps_declared_class_order(self, temp_arff_file):
        dataset = load_dataset(temp_arff_file)
        assert dataset.name == "mendelian"
        assert dataset.class_names == ["1", "0"]
        assert dataset.class_counts() == {"1": 2, "0": 4}

    def test_arff_missing_numeric_is_nan(self, temp_arff_file):
        dataset = load_dataset(temp_arff_file)
        X = dataset.feature_matrix()
        assert np.isnan(X[2, 1])
        assert dataset.attribute("fold").is_numeric

    def test_parquet(self, temp_parquet_file):
        dataset = load_dataset(temp_parquet_file)
        assert dataset.n_records == 30

    def test_parquet_dataset_directory(self, temp_parquet_dataset):
        dataset = load_dataset(temp_parquet_dataset)
        assert dataset.n_records == 30
        assert dataset.name == "variants_dataset"

    def test_rows_with_missing_labels_are_dropped(self, tmp_path, variants_df):
        variants_df.loc[[3, 7], "label"] = np.nan
        path = tmp_path / "gaps.csv"
        variants_df.to_csv(path, index=False)

        dataset = load_dataset(path)
        assert dataset.n_records == 28
        np.testing.assert_array_equal(dataset.record_ids, np.arange(28))

    def test_file_not_found(self, tmp_path):
        with pytest.raises(LoadError, match="not found"):
            load_dataset(tmp_path / "missing.csv")

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "variants.txt"
        path.write_text("a,b\n1,2\n")
        with pytest.raises(LoadError):
            load_dataset(path)

    def test_malformed_arff(self, tmp_path):
        path = tmp_path / "broken.arff"
        path.write_text("@relation broken\n@attribute x numeric\n@data\nnot-a-number\n")
        with pytest.raises(LoadError):
            load_dataset(path)

    def test_missing_label_column(self, temp_csv_file):
        with pytest.raises(SchemaError, match="not found"):
            load_dataset(temp_csv_file, label_col="diagnosis")
