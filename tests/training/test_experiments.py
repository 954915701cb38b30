"""Tests for the dataset and synthetic experiment entry points."""

import json

import pandas as pd
import pytest

from variantcv.config import ClassifierConfig, CVConfig, SyntheticConfig
from variantcv.exceptions import LoadError
from variantcv.training import evaluate_dataset, make_factory, run_dataset_experiments, run_synthetic_experiment


@pytest.fixture
def grouped_csv(tmp_path, grouped_frame):
    path = tmp_path / "variants.csv"
    grouped_frame.to_csv(path, index=False)
    return path


def _small_forest():
    return [ClassifierConfig("random_forest", {"num_iterations": 5})]


def test_make_factory_threads_seed():
    factory = make_factory(ClassifierConfig("random_forest", {"num_iterations": 5}), random_state=11)
    assert factory().get_options()["random_state"] == 11

    explicit = make_factory(ClassifierConfig("random_forest", {"random_state": 3}), random_state=11)
    assert explicit().get_options()["random_state"] == 3


def test_evaluate_dataset_report(grouped_dataset):
    result = evaluate_dataset(
        grouped_dataset,
        ClassifierConfig("hypersmurf", {"num_iterations": 2, "num_trees": 5, "percentage": 0.0}),
        n_folds=10,
    )
    assert result.report.total == 100
    assert result.report.n_folds == 10
    assert result.dataset_name == "grouped"
    assert result.classifier.startswith("hypersmurf")

    text = result.render()
    assert "Classifier: hypersmurf" in text
    assert "Dataset: grouped" in text
    assert "Seed: 42" in text
    assert "=== 10-fold Cross-validation ===" in text


def test_run_dataset_experiments_saves_artifacts(grouped_csv, temp_outdir):
    config = CVConfig(data_paths=[grouped_csv], classifiers=_small_forest(), outdir=temp_outdir)
    results = run_dataset_experiments(config)

    assert len(results) == 1
    run_dir = temp_outdir / "variants__random_forest"
    assert (temp_outdir / "config.json").exists()
    assert (run_dir / "predictions.csv").exists()
    assert (run_dir / "metrics_folds.csv").exists()

    predictions = pd.read_csv(run_dir / "predictions.csv")
    assert len(predictions) == 100
    assert {"record_id", "fold", "actual", "predicted", "prob_neg", "prob_pos", "correct"} <= set(predictions.columns)

    folds = pd.read_csv(run_dir / "metrics_folds.csv")
    assert folds["n_test"].sum() == 100

    with open(run_dir / "report.json") as f:
        report = json.load(f)
    assert report["total"] == 100
    assert report["setup"]["seed"] == 42
    assert report["correct"] == int(predictions["correct"].sum())


def test_run_dataset_experiments_every_pair(grouped_csv):
    config = CVConfig(
        data_paths=[grouped_csv, grouped_csv],
        classifiers=[
            ClassifierConfig("random_forest", {"num_iterations": 3}),
            ClassifierConfig("hypersmurf", {"num_iterations": 1, "num_trees": 3}),
        ],
    )
    results = run_dataset_experiments(config)
    assert [r.classifier_name for r in results] == ["random_forest", "hypersmurf"] * 2


def test_run_dataset_experiments_missing_file(tmp_path):
    config = CVConfig(data_paths=[tmp_path / "missing.arff"], classifiers=_small_forest())
    with pytest.raises(LoadError):
        run_dataset_experiments(config)


def test_run_dataset_experiments_requires_paths():
    with pytest.raises(ValueError):
        run_dataset_experiments(CVConfig(classifiers=_small_forest()))


def test_run_synthetic_experiment():
    config = SyntheticConfig(
        n_examples=400,
        n_attributes=6,
        n_minority=20,
        n_folds=3,
        classifiers=[
            ClassifierConfig("hypersmurf", {"num_iterations": 2, "num_trees": 3, "percentage": 200.0}),
            ClassifierConfig("random_forest", {"num_iterations": 5}),
        ],
    )
    results = run_synthetic_experiment(config)

    assert [r.classifier_name for r in results] == ["hypersmurf", "random_forest"]
    for result in results:
        assert result.report.total == 220
        assert result.report.n_folds == 3
        assert result.cv.predictions.n_rows == 220
