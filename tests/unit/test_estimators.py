"""Tests for the classifier registry and estimator configurations."""

import numpy as np
import pandas as pd
import pytest
from imblearn.ensemble import BalancedBaggingClassifier
from imblearn.over_sampling import SMOTE
from sklearn.ensemble import RandomForestClassifier

from variantcv.data import Dataset
from variantcv.exceptions import SchemaError
from variantcv.models import (
    ClassifierFactory,
    ResamplingEnsembleClassifier,
    SpreadSamplingStrategy,
    TreeEnsembleClassifier,
    get_classifier,
)


def test_registry_lookup():
    assert isinstance(get_classifier("hypersmurf"), ResamplingEnsembleClassifier)
    assert isinstance(get_classifier("random_forest"), TreeEnsembleClassifier)
    with pytest.raises(ValueError, match="Unknown classifier"):
        get_classifier("svm")


def test_configure_and_options():
    clf = get_classifier("hypersmurf", num_iterations=2, num_trees=10, distribution_spread=0, percentage=0)
    opts = clf.get_options()
    assert opts["num_iterations"] == 2
    assert opts["percentage"] == 0
    assert opts["random_state"] == 42

    clf.configure(num_trees=4)
    assert clf.get_options()["num_trees"] == 4
    assert "num_trees=4" in clf.describe()

    with pytest.raises(ValueError, match="Unknown option"):
        clf.configure(max_depth=3)


def test_hypersmurf_pipeline_structure():
    clf = get_classifier("hypersmurf", num_iterations=3, num_trees=7, percentage=200.0)
    pipeline = clf.build_estimator(np.array([20, 80]))

    assert isinstance(pipeline.named_steps["sampler"], SMOTE)
    ensemble = pipeline.named_steps["clf"]
    assert isinstance(ensemble, BalancedBaggingClassifier)
    assert ensemble.n_estimators == 3
    assert isinstance(ensemble.estimator, RandomForestClassifier)
    assert ensemble.estimator.n_estimators == 7


def test_hypersmurf_without_oversampling_passes_through():
    clf = get_classifier("hypersmurf", percentage=0.0)
    pipeline = clf.build_estimator(np.array([20, 80]))
    assert pipeline.named_steps["sampler"] == "passthrough"


def test_random_forest_pipeline_structure():
    pipeline = get_classifier("random_forest", num_iterations=10).build_estimator(np.array([5, 5]))
    assert pipeline.named_steps["clf"].n_estimators == 10


def test_spread_sampling_strategy():
    y = np.array([0] * 10 + [1] * 100)
    assert SpreadSamplingStrategy(0)(y) == {0: 10, 1: 100}
    assert SpreadSamplingStrategy(2.0)(y) == {0: 10, 1: 20}
    assert SpreadSamplingStrategy(50)(y) == {0: 10, 1: 100}


@pytest.mark.parametrize("name", ["hypersmurf", "random_forest"])
def test_train_and_predict(stratified_dataset, name):
    clf = get_classifier(name, num_iterations=3, random_state=0)
    model = clf.train(stratified_dataset)
    labels, proba = clf.predict(model, stratified_dataset)

    assert proba.shape == (stratified_dataset.n_records, 2)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0)
    assert set(labels) <= {"neg", "pos"}
    np.testing.assert_array_equal(labels, np.array(["neg", "pos"], dtype=object)[proba.argmax(axis=1)])


def test_predict_handles_class_absent_from_training():
    frame = pd.DataFrame({"x": np.arange(12, dtype=float), "label": ["a"] * 6 + ["b"] * 6})
    frame["label"] = pd.Categorical(frame["label"], categories=["a", "b", "c"])
    dataset = Dataset(frame)

    clf = get_classifier("random_forest", num_iterations=5)
    model = clf.train(dataset)
    _, proba = clf.predict(model, dataset)
    assert proba.shape == (12, 3)
    assert (proba[:, 2] == 0).all()


def test_predict_rejects_feature_mismatch(stratified_dataset):
    clf = get_classifier("random_forest", num_iterations=3)
    model = clf.train(stratified_dataset)
    with pytest.raises(SchemaError, match="Feature mismatch"):
        clf.predict(model, stratified_dataset.drop_attribute("feature_0"))


def test_train_rejects_empty_dataset(stratified_dataset):
    empty = stratified_dataset.take(np.zeros(stratified_dataset.n_records, dtype=bool))
    with pytest.raises(ValueError, match="empty"):
        get_classifier("random_forest").train(empty)


def test_factory_returns_fresh_instances():
    factory = ClassifierFactory("hypersmurf", num_iterations=2)
    a, b = factory(), factory()
    assert a is not b
    assert a.get_options() == b.get_options()
    assert factory.describe().startswith("hypersmurf")


def test_factory_validates_options_upfront():
    with pytest.raises(ValueError):
        ClassifierFactory("random_forest", num_trees=10)
