"""Tests for confusion aggregation and report statistics."""

import json

import numpy as np
import pytest

from variantcv.evaluation import FoldPredictions, PredictionCollector
from variantcv.metrics import AggregateMetrics, FoldMetrics, MetricsReporter, cohen_kappa, summarize


def _aggregate(*matrices):
    metrics = AggregateMetrics(class_names=["pos", "neg"])
    for i, cm in enumerate(matrices):
        metrics.add(FoldMetrics(fold_index=i, confusion=np.asarray(cm)))
    return metrics


def test_fold_metrics_from_labels():
    fold = FoldMetrics.from_labels(
        0,
        np.array(["pos", "neg", "neg", "pos"], dtype=object),
        np.array(["pos", "neg", "pos", "neg"], dtype=object),
        ["pos", "neg"],
        n_train=12,
    )
    np.testing.assert_array_equal(fold.confusion, [[1, 1], [1, 1]])
    assert fold.n_test == 4
    assert fold.accuracy == pytest.approx(0.5)
    assert fold.to_row()["n_train"] == 12


def test_empty_fold_metrics():
    fold = FoldMetrics.from_labels(3, np.array([]), np.array([]), ["pos", "neg"])
    assert fold.n_test == 0
    assert np.isnan(fold.accuracy)


def test_aggregate_is_sum_of_folds():
    metrics = _aggregate([[2, 1], [0, 7]], [[3, 0], [1, 6]])
    np.testing.assert_array_equal(metrics.confusion, [[5, 1], [1, 13]])
    assert metrics.n_records == 20

    frame = metrics.to_frame()
    assert list(frame["fold"]) == [0, 1]
    assert list(frame["n_correct"]) == [9, 9]


def test_aggregate_does_not_depend_on_fold_order():
    a = _aggregate([[2, 1], [0, 7]], [[3, 0], [1, 6]])
    b = _aggregate([[3, 0], [1, 6]], [[2, 1], [0, 7]])
    np.testing.assert_array_equal(a.confusion, b.confusion)


def test_report_counts_are_consistent():
    report = MetricsReporter().summarize(_aggregate([[2, 1], [0, 7]], [[3, 0], [1, 6]]))

    assert report.total == 20
    assert report.correct == 18
    assert report.incorrect == 2
    assert report.correct + report.incorrect == report.total
    assert report.accuracy == pytest.approx(0.9)
    assert report.error_rate == pytest.approx(0.1)


def test_per_class_details():
    report = summarize(_aggregate([[5, 1], [1, 13]]))
    pos, neg = report.class_details

    assert pos.label == "pos"
    assert pos.support == 6
    assert pos.tp_rate == pytest.approx(5 / 6)
    assert pos.fp_rate == pytest.approx(1 / 14)
    assert pos.precision == pytest.approx(5 / 6)
    assert neg.recall == pytest.approx(13 / 14)
    assert report.weighted.support == 20
    assert report.weighted.recall == pytest.approx(report.accuracy)


def test_precision_with_no_predictions_is_zero():
    report = summarize(_aggregate([[0, 4], [0, 6]]))
    assert report.class_details[0].precision == 0.0
    assert report.class_details[0].f_measure == 0.0


def test_cohen_kappa():
    assert cohen_kappa(np.array([[10, 0], [0, 10]])) == pytest.approx(1.0)
    # observed 0.5, expected 0.5
    assert cohen_kappa(np.array([[5, 5], [5, 5]])) == pytest.approx(0.0)
    assert np.isnan(cohen_kappa(np.zeros((2, 2), dtype=int)))


def test_probability_statistics_from_predictions():
    collector = PredictionCollector(["pos", "neg"])
    collector.append(
        FoldPredictions(
            fold_index=0,
            record_ids=np.array([0, 1, 2, 3]),
            actual=np.array(["pos", "pos", "neg", "neg"], dtype=object),
            predicted=np.array(["pos", "neg", "neg", "neg"], dtype=object),
            probabilities=np.array([[0.9, 0.1], [0.4, 0.6], [0.2, 0.8], [0.3, 0.7]]),
        )
    )
    table = collector.finalize()
    metrics = AggregateMetrics(class_names=["pos", "neg"])
    metrics.add(FoldMetrics.from_labels(0, table.frame["actual"], table.frame["predicted"], ["pos", "neg"]))

    report = summarize(metrics, table)
    assert report.class_details[0].roc_area == pytest.approx(1.0)
    assert report.mean_absolute_error == pytest.approx((0.1 + 0.6 + 0.2 + 0.3) / 4)
    assert report.root_mean_squared_error > report.mean_absolute_error


def test_report_to_dict_is_deterministic():
    metrics = _aggregate([[2, 1], [0, 7]])
    first = json.dumps(summarize(metrics).to_dict(), sort_keys=True)
    assert first == json.dumps(summarize(metrics).to_dict(), sort_keys=True)


def test_report_to_dict_replaces_undefined_values():
    data = summarize(_aggregate([[0, 0], [0, 0]])).to_dict()

    assert data["kappa"] is None
    assert data["class_details"][0]["roc_area"] is None
    json.dumps(data, allow_nan=False)
