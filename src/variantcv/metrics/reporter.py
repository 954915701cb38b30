"""Cross-validation summary statistics."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from sklearn.metrics import average_precision_score, roc_auc_score

from variantcv.evaluation.predictions import PredictionTable
from variantcv.metrics.confusion import AggregateMetrics

logger = logging.getLogger(__name__)


@dataclass
class ClassDetails:
    """One-vs-rest statistics of a single class."""

    label: str
    tp_rate: float
    fp_rate: float
    precision: float
    recall: float
    f_measure: float
    mcc: float
    roc_area: float = float("nan")
    prc_area: float = float("nan")
    support: int = 0


@dataclass
class Report:
    """Summary of one full cross-validation run."""

    class_names: List[str]
    n_folds: int
    total: int
    correct: int
    accuracy: float
    kappa: float
    confusion: np.ndarray
    class_details: List[ClassDetails] = field(default_factory=list)
    weighted: Optional[ClassDetails] = None
    mean_absolute_error: float = float("nan")
    root_mean_squared_error: float = float("nan")

    @property
    def incorrect(self) -> int:
        return self.total - self.correct

    @property
    def error_rate(self) -> float:
        if self.total == 0:
            return float("nan")
        return self.incorrect / self.total

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready summary; undefined statistics become None."""
        return _nan_to_none({
            "class_names": list(self.class_names),
            "n_folds": self.n_folds,
            "total": self.total,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "accuracy": self.accuracy,
            "error_rate": self.error_rate,
            "kappa": self.kappa,
            "mean_absolute_error": self.mean_absolute_error,
            "root_mean_squared_error": self.root_mean_squared_error,
            "confusion": self.confusion.tolist(),
            "class_details": [asdict(d) for d in self.class_details],
            "weighted": asdict(self.weighted) if self.weighted is not None else None,
        })


def _nan_to_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _nan_to_none(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_nan_to_none(v) for v in value]
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def _ratio(num: float, den: float) -> float:
    return float(num) / float(den) if den else 0.0


def _class_details(confusion: np.ndarray, index: int, label: str) -> ClassDetails:
    total = confusion.sum()
    tp = confusion[index, index]
    fn = confusion[index, :].sum() - tp
    fp = confusion[:, index].sum() - tp
    tn = total - tp - fn - fp

    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)
    denom = np.sqrt(float(tp + fp) * float(tp + fn) * float(tn + fp) * float(tn + fn))
    return ClassDetails(
        label=label,
        tp_rate=recall,
        fp_rate=_ratio(fp, fp + tn),
        precision=precision,
        recall=recall,
        f_measure=_ratio(2 * precision * recall, precision + recall),
        mcc=_ratio(float(tp) * tn - float(fp) * fn, denom),
        support=int(tp + fn),
    )


def cohen_kappa(confusion: np.ndarray) -> float:
    """Cohen's kappa from a confusion matrix."""
    total = confusion.sum()
    if total == 0:
        return float("nan")
    observed = np.trace(confusion) / total
    expected = float((confusion.sum(axis=0) * confusion.sum(axis=1)).sum()) / total**2
    if expected == 1.0:
        return 1.0 if observed == 1.0 else 0.0
    return float((observed - expected) / (1.0 - expected))


def _score_or_nan(scorer, y_true: np.ndarray, scores: np.ndarray) -> float:
    # ranking metrics are undefined when only one class is present
    if len(np.unique(y_true)) < 2:
        return float("nan")
    return float(scorer(y_true, scores))


class MetricsReporter:
    """
    Summarise AggregateMetrics into a Report.

    Every count-based statistic is derived from the summed confusion matrix,
    never from averaged per-fold rates, so unequal fold sizes do not bias it.
    Probability-based statistics (ROC/PRC area, MAE, RMSE) are pooled over the
    merged PredictionTable when one is supplied.
    """

    def summarize(self, metrics: AggregateMetrics, predictions: Optional[PredictionTable] = None) -> Report:
        confusion = metrics.confusion
        labels = [str(c) for c in metrics.class_names]
        total = int(confusion.sum())
        correct = int(np.trace(confusion))

        details = [_class_details(confusion, i, label) for i, label in enumerate(labels)]

        mae = rmse = float("nan")
        if predictions is not None and predictions.n_rows:
            proba = predictions.probabilities()
            actual = predictions.frame["actual"].to_numpy()
            truth = np.column_stack([actual == cls for cls in metrics.class_names]).astype(float)
            for i, detail in enumerate(details):
                detail.roc_area = _score_or_nan(roc_auc_score, truth[:, i], proba[:, i])
                detail.prc_area = _score_or_nan(average_precision_score, truth[:, i], proba[:, i])
            mae = float(np.abs(proba - truth).mean())
            rmse = float(np.sqrt(((proba - truth) ** 2).mean()))

        report = Report(
            class_names=labels,
            n_folds=metrics.n_folds,
            total=total,
            correct=correct,
            accuracy=_ratio(correct, total) if total else float("nan"),
            kappa=cohen_kappa(confusion),
            confusion=confusion,
            class_details=details,
            weighted=_weighted(details),
            mean_absolute_error=mae,
            root_mean_squared_error=rmse,
        )
        logger.debug(f"Summarized {report.n_folds} folds: accuracy={report.accuracy:.4f}")
        return report


def _weighted(details: List[ClassDetails]) -> ClassDetails:
    """Support-weighted average of per-class statistics."""
    weights = np.array([d.support for d in details], dtype=float)
    total = weights.sum()

    def avg(name: str) -> float:
        values = np.array([getattr(d, name) for d in details], dtype=float)
        if total == 0:
            return 0.0
        mask = ~np.isnan(values)
        if not mask.any():
            return float("nan")
        return float(np.average(values[mask], weights=weights[mask])) if weights[mask].sum() else float("nan")

    return ClassDetails(
        label="Weighted Avg.",
        tp_rate=avg("tp_rate"),
        fp_rate=avg("fp_rate"),
        precision=avg("precision"),
        recall=avg("recall"),
        f_measure=avg("f_measure"),
        mcc=avg("mcc"),
        roc_area=avg("roc_area"),
        prc_area=avg("prc_area"),
        support=int(total),
    )


def summarize(metrics: AggregateMetrics, predictions: Optional[PredictionTable] = None) -> Report:
    """Functional form of :meth:`MetricsReporter.summarize`."""
    return MetricsReporter().summarize(metrics, predictions)
