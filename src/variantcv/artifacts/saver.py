"""Artifact saving utilities."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from variantcv.metrics.reporter import Report

if TYPE_CHECKING:
    from variantcv.training.cross_validation import CVResult

logger = logging.getLogger(__name__)


def run_dirname(dataset_name: str, classifier_name: str) -> str:
    """Filesystem-safe directory name for one dataset / classifier run."""
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "_", dataset_name).strip("_") or "dataset"
    return f"{stem}__{classifier_name}"


def save_cv_results(
    result: CVResult,
    report: Report,
    outdir: Path,
    setup: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Save cross-validation results.

    Writes ``predictions.csv`` (merged held-out predictions in fold order),
    ``metrics_folds.csv`` (per-fold counts and accuracy) and ``report.json``
    (summary statistics, plus ``setup`` when given).

    Parameters
    ----------
    result : CVResult
        Output of CrossValidationRunner.run
    report : Report
        Summary of ``result``
    outdir : Path
        Output directory (created if needed)
    setup : Dict[str, Any], optional
        Classifier / dataset / seed description stored with the report
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Saving results to {outdir}")

    result.predictions.to_csv(outdir / "predictions.csv")
    result.metrics.to_frame().to_csv(outdir / "metrics_folds.csv", index=False)

    payload = report.to_dict()
    if setup:
        payload = {"setup": setup, **payload}
    with open(outdir / "report.json", "w") as f:
        json.dump(payload, f, indent=2, allow_nan=False, default=_json_default)

    logger.info("Results saved")


def _json_default(value: Any) -> Any:
    # numpy scalars and paths
    if hasattr(value, "item"):
        return value.item()
    return str(value)
