"""Plain-text rendering of cross-validation reports."""

from __future__ import annotations

import string
from typing import List, Optional

from variantcv.metrics.reporter import ClassDetails, Report

DETAIL_FIELDS = [
    ("TP Rate", "tp_rate"),
    ("FP Rate", "fp_rate"),
    ("Precision", "precision"),
    ("Recall", "recall"),
    ("F-Measure", "f_measure"),
    ("MCC", "mcc"),
    ("ROC Area", "roc_area"),
    ("PRC Area", "prc_area"),
]


def _fmt(value: float) -> str:
    return "?" if value != value else f"{value:.3f}"


def _pct(value: float) -> str:
    return "?" if value != value else f"{100 * value:.4f} %"


def _detail_row(detail: ClassDetails, prefix: str = "", show_label: bool = True) -> str:
    cells = [f"{_fmt(getattr(detail, attr)):>{max(9, len(title))}}" for title, attr in DETAIL_FIELDS]
    row = f"{prefix:<14}" + " ".join(cells)
    return f"{row}  {detail.label}" if show_label else row


def _column_letters(n: int) -> List[str]:
    letters = string.ascii_lowercase
    out = []
    for i in range(n):
        name = ""
        i += 1
        while i:
            i, rem = divmod(i - 1, 26)
            name = letters[rem] + name
        out.append(name)
    return out


def render_confusion(report: Report) -> str:
    letters = _column_letters(len(report.class_names))
    width = max([len(str(int(v))) for v in report.confusion.flatten()] + [len(x) for x in letters] + [1]) + 1
    lines = ["".join(f"{x:>{width}}" for x in letters) + "   <-- classified as"]
    for letter, label, row in zip(letters, report.class_names, report.confusion):
        lines.append("".join(f"{int(v):>{width}}" for v in row) + f" | {letter} = {label}")
    return "\n".join(lines)


def render_report(
    report: Report,
    classifier: Optional[str] = None,
    dataset: Optional[str] = None,
    seed: Optional[int] = None,
) -> str:
    """
    Render a Report as human-readable text.

    Sections: setup (when any setup value is given), cross-validation summary,
    per-class details and confusion matrix.
    """
    lines: List[str] = []
    if classifier is not None or dataset is not None or seed is not None:
        lines += ["=== Setup ==="]
        if classifier is not None:
            lines.append(f"Classifier: {classifier}")
        if dataset is not None:
            lines.append(f"Dataset: {dataset}")
        lines.append(f"Folds: {report.n_folds}")
        if seed is not None:
            lines.append(f"Seed: {seed}")
        lines.append("")

    lines += [
        f"=== {report.n_folds}-fold Cross-validation ===",
        "",
        f"{'Correctly Classified Instances':<40}{report.correct:>8}    {_pct(report.accuracy)}",
        f"{'Incorrectly Classified Instances':<40}{report.incorrect:>8}    {_pct(report.error_rate)}",
        f"{'Kappa statistic':<40}{_fmt(report.kappa):>8}",
        f"{'Mean absolute error':<40}{_fmt(report.mean_absolute_error):>8}",
        f"{'Root mean squared error':<40}{_fmt(report.root_mean_squared_error):>8}",
        f"{'Total Number of Instances':<40}{report.total:>8}",
        "",
        "=== Details ===",
        "",
        " " * 14 + " ".join(f"{title:>{max(9, len(title))}}" for title, _ in DETAIL_FIELDS) + "  Class",
    ]
    lines += [_detail_row(d) for d in report.class_details]
    if report.weighted is not None:
        lines.append(_detail_row(report.weighted, prefix="Weighted Avg.", show_label=False))
    lines += ["", "=== Confusion Matrix ===", "", render_confusion(report)]
    return "\n".join(lines)
