"""Experiment entry points: dataset files and the synthetic scenario."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from variantcv.artifacts import run_dirname, save_cv_results
from variantcv.config import ClassifierConfig, CVConfig, SyntheticConfig
from variantcv.data import Dataset, count_classes, generate_synthetic_dataset, imbalance, load_dataset
from variantcv.metrics import MetricsReporter, Report, render_report
from variantcv.models import ClassifierFactory
from variantcv.splitting import FoldMode
from variantcv.training.cross_validation import CVResult, run_cross_validation

logger = logging.getLogger(__name__)


@dataclass
class ExperimentResult:
    """One classifier cross-validated on one dataset."""

    dataset_name: str
    classifier_name: str
    classifier: str
    random_state: int
    cv: CVResult
    report: Report

    @property
    def accuracy(self) -> float:
        return self.report.accuracy

    def setup(self) -> Dict[str, Any]:
        return {
            "classifier": self.classifier,
            "dataset": self.dataset_name,
            "folds": self.report.n_folds,
            "seed": self.random_state,
        }

    def render(self) -> str:
        """Human-readable report with the run setup."""
        return render_report(
            self.report,
            classifier=self.classifier,
            dataset=self.dataset_name,
            seed=self.random_state,
        )


def make_factory(classifier: ClassifierConfig, random_state: int) -> ClassifierFactory:
    """Classifier factory seeded with ``random_state`` unless the options set their own seed."""
    options = dict(classifier.options)
    options.setdefault("random_state", random_state)
    return ClassifierFactory(classifier.name, **options)


def evaluate_dataset(
    dataset: Dataset,
    classifier: ClassifierConfig,
    n_folds: int,
    fold_mode: FoldMode = "group",
    fold_col: str = "fold",
    random_state: int = 42,
    n_jobs: int = 1,
    keep_attributes: bool = False,
    outdir: Optional[Path] = None,
) -> ExperimentResult:
    """
    Cross-validate one classifier on one dataset and summarise the run.

    Parameters
    ----------
    dataset : Dataset
        Labelled records
    classifier : ClassifierConfig
        Registered classifier name and options
    n_folds : int
        Number of folds
    fold_mode : {"group", "stratified"}
        Fold assignment policy
    fold_col : str
        Fold-id attribute for group mode
    random_state : int
        Seed for fold assignment and classifier randomness
    n_jobs : int
        Folds processed concurrently
    keep_attributes : bool
        Carry test-record attributes into the prediction table
    outdir : Path, optional
        Save artifacts into ``outdir/<dataset>__<classifier>`` when given

    Returns
    -------
    ExperimentResult
        Merged predictions, metrics and report
    """
    factory = make_factory(classifier, random_state)
    description = factory.describe()
    logger.info(f"Evaluating {description} on '{dataset.name}'")

    cv = run_cross_validation(
        dataset,
        factory,
        n_folds=n_folds,
        mode=fold_mode,
        fold_col=fold_col,
        random_state=random_state,
        n_jobs=n_jobs,
        keep_attributes=keep_attributes,
    )
    report = MetricsReporter().summarize(cv.metrics, cv.predictions)
    experiment = ExperimentResult(
        dataset_name=dataset.name,
        classifier_name=classifier.name,
        classifier=description,
        random_state=random_state,
        cv=cv,
        report=report,
    )
    logger.info(f"  Accuracy: {report.accuracy:.4f} ({report.correct}/{report.total})")

    if outdir is not None:
        save_cv_results(cv, report, Path(outdir) / run_dirname(dataset.name, classifier.name), setup=experiment.setup())
    return experiment


def _prepare_outdir(outdir: Optional[Path], config: Any) -> None:
    if outdir is None:
        return
    outdir.mkdir(parents=True, exist_ok=True)
    config.save(outdir / "config.json")


def run_dataset_experiments(config: CVConfig) -> List[ExperimentResult]:
    """
    Cross-validate every configured classifier on every configured dataset.

    Datasets are loaded and evaluated one after another; a dataset that fails
    to load or validate aborts the whole run.

    Parameters
    ----------
    config : CVConfig
        Experiment configuration

    Returns
    -------
    List[ExperimentResult]
        One result per dataset / classifier pair, in configuration order
    """
    if not config.data_paths:
        raise ValueError("No data paths configured")

    logger.info("Starting dataset cross-validation")
    logger.info(f"  Datasets: {[str(p) for p in config.data_paths]}")
    logger.info(f"  Folds: {config.n_folds} ({config.fold_mode})")
    logger.info(f"  Seed: {config.random_state}")
    _prepare_outdir(config.outdir, config)

    results = []
    for path in config.data_paths:
        dataset = load_dataset(path, label_col=config.label_col)
        for classifier in config.classifiers:
            results.append(
                evaluate_dataset(
                    dataset,
                    classifier,
                    n_folds=config.n_folds,
                    fold_mode=config.fold_mode,
                    fold_col=config.fold_col,
                    random_state=config.random_state,
                    n_jobs=config.n_jobs,
                    keep_attributes=config.keep_attributes,
                    outdir=config.outdir,
                )
            )
    return results


def run_synthetic_experiment(config: SyntheticConfig) -> List[ExperimentResult]:
    """
    Evaluate the configured classifiers on a synthetic imbalanced dataset.

    A balanced dataset is generated, reduced to ``n_minority`` minority
    records with a seeded shuffle, and cross-validated with stratified folds.

    Parameters
    ----------
    config : SyntheticConfig
        Experiment configuration

    Returns
    -------
    List[ExperimentResult]
        One result per classifier, in configuration order
    """
    logger.info("Starting synthetic imbalanced-data experiment")
    _prepare_outdir(config.outdir, config)

    balanced = generate_synthetic_dataset(
        n_examples=config.n_examples,
        n_attributes=config.n_attributes,
        random_state=config.random_state,
    )
    dataset = imbalance(balanced, config.n_minority, random_state=config.random_state)
    logger.info(f"Class counts used for cross-validation: {count_classes(dataset)}")

    return [
        evaluate_dataset(
            dataset,
            classifier,
            n_folds=config.n_folds,
            fold_mode="stratified",
            random_state=config.random_state,
            n_jobs=config.n_jobs,
            outdir=config.outdir,
        )
        for classifier in config.classifiers
    ]
