"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from variantcv import __version__
from variantcv.config import ClassifierConfig, CVConfig, SyntheticConfig
from variantcv.exceptions import ClassifierTrainingError, VariantCVError
from variantcv.training import ExperimentResult, run_dataset_experiments, run_synthetic_experiment

app = typer.Typer(
    name="variantcv",
    help="Cross-validation harness for imbalanced genomic variant classification.",
    add_completion=False,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# hyperSMURF forests per ensemble in the Mendelian setup
MENDELIAN_ITERATIONS = 2


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"variantcv {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """variantcv: cross-validation of resampling ensembles on imbalanced data."""
    pass


def _classifier_options(
    classifier: str,
    num_iterations: Optional[int],
    num_trees: int,
    distribution_spread: float,
    percentage: float,
) -> Dict[str, Any]:
    if classifier == "random_forest":
        # unset: the forest keeps its own default tree count
        return {} if num_iterations is None else {"num_iterations": num_iterations}
    return {
        "num_iterations": MENDELIAN_ITERATIONS if num_iterations is None else num_iterations,
        "num_trees": num_trees,
        "distribution_spread": distribution_spread,
        "percentage": percentage,
    }


def _fail(message: str, verbose: bool) -> None:
    typer.secho(f"\n✗ {message}", fg=typer.colors.RED, err=True)
    if verbose:
        traceback.print_exc()
    raise typer.Exit(code=1)


def _echo_results(results: List[ExperimentResult]) -> None:
    for result in results:
        typer.echo("")
        typer.echo(result.render())


@app.command()
def evaluate(
    data: Optional[List[Path]] = typer.Argument(
        None,
        help="One or more dataset files (.csv, .arff, .parquet) or parquet dataset directories.",
    ),
    folds: int = typer.Option(10, "--folds", help="Number of cross-validation folds"),
    fold_col: str = typer.Option("fold", "--fold-col", help="Attribute holding pre-assigned fold ids (group mode)"),
    mode: str = typer.Option("group", "--mode", help="Fold assignment: group or stratified"),
    classifier: str = typer.Option("hypersmurf", "--classifier", help="Classifier: hypersmurf or random_forest"),
    num_iterations: Optional[int] = typer.Option(
        None,
        "--num-iterations",
        help=f"Ensemble members: forests for hypersmurf (default {MENDELIAN_ITERATIONS}), trees for random_forest (default 100)",
    ),
    num_trees: int = typer.Option(10, "--num-trees", help="Trees per forest (hypersmurf)"),
    distribution_spread: float = typer.Option(
        0.0,
        "--distribution-spread",
        help="Max majority:minority ratio inside each bag (0 = no cap)",
    ),
    percentage: float = typer.Option(0.0, "--percentage", help="SMOTE oversampling percentage of the minority class"),
    seed: int = typer.Option(42, "--seed", help="Random seed"),
    label_col: Optional[str] = typer.Option(None, "--label-col", help="Label column (default: last attribute)"),
    n_jobs: int = typer.Option(1, "--n-jobs", help="Folds processed in parallel"),
    keep_attributes: bool = typer.Option(
        False,
        "--keep-attributes",
        help="Include test-record attributes in predictions.csv",
    ),
    outdir: Optional[Path] = typer.Option(None, "--outdir", help="Output directory for artifacts"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML config; DATA and --outdir given on the command line override it",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
):
    """
    Cross-validate a classifier on one or more datasets.

    In group mode (default) each record's fold is read from the --fold-col
    attribute, which is removed before training. Stratified mode assigns
    folds with a seeded stratified split.

    Examples:
        # Mendelian variants, pre-assigned folds, hyperSMURF 2 x 10 trees
        variantcv evaluate mendelian.arff --folds 10

        # Stratified folds, 200% SMOTE, saving artifacts
        variantcv evaluate variants.csv --mode stratified --folds 5 --percentage 200 --outdir derived
    """
    if verbose:
        logging.getLogger("variantcv").setLevel(logging.DEBUG)

    try:
        if config_file is not None:
            config = CVConfig.from_yaml(config_file)
            if data:
                config.data_paths = [Path(p) for p in data]
            if outdir is not None:
                config.outdir = Path(outdir)
        else:
            options = _classifier_options(classifier, num_iterations, num_trees, distribution_spread, percentage)
            config = CVConfig(
                data_paths=list(data or []),
                label_col=label_col,
                fold_col=fold_col,
                fold_mode=mode.lower(),
                n_folds=folds,
                random_state=seed,
                n_jobs=n_jobs,
                keep_attributes=keep_attributes,
                classifiers=[ClassifierConfig(classifier, options)],
                outdir=outdir,
            )
        if not config.data_paths:
            raise ValueError("At least one DATA path is required")
    except (VariantCVError, ValueError, OSError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        results = run_dataset_experiments(config)
    except ClassifierTrainingError as e:
        _fail(f"Cross-validation failed at {e.stage} stage: {e}", verbose)
    except (VariantCVError, ValueError, OSError) as e:
        _fail(f"Cross-validation failed: {e}", verbose)

    _echo_results(results)
    if config.outdir is not None:
        typer.secho(f"\n✓ Evaluation complete. Results saved to {config.outdir}", fg=typer.colors.GREEN)


@app.command()
def synthetic(
    n_examples: int = typer.Option(10000, "--n-examples", help="Records generated before imbalancing"),
    n_attributes: int = typer.Option(20, "--n-attributes", help="Numeric attributes"),
    n_minority: int = typer.Option(50, "--n-minority", help="Minority records kept"),
    folds: int = typer.Option(5, "--folds", help="Number of stratified folds"),
    seed: int = typer.Option(42, "--seed", help="Random seed"),
    n_jobs: int = typer.Option(1, "--n-jobs", help="Folds processed in parallel"),
    outdir: Optional[Path] = typer.Option(None, "--outdir", help="Output directory for artifacts"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML config; --outdir given on the command line overrides it",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
):
    """
    Evaluate hyperSMURF and a random forest on synthetic imbalanced data.

    A balanced two-class dataset is generated, reduced to --n-minority
    minority records and cross-validated with stratified folds.

    Examples:
        variantcv synthetic
        variantcv synthetic --n-examples 2000 --n-minority 30 --folds 3
    """
    if verbose:
        logging.getLogger("variantcv").setLevel(logging.DEBUG)

    try:
        if config_file is not None:
            config = SyntheticConfig.from_yaml(config_file)
            if outdir is not None:
                config.outdir = Path(outdir)
        else:
            config = SyntheticConfig(
                n_examples=n_examples,
                n_attributes=n_attributes,
                n_minority=n_minority,
                n_folds=folds,
                random_state=seed,
                n_jobs=n_jobs,
                outdir=outdir,
            )
    except (VariantCVError, ValueError, OSError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        results = run_synthetic_experiment(config)
    except ClassifierTrainingError as e:
        _fail(f"Cross-validation failed at {e.stage} stage: {e}", verbose)
    except (VariantCVError, ValueError, OSError) as e:
        _fail(f"Cross-validation failed: {e}", verbose)

    _echo_results(results)
    if config.outdir is not None:
        typer.secho(f"\n✓ Evaluation complete. Results saved to {config.outdir}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
