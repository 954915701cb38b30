"""Artifact saving utilities."""

from variantcv.artifacts.saver import run_dirname, save_cv_results

__all__ = ["run_dirname", "save_cv_results"]
