"""Classifier registry and estimator configurations."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Type

import numpy as np
from imblearn.ensemble import BalancedBaggingClassifier
from imblearn.pipeline import Pipeline as ImbPipeline
from sklearn.ensemble import RandomForestClassifier
from sklearn.impute import SimpleImputer

from variantcv.models.base import Classifier
from variantcv.models.smote import make_oversampler

logger = logging.getLogger(__name__)


class SpreadSamplingStrategy:
    """
    Under-sampling strategy capping the class distribution spread.

    Called by imbalanced-learn on each bag's labels; every class is reduced to
    at most ``spread`` times the smallest class. ``spread <= 0`` means no
    maximum spread, so the bag is left as is.
    """

    def __init__(self, spread: float = 0.0):
        self.spread = float(spread)

    def __repr__(self) -> str:
        return f"SpreadSamplingStrategy(spread={self.spread})"

    def __call__(self, y) -> Dict[Any, int]:
        classes, counts = np.unique(y, return_counts=True)
        if self.spread <= 0 or len(classes) < 2:
            return {cls: int(n) for cls, n in zip(classes, counts)}
        cap = int(math.ceil(counts.min() * self.spread))
        return {cls: int(min(n, cap)) for cls, n in zip(classes, counts)}


def _imputer() -> SimpleImputer:
    return SimpleImputer(strategy="median", keep_empty_features=True)


class ResamplingEnsembleClassifier(Classifier):
    """
    Hyper-ensemble of random forests trained on resampled data (hyperSMURF).

    The minority class is first oversampled with SMOTE by ``percentage``
    percent; a balanced bagging ensemble of ``num_iterations`` random forests
    (``num_trees`` trees each) is then trained, each bag under-sampled so the
    majority:minority ratio stays within ``distribution_spread``.
    """

    name = "hypersmurf"
    needs_two_classes = True
    default_options: Dict[str, Any] = {
        "num_iterations": 10,
        "num_trees": 10,
        "distribution_spread": 0.0,
        "percentage": 200.0,
        "n_jobs": 1,
        "random_state": 42,
    }

    def build_estimator(self, class_counts: np.ndarray) -> ImbPipeline:
        opts = self.get_options()
        forest = RandomForestClassifier(
            n_estimators=int(opts["num_trees"]),
            random_state=opts["random_state"],
        )
        ensemble = BalancedBaggingClassifier(
            estimator=forest,
            n_estimators=int(opts["num_iterations"]),
            sampling_strategy=SpreadSamplingStrategy(opts["distribution_spread"]),
            bootstrap=False,
            n_jobs=opts["n_jobs"],
            random_state=opts["random_state"],
        )
        return ImbPipeline([
            ("imputer", _imputer()),
            ("sampler", make_oversampler(class_counts, float(opts["percentage"]), random_state=opts["random_state"])),
            ("clf", ensemble),
        ])


class TreeEnsembleClassifier(Classifier):
    """Plain random forest with ``num_iterations`` trees."""

    name = "random_forest"
    default_options: Dict[str, Any] = {
        "num_iterations": 100,
        "n_jobs": 1,
        "random_state": 42,
    }

    def build_estimator(self, class_counts: np.ndarray) -> ImbPipeline:
        opts = self.get_options()
        return ImbPipeline([
            ("imputer", _imputer()),
            ("clf", RandomForestClassifier(
                n_estimators=int(opts["num_iterations"]),
                n_jobs=opts["n_jobs"],
                random_state=opts["random_state"],
            )),
        ])


CLASSIFIERS: Dict[str, Type[Classifier]] = {
    ResamplingEnsembleClassifier.name: ResamplingEnsembleClassifier,
    TreeEnsembleClassifier.name: TreeEnsembleClassifier,
}


def get_classifier(name: str, **options: Any) -> Classifier:
    """
    Instantiate a registered classifier.

    Parameters
    ----------
    name : str
        Registry key (``hypersmurf`` or ``random_forest``)
    **options
        Classifier options

    Returns
    -------
    Classifier
        Configured, untrained classifier
    """
    try:
        cls = CLASSIFIERS[name]
    except KeyError:
        raise ValueError(f"Unknown classifier '{name}'. Available: {sorted(CLASSIFIERS)}") from None
    return cls(**options)


class ClassifierFactory:
    """
    Callable producing a fresh, identically configured classifier per call.

    Options are validated once at construction so a bad configuration fails
    before any fold is trained.
    """

    def __init__(self, name: str, **options: Any):
        self.name = name
        self.options = dict(options)
        self._template = get_classifier(name, **self.options)

    def __call__(self) -> Classifier:
        return get_classifier(self.name, **self.options)

    def __repr__(self) -> str:
        return f"ClassifierFactory({self.describe()})"

    def describe(self) -> str:
        return self._template.describe()
