"""Classifier capability, registry and resampling utilities."""

from variantcv.models.base import Classifier, TrainedModel
from variantcv.models.estimators import (
    CLASSIFIERS,
    ClassifierFactory,
    ResamplingEnsembleClassifier,
    SpreadSamplingStrategy,
    TreeEnsembleClassifier,
    get_classifier,
)
from variantcv.models.smote import make_oversampler, oversampling_targets

__all__ = [
    "Classifier",
    "TrainedModel",
    "CLASSIFIERS",
    "ClassifierFactory",
    "ResamplingEnsembleClassifier",
    "SpreadSamplingStrategy",
    "TreeEnsembleClassifier",
    "get_classifier",
    "make_oversampler",
    "oversampling_targets",
]
