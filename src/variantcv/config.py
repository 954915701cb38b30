"""Configuration dataclasses for cross-validation experiments."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from variantcv.models.estimators import CLASSIFIERS
from variantcv.splitting.folds import FOLD_MODES

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Any:
    """Load YAML from disk."""
    with open(path, "r", encoding="utf-8") as handle:
        try:
            return yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc


@dataclass
class ClassifierConfig:
    """A registered classifier name plus its options."""

    name: str = "hypersmurf"
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.name not in CLASSIFIERS:
            raise ValueError(f"Unknown classifier '{self.name}'. Available: {sorted(CLASSIFIERS)}")
        self.options = dict(self.options or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ClassifierConfig:
        data = dict(data)
        name = data.pop("name", "hypersmurf")
        options = dict(data.pop("options", {}) or {})
        # remaining keys are treated as inline options
        options.update(data)
        return cls(name=name, options=options)


def _mendelian_classifiers() -> List[ClassifierConfig]:
    return [
        ClassifierConfig(
            "hypersmurf",
            {"num_iterations": 2, "num_trees": 10, "distribution_spread": 0.0, "percentage": 0.0},
        )
    ]


def _synthetic_classifiers() -> List[ClassifierConfig]:
    return [
        ClassifierConfig(
            "hypersmurf",
            {"num_iterations": 10, "num_trees": 10, "distribution_spread": 0.0, "percentage": 200.0},
        ),
        ClassifierConfig("random_forest", {"num_iterations": 10}),
    ]


def _classifier_list(items: Any) -> List[ClassifierConfig]:
    out = []
    for item in items:
        if isinstance(item, ClassifierConfig):
            out.append(item)
        elif isinstance(item, dict):
            out.append(ClassifierConfig.from_dict(item))
        elif isinstance(item, str):
            out.append(ClassifierConfig(item))
        else:
            raise ValueError(f"Invalid classifier entry: {item!r}")
    return out


def _check_keys(cls, data: Dict[str, Any]) -> None:
    unknown = sorted(set(data) - {f.name for f in fields(cls)})
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {unknown}")


def _check_common(n_folds: int, n_jobs: int, classifiers: List[ClassifierConfig]) -> None:
    if n_folds < 1:
        raise ValueError(f"n_folds must be >= 1, got {n_folds}")
    if n_jobs == 0:
        raise ValueError("n_jobs must be non-zero")
    if not classifiers:
        raise ValueError("At least one classifier must be configured")


@dataclass
class CVConfig:
    """
    Configuration for cross-validating classifiers on dataset files.

    Defaults reproduce the Mendelian variant experiment: group-aware 10-fold
    cross-validation over the ``fold`` attribute with a 2 x 10 hyperSMURF
    ensemble, no oversampling and no distribution spread cap.
    """

    data_paths: List[Path] = field(default_factory=list)
    label_col: Optional[str] = None
    fold_col: str = "fold"
    fold_mode: str = "group"
    n_folds: int = 10
    random_state: int = 42
    n_jobs: int = 1
    keep_attributes: bool = False
    classifiers: List[ClassifierConfig] = field(default_factory=_mendelian_classifiers)
    outdir: Optional[Path] = None

    def __post_init__(self):
        """Convert string paths to Path objects and validate."""
        self.data_paths = [Path(p) for p in self.data_paths]
        if self.outdir is not None:
            self.outdir = Path(self.outdir)
        self.classifiers = _classifier_list(self.classifiers)

        if self.fold_mode not in FOLD_MODES:
            raise ValueError(f"fold_mode must be one of {FOLD_MODES}, got '{self.fold_mode}'")
        if self.fold_mode == "stratified" and self.n_folds < 2:
            raise ValueError("Stratified cross-validation needs at least 2 folds")
        _check_common(self.n_folds, self.n_jobs, self.classifiers)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dict with Path objects as strings."""
        d = asdict(self)
        d["data_paths"] = [str(p) for p in self.data_paths]
        d["outdir"] = str(self.outdir) if self.outdir else None
        return d

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CVConfig:
        _check_keys(cls, data)
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path) -> CVConfig:
        """Load config from a YAML mapping of field names to values."""
        data = load_yaml(Path(path))
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.info(f"Loaded config from {path}")
        return cls.from_dict(data)


@dataclass
class SyntheticConfig:
    """
    Configuration for the synthetic imbalanced-data experiment.

    A balanced dataset of ``n_examples`` records is generated, reduced to
    ``n_minority`` minority records and evaluated with stratified
    ``n_folds``-fold cross-validation.
    """

    n_examples: int = 10000
    n_attributes: int = 20
    n_minority: int = 50
    n_folds: int = 5
    random_state: int = 42
    n_jobs: int = 1
    classifiers: List[ClassifierConfig] = field(default_factory=_synthetic_classifiers)
    outdir: Optional[Path] = None

    def __post_init__(self):
        if self.outdir is not None:
            self.outdir = Path(self.outdir)
        self.classifiers = _classifier_list(self.classifiers)

        if self.n_examples < 2:
            raise ValueError(f"n_examples must be >= 2, got {self.n_examples}")
        if self.n_attributes < 2:
            raise ValueError(f"n_attributes must be >= 2, got {self.n_attributes}")
        if self.n_minority < 0:
            raise ValueError(f"n_minority must be >= 0, got {self.n_minority}")
        if self.n_minority == 0:
            resampling = [c.name for c in self.classifiers if CLASSIFIERS[c.name].needs_two_classes]
            if resampling:
                raise ValueError(f"n_minority=0 leaves a single class, which {resampling} cannot train on")
        if self.n_folds < 2:
            raise ValueError("Stratified cross-validation needs at least 2 folds")
        _check_common(self.n_folds, self.n_jobs, self.classifiers)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["outdir"] = str(self.outdir) if self.outdir else None
        return d

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SyntheticConfig:
        _check_keys(cls, data)
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path) -> SyntheticConfig:
        data = load_yaml(Path(path))
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.info(f"Loaded config from {path}")
        return cls.from_dict(data)
