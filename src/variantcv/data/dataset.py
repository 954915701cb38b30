"""Dataset container types for variantcv."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from variantcv.exceptions import SchemaError

AttributeKind = Literal["numeric", "nominal", "string"]


@dataclass(frozen=True)
class Attribute:
    """Typed handle to one column of a Dataset's schema."""

    name: str
    index: int
    kind: AttributeKind
    values: Optional[Tuple[object, ...]] = None

    @property
    def is_numeric(self) -> bool:
        return self.kind == "numeric"


@dataclass
class Dataset:
    """
    Ordered table of records with a fixed schema and a designated label column.

    Record identity is positional: the frame index holds the record id assigned
    when the dataset was loaded or generated, and subsets keep those ids so
    that predictions can be traced back to the input records.

    Parameters
    ----------
    frame : pd.DataFrame
        Records, one row each. The index is used as record id and must be unique.
    label_col : str, optional
        Name of the label column; defaults to the last column.
    name : str
        Relation name used in reports.

    Attributes
    ----------
    class_names : List
        Label classes in declaration order (first class = minority by convention)
    n_records : int
        Number of records

    Examples
    --------
    >>> dataset = load_dataset(Path("variants.arff"))
    >>> fold = dataset.attribute("fold")
    >>> without_fold = dataset.drop_attribute(fold.name)
    """

    frame: pd.DataFrame
    label_col: Optional[str] = None
    name: str = "dataset"

    def __post_init__(self):
        """Normalise column types and validate the label column."""
        if self.frame.shape[1] == 0:
            raise SchemaError("Dataset has no attributes.")

        if self.label_col is None:
            self.label_col = str(self.frame.columns[-1])

        if self.label_col not in self.frame.columns:
            raise SchemaError(
                f"Label column '{self.label_col}' not found. Available: {list(self.frame.columns)[:10]}"
            )

        if not self.frame.index.is_unique:
            raise SchemaError("Record ids (frame index) must be unique.")

        frame = self.frame.copy()
        for col in frame.columns:
            series = frame[col]
            if isinstance(series.dtype, pd.CategoricalDtype):
                continue
            if col == self.label_col:
                categories = sorted(series.dropna().unique().tolist())
                frame[col] = pd.Categorical(series, categories=categories, ordered=False)
            elif not is_numeric_dtype(series) or is_bool_dtype(series):
                frame[col] = series.astype("category")
        self.frame = frame

        n_missing = int(self.frame[self.label_col].isna().sum())
        if n_missing:
            raise SchemaError(f"Label column '{self.label_col}' has {n_missing} missing values.")

    @property
    def n_records(self) -> int:
        """Number of records."""
        return len(self.frame)

    def __len__(self) -> int:
        return self.n_records

    @property
    def record_ids(self) -> np.ndarray:
        """Record ids in current row order."""
        return self.frame.index.to_numpy()

    @property
    def attributes(self) -> List[Attribute]:
        """Ordered schema of the dataset."""
        return [self.attribute(name) for name in self.frame.columns]

    def attribute(self, name: str) -> Attribute:
        """
        Look up an attribute by name.

        Raises
        ------
        SchemaError
            If the attribute does not exist
        """
        if name not in self.frame.columns:
            raise SchemaError(f"Attribute '{name}' not found. Available: {list(self.frame.columns)[:10]}")
        series = self.frame[name]
        index = int(self.frame.columns.get_loc(name))
        if isinstance(series.dtype, pd.CategoricalDtype):
            return Attribute(name, index, "nominal", tuple(series.cat.categories.tolist()))
        if is_numeric_dtype(series) and not is_bool_dtype(series):
            return Attribute(name, index, "numeric")
        return Attribute(name, index, "string")

    @property
    def label_attribute(self) -> Attribute:
        return self.attribute(self.label_col)

    @property
    def class_names(self) -> List:
        """Label classes in declaration order."""
        return self.frame[self.label_col].cat.categories.tolist()

    @property
    def n_classes(self) -> int:
        return len(self.class_names)

    def class_counts(self) -> Dict[object, int]:
        """Records per class, in class order (zero counts included)."""
        counts = self.frame[self.label_col].value_counts(sort=False)
        return {cls: int(counts.get(cls, 0)) for cls in self.class_names}

    @property
    def feature_names(self) -> List[str]:
        return [col for col in self.frame.columns if col != self.label_col]

    def labels(self) -> pd.Series:
        """Label series (categorical) indexed by record id."""
        return self.frame[self.label_col]

    def label_codes(self) -> np.ndarray:
        """Integer class index per record, following class_names order."""
        return self.frame[self.label_col].cat.codes.to_numpy().astype(int)

    def features(self) -> pd.DataFrame:
        """Feature columns (everything except the label)."""
        return self.frame[self.feature_names]

    def feature_matrix(self) -> np.ndarray:
        """
        Numeric feature matrix for estimators.

        Nominal attributes are encoded by category code and missing values
        become NaN. Codes are stable across subsets because categories are
        fixed on the full dataset.
        """
        columns = []
        for col in self.feature_names:
            series = self.frame[col]
            if isinstance(series.dtype, pd.CategoricalDtype):
                codes = series.cat.codes.to_numpy().astype(float)
                codes[codes < 0] = np.nan
                columns.append(codes)
            else:
                columns.append(series.to_numpy(dtype=float, na_value=np.nan))
        if not columns:
            return np.empty((self.n_records, 0), dtype=float)
        return np.column_stack(columns)

    def drop_attribute(self, name: str) -> Dataset:
        """Return a new dataset without the named attribute."""
        self.attribute(name)
        if name == self.label_col:
            raise SchemaError("Cannot drop the label attribute.")
        return Dataset(self.frame.drop(columns=[name]), label_col=self.label_col, name=self.name)

    def take(self, mask: np.ndarray) -> Dataset:
        """Return the records selected by a boolean mask, keeping their ids."""
        return Dataset(self.frame.loc[np.asarray(mask, dtype=bool)], label_col=self.label_col, name=self.name)

    def subset(self, record_ids) -> Dataset:
        """
        Create a subset of the dataset.

        Parameters
        ----------
        record_ids : array-like
            Record ids to select, in the desired order

        Returns
        -------
        Dataset
            New dataset with the selected records
        """
        return Dataset(self.frame.loc[list(record_ids)], label_col=self.label_col, name=self.name)

    def renumbered(self) -> Dataset:
        """Return a copy whose record ids are 0..n-1 in current row order."""
        return Dataset(self.frame.reset_index(drop=True), label_col=self.label_col, name=self.name)
