"""Data classes for labelled samples and feature-schema datasets."""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd

POSITIVE_LABEL = 1
NEGATIVE_LABEL = 0
BINARY_LABELS = (NEGATIVE_LABEL, POSITIVE_LABEL)


@dataclass(frozen=True)
class Sample:
    """One transcript: identifier, ordered feature vector and binary label."""
    sample_id: str
    features: Tuple[float, ...]
    label: int


def _read_only(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.flags.writeable = False
    return array


class Dataset:
    """
    Ordered collection of samples sharing one feature schema.

    Values live in read-only numpy arrays so a Dataset can be shared between
    runs without copying. Every derived view (subset, feature selection,
    rescaled copy) is a new Dataset.
    """

    def __init__(self,
                 ids: Sequence,
                 X: np.ndarray,
                 y: Sequence[int],
                 feature_names: Sequence[str],
                 name: Optional[str] = None):
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, len(feature_names)) if len(feature_names) else X.reshape(len(X), 0)
        if X.ndim != 2:
            raise ValueError(f"Feature matrix must be two-dimensional, got {X.ndim} dimensions")
        if X.shape[1] != len(feature_names):
            raise ValueError(
                f"Feature vector length {X.shape[1]} does not match schema length {len(feature_names)}"
            )
        if len(set(feature_names)) != len(feature_names):
            raise ValueError("Feature names must be unique")

        y = np.asarray(y, dtype=int)
        ids = np.asarray(ids, dtype=object)
        if not (len(ids) == len(y) == X.shape[0]):
            raise ValueError(
                f"Length mismatch: {len(ids)} ids, {len(y)} labels, {X.shape[0]} feature rows"
            )
        unknown = set(np.unique(y).tolist()) - set(BINARY_LABELS)
        if unknown:
            raise ValueError(f"Labels must be binary {BINARY_LABELS}, found {sorted(unknown)}")

        self.ids = _read_only(ids)
        self.X = _read_only(X)
        self.y = _read_only(y)
        self.feature_names: Tuple[str, ...] = tuple(feature_names)
        self.name = name

    @classmethod
    def from_samples(cls, samples: Sequence[Sample], feature_names: Sequence[str],
                     name: Optional[str] = None) -> 'Dataset':
        """Build a dataset from Sample records, checking each vector against the schema."""
        for sample in samples:
            if len(sample.features) != len(feature_names):
                raise ValueError(
                    f"Sample {sample.sample_id} has {len(sample.features)} features, "
                    f"schema has {len(feature_names)}"
                )
        X = np.array([s.features for s in samples], dtype=float).reshape(len(samples), len(feature_names))
        return cls(
            ids=[s.sample_id for s in samples],
            X=X,
            y=[s.label for s in samples],
            feature_names=feature_names,
            name=name
        )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, label_column: str,
                       id_column: Optional[str] = None,
                       name: Optional[str] = None) -> 'Dataset':
        """Build a dataset from a numeric frame whose label column already holds 0/1."""
        feature_columns = [c for c in df.columns if c not in (label_column, id_column)]
        ids = df[id_column].astype(str).tolist() if id_column else [str(i) for i in df.index]
        return cls(
            ids=ids,
            X=df[feature_columns].to_numpy(dtype=float),
            y=df[label_column].to_numpy(dtype=int),
            feature_names=feature_columns,
            name=name
        )

    def __len__(self) -> int:
        return len(self.y)

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    def samples(self) -> Iterator[Sample]:
        for sample_id, row, label in zip(self.ids, self.X, self.y):
            yield Sample(str(sample_id), tuple(float(v) for v in row), int(label))

    def class_indices(self, label: int) -> np.ndarray:
        """Positions (0..n-1) of every sample carrying the given label, in dataset order."""
        return np.flatnonzero(self.y == label)

    def class_counts(self) -> Dict[int, int]:
        return {label: int(np.sum(self.y == label)) for label in BINARY_LABELS}

    def subset(self, indices: Sequence[int], name: Optional[str] = None) -> 'Dataset':
        """Rows at the given positions, repeated positions included."""
        indices = np.asarray(indices, dtype=int)
        return Dataset(
            ids=self.ids[indices],
            X=self.X[indices],
            y=self.y[indices],
            feature_names=self.feature_names,
            name=self.name if name is None else name
        )

    def feature_positions(self, feature_names: Sequence[str]) -> List[int]:
        missing = [f for f in feature_names if f not in self.feature_names]
        if missing:
            raise KeyError(f"Unknown features: {missing}")
        return [self.feature_names.index(f) for f in feature_names]

    def select_features(self, feature_names: Sequence[str]) -> 'Dataset':
        """Restrict the schema to the given features, in the given order."""
        positions = self.feature_positions(feature_names)
        return Dataset(
            ids=self.ids,
            X=self.X[:, positions],
            y=self.y,
            feature_names=list(feature_names),
            name=self.name
        )

    def with_features(self, X: np.ndarray) -> 'Dataset':
        """Same samples and schema with a replacement feature matrix."""
        return Dataset(ids=self.ids, X=X, y=self.y, feature_names=self.feature_names, name=self.name)

    def to_dataframe(self, label_column: str = 'label') -> pd.DataFrame:
        df = pd.DataFrame(self.X, columns=list(self.feature_names))
        df.insert(0, 'sample_id', self.ids)
        df[label_column] = self.y
        return df

    def __repr__(self) -> str:
        return (f"Dataset(name={self.name!r}, n_samples={len(self)}, "
                f"n_features={self.n_features}, class_counts={self.class_counts()})")
