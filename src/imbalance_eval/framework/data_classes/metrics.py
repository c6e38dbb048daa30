"""Data classes for confusion matrices, threshold curves and classification metrics."""

from dataclasses import dataclass, fields
from typing import Dict, Optional
import numpy as np

# Scalar fields of ClassificationMetrics that are aggregated across runs
SCALAR_METRICS = (
    'accuracy',
    'sensitivity',
    'specificity',
    'precision',
    'f1',
    'balanced_accuracy',
    'auc',
    'average_precision',
)


def _frozen_array(values) -> np.ndarray:
    array = np.array(values, dtype=float, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class ConfusionMatrix:
    """2x2 table of predicted vs actual counts; lncRNA is the positive class."""
    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @property
    def positives(self) -> int:
        return self.tp + self.fn

    @property
    def negatives(self) -> int:
        return self.tn + self.fp

    def as_array(self) -> np.ndarray:
        """Rows are actual (negative, positive), columns predicted, as in sklearn."""
        return np.array([[self.tn, self.fp], [self.fn, self.tp]])

    def to_dict(self) -> Dict[str, int]:
        return {'tp': self.tp, 'fp': self.fp, 'tn': self.tn, 'fn': self.fn}


@dataclass(frozen=True)
class RocCurve:
    """True-positive rate vs false-positive rate at every score cut-point."""
    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray

    def __post_init__(self):
        for name in ('fpr', 'tpr', 'thresholds'):
            object.__setattr__(self, name, _frozen_array(getattr(self, name)))

    def points(self) -> Dict[str, list]:
        return {'fpr': self.fpr.tolist(), 'tpr': self.tpr.tolist(), 'thresholds': self.thresholds.tolist()}


@dataclass(frozen=True)
class PrecisionRecallCurve:
    """Precision vs recall at every score cut-point; depends on class prevalence."""
    precision: np.ndarray
    recall: np.ndarray
    thresholds: np.ndarray

    def __post_init__(self):
        for name in ('precision', 'recall', 'thresholds'):
            object.__setattr__(self, name, _frozen_array(getattr(self, name)))

    def points(self) -> Dict[str, list]:
        """One entry per point; the closing (recall=0, precision=1) point has no threshold and gets None."""
        thresholds = self.thresholds.tolist()
        thresholds += [None] * (len(self.precision) - len(thresholds))
        return {
            'precision': self.precision.tolist(),
            'recall': self.recall.tolist(),
            'thresholds': thresholds
        }


@dataclass(frozen=True)
class ClassificationMetrics:
    """Container for classification metrics."""
    accuracy: float = 0.0
    sensitivity: float = 0.0
    specificity: float = 0.0
    precision: float = 0.0
    f1: float = 0.0
    balanced_accuracy: float = 0.0
    auc: Optional[float] = None
    average_precision: Optional[float] = None
    n_samples: int = 0
    roc_curve: Optional[RocCurve] = None
    pr_curve: Optional[PrecisionRecallCurve] = None

    @property
    def recall(self) -> float:
        return self.sensitivity

    def scalar_metrics(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in SCALAR_METRICS}

    def to_dict(self) -> Dict[str, object]:
        result = {f.name: getattr(self, f.name) for f in fields(self)
                  if f.name not in ('roc_curve', 'pr_curve')}
        result['roc_curve'] = self.roc_curve.points() if self.roc_curve else None
        result['pr_curve'] = self.pr_curve.points() if self.pr_curve else None
        return result


@dataclass(frozen=True)
class MetricSummary:
    """Mean and sample variance of one metric across runs."""
    mean: float
    variance: float
    n: int
