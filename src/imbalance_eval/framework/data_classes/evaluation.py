"""Data classes for evaluation runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
import numpy as np

from .metrics import ClassificationMetrics, ConfusionMatrix


class RunStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RunConfiguration:
    """Everything that identifies one balance -> fit -> predict cycle."""
    model_name: str
    strategy: str
    feature_names: Tuple[str, ...]
    hyperparameters: Mapping[str, Any] = field(default_factory=dict)
    class_targets: Mapping[int, int] = field(default_factory=dict)
    repeat: int = 0
    seed: int = 0
    evaluation_set: Optional[str] = None
    run_label: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'feature_names', tuple(self.feature_names))
        object.__setattr__(self, 'hyperparameters', dict(self.hyperparameters))
        object.__setattr__(self, 'class_targets', dict(self.class_targets))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'model_name': self.model_name,
            'strategy': self.strategy,
            'class_targets': dict(self.class_targets),
            'hyperparameters': dict(self.hyperparameters),
            'n_features': len(self.feature_names),
            'feature_names': list(self.feature_names),
            'repeat': self.repeat,
            'seed': self.seed,
            'evaluation_set': self.evaluation_set,
            'run_label': self.run_label,
        }


@dataclass(frozen=True)
class EvaluationResult:
    """Per-run record: configuration, predictions, confusion matrix and derived metrics."""
    configuration: RunConfiguration
    y_true: np.ndarray
    predicted_labels: np.ndarray
    predicted_probabilities: Optional[np.ndarray] = None
    confusion_matrix: Optional[ConfusionMatrix] = None
    metrics: Optional[ClassificationMetrics] = None
    status: RunStatus = RunStatus.SUCCEEDED
    error: Optional[str] = None
    n_train_samples: int = 0

    def __post_init__(self):
        for name in ('y_true', 'predicted_labels', 'predicted_probabilities'):
            value = getattr(self, name)
            if value is None:
                continue
            array = np.array(value, copy=True)
            array.flags.writeable = False
            object.__setattr__(self, name, array)

    @classmethod
    def failed(cls, configuration: RunConfiguration, error: str) -> 'EvaluationResult':
        return cls(
            configuration=configuration,
            y_true=np.array([], dtype=int),
            predicted_labels=np.array([], dtype=int),
            status=RunStatus.FAILED,
            error=error
        )

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED

    def to_record(self) -> Dict[str, Any]:
        """Flat row for result tables."""
        record = {
            'model_name': self.configuration.model_name,
            'strategy': self.configuration.strategy,
            'run_label': self.configuration.run_label,
            'evaluation_set': self.configuration.evaluation_set,
            'repeat': self.configuration.repeat,
            'seed': self.configuration.seed,
            'n_features': len(self.configuration.feature_names),
            'n_train_samples': self.n_train_samples,
            'hyperparameters': dict(self.configuration.hyperparameters),
            'status': self.status.value,
            'error': self.error,
        }
        if self.confusion_matrix is not None:
            record.update(self.confusion_matrix.to_dict())
        if self.metrics is not None:
            record.update(self.metrics.scalar_metrics())
        return record
