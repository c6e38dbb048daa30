"""Data class for a fitted model handle."""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass
class TrainedModel:
    """
    Opaque handle around a fitted estimator or booster.

    Each fit produces its own handle; adapters never share estimators
    between handles.
    """
    estimator: Any
    model_name: str
    hyperparameters: Dict[str, Any] = field(default_factory=dict)
    feature_names: Tuple[str, ...] = ()
    n_train_samples: int = 0

    def __post_init__(self):
        self.feature_names = tuple(self.feature_names)
