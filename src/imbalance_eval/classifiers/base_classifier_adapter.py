from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import numpy as np

from imbalance_eval.framework.data_classes import TrainedModel


class BaseClassifierAdapter(ABC):
    """
    Uniform boundary between the evaluation harness and an external fitting
    algorithm.
    """

    name: str = "classifier"

    @abstractmethod
    def fit(self,
            X: np.ndarray,
            y: np.ndarray,
            sample_weight: Optional[np.ndarray] = None,
            hyperparameters: Optional[Dict[str, Any]] = None,
            random_state: Optional[int] = None,
            feature_names=None) -> TrainedModel:
        """
        Fit a new model.

        Raises:
            FitDivergenceError: If the algorithm fails to converge or hits a numerical failure
        """
        pass

    @abstractmethod
    def predict_labels(self, model: TrainedModel, X: np.ndarray) -> np.ndarray:
        pass

    @abstractmethod
    def predict_probabilities(self, model: TrainedModel, X: np.ndarray) -> np.ndarray:
        """Return an (n, 2) array of class probabilities, columns ordered (0, 1)."""
        pass

    def feature_importances(self, model: TrainedModel) -> Optional[np.ndarray]:
        """Per-feature importance of a fitted model, or None when the algorithm has none."""
        return None
