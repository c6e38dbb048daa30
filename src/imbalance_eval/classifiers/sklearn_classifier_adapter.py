import logging
import warnings
from typing import Any, Dict, Optional
import numpy as np
from sklearn.base import BaseEstimator
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import BINARY_LABELS, TrainedModel
from .base_classifier_adapter import BaseClassifierAdapter


class SKLearnClassifierAdapter(BaseClassifierAdapter):
    def __init__(self,
                 app_logger: BaseAppLogger,
                 error_handler: BaseErrorHandler,
                 model_type: str):
        """
        Initialize the scikit-learn adapter for one algorithm family.

        Args:
            app_logger: Application logger
            error_handler: Error handler
            model_type: Type of sklearn model (e.g., 'randomforest', 'svm')
        """
        self.app_logger = app_logger
        self.error_handler = error_handler

        self.model_registry = {
            'randomforest': RandomForestClassifier,
            'gradientboosting': GradientBoostingClassifier,
            'svm': SVC,
            'decisiontree': DecisionTreeClassifier,
            'logisticregression': LogisticRegression
        }

        model_type = model_type.lower()
        if model_type not in self.model_registry:
            raise self.error_handler.create_error_handler(
                'configuration',
                "Unknown sklearn model type",
                model_type=model_type,
                available=list(self.model_registry.keys())
            )
        self.model_type = model_type
        self.name = model_type

        self.app_logger.structured_log(
            logging.INFO,
            "SKLearnClassifierAdapter initialized successfully",
            adapter_type=type(self).__name__,
            model_type=model_type
        )

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    def _initialize_model(self, hyperparameters: Dict[str, Any], random_state: Optional[int]) -> BaseEstimator:
        model_class = self.model_registry[self.model_type]
        params = dict(hyperparameters)
        if self.model_type == 'svm':
            params.setdefault('probability', True)
        if random_state is not None and 'random_state' in model_class().get_params():
            params['random_state'] = random_state
        try:
            return model_class(**params)
        except TypeError as e:
            raise self.error_handler.create_error_handler(
                'fit_failure',
                "Invalid hyperparameters for sklearn model",
                original_error=str(e),
                model_type=self.model_type,
                hyperparameters=params
            )

    @log_performance
    def fit(self, X, y, sample_weight=None, hyperparameters=None, random_state=None,
            feature_names=None) -> TrainedModel:
        hyperparameters = dict(hyperparameters or {})
        model = self._initialize_model(hyperparameters, random_state)

        self.app_logger.structured_log(
            logging.DEBUG,
            "Starting SKLearn model fit",
            model_type=self.model_type,
            input_shape=np.shape(X),
            weighted=sample_weight is not None,
            random_state=random_state
        )

        fit_kwargs = {}
        if sample_weight is not None:
            fit_kwargs['sample_weight'] = np.asarray(sample_weight, dtype=float)

        try:
            with warnings.catch_warnings():
                warnings.simplefilter('error', category=ConvergenceWarning)
                model.fit(np.asarray(X, dtype=float), np.asarray(y, dtype=int), **fit_kwargs)
        except (ConvergenceWarning, FloatingPointError, np.linalg.LinAlgError) as e:
            raise self.error_handler.create_error_handler(
                'fit_divergence',
                "SKLearn model failed to converge",
                original_error=str(e),
                model_type=self.model_type,
                hyperparameters=hyperparameters
            )
        except ValueError as e:
            if np.all(np.isfinite(X)):
                raise self.error_handler.create_error_handler(
                    'fit_failure',
                    "Error fitting SKLearn model",
                    original_error=str(e),
                    model_type=self.model_type,
                    hyperparameters=hyperparameters
                )
            raise self.error_handler.create_error_handler(
                'fit_divergence',
                "Non-finite values in training matrix",
                original_error=str(e),
                model_type=self.model_type
            )

        return TrainedModel(
            estimator=model,
            model_name=self.model_type,
            hyperparameters=hyperparameters,
            feature_names=tuple(feature_names) if feature_names is not None else (),
            n_train_samples=len(y)
        )

    def predict_labels(self, model: TrainedModel, X) -> np.ndarray:
        try:
            return np.asarray(model.estimator.predict(np.asarray(X, dtype=float)), dtype=int)
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Error predicting labels",
                original_error=str(e),
                model_type=self.model_type
            )

    def predict_probabilities(self, model: TrainedModel, X) -> np.ndarray:
        try:
            raw = model.estimator.predict_proba(np.asarray(X, dtype=float))
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Error predicting probabilities",
                original_error=str(e),
                model_type=self.model_type
            )
        # Reorder columns to (0, 1) whatever order the estimator learned
        probabilities = np.zeros((raw.shape[0], len(BINARY_LABELS)))
        for column, label in enumerate(model.estimator.classes_):
            probabilities[:, int(label)] = raw[:, column]
        return probabilities

    def feature_importances(self, model: TrainedModel) -> Optional[np.ndarray]:
        estimator = model.estimator
        if hasattr(estimator, 'feature_importances_'):
            return np.asarray(estimator.feature_importances_, dtype=float)
        if hasattr(estimator, 'coef_'):
            return np.abs(np.ravel(estimator.coef_))
        return None
