"""
Common test fixtures for the imbalance_eval and lncrna_app tests.
"""
from types import SimpleNamespace
from unittest.mock import Mock

import numpy as np
import pytest

from imbalance_eval.classifiers.base_classifier_adapter import BaseClassifierAdapter
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.error_handler_factory import ErrorHandlerFactory
from imbalance_eval.core.error_handling.error_handler import (
    ConfigurationError,
    DataValidationError,
    DataStorageError,
    PartitioningError,
    InsufficientSamplesError,
    PreprocessingError,
    DegenerateFeatureError,
    BalancingError,
    FitDivergenceError,
    FitTimeoutError,
    FitFailureError,
    ModelTestingError,
    ModelSelectionError,
    ReportingError,
    ExperimentLoggerError
)
from imbalance_eval.framework.data_classes import Dataset, TrainedModel


class MockContextManager:
    """Mock context manager for logging context."""
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


@pytest.fixture
def mock_app_logger():
    """Create a mock app logger for testing."""
    logger = Mock(spec=BaseAppLogger)
    logger.structured_log = Mock()
    logger.log_performance = lambda func: func
    logger.log_context = lambda **kwargs: MockContextManager()
    return logger


@pytest.fixture
def mock_error_handler(mock_app_logger):
    """Create a mock error handler factory that produces the real exception classes."""
    handler = Mock(spec=ErrorHandlerFactory)

    def create_error(error_type, message, **kwargs):
        error_map = {
            'configuration': ConfigurationError,
            'data_validation': DataValidationError,
            'data_storage': DataStorageError,
            'partitioning': PartitioningError,
            'insufficient_samples': InsufficientSamplesError,
            'preprocessing': PreprocessingError,
            'degenerate_feature': DegenerateFeatureError,
            'balancing': BalancingError,
            'fit_divergence': FitDivergenceError,
            'fit_timeout': FitTimeoutError,
            'fit_failure': FitFailureError,
            'model_testing': ModelTestingError,
            'model_selection': ModelSelectionError,
            'reporting': ReportingError,
            'experiment_logger': ExperimentLoggerError
        }
        error_class = error_map.get(error_type, Exception)
        if error_class in error_map.values():
            return error_class(message, mock_app_logger, **kwargs)
        return error_class(message)

    handler.create_error_handler = Mock(side_effect=create_error)
    return handler


def make_dataset(n_negative, n_positive, n_features=4, seed=0, shift=1.5, name=None):
    """
    Gaussian classes; positives are shifted by `shift` on every feature except
    the last, which is pure noise.
    """
    rng = np.random.default_rng(seed)
    X_neg = rng.normal(0.0, 1.0, size=(n_negative, n_features))
    X_pos = rng.normal(0.0, 1.0, size=(n_positive, n_features))
    if n_features > 1:
        X_pos[:, :-1] += shift
    else:
        X_pos += shift
    X = np.vstack([X_neg, X_pos])
    y = np.concatenate([np.zeros(n_negative, dtype=int), np.ones(n_positive, dtype=int)])
    ids = [f"t{i}" for i in range(len(y))]
    return Dataset(ids, X, y, [f"f{i}" for i in range(n_features)], name=name)


@pytest.fixture
def dataset_factory():
    return make_dataset


class StubClassifier(BaseClassifierAdapter):
    """
    Deterministic linear scorer: the score is the projection onto the
    difference of (weighted) class means. Records every fit call.
    """

    def __init__(self, name="stub", diverge_on=None):
        self.name = name
        self.diverge_on = diverge_on or {}
        self.error_handler = None
        self.fit_calls = []

    def fit(self, X, y, sample_weight=None, hyperparameters=None, random_state=None,
            feature_names=None):
        hyperparameters = dict(hyperparameters or {})
        self.fit_calls.append({
            'n_samples': len(y),
            'sample_weight': None if sample_weight is None else np.asarray(sample_weight),
            'hyperparameters': hyperparameters,
            'random_state': random_state,
            'feature_names': tuple(feature_names or ())
        })
        for key, value in self.diverge_on.items():
            if hyperparameters.get(key) == value:
                raise FitDivergenceError("stub diverged", Mock(spec=BaseAppLogger), hyperparameters=hyperparameters)

        weights = np.ones(len(y)) if sample_weight is None else np.asarray(sample_weight)
        X = np.asarray(X, dtype=float)
        mean_pos = np.average(X[y == 1], axis=0, weights=weights[y == 1])
        mean_neg = np.average(X[y == 0], axis=0, weights=weights[y == 0])
        direction = mean_pos - mean_neg
        midpoint = (mean_pos + mean_neg) / 2
        return TrainedModel(
            estimator=(direction, midpoint),
            model_name=self.name,
            hyperparameters=hyperparameters,
            feature_names=feature_names or (),
            n_train_samples=len(y)
        )

    def predict_probabilities(self, model, X):
        direction, midpoint = model.estimator
        scores = (np.asarray(X, dtype=float) - midpoint) @ direction
        positive = 1.0 / (1.0 + np.exp(-scores))
        return np.column_stack([1.0 - positive, positive])

    def predict_labels(self, model, X):
        return (self.predict_probabilities(model, X)[:, 1] >= 0.5).astype(int)

    def feature_importances(self, model):
        return np.abs(model.estimator[0])


@pytest.fixture
def stub_classifier():
    return StubClassifier()


@pytest.fixture
def evaluation_config():
    """Config tree shaped like the one ConfigManager builds from configs/."""
    return SimpleNamespace(
        core=SimpleNamespace(
            evaluation_config=SimpleNamespace(
                random_seed=1,
                repeats=2,
                selection_metric='auc',
                selection_tolerance=0.0,
                n_jobs=1,
                parallel_backend='threading',
                fit_timeout_seconds=None,
                balanced_partition=SimpleNamespace(train=100, validate=100, test=100),
                imbalance_experiment=SimpleNamespace(
                    minority_label=1,
                    majority_per_minority=3,
                    minority_counts=SimpleNamespace(train=30, validate=20, test=20),
                    strategies=['none', 'weight', 'undersample', 'oversample']
                ),
                ablation=SimpleNamespace(k_values=[1, 2, 3, 4]),
                rfe=SimpleNamespace(step=1, n_estimators=20),
                log_experiments=False
            )
        ),
        models=SimpleNamespace(sklearn_logisticregression=True, sklearn_svm=False),
        hyperparameters=SimpleNamespace(
            logisticregression=SimpleNamespace(
                baseline=SimpleNamespace(C=1.0, max_iter=500),
                grid=SimpleNamespace(C=[0.1, 1.0])
            )
        )
    )


@pytest.fixture
def stub_classifier_cls():
    return StubClassifier
