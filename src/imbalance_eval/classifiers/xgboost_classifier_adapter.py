import logging
from typing import Any, Dict, Optional
import numpy as np
import xgboost as xgb

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import TrainedModel
from .base_classifier_adapter import BaseClassifierAdapter


class XGBoostClassifierAdapter(BaseClassifierAdapter):
    name = "xgboost"

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        """Initialize XGBoost adapter with configuration."""
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

        xgb_config = getattr(config, 'XGBoost', None)
        self.num_boost_round = getattr(xgb_config, 'num_boost_round', 100)

        self.app_logger.structured_log(logging.INFO, "XGBoostClassifierAdapter initialized successfully",
                                       adapter_type=type(self).__name__,
                                       num_boost_round=self.num_boost_round)

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    def _booster_params(self, hyperparameters: Dict[str, Any], random_state: Optional[int]) -> Dict[str, Any]:
        params = {'objective': 'binary:logistic', 'eval_metric': 'logloss', 'verbosity': 0}
        params.update(hyperparameters)
        params.pop('num_boost_round', None)
        if random_state is not None:
            params['seed'] = random_state
        return params

    @log_performance
    def fit(self, X, y, sample_weight=None, hyperparameters=None, random_state=None,
            feature_names=None) -> TrainedModel:
        hyperparameters = dict(hyperparameters or {})
        num_boost_round = int(hyperparameters.get('num_boost_round', self.num_boost_round))
        params = self._booster_params(hyperparameters, random_state)

        self.app_logger.structured_log(
            logging.DEBUG,
            "Starting XGBoost training",
            input_shape=np.shape(X),
            num_boost_round=num_boost_round,
            weighted=sample_weight is not None
        )

        try:
            dtrain = xgb.DMatrix(
                np.asarray(X, dtype=float),
                label=np.asarray(y, dtype=int),
                weight=None if sample_weight is None else np.asarray(sample_weight, dtype=float)
            )
            booster = xgb.train(params=params, dtrain=dtrain, num_boost_round=num_boost_round)
        except xgb.core.XGBoostError as e:
            raise self.error_handler.create_error_handler(
                'fit_failure',
                "Error in XGBoost training",
                original_error=str(e),
                input_shape=np.shape(X),
                hyperparameters=hyperparameters
            )

        train_margin = booster.predict(dtrain, output_margin=True)
        if not np.all(np.isfinite(train_margin)):
            raise self.error_handler.create_error_handler(
                'fit_divergence',
                "XGBoost produced non-finite margins on the training data",
                hyperparameters=hyperparameters
            )

        return TrainedModel(
            estimator=booster,
            model_name=self.name,
            hyperparameters=hyperparameters,
            feature_names=tuple(feature_names) if feature_names is not None else (),
            n_train_samples=len(y)
        )

    def predict_probabilities(self, model: TrainedModel, X) -> np.ndarray:
        try:
            positive = model.estimator.predict(xgb.DMatrix(np.asarray(X, dtype=float)))
        except xgb.core.XGBoostError as e:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Error predicting with XGBoost",
                original_error=str(e)
            )
        positive = np.asarray(positive, dtype=float)
        return np.column_stack([1.0 - positive, positive])

    def predict_labels(self, model: TrainedModel, X) -> np.ndarray:
        return (self.predict_probabilities(model, X)[:, 1] >= 0.5).astype(int)

    def feature_importances(self, model: TrainedModel) -> Optional[np.ndarray]:
        # Boosters built from numpy name features f0, f1, ...
        scores = model.estimator.get_score(importance_type='gain')
        n_features = model.estimator.num_features()
        return np.array([scores.get(f"f{i}", 0.0) for i in range(n_features)], dtype=float)
