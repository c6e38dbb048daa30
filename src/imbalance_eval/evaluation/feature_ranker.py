import logging
from typing import List, Optional, Sequence
import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.ensemble import RandomForestClassifier
from sklearn.feature_selection import RFE

from imbalance_eval.classifiers.base_classifier_adapter import BaseClassifierAdapter
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import Dataset, EvaluationResult, TrainedModel


class FeatureRanker:
    """Produces feature rankings (best first) and turns ablation results into importance tables."""

    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler

        eval_cfg = getattr(getattr(config, 'core', None), 'evaluation_config', None)
        rfe_cfg = getattr(eval_cfg, 'rfe', None)
        self.rfe_step = getattr(rfe_cfg, 'step', 1)
        self.rfe_n_estimators = getattr(rfe_cfg, 'n_estimators', 100)

        self.app_logger.structured_log(
            logging.INFO,
            "FeatureRanker initialized",
            rfe_step=self.rfe_step,
            rfe_n_estimators=self.rfe_n_estimators
        )

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def rank_rfe(self, train: Dataset, estimator: Optional[BaseEstimator] = None,
                 step: Optional[int] = None, seed: int = 0) -> List[str]:
        """
        Recursive feature elimination down to one feature.

        Args:
            train: Training subset; only it is used for ranking
            estimator: Estimator exposing coef_ or feature_importances_;
                defaults to a random forest
            step: Features removed per iteration
            seed: Random state of the default estimator

        Returns:
            Feature names ordered best first
        """
        if estimator is None:
            estimator = RandomForestClassifier(n_estimators=self.rfe_n_estimators, random_state=seed)

        try:
            selector = RFE(estimator, n_features_to_select=1, step=step or self.rfe_step)
            selector.fit(train.X, train.y)
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Recursive feature elimination failed",
                original_error=str(e),
                estimator=type(estimator).__name__
            )

        # Stable sort keeps schema order among equal ranks
        order = np.argsort(selector.ranking_, kind='stable')
        ranking = [train.feature_names[i] for i in order]

        self.app_logger.structured_log(
            logging.INFO,
            "RFE ranking computed",
            estimator=type(estimator).__name__,
            top_features=ranking[:5]
        )
        return ranking

    def rank_by_importance(self, classifier: BaseClassifierAdapter, model: TrainedModel,
                           feature_names: Optional[Sequence[str]] = None) -> List[str]:
        """Rank by the fitted model's own importances, best first."""
        feature_names = list(feature_names if feature_names is not None else model.feature_names)
        importances = classifier.feature_importances(model)
        if importances is None or len(importances) != len(feature_names):
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Model does not expose one importance per feature",
                model_name=model.model_name,
                n_features=len(feature_names)
            )
        order = np.argsort(-np.asarray(importances), kind='stable')
        return [feature_names[i] for i in order]

    def importance_from_ablation(self, baseline: EvaluationResult, leave_one_out: Sequence[EvaluationResult],
                                 metric: str = 'auc') -> pd.DataFrame:
        """
        Variable importance as the metric drop when a feature is left out.

        Returns:
            DataFrame with feature, baseline, without_feature and drop columns,
            sorted by drop (most important first). Failed runs get a NaN drop.
        """
        if not baseline.succeeded or baseline.metrics is None:
            raise self.error_handler.create_error_handler(
                'reporting',
                "Baseline run for importance did not succeed",
                error=baseline.error
            )
        baseline_features = set(baseline.configuration.feature_names)
        baseline_score = getattr(baseline.metrics, metric)

        rows = []
        for result in leave_one_out:
            dropped = baseline_features - set(result.configuration.feature_names)
            if len(dropped) != 1:
                raise self.error_handler.create_error_handler(
                    'reporting',
                    "Leave-one-out run must drop exactly one baseline feature",
                    run_label=result.configuration.run_label,
                    dropped=sorted(dropped)
                )
            score = getattr(result.metrics, metric) if result.succeeded and result.metrics else None
            rows.append({
                'feature': dropped.pop(),
                'metric': metric,
                'baseline': baseline_score,
                'without_feature': score,
                'drop': baseline_score - score if score is not None and baseline_score is not None else np.nan
            })

        table = pd.DataFrame(rows, columns=['feature', 'metric', 'baseline', 'without_feature', 'drop'])
        return table.sort_values('drop', ascending=False, na_position='last').reset_index(drop=True)
