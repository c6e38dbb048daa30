"""
Centering/scaling preprocessor.

Statistics come from scikit-learn's StandardScaler fitted on the training
partition; the transform itself is computed from the immutable ScalingProfile
so that validation and test data can never influence it.
"""

import logging
from typing import Dict, Tuple
import numpy as np
from sklearn.preprocessing import StandardScaler

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import Dataset, ScalingProfile

from .base_preprocessor import BasePreprocessor


class Preprocessor(BasePreprocessor):
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        """
        Initialize Preprocessor with dependencies.

        Args:
            app_logger: Application logger for structured logging
            error_handler: Error handler for standardized error management
        """
        self.app_logger = app_logger
        self.error_handler = error_handler

        self.app_logger.structured_log(logging.INFO, "Preprocessor initialized")

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def fit(self, training_subset: Dataset) -> ScalingProfile:
        """
        Fit centering/scaling statistics on the training subset.

        Args:
            training_subset: The partition the statistics are computed from

        Returns:
            ScalingProfile with population mean and standard deviation per feature
        """
        self.app_logger.structured_log(
            logging.INFO,
            "Fitting scaling profile",
            partition=training_subset.name,
            input_shape=training_subset.X.shape
        )

        if len(training_subset) == 0:
            raise self.error_handler.create_error_handler(
                'preprocessing',
                "Cannot fit a scaling profile on an empty subset",
                partition=training_subset.name
            )

        try:
            scaler = StandardScaler().fit(training_subset.X)
            stds = np.sqrt(scaler.var_)
            # Constant columns can leave round-off in var_
            stds[np.ptp(training_subset.X, axis=0) == 0] = 0.0
            profile = ScalingProfile(
                feature_names=training_subset.feature_names,
                means=scaler.mean_,
                stds=stds,
                fitted_on=training_subset.name,
                n_samples=len(training_subset)
            )
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'preprocessing',
                "Error fitting scaling profile",
                original_error=str(e),
                input_shape=training_subset.X.shape
            )

        degenerate = profile.degenerate_features()
        if degenerate:
            self.app_logger.structured_log(
                logging.WARNING,
                "Zero-variance features in training subset",
                features=degenerate
            )

        self.app_logger.structured_log(
            logging.INFO,
            "Scaling profile fitted",
            n_features=len(profile.feature_names),
            n_samples=profile.n_samples
        )
        return profile

    @log_performance
    def apply(self, profile: ScalingProfile, subset: Dataset) -> Dataset:
        """
        Apply (x - mean) / std with the fitted profile.

        The subset may carry any subset of the profile's features, in any order.

        Raises:
            DegenerateFeatureError: If a feature's training std is zero
            PreprocessingError: If the subset has features the profile does not know
        """
        unknown = [f for f in subset.feature_names if f not in profile.feature_names]
        if unknown:
            raise self.error_handler.create_error_handler(
                'preprocessing',
                "Subset contains features missing from the scaling profile",
                unknown_features=unknown,
                partition=subset.name
            )

        restricted = profile.restrict(subset.feature_names)
        degenerate = restricted.degenerate_features()
        if degenerate:
            raise self.error_handler.create_error_handler(
                'degenerate_feature',
                "Zero-variance feature cannot be scaled; remove it upstream",
                features=degenerate,
                fitted_on=profile.fitted_on
            )

        scaled = (subset.X - restricted.means) / restricted.stds

        self.app_logger.structured_log(
            logging.DEBUG,
            "Scaling applied",
            partition=subset.name,
            fitted_on=profile.fitted_on,
            output_shape=scaled.shape
        )
        return subset.with_features(scaled)

    def fit_apply(self, partitions: Dict[str, Dataset],
                  fit_on: str = 'train') -> Tuple[ScalingProfile, Dict[str, Dataset]]:
        """Fit on one named partition and apply the same profile to all of them."""
        if fit_on not in partitions:
            raise self.error_handler.create_error_handler(
                'preprocessing',
                "Partition to fit on is missing",
                fit_on=fit_on,
                available=list(partitions.keys())
            )
        profile = self.fit(partitions[fit_on])
        return profile, {name: self.apply(profile, subset) for name, subset in partitions.items()}
