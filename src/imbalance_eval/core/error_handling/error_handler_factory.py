from typing import Dict, Optional, Type
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from .error_handler import (
    ErrorHandler,
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

# Keys used by components when raising through the factory
ERROR_TYPES: Dict[str, Type[ErrorHandler]] = {
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
    'experiment_logger': ExperimentLoggerError,
}


class ErrorHandlerFactory:
    """Builds harness exceptions bound to the shared application logger."""

    def __init__(self, app_logger: BaseAppLogger):
        self.app_logger = app_logger
        self._error_classes = dict(ERROR_TYPES)

    def create_error_handler(self, error_type: str, message: str,
                             log_level: Optional[int] = None, **kwargs) -> ErrorHandler:
        """
        Instantiate (and thereby log) the error registered under error_type.

        The caller raises the returned exception:
            raise self.error_handler.create_error_handler('balancing', "...", label=1)

        Raises:
            ValueError: If error_type is not registered
        """
        try:
            error_class = self._error_classes[error_type]
        except KeyError:
            raise ValueError(
                f"Unknown error type: {error_type}. Valid types are: {', '.join(sorted(self._error_classes))}"
            )

        if log_level is not None:
            kwargs['log_level'] = log_level
        return error_class(message=message, app_logger=self.app_logger, **kwargs)
