from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from .base_error_handler import BaseErrorHandler
import logging


class ErrorHandler(BaseErrorHandler):
    """Concrete harness error; exit_code is used by the CLI when the error ends the program."""
    exit_code = 1

    def __init__(self, message: str, app_logger: BaseAppLogger, log_level=logging.ERROR, **kwargs):
        super().__init__(message=message, app_logger=app_logger, log_level=log_level, **kwargs)

    def log(self) -> None:
        self.app_logger.structured_log(
            self.log_level,
            self.message,
            error_type=type(self).__name__,
            **self.context
        )

class ConfigurationError(ErrorHandler):
    """Raised when there's an error in the configuration."""
    exit_code = 2

class DataValidationError(ErrorHandler):
    """Raised when a dataset violates its schema or label contract."""
    exit_code = 3

class DataStorageError(ErrorHandler):
    """Raised when there's an error storing or retrieving data."""
    exit_code = 4

class PartitioningError(ErrorHandler):
    """Raised when a partition request is malformed."""
    exit_code = 5

class InsufficientSamplesError(ErrorHandler):
    """Raised when a partition or resampling request asks for more class members than exist."""
    exit_code = 6

class PreprocessingError(ErrorHandler):
    """Raised when there's an error in the preprocessing process."""
    exit_code = 7

class DegenerateFeatureError(PreprocessingError):
    """Raised when a zero-variance feature reaches scaling."""
    def __init__(self, message, app_logger, log_level=logging.ERROR, **kwargs):
        super().__init__(message=message, app_logger=app_logger, log_level=log_level, **kwargs)

class BalancingError(ErrorHandler):
    """Raised when a balancing plan cannot be applied."""
    exit_code = 8

class FitError(ErrorHandler):
    """Base class for per-run fitting failures that do not abort a sweep."""
    exit_code = 9

class FitDivergenceError(FitError):
    """Raised when the underlying algorithm fails to converge."""
    def __init__(self, message, app_logger, log_level=logging.WARNING, **kwargs):
        super().__init__(message=message, app_logger=app_logger, log_level=log_level, **kwargs)

class FitTimeoutError(FitError):
    """Raised when a fit call exceeds its deadline."""
    def __init__(self, message, app_logger, log_level=logging.WARNING, **kwargs):
        super().__init__(message=message, app_logger=app_logger, log_level=log_level, **kwargs)

class FitFailureError(FitError):
    """Raised when an estimator rejects its hyperparameters or fails while fitting."""
    def __init__(self, message, app_logger, log_level=logging.WARNING, **kwargs):
        super().__init__(message=message, app_logger=app_logger, log_level=log_level, **kwargs)

class ModelTestingError(ErrorHandler):
    """Raised when there's an error in the model testing process."""
    exit_code = 10

class ModelSelectionError(ErrorHandler):
    """Raised when a selection decision would use results from a held-out partition."""
    exit_code = 11

class ReportingError(ErrorHandler):
    """Raised when metrics cannot be computed or aggregated."""
    exit_code = 12

class ExperimentLoggerError(ErrorHandler):
    """Raised when there's an error in the experiment logger process."""
    exit_code = 13
