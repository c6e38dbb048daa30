from abc import ABC, abstractmethod
from typing import Sequence

from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import EvaluationResult


class BaseExperimentLogger(ABC):
    """Base class for experiment loggers."""

    def __init__(self,
                 config: BaseConfigManager,
                 app_logger: BaseAppLogger,
                 error_handler: BaseErrorHandler,
                 app_file_handler: BaseAppFileHandler):
        """
        Initialize base experiment logger with dependencies.

        Args:
            config: Configuration manager
            app_logger: Application logger
            error_handler: Error handler
            app_file_handler: Application file handler for managing files
        """
        self.config = config
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.app_file_handler = app_file_handler

    @abstractmethod
    def log_result(self, result: EvaluationResult) -> None:
        """
        Log one evaluation run.

        Args:
            result: Completed or failed evaluation result
        """
        pass

    def log_results(self, results: Sequence[EvaluationResult]) -> None:
        for result in results:
            self.log_result(result)
