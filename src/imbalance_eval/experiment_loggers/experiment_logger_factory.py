import logging
from enum import Enum, auto
from typing import Dict, Type

from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from .base_experiment_logger import BaseExperimentLogger
from .mlflow_logger import MLflowLogger


class LoggerType(Enum):
    """Tracking back-ends that can record evaluation runs."""
    MLFLOW = auto()


class ExperimentLoggerFactory:
    """Maps a LoggerType (or its name) to the experiment logger class that records evaluation runs."""

    _loggers: Dict[LoggerType, Type[BaseExperimentLogger]] = {
        LoggerType.MLFLOW: MLflowLogger,
    }

    @classmethod
    def create_logger(cls,
                      logger_type: LoggerType,
                      config: BaseConfigManager,
                      app_logger: BaseAppLogger,
                      error_handler: BaseErrorHandler,
                      app_file_handler: BaseAppFileHandler) -> BaseExperimentLogger:
        """
        Create an experiment logger instance.

        Raises:
            ExperimentLoggerError: If logger_type is not registered
        """
        if isinstance(logger_type, str):
            try:
                logger_type = LoggerType[logger_type.upper()]
            except KeyError:
                raise error_handler.create_error_handler(
                    'experiment_logger',
                    f"Unsupported logger type: {logger_type}"
                )

        logger_class = cls._loggers.get(logger_type)
        if logger_class is None:
            raise error_handler.create_error_handler(
                'experiment_logger',
                f"Unsupported logger type: {logger_type}"
            )

        app_logger.structured_log(
            logging.INFO,
            "Creating experiment logger",
            logger_type=logger_type.name
        )
        return logger_class(
            config=config,
            app_logger=app_logger,
            error_handler=error_handler,
            app_file_handler=app_file_handler
        )

    @classmethod
    def register_logger(cls, logger_type: LoggerType, logger_class: Type[BaseExperimentLogger]) -> None:
        cls._loggers[logger_type] = logger_class
