from .base_experiment_logger import BaseExperimentLogger
from .mlflow_logger import MLflowLogger
from .experiment_logger_factory import ExperimentLoggerFactory, LoggerType

__all__ = ['BaseExperimentLogger', 'MLflowLogger', 'ExperimentLoggerFactory', 'LoggerType']
