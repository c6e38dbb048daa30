"""
Dependency Injection container for the evaluation harness.
"""

from dependency_injector import containers, providers

from imbalance_eval.core.common_di_container import CommonDIContainer
from imbalance_eval.partitioning.dataset_partitioner import DatasetPartitioner
from imbalance_eval.preprocessing.preprocessor import Preprocessor
from imbalance_eval.balancing.class_balancer import ClassBalancer
from imbalance_eval.classifiers.classifier_factory import ClassifierFactory
from imbalance_eval.reporting.metrics_reporter import MetricsReporter
from imbalance_eval.experiment_loggers.experiment_logger_factory import ExperimentLoggerFactory, LoggerType

from .evaluation_harness import EvaluationHarness
from .feature_ranker import FeatureRanker
from .hyperparams_manager import HyperparamsManager
from .model_selector import ModelSelector


class EvaluationDIContainer(containers.DeclarativeContainer):
    common = providers.Container(CommonDIContainer)

    config = common.config
    app_logger = common.app_logger
    app_file_handler = common.app_file_handler
    error_handler = common.error_handler_factory
    data_access = common.data_access

    partitioner = providers.Singleton(
        DatasetPartitioner,
        app_logger=app_logger,
        error_handler=error_handler
    )

    preprocessor = providers.Singleton(
        Preprocessor,
        app_logger=app_logger,
        error_handler=error_handler
    )

    balancer = providers.Singleton(
        ClassBalancer,
        app_logger=app_logger,
        error_handler=error_handler
    )

    reporter = providers.Singleton(
        MetricsReporter,
        app_logger=app_logger,
        error_handler=error_handler
    )

    classifiers = providers.Factory(
        ClassifierFactory.create_classifiers,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    hyperparameter_manager = providers.Singleton(
        HyperparamsManager,
        config=config,
        app_logger=app_logger,
        app_file_handler=app_file_handler,
        error_handler=error_handler
    )

    harness = providers.Factory(
        EvaluationHarness,
        config=config,
        balancer=balancer,
        reporter=reporter,
        app_logger=app_logger,
        error_handler=error_handler
    )

    feature_ranker = providers.Singleton(
        FeatureRanker,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler
    )

    model_selector = providers.Singleton(
        ModelSelector,
        app_logger=app_logger,
        error_handler=error_handler
    )

    experiment_logger = providers.Factory(
        ExperimentLoggerFactory.create_logger,
        logger_type=LoggerType.MLFLOW,
        config=config,
        app_logger=app_logger,
        error_handler=error_handler,
        app_file_handler=app_file_handler
    )
