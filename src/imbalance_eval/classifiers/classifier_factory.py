from enum import Enum
from typing import Dict, Type

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from .base_classifier_adapter import BaseClassifierAdapter
from .sklearn_classifier_adapter import SKLearnClassifierAdapter
from .xgboost_classifier_adapter import XGBoostClassifierAdapter


class ClassifierType(Enum):
    XGBOOST = "xgboost"
    SKLEARN = "sklearn"


class ClassifierFactory:
    _adapter_map: Dict[ClassifierType, Type[BaseClassifierAdapter]] = {
        ClassifierType.XGBOOST: XGBoostClassifierAdapter,
        ClassifierType.SKLEARN: SKLearnClassifierAdapter,
    }

    @classmethod
    def create_classifier(cls, model_name: str, config: BaseConfigManager, app_logger: BaseAppLogger,
                          error_handler: BaseErrorHandler) -> BaseClassifierAdapter:
        """Create one adapter from a model name such as 'sklearn_svm' or 'xgboost'."""
        model_name = model_name.lower()
        if model_name.startswith('sklearn_'):
            return cls._adapter_map[ClassifierType.SKLEARN](
                app_logger,
                error_handler,
                model_type=model_name.replace('sklearn_', '')
            )
        try:
            classifier_type = ClassifierType(model_name)
        except ValueError:
            raise error_handler.create_error_handler(
                'configuration',
                "Unsupported model type",
                model_name=model_name
            )
        return cls._adapter_map[classifier_type](config, app_logger, error_handler)

    @classmethod
    def create_classifiers(cls, config: BaseConfigManager, app_logger: BaseAppLogger,
                           error_handler: BaseErrorHandler) -> Dict[str, BaseClassifierAdapter]:
        """Creates adapters for every model enabled in configuration, keyed by adapter name."""
        classifiers = {}
        for model_name in vars(config.models):
            if getattr(config.models, model_name):
                adapter = cls.create_classifier(model_name, config, app_logger, error_handler)
                classifiers[adapter.name] = adapter
        return classifiers
