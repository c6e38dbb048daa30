from .base_classifier_adapter import BaseClassifierAdapter
from .sklearn_classifier_adapter import SKLearnClassifierAdapter
from .xgboost_classifier_adapter import XGBoostClassifierAdapter
from .classifier_factory import ClassifierFactory, ClassifierType

__all__ = [
    'BaseClassifierAdapter',
    'SKLearnClassifierAdapter',
    'XGBoostClassifierAdapter',
    'ClassifierFactory',
    'ClassifierType'
]
