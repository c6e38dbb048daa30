from .base_evaluation_harness import BaseEvaluationHarness
from .evaluation_harness import EvaluationHarness
from .feature_ranker import FeatureRanker
from .hyperparams_manager import HyperparamsManager
from .model_selector import ModelSelector

__all__ = [
    'BaseEvaluationHarness',
    'EvaluationHarness',
    'FeatureRanker',
    'HyperparamsManager',
    'ModelSelector'
]
