from abc import ABC, abstractmethod
from typing import Dict, Sequence

from imbalance_eval.framework.data_classes import (
    ClassificationMetrics,
    ConfusionMatrix,
    EvaluationResult,
    MetricSummary
)


class BaseMetricsReporter(ABC):
    @abstractmethod
    def confusion(self, y_true, y_pred) -> ConfusionMatrix:
        pass

    @abstractmethod
    def summarize(self, result: EvaluationResult) -> ClassificationMetrics:
        pass

    @abstractmethod
    def aggregate(self, metrics: Sequence[ClassificationMetrics]) -> Dict[str, MetricSummary]:
        pass
