from .dataset import Sample, Dataset, POSITIVE_LABEL, NEGATIVE_LABEL, BINARY_LABELS
from .partition import ClassPartitionCounts, PartitionRequest, PartitionSet, PARTITION_NAMES
from .scaling import ScalingProfile
from .balancing import BalancingStrategy, BalancingPlan, BalancedTrainingSet
from .metrics import (
    ConfusionMatrix,
    RocCurve,
    PrecisionRecallCurve,
    ClassificationMetrics,
    MetricSummary,
    SCALAR_METRICS
)
from .evaluation import RunStatus, RunConfiguration, EvaluationResult
from .trained_model import TrainedModel

__all__ = [
    'Sample', 'Dataset', 'POSITIVE_LABEL', 'NEGATIVE_LABEL', 'BINARY_LABELS',
    'ClassPartitionCounts', 'PartitionRequest', 'PartitionSet', 'PARTITION_NAMES',
    'ScalingProfile',
    'BalancingStrategy', 'BalancingPlan', 'BalancedTrainingSet',
    'ConfusionMatrix', 'RocCurve', 'PrecisionRecallCurve', 'ClassificationMetrics',
    'MetricSummary', 'SCALAR_METRICS',
    'RunStatus', 'RunConfiguration', 'EvaluationResult', 'TrainedModel',
]
