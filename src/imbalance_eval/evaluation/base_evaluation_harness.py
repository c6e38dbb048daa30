from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from imbalance_eval.classifiers.base_classifier_adapter import BaseClassifierAdapter
from imbalance_eval.framework.data_classes import BalancingPlan, Dataset, EvaluationResult


class BaseEvaluationHarness(ABC):
    """Abstract base class for the balance -> fit -> predict -> report loop."""

    @abstractmethod
    def run(self, train: Dataset, evaluation: Dataset, plan: BalancingPlan,
            classifier: BaseClassifierAdapter, hyperparameters: Optional[Dict[str, Any]] = None,
            repeats: int = 1, seed: int = 0) -> List[EvaluationResult]:
        pass

    @abstractmethod
    def run_feature_ablation(self, train: Dataset, evaluation: Dataset, plan: BalancingPlan,
                             classifier: BaseClassifierAdapter, hyperparameters: Optional[Dict[str, Any]],
                             ranking: Union[Sequence[str], Mapping[str, float]],
                             k_values: Optional[Sequence[int]] = None,
                             ascending: bool = False, seed: int = 0) -> List[EvaluationResult]:
        pass

    @abstractmethod
    def run_leave_one_out(self, train: Dataset, evaluation: Dataset, plan: BalancingPlan,
                          classifier: BaseClassifierAdapter, hyperparameters: Optional[Dict[str, Any]] = None,
                          seed: int = 0) -> List[EvaluationResult]:
        pass

    @abstractmethod
    def run_grid(self, train: Dataset, evaluation: Dataset, plan: BalancingPlan,
                 classifier: BaseClassifierAdapter,
                 grid: Union[Sequence[Dict[str, Any]], Mapping[str, Sequence[Any]]],
                 seed: int = 0) -> List[EvaluationResult]:
        pass
