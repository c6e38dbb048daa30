from abc import ABC, abstractmethod

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import BalancedTrainingSet, BalancingPlan, Dataset


class BaseClassBalancer(ABC):
    """Abstract base class for class balancers."""

    @abstractmethod
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        pass

    @abstractmethod
    def balance(self, training_subset: Dataset, plan: BalancingPlan, seed: int) -> BalancedTrainingSet:
        """
        Produce the effective training set for a balancing plan.

        Args:
            training_subset: Training partition
            plan: Strategy and per-class targets
            seed: Seed for the random draws

        Returns:
            Row positions into training_subset, with per-row weights for the weight strategy
        """
        pass
