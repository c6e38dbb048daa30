from abc import ABC, abstractmethod
from typing import Dict, Mapping, Union

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import Dataset, PartitionRequest, PartitionSet


class BasePartitioner(ABC):
    """Abstract base class for train/validate/test partitioners."""

    @abstractmethod
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        pass

    @abstractmethod
    def partition(self,
                  dataset: Dataset,
                  class_counts: Union[PartitionRequest, Mapping[int, Mapping[str, int]]],
                  seed: int) -> PartitionSet:
        """
        Split dataset positions into disjoint train/validate/test index sets.

        Args:
            dataset: Dataset to split (not modified)
            class_counts: label -> {train, validate, test} counts
            seed: Seed for the per-class shuffles

        Returns:
            PartitionSet with pairwise disjoint index arrays
        """
        pass

    @abstractmethod
    def materialize(self, dataset: Dataset, partition_set: PartitionSet) -> Dict[str, Dataset]:
        """Return the named Dataset views for a partition set."""
        pass
