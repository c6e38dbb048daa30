from abc import ABC, abstractmethod

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import Dataset, ScalingProfile


class BasePreprocessor(ABC):
    """
    Abstract base class for preprocessors.

    A preprocessor is fitted on exactly one partition and the resulting
    profile is then applied, unchanged, to every partition.
    """

    @abstractmethod
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        pass

    @abstractmethod
    def fit(self, training_subset: Dataset) -> ScalingProfile:
        """Compute per-feature statistics from the training subset only."""
        pass

    @abstractmethod
    def apply(self, profile: ScalingProfile, subset: Dataset) -> Dataset:
        """Transform any subset with a previously fitted profile."""
        pass
