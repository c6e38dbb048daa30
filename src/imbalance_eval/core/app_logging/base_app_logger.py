from abc import ABC, abstractmethod
from typing import Callable
import contextlib
import logging

from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager


class BaseAppLogger(ABC):
    """Logging interface injected into every harness component."""

    @abstractmethod
    def __init__(self, config: BaseConfigManager):
        pass

    @abstractmethod
    def setup(self, log_file: str) -> logging.Logger:
        pass

    @abstractmethod
    def structured_log(self, level: int, message: str, **kwargs) -> None:
        """Log message with keyword arguments as structured context."""
        pass

    @abstractmethod
    def log_performance(self, func: Callable) -> Callable:
        pass

    @abstractmethod
    def log_context(self, **kwargs) -> contextlib.AbstractContextManager:
        pass
