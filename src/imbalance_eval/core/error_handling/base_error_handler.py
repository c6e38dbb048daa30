from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger


class BaseErrorHandler(ABC, Exception):
    """
    Exception that records itself through the application logger when raised.

    Keyword arguments become the structured context of the log line and stay
    available on the instance as `context`.
    """

    def __init__(self, message: str, app_logger: BaseAppLogger, log_level: int = logging.ERROR, **kwargs):
        Exception.__init__(self, message)
        self.message = message
        self.app_logger = app_logger
        self.log_level = log_level
        self.additional_info = kwargs
        self.log()

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self.additional_info)

    @abstractmethod
    def log(self) -> None:
        pass
