from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Union
import pandas as pd

from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler


class BaseDataAccess(ABC):
    @abstractmethod
    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger,
                 app_file_handler: BaseAppFileHandler, error_handler: BaseErrorHandler):
        pass

    @abstractmethod
    def load_dataframe(self, path: Union[str, Path]) -> pd.DataFrame:
        """Load a single tabular file."""
        pass

    @abstractmethod
    def save_dataframe(self, df: pd.DataFrame, file_name: str,
                       directory: Union[str, Path, None] = None) -> Path:
        """Save a dataframe under the output directory and return its path."""
        pass

    @abstractmethod
    def save_json(self, data: Dict[str, Any], file_name: str,
                  directory: Union[str, Path, None] = None) -> Path:
        """Save a JSON document under the output directory and return its path."""
        pass
