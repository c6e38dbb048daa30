"""
csv_data_access.py

Concrete implementation of BaseDataAccess that reads the transcript table and
writes result tables as CSV files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union
import pandas as pd

from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from .base_data_access import BaseDataAccess

DEFAULT_OUTPUT_DIR = "outputs"


class CSVDataAccess(BaseDataAccess):
    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger,
                 app_file_handler: BaseAppFileHandler, error_handler: BaseErrorHandler):
        """
        Initialize the DataAccess object with the given configuration and logger.

        Args:
            config (BaseConfigManager): The configuration object.
            app_logger (BaseAppLogger): The logger object.
            app_file_handler (BaseAppFileHandler): The file handler object.
            error_handler: Error handler factory.
        """
        self.config = config
        self.app_logger = app_logger
        self.app_file_handler = app_file_handler
        self.error_handler = error_handler

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    def _output_directory(self, directory: Union[str, Path, None]) -> Path:
        if directory is not None:
            return Path(directory)
        evaluation_cfg = getattr(getattr(self.config, 'core', None), 'evaluation_config', None)
        return Path(getattr(evaluation_cfg, 'output_dir', DEFAULT_OUTPUT_DIR))

    @log_performance
    def load_dataframe(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Load a CSV file into a dataframe.

        Raises:
            DataStorageError: If the file is missing or unreadable.
        """
        try:
            df = self.app_file_handler.read_csv(path)
            self.app_logger.structured_log(logging.INFO, "Data loaded successfully",
                                           path=str(path), shape=df.shape)
            return df
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                f"Error loading dataframe: {str(e)}",
                path=str(path)
            )

    @log_performance
    def save_dataframe(self, df: pd.DataFrame, file_name: str,
                       directory: Union[str, Path, None] = None) -> Path:
        try:
            save_dir = self._output_directory(directory)
            self.app_file_handler.ensure_directory(save_dir)
            save_path = save_dir / file_name
            self.app_file_handler.write_csv(df, save_path)
            self.app_logger.structured_log(logging.INFO, "Dataframe saved successfully",
                                           path=str(save_path), rows=len(df))
            return save_path
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                f"Error saving dataframe: {str(e)}",
                file_name=file_name
            )

    @log_performance
    def save_json(self, data: Dict[str, Any], file_name: str,
                  directory: Union[str, Path, None] = None) -> Path:
        try:
            save_dir = self._output_directory(directory)
            self.app_file_handler.ensure_directory(save_dir)
            save_path = save_dir / file_name
            self.app_file_handler.write_json(data, save_path)
            self.app_logger.structured_log(logging.INFO, "JSON saved successfully",
                                           path=str(save_path))
            return save_path
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                f"Error saving json: {str(e)}",
                file_name=file_name
            )
