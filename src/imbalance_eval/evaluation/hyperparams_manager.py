"""
Hyperparameter manager.

- Reads baseline hyperparameters and search grids from the config object
  (configs/hyperparameters/<model>.yaml, loaded by ConfigManager)
- Stores selected parameters in a separate storage directory
- Never modifies the source-controlled config files
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
import logging
from sklearn.model_selection import ParameterGrid

from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler


@dataclass
class HyperparameterSet:
    """A selected set of hyperparameters with the validation metrics that chose it"""
    model_name: str
    params: Dict[str, Any]
    metrics: Dict[str, Optional[float]]
    creation_date: str
    selection_metric: str
    description: Optional[str] = None


def _to_dict(value: Any) -> Any:
    if isinstance(value, SimpleNamespace):
        return {k: _to_dict(v) for k, v in vars(value).items()}
    return value


class HyperparamsManager:
    def __init__(self, config: BaseConfigManager, app_logger: BaseAppLogger,
                 app_file_handler: BaseAppFileHandler, error_handler: BaseErrorHandler):
        """
        Initialize the hyperparameter manager with injected dependencies.

        Args:
            config: Configuration manager (contains baseline hyperparameters and grids)
            app_logger: Application logger
            app_file_handler: File handling utility
            error_handler: Error handling utility
        """
        self.config = config
        self.app_logger = app_logger
        self.app_file_handler = app_file_handler
        self.error_handler = error_handler

        eval_cfg = getattr(getattr(config, 'core', None), 'evaluation_config', None)
        self.storage_dir = Path(getattr(eval_cfg, 'hyperparameter_history_dir', 'hyperparameter_storage'))
        self.current_best_dir = self.storage_dir / "current_best"
        self.history_dir = self.storage_dir / "history"

        self.app_logger.structured_log(
            logging.INFO,
            "HyperparamsManager initialized",
            storage_dir=str(self.storage_dir)
        )

    def _model_section(self, model_name: str) -> Dict[str, Any]:
        hyperparameters = getattr(self.config, 'hyperparameters', None)
        section = getattr(hyperparameters, model_name, None)
        if section is None:
            self.app_logger.structured_log(
                logging.WARNING,
                f"No hyperparameters found for model: {model_name}"
            )
            return {}
        return _to_dict(section)

    def get_baseline_params(self, model_name: str) -> Dict[str, Any]:
        """Baseline parameters from configs/hyperparameters/<model>.yaml, empty if absent."""
        return dict(self._model_section(model_name).get('baseline') or {})

    def get_grid(self, model_name: str) -> List[Dict[str, Any]]:
        """
        Expanded search grid for a model.

        The YAML grid is a mapping of parameter -> list of values; scalars are
        treated as single-value lists. Baseline values fill in parameters the
        grid does not vary.
        """
        grid = self._model_section(model_name).get('grid')
        if not grid:
            raise self.error_handler.create_error_handler(
                'configuration',
                f"No hyperparameter grid configured for {model_name}",
                model_name=model_name
            )
        grid = {k: v if isinstance(v, list) else [v] for k, v in grid.items()}
        baseline = self.get_baseline_params(model_name)
        return [{**baseline, **params} for params in ParameterGrid(grid)]

    def get_current_params(self, model_name: str) -> Dict[str, Any]:
        """Stored best parameters if any, otherwise the baseline."""
        current_best_file = self.current_best_dir / f"{model_name}.json"
        if current_best_file.exists():
            data = self.app_file_handler.read_json(current_best_file)
            self.app_logger.structured_log(
                logging.INFO,
                "Loaded current best parameters from storage",
                model_name=model_name
            )
            return data.get("params", {})
        return self.get_baseline_params(model_name)

    def save_best_params(self, model_name: str, params: Dict[str, Any], metrics: Dict[str, Optional[float]],
                         selection_metric: str, description: Optional[str] = None) -> Path:
        """
        Record selected parameters in the history file and as the current best.

        Returns:
            Path of the current-best JSON file
        """
        param_set = HyperparameterSet(
            model_name=model_name,
            params=dict(params),
            metrics=dict(metrics),
            creation_date=datetime.now().isoformat(),
            selection_metric=selection_metric,
            description=description
        )

        try:
            self.app_file_handler.ensure_directory(self.current_best_dir)
            self.app_file_handler.ensure_directory(self.history_dir)

            history_file = self.history_dir / f"{model_name}_history.json"
            history = self.app_file_handler.read_json(history_file) if history_file.exists() else []
            history.append(asdict(param_set))
            self.app_file_handler.write_json(history, history_file)

            current_best_path = self.current_best_dir / f"{model_name}.json"
            self.app_file_handler.write_json(asdict(param_set), current_best_path)
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'data_storage',
                f"Error saving best parameters for {model_name}",
                original_error=str(e)
            )

        self.app_logger.structured_log(
            logging.INFO,
            "Saved best parameters",
            model_name=model_name,
            file_path=str(current_best_path),
            history_count=len(history)
        )
        return current_best_path

    def has_grid(self, model_name: str) -> bool:
        return bool(self._model_section(model_name).get('grid'))
