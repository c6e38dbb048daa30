"""
Configuration manager for the evaluation harness.

Reads configs/app_config.yaml (required) and every other YAML file under the
config directory into one SimpleNamespace tree. ${PROJECT_ROOT} in string
values is resolved to the absolute project root.
"""

from pathlib import Path
from types import SimpleNamespace
import logging
from typing import Any, Dict

from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from .base_config_manager import BaseConfigManager

logger = logging.getLogger(__name__)

REQUIRED_FILES = ['app_config.yaml']


class ConfigManager(BaseConfigManager):
    def __init__(self, config_dir: Path = None, app_file_handler: BaseAppFileHandler = None):
        self.app_file_handler = app_file_handler
        self.config_dir = Path(config_dir) if config_dir is not None else self._default_config_dir()
        for key, value in vars(self._to_namespace(self._read_tree())).items():
            setattr(self, key, value)

    def _default_config_dir(self) -> Path:
        """Directory named in config_path.yaml next to this module, else <project root>/configs."""
        pointer = Path(__file__).parent / 'config_path.yaml'
        try:
            configured = self.app_file_handler.read_yaml(pointer)['default_config_dir']
            return Path(self.app_file_handler.resolve_project_root_path(configured))
        except (OSError, KeyError, TypeError) as e:
            logger.warning(f"Could not read {pointer.name} ({e}); using <project root>/configs")
            return Path(__file__).parents[4] / 'configs'

    def get_config(self) -> SimpleNamespace:
        return self

    def _read_tree(self) -> Dict[str, Any]:
        logger.debug(f"Loading configuration from {self.config_dir}")
        tree = self.app_file_handler.load_yaml_files_in_directory(self.config_dir, required_files=REQUIRED_FILES)

        for path in sorted(self.config_dir.rglob('*.yaml')):
            if path.parent == self.config_dir:
                continue
            node = tree
            for part in path.relative_to(self.config_dir).parent.parts:
                if not isinstance(node.get(part), dict):
                    node[part] = {}
                node = node[part]
            node[path.stem] = _merge(node.get(path.stem, {}), self.app_file_handler.read_yaml(path) or {})
        return tree

    def _to_namespace(self, value: Any) -> Any:
        if isinstance(value, dict):
            return SimpleNamespace(**{str(k): self._to_namespace(v) for k, v in value.items()})
        if isinstance(value, list):
            return [self._to_namespace(v) for v in value]
        if isinstance(value, str):
            return self.app_file_handler.resolve_project_root_path(value)
        return value


def _merge(base: Any, override: Any) -> Any:
    """Recursive dict merge; override wins on conflicts."""
    if not isinstance(base, dict) or not isinstance(override, dict):
        return override
    merged = dict(base)
    for key, value in override.items():
        merged[key] = _merge(merged[key], value) if key in merged else value
    return merged
