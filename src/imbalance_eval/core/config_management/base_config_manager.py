from abc import ABC, abstractmethod
from pathlib import Path
from types import SimpleNamespace


class BaseConfigManager(ABC):
    """
    Attribute-style access to the YAML configuration tree.

    Top-level keys of the files directly inside the config directory become
    attributes (config.data, config.models); a file in a subdirectory becomes
    a nested namespace named after the directory and file stem
    (configs/core/evaluation_config.yaml -> config.core.evaluation_config).
    """

    @abstractmethod
    def __init__(self, config_dir: Path = None, app_file_handler=None):
        pass

    @abstractmethod
    def get_config(self) -> SimpleNamespace:
        pass
