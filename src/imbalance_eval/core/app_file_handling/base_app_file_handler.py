from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ContextManager, Dict, List, Optional, Union
import pandas as pd

PathLike = Union[str, Path]


class BaseAppFileHandler(ABC):
    """
    File-system access used by the config manager, data access, the
    hyperparameter store and experiment loggers. Components never open files
    themselves.
    """

    @abstractmethod
    def read_yaml(self, path: PathLike) -> Dict[str, Any]:
        pass

    @abstractmethod
    def read_json(self, path: PathLike) -> Any:
        pass

    @abstractmethod
    def write_json(self, data: Any, path: PathLike) -> None:
        pass

    @abstractmethod
    def read_csv(self, path: PathLike) -> pd.DataFrame:
        pass

    @abstractmethod
    def write_csv(self, df: pd.DataFrame, path: PathLike) -> None:
        pass

    @abstractmethod
    def ensure_directory(self, path: PathLike) -> None:
        pass

    @abstractmethod
    def resolve_project_root_path(self, path: str) -> str:
        """Replace a ${PROJECT_ROOT} placeholder with the absolute project root."""
        pass

    @abstractmethod
    def load_yaml_files_in_directory(self, directory: PathLike,
                                     required_files: Optional[List[str]] = None) -> Dict[str, Any]:
        """Merge the top-level keys of every *.yaml file directly inside directory."""
        pass

    @abstractmethod
    def create_temp_directory(self) -> ContextManager[str]:
        """Context manager yielding a scratch directory that is removed on exit."""
        pass
