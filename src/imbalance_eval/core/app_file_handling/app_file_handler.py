from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional
import json
import tempfile
import pandas as pd
import yaml

from .base_app_file_handler import BaseAppFileHandler, PathLike

PROJECT_ROOT = Path(__file__).parents[4]
PROJECT_ROOT_PLACEHOLDER = "${PROJECT_ROOT}"


def _existing(path: PathLike, kind: str) -> Path:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")
    return path


class LocalAppFileHandler(BaseAppFileHandler):
    def read_yaml(self, path: PathLike) -> Dict[str, Any]:
        with open(_existing(path, "YAML"), 'r') as f:
            return yaml.safe_load(f)

    def read_json(self, path: PathLike) -> Any:
        with open(_existing(path, "JSON"), 'r') as f:
            return json.load(f)

    def write_json(self, data: Any, path: PathLike) -> None:
        # numpy scalars and Paths are written through str()
        with open(Path(path), 'w') as f:
            json.dump(data, f, indent=2, default=str)

    def read_csv(self, path: PathLike) -> pd.DataFrame:
        return pd.read_csv(_existing(path, "CSV"))

    def write_csv(self, df: pd.DataFrame, path: PathLike) -> None:
        df.to_csv(Path(path), index=False)

    def ensure_directory(self, path: PathLike) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def resolve_project_root_path(self, path: str) -> str:
        return path.replace(PROJECT_ROOT_PLACEHOLDER, str(PROJECT_ROOT))

    def load_yaml_files_in_directory(self, directory: PathLike,
                                     required_files: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: If any of required_files is missing from directory
        """
        directory = Path(directory)
        missing = [name for name in required_files or [] if not (directory / name).exists()]
        if missing:
            raise FileNotFoundError(f"Required config files not found: {', '.join(missing)}")

        merged: Dict[str, Any] = {}
        for config_file in sorted(directory.glob('*.yaml')):
            merged.update(self.read_yaml(config_file) or {})
        return merged

    @contextmanager
    def create_temp_directory(self) -> Iterator[str]:
        with tempfile.TemporaryDirectory(prefix="imbalance_eval_") as temp_dir:
            yield temp_dir
