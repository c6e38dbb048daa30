"""
transcript_loader.py

Turns the transcript feature table into a Dataset: lncRNA rows become the
positive class (1), pcRNA rows the negative class (0). Feature columns must
already be numeric; categorical encoding happens upstream.
"""

import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np
import pandas as pd

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_access.base_data_access import BaseDataAccess
from imbalance_eval.framework.data_classes import NEGATIVE_LABEL, POSITIVE_LABEL, Dataset


class TranscriptLoader:
    def __init__(self, config: BaseConfigManager, data_access: BaseDataAccess,
                 app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        self.config = config
        self.data_access = data_access
        self.app_logger = app_logger
        self.error_handler = error_handler

        data_cfg = config.data
        self.label_column = data_cfg.label_column
        self.id_column = getattr(data_cfg, 'id_column', None)
        self.positive_label = getattr(data_cfg, 'positive_label', 'lncRNA')
        self.negative_label = getattr(data_cfg, 'negative_label', 'pcRNA')
        self.feature_columns = getattr(data_cfg, 'feature_columns', None)

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def load(self, path: Optional[Union[str, Path]] = None) -> Dataset:
        """Load the transcript CSV named in config.data.transcript_file (or path) as a Dataset."""
        path = path or self.config.data.transcript_file
        df = self.data_access.load_dataframe(path)
        dataset = self.to_dataset(df, name=Path(path).stem)

        self.app_logger.structured_log(
            logging.INFO,
            "Transcripts loaded",
            path=str(path),
            n_samples=len(dataset),
            n_features=dataset.n_features,
            class_counts=dataset.class_counts()
        )
        return dataset

    def to_dataset(self, df: pd.DataFrame, name: Optional[str] = None) -> Dataset:
        if self.label_column not in df.columns:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Label column missing from transcript table",
                label_column=self.label_column,
                columns=list(df.columns)
            )

        label_map = {self.positive_label: POSITIVE_LABEL, self.negative_label: NEGATIVE_LABEL}
        labels = df[self.label_column].map(label_map)
        unknown = df.loc[labels.isna(), self.label_column].unique().tolist()
        if unknown:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Unknown transcript class labels",
                unknown_labels=[str(u) for u in unknown[:10]],
                expected=list(label_map.keys())
            )

        id_column = self.id_column if self.id_column in df.columns else None
        if self.feature_columns:
            missing = [c for c in self.feature_columns if c not in df.columns]
            if missing:
                raise self.error_handler.create_error_handler(
                    'data_validation',
                    "Configured feature columns missing from transcript table",
                    missing_columns=missing
                )
            feature_columns = list(self.feature_columns)
        else:
            feature_columns = [c for c in df.columns if c not in (self.label_column, id_column)]

        non_numeric = [c for c in feature_columns if not pd.api.types.is_numeric_dtype(df[c])]
        if non_numeric:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Feature columns must be numeric; encode categorical columns upstream",
                non_numeric_columns=non_numeric
            )

        features = df[feature_columns].to_numpy(dtype=float)
        if not np.all(np.isfinite(features)):
            bad = [c for c in feature_columns if not np.all(np.isfinite(df[c].to_numpy(dtype=float)))]
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Feature columns contain missing or infinite values",
                columns=bad
            )

        ids = df[id_column].astype(str).tolist() if id_column else [str(i) for i in df.index]
        try:
            return Dataset(ids=ids, X=features, y=labels.astype(int).to_numpy(),
                           feature_names=feature_columns, name=name)
        except ValueError as e:
            raise self.error_handler.create_error_handler(
                'data_validation',
                "Transcript table does not form a valid dataset",
                original_error=str(e)
            )
