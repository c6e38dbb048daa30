import logging
import os
from pathlib import Path
import mlflow

from imbalance_eval.core.app_file_handling.base_app_file_handler import BaseAppFileHandler
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import EvaluationResult
from .base_experiment_logger import BaseExperimentLogger


class MLflowLogger(BaseExperimentLogger):
    def __init__(self,
                 config: BaseConfigManager,
                 app_logger: BaseAppLogger,
                 error_handler: BaseErrorHandler,
                 app_file_handler: BaseAppFileHandler):
        """
        Initialize MLflow logger with dependencies.

        Tracking URI and experiment name come from
        core.evaluation_config.experiment_logging; without a URI runs go to
        a local ./mlruns store.
        """
        super().__init__(config, app_logger, error_handler, app_file_handler)

        eval_cfg = getattr(getattr(config, 'core', None), 'evaluation_config', None)
        logging_cfg = getattr(eval_cfg, 'experiment_logging', None)
        tracking_uri = getattr(logging_cfg, 'tracking_uri', None)
        experiment_name = getattr(logging_cfg, 'experiment_name', 'lncrna_imbalance_eval')

        if tracking_uri:
            mlflow.set_tracking_uri(tracking_uri)
        else:
            mlflow.set_tracking_uri(f"file://{os.path.abspath('mlruns')}")
        mlflow.set_experiment(experiment_name)

        self.app_logger.structured_log(
            logging.INFO,
            "MLflow logger initialized",
            tracking_uri=mlflow.get_tracking_uri(),
            experiment_name=experiment_name
        )

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def log_result(self, result: EvaluationResult) -> None:
        """
        Log one run: configuration as params, scalar metrics as metrics,
        curve points as a JSON artifact.
        """
        configuration = result.configuration
        run_name = f"{configuration.model_name}-{configuration.strategy}-{configuration.run_label or configuration.repeat}"
        try:
            with mlflow.start_run(run_name=run_name):
                self._log_parameters(result)
                mlflow.set_tag("status", result.status.value)
                if result.error:
                    mlflow.set_tag("error", result.error[:500])
                self._log_metrics(result)
                self._log_curves(result)
        except Exception as e:
            raise self.error_handler.create_error_handler(
                'experiment_logger',
                "Error logging evaluation result to MLflow",
                original_error=str(e),
                run_name=run_name
            )

    def _log_parameters(self, result: EvaluationResult) -> None:
        configuration = result.configuration
        mlflow.log_params({
            "model_name": configuration.model_name,
            "strategy": configuration.strategy,
            "evaluation_set": configuration.evaluation_set,
            "repeat": configuration.repeat,
            "seed": configuration.seed,
            "n_features": len(configuration.feature_names),
            "n_train_samples": result.n_train_samples,
            "class_targets": dict(configuration.class_targets),
            "run_label": configuration.run_label
        })
        if configuration.hyperparameters:
            mlflow.log_params({f"hp_{k}": v for k, v in configuration.hyperparameters.items()})

    def _log_metrics(self, result: EvaluationResult) -> None:
        if result.metrics is None:
            return
        for metric_name, value in result.metrics.scalar_metrics().items():
            if value is not None:
                mlflow.log_metric(metric_name, value)
        if result.confusion_matrix is not None:
            for cell, count in result.confusion_matrix.to_dict().items():
                mlflow.log_metric(cell, count)

    def _log_curves(self, result: EvaluationResult) -> None:
        if result.metrics is None or result.metrics.roc_curve is None:
            return
        curves = {
            "roc_curve": result.metrics.roc_curve.points(),
            "pr_curve": result.metrics.pr_curve.points() if result.metrics.pr_curve else None
        }
        with self.app_file_handler.create_temp_directory() as temp_dir:
            curve_path = Path(temp_dir) / "curves.json"
            self.app_file_handler.write_json(curves, curve_path)
            mlflow.log_artifact(str(curve_path), artifact_path="curves")
