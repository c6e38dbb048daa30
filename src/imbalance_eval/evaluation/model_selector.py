"""
Selection of models, feature counts and hyperparameters.

Selection decisions are only made from results evaluated on the validation
partition; the test partition is reserved for the final report.
"""

import logging
from typing import Any, Dict, List, Sequence, Tuple
import numpy as np

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import SCALAR_METRICS, EvaluationResult

SELECTION_PARTITION = 'validate'


class ModelSelector:
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler,
                 selection_partition: str = SELECTION_PARTITION):
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.selection_partition = selection_partition

    def _candidates(self, results: Sequence[EvaluationResult], metric: str) -> List[EvaluationResult]:
        if metric not in SCALAR_METRICS:
            raise self.error_handler.create_error_handler(
                'model_selection',
                "Unknown selection metric",
                metric=metric,
                available=list(SCALAR_METRICS)
            )

        foreign = sorted({str(r.configuration.evaluation_set) for r in results
                          if r.configuration.evaluation_set != self.selection_partition})
        if foreign:
            raise self.error_handler.create_error_handler(
                'model_selection',
                "Selection is only allowed on validation results",
                expected=self.selection_partition,
                found=foreign
            )

        candidates = [r for r in results
                      if r.succeeded and r.metrics is not None and getattr(r.metrics, metric) is not None]
        if not candidates:
            raise self.error_handler.create_error_handler(
                'model_selection',
                "No successful runs to select from",
                metric=metric,
                n_results=len(results)
            )
        return candidates

    def select_best(self, results: Sequence[EvaluationResult], metric: str = 'auc') -> EvaluationResult:
        """
        Highest-scoring successful run on the selection metric.

        Ties keep the earliest submitted run.

        Raises:
            ModelSelectionError: If any result was evaluated outside the validation partition
        """
        candidates = self._candidates(results, metric)
        best = candidates[0]
        for result in candidates[1:]:
            if getattr(result.metrics, metric) > getattr(best.metrics, metric):
                best = result

        self.app_logger.structured_log(
            logging.INFO,
            "Selected best run",
            metric=metric,
            score=getattr(best.metrics, metric),
            model_name=best.configuration.model_name,
            run_label=best.configuration.run_label,
            n_candidates=len(candidates)
        )
        return best

    def select_feature_count(self, ablation_results: Sequence[EvaluationResult], metric: str = 'auc',
                             tolerance: float = 0.0) -> EvaluationResult:
        """Smallest feature set scoring within tolerance of the best ablation run."""
        candidates = self._candidates(ablation_results, metric)
        best_score = max(getattr(r.metrics, metric) for r in candidates)
        eligible = [r for r in candidates if getattr(r.metrics, metric) >= best_score - tolerance]
        chosen = min(eligible, key=lambda r: len(r.configuration.feature_names))

        self.app_logger.structured_log(
            logging.INFO,
            "Selected feature count",
            metric=metric,
            n_features=len(chosen.configuration.feature_names),
            score=getattr(chosen.metrics, metric),
            best_score=best_score,
            tolerance=tolerance
        )
        return chosen

    def rank(self, results: Sequence[EvaluationResult], metric: str = 'auc') -> List[Dict[str, object]]:
        """Successful validation runs sorted by the metric, best first."""
        candidates = self._candidates(results, metric)
        ordered = sorted(candidates, key=lambda r: getattr(r.metrics, metric), reverse=True)
        return [
            {
                'model_name': r.configuration.model_name,
                'run_label': r.configuration.run_label,
                'hyperparameters': dict(r.configuration.hyperparameters),
                metric: getattr(r.metrics, metric)
            }
            for r in ordered
        ]

    def select_best_group(self, results: Sequence[EvaluationResult], metric: str = 'auc',
                          group_by: str = 'model_name') -> Tuple[Any, float]:
        """
        Configuration group (e.g. model) with the highest mean metric across its repeats.

        Returns:
            (group value, mean score)
        """
        candidates = self._candidates(results, metric)
        scores: Dict[Any, List[float]] = {}
        for result in candidates:
            key = result.to_record()[group_by]
            scores.setdefault(key, []).append(getattr(result.metrics, metric))

        means = {key: float(np.mean(values)) for key, values in scores.items()}
        best_key = max(means, key=means.get)

        self.app_logger.structured_log(
            logging.INFO,
            "Selected best configuration group",
            metric=metric,
            group_by=group_by,
            selected=best_key,
            mean_scores=means
        )
        return best_key, means[best_key]
