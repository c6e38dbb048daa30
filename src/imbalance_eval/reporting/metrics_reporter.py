"""
Metrics for binary predictions on an evaluation partition.

Sensitivity, specificity and the ROC curve condition on the true class and do
not move when the class ratio of the evaluation set changes. Precision, F1,
accuracy and the precision-recall curve depend on prevalence and do.
"""

import dataclasses
import logging
from typing import Dict, List, Optional, Sequence
import numpy as np
import pandas as pd
from sklearn.metrics import (
    average_precision_score,
    confusion_matrix,
    precision_recall_curve,
    roc_auc_score,
    roc_curve
)

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import (
    BINARY_LABELS,
    SCALAR_METRICS,
    ClassificationMetrics,
    ConfusionMatrix,
    EvaluationResult,
    MetricSummary,
    PrecisionRecallCurve,
    RocCurve
)
from .base_metrics_reporter import BaseMetricsReporter

GROUP_COLUMNS = ('model_name', 'strategy', 'run_label', 'evaluation_set')


def _ratio(numerator: int, denominator: int) -> float:
    return float(numerator) / denominator if denominator else 0.0


class MetricsReporter(BaseMetricsReporter):
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.app_logger.structured_log(logging.INFO, "MetricsReporter initialized")

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    def confusion(self, y_true, y_pred) -> ConfusionMatrix:
        """Confusion counts with lncRNA (1) as the positive class."""
        y_true = np.asarray(y_true, dtype=int)
        y_pred = np.asarray(y_pred, dtype=int)
        if y_true.shape != y_pred.shape:
            raise self.error_handler.create_error_handler(
                'reporting',
                "True and predicted labels differ in length",
                n_true=len(y_true),
                n_pred=len(y_pred)
            )
        (tn, fp), (fn, tp) = confusion_matrix(y_true, y_pred, labels=list(BINARY_LABELS))
        return ConfusionMatrix(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))

    def summarize(self, result: EvaluationResult) -> ClassificationMetrics:
        """
        Derive every metric for a single run.

        F1 and precision fall back to 0 when undefined. AUC, average precision
        and both curves need predicted probabilities and both classes present
        in the evaluation set; otherwise they are None.
        """
        if not result.succeeded:
            raise self.error_handler.create_error_handler(
                'reporting',
                "Cannot summarize a failed run",
                run=result.configuration.run_label,
                error=result.error
            )
        if len(result.y_true) == 0:
            raise self.error_handler.create_error_handler(
                'reporting',
                "Cannot summarize a run with no evaluated samples",
                run=result.configuration.run_label
            )

        cm = result.confusion_matrix or self.confusion(result.y_true, result.predicted_labels)

        sensitivity = _ratio(cm.tp, cm.tp + cm.fn)
        specificity = _ratio(cm.tn, cm.tn + cm.fp)
        precision = _ratio(cm.tp, cm.tp + cm.fp)
        f1 = 2 * precision * sensitivity / (precision + sensitivity) if precision + sensitivity > 0 else 0.0

        auc = average_precision = None
        roc = pr = None
        probabilities = result.predicted_probabilities
        if probabilities is not None and cm.positives > 0 and cm.negatives > 0:
            scores = np.asarray(probabilities)[:, 1]
            fpr, tpr, roc_thresholds = roc_curve(result.y_true, scores, drop_intermediate=False)
            pr_precision, pr_recall, pr_thresholds = precision_recall_curve(result.y_true, scores)
            roc = RocCurve(fpr=fpr, tpr=tpr, thresholds=roc_thresholds)
            pr = PrecisionRecallCurve(precision=pr_precision, recall=pr_recall, thresholds=pr_thresholds)
            auc = float(roc_auc_score(result.y_true, scores))
            average_precision = float(average_precision_score(result.y_true, scores))

        return ClassificationMetrics(
            accuracy=_ratio(cm.tp + cm.tn, cm.total),
            sensitivity=sensitivity,
            specificity=specificity,
            precision=precision,
            f1=f1,
            balanced_accuracy=(sensitivity + specificity) / 2,
            auc=auc,
            average_precision=average_precision,
            n_samples=cm.total,
            roc_curve=roc,
            pr_curve=pr
        )

    def complete(self, result: EvaluationResult) -> EvaluationResult:
        """Return the result with its confusion matrix and metrics filled in."""
        cm = self.confusion(result.y_true, result.predicted_labels)
        with_cm = dataclasses.replace(result, confusion_matrix=cm)
        return dataclasses.replace(with_cm, metrics=self.summarize(with_cm))

    def aggregate(self, metrics: Sequence[ClassificationMetrics]) -> Dict[str, MetricSummary]:
        """
        Mean and sample variance of each scalar metric across runs.

        Metrics that are None in a run (e.g. AUC without probabilities) are
        left out of that metric's summary. Variance is 0.0 for a single run.
        """
        summaries = {}
        for name in SCALAR_METRICS:
            values = np.array([getattr(m, name) for m in metrics if getattr(m, name) is not None], dtype=float)
            if len(values) == 0:
                continue
            variance = float(np.var(values, ddof=1)) if len(values) > 1 else 0.0
            summaries[name] = MetricSummary(mean=float(np.mean(values)), variance=variance, n=len(values))
        return summaries

    def aggregate_results(self, results: Sequence[EvaluationResult]) -> Dict[str, MetricSummary]:
        """Aggregate successful runs; failed runs are logged and dropped."""
        succeeded = [r for r in results if r.succeeded and r.metrics is not None]
        dropped = len(results) - len(succeeded)
        if dropped:
            self.app_logger.structured_log(
                logging.WARNING,
                "Failed runs excluded from aggregation",
                dropped=dropped,
                kept=len(succeeded)
            )
        return self.aggregate([r.metrics for r in succeeded])

    @log_performance
    def results_table(self, results: Sequence[EvaluationResult]) -> pd.DataFrame:
        """One row per run: configuration, status, confusion counts and scalar metrics."""
        return pd.DataFrame([r.to_record() for r in results])

    @log_performance
    def curve_table(self, results: Sequence[EvaluationResult], curve: str = 'roc') -> pd.DataFrame:
        """Long table of curve points per successful run. curve is 'roc' or 'pr'."""
        if curve not in ('roc', 'pr'):
            raise self.error_handler.create_error_handler(
                'reporting',
                "Unknown curve type",
                curve=curve
            )

        frames: List[pd.DataFrame] = []
        for result in results:
            if not result.succeeded or result.metrics is None:
                continue
            points = result.metrics.roc_curve if curve == 'roc' else result.metrics.pr_curve
            if points is None:
                continue
            frame = pd.DataFrame(points.points())
            frame.insert(0, 'repeat', result.configuration.repeat)
            frame.insert(0, 'run_label', result.configuration.run_label)
            frame.insert(0, 'strategy', result.configuration.strategy)
            frame.insert(0, 'model_name', result.configuration.model_name)
            frames.append(frame)

        if not frames:
            return pd.DataFrame()
        return pd.concat(frames, ignore_index=True)

    @log_performance
    def aggregate_table(self, results: Sequence[EvaluationResult],
                        group_by: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Mean/variance of every metric per configuration group, one row per (group, metric)."""
        group_by = tuple(group_by or GROUP_COLUMNS)
        groups: Dict[tuple, List[EvaluationResult]] = {}
        for result in results:
            record = result.to_record()
            key = tuple(record[column] for column in group_by)
            groups.setdefault(key, []).append(result)

        rows = []
        for key, members in groups.items():
            failed = sum(1 for r in members if not r.succeeded)
            for metric, summary in self.aggregate_results(members).items():
                row = dict(zip(group_by, key))
                row.update({
                    'metric': metric,
                    'mean': summary.mean,
                    'variance': summary.variance,
                    'n': summary.n,
                    'n_failed': failed
                })
                rows.append(row)
        return pd.DataFrame(rows)
