import math

import numpy as np
import pytest

from imbalance_eval.core.error_handling.error_handler import ReportingError
from imbalance_eval.framework.data_classes import ClassificationMetrics, EvaluationResult, RunConfiguration
from imbalance_eval.reporting.metrics_reporter import MetricsReporter


@pytest.fixture
def reporter(mock_app_logger, mock_error_handler):
    return MetricsReporter(mock_app_logger, mock_error_handler)


def _result(y_true, labels, positive_scores=None, run_label="", repeat=0, strategy="none"):
    probabilities = None
    if positive_scores is not None:
        positive_scores = np.asarray(positive_scores, dtype=float)
        probabilities = np.column_stack([1 - positive_scores, positive_scores])
    configuration = RunConfiguration("stub", strategy, ("f0",), repeat=repeat,
                                     evaluation_set="validate", run_label=run_label)
    return EvaluationResult(configuration, np.asarray(y_true), np.asarray(labels), probabilities)


def test_confusion_cells_sum_to_n(reporter):
    y_true = [1, 1, 0, 0, 1, 0]
    y_pred = [1, 0, 0, 1, 1, 0]
    cm = reporter.confusion(y_true, y_pred)
    assert (cm.tp, cm.fp, cm.tn, cm.fn) == (2, 1, 2, 1)
    assert cm.total == len(y_true)


def test_summary_metrics(reporter):
    result = _result([1, 1, 1, 1, 0, 0, 0, 0], [1, 1, 1, 0, 0, 0, 0, 1])
    metrics = reporter.summarize(result)

    assert metrics.sensitivity == pytest.approx(0.75)
    assert metrics.specificity == pytest.approx(0.75)
    assert metrics.precision == pytest.approx(0.75)
    assert metrics.f1 == pytest.approx(0.75)
    assert metrics.accuracy == pytest.approx(0.75)
    assert metrics.recall == metrics.sensitivity
    assert metrics.auc is None
    assert metrics.roc_curve is None


def test_f1_is_zero_not_nan_without_true_positives(reporter):
    no_positive_predictions = reporter.summarize(_result([1, 1, 0, 0], [0, 0, 0, 0]))
    only_wrong_positives = reporter.summarize(_result([1, 1, 0, 0], [0, 0, 1, 1]))

    for metrics in (no_positive_predictions, only_wrong_positives):
        assert metrics.precision == 0.0
        assert metrics.sensitivity == 0.0
        assert metrics.f1 == 0.0
        assert not math.isnan(metrics.f1)


def test_roc_is_ratio_invariant_and_pr_is_not(reporter):
    rng = np.random.default_rng(0)
    positive_scores = rng.beta(5, 2, size=500)
    negative_scores = rng.beta(2, 5, size=500)

    # Same underlying score distribution, 500 vs 3000 negatives
    small_scores = np.concatenate([positive_scores, negative_scores])
    small_truth = np.concatenate([np.ones(500), np.zeros(500)]).astype(int)
    large_scores = np.concatenate([positive_scores, np.tile(negative_scores, 6)])
    large_truth = np.concatenate([np.ones(500), np.zeros(3000)]).astype(int)

    small = reporter.summarize(_result(small_truth, (small_scores >= 0.5).astype(int), small_scores))
    large = reporter.summarize(_result(large_truth, (large_scores >= 0.5).astype(int), large_scores))

    np.testing.assert_allclose(small.roc_curve.fpr, large.roc_curve.fpr)
    np.testing.assert_allclose(small.roc_curve.tpr, large.roc_curve.tpr)
    assert small.auc == pytest.approx(large.auc)
    assert small.sensitivity == pytest.approx(large.sensitivity)
    assert small.specificity == pytest.approx(large.specificity)

    assert len(small.pr_curve.precision) == len(large.pr_curve.precision)
    assert not np.allclose(small.pr_curve.precision, large.pr_curve.precision)
    assert large.average_precision < small.average_precision
    assert large.precision < small.precision


def test_single_class_evaluation_set_has_no_auc(reporter):
    metrics = reporter.summarize(_result([1, 1, 1], [1, 0, 1], [0.9, 0.2, 0.8]))
    assert metrics.auc is None
    assert metrics.average_precision is None
    assert metrics.sensitivity == pytest.approx(2 / 3)


def test_failed_run_cannot_be_summarized(reporter):
    failed = EvaluationResult.failed(RunConfiguration("stub", "none", ("f0",)), "diverged")
    with pytest.raises(ReportingError):
        reporter.summarize(failed)


def test_aggregate_mean_and_sample_variance(reporter):
    runs = [ClassificationMetrics(accuracy=a, auc=None) for a in (0.6, 0.8, 1.0)]
    summary = reporter.aggregate(runs)

    assert summary['accuracy'].mean == pytest.approx(0.8)
    assert summary['accuracy'].variance == pytest.approx(0.04)
    assert summary['accuracy'].n == 3
    assert 'auc' not in summary


def test_aggregate_single_run_has_zero_variance(reporter):
    summary = reporter.aggregate([ClassificationMetrics(accuracy=0.7)])
    assert summary['accuracy'].variance == 0.0


def test_aggregate_results_drops_failed_runs(reporter):
    good = reporter.complete(_result([1, 0, 1, 0], [1, 0, 0, 0], [0.9, 0.1, 0.4, 0.3]))
    failed = EvaluationResult.failed(good.configuration, "timeout")
    summary = reporter.aggregate_results([good, failed])
    assert summary['sensitivity'].n == 1
    assert summary['auc'].mean == pytest.approx(1.0)


def test_tables(reporter):
    results = [
        reporter.complete(_result([1, 0, 1, 0], [1, 0, 1, 1], [0.9, 0.1, 0.8, 0.6], repeat=r, strategy=s))
        for r in range(2) for s in ("none", "weight")
    ]
    results_table = reporter.results_table(results)
    assert len(results_table) == 4
    assert {'tp', 'fp', 'tn', 'fn', 'auc', 'status'} <= set(results_table.columns)

    roc = reporter.curve_table(results, curve='roc')
    assert {'fpr', 'tpr', 'thresholds', 'strategy', 'repeat'} <= set(roc.columns)

    pr = reporter.curve_table(results, curve='pr')
    assert {'precision', 'recall', 'thresholds', 'strategy', 'repeat'} <= set(pr.columns)
    per_run = pr[(pr['strategy'] == 'none') & (pr['repeat'] == 0)]
    assert len(per_run) == len(results[0].metrics.pr_curve.precision)
    assert per_run['thresholds'].isna().sum() == 1
    assert per_run['recall'].iloc[-1] == 0.0

    aggregated = reporter.aggregate_table(results)
    accuracy_rows = aggregated[aggregated['metric'] == 'accuracy']
    assert sorted(accuracy_rows['strategy']) == ["none", "weight"]
    assert (accuracy_rows['n'] == 2).all()
    assert (accuracy_rows['mean'] == 0.75).all()


def test_unknown_curve_type(reporter):
    with pytest.raises(ReportingError):
        reporter.curve_table([], curve='lift')
