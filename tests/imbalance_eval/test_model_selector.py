import numpy as np
import pytest

from imbalance_eval.core.error_handling.error_handler import ModelSelectionError
from imbalance_eval.evaluation.model_selector import ModelSelector
from imbalance_eval.framework.data_classes import (
    ClassificationMetrics,
    EvaluationResult,
    RunConfiguration
)


def _result(auc, model_name='m', n_features=3, label='', evaluation_set='validate', repeat=0):
    configuration = RunConfiguration(
        model_name=model_name,
        strategy='none',
        feature_names=tuple(f"f{i}" for i in range(n_features)),
        hyperparameters={'C': auc},
        repeat=repeat,
        evaluation_set=evaluation_set,
        run_label=label
    )
    return EvaluationResult(
        configuration=configuration,
        y_true=np.array([0, 1]),
        predicted_labels=np.array([0, 1]),
        metrics=ClassificationMetrics(accuracy=auc, auc=auc, n_samples=2)
    )


@pytest.fixture
def selector(mock_app_logger, mock_error_handler):
    return ModelSelector(mock_app_logger, mock_error_handler)


def test_select_best_picks_highest_metric(selector):
    results = [_result(0.7, label='a'), _result(0.9, label='b'), _result(0.8, label='c')]
    assert selector.select_best(results, 'auc').configuration.run_label == 'b'


def test_select_best_ties_keep_first(selector):
    results = [_result(0.9, label='first'), _result(0.9, label='second')]
    assert selector.select_best(results).configuration.run_label == 'first'


def test_failed_runs_are_ignored(selector):
    failed = EvaluationResult.failed(_result(0.99).configuration, "FitDivergenceError: nan")
    results = [failed, _result(0.6, label='ok')]
    assert selector.select_best(results).configuration.run_label == 'ok'


def test_no_successful_runs(selector):
    failed = EvaluationResult.failed(_result(0.5).configuration, "boom")
    with pytest.raises(ModelSelectionError):
        selector.select_best([failed])


def test_selection_on_test_results_is_refused(selector):
    results = [_result(0.7), _result(0.9, evaluation_set='test')]
    with pytest.raises(ModelSelectionError, match="validation"):
        selector.select_best(results)


def test_unknown_metric(selector):
    with pytest.raises(ModelSelectionError):
        selector.select_best([_result(0.7)], metric='loss')


def test_select_feature_count_prefers_smaller_set_within_tolerance(selector):
    results = [_result(0.80, n_features=1), _result(0.895, n_features=2), _result(0.90, n_features=4)]
    assert len(selector.select_feature_count(results, tolerance=0.01).configuration.feature_names) == 2
    assert len(selector.select_feature_count(results, tolerance=0.0).configuration.feature_names) == 4


def test_rank_orders_best_first(selector):
    ranked = selector.rank([_result(0.6, label='x'), _result(0.8, label='y')])
    assert [row['run_label'] for row in ranked] == ['y', 'x']
    assert ranked[0]['auc'] == 0.8


def test_select_best_group_uses_mean_over_repeats(selector):
    results = [
        _result(0.95, model_name='spiky', repeat=0),
        _result(0.55, model_name='spiky', repeat=1),
        _result(0.80, model_name='steady', repeat=0),
        _result(0.82, model_name='steady', repeat=1),
    ]
    name, mean = selector.select_best_group(results, 'auc')
    assert name == 'steady'
    assert mean == pytest.approx(0.81)
