import logging
import time
from types import SimpleNamespace

import numpy as np
import pytest

from imbalance_eval.balancing.class_balancer import ClassBalancer
from imbalance_eval.classifiers.sklearn_classifier_adapter import SKLearnClassifierAdapter
from imbalance_eval.core.error_handling.error_handler import InsufficientSamplesError, ModelTestingError
from imbalance_eval.evaluation.evaluation_harness import EvaluationHarness
from imbalance_eval.framework.data_classes import BalancingPlan, BalancingStrategy, PartitionRequest
from imbalance_eval.partitioning.dataset_partitioner import DatasetPartitioner
from imbalance_eval.preprocessing.preprocessor import Preprocessor
from imbalance_eval.reporting.metrics_reporter import MetricsReporter


def _config(**overrides):
    settings = dict(n_jobs=1, parallel_backend='threading', fit_timeout_seconds=None)
    settings.update(overrides)
    return SimpleNamespace(core=SimpleNamespace(evaluation_config=SimpleNamespace(**settings)))


@pytest.fixture
def reporter(mock_app_logger, mock_error_handler):
    return MetricsReporter(mock_app_logger, mock_error_handler)


@pytest.fixture
def make_harness(mock_app_logger, mock_error_handler, reporter):
    def _make(**overrides):
        return EvaluationHarness(
            _config(**overrides),
            ClassBalancer(mock_app_logger, mock_error_handler),
            reporter,
            mock_app_logger,
            mock_error_handler
        )
    return _make


@pytest.fixture
def splits(dataset_factory):
    train = dataset_factory(120, 40, n_features=4, seed=1, name='train')
    validate = dataset_factory(60, 60, n_features=4, seed=2, name='validate')
    return train, validate


def test_run_repeats_with_incrementing_seeds(make_harness, splits, stub_classifier):
    train, validate = splits
    results = make_harness().run(train, validate, BalancingPlan.none(), stub_classifier,
                                 {'alpha': 1}, repeats=3, seed=10)

    assert [r.configuration.seed for r in results] == [10, 11, 12]
    assert [r.configuration.repeat for r in results] == [0, 1, 2]
    assert [call['random_state'] for call in stub_classifier.fit_calls] == [10, 11, 12]
    for result in results:
        assert result.succeeded
        assert result.configuration.evaluation_set == 'validate'
        assert result.confusion_matrix.total == len(validate)
        assert result.metrics.auc is not None


def test_weight_plan_passes_weights_to_classifier(make_harness, splits, stub_classifier):
    train, validate = splits
    make_harness().run(train, validate, BalancingPlan.weighted(), stub_classifier)

    weights = stub_classifier.fit_calls[0]['sample_weight']
    assert weights is not None
    assert weights[train.y == 0].sum() == pytest.approx(0.5)
    assert weights[train.y == 1].sum() == pytest.approx(0.5)


def test_resampling_changes_effective_training_size(make_harness, splits, stub_classifier):
    train, validate = splits
    harness = make_harness()
    under = harness.run(train, validate, BalancingPlan.from_ratio('undersample', 1, 40, 1.0), stub_classifier)
    over = harness.run(train, validate, BalancingPlan('oversample', {1: 120}), stub_classifier)
    weighted = harness.run(train, validate, BalancingPlan.weighted(), stub_classifier)

    assert under[0].n_train_samples == 80
    assert over[0].n_train_samples == 240
    assert weighted[0].n_train_samples == len(train)
    assert stub_classifier.fit_calls[0]['sample_weight'] is None


def test_runs_are_deterministic(make_harness, splits, stub_classifier_cls):
    train, validate = splits
    plan = BalancingPlan('oversample', {1: 120})
    first = make_harness().run(train, validate, plan, stub_classifier_cls(), repeats=2, seed=4)
    second = make_harness().run(train, validate, plan, stub_classifier_cls(), repeats=2, seed=4)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.predicted_probabilities, b.predicted_probabilities)


def test_parallel_execution_keeps_order_and_results(make_harness, splits, stub_classifier_cls):
    train, validate = splits
    plan = BalancingPlan('oversample', {1: 120})
    serial = make_harness().run(train, validate, plan, stub_classifier_cls(), repeats=4, seed=0)
    parallel = make_harness(n_jobs=2).run(train, validate, plan, stub_classifier_cls(), repeats=4, seed=0)

    assert [r.configuration.seed for r in parallel] == [0, 1, 2, 3]
    for a, b in zip(serial, parallel):
        np.testing.assert_array_equal(a.predicted_labels, b.predicted_labels)


def test_divergence_marks_run_failed_without_aborting_grid(make_harness, splits, reporter, stub_classifier_cls):
    train, validate = splits
    classifier = stub_classifier_cls(diverge_on={'C': 0.1})
    results = make_harness().run_grid(train, validate, BalancingPlan.none(), classifier,
                                      {'C': [0.1, 1.0, 10.0]})

    assert [r.succeeded for r in results] == [False, True, True]
    assert "FitDivergenceError" in results[0].error
    assert results[0].metrics is None
    assert reporter.aggregate_results(results)['accuracy'].n == 2


def test_rejected_hyperparameters_fail_only_their_run(make_harness, splits, mock_app_logger, mock_error_handler):
    train, validate = splits
    tree = SKLearnClassifierAdapter(mock_app_logger, mock_error_handler, model_type='decisiontree')
    results = make_harness().run_grid(train, validate, BalancingPlan.none(), tree, {'max_depth': [0, 3, 5]})

    assert [r.succeeded for r in results] == [False, True, True]
    assert "FitFailureError" in results[0].error
    assert [r.configuration.hyperparameters for r in results[1:]] == [{'max_depth': 3}, {'max_depth': 5}]


def test_incompatible_solver_penalty_fails_only_its_run(make_harness, splits, mock_app_logger, mock_error_handler):
    train, validate = splits
    logistic = SKLearnClassifierAdapter(mock_app_logger, mock_error_handler, model_type='logisticregression')
    grid = [{'C': 1.0}, {'C': 1.0, 'penalty': 'l1'}, {'C': 1.0, 'not_a_parameter': 2}]
    results = make_harness().run_grid(train, validate, BalancingPlan.none(), logistic, grid)

    assert [r.succeeded for r in results] == [True, False, False]
    assert all("FitFailureError" in r.error for r in results[1:])


def test_fit_timeout_marks_run_failed(make_harness, splits, stub_classifier_cls):
    class SlowClassifier(stub_classifier_cls):
        def fit(self, X, y, **kwargs):
            time.sleep(0.5)
            return super().fit(X, y, **kwargs)

    train, validate = splits
    results = make_harness(fit_timeout_seconds=0.05).run(train, validate, BalancingPlan.none(),
                                                         SlowClassifier(), repeats=1)
    assert not results[0].succeeded
    assert "FitTimeoutError" in results[0].error


def test_balancing_errors_abort(make_harness, splits, stub_classifier):
    train, validate = splits
    plan = BalancingPlan(BalancingStrategy.UNDERSAMPLE, {0: 40, 1: 100})
    with pytest.raises(InsufficientSamplesError):
        make_harness().run(train, validate, plan, stub_classifier)


def test_grid_accepts_list_of_dicts(make_harness, splits, stub_classifier):
    train, validate = splits
    grid = [{'C': 1.0}, {'C': 2.0, 'penalty': 'l2'}]
    results = make_harness().run_grid(train, validate, BalancingPlan.none(), stub_classifier, grid, seed=3)

    assert [r.configuration.hyperparameters for r in results] == grid
    assert [r.configuration.run_label for r in results] == ['grid:0', 'grid:1']
    assert all(r.configuration.seed == 3 for r in results)


def test_grid_dict_is_expanded_exhaustively(make_harness, splits, stub_classifier):
    train, validate = splits
    results = make_harness().run_grid(train, validate, BalancingPlan.none(), stub_classifier,
                                      {'a': [1, 2, 3], 'b': ['x', 'y']})
    assert len(results) == 6
    assert len({tuple(sorted(r.configuration.hyperparameters.items())) for r in results}) == 6


def test_empty_grid(make_harness, splits, stub_classifier):
    train, validate = splits
    with pytest.raises(ModelTestingError):
        make_harness().run_grid(train, validate, BalancingPlan.none(), stub_classifier, [])


def test_feature_ablation_uses_top_k_features(make_harness, splits, stub_classifier):
    train, validate = splits
    ranking = ['f2', 'f0', 'f3', 'f1']
    results = make_harness().run_feature_ablation(train, validate, BalancingPlan.none(), stub_classifier,
                                                  {}, ranking)

    assert len(results) == 4
    for k, result in enumerate(results, start=1):
        assert result.configuration.feature_names == tuple(ranking[:k])
        assert result.configuration.run_label == f"top_k:{k}"
    assert stub_classifier.fit_calls[1]['feature_names'] == ('f2', 'f0')


def test_feature_ablation_with_scores(make_harness, splits, stub_classifier):
    train, validate = splits
    rfe_ranks = {'f0': 2, 'f1': 4, 'f2': 1, 'f3': 3}
    results = make_harness().run_feature_ablation(train, validate, BalancingPlan.none(), stub_classifier,
                                                  {}, rfe_ranks, k_values=[2], ascending=True)
    assert [r.configuration.feature_names for r in results] == [('f2', 'f0')]


def test_feature_ablation_rejects_bad_k(make_harness, splits, stub_classifier):
    train, validate = splits
    with pytest.raises(ModelTestingError):
        make_harness().run_feature_ablation(train, validate, BalancingPlan.none(), stub_classifier,
                                            {}, ['f0', 'f1'], k_values=[3])


def test_leave_one_out_drops_each_feature_once(make_harness, splits, stub_classifier):
    train, validate = splits
    results = make_harness().run_leave_one_out(train, validate, BalancingPlan.none(), stub_classifier)

    assert len(results) == train.n_features
    dropped = []
    for result in results:
        features = result.configuration.feature_names
        assert len(features) == train.n_features - 1
        assert len(set(features)) == len(features)
        (missing,) = set(train.feature_names) - set(features)
        dropped.append(missing)
    assert sorted(dropped) == sorted(train.feature_names)


def test_model_comparison_runs_every_classifier(make_harness, splits, stub_classifier_cls):
    train, validate = splits
    classifiers = {'a': stub_classifier_cls('a'), 'b': stub_classifier_cls('b')}
    results = make_harness().run_model_comparison(train, validate, BalancingPlan.none(), classifiers,
                                                  {'a': {'x': 1}}, repeats=2)
    assert [r.configuration.model_name for r in results] == ['a', 'a', 'b', 'b']
    assert results[0].configuration.hyperparameters == {'x': 1}
    assert results[2].configuration.hyperparameters == {}


def test_end_to_end_confusion_matrix_covers_test_partition(make_harness, mock_app_logger,
                                                           mock_error_handler, dataset_factory):
    dataset = dataset_factory(1500, 1500, n_features=5, seed=0)
    partitioner = DatasetPartitioner(mock_app_logger, mock_error_handler)
    preprocessor = Preprocessor(mock_app_logger, mock_error_handler)

    partition_set = partitioner.partition(dataset, PartitionRequest.balanced(500, 500, 500), seed=1)
    raw = partitioner.materialize(dataset, partition_set)
    profile, scaled = preprocessor.fit_apply(raw)

    assert partition_set.sizes() == {'train': 1000, 'validate': 1000, 'test': 1000}
    assert profile.fitted_on == 'train'

    classifier = SKLearnClassifierAdapter(mock_app_logger, mock_error_handler, model_type='logisticregression')
    results = make_harness().run(scaled['train'], scaled['test'], BalancingPlan.none(), classifier, seed=1)
    cm = results[0].confusion_matrix

    assert results[0].succeeded
    assert results[0].configuration.evaluation_set == 'test'
    assert cm.tp + cm.fp + cm.tn + cm.fn == 1000
    assert results[0].metrics.accuracy > 0.8


def test_threaded_parallelism_logs_warning(make_harness, mock_app_logger):
    make_harness(n_jobs=2, parallel_backend='threading')
    levels = [c.args[0] for c in mock_app_logger.structured_log.call_args_list]
    assert logging.WARNING in levels


def test_serial_or_process_backends_do_not_warn(make_harness, mock_app_logger):
    make_harness(n_jobs=1)
    make_harness(n_jobs=2, parallel_backend='loky')
    levels = [c.args[0] for c in mock_app_logger.structured_log.call_args_list]
    assert logging.WARNING not in levels
