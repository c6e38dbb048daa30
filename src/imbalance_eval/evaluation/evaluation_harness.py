"""
Evaluation harness.

Every run is one balance -> fit -> predict cycle on an already partitioned
and scaled dataset, followed by metric derivation on the evaluation subset.
Runs are independent: each gets its own index arrays and its own fitted
model, and the shared Dataset objects are read-only, so batches are executed
through joblib. Results keep submission order.

Per-run fitting failures (divergence, timeout) produce a failed
EvaluationResult and the sweep continues. Balancing and data errors abort.
"""

import concurrent.futures
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from joblib import Parallel, delayed
from sklearn.model_selection import ParameterGrid

from imbalance_eval.balancing.base_class_balancer import BaseClassBalancer
from imbalance_eval.classifiers.base_classifier_adapter import BaseClassifierAdapter
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.core.error_handling.error_handler import FitError
from imbalance_eval.framework.data_classes import (
    BalancingPlan,
    Dataset,
    EvaluationResult,
    RunConfiguration,
    TrainedModel
)
from imbalance_eval.reporting.base_metrics_reporter import BaseMetricsReporter
from .base_evaluation_harness import BaseEvaluationHarness

RunJob = Tuple[Dataset, Dataset, BalancingPlan, BaseClassifierAdapter, RunConfiguration]


class EvaluationHarness(BaseEvaluationHarness):
    def __init__(self,
                 config: BaseConfigManager,
                 balancer: BaseClassBalancer,
                 reporter: BaseMetricsReporter,
                 app_logger: BaseAppLogger,
                 error_handler: BaseErrorHandler):
        """
        Initialize the EvaluationHarness with injected dependencies.

        Args:
            config: Configuration manager; reads n_jobs, parallel_backend and
                fit_timeout_seconds from core.evaluation_config
            balancer: Class balancer applied to the training subset of every run
            reporter: Metrics reporter used to complete each result
            app_logger: Application logger
            error_handler: Error handling utility
        """
        self.config = config
        self.balancer = balancer
        self.reporter = reporter
        self.app_logger = app_logger
        self.error_handler = error_handler

        eval_cfg = getattr(getattr(config, 'core', None), 'evaluation_config', None)
        self.n_jobs = getattr(eval_cfg, 'n_jobs', 1)
        self.parallel_backend = getattr(eval_cfg, 'parallel_backend', 'threading')
        self.fit_timeout_seconds = getattr(eval_cfg, 'fit_timeout_seconds', None)

        self.app_logger.structured_log(
            logging.INFO,
            "EvaluationHarness initialized",
            n_jobs=self.n_jobs,
            parallel_backend=self.parallel_backend,
            fit_timeout_seconds=self.fit_timeout_seconds
        )
        if self.n_jobs != 1 and self.parallel_backend == 'threading':
            # warnings filters are process-global, so concurrent fits share them
            self.app_logger.structured_log(
                logging.WARNING,
                "Threaded runs share one warnings filter; convergence warnings may be missed or misattributed",
                n_jobs=self.n_jobs,
                parallel_backend=self.parallel_backend
            )

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def run(self, train, evaluation, plan, classifier, hyperparameters=None,
            repeats=1, seed=0, run_label='', feature_names=None) -> List[EvaluationResult]:
        """
        Repeat one configuration with seeds seed, seed + 1, ..., seed + repeats - 1.

        Args:
            train: Scaled training subset
            evaluation: Scaled validate or test subset
            plan: Balancing plan applied to train on every repeat
            classifier: Adapter to fit
            hyperparameters: Passed unchanged to the adapter
            repeats: Number of repeats
            seed: Base seed
            run_label: Free-form label carried into every result
            feature_names: Optional feature subset; defaults to the full schema

        Returns:
            One EvaluationResult per repeat
        """
        if repeats < 1:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Number of repeats must be at least 1",
                repeats=repeats
            )
        features = tuple(feature_names) if feature_names is not None else train.feature_names
        jobs = [
            self._job(train, evaluation, plan, classifier, hyperparameters, features,
                      repeat=repeat, seed=seed + repeat, run_label=run_label)
            for repeat in range(repeats)
        ]
        return self._execute(jobs, sweep='repeats')

    @log_performance
    def run_model_comparison(self, train, evaluation, plan, classifiers: Dict[str, BaseClassifierAdapter],
                             hyperparameters: Optional[Dict[str, Dict[str, Any]]] = None,
                             repeats=1, seed=0) -> List[EvaluationResult]:
        """Evaluate every adapter under the same plan, data and seeds."""
        hyperparameters = hyperparameters or {}
        jobs = []
        for name, classifier in classifiers.items():
            for repeat in range(repeats):
                jobs.append(self._job(train, evaluation, plan, classifier, hyperparameters.get(name, {}),
                                      train.feature_names, repeat=repeat, seed=seed + repeat,
                                      run_label=f"model:{name}"))
        return self._execute(jobs, sweep='model_comparison')

    @log_performance
    def run_feature_ablation(self, train, evaluation, plan, classifier, hyperparameters, ranking,
                             k_values=None, ascending=False, seed=0) -> List[EvaluationResult]:
        """
        One run per K, trained on the K best-ranked features.

        ranking is either a sequence of feature names ordered best first, or a
        mapping of feature name to score sorted descending (ascending=True for
        scores where lower is better, e.g. RFE ranks).
        """
        ordered = self._order_ranking(train, ranking, ascending)
        if k_values is None:
            k_values = range(1, len(ordered) + 1)
        k_values = [int(k) for k in k_values]
        invalid = [k for k in k_values if not 1 <= k <= len(ordered)]
        if invalid:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Ablation K values must lie between 1 and the number of ranked features",
                invalid_k=invalid,
                n_ranked=len(ordered)
            )

        jobs = [
            self._job(train, evaluation, plan, classifier, hyperparameters, ordered[:k],
                      seed=seed, run_label=f"top_k:{k}")
            for k in k_values
        ]
        return self._execute(jobs, sweep='feature_ablation')

    @log_performance
    def run_leave_one_out(self, train, evaluation, plan, classifier, hyperparameters=None,
                          seed=0) -> List[EvaluationResult]:
        """One run per feature, each trained on every feature except that one."""
        if train.n_features < 2:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Leave-one-out needs at least two features",
                n_features=train.n_features
            )
        jobs = []
        for dropped in train.feature_names:
            kept = tuple(f for f in train.feature_names if f != dropped)
            jobs.append(self._job(train, evaluation, plan, classifier, hyperparameters, kept,
                                  seed=seed, run_label=f"drop:{dropped}"))
        return self._execute(jobs, sweep='leave_one_out')

    @log_performance
    def run_grid(self, train, evaluation, plan, classifier, grid, seed=0) -> List[EvaluationResult]:
        """
        Exhaustive grid: one run per hyperparameter combination, no pruning.

        grid is a list of parameter dicts or a dict of value lists.
        """
        if isinstance(grid, Mapping):
            combinations = list(ParameterGrid(dict(grid)))
        else:
            combinations = [dict(params) for params in grid]
        if not combinations:
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Hyperparameter grid is empty",
                classifier=classifier.name
            )

        jobs = [
            self._job(train, evaluation, plan, classifier, params, train.feature_names,
                      seed=seed, run_label=f"grid:{i}")
            for i, params in enumerate(combinations)
        ]
        return self._execute(jobs, sweep='grid')

    def _order_ranking(self, train: Dataset, ranking: Union[Sequence[str], Mapping[str, float]],
                       ascending: bool) -> List[str]:
        if isinstance(ranking, Mapping):
            ordered = sorted(ranking, key=lambda name: ranking[name], reverse=not ascending)
        else:
            ordered = list(ranking)
        unknown = [f for f in ordered if f not in train.feature_names]
        if unknown or len(set(ordered)) != len(ordered):
            raise self.error_handler.create_error_handler(
                'model_testing',
                "Ranking must list distinct features of the training schema",
                unknown_features=unknown
            )
        return ordered

    def _job(self, train, evaluation, plan, classifier, hyperparameters, feature_names,
             repeat=0, seed=0, run_label='') -> RunJob:
        configuration = RunConfiguration(
            model_name=classifier.name,
            strategy=plan.strategy.value,
            feature_names=tuple(feature_names),
            hyperparameters=dict(hyperparameters or {}),
            class_targets=dict(plan.class_targets),
            repeat=repeat,
            seed=seed,
            evaluation_set=evaluation.name,
            run_label=run_label
        )
        return train, evaluation, plan, classifier, configuration

    def _execute(self, jobs: Sequence[RunJob], sweep: str) -> List[EvaluationResult]:
        self.app_logger.structured_log(
            logging.INFO,
            "Starting evaluation batch",
            sweep=sweep,
            n_runs=len(jobs),
            n_jobs=self.n_jobs
        )

        results = Parallel(n_jobs=self.n_jobs, backend=self.parallel_backend)(
            delayed(self._run_single)(*job) for job in jobs
        )

        failed = [r.configuration.run_label or r.configuration.repeat for r in results if not r.succeeded]
        self.app_logger.structured_log(
            logging.WARNING if failed else logging.INFO,
            "Evaluation batch finished",
            sweep=sweep,
            n_runs=len(results),
            n_failed=len(failed),
            failed_runs=failed
        )
        return list(results)

    def _run_single(self, train: Dataset, evaluation: Dataset, plan: BalancingPlan,
                    classifier: BaseClassifierAdapter, configuration: RunConfiguration) -> EvaluationResult:
        if configuration.feature_names != train.feature_names:
            train = train.select_features(configuration.feature_names)
        if configuration.feature_names != evaluation.feature_names:
            evaluation = evaluation.select_features(configuration.feature_names)

        balanced = self.balancer.balance(train, plan, configuration.seed)

        try:
            model = self._fit(classifier, train.X[balanced.indices], train.y[balanced.indices],
                              balanced.weights, configuration)
        except FitError as e:
            return EvaluationResult.failed(configuration, f"{type(e).__name__}: {e.message}")

        result = EvaluationResult(
            configuration=configuration,
            y_true=evaluation.y,
            predicted_labels=classifier.predict_labels(model, evaluation.X),
            predicted_probabilities=classifier.predict_probabilities(model, evaluation.X),
            n_train_samples=balanced.n_samples
        )
        return self.reporter.complete(result)

    def _fit(self, classifier: BaseClassifierAdapter, X, y, sample_weight,
             configuration: RunConfiguration) -> TrainedModel:
        fit_kwargs = dict(
            sample_weight=sample_weight,
            hyperparameters=dict(configuration.hyperparameters),
            random_state=configuration.seed,
            feature_names=configuration.feature_names
        )
        if not self.fit_timeout_seconds:
            return classifier.fit(X, y, **fit_kwargs)

        # The worker thread cannot be killed; a timed-out fit finishes in the background
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        future = executor.submit(classifier.fit, X, y, **fit_kwargs)
        try:
            return future.result(timeout=self.fit_timeout_seconds)
        except concurrent.futures.TimeoutError:
            raise self.error_handler.create_error_handler(
                'fit_timeout',
                "Model fit exceeded its deadline",
                model_name=configuration.model_name,
                timeout_seconds=self.fit_timeout_seconds,
                run_label=configuration.run_label
            )
        finally:
            executor.shutdown(wait=False)
