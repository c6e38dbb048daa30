"""
End-to-end lncRNA/pcRNA evaluation study.

Steps, all selection decisions on the validation partition:
    1. balanced partition, scaled with training statistics
    2. model comparison with baseline hyperparameters
    3. RFE ranking and top-K feature ablation for the selected model
    4. exhaustive hyperparameter grid on the selected features
    5. imbalance experiment: unbalanced partition under every balancing strategy
    6. leave-one-out variable importance
    7. a single final report on the held-out test partition
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
import pandas as pd

from imbalance_eval.classifiers.base_classifier_adapter import BaseClassifierAdapter
from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.evaluation.base_evaluation_harness import BaseEvaluationHarness
from imbalance_eval.evaluation.feature_ranker import FeatureRanker
from imbalance_eval.evaluation.hyperparams_manager import HyperparamsManager
from imbalance_eval.evaluation.model_selector import ModelSelector
from imbalance_eval.experiment_loggers.base_experiment_logger import BaseExperimentLogger
from imbalance_eval.framework.data_access.base_data_access import BaseDataAccess
from imbalance_eval.framework.data_classes import (
    BalancingPlan,
    BalancingStrategy,
    ClassPartitionCounts,
    Dataset,
    EvaluationResult,
    PartitionRequest
)
from imbalance_eval.partitioning.base_partitioner import BasePartitioner
from imbalance_eval.preprocessing.base_preprocessor import BasePreprocessor
from imbalance_eval.reporting.metrics_reporter import MetricsReporter


class EvaluationWorkflow:
    def __init__(self,
                 config: BaseConfigManager,
                 partitioner: BasePartitioner,
                 preprocessor: BasePreprocessor,
                 harness: BaseEvaluationHarness,
                 reporter: MetricsReporter,
                 classifiers: Dict[str, BaseClassifierAdapter],
                 hyperparameter_manager: HyperparamsManager,
                 feature_ranker: FeatureRanker,
                 model_selector: ModelSelector,
                 data_access: BaseDataAccess,
                 app_logger: BaseAppLogger,
                 error_handler: BaseErrorHandler,
                 experiment_logger: Optional[BaseExperimentLogger] = None):
        self.config = config
        self.partitioner = partitioner
        self.preprocessor = preprocessor
        self.harness = harness
        self.reporter = reporter
        self.classifiers = classifiers
        self.hyperparameter_manager = hyperparameter_manager
        self.feature_ranker = feature_ranker
        self.model_selector = model_selector
        self.data_access = data_access
        self.app_logger = app_logger
        self.error_handler = error_handler
        self.experiment_logger = experiment_logger

        self._eval_cfg = config.core.evaluation_config
        self.seed = getattr(self._eval_cfg, 'random_seed', 0)
        self.metric = getattr(self._eval_cfg, 'selection_metric', 'auc')
        self.repeats = getattr(self._eval_cfg, 'repeats', 1)

        if not classifiers:
            raise self.error_handler.create_error_handler(
                'configuration',
                "No classifiers enabled in config.models"
            )

        self.app_logger.structured_log(
            logging.INFO,
            "EvaluationWorkflow initialized",
            classifiers=list(classifiers.keys()),
            seed=self.seed,
            selection_metric=self.metric
        )

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def run(self, dataset: Dataset) -> Dict[str, pd.DataFrame]:
        """Run every step and return the result tables by name."""
        tables: Dict[str, pd.DataFrame] = {}
        all_results: List[EvaluationResult] = []
        plan = BalancingPlan.none()

        partitions = self.prepare_partitions(dataset, self._balanced_request())
        train, validate, test = partitions['train'], partitions['validate'], partitions['test']

        with self.app_logger.log_context(step='model_comparison'):
            comparison = self.compare_models(train, validate, plan)
        model_name, _ = self.model_selector.select_best_group(comparison, self.metric)
        classifier = self.classifiers[model_name]
        params = self.hyperparameter_manager.get_baseline_params(model_name)
        tables['model_comparison'] = self.reporter.results_table(comparison)
        all_results.extend(comparison)

        with self.app_logger.log_context(step='feature_ablation', model_name=model_name):
            ablation = self.feature_ablation(train, validate, plan, classifier, params)
        chosen = self.model_selector.select_feature_count(
            ablation, self.metric, tolerance=getattr(self._eval_cfg, 'selection_tolerance', 0.0)
        )
        features = list(chosen.configuration.feature_names)
        tables['feature_ablation'] = self.reporter.results_table(ablation)
        all_results.extend(ablation)

        train_sel, validate_sel, test_sel = (p.select_features(features) for p in (train, validate, test))

        if self.hyperparameter_manager.has_grid(model_name):
            with self.app_logger.log_context(step='grid_search', model_name=model_name):
                grid_results = self.harness.run_grid(
                    train_sel, validate_sel, plan, classifier,
                    self.hyperparameter_manager.get_grid(model_name), seed=self.seed
                )
            best = self.model_selector.select_best(grid_results, self.metric)
            params = dict(best.configuration.hyperparameters)
            self.hyperparameter_manager.save_best_params(
                model_name, params, best.metrics.scalar_metrics(), self.metric,
                description=f"grid search on {len(features)} features"
            )
            tables['grid_search'] = self.reporter.results_table(grid_results)
            all_results.extend(grid_results)

        with self.app_logger.log_context(step='imbalance_experiment', model_name=model_name):
            imbalance_results = self.imbalance_experiment(dataset, classifier, params, features)
        tables['imbalance_runs'] = self.reporter.results_table(imbalance_results)
        tables['imbalance_summary'] = self.reporter.aggregate_table(imbalance_results)
        all_results.extend(imbalance_results)

        with self.app_logger.log_context(step='variable_importance', model_name=model_name):
            importance, loo_results = self.variable_importance(train_sel, validate_sel, plan, classifier, params)
        tables['variable_importance'] = importance
        all_results.extend(loo_results)

        with self.app_logger.log_context(step='final_report', model_name=model_name):
            final = self.harness.run(train_sel, test_sel, plan, classifier, params,
                                     repeats=1, seed=self.seed, run_label='final')
        tables['final_test'] = self.reporter.results_table(final)
        tables['final_roc_curve'] = self.reporter.curve_table(final, curve='roc')
        tables['final_pr_curve'] = self.reporter.curve_table(final, curve='pr')
        all_results.extend(final)

        self.app_logger.structured_log(
            logging.INFO,
            "Final held-out report",
            model_name=model_name,
            n_features=len(features),
            hyperparameters=params,
            metrics=final[0].metrics.scalar_metrics() if final[0].succeeded else None,
            confusion_matrix=final[0].confusion_matrix.to_dict() if final[0].succeeded else None
        )

        self.save_tables(tables)
        if self.experiment_logger is not None and getattr(self._eval_cfg, 'log_experiments', False):
            self.experiment_logger.log_results(all_results)
        return tables

    def _balanced_request(self) -> PartitionRequest:
        counts = self._eval_cfg.balanced_partition
        return PartitionRequest.balanced(counts.train, counts.validate, counts.test)

    def _imbalanced_request(self) -> Tuple[PartitionRequest, int, float]:
        imbalance_cfg = self._eval_cfg.imbalance_experiment
        minority = ClassPartitionCounts(
            imbalance_cfg.minority_counts.train,
            imbalance_cfg.minority_counts.validate,
            imbalance_cfg.minority_counts.test
        )
        request = PartitionRequest.from_ratio(
            imbalance_cfg.minority_label, minority, imbalance_cfg.majority_per_minority
        )
        return request, imbalance_cfg.minority_label, imbalance_cfg.majority_per_minority

    def prepare_partitions(self, dataset: Dataset, request: PartitionRequest) -> Dict[str, Dataset]:
        """Partition, then scale every partition with statistics from train only."""
        partition_set = self.partitioner.partition(dataset, request, self.seed)
        raw = self.partitioner.materialize(dataset, partition_set)
        _, scaled = self.preprocessor.fit_apply(raw, fit_on='train')
        return scaled

    def compare_models(self, train: Dataset, validate: Dataset, plan: BalancingPlan) -> List[EvaluationResult]:
        baselines = {name: self.hyperparameter_manager.get_baseline_params(name) for name in self.classifiers}
        return self.harness.run_model_comparison(train, validate, plan, self.classifiers, baselines,
                                                 repeats=self.repeats, seed=self.seed)

    def feature_ablation(self, train: Dataset, validate: Dataset, plan: BalancingPlan,
                         classifier: BaseClassifierAdapter, params: Dict[str, Any]) -> List[EvaluationResult]:
        ranking = self.feature_ranker.rank_rfe(train, seed=self.seed)
        ablation_cfg = getattr(self._eval_cfg, 'ablation', None)
        k_values = getattr(ablation_cfg, 'k_values', None)
        if k_values:
            k_values = [k for k in k_values if k <= train.n_features]
        return self.harness.run_feature_ablation(train, validate, plan, classifier, params, ranking,
                                                 k_values=k_values or None, seed=self.seed)

    def balancing_plans(self, train: Dataset, minority_label: int) -> List[BalancingPlan]:
        """
        One plan per configured strategy for an unbalanced training partition.

        undersample draws the majority class down to the minority count;
        oversample draws the minority class with replacement up to the majority count.
        """
        counts = train.class_counts()
        majority_label = 1 - minority_label
        minority_count, majority_count = counts[minority_label], counts[majority_label]
        strategies = getattr(self._eval_cfg.imbalance_experiment, 'strategies',
                             [s.value for s in BalancingStrategy])

        plans = []
        for name in strategies:
            strategy = BalancingStrategy(name)
            if strategy is BalancingStrategy.UNDERSAMPLE:
                plans.append(BalancingPlan.from_ratio(strategy, minority_label, minority_count, 1.0))
            elif strategy is BalancingStrategy.OVERSAMPLE:
                plans.append(BalancingPlan(strategy, {minority_label: majority_count}))
            else:
                plans.append(BalancingPlan(strategy))
        return plans

    def imbalance_experiment(self, dataset: Dataset, classifier: BaseClassifierAdapter,
                             params: Dict[str, Any], features: List[str]) -> List[EvaluationResult]:
        request, minority_label, ratio = self._imbalanced_request()
        partitions = self.prepare_partitions(dataset.select_features(features), request)
        train, validate = partitions['train'], partitions['validate']

        results = []
        for plan in self.balancing_plans(train, minority_label):
            results.extend(self.harness.run(train, validate, plan, classifier, params,
                                            repeats=self.repeats, seed=self.seed,
                                            run_label=f"ratio_1:{ratio:g}|{plan.describe()}"))
        return results

    def variable_importance(self, train: Dataset, validate: Dataset, plan: BalancingPlan,
                            classifier: BaseClassifierAdapter,
                            params: Dict[str, Any]) -> Tuple[pd.DataFrame, List[EvaluationResult]]:
        if train.n_features < 2:
            return pd.DataFrame(columns=['feature', 'metric', 'baseline', 'without_feature', 'drop']), []
        baseline = self.harness.run(train, validate, plan, classifier, params,
                                    repeats=1, seed=self.seed, run_label='all_features')
        loo_results = self.harness.run_leave_one_out(train, validate, plan, classifier, params, seed=self.seed)
        importance = self.feature_ranker.importance_from_ablation(baseline[0], loo_results, self.metric)
        return importance, baseline + loo_results

    def save_tables(self, tables: Dict[str, pd.DataFrame]) -> None:
        for name, table in tables.items():
            self.data_access.save_dataframe(table, f"{name}.csv")
