"""
Class balancing for imbalanced training partitions.

Strategies:
    none        - training subset unchanged, no weights
    weight      - unchanged rows, weight 0.5 / count(class) so both classes total 0.5
    undersample - exact per-class counts drawn without replacement
    oversample  - minority class drawn with replacement to its target,
                  majority class taken as-is or capped to its target

Undersampling and oversampling change the effective number of training
samples; weighting does not.
"""

import logging
from typing import Dict
import numpy as np
from sklearn.utils import resample

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import (
    BINARY_LABELS,
    BalancedTrainingSet,
    BalancingPlan,
    BalancingStrategy,
    Dataset
)
from .base_class_balancer import BaseClassBalancer


class ClassBalancer(BaseClassBalancer):
    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        self.app_logger = app_logger
        self.error_handler = error_handler

        self._strategies = {
            BalancingStrategy.NONE: self._no_balancing,
            BalancingStrategy.WEIGHT: self._weight,
            BalancingStrategy.UNDERSAMPLE: self._undersample,
            BalancingStrategy.OVERSAMPLE: self._oversample,
        }

        self.app_logger.structured_log(
            logging.INFO,
            "ClassBalancer initialized",
            strategies=[s.value for s in self._strategies]
        )

    def balance(self, training_subset: Dataset, plan: BalancingPlan, seed: int) -> BalancedTrainingSet:
        class_counts = training_subset.class_counts()
        missing = [label for label, count in class_counts.items() if count == 0]
        if missing:
            raise self.error_handler.create_error_handler(
                'balancing',
                "Training subset must contain both classes",
                class_counts=class_counts
            )

        balanced = self._strategies[plan.strategy](training_subset, plan, seed)

        self.app_logger.structured_log(
            logging.DEBUG,
            "Training set balanced",
            strategy=plan.strategy.value,
            original_counts=class_counts,
            effective_counts=balanced.class_counts(training_subset.y),
            weighted=balanced.weights is not None,
            seed=seed
        )
        return balanced

    def _no_balancing(self, training_subset: Dataset, plan: BalancingPlan, seed: int) -> BalancedTrainingSet:
        return BalancedTrainingSet(np.arange(len(training_subset)), strategy=plan.strategy)

    def _weight(self, training_subset: Dataset, plan: BalancingPlan, seed: int) -> BalancedTrainingSet:
        counts = training_subset.class_counts()
        weights = np.array([0.5 / counts[label] for label in training_subset.y], dtype=float)
        return BalancedTrainingSet(np.arange(len(training_subset)), weights=weights, strategy=plan.strategy)

    def _undersample(self, training_subset: Dataset, plan: BalancingPlan, seed: int) -> BalancedTrainingSet:
        targets = self._require_targets(plan, BINARY_LABELS)
        random_state = np.random.RandomState(seed)

        drawn = []
        for label in BINARY_LABELS:
            drawn.append(self._draw(training_subset, label, targets[label], replace=False,
                                    random_state=random_state))
        return BalancedTrainingSet(np.concatenate(drawn), strategy=plan.strategy)

    def _oversample(self, training_subset: Dataset, plan: BalancingPlan, seed: int) -> BalancedTrainingSet:
        counts = training_subset.class_counts()
        # Ties resolve to the positive class as minority
        minority = min(BINARY_LABELS, key=lambda label: (counts[label], -label))
        majority = 1 - minority
        targets = self._require_targets(plan, (minority,))
        random_state = np.random.RandomState(seed)

        minority_idx = self._draw(training_subset, minority, targets[minority], replace=True,
                                  random_state=random_state)
        if majority in plan.class_targets:
            majority_idx = self._draw(training_subset, majority, plan.class_targets[majority],
                                      replace=False, random_state=random_state)
        else:
            majority_idx = training_subset.class_indices(majority)

        return BalancedTrainingSet(np.concatenate([minority_idx, majority_idx]), strategy=plan.strategy)

    def _require_targets(self, plan: BalancingPlan, labels) -> Dict[int, int]:
        missing = [label for label in labels if label not in plan.class_targets]
        if missing:
            raise self.error_handler.create_error_handler(
                'balancing',
                f"Balancing strategy '{plan.strategy.value}' needs explicit class targets",
                missing_labels=missing
            )
        return dict(plan.class_targets)

    def _draw(self, training_subset: Dataset, label: int, n_samples: int, replace: bool,
              random_state: np.random.RandomState) -> np.ndarray:
        class_idx = training_subset.class_indices(label)
        if not replace and n_samples > len(class_idx):
            raise self.error_handler.create_error_handler(
                'insufficient_samples',
                "Resampling target exceeds available class members",
                label=label,
                requested=n_samples,
                available=len(class_idx)
            )
        if n_samples == 0:
            return np.array([], dtype=int)
        return np.asarray(
            resample(class_idx, replace=replace, n_samples=n_samples, random_state=random_state),
            dtype=int
        )
