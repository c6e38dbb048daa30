"""Data classes for class-balancing plans and their outcome."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional
import numpy as np


class BalancingStrategy(Enum):
    NONE = "none"
    WEIGHT = "weight"
    UNDERSAMPLE = "undersample"
    OVERSAMPLE = "oversample"

    @property
    def resamples(self) -> bool:
        return self in (BalancingStrategy.UNDERSAMPLE, BalancingStrategy.OVERSAMPLE)


@dataclass(frozen=True)
class BalancingPlan:
    """
    Strategy tag plus explicit per-class target sizes.

    class_targets maps label -> number of training samples to draw. It is
    required for undersample, optional for oversample (the majority class is
    then taken as-is) and ignored by none/weight.
    """
    strategy: BalancingStrategy = BalancingStrategy.NONE
    class_targets: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self):
        strategy = self.strategy
        if isinstance(strategy, str):
            strategy = BalancingStrategy(strategy.lower())
            object.__setattr__(self, 'strategy', strategy)
        targets = {int(k): int(v) for k, v in dict(self.class_targets).items()}
        if any(v < 0 for v in targets.values()):
            raise ValueError("Class targets must be non-negative")
        object.__setattr__(self, 'class_targets', targets)

    @classmethod
    def none(cls) -> 'BalancingPlan':
        return cls(BalancingStrategy.NONE)

    @classmethod
    def weighted(cls) -> 'BalancingPlan':
        return cls(BalancingStrategy.WEIGHT)

    @classmethod
    def from_ratio(cls, strategy, minority_label: int, minority_count: int,
                   majority_per_minority: float) -> 'BalancingPlan':
        """Targets {minority: m, majority: round(ratio * m)}."""
        majority_label = 1 - minority_label
        return cls(strategy, {
            minority_label: int(minority_count),
            majority_label: int(round(minority_count * majority_per_minority))
        })

    @property
    def ratio(self) -> Optional[float]:
        """Positive:negative target ratio, None when targets are not explicit."""
        positives = self.class_targets.get(1)
        negatives = self.class_targets.get(0)
        if not positives or not negatives:
            return None
        return positives / negatives

    def describe(self) -> str:
        if not self.class_targets:
            return self.strategy.value
        targets = ",".join(f"{k}:{v}" for k, v in sorted(self.class_targets.items()))
        return f"{self.strategy.value}[{targets}]"


@dataclass(frozen=True)
class BalancedTrainingSet:
    """
    Effective training set: row positions into the training subset, or
    per-row weights over the unchanged subset. Never both.
    """
    indices: np.ndarray
    weights: Optional[np.ndarray] = None
    strategy: BalancingStrategy = BalancingStrategy.NONE

    def __post_init__(self):
        indices = np.array(self.indices, dtype=int, copy=True)
        indices.flags.writeable = False
        object.__setattr__(self, 'indices', indices)
        if self.weights is not None:
            if self.strategy.resamples:
                raise ValueError("A resampled training set cannot also carry weights")
            weights = np.array(self.weights, dtype=float, copy=True)
            if weights.shape != indices.shape:
                raise ValueError("One weight per training sample is required")
            weights.flags.writeable = False
            object.__setattr__(self, 'weights', weights)

    @property
    def n_samples(self) -> int:
        return int(len(self.indices))

    def class_counts(self, y: np.ndarray) -> Dict[int, int]:
        labels = np.asarray(y)[self.indices]
        return {label: int(np.sum(labels == label)) for label in (0, 1)}
