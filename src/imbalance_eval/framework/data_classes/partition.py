"""Data classes for train/validate/test partitions."""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple
import numpy as np

PARTITION_NAMES = ('train', 'validate', 'test')


@dataclass(frozen=True)
class ClassPartitionCounts:
    """Requested number of samples of one class in each partition."""
    train: int = 0
    validate: int = 0
    test: int = 0

    def __post_init__(self):
        for name in PARTITION_NAMES:
            if getattr(self, name) < 0:
                raise ValueError(f"Partition count for {name} must be non-negative")

    @property
    def total(self) -> int:
        return self.train + self.validate + self.test

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.train, self.validate, self.test)


@dataclass(frozen=True)
class PartitionRequest:
    """Per-class partition sizes; the class ratio of each partition follows from the counts."""
    class_counts: Mapping[int, ClassPartitionCounts] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[int, Mapping[str, int]]) -> 'PartitionRequest':
        return cls({int(label): ClassPartitionCounts(**dict(counts)) for label, counts in mapping.items()})

    @classmethod
    def balanced(cls, train: int, validate: int, test: int) -> 'PartitionRequest':
        """Same per-class counts for both labels."""
        counts = ClassPartitionCounts(train, validate, test)
        return cls({0: counts, 1: counts})

    @classmethod
    def from_ratio(cls, minority_label: int, minority: ClassPartitionCounts,
                   majority_per_minority: float) -> 'PartitionRequest':
        """
        Unbalanced request, e.g. 1:6 -> majority_per_minority=6.

        The majority class gets round(ratio * minority count) in every partition.
        """
        majority_label = 1 - minority_label
        majority = ClassPartitionCounts(*(int(round(c * majority_per_minority)) for c in minority.as_tuple()))
        return cls({minority_label: minority, majority_label: majority})

    def partition_size(self, name: str) -> int:
        return sum(getattr(counts, name) for counts in self.class_counts.values())


@dataclass(frozen=True)
class PartitionSet:
    """
    Disjoint index sets into one Dataset.

    Raises ValueError on construction if any index appears in more than one partition.
    """
    train: np.ndarray
    validate: np.ndarray
    test: np.ndarray
    seed: int = 0

    def __post_init__(self):
        for name in PARTITION_NAMES:
            indices = np.array(getattr(self, name), dtype=int, copy=True)
            indices.flags.writeable = False
            object.__setattr__(self, name, indices)

        for i, first in enumerate(PARTITION_NAMES):
            for second in PARTITION_NAMES[i + 1:]:
                overlap = np.intersect1d(getattr(self, first), getattr(self, second))
                if overlap.size:
                    raise ValueError(
                        f"Partitions {first} and {second} share {overlap.size} indices"
                    )

    def as_dict(self) -> Dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in PARTITION_NAMES}

    def sizes(self) -> Dict[str, int]:
        return {name: int(len(getattr(self, name))) for name in PARTITION_NAMES}
