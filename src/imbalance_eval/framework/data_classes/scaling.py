"""Data class for centering/scaling statistics."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import numpy as np


@dataclass(frozen=True)
class ScalingProfile:
    """Per-feature (mean, std) pairs fitted on one partition; immutable once built."""
    feature_names: Tuple[str, ...]
    means: np.ndarray
    stds: np.ndarray
    fitted_on: Optional[str] = None
    n_samples: int = 0

    def __post_init__(self):
        means = np.array(self.means, dtype=float, copy=True)
        stds = np.array(self.stds, dtype=float, copy=True)
        if means.shape != (len(self.feature_names),) or stds.shape != means.shape:
            raise ValueError("ScalingProfile statistics must have one value per feature")
        means.flags.writeable = False
        stds.flags.writeable = False
        object.__setattr__(self, 'feature_names', tuple(self.feature_names))
        object.__setattr__(self, 'means', means)
        object.__setattr__(self, 'stds', stds)

    def degenerate_features(self) -> List[str]:
        """Features whose training standard deviation is zero."""
        return [name for name, std in zip(self.feature_names, self.stds) if std == 0]

    def restrict(self, feature_names: Sequence[str]) -> 'ScalingProfile':
        positions = [self.feature_names.index(f) for f in feature_names]
        return ScalingProfile(
            feature_names=tuple(feature_names),
            means=self.means[positions],
            stds=self.stds[positions],
            fitted_on=self.fitted_on,
            n_samples=self.n_samples
        )

    def to_dict(self) -> dict:
        return {
            'fitted_on': self.fitted_on,
            'n_samples': self.n_samples,
            'features': {
                name: {'mean': float(m), 'std': float(s)}
                for name, m, s in zip(self.feature_names, self.means, self.stds)
            }
        }
