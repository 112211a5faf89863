"""Cell values of the accumulator storages."""

from __future__ import annotations

from typing import NamedTuple

__all__ = ("WeightedSum", "Mean", "WeightedMean")


class WeightedSum(NamedTuple):
    """Sum of weights and sum of squared weights."""

    value: float
    variance: float


class Mean(NamedTuple):
    """Running mean of unweighted samples."""

    count: float
    value: float
    sum_of_deltas_squared: float

    @property
    def variance(self) -> float:
        """Sample variance (NaN with fewer than two entries)."""
        if self.count < 2:
            return float("nan")
        return self.sum_of_deltas_squared / (self.count - 1)


class WeightedMean(NamedTuple):
    """Running mean of weighted samples."""

    sum_of_weights: float
    sum_of_weights_squared: float
    value: float
    sum_of_weighted_deltas_squared: float

    @property
    def variance(self) -> float:
        if self.sum_of_weights == 0:
            return float("nan")
        denom = self.sum_of_weights - self.sum_of_weights_squared / self.sum_of_weights
        if not denom > 0:
            return float("nan")
        return self.sum_of_weighted_deltas_squared / denom
