"""Fixed-size weight distribution over discrete buckets."""

import numpy as np


class Histogram:
    """
    Non-negative bucket weights.

    Weights only grow through put(); norm() returns the probability-simplex
    form (or a clean zero vector when nothing was put).
    """

    __slots__ = ("weights",)

    def __init__(self, num_buckets: int):
        self.weights = np.zeros(num_buckets, dtype=np.float64)

    @classmethod
    def from_weights(cls, weights) -> "Histogram":
        histogram = cls(len(weights))
        histogram.weights[:] = weights
        return histogram

    def put(self, bucket: int, weight: float) -> None:
        self.weights[bucket] += weight

    def total(self) -> float:
        return float(self.weights.sum())

    def norm(self) -> "Histogram":
        """Normalized copy whose weights sum to 1."""
        total = self.total()
        if total > 0:
            return Histogram.from_weights(self.weights / total)
        return Histogram(len(self))

    def __len__(self) -> int:
        return len(self.weights)

    def __getitem__(self, bucket: int) -> float:
        return float(self.weights[bucket])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return np.array_equal(self.weights, other.weights)

    def __repr__(self) -> str:
        return f"Histogram({np.round(self.weights, 4).tolist()})"
