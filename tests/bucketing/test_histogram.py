"""Tests for Histogram."""

import pickle

import numpy as np
import pytest

from src.bucketing.histogram import Histogram


class TestHistogram:
    """Accumulation and normalization."""

    def test_starts_empty(self):
        histogram = Histogram(4)
        assert len(histogram) == 4
        assert histogram.total() == 0.0

    def test_put_accumulates(self):
        histogram = Histogram(3)
        histogram.put(1, 2.0)
        histogram.put(1, 0.5)
        histogram.put(2, 1.0)
        assert histogram[1] == 2.5
        assert histogram.total() == 3.5

    def test_norm_sums_to_one(self):
        histogram = Histogram.from_weights([1.0, 3.0, 0.0, 4.0])
        normalized = histogram.norm()
        assert normalized.total() == pytest.approx(1.0)
        assert normalized[1] == pytest.approx(0.375)

    def test_norm_leaves_original_unchanged(self):
        histogram = Histogram.from_weights([1.0, 1.0])
        histogram.norm()
        assert histogram.total() == 2.0

    def test_norm_of_empty_is_zero(self):
        normalized = Histogram(5).norm()
        assert np.array_equal(normalized.weights, np.zeros(5))

    def test_equality(self):
        assert Histogram.from_weights([0.5, 0.5]) == Histogram.from_weights([0.5, 0.5])
        assert Histogram.from_weights([0.5, 0.5]) != Histogram.from_weights([1.0, 0.0])

    def test_pickle_roundtrip(self):
        histogram = Histogram.from_weights([0.25, 0.75])
        assert pickle.loads(pickle.dumps(histogram)) == histogram
