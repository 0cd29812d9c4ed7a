"""Tests for the chunked parallel map."""

import multiprocessing as mp

import pytest

from src.utils.parallel import _pool_context, _run_chunk, chunk_range, parallel_map
from tests.test_helpers import failing_chunk, square_chunk


class TestChunkRange:
    """Tests for chunk_range."""

    def test_even_split(self):
        assert chunk_range(6, 3) == [range(0, 3), range(3, 6)]

    def test_short_last_chunk(self):
        assert chunk_range(10, 4) == [range(0, 4), range(4, 8), range(8, 10)]

    def test_empty(self):
        assert chunk_range(0, 4) == []


class TestParallelMap:
    """Tests for parallel_map."""

    def _collect(self, **kwargs):
        results = []
        for chunk, values in parallel_map(square_chunk, 23, shared=1, chunk_size=4, **kwargs):
            assert len(values) == len(chunk)
            results.extend(values)
        return results

    def test_serial(self):
        assert self._collect(num_workers=1) == [i * i + 1 for i in range(23)]

    def test_workers_match_serial(self):
        assert self._collect(num_workers=2) == self._collect(num_workers=1)

    def test_chunks_in_order(self):
        chunks = [chunk for chunk, _ in parallel_map(square_chunk, 10, 0, num_workers=2, chunk_size=3)]
        assert chunks == chunk_range(10, 3)

    @pytest.mark.parametrize("num_workers", [1, 2])
    def test_failure_propagates(self, num_workers):
        with pytest.raises(ValueError, match="bad index 7"):
            list(parallel_map(failing_chunk, 20, shared=7, num_workers=num_workers, chunk_size=3))


class TestWorkerSetup:
    """Worker process plumbing."""

    def test_uninitialized_worker_raises(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            _run_chunk(range(3))

    @pytest.mark.skipif("fork" not in mp.get_all_start_methods(), reason="fork unavailable")
    def test_pool_forks_where_available(self):
        assert _pool_context().get_start_method() == "fork"
