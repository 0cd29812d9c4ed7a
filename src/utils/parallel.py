"""
Chunked parallel map over an index range.

Each chunk is an independent unit of work that owns its scratch state and
returns results addressed by index, so execution order never matters. Shared
read-only inputs are sent once per worker process through the pool
initializer instead of once per chunk.

Workers are forked where the platform allows it, so per-process caches
built in the parent (the canonical indexers) are inherited instead of
rebuilt in every worker.

A failing chunk re-raises in the parent and cancels the rest of the batch:
a partially built table is never returned.
"""

import logging
import multiprocessing as mp
from collections.abc import Callable, Iterator
from concurrent.futures import ProcessPoolExecutor
from typing import Any, TypeVar

from tqdm import tqdm

logger = logging.getLogger(__name__)

R = TypeVar("R")

_WORKER_TASK: Callable[[range, Any], Any] | None = None
_WORKER_SHARED: Any = None


def _pool_context():
    """Fork context where available, else the platform default."""
    if "fork" in mp.get_all_start_methods():
        return mp.get_context("fork")
    return None


def _init_worker(task: Callable[[range, Any], Any], shared: Any) -> None:
    global _WORKER_TASK, _WORKER_SHARED
    _WORKER_TASK = task
    _WORKER_SHARED = shared


def _run_chunk(chunk: range) -> Any:
    if _WORKER_TASK is None:
        raise RuntimeError("Worker process was not initialized with a task")
    return _WORKER_TASK(chunk, _WORKER_SHARED)


def chunk_range(total: int, chunk_size: int) -> list[range]:
    """Split [0, total) into contiguous ranges of at most chunk_size."""
    chunk_size = max(1, chunk_size)
    return [range(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


def parallel_map(
    task: Callable[[range, Any], R],
    total: int,
    shared: Any = None,
    num_workers: int | None = None,
    chunk_size: int = 64,
    desc: str | None = None,
) -> Iterator[tuple[range, R]]:
    """
    Run ``task(chunk, shared)`` over chunks of [0, total).

    Args:
        task: Module-level function (must be picklable)
        total: Size of the index range
        shared: Read-only inputs handed to every call
        num_workers: Worker processes (None = CPU count, 1 = in-process)
        chunk_size: Indices per unit of work
        desc: Progress bar label

    Yields:
        (chunk, result) pairs in chunk order
    """
    chunks = chunk_range(total, chunk_size)
    if num_workers is None:
        num_workers = mp.cpu_count()
    num_workers = max(1, min(num_workers, len(chunks)))

    progress = tqdm(total=total, desc=desc, unit="idx", disable=desc is None)

    if num_workers == 1:
        try:
            for chunk in chunks:
                result = task(chunk, shared)
                progress.update(len(chunk))
                yield chunk, result
        finally:
            progress.close()
        return

    logger.info(f"{desc or 'parallel_map'}: {len(chunks)} chunks on {num_workers} workers")

    with ProcessPoolExecutor(
        max_workers=num_workers,
        mp_context=_pool_context(),
        initializer=_init_worker,
        initargs=(task, shared),
    ) as executor:
        try:
            for chunk, result in zip(chunks, executor.map(_run_chunk, chunks)):
                progress.update(len(chunk))
                yield chunk, result
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            progress.close()
