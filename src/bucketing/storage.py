"""
Table persistence.

Tables are pickled as-is (numpy arrays, lists of Histogram). get() is a
plain file cache: an existing file is returned without checking it against
the current evaluator, indexer or config, so stale files must be removed by
the caller. Any read or write failure raises TableStorageError; a table is
never half-written because saves go through a temporary sibling file.
"""

import logging
import os
import pickle
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import numpy as np
import xxhash

from src.bucketing.histogram import Histogram

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TableStorageError(RuntimeError):
    """A table file could not be read or written."""


def load(path: str | Path) -> Any:
    """
    Load a pickled table.

    Raises:
        TableStorageError: Missing, unreadable or malformed file
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            return pickle.load(f)
    except OSError as exc:
        raise TableStorageError(f"Cannot read table {path}: {exc}") from exc
    except (
        pickle.UnpicklingError,
        EOFError,
        AttributeError,
        ImportError,
        IndexError,
        KeyError,
        TypeError,
        ValueError,
    ) as exc:
        raise TableStorageError(f"Malformed table file {path}: {exc}") from exc


def save(path: str | Path, table: Any) -> None:
    """
    Pickle a table atomically.

    Raises:
        TableStorageError: The file or its directory cannot be written, or
            the table cannot be pickled
    """
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "wb") as f:
            pickle.dump(table, f, protocol=pickle.HIGHEST_PROTOCOL)
        os.replace(tmp_path, path)
    except BaseException as exc:
        if tmp_path.exists():
            tmp_path.unlink()
        if isinstance(exc, OSError):
            raise TableStorageError(f"Cannot write table {path}: {exc}") from exc
        if isinstance(exc, (pickle.PicklingError, TypeError, AttributeError)):
            raise TableStorageError(f"Cannot pickle table for {path}: {exc}") from exc
        raise

    logger.info(f"Saved table to {path}")


def get(path: str | Path, compute: Callable[[], T]) -> T:
    """Load the table at ``path`` if it exists, else compute, save and return it."""
    path = Path(path)
    if path.exists():
        logger.info(f"Loading cached table {path}")
        return load(path)

    table = compute()
    save(path, table)
    return table


def table_fingerprint(table: Any) -> str:
    """
    Stable xxhash64 digest of a table's contents.

    Accepts numpy arrays and lists of Histogram; identical tables always
    produce identical digests.
    """
    hasher = xxhash.xxh64()
    if isinstance(table, np.ndarray):
        hasher.update(str(table.dtype).encode())
        hasher.update(repr(table.shape).encode())
        hasher.update(np.ascontiguousarray(table).tobytes())
    elif isinstance(table, list) and all(isinstance(h, Histogram) for h in table):
        hasher.update(f"histograms:{len(table)}".encode())
        for histogram in table:
            hasher.update(np.ascontiguousarray(histogram.weights).tobytes())
    else:
        raise TypeError(f"Cannot fingerprint table of type {type(table).__name__}")
    return hasher.hexdigest()
