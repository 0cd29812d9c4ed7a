"""
Precomputation pipeline for the hand-strength tables.

Builds the configured tables in dependency order:
1. strength ranks for every canonical river combination
2. flop and turn histograms over the strength buckets
3. OCHS histograms per canonical hole
4. river histograms over an external cluster assignment of those holes

Every table goes through storage.get(), so rerunning the pipeline only
computes what is missing from the output directory. The clustering step
between 3 and 4 happens outside this package; its result is read with
load_ochs_clusters().
"""

import json
import logging
import time
from pathlib import Path
from typing import Any

import numpy as np

from src.bucketing import storage
from src.bucketing.config import TableConfig
from src.bucketing.constants import HOLE_ROUNDS, TABLE_NAMES
from src.bucketing.histogram import Histogram
from src.bucketing.postflop.ochs import build_ochs_histograms
from src.bucketing.postflop.river import generate_river_histograms
from src.bucketing.postflop.street_histograms import (
    generate_flop_histograms,
    generate_turn_histograms,
)
from src.bucketing.postflop.strength import build_strengths
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.cards import STANDARD_DECK, Deck
from src.game.evaluator import get_evaluator

logger = logging.getLogger(__name__)

TABLE_SUFFIX = ".pkl"


def load_ochs_clusters(path: str | Path, deck: Deck = STANDARD_DECK) -> np.ndarray:
    """
    Load a cluster assignment for the canonical holes.

    Args:
        path: ``.npy`` file, or a pickled sequence of ints
        deck: Deck geometry the assignment was made for

    Returns:
        int64 array, one non-negative cluster id per [2] canonical hole index

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the assignment has the wrong shape or invalid ids
        TableStorageError: If the file cannot be read or is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Cluster assignment not found: {path}")

    if path.suffix == ".npy":
        try:
            raw = np.load(path, allow_pickle=False)
        except (OSError, ValueError, EOFError) as exc:
            raise storage.TableStorageError(f"Malformed cluster assignment {path}: {exc}") from exc
    else:
        raw = storage.load(path)

    clusters = np.asarray(raw)
    expected = get_indexer(HOLE_ROUNDS, deck).count[0]
    if clusters.ndim != 1 or len(clusters) != expected:
        raise ValueError(
            f"Cluster assignment {path} has shape {clusters.shape}, expected ({expected},)"
        )
    if not np.issubdtype(clusters.dtype, np.integer):
        raise ValueError(f"Cluster ids in {path} must be integers, got {clusters.dtype}")
    if clusters.min() < 0:
        raise ValueError(f"Cluster ids in {path} must be non-negative")

    return clusters.astype(np.int64)


class TablePrecomputer:
    """
    Builds and caches the hand-strength tables described by a TableConfig.

    Usage:
        precomputer = TablePrecomputer(TableConfig.fast_test())
        precomputer.precompute_all()
        precomputer.save_manifest()
    """

    def __init__(self, config: TableConfig):
        self.config = config
        self.deck = config.deck
        self.evaluator = get_evaluator(self.deck, config.evaluator)
        self.output_dir = Path(config.output_dir)

        self._tables: dict[str, Any] = {}

    def table_path(self, name: str) -> Path:
        return self.output_dir / f"{name}{TABLE_SUFFIX}"

    def _get(self, name: str, compute) -> Any:
        if name not in self._tables:
            start = time.time()
            self._tables[name] = storage.get(self.table_path(name), compute)
            logger.info(f"Table '{name}' ready in {time.time() - start:.1f}s")
        return self._tables[name]

    def strengths(self) -> np.ndarray:
        return self._get(
            "strength",
            lambda: build_strengths(
                self.evaluator,
                self.deck,
                num_workers=self.config.num_workers,
                chunk_size=self.config.chunk_size,
            ),
        )

    def flop_histograms(self) -> np.ndarray:
        return self._get(
            "flop",
            lambda: generate_flop_histograms(
                self.strengths(),
                self.deck,
                self.config.num_buckets,
                num_workers=self.config.num_workers,
                chunk_size=self.config.chunk_size,
            ),
        )

    def turn_histograms(self) -> np.ndarray:
        return self._get(
            "turn",
            lambda: generate_turn_histograms(
                self.strengths(),
                self.deck,
                self.config.num_buckets,
                num_workers=self.config.num_workers,
                chunk_size=self.config.chunk_size,
            ),
        )

    def ochs_histograms(self) -> list[Histogram]:
        return self._get(
            "ochs",
            lambda: build_ochs_histograms(
                self.strengths(),
                self.deck,
                self.config.num_buckets,
                num_workers=self.config.num_workers,
                chunk_size=self.config.chunk_size,
            ),
        )

    def river_histograms(self) -> list[Histogram]:
        """
        River histograms for the configured cluster assignment.

        Raises:
            ValueError: If no cluster assignment is configured
        """
        if self.config.ochs_path is None:
            raise ValueError("River histograms need a cluster assignment (ochs_path)")

        return self._get(
            "river",
            lambda: generate_river_histograms(
                self.evaluator,
                load_ochs_clusters(self.config.ochs_path, self.deck),
                self.deck,
                num_workers=self.config.num_workers,
                chunk_size=self.config.chunk_size,
            ),
        )

    def precompute_all(self) -> dict[str, Any]:
        """
        Build (or load) every configured table.

        Returns:
            Mapping from table name to table
        """
        builders = {
            "strength": self.strengths,
            "flop": self.flop_histograms,
            "turn": self.turn_histograms,
            "ochs": self.ochs_histograms,
            "river": self.river_histograms,
        }

        logger.info(
            f"Precomputing {list(self.config.tables)} for a {self.deck.num_cards}-card deck "
            f"into {self.output_dir} (config hash {self.config.get_config_hash()})"
        )
        for name in TABLE_NAMES:
            if name in self.config.tables:
                builders[name]()

        return {name: self._tables[name] for name in TABLE_NAMES if name in self._tables}

    def save_manifest(self) -> Path:
        """
        Write metadata.json describing the tables built so far.

        Returns:
            Path of the manifest
        """
        metadata = {
            "config": {
                "config_name": self.config.config_name,
                "config_hash": self.config.get_config_hash(),
                "num_buckets": self.config.num_buckets,
                "num_ranks": self.deck.num_ranks,
                "num_suits": self.deck.num_suits,
                "evaluator": self.config.evaluator,
                "ochs_path": self.config.ochs_path,
            },
            "tables": {},
        }

        for name in TABLE_NAMES:
            if name not in self._tables:
                continue
            table = self._tables[name]
            if isinstance(table, np.ndarray):
                shape = list(table.shape)
                dtype = str(table.dtype)
            else:
                shape = [len(table), len(table[0]) if table else 0]
                dtype = "Histogram"
            metadata["tables"][name] = {
                "file": self.table_path(name).name,
                "shape": shape,
                "dtype": dtype,
                "fingerprint": storage.table_fingerprint(table),
            }

        self.output_dir.mkdir(parents=True, exist_ok=True)
        manifest_path = self.output_dir / "metadata.json"
        with open(manifest_path, "w") as f:
            json.dump(metadata, f, indent=2)

        logger.info(f"Saved manifest to {manifest_path}")
        return manifest_path
