"""
Per-hole strength histograms for opponent clustering (OCHS).

Every canonical river combination puts its suit-isomorphism multiplicity
into the histogram of its canonical hole at its strength bucket, so each
hole's histogram weighs boards exactly as often as they are dealt. The
histograms are the input of the external clustering step that produces the
cluster assignment consumed by the river builder.
"""

import logging

import numpy as np

from src.bucketing.constants import BOARD_HOLE_ROUNDS, DEFAULT_NUM_BUCKETS, HOLE_ROUNDS
from src.bucketing.histogram import Histogram
from src.bucketing.postflop.strength import strength_bucket
from src.bucketing.postflop.suit_isomorphism import get_indexer, suit_multiplicity
from src.game.cards import STANDARD_DECK, Deck
from src.utils.parallel import parallel_map

logger = logging.getLogger(__name__)


def _ochs_weights(chunk: range, shared) -> np.ndarray:
    strengths, deck, num_buckets = shared
    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)
    holes = get_indexer(HOLE_ROUNDS, deck)

    # Integer weights keep the final sums independent of chunk order
    weights = np.zeros((holes.count[0], num_buckets), dtype=np.int64)
    for i in chunk:
        board, cards = indexer.unindex(i, 1)
        bucket = strength_bucket(strengths[i], deck.max_strength, num_buckets)
        weights[holes.index([cards]), bucket] += suit_multiplicity([cards, board], deck)
    return weights


def build_ochs_histograms(
    strengths: np.ndarray,
    deck: Deck = STANDARD_DECK,
    num_buckets: int = DEFAULT_NUM_BUCKETS,
    num_workers: int | None = None,
    chunk_size: int = 4096,
) -> list[Histogram]:
    """
    Multiplicity-weighted strength histogram of every canonical hole.

    Args:
        strengths: Table from build_strengths()
        deck: Deck geometry
        num_buckets: Histogram size
        num_workers: Worker processes (None = CPU count)
        chunk_size: Combinations per unit of work

    Returns:
        Normalized histograms indexed by the [2] canonical hole index
    """
    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)
    holes = get_indexer(HOLE_ROUNDS, deck)
    logger.info(
        f"Building {holes.count[0]} OCHS histograms from {indexer.count[1]} combinations"
    )

    histograms = [Histogram(num_buckets) for _ in range(holes.count[0])]
    for _, weights in parallel_map(
        _ochs_weights,
        indexer.count[1],
        shared=(strengths, deck, num_buckets),
        num_workers=num_workers,
        chunk_size=chunk_size,
        desc="OCHS histograms",
    ):
        for hole, bucket in zip(*np.nonzero(weights)):
            histograms[hole].put(bucket, float(weights[hole, bucket]))

    return [histogram.norm() for histogram in histograms]
