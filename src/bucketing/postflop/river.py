"""
River histograms over opponent clusters.

For every canonical (hole, river board) the histogram holds, per opponent
cluster k, the hero's expected result against a random cluster-k hand that
is still possible on that board:

    (2 * wins + ties) / (2 * opponents in k avoiding board and hero)

Entries are fractions in [0, 1]; they do not sum to 1 across clusters. A
cluster with no possible opponent on a board contributes 0.
"""

import logging

import numpy as np

from src.bucketing.constants import BOARD_HOLE_ROUNDS, RIVER_ROUNDS
from src.bucketing.histogram import Histogram
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.cards import STANDARD_DECK, Deck, card_pairs
from src.game.evaluator import Evaluator
from src.utils.numba_ops import cluster_tie_credit
from src.utils.parallel import parallel_map

logger = logging.getLogger(__name__)


def cluster_sizes(ochs: np.ndarray, deck: Deck = STANDARD_DECK) -> np.ndarray:
    """
    Hole pairs per cluster over the full deck.

    Args:
        ochs: Cluster id per canonical hole index
        deck: Deck geometry

    Returns:
        int64 array of length max(ochs) + 1
    """
    mapper = get_indexer(RIVER_ROUNDS, deck)
    sizes = np.zeros(int(ochs.max()) + 1, dtype=np.int64)
    for _, _, hole in card_pairs(0, deck.num_cards):
        sizes[ochs[mapper.index([hole])]] += 1
    return sizes


def _river_rows(chunk: range, shared) -> tuple[np.ndarray, np.ndarray]:
    evaluator, deck, ochs, sizes = shared
    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)
    mapper = get_indexer(RIVER_ROUNDS, deck)

    chunk_indices, chunk_rows = [], []
    for i in chunk:
        board = indexer.unindex(i, 0)[0]

        strengths, cards_a, cards_b, clusters, indices = [], [], [], [], []
        for a, b, hole in card_pairs(board, deck.num_cards):
            strengths.append(evaluator.evaluate(board | hole))
            cards_a.append(a)
            cards_b.append(b)
            clusters.append(ochs[mapper.index([hole])])
            indices.append(mapper.index([hole, board]))

        order = np.argsort(np.array(strengths, dtype=np.int64), kind="stable")
        credit, population = cluster_tie_credit(
            np.array(strengths, dtype=np.int64)[order],
            np.array(cards_a, dtype=np.int64)[order],
            np.array(cards_b, dtype=np.int64)[order],
            np.array(clusters, dtype=np.int64)[order],
            sizes,
            deck.num_cards,
        )

        rows = np.zeros(credit.shape, dtype=np.float64)
        np.divide(credit, 2 * population, out=rows, where=population > 0)

        chunk_indices.append(np.array(indices, dtype=np.int64)[order])
        chunk_rows.append(rows)

    return np.concatenate(chunk_indices), np.concatenate(chunk_rows)


def generate_river_histograms(
    evaluator: Evaluator,
    ochs: np.ndarray,
    deck: Deck = STANDARD_DECK,
    num_workers: int | None = None,
    chunk_size: int = 64,
) -> list[Histogram]:
    """
    Per-cluster win/tie fraction of every canonical river combination.

    Args:
        evaluator: Seven-card evaluator
        ochs: Cluster id per canonical hole index ([2] indexer)
        deck: Deck geometry
        num_workers: Worker processes (None = CPU count)
        chunk_size: Boards per unit of work

    Returns:
        Histograms indexed by the [2, 5] round-1 index of [hole, board]

    Raises:
        ValueError: If the assignment is empty or holds negative cluster ids
    """
    ochs = np.asarray(ochs, dtype=np.int64)
    if ochs.size == 0 or ochs.min() < 0:
        raise ValueError("Cluster ids must be non-negative and cover every canonical hole")
    sizes = cluster_sizes(ochs, deck)

    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)
    mapper = get_indexer(RIVER_ROUNDS, deck)
    logger.info(
        f"Building {mapper.count[1]} river histograms over {len(sizes)} clusters "
        f"(cluster sizes {sizes.tolist()})"
    )

    table = np.zeros((mapper.count[1], len(sizes)), dtype=np.float64)
    for _, (indices, rows) in parallel_map(
        _river_rows,
        indexer.count[0],
        shared=(evaluator, deck, ochs, sizes),
        num_workers=num_workers,
        chunk_size=chunk_size,
        desc="River histograms",
    ):
        table[indices] = rows

    return [Histogram.from_weights(row) for row in table]
