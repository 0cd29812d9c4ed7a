"""
Absolute strength ranks for every canonical river combination.

For each canonical board the hands are evaluated, sorted, and credited
against card-compatible opponents with ties splitting credit:

    rank = 2 * (opponents strictly worse) + (opponents tied)

The table is indexed by the [5, 2] indexer's round-1 index of [board, hole]
and feeds every histogram builder through strength_bucket().
"""

import logging

import numpy as np

from src.bucketing.constants import BOARD_HOLE_ROUNDS
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.cards import STANDARD_DECK, Deck, card_pairs
from src.game.evaluator import Evaluator
from src.utils.numba_ops import tie_credit
from src.utils.parallel import parallel_map

logger = logging.getLogger(__name__)


def strength_bucket(strength, max_strength: int, num_buckets: int):
    """
    Bucket of a strength rank: floor(strength / max_strength * num_buckets).

    Exact integer arithmetic; works on scalars and integer numpy arrays.
    """
    if isinstance(strength, np.ndarray):
        return strength.astype(np.int64) * num_buckets // max_strength
    return int(strength) * num_buckets // max_strength


def rank_board(evaluator: Evaluator, board: int, deck: Deck) -> tuple[np.ndarray, np.ndarray]:
    """
    Rank every hole pair on one board.

    Args:
        evaluator: Seven-card evaluator
        board: Five-card board
        deck: Deck geometry

    Returns:
        (indices, ranks): [5, 2] round-1 index and strength rank per hole pair
    """
    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)

    strengths, cards_a, cards_b, indices = [], [], [], []
    for a, b, hole in card_pairs(board, deck.num_cards):
        strengths.append(evaluator.evaluate(board | hole))
        cards_a.append(a)
        cards_b.append(b)
        indices.append(indexer.index([board, hole]))

    order = np.argsort(np.array(strengths, dtype=np.int64), kind="stable")
    ranks = tie_credit(
        np.array(strengths, dtype=np.int64)[order],
        np.array(cards_a, dtype=np.int64)[order],
        np.array(cards_b, dtype=np.int64)[order],
        deck.num_cards,
    )
    return np.array(indices, dtype=np.int64)[order], ranks


def _rank_boards(chunk: range, shared) -> tuple[np.ndarray, np.ndarray]:
    evaluator, deck = shared
    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)

    results = [rank_board(evaluator, indexer.unindex(i, 0)[0], deck) for i in chunk]
    return (
        np.concatenate([indices for indices, _ in results]),
        np.concatenate([ranks for _, ranks in results]),
    )


def build_strengths(
    evaluator: Evaluator,
    deck: Deck = STANDARD_DECK,
    num_workers: int | None = None,
    chunk_size: int = 64,
) -> np.ndarray:
    """
    Build the strength-rank table.

    Args:
        evaluator: Seven-card evaluator
        deck: Deck geometry
        num_workers: Worker processes (None = CPU count)
        chunk_size: Boards per unit of work

    Returns:
        uint16 array indexed by the [5, 2] round-1 canonical index
    """
    indexer = get_indexer(BOARD_HOLE_ROUNDS, deck)
    num_boards = indexer.count[0]
    logger.info(f"Ranking {indexer.count[1]} combinations over {num_boards} canonical boards")

    strengths = np.zeros(indexer.count[1], dtype=np.uint16)
    for _, (indices, ranks) in parallel_map(
        _rank_boards,
        num_boards,
        shared=(evaluator, deck),
        num_workers=num_workers,
        chunk_size=chunk_size,
        desc="Strength ranks",
    ):
        strengths[indices] = ranks

    logger.info(f"Strength table complete (max rank {int(strengths.max(initial=0))})")
    return strengths
