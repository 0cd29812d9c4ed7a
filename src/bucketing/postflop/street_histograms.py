"""
Flop and turn strength histograms.

For every canonical (hole, board) pair of a street, every way to complete
the board to five cards is looked up in the strength table and counted in
its bucket. Rows are raw counts, not probabilities:

- flop rows sum to C(n - 5, 2) (two more board cards)
- turn rows sum to n - 6 (one river card)
"""

import logging

import numpy as np

from src.bucketing.constants import BOARD_HOLE_ROUNDS, DEFAULT_NUM_BUCKETS, FLOP_ROUNDS, TURN_ROUNDS
from src.bucketing.postflop.strength import strength_bucket
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.cards import STANDARD_DECK, Deck, card_pairs
from src.utils.parallel import parallel_map

logger = logging.getLogger(__name__)


def _flop_rows(chunk: range, shared) -> np.ndarray:
    strengths, deck, num_buckets = shared
    mapper = get_indexer(BOARD_HOLE_ROUNDS, deck)
    indexer = get_indexer(FLOP_ROUNDS, deck)

    rows = np.zeros((len(chunk), num_buckets), dtype=np.uint16)
    for row, index in enumerate(chunk):
        cards, board = indexer.unindex(index, 1)
        for _, _, runout in card_pairs(cards | board, deck.num_cards):
            i = mapper.index([board | runout, cards])
            rows[row, strength_bucket(strengths[i], deck.max_strength, num_buckets)] += 1
    return rows


def _turn_rows(chunk: range, shared) -> np.ndarray:
    strengths, deck, num_buckets = shared
    mapper = get_indexer(BOARD_HOLE_ROUNDS, deck)
    indexer = get_indexer(TURN_ROUNDS, deck)

    rows = np.zeros((len(chunk), num_buckets), dtype=np.uint8)
    for row, index in enumerate(chunk):
        cards, board = indexer.unindex(index, 1)
        dead = cards | board
        for river in range(deck.num_cards):
            if dead >> river & 1:
                continue
            i = mapper.index([board | 1 << river, cards])
            rows[row, strength_bucket(strengths[i], deck.max_strength, num_buckets)] += 1
    return rows


def _build(rows_task, rounds, dtype, name, strengths, deck, num_buckets, num_workers, chunk_size):
    indexer = get_indexer(rounds, deck)
    total = indexer.count[1]
    logger.info(f"Building {total} {name} histograms with {num_buckets} buckets")

    histograms = np.zeros((total, num_buckets), dtype=dtype)
    for chunk, rows in parallel_map(
        rows_task,
        total,
        shared=(strengths, deck, num_buckets),
        num_workers=num_workers,
        chunk_size=chunk_size,
        desc=f"{name.capitalize()} histograms",
    ):
        histograms[chunk.start : chunk.stop] = rows
    return histograms


def generate_flop_histograms(
    strengths: np.ndarray,
    deck: Deck = STANDARD_DECK,
    num_buckets: int = DEFAULT_NUM_BUCKETS,
    num_workers: int | None = None,
    chunk_size: int = 64,
) -> np.ndarray:
    """
    Strength-bucket counts over all runouts of every canonical flop.

    Args:
        strengths: Table from build_strengths()
        deck: Deck geometry
        num_buckets: Histogram size
        num_workers: Worker processes (None = CPU count)
        chunk_size: Flops per unit of work

    Returns:
        uint16 array (count, num_buckets), rows indexed by the [2, 3] round-1 index
    """
    return _build(
        _flop_rows,
        FLOP_ROUNDS,
        np.uint16,
        "flop",
        strengths,
        deck,
        num_buckets,
        num_workers,
        chunk_size,
    )


def generate_turn_histograms(
    strengths: np.ndarray,
    deck: Deck = STANDARD_DECK,
    num_buckets: int = DEFAULT_NUM_BUCKETS,
    num_workers: int | None = None,
    chunk_size: int = 256,
) -> np.ndarray:
    """
    Strength-bucket counts over every river card of every canonical turn.

    Returns:
        uint8 array (count, num_buckets), rows indexed by the [2, 4] round-1 index
    """
    return _build(
        _turn_rows,
        TURN_ROUNDS,
        np.uint8,
        "turn",
        strengths,
        deck,
        num_buckets,
        num_workers,
        chunk_size,
    )
