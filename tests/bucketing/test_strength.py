"""Tests for the strength-rank table."""

from math import comb

import numpy as np
import pytest

from src.bucketing.constants import BOARD_HOLE_ROUNDS
from src.bucketing.postflop.strength import build_strengths, rank_board, strength_bucket
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.evaluator import GenericHandEvaluator
from tests.test_helpers import (
    SMALL_DECK,
    AllTieEvaluator,
    ExplodingEvaluator,
    HighCardEvaluator,
    brute_force_rank,
)


@pytest.fixture(scope="module")
def evaluator():
    return GenericHandEvaluator(SMALL_DECK)


@pytest.fixture(scope="module")
def strengths(evaluator):
    return build_strengths(evaluator, SMALL_DECK, num_workers=1)


class TestStrengthBucket:
    """Bucket placement of strength ranks."""

    def test_scalar(self):
        assert strength_bucket(0, 42, 8) == 0
        assert strength_bucket(41, 42, 8) == 7
        assert strength_bucket(20, 42, 2) == 0
        assert strength_bucket(21, 42, 2) == 1

    def test_array(self):
        ranks = np.array([0, 10, 21, 41], dtype=np.uint16)
        assert strength_bucket(ranks, 42, 2).tolist() == [0, 0, 1, 1]

    def test_no_overflow_on_uint16(self):
        """2161 * 47 does not fit in 16 bits."""
        ranks = np.array([2161], dtype=np.uint16)
        assert strength_bucket(ranks, 2162, 47).tolist() == [46]
        assert strength_bucket(ranks[0], 2162, 47) == 46


class TestBuildStrengths:
    """Tests for build_strengths."""

    def test_shape_and_dtype(self, strengths):
        assert strengths.dtype == np.uint16
        assert len(strengths) == get_indexer(BOARD_HOLE_ROUNDS, SMALL_DECK).count[1]

    def test_below_max_strength(self, strengths):
        assert int(strengths.max()) < SMALL_DECK.max_strength

    def test_matches_brute_force(self, evaluator, strengths):
        indexer = get_indexer(BOARD_HOLE_ROUNDS, SMALL_DECK)
        for i in range(indexer.count[1]):
            board, hole = indexer.unindex(i, 1)
            assert strengths[i] == brute_force_rank(evaluator, board, hole, SMALL_DECK)

    def test_tie_heavy_evaluator(self):
        evaluator = HighCardEvaluator(SMALL_DECK)
        strengths = build_strengths(evaluator, SMALL_DECK, num_workers=1)
        indexer = get_indexer(BOARD_HOLE_ROUNDS, SMALL_DECK)
        for i in range(0, indexer.count[1], 7):
            board, hole = indexer.unindex(i, 1)
            assert strengths[i] == brute_force_rank(evaluator, board, hole, SMALL_DECK)

    def test_all_ties(self):
        """Every opponent ties: rank is the number of possible opponents."""
        strengths = build_strengths(AllTieEvaluator(), SMALL_DECK, num_workers=1)
        assert set(strengths.tolist()) == {comb(SMALL_DECK.num_cards - 7, 2)}

    def test_deterministic(self, evaluator, strengths):
        again = build_strengths(evaluator, SMALL_DECK, num_workers=1, chunk_size=5)
        assert np.array_equal(strengths, again)

    def test_workers_match_serial(self, evaluator, strengths):
        parallel = build_strengths(evaluator, SMALL_DECK, num_workers=2, chunk_size=9)
        assert np.array_equal(strengths, parallel)

    def test_evaluator_failure_propagates(self):
        with pytest.raises(RuntimeError, match="exploded"):
            build_strengths(ExplodingEvaluator(), SMALL_DECK, num_workers=2)


class TestRankBoard:
    """Tests for rank_board."""

    def test_one_entry_per_hole_pair(self, evaluator):
        board = SMALL_DECK.parse_cards("9sTsJhQhAs")
        indices, ranks = rank_board(evaluator, board, SMALL_DECK)
        assert len(indices) == len(ranks) == comb(SMALL_DECK.num_cards - 5, 2)

    def test_nuts_ranks_highest(self, evaluator):
        """KsQs makes the top straight flush."""
        board = SMALL_DECK.parse_cards("9sTsJsAhKh")
        indices, ranks = rank_board(evaluator, board, SMALL_DECK)
        mapper = get_indexer(BOARD_HOLE_ROUNDS, SMALL_DECK)
        nuts = mapper.index([board, SMALL_DECK.parse_cards("QsKs")])
        assert ranks[list(indices).index(nuts)] == max(ranks)
