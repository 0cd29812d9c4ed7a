"""Tests for flop and turn strength histograms."""

from math import comb

import numpy as np
import pytest

from src.bucketing.constants import FLOP_ROUNDS, TURN_ROUNDS
from src.bucketing.postflop.street_histograms import (
    generate_flop_histograms,
    generate_turn_histograms,
)
from src.bucketing.postflop.strength import build_strengths
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.cards import cards_in
from src.game.evaluator import GenericHandEvaluator
from tests.test_helpers import SMALL_DECK, AllTieEvaluator

NUM_BUCKETS = 8


@pytest.fixture(scope="module")
def strengths():
    return build_strengths(GenericHandEvaluator(SMALL_DECK), SMALL_DECK, num_workers=1)


@pytest.fixture(scope="module")
def flop(strengths):
    return generate_flop_histograms(strengths, SMALL_DECK, NUM_BUCKETS, num_workers=1)


@pytest.fixture(scope="module")
def turn(strengths):
    return generate_turn_histograms(strengths, SMALL_DECK, NUM_BUCKETS, num_workers=1)


class TestFlopHistograms:
    """Tests for generate_flop_histograms."""

    def test_shape_and_dtype(self, flop):
        assert flop.dtype == np.uint16
        assert flop.shape == (get_indexer(FLOP_ROUNDS, SMALL_DECK).count[1], NUM_BUCKETS)

    def test_rows_count_every_runout(self, flop):
        assert set(flop.sum(axis=1).tolist()) == {comb(SMALL_DECK.num_cards - 5, 2)}

    def test_workers_match_serial(self, strengths, flop):
        parallel = generate_flop_histograms(
            strengths, SMALL_DECK, NUM_BUCKETS, num_workers=2, chunk_size=11
        )
        assert np.array_equal(flop, parallel)


class TestTurnHistograms:
    """Tests for generate_turn_histograms."""

    def test_shape_and_dtype(self, turn):
        assert turn.dtype == np.uint8
        assert turn.shape == (get_indexer(TURN_ROUNDS, SMALL_DECK).count[1], NUM_BUCKETS)

    def test_rows_count_every_river(self, turn):
        assert set(turn.sum(axis=1).tolist()) == {SMALL_DECK.num_cards - 6}

    def test_flop_is_sum_of_turns(self, flop, turn):
        """Each unordered runout is reached once through either of its cards."""
        flop_indexer = get_indexer(FLOP_ROUNDS, SMALL_DECK)
        turn_indexer = get_indexer(TURN_ROUNDS, SMALL_DECK)

        for i in range(0, flop_indexer.count[1], 5):
            cards, board = flop_indexer.unindex(i, 1)
            live = ((1 << SMALL_DECK.num_cards) - 1) & ~(cards | board)
            total = np.zeros(NUM_BUCKETS, dtype=np.int64)
            for card in cards_in(live):
                total += turn[turn_indexer.index([cards, board | 1 << card])]
            assert (2 * flop[i].astype(np.int64)).tolist() == total.tolist()


class TestAllTies:
    """With every hand tied, all mass lands in the bucket of the tie rank."""

    def test_two_buckets(self):
        strengths = build_strengths(AllTieEvaluator(), SMALL_DECK, num_workers=1)
        # 10 tied opponents of 42 -> bucket 0 of 2
        flop = generate_flop_histograms(strengths, SMALL_DECK, 2, num_workers=1)
        turn = generate_turn_histograms(strengths, SMALL_DECK, 2, num_workers=1)

        assert (flop == [comb(SMALL_DECK.num_cards - 5, 2), 0]).all()
        assert (turn == [SMALL_DECK.num_cards - 6, 0]).all()
