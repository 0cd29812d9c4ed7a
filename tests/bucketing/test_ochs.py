"""Tests for OCHS histograms."""

from itertools import combinations

import numpy as np
import pytest

from src.bucketing.constants import BOARD_HOLE_ROUNDS, HOLE_ROUNDS
from src.bucketing.postflop.ochs import build_ochs_histograms
from src.bucketing.postflop.strength import build_strengths, strength_bucket
from src.bucketing.postflop.suit_isomorphism import get_indexer
from src.game.cards import cards_in
from src.game.evaluator import GenericHandEvaluator
from tests.test_helpers import SMALL_DECK, AllTieEvaluator

NUM_BUCKETS = 6


@pytest.fixture(scope="module")
def strengths():
    return build_strengths(GenericHandEvaluator(SMALL_DECK), SMALL_DECK, num_workers=1)


@pytest.fixture(scope="module")
def ochs(strengths):
    return build_ochs_histograms(strengths, SMALL_DECK, NUM_BUCKETS, num_workers=1)


class TestOCHSHistograms:
    """Tests for build_ochs_histograms."""

    def test_one_histogram_per_canonical_hole(self, ochs):
        assert len(ochs) == get_indexer(HOLE_ROUNDS, SMALL_DECK).count[0]
        assert all(len(histogram) == NUM_BUCKETS for histogram in ochs)

    def test_normalized(self, ochs):
        for histogram in ochs:
            assert histogram.total() == pytest.approx(1.0)

    def test_matches_raw_board_enumeration(self, strengths, ochs):
        """Multiplicity weighting equals dealing every raw board to one hole."""
        holes = get_indexer(HOLE_ROUNDS, SMALL_DECK)
        mapper = get_indexer(BOARD_HOLE_ROUNDS, SMALL_DECK)
        all_cards = (1 << SMALL_DECK.num_cards) - 1

        for h in range(holes.count[0]):
            hole = holes.unindex(h, 0)[0]
            expected = np.zeros(NUM_BUCKETS)
            for board_cards in combinations(cards_in(all_cards & ~hole), 5):
                board = sum(1 << card for card in board_cards)
                strength = strengths[mapper.index([board, hole])]
                expected[strength_bucket(strength, SMALL_DECK.max_strength, NUM_BUCKETS)] += 1
            assert np.allclose(ochs[h].weights, expected / expected.sum())

    def test_workers_match_serial(self, strengths, ochs):
        parallel = build_ochs_histograms(
            strengths, SMALL_DECK, NUM_BUCKETS, num_workers=2, chunk_size=500
        )
        assert parallel == ochs

    def test_all_ties(self):
        strengths = build_strengths(AllTieEvaluator(), SMALL_DECK, num_workers=1)
        ochs = build_ochs_histograms(strengths, SMALL_DECK, 2, num_workers=1)
        assert all(histogram[0] == 1.0 and histogram[1] == 0.0 for histogram in ochs)
