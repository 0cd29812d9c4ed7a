"""
Hand evaluation over card bit masks.

Two evaluators share the same contract: ``evaluate(cards)`` takes a card set
of seven cards (board | hole) and returns an integer where higher values are
stronger hands and equal values are exact ties.

- HandEvaluator wraps eval7 for the standard 52-card deck.
- GenericHandEvaluator ranks best-five-of-seven for any Deck, which is what
  reduced decks use.
"""

from functools import lru_cache
from itertools import combinations
from typing import Protocol

import eval7

from src.game.cards import STANDARD_DECK, Deck, cards_in

_HAND_CATEGORIES = (
    "High Card",
    "One Pair",
    "Two Pair",
    "Three of a Kind",
    "Straight",
    "Flush",
    "Full House",
    "Four of a Kind",
    "Straight Flush",
)
_CATEGORY_SHIFT = 20
_EVAL7_CARD_CACHE: list[eval7.Card] | None = None


class Evaluator(Protocol):
    """Structural interface for seven-card hand evaluation."""

    def evaluate(self, cards: int) -> int:
        """Return a strength value; higher is stronger, equal is a split."""


def _get_eval7_card_cache() -> list[eval7.Card]:
    global _EVAL7_CARD_CACHE
    if _EVAL7_CARD_CACHE is None:
        _EVAL7_CARD_CACHE = [
            eval7.Card(STANDARD_DECK.card_to_str(card))
            for card in range(STANDARD_DECK.num_cards)
        ]
    return _EVAL7_CARD_CACHE


class HandEvaluator:
    """
    Fast evaluator for the standard deck using eval7.

    eval7 already returns higher values for stronger hands, so values are
    passed through unchanged. The eval7 card cache lives at module level so
    instances stay cheap to pickle into worker processes.
    """

    deck = STANDARD_DECK

    def evaluate(self, cards: int) -> int:
        cache = _get_eval7_card_cache()
        return eval7.evaluate([cache[card] for card in cards_in(cards)])

    def hand_type(self, cards: int) -> str:
        """Human-readable hand category, e.g. ``'Flush'``."""
        return eval7.handtype(self.evaluate(cards))


def _straight_high(ranks: int, num_ranks: int) -> int:
    """Highest rank of a five-rank run in a rank mask, or -1."""
    for high in range(num_ranks - 1, 3, -1):
        run = 0b11111 << (high - 4)
        if ranks & run == run:
            return high
    # Wheel: the top rank plays low under the four lowest ranks
    wheel = 1 << (num_ranks - 1) | 0b1111
    if num_ranks >= 5 and ranks & wheel == wheel:
        return 3
    return -1


def _pack(category: int, ranks: list[int]) -> int:
    value = 0
    for rank in ranks:
        value = value << 4 | rank
    value <<= 4 * (5 - len(ranks))
    return category << _CATEGORY_SHIFT | value


def _score_five(cards: tuple[int, ...], num_ranks: int) -> int:
    ranks = sorted((card % num_ranks for card in cards), reverse=True)
    suits = {card // num_ranks for card in cards}

    rank_mask = 0
    for rank in ranks:
        rank_mask |= 1 << rank
    flush = len(suits) == 1
    straight = _straight_high(rank_mask, num_ranks) if len(set(ranks)) == 5 else -1

    if straight >= 0 and flush:
        return _pack(8, [straight])

    counts: dict[int, int] = {}
    for rank in ranks:
        counts[rank] = counts.get(rank, 0) + 1
    # Order by multiplicity first, then rank
    groups = sorted(counts.items(), key=lambda x: (x[1], x[0]), reverse=True)
    shape = [count for _, count in groups]
    ordered = [rank for rank, _ in groups]

    if shape[0] == 4:
        return _pack(7, ordered)
    if shape[:2] == [3, 2]:
        return _pack(6, ordered)
    if flush:
        return _pack(5, ranks)
    if straight >= 0:
        return _pack(4, [straight])
    if shape[0] == 3:
        return _pack(3, ordered)
    if shape[:2] == [2, 2]:
        return _pack(2, ordered)
    if shape[0] == 2:
        return _pack(1, ordered)
    return _pack(0, ranks)


@lru_cache(maxsize=1 << 18)
def _evaluate_generic(cards: int, num_ranks: int) -> int:
    return max(
        _score_five(hand, num_ranks) for hand in combinations(tuple(cards_in(cards)), 5)
    )


class GenericHandEvaluator:
    """
    Pure-Python Hold'em ranking for any deck geometry.

    Categories follow the usual order (straight flush down to high card);
    suits and ranks come from the deck's bit layout. Slow compared to eval7
    but exact, which is all the reduced-deck tables need.
    """

    def __init__(self, deck: Deck = STANDARD_DECK):
        self.deck = deck

    def evaluate(self, cards: int) -> int:
        return _evaluate_generic(cards, self.deck.num_ranks)

    def hand_type(self, cards: int) -> str:
        return _HAND_CATEGORIES[self.evaluate(cards) >> _CATEGORY_SHIFT]


def get_evaluator(deck: Deck = STANDARD_DECK, kind: str = "auto") -> Evaluator:
    """
    Build the evaluator for a deck.

    Args:
        deck: Deck geometry
        kind: "auto" (eval7 when the deck is standard), "eval7" or "generic"

    Returns:
        Evaluator instance
    """
    if kind == "auto":
        kind = "eval7" if deck == STANDARD_DECK else "generic"

    if kind == "eval7":
        if deck != STANDARD_DECK:
            raise ValueError("eval7 only evaluates the standard 52-card deck")
        return HandEvaluator()
    if kind == "generic":
        return GenericHandEvaluator(deck)
    raise ValueError(f"Unknown evaluator kind: {kind}")
