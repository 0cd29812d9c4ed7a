"""
Suit isomorphism indexing.

Maps ordered card-set blocks (e.g. [board, hole]) to dense canonical indices
and back. Two combinations share an index exactly when a suit relabelling
takes one to the other.

Canonical Form:
- Each suit gets a signature: the tuple of its rank masks, one per block
- A suit relabelling only permutes signatures, so the descending-sorted
  tuple of signatures is a complete invariant (the canonical key)
- The canonical representative gives suit i the i-th signature

Example (standard deck, blocks [hole, flop]):
    [A♠ K♠ | T♥ 9♥ 8♠] and [A♥ K♥ | T♦ 9♦ 8♥] share a key:
    one suit holds {A, K | 8}, one holds {- | T, 9}, two are empty.

Keys are enumerated round by round (each round extends the canonical
representatives of the previous one), sorted, and numbered densely, so
indices are deterministic across processes. Enumeration is exhaustive,
which suits reduced decks; the standard river structure needs a compiled
indexer behind the same interface.
"""

import logging
from collections.abc import Sequence
from functools import lru_cache
from itertools import combinations

from src.game.cards import STANDARD_DECK, Deck

logger = logging.getLogger(__name__)

CanonicalKey = tuple[tuple[int, ...], ...]


class HandIndexer:
    """
    Dense canonical indexer for a fixed round structure.

    Usage:
        indexer = HandIndexer([5, 2])
        board = indexer.unindex(i, 0)[0]
        j = indexer.index([board, hole])
    """

    def __init__(self, cards_per_round: Sequence[int], deck: Deck = STANDARD_DECK):
        """
        Enumerate every canonical combination of every round.

        Args:
            cards_per_round: Block sizes, e.g. [5, 2] (board then hole)
            deck: Deck geometry
        """
        if not cards_per_round or any(n <= 0 for n in cards_per_round):
            raise ValueError(f"Invalid round structure: {cards_per_round}")
        if sum(cards_per_round) > deck.num_cards:
            raise ValueError(f"{list(cards_per_round)} deals more cards than the deck holds")

        self.cards_per_round = tuple(cards_per_round)
        self.deck = deck
        self.rounds = len(self.cards_per_round)

        self._keys: list[list[CanonicalKey]] = []
        self._index_of: list[dict[CanonicalKey, int]] = []
        self._enumerate()

        self.count = [len(keys) for keys in self._keys]

    def _enumerate(self) -> None:
        num_cards = self.deck.num_cards
        previous: list[list[int]] = [[]]

        for round_idx, size in enumerate(self.cards_per_round):
            seen: set[CanonicalKey] = set()

            for blocks in previous:
                used = 0
                for block in blocks:
                    used |= block
                free = [card for card in range(num_cards) if not used >> card & 1]

                for combo in combinations(free, size):
                    block = 0
                    for card in combo:
                        block |= 1 << card
                    seen.add(self.canonical_key([*blocks, block]))

            keys = sorted(seen)
            self._keys.append(keys)
            self._index_of.append({key: i for i, key in enumerate(keys)})
            previous = [self._representative(key) for key in keys]

            logger.debug(
                f"{list(self.cards_per_round)} round {round_idx}: {len(keys)} canonical combinations"
            )

    def canonical_key(self, blocks: Sequence[int]) -> CanonicalKey:
        """Suit-relabelling invariant key of a list of card-set blocks."""
        deck = self.deck
        signatures = [
            tuple(deck.suit_ranks(block, suit) for block in blocks)
            for suit in range(deck.num_suits)
        ]
        return tuple(sorted(signatures, reverse=True))

    def _representative(self, key: CanonicalKey) -> list[int]:
        num_ranks = self.deck.num_ranks
        blocks = [0] * len(key[0])
        for suit, signature in enumerate(key):
            for i, ranks in enumerate(signature):
                blocks[i] |= ranks << (suit * num_ranks)
        return blocks

    def index(self, blocks: Sequence[int]) -> int:
        """
        Canonical index of a combination.

        The number of blocks selects the round: passing only the first block
        of a [2, 5] indexer gives the round-0 (hole only) index.

        Raises:
            ValueError: If the blocks do not form a valid combination
        """
        round_idx = len(blocks) - 1
        if not 0 <= round_idx < self.rounds:
            raise ValueError(f"Expected 1 to {self.rounds} blocks, got {len(blocks)}")
        try:
            return self._index_of[round_idx][self.canonical_key(blocks)]
        except KeyError:
            raise ValueError(
                f"Blocks {[self.deck.format_cards(b) for b in blocks]} are not a valid "
                f"{list(self.cards_per_round[: round_idx + 1])} combination"
            ) from None

    def unindex(self, index: int, round_idx: int) -> list[int]:
        """Canonical representative blocks of an index in a round."""
        return self._representative(self._keys[round_idx][index])

    def __repr__(self) -> str:
        return f"HandIndexer({list(self.cards_per_round)}, count={self.count})"


@lru_cache(maxsize=None)
def _cached_indexer(cards_per_round: tuple[int, ...], deck: Deck) -> HandIndexer:
    return HandIndexer(cards_per_round, deck)


def get_indexer(cards_per_round: Sequence[int], deck: Deck = STANDARD_DECK) -> HandIndexer:
    """Per-process shared indexer for a round structure (built on first use)."""
    return _cached_indexer(tuple(cards_per_round), deck)


def suit_multiplicity(blocks: Sequence[int], deck: Deck = STANDARD_DECK) -> int:
    """
    Number of raw combinations in the suit-isomorphism class of ``blocks``.

    Suits with identical signatures are interchangeable. Choosing which of
    the remaining suits take each group of c identical signatures multiplies
    the count by C(remaining, c), computed as a falling factorial over the
    shrinking pool of suits.
    """
    signatures = sorted(
        tuple(deck.suit_ranks(block, suit) for block in blocks)
        for suit in range(deck.num_suits)
    )

    remaining = deck.num_suits
    multiplicity = 1
    start = 0
    while start < len(signatures):
        end = start
        while end < len(signatures) and signatures[end] == signatures[start]:
            end += 1
        group = end - start
        for k in range(group):
            multiplicity *= remaining - k
            multiplicity //= k + 1
        remaining -= group
        start = end

    return multiplicity
