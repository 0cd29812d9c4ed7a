"""
Card sets as integer bit masks.

Card ``i`` of a deck has suit ``i // num_ranks`` and rank ``i % num_ranks``,
so each suit occupies a contiguous run of ``num_ranks`` bits:

    standard deck: bits 0-12 = 2s..As, bits 13-25 = 2h..Ah, ...

Reduced decks (fewer ranks or suits) use the same layout and keep the
highest ranks, which lets the whole table pipeline run on small instances.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from math import comb

RANK_CHARS = "23456789TJQKA"
SUIT_CHARS = "shdc"

BOARD_CARDS = 5
HOLE_CARDS = 2


@dataclass(frozen=True)
class Deck:
    """
    Deck geometry.

    Attributes:
        num_ranks: Ranks per suit (at most 13)
        num_suits: Number of suits (at most 4)
    """

    num_ranks: int = 13
    num_suits: int = 4

    def __post_init__(self):
        if not 1 <= self.num_ranks <= len(RANK_CHARS):
            raise ValueError(f"num_ranks must be in [1, 13], got {self.num_ranks}")
        if not 1 <= self.num_suits <= len(SUIT_CHARS):
            raise ValueError(f"num_suits must be in [1, 4], got {self.num_suits}")
        if self.num_cards < BOARD_CARDS + 2 * HOLE_CARDS:
            raise ValueError(
                f"Deck of {self.num_cards} cards cannot deal a board and two hands"
            )

    @property
    def num_cards(self) -> int:
        return self.num_ranks * self.num_suits

    @property
    def rank_mask(self) -> int:
        """Bit mask covering one suit."""
        return (1 << self.num_ranks) - 1

    @property
    def max_strength(self) -> int:
        """
        Normaliser for strength ranks.

        Twice the number of hole pairs left once a river board is dealt
        (2162 for the standard deck). Every rank is strictly below it.
        """
        return 2 * comb(self.num_cards - BOARD_CARDS, HOLE_CARDS)

    def card(self, rank: int, suit: int) -> int:
        return suit * self.num_ranks + rank

    def rank_of(self, card: int) -> int:
        return card % self.num_ranks

    def suit_of(self, card: int) -> int:
        return card // self.num_ranks

    def suit_ranks(self, cards: int, suit: int) -> int:
        """Rank mask of the cards of one suit."""
        return (cards >> (suit * self.num_ranks)) & self.rank_mask

    def card_to_str(self, card: int) -> str:
        rank_char = RANK_CHARS[len(RANK_CHARS) - self.num_ranks + self.rank_of(card)]
        return rank_char + SUIT_CHARS[self.suit_of(card)]

    def format_cards(self, cards: int) -> str:
        """Format a card set, e.g. ``'AsKh'``."""
        return "".join(self.card_to_str(card) for card in cards_in(cards))

    def parse_cards(self, text: str) -> int:
        """
        Parse concatenated card strings into a card set.

        Args:
            text: Cards such as ``'AsKh2c'`` (whitespace ignored)

        Returns:
            Card set bit mask
        """
        text = "".join(text.split())
        if len(text) % 2:
            raise ValueError(f"Malformed card string: {text!r}")

        lowest_rank = len(RANK_CHARS) - self.num_ranks
        cards = 0
        for i in range(0, len(text), 2):
            rank_char, suit_char = text[i], text[i + 1]
            rank = RANK_CHARS.find(rank_char.upper()) - lowest_rank
            suit = SUIT_CHARS.find(suit_char.lower())
            if rank < 0 or suit < 0 or suit >= self.num_suits:
                raise ValueError(f"Card {rank_char}{suit_char} is not in this deck")
            bit = 1 << self.card(rank, suit)
            if cards & bit:
                raise ValueError(f"Duplicate card {rank_char}{suit_char}")
            cards |= bit
        return cards


STANDARD_DECK = Deck()


def cards_in(cards: int) -> Iterator[int]:
    """Yield card indices of a card set in increasing order."""
    while cards:
        low = cards & -cards
        yield low.bit_length() - 1
        cards ^= low


def card_pairs(dead: int, num_cards: int) -> Iterator[tuple[int, int, int]]:
    """
    Enumerate unordered card pairs avoiding dead cards.

    Yields:
        (a, b, mask) with a < b and mask = 1 << a | 1 << b
    """
    for a in range(num_cards):
        if dead >> a & 1:
            continue
        for b in range(a + 1, num_cards):
            if dead >> b & 1:
                continue
            yield a, b, 1 << a | 1 << b
