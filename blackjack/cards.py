"""Card and Shoe classes - immutable cards and a seeded multi-deck shoe."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator

from blackjack.errors import ShoeExhausted

DECK_SIZE = 52


class Suit(Enum):
    """Card suits."""

    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    SPADES = "Spades"

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, numbered 1 (Ace) through 13 (King)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.blackjack_value == 10


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh', '10d'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {str(n): Rank(n) for n in range(2, 11)}
        rank_map.update({"T": Rank.TEN, "J": Rank.JACK, "Q": Rank.QUEEN, "K": Rank.KING, "A": Rank.ACE})

        suit_map = {
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


def build_cards(num_decks: int) -> list[Card]:
    """Return `num_decks` unshuffled decks, suit by suit, Ace to King."""
    return [
        Card(rank, suit)
        for _ in range(num_decks)
        for suit in Suit
        for rank in Rank
    ]


class Shoe:
    """
    A multi-deck shoe with a reproducible draw order.

    Shuffling uses ``random.Random(seed).shuffle``, a Fisher-Yates shuffle
    driven by the Mersenne Twister, so the same seed always yields the same
    sequence of draws. Cards are drawn from the end of the internal list.
    """

    def __init__(
        self,
        num_decks: int = 6,
        penetration: float = 0.75,
        seed: int = 0,
    ) -> None:
        """
        Initialize and shuffle a shoe.

        Args:
            num_decks: Number of decks in the shoe
            penetration: Fraction of shoe dealt before reshuffle (0 disables)
            seed: Seed for the shuffling generator
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")
        if not 0.0 <= penetration <= 1.0:
            raise ValueError("Penetration must be between 0 and 1")

        self._num_decks = num_decks
        self._penetration = penetration
        self._seed = seed
        self._rng = Random(seed)
        self._cards: list[Card] = []
        self.shuffle()

    @classmethod
    def stacked(cls, cards: Iterable[Card], penetration: float = 0.0) -> "Shoe":
        """
        Build a shoe that deals exactly `cards`, first card first.

        Used to replay a recorded round or set up a specific hand. The deck
        count is rounded up so that shoe accounting stays consistent.
        """
        order = list(cards)
        num_decks = max(1, -(-len(order) // DECK_SIZE))
        shoe = cls(num_decks=num_decks, penetration=penetration)
        shoe._cards = list(reversed(order))
        return shoe

    def shuffle(self) -> None:
        """Rebuild the full shoe and shuffle it with the running generator."""
        self._cards = build_cards(self._num_decks)
        self._rng.shuffle(self._cards)

    def reset(self, seed: int) -> None:
        """Reseed the generator and reshuffle a full shoe."""
        self._seed = seed
        self._rng = Random(seed)
        self.shuffle()

    def draw(self) -> Card:
        """Draw the next card from the shoe."""
        if not self._cards:
            raise ShoeExhausted()
        return self._cards.pop()

    def peek(self, count: int = 1) -> list[Card]:
        """Return the next `count` cards without drawing them."""
        return list(reversed(self._cards[-count:])) if count > 0 else []

    @property
    def needs_shuffle(self) -> bool:
        """Check if the penetration threshold has been reached."""
        if self._penetration == 0.0:
            return False
        return self.cards_dealt / self.total_cards >= self._penetration

    @property
    def seed(self) -> int:
        """Return the seed the current shuffle sequence started from."""
        return self._seed

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt."""
        return self.total_cards - len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the total number of cards in a full shoe."""
        return self._num_decks * DECK_SIZE

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self._num_decks

    @property
    def penetration(self) -> float:
        """Return the configured penetration."""
        return self._penetration

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(reversed(self._cards))
