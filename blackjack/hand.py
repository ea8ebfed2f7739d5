"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from blackjack.cards import Card


def evaluate_cards(cards: Iterable[Card]) -> tuple[int, bool]:
    """
    Calculate the best value of a set of cards.

    Every Ace starts at 11 and drops to 1 while the total is over 21, so at
    most one Ace is ever counted high.

    Returns:
        (value, is_soft) where is_soft means an Ace is still counted as 11
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    # Reduce aces from 11 to 1 as needed
    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total, aces > 0 and total <= 21


class HandStatus(Enum):
    """Lifecycle of a player hand within a round."""

    ACTIVE = "Active"
    STOOD = "Stood"
    BUST = "Bust"
    BLACKJACK = "Blackjack"
    SURRENDERED = "Surrendered"
    DOUBLED_STOOD = "DoubledStood"

    @property
    def is_terminal(self) -> bool:
        """Check if the hand no longer takes decisions."""
        return self != HandStatus.ACTIVE

    def __str__(self) -> str:
        return self.value


@dataclass
class Hand:
    """A bet-carrying player hand with split lineage and status tracking."""

    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    player_id: int = 0
    status: HandStatus = HandStatus.ACTIVE
    from_split: bool = False
    split_depth: int = 0
    acted: bool = False

    def add_card(self, card: Card) -> None:
        """Add a card, marking the hand bust or blackjack when it becomes one."""
        self.cards.append(card)
        if self.is_busted:
            self.status = HandStatus.BUST
        elif self.is_blackjack:
            self.status = HandStatus.BLACKJACK

    def take_split_card(self) -> Card:
        """Remove and return the second card of a pair."""
        if len(self.cards) != 2:
            raise ValueError("Only a two-card hand can be split")
        return self.cards.pop()

    @property
    def value(self) -> int:
        """Return the highest value that doesn't bust, or the lowest bust value."""
        return evaluate_cards(self.cards)[0]

    @property
    def is_soft(self) -> bool:
        """Check if the hand has an ace counted as 11."""
        return evaluate_cards(self.cards)[1]

    @property
    def is_hard(self) -> bool:
        """Check if the hand is hard (not soft)."""
        return not self.is_soft

    @property
    def is_blackjack(self) -> bool:
        """
        Check if the hand is a natural blackjack.

        A split hand that reaches 21 with two cards is not a blackjack.
        """
        return len(self.cards) == 2 and self.value == 21 and not self.from_split

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > 21

    @property
    def is_active(self) -> bool:
        return self.status == HandStatus.ACTIVE

    @property
    def is_pair(self) -> bool:
        """Check if the hand is two cards of the same rank."""
        return len(self.cards) == 2 and self.cards[0].rank == self.cards[1].rank

    @property
    def is_value_pair(self) -> bool:
        """Check if the hand is two cards of the same point value (e.g. K-Q)."""
        return len(self.cards) == 2 and self.cards[0].value == self.cards[1].value

    @property
    def is_split_aces(self) -> bool:
        """Check if this hand came from splitting Aces."""
        return self.from_split and bool(self.cards) and self.cards[0].is_ace

    @property
    def num_cards(self) -> int:
        """Return the number of cards in the hand."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value}, status={self.status.name})"


@dataclass
class DealerHand:
    """The dealer's hand; the second card stays face down until revealed."""

    cards: list[Card] = field(default_factory=list)
    hole_revealed: bool = False

    def add_card(self, card: Card) -> None:
        self.cards.append(card)

    def reveal_hole(self) -> None:
        self.hole_revealed = True

    @property
    def up_card(self) -> Card | None:
        """Return the face-up first card."""
        return self.cards[0] if self.cards else None

    @property
    def visible_cards(self) -> list[Card]:
        """Return the cards a player is allowed to see."""
        if self.hole_revealed:
            return list(self.cards)
        return self.cards[:1]

    @property
    def visible_value(self) -> int:
        """Return the value of the visible cards only."""
        return evaluate_cards(self.visible_cards)[0]

    @property
    def value(self) -> int:
        return evaluate_cards(self.cards)[0]

    @property
    def is_soft(self) -> bool:
        return evaluate_cards(self.cards)[1]

    @property
    def is_blackjack(self) -> bool:
        return len(self.cards) == 2 and self.value == 21

    @property
    def is_bust(self) -> bool:
        return self.value > 21

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)
