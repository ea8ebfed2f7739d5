"""Shared builders and hypothesis strategies for tests."""

from hypothesis import strategies as st

from blackjack.cards import Card, Rank, Suit
from blackjack.hand import Hand


def make_hand(*cards: str, bet: int = 10, **kwargs) -> Hand:
    """Build a hand from card strings like 'AS', '10h'."""
    hand = Hand(bet=bet, **kwargs)
    for card in cards:
        hand.add_card(Card.from_string(card))
    return hand


def cards(*names: str) -> list[Card]:
    """Parse a sequence of card strings."""
    return [Card.from_string(name) for name in names]


@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)
