"""Pytest fixtures for blackjack engine tests."""

import pytest

from blackjack.cards import Shoe
from blackjack.game import Game
from blackjack.hand import Hand
from blackjack.options import GameOptions
from tests.helpers import cards, make_hand


@pytest.fixture
def shoe():
    """A shuffled 6-deck shoe."""
    return Shoe(num_decks=6, penetration=0.75, seed=42)


@pytest.fixture
def options():
    """Default table rules."""
    return GameOptions()


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10S", "6H")


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return make_hand("8S", "8H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return make_hand("10S", "6H", "KC")


@pytest.fixture
def game():
    """A new seeded game instance."""
    return Game(seed=42)


@pytest.fixture
def rigged_game():
    """
    Factory for a game whose shoe deals the given cards in order.

    With one bettor the deal order is: player, dealer up, player, dealer hole,
    then any further draws.
    """

    def _make(*names: str, options: GameOptions | None = None) -> Game:
        return Game(options=options or GameOptions(), shoe=Shoe.stacked(cards(*names)))

    return _make


@pytest.fixture
def dealt_game(rigged_game):
    """
    Factory for a single-player game that has joined, bet and been dealt.

    Returns the game and the player id.
    """

    def _make(*names: str, money: int = 1000, bet: int = 100, options: GameOptions | None = None):
        g = rigged_game(*names, options=options)
        player_id = g.join(money)
        g.start_betting()
        g.bet(player_id, bet)
        g.deal()
        return g, player_id

    return _make
