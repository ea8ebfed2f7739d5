"""Round state machine, events and payouts."""

from blackjack.game.events import EventEmitter, EventType, GameEvent
from blackjack.game.state import GameState, TurnPosition
from blackjack.game.engine import Game

__all__ = [
    "EventEmitter",
    "EventType",
    "GameEvent",
    "GameState",
    "TurnPosition",
    "Game",
]
