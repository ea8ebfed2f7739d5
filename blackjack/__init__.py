"""Blackjack round engine - deterministic, UI-agnostic."""

from blackjack.cards import Card, Rank, Shoe, Suit
from blackjack.errors import BlackjackError
from blackjack.game import EventType, Game, GameEvent, GameState
from blackjack.hand import DealerHand, Hand, HandStatus
from blackjack.options import DoubleRule, GameOptions, RoundingMode
from blackjack.results import HandOutcome, HandResult, PlayerResult, RoundResult
from blackjack.session import BlackjackSession
from blackjack.snapshot import RoundResultSchema, Snapshot

__all__ = [
    "Card",
    "Rank",
    "Shoe",
    "Suit",
    "BlackjackError",
    "EventType",
    "Game",
    "GameEvent",
    "GameState",
    "DealerHand",
    "Hand",
    "HandStatus",
    "DoubleRule",
    "GameOptions",
    "RoundingMode",
    "HandOutcome",
    "HandResult",
    "PlayerResult",
    "RoundResult",
    "BlackjackSession",
    "RoundResultSchema",
    "Snapshot",
]
