"""Round result records produced by the showdown."""

from dataclasses import dataclass
from enum import Enum


class HandOutcome(Enum):
    """How a single hand finished against the dealer."""

    WIN = "Win"
    LOSE = "Lose"
    PUSH = "Push"
    BLACKJACK = "Blackjack"
    BUST = "Bust"
    SURRENDER = "Surrender"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandResult:
    """
    Result for a single hand.

    Attributes:
        hand_index: Position of the hand in the player's hand list
        outcome: How the hand finished
        bet: Total stake on the hand (doubled stakes included)
        payout: Amount credited back at showdown, stake included
        player_value: Final hand value
        dealer_value: Final dealer value
    """

    hand_index: int
    outcome: HandOutcome
    bet: int
    payout: int
    player_value: int
    dealer_value: int


@dataclass(frozen=True)
class PlayerResult:
    """Result for one player across all of their hands."""

    player_id: int
    hands: tuple[HandResult, ...]
    total_payout: int
    net: int
    insurance_bet: int
    insurance_payout: int


@dataclass(frozen=True)
class RoundResult:
    """Result of the entire round, computed once and kept until the round is cleared."""

    players: tuple[PlayerResult, ...]
    dealer_value: int
    dealer_bust: bool
    dealer_blackjack: bool

    def for_player(self, player_id: int) -> PlayerResult | None:
        """Return the result for `player_id`, if they played this round."""
        for result in self.players:
            if result.player_id == player_id:
                return result
        return None
