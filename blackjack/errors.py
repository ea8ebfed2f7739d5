"""Exceptions raised by the blackjack engine.

Every action validates before it mutates, so an exception always means the
game is exactly as it was before the call.
"""


class BlackjackError(Exception):
    """Base class for all engine errors."""

    default_message = "blackjack engine error"

    def __init__(self, message: str | None = None, **details: object) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details


class InvalidPhase(BlackjackError):
    """Action attempted outside the game state that permits it."""

    default_message = "invalid game state for this action"

    def __init__(self, message: str | None = None, *, state: object = None, **details: object) -> None:
        super().__init__(message, state=state, **details)
        self.state = state


class PlayerNotFound(BlackjackError):
    """No joined player has the given id."""

    default_message = "player not found"


class NotYourTurn(BlackjackError):
    """Action targets a player or hand whose turn it is not."""

    default_message = "not this player's turn"


class InvalidHandIndex(BlackjackError):
    """Action targets a hand that does not exist."""

    default_message = "hand not found"


class HandNotActive(BlackjackError):
    """Action targets a hand that is already resolved."""

    default_message = "hand is not active"


class InsufficientFunds(BlackjackError):
    """Bet, double, split or insurance exceeds available money."""

    default_message = "insufficient funds"

    def __init__(self, message: str | None = None, *, required: int = 0, available: int = 0) -> None:
        super().__init__(message, required=required, available=available)
        self.required = required
        self.available = available


class InvalidBetAmount(BlackjackError):
    """Bet amount is non-positive or outside the table limits."""

    default_message = "invalid bet amount"


class BetAlreadyPlaced(InvalidBetAmount):
    """Player already placed a bet this round."""

    default_message = "bet already placed this round"


class NoBetsPlaced(InvalidPhase):
    """Deal requested before any player placed a bet."""

    default_message = "no players have placed bets"


class SplitNotAllowed(BlackjackError):
    """Hand is not a splittable pair, depth is exceeded, or the rule forbids it."""

    default_message = "cannot split this hand"


class DoubleNotAllowed(BlackjackError):
    """Hand shape or table rules do not allow doubling down."""

    default_message = "cannot double down on this hand"


class SurrenderNotAllowed(BlackjackError):
    """Surrender is disabled or the hand is past its first decision."""

    default_message = "cannot surrender at this point"


class ShoeExhausted(BlackjackError):
    """A card was needed but the shoe is empty."""

    default_message = "no cards left in the shoe"


class InsuranceNotOffered(InvalidPhase):
    """Insurance action outside the insurance window."""

    default_message = "insurance is not offered"


class InsuranceAlreadyDecided(BlackjackError):
    """Player already took or declined insurance this round."""

    default_message = "player already made insurance decision"
