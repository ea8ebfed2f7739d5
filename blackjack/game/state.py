"""Game state enumeration."""

from dataclasses import dataclass
from enum import Enum, auto


class GameState(Enum):
    """
    Round state machine states.

    Flow: IDLE → BETTING → DEALING → (INSURANCE) → PLAYER_TURN → DEALER_TURN → ROUND_OVER → IDLE
    """

    # No round open; players may join or leave
    IDLE = auto()

    # Accepting one bet per player
    BETTING = auto()

    # Initial cards being dealt (transient, inside deal())
    DEALING = auto()

    # Dealer shows an Ace; players decide on insurance
    INSURANCE = auto()

    # Player actions
    PLAYER_TURN = auto()

    # Dealer plays
    DEALER_TURN = auto()

    # Dealer finished; showdown may be computed
    ROUND_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def label(self) -> str:
        """Return the external name, e.g. ``PlayerTurn``."""
        return self.name.title().replace("_", "")


# Valid state transitions
VALID_TRANSITIONS: dict[GameState, list[GameState]] = {
    GameState.IDLE: [GameState.BETTING],
    GameState.BETTING: [GameState.DEALING, GameState.IDLE],  # IDLE if bets are cancelled
    GameState.DEALING: [GameState.INSURANCE, GameState.PLAYER_TURN, GameState.DEALER_TURN],
    GameState.INSURANCE: [GameState.PLAYER_TURN, GameState.DEALER_TURN, GameState.ROUND_OVER],
    GameState.PLAYER_TURN: [GameState.DEALER_TURN],
    GameState.DEALER_TURN: [GameState.ROUND_OVER],
    GameState.ROUND_OVER: [GameState.IDLE],
}


def is_valid_transition(from_state: GameState, to_state: GameState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])


def check_transitions(transitions: list[dict]) -> None:
    """
    Verify every edge of a `transitions` table is a valid state transition.

    Args:
        transitions: Machine transition dicts with ``source`` and ``dest``

    Raises:
        ValueError: If a trigger moves along an edge not in VALID_TRANSITIONS
    """
    for transition in transitions:
        sources = transition["source"]
        if isinstance(sources, str):
            sources = [sources]
        dest = GameState[transition["dest"].upper()]
        for source in sources:
            if not is_valid_transition(GameState[source.upper()], dest):
                raise ValueError(
                    f"{transition['trigger']}: invalid transition {source} -> {transition['dest']}"
                )


@dataclass(frozen=True)
class TurnPosition:
    """Whose decision the engine is waiting on."""

    player_id: int
    hand_index: int
