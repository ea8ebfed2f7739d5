"""Single-seat session connecting one player to a blackjack table."""

from typing import Callable

from blackjack.config import EngineConfig, config
from blackjack.errors import PlayerNotFound
from blackjack.game.engine import Game
from blackjack.game.events import EventType, GameEvent
from blackjack.game.state import GameState
from blackjack.options import GameOptions
from blackjack.snapshot import RoundResultSchema, Snapshot


class BlackjackSession:
    """
    Session wrapper around a `Game` with a single seat.

    Every action is performed for the joined player, so callers only pass
    hand indexes. Errors from the engine propagate unchanged.
    """

    def __init__(
        self,
        options: GameOptions | None = None,
        seed: int = 0,
        starting_money: int = 1000,
    ) -> None:
        """
        Initialize the session.

        Args:
            options: Table rules (uses defaults if not provided)
            seed: Seed for the shoe
            starting_money: Money used by `join()` when no amount is given
        """
        self.game = Game(options=options, seed=seed)
        self.starting_money = starting_money
        self._player_id: int | None = None

    @classmethod
    def from_config(cls, cfg: EngineConfig = config) -> "BlackjackSession":
        """Create a session from environment-driven configuration."""
        return cls(
            options=GameOptions.from_config(cfg),
            seed=cfg.seed,
            starting_money=cfg.starting_money,
        )

    @property
    def player_id(self) -> int | None:
        return self._player_id

    @property
    def state(self) -> GameState:
        return self.game.state

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to the table's events."""
        self.game.subscribe(handler, event_type)

    def join(self, money: int | None = None) -> int:
        """
        Take the seat.

        Joining again returns the existing player id without adding money.
        """
        if self._player_id is not None:
            return self._player_id
        self._player_id = self.game.join(self.starting_money if money is None else money)
        return self._player_id

    def _require_player(self) -> int:
        if self._player_id is None:
            raise PlayerNotFound("player is not joined")
        return self._player_id

    def reset(self, seed: int) -> None:
        """Reseed the shoe; the seat and its money are kept."""
        self.game.reset(seed)

    def start_betting(self) -> None:
        self.game.start_betting()

    def bet(self, amount: int) -> None:
        self.game.bet(self._require_player(), amount)

    def deal(self) -> None:
        self.game.deal()

    def hit(self, hand_index: int = 0) -> None:
        self.game.hit(self._require_player(), hand_index)

    def stand(self, hand_index: int = 0) -> None:
        self.game.stand(self._require_player(), hand_index)

    def double_down(self, hand_index: int = 0) -> None:
        self.game.double_down(self._require_player(), hand_index)

    def split(self, hand_index: int = 0) -> None:
        self.game.split(self._require_player(), hand_index)

    def surrender(self, hand_index: int = 0) -> int:
        """Surrender a hand; returns the refunded amount."""
        return self.game.surrender(self._require_player(), hand_index)

    def take_insurance(self) -> int:
        """Take the full insurance stake; returns the stake."""
        return self.game.take_insurance(self._require_player())

    def decline_insurance(self) -> None:
        self.game.decline_insurance(self._require_player())

    def finish_insurance(self) -> bool:
        """Close the insurance window; returns whether the dealer had blackjack."""
        return self.game.finish_insurance()

    def dealer_play(self) -> None:
        self.game.dealer_play()

    def showdown(self) -> RoundResultSchema:
        return RoundResultSchema.from_result(self.game.showdown())

    def clear_round(self) -> None:
        self.game.clear_round()

    def snapshot(self) -> Snapshot:
        """Return the table as seen from this seat."""
        return self.game.snapshot(self._player_id)
