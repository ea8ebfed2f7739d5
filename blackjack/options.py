"""Blackjack table rules."""

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from math import ceil, floor
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blackjack.config import EngineConfig


class DoubleRule(Enum):
    """Hand totals on which doubling down is allowed."""

    ANY = "any"
    NINE_OR_TEN = "9-10"
    NINE_THROUGH_11 = "9-11"
    NINE_THROUGH_15 = "9-15"
    NONE = "none"

    def allows(self, value: int) -> bool:
        """Check if a hand of `value` may be doubled."""
        if self == DoubleRule.ANY:
            return True
        if self == DoubleRule.NINE_OR_TEN:
            return value in (9, 10)
        if self == DoubleRule.NINE_THROUGH_11:
            return 9 <= value <= 11
        if self == DoubleRule.NINE_THROUGH_15:
            return 9 <= value <= 15
        return False


class RoundingMode(Enum):
    """How fractional payouts are turned into whole chips."""

    UP = "up"
    DOWN = "down"
    NEAREST = "nearest"

    def apply(self, amount: Fraction) -> int:
        """Round a non-negative amount to an integer."""
        if self == RoundingMode.UP:
            return ceil(amount)
        if self == RoundingMode.DOWN:
            return floor(amount)
        # Half away from zero; payouts are never negative
        return floor(amount + Fraction(1, 2))


@dataclass(frozen=True)
class GameOptions:
    """
    Blackjack table rules configuration.

    Fixed for the lifetime of a `Game`; changing rules means building a new
    game. Payout ratios are exact fractions (3:2 is ``Fraction(3, 2)``).
    """

    # Deck configuration
    num_decks: int = 6
    penetration: float = 0.75  # 0 disables the automatic reshuffle check

    # Betting limits
    min_bet: int = 1
    max_bet: int | None = None

    # Dealer rules
    dealer_hits_soft_17: bool = False  # H17 vs S17

    # Payouts
    blackjack_payout: Fraction = Fraction(3, 2)
    rounding_blackjack: RoundingMode = RoundingMode.DOWN

    # Double down rules
    double_rule: DoubleRule = DoubleRule.ANY
    double_after_split: bool = True  # DAS

    # Split rules
    max_split_depth: int = 3  # Splits in a single hand's lineage
    max_hands: int = 4  # Hands a player may hold after splitting
    split_by_value: bool = True  # K-Q counts as a pair
    split_aces_only_once: bool = True
    split_aces_receive_one_card: bool = True

    # Surrender rules
    surrender_allowed: bool = True
    rounding_surrender: RoundingMode = RoundingMode.NEAREST

    # Insurance
    insurance_offered: bool = True
    insurance_payout: Fraction = Fraction(2)

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        object.__setattr__(self, "blackjack_payout", Fraction(self.blackjack_payout))
        object.__setattr__(self, "insurance_payout", Fraction(self.insurance_payout))

        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if not 0.0 <= self.penetration <= 1.0:
            raise ValueError("penetration must be between 0 and 1")
        if self.min_bet < 1:
            raise ValueError("min_bet must be at least 1")
        if self.max_bet is not None and self.max_bet < self.min_bet:
            raise ValueError("max_bet must not be below min_bet")
        if self.blackjack_payout < 1:
            raise ValueError("blackjack_payout must be at least 1")
        if self.insurance_payout <= 0:
            raise ValueError("insurance_payout must be positive")
        if self.max_split_depth < 0:
            raise ValueError("max_split_depth must not be negative")
        if self.max_hands < 1:
            raise ValueError("max_hands must be at least 1")

    def blackjack_winnings(self, bet: int) -> int:
        """Return the winnings (excluding the returned stake) on a blackjack."""
        return self.rounding_blackjack.apply(bet * self.blackjack_payout)

    def surrender_refund(self, bet: int) -> int:
        """Return the part of the bet refunded on surrender."""
        return self.rounding_surrender.apply(Fraction(bet, 2))

    def insurance_winnings(self, stake: int) -> int:
        """Return the winnings (excluding the returned stake) on insurance."""
        return RoundingMode.DOWN.apply(stake * self.insurance_payout)

    @classmethod
    def from_config(cls, config: "EngineConfig") -> "GameOptions":
        """Build options from environment-driven engine configuration."""
        return cls(
            num_decks=config.num_decks,
            penetration=config.penetration,
            min_bet=config.min_bet,
            max_bet=config.max_bet,
            dealer_hits_soft_17=config.dealer_hits_soft_17,
            surrender_allowed=config.surrender_allowed,
            insurance_offered=config.insurance_offered,
        )

    @classmethod
    def vegas_strip(cls) -> "GameOptions":
        """Standard Vegas Strip rules."""
        return cls(
            num_decks=6,
            dealer_hits_soft_17=False,
            double_after_split=True,
            surrender_allowed=True,
        )

    @classmethod
    def downtown_vegas(cls) -> "GameOptions":
        """Downtown Las Vegas rules (typically H17)."""
        return cls(
            num_decks=6,
            dealer_hits_soft_17=True,
            double_after_split=True,
            surrender_allowed=True,
        )

    @classmethod
    def single_deck(cls) -> "GameOptions":
        """Single deck rules."""
        return cls(
            num_decks=1,
            dealer_hits_soft_17=True,
            double_after_split=False,
            double_rule=DoubleRule.NINE_THROUGH_11,
            surrender_allowed=False,
        )

    @classmethod
    def atlantic_city(cls) -> "GameOptions":
        """Atlantic City rules."""
        return cls(
            num_decks=8,
            dealer_hits_soft_17=False,
            double_after_split=True,
            surrender_allowed=True,
        )
