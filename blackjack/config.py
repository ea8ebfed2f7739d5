"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_optional_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass(frozen=True)
class EngineConfig:
    """Default table and session configuration."""

    num_decks: int = field(default_factory=lambda: int(os.getenv("BLACKJACK_DECKS", "6")))
    penetration: float = field(
        default_factory=lambda: float(os.getenv("BLACKJACK_PENETRATION", "0.75"))
    )
    min_bet: int = field(default_factory=lambda: int(os.getenv("BLACKJACK_MIN_BET", "1")))
    max_bet: int | None = field(default_factory=lambda: _env_optional_int("BLACKJACK_MAX_BET"))
    dealer_hits_soft_17: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_HITS_SOFT_17", "false")
    )
    surrender_allowed: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_SURRENDER", "true")
    )
    insurance_offered: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_INSURANCE", "true")
    )
    seed: int = field(default_factory=lambda: int(os.getenv("BLACKJACK_SEED", "0")))
    starting_money: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_STARTING_MONEY", "1000"))
    )


# Global configuration instance
config = EngineConfig()
