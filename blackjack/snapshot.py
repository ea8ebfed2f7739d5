"""Pydantic schemas for the read-only table snapshot and round results.

`build_snapshot` is the only place that turns engine state into something a
player may see, so it is also the only place the dealer's hole card is
masked.
"""

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

from blackjack.cards import Card
from blackjack.hand import DealerHand, evaluate_cards
from blackjack.results import HandResult, PlayerResult, RoundResult

if TYPE_CHECKING:
    from blackjack.game.engine import Game

SNAPSHOT_VERSION = 1


class CardSchema(BaseModel):
    """Card representation."""

    model_config = ConfigDict(frozen=True)

    suit: str
    rank: int = Field(..., ge=1, le=13, description="1 = Ace, 11-13 = Jack, Queen, King")

    @classmethod
    def from_card(cls, card: Card) -> "CardSchema":
        return cls(suit=card.suit.value, rank=card.rank.value)


class HandSchema(BaseModel):
    """Player hand representation."""

    index: int
    cards: list[CardSchema]
    value: int
    is_soft: bool
    status: str
    bet: int
    from_split: bool
    can_split: bool


class DealerSchema(BaseModel):
    """Dealer hand representation; `None` stands for the face-down hole card."""

    cards: list[CardSchema | None]
    value: int
    visible_value: int
    is_soft: bool
    is_blackjack: bool
    is_bust: bool
    hole_revealed: bool

    @classmethod
    def from_dealer(cls, dealer: DealerHand) -> "DealerSchema":
        """Mask the hole card and everything derived from it until it is revealed."""
        if dealer.hole_revealed:
            value, is_soft = evaluate_cards(dealer.cards)
            return cls(
                cards=[CardSchema.from_card(card) for card in dealer.cards],
                value=value,
                visible_value=value,
                is_soft=is_soft,
                is_blackjack=dealer.is_blackjack,
                is_bust=dealer.is_bust,
                hole_revealed=True,
            )

        visible = dealer.visible_cards
        value, is_soft = evaluate_cards(visible)
        cards: list[CardSchema | None] = [CardSchema.from_card(card) for card in visible]
        cards.extend(None for _ in dealer.cards[len(visible):])
        return cls(
            cards=cards,
            value=value,
            visible_value=value,
            is_soft=is_soft,
            is_blackjack=False,
            is_bust=False,
            hole_revealed=False,
        )


class TurnSchema(BaseModel):
    """Whose decision the table is waiting on."""

    player_id: int
    hand_index: int


class Snapshot(BaseModel):
    """Everything one player is allowed to see about the table."""

    version: Literal[1] = SNAPSHOT_VERSION
    state: str
    player_id: int | None = None
    money: int | None = None
    bet: int | None = None
    hands: list[HandSchema] = Field(default_factory=list)
    dealer: DealerSchema
    current_turn: TurnSchema | None = None
    insurance_offered: bool
    insurance_bet: int | None = None
    cards_remaining: int
    seed: int


class HandResultSchema(BaseModel):
    """Showdown result for a single hand."""

    hand_index: int
    outcome: str
    bet: int
    payout: int
    player_value: int
    dealer_value: int

    @classmethod
    def from_result(cls, result: HandResult) -> "HandResultSchema":
        return cls(
            hand_index=result.hand_index,
            outcome=result.outcome.value,
            bet=result.bet,
            payout=result.payout,
            player_value=result.player_value,
            dealer_value=result.dealer_value,
        )


class PlayerResultSchema(BaseModel):
    """Showdown result for one player."""

    player_id: int
    hands: list[HandResultSchema]
    total_payout: int
    net: int
    insurance_bet: int
    insurance_payout: int

    @classmethod
    def from_result(cls, result: PlayerResult) -> "PlayerResultSchema":
        return cls(
            player_id=result.player_id,
            hands=[HandResultSchema.from_result(hand) for hand in result.hands],
            total_payout=result.total_payout,
            net=result.net,
            insurance_bet=result.insurance_bet,
            insurance_payout=result.insurance_payout,
        )


class RoundResultSchema(BaseModel):
    """Showdown result for the whole round."""

    players: list[PlayerResultSchema]
    dealer_value: int
    dealer_bust: bool
    dealer_blackjack: bool

    @classmethod
    def from_result(cls, result: RoundResult) -> "RoundResultSchema":
        return cls(
            players=[PlayerResultSchema.from_result(player) for player in result.players],
            dealer_value=result.dealer_value,
            dealer_bust=result.dealer_bust,
            dealer_blackjack=result.dealer_blackjack,
        )


def build_snapshot(game: "Game", player_id: int | None = None) -> Snapshot:
    """
    Build the snapshot of `game` as seen from `player_id`'s seat.

    Args:
        game: The table
        player_id: Seat to report money, bet and hands for; None for a spectator

    Returns:
        A snapshot that never contains the dealer's hole card before reveal
    """
    hands = []
    if player_id is not None:
        for index, hand in enumerate(game.get_hands(player_id)):
            hands.append(
                HandSchema(
                    index=index,
                    cards=[CardSchema.from_card(card) for card in hand.cards],
                    value=hand.value,
                    is_soft=hand.is_soft,
                    status=hand.status.value,
                    bet=hand.bet,
                    from_split=hand.from_split,
                    can_split=game.can_split(player_id, index),
                )
            )

    turn = game.current_turn
    return Snapshot(
        state=game.state.label,
        player_id=player_id,
        money=game.get_money(player_id) if player_id is not None else None,
        bet=game.get_bet(player_id) if player_id is not None else None,
        hands=hands,
        dealer=DealerSchema.from_dealer(game.get_dealer_hand()),
        current_turn=(
            TurnSchema(player_id=turn.player_id, hand_index=turn.hand_index)
            if turn is not None
            else None
        ),
        insurance_offered=game.insurance_offered,
        insurance_bet=game.get_insurance_bet(player_id) if player_id is not None else None,
        cards_remaining=game.cards_remaining,
        seed=game.seed,
    )
