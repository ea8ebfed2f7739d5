"""Showdown: compare resolved hands to the dealer and compute payouts.

These functions only compute. The engine credits the returned totals to
player money in a single batch and records the result.
"""

from typing import Mapping, Sequence

from blackjack.hand import DealerHand, Hand, HandStatus
from blackjack.options import GameOptions
from blackjack.results import HandOutcome, HandResult, PlayerResult, RoundResult


def settle_hand(hand: Hand, dealer: DealerHand, options: GameOptions) -> tuple[HandOutcome, int]:
    """
    Decide the outcome of one hand against the dealer's final hand.

    Returns:
        (outcome, payout) where payout is the amount credited back, stake included
    """
    bet = hand.bet

    if hand.status == HandStatus.SURRENDERED:
        # Half the bet was already refunded when the player surrendered
        return HandOutcome.SURRENDER, 0

    if hand.status == HandStatus.BUST or hand.is_busted:
        return HandOutcome.BUST, 0

    if hand.status == HandStatus.BLACKJACK:
        if dealer.is_blackjack:
            return HandOutcome.PUSH, bet
        return HandOutcome.BLACKJACK, bet + options.blackjack_winnings(bet)

    if dealer.is_bust:
        return HandOutcome.WIN, bet * 2

    if hand.value > dealer.value:
        return HandOutcome.WIN, bet * 2
    if hand.value < dealer.value:
        return HandOutcome.LOSE, 0
    return HandOutcome.PUSH, bet


def settle_insurance(stake: int, dealer: DealerHand, options: GameOptions) -> int:
    """Return the insurance payout (stake included), or 0 if the bet lost."""
    if stake > 0 and dealer.is_blackjack:
        return stake + options.insurance_winnings(stake)
    return 0


def settle_round(
    betting_order: Sequence[int],
    hands: Mapping[int, Sequence[Hand]],
    insurance_bets: Mapping[int, int],
    dealer: DealerHand,
    options: GameOptions,
) -> RoundResult:
    """
    Settle every player's hands and insurance against the dealer.

    Args:
        betting_order: Player ids in turn order
        hands: Each player's hands for the round
        insurance_bets: Insurance stake per player (missing means none)
        dealer: The dealer's final hand
        options: Table rules

    Returns:
        The full round result; `net` counts surrender refunds already paid
    """
    dealer_value = dealer.value
    player_results = []

    for player_id in betting_order:
        hand_results = []
        total_payout = 0
        total_staked = 0
        refunded = 0

        for hand_index, hand in enumerate(hands.get(player_id, ())):
            outcome, payout = settle_hand(hand, dealer, options)
            total_payout += payout
            total_staked += hand.bet
            if outcome == HandOutcome.SURRENDER:
                refunded += options.surrender_refund(hand.bet)

            hand_results.append(
                HandResult(
                    hand_index=hand_index,
                    outcome=outcome,
                    bet=hand.bet,
                    payout=payout,
                    player_value=hand.value,
                    dealer_value=dealer_value,
                )
            )

        insurance_bet = insurance_bets.get(player_id, 0)
        insurance_payout = settle_insurance(insurance_bet, dealer, options)
        total_payout += insurance_payout
        total_staked += insurance_bet

        player_results.append(
            PlayerResult(
                player_id=player_id,
                hands=tuple(hand_results),
                total_payout=total_payout,
                net=total_payout + refunded - total_staked,
                insurance_bet=insurance_bet,
                insurance_payout=insurance_payout,
            )
        )

    return RoundResult(
        players=tuple(player_results),
        dealer_value=dealer_value,
        dealer_bust=dealer.is_bust,
        dealer_blackjack=dealer.is_blackjack,
    )
