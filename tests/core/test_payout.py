"""Tests for showdown settlement."""

from fractions import Fraction

import pytest

from blackjack.cards import Card
from blackjack.hand import DealerHand, HandStatus
from blackjack.game.payout import settle_hand, settle_insurance, settle_round
from blackjack.options import GameOptions
from blackjack.results import HandOutcome
from tests.helpers import make_hand


def dealer_hand(*names: str) -> DealerHand:
    dealer = DealerHand(hole_revealed=True)
    for name in names:
        dealer.add_card(Card.from_string(name))
    return dealer


def stood(*names: str, bet: int = 10, **kwargs):
    hand = make_hand(*names, bet=bet, **kwargs)
    if hand.status == HandStatus.ACTIVE:
        hand.status = HandStatus.STOOD
    return hand


class TestSettleHand:
    """Tests for single-hand outcomes."""

    def test_higher_value_wins(self, options):
        outcome, payout = settle_hand(stood("10S", "9H"), dealer_hand("10C", "8D"), options)
        assert outcome == HandOutcome.WIN
        assert payout == 20

    def test_lower_value_loses(self, options):
        outcome, payout = settle_hand(stood("10S", "7H"), dealer_hand("10C", "9D"), options)
        assert outcome == HandOutcome.LOSE
        assert payout == 0

    def test_equal_value_pushes(self, options):
        outcome, payout = settle_hand(stood("10S", "8H"), dealer_hand("10C", "8D"), options)
        assert outcome == HandOutcome.PUSH
        assert payout == 10

    def test_dealer_bust_pays_even_money(self, options):
        outcome, payout = settle_hand(
            stood("10S", "2H"), dealer_hand("10C", "6D", "KS"), options
        )
        assert outcome == HandOutcome.WIN
        assert payout == 20

    def test_player_bust_loses_even_if_dealer_busts(self, options):
        """Test that a busted hand loses even when the dealer busts too."""
        outcome, payout = settle_hand(
            make_hand("10S", "6H", "KC"), dealer_hand("10D", "6C", "QS"), options
        )
        assert outcome == HandOutcome.BUST
        assert payout == 0

    def test_blackjack_pays_three_to_two(self, options):
        outcome, payout = settle_hand(
            make_hand("AS", "KH", bet=10), dealer_hand("7C", "7D", "7S"), options
        )
        assert outcome == HandOutcome.BLACKJACK
        assert payout == 25

    def test_blackjack_payout_rounds_down(self, options):
        outcome, payout = settle_hand(make_hand("AS", "KH", bet=5), dealer_hand("10C", "8D"), options)
        assert outcome == HandOutcome.BLACKJACK
        assert payout == 5 + 7

    def test_six_to_five_blackjack(self):
        options = GameOptions(blackjack_payout=Fraction(6, 5))
        _, payout = settle_hand(make_hand("AS", "KH", bet=10), dealer_hand("10C", "8D"), options)
        assert payout == 22

    def test_both_blackjack_push(self, options):
        outcome, payout = settle_hand(make_hand("AS", "KH"), dealer_hand("AC", "QD"), options)
        assert outcome == HandOutcome.PUSH
        assert payout == 10

    def test_three_card_21_pushes_dealer_blackjack(self, options):
        outcome, payout = settle_hand(stood("7S", "7H", "7C"), dealer_hand("AC", "QD"), options)
        assert outcome == HandOutcome.PUSH
        assert payout == 10

    def test_split_21_pushes_dealer_blackjack(self, options):
        outcome, payout = settle_hand(
            stood("AS", "KH", from_split=True), dealer_hand("AC", "QD"), options
        )
        assert outcome == HandOutcome.PUSH
        assert payout == 10

    def test_dealer_blackjack_beats_20(self, options):
        outcome, payout = settle_hand(stood("10S", "KH"), dealer_hand("AC", "QD"), options)
        assert outcome == HandOutcome.LOSE
        assert payout == 0

    def test_split_21_is_not_paid_as_blackjack(self, options):
        outcome, payout = settle_hand(
            stood("AS", "KH", from_split=True), dealer_hand("10C", "8D"), options
        )
        assert outcome == HandOutcome.WIN
        assert payout == 20

    def test_surrendered_hand_pays_nothing_more(self, options):
        hand = make_hand("10S", "6H", bet=10)
        hand.status = HandStatus.SURRENDERED
        outcome, payout = settle_hand(hand, dealer_hand("10C", "9D"), options)
        assert outcome == HandOutcome.SURRENDER
        assert payout == 0

    def test_doubled_hand_pays_on_doubled_stake(self, options):
        hand = make_hand("5S", "6H", "10C", bet=20)
        hand.status = HandStatus.DOUBLED_STOOD
        outcome, payout = settle_hand(hand, dealer_hand("10D", "8S"), options)
        assert outcome == HandOutcome.WIN
        assert payout == 40


class TestSettleInsurance:
    """Tests for the insurance side bet."""

    def test_pays_two_to_one_against_blackjack(self, options):
        assert settle_insurance(50, dealer_hand("AC", "KD"), options) == 150

    def test_loses_without_blackjack(self, options):
        assert settle_insurance(50, dealer_hand("AC", "9D"), options) == 0

    def test_no_stake_pays_nothing(self, options):
        assert settle_insurance(0, dealer_hand("AC", "KD"), options) == 0


class TestSettleRound:
    """Tests for whole-round settlement."""

    def test_net_accounts_for_every_stake(self, options):
        """Test per-player totals across split hands and insurance."""
        surrendered = make_hand("10S", "6H", bet=100)
        surrendered.status = HandStatus.SURRENDERED
        hands = {
            0: [stood("10S", "9H", bet=100), stood("10D", "5C", bet=100)],
            1: [surrendered],
        }
        dealer = dealer_hand("10C", "8D")

        result = settle_round([0, 1], hands, {}, dealer, options)

        first, second = result.players
        assert [h.outcome for h in first.hands] == [HandOutcome.WIN, HandOutcome.LOSE]
        assert first.total_payout == 200
        assert first.net == 0
        assert second.hands[0].outcome == HandOutcome.SURRENDER
        assert second.total_payout == 0
        assert second.net == -50
        assert result.dealer_value == 18
        assert not result.dealer_bust

    def test_insurance_offsets_lost_main_bet(self, options):
        hands = {0: [stood("10S", "9H", bet=100)]}
        result = settle_round([0], hands, {0: 50}, dealer_hand("AC", "KD"), options)

        player = result.for_player(0)
        assert player.insurance_payout == 150
        assert player.total_payout == 150
        assert player.net == 0
        assert result.dealer_blackjack

    def test_follows_betting_order(self, options):
        hands = {3: [stood("10S", "9H")], 1: [stood("10D", "9C")]}
        result = settle_round([3, 1], hands, {}, dealer_hand("10C", "7D"), options)
        assert [p.player_id for p in result.players] == [3, 1]
        assert result.for_player(2) is None

    @pytest.mark.parametrize("bet", [1, 7, 100])
    def test_hand_result_records_values(self, options, bet):
        hands = {0: [stood("10S", "9H", bet=bet)]}
        result = settle_round([0], hands, {}, dealer_hand("10C", "7D"), options)
        hand_result = result.players[0].hands[0]
        assert hand_result.bet == bet
        assert hand_result.player_value == 19
        assert hand_result.dealer_value == 17
