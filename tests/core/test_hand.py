"""Tests for Hand evaluation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from blackjack.cards import Card, Rank, Suit
from blackjack.hand import DealerHand, Hand, HandStatus, evaluate_cards
from tests.helpers import card_strategy, make_hand


class TestEvaluateCards:
    """Tests for the value function."""

    @pytest.mark.parametrize(
        "cards,value,is_soft",
        [
            ([], 0, False),
            (["AS"], 11, True),
            (["AS", "AH"], 12, True),
            (["AS", "AH", "AC", "9D"], 12, False),
            (["AS", "6H"], 17, True),
            (["AS", "6H", "10C"], 17, False),
            (["KS", "QH"], 20, False),
            (["AS", "KH"], 21, True),
            (["10S", "6H", "KC"], 26, False),
        ],
    )
    def test_values(self, cards, value, is_soft):
        """Test value and softness of known card sets."""
        assert evaluate_cards(Card.from_string(c) for c in cards) == (value, is_soft)

    @given(st.lists(card_strategy(), min_size=1, max_size=8), st.randoms())
    def test_value_independent_of_order(self, cards, rnd):
        """Test that the value depends only on the cards, not their order."""
        shuffled = list(cards)
        rnd.shuffle(shuffled)
        assert evaluate_cards(cards) == evaluate_cards(shuffled)

    @given(st.lists(card_strategy(), min_size=1, max_size=8))
    def test_soft_only_when_not_bust(self, cards):
        value, is_soft = evaluate_cards(cards)
        if is_soft:
            assert value <= 21
            assert any(card.is_ace for card in cards)


class TestHand:
    """Tests for the Hand class."""

    def test_empty_hand(self, empty_hand):
        """Test empty hand properties."""
        assert len(empty_hand) == 0
        assert empty_hand.value == 0
        assert not empty_hand.is_soft
        assert not empty_hand.is_blackjack
        assert not empty_hand.is_busted
        assert empty_hand.status == HandStatus.ACTIVE

    def test_add_card(self, empty_hand):
        """Test adding cards to hand."""
        empty_hand.add_card(Card(Rank.TEN, Suit.SPADES))
        assert len(empty_hand) == 1
        assert empty_hand.value == 10

    def test_hard_hand_value(self, hard_16_hand):
        """Test hard hand value calculation."""
        assert hard_16_hand.value == 16
        assert hard_16_hand.is_hard

    def test_soft_hand_value(self, soft_17_hand):
        """Test soft hand value calculation."""
        assert soft_17_hand.value == 17
        assert soft_17_hand.is_soft

    def test_blackjack(self, blackjack_hand):
        """Test blackjack detection sets the status."""
        assert blackjack_hand.is_blackjack
        assert blackjack_hand.status == HandStatus.BLACKJACK

    def test_not_blackjack_three_cards(self):
        """Test that 21 with 3+ cards is not blackjack."""
        hand = make_hand("7S", "7H", "7C")
        assert hand.value == 21
        assert not hand.is_blackjack
        assert hand.status == HandStatus.ACTIVE

    def test_split_21_is_not_blackjack(self):
        """Test that a two-card 21 after a split is not a blackjack."""
        hand = make_hand("AS", "KH", from_split=True)
        assert hand.value == 21
        assert not hand.is_blackjack
        assert hand.status == HandStatus.ACTIVE

    def test_bust_sets_status(self, bust_hand):
        """Test bust detection."""
        assert bust_hand.is_busted
        assert bust_hand.value == 26
        assert bust_hand.status == HandStatus.BUST
        assert bust_hand.status.is_terminal

    def test_soft_to_hard_transition(self):
        """Test ace switching from 11 to 1."""
        hand = make_hand("AS", "5H")
        assert hand.value == 16
        assert hand.is_soft

        hand.add_card(Card(Rank.EIGHT, Suit.CLUBS))
        assert hand.value == 14
        assert hand.is_hard

    def test_pair_detection(self, pair_8s_hand):
        """Test pair detection."""
        assert pair_8s_hand.is_pair
        assert pair_8s_hand.is_value_pair

    def test_value_pair_is_not_rank_pair(self):
        """Test that K-Q is a value pair but not a rank pair."""
        hand = make_hand("KS", "QH")
        assert hand.is_value_pair
        assert not hand.is_pair

    def test_not_pair_three_cards(self):
        """Test that 3 cards is not a pair."""
        hand = make_hand("8S", "8H", "2C")
        assert not hand.is_pair
        assert not hand.is_value_pair

    def test_take_split_card(self, pair_8s_hand):
        card = pair_8s_hand.take_split_card()
        assert card == Card(Rank.EIGHT, Suit.HEARTS)
        assert len(pair_8s_hand) == 1

    def test_take_split_card_requires_two_cards(self):
        with pytest.raises(ValueError):
            make_hand("8S", "8H", "2C").take_split_card()

    def test_is_split_aces(self):
        assert make_hand("AS", from_split=True).is_split_aces
        assert not make_hand("AS", "AH").is_split_aces

    def test_str(self, blackjack_hand, soft_17_hand):
        assert "BLACKJACK" in str(blackjack_hand)
        assert "soft 17" in str(soft_17_hand)


class TestDealerHand:
    """Tests for the dealer's hand."""

    def test_hole_card_hidden_until_revealed(self):
        dealer = DealerHand()
        dealer.add_card(Card.from_string("10S"))
        dealer.add_card(Card.from_string("AH"))

        assert dealer.up_card == Card.from_string("10S")
        assert dealer.visible_cards == [Card.from_string("10S")]
        assert dealer.visible_value == 10
        assert dealer.value == 21

        dealer.reveal_hole()
        assert dealer.visible_value == 21
        assert dealer.is_blackjack

    def test_bust(self):
        dealer = DealerHand()
        for card in ("10S", "6H", "KC"):
            dealer.add_card(Card.from_string(card))
        assert dealer.is_bust
        assert not dealer.is_blackjack

    def test_empty_dealer_has_no_up_card(self):
        dealer = DealerHand()
        assert len(dealer) == 0
        assert not dealer.hole_revealed
        assert dealer.up_card is None
