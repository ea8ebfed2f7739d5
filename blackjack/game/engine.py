"""Blackjack round engine with state machine."""

from dataclasses import dataclass, field, replace
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Iterator, TypeVar

from transitions import Machine

from blackjack.cards import Card, Shoe
from blackjack.errors import (
    BetAlreadyPlaced,
    BlackjackError,
    DoubleNotAllowed,
    HandNotActive,
    InsufficientFunds,
    InsuranceAlreadyDecided,
    InsuranceNotOffered,
    InvalidBetAmount,
    InvalidHandIndex,
    InvalidPhase,
    NoBetsPlaced,
    NotYourTurn,
    PlayerNotFound,
    ShoeExhausted,
    SplitNotAllowed,
    SurrenderNotAllowed,
)
from blackjack.game.events import EventEmitter, EventType, GameEvent
from blackjack.game.payout import settle_round
from blackjack.game.state import GameState, TurnPosition, check_transitions
from blackjack.hand import DealerHand, Hand, HandStatus, evaluate_cards
from blackjack.options import GameOptions
from blackjack.results import HandOutcome, RoundResult

if TYPE_CHECKING:
    from blackjack.snapshot import Snapshot

F = TypeVar("F", bound=Callable[..., Any])

# Hands the dealer has to play against
CONTESTED = (HandStatus.STOOD, HandStatus.DOUBLED_STOOD, HandStatus.BLACKJACK)


@dataclass
class Player:
    """A seat at the table. Money is the only thing that outlives a round."""

    player_id: int
    money: int


@dataclass
class Round:
    """Everything in play for one round; discarded by `clear_round`."""

    bets: dict[int, int] = field(default_factory=dict)
    hands: dict[int, list[Hand]] = field(default_factory=dict)
    betting_order: list[int] = field(default_factory=list)
    dealer: DealerHand = field(default_factory=DealerHand)
    turn: TurnPosition | None = None
    insurance_bets: dict[int, int] = field(default_factory=dict)
    insurance_decided: list[int] = field(default_factory=list)
    result: RoundResult | None = None

    def positions(self) -> Iterator[tuple[TurnPosition, Hand]]:
        """Yield every hand in turn order: players in join order, hands in creation order."""
        for player_id in self.betting_order:
            for hand_index, hand in enumerate(self.hands[player_id]):
                yield TurnPosition(player_id, hand_index), hand

    def escrowed(self, player_id: int) -> int:
        """Return everything the player currently has at stake."""
        hands = self.hands.get(player_id, [])
        stake = sum(h.bet for h in hands if h.status != HandStatus.SURRENDERED)
        return stake + self.insurance_bets.get(player_id, 0)


def _reports_errors(method: F) -> F:
    """Emit an event for a rejected action before the error propagates."""

    @wraps(method)
    def wrapper(self: "Game", *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except InsufficientFunds as exc:
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                action=method.__name__,
                required=exc.required,
                available=exc.available,
            )
            raise
        except BlackjackError as exc:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                action=method.__name__,
                error=type(exc).__name__,
                message=exc.message,
                state=self.state.name,
            )
            raise

    return wrapper  # type: ignore[return-value]


class Game:
    """
    Blackjack round engine using a state machine.

    Owns the shoe, the players and the active round. Every mutation goes
    through one of the action methods below; each validates completely
    before it changes anything, so a raised `BlackjackError` means no side
    effect. Communication with a presentation layer happens through events,
    return values and `snapshot()`.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "open_betting", "source": "idle", "dest": "betting"},
        {"trigger": "cancel_betting", "source": "betting", "dest": "idle"},
        {"trigger": "begin_dealing", "source": "betting", "dest": "dealing"},
        {"trigger": "offer_insurance", "source": "dealing", "dest": "insurance"},
        {"trigger": "open_player_turns", "source": ["dealing", "insurance"], "dest": "player_turn"},
        # Straight to the dealer when no hand needs a decision
        {
            "trigger": "close_player_turns",
            "source": ["dealing", "insurance", "player_turn"],
            "dest": "dealer_turn",
        },
        {"trigger": "reveal_dealer_blackjack", "source": "insurance", "dest": "round_over"},
        {"trigger": "finish_dealer", "source": "dealer_turn", "dest": "round_over"},
        {"trigger": "close_round", "source": "round_over", "dest": "idle"},
    ]

    def __init__(
        self,
        options: GameOptions | None = None,
        seed: int = 0,
        shoe: Shoe | None = None,
    ) -> None:
        """
        Initialize a new table.

        Args:
            options: Table rules (uses defaults if not provided)
            seed: Seed for the shoe shuffle; same seed, same cards
            shoe: Prepared shoe to deal from instead of a freshly seeded one
        """
        self.options = options or GameOptions()
        self.shoe = shoe or Shoe(
            num_decks=self.options.num_decks,
            penetration=self.options.penetration,
            seed=seed,
        )
        self.events = EventEmitter()

        self._players: dict[int, Player] = {}
        self._next_id = 0
        self._round: Round | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore[attr-defined]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Table management
    # ------------------------------------------------------------------

    @_reports_errors
    def join(self, money: int) -> int:
        """
        Seat a new player.

        Args:
            money: Starting money, a non-negative integer

        Returns:
            The new player's id; ids increase and are never reused
        """
        self._require_state(GameState.IDLE, GameState.BETTING)
        if money < 0:
            raise InvalidBetAmount("money must not be negative", money=money)

        player_id = self._next_id
        self._next_id += 1
        self._players[player_id] = Player(player_id=player_id, money=money)
        self.events.emit_new(EventType.PLAYER_JOINED, player_id=player_id, money=money)
        return player_id

    @_reports_errors
    def leave(self, player_id: int) -> None:
        """Remove a player between rounds, refunding a pending bet."""
        self._require_state(GameState.IDLE, GameState.BETTING)
        player = self._require_player(player_id)

        if self._round is not None and player_id in self._round.bets:
            refund = self._round.bets.pop(player_id)
            del self._round.hands[player_id]
            player.money += refund
            self.events.emit_new(EventType.BET_REFUNDED, player_id=player_id, amount=refund)

        del self._players[player_id]
        self.events.emit_new(EventType.PLAYER_LEFT, player_id=player_id, money=player.money)

    @_reports_errors
    def reset(self, seed: int) -> None:
        """
        Reseed and reshuffle the shoe.

        Players and their money are kept. Only legal between rounds.
        """
        self._require_state(GameState.IDLE, GameState.BETTING)
        self.shoe.reset(seed)
        self.events.emit_new(EventType.SHOE_SHUFFLED, seed=seed, reason="reset")

    @_reports_errors
    def reshuffle(self) -> None:
        """Rebuild and reshuffle the shoe from the running generator."""
        self._require_state(GameState.IDLE, GameState.BETTING)
        self.shoe.shuffle()
        self.events.emit_new(EventType.SHOE_SHUFFLED, seed=self.shoe.seed, reason="reshuffle")

    @property
    def needs_reshuffle(self) -> bool:
        """Check if the shoe has been dealt past its penetration."""
        return self.shoe.needs_shuffle

    def check_and_reshuffle(self) -> bool:
        """
        Reshuffle if penetration has been reached.

        Call between rounds, before betting or dealing.

        Returns:
            True if a reshuffle was performed
        """
        if not self.needs_reshuffle:
            return False
        self.reshuffle()
        return True

    # ------------------------------------------------------------------
    # Betting and dealing
    # ------------------------------------------------------------------

    @_reports_errors
    def start_betting(self) -> None:
        """Open a new round for bets."""
        self._require_state(GameState.IDLE)
        self._round = Round()
        self.open_betting()
        self.events.emit_new(EventType.BETTING_OPENED, players=list(self._players))

    @_reports_errors
    def bet(self, player_id: int, amount: int) -> None:
        """
        Place a player's bet for the round.

        The amount is escrowed out of the player's money until showdown.

        Args:
            player_id: Betting player
            amount: Bet amount, within table limits and available money
        """
        self._require_state(GameState.BETTING)
        player = self._require_player(player_id)
        round_ = self._active_round()

        if player_id in round_.bets:
            raise BetAlreadyPlaced(player_id=player_id)
        if amount <= 0:
            raise InvalidBetAmount("bet amount must be positive", amount=amount)
        if amount < self.options.min_bet or (
            self.options.max_bet is not None and amount > self.options.max_bet
        ):
            limit = self.options.max_bet if self.options.max_bet is not None else "no limit"
            raise InvalidBetAmount(
                f"Bet must be between {self.options.min_bet} and {limit}",
                amount=amount,
            )
        if amount > player.money:
            raise InsufficientFunds(required=amount, available=player.money)

        player.money -= amount
        round_.bets[player_id] = amount
        round_.hands[player_id] = [Hand(bet=amount, player_id=player_id)]
        self.events.emit_new(EventType.BET_PLACED, player_id=player_id, amount=amount)

    @_reports_errors
    def deal(self) -> None:
        """
        Deal the initial cards and move to the first decision.

        One card to each bettor in join order, the dealer's up card, a second
        card to each bettor, then the dealer's hole card face down. Goes to
        INSURANCE when the dealer shows an Ace and insurance is offered,
        otherwise to the first active hand, or to the dealer if no hand
        needs a decision.
        """
        self._require_state(GameState.BETTING)
        round_ = self._active_round()
        if not round_.bets:
            raise NoBetsPlaced(state=self.state)

        cards_needed = (len(round_.bets) + 1) * 2
        if self.shoe.cards_remaining < cards_needed:
            raise ShoeExhausted(
                f"need {cards_needed} cards to deal, {self.shoe.cards_remaining} left",
            )

        round_.betting_order = [pid for pid in self._players if pid in round_.bets]
        self.begin_dealing()

        first_hands = [round_.hands[pid][0] for pid in round_.betting_order]
        for hand in first_hands:
            self._deal_to_hand(hand)
        self._deal_to_dealer(face_up=True)
        for hand in first_hands:
            self._deal_to_hand(hand)
        self._deal_to_dealer(face_up=False)

        self.events.emit_new(
            EventType.ROUND_STARTED,
            players=list(round_.betting_order),
            dealer_up_card=str(round_.dealer.up_card),
        )
        for hand in first_hands:
            if hand.status == HandStatus.BLACKJACK:
                self.events.emit_new(EventType.PLAYER_BLACKJACK, player_id=hand.player_id)

        up_card = round_.dealer.up_card
        if up_card is not None and up_card.is_ace and self.options.insurance_offered:
            self.offer_insurance()
            self.events.emit_new(EventType.INSURANCE_OFFERED, players=list(round_.betting_order))
            return

        self._start_player_turns()

    def _deal_to_hand(self, hand: Hand) -> Card:
        """Deal a face-up card to a player hand."""
        card = self.shoe.draw()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            player_id=hand.player_id,
            hand_value=hand.value,
        )
        return card

    def _deal_to_dealer(self, face_up: bool) -> Card:
        """Deal a card to the dealer; the hole card is not named in the event."""
        card = self.shoe.draw()
        self._active_round().dealer.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand="dealer",
        )
        return card

    def _start_player_turns(self) -> None:
        """Hand the turn to the first active hand, or to the dealer."""
        position = self._first_active_position()
        if position is None:
            self._active_round().turn = None
            self.close_player_turns()
            return
        self._active_round().turn = position
        self.open_player_turns()
        self.events.emit_new(
            EventType.TURN_CHANGED,
            player_id=position.player_id,
            hand_index=position.hand_index,
        )

    # ------------------------------------------------------------------
    # Insurance
    # ------------------------------------------------------------------

    @property
    def insurance_offered(self) -> bool:
        """Check if the insurance window is open."""
        return self.state == GameState.INSURANCE

    def _validate_insurance(self, player_id: int) -> int:
        """Check an insurance decision is legal; return the player's bet."""
        if not self.options.insurance_offered:
            raise InsuranceNotOffered("insurance is not offered at this table", state=self.state)
        if self.state != GameState.INSURANCE:
            raise InsuranceNotOffered(state=self.state)
        self._require_player(player_id)

        round_ = self._active_round()
        if player_id not in round_.bets:
            raise NotYourTurn("player has not bet this round", player_id=player_id)
        if player_id in round_.insurance_decided:
            raise InsuranceAlreadyDecided(player_id=player_id)
        return round_.bets[player_id]

    @_reports_errors
    def take_insurance(self, player_id: int, amount: int | None = None) -> int:
        """
        Place an insurance side bet.

        Args:
            player_id: Insuring player
            amount: Stake, up to half the original bet (defaults to half)

        Returns:
            The insurance stake escrowed
        """
        bet = self._validate_insurance(player_id)
        max_stake = bet // 2
        stake = max_stake if amount is None else amount

        if stake < 1 or stake > max_stake:
            raise InvalidBetAmount(
                f"Insurance bet must be between 1 and {max_stake}",
                amount=stake,
            )

        player = self._players[player_id]
        if stake > player.money:
            raise InsufficientFunds(required=stake, available=player.money)

        round_ = self._active_round()
        player.money -= stake
        round_.insurance_bets[player_id] = stake
        round_.insurance_decided.append(player_id)
        self.events.emit_new(EventType.INSURANCE_TAKEN, player_id=player_id, amount=stake)
        return stake

    @_reports_errors
    def decline_insurance(self, player_id: int) -> None:
        """Decline the insurance side bet."""
        self._validate_insurance(player_id)
        self._active_round().insurance_decided.append(player_id)
        self.events.emit_new(EventType.INSURANCE_DECLINED, player_id=player_id)

    @property
    def all_insurance_decided(self) -> bool:
        """Check if every bettor has taken or declined insurance."""
        if self._round is None:
            return False
        return all(pid in self._round.insurance_decided for pid in self._round.betting_order)

    @_reports_errors
    def finish_insurance(self) -> bool:
        """
        Close the insurance window.

        Players who have not decided are treated as declining. If the dealer
        has blackjack the hole card is revealed and the round is settled on
        the spot: insurance pays and main bets lose, or push against a
        player blackjack.

        Returns:
            True if the dealer had blackjack and the round is over
        """
        if self.state != GameState.INSURANCE:
            raise InsuranceNotOffered(state=self.state)

        round_ = self._active_round()
        for player_id in round_.betting_order:
            if player_id not in round_.insurance_decided:
                round_.insurance_decided.append(player_id)
        self.events.emit_new(EventType.INSURANCE_CLOSED, insured=dict(round_.insurance_bets))

        if round_.dealer.is_blackjack:
            round_.dealer.reveal_hole()
            round_.turn = None
            self.events.emit_new(
                EventType.DEALER_REVEALS,
                card=str(round_.dealer.cards[1]),
                hand_value=round_.dealer.value,
            )
            self.events.emit_new(EventType.DEALER_BLACKJACK)
            self.reveal_dealer_blackjack()
            self._settle()
            return True

        self._start_player_turns()
        return False

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def _require_turn(self, player_id: int, hand_index: int) -> Hand:
        """Check it is this hand's decision; return the hand."""
        if self.state != GameState.PLAYER_TURN:
            raise InvalidPhase(state=self.state)
        self._require_player(player_id)

        round_ = self._active_round()
        hands = round_.hands.get(player_id)
        if hands is None:
            raise NotYourTurn("player has no hand this round", player_id=player_id)
        if not 0 <= hand_index < len(hands):
            raise InvalidHandIndex(player_id=player_id, hand_index=hand_index)

        hand = hands[hand_index]
        if not hand.is_active:
            raise HandNotActive(status=hand.status.name, hand_index=hand_index)
        if round_.turn != TurnPosition(player_id, hand_index):
            raise NotYourTurn(player_id=player_id, hand_index=hand_index)
        return hand

    def _require_cards(self, count: int) -> None:
        if self.shoe.cards_remaining < count:
            raise ShoeExhausted(f"need {count} cards, {self.shoe.cards_remaining} left")

    @_reports_errors
    def hit(self, player_id: int, hand_index: int) -> Card:
        """
        Draw one card into the current hand.

        A bust resolves the hand and moves the turn on; a 21 stays active
        until the player stands.

        Returns:
            The card drawn
        """
        hand = self._require_turn(player_id, hand_index)
        card = self.shoe.draw()

        hand.acted = True
        hand.add_card(card)
        self.events.emit_new(
            EventType.PLAYER_HIT,
            player_id=player_id,
            hand_index=hand_index,
            card=str(card),
            hand_value=hand.value,
        )

        if hand.status == HandStatus.BUST:
            self.events.emit_new(EventType.PLAYER_BUSTS, player_id=player_id, hand_index=hand_index)
            self._advance_turn()
        return card

    @_reports_errors
    def stand(self, player_id: int, hand_index: int) -> None:
        """Keep the current hand and move the turn on."""
        hand = self._require_turn(player_id, hand_index)

        hand.acted = True
        hand.status = HandStatus.STOOD
        self.events.emit_new(
            EventType.PLAYER_STAND,
            player_id=player_id,
            hand_index=hand_index,
            hand_value=hand.value,
        )
        self._advance_turn()

    def _validate_double(self, player_id: int, hand_index: int) -> Hand:
        hand = self._require_turn(player_id, hand_index)

        if len(hand) != 2:
            raise DoubleNotAllowed("can only double on the first two cards")
        if hand.from_split and not self.options.double_after_split:
            raise DoubleNotAllowed("double after split is not allowed")
        if not self.options.double_rule.allows(hand.value):
            raise DoubleNotAllowed(
                f"cannot double on {hand.value} under rule {self.options.double_rule.value}",
            )

        money = self._players[player_id].money
        if hand.bet > money:
            raise InsufficientFunds(required=hand.bet, available=money)
        self._require_cards(1)
        return hand

    @_reports_errors
    def double_down(self, player_id: int, hand_index: int) -> Card:
        """
        Double the bet, take exactly one card, and stand.

        Returns:
            The card drawn
        """
        hand = self._validate_double(player_id, hand_index)
        player = self._players[player_id]

        player.money -= hand.bet
        hand.bet *= 2
        hand.acted = True
        card = self.shoe.draw()
        hand.add_card(card)
        if hand.status != HandStatus.BUST:
            hand.status = HandStatus.DOUBLED_STOOD

        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            player_id=player_id,
            hand_index=hand_index,
            card=str(card),
            hand_value=hand.value,
            new_bet=hand.bet,
        )
        if hand.status == HandStatus.BUST:
            self.events.emit_new(EventType.PLAYER_BUSTS, player_id=player_id, hand_index=hand_index)

        self._advance_turn()
        return card

    def _validate_split(self, player_id: int, hand_index: int) -> Hand:
        hand = self._require_turn(player_id, hand_index)
        hands = self._active_round().hands[player_id]

        is_pair = hand.is_value_pair if self.options.split_by_value else hand.is_pair
        if not is_pair:
            raise SplitNotAllowed("hand is not a pair")
        if hand.split_depth >= self.options.max_split_depth:
            raise SplitNotAllowed("maximum split depth reached")
        if len(hands) >= self.options.max_hands:
            raise SplitNotAllowed("maximum number of hands reached")
        if hand.is_split_aces and self.options.split_aces_only_once:
            raise SplitNotAllowed("aces may only be split once")

        money = self._players[player_id].money
        if hand.bet > money:
            raise InsufficientFunds(required=hand.bet, available=money)
        self._require_cards(2)
        return hand

    @_reports_errors
    def split(self, player_id: int, hand_index: int) -> None:
        """
        Split a pair into two hands, each dealt one more card.

        The new hand is inserted right after the one it came from and
        carries a matching bet. With `split_aces_receive_one_card`, split
        Aces are stood immediately.
        """
        hand = self._validate_split(player_id, hand_index)
        player = self._players[player_id]
        hands = self._active_round().hands[player_id]

        player.money -= hand.bet
        split_card = hand.take_split_card()
        hand.from_split = True
        hand.split_depth += 1
        new_hand = Hand(
            cards=[split_card],
            bet=hand.bet,
            player_id=player_id,
            from_split=True,
            split_depth=hand.split_depth,
        )
        hands.insert(hand_index + 1, new_hand)

        self._deal_to_hand(hand)
        self._deal_to_hand(new_hand)

        if split_card.is_ace and self.options.split_aces_receive_one_card:
            for split_hand in (hand, new_hand):
                if split_hand.is_active:
                    split_hand.status = HandStatus.STOOD

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            player_id=player_id,
            hand_index=hand_index,
            hand1_value=hand.value,
            hand2_value=new_hand.value,
        )
        self._advance_turn()

    def _validate_surrender(self, player_id: int, hand_index: int) -> Hand:
        hand = self._require_turn(player_id, hand_index)

        if not self.options.surrender_allowed:
            raise SurrenderNotAllowed("surrender is not allowed at this table")
        if len(hand) != 2 or hand.from_split or hand.acted:
            raise SurrenderNotAllowed("can only surrender on the first decision")
        return hand

    @_reports_errors
    def surrender(self, player_id: int, hand_index: int) -> int:
        """
        Give up the hand for half the bet back.

        Returns:
            The amount refunded to the player's money
        """
        hand = self._validate_surrender(player_id, hand_index)

        refund = self.options.surrender_refund(hand.bet)
        self._players[player_id].money += refund
        hand.acted = True
        hand.status = HandStatus.SURRENDERED
        self.events.emit_new(
            EventType.PLAYER_SURRENDER,
            player_id=player_id,
            hand_index=hand_index,
            refund=refund,
        )
        self._advance_turn()
        return refund

    def _first_active_position(self) -> TurnPosition | None:
        for position, hand in self._active_round().positions():
            if hand.is_active:
                return position
        return None

    def _advance_turn(self) -> None:
        """
        Move the turn to the next hand awaiting a decision.

        Every hand before the current one is resolved, so the next active
        hand is the first active hand in turn order.
        """
        round_ = self._active_round()
        position = self._first_active_position()

        if position is None:
            round_.turn = None
            self.close_player_turns()
            return

        if position != round_.turn:
            round_.turn = position
            self.events.emit_new(
                EventType.TURN_CHANGED,
                player_id=position.player_id,
                hand_index=position.hand_index,
            )

    # ------------------------------------------------------------------
    # Dealer and showdown
    # ------------------------------------------------------------------

    def _dealer_should_hit(self, cards: list[Card]) -> bool:
        """Determine if the dealer draws on `cards`."""
        value, is_soft = evaluate_cards(cards)
        if value < 17:
            return True
        if value == 17 and is_soft and self.options.dealer_hits_soft_17:
            return True
        return False

    @_reports_errors
    def dealer_play(self) -> list[Card]:
        """
        Reveal the hole card and draw to the house rules.

        The dealer draws below 17, and on soft 17 when `dealer_hits_soft_17`.
        When every hand is bust or surrendered the dealer only reveals.

        Returns:
            The cards the dealer drew
        """
        self._require_state(GameState.DEALER_TURN)
        round_ = self._active_round()
        dealer = round_.dealer

        must_play = any(hand.status in CONTESTED for _, hand in round_.positions())

        # Work out the draws first so an empty shoe leaves the round untouched
        to_draw = 0
        if must_play:
            upcoming = self.shoe.peek(self.shoe.cards_remaining)
            cards = list(dealer.cards)
            while self._dealer_should_hit(cards):
                if to_draw >= len(upcoming):
                    raise ShoeExhausted("shoe ran out during dealer play")
                cards.append(upcoming[to_draw])
                to_draw += 1

        dealer.reveal_hole()
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(dealer.cards[1]),
            hand_value=dealer.value,
        )

        drawn = []
        for _ in range(to_draw):
            card = self.shoe.draw()
            dealer.add_card(card)
            drawn.append(card)
            self.events.emit_new(EventType.DEALER_HITS, card=str(card), hand_value=dealer.value)

        if dealer.is_bust:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=dealer.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=dealer.value)

        self.finish_dealer()
        return drawn

    @_reports_errors
    def showdown(self) -> RoundResult:
        """
        Settle the round and return its result.

        Payouts are credited once. Later calls in the same round return the
        recorded result without touching money again.
        """
        self._require_state(GameState.ROUND_OVER)
        round_ = self._active_round()
        if round_.result is not None:
            return round_.result
        return self._settle()

    def _settle(self) -> RoundResult:
        """Compute the whole settlement, then credit it in one pass."""
        round_ = self._active_round()
        result = settle_round(
            round_.betting_order,
            round_.hands,
            round_.insurance_bets,
            round_.dealer,
            self.options,
        )

        for player_result in result.players:
            self._players[player_result.player_id].money += player_result.total_payout
        round_.result = result

        outcome_events = {
            HandOutcome.WIN: EventType.PLAYER_WINS,
            HandOutcome.BLACKJACK: EventType.PLAYER_WINS,
            HandOutcome.PUSH: EventType.PUSH,
        }
        for player_result in result.players:
            for hand_result in player_result.hands:
                self.events.emit_new(
                    outcome_events.get(hand_result.outcome, EventType.PLAYER_LOSES),
                    player_id=player_result.player_id,
                    hand_index=hand_result.hand_index,
                    outcome=hand_result.outcome.value,
                    payout=hand_result.payout,
                )
        self.events.emit_new(
            EventType.ROUND_SETTLED,
            dealer_value=result.dealer_value,
            net={r.player_id: r.net for r in result.players},
        )
        return result

    @_reports_errors
    def clear_round(self) -> None:
        """
        Discard the round and return to IDLE.

        From ROUND_OVER the round must have been settled. From BETTING all
        pending bets are refunded. Money and player ids are kept. The event
        history is cleared.
        """
        state = self.state
        if state == GameState.IDLE:
            return
        if state == GameState.BETTING:
            round_ = self._active_round()
            for player_id, amount in round_.bets.items():
                self._players[player_id].money += amount
                self.events.emit_new(EventType.BET_REFUNDED, player_id=player_id, amount=amount)
            self._round = None
            self.cancel_betting()
        elif state == GameState.ROUND_OVER:
            if self._active_round().result is None:
                raise InvalidPhase("showdown has not been settled", state=state)
            self._round = None
            self.close_round()
        else:
            raise InvalidPhase(state=state)

        # History covers the current round only; subscribers see everything
        self.events.clear_history()
        self.events.emit_new(EventType.ROUND_CLEARED)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def can_hit(self, player_id: int, hand_index: int) -> bool:
        """Check if hitting is allowed."""
        return self._passes(self._require_turn, player_id, hand_index)

    def can_stand(self, player_id: int, hand_index: int) -> bool:
        """Check if standing is allowed."""
        return self._passes(self._require_turn, player_id, hand_index)

    def can_double(self, player_id: int, hand_index: int) -> bool:
        """Check if doubling is allowed."""
        return self._passes(self._validate_double, player_id, hand_index)

    def can_split(self, player_id: int, hand_index: int) -> bool:
        """Check if splitting is allowed."""
        return self._passes(self._validate_split, player_id, hand_index)

    def can_surrender(self, player_id: int, hand_index: int) -> bool:
        """Check if surrender is allowed."""
        return self._passes(self._validate_surrender, player_id, hand_index)

    @staticmethod
    def _passes(check: Callable[..., Any], *args: Any) -> bool:
        try:
            check(*args)
        except BlackjackError:
            return False
        return True

    @property
    def players(self) -> list[int]:
        """Return the joined player ids in join order."""
        return list(self._players)

    @property
    def player_count(self) -> int:
        return len(self._players)

    @property
    def cards_remaining(self) -> int:
        return self.shoe.cards_remaining

    @property
    def seed(self) -> int:
        """Return the seed of the current shoe."""
        return self.shoe.seed

    @property
    def current_turn(self) -> TurnPosition | None:
        """Return whose decision it is, or None outside player turns."""
        if self._round is None or self.state != GameState.PLAYER_TURN:
            return None
        return self._round.turn

    @property
    def current_player(self) -> int | None:
        turn = self.current_turn
        return turn.player_id if turn is not None else None

    @property
    def result(self) -> RoundResult | None:
        """Return the recorded showdown result, if the round is settled."""
        return self._round.result if self._round is not None else None

    def get_money(self, player_id: int) -> int | None:
        player = self._players.get(player_id)
        return player.money if player is not None else None

    def get_bet(self, player_id: int) -> int | None:
        """Return the player's base bet for the current round."""
        if self._round is None:
            return None
        return self._round.bets.get(player_id)

    def get_insurance_bet(self, player_id: int) -> int | None:
        if self._round is None:
            return None
        return self._round.insurance_bets.get(player_id)

    def get_escrow(self, player_id: int) -> int:
        """Return the money the player currently has at stake in the round."""
        if self._round is None:
            return 0
        return self._round.escrowed(player_id)

    def get_hands(self, player_id: int) -> list[Hand]:
        """Return copies of the player's hands for the round."""
        if self._round is None:
            return []
        return [replace(hand, cards=list(hand.cards)) for hand in self._round.hands.get(player_id, [])]

    def get_dealer_hand(self) -> DealerHand:
        """
        Return a copy of the dealer's hand, hole card included.

        For anything shown to players use `snapshot()`, which masks the hole
        card until it is revealed.
        """
        if self._round is None:
            return DealerHand()
        dealer = self._round.dealer
        return DealerHand(cards=list(dealer.cards), hole_revealed=dealer.hole_revealed)

    def snapshot(self, player_id: int | None = None) -> "Snapshot":
        """Build a read-only, hole-card-safe view of the table for `player_id`."""
        from blackjack.snapshot import build_snapshot

        return build_snapshot(self, player_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_state(self, *states: GameState) -> None:
        if self.state not in states:
            raise InvalidPhase(
                f"cannot do this while {self.state}",
                state=self.state,
            )

    def _require_player(self, player_id: int) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise PlayerNotFound(player_id=player_id)
        return player

    def _active_round(self) -> Round:
        if self._round is None:
            raise InvalidPhase("no round in progress", state=self.state)
        return self._round


check_transitions(Game.TRANSITIONS)
