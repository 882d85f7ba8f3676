"""
Snapshot builder.

Replays a parsed hand event by event and emits one immutable Snapshot per
state: the seeded table after blinds and antes, every action, every street
transition, and a terminal showdown state carrying payouts and final stacks.
Each snapshot goes through the mathematical guards before the next event is
applied.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from ..config import ReplayConfig
from ..errors import ErrorCode, SnapshotBuildError
from ..guards.anomaly_log import AnomalyLog, MemoryAnomalyLog
from ..guards.mathematical import (
    GuardResult,
    GuardRunner,
    check_all_in_bound,
    check_money_conservation,
    check_non_negative,
    check_payouts,
    check_pot_accuracy,
    check_recorded_collections,
    check_side_pots,
    check_stack_consistency,
)
from ..keys import PlayerIndex
from ..parse.schemas import Action, HandHistory, Street
from ..settle.side_pots import ACTIVE, ALL_IN, FOLDED, Pot, calculate_side_pots
from ..settle.winners import SettlementContext, resolve_payouts
from .describe import describe_action, describe_post, describe_showdown, describe_street
from .schemas import Replay, Snapshot

logger = logging.getLogger(__name__)

MAX_PLAYERS = 10
MAX_ACTIONS = 500

_WAGERS = ("call", "bet", "raise", "all-in")


class _TableState:
    """Mutable working state for one replay, indexed by interned player number."""

    def __init__(self, hand: HandHistory, index: PlayerIndex):
        self.index = index
        size = len(index)
        self.initial = [0] * size
        self.seats = [0] * size
        self.hole_cards: List[Tuple[str, ...]] = [()] * size
        for player in hand.players:
            i = index.index_of(player.key)
            self.initial[i] = player.stack
            self.seats[i] = player.seat
            self.hole_cards[i] = player.hole_cards

        self.stacks = list(self.initial)
        self.committed = [0] * size
        self.pending = [0] * size
        self.all_in = [False] * size
        # Disconnected players are still dealt in; only sitting-out seats start folded
        self.folded: Set[int] = {
            index.index_of(p.key) for p in hand.players if p.status == "sitting-out"
        }
        self.revealed: Dict[int, Tuple[str, ...]] = {}
        self.board: List[str] = []
        # Once anyone is all-in, pots are split by level for the rest of the hand
        self.split_pots = False

    def by_key(self, values) -> Dict[str, int]:
        return {self.index.key_of(i): v for i, v in enumerate(values)}

    def live(self) -> List[int]:
        return [i for i in range(len(self.index)) if i not in self.folded]

    def statuses(self) -> Dict[str, str]:
        status = {}
        for i in range(len(self.index)):
            if i in self.folded:
                status[self.index.key_of(i)] = FOLDED
            elif self.all_in[i]:
                status[self.index.key_of(i)] = ALL_IN
            else:
                status[self.index.key_of(i)] = ACTIVE
        return status

    def reveal(self, players):
        for i in players:
            if self.hole_cards[i]:
                self.revealed[i] = self.hole_cards[i]


class SnapshotBuilder:
    """Turns a validated HandHistory into its snapshot sequence."""

    def __init__(self, config: Optional[ReplayConfig] = None,
                 anomaly_log: Optional[AnomalyLog] = None):
        self.config = config or ReplayConfig(anomaly_log_dir=None)
        self.anomaly_log = anomaly_log if anomaly_log is not None else MemoryAnomalyLog()

    def build(self, hand: HandHistory) -> Tuple[Snapshot, ...]:
        return self.build_replay(hand).snapshots

    def build_replay(self, hand: HandHistory) -> Replay:
        """
        Replay a hand and collect its snapshots.

        Args:
            hand: Parsed and validated hand

        Returns:
            Replay with the snapshot sequence and replay warnings

        Raises:
            SnapshotBuildError: Limits exceeded or an action cannot be applied
            GuardViolation: A critical guard failed on some snapshot
            SidePotError / SettlementError: Pots cannot be split or paid
        """
        self._check_limits(hand)
        try:
            index = PlayerIndex(p.name for p in hand.players)
        except ValueError as e:
            raise SnapshotBuildError(str(e), code=ErrorCode.SNAP_INVALID_ACTION,
                                     details={'hand_id': hand.hand_id}) from e

        state = _TableState(hand, index)
        guards = GuardRunner(self.anomaly_log, hand.hand_id)
        snapshots: List[Snapshot] = []
        warnings: List[str] = []

        self._seed(hand, state, guards, snapshots)

        for street in hand.streets():
            if street.name != "preflop":
                self._deal(hand, street, state, guards, snapshots)
            for action in street.actions:
                self._apply(hand, action, street.name, state, guards, snapshots)

        committed_total = sum(state.committed)
        if hand.total_pot and hand.total_pot != committed_total:
            warnings.append(
                f"Recorded total pot {hand.total_pot} differs from {committed_total} committed"
            )

        self._showdown(hand, state, guards, snapshots)

        warnings.extend(f"{r.name}: {r.message}" for r in guards.failures)
        logger.info(f"[replay] hand {hand.hand_id}: {len(snapshots)} snapshots")
        return Replay(hand=hand, snapshots=tuple(snapshots), warnings=tuple(warnings))

    def _check_limits(self, hand: HandHistory):
        if len(hand.players) > MAX_PLAYERS:
            raise SnapshotBuildError(
                f"Hand has {len(hand.players)} players, at most {MAX_PLAYERS} supported",
                code=ErrorCode.SNAP_LIMIT_EXCEEDED,
                details={'players': len(hand.players), 'limit': MAX_PLAYERS},
            )
        actions = len(hand.posts) + sum(len(s.actions) for s in hand.streets())
        if actions > MAX_ACTIONS:
            raise SnapshotBuildError(
                f"Hand has {actions} actions, at most {MAX_ACTIONS} supported",
                code=ErrorCode.SNAP_LIMIT_EXCEEDED,
                details={'actions': actions, 'limit': MAX_ACTIONS},
            )

    def _player(self, state: _TableState, action: Action) -> int:
        try:
            return state.index.index_of(action.key)
        except KeyError:
            raise SnapshotBuildError(
                f"Action by unknown player {action.actor!r}",
                code=ErrorCode.SNAP_INVALID_ACTION,
                details={'actor': action.actor, 'kind': action.kind},
            ) from None

    # Events

    def _seed(self, hand: HandHistory, state: _TableState, guards: GuardRunner,
              snapshots: List[Snapshot]):
        parts = []
        for post in hand.posts:
            i = self._player(state, post)
            amount = min(post.amount, state.stacks[i])
            if amount < post.amount:
                logger.warning(
                    f"[replay] {post.actor} posts {post.amount} with only {state.stacks[i]} behind"
                )
            state.stacks[i] -= amount
            state.committed[i] += amount
            if post.kind != "ante":
                state.pending[i] += amount
            if post.is_all_in or (amount > 0 and state.stacks[i] == 0):
                state.all_in[i] = True
                state.split_pots = True
            parts.append(describe_post(post, amount, hand.context))

        description = "; ".join(parts) if parts else f"Hand #{hand.hand_id} begins"
        self._emit(hand, state, guards, snapshots, "preflop", description, action="hand-start")

    def _deal(self, hand: HandHistory, street: Street, state: _TableState, guards: GuardRunner,
              snapshots: List[Snapshot]):
        if len(street.cards) > 1:
            state.board = list(street.cards)
        else:
            state.board.extend(street.cards)
        state.pending = [0] * len(state.index)
        self._emit(hand, state, guards, snapshots, street.name,
                   describe_street(street.name, state.board))

    def _apply(self, hand: HandHistory, action: Action, street: str, state: _TableState,
               guards: GuardRunner, snapshots: List[Snapshot]):
        i = self._player(state, action)
        kind = action.kind
        stack_before = state.stacks[i]
        committed_now = 0
        extra: List[GuardResult] = []

        if kind == "fold":
            state.folded.add(i)
        elif kind in _WAGERS:
            if action.total_bet is not None:
                contribution = action.total_bet - state.pending[i]
            else:
                contribution = action.amount
            if contribution < 0:
                raise SnapshotBuildError(
                    f"{action.actor} {kind} to {action.total_bet} below the "
                    f"{state.pending[i]} already in this street",
                    code=ErrorCode.SNAP_INVALID_ACTION,
                    details={'actor': action.actor, 'kind': kind, 'street': street},
                )
            all_in = kind == "all-in" or action.is_all_in
            committed_now = min(contribution, stack_before) if all_in else contribution
            state.stacks[i] -= committed_now
            state.committed[i] += committed_now
            state.pending[i] += committed_now
            if all_in or (committed_now > 0 and state.stacks[i] == 0):
                state.all_in[i] = True
                state.split_pots = True
            if all_in:
                extra.append(check_all_in_bound(state.index.key_of(i), committed_now, stack_before))
        elif kind == "uncalled-return":
            returned = min(action.amount, state.committed[i])
            state.committed[i] -= returned
            state.pending[i] = max(0, state.pending[i] - returned)
            state.stacks[i] += returned
            if returned and state.stacks[i] > 0:
                state.all_in[i] = False
        elif kind == "shows":
            state.revealed[i] = action.cards or state.hole_cards[i]
        elif kind == "check":
            pass
        else:
            raise SnapshotBuildError(
                f"Unexpected {kind} by {action.actor} on the {street}",
                code=ErrorCode.SNAP_INVALID_ACTION,
                details={'actor': action.actor, 'kind': kind, 'street': street},
            )

        live = state.live()
        if len(live) == 2 and any(state.all_in[j] for j in live):
            state.reveal(live)

        self._emit(hand, state, guards, snapshots, street,
                   describe_action(action, committed_now, hand.context),
                   actor=state.index.key_of(i), action=kind, extra=extra)

    def _showdown(self, hand: HandHistory, state: _TableState, guards: GuardRunner,
                  snapshots: List[Snapshot]):
        committed = state.by_key(state.committed)
        status = state.statuses()
        pots = calculate_side_pots(committed, status, hand.rake, self.anomaly_log, hand.hand_id)

        keys = state.index.keys()
        showdown = hand.showdown
        ctx = SettlementContext(
            hand_id=hand.hand_id,
            winner_keys=showdown.winner_keys if showdown else (),
            hole_cards={keys[i]: state.hole_cards[i] for i in range(len(keys)) if state.hole_cards[i]},
            board=tuple(state.board),
            seats=state.by_key(state.seats),
            committed=committed,
            status=status,
            config=self.config,
            anomaly_log=self.anomaly_log,
            pot_winners={i: tuple(sorted(c)) for i, c in showdown.pot_collections.items()}
            if showdown else {},
        )
        payouts = resolve_payouts(pots, ctx)
        stacks = state.by_key(state.stacks)
        final_stacks = {k: stacks[k] + payouts.get(k, 0) for k in keys}

        live = state.live()
        contested = len(live) >= 2
        if contested:
            state.reveal(live)
        state.pending = [0] * len(keys)

        initial = state.by_key(state.initial)
        checks = [
            check_non_negative("stacks", stacks),
            check_non_negative("committed", committed),
            check_non_negative("payouts", payouts),
            check_non_negative("final_stacks", final_stacks),
            check_pot_accuracy(pots, committed, hand.rake),
            check_side_pots(pots, committed, hand.rake),
            check_payouts(payouts, pots),
            check_money_conservation(initial, final_stacks, rake=hand.rake),
            check_stack_consistency(initial, final_stacks, committed, payouts),
            check_recorded_collections(payouts, showdown.collections if showdown else {}),
        ]
        names = {k: state.index.name_of(i) for i, k in enumerate(keys)}
        snapshot = self._snapshot(
            state, len(snapshots), "showdown",
            describe_showdown(payouts, names, hand.context, contested), pots,
            rake_applied=hand.rake, payouts=payouts, final_stacks=final_stacks,
        )
        guards.run(f"snapshot {snapshot.sequence_id}", checks)
        snapshots.append(snapshot)

    # Snapshot construction

    def _pots(self, hand: HandHistory, state: _TableState) -> List[Pot]:
        if state.split_pots:
            return calculate_side_pots(state.by_key(state.committed), state.statuses(),
                                       0, self.anomaly_log, hand.hand_id)
        live = state.live()
        return [Pot(
            amount=sum(state.committed),
            eligible=frozenset(state.index.key_of(i) for i in live),
            source_level=max(state.committed, default=0),
            is_side=False,
        )]

    def _snapshot(self, state: _TableState, sequence_id: int, street: str, description: str,
                  pots: List[Pot], **fields) -> Snapshot:
        keys = state.index.keys()
        return Snapshot(
            sequence_id=sequence_id,
            street=street,
            description=description,
            pots=tuple(pots),
            stacks=state.by_key(state.stacks),
            committed=state.by_key(state.committed),
            pending=state.by_key(state.pending),
            folded=frozenset(keys[i] for i in state.folded),
            all_in={keys[i]: flag for i, flag in enumerate(state.all_in)},
            revealed={keys[i]: tuple(cards) for i, cards in state.revealed.items()},
            board=tuple(state.board),
            **fields,
        )

    def _emit(self, hand: HandHistory, state: _TableState, guards: GuardRunner,
              snapshots: List[Snapshot], street: str, description: str,
              actor: Optional[str] = None, action: Optional[str] = None,
              extra: Optional[List[GuardResult]] = None):
        pots = self._pots(hand, state)
        snapshot = self._snapshot(state, len(snapshots), street, description, pots,
                                  actor=actor, action=action)

        checks = [
            check_non_negative("stacks", snapshot.stacks),
            check_non_negative("committed", snapshot.committed),
            check_non_negative("pending", snapshot.pending),
            check_money_conservation(state.by_key(state.initial), snapshot.stacks,
                                     pot=sum(state.committed)),
            check_pot_accuracy(pots, snapshot.committed),
        ]
        if state.split_pots:
            checks.append(check_side_pots(pots, snapshot.committed))
        checks.extend(extra or ())
        guards.run(f"snapshot {snapshot.sequence_id}", checks)
        snapshots.append(snapshot)


def build_snapshots(hand: HandHistory, config: Optional[ReplayConfig] = None,
                    anomaly_log: Optional[AnomalyLog] = None) -> Tuple[Snapshot, ...]:
    """Build the snapshot sequence of one hand."""
    return SnapshotBuilder(config, anomaly_log).build(hand)
