"""
Tests for winner resolution and payout splitting.
"""
import pytest

from hand_replayer.config import ReplayConfig
from hand_replayer.errors import ErrorCode, SettlementError
from hand_replayer.guards.anomaly_log import MemoryAnomalyLog
from hand_replayer.settle.side_pots import Pot
from hand_replayer.settle.winners import SettlementContext, resolve_payouts, split_amount

BOARD = ("Ah", "9s", "2c", "4d", "Kc")
SEATS = {"hero": 7, "playera": 1, "playerb": 2}
POTS = [
    Pot(4800, frozenset({"hero", "playera", "playerb"}), 1500, False),
    Pot(3000, frozenset({"hero", "playerb"}), 3000, True),
]


def _context(winner_keys=(), hole_cards=None, fallback=False, log=None, pot_winners=None):
    if hole_cards is None:
        hole_cards = {"hero": ("Jc", "Jd"), "playera": ("Ts", "Tc"), "playerb": ("Qc", "Qh")}
    return SettlementContext(
        hand_id="2233445577",
        winner_keys=tuple(winner_keys),
        hole_cards=hole_cards,
        board=BOARD,
        seats=SEATS,
        committed={"hero": 3000, "playera": 1500, "playerb": 3000},
        status={"hero": "all-in", "playera": "all-in", "playerb": "active"},
        config=ReplayConfig(allow_fallback_on_anomaly=fallback, anomaly_log_dir=None),
        anomaly_log=log,
        pot_winners=pot_winners or {},
    )


class TestSplitAmount:
    def test_odd_unit_goes_to_lowest_seat(self):
        shares = split_amount(101, ["hero", "playerb"], SEATS)
        assert shares == {"playerb": 51, "hero": 50}

    def test_three_way_remainder(self):
        shares = split_amount(100, ["hero", "playera", "playerb"], SEATS)
        assert shares == {"playera": 34, "playerb": 33, "hero": 33}
        assert sum(shares.values()) == 100


class TestResolvePayouts:
    def test_recorded_winners_take_priority(self):
        payouts = resolve_payouts(POTS, _context(winner_keys=["playerb"]))
        assert payouts == {"playerb": 7800}

    def test_recorded_winner_only_where_eligible(self):
        # playera won only the main pot in the text; the side pot goes by evaluation
        payouts = resolve_payouts(POTS, _context(winner_keys=["playera"]))
        assert payouts == {"playera": 4800, "playerb": 3000}

    def test_pot_labels_beat_hand_winners(self):
        """Short stack wins the main pot, a bigger stack the side pot."""
        ctx = _context(winner_keys=["playera", "playerb"],
                       pot_winners={0: ("playera",), 1: ("playerb",)})
        assert resolve_payouts(POTS, ctx) == {"playera": 4800, "playerb": 3000}

    def test_unlabelled_pots_use_hand_winners(self):
        payouts = resolve_payouts(POTS, _context(winner_keys=["playera", "playerb"]))
        assert payouts == {"playera": 2400, "playerb": 5400}

    def test_ineligible_pot_label_falls_back_to_evaluation(self):
        ctx = _context(winner_keys=["playera"], pot_winners={0: ("playerb",), 1: ("playera",)})
        assert resolve_payouts(POTS, ctx) == {"playerb": 7800}

    def test_evaluation_without_record(self):
        payouts = resolve_payouts(POTS, _context())
        assert payouts == {"playerb": 7800}

    def test_single_eligible_player(self):
        pots = [Pot(700, frozenset({"hero"}), 100, False)]
        assert resolve_payouts(pots, _context(hole_cards={})) == {"hero": 700}

    def test_zero_pot_is_skipped(self):
        pots = [Pot(0, frozenset({"hero", "playerb"}), 0, False)]
        assert resolve_payouts(pots, _context(hole_cards={})) == {}

    def test_split_pot_by_evaluation(self):
        board = ("Ac", "Kc", "Qc", "Jc", "Tc")
        ctx = _context(hole_cards={"hero": ("2h", "3d"), "playerb": ("4h", "5d")})
        ctx = SettlementContext(**{**ctx.__dict__, "board": board})
        payouts = resolve_payouts([Pot(3001, frozenset({"hero", "playerb"}), 3000, True)], ctx)
        assert payouts == {"playerb": 1501, "hero": 1500}


class TestUnresolvedPots:
    def test_fail_fast_by_default(self):
        log = MemoryAnomalyLog()
        ctx = _context(hole_cards={"hero": ("Jc", "Jd")}, log=log)
        with pytest.raises(SettlementError) as exc:
            resolve_payouts(POTS, ctx)

        assert exc.value.code == ErrorCode.SETTLE_UNRESOLVED_WINNER
        entries = log.entries()
        assert len(entries) == 1
        assert entries[0].kind == "NO_ELIGIBLE_WINNERS"
        assert entries[0].fallback_action == "operation aborted"
        assert exc.value.details['incident_id'] == entries[0].incident_id

    def test_fallback_pays_earliest_key(self):
        log = MemoryAnomalyLog()
        ctx = _context(hole_cards={"hero": ("Jc", "Jd")}, fallback=True, log=log)
        payouts = resolve_payouts(POTS, ctx)

        assert payouts == {"hero": 7800}
        assert [e.fallback_winner for e in log.entries()] == ["hero", "hero"]

    def test_empty_eligible_set(self):
        log = MemoryAnomalyLog()
        pots = [Pot(100, frozenset(), 50, False)]
        with pytest.raises(SettlementError) as exc:
            resolve_payouts(pots, _context(log=log))
        assert exc.value.code == ErrorCode.SETTLE_EMPTY_ELIGIBLE
        assert log.entries()[0].kind == "EMPTY_ELIGIBLE_SET"
