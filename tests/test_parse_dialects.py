"""
Parsing tests for every supported dialect plus the typed parse failures.
"""
import pytest

from hand_replayer.errors import ErrorCode, ParseError
from hand_replayer.parse import HandHistory, parse_file, parse_hand, parse_text
from hand_replayer.parse.site_detector import count_headers, detect_dialect

from sample_hands import (
    GG_BOUNTY_ALLIN,
    GG_CASH,
    PARTY_HEADS_UP,
    PS_ALLIN_ACES,
    PS_CASH_USD,
    PS_MTT_DISCONNECTED_WINNER,
    PS_MTT_SIDEPOT,
)


def _kinds(actions):
    return [a.kind for a in actions]


class TestPokerStarsCash:
    def setup_method(self):
        self.hand = parse_text(PS_CASH_USD)

    def test_metadata(self):
        hand = self.hand
        assert hand.hand_id == "123456789"
        assert hand.site == "pokerstars"
        assert hand.table_name == "Aurora II"
        assert hand.max_players == 6
        assert hand.button_seat == 2
        assert hand.timestamp == "2025/01/13 10:00:00 ET"
        assert hand.limit == "No Limit"
        assert hand.tournament_id is None

    def test_amounts_are_cents(self):
        hand = self.hand
        assert not hand.context.is_tournament
        assert hand.currency == "USD"
        assert hand.small_blind == 25
        assert hand.big_blind == 50
        assert hand.player("player2").stack == 7525
        assert hand.total_pot == 425
        assert hand.rake == 20

    def test_hero_and_cards(self):
        assert self.hand.hero.key == "hero"
        assert self.hand.hero.hole_cards == ("Ah", "Kh")
        assert self.hand.flop.cards == ("As", "Kd", "7c")
        assert self.hand.turn is None

    def test_actions(self):
        hand = self.hand
        assert _kinds(hand.posts) == ["small-blind", "big-blind"]
        raise_action = hand.preflop.actions[0]
        assert raise_action.kind == "raise"
        assert raise_action.raise_by == 150
        assert raise_action.total_bet == 200
        assert _kinds(hand.flop.actions) == ["check", "bet", "fold", "uncalled-return"]
        assert hand.flop.actions[-1].amount == 250

    def test_showdown_record(self):
        showdown = self.hand.showdown
        assert showdown.winner_keys == ("hero",)
        assert showdown.collections == {"hero": 405}
        assert showdown.pot_collections == {}

    def test_no_warnings(self):
        assert self.hand.warnings == ()


class TestPokerStarsTournament:
    def setup_method(self):
        self.hand = parse_text(PS_MTT_SIDEPOT)

    def test_chips_and_role_suffix(self):
        hand = self.hand
        assert hand.context.is_tournament
        assert hand.tournament_id == "123456789"
        assert hand.player("playerc").name == "PlayerC"
        assert hand.player("playera").stack == 1500
        assert hand.player("playerc").position == "BTN"

    def test_all_in_raise(self):
        shove = [a for a in self.hand.preflop.actions if a.key == "playera"][0]
        assert shove.kind == "all-in"
        assert shove.is_all_in
        assert shove.total_bet == 1500

    def test_showdown_cards_and_winner(self):
        hand = self.hand
        assert hand.player("playerb").hole_cards == ("Qc", "Qh")
        assert hand.player("playera").hole_cards == ("Ts", "Tc")
        assert hand.showdown.winners == ("PlayerB",)
        assert hand.showdown.collections == {"playerb": 7800}
        assert hand.river.cards == ("Kc",)
        assert hand.board == ("Ah", "9s", "2c", "4d", "Kc")

    def test_collections_per_pot(self):
        assert self.hand.showdown.pot_collections == {0: {"playerb": 4800}, 1: {"playerb": 3000}}

    def test_numbered_side_pot(self):
        text = PS_MTT_SIDEPOT.replace("collected 3000 from side pot", "collected 3000 from side pot-2")
        assert parse_text(text).showdown.pot_collections[2] == {"playerb": 3000}

    def test_disconnected_player_is_dealt_in(self):
        player = parse_text(PS_MTT_DISCONNECTED_WINNER).player("playerb")
        assert player.status == "disconnected"
        assert player.stack == 5000
        assert player.position is not None


class TestGGPoker:
    def test_tournament_with_antes(self):
        hand = parse_text(GG_BOUNTY_ALLIN)
        assert hand.site == "ggpoker"
        assert hand.hand_id == "TM5148170724"
        assert hand.tournament_id == "238314829"
        assert hand.stakes == "1,500/3,000"
        assert (hand.small_blind, hand.big_blind, hand.ante) == (1500, 3000, 450)
        assert len(hand.players) == 8
        assert _kinds(hand.posts).count("ante") == 8
        assert hand.hero.stack == 44867
        assert hand.total_pot == 96934
        assert hand.context.confidence == "high"

    def test_cash_hand(self):
        hand = parse_text(GG_CASH)
        assert hand.hand_id == "RC2001"
        assert not hand.context.is_tournament
        assert hand.currency == "USD"
        assert (hand.total_pot, hand.rake) == (145, 2)
        assert hand.river.cards == ("3s",)
        assert hand.player("alice").hole_cards == ()


class TestPartyPoker:
    def setup_method(self):
        self.hand = parse_text(PARTY_HEADS_UP)

    def test_limit_alias_and_positions(self):
        assert self.hand.site == "partypoker"
        assert self.hand.limit == "No Limit"
        assert self.hand.player("playerx").position == "BTN/SB"
        assert self.hand.player("playery").position == "BB"

    def test_mucked_cards_are_known(self):
        assert self.hand.player("playery").hole_cards == ("Js", "Jc")

    def test_turn_actions(self):
        assert _kinds(self.hand.turn.actions) == ["check", "all-in", "call"]


class TestDetection:
    def test_count_headers(self):
        counts = count_headers(PS_CASH_USD + "\n\n" + PS_ALLIN_ACES)
        assert [(d.site, n) for d, n in counts] == [("pokerstars", 2)]

    def test_detects_each_dialect(self):
        assert detect_dialect(PS_CASH_USD).site == "pokerstars"
        assert detect_dialect(GG_CASH).site == "ggpoker"
        assert detect_dialect(PARTY_HEADS_UP).site == "partypoker"

    def test_preamble_is_skipped(self):
        hand = parse_text("Copied from my tracker:\n\n" + PS_CASH_USD)
        assert hand.hand_id == "123456789"


class TestParseFailures:
    """Every failure is a typed Failure, never an exception."""

    @pytest.mark.parametrize("text,code", [
        ("", ErrorCode.PARSE_EMPTY_INPUT),
        ("   \n  ", ErrorCode.PARSE_EMPTY_INPUT),
        ("hello world", ErrorCode.PARSE_UNRECOGNIZED_FORMAT),
        ("Winamax Poker - Tournament \"Freeroll\" buyIn: 0€ level: 1 - HandId: #1-2-3",
         ErrorCode.PARSE_UNSUPPORTED_DIALECT),
        ("x" * 100_001, ErrorCode.PARSE_INPUT_TOO_LARGE),
        (PS_CASH_USD + "\n\n" + PS_ALLIN_ACES, ErrorCode.PARSE_MULTIPLE_HANDS),
        ("PokerStars Hand #1: something unexpected", ErrorCode.PARSE_MALFORMED_HEADER),
    ])
    def test_failure_codes(self, text, code):
        result = parse_hand(text)
        assert not result.ok
        assert result.code == code

    def test_missing_table_line(self):
        text = "\n".join(ln for ln in PS_CASH_USD.splitlines() if not ln.startswith("Table "))
        result = parse_hand(text)
        assert result.code == ErrorCode.PARSE_MALFORMED_TABLE

    def test_unknown_player(self):
        text = PS_CASH_USD.replace("Player5: folds", "Ghost: folds")
        result = parse_hand(text)
        assert result.code == ErrorCode.PARSE_UNKNOWN_PLAYER
        assert result.details['player'] == "Ghost"

    def test_sub_cent_stack(self):
        text = PS_CASH_USD.replace("($50.00 in chips)", "($50.001 in chips)")
        assert parse_hand(text).code == ErrorCode.PARSE_INVALID_AMOUNT

    def test_invalid_card(self):
        text = PS_CASH_USD.replace("Dealt to Hero [Ah Kh]", "Dealt to Hero [Ah Zz]")
        assert parse_hand(text).code == ErrorCode.PARSE_INVALID_CARD

    def test_canonical_duplicate_players(self):
        text = PS_CASH_USD.replace("Seat 5: Player5", "Seat 5: HERO")
        with pytest.raises(ParseError) as exc:
            parse_text(text)
        assert exc.value.code == ErrorCode.PARSE_DUPLICATE_PLAYER


class TestParseResult:
    def test_success_carries_hand(self):
        result = parse_hand(PS_MTT_SIDEPOT)
        assert result.ok
        assert isinstance(result.value, HandHistory)
        assert result.warnings == ()

    def test_parse_file(self, tmp_path):
        path = tmp_path / "hand.txt"
        path.write_text(PARTY_HEADS_UP, encoding="utf-8")
        result = parse_file(path)
        assert result.ok
        assert result.value.hand_id == "123456792"
