"""
Tests for monetary literal conversion and card normalisation.
"""
import pytest

from hand_replayer.errors import ErrorCode, ParseError
from hand_replayer.parse.schemas import GameContext
from hand_replayer.parse.utils import (
    clean_amount,
    last_bracket_cards,
    normalize_card,
    parse_cards,
    to_minor_units,
)

CASH = GameContext(is_tournament=False, currency_unit="USD", conversion_needed=True)
CHIPS = GameContext(is_tournament=True, currency_unit="chips", conversion_needed=False)


class TestCleanAmount:
    def test_symbols_and_codes(self):
        assert clean_amount("$100") == "100"
        assert clean_amount("€3") == "3"
        assert clean_amount("0.10 USD") == "0.10"
        assert clean_amount("($4.05)") == "4.05"

    def test_comma_heuristic(self):
        assert clean_amount("1,234.56") == "1234.56"
        assert clean_amount("1234,56") == "1234.56"
        assert clean_amount("145,068") == "145068"
        assert clean_amount("1,500,000") == "1500000"


class TestCashAmounts:
    def test_cents(self):
        assert to_minor_units("$4.05", CASH) == 405
        assert to_minor_units("$0.1", CASH) == 10
        assert to_minor_units("$2", CASH) == 200
        assert to_minor_units("1,234.56", CASH) == 123456
        assert to_minor_units("1234,56", CASH) == 123456

    def test_trailing_zeros_beyond_cents(self):
        assert to_minor_units("$0.010", CASH) == 1

    def test_sub_cent_precision_rejected(self):
        with pytest.raises(ParseError) as exc:
            to_minor_units("$0.001", CASH)
        assert exc.value.code == ErrorCode.PARSE_INVALID_AMOUNT

    def test_currency_overflow(self):
        with pytest.raises(ParseError):
            to_minor_units("$1000000000.01", CASH)


class TestChipAmounts:
    def test_chips_are_not_scaled(self):
        assert to_minor_units("1500", CHIPS) == 1500
        assert to_minor_units("1,500", CHIPS) == 1500
        assert to_minor_units("$1500", CHIPS) == 1500

    def test_fractional_chips_rejected(self):
        with pytest.raises(ParseError):
            to_minor_units("1500.5", CHIPS)

    def test_chip_overflow(self):
        with pytest.raises(ParseError):
            to_minor_units("10000000000000", CHIPS)


class TestInvalidAmounts:
    @pytest.mark.parametrize("raw", ["", "$", "-5", "1.2.3", "abc", "inf", "nan", "1e5"])
    def test_rejected(self, raw):
        with pytest.raises(ParseError) as exc:
            to_minor_units(raw, CASH)
        assert exc.value.code == ErrorCode.PARSE_INVALID_AMOUNT
        assert exc.value.details['raw'] == raw


class TestCards:
    def test_normalize(self):
        assert normalize_card("ah") == "Ah"
        assert normalize_card("10h") == "Th"
        assert normalize_card("A♠") == "As"
        assert normalize_card("K♥") == "Kh"

    @pytest.mark.parametrize("token", ["Zz", "1h", "A", "Ahh", "Ax"])
    def test_invalid(self, token):
        with pytest.raises(ParseError) as exc:
            normalize_card(token)
        assert exc.value.code == ErrorCode.PARSE_INVALID_CARD

    def test_parse_cards(self):
        assert parse_cards("[Ah Kd]") == ("Ah", "Kd")
        assert parse_cards("") == ()

    def test_last_bracket(self):
        assert last_bracket_cards("*** TURN *** [3d Qd 7d] [4d]") == ("4d",)
        assert last_bracket_cards("*** FLOP *** [2s 7h 8d]") == ("2s", "7h", "8d")
        assert last_bracket_cards("*** SUMMARY ***") == ()
