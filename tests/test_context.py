"""
Tests for tournament vs. cash-game classification.
"""
from hand_replayer.parse.context import classify_context
from hand_replayer.parse.dialects import GGPOKER, PARTYPOKER, POKERSTARS


class TestTournamentHeaders:
    def test_pokerstars_tournament_is_high_confidence(self):
        header = ("PokerStars Hand #2233445577: Tournament #123456789, $10+$1 USD Hold'em No Limit "
                  "- Level IV (100/200) - 2025/11/14 09:55:00 ET")
        ctx = classify_context(header, POKERSTARS, "tournament", hand_id="2233445577")

        assert ctx.is_tournament
        assert ctx.currency_unit == "chips"
        assert not ctx.conversion_needed
        assert ctx.confidence == "high"
        assert {"tournament-id", "level-marker", "buy-in"} <= set(ctx.signals)
        assert ctx.warnings == ()

    def test_gg_tournament_id_prefix_is_a_signal(self):
        header = ("Poker Hand #TM5148170724: Tournament #238314829, Bounty Hunters $5.40 "
                  "Hold'em No Limit - Level15(1,500/3,000) - 2025/10/26 20:21:23")
        ctx = classify_context(header, GGPOKER, "tournament", hand_id="TM5148170724")

        assert ctx.is_tournament
        assert "ggpoker-hand-id-prefix" in ctx.signals
        assert ctx.confidence == "high"

    def test_party_roman_level(self):
        header = ("PartyPoker Hand #123456792: Tournament #987654321, 10+1 NL Hold'em "
                  "- Level VI (150/300) - 2024/01/15 20:40:00 ET")
        ctx = classify_context(header, PARTYPOKER, "tournament", hand_id="123456792")
        assert ctx.is_tournament
        assert ctx.confidence == "high"


class TestCashHeaders:
    def test_usd_stakes(self):
        header = "PokerStars Hand #123456789:  Hold'em No Limit ($0.25/$0.50 USD) - 2025/01/13 10:00:00 ET"
        ctx = classify_context(header, POKERSTARS, "cash", hand_id="123456789",
                               currency_code="USD", symbol="$", big_blind_raw="0.50")

        assert not ctx.is_tournament
        assert ctx.currency_unit == "USD"
        assert ctx.conversion_needed
        assert not ctx.is_high_stakes
        assert ctx.confidence == "high"

    def test_euro_symbol_without_code(self):
        header = "PokerStars Hand #111222333:  Hold'em No Limit (€0.25/€0.50) - 2025/01/13 12:00:00 ET"
        ctx = classify_context(header, POKERSTARS, "cash", symbol="€", big_blind_raw="0.50")
        assert ctx.currency_unit == "EUR"

    def test_high_stakes_flag(self):
        header = "PokerStars Hand #1:  Hold'em No Limit ($5/$10 USD) - 2025/01/13 12:00:00 ET"
        ctx = classify_context(header, POKERSTARS, "cash", currency_code="USD", symbol="$",
                               big_blind_raw="10")
        assert ctx.is_high_stakes


class TestContradictions:
    def test_tournament_hand_id_on_cash_layout(self):
        """A TM hand id with cash stakes is reported, not silently resolved."""
        header = "Poker Hand #TM1001: Hold'em No Limit ($0.05/$0.10) - 2025/03/01 12:00:00"
        ctx = classify_context(header, GGPOKER, "cash", hand_id="TM1001", symbol="$",
                               big_blind_raw="0.10")

        assert not ctx.is_tournament
        assert ctx.confidence == "low"
        assert any("Contradictory" in w for w in ctx.warnings)

    def test_tie_falls_back_to_header_layout(self):
        header = "PokerStars Hand #1:  Hold'em No Limit (25/50) - Level I"
        ctx = classify_context(header, POKERSTARS, "cash", hand_id="1")

        assert not ctx.is_tournament
        assert ctx.confidence == "low"
        assert any("Tied" in w for w in ctx.warnings)
