"""
Game-context classification.

Decides whether the numbers of a hand are tournament chips or cash-game
currency before any amount is parsed. Several independent signals vote;
contradictions are reported as warnings instead of being resolved silently.
"""

import logging
import re
from typing import List, Optional

from .dialects import Dialect
from .schemas import GameContext

logger = logging.getLogger(__name__)

TOURNAMENT_ID = re.compile(r'Tournament\s*#\s*\d+', re.IGNORECASE)
LEVEL_MARKER = re.compile(r'\bLevel\s*[IVXLCDM\d]+\b', re.IGNORECASE)
BUY_IN = re.compile(r'[$€£]?\d+(?:\.\d+)?\s*\+\s*[$€£]?\d+(?:\.\d+)?')
CASH_STAKES = re.compile(r'[$€£]\s*[\d,.]+\s*/\s*[$€£]\s*[\d,.]+')

_SYMBOL_TO_CODE = {'$': 'USD', '€': 'EUR', '£': 'GBP'}

# Big blind, in cents, from which a cash game counts as high stakes
HIGH_STAKES_BB = 100


def classify_context(header: str, dialect: Dialect, grammar_kind: str,
                     hand_id: Optional[str] = None,
                     currency_code: Optional[str] = None,
                     symbol: Optional[str] = None,
                     big_blind_raw: Optional[str] = None) -> GameContext:
    """
    Classify a hand as tournament or cash game from its header line.

    Args:
        header: First line of the hand
        dialect: Dialect the header belongs to
        grammar_kind: Which header grammar matched ("tournament" or "cash")
        hand_id: Hand identifier, used for per-site id layouts
        currency_code: Currency code captured from the stakes, if any
        symbol: Currency symbol captured from the stakes, if any
        big_blind_raw: Raw big blind literal, for the high-stakes flag

    Returns:
        GameContext with confidence tier and contradiction warnings
    """
    tournament: List[str] = []
    cash: List[str] = []

    if TOURNAMENT_ID.search(header):
        tournament.append("tournament-id")
    if LEVEL_MARKER.search(header):
        tournament.append("level-marker")
    if BUY_IN.search(header):
        tournament.append("buy-in")
    if CASH_STAKES.search(header):
        cash.append("currency-stakes")

    if grammar_kind == "tournament":
        tournament.append(f"{dialect.site}-tournament-layout")
    else:
        cash.append(f"{dialect.site}-cash-layout")

    if dialect.tournament_id_prefix and hand_id:
        if hand_id.upper().startswith(dialect.tournament_id_prefix):
            tournament.append(f"{dialect.site}-hand-id-prefix")
        else:
            cash.append(f"{dialect.site}-hand-id-prefix")

    warnings: List[str] = []
    if tournament and cash:
        warnings.append(
            f"Contradictory game markers: tournament={tournament} cash={cash}"
        )

    if len(tournament) != len(cash):
        is_tournament = len(tournament) > len(cash)
    else:
        is_tournament = grammar_kind == "tournament"
        warnings.append(f"Tied game-type signals, using {grammar_kind} header layout")

    supporting = tournament if is_tournament else cash
    if warnings:
        confidence = "low"
    elif len(supporting) >= 2:
        confidence = "high"
    else:
        confidence = "medium"

    if is_tournament:
        unit = "chips"
        high_stakes = False
    else:
        unit = (currency_code or _SYMBOL_TO_CODE.get(symbol or '$', 'USD')).upper()
        high_stakes = _big_blind_cents(big_blind_raw) >= HIGH_STAKES_BB

    for w in warnings:
        logger.warning(f"[context] {w}")

    return GameContext(
        is_tournament=is_tournament,
        currency_unit=unit,
        conversion_needed=not is_tournament,
        is_high_stakes=high_stakes,
        confidence=confidence,
        signals=tuple(tournament + cash),
        warnings=tuple(warnings),
    )


def _big_blind_cents(raw: Optional[str]) -> int:
    """Rough cents value of the big blind; only used for the high-stakes flag."""
    if not raw:
        return 0
    s = raw.replace(',', '')
    whole, _, frac = s.partition('.')
    if not whole.isdigit() or (frac and not frac.isdigit()):
        return 0
    return int(whole) * 100 + int(frac[:2].ljust(2, '0') or '0')
