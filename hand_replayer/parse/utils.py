"""
Utility functions for hand history parsing.
Money conversion and card parsing.
"""

import re
from typing import List, Tuple

from ..errors import ErrorCode, ParseError
from .schemas import GameContext

# Upper bounds, in minor units
MAX_SAFE_CHIPS = 10 ** 12
MAX_SAFE_CURRENCY = 10 ** 11

RANKS = "23456789TJQKA"
SUITS = "cdhs"

_SYMBOLS = re.compile(r'[$€£¥]|\b(?:USD|EUR|GBP)\b', re.IGNORECASE)
_PLAIN_DECIMAL = re.compile(r'\d+(?:\.\d+)?')
_UNICODE_SUITS = {'♣': 'c', '♦': 'd', '♥': 'h', '♠': 's'}
_BRACKETS = re.compile(r'\[([^\]]*)\]')


def _invalid(raw: str, reason: str) -> ParseError:
    return ParseError(
        f"Invalid amount '{raw}': {reason}",
        code=ErrorCode.PARSE_INVALID_AMOUNT,
        details={'raw': raw, 'reason': reason},
    )


def clean_amount(raw: str) -> str:
    """
    Strip decoration from a monetary literal and normalise separators.

    Handles:
    - Currency symbols and codes: "$100", "€100", "100 USD"
    - Brackets and parentheses: "(1234)", "[75]"
    - Comma as thousands separator: "1,234.56" -> "1234.56"
    - Comma as decimal separator: "1234,56" -> "1234.56"
    """
    s = _SYMBOLS.sub('', raw or '').strip()
    s = s.strip('()[] ')

    if ',' in s and '.' not in s:
        parts = s.split(',')
        if len(parts) == 2 and 1 <= len(parts[1]) <= 2:
            s = s.replace(',', '.')
        else:
            s = s.replace(',', '')
    elif ',' in s:
        s = s.replace(',', '')
    return s


def to_minor_units(raw: str, context: GameContext) -> int:
    """
    Convert a monetary literal to integer minor units.

    Tournament chips are integers and are not scaled. Cash amounts are split
    into whole and fractional digits and combined as cents, so no binary
    floating point is involved.

    Args:
        raw: Literal as printed in the hand history
        context: Game context deciding chips vs. currency

    Returns:
        Amount in minor units

    Raises:
        ParseError: For empty, negative, malformed, non-finite or oversized values
    """
    s = clean_amount(raw)
    if not s:
        raise _invalid(raw, "empty value")
    if s.startswith('-'):
        raise _invalid(raw, "negative value")
    if s.count('.') > 1:
        raise _invalid(raw, "multiple decimal points")
    if not _PLAIN_DECIMAL.fullmatch(s):
        # Also rejects "inf", "nan" and exponent forms
        raise _invalid(raw, "not a decimal number")

    whole, _, frac = s.partition('.')

    if context.conversion_needed:
        if len(frac) > 2:
            if frac[2:].strip('0'):
                raise _invalid(raw, "sub-cent precision")
            frac = frac[:2]
        value = int(whole) * 100 + int(frac.ljust(2, '0') or '0')
        limit = MAX_SAFE_CURRENCY
    else:
        if frac.strip('0'):
            raise _invalid(raw, "fractional chip count")
        value = int(whole)
        limit = MAX_SAFE_CHIPS

    if value > limit:
        raise _invalid(raw, f"exceeds maximum of {limit} minor units")
    return value


def normalize_card(token: str) -> str:
    """
    Normalise one card token to rank+suit form ("Ah", "Td").

    Raises:
        ParseError: If the token is not a legal card
    """
    t = token.strip()
    for symbol, suit in _UNICODE_SUITS.items():
        t = t.replace(symbol, suit)
    if t.startswith('10'):
        t = 'T' + t[2:]
    if len(t) != 2:
        raise ParseError(f"Invalid card '{token}'", code=ErrorCode.PARSE_INVALID_CARD,
                         details={'card': token})
    rank, suit = t[0].upper(), t[1].lower()
    if rank not in RANKS or suit not in SUITS:
        raise ParseError(f"Invalid card '{token}'", code=ErrorCode.PARSE_INVALID_CARD,
                         details={'card': token})
    return rank + suit


def parse_cards(card_str: str) -> Tuple[str, ...]:
    """
    Parse a card string like "Ah Kd" or "[Ah Kd]" into normalised cards.
    """
    if not card_str:
        return ()
    cleaned = card_str.strip().strip('[]')
    return tuple(normalize_card(tok) for tok in cleaned.split() if tok)


def last_bracket_cards(line: str) -> Tuple[str, ...]:
    """
    Cards of the last [...] group on a line.

    "*** TURN *** [3d Qd 7d] [4d]" -> ("4d",)
    """
    groups = _BRACKETS.findall(line)
    if not groups:
        return ()
    return parse_cards(groups[-1])


def split_lines(text: str) -> List[str]:
    """Non-empty, stripped lines of a hand."""
    return [ln.strip() for ln in text.replace('\r\n', '\n').split('\n') if ln.strip()]
