"""
Poker hand history parsing module.
Provides one table-driven engine for every supported site format.
"""

from .schemas import Action, GameContext, HandHistory, Player, Showdown, Street
from .dialects import DIALECTS, Dialect
from .engine import HandParser
from .runner import MAX_INPUT_CHARS, parse_file, parse_hand, parse_text

__all__ = [
    'Action',
    'GameContext',
    'HandHistory',
    'Player',
    'Showdown',
    'Street',
    'DIALECTS',
    'Dialect',
    'HandParser',
    'MAX_INPUT_CHARS',
    'parse_file',
    'parse_hand',
    'parse_text',
]
