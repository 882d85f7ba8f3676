"""
Pot settlement: side pots, hand evaluation and winner resolution.
"""

from .evaluator import HandCategory, HandValue, describe, determine_winners, evaluate
from .side_pots import Pot, calculate_side_pots
from .winners import SettlementContext, resolve_payouts, split_amount

__all__ = [
    'HandCategory',
    'HandValue',
    'describe',
    'determine_winners',
    'evaluate',
    'Pot',
    'calculate_side_pots',
    'SettlementContext',
    'resolve_payouts',
    'split_amount',
]
