"""
Position labels from the button seat and the players dealt into a hand.
"""
from typing import Dict, List
import logging

logger = logging.getLogger(__name__)

POS_ORDER_HEADS_UP = ["BTN/SB", "BB"]
POS_ORDER_6MAX = ["BTN", "SB", "BB", "UTG", "MP", "CO"]
POS_ORDER_10MAX = ["BTN", "SB", "BB", "UTG", "UTG+1", "UTG+2", "MP", "MP+1", "HJ", "CO"]
KEEP_ALWAYS = {"CO", "BTN", "SB", "BB"}

# Removed in this order when short-handed
REMOVAL_PRIORITY_10MAX = ["UTG+2", "MP+1", "UTG+1", "MP", "HJ", "UTG"]
REMOVAL_PRIORITY_6MAX = ["MP", "UTG"]


def assign_positions(seats: List[int], button_seat: int) -> Dict[int, str]:
    """
    Assign position labels to seats.

    Short-handed tables drop middle positions first while BTN/SB/BB/CO
    are always kept.

    Args:
        seats: Seats of the players dealt into the hand
        button_seat: Seat holding the dealer button

    Returns:
        Dict mapping seat number to position label
    """
    if not seats:
        return {}

    order = _order_from_button(seats, button_seat)
    n = len(order)

    if n == 2:
        assigned = POS_ORDER_HEADS_UP[:]
    elif n <= 6:
        assigned = _shrink_with_priority(POS_ORDER_6MAX, n, KEEP_ALWAYS, REMOVAL_PRIORITY_6MAX)
    else:
        assigned = _shrink_with_priority(POS_ORDER_10MAX, min(n, 10), KEEP_ALWAYS,
                                         REMOVAL_PRIORITY_10MAX)

    positions = dict(zip(order, assigned))
    logger.debug(f"[assign_positions] {len(positions)} positions for {n} players")
    return positions


def _order_from_button(seats: List[int], btn: int) -> List[int]:
    """
    Order seats starting from button (BTN, SB, BB, UTG...).
    """
    if btn not in seats:
        logger.warning(f"[assign_positions] button seat {btn} not dealt in, using seat {min(seats)}")
        btn = min(seats)

    span = max(seats) + 1
    return sorted(seats, key=lambda s: (s - btn) % span)


def _shrink_with_priority(base: List[str], need: int, keep: set, priority: List[str]) -> List[str]:
    """
    Shrink position list by removing positions according to priority order.

    Example for a 10-seat ring:
    - 9-handed: remove UTG+2
    - 8-handed: remove UTG+2, MP+1
    """
    if len(base) <= need:
        return base[:need]

    to_remove = len(base) - need
    removed = set()
    for pos in priority:
        if len(removed) >= to_remove:
            break
        if pos in base and pos not in keep:
            removed.add(pos)

    return [pos for pos in base if pos not in removed]
