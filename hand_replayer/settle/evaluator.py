"""
Hold'em hand evaluator.

Ranks the best five-card hand out of two hole cards and up to five board
cards by enumerating every five-card subset. Only used when the text itself
does not say who won a pot.
"""

from collections import Counter
from enum import IntEnum
from itertools import combinations
from typing import List, NamedTuple, Sequence, Tuple

RANK_VALUES = {r: i for i, r in enumerate("23456789TJQKA", start=2)}
RANK_NAMES = {
    2: "Two", 3: "Three", 4: "Four", 5: "Five", 6: "Six", 7: "Seven", 8: "Eight",
    9: "Nine", 10: "Ten", 11: "Jack", 12: "Queen", 13: "King", 14: "Ace",
}
SUITS = "cdhs"

# Two hole cards plus a full board
MAX_CARDS = 7


class HandCategory(IntEnum):
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10


class HandValue(NamedTuple):
    """Comparable hand strength: category first, then tie-break ranks high to low."""
    category: HandCategory
    tiebreak: Tuple[int, ...]


def _validate(cards: Sequence[str]) -> List[Tuple[int, str]]:
    if len(cards) > MAX_CARDS:
        raise ValueError(f"At most {MAX_CARDS} cards can be evaluated, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError(f"Duplicate cards in {list(cards)}")
    parsed = []
    for card in cards:
        if len(card) != 2 or card[0] not in RANK_VALUES or card[1] not in SUITS:
            raise ValueError(f"Illegal card '{card}'")
        parsed.append((RANK_VALUES[card[0]], card[1]))
    return parsed


def _straight_high(ranks: Sequence[int]) -> int:
    """High card of a five-rank straight, 0 if none (wheel counts as five-high)."""
    distinct = sorted(set(ranks), reverse=True)
    if len(distinct) != 5:
        return 0
    if distinct[0] - distinct[4] == 4:
        return distinct[0]
    if distinct == [14, 5, 4, 3, 2]:
        return 5
    return 0


def rank_hand(cards: Sequence[Tuple[int, str]]) -> HandValue:
    """Rank up to five parsed cards as a single hand."""
    ranks = [r for r, _ in cards]
    counts = Counter(ranks)
    # Groups ordered by size, then rank: e.g. full house -> trips rank, pair rank
    groups = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    ordered = tuple(r for r, _ in groups)
    shape = [n for _, n in groups]

    if len(cards) == 5:
        flush = len({s for _, s in cards}) == 1
        high = _straight_high(ranks)
        if flush and high:
            category = HandCategory.ROYAL_FLUSH if high == 14 else HandCategory.STRAIGHT_FLUSH
            return HandValue(category, (high,))
        if shape == [4, 1]:
            return HandValue(HandCategory.FOUR_OF_A_KIND, ordered)
        if shape == [3, 2]:
            return HandValue(HandCategory.FULL_HOUSE, ordered)
        if flush:
            return HandValue(HandCategory.FLUSH, tuple(sorted(ranks, reverse=True)))
        if high:
            return HandValue(HandCategory.STRAIGHT, (high,))

    if shape[0] == 4:
        return HandValue(HandCategory.FOUR_OF_A_KIND, ordered)
    if shape[0] == 3:
        return HandValue(HandCategory.THREE_OF_A_KIND, ordered)
    if shape[:2] == [2, 2]:
        return HandValue(HandCategory.TWO_PAIR, ordered)
    if shape[0] == 2:
        return HandValue(HandCategory.PAIR, ordered)
    return HandValue(HandCategory.HIGH_CARD, ordered)


def evaluate(hole: Sequence[str], board: Sequence[str] = ()) -> HandValue:
    """
    Best hand value from hole cards plus board.

    Args:
        hole: Two hole cards, e.g. ("Ah", "Kd")
        board: Zero to five community cards

    Returns:
        Maximum HandValue over every five-card subset. With fewer than five
        cards in total the whole set is ranked as one partial hand.
    """
    cards = _validate(tuple(hole) + tuple(board))
    if not cards:
        raise ValueError("No cards to evaluate")
    if len(cards) <= 5:
        return rank_hand(cards)
    return max(rank_hand(combo) for combo in combinations(cards, 5))


def determine_winners(values: Sequence[HandValue]) -> List[int]:
    """Indices of every hand tied for the best value (split pots)."""
    if not values:
        return []
    best = max(values)
    return [i for i, v in enumerate(values) if v == best]


def describe(value: HandValue) -> str:
    """Human label for a hand value."""
    c, t = value.category, value.tiebreak
    name = RANK_NAMES
    if c == HandCategory.ROYAL_FLUSH:
        return "a royal flush"
    if c == HandCategory.STRAIGHT_FLUSH:
        return f"a straight flush, {name[t[0]]} high"
    if c == HandCategory.FOUR_OF_A_KIND:
        return f"four of a kind, {_plural(t[0])}"
    if c == HandCategory.FULL_HOUSE:
        return f"a full house, {_plural(t[0])} full of {_plural(t[1])}"
    if c == HandCategory.FLUSH:
        return f"a flush, {name[t[0]]} high"
    if c == HandCategory.STRAIGHT:
        return f"a straight, {name[t[0]]} high"
    if c == HandCategory.THREE_OF_A_KIND:
        return f"three of a kind, {_plural(t[0])}"
    if c == HandCategory.TWO_PAIR:
        return f"two pair, {_plural(t[0])} and {_plural(t[1])}"
    if c == HandCategory.PAIR:
        return f"a pair of {_plural(t[0])}"
    return f"high card {name[t[0]]}"


def _plural(rank: int) -> str:
    word = RANK_NAMES[rank]
    return word + ("es" if word == "Six" else "s")
