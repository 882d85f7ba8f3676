"""
Human-readable text for replay snapshots.
"""
from typing import Mapping, Sequence

from ..parse.schemas import Action, GameContext

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

_POSTS = {"ante": "the ante", "small-blind": "small blind", "big-blind": "big blind"}


def format_amount(amount: int, context: GameContext) -> str:
    """Format minor units for display: "1,500" chips or "$4.05"."""
    if not context.conversion_needed:
        return f"{amount:,}"
    sign = "-" if amount < 0 else ""
    whole, cents = divmod(abs(amount), 100)
    symbol = CURRENCY_SYMBOLS.get(context.currency_unit, "")
    suffix = "" if symbol else f" {context.currency_unit}"
    return f"{sign}{symbol}{whole:,}.{cents:02d}{suffix}"


def describe_post(action: Action, amount: int, context: GameContext) -> str:
    return f"{action.actor} posts {_POSTS[action.kind]} {format_amount(amount, context)}"


def describe_action(action: Action, committed: int, context: GameContext) -> str:
    """
    Describe one action.

    Args:
        action: The parsed action
        committed: Chips actually put in by this action (after all-in capping)
        context: Game context, for amount formatting
    """
    def fmt(value: int) -> str:
        return format_amount(value, context)

    who = action.actor
    kind = action.kind

    if kind == "fold":
        return f"{who} folds"
    if kind == "check":
        return f"{who} checks"
    if kind == "call":
        return f"{who} calls {fmt(committed)}"
    if kind == "bet":
        return f"{who} bets {fmt(committed)}"
    if kind == "raise":
        return f"{who} raises {fmt(action.raise_by or 0)} to {fmt(action.total_bet or 0)}"
    if kind == "all-in":
        return f"{who} goes all-in for {fmt(committed)}"
    if kind == "uncalled-return":
        return f"Uncalled bet ({fmt(action.amount)}) returned to {who}"
    if kind == "shows":
        return f"{who} shows [{' '.join(action.cards)}]"
    if kind in _POSTS:
        return describe_post(action, committed, context)
    return f"{who} {kind}"


def describe_street(street: str, board: Sequence[str]) -> str:
    return f"*** {street.upper()} *** [{' '.join(board)}]"


def describe_showdown(payouts: Mapping[str, int], names: Mapping[str, str],
                      context: GameContext, contested: bool) -> str:
    """
    Summarise the payouts of the terminal snapshot.

    Args:
        payouts: Key -> amount won
        names: Key -> display name
        context: Game context, for amount formatting
        contested: False when everyone else folded
    """
    winners = [(names.get(k, k), v) for k, v in sorted(payouts.items()) if v > 0]
    if not winners:
        return "Showdown: no pot to award"
    if not contested and len(winners) == 1:
        name, amount = winners[0]
        return f"{name} wins {format_amount(amount, context)} uncontested"
    parts = ", ".join(f"{name} wins {format_amount(amount, context)}" for name, amount in winners)
    return f"Showdown: {parts}"
