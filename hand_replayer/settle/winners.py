"""
Winner resolution and payout splitting.

Pots are paid from the lowest level up. A pot is paid, in order of preference:
to its only eligible player; to the eligible players the text records as
collecting that pot ("collected N from side pot"), or as winners of the hand
when the text does not label its pots; to the best eligible hand per the
evaluator. A pot that still has no winner is an anomaly handled by the
configured policy.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import ReplayConfig
from ..errors import ErrorCode, SettlementError
from ..guards.anomaly_log import AnomalyEntry, AnomalyLog
from .evaluator import determine_winners, evaluate
from .side_pots import Pot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementContext:
    """Everything winner resolution needs to know about a finished hand."""
    hand_id: Optional[str]
    winner_keys: Tuple[str, ...]
    hole_cards: Mapping[str, Tuple[str, ...]]
    board: Tuple[str, ...]
    seats: Mapping[str, int]
    committed: Mapping[str, int]
    status: Mapping[str, str]
    config: ReplayConfig
    anomaly_log: Optional[AnomalyLog] = None
    # Pot index -> keys the text records as collecting that pot
    pot_winners: Mapping[int, Tuple[str, ...]] = field(default_factory=dict)


def split_amount(amount: int, winners: Sequence[str], seats: Mapping[str, int]) -> Dict[str, int]:
    """
    Split a pot evenly; odd units go one each to the lowest seat numbers.

    Args:
        amount: Pot amount in minor units
        winners: Keys sharing the pot
        seats: Key -> seat number

    Returns:
        Key -> share
    """
    ordered = sorted(winners, key=lambda k: (seats.get(k, 0), k))
    share, remainder = divmod(amount, len(ordered))
    return {key: share + (1 if i < remainder else 0) for i, key in enumerate(ordered)}


def _evaluate_pot(pot: Pot, ctx: SettlementContext) -> List[str]:
    """Best eligible hands, or [] when any eligible hand is unknown."""
    contenders = sorted(pot.eligible)
    if any(len(ctx.hole_cards.get(k, ())) != 2 for k in contenders):
        return []
    values = [evaluate(ctx.hole_cards[k], ctx.board) for k in contenders]
    return [contenders[i] for i in determine_winners(values)]


def _unresolved(index: int, pot: Pot, ctx: SettlementContext, kind: str,
                candidates: Sequence[str], reason: str) -> List[str]:
    """Apply the anomaly policy to a pot nobody can be paid from."""
    fallback = sorted(candidates)[0] if candidates and ctx.config.allow_fallback_on_anomaly else None

    entry = AnomalyEntry.create(
        hand_id=ctx.hand_id,
        kind=kind,
        pot_index=index,
        pot_amount=pot.amount,
        eligible=pot.eligible,
        committed=dict(ctx.committed),
        status=dict(ctx.status),
        description=reason,
        fallback_action=f"paid to earliest eligible player {fallback}" if fallback
        else "operation aborted",
        fallback_winner=fallback,
    )
    incident = ctx.anomaly_log.record(entry) if ctx.anomaly_log is not None else entry.incident_id

    if fallback is None:
        raise SettlementError(
            f"Pot {index} ({pot.amount}) cannot be settled: {reason}",
            code=ErrorCode.SETTLE_EMPTY_ELIGIBLE if kind == "EMPTY_ELIGIBLE_SET"
            else ErrorCode.SETTLE_UNRESOLVED_WINNER,
            details={'pot_index': index, 'pot': pot.to_dict(), 'incident_id': incident},
        )

    logger.warning(f"[settle] hand {ctx.hand_id} pot {index}: fallback winner {fallback} ({reason})")
    return [fallback]


def resolve_pot_winners(index: int, pot: Pot, ctx: SettlementContext) -> List[str]:
    """Keys that win one pot."""
    if not pot.eligible:
        contributors = [k for k, v in ctx.committed.items() if v > 0]
        return _unresolved(index, pot, ctx, "EMPTY_ELIGIBLE_SET", contributors,
                           "pot holds money but nobody is eligible")

    if len(pot.eligible) == 1:
        return list(pot.eligible)

    if index in ctx.pot_winners:
        labelled = [k for k in ctx.pot_winners[index] if k in pot.eligible]
        if labelled:
            return sorted(set(labelled))
        logger.warning(f"[settle] hand {ctx.hand_id} pot {index}: recorded collectors "
                       f"{list(ctx.pot_winners[index])} are not eligible")
    else:
        recorded = [k for k in ctx.winner_keys if k in pot.eligible]
        if recorded:
            return sorted(set(recorded))

    evaluated = _evaluate_pot(pot, ctx)
    if evaluated:
        logger.info(f"[settle] hand {ctx.hand_id} pot {index} resolved by evaluation: {evaluated}")
        return evaluated

    return _unresolved(index, pot, ctx, "NO_ELIGIBLE_WINNERS", sorted(pot.eligible),
                       "no recorded winner is eligible and hole cards are incomplete")


def resolve_payouts(pots: Sequence[Pot], ctx: SettlementContext) -> Dict[str, int]:
    """
    Pay every pot, lowest level first.

    Returns:
        Key -> total payout (players who win nothing are omitted)

    Raises:
        SettlementError: A pot cannot be paid and fallback is disabled
    """
    payouts: Dict[str, int] = {}
    for index, pot in enumerate(pots):
        if pot.amount == 0:
            continue
        winners = resolve_pot_winners(index, pot, ctx)
        for key, share in split_amount(pot.amount, winners, ctx.seats).items():
            payouts[key] = payouts.get(key, 0) + share
    return payouts
