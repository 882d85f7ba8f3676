"""
Side pot calculation.

Pure function from per-player committed amounts and terminal statuses to an
ordered list of pots. The result is checked for exact conservation before it
is returned: the pots always add up to everything committed minus rake.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Mapping, Optional

from ..errors import ErrorCode, SidePotError
from ..guards.anomaly_log import AnomalyEntry

logger = logging.getLogger(__name__)

FOLDED = "folded"
ALL_IN = "all-in"
ACTIVE = "active"
STATUSES = (FOLDED, ALL_IN, ACTIVE)


@dataclass(frozen=True)
class Pot:
    """A main or side pot, amounts in minor units."""
    amount: int
    eligible: FrozenSet[str]
    source_level: int
    is_side: bool = False

    def to_dict(self) -> dict:
        return {
            'amount': self.amount,
            'eligible': sorted(self.eligible),
            'source_level': self.source_level,
            'is_side': self.is_side,
        }


def _validate(committed: Mapping[str, int], status: Mapping[str, str],
              rake: int) -> Dict[str, str]:
    if not committed:
        raise SidePotError("No contributions given", code=ErrorCode.MATH_INVALID_CONTRIBUTION)

    for key, amount in committed.items():
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise SidePotError(
                f"Contribution of {key} is not an integer amount: {amount!r}",
                code=ErrorCode.MATH_INVALID_CONTRIBUTION,
                details={'player': key, 'amount': repr(amount)},
            )
        if amount < 0:
            raise SidePotError(
                f"Contribution of {key} is negative: {amount}",
                code=ErrorCode.MATH_INVALID_CONTRIBUTION,
                details={'player': key, 'amount': amount},
            )

    resolved: Dict[str, str] = {}
    for key in committed:
        st = status.get(key)
        if st is None:
            logger.warning(f"[side_pots] no status for {key}, treating as {ACTIVE}")
            st = ACTIVE
        if st not in STATUSES:
            raise SidePotError(
                f"Unknown status '{st}' for {key}",
                code=ErrorCode.MATH_INVALID_STATUS,
                details={'player': key, 'status': st},
            )
        resolved[key] = st

    total = sum(committed.values())
    if isinstance(rake, bool) or not isinstance(rake, int) or rake < 0 or rake > total:
        raise SidePotError(
            f"Rake {rake!r} must be an integer between 0 and the total of {total}",
            code=ErrorCode.MATH_INVALID_RAKE,
            details={'rake': repr(rake), 'total': total},
        )
    return resolved


def _build_levels(committed: Mapping[str, int], status: Mapping[str, str]) -> List[Pot]:
    active = sorted(
        ((amount, key) for key, amount in committed.items() if status[key] != FOLDED),
    )
    folded = [committed[key] for key in committed if status[key] == FOLDED]

    if not active:
        total = sum(committed.values())
        if total:
            logger.warning(f"[side_pots] {total} committed but every player folded")
        return []

    if len(active) == 1:
        amount, key = active[0]
        return [Pot(sum(committed.values()), frozenset([key]), amount, False)]

    pots: List[Pot] = []
    previous = 0
    levels = sorted({amount for amount, _ in active if amount > 0})
    for level in levels:
        band = level - previous
        reaching = frozenset(key for amount, key in active if amount >= level)
        dead = sum(min(f, level) - min(f, previous) for f in folded)
        pots.append(Pot(band * len(reaching) + dead, reaching, level, bool(pots)))
        previous = level

    if not pots:
        return [Pot(sum(folded), frozenset(key for _, key in active), 0, False)]

    overflow = sum(f - previous for f in folded if f > previous)
    if overflow:
        top = pots[-1]
        pots[-1] = Pot(top.amount + overflow, top.eligible, top.source_level, top.is_side)
    return pots


def _apply_rake(pots: List[Pot], rake: int) -> List[Pot]:
    """Deduct rake proportionally; floor remainder comes off the last pot."""
    if not rake or not pots:
        return pots

    total = sum(p.amount for p in pots)
    shares = [p.amount * rake // total for p in pots]
    remainder = rake - sum(shares)

    # Remainder goes to the final pot, spilling downwards if it is too small
    for i in range(len(pots) - 1, -1, -1):
        room = pots[i].amount - shares[i]
        take = min(room, remainder)
        shares[i] += take
        remainder -= take
        if not remainder:
            break

    return [Pot(p.amount - s, p.eligible, p.source_level, p.is_side) for p, s in zip(pots, shares)]


def calculate_side_pots(committed: Mapping[str, int], status: Mapping[str, str],
                        rake: int = 0, anomaly_log=None,
                        hand_id: Optional[str] = None) -> List[Pot]:
    """
    Split committed amounts into main and side pots.

    Args:
        committed: Player key -> total committed this hand (minor units)
        status: Player key -> "folded" | "all-in" | "active"
        rake: House rake to deduct, in minor units
        anomaly_log: Optional sink receiving a record on conservation failure
        hand_id: Hand identifier for the anomaly record

    Returns:
        Pots ordered by increasing source level

    Raises:
        SidePotError: Invalid input, or pots not adding up to committed minus rake
    """
    statuses = _validate(committed, status, rake)
    total = sum(committed.values())

    if total == 0:
        eligible = frozenset(k for k, st in statuses.items() if st != FOLDED)
        return [Pot(0, eligible, 0, False)]

    pots = _build_levels(committed, statuses)
    if not pots:
        return pots

    pots = _apply_rake(pots, rake)

    distributed = sum(p.amount for p in pots)
    if distributed != total - rake:
        details = {
            'committed': dict(committed),
            'status': statuses,
            'rake': rake,
            'pots': [p.to_dict() for p in pots],
            'difference': distributed - (total - rake),
        }
        if anomaly_log is not None:
            anomaly_log.record(AnomalyEntry.create(
                hand_id=hand_id,
                kind="MATHEMATICAL_INCONSISTENCY",
                description=f"Pots total {distributed}, expected {total - rake}",
                committed=dict(committed),
                status=statuses,
                fallback_action="operation aborted",
                context=details,
            ))
        raise SidePotError(
            f"Side pots total {distributed} but {total} committed minus {rake} rake is {total - rake}",
            code=ErrorCode.MATH_POT_MISMATCH,
            details=details,
        )
    return pots

