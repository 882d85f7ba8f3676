"""
Mathematical invariant checks run against every replay state.

Each check returns a GuardResult instead of raising; GuardRunner decides what
a failure means. Critical failures abort the build, anything else is written
to the anomaly log and the build continues.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import ErrorCode, GuardViolation, Severity
from .anomaly_log import AnomalyEntry, AnomalyLog

logger = logging.getLogger(__name__)

# One minor unit of slack for conservation
EPSILON = 1
# Conservation drift up to this many units is an error, beyond it critical
CONSERVATION_ERROR_LIMIT = 10

GuardSeverity = Severity


@dataclass(frozen=True)
class GuardResult:
    name: str
    passed: bool
    severity: Severity = Severity.WARNING
    message: str = ""
    context: Dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True

    @classmethod
    def ok(cls, name: str) -> 'GuardResult':
        return cls(name=name, passed=True)


def check_money_conservation(initial_stacks: Mapping[str, int], final_stacks: Mapping[str, int],
                             pot: int = 0, rake: int = 0, initial_pot: int = 0) -> GuardResult:
    """initial stacks + initial pot == final stacks + pot + rake (within EPSILON)."""
    before = sum(initial_stacks.values()) + initial_pot
    after = sum(final_stacks.values()) + pot + rake
    diff = after - before
    if abs(diff) <= EPSILON:
        return GuardResult.ok("money_conservation")

    critical = abs(diff) > CONSERVATION_ERROR_LIMIT
    return GuardResult(
        name="money_conservation",
        passed=False,
        severity=Severity.CRITICAL if critical else Severity.ERROR,
        message=f"Money not conserved: {before} before, {after} after (diff {diff})",
        context={'before': before, 'after': after, 'pot': pot, 'rake': rake, 'difference': diff},
        recoverable=not critical,
    )


def check_stack_consistency(initial: Mapping[str, int], final: Mapping[str, int],
                            committed: Mapping[str, int],
                            payouts: Mapping[str, int]) -> GuardResult:
    """final == initial - committed + payout, per player."""
    mismatches = {}
    for key, start in initial.items():
        expected = start - committed.get(key, 0) + payouts.get(key, 0)
        actual = final.get(key, 0)
        if expected != actual:
            mismatches[key] = {'expected': expected, 'actual': actual}

    if not mismatches:
        return GuardResult.ok("stack_consistency")
    return GuardResult(
        name="stack_consistency",
        passed=False,
        severity=Severity.ERROR,
        message=f"Stack mismatch for {', '.join(sorted(mismatches))}",
        context={'mismatches': mismatches},
        recoverable=True,
    )


def check_pot_accuracy(pots: Sequence, committed: Mapping[str, int], rake: int = 0) -> GuardResult:
    """sum(pots) == sum(committed) - rake, exactly."""
    total_pots = sum(p.amount for p in pots)
    expected = sum(committed.values()) - rake
    if total_pots == expected:
        return GuardResult.ok("pot_accuracy")
    return GuardResult(
        name="pot_accuracy",
        passed=False,
        severity=Severity.CRITICAL,
        message=f"Pots total {total_pots}, expected {expected}",
        context={'pots': total_pots, 'expected': expected, 'rake': rake},
        recoverable=False,
    )


def check_side_pots(pots: Sequence, contributions: Mapping[str, int], rake: int = 0) -> GuardResult:
    """Conservation plus ordering rules for one computed pot set."""
    problems: List[str] = []
    total_pots = sum(p.amount for p in pots)
    expected = sum(contributions.values()) - rake
    if pots and total_pots != expected:
        problems.append(f"pots total {total_pots}, expected {expected}")

    for prev, cur in zip(pots, pots[1:]):
        if cur.source_level <= prev.source_level:
            problems.append(f"levels not increasing ({prev.source_level} -> {cur.source_level})")
        if len(cur.eligible) > len(prev.eligible):
            problems.append(f"eligibility grows at level {cur.source_level}")
    for i, pot in enumerate(pots):
        if pot.amount < 0:
            problems.append(f"pot {i} is negative ({pot.amount})")

    if not problems:
        return GuardResult.ok("side_pots")
    return GuardResult(
        name="side_pots",
        passed=False,
        severity=Severity.CRITICAL,
        message="Side pots invalid: " + "; ".join(problems),
        context={'pots': [p.to_dict() for p in pots], 'expected': expected},
        recoverable=False,
    )


def check_payouts(payouts: Mapping[str, int], pots: Sequence) -> GuardResult:
    """Everything in the pots is paid out, to the unit."""
    paid = sum(payouts.values())
    available = sum(p.amount for p in pots)
    if paid == available:
        return GuardResult.ok("payout_total")
    return GuardResult(
        name="payout_total",
        passed=False,
        severity=Severity.CRITICAL,
        message=f"Paid {paid} out of pots totalling {available}",
        context={'paid': paid, 'available': available},
        recoverable=False,
    )


def check_recorded_collections(payouts: Mapping[str, int],
                               collections: Mapping[str, int]) -> GuardResult:
    """Computed payouts match what the text says each player collected."""
    if not collections:
        return GuardResult.ok("recorded_collections")
    differing = {
        key: {'recorded': collections.get(key, 0), 'computed': payouts.get(key, 0)}
        for key in sorted(set(payouts) | set(collections))
        if collections.get(key, 0) != payouts.get(key, 0)
    }
    if not differing:
        return GuardResult.ok("recorded_collections")
    return GuardResult(
        name="recorded_collections",
        passed=False,
        severity=Severity.WARNING,
        message=f"Payouts differ from recorded collections for {', '.join(differing)}",
        context={'differences': differing},
        recoverable=True,
    )


def check_all_in_bound(key: str, committed_this_action: int, stack_before: int) -> GuardResult:
    """An all-in never commits more than the stack it started from."""
    if committed_this_action <= stack_before:
        return GuardResult.ok("all_in_bound")
    return GuardResult(
        name="all_in_bound",
        passed=False,
        severity=Severity.CRITICAL,
        message=f"{key} committed {committed_this_action} all-in with only {stack_before}",
        context={'player': key, 'committed': committed_this_action, 'stack_before': stack_before},
        recoverable=False,
    )


def check_non_negative(name: str, values: Mapping[str, int]) -> GuardResult:
    negatives = {k: v for k, v in values.items() if v < 0}
    if not negatives:
        return GuardResult.ok(f"non_negative_{name}")
    return GuardResult(
        name=f"non_negative_{name}",
        passed=False,
        severity=Severity.CRITICAL,
        message=f"Negative {name}: {negatives}",
        context={'negatives': negatives},
        recoverable=False,
    )


class GuardRunner:
    """Runs guard batches for one hand and enforces the failure policy."""

    def __init__(self, anomaly_log: Optional[AnomalyLog], hand_id: Optional[str] = None):
        self.anomaly_log = anomaly_log
        self.hand_id = hand_id
        self.failures: List[GuardResult] = []

    def run(self, stage: str, results: Iterable[GuardResult]) -> List[GuardResult]:
        """
        Evaluate a batch of guard results.

        Args:
            stage: Label of the state being checked (e.g. "snapshot 4")
            results: Guard results for that state

        Returns:
            Non-critical failures of the batch

        Raises:
            GuardViolation: On the first critical failure
        """
        failed = []
        for result in results:
            if result.passed:
                continue
            logger.error(f"[guard] {self.hand_id} {stage}: {result.name} failed - {result.message}")
            self.failures.append(result)
            self._record(stage, result)
            if result.severity == Severity.CRITICAL:
                raise GuardViolation(
                    f"{result.name} failed at {stage}: {result.message}",
                    code=ErrorCode.GUARD_VIOLATION,
                    details={'guard': result.name, 'stage': stage, **result.context},
                    severity=Severity.CRITICAL,
                    recoverable=False,
                )
            failed.append(result)
        return failed

    def _record(self, stage: str, result: GuardResult):
        if self.anomaly_log is None:
            return
        self.anomaly_log.record(AnomalyEntry.create(
            hand_id=self.hand_id,
            kind="GUARD_FAILURE",
            description=f"{stage}: {result.message}",
            fallback_action="operation aborted" if result.severity == Severity.CRITICAL
            else "continued",
            context={
                'guard': result.name,
                'severity': result.severity.value,
                'recoverable': result.recoverable,
                **result.context,
            },
        ))
