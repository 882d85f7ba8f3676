"""
Mathematical guards and the anomaly log.
"""

from .anomaly_log import (
    AnomalyEntry,
    AnomalyLog,
    JsonlAnomalyLog,
    MemoryAnomalyLog,
    open_anomaly_log,
)
from .mathematical import (
    GuardResult,
    GuardRunner,
    GuardSeverity,
    check_all_in_bound,
    check_money_conservation,
    check_non_negative,
    check_payouts,
    check_pot_accuracy,
    check_recorded_collections,
    check_side_pots,
    check_stack_consistency,
)

__all__ = [
    'AnomalyEntry',
    'AnomalyLog',
    'JsonlAnomalyLog',
    'MemoryAnomalyLog',
    'open_anomaly_log',
    'GuardResult',
    'GuardRunner',
    'GuardSeverity',
    'check_all_in_bound',
    'check_money_conservation',
    'check_non_negative',
    'check_payouts',
    'check_pot_accuracy',
    'check_recorded_collections',
    'check_side_pots',
    'check_stack_consistency',
]
