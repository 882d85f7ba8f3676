"""
Snapshot replay of a parsed hand.
"""

from .builder import MAX_ACTIONS, MAX_PLAYERS, SnapshotBuilder, build_snapshots
from .describe import format_amount
from .schemas import Replay, Snapshot

__all__ = [
    'MAX_ACTIONS',
    'MAX_PLAYERS',
    'SnapshotBuilder',
    'build_snapshots',
    'format_amount',
    'Replay',
    'Snapshot',
]
