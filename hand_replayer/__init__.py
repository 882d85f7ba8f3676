"""
hand_replayer: parse single poker hand histories and replay them as a
sequence of immutable table snapshots with exact pot accounting.
"""

from .config import ReplayConfig, load_config
from .errors import ErrorCode, Failure, ReplayerError, Result, Success
from .keys import PlayerIndex, canonical_key
from .parse import parse_file, parse_hand, parse_text
from .pipeline import replay_batch, replay_hand
from .replay import Replay, Snapshot, SnapshotBuilder, build_snapshots

__version__ = "1.0.0"

__all__ = [
    'ReplayConfig',
    'load_config',
    'ErrorCode',
    'Failure',
    'ReplayerError',
    'Result',
    'Success',
    'PlayerIndex',
    'canonical_key',
    'parse_file',
    'parse_hand',
    'parse_text',
    'replay_batch',
    'replay_hand',
    'Replay',
    'Snapshot',
    'SnapshotBuilder',
    'build_snapshots',
]
