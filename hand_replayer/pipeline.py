"""
Replay pipeline: raw hand text in, Replay or typed Failure out.

Parse -> validate -> build snapshots. Every stage error surfaces as a
Failure carrying its ErrorCode; unexpected exceptions become SYS_INTERNAL
and are logged with their traceback.
"""

import concurrent.futures
import logging
import time
from typing import List, Optional, Sequence

from .config import ReplayConfig
from .errors import ErrorCode, Failure, ReplayerError, Result, Success
from .guards.anomaly_log import AnomalyLog, MemoryAnomalyLog
from .parse.runner import parse_text
from .replay.builder import SnapshotBuilder

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


def replay_hand(text: str, config: Optional[ReplayConfig] = None,
                anomaly_log: Optional[AnomalyLog] = None) -> Result:
    """
    Parse one hand history and build its snapshot sequence.

    Args:
        text: Raw text of exactly one hand
        config: Replay configuration (defaults: fallback off, in-memory anomaly log)
        anomaly_log: Sink for guard failures and settlement incidents

    Returns:
        Success(Replay) with parse and replay warnings, or Failure(code, message)
    """
    started = time.time()
    config = config or ReplayConfig(anomaly_log_dir=None)
    anomaly_log = anomaly_log if anomaly_log is not None else MemoryAnomalyLog()

    try:
        hand = parse_text(text)
        replay = SnapshotBuilder(config, anomaly_log).build_replay(hand)
    except ReplayerError as e:
        logger.warning(f"[pipeline] replay failed: {e}")
        return Failure.from_error(e)
    except Exception as e:
        logger.exception(f"[pipeline] unexpected error during replay: {e}")
        return Failure(ErrorCode.SYS_INTERNAL, "Unexpected error while replaying the hand")

    warnings = tuple(hand.warnings) + tuple(replay.warnings)
    logger.info(
        f"[pipeline] hand {hand.hand_id} ({hand.site}) replayed: "
        f"{len(replay.snapshots)} snapshots, {len(warnings)} warnings "
        f"in {(time.time() - started) * 1000:.0f}ms"
    )
    return Success(replay, warnings=warnings)


def replay_batch(texts: Sequence[str], config: Optional[ReplayConfig] = None,
                 anomaly_log: Optional[AnomalyLog] = None,
                 max_workers: int = DEFAULT_WORKERS) -> List[Result]:
    """
    Replay independent hands concurrently.

    Results come back in input order; one failing hand never affects another.
    """
    if not texts:
        return []
    anomaly_log = anomaly_log if anomaly_log is not None else MemoryAnomalyLog()

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(replay_hand, text, config, anomaly_log) for text in texts]
        results = [future.result() for future in futures]

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"[pipeline] batch of {len(results)} hands: {len(results) - failed} ok, {failed} failed")
    return results
