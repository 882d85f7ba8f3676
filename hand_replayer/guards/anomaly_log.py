"""
Append-only anomaly log.

Guard failures and unresolved-winner incidents are written as one JSON object
per line. The sink is chosen once at startup and handed to the pipeline;
nothing here inspects the runtime environment.
"""
import fcntl
import json
import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

LOG_FILENAME = "anomalies.log"

AnomalyKind = Literal[
    "NO_ELIGIBLE_WINNERS",
    "EMPTY_ELIGIBLE_SET",
    "MATHEMATICAL_INCONSISTENCY",
    "GUARD_FAILURE",
]


def _incident_id() -> str:
    return f"ANOMALY_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnomalyEntry(BaseModel):
    """One incident, with enough context to audit it later."""
    model_config = ConfigDict(frozen=True)

    incident_id: str = Field(default_factory=_incident_id)
    timestamp: str = Field(default_factory=_now)
    hand_id: Optional[str] = None
    kind: AnomalyKind
    pot_index: Optional[int] = None
    pot_amount: Optional[int] = None
    eligible: List[str] = []
    committed: Dict[str, int] = {}
    status: Dict[str, str] = {}
    description: str
    fallback_action: str = "operation aborted"
    fallback_winner: Optional[str] = None
    context: Dict[str, Any] = {}

    @classmethod
    def create(cls, **fields) -> 'AnomalyEntry':
        if 'eligible' in fields and fields['eligible'] is not None:
            fields['eligible'] = sorted(fields['eligible'])
        return cls(**fields)


class AnomalyLog:
    """Interface of an anomaly sink."""

    def record(self, entry: AnomalyEntry) -> str:
        raise NotImplementedError

    def entries(self) -> List[AnomalyEntry]:
        raise NotImplementedError


class MemoryAnomalyLog(AnomalyLog):
    """Keeps incidents in memory (no log directory configured, tests)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: List[AnomalyEntry] = []

    def record(self, entry: AnomalyEntry) -> str:
        with self._lock:
            self._entries.append(entry)
        logger.warning(f"[anomaly] {entry.kind} hand={entry.hand_id}: {entry.description}")
        return entry.incident_id

    def entries(self) -> List[AnomalyEntry]:
        with self._lock:
            return list(self._entries)


class JsonlAnomalyLog(AnomalyLog):
    """Appends incidents to <directory>/anomalies.log, one JSON record per line."""

    def __init__(self, directory: str):
        self.path = Path(directory) / LOG_FILENAME
        self._lock = threading.Lock()

    def record(self, entry: AnomalyEntry) -> str:
        line = entry.model_dump_json() + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                # Exclusive lock across processes; one write per record
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    f.write(line)
                    f.flush()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        logger.warning(
            f"[anomaly] {entry.kind} hand={entry.hand_id}: {entry.description} "
            f"-> {entry.incident_id}"
        )
        return entry.incident_id

    def entries(self) -> List[AnomalyEntry]:
        if not self.path.exists():
            return []
        with open(self.path, 'r', encoding='utf-8') as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                lines = f.read().splitlines()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        return [AnomalyEntry.model_validate(json.loads(ln)) for ln in lines if ln.strip()]


def open_anomaly_log(config) -> AnomalyLog:
    """
    Select the anomaly sink for a configuration.

    Args:
        config: ReplayConfig; anomaly_log_dir None selects the in-memory sink

    Returns:
        AnomalyLog instance to pass through the pipeline
    """
    if config.anomaly_log_dir:
        logger.info(f"[anomaly] logging incidents to {config.anomaly_log_dir}/{LOG_FILENAME}")
        return JsonlAnomalyLog(config.anomaly_log_dir)
    return MemoryAnomalyLog()
