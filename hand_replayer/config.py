"""
Replay configuration: exactly two knobs, loaded once and passed explicitly.
"""
import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CFG = os.path.join(os.path.dirname(__file__), "config.yml")


class ReplayConfig(BaseModel):
    """Settlement policy and anomaly-log location."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    # False = abort with a typed error when a pot has no resolvable winner
    allow_fallback_on_anomaly: bool = False
    # None selects the in-memory anomaly log
    anomaly_log_dir: Optional[str] = "logs"


def load_config(path: Optional[str] = None) -> ReplayConfig:
    """
    Load the replay configuration from a YAML file.

    Args:
        path: Path to configuration file (defaults to the packaged config.yml)

    Returns:
        Validated ReplayConfig
    """
    path = path or DEFAULT_CFG
    if not os.path.exists(path):
        logger.warning(f"[config] {path} not found, using defaults")
        return ReplayConfig()

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    if not isinstance(cfg, dict):
        raise ValueError(f"[config] {path} must hold a mapping")
    section = cfg.get("replay", cfg)
    try:
        config = ReplayConfig(**section)
    except ValidationError as e:
        raise ValueError(f"[config] invalid configuration in {path}: {e}") from e

    logger.info(
        f"[config] loaded {path} "
        f"(fallback={config.allow_fallback_on_anomaly}, log_dir={config.anomaly_log_dir})"
    )
    return config
