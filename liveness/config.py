"""
liveness.config
AUTHOR: carter-vin

Defaults and environment overrides

Resolution order for the data directory:
1) explicit path (CLI --data-dir or RecordStore(root))
2) LIVENESS_DATA_DIR
3) $XDG_DATA_HOME/liveness-beacon
4) ~/.local/share/liveness-beacon

Emitter and checker must resolve the same directory; keep the env identical in both.
"""

from __future__ import annotations

import math
import os
from pathlib import Path

from liveness.errors import HeartbeatConfigError

LIBRARY_VERSION = "0.1.0"

DATA_DIR_ENV = "LIVENESS_DATA_DIR"
XDG_DATA_HOME_ENV = "XDG_DATA_HOME"
DATA_DIR_NAME = "liveness-beacon"

DEFAULT_MODULE_NAME = "app"
DEFAULT_STALE_INTERVAL_MS = 10_000

# File-role suffixes
HEARTBEAT_SUFFIX = ".beat"
OBSERVATION_SUFFIX = ".check"


def resolve_data_dir(explicit: str | Path | None = None) -> Path:
    """
    Resolve the shared data directory (does not create it)
    """
    if explicit:
        return Path(explicit)

    override = os.getenv(DATA_DIR_ENV)
    if override:
        return Path(override)

    xdg = os.getenv(XDG_DATA_HOME_ENV)
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / DATA_DIR_NAME


def validate_interval(value: float | None, *, name: str = "interval_ms") -> float | None:
    """
    Validate a millisecond interval

    Rules:
    - None is allowed (unset)
    - must be a real number (bool rejected)
    - NaN and negatives rejected
    """
    if value is None:
        return None

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise HeartbeatConfigError(f"{name} must be a number, got {type(value).__name__}")
    if math.isnan(value):
        raise HeartbeatConfigError(f"{name} must not be NaN")
    if value < 0:
        raise HeartbeatConfigError(f"{name} must not be negative")

    return value
