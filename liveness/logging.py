"""
liveness.logging
AUTHOR: carter-vin

Event lines for emitter and checker

- one JSON object per line on stderr; stdout belongs to the caller
- only names in EVENT_TYPES may be emitted, so log queries stay stable
- every line carries event_type, utc_now and version
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any

from liveness.config import LIBRARY_VERSION

EVENT_TYPES = frozenset(
    {
        # emitter
        "heartbeat_write_failed",
        "module_stopped",
        # checker
        "observation_created",
        "observation_orphan_removed",
        "module_stale",
        "healthcheck_completed",
        "healthcheck_failed",
    }
)

MESSAGE_LIMIT = 200


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clip(text: str) -> str:
    overflow = len(text) - MESSAGE_LIMIT
    if overflow <= 0:
        return text
    return f"{text[:MESSAGE_LIMIT]}...(+{overflow} chars)"


def format_event(event_type: str, fields: dict[str, Any]) -> str:
    """
    Render one event line (no trailing newline)

    Raises ValueError for names outside EVENT_TYPES.
    """
    if event_type not in EVENT_TYPES:
        raise ValueError(f"invalid event_type: {event_type}")

    payload = dict(fields)
    if isinstance(payload.get("message"), str):
        payload["message"] = _clip(payload["message"])

    payload.update(event_type=event_type, utc_now=utc_now_iso(), version=LIBRARY_VERSION)
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def emit_event(event_type: str, **fields: Any) -> None:
    line = format_event(event_type, fields)
    sys.stderr.write(line + "\n")
    sys.stderr.flush()
