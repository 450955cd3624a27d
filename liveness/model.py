"""
liveness.model
AUTHOR: carter-vin

Record schema + file naming

Records on disk:
- <key>.beat   {"token": "<hex>"}                                 (written by the emitter)
- <key>.check  {"lastSeenToken": "<hex>", "observedAtTime": <ms>} (written by the checker)

key = sha256(module_name) hex digest
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from typing import Any

from liveness.config import HEARTBEAT_SUFFIX, OBSERVATION_SUFFIX

TOKEN_BYTES = 16


def module_key(module_name: str) -> str:
    return hashlib.sha256(module_name.encode("utf-8")).hexdigest()


def heartbeat_file(key: str) -> str:
    return f"{key}{HEARTBEAT_SUFFIX}"


def observation_file(key: str) -> str:
    return f"{key}{OBSERVATION_SUFFIX}"


def new_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(frozen=True)
class HeartbeatRecord:
    """
    Latest accepted heartbeat of a module

    token:
    - fresh random value per accepted signal
    """
    token: str

    def to_dict(self) -> dict[str, Any]:
        return {"token": self.token}

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "HeartbeatRecord":
        return HeartbeatRecord(token=str(payload.get("token", "")))


@dataclass(frozen=True)
class ObservationRecord:
    """
    Checker memory for one module

    last_seen_token:
    - heartbeat token seen on the previous check
    observed_at_ms:
    - checker wall clock (ms) when that token was first seen
    """
    last_seen_token: str
    observed_at_ms: int

    def to_dict(self) -> dict[str, Any]:
        # Wire keys are camelCase by contract
        return {
            "lastSeenToken": self.last_seen_token,
            "observedAtTime": self.observed_at_ms,
        }

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "ObservationRecord":
        observed_at = payload.get("observedAtTime", 0)

        try:
            observed_at_int = int(observed_at)
        except (TypeError, ValueError):
            # Unparseable timestamp counts as "seen long ago"
            observed_at_int = 0

        return ObservationRecord(
            last_seen_token=str(payload.get("lastSeenToken", "")),
            observed_at_ms=observed_at_int,
        )
