"""
liveness.evaluate
AUTHOR: carter-vin

Per-module health evaluation from persisted records
"""

from __future__ import annotations

from dataclasses import dataclass

from liveness.model import HeartbeatRecord, ObservationRecord


@dataclass(frozen=True)
class ModuleVerdict:
    """
    healthy:
    - module verdict for this check
    observation:
    - record the checker must persist, or None to leave the stored one as is
    """
    healthy: bool
    observation: ObservationRecord | None = None


def evaluate_module(
    beat: HeartbeatRecord,
    observation: ObservationRecord | None,
    *,
    now_ms: int,
    stale_interval_ms: float,
) -> ModuleVerdict:
    """
    Evaluate one module

    Rules:
    - never observed before -> healthy, start observing
    - token changed since last check -> healthy, re-observe
    - token unchanged -> healthy iff observed less than stale_interval_ms ago
    """
    if observation is None or observation.last_seen_token != beat.token:
        return ModuleVerdict(
            healthy=True,
            observation=ObservationRecord(last_seen_token=beat.token, observed_at_ms=now_ms),
        )

    elapsed = now_ms - observation.observed_at_ms
    return ModuleVerdict(healthy=elapsed < stale_interval_ms)
