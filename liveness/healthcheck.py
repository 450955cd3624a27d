"""
liveness.healthcheck
AUTHOR: carter-vin

Checker side: turn persisted heartbeat records into an exit code

Usage (container HEALTHCHECK script):
    sys.exit(asyncio.run(healthcheck()))

Result:
- 0: every tracked module is healthy (or nothing is tracked)
- 1: at least one module is stale

Store errors propagate; unreadable data is never reported as healthy.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from liveness.config import (
    DEFAULT_STALE_INTERVAL_MS,
    HEARTBEAT_SUFFIX,
    OBSERVATION_SUFFIX,
    validate_interval,
)
from liveness.evaluate import evaluate_module
from liveness.logging import emit_event
from liveness.model import HeartbeatRecord, ObservationRecord, heartbeat_file, observation_file
from liveness.store import RecordStore

EXIT_HEALTHY = 0
EXIT_UNHEALTHY = 1


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def partition_keys(names: set[str]) -> tuple[set[str], set[str]]:
    """
    Split store names into (heartbeat keys, observation keys)

    Names with other suffixes are ignored.
    """
    beats: set[str] = set()
    checks: set[str] = set()

    for name in names:
        if name.endswith(HEARTBEAT_SUFFIX):
            beats.add(name[: -len(HEARTBEAT_SUFFIX)])
        elif name.endswith(OBSERVATION_SUFFIX):
            checks.add(name[: -len(OBSERVATION_SUFFIX)])

    return beats, checks


async def _remove_orphan(store: RecordStore, key: str) -> None:
    await asyncio.to_thread(store.delete, observation_file(key))
    emit_event("observation_orphan_removed", module_key=key)


async def _check_module(
    store: RecordStore,
    key: str,
    *,
    now_ms: int,
    stale_interval_ms: float,
) -> bool | None:
    """
    Evaluate one module and persist the observation update

    Returns None when the heartbeat vanished after listing (module stopped).
    """
    beat_payload, observation_payload = await asyncio.gather(
        asyncio.to_thread(store.read, heartbeat_file(key)),
        asyncio.to_thread(store.read, observation_file(key)),
    )

    if beat_payload is None:
        if observation_payload is not None:
            await _remove_orphan(store, key)
        return None

    beat = HeartbeatRecord.from_dict(beat_payload)
    observation = (
        ObservationRecord.from_dict(observation_payload)
        if observation_payload is not None
        else None
    )

    verdict = evaluate_module(
        beat,
        observation,
        now_ms=now_ms,
        stale_interval_ms=stale_interval_ms,
    )

    if verdict.observation is not None:
        await asyncio.to_thread(store.write, observation_file(key), verdict.observation.to_dict())
        if observation is None:
            emit_event("observation_created", module_key=key)

    if not verdict.healthy:
        emit_event(
            "module_stale",
            module_key=key,
            stale_ms=now_ms - observation.observed_at_ms,
            stale_interval_ms=stale_interval_ms,
        )

    return verdict.healthy


async def healthcheck(
    stale_interval_ms: float = DEFAULT_STALE_INTERVAL_MS,
    *,
    store: RecordStore | None = None,
    now: Callable[[], int] = wall_clock_ms,
) -> int:
    """
    Check every module that has signaled

    stale_interval_ms:
    - how long a token may stay unchanged before its module is unhealthy
    now:
    - checker wall clock in ms; only compared with timestamps this checker wrote
    """
    stale_interval_ms = validate_interval(stale_interval_ms, name="stale_interval_ms")
    if stale_interval_ms is None:
        stale_interval_ms = DEFAULT_STALE_INTERVAL_MS

    if store is None:
        store = RecordStore.default()

    now_ms = now()
    names = await asyncio.to_thread(store.list)
    beats, checks = partition_keys(names)

    for key in sorted(checks - beats):
        await _remove_orphan(store, key)

    results = await asyncio.gather(
        *(
            _check_module(store, key, now_ms=now_ms, stale_interval_ms=stale_interval_ms)
            for key in sorted(beats)
        )
    )

    tracked = [healthy for healthy in results if healthy is not None]
    unhealthy = sum(1 for healthy in tracked if not healthy)
    code = EXIT_UNHEALTHY if unhealthy else EXIT_HEALTHY

    emit_event(
        "healthcheck_completed",
        modules=len(tracked),
        unhealthy=unhealthy,
        exit_code=code,
    )

    return code
