"""
Contract tests for signal_while() and sleep()

These use a real event loop and short real intervals, so write counts are
asserted as ranges.
"""

import asyncio

import pytest

from liveness.errors import HeartbeatConfigError
from liveness.module import ModuleHeartbeat


async def _slow(result, seconds: float):
    await asyncio.sleep(seconds)
    return result


@pytest.mark.asyncio
async def test_signal_while_returns_result_and_keeps_signaling(store) -> None:
    hb = ModuleHeartbeat("etl", 20, store=store)

    result = await hb.signal_while(_slow("rows", 0.2))

    assert result == "rows"
    assert len(store.writes) >= 3


@pytest.mark.asyncio
async def test_signal_while_stops_signaling_after_timeout(store) -> None:
    """
    Operation outlives timeout_ms: signaling stops, result still returned
    """
    hb = ModuleHeartbeat("etl", 20, store=store)

    result = await hb.signal_while(_slow("late", 0.3), timeout_ms=50)

    assert result == "late"
    assert 1 <= len(store.writes) <= 4


@pytest.mark.asyncio
async def test_signal_while_without_interval_signals_once(store) -> None:
    hb = ModuleHeartbeat("etl", store=store)

    assert await hb.signal_while(_slow(7, 0.05)) == 7
    assert len(store.writes) == 1


@pytest.mark.asyncio
async def test_signal_while_propagates_operation_error(store) -> None:
    async def boom():
        await asyncio.sleep(0.03)
        raise ValueError("boom")

    hb = ModuleHeartbeat("etl", 10, store=store)

    with pytest.raises(ValueError, match="boom"):
        await hb.signal_while(boom())

    assert len(store.writes) >= 1


@pytest.mark.asyncio
async def test_signal_while_accepts_a_running_task(store) -> None:
    hb = ModuleHeartbeat("etl", 10, store=store)
    task = asyncio.ensure_future(_slow("task", 0.03))

    assert await hb.signal_while(task) == "task"


@pytest.mark.asyncio
async def test_signal_while_heartbeat_failure_raised_after_operation(store) -> None:
    """
    Operation still runs to completion; the heartbeat error surfaces afterwards
    """
    finished = []

    async def work():
        await asyncio.sleep(0.03)
        finished.append(True)
        return "ok"

    hb = ModuleHeartbeat("etl", 10, store=store)
    store.fail_writes = True

    with pytest.raises(OSError, match="disk full"):
        await hb.signal_while(work())

    assert finished == [True]
    assert len(store.writes) == 1


@pytest.mark.asyncio
async def test_signal_while_operation_error_wins_over_heartbeat_error(store) -> None:
    async def boom():
        await asyncio.sleep(0.01)
        raise KeyError("lost")

    hb = ModuleHeartbeat("etl", 10, store=store)
    store.fail_writes = True

    with pytest.raises(KeyError):
        await hb.signal_while(boom())


@pytest.mark.asyncio
async def test_signal_while_rejects_negative_timeout(store) -> None:
    hb = ModuleHeartbeat("etl", 10, store=store)
    operation = _slow(None, 0)

    with pytest.raises(HeartbeatConfigError):
        await hb.signal_while(operation, timeout_ms=-1)

    operation.close()


@pytest.mark.asyncio
async def test_sleep_signals_through_long_idle(store) -> None:
    hb = ModuleHeartbeat("etl", 20, store=store)

    await hb.sleep(100)

    assert len(store.writes) >= 3


@pytest.mark.asyncio
@pytest.mark.parametrize("ms", [0, -5])
async def test_sleep_zero_or_negative_signals_once(store, ms) -> None:
    hb = ModuleHeartbeat("etl", 20, store=store)

    await hb.sleep(ms)

    assert len(store.writes) == 1


@pytest.mark.asyncio
async def test_sleep_writes_after_every_chunk(store, clock) -> None:
    """
    Frozen debounce clock: every elapsed chunk still produces a write
    """
    hb = ModuleHeartbeat("etl", 20, store=store, clock=clock)

    await hb.sleep(50)

    # initial + chunks of 20, 20, 10
    assert len(store.writes) == 4
