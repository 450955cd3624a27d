"""
liveness.module
AUTHOR: carter-vin

Per-module heartbeat emitter

A module can be the whole app or a smaller task inside it. The checker
evaluates every module that has signaled; use stop() to untrack one.

Write gates (in order):
- debounce: signals within interval_ms of the last accepted one are dropped (no I/O)
- single-flight: while a write is in flight, callers await that same write
- success advances the debounce clock; failure does not (next call retries)
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Awaitable, Callable, TypeVar

from liveness.config import DEFAULT_MODULE_NAME, validate_interval
from liveness.logging import emit_event
from liveness.model import (
    HeartbeatRecord,
    heartbeat_file,
    module_key,
    new_token,
    observation_file,
)
from liveness.store import RecordStore

T = TypeVar("T")


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class ModuleHeartbeat:
    def __init__(
        self,
        module_name: str = DEFAULT_MODULE_NAME,
        interval_ms: float | None = None,
        *,
        store: RecordStore | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        """
        module_name:
        - arbitrary string; emitters with the same name share one heartbeat file
        interval_ms:
        - minimum spacing between heartbeat writes; None/0 writes on every signal
        store:
        - defaults to the resolved shared data directory
        clock:
        - monotonic milliseconds, used for debounce and signal_while timeouts
        """
        self.module_name = module_name
        self._store: RecordStore | None = store
        self._clock = clock
        self._key = module_key(module_name)
        self._interval_ms: float | None = None
        self._last_accepted_at: float | None = None
        self._in_flight: asyncio.Future[None] | None = None

        self.interval_ms = interval_ms

    @property
    def store(self) -> RecordStore:
        # Resolved on first use; a Noop heartbeat never needs a data dir
        if self._store is None:
            self._store = RecordStore.default()
        return self._store

    @property
    def interval_ms(self) -> float | None:
        return self._interval_ms

    @interval_ms.setter
    def interval_ms(self, value: float | None) -> None:
        self._interval_ms = validate_interval(value, name="interval_ms")

    @property
    def heartbeat_file(self) -> str:
        return heartbeat_file(self._key)

    @property
    def observation_file(self) -> str:
        return observation_file(self._key)

    def _should_write(self) -> bool:
        if not self._interval_ms or self._last_accepted_at is None:
            return True
        return self._clock() - self._last_accepted_at >= self._interval_ms

    async def signal(self) -> None:
        """
        Signal heartbeat to the checker process
        """
        await self._signal(force=False)

    async def _signal(self, *, force: bool) -> None:
        if not force and not self._should_write():
            return

        in_flight = self._in_flight
        if in_flight is None or in_flight.done():
            in_flight = asyncio.ensure_future(self._write_heartbeat())
            in_flight.add_done_callback(self._clear_in_flight)
            self._in_flight = in_flight

        # Shielded: one caller being cancelled must not cancel the shared write
        await asyncio.shield(in_flight)

    def _clear_in_flight(self, future: asyncio.Future[None]) -> None:
        if self._in_flight is future:
            self._in_flight = None

    async def _write_heartbeat(self) -> None:
        record = HeartbeatRecord(token=new_token())
        try:
            await asyncio.to_thread(self.store.write, self.heartbeat_file, record.to_dict())
        except Exception as e:
            emit_event(
                "heartbeat_write_failed",
                module=self.module_name,
                error_type=type(e).__name__,
                message=str(e),
            )
            raise
        self._last_accepted_at = self._clock()

    async def signal_while(self, operation: Awaitable[T], timeout_ms: float | None = None) -> T:
        """
        Keep signaling while operation is pending

        - signals now, then every interval_ms until operation completes
        - stops signaling once timeout_ms has elapsed; operation is still awaited
        - returns operation's result / raises operation's exception unchanged

        A failed heartbeat stops signaling; it is raised after operation
        finishes, unless operation itself failed.
        """
        timeout_ms = validate_interval(timeout_ms, name="timeout_ms")
        task = asyncio.ensure_future(operation)
        started = self._clock()
        heartbeat_error: Exception | None = None

        try:
            await self.signal()

            while not task.done():
                delay = self._interval_ms
                if not delay:
                    break

                if timeout_ms is not None:
                    remaining = timeout_ms - (self._clock() - started)
                    if remaining <= 0:
                        break
                    delay = min(delay, remaining)

                done, _ = await asyncio.wait({task}, timeout=delay / 1000)
                if done:
                    break
                if timeout_ms is not None and self._clock() - started >= timeout_ms:
                    break

                await self.signal()
        except Exception as e:
            heartbeat_error = e

        result = await task
        if heartbeat_error is not None:
            raise heartbeat_error
        return result

    async def sleep(self, ms: float) -> None:
        """
        Sleep for ms while signaling at least every interval_ms
        """
        remaining = max(float(ms), 0.0)

        await self.signal()
        while remaining > 0:
            chunk = min(remaining, self._interval_ms) if self._interval_ms else remaining
            await asyncio.sleep(chunk / 1000)
            remaining -= chunk
            # Chunk elapsed: write even if the loop timer woke just short of the debounce clock
            await self._signal(force=True)

    async def stop(self) -> None:
        """
        Stop checking this module's health

        Removes heartbeat + observation records. A later signal() starts
        tracking again from scratch.

        A write already in flight is allowed to land first, then deleted.
        Its failure belongs to the caller that started it.
        """
        in_flight = self._in_flight
        if in_flight is not None:
            with contextlib.suppress(Exception):
                await asyncio.shield(in_flight)

        await asyncio.gather(
            asyncio.to_thread(self.store.delete, self.heartbeat_file),
            asyncio.to_thread(self.store.delete, self.observation_file),
        )
        self._last_accepted_at = None

        emit_event("module_stopped", module=self.module_name)


class NoopModuleHeartbeat(ModuleHeartbeat):
    """
    Heartbeat that never touches disk

    For tests, or running the app outside a container.
    """

    async def signal(self) -> None:
        return None

    async def signal_while(self, operation: Awaitable[T], timeout_ms: float | None = None) -> T:
        return await operation

    async def sleep(self, ms: float) -> None:
        await asyncio.sleep(max(float(ms), 0.0) / 1000)

    async def stop(self) -> None:
        return None


NOOP_HEARTBEAT = NoopModuleHeartbeat()
