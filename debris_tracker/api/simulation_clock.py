"""
SimulationClock — async tick scheduler for the tracker.

Calls `SimulationController.advance(now)` once per tick (about 30 per second
by default) and hands the resulting snapshot to registered callbacks. Ticks
run one after another on the event loop, so a tick never starts before the
previous tick's state changes are in place.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine, Optional

from debris_tracker.simulation.controller import SimulationController, TickSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 33.0
MIN_TICK_INTERVAL_MS = 10.0
MAX_TICK_INTERVAL_MS = 1000.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SimulationClock:
    """
    Async clock that drives the simulation controller.

    Attributes:
        interval_ms: Time between ticks
        tick_count: Ticks run since construction
    """

    def __init__(
        self,
        controller: SimulationController,
        interval_ms: float = DEFAULT_TICK_INTERVAL_MS,
        now_fn: Callable[[], datetime] = _utc_now,
    ):
        self.controller = controller
        self.interval_ms = interval_ms
        self.now_fn = now_fn
        self.tick_count: int = 0
        self.is_playing: bool = False
        self._task: asyncio.Task | None = None
        self._callbacks: list[Callable[[TickSnapshot], Coroutine[Any, Any, None]]] = []

    def on_tick(self, callback: Callable[[TickSnapshot], Coroutine[Any, Any, None]]) -> None:
        """Register an async callback to be called with each snapshot."""
        self._callbacks.append(callback)

    def play(self) -> None:
        """Start or resume ticking."""
        if self.is_playing:
            return
        self.is_playing = True
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        logger.info("Clock playing every %.0f ms", self.interval_ms)

    def pause(self) -> None:
        """Pause ticking; trails stop growing until play()."""
        self.is_playing = False
        logger.info("Clock paused after %d ticks", self.tick_count)

    def set_interval(self, interval_ms: float) -> None:
        """Set the tick interval, clamped to a sane range."""
        self.interval_ms = max(MIN_TICK_INTERVAL_MS, min(MAX_TICK_INTERVAL_MS, interval_ms))
        logger.info("Clock interval set to %.0f ms", self.interval_ms)

    def tick(self) -> TickSnapshot:
        """Advance the controller once, synchronously."""
        snapshot = self.controller.advance(self.now_fn())
        self.tick_count += 1
        return snapshot

    async def start(self) -> None:
        """Start the clock background task (called during app lifespan)."""
        self.is_playing = True
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the clock background task."""
        self.is_playing = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    @property
    def last_snapshot(self) -> Optional[TickSnapshot]:
        return self.controller.last_snapshot

    async def _run(self) -> None:
        """Main loop: tick, then notify callbacks."""
        while True:
            await asyncio.sleep(self.interval_ms / 1000.0)

            if not self.is_playing:
                continue

            try:
                snapshot = self.tick()
            except Exception:
                logger.exception("Tick failed")
                continue

            for cb in self._callbacks:
                try:
                    await cb(snapshot)
                except Exception:
                    logger.exception("Error in clock callback")
