"""Single-flight poll scheduler.

Each iteration waits for the guard, launches one cycle as its own task and
then sleeps for the poll interval. The guard only gates starting a cycle: a
cycle stuck in a provider call keeps its slot, and the scheduler waits for
it instead of cancelling it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from core.guard import SingleFlightGuard

LOGGER = logging.getLogger(__name__)


class CycleScheduler:
    """Run a blocking cycle function forever, never two at a time."""

    def __init__(
        self,
        run_cycle: Callable[[], object],
        interval_seconds: int,
        guard: Optional[SingleFlightGuard] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._run_cycle = run_cycle
        self._interval = interval_seconds
        self._guard = guard or SingleFlightGuard()
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()
        self.cycles_started = 0
        self.crash_count = 0

    @property
    def guard(self) -> SingleFlightGuard:
        return self._guard

    async def run_forever(self) -> None:
        LOGGER.info("Poller started, checking every %s seconds", self._interval)
        while True:
            await self.run_iteration()

    async def run_iteration(self) -> asyncio.Task:
        """Start one guarded cycle and wait out the poll interval."""

        await self._guard.enter()
        task = self.start_cycle()
        await self._sleep(self._interval)
        return task

    def start_cycle(self) -> asyncio.Task:
        """Launch a cycle task; the caller must already hold the guard."""

        self.cycles_started += 1
        task = asyncio.create_task(self._guarded_cycle())
        # Keep a strong reference until the task finishes.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded_cycle(self) -> None:
        try:
            await asyncio.to_thread(self._run_cycle)
        except asyncio.CancelledError:
            raise
        except BaseException:
            # COM calls occasionally blow up inside pywin32, and a worker may
            # even raise SystemExit; keep the poller alive either way.
            self.crash_count += 1
            LOGGER.exception("Poll cycle crashed (%s so far)", self.crash_count)
        finally:
            self._guard.exit()
