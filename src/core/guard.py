"""Single-flight guard for poll cycles."""

from __future__ import annotations

import asyncio
import threading


class SingleFlightGuard:
    """Admit at most one poll cycle at a time.

    ``try_enter`` never blocks; ``enter`` waits on the event loop until the
    running cycle calls ``exit``. ``exit`` must be called from the loop that
    awaits ``enter``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def try_enter(self) -> bool:
        if not self._lock.acquire(blocking=False):
            return False
        self._idle.clear()
        return True

    def exit(self) -> None:
        self._lock.release()
        self._idle.set()

    async def enter(self) -> None:
        while not self.try_enter():
            await self._idle.wait()
