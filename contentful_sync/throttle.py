"""Rate-limited request queue shared by every outbound API call."""

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestThrottle:
    """Admits calls in FIFO order, never more than ``requests_per_second`` per period.

    Contentful allows 10 requests per second on the management API, the
    default ceiling of 7 stays comfortably below that.
    """

    def __init__(
        self,
        requests_per_second: int = 7,
        period: float = 1.0,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if requests_per_second < 1:
            raise ValueError("requests_per_second must be at least 1")
        if period <= 0:
            raise ValueError("period must be positive")

        self.requests_per_second = requests_per_second
        self.period = period
        self.dispatched = 0

        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._window: Deque[float] = deque()
        self._lock: Optional[asyncio.Lock] = None
        self._waiting = 0

    @property
    def pending(self) -> int:
        """Number of callers currently waiting for admission."""
        return self._waiting

    async def _acquire_slot(self) -> None:
        # asyncio.Lock wakes waiters in the order they arrived
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            while True:
                now = self._clock()
                while self._window and now - self._window[0] >= self.period:
                    self._window.popleft()

                if len(self._window) < self.requests_per_second:
                    self._window.append(now)
                    self.dispatched += 1
                    return

                wait_time = self.period - (now - self._window[0])
                logger.debug("Throttle full, waiting %.3fs", wait_time)
                await self._sleep(wait_time)

    async def enqueue(self, thunk: Callable[[], Awaitable[T]]) -> T:
        """Wait for a dispatch slot, then run ``thunk`` and return its result."""
        self._waiting += 1
        try:
            await self._acquire_slot()
        finally:
            self._waiting -= 1
        return await thunk()
