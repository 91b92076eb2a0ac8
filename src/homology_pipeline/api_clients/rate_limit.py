"""Concurrency and dispatch-interval limiter for upstream requests."""

import asyncio
import time
from typing import Callable


class RateLimiter:
    """Cap concurrent requests and space out their dispatch.

    Callers suspend until both a concurrency slot is free and at least
    ``min_interval`` seconds have passed since the previous dispatch.

    Usage::

        limiter = RateLimiter(max_concurrent=3, min_interval=0.333)
        async with limiter:
            await client.get_json(url)
    """

    def __init__(
        self,
        max_concurrent: int = 3,
        min_interval: float = 0.333,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")

        self.max_concurrent = max_concurrent
        self.min_interval = min_interval
        self._clock = clock
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._dispatch_lock = asyncio.Lock()
        self._last_dispatch: float | None = None

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        try:
            async with self._dispatch_lock:
                if self._last_dispatch is not None:
                    wait = self._last_dispatch + self.min_interval - self._clock()
                    if wait > 0:
                        await asyncio.sleep(wait)
                self._last_dispatch = self._clock()
        except BaseException:
            self._semaphore.release()
            raise

    def release(self) -> None:
        self._semaphore.release()

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.release()
