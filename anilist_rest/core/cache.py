# In-process response cache with a fixed TTL and a periodic sweep.
from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import time
from threading import RLock
from typing import Any, Callable, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600.0
DEFAULT_CHECK_PERIOD = 600.0


class ResponseCache:
    """
    Maps a cache key to an upstream payload for ``ttl`` seconds.

    Created once by the application lifespan and torn down with it. The
    background sweep only runs between ``start()`` and ``stop()``; expired
    entries are invisible to ``get`` either way.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        check_period: float = DEFAULT_CHECK_PERIOD,
        max_size: int = 0,
        timer: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if check_period <= 0:
            raise ValueError("check_period must be positive")
        self.ttl = ttl
        self.check_period = check_period
        maxsize = max_size if max_size > 0 else math.inf
        self._data: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = RLock()
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            self._data.expire()
            return len(self._data)

    def expire(self) -> int:
        """Drop expired entries, returning how many were purged."""
        with self._lock:
            return len(self._data.expire())

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    # --- background sweep ----------------------------------------------------
    def start(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.check_period)
            purged = self.expire()
            if purged:
                logger.debug("cache sweep purged %d entries", purged)
