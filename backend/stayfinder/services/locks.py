"""Per-key asyncio locks used to serialise writes that touch one property."""

import asyncio
import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager

from stayfinder.exceptions import ConflictError

logger = logging.getLogger(__name__)


class KeyedLock:
    """A registry of ``asyncio.Lock`` objects, one per key.

    Locks are created on first use and dropped once no task holds or waits
    on them, so the registry does not grow with the number of properties.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: Hashable, timeout: float, attempts: int = 1) -> AsyncIterator[None]:
        """Hold the lock for ``key``.

        Each attempt waits up to ``timeout`` seconds. When every attempt
        times out a ``ConflictError`` is raised and nothing is held.
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            for attempt in range(1, attempts + 1):
                try:
                    await asyncio.wait_for(lock.acquire(), timeout=timeout)
                    break
                except asyncio.TimeoutError:
                    logger.warning("Lock for %s busy (attempt %d/%d)", key, attempt, attempts)
            else:
                raise ConflictError("The property is busy with another booking, please retry")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                self._locks.pop(key, None)


# Booking creation and review aggregation share one registry: both are
# read-check-write sequences scoped to a single property.
property_locks = KeyedLock()
