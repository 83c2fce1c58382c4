"""Per-entity asyncio locks.

Operations on different tasks run freely in parallel; two operations on the
same task or project id are serialised so their reads and writes never
interleave.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class EntityLocks:
    """Registry of one ``asyncio.Lock`` per entity id."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, entity_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(entity_id, asyncio.Lock())
        self._waiters[entity_id] = self._waiters.get(entity_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[entity_id] -= 1
            if self._waiters[entity_id] == 0:
                del self._waiters[entity_id]
                self._locks.pop(entity_id, None)

    def is_locked(self, entity_id: str) -> bool:
        lock = self._locks.get(entity_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
