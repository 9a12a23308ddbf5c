"""Identity cache for domain entities.

Each cache maps an id to the single canonical instance for that id. The
first instance stored wins; later construction attempts get the existing
object back. Caches are owned by a Connection and live as long as it does.

All access happens on one event loop, so the synchronous check-then-insert
in ``insert_if_absent`` cannot interleave with another coroutine.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
E = TypeVar("E")


class EntityCache(Generic[K, E]):
    def __init__(self, name: str):
        self.name = name
        self._entries: dict[K, E] = {}
        self._pending: dict[K, asyncio.Task] = {}
        self._generation = 0

    def lookup(self, key: K) -> E | None:
        return self._entries.get(key)

    def insert_if_absent(self, key: K, constructor: Callable[[], E]) -> E:
        """Return the cached entity for key, constructing it on a miss.

        An existing entry is never replaced; the constructor is not called
        when the key is already present.
        """
        existing = self._entries.get(key)
        if existing is not None:
            logger.debug("%s cache: keeping existing entry %s", self.name, key)
            return existing
        entity = constructor()
        self._entries[key] = entity
        logger.debug("%s cache: stored %s", self.name, key)
        return entity

    async def get_or_create(
        self, key: K, builder: Callable[[], Awaitable[E]]
    ) -> E:
        """Return the cached entity for key, building it at most once.

        Concurrent callers for the same missing key await one shared build.
        If the build fails nothing is cached and every waiter sees the error.
        A builder that asks for its own key again runs that inner build
        inline instead of waiting on itself.
        """
        existing = self._entries.get(key)
        if existing is not None:
            logger.debug("%s cache: hit %s", self.name, key)
            return existing

        task = self._pending.get(key)
        if task is not None and task is asyncio.current_task():
            return await builder()

        if task is None:
            logger.debug("%s cache: miss %s, building", self.name, key)
            task = asyncio.ensure_future(self._build(key, builder, self._generation))
            task.add_done_callback(self._log_failed_build)
            self._pending[key] = task
        else:
            logger.debug("%s cache: joining in-flight build for %s", self.name, key)

        # A cancelled waiter must not cancel the build other callers share
        return await asyncio.shield(task)

    async def _build(
        self, key: K, builder: Callable[[], Awaitable[E]], generation: int
    ) -> E:
        try:
            entity = await builder()
        finally:
            if self._pending.get(key) is asyncio.current_task():
                del self._pending[key]
        if generation != self._generation:
            logger.debug("%s cache: dropping %s built before clear", self.name, key)
            return entity
        return self.insert_if_absent(key, lambda: entity)

    def _log_failed_build(self, task: asyncio.Task) -> None:
        # Retrieves the error even when every waiter was cancelled
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("%s cache: build failed: %r", self.name, exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        """Drop every cached entity and forget in-flight builds.

        Builds started before the clear still finish for their waiters but
        are not stored.
        """
        logger.debug("%s cache: cleared %d entries", self.name, len(self._entries))
        self._generation += 1
        self._entries.clear()
        self._pending.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
