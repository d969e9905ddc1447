"""
Session Store and Locks
=======================

Per-session storage with bounded retention, and per-session locks.

SessionStore eviction policy:
- Idle TTL: a session not touched for `ttl_seconds` is dropped
- LRU cap: when more than `max_sessions` are live, the least recently
  used ones are dropped

Eviction is lazy: expired sessions are swept whenever the store is
accessed, so no background task is needed.

SessionLocks serializes turns of one session. Locks are reference counted
and removed once nobody holds or waits for them, so the lock table never
grows past the number of sessions with a request in flight.
"""

import asyncio
import time
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Generic, Iterator, TypeVar

from agentcore.utils.logger import Logger

logger = Logger("Sessions")

T = TypeVar("T")


class SessionStore(Generic[T]):
    """
    A session_id -> value map with idle TTL and LRU eviction.

    Example:
        store = SessionStore(dict, ttl_seconds=3600, max_sessions=1000)
        state = store.get_or_create("s1")   # creates {} on first use
        store.get("missing")                # None, nothing created
    """

    def __init__(
        self,
        factory: Callable[[], T],
        ttl_seconds: float = 3600.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        name: str = "session"
    ):
        self._factory = factory
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._name = name
        # session_id -> (value, last access), oldest access first
        self._items: OrderedDict[str, tuple[T, float]] = OrderedDict()

    def get(self, session_id: str) -> T | None:
        """Return the value for a live session without creating one."""
        self.sweep()
        item = self._items.get(session_id)
        if item is None:
            return None
        self._touch(session_id, item[0])
        return item[0]

    def get_or_create(self, session_id: str) -> T:
        """Return the value for a session, creating it on first use."""
        value = self.get(session_id)
        if value is None:
            value = self._factory()
            self.put(session_id, value)
        return value

    def put(self, session_id: str, value: T) -> None:
        """Insert or replace a session's value."""
        self.sweep()
        self._touch(session_id, value)
        self._enforce_cap()

    def pop(self, session_id: str) -> T | None:
        """Remove a session, returning its value if it existed."""
        item = self._items.pop(session_id, None)
        return item[0] if item else None

    def sweep(self) -> int:
        """
        Drop sessions idle longer than the TTL.

        Returns:
            Number of sessions evicted
        """
        if self.ttl_seconds <= 0:
            return 0
        cutoff = self._clock() - self.ttl_seconds
        evicted = 0
        # Oldest first, so stop at the first session that is still fresh
        while self._items:
            session_id, (_, last_access) = next(iter(self._items.items()))
            if last_access > cutoff:
                break
            del self._items[session_id]
            evicted += 1
            logger.debug(f"Evicted idle {self._name} {session_id}")
        return evicted

    def session_ids(self) -> list[str]:
        self.sweep()
        return list(self._items)

    def __contains__(self, session_id: object) -> bool:
        self.sweep()
        return session_id in self._items

    def __len__(self) -> int:
        self.sweep()
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.session_ids())

    def _touch(self, session_id: str, value: T) -> None:
        self._items[session_id] = (value, self._clock())
        self._items.move_to_end(session_id)

    def _enforce_cap(self) -> None:
        while self.max_sessions > 0 and len(self._items) > self.max_sessions:
            session_id, _ = self._items.popitem(last=False)
            logger.debug(f"Evicted least recently used {self._name} {session_id}")


class SessionLocks:
    """
    One asyncio.Lock per session id, created on demand.

    Example:
        locks = SessionLocks()
        async with locks.hold("s1"):
            ...  # only one turn of s1 runs here at a time
    """

    def __init__(self):
        # session_id -> [lock, holders + waiters]
        self._locks: dict[str, list] = {}

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(session_id)
        if entry is None:
            entry = [asyncio.Lock(), 0]
            self._locks[session_id] = entry
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[session_id]

    def is_locked(self, session_id: str) -> bool:
        entry = self._locks.get(session_id)
        return bool(entry and entry[0].locked())

    def __len__(self) -> int:
        return len(self._locks)
