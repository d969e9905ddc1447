"""
Unit tests for SessionStore eviction and SessionLocks.
"""

from __future__ import annotations

import asyncio

from agentcore.memory import SessionLocks, SessionStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestSessionStore:
    """Tests for lazy creation, TTL and LRU eviction."""

    def test_get_does_not_create(self) -> None:
        store: SessionStore[dict] = SessionStore(dict, clock=FakeClock())

        assert store.get("s1") is None
        assert len(store) == 0

    def test_get_or_create_reuses_value(self) -> None:
        store: SessionStore[dict] = SessionStore(dict, clock=FakeClock())

        first = store.get_or_create("s1")
        first["k"] = "v"

        assert store.get_or_create("s1") is first

    def test_access_refreshes_ttl(self) -> None:
        """Touching a session should keep it alive past its original expiry."""
        clock = FakeClock()
        store: SessionStore[dict] = SessionStore(dict, ttl_seconds=10, clock=clock)
        store.get_or_create("s1")

        clock.now = 8
        store.get("s1")
        clock.now = 15

        assert "s1" in store

    def test_sweep_counts_evictions(self) -> None:
        clock = FakeClock()
        store: SessionStore[dict] = SessionStore(dict, ttl_seconds=10, clock=clock)
        store.get_or_create("old")
        clock.now = 5
        store.get_or_create("new")

        clock.now = 12

        assert store.sweep() == 1
        assert store.session_ids() == ["new"]

    def test_lru_evicts_least_recent(self) -> None:
        store: SessionStore[dict] = SessionStore(dict, max_sessions=2, clock=FakeClock())
        store.get_or_create("a")
        store.get_or_create("b")
        store.get("a")
        store.get_or_create("c")

        assert store.session_ids() == ["a", "c"]

    def test_zero_ttl_disables_expiry(self) -> None:
        clock = FakeClock()
        store: SessionStore[dict] = SessionStore(dict, ttl_seconds=0, clock=clock)
        store.get_or_create("s1")

        clock.now = 1_000_000

        assert "s1" in store

    def test_pop(self) -> None:
        store: SessionStore[dict] = SessionStore(dict, clock=FakeClock())
        store.put("s1", {"a": 1})

        assert store.pop("s1") == {"a": 1}
        assert store.pop("s1") is None


class TestSessionLocks:
    """Tests for per-session serialization."""

    async def test_same_session_is_serialized(self) -> None:
        """Two holders of one session should never overlap."""
        locks = SessionLocks()
        events: list[str] = []

        async def turn(name: str) -> None:
            async with locks.hold("s1"):
                events.append(f"{name} start")
                await asyncio.sleep(0.01)
                events.append(f"{name} end")

        await asyncio.gather(turn("first"), turn("second"))

        assert events == ["first start", "first end", "second start", "second end"]

    async def test_different_sessions_overlap(self) -> None:
        locks = SessionLocks()
        inside = 0
        peak = 0

        async def turn(session_id: str) -> None:
            nonlocal inside, peak
            async with locks.hold(session_id):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                inside -= 1

        await asyncio.gather(turn("a"), turn("b"))

        assert peak == 2

    async def test_lock_removed_when_idle(self) -> None:
        locks = SessionLocks()

        async with locks.hold("s1"):
            assert locks.is_locked("s1")
            assert len(locks) == 1

        assert len(locks) == 0
        assert not locks.is_locked("s1")

    async def test_lock_released_on_error(self) -> None:
        locks = SessionLocks()

        try:
            async with locks.hold("s1"):
                raise RuntimeError("turn failed")
        except RuntimeError:
            pass

        assert len(locks) == 0
