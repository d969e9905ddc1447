"""
Application State
=================

Per-session key/value state that is not conversation text: the active
file, the last tool result, user preferences picked up during the chat.

State is separate from conversation memory:
- MemoryManager stores what was said
- StateManager stores what the application knows about the session

Each session's state is its own dict and is never shared. Readers get a
copy, so the only way to change state is through this class.
"""

import copy
from collections.abc import Mapping
from typing import Any, Callable

from agentcore.errors import MemoryStorageError
from agentcore.memory.sessions import SessionStore
from agentcore.utils.logger import Logger

logger = Logger("State")

ApplicationState = dict[str, Any]


class StateManager:
    """
    Session-scoped application state.

    Example:
        states = StateManager()
        states.update_state("s1", {"active_file": "main.py"})
        states.get("s1", "active_file")   # "main.py"
        states.get_state("s2")            # {} for an unseen session
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] | None = None
    ):
        kwargs = {"clock": clock} if clock is not None else {}
        self._states: SessionStore[ApplicationState] = SessionStore(
            dict, ttl_seconds=ttl_seconds, max_sessions=max_sessions, name="state", **kwargs
        )

    def get_state(self, session_id: str) -> ApplicationState:
        """
        Get a copy of the current state for a session.

        Returns an empty dict for sessions with no state.
        """
        state = self._states.get(session_id)
        return copy.deepcopy(state) if state else {}

    def update_state(self, session_id: str, updates: Mapping[str, Any]) -> None:
        """
        Merge `updates` into the session's state.

        Raises:
            MemoryStorageError: If updates is not a mapping or can't be copied
        """
        if not isinstance(updates, Mapping):
            raise MemoryStorageError(
                f"Failed to update state: expected a mapping, got {type(updates).__name__}",
                session_id=session_id,
            )
        try:
            copied = copy.deepcopy(dict(updates))
        except Exception as e:
            raise MemoryStorageError(f"Failed to update state: {e}", session_id=session_id) from e

        state = self._states.get_or_create(session_id)
        state.update(copied)
        logger.debug(f"Updated state for {session_id}", {"keys": sorted(copied)})

    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        state = self._states.get(session_id)
        if not state or key not in state:
            return default
        return copy.deepcopy(state[key])

    def set(self, session_id: str, key: str, value: Any) -> None:
        self.update_state(session_id, {key: value})

    def delete(self, session_id: str, key: str) -> bool:
        """Remove one key. Returns True if it existed."""
        state = self._states.get(session_id)
        if not state or key not in state:
            return False
        del state[key]
        return True

    def clear(self, session_id: str) -> None:
        """Drop all state for a session."""
        self._states.pop(session_id)

    def session_count(self) -> int:
        return len(self._states)
