"""
Long-Term Memory
================

Per-session recall of earlier turns that have scrolled out of the recent
window (or been compacted into the summary).

Every stored turn becomes two entries, "User: ..." and "Assistant: ...",
each with an importance weight:

    base importance                  1.0
    user input longer than 100 chars +0.2 (user entry)
    user input contains "?"          +0.3 (both entries)
    response longer than 200 chars   +0.2 (assistant entry)

Retrieval is keyword overlap, not embeddings:

    score = (query words of 4+ chars found in the entry) * importance
            + min(access_count * 0.1, 0.5)

Only entries with at least one keyword hit are returned. When a session
holds more than `max_entries`, the least important entries are dropped
(oldest first among equals) and the rest keep their chronological order.
"""

import string
from dataclasses import dataclass, field
from typing import Any, Callable, Collection

from agentcore.memory.sessions import SessionStore
from agentcore.memory.short_term import utc_now_iso
from agentcore.utils.logger import Logger

logger = Logger("LongTermMemory")

MIN_KEYWORD_LENGTH = 4
MAX_ACCESS_BONUS = 0.5


@dataclass
class LongTermEntry:
    content: str
    importance: float = 1.0
    timestamp: str = field(default_factory=utc_now_iso)
    access_count: int = 0
    last_accessed: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "importance": self.importance,
            "timestamp": self.timestamp,
            "access_count": self.access_count,
            "last_accessed": self.last_accessed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LongTermEntry":
        return cls(
            content=str(data["content"]),
            importance=float(data.get("importance", 1.0)),
            timestamp=data.get("timestamp") or utc_now_iso(),
            access_count=int(data.get("access_count") or 0),
            last_accessed=data.get("last_accessed"),
        )


def keywords(text: str) -> set[str]:
    """Lowercased words, stripped of surrounding punctuation, long enough to count."""
    words = (word.strip(string.punctuation) for word in text.lower().split())
    return {word for word in words if len(word) >= MIN_KEYWORD_LENGTH}


def score_importance(input: str, response: str) -> tuple[float, float]:
    """Importance of the (user, assistant) entries for one turn."""
    user, assistant = 1.0, 1.0
    if len(input) > 100:
        user += 0.2
    if "?" in input:
        user += 0.3
        assistant += 0.3
    if len(response) > 200:
        assistant += 0.2
    return user, assistant


class LongTermMemory:
    """
    Importance-weighted keyword recall, bounded per session.

    Example:
        ltm = LongTermMemory(max_entries=100, max_relevant=5)
        ltm.store("s1", "Which database did we pick?", "PostgreSQL.")
        ltm.retrieve_relevant("s1", "remind me about the database")
        # [LongTermEntry(content="User: Which database did we pick?", ...)]
    """

    def __init__(
        self,
        max_entries: int = 100,
        max_relevant: int = 5,
        ttl_seconds: float = 3600.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] | None = None
    ):
        self.max_entries = max_entries
        self.max_relevant = max_relevant

        kwargs = {"clock": clock} if clock is not None else {}
        self._sessions: SessionStore[list[LongTermEntry]] = SessionStore(
            list,
            ttl_seconds=ttl_seconds,
            max_sessions=max_sessions,
            name="long-term memory",
            **kwargs,
        )

    def store(self, session_id: str, input: str, response: str) -> list[LongTermEntry]:
        """
        Remember one turn as a user entry and an assistant entry.

        Returns:
            The two new entries
        """
        user_importance, assistant_importance = score_importance(input, response)
        timestamp = utc_now_iso()
        new_entries = [
            LongTermEntry(f"User: {input}", user_importance, timestamp),
            LongTermEntry(f"Assistant: {response}", assistant_importance, timestamp),
        ]

        entries = self._sessions.get_or_create(session_id)
        entries.extend(new_entries)
        if len(entries) > self.max_entries:
            dropped = len(entries) - self.max_entries
            entries[:] = self._most_important(entries)
            logger.debug(f"Dropped {dropped} low-importance memories for {session_id}")
        return new_entries

    def retrieve_relevant(
        self,
        session_id: str,
        query: str,
        limit: int | None = None,
        exclude: Collection[str] = ()
    ) -> list[LongTermEntry]:
        """
        Entries sharing keywords with `query`, best first.

        Args:
            session_id: The session to search
            query: Usually the user's current message
            limit: Max entries returned (defaults to max_relevant)
            exclude: Entry contents to skip, e.g. lines already in context

        Returns:
            Up to `limit` entries; retrieved entries get their access count bumped
        """
        limit = self.max_relevant if limit is None else limit
        query_words = keywords(query)
        entries = self._sessions.get(session_id)
        if not entries or not query_words or limit <= 0:
            return []

        scored = []
        for index, entry in enumerate(entries):
            if entry.content in exclude:
                continue
            content = entry.content.lower()
            hits = sum(1 for word in query_words if word in content)
            if hits == 0:
                continue
            score = hits * entry.importance + min(entry.access_count * 0.1, MAX_ACCESS_BONUS)
            scored.append((score, -index, entry))

        scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
        relevant = [entry for _, _, entry in scored[:limit]]

        now = utc_now_iso()
        for entry in relevant:
            entry.access_count += 1
            entry.last_accessed = now
        return relevant

    def entries(self, session_id: str) -> list[LongTermEntry]:
        return list(self._sessions.get(session_id) or [])

    def clear(self, session_id: str) -> bool:
        return self._sessions.pop(session_id) is not None

    def export_session(self, session_id: str) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries(session_id)]

    def import_session(self, session_id: str, data: list[dict[str, Any]]) -> None:
        """Replace a session's entries. Raises KeyError/TypeError/ValueError on bad data."""
        entries = [LongTermEntry.from_dict(item) for item in data]
        if entries:
            self._sessions.put(session_id, entries[-self.max_entries:])
        else:
            self._sessions.pop(session_id)

    def _most_important(self, entries: list[LongTermEntry]) -> list[LongTermEntry]:
        ranked = sorted(range(len(entries)), key=lambda i: (entries[i].importance, i), reverse=True)
        keep = sorted(ranked[:self.max_entries])
        return [entries[i] for i in keep]
