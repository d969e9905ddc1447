"""
Short-Term Memory
=================

The verbatim part of a session's memory: an ordered list of turns plus
metadata holding the running summary.

    ConversationContext
    ├── messages: [MemoryEntry, MemoryEntry, ...]   (oldest first)
    └── metadata: ConversationMetadata(summary, created_at, last_updated)

Design Notes:
- MemoryEntry is frozen: an entry never changes once appended
- Timestamps are ISO-8601 strings in UTC
- to_dict()/from_dict() give a JSON-safe form for export and import
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class MemoryEntry:
    """
    One turn of the conversation.

    Attributes:
        input: What the user said
        response: What the assistant answered
        timestamp: When the turn was stored (ISO-8601)
        metadata: Optional extra data (provider, tools used, ...)
    """
    input: str
    response: str
    timestamp: str = field(default_factory=utc_now_iso)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "input": self.input,
            "response": self.response,
            "timestamp": self.timestamp,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MemoryEntry":
        return cls(
            input=str(data["input"]),
            response=str(data["response"]),
            timestamp=data.get("timestamp") or utc_now_iso(),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class ConversationMetadata:
    summary: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    last_updated: str = field(default_factory=utc_now_iso)


@dataclass
class ConversationContext:
    """
    A session's conversation: recent turns plus the summary of older ones.

    Example:
        context = ConversationContext()
        context.append(MemoryEntry("hi", "hello"))
        context.recent(5)     # last 5 entries, oldest first
    """
    messages: list[MemoryEntry] = field(default_factory=list)
    metadata: ConversationMetadata = field(default_factory=ConversationMetadata)

    def append(self, entry: MemoryEntry) -> None:
        self.messages.append(entry)
        self.metadata.last_updated = entry.timestamp

    def recent(self, count: int) -> list[MemoryEntry]:
        """The most recent `count` entries, oldest first."""
        if count <= 0:
            return []
        return self.messages[-count:]

    def is_empty(self) -> bool:
        return not self.messages and not self.metadata.summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [entry.to_dict() for entry in self.messages],
            "metadata": {
                "summary": self.metadata.summary,
                "created_at": self.metadata.created_at,
                "last_updated": self.metadata.last_updated,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversationContext":
        meta = data.get("metadata") or {}
        now = utc_now_iso()
        return cls(
            messages=[MemoryEntry.from_dict(item) for item in data.get("messages") or []],
            metadata=ConversationMetadata(
                summary=meta.get("summary") or None,
                created_at=meta.get("created_at") or now,
                last_updated=meta.get("last_updated") or now,
            ),
        )
