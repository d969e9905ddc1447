"""
Memory System
=============

Conversation memory for the orchestration core. Each session has a
ConversationContext (recent turns + summary) held in a SessionStore with
idle-TTL and LRU eviction, plus LongTermMemory entries that bring back
older turns relevant to the current input.

Compaction keeps memory bounded:

    store_interaction()
         │
         ▼
    len(messages) > max_conversation_length
    and len(messages) >= min_compaction_size ?
         │ yes
         ▼
    summary = await summarizer(all messages)
         │
         ├── ok:    metadata.summary = summary (overwrites)
         │          messages = messages[-recent_window:]
         │
         └── fails: messages untouched, retried on next store

Usage:
    from agentcore.memory import MemoryManager

    memory = MemoryManager(summarizer=make_llm_summarizer(service))
    await memory.store_interaction("s1", "hello", "Hi! How can I help?")
    print(memory.get_context("s1", "what did I say?"))

Context block layout:

    Summary of earlier conversation: ...         (after compaction)
    Relevant information from previous conversations:
    User: ...                                    (recalled, outside the window)

    User: ...                                    (recent window)
    Assistant: ...
"""

from typing import Any, Awaitable, Callable, Sequence

from agentcore.errors import MemoryStorageError
from agentcore.memory.long_term import LongTermEntry, LongTermMemory
from agentcore.memory.sessions import SessionLocks, SessionStore
from agentcore.memory.short_term import (
    ConversationContext,
    ConversationMetadata,
    MemoryEntry,
    utc_now_iso,
)
from agentcore.memory.working import ApplicationState, StateManager
from agentcore.utils.logger import Logger

logger = Logger("Memory")

NEW_CONVERSATION_MARKER = "This is the start of a new conversation."
RELEVANT_MEMORIES_HEADER = "Relevant information from previous conversations:"

Summarizer = Callable[[Sequence[MemoryEntry]], Awaitable[str]]


async def simple_summary(entries: Sequence[MemoryEntry]) -> str:
    """
    Summarizer that needs no model: turn count plus the latest topic.

    Used when no LLM summarizer is configured.
    """
    if not entries:
        return ""
    latest = entries[-1].input
    topic = latest[:30] + ("..." if len(latest) > 30 else "")
    return f"Conversation included {len(entries)} turns. Most recent topic: {topic}"


def format_entry(entry: MemoryEntry) -> list[str]:
    return [f"User: {entry.input}", f"Assistant: {entry.response}"]


class MemoryManager:
    """
    Per-session conversation memory with summarization.

    Attributes:
        max_conversation_length: Compaction triggers above this many messages
        min_compaction_size: Never compact conversations shorter than this
        recent_window: Entries shown in context and kept after compaction
        long_term: Keyword recall of turns outside the recent window

    Example:
        memory = MemoryManager(max_conversation_length=20)

        memory.get_context("s1", "hello")
        # "This is the start of a new conversation.\\n\\nUser: hello"

        await memory.store_interaction("s1", "hello", "Hi there!")
        memory.get_context("s1", "how are you?")
        # "User: hello\\nAssistant: Hi there!\\n\\nUser: how are you?"
    """

    def __init__(
        self,
        summarizer: Summarizer | None = None,
        max_conversation_length: int = 20,
        min_compaction_size: int = 10,
        recent_window: int = 5,
        ttl_seconds: float = 3600.0,
        max_sessions: int = 1000,
        max_long_term_entries: int = 100,
        max_relevant_memories: int = 5,
        clock: Callable[[], float] | None = None
    ):
        """
        Initialize the memory manager.

        Args:
            summarizer: Async callable turning all entries into one summary
            max_conversation_length: Compaction threshold
            min_compaction_size: Minimum-size guard for compaction
            recent_window: Entries kept verbatim after compaction
            ttl_seconds: Idle sessions older than this are evicted
            max_sessions: LRU cap on live sessions
            max_long_term_entries: Long-term entries kept per session
            max_relevant_memories: Recalled entries shown per turn (0 disables)
            clock: Monotonic clock (tests inject a fake one)
        """
        self.summarizer = summarizer or simple_summary
        self.max_conversation_length = max_conversation_length
        self.min_compaction_size = min_compaction_size
        self.recent_window = recent_window

        kwargs = {"clock": clock} if clock is not None else {}
        self._sessions: SessionStore[ConversationContext] = SessionStore(
            ConversationContext,
            ttl_seconds=ttl_seconds,
            max_sessions=max_sessions,
            name="conversation",
            **kwargs,
        )
        self.long_term = LongTermMemory(
            max_entries=max_long_term_entries,
            max_relevant=max_relevant_memories,
            ttl_seconds=ttl_seconds,
            max_sessions=max_sessions,
            clock=clock,
        )

        logger.info(
            "Memory manager initialized",
            {
                "max_conversation_length": max_conversation_length,
                "recent_window": recent_window,
                "ttl_seconds": ttl_seconds,
                "max_sessions": max_sessions,
                "max_long_term_entries": max_long_term_entries,
            },
        )

    # ==========================================================================
    # Context
    # ==========================================================================

    def get_context(self, session_id: str, current_input: str) -> str:
        """
        Get the formatted context block followed by the current input.

        Args:
            session_id: The session to read
            current_input: The user's message for this turn

        Returns:
            The new-conversation marker for unseen sessions, otherwise the
            summary and the most recent turns, then "User: <current_input>"

        Raises:
            MemoryStorageError: If the session can't be read
        """
        return f"{self.get_context_block(session_id, current_input)}\n\nUser: {current_input}"

    def get_context_block(self, session_id: str, query: str = "") -> str:
        """
        Get the context block without the current input.

        This is what the PromptManager places between the system prompt and
        the user's message. With a `query`, long-term entries that share
        keywords with it and are no longer in the recent window are listed
        ahead of the recent turns.
        """
        conversation = self._read(session_id)
        if conversation is None or conversation.is_empty():
            return NEW_CONVERSATION_MARKER

        recent_lines = []
        for entry in conversation.recent(self.recent_window):
            recent_lines.extend(format_entry(entry))

        lines = []
        if conversation.metadata.summary:
            lines.append(f"Summary of earlier conversation: {conversation.metadata.summary}")
        if query:
            memories = self.long_term.retrieve_relevant(session_id, query, exclude=set(recent_lines))
            if memories:
                lines.append(RELEVANT_MEMORIES_HEADER)
                lines.extend(memory.content for memory in memories)
                lines.append("")
        lines.extend(recent_lines)
        return "\n".join(lines)

    # ==========================================================================
    # Storage
    # ==========================================================================

    async def store_interaction(
        self,
        session_id: str,
        input: str,
        response: str,
        metadata: dict[str, Any] | None = None
    ) -> MemoryEntry:
        """
        Append a turn and compact the conversation if it grew too long.

        Args:
            session_id: The session to write
            input: The user's message
            response: The assistant's answer
            metadata: Optional extra data stored on the entry

        Returns:
            The stored MemoryEntry

        Raises:
            MemoryStorageError: If the turn can't be stored
        """
        if not isinstance(input, str) or not isinstance(response, str):
            raise MemoryStorageError(
                "Failed to store interaction: input and response must be strings",
                session_id=session_id,
            )

        try:
            entry = MemoryEntry(input=input, response=response, metadata=dict(metadata or {}))
            conversation = self._sessions.get_or_create(session_id)
            conversation.append(entry)
            self.long_term.store(session_id, input, response)
        except Exception as e:
            raise MemoryStorageError(f"Failed to store interaction: {e}", session_id=session_id) from e

        logger.debug(f"Stored interaction for {session_id} ({len(conversation.messages)} messages)")

        await self._maybe_compact(session_id, conversation)
        return entry

    def get_conversation(self, session_id: str) -> ConversationContext | None:
        """Get the live ConversationContext for a session, if any."""
        return self._read(session_id)

    def clear_session(self, session_id: str) -> bool:
        """
        Forget a session's conversation and its long-term entries.

        Returns:
            True if the session existed
        """
        existed = self._sessions.pop(session_id) is not None
        existed = self.long_term.clear(session_id) or existed
        if existed:
            logger.info(f"Cleared memory for session {session_id}")
        return existed

    def export_session(self, session_id: str) -> dict[str, Any]:
        """
        Export a session as a JSON-safe dict (for persistence).

        Unseen sessions export as an empty conversation.
        """
        conversation = self._read(session_id) or ConversationContext()
        data = conversation.to_dict()
        data["long_term"] = self.long_term.export_session(session_id)
        return data

    def import_session(self, session_id: str, data: dict[str, Any]) -> None:
        """
        Restore a session from `export_session` output, replacing it.

        Data without a "long_term" list restores with no long-term entries.

        Raises:
            MemoryStorageError: If the data is malformed
        """
        try:
            conversation = ConversationContext.from_dict(data)
            self.long_term.import_session(session_id, list(data.get("long_term") or []))
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise MemoryStorageError(f"Failed to import session: {e}", session_id=session_id) from e
        self._sessions.put(session_id, conversation)
        logger.info(f"Imported memory for session {session_id} ({len(conversation.messages)} messages)")

    def session_count(self) -> int:
        return len(self._sessions)

    # ==========================================================================
    # Compaction
    # ==========================================================================

    def needs_compaction(self, conversation: ConversationContext) -> bool:
        count = len(conversation.messages)
        return count > self.max_conversation_length and count >= self.min_compaction_size

    async def _maybe_compact(self, session_id: str, conversation: ConversationContext) -> None:
        if not self.needs_compaction(conversation):
            return

        entries = list(conversation.messages)
        try:
            summary = await self.summarizer(entries)
        except Exception as e:
            logger.warning(
                f"Summarization failed for {session_id}, keeping {len(entries)} messages",
                {"error_type": type(e).__name__, "error_message": str(e)},
            )
            return

        if not summary or not summary.strip():
            logger.warning(f"Summarizer returned nothing for {session_id}, keeping messages")
            return

        conversation.metadata.summary = summary.strip()
        conversation.metadata.last_updated = utc_now_iso()
        conversation.messages[:] = conversation.recent(self.recent_window)

        logger.info(
            f"Compacted conversation for {session_id}",
            {"summarized": len(entries), "kept": len(conversation.messages)},
        )

    def _read(self, session_id: str) -> ConversationContext | None:
        try:
            return self._sessions.get(session_id)
        except Exception as e:
            raise MemoryStorageError(f"Failed to retrieve memory context: {e}", session_id=session_id) from e


__all__ = [
    "ApplicationState",
    "ConversationContext",
    "ConversationMetadata",
    "LongTermEntry",
    "LongTermMemory",
    "MemoryEntry",
    "MemoryManager",
    "NEW_CONVERSATION_MARKER",
    "RELEVANT_MEMORIES_HEADER",
    "SessionLocks",
    "SessionStore",
    "StateManager",
    "Summarizer",
    "simple_summary",
]
