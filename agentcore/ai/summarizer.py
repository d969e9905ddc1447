"""
Conversation Summarizer
=======================

Builds the summarizer the MemoryManager calls during compaction, on top of
any AIService. The summarizer gets the full message list and returns one
summary string that replaces the previous one.
"""

from typing import Sequence

from agentcore.ai.base import AIService, GenerationOptions, call_with_timeout
from agentcore.memory import MemoryEntry, Summarizer


SUMMARY_SYSTEM_PROMPT = (
    "You summarize conversations between a user and an AI assistant. "
    "Keep facts, decisions, names and open questions. Be concise."
)


def format_transcript(entries: Sequence[MemoryEntry]) -> str:
    """Render entries as alternating User/Assistant lines."""
    lines = []
    for entry in entries:
        lines.append(f"User: {entry.input}")
        lines.append(f"Assistant: {entry.response}")
    return "\n".join(lines)


def make_llm_summarizer(
    service: AIService,
    timeout_seconds: float = 30.0,
    max_tokens: int = 500
) -> Summarizer:
    """
    Create a summarizer backed by `service.generate_completion`.

    Errors (including timeouts) propagate so the MemoryManager can skip
    compaction and keep the messages.
    """
    async def summarize(entries: Sequence[MemoryEntry]) -> str:
        prompt = (
            "Summarize the following conversation so it can replace the "
            "full history:\n\n" + format_transcript(entries)
        )
        options = GenerationOptions(
            system_prompt=SUMMARY_SYSTEM_PROMPT,
            temperature=0.3,
            max_tokens=max_tokens,
        )
        summary = await call_with_timeout(
            service.generate_completion(prompt, options),
            timeout_seconds,
            service.provider,
        )
        return summary.strip()

    return summarize
