"""
Prompt Manager
==============

Builds the prompt for one turn inside a token budget.

Prompt layout (empty parts are skipped):

    <system prompt>

    <context block from MemoryManager>

    User: <current input>

Budgeting rules:
1. The system prompt and the current input are never cut
2. If system prompt + input alone exceed the budget, fail with
   ContextWindowExceededError instead of sending an unusable prompt
3. Otherwise the context block is cut until the prompt fits: whole lines
   are dropped oldest first, then the leading characters of what is left

Token counts are an estimate (characters / 4, rounded up). Deterministic
and provider-agnostic, good enough for budgeting and client-side counters.
"""

import math
from dataclasses import dataclass

from agentcore.errors import ContextWindowExceededError
from agentcore.memory import MemoryManager
from agentcore.utils.logger import Logger

logger = Logger("Prompt")

CHARS_PER_TOKEN = 4
SEPARATOR = "\n\n"


def estimate_token_count(text: str) -> int:
    """Approximate token count: ceil(len(text) / 4)."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass(frozen=True)
class PromptRequest:
    """
    An assembled prompt. Derived per turn, never stored.

    Attributes:
        system_prompt: System instructions
        context_block: Conversation context (possibly truncated)
        user_input: The current user message, verbatim
        max_tokens: Budget the prompt was built for
    """
    system_prompt: str
    context_block: str
    user_input: str
    max_tokens: int

    @property
    def user_line(self) -> str:
        return f"User: {self.user_input}"

    @property
    def full_text(self) -> str:
        parts = [self.system_prompt, self.context_block, self.user_line]
        return SEPARATOR.join(part for part in parts if part)

    @property
    def conversation_text(self) -> str:
        """Context and input without the system prompt (sent separately)."""
        return SEPARATOR.join(part for part in (self.context_block, self.user_line) if part)

    @property
    def token_count(self) -> int:
        return estimate_token_count(self.full_text)


class PromptManager:
    """
    Assembles token-budgeted prompts from memory.

    Example:
        prompts = PromptManager(memory, system_prompt="You are helpful.")
        request = prompts.build_prompt("s1", "What did we decide?", max_tokens=1000)
        request.token_count <= 1000   # True
    """

    def __init__(
        self,
        memory: MemoryManager,
        system_prompt: str = "",
        max_tokens: int = 4000
    ):
        self.memory = memory
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens

    def estimate_token_count(self, text: str) -> int:
        return estimate_token_count(text)

    def build_prompt(
        self,
        session_id: str,
        user_input: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None
    ) -> PromptRequest:
        """
        Build the prompt for a turn.

        Args:
            session_id: Session whose memory supplies the context
            user_input: The current user message
            system_prompt: Overrides the default system prompt
            max_tokens: Overrides the default token budget

        Returns:
            PromptRequest whose token_count fits max_tokens

        Raises:
            ContextWindowExceededError: If system prompt + input don't fit
        """
        system = self.system_prompt if system_prompt is None else system_prompt
        budget = self.max_tokens if max_tokens is None else max_tokens

        minimal = PromptRequest(system, "", user_input, budget)
        if minimal.token_count > budget:
            raise ContextWindowExceededError(
                "System prompt and current input do not fit the token budget",
                token_count=minimal.token_count,
                max_tokens=budget,
            )

        context = self.memory.get_context_block(session_id, user_input)
        request = PromptRequest(system, context, user_input, budget)
        if request.token_count <= budget:
            return request

        # Characters left for the context block, including its separator
        available = budget * CHARS_PER_TOKEN - len(minimal.full_text) - len(SEPARATOR)
        truncated = truncate_context(context, available)

        logger.debug(
            f"Truncated context for {session_id}",
            {"original_chars": len(context), "kept_chars": len(truncated), "max_tokens": budget},
        )
        return PromptRequest(system, truncated, user_input, budget)


def truncate_context(context: str, max_chars: int) -> str:
    """
    Cut a context block to at most `max_chars`, keeping the newest content.

    Whole lines go first (oldest first). If the newest line alone is still
    too long, its leading characters are cut.
    """
    if max_chars <= 0:
        return ""
    if len(context) <= max_chars:
        return context

    lines = context.split("\n")
    while len(lines) > 1 and len("\n".join(lines)) > max_chars:
        lines.pop(0)

    remaining = "\n".join(lines)
    if len(remaining) > max_chars:
        remaining = remaining[-max_chars:]
    return remaining
