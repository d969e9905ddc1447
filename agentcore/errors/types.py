"""
Error Taxonomy
==============

Every failure that crosses a component boundary is raised as an AgentError
tagged with an ErrorKind. Components catch foreign exceptions at their edge
and re-raise one of these, so the Agent never sees an untyped exception:

    try:
        response = await client.post(...)
    except httpx.HTTPError as e:
        raise LLMAPIError(f"Anthropic request failed: {e}") from e

The ErrorHandler matches on `error.kind` (not on the class) to decide the
user-facing message, severity and retry policy. The subclasses below are
thin constructors that fix the kind and carry the variant's fields.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """The closed set of typed failures."""
    INPUT_VALIDATION = "InputValidationError"
    MEMORY_STORAGE = "MemoryStorageError"
    TOOL_EXECUTION = "ToolExecutionError"
    LLM_API = "LLMAPIError"
    CONTEXT_WINDOW_EXCEEDED = "ContextWindowExceededError"
    AI_GOVERNANCE = "AIGovernanceError"
    SYSTEM = "SystemError"


class AgentError(Exception):
    """
    Base error for the orchestration core.

    Attributes:
        kind: Which variant this error is
        message: Human-readable description (internal, never shown to users)
        details: Variant-specific fields (tool_name, status_code, ...)
    """

    kind: ErrorKind = ErrorKind.SYSTEM

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind.value})"


class InputValidationError(AgentError):
    """The caller sent something we can't process (empty input, bad session id)."""
    kind = ErrorKind.INPUT_VALIDATION


class MemoryStorageError(AgentError):
    """Conversation memory or application state could not be read or written."""
    kind = ErrorKind.MEMORY_STORAGE

    def __init__(self, message: str, **details: Any):
        super().__init__(f"Memory Storage Error: {message}", **details)


class ToolExecutionError(AgentError):
    """A tool was unknown, got invalid arguments, or raised while running."""
    kind = ErrorKind.TOOL_EXECUTION

    def __init__(self, message: str, tool_name: str, **details: Any):
        super().__init__(
            f"Error executing tool {tool_name}: {message}",
            tool_name=tool_name,
            **details,
        )
        self.tool_name = tool_name


class LLMAPIError(AgentError):
    """Provider transport, authentication, timeout or malformed-response failure."""
    kind = ErrorKind.LLM_API

    def __init__(self, message: str, status_code: int | None = None, **details: Any):
        super().__init__(f"LLM API Error: {message}", status_code=status_code, **details)
        self.status_code = status_code


class ContextWindowExceededError(AgentError):
    """The prompt can't fit the token budget even without conversation context."""
    kind = ErrorKind.CONTEXT_WINDOW_EXCEEDED

    def __init__(self, message: str, token_count: int, max_tokens: int):
        super().__init__(
            f"Context window exceeded: {message}. "
            f"Token count: {token_count}, Max allowed: {max_tokens}",
            token_count=token_count,
            max_tokens=max_tokens,
        )
        self.token_count = token_count
        self.max_tokens = max_tokens


class AIGovernanceError(AgentError):
    """Input or output rejected by the content policy."""
    kind = ErrorKind.AI_GOVERNANCE

    def __init__(self, message: str, category: str, **details: Any):
        super().__init__(message, category=category, **details)
        self.category = category


class AgentSystemError(AgentError):
    """Internal failure of the core itself (e.g. tool loop did not terminate)."""
    kind = ErrorKind.SYSTEM


