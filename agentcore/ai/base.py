"""
AI Service Contract
===================

The common shape every LLM provider adapter is translated into. The rest of
the core only talks to `AIService`; it never imports a provider SDK.

    service.generate_completion(prompt, options)          -> str
    service.generate_with_tools(prompt, tools, options)   -> ToolResponse
    service.analyze_code(code, language)                  -> CodeAnalysis

Provider differences (function calling, context window) are data on
`service.descriptor`, not branches in the Agent.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Protocol, TypeVar, runtime_checkable

from agentcore.ai.models import AIModelDescriptor
from agentcore.errors import LLMAPIError
from agentcore.tools.schema import ToolDefinition

T = TypeVar("T")


@dataclass(frozen=True)
class GenerationOptions:
    """
    Per-call overrides. Anything left as None uses the adapter default.

    Attributes:
        model: Provider model id
        temperature: Sampling temperature
        max_tokens: Maximum output tokens
        system_prompt: System instructions for this call
    """
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    id: str | None = None


@dataclass
class ToolResponse:
    """
    Result of a tool-augmented completion.

    `tool_calls` is empty when the model answered directly or the provider
    has no function calling.
    """
    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)


class Complexity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class CodeAnalysis:
    """Structured result of `analyze_code`."""
    summary: str
    complexity: Complexity
    quality_issues: list[str] = field(default_factory=list)
    security_issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


@runtime_checkable
class AIService(Protocol):
    """One interface, one implementation per provider."""

    provider: str
    descriptor: AIModelDescriptor

    async def generate_completion(
        self,
        prompt: str,
        options: GenerationOptions | None = None
    ) -> str:
        ...

    async def generate_with_tools(
        self,
        prompt: str,
        tools: list[ToolDefinition],
        options: GenerationOptions | None = None
    ) -> ToolResponse:
        ...

    async def analyze_code(self, code: str, language: str) -> CodeAnalysis:
        ...

    def available_models(self) -> list[AIModelDescriptor]:
        ...

    def supports_capability(self, capability: str) -> bool:
        ...


async def call_with_timeout(awaitable: Awaitable[T], seconds: float, provider: str) -> T:
    """
    Await a provider call, converting a timeout into a retryable LLMAPIError.

    Args:
        awaitable: The provider coroutine
        seconds: Timeout in seconds
        provider: Provider name for the error message

    Raises:
        LLMAPIError: If the call does not finish in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise LLMAPIError(
            f"{provider} call timed out after {seconds:g}s",
            status_code=408,
            timeout=True,
        ) from e
