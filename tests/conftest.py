"""Shared test fixtures for the agentcore test suite.

Provides a scripted fake AIService, a mock OpenAI client and factories
that wire a complete Agent around them.
"""

from __future__ import annotations

import asyncio

from collections.abc import Callable, Generator
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from agentcore.agent import Agent, ContentPolicy, PromptManager, ToolExecutor
from agentcore.ai.base import CodeAnalysis, GenerationOptions, ToolCall, ToolResponse
from agentcore.ai.models import AIModelDescriptor
from agentcore.ai.parsing import analyze_code_with
from agentcore.errors import ErrorHandler
from agentcore.memory import MemoryManager, StateManager
from agentcore.tools import ToolRegistry
from agentcore.tools.builtin import register_builtin_tools
from agentcore.utils.config import reset_config

PROVIDER_ENV_VARS = (
    "AI_PROVIDER",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
)


# ============================================================================
# Fake AI service
# ============================================================================


class FakeAIService:
    """AIService double that replays scripted responses.

    Each scripted item is a ToolResponse, a plain string (text answer) or an
    exception to raise. When the script runs out it answers "ok".
    """

    provider = "fake"

    def __init__(
        self,
        responses: list[Any] | None = None,
        supports_function_calling: bool = True,
        delay: float = 0.0,
        context_window_tokens: int = 8192,
    ) -> None:
        self.descriptor = AIModelDescriptor(
            id="fake-model",
            provider="fake",
            context_window_tokens=context_window_tokens,
            supports_function_calling=supports_function_calling,
            supports_images=False,
        )
        self.responses = list(responses or [])
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.active = 0
        self.max_active = 0

    async def _next(
        self,
        kind: str,
        prompt: str,
        tools: list[Any] | None,
        options: GenerationOptions | None,
    ) -> ToolResponse:
        self.calls.append({"kind": kind, "prompt": prompt, "tools": tools, "options": options})
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            item = self.responses.pop(0) if self.responses else "ok"
            if isinstance(item, BaseException):
                raise item
            if isinstance(item, str):
                return ToolResponse(content=item)
            return item
        finally:
            self.active -= 1

    async def generate_completion(self, prompt: str, options: GenerationOptions | None = None) -> str:
        response = await self._next("completion", prompt, None, options)
        return response.content

    async def generate_with_tools(
        self,
        prompt: str,
        tools: list[Any],
        options: GenerationOptions | None = None,
    ) -> ToolResponse:
        return await self._next("tools", prompt, tools, options)

    async def analyze_code(self, code: str, language: str) -> CodeAnalysis:
        return await analyze_code_with(self, code, language)

    def available_models(self) -> list[AIModelDescriptor]:
        return [self.descriptor]

    def supports_capability(self, capability: str) -> bool:
        return capability == "function_calling" and self.descriptor.supports_function_calling


def tool_call_response(name: str, arguments: dict[str, Any] | None = None, content: str = "") -> ToolResponse:
    """A ToolResponse asking for one tool call."""
    return ToolResponse(content=content, tool_calls=[ToolCall(name=name, arguments=arguments or {}, id=f"call_{name}")])


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove provider env vars and reset the cached config around each test."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_ai_factory() -> Callable[..., FakeAIService]:
    """Factory for FakeAIService instances."""
    return FakeAIService


@pytest.fixture
def tool_call() -> Callable[..., ToolResponse]:
    """Factory for tool-call responses."""
    return tool_call_response


@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    """Factory wiring an Agent around a FakeAIService.

    Keyword arguments go to the Agent constructor, except:
        ai: the FakeAIService to use (a default one otherwise)
        max_prompt_tokens: PromptManager budget
        system_prompt: PromptManager system prompt
        blocked_terms: ContentPolicy terms
        builtins: register built-in tools (default True)
    """

    def _make(
        ai: FakeAIService | None = None,
        max_prompt_tokens: int = 4000,
        system_prompt: str = "You are a test assistant.",
        blocked_terms: tuple[str, ...] = (),
        builtins: bool = True,
        **agent_kwargs: Any,
    ) -> Agent:
        ai = ai or FakeAIService()
        state = StateManager()
        memory = MemoryManager()
        prompts = PromptManager(memory, system_prompt=system_prompt, max_tokens=max_prompt_tokens)
        registry = ToolRegistry()
        if builtins:
            register_builtin_tools(registry)
        return Agent(
            ai=ai,
            memory=memory,
            prompts=prompts,
            tools=ToolExecutor(registry, state=state),
            state=state,
            error_handler=ErrorHandler(),
            policy=ContentPolicy(blocked_terms),
            **agent_kwargs,
        )

    return _make


@pytest.fixture
def mock_openai_client() -> MagicMock:
    """Mock AsyncOpenAI client whose chat.completions.create is an AsyncMock."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


def openai_completion(content: str | None = None, tool_calls: list[Any] | None = None) -> SimpleNamespace:
    """Shape of an OpenAI chat completion response, as far as the adapter reads it."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def openai_tool_call(name: str, arguments: str, call_id: str = "call_1") -> SimpleNamespace:
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def openai_response() -> Callable[..., SimpleNamespace]:
    return openai_completion


@pytest.fixture
def openai_tool() -> Callable[..., SimpleNamespace]:
    return openai_tool_call
