"""
Agent Core
==========

The coordinator that turns one user message into one answer.

For every request the agent:
1. Validates the input and applies the content policy
2. Builds a token-budgeted prompt from memory
3. Calls the AI service (with tools when the model supports them)
4. Runs requested tools in a loop, bounded by max_tool_iterations; tool
   results are cut so the grown prompt stays inside the token budget
5. Stores the turn in memory and returns the answer

Turn states:

    RECEIVED
       │
       ▼
    CONTEXT_ASSEMBLED
       │
       ▼
    MODEL_INVOKED ──────────────┐
       │                        │
       ▼                        │ (no tool calls)
    TOOLS_PENDING ◄──┐          │
       │             │          │
       ▼             │          │
    TOOLS_EXECUTED   │          │
       │             │          │
       ▼             │          │
    MODEL_REINVOKED ─┘          │
       │                        │
       ▼                        │
    MEMORY_UPDATED ◄────────────┘
       │
       ▼
    RESPONDED            (any failure: FAILED)

Every exit is either an AgentResponse or a MonitoredError built by the
ErrorHandler. Turns of the same session run one at a time; a failed or
timed-out turn stores nothing.
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum

from agentcore.agent.governance import ContentPolicy
from agentcore.agent.prompt import CHARS_PER_TOKEN, SEPARATOR, PromptManager, estimate_token_count
from agentcore.agent.tools_executor import ToolCallResult, ToolExecutor
from agentcore.ai.base import AIService, GenerationOptions, ToolResponse, call_with_timeout
from agentcore.errors import (
    AgentSystemError,
    ContextWindowExceededError,
    ErrorHandler,
    InputValidationError,
    LLMAPIError,
    MonitoredError,
)
from agentcore.memory import MemoryManager, SessionLocks, StateManager
from agentcore.tools import ToolDefinition
from agentcore.utils.logger import Logger

logger = Logger("Agent")

TRUNCATION_MARKER = " ...[truncated]"


class TurnState(str, Enum):
    RECEIVED = "Received"
    CONTEXT_ASSEMBLED = "ContextAssembled"
    MODEL_INVOKED = "ModelInvoked"
    TOOLS_PENDING = "ToolsPending"
    TOOLS_EXECUTED = "ToolsExecuted"
    MODEL_REINVOKED = "ModelReinvoked"
    MEMORY_UPDATED = "MemoryUpdated"
    RESPONDED = "Responded"
    FAILED = "Failed"


@dataclass
class AgentResponse:
    """
    A successful turn.

    Attributes:
        text: The answer for the user
        session_id: The session it belongs to
        tool_results: Tools run during the turn, in order
        iterations: Number of tool rounds
        duration_ms: Wall time of the turn
        states: States the turn went through
    """
    text: str
    session_id: str
    tool_results: list[ToolCallResult] = field(default_factory=list)
    iterations: int = 0
    duration_ms: float = 0.0
    states: list[TurnState] = field(default_factory=list)


class Agent:
    """
    Coordinates memory, prompts, the AI service and tools for each turn.

    Example:
        agent = build_agent()
        result = await agent.handle_request("What's 2 + 2?", session_id="s1")

        if isinstance(result, MonitoredError):
            print(result.user_facing_message)
        else:
            print(result.text)
    """

    def __init__(
        self,
        ai: AIService,
        memory: MemoryManager,
        prompts: PromptManager,
        tools: ToolExecutor,
        state: StateManager,
        error_handler: ErrorHandler,
        policy: ContentPolicy | None = None,
        max_tool_iterations: int = 5,
        provider_timeout_seconds: float = 30.0,
        max_output_tokens: int = 2048,
        max_input_chars: int = 20000,
        slow_request_ms: float = 2000.0
    ):
        """
        Initialize the agent. All collaborators are passed in explicitly.

        Args:
            ai: The AI service adapter
            memory: Conversation memory
            prompts: Prompt builder
            tools: Tool executor
            state: Per-session application state
            error_handler: Turns failures into MonitoredErrors
            policy: Content policy (none when omitted)
            max_tool_iterations: Tool rounds allowed per turn
            provider_timeout_seconds: Timeout for each provider call
            max_output_tokens: Output tokens requested from the model
            max_input_chars: Longest accepted user message
            slow_request_ms: Turns slower than this are logged as warnings
        """
        self.ai = ai
        self.memory = memory
        self.prompts = prompts
        self.tools = tools
        self.state = state
        self.error_handler = error_handler
        self.policy = policy if policy is not None else ContentPolicy()
        self.max_tool_iterations = max_tool_iterations
        self.provider_timeout_seconds = provider_timeout_seconds
        self.max_output_tokens = max_output_tokens
        self.max_input_chars = max_input_chars
        self.slow_request_ms = slow_request_ms
        self.locks = SessionLocks()

        logger.info(
            f"Agent initialized with {ai.provider} model: {ai.descriptor.id}",
            {"tools": self.tools.registry.list_names(), "max_tool_iterations": max_tool_iterations},
        )

    # ==========================================================================
    # Public API
    # ==========================================================================

    async def handle_request(self, user_input: str, session_id: str) -> AgentResponse | MonitoredError:
        """
        Process one user message.

        Args:
            user_input: The user's message
            session_id: The conversation it belongs to

        Returns:
            AgentResponse on success, MonitoredError on any failure
        """
        started = time.perf_counter()
        states: list[TurnState] = [TurnState.RECEIVED]
        response: AgentResponse | MonitoredError

        try:
            self._validate(user_input, session_id)
            async with self.locks.hold(session_id):
                response = await self._run_turn(user_input, session_id, states)
        except Exception as e:  # every failure is reported, none escapes
            states.append(TurnState.FAILED)
            response = self.error_handler.handle(
                e,
                {
                    "session_id": session_id,
                    "provider": self.ai.provider,
                    "failed_after": states[-2].value,
                    "input_chars": len(user_input) if isinstance(user_input, str) else None,
                },
            )

        duration_ms = (time.perf_counter() - started) * 1000
        if isinstance(response, AgentResponse):
            response.duration_ms = duration_ms
        self._log_timing(session_id, duration_ms, response)
        return response

    async def clear_session(self, session_id: str) -> None:
        """Forget a session's conversation and application state."""
        async with self.locks.hold(session_id):
            self.memory.clear_session(session_id)
            self.state.clear(session_id)
        logger.info(f"Cleared session {session_id}")

    def prompt_budget(self) -> int:
        """
        Token budget for the prompt: the configured maximum, capped by
        what the model's context window leaves after the output tokens.
        """
        window = self.ai.descriptor.context_window_tokens - self.max_output_tokens
        if window <= 0:
            return self.prompts.max_tokens
        return min(self.prompts.max_tokens, window)

    # ==========================================================================
    # Turn
    # ==========================================================================

    async def _run_turn(self, user_input: str, session_id: str, states: list[TurnState]) -> AgentResponse:
        self.policy.check_input(user_input)

        request = self.prompts.build_prompt(session_id, user_input, max_tokens=self.prompt_budget())
        states.append(TurnState.CONTEXT_ASSEMBLED)
        logger.debug(f"Prompt built for {session_id}", {"token_count": request.token_count})

        options = GenerationOptions(
            system_prompt=request.system_prompt or None,
            max_tokens=self.max_output_tokens,
        )
        tools = self._tool_definitions()
        prompt = request.conversation_text

        response = await self._invoke(prompt, tools, options)
        states.append(TurnState.MODEL_INVOKED)

        tool_results: list[ToolCallResult] = []
        iterations = 0
        while response.wants_tools:
            if iterations >= self.max_tool_iterations:
                raise AgentSystemError(
                    f"Tool loop did not finish within {self.max_tool_iterations} iterations",
                    session_id=session_id,
                    pending_tools=[call.name for call in response.tool_calls],
                )
            iterations += 1
            states.append(TurnState.TOOLS_PENDING)
            logger.debug(f"Tool iteration {iterations}", {"tools": [c.name for c in response.tool_calls]})

            results = await self.tools.execute_all(response.tool_calls, session_id)
            tool_results.extend(results)
            states.append(TurnState.TOOLS_EXECUTED)

            prompt = self._fit_tool_results(prompt, request.system_prompt, response, results, session_id)
            response = await self._invoke(prompt, tools, options)
            states.append(TurnState.MODEL_REINVOKED)

        text = response.content.strip()
        if not text:
            raise LLMAPIError(f"{self.ai.provider} returned an empty final answer")
        self.policy.check_output(text)

        await self.memory.store_interaction(
            session_id,
            user_input,
            text,
            metadata={
                "provider": self.ai.provider,
                "model": self.ai.descriptor.id,
                "tools": [result.name for result in tool_results],
            },
        )
        self.state.update_state(session_id, {"last_response": text})
        states.append(TurnState.MEMORY_UPDATED)

        states.append(TurnState.RESPONDED)
        return AgentResponse(
            text=text,
            session_id=session_id,
            tool_results=tool_results,
            iterations=iterations,
            states=states,
        )

    def _validate(self, user_input: str, session_id: str) -> None:
        if not isinstance(session_id, str) or not session_id.strip():
            raise InputValidationError("Invalid session id: must be a non-empty string")
        if not isinstance(user_input, str) or not user_input.strip():
            raise InputValidationError("Invalid user input received: Input is empty.")
        if len(user_input) > self.max_input_chars:
            raise InputValidationError(
                f"Input too long: {len(user_input)} characters (max {self.max_input_chars})",
                input_chars=len(user_input),
            )

    def _tool_definitions(self) -> list[ToolDefinition]:
        if not self.ai.descriptor.supports_function_calling:
            return []
        return self.tools.definitions()

    def _fit_tool_results(
        self,
        prompt: str,
        system_prompt: str,
        response: ToolResponse,
        results: list[ToolCallResult],
        session_id: str
    ) -> str:
        """
        Append tool results to the prompt without leaving the token budget.

        When everything doesn't fit, the room left is shared equally between
        the results and each one is cut to its share.

        Raises:
            ContextWindowExceededError: If even fully cut results don't fit
        """
        budget = self.prompt_budget()
        budget_chars = budget * CHARS_PER_TOKEN
        extended = with_tool_results(prompt, response, results)
        if _prompt_chars(system_prompt, extended) <= budget_chars:
            return extended

        bare = with_tool_results(prompt, response, results, max_result_chars=0)
        spare = budget_chars - _prompt_chars(system_prompt, bare)
        if spare < 0:
            raise ContextWindowExceededError(
                "Tool results do not fit the token budget",
                token_count=estimate_token_count(_join_prompt(system_prompt, extended)),
                max_tokens=budget,
            )

        per_result = spare // len(results)
        logger.warning(
            f"Tool results cut to fit the prompt budget for {session_id}",
            {"results": len(results), "max_result_chars": per_result, "max_tokens": budget},
        )
        return with_tool_results(prompt, response, results, max_result_chars=per_result)

    async def _invoke(
        self,
        prompt: str,
        tools: list[ToolDefinition],
        options: GenerationOptions
    ) -> ToolResponse:
        if tools:
            return await call_with_timeout(
                self.ai.generate_with_tools(prompt, tools, options),
                self.provider_timeout_seconds,
                self.ai.provider,
            )
        content = await call_with_timeout(
            self.ai.generate_completion(prompt, options),
            self.provider_timeout_seconds,
            self.ai.provider,
        )
        return ToolResponse(content=content)

    def _log_timing(
        self,
        session_id: str,
        duration_ms: float,
        response: AgentResponse | MonitoredError
    ) -> None:
        data = {
            "session_id": session_id,
            "duration_ms": round(duration_ms, 1),
            "success": isinstance(response, AgentResponse),
        }
        if isinstance(response, MonitoredError):
            data["category"] = response.category.value

        if duration_ms > self.slow_request_ms:
            logger.warning(f"Slow request ({duration_ms:.0f}ms > {self.slow_request_ms:.0f}ms)", data)
        else:
            logger.info("Request handled", data)


def with_tool_results(
    prompt: str,
    response: ToolResponse,
    results: list[ToolCallResult],
    max_result_chars: int | None = None
) -> str:
    """
    Extend the prompt with the model's tool requests and their results, so
    the next call can use them.

    Result messages longer than `max_result_chars` are cut and marked.
    """
    lines = [prompt, ""]
    if response.content:
        lines.append(f"Assistant: {response.content}")
    lines.append("Tool results:")
    for result in results:
        arguments = json.dumps(result.arguments, default=str, sort_keys=True)
        message = result.to_message()
        if max_result_chars is not None and len(message) > max_result_chars:
            message = message[:max_result_chars] + TRUNCATION_MARKER
        lines.append(f"- {result.name}({arguments}) -> {message}")
    lines.append("")
    lines.append("Use these results to answer the user's last message.")
    return "\n".join(lines)


def _join_prompt(system_prompt: str, prompt: str) -> str:
    return SEPARATOR.join(part for part in (system_prompt, prompt) if part)


def _prompt_chars(system_prompt: str, prompt: str) -> int:
    return len(_join_prompt(system_prompt, prompt))
