"""
Unit tests for Tool, ToolRegistry, ToolExecutor and the built-in tools.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest

from agentcore.agent.tools_executor import ToolCallResult, ToolExecutor
from agentcore.ai.base import ToolCall
from agentcore.errors import MemoryStorageError, ToolExecutionError
from agentcore.memory import StateManager
from agentcore.tools import Tool, ToolContext, ToolRegistry
from agentcore.tools.builtin import BUILTIN_TOOLS, register_builtin_tools


def make_tool(name: str = "echo", execute: Any = None, schema: dict | None = None) -> Tool:
    return Tool(
        name=name,
        description=f"{name} tool",
        parameter_schema=schema or {"type": "object", "properties": {}},
        execute=execute or (lambda args, ctx: args),
    )


class TestToolRegistry:
    """Tests for registration policy."""

    def test_duplicate_name_rejected(self) -> None:
        """Registering a second tool with the same name should raise and keep the first."""
        registry = ToolRegistry()
        first = make_tool("getTime")
        registry.register(first)

        with pytest.raises(ValueError, match="already registered"):
            registry.register(make_tool("getTime"))

        assert registry.get("getTime") is first
        assert len(registry) == 1

    def test_definitions_in_registration_order(self) -> None:
        registry = ToolRegistry()
        registry.register(make_tool("b"))
        registry.register(make_tool("a"))

        assert [d.name for d in registry.definitions()] == ["b", "a"]

    def test_tool_requires_name(self) -> None:
        with pytest.raises(ValueError):
            make_tool("")

    def test_schema_defaults_to_empty_object(self) -> None:
        tool = Tool(name="noop", description="", execute=lambda args, ctx: None)
        assert tool.parameter_schema == {"type": "object", "properties": {}}


class TestToolExecutor:
    """Tests for execution and error containment."""

    async def test_returns_tool_result_unchanged(self) -> None:
        """getTime's own result should come back as-is."""
        sentinel = {"time": "2025-01-01T00:00:00+00:00"}
        executor = ToolExecutor()
        executor.register_tool(make_tool("getTime", lambda args, ctx: sentinel))

        assert await executor.execute("getTime", {}) is sentinel

    async def test_shares_empty_registry(self) -> None:
        """An empty registry passed in should be used, so later registrations are visible."""
        registry = ToolRegistry()
        executor = ToolExecutor(registry=registry)
        registry.register(make_tool("echo"))

        assert executor.registry is registry
        assert await executor.execute("echo", {"x": 1}) == {"x": 1}

    async def test_async_tools_awaited(self) -> None:
        async def slow_echo(args: dict, ctx: ToolContext) -> str:
            return f"echo {args['text']}"

        executor = ToolExecutor()
        executor.register_tool(make_tool(
            "echo",
            slow_echo,
            {"type": "object", "properties": {"text": {"type": "string"}}, "required": ["text"]},
        ))

        assert await executor.execute("echo", {"text": "hi"}) == "echo hi"

    async def test_unknown_tool(self) -> None:
        with pytest.raises(ToolExecutionError) as exc_info:
            await ToolExecutor().execute("missing", {})
        assert exc_info.value.tool_name == "missing"

    async def test_invalid_args_fail_before_invocation(self) -> None:
        """Schema violations should be reported without calling the tool."""
        body = Mock(return_value="never")
        executor = ToolExecutor()
        executor.register_tool(make_tool(
            "needsA",
            body,
            {"type": "object", "properties": {"a": {"type": "number"}}, "required": ["a"]},
        ))

        with pytest.raises(ToolExecutionError) as exc_info:
            await executor.execute("needsA", {"b": 1})

        body.assert_not_called()
        assert "'a' is a required property" in exc_info.value.message

    async def test_wrong_type_rejected(self) -> None:
        executor = ToolExecutor()
        executor.register_tool(make_tool(
            "needsA",
            schema={"type": "object", "properties": {"a": {"type": "number"}}, "required": ["a"]},
        ))

        with pytest.raises(ToolExecutionError, match="a: 'x' is not of type 'number'"):
            await executor.execute("needsA", {"a": "x"})

    @pytest.mark.parametrize("exception", [RuntimeError("boom"), KeyError("k"), MemoryStorageError("disk")])
    async def test_tool_exceptions_wrapped_once(self, exception: Exception) -> None:
        """Any exception from a tool should become one ToolExecutionError."""
        def broken(args: dict, ctx: ToolContext) -> None:
            raise exception

        registry = ToolRegistry()
        executor = ToolExecutor(registry)
        executor.register_tool(make_tool("broken", broken))

        with pytest.raises(ToolExecutionError) as exc_info:
            await executor.execute("broken", {})

        assert exc_info.value.tool_name == "broken"
        assert exc_info.value.__cause__ is exception
        assert registry.list_names() == ["broken"]

    async def test_tools_see_their_session(self) -> None:
        seen: list[str | None] = []
        executor = ToolExecutor(state=StateManager())
        executor.register_tool(make_tool("who", lambda args, ctx: seen.append(ctx.session_id)))

        await executor.execute("who", {}, session_id="s42")

        assert seen == ["s42"]

    async def test_execute_all_in_order(self) -> None:
        executor = ToolExecutor()
        executor.register_tool(make_tool("echo"))

        results = await executor.execute_all(
            [ToolCall("echo", {"n": 1}, id="c1"), ToolCall("echo", {"n": 2}, id="c2")]
        )

        assert [r.result for r in results] == [{"n": 1}, {"n": 2}]
        assert [r.call_id for r in results] == ["c1", "c2"]

    def test_result_message_formatting(self) -> None:
        assert ToolCallResult("t", {}, {"result": 3}).to_message() == '{"result": 3}'
        assert ToolCallResult("t", {}, "plain text").to_message() == "plain text"


class TestBuiltinTools:
    """Tests for getTime, calculator, getState and setState."""

    @pytest.fixture
    def executor(self) -> ToolExecutor:
        executor = ToolExecutor(state=StateManager())
        register_builtin_tools(executor.registry)
        return executor

    def test_all_registered(self, executor: ToolExecutor) -> None:
        assert executor.registry.list_names() == [tool.name for tool in BUILTIN_TOOLS]
        assert executor.registry.list_names() == ["getTime", "calculator", "getState", "setState"]

    async def test_get_time(self, executor: ToolExecutor) -> None:
        result = await executor.execute("getTime", {})
        assert result["timezone"] == "UTC"
        assert result["time"].endswith("+00:00")

    @pytest.mark.parametrize(
        ("operation", "expected"),
        [("add", 8), ("subtract", 4), ("multiply", 12), ("divide", 3)],
    )
    async def test_calculator(self, executor: ToolExecutor, operation: str, expected: float) -> None:
        result = await executor.execute("calculator", {"operation": operation, "a": 6, "b": 2})
        assert result == {"result": expected}

    async def test_calculator_divide_by_zero(self, executor: ToolExecutor) -> None:
        with pytest.raises(ToolExecutionError, match="Division by zero"):
            await executor.execute("calculator", {"operation": "divide", "a": 1, "b": 0})

    async def test_calculator_unknown_operation(self, executor: ToolExecutor) -> None:
        with pytest.raises(ToolExecutionError):
            await executor.execute("calculator", {"operation": "power", "a": 2, "b": 3})

    async def test_state_round_trip(self, executor: ToolExecutor) -> None:
        """setState in one session should be visible to getState in that session only."""
        await executor.execute("setState", {"key": "active_file", "value": "main.py"}, session_id="s1")

        mine = await executor.execute("getState", {"key": "active_file"}, session_id="s1")
        theirs = await executor.execute("getState", {"key": "active_file"}, session_id="s2")

        assert mine == {"key": "active_file", "value": "main.py", "found": True}
        assert theirs["found"] is False
        assert executor.state.get_state("s1") == {"active_file": "main.py"}

    async def test_set_state_without_session(self, executor: ToolExecutor) -> None:
        with pytest.raises(ToolExecutionError, match="No session state"):
            await executor.execute("setState", {"key": "k", "value": "v"})
