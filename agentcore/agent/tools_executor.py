"""
Tool Executor
=============

Runs the tools the model asks for.

The executor:
1. Looks the tool up by name
2. Validates the arguments against the tool's JSON Schema
3. Runs the tool with a ToolContext for the calling session
4. Formats results for the next model call

Error containment: whatever goes wrong (unknown tool, invalid arguments,
any exception from the tool body) surfaces as exactly one
ToolExecutionError carrying the tool name. A failing tool never changes
the registry.
"""

import json
from dataclasses import dataclass
from typing import Any

from agentcore.ai.base import ToolCall
from agentcore.errors import AgentError, ToolExecutionError
from agentcore.memory.working import StateManager
from agentcore.tools import Tool, ToolContext, ToolDefinition, ToolRegistry
from agentcore.tools.schema import validate_arguments
from agentcore.utils.logger import Logger

logger = Logger("ToolExecutor")


@dataclass
class ToolCallResult:
    """
    Result of executing one tool call.

    Attributes:
        name: The tool name
        arguments: The arguments it ran with
        result: Whatever the tool returned
        call_id: Provider id of the call, when there is one
    """
    name: str
    arguments: dict[str, Any]
    result: Any
    call_id: str | None = None

    def to_message(self) -> str:
        """Format the result for the model."""
        if isinstance(self.result, str):
            return self.result
        return json.dumps(self.result, default=str)


class ToolExecutor:
    """
    Registers tools and invokes them on behalf of a session.

    Example:
        executor = ToolExecutor(state=state_manager)
        executor.register_tool(get_time_tool)

        result = await executor.execute("getTime", {}, session_id="s1")
    """

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        state: StateManager | None = None
    ):
        """
        Initialize the tool executor.

        Args:
            registry: Tool registry (a new empty one when omitted)
            state: StateManager handed to tools through ToolContext
        """
        self.registry = registry if registry is not None else ToolRegistry()
        self.state = state

    def register_tool(self, tool: Tool) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        self.registry.register(tool)

    async def execute(
        self,
        tool_name: str,
        args: dict[str, Any] | None = None,
        session_id: str | None = None
    ) -> Any:
        """
        Execute a tool by name.

        Args:
            tool_name: The tool to run
            args: Arguments for the tool
            session_id: The calling session (for state access)

        Returns:
            The tool's own result, unchanged

        Raises:
            ToolExecutionError: If the tool is unknown, the arguments are
                invalid, or the tool raised
        """
        args = {} if args is None else args
        tool = self.registry.get(tool_name)
        if tool is None:
            raise ToolExecutionError(f"Tool '{tool_name}' not found", tool_name)

        problems = validate_arguments(tool.parameter_schema, args)
        if problems:
            raise ToolExecutionError(
                f"Invalid arguments: {'; '.join(problems)}",
                tool_name,
                validation_errors=problems,
            )

        context = ToolContext(session_id=session_id, state=self.state)
        logger.info(f"Executing tool: {tool_name}")
        try:
            result = await tool.run(args, context)
        except ToolExecutionError:
            raise
        except AgentError as e:
            raise ToolExecutionError(e.message, tool_name, cause=e.kind.value) from e
        except Exception as e:
            logger.error(f"Tool execution failed: {tool_name}", e)
            raise ToolExecutionError(str(e) or type(e).__name__, tool_name) from e

        logger.debug(f"Tool {tool_name} succeeded")
        return result

    async def execute_all(
        self,
        tool_calls: list[ToolCall],
        session_id: str | None = None
    ) -> list[ToolCallResult]:
        """
        Execute tool calls sequentially, in order.

        Stops at the first failure (its ToolExecutionError propagates).
        """
        results = []
        for call in tool_calls:
            result = await self.execute(call.name, call.arguments, session_id)
            results.append(ToolCallResult(call.name, call.arguments, result, call.id))
        return results

    def definitions(self) -> list[ToolDefinition]:
        """Definitions of every registered tool, for the provider."""
        return self.registry.definitions()
