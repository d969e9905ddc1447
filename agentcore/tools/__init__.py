"""
Tools System
============

Tools are named, schema-described functions the model may ask to run
during a turn.

How Tools Work:
1. Tools are registered once at startup
2. The Agent sends their definitions to the model
3. The model answers with tool calls (name + arguments)
4. The ToolExecutor validates the arguments and runs the tool
5. Results go back to the model, which may call more tools

Each tool receives its arguments and a ToolContext that gives access to the
calling session's application state. Tools hold no session state of their
own.

This module provides:
- Tool dataclass for defining tools
- ToolContext passed to every tool call
- ToolRegistry for managing available tools
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

from agentcore.memory.working import StateManager
from agentcore.tools.schema import ToolDefinition, normalize_schema
from agentcore.utils.logger import Logger

logger = Logger("Tools")


@dataclass
class ToolContext:
    """
    What a tool knows about the call it is serving.

    Attributes:
        session_id: The calling session, or None outside a session
        state: The StateManager (tools read/write their session's state)
    """
    session_id: str | None = None
    state: StateManager | None = None

    def get_state(self) -> dict[str, Any]:
        if self.state is None or self.session_id is None:
            return {}
        return self.state.get_state(self.session_id)

    def update_state(self, updates: dict[str, Any]) -> None:
        if self.state is None or self.session_id is None:
            raise RuntimeError("No session state available for this tool call")
        self.state.update_state(self.session_id, updates)


ToolFunction = Callable[[dict[str, Any], ToolContext], Union[Any, Awaitable[Any]]]


@dataclass
class Tool:
    """
    Definition of a tool.

    Attributes:
        name: Unique identifier for the tool
        description: What the tool does (shown to the model)
        parameter_schema: JSON Schema object for the arguments
        execute: Function run with (args, context), sync or async

    Example:
        def get_time(args: dict, ctx: ToolContext) -> dict:
            return {"time": datetime.now().isoformat()}

        tool = Tool(
            name="getTime",
            description="Get the current time",
            parameter_schema={"type": "object", "properties": {}},
            execute=get_time
        )
    """
    name: str
    description: str
    execute: ToolFunction
    parameter_schema: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string")
        self.parameter_schema = normalize_schema(self.parameter_schema)

    def definition(self) -> ToolDefinition:
        """The provider-facing part of this tool."""
        return ToolDefinition(self.name, self.description, self.parameter_schema)

    async def run(self, args: dict[str, Any], context: ToolContext) -> Any:
        """Call `execute`, awaiting it if it returned an awaitable."""
        result = self.execute(args, context)
        if inspect.isawaitable(result):
            result = await result
        return result


class ToolRegistry:
    """
    Registry of available tools, keyed by name.

    Duplicate names are rejected: registering a second tool with the same
    name raises ValueError and leaves the first one in place.

    Example:
        registry = ToolRegistry()
        registry.register(get_time_tool)
        registry.get("getTime")
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a tool with this name already exists
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def definitions(self) -> list[ToolDefinition]:
        """Provider-facing definitions of every tool, in registration order."""
        return [tool.definition() for tool in self._tools.values()]

    def list_names(self) -> list[str]:
        return list(self._tools.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


__all__ = [
    "Tool",
    "ToolContext",
    "ToolDefinition",
    "ToolFunction",
    "ToolRegistry",
]
