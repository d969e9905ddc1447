"""
Built-in Tools
==============

Small general-purpose tools registered by default:

- getTime: current UTC time
- calculator: add/subtract/multiply/divide two numbers
- getState: read the calling session's application state
- setState: store one key in the calling session's application state

Usage:
    from agentcore.tools.builtin import register_builtin_tools

    register_builtin_tools(registry)
"""

from datetime import datetime, timezone
from typing import Any

from agentcore.tools import Tool, ToolContext, ToolRegistry
from agentcore.utils.logger import Logger

logger = Logger("Tools:Builtin")


# ==============================================================================
# getTime
# ==============================================================================

def get_time(args: dict[str, Any], ctx: ToolContext) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {"time": now.isoformat(), "timezone": "UTC"}


get_time_tool = Tool(
    name="getTime",
    description="Get the current server time (UTC, ISO-8601).",
    parameter_schema={"type": "object", "properties": {}},
    execute=get_time,
)


# ==============================================================================
# calculator
# ==============================================================================

_OPERATIONS = {
    "add": lambda a, b: a + b,
    "subtract": lambda a, b: a - b,
    "multiply": lambda a, b: a * b,
    "divide": lambda a, b: a / b,
}


def calculate(args: dict[str, Any], ctx: ToolContext) -> dict[str, Any]:
    """
    Apply a binary arithmetic operation.

    Raises:
        ZeroDivisionError: When dividing by zero
    """
    operation = args["operation"]
    a = args["a"]
    b = args["b"]
    if operation == "divide" and b == 0:
        raise ZeroDivisionError("Division by zero is not allowed")
    return {"result": _OPERATIONS[operation](a, b)}


calculator_tool = Tool(
    name="calculator",
    description="Perform a basic arithmetic operation on two numbers.",
    parameter_schema={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": list(_OPERATIONS),
                "description": "The operation to perform",
            },
            "a": {"type": "number", "description": "First operand"},
            "b": {"type": "number", "description": "Second operand"},
        },
        "required": ["operation", "a", "b"],
    },
    execute=calculate,
)


# ==============================================================================
# Session state
# ==============================================================================

def get_state(args: dict[str, Any], ctx: ToolContext) -> dict[str, Any]:
    state = ctx.get_state()
    key = args.get("key")
    if key is None:
        return {"state": state}
    return {"key": key, "value": state.get(key), "found": key in state}


def set_state(args: dict[str, Any], ctx: ToolContext) -> dict[str, Any]:
    ctx.update_state({args["key"]: args["value"]})
    return {"key": args["key"], "stored": True}


get_state_tool = Tool(
    name="getState",
    description="Read the application state saved for this conversation. "
                "Pass a key to read a single value.",
    parameter_schema={
        "type": "object",
        "properties": {
            "key": {"type": "string", "description": "Optional key to read"},
        },
    },
    execute=get_state,
)

set_state_tool = Tool(
    name="setState",
    description="Save a value in this conversation's application state "
                "so it is available in later turns.",
    parameter_schema={
        "type": "object",
        "properties": {
            "key": {"type": "string", "description": "Key to store under"},
            "value": {"type": "string", "description": "Value to store"},
        },
        "required": ["key", "value"],
    },
    execute=set_state,
)


BUILTIN_TOOLS = [get_time_tool, calculator_tool, get_state_tool, set_state_tool]


def register_builtin_tools(registry: ToolRegistry) -> None:
    """Register every built-in tool in `registry`."""
    for tool in BUILTIN_TOOLS:
        registry.register(tool)
    logger.info(f"Registered {len(BUILTIN_TOOLS)} built-in tools")
