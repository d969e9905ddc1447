"""
Tool Schemas
============

Tools describe their parameters with a JSON Schema object:

    {
        "type": "object",
        "properties": {
            "operation": {"type": "string", "enum": ["add", "subtract"]},
            "a": {"type": "number"},
            "b": {"type": "number"}
        },
        "required": ["operation", "a", "b"]
    }

This module validates call arguments against that schema (jsonschema) and
translates it into each provider's function-declaration format. The
`required` list survives every translation, so optional vs. required
parameters mean the same thing to every model.
"""

from dataclasses import dataclass, field
from typing import Any

import jsonschema

EMPTY_OBJECT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}

# Gemini accepts an OpenAPI subset of JSON Schema
_GEMINI_SCHEMA_KEYS = {"type", "description", "properties", "required", "items", "enum", "format", "nullable"}


@dataclass(frozen=True)
class ToolDefinition:
    """What a provider needs to know about a tool (no implementation)."""
    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=lambda: dict(EMPTY_OBJECT_SCHEMA))


def normalize_schema(schema: dict[str, Any] | None) -> dict[str, Any]:
    """
    Make sure a parameter schema is a JSON Schema object.

    Raises:
        ValueError: If the schema is not an object schema or is invalid
    """
    if not schema:
        return dict(EMPTY_OBJECT_SCHEMA)
    if schema.get("type", "object") != "object":
        raise ValueError("Tool parameter schema must have type 'object'")

    normalized = {"type": "object", "properties": {}, **schema}
    try:
        jsonschema.Draft7Validator.check_schema(normalized)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid tool parameter schema: {e.message}") from e

    missing = [name for name in normalized.get("required", []) if name not in normalized["properties"]]
    if missing:
        raise ValueError(f"Required parameters missing from properties: {', '.join(missing)}")
    return normalized


def validate_arguments(schema: dict[str, Any], arguments: dict[str, Any]) -> list[str]:
    """
    Validate call arguments against a parameter schema.

    Returns:
        A list of human-readable problems (empty when valid)
    """
    if not isinstance(arguments, dict):
        return [f"Arguments must be an object, got {type(arguments).__name__}"]

    validator = jsonschema.Draft7Validator(schema)
    problems = []
    for error in sorted(validator.iter_errors(arguments), key=lambda e: list(e.path)):
        location = ".".join(str(part) for part in error.path)
        problems.append(f"{location}: {error.message}" if location else error.message)
    return problems


# ==============================================================================
# Provider translations
# ==============================================================================

def to_openai_tool(definition: ToolDefinition) -> dict[str, Any]:
    """OpenAI chat-completions `tools` entry."""
    return {
        "type": "function",
        "function": {
            "name": definition.name,
            "description": definition.description,
            "parameters": definition.parameters,
        },
    }


def to_anthropic_tool(definition: ToolDefinition) -> dict[str, Any]:
    """Anthropic Messages API `tools` entry."""
    return {
        "name": definition.name,
        "description": definition.description,
        "input_schema": definition.parameters,
    }


def to_gemini_declaration(definition: ToolDefinition) -> dict[str, Any]:
    """Gemini `functionDeclarations` entry."""
    declaration: dict[str, Any] = {
        "name": definition.name,
        "description": definition.description,
    }
    # Gemini rejects an object with no properties, so parameterless tools omit it
    if definition.parameters.get("properties"):
        declaration["parameters"] = _to_gemini_schema(definition.parameters)
    return declaration


def _to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key not in _GEMINI_SCHEMA_KEYS:
            continue
        if key == "type":
            if isinstance(value, list):
                # ["string", "null"] -> STRING + nullable
                non_null = [t for t in value if t != "null"]
                if len(non_null) < len(value):
                    converted["nullable"] = True
                value = non_null[0] if non_null else "string"
            converted["type"] = str(value).upper()
        elif key == "properties":
            converted["properties"] = {name: _to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items":
            converted["items"] = _to_gemini_schema(value)
        else:
            converted[key] = value
    return converted
