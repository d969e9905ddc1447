"""
Unit tests for tool schema validation and provider translations.
"""

from __future__ import annotations

import pytest

from agentcore.tools.schema import (
    ToolDefinition,
    normalize_schema,
    to_anthropic_tool,
    to_gemini_declaration,
    to_openai_tool,
    validate_arguments,
)

CALCULATOR_SCHEMA = {
    "type": "object",
    "properties": {
        "operation": {"type": "string", "enum": ["add", "subtract"]},
        "a": {"type": "number"},
        "b": {"type": "number", "default": 0},
    },
    "required": ["operation", "a"],
}


class TestNormalizeSchema:
    def test_empty_becomes_object(self) -> None:
        assert normalize_schema(None) == {"type": "object", "properties": {}}
        assert normalize_schema({}) == {"type": "object", "properties": {}}

    def test_missing_type_filled_in(self) -> None:
        schema = normalize_schema({"properties": {"a": {"type": "string"}}})
        assert schema["type"] == "object"

    def test_non_object_rejected(self) -> None:
        with pytest.raises(ValueError, match="type 'object'"):
            normalize_schema({"type": "string"})

    def test_required_must_be_declared(self) -> None:
        """A required parameter missing from properties should be rejected."""
        with pytest.raises(ValueError, match="missing from properties: ghost"):
            normalize_schema({"type": "object", "properties": {}, "required": ["ghost"]})

    def test_invalid_schema_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid tool parameter schema"):
            normalize_schema({"type": "object", "properties": {"a": {"type": "not-a-type"}}})


class TestValidateArguments:
    def test_valid(self) -> None:
        assert validate_arguments(CALCULATOR_SCHEMA, {"operation": "add", "a": 1}) == []

    def test_reports_every_problem(self) -> None:
        problems = validate_arguments(CALCULATOR_SCHEMA, {"operation": "pow", "a": "one"})

        assert len(problems) == 2
        assert any(p.startswith("a: ") for p in problems)
        assert any(p.startswith("operation: ") for p in problems)

    def test_missing_required(self) -> None:
        assert validate_arguments(CALCULATOR_SCHEMA, {"operation": "add"}) == ["'a' is a required property"]

    def test_non_dict_arguments(self) -> None:
        assert validate_arguments(CALCULATOR_SCHEMA, ["add", 1]) == ["Arguments must be an object, got list"]  # type: ignore[arg-type]


class TestProviderTranslations:
    """Each provider format should keep the name, description and required list."""

    definition = ToolDefinition("calculator", "Do math", normalize_schema(CALCULATOR_SCHEMA))

    def test_openai(self) -> None:
        tool = to_openai_tool(self.definition)

        assert tool["type"] == "function"
        assert tool["function"]["name"] == "calculator"
        assert tool["function"]["parameters"]["required"] == ["operation", "a"]

    def test_anthropic(self) -> None:
        tool = to_anthropic_tool(self.definition)

        assert tool == {
            "name": "calculator",
            "description": "Do math",
            "input_schema": self.definition.parameters,
        }

    def test_gemini_uses_openapi_subset(self) -> None:
        """Gemini types are upper-case and unsupported keys are dropped."""
        declaration = to_gemini_declaration(self.definition)
        parameters = declaration["parameters"]

        assert parameters["type"] == "OBJECT"
        assert parameters["required"] == ["operation", "a"]
        assert parameters["properties"]["operation"] == {"type": "STRING", "enum": ["add", "subtract"]}
        assert "default" not in parameters["properties"]["b"]

    def test_gemini_parameterless_tool(self) -> None:
        declaration = to_gemini_declaration(ToolDefinition("getTime", "Time"))
        assert "parameters" not in declaration

    def test_gemini_nullable_union(self) -> None:
        definition = ToolDefinition(
            "note",
            "Save a note",
            {"type": "object", "properties": {"text": {"type": ["string", "null"]}}},
        )

        text = to_gemini_declaration(definition)["parameters"]["properties"]["text"]

        assert text == {"type": "STRING", "nullable": True}
