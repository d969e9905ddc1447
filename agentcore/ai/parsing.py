"""
Response Parsing
================

Models asked for JSON often wrap it in prose or a ```json fence. We parse
defensively:

1. Try strict `json.loads` on the whole response
2. Otherwise scan for the first balanced `{...}` object (string-aware, so
   braces inside string literals don't confuse the scan) and parse that
3. Otherwise fail with LLMAPIError

`analyze_code_with` is shared by every provider adapter: it sends the
analysis prompt through the adapter's own `generate_completion` and turns
the JSON into a CodeAnalysis.
"""

import json
from typing import Any, Iterator

from agentcore.ai.base import AIService, CodeAnalysis, Complexity, GenerationOptions
from agentcore.errors import LLMAPIError
from agentcore.utils.logger import Logger

logger = Logger("Parsing")


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield every balanced `{...}` substring, in order of its opening brace."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    yield text[start:index + 1]
                    break
        start = text.find("{", start + 1)


def extract_json_object(text: str) -> str | None:
    """
    Return the first balanced JSON object substring in `text`, or None.
    """
    for candidate in _balanced_objects(text):
        return candidate
    return None


def parse_json_response(text: str) -> dict[str, Any]:
    """
    Parse a model response that should contain a JSON object.

    Raises:
        LLMAPIError: If no JSON object can be recovered
    """
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except (json.JSONDecodeError, TypeError):
        pass

    for candidate in _balanced_objects(text or ""):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise LLMAPIError("Could not parse JSON object from model response")


ANALYSIS_SYSTEM_PROMPT = """You are an expert code analyzer specialized in {language}.
Analyze the provided code and return a JSON object with the following structure:
{{
  "summary": "Brief description of what the code does",
  "complexity": "Low/Medium/High",
  "qualityIssues": [array of code quality issues found],
  "securityIssues": [array of potential security issues],
  "suggestions": [array of improvement suggestions],
  "dependencies": [array of libraries/packages used]
}}
Respond with the JSON object only."""

ANALYSIS_PROMPT = """Please analyze this {language} code and provide your analysis in JSON format only:

```{language}
{code}
```"""


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    items = []
    for item in value:
        if isinstance(item, dict):
            # {"issue": "...", "line": 3} style entries
            items.append(item.get("description") or item.get("issue") or json.dumps(item))
        else:
            items.append(str(item))
    return items


def _complexity(value: Any) -> Complexity:
    text = str(value or "").strip().lower()
    for level in Complexity:
        if text.startswith(level.value.lower()):
            return level
    logger.warning(f"Unrecognized complexity {value!r}, using Medium")
    return Complexity.MEDIUM


def code_analysis_from_dict(data: dict[str, Any]) -> CodeAnalysis:
    """Build a CodeAnalysis from camelCase or snake_case keys."""
    def pick(*keys: str) -> Any:
        for key in keys:
            if key in data:
                return data[key]
        return None

    return CodeAnalysis(
        summary=str(pick("summary") or ""),
        complexity=_complexity(pick("complexity")),
        quality_issues=_string_list(pick("qualityIssues", "quality_issues")),
        security_issues=_string_list(pick("securityIssues", "security_issues")),
        suggestions=_string_list(pick("suggestions")),
        dependencies=_string_list(pick("dependencies")),
    )


async def analyze_code_with(service: AIService, code: str, language: str) -> CodeAnalysis:
    """
    Run a code analysis through `service.generate_completion`.

    Raises:
        LLMAPIError: On provider failure or unparseable output
    """
    result = await service.generate_completion(
        ANALYSIS_PROMPT.format(language=language, code=code),
        GenerationOptions(
            system_prompt=ANALYSIS_SYSTEM_PROMPT.format(language=language),
            temperature=0.1,
        ),
    )
    try:
        return code_analysis_from_dict(parse_json_response(result))
    except LLMAPIError as e:
        raise LLMAPIError(
            f"Failed to parse code analysis results from {service.provider}: {e.message}"
        ) from e
