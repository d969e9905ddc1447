"""
Gemini Service
==============

AIService implementation for Google's Gemini `generateContent` REST API,
called with httpx.

Request:
    POST {base}/models/{model}:generateContent?key=API_KEY
    {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "systemInstruction"?: {"parts": [{"text": system}]},
        "generationConfig": {"temperature", "maxOutputTokens"},
        "tools"?: [{"functionDeclarations": [...]}]
    }

Response:
    candidates[0].content.parts -> {"text": ...} | {"functionCall": {"name", "args"}}

Gemini does not issue ids for function calls, so ToolCall.id stays None.
"""

from typing import Any

import httpx

from agentcore.ai.base import CodeAnalysis, GenerationOptions, ToolCall, ToolResponse
from agentcore.ai.http import post_json
from agentcore.ai.models import AIModelDescriptor, describe_model, models_for_provider
from agentcore.ai.parsing import analyze_code_with
from agentcore.errors import LLMAPIError
from agentcore.tools.schema import ToolDefinition, to_gemini_declaration
from agentcore.utils.config import ProviderCredentials, require_api_key
from agentcore.utils.logger import Logger

logger = Logger("Gemini")

GEMINI_API = "https://generativelanguage.googleapis.com/v1beta"


class GeminiService:
    """Gemini generateContent adapter."""

    provider = "gemini"

    def __init__(
        self,
        credentials: ProviderCredentials,
        http_client: httpx.AsyncClient | None = None,
        max_output_tokens: int = 2048
    ):
        self.credentials = credentials
        self.api_key = require_api_key(credentials, "GEMINI_API_KEY")
        self.model = credentials.model
        self.base_url = credentials.base_url or GEMINI_API
        self.max_output_tokens = max_output_tokens
        self.http_client = http_client
        self.descriptor: AIModelDescriptor = describe_model(self.model, self.provider)

        logger.info(f"Gemini service initialized with model: {self.model}")

    # ==========================================================================
    # AIService
    # ==========================================================================

    async def generate_completion(
        self,
        prompt: str,
        options: GenerationOptions | None = None
    ) -> str:
        parts = await self._generate(prompt, options)
        text = _join_text(parts)
        if not text:
            raise LLMAPIError("Gemini returned an empty completion")
        return text

    async def generate_with_tools(
        self,
        prompt: str,
        tools: list[ToolDefinition],
        options: GenerationOptions | None = None
    ) -> ToolResponse:
        if not tools or not self.descriptor.supports_function_calling:
            return ToolResponse(content=await self.generate_completion(prompt, options))

        parts = await self._generate(
            prompt,
            options,
            tools=[{"functionDeclarations": [to_gemini_declaration(tool) for tool in tools]}],
        )

        tool_calls = []
        for part in parts:
            call = part.get("functionCall")
            if not isinstance(call, dict):
                continue
            arguments = call.get("args") or {}
            if not isinstance(arguments, dict):
                arguments = {}
            tool_calls.append(ToolCall(name=call.get("name", ""), arguments=arguments))

        content = _join_text(parts)
        if not content and not tool_calls:
            raise LLMAPIError("Gemini returned neither text nor function calls")
        return ToolResponse(content=content, tool_calls=tool_calls)

    async def analyze_code(self, code: str, language: str) -> CodeAnalysis:
        return await analyze_code_with(self, code, language)

    def available_models(self) -> list[AIModelDescriptor]:
        return models_for_provider(self.provider)

    def supports_capability(self, capability: str) -> bool:
        capabilities = {
            "function_calling": self.descriptor.supports_function_calling,
            "images": self.descriptor.supports_images,
            "code_analysis": True,
        }
        return capabilities.get(capability, False)

    # ==========================================================================
    # Internals
    # ==========================================================================

    async def _generate(
        self,
        prompt: str,
        options: GenerationOptions | None,
        tools: list[dict[str, Any]] | None = None
    ) -> list[dict[str, Any]]:
        options = options or GenerationOptions()
        model = options.model or self.model

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": (
                    options.temperature if options.temperature is not None
                    else self.credentials.temperature
                ),
                "maxOutputTokens": options.max_tokens or self.max_output_tokens,
            },
        }
        if options.system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": options.system_prompt}]}
        if tools:
            payload["tools"] = tools

        data = await post_json(
            f"{self.base_url}/models/{model}:generateContent",
            payload,
            provider="Gemini",
            params={"key": self.api_key},
            client=self.http_client,
        )

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            # Blocked prompts come back with promptFeedback and no candidates
            feedback = data.get("promptFeedback")
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            raise LLMAPIError(f"Gemini returned no candidates (blockReason={reason})")

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise LLMAPIError("Gemini returned a malformed candidate")
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            finish = candidate.get("finishReason")
            raise LLMAPIError(f"Gemini candidate has no content parts (finishReason={finish})")
        return [part for part in parts if isinstance(part, dict)]


def _join_text(parts: list[dict[str, Any]]) -> str:
    return "".join(part.get("text", "") for part in parts if "text" in part)
