"""
Anthropic Service
=================

AIService implementation for the Anthropic Messages API, called over REST
with httpx.

Request:
    POST https://api.anthropic.com/v1/messages
    {"model", "max_tokens", "temperature", "system"?, "messages", "tools"?}

Response content is a list of blocks:
    {"type": "text", "text": "..."}
    {"type": "tool_use", "id": "...", "name": "...", "input": {...}}
"""

from typing import Any

import httpx

from agentcore.ai.base import CodeAnalysis, GenerationOptions, ToolCall, ToolResponse
from agentcore.ai.http import post_json
from agentcore.ai.models import AIModelDescriptor, describe_model, models_for_provider
from agentcore.ai.parsing import analyze_code_with
from agentcore.errors import LLMAPIError
from agentcore.tools.schema import ToolDefinition, to_anthropic_tool
from agentcore.utils.config import ProviderCredentials, require_api_key
from agentcore.utils.logger import Logger

logger = Logger("Anthropic")

ANTHROPIC_API = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicService:
    """
    Anthropic Messages API adapter.

    Example:
        service = AnthropicService(config.providers.anthropic)
        response = await service.generate_with_tools(prompt, definitions)
        for call in response.tool_calls:
            print(call.name, call.arguments)
    """

    provider = "anthropic"

    def __init__(
        self,
        credentials: ProviderCredentials,
        http_client: httpx.AsyncClient | None = None,
        max_output_tokens: int = 2048
    ):
        """
        Initialize the adapter.

        Args:
            credentials: API key, default model and temperature
            http_client: Shared httpx client (optional)
            max_output_tokens: Default max tokens when options don't set it
        """
        self.credentials = credentials
        self.api_key = require_api_key(credentials, "ANTHROPIC_API_KEY")
        self.model = credentials.model
        self.base_url = credentials.base_url or ANTHROPIC_API
        self.max_output_tokens = max_output_tokens
        self.http_client = http_client
        self.descriptor: AIModelDescriptor = describe_model(self.model, self.provider)

        logger.info(f"Anthropic service initialized with model: {self.model}")

    # ==========================================================================
    # AIService
    # ==========================================================================

    async def generate_completion(
        self,
        prompt: str,
        options: GenerationOptions | None = None
    ) -> str:
        data = await self._messages(prompt, options)
        text = _join_text(data)
        if not text:
            raise LLMAPIError("Anthropic returned an empty completion")
        return text

    async def generate_with_tools(
        self,
        prompt: str,
        tools: list[ToolDefinition],
        options: GenerationOptions | None = None
    ) -> ToolResponse:
        if not tools or not self.descriptor.supports_function_calling:
            return ToolResponse(content=await self.generate_completion(prompt, options))

        data = await self._messages(prompt, options, tools=[to_anthropic_tool(tool) for tool in tools])

        tool_calls = []
        for block in _content_blocks(data):
            if block.get("type") != "tool_use":
                continue
            arguments = block.get("input") or {}
            if not isinstance(arguments, dict):
                logger.warning(f"Ignoring non-object input for tool {block.get('name')}")
                arguments = {}
            tool_calls.append(ToolCall(name=block.get("name", ""), arguments=arguments, id=block.get("id")))

        content = _join_text(data)
        if not content and not tool_calls:
            raise LLMAPIError("Anthropic returned neither text nor tool calls")
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

    async def _messages(
        self,
        prompt: str,
        options: GenerationOptions | None,
        tools: list[dict[str, Any]] | None = None
    ) -> dict[str, Any]:
        options = options or GenerationOptions()
        payload: dict[str, Any] = {
            "model": options.model or self.model,
            "max_tokens": options.max_tokens or self.max_output_tokens,
            "temperature": (
                options.temperature if options.temperature is not None
                else self.credentials.temperature
            ),
            "messages": [{"role": "user", "content": prompt}],
        }
        if options.system_prompt:
            payload["system"] = options.system_prompt
        if tools:
            payload["tools"] = tools

        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        data = await post_json(
            f"{self.base_url}/messages",
            payload,
            provider="Anthropic",
            headers=headers,
            client=self.http_client,
        )
        logger.debug("Anthropic response", {"stop_reason": data.get("stop_reason")})
        return data


def _content_blocks(data: dict[str, Any]) -> list[dict[str, Any]]:
    content = data.get("content")
    if not isinstance(content, list):
        raise LLMAPIError("Anthropic response has no content blocks")
    return [block for block in content if isinstance(block, dict)]


def _join_text(data: dict[str, Any]) -> str:
    return "".join(
        block.get("text", "") for block in _content_blocks(data) if block.get("type") == "text"
    )
