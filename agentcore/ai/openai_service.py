"""
OpenAI Service
==============

AIService implementation on the official `openai` SDK (AsyncOpenAI).

The prompt is sent as a single user message, with the system prompt (if
any) as a system message. Tool calls come back as
`message.tool_calls[*].function.{name, arguments}` where `arguments` is a
JSON string. We decode it here so the Agent only sees dicts.
"""

import json
from typing import Any

import openai
from openai import AsyncOpenAI

from agentcore.ai.base import CodeAnalysis, GenerationOptions, ToolCall, ToolResponse
from agentcore.ai.models import AIModelDescriptor, describe_model, models_for_provider
from agentcore.ai.parsing import analyze_code_with
from agentcore.errors import LLMAPIError
from agentcore.tools.schema import ToolDefinition, to_openai_tool
from agentcore.utils.config import ProviderCredentials, require_api_key
from agentcore.utils.logger import Logger

logger = Logger("OpenAI")


class OpenAIService:
    """
    OpenAI chat-completions adapter.

    Example:
        service = OpenAIService(config.providers.openai)
        text = await service.generate_completion("Hello")
    """

    provider = "openai"

    def __init__(
        self,
        credentials: ProviderCredentials,
        client: AsyncOpenAI | None = None,
        max_output_tokens: int = 2048
    ):
        """
        Initialize the adapter.

        Args:
            credentials: API key, default model and temperature
            client: Pre-built client (tests inject a mock here)
            max_output_tokens: Default max tokens when options don't set it
        """
        self.credentials = credentials
        self.model = credentials.model
        self.max_output_tokens = max_output_tokens
        self.descriptor: AIModelDescriptor = describe_model(self.model, self.provider)

        if client is None:
            client = AsyncOpenAI(
                api_key=require_api_key(credentials, "OPENAI_API_KEY"),
                base_url=credentials.base_url,
            )
        self.client = client

        logger.info(f"OpenAI service initialized with model: {self.model}")

    # ==========================================================================
    # AIService
    # ==========================================================================

    async def generate_completion(
        self,
        prompt: str,
        options: GenerationOptions | None = None
    ) -> str:
        response = await self._create(prompt, options)
        content = _first_message(response).content
        if not content:
            raise LLMAPIError("OpenAI returned an empty completion")
        return content

    async def generate_with_tools(
        self,
        prompt: str,
        tools: list[ToolDefinition],
        options: GenerationOptions | None = None
    ) -> ToolResponse:
        if not tools or not self.descriptor.supports_function_calling:
            return ToolResponse(content=await self.generate_completion(prompt, options))

        response = await self._create(
            prompt,
            options,
            tools=[to_openai_tool(tool) for tool in tools],
            tool_choice="auto",
        )
        message = _first_message(response)
        tool_calls = self._parse_tool_calls(message)
        content = message.content or ""

        if not content and not tool_calls:
            raise LLMAPIError("OpenAI returned neither content nor tool calls")
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

    async def _create(self, prompt: str, options: GenerationOptions | None, **extra: Any) -> Any:
        options = options or GenerationOptions()
        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            return await self.client.chat.completions.create(
                model=options.model or self.model,
                messages=messages,
                temperature=(
                    options.temperature if options.temperature is not None
                    else self.credentials.temperature
                ),
                max_tokens=options.max_tokens or self.max_output_tokens,
                **extra,
            )
        except openai.APIStatusError as e:
            raise LLMAPIError(f"OpenAI request failed: {e.message}", status_code=e.status_code) from e
        except openai.APITimeoutError as e:
            raise LLMAPIError("OpenAI request timed out", status_code=408, timeout=True) from e
        except openai.APIError as e:
            raise LLMAPIError(f"OpenAI request failed: {e.message}") from e

    def _parse_tool_calls(self, message: Any) -> list[ToolCall]:
        if not message.tool_calls:
            return []

        tool_calls = []
        for tc in message.tool_calls:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse tool arguments for {tc.function.name}", e)
                arguments = {}
            if not isinstance(arguments, dict):
                arguments = {}
            tool_calls.append(ToolCall(name=tc.function.name, arguments=arguments, id=tc.id))

        logger.debug(f"Parsed {len(tool_calls)} tool calls")
        return tool_calls


def _first_message(response: Any) -> Any:
    """The first choice's message; a response without one is an API error."""
    choices = getattr(response, "choices", None)
    if not choices:
        raise LLMAPIError("OpenAI returned no choices")
    message = getattr(choices[0], "message", None)
    if message is None:
        raise LLMAPIError("OpenAI choice has no message")
    return message
