"""
Provider Selection
==================

Which provider serves requests is a pure function of the configuration:

1. If AI_PROVIDER is set and that provider has an API key, use it
2. Otherwise the first of openai, anthropic, gemini that has a key
3. Otherwise fail: nothing can serve requests

`create_ai_service` then builds the matching adapter. Neither function
touches the network.
"""

import httpx

from agentcore.ai.anthropic_service import AnthropicService
from agentcore.ai.base import AIService
from agentcore.ai.gemini_service import GeminiService
from agentcore.ai.openai_service import OpenAIService
from agentcore.utils.config import Config, ProviderConfig
from agentcore.utils.logger import Logger

logger = Logger("AIFactory")

PROVIDER_ORDER = ("openai", "anthropic", "gemini")


def select_provider(providers: ProviderConfig) -> str:
    """
    Pick the provider to use from the configured credentials.

    Args:
        providers: Provider section of the configuration

    Returns:
        One of "openai", "anthropic", "gemini"

    Raises:
        ValueError: If no provider has an API key, or AI_PROVIDER names an
            unknown provider
    """
    preferred = (providers.preferred or "").strip().lower()
    if preferred:
        if preferred not in PROVIDER_ORDER:
            raise ValueError(f"Unknown AI provider: {providers.preferred}")
        if providers.credentials_for(preferred).api_key:
            return preferred
        logger.warning(f"AI_PROVIDER={preferred} has no API key, falling back")

    for provider in PROVIDER_ORDER:
        if providers.credentials_for(provider).api_key:
            return provider

    raise ValueError(
        "No AI provider configured. Set one of OPENAI_API_KEY, "
        "ANTHROPIC_API_KEY or GEMINI_API_KEY in your .env file."
    )


def create_ai_service(
    config: Config,
    provider: str | None = None,
    http_client: httpx.AsyncClient | None = None
) -> AIService:
    """
    Build the AIService for the selected (or given) provider.

    Args:
        config: Full configuration
        provider: Force a provider instead of selecting one
        http_client: Shared httpx client for the REST adapters
    """
    provider = provider or select_provider(config.providers)
    credentials = config.providers.credentials_for(provider)
    max_output_tokens = config.agent.max_output_tokens

    logger.info(f"Using AI provider: {provider}")

    if provider == "openai":
        return OpenAIService(credentials, max_output_tokens=max_output_tokens)
    if provider == "anthropic":
        return AnthropicService(credentials, http_client=http_client, max_output_tokens=max_output_tokens)
    return GeminiService(credentials, http_client=http_client, max_output_tokens=max_output_tokens)
