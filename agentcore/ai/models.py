"""
Model Catalog
=============

Static capability metadata per backend model. The Agent and Prompt Manager
read `context_window_tokens` and `supports_function_calling` from here
instead of special-casing providers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AIModelDescriptor:
    """Capability metadata for one model."""
    id: str
    provider: str
    context_window_tokens: int
    supports_function_calling: bool
    supports_images: bool
    name: str = ""
    max_output_tokens: int | None = None


MODEL_CATALOG: dict[str, AIModelDescriptor] = {
    model.id: model
    for model in [
        # OpenAI
        AIModelDescriptor("gpt-4o", "openai", 128000, True, True, "GPT-4o", 16384),
        AIModelDescriptor("gpt-4o-mini", "openai", 128000, True, True, "GPT-4o mini", 16384),
        AIModelDescriptor("gpt-4-turbo", "openai", 128000, True, True, "GPT-4 Turbo", 4096),
        AIModelDescriptor("gpt-3.5-turbo", "openai", 16385, True, False, "GPT-3.5 Turbo", 4096),
        # Anthropic
        AIModelDescriptor("claude-3-7-sonnet-20250219", "anthropic", 200000, True, True, "Claude 3.7 Sonnet", 8192),
        AIModelDescriptor("claude-3-5-sonnet-20240620", "anthropic", 200000, True, True, "Claude 3.5 Sonnet", 8192),
        AIModelDescriptor("claude-3-opus-20240229", "anthropic", 200000, True, True, "Claude 3 Opus", 4096),
        AIModelDescriptor("claude-3-haiku-20240307", "anthropic", 200000, True, True, "Claude 3 Haiku", 4096),
        # Google
        AIModelDescriptor("gemini-1.5-pro", "gemini", 1000000, True, True, "Gemini 1.5 Pro", 8192),
        AIModelDescriptor("gemini-1.5-flash", "gemini", 1000000, True, True, "Gemini 1.5 Flash", 8192),
        AIModelDescriptor("gemini-1.0-pro", "gemini", 32768, True, True, "Gemini 1.0 Pro", 2048),
        AIModelDescriptor("gemini-1.0-pro-vision", "gemini", 16385, False, True, "Gemini 1.0 Pro Vision", 2048),
    ]
}

# Used for model ids we don't know: small window, no assumptions about tools
DEFAULT_CONTEXT_WINDOW = 8192


def describe_model(model_id: str, provider: str) -> AIModelDescriptor:
    """
    Look up a model, falling back to a conservative descriptor.

    Unknown models get an 8k window and function calling enabled only for
    providers whose APIs always accept tool declarations.
    """
    known = MODEL_CATALOG.get(model_id)
    if known is not None:
        return known
    return AIModelDescriptor(
        id=model_id,
        provider=provider,
        context_window_tokens=DEFAULT_CONTEXT_WINDOW,
        supports_function_calling=provider in ("openai", "anthropic", "gemini"),
        supports_images=False,
        name=model_id,
    )


def models_for_provider(provider: str) -> list[AIModelDescriptor]:
    """All catalog entries for one provider."""
    return [model for model in MODEL_CATALOG.values() if model.provider == provider]
