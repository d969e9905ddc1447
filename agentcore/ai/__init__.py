"""
AI Service Layer
================

One AIService contract, three provider adapters:

- OpenAIService: official openai SDK
- AnthropicService: Messages REST API via httpx
- GeminiService: generateContent REST API via httpx

Use `create_ai_service(config)` to get the adapter chosen by
`select_provider`.
"""

from agentcore.ai.anthropic_service import AnthropicService
from agentcore.ai.base import (
    AIService,
    CodeAnalysis,
    Complexity,
    GenerationOptions,
    ToolCall,
    ToolResponse,
    call_with_timeout,
)
from agentcore.ai.factory import PROVIDER_ORDER, create_ai_service, select_provider
from agentcore.ai.gemini_service import GeminiService
from agentcore.ai.models import MODEL_CATALOG, AIModelDescriptor, describe_model, models_for_provider
from agentcore.ai.openai_service import OpenAIService
from agentcore.ai.parsing import extract_json_object, parse_json_response
from agentcore.ai.summarizer import make_llm_summarizer

__all__ = [
    "AIService",
    "AIModelDescriptor",
    "AnthropicService",
    "CodeAnalysis",
    "Complexity",
    "GeminiService",
    "GenerationOptions",
    "MODEL_CATALOG",
    "OpenAIService",
    "PROVIDER_ORDER",
    "ToolCall",
    "ToolResponse",
    "call_with_timeout",
    "create_ai_service",
    "describe_model",
    "extract_json_object",
    "make_llm_summarizer",
    "models_for_provider",
    "parse_json_response",
    "select_provider",
]
