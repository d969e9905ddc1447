"""
Configuration Management
========================

Centralized configuration for the orchestration core. All environment
variables are read and typed here, so the rest of the package never calls
os.getenv() directly.

Configuration is grouped into sections:
- providers: API keys and default models for OpenAI, Anthropic and Gemini
- memory: conversation bounds, compaction and session eviction
- prompt: system prompt and prompt token budget
- agent: tool-loop bound, provider timeout, content policy
- monitoring: error-rate detection window

Usage:
    from agentcore.utils.config import get_config

    config = get_config()
    print(config.memory.max_conversation_length)
    print(config.providers.openai.model)
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from agentcore.utils.logger import Logger

logger = Logger("Config")


def _required(name: str) -> str:
    """
    Get a required environment variable.

    Raises:
        ValueError: If the variable is not set
    """
    value = os.getenv(name)
    if not value:
        raise ValueError(
            f"Missing required environment variable: {name}\n"
            f"Please ensure {name} is set in your .env file."
        )
    return value


def _optional(name: str, default: str) -> str:
    """Get an optional environment variable with a default."""
    return os.getenv(name, default)


def _optional_int(name: str, default: int) -> int:
    """
    Get an optional integer environment variable.

    Invalid values are reported and replaced by the default.
    """
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} is not a valid integer, using default: {default}")
        return default


def _optional_float(name: str, default: float) -> float:
    """Get an optional float environment variable."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"{name} is not a valid number, using default: {default}")
        return default


def _optional_list(name: str) -> tuple[str, ...]:
    """Comma-separated list; empty items are dropped."""
    value = os.getenv(name, "")
    return tuple(item.strip() for item in value.split(",") if item.strip())


# ==============================================================================
# Configuration Dataclasses
# ==============================================================================

@dataclass(frozen=True)
class ProviderCredentials:
    """Credentials and defaults for one LLM provider."""
    api_key: str | None
    model: str
    temperature: float = 0.7
    base_url: str | None = None


@dataclass(frozen=True)
class ProviderConfig:
    """All provider sections plus the explicit provider choice."""
    preferred: str | None   # AI_PROVIDER, e.g. "anthropic"
    openai: ProviderCredentials
    anthropic: ProviderCredentials
    gemini: ProviderCredentials

    def credentials_for(self, provider: str) -> ProviderCredentials:
        """Look up a provider section by name."""
        sections = {
            "openai": self.openai,
            "anthropic": self.anthropic,
            "gemini": self.gemini,
        }
        if provider not in sections:
            raise ValueError(f"Unknown AI provider: {provider}")
        return sections[provider]


@dataclass(frozen=True)
class MemoryConfig:
    """Conversation memory and session retention."""
    max_conversation_length: int = 20   # Compaction trigger
    min_compaction_size: int = 10       # Never summarize shorter chats
    recent_window: int = 5              # Turns kept verbatim / shown in context
    session_ttl_seconds: float = 3600.0 # Idle sessions older than this are evicted
    max_sessions: int = 1000            # LRU cap on live sessions
    max_long_term_entries: int = 100    # Long-term memories kept per session
    max_relevant_memories: int = 5      # Recalled memories shown per turn


@dataclass(frozen=True)
class PromptConfig:
    """Prompt assembly settings."""
    system_prompt: str = (
        "You are a helpful AI assistant that provides accurate, helpful "
        "information, and prioritizes user success."
    )
    max_prompt_tokens: int = 4000


@dataclass(frozen=True)
class AgentConfig:
    """Agent coordinator settings."""
    max_tool_iterations: int = 5
    provider_timeout_seconds: float = 30.0
    max_output_tokens: int = 2048
    max_input_chars: int = 20000
    slow_request_ms: float = 2000.0
    blocked_terms: tuple[str, ...] = ()


@dataclass(frozen=True)
class MonitoringConfig:
    """Error-rate detection."""
    rate_threshold: int = 10
    rate_window_seconds: float = 60.0


@dataclass(frozen=True)
class Config:
    """
    Root configuration object.

    Access via:
        config = get_config()
        config.agent.max_tool_iterations
        config.providers.anthropic.model
    """
    providers: ProviderConfig
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    prompt: PromptConfig = field(default_factory=PromptConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def load_config() -> Config:
    """
    Load configuration from the environment (and a .env file if present).

    No variable is strictly required here: which provider can be used is
    decided later from the keys that are present.
    """
    load_dotenv()

    defaults_prompt = PromptConfig()

    return Config(
        providers=ProviderConfig(
            preferred=os.getenv("AI_PROVIDER") or None,
            openai=ProviderCredentials(
                api_key=os.getenv("OPENAI_API_KEY"),
                model=_optional("OPENAI_MODEL", "gpt-4o"),
                temperature=_optional_float("OPENAI_TEMPERATURE", 0.7),
                base_url=os.getenv("OPENAI_BASE_URL"),
            ),
            anthropic=ProviderCredentials(
                api_key=os.getenv("ANTHROPIC_API_KEY"),
                model=_optional("ANTHROPIC_MODEL", "claude-3-7-sonnet-20250219"),
                temperature=_optional_float("ANTHROPIC_TEMPERATURE", 0.7),
            ),
            gemini=ProviderCredentials(
                api_key=os.getenv("GEMINI_API_KEY"),
                model=_optional("GEMINI_MODEL", "gemini-1.5-pro"),
                temperature=_optional_float("GEMINI_TEMPERATURE", 0.7),
            ),
        ),
        memory=MemoryConfig(
            max_conversation_length=_optional_int("MAX_CONVERSATION_LENGTH", 20),
            min_compaction_size=_optional_int("MIN_COMPACTION_SIZE", 10),
            recent_window=_optional_int("RECENT_WINDOW", 5),
            session_ttl_seconds=_optional_float("SESSION_TTL_SECONDS", 3600.0),
            max_sessions=_optional_int("MAX_SESSIONS", 1000),
            max_long_term_entries=_optional_int("MAX_LONG_TERM_MEMORIES", 100),
            max_relevant_memories=_optional_int("MAX_RELEVANT_MEMORIES", 5),
        ),
        prompt=PromptConfig(
            system_prompt=_optional("SYSTEM_PROMPT", defaults_prompt.system_prompt),
            max_prompt_tokens=_optional_int("MAX_PROMPT_TOKENS", 4000),
        ),
        agent=AgentConfig(
            max_tool_iterations=_optional_int("MAX_TOOL_ITERATIONS", 5),
            provider_timeout_seconds=_optional_float("PROVIDER_TIMEOUT_SECONDS", 30.0),
            max_output_tokens=_optional_int("MAX_OUTPUT_TOKENS", 2048),
            max_input_chars=_optional_int("MAX_INPUT_CHARS", 20000),
            slow_request_ms=_optional_float("SLOW_REQUEST_MS", 2000.0),
            blocked_terms=_optional_list("BLOCKED_TERMS"),
        ),
        monitoring=MonitoringConfig(
            rate_threshold=_optional_int("ERROR_RATE_THRESHOLD", 10),
            rate_window_seconds=_optional_float("ERROR_RATE_WINDOW_SECONDS", 60.0),
        ),
    )


# ==============================================================================
# Singleton
# ==============================================================================

_config_instance: Config | None = None


def get_config() -> Config:
    """
    Get the singleton configuration instance.

    Loaded on first access and cached for subsequent calls.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration (used by tests and reloads)."""
    global _config_instance
    _config_instance = None


def require_api_key(credentials: ProviderCredentials, env_name: str) -> str:
    """
    Return the provider key or fail like a missing required variable.
    """
    if credentials.api_key:
        return credentials.api_key
    return _required(env_name)
