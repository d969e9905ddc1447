"""
Utilities Module
================

Common utilities shared across the package:
- logger: Structured logging with levels and context
- config: Centralized configuration management
"""

from agentcore.utils.logger import Logger, logger
from agentcore.utils.config import get_config, Config

__all__ = ["Logger", "logger", "get_config", "Config"]
