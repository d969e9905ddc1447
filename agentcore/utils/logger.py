"""
Logger Utility
==============

Context-aware logging for the orchestration core. Every component creates
its own logger so a single request can be traced through the agent, memory,
prompt, tool and provider layers:

    [2025-01-31T10:30:00] [INFO] [Agent] Handling request for session s1
    [2025-01-31T10:30:00] [DEBUG] [Memory] Stored interaction for s1

Features:
1. Log levels (DEBUG, INFO, WARNING, ERROR) filtered by LOG_LEVEL
2. Timestamps and color-coded terminal output
3. Child loggers for nested contexts
4. Optional structured data printed as JSON

Usage:
    from agentcore.utils.logger import Logger

    logger = Logger("Agent")
    logger.info("Request handled", {"session_id": "s1", "duration_ms": 42})
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """
    Log levels with numeric values for comparison.
    Higher values = more severe = always shown.
    """
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class Colors:
    """ANSI escape codes for colored terminal output."""
    RESET = "\033[0m"
    DEBUG = "\033[36m"    # Cyan
    INFO = "\033[32m"     # Green
    WARNING = "\033[33m"  # Yellow
    ERROR = "\033[31m"    # Red
    DIM = "\033[2m"


_LEVEL_NAMES = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def parse_log_level(value: str | None) -> LogLevel:
    """
    Parse a level name such as "debug" or "WARN".

    Unknown or empty values fall back to INFO.
    """
    if not value:
        return LogLevel.INFO
    return _LEVEL_NAMES.get(value.upper(), LogLevel.INFO)


def _get_log_level_from_env() -> LogLevel:
    """Read the LOG_LEVEL environment variable (defaults to INFO)."""
    return parse_log_level(os.getenv("LOG_LEVEL", "INFO"))


class Logger:
    """
    A context-aware logger with colored output.

    Example:
        logger = Logger("Tools")
        logger.info("Registered tool", {"name": "getTime"})

        child = logger.child("Calculator")
        child.debug("Evaluating", {"operation": "add"})
        # Logs show [Tools:Calculator]
    """

    def __init__(self, context: str = "", level: LogLevel | None = None):
        """
        Initialize a logger with an optional context.

        Args:
            context: A prefix for all log messages (e.g., "Agent", "Memory")
            level: Minimum level to emit; read from LOG_LEVEL when omitted
        """
        self.context = context
        self._min_level = level if level is not None else _get_log_level_from_env()

    def child(self, child_context: str) -> "Logger":
        """
        Create a child logger with additional context.

        Args:
            child_context: Additional context to append

        Returns:
            A new Logger with combined context and the same level
        """
        new_context = f"{self.context}:{child_context}" if self.context else child_context
        return Logger(new_context, self._min_level)

    def _format_message(self, level: str, message: str, color: str) -> str:
        """
        Format a log message with timestamp, level, and context.

        Output format: [TIMESTAMP] [LEVEL] [context] message
        """
        timestamp = datetime.now().isoformat(timespec="seconds")
        context_str = f"[{self.context}] " if self.context else ""

        return (
            f"{Colors.DIM}[{timestamp}]{Colors.RESET} "
            f"{color}[{level}]{Colors.RESET} "
            f"{context_str}{message}"
        )

    def _log(
        self,
        level: LogLevel,
        level_name: str,
        color: str,
        message: str,
        data: dict[str, Any] | None = None
    ) -> None:
        if level < self._min_level:
            return

        formatted = self._format_message(level_name, message, color)

        stream = sys.stderr if level >= LogLevel.ERROR else sys.stdout
        print(formatted, file=stream)

        if data:
            data_str = json.dumps(data, indent=2, default=str)
            print(f"{Colors.DIM}{data_str}{Colors.RESET}", file=stream)

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log a debug message (only shown when LOG_LEVEL=DEBUG)."""
        self._log(LogLevel.DEBUG, "DEBUG", Colors.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Log an info message. This is the default log level."""
        self._log(LogLevel.INFO, "INFO", Colors.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        """
        Log a warning message.

        Warnings are for problems that don't stop the request, such as a
        failed summarization or an error-rate threshold being crossed.
        """
        self._log(LogLevel.WARNING, "WARN", Colors.WARNING, message, data)

    def error(
        self,
        message: str,
        error: BaseException | None = None,
        data: dict[str, Any] | None = None
    ) -> None:
        """
        Log an error message.

        Args:
            message: The error message
            error: Optional exception to include details from
            data: Optional extra structured data
        """
        payload = dict(data) if data else {}
        if error is not None:
            payload["error_type"] = type(error).__name__
            payload["error_message"] = str(error)
        self._log(LogLevel.ERROR, "ERROR", Colors.ERROR, message, payload or None)


# Default logger instance for general use
logger = Logger("AgentCore")
