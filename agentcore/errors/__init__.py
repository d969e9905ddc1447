"""
Errors
======

Typed error taxonomy plus the centralized ErrorHandler that turns any
failure into a MonitoredError for the caller and the monitoring sink.
"""

from agentcore.errors.types import (
    AgentError,
    AgentSystemError,
    AIGovernanceError,
    ContextWindowExceededError,
    ErrorKind,
    InputValidationError,
    LLMAPIError,
    MemoryStorageError,
    ToolExecutionError,
)
from agentcore.errors.handler import (
    ErrorCategory,
    ErrorHandler,
    ErrorRateAlert,
    LoggingSink,
    MonitoredError,
    MonitoringSink,
    Severity,
)

__all__ = [
    "ErrorKind",
    "AgentError",
    "InputValidationError",
    "MemoryStorageError",
    "ToolExecutionError",
    "LLMAPIError",
    "ContextWindowExceededError",
    "AIGovernanceError",
    "AgentSystemError",
    "ErrorCategory",
    "ErrorHandler",
    "ErrorRateAlert",
    "LoggingSink",
    "MonitoredError",
    "MonitoringSink",
    "Severity",
]
