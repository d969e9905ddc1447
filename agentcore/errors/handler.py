"""
Error Handler
=============

Centralized error processing for the orchestration core.

The handler is the only place that turns failures into user-facing text.
For every error it:
1. Classifies it into an ErrorCategory (by error kind, not by component)
2. Looks up the fixed message, severity and retry policy for the category
3. Sends the error and its context to the monitoring sink (gets a tracking id)
4. Counts it in a rolling per-category window; when a category crosses
   the configured error-rate threshold it logs a warning and sends an
   ErrorRateAlert to the sink

Classification:
    AgentError            -> by ErrorKind (exhaustive table below)
    ConnectionError,
    TimeoutError,
    httpx.TransportError  -> Network
    any other value       -> Unknown

The handler never raises. Whatever it is given (an exception, a string,
None) it returns a MonitoredError.

Usage:
    handler = ErrorHandler(sink=LoggingSink())
    monitored = handler.handle(error, {"session_id": "s1"})
    print(monitored.user_facing_message)
"""

import json
import time
import traceback
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol

import httpx

from agentcore.errors.types import AgentError, ErrorKind
from agentcore.utils.logger import Logger

logger = Logger("ErrorHandler")


class ErrorCategory(str, Enum):
    """Error categories used for user messages and monitoring."""
    MEMORY = "Memory"
    INPUT = "Input"
    TOOL = "Tool"
    LLM = "LLM"
    CONTEXT = "Context"
    GOVERNANCE = "Governance"
    SYSTEM = "System"
    NETWORK = "Network"
    UNKNOWN = "Unknown"


class Severity(str, Enum):
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class CategoryPolicy:
    """What the caller sees and how monitoring treats a category."""
    message: str
    severity: Severity
    retryable: bool
    recovery_action: str | None = None


_KIND_TO_CATEGORY: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.INPUT_VALIDATION: ErrorCategory.INPUT,
    ErrorKind.MEMORY_STORAGE: ErrorCategory.MEMORY,
    ErrorKind.TOOL_EXECUTION: ErrorCategory.TOOL,
    ErrorKind.LLM_API: ErrorCategory.LLM,
    ErrorKind.CONTEXT_WINDOW_EXCEEDED: ErrorCategory.CONTEXT,
    ErrorKind.AI_GOVERNANCE: ErrorCategory.GOVERNANCE,
    ErrorKind.SYSTEM: ErrorCategory.SYSTEM,
}

CATEGORY_POLICIES: dict[ErrorCategory, CategoryPolicy] = {
    ErrorCategory.INPUT: CategoryPolicy(
        "Sorry, I couldn't process that input. Please check your message and try again.",
        Severity.WARNING,
        retryable=False,
        recovery_action="fix_input",
    ),
    ErrorCategory.MEMORY: CategoryPolicy(
        "Sorry, I encountered an issue accessing conversation history.",
        Severity.CRITICAL,
        retryable=False,
        recovery_action="start_new_session",
    ),
    ErrorCategory.TOOL: CategoryPolicy(
        "Sorry, I encountered an issue while performing an operation ({tool_name}).",
        Severity.ERROR,
        retryable=False,
        recovery_action="rephrase_request",
    ),
    ErrorCategory.LLM: CategoryPolicy(
        "Sorry, there was an issue connecting to the AI service. Please try again in a moment.",
        Severity.ERROR,
        retryable=True,
        recovery_action="retry_with_backoff",
    ),
    ErrorCategory.CONTEXT: CategoryPolicy(
        "Sorry, the conversation has grown too long for me to process. "
        "Try starting a new conversation or summarizing the current topic.",
        Severity.WARNING,
        retryable=True,
        recovery_action="shorten_input",
    ),
    ErrorCategory.GOVERNANCE: CategoryPolicy(
        "Sorry, I can't help with that request because it conflicts with the content policy.",
        Severity.WARNING,
        retryable=False,
    ),
    ErrorCategory.SYSTEM: CategoryPolicy(
        "Sorry, something went wrong on our side while processing your request.",
        Severity.CRITICAL,
        retryable=True,
        recovery_action="retry_with_backoff",
    ),
    ErrorCategory.NETWORK: CategoryPolicy(
        "Sorry, a network problem interrupted your request. Please try again.",
        Severity.ERROR,
        retryable=True,
        recovery_action="retry_with_backoff",
    ),
    ErrorCategory.UNKNOWN: CategoryPolicy(
        "Sorry, I encountered an unexpected error while processing your request.",
        Severity.ERROR,
        retryable=False,
    ),
}

# Adding an ErrorKind or ErrorCategory without a mapping is a programming error
if set(_KIND_TO_CATEGORY) != set(ErrorKind):
    raise RuntimeError("Every ErrorKind needs an ErrorCategory mapping")
if set(CATEGORY_POLICIES) != set(ErrorCategory):
    raise RuntimeError("Every ErrorCategory needs a CategoryPolicy")


@dataclass
class MonitoredError:
    """
    The structured result of handling an error.

    `internal_details` is for logs and the monitoring sink only. Use
    `to_public_dict()` for anything returned to a client.
    """
    user_facing_message: str
    internal_details: str
    category: ErrorCategory
    severity: Severity
    is_retryable: bool
    timestamp: str
    recovery_action: str | None = None
    tracking_id: str | None = None

    def to_public_dict(self) -> dict[str, Any]:
        """Fields safe to send to the caller."""
        return {
            "message": self.user_facing_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "retryable": self.is_retryable,
            "recovery_action": self.recovery_action,
            "tracking_id": self.tracking_id,
            "timestamp": self.timestamp,
        }


class MonitoringSink(Protocol):
    """
    Destination for captured errors (Sentry, a metrics pipeline, a log).

    Accepts the original error and a context map, returns an optional
    tracking id that is shown to the user as a reference.
    """

    def capture(self, error: Any, context: dict[str, Any]) -> str | None:
        ...


class LoggingSink:
    """Default sink: logs the error and issues a random tracking id."""

    def __init__(self, sink_logger: Logger | None = None):
        self._logger = sink_logger or logger.child("Sink")

    def capture(self, error: Any, context: dict[str, Any]) -> str | None:
        tracking_id = uuid.uuid4().hex
        self._logger.error(
            f"Captured error {tracking_id[:8]}",
            error if isinstance(error, BaseException) else None,
            data={"tracking_id": tracking_id, "context": context},
        )
        return tracking_id


@dataclass(frozen=True)
class ErrorRateAlert:
    """Sent to the monitoring sink when a category crosses the rate threshold."""
    category: ErrorCategory
    count: int
    window_seconds: float

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category.value, "count": self.count, "window_seconds": self.window_seconds}

    def __str__(self) -> str:
        return f"{self.count} {self.category.value} errors within {self.window_seconds:g}s"


RateAlertCallback = Callable[[ErrorCategory, int, float], None]


class ErrorHandler:
    """
    Classifies errors, reports them and watches per-category error rates.

    The rate watch is a detection signal only: it logs, captures an
    ErrorRateAlert on the sink and calls `on_rate_alert` once each time a
    category crosses `rate_threshold` errors within `rate_window_seconds`.
    It never blocks further calls.

    Example:
        handler = ErrorHandler(rate_threshold=5, rate_window_seconds=60)
        monitored = handler.handle(LLMAPIError("boom", status_code=503))
        monitored.category      # ErrorCategory.LLM
        monitored.is_retryable  # True
    """

    def __init__(
        self,
        sink: MonitoringSink | None = None,
        rate_threshold: int = 10,
        rate_window_seconds: float = 60.0,
        on_rate_alert: RateAlertCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sink = sink if sink is not None else LoggingSink()
        self.rate_threshold = rate_threshold
        self.rate_window_seconds = rate_window_seconds
        self.on_rate_alert = on_rate_alert
        self._clock = clock
        self._events: dict[ErrorCategory, deque[float]] = {c: deque() for c in ErrorCategory}
        self._alerting: dict[ErrorCategory, bool] = {c: False for c in ErrorCategory}

    # ==========================================================================
    # Public API
    # ==========================================================================

    def classify(self, error: Any) -> ErrorCategory:
        """Map any value to its ErrorCategory."""
        if isinstance(error, AgentError):
            return _KIND_TO_CATEGORY[error.kind]
        if isinstance(error, (ConnectionError, TimeoutError, httpx.TransportError)):
            return ErrorCategory.NETWORK
        return ErrorCategory.UNKNOWN

    def handle(self, error: Any, context: dict[str, Any] | None = None) -> MonitoredError:
        """
        Process and monitor any error.

        Args:
            error: The error to handle (need not be an exception)
            context: Extra context for monitoring (session id, tool name...)

        Returns:
            MonitoredError with a user-facing message and tracking id
        """
        context = dict(context or {})
        try:
            return self._handle(error, context)
        except Exception as e:  # the handler must always produce a result
            logger.error("Error handler failed while handling an error", e)
            policy = CATEGORY_POLICIES[ErrorCategory.UNKNOWN]
            return MonitoredError(
                user_facing_message=policy.message,
                internal_details=f"Handler failure: {e!r} while handling {error!r}",
                category=ErrorCategory.UNKNOWN,
                severity=policy.severity,
                is_retryable=policy.retryable,
                timestamp=_now_iso(),
                recovery_action=policy.recovery_action,
            )

    def error_counts(self) -> dict[ErrorCategory, int]:
        """Errors per category inside the current rate window."""
        now = self._clock()
        for category in ErrorCategory:
            self._expire(category, now)
        return {category: len(events) for category, events in self._events.items()}

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _handle(self, error: Any, context: dict[str, Any]) -> MonitoredError:
        category = self.classify(error)
        policy = CATEGORY_POLICIES[category]

        message = policy.message
        if category is ErrorCategory.TOOL:
            message = message.format(tool_name=getattr(error, "tool_name", "tool"))

        internal_details = self._describe(error, category, context)

        tracking_id = None
        try:
            tracking_id = self.sink.capture(error, {**context, "category": category.value})
        except Exception as e:
            logger.error("Monitoring sink failed to capture error", e)

        if tracking_id:
            message = f"{message} (Ref: {tracking_id[:8]})"

        self._record(category)

        return MonitoredError(
            user_facing_message=message,
            internal_details=internal_details,
            category=category,
            severity=policy.severity,
            is_retryable=policy.retryable,
            timestamp=_now_iso(),
            recovery_action=policy.recovery_action,
            tracking_id=tracking_id,
        )

    def _describe(self, error: Any, category: ErrorCategory, context: dict[str, Any]) -> str:
        context_str = json.dumps(context, default=str)
        if isinstance(error, AgentError):
            details = json.dumps(error.details, default=str)
            return (
                f"{error.kind.value}: {error.message}\n"
                f"Details: {details}\nContext: {context_str}"
            )
        if isinstance(error, BaseException):
            stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            return (
                f"{category.value} error ({type(error).__name__}): {error}\n"
                f"Context: {context_str}\nStack: {stack}"
            )
        return f"Unknown error occurred: {error!r}\nContext: {context_str}"

    def _expire(self, category: ErrorCategory, now: float) -> None:
        events = self._events[category]
        cutoff = now - self.rate_window_seconds
        while events and events[0] <= cutoff:
            events.popleft()

    def _record(self, category: ErrorCategory) -> None:
        now = self._clock()
        self._expire(category, now)
        self._events[category].append(now)
        count = len(self._events[category])

        if count >= self.rate_threshold:
            if not self._alerting[category]:
                self._alerting[category] = True
                logger.warning(
                    f"Error rate threshold crossed for category {category.value}",
                    {
                        "category": category.value,
                        "count": count,
                        "window_seconds": self.rate_window_seconds,
                    },
                )
                self._report_rate_alert(category, count)
        else:
            self._alerting[category] = False


    def _report_rate_alert(self, category: ErrorCategory, count: int) -> None:
        alert = ErrorRateAlert(category, count, self.rate_window_seconds)
        try:
            self.sink.capture(alert, {"alert": "error_rate", **alert.to_dict()})
        except Exception as e:
            logger.error("Monitoring sink failed to capture rate alert", e)

        if self.on_rate_alert is not None:
            try:
                self.on_rate_alert(category, count, self.rate_window_seconds)
            except Exception as e:
                logger.error("Rate alert callback failed", e)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
