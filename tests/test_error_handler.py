"""
Unit tests for the error taxonomy and ErrorHandler.

Covers classification, the category policy table, monitoring sink
integration and error-rate detection.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import httpx
import pytest

from agentcore.errors import (
    AgentSystemError,
    AIGovernanceError,
    ContextWindowExceededError,
    ErrorCategory,
    ErrorHandler,
    ErrorRateAlert,
    InputValidationError,
    LLMAPIError,
    MemoryStorageError,
    Severity,
    ToolExecutionError,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class RecordingSink:
    def __init__(self, tracking_id: str | None = "abcdef1234567890") -> None:
        self.tracking_id = tracking_id
        self.captured: list[tuple[Any, dict[str, Any]]] = []

    def capture(self, error: Any, context: dict[str, Any]) -> str | None:
        self.captured.append((error, context))
        return self.tracking_id


class TestClassification:
    """Tests for the category / severity / retryable table."""

    @pytest.mark.parametrize(
        ("error", "category", "severity", "retryable"),
        [
            (InputValidationError("empty"), ErrorCategory.INPUT, Severity.WARNING, False),
            (MemoryStorageError("disk"), ErrorCategory.MEMORY, Severity.CRITICAL, False),
            (ToolExecutionError("boom", "calculator"), ErrorCategory.TOOL, Severity.ERROR, False),
            (LLMAPIError("down", status_code=503), ErrorCategory.LLM, Severity.ERROR, True),
            (ContextWindowExceededError("big", 5000, 4000), ErrorCategory.CONTEXT, Severity.WARNING, True),
            (AIGovernanceError("blocked", "blocked_input"), ErrorCategory.GOVERNANCE, Severity.WARNING, False),
            (AgentSystemError("loop"), ErrorCategory.SYSTEM, Severity.CRITICAL, True),
            (ConnectionError("reset"), ErrorCategory.NETWORK, Severity.ERROR, True),
            (ValueError("odd"), ErrorCategory.UNKNOWN, Severity.ERROR, False),
        ],
    )
    def test_documented_policy(
        self, error: Exception, category: ErrorCategory, severity: Severity, retryable: bool
    ) -> None:
        """Each error type should map to its documented policy."""
        monitored = ErrorHandler(sink=RecordingSink()).handle(error)

        assert monitored.category is category
        assert monitored.severity is severity
        assert monitored.is_retryable is retryable

    def test_httpx_transport_error_is_network(self) -> None:
        """Untyped httpx transport failures should be classified as Network."""
        error = httpx.ConnectError("refused", request=httpx.Request("POST", "https://example.com"))
        assert ErrorHandler().classify(error) is ErrorCategory.NETWORK

    @pytest.mark.parametrize("value", ["a plain string", None, 42, {"code": 1}])
    def test_non_exceptions_never_raise(self, value: Any) -> None:
        """Non-exception values should still produce an Unknown MonitoredError."""
        monitored = ErrorHandler(sink=RecordingSink()).handle(value)

        assert monitored.category is ErrorCategory.UNKNOWN
        assert monitored.user_facing_message

    def test_tool_message_names_the_tool(self) -> None:
        """The Tool message template should include the tool name."""
        monitored = ErrorHandler(sink=RecordingSink(None)).handle(ToolExecutionError("bad", "weather"))
        assert "(weather)" in monitored.user_facing_message


class TestMonitoring:
    """Tests for sink integration and what the caller gets to see."""

    def test_tracking_reference_appended(self) -> None:
        """The first 8 chars of the tracking id should be shown to the user."""
        monitored = ErrorHandler(sink=RecordingSink("0123456789abcdef")).handle(LLMAPIError("x"))

        assert monitored.tracking_id == "0123456789abcdef"
        assert monitored.user_facing_message.endswith("(Ref: 01234567)")

    def test_sink_receives_error_and_context(self) -> None:
        """The sink should get the original error and the context with its category."""
        sink = RecordingSink()
        error = LLMAPIError("x")
        ErrorHandler(sink=sink).handle(error, {"session_id": "s1"})

        captured_error, context = sink.captured[0]
        assert captured_error is error
        assert context == {"session_id": "s1", "category": "LLM"}

    def test_sink_failure_is_contained(self) -> None:
        """A failing sink should not stop the handler from returning."""
        sink = Mock()
        sink.capture.side_effect = RuntimeError("sink down")

        monitored = ErrorHandler(sink=sink).handle(InputValidationError("empty"))

        assert monitored.category is ErrorCategory.INPUT
        assert monitored.tracking_id is None
        assert "Ref:" not in monitored.user_facing_message

    def test_internal_details_stay_internal(self) -> None:
        """Internal messages should appear in internal_details only."""
        monitored = ErrorHandler(sink=RecordingSink()).handle(
            LLMAPIError("secret upstream detail", status_code=500), {"session_id": "s1"}
        )

        assert "secret upstream detail" in monitored.internal_details
        assert "secret upstream detail" not in monitored.user_facing_message
        public = monitored.to_public_dict()
        assert "internal_details" not in public
        assert public["category"] == "LLM"
        assert public["retryable"] is True


class TestErrorRate:
    """Tests for the per-category rolling error-rate signal."""

    def test_alert_once_per_crossing(self) -> None:
        """The callback should fire once when the threshold is crossed."""
        clock = FakeClock()
        alerts: list[tuple[ErrorCategory, int, float]] = []
        handler = ErrorHandler(
            sink=RecordingSink(),
            rate_threshold=3,
            rate_window_seconds=60,
            on_rate_alert=lambda c, n, w: alerts.append((c, n, w)),
            clock=clock,
        )

        for _ in range(5):
            handler.handle(LLMAPIError("x"))

        assert alerts == [(ErrorCategory.LLM, 3, 60)]

    def test_alert_reaches_sink(self) -> None:
        """Without a callback the crossing should still be captured by the sink."""
        sink = RecordingSink()
        handler = ErrorHandler(sink=sink, rate_threshold=2, rate_window_seconds=30, clock=FakeClock())

        for _ in range(3):
            handler.handle(LLMAPIError("x"))

        alerts = [(error, context) for error, context in sink.captured if isinstance(error, ErrorRateAlert)]
        assert len(sink.captured) == 4
        assert len(alerts) == 1
        alert, context = alerts[0]
        assert alert == ErrorRateAlert(ErrorCategory.LLM, 2, 30)
        assert context == {"alert": "error_rate", "category": "LLM", "count": 2, "window_seconds": 30}
        assert sink.captured[2] == alerts[0]

    def test_sink_failure_on_alert_is_contained(self) -> None:
        sink = Mock()
        sink.capture.side_effect = RuntimeError("sink down")
        alerts: list[Any] = []
        handler = ErrorHandler(sink=sink, rate_threshold=1, on_rate_alert=lambda *args: alerts.append(args), clock=FakeClock())

        monitored = handler.handle(LLMAPIError("x"))

        assert monitored.category is ErrorCategory.LLM
        assert alerts == [(ErrorCategory.LLM, 1, 60.0)]

    def test_alert_rearms_after_window(self) -> None:
        """After the window drains, a new crossing should alert again."""
        clock = FakeClock()
        alerts: list[Any] = []
        handler = ErrorHandler(
            sink=RecordingSink(),
            rate_threshold=2,
            rate_window_seconds=10,
            on_rate_alert=lambda *args: alerts.append(args),
            clock=clock,
        )

        handler.handle(LLMAPIError("x"))
        handler.handle(LLMAPIError("x"))
        clock.now += 30
        handler.handle(LLMAPIError("x"))  # window drained, count back to 1
        handler.handle(LLMAPIError("x"))

        assert len(alerts) == 2

    def test_categories_counted_separately(self) -> None:
        """Counts should be kept per category inside the window."""
        clock = FakeClock()
        handler = ErrorHandler(sink=RecordingSink(), rate_window_seconds=10, clock=clock)

        handler.handle(LLMAPIError("x"))
        handler.handle(InputValidationError("y"))
        handler.handle(InputValidationError("z"))

        counts = handler.error_counts()
        assert counts[ErrorCategory.LLM] == 1
        assert counts[ErrorCategory.INPUT] == 2

        clock.now += 11
        assert handler.error_counts()[ErrorCategory.INPUT] == 0

    def test_alert_does_not_block(self) -> None:
        """Errors past the threshold should still be handled normally."""
        handler = ErrorHandler(sink=RecordingSink(), rate_threshold=1, clock=FakeClock())

        first = handler.handle(LLMAPIError("x"))
        second = handler.handle(LLMAPIError("x"))

        assert first.category is second.category is ErrorCategory.LLM


class TestErrorTypes:
    """Tests for the typed error constructors."""

    def test_llm_error_carries_status(self) -> None:
        error = LLMAPIError("unauthorized", status_code=401)
        assert error.status_code == 401
        assert error.details["status_code"] == 401
        assert error.message == "LLM API Error: unauthorized"

    def test_context_error_carries_counts(self) -> None:
        error = ContextWindowExceededError("too long", token_count=5000, max_tokens=4000)
        assert (error.token_count, error.max_tokens) == (5000, 4000)
        assert "Token count: 5000" in error.message

    def test_tool_error_carries_name(self) -> None:
        error = ToolExecutionError("failed", "getTime")
        assert error.tool_name == "getTime"
        assert error.message == "Error executing tool getTime: failed"
