r"""Unit tests for the exception taxonomy."""

from __future__ import annotations

import pytest
from coola.equality import objects_are_equal

from agentretry.exceptions import (
    AgentError,
    BaseError,
    ConfigurationError,
    DatabaseError,
    NetworkError,
    OperationTimeoutError,
    RetryCancelledError,
    TerminalError,
    ValidationError,
)


def test_base_error() -> None:
    error = BaseError("boom", code="UNKNOWN")
    assert str(error) == "boom"
    assert error.message == "boom"
    assert error.code == "UNKNOWN"
    assert error.details == {}


def test_base_error_details_are_copied() -> None:
    details = {"step": 1}
    error = BaseError("boom", code="UNKNOWN", details=details)
    details["step"] = 2
    assert error.details == {"step": 1}


@pytest.mark.parametrize(
    ("error", "code", "details"),
    [
        (
            AgentError("crashed", agent_name="FeedAgent", details={"run": 3}),
            "AGENT_ERROR",
            {"agent_name": "FeedAgent", "run": 3},
        ),
        (
            DatabaseError("lost", operation="query", table="picks"),
            "DATABASE_ERROR",
            {"operation": "query", "table": "picks"},
        ),
        (
            ConfigurationError("missing", config_key="DISCORD_WEBHOOK"),
            "CONFIG_ERROR",
            {"config_key": "DISCORD_WEBHOOK"},
        ),
        (
            ValidationError("invalid", field="email", details={"value": "not-an-email"}),
            "VALIDATION_ERROR",
            {"field": "email", "value": "not-an-email"},
        ),
        (
            NetworkError("reset", endpoint="https://discord.com"),
            "NETWORK_ERROR",
            {"endpoint": "https://discord.com"},
        ),
        (
            OperationTimeoutError("slow", operation="fetch odds", timeout=5.0),
            "TIMEOUT_ERROR",
            {"operation": "fetch odds", "timeout": 5.0},
        ),
    ],
)
def test_error_codes_and_details(error: BaseError, code: str, details: dict) -> None:
    assert isinstance(error, BaseError)
    assert error.code == code
    assert objects_are_equal(error.details, details)


def test_configuration_error_is_value_error() -> None:
    assert isinstance(ConfigurationError("x", config_key="k"), ValueError)


##################################
#     Tests for TerminalError    #
##################################


def test_terminal_error() -> None:
    cause = ConnectionError("x")
    error = TerminalError(label="fetch odds", attempts=3, max_attempts=3, last_error=cause)
    assert str(error) == "fetch odds failed after 3 attempts (max 3): x"
    assert error.code == "RETRY_ERROR"
    assert error.label == "fetch odds"
    assert error.attempts == 3
    assert error.max_attempts == 3
    assert error.last_error is cause
    assert error.original_message == "x"
    assert objects_are_equal(
        error.details,
        {"label": "fetch odds", "attempts": 3, "max_attempts": 3, "original_error": "x"},
    )


def test_retry_cancelled_error_is_not_terminal_error() -> None:
    cause = OSError("down")
    error = RetryCancelledError(label="notify slack", attempts=2, last_error=cause)
    assert not isinstance(error, TerminalError)
    assert str(error) == "notify slack was cancelled after 2 attempts"
    assert error.code == "RETRY_CANCELLED"
    assert error.last_error is cause


def test_retry_cancelled_error_without_last_error() -> None:
    assert RetryCancelledError(label="op", attempts=0).last_error is None
