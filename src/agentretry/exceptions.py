r"""Exception taxonomy shared by the retry core and the agents.

Every error carries a short machine-readable ``code`` and a ``details``
mapping so callers can log or persist failures without parsing
messages. ``TerminalError`` and ``RetryCancelledError`` are produced by
the retry executors; the other classes are raised by collaborators (row
stores, notification channels) and inspected by retry predicates.
"""

from __future__ import annotations

__all__ = [
    "AgentError",
    "BaseError",
    "ConfigurationError",
    "DatabaseError",
    "NetworkError",
    "OperationTimeoutError",
    "RetryCancelledError",
    "TerminalError",
    "ValidationError",
]

from typing import Any


class BaseError(Exception):
    """Base class for all errors raised by the platform.

    Args:
        message: A descriptive error message.
        code: A short, stable error code (e.g. ``"NETWORK_ERROR"``).
        details: Optional structured context about the error.

    Example:
        ```pycon
        >>> from agentretry.exceptions import BaseError
        >>> error = BaseError("boom", code="UNKNOWN", details={"step": 2})
        >>> error.code
        'UNKNOWN'
        >>> error.details
        {'step': 2}

        ```
    """

    def __init__(
        self, message: str, *, code: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = dict(details) if details else {}


class AgentError(BaseError):
    """Raised when an agent fails outside of any specific collaborator."""

    def __init__(
        self, message: str, *, agent_name: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message, code="AGENT_ERROR", details={"agent_name": agent_name, **(details or {})}
        )
        self.agent_name = agent_name


class DatabaseError(BaseError):
    """Raised when a row store operation fails.

    Args:
        message: A descriptive error message.
        operation: The store operation (``"query"``, ``"insert"``,
            ``"update"``).
        table: The table the operation targeted.
        details: Optional structured context about the error.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        table: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code="DATABASE_ERROR",
            details={"operation": operation, "table": table, **(details or {})},
        )
        self.operation = operation
        self.table = table


class ConfigurationError(BaseError, ValueError):
    """Raised for invalid configuration, such as an invalid retry policy.

    Configuration errors are detected before any work is attempted and
    are never retried.

    Example:
        ```pycon
        >>> from agentretry.exceptions import ConfigurationError
        >>> error = ConfigurationError("must be >= 1", config_key="max_attempts")
        >>> error.config_key
        'max_attempts'
        >>> isinstance(error, ValueError)
        True

        ```
    """

    def __init__(
        self, message: str, *, config_key: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message, code="CONFIG_ERROR", details={"config_key": config_key, **(details or {})}
        )
        self.config_key = config_key


class ValidationError(BaseError):
    """Raised when input data is rejected."""

    def __init__(
        self, message: str, *, field: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message, code="VALIDATION_ERROR", details={"field": field, **(details or {})}
        )
        self.field = field


class NetworkError(BaseError):
    """Raised when a remote endpoint cannot be reached or answers with a
    transient failure."""

    def __init__(
        self, message: str, *, endpoint: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message, code="NETWORK_ERROR", details={"endpoint": endpoint, **(details or {})}
        )
        self.endpoint = endpoint


class OperationTimeoutError(BaseError):
    """Raised when an operation does not complete in time.

    Args:
        message: A descriptive error message.
        operation: The name of the operation that timed out.
        timeout: The timeout that was exceeded, in seconds.
        details: Optional structured context about the error.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        timeout: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code="TIMEOUT_ERROR",
            details={"operation": operation, "timeout": timeout, **(details or {})},
        )
        self.operation = operation
        self.timeout = timeout


class TerminalError(BaseError):
    """Raised once a retryable operation has used up all its attempts.

    The last underlying error is stored in ``last_error`` and also chained
    as ``__cause__`` by the executors.

    Args:
        label: The diagnostic label of the operation.
        attempts: The number of attempts made.
        max_attempts: The configured maximum number of attempts.
        last_error: The error raised by the final attempt.

    Example:
        ```pycon
        >>> from agentretry.exceptions import TerminalError
        >>> error = TerminalError(
        ...     label="fetch odds", attempts=3, max_attempts=3, last_error=OSError("reset")
        ... )
        >>> str(error)
        'fetch odds failed after 3 attempts (max 3): reset'
        >>> error.original_message
        'reset'

        ```
    """

    def __init__(
        self, *, label: str, attempts: int, max_attempts: int, last_error: Exception
    ) -> None:
        super().__init__(
            f"{label} failed after {attempts} attempts (max {max_attempts}): {last_error}",
            code="RETRY_ERROR",
            details={
                "label": label,
                "attempts": attempts,
                "max_attempts": max_attempts,
                "original_error": str(last_error),
            },
        )
        self.label = label
        self.attempts = attempts
        self.max_attempts = max_attempts
        self.last_error = last_error

    @property
    def original_message(self) -> str:
        """The message of the last underlying error."""
        return str(self.last_error)


class RetryCancelledError(BaseError):
    """Raised when a retry loop is cancelled while backing off.

    This is deliberately not a ``TerminalError``: the attempt budget was
    not exhausted.
    """

    def __init__(
        self, *, label: str, attempts: int, last_error: Exception | None = None
    ) -> None:
        super().__init__(
            f"{label} was cancelled after {attempts} attempts",
            code="RETRY_CANCELLED",
            details={"label": label, "attempts": attempts},
        )
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
