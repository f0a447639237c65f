r"""Retry predicates deciding which failures are worth another attempt.

A predicate receives the exception raised by one attempt and returns
``True`` when the failure is transient. The executors evaluate it
exactly once per failure.
"""

from __future__ import annotations

__all__ = [
    "RETRYABLE_DATABASE_MARKERS",
    "always_retry",
    "default_should_retry",
    "never_retry",
    "retry_on",
]

from typing import TYPE_CHECKING

import httpx

from agentretry.config import RETRY_STATUS_CODES
from agentretry.exceptions import DatabaseError, NetworkError, OperationTimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable

# Substrings of a database error message that indicate a transient failure
RETRYABLE_DATABASE_MARKERS = ("deadlock", "connection", "timeout")


def default_should_retry(error: Exception) -> bool:
    """Decide whether an error is transient.

    Network and timeout errors are retryable, database errors only when
    they mention a deadlock, a connection problem or a timeout. Raw
    ``httpx`` transport errors and 429/5xx status errors are retryable
    as well. Everything else is not.

    Args:
        error: The exception raised by an attempt.

    Returns:
        ``True`` if the operation should be attempted again.

    Example:
        ```pycon
        >>> from agentretry.classify import default_should_retry
        >>> from agentretry.exceptions import DatabaseError, NetworkError
        >>> default_should_retry(NetworkError("reset", endpoint="https://x"))
        True
        >>> default_should_retry(
        ...     DatabaseError("deadlock detected", operation="update", table="picks")
        ... )
        True
        >>> default_should_retry(
        ...     DatabaseError("unique violation", operation="insert", table="picks")
        ... )
        False
        >>> default_should_retry(KeyError("pick_id"))
        False

        ```
    """
    if isinstance(error, (NetworkError, OperationTimeoutError)):
        return True
    if isinstance(error, DatabaseError):
        message = error.message.lower()
        return any(marker in message for marker in RETRYABLE_DATABASE_MARKERS)
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRY_STATUS_CODES
    return isinstance(error, (httpx.TimeoutException, httpx.TransportError))


def retry_on(*exception_types: type[Exception]) -> Callable[[Exception], bool]:
    """Create a predicate that retries the given exception types only.

    Args:
        *exception_types: The retryable exception types.

    Returns:
        The predicate.

    Raises:
        ValueError: If no exception type is given.

    Example:
        ```pycon
        >>> from agentretry.classify import retry_on
        >>> predicate = retry_on(ConnectionError, TimeoutError)
        >>> predicate(ConnectionError())
        True
        >>> predicate(ValueError())
        False

        ```
    """
    if not exception_types:
        msg = "retry_on requires at least one exception type"
        raise ValueError(msg)

    def predicate(error: Exception) -> bool:
        return isinstance(error, exception_types)

    return predicate


def always_retry(error: Exception) -> bool:  # noqa: ARG001
    """Retry every failure."""
    return True


def never_retry(error: Exception) -> bool:  # noqa: ARG001
    """Retry no failure."""
    return False
