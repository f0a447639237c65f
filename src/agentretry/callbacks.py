r"""Callback types and data structures for observability.

This module lets callers hook into the retry lifecycle for logging,
metrics or alerting. Four hooks are available:

- on_attempt: Called before each attempt
- on_retry: Called after a retryable failure, before the backoff delay
- on_success: Called when an attempt succeeds
- on_failure: Called when the executor gives up (non-retryable error,
  exhausted attempts or cancellation)

Callbacks run synchronously inside the retry loop. They are caller
code: an exception raised by a callback propagates to the caller.

Example:
    ```pycon
    >>> from agentretry.callbacks import AttemptOutcome, CallbackConfig
    >>> def log_retry(outcome: AttemptOutcome) -> None:
    ...     print(f"{outcome.label}: retry in {outcome.backoff}s")
    ...
    >>> callbacks = CallbackConfig(on_retry=log_retry)

    ```
"""

from __future__ import annotations

__all__ = [
    "AttemptInfo",
    "AttemptOutcome",
    "CallbackConfig",
    "CallbackManager",
    "FailureInfo",
    "SuccessInfo",
]

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class AttemptInfo:
    """Information passed to on_attempt callback.

    Attributes:
        label: The diagnostic label of the operation.
        attempt: The attempt about to start (1-indexed).
        max_attempts: The configured maximum number of attempts.
    """

    label: str
    attempt: int
    max_attempts: int


@dataclass(frozen=True)
class AttemptOutcome:
    """The outcome of one failed, retryable attempt.

    Attributes:
        label: The diagnostic label of the operation.
        attempt: The attempt that failed (1-indexed).
        max_attempts: The configured maximum number of attempts.
        error: The exception raised by the attempt.
        backoff: The delay in seconds before the next attempt.
    """

    label: str
    attempt: int
    max_attempts: int
    error: Exception
    backoff: float


@dataclass(frozen=True)
class SuccessInfo:
    """Information passed to on_success callback.

    Attributes:
        label: The diagnostic label of the operation.
        attempt: The attempt that succeeded (1-indexed).
        max_attempts: The configured maximum number of attempts.
        result: The value returned by the operation.
        total_time: Total time spent on all attempts including backoff (seconds).
    """

    label: str
    attempt: int
    max_attempts: int
    result: Any
    total_time: float


@dataclass(frozen=True)
class FailureInfo:
    """Information passed to on_failure callback.

    Attributes:
        label: The diagnostic label of the operation.
        attempt: The last attempt made (1-indexed).
        max_attempts: The configured maximum number of attempts.
        error: The error surfaced to the caller.
        retryable: Whether the last failure was classified as retryable.
        total_time: Total time spent on all attempts including backoff (seconds).
    """

    label: str
    attempt: int
    max_attempts: int
    error: Exception
    retryable: bool
    total_time: float


@dataclass(frozen=True)
class CallbackConfig:
    """Configuration for callbacks.

    Attributes:
        on_attempt: Optional callback invoked before each attempt.
        on_retry: Optional callback invoked after each retryable failure.
        on_success: Optional callback invoked when an attempt succeeds.
        on_failure: Optional callback invoked when the executor gives up.
    """

    on_attempt: Callable[[AttemptInfo], None] | None = None
    on_retry: Callable[[AttemptOutcome], None] | None = None
    on_success: Callable[[SuccessInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None


class CallbackManager:
    """Manages callback invocations during the retry lifecycle.

    Attributes:
        callbacks: Configuration containing callback functions for lifecycle events.
    """

    def __init__(self, callbacks: CallbackConfig | None = None) -> None:
        self.callbacks = callbacks if callbacks is not None else CallbackConfig()

    def on_attempt(self, label: str, attempt: int, max_attempts: int) -> None:
        if self.callbacks.on_attempt is not None:
            self.callbacks.on_attempt(
                AttemptInfo(label=label, attempt=attempt, max_attempts=max_attempts)
            )

    def on_retry(self, outcome: AttemptOutcome) -> None:
        if self.callbacks.on_retry is not None:
            self.callbacks.on_retry(outcome)

    def on_success(
        self, label: str, attempt: int, max_attempts: int, result: Any, start_time: float
    ) -> None:
        """Invoke on_success callback.

        Args:
            label: The diagnostic label of the operation.
            attempt: The attempt that succeeded (1-indexed).
            max_attempts: The configured maximum number of attempts.
            result: The value returned by the operation.
            start_time: The ``time.monotonic()`` value when execution started.
        """
        if self.callbacks.on_success is not None:
            self.callbacks.on_success(
                SuccessInfo(
                    label=label,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    result=result,
                    total_time=time.monotonic() - start_time,
                )
            )

    def on_failure(
        self,
        label: str,
        attempt: int,
        max_attempts: int,
        error: Exception,
        retryable: bool,
        start_time: float,
    ) -> None:
        """Invoke on_failure callback.

        Args:
            label: The diagnostic label of the operation.
            attempt: The last attempt made (1-indexed).
            max_attempts: The configured maximum number of attempts.
            error: The error surfaced to the caller.
            retryable: Whether the last failure was classified as retryable.
            start_time: The ``time.monotonic()`` value when execution started.
        """
        if self.callbacks.on_failure is not None:
            self.callbacks.on_failure(
                FailureInfo(
                    label=label,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=error,
                    retryable=retryable,
                    total_time=time.monotonic() - start_time,
                )
            )
