r"""Synchronous retry executor.

This module provides the RetryExecutor class that runs a blocking
operation with bounded retries and clamped exponential backoff.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import time
from typing import TYPE_CHECKING, TypeVar

from agentretry.callbacks import CallbackManager
from agentretry.executor_core import handle_failure, raise_cancelled, resolve_policy
from agentretry.policy import RetryPolicy

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

    from agentretry.callbacks import CallbackConfig

T = TypeVar("T")


class RetryExecutor:
    """Executes blocking operations with automatic retry logic.

    The executor holds no mutable state between calls: one instance can
    serve many threads at once, each ``execute`` call running its own
    sequential attempt loop.

    Args:
        policy: The default retry policy, used when ``execute`` is called
            without one. Defaults to ``RetryPolicy()``.
        callbacks: Optional lifecycle callbacks.

    Attributes:
        policy: The default retry policy.
        callbacks: Manager for invoking callbacks.

    Example:
        ```pycon
        >>> from agentretry import RetryExecutor, RetryPolicy
        >>> executor = RetryExecutor(RetryPolicy(max_attempts=3, initial_backoff=0.01))
        >>> executor.execute(lambda: 42, "answer")
        42

        ```
    """

    def __init__(
        self, policy: RetryPolicy | None = None, callbacks: CallbackConfig | None = None
    ) -> None:
        self.policy = resolve_policy(policy, RetryPolicy())
        self.callbacks = CallbackManager(callbacks)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(policy={self.policy!r})"

    def execute(
        self,
        operation: Callable[[], T],
        label: str,
        policy: RetryPolicy | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> T:
        """Run ``operation`` until it succeeds or the policy gives up.

        The operation may be invoked several times, so it must be safe
        to re-invoke. Between a retryable failure and the next attempt
        the calling thread sleeps for ``policy.backoff_for(attempt)``
        seconds; there is no sleep after the final attempt or after a
        non-retryable failure.

        Args:
            operation: Zero-argument callable to run.
            label: Human-readable name of the operation, used in logs
                and error messages only.
            policy: Optional policy overriding the executor's default.
            cancel_event: Optional event; if it is set before or during
                a backoff, the loop stops with ``RetryCancelledError``.

        Returns:
            The value returned by the first successful attempt.

        Raises:
            ConfigurationError: If ``policy`` is not a RetryPolicy.
            Exception: The original error of an attempt whose failure is
                not retryable.
            TerminalError: If every allowed attempt failed.
            RetryCancelledError: If ``cancel_event`` was set while
                backing off.
        """
        policy = resolve_policy(policy, self.policy)
        start_time = time.monotonic()
        attempt = 1
        while True:
            self.callbacks.on_attempt(label, attempt, policy.max_attempts)
            try:
                result = operation()
            except Exception as exc:
                outcome = handle_failure(
                    exc,
                    label=label,
                    attempt=attempt,
                    policy=policy,
                    callbacks=self.callbacks,
                    start_time=start_time,
                )
            else:
                self.callbacks.on_success(label, attempt, policy.max_attempts, result, start_time)
                return result

            if cancel_event is None:
                time.sleep(outcome.backoff)
            elif cancel_event.wait(outcome.backoff):
                raise_cancelled(outcome, callbacks=self.callbacks, start_time=start_time)
            attempt += 1
