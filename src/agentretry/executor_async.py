r"""Asynchronous retry executor.

This module provides the AsyncRetryExecutor class that awaits an
operation with bounded retries and clamped exponential backoff. The
backoff uses ``asyncio.sleep`` so other tasks keep running while an
operation waits for its next attempt.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import asyncio
import time
from typing import TYPE_CHECKING, TypeVar

from agentretry.callbacks import CallbackManager
from agentretry.executor_core import handle_failure, raise_cancelled, resolve_policy
from agentretry.policy import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from agentretry.callbacks import CallbackConfig

T = TypeVar("T")


class AsyncRetryExecutor:
    """Executes async operations with automatic retry logic.

    Concurrent ``execute`` calls on one instance are independent: each
    runs its own sequential attempt loop, and the policy and callbacks
    are only read.

    Args:
        policy: The default retry policy, used when ``execute`` is called
            without one. Defaults to ``RetryPolicy()``.
        callbacks: Optional lifecycle callbacks.

    Attributes:
        policy: The default retry policy.
        callbacks: Manager for invoking callbacks.

    Example:
        ```pycon
        >>> import asyncio
        >>> from agentretry import AsyncRetryExecutor, RetryPolicy
        >>> async def fetch_odds() -> dict:
        ...     return {"moneyline": -110}
        ...
        >>> executor = AsyncRetryExecutor(RetryPolicy(max_attempts=3))
        >>> asyncio.run(executor.execute(fetch_odds, "fetch odds"))
        {'moneyline': -110}

        ```
    """

    def __init__(
        self, policy: RetryPolicy | None = None, callbacks: CallbackConfig | None = None
    ) -> None:
        self.policy = resolve_policy(policy, RetryPolicy())
        self.callbacks = CallbackManager(callbacks)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(policy={self.policy!r})"

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str,
        policy: RetryPolicy | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """Await ``operation`` until it succeeds or the policy gives up.

        ``operation`` is called anew for every attempt and must return a
        fresh awaitable each time. Task cancellation
        (``asyncio.CancelledError``) is never classified and propagates
        unchanged, whether it happens during an attempt or a backoff.

        Args:
            operation: Zero-argument callable returning an awaitable.
            label: Human-readable name of the operation, used in logs
                and error messages only.
            policy: Optional policy overriding the executor's default.
            cancel_event: Optional event; if it is set before or during
                a backoff, the loop stops with ``RetryCancelledError``.

        Returns:
            The value produced by the first successful attempt.

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
                result = await operation()
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
                await asyncio.sleep(outcome.backoff)
            elif await _wait_for_event(cancel_event, outcome.backoff):
                raise_cancelled(outcome, callbacks=self.callbacks, start_time=start_time)
            attempt += 1


async def _wait_for_event(event: asyncio.Event, timeout: float) -> bool:
    """Wait up to ``timeout`` seconds for ``event``; return whether it is
    set."""
    if event.is_set():
        return True
    try:
        await asyncio.wait_for(event.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        return False
    return True
