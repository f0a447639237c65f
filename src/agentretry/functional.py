r"""Functional entry points to the retry executors.

``retry_call`` and ``retry_call_async`` run a single operation without
keeping an executor around; ``with_retry`` turns a function into one
whose every call is retried.
"""

from __future__ import annotations

__all__ = ["retry_call", "retry_call_async", "with_retry"]

import functools
import inspect
from typing import TYPE_CHECKING, Any, TypeVar

from agentretry.executor import RetryExecutor
from agentretry.executor_async import AsyncRetryExecutor

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from agentretry.callbacks import CallbackConfig
    from agentretry.policy import RetryPolicy

T = TypeVar("T")


def retry_call(
    operation: Callable[[], T],
    label: str,
    policy: RetryPolicy | None = None,
    *,
    callbacks: CallbackConfig | None = None,
) -> T:
    """Run a blocking operation with automatic retry logic.

    Args:
        operation: Zero-argument callable to run.
        label: Human-readable name of the operation.
        policy: Optional retry policy. Defaults to ``RetryPolicy()``.
        callbacks: Optional lifecycle callbacks.

    Returns:
        The value returned by the first successful attempt.

    Example:
        ```pycon
        >>> from agentretry import RetryPolicy, retry_call
        >>> retry_call(lambda: "ok", "ping", RetryPolicy(max_attempts=2))
        'ok'

        ```
    """
    return RetryExecutor(policy, callbacks).execute(operation, label)


async def retry_call_async(
    operation: Callable[[], Awaitable[T]],
    label: str,
    policy: RetryPolicy | None = None,
    *,
    callbacks: CallbackConfig | None = None,
) -> T:
    """Await an async operation with automatic retry logic.

    Args:
        operation: Zero-argument callable returning an awaitable.
        label: Human-readable name of the operation.
        policy: Optional retry policy. Defaults to ``RetryPolicy()``.
        callbacks: Optional lifecycle callbacks.

    Returns:
        The value produced by the first successful attempt.
    """
    return await AsyncRetryExecutor(policy, callbacks).execute(operation, label)


def with_retry(
    label: str | None = None,
    policy: RetryPolicy | None = None,
    *,
    callbacks: CallbackConfig | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate a function so that each call is retried.

    Works with plain functions and coroutine functions. The arguments of
    a call are bound once and reused for every attempt.

    Args:
        label: Name used in logs and errors. Defaults to the qualified
            name of the decorated function.
        policy: Optional retry policy. Defaults to ``RetryPolicy()``.
        callbacks: Optional lifecycle callbacks.

    Returns:
        The decorator.

    Example:
        ```pycon
        >>> from agentretry import RetryPolicy, with_retry
        >>> @with_retry(policy=RetryPolicy(max_attempts=2))
        ... def settle(pick_id: str) -> str:
        ...     return f"settled {pick_id}"
        ...
        >>> settle("p-1")
        'settled p-1'

        ```
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = label if label is not None else func.__qualname__

        if inspect.iscoroutinefunction(func):
            executor_async = AsyncRetryExecutor(policy, callbacks)

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await executor_async.execute(functools.partial(func, *args, **kwargs), name)

            return async_wrapper

        executor = RetryExecutor(policy, callbacks)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return executor.execute(functools.partial(func, *args, **kwargs), name)

        return wrapper

    return decorator
