r"""Shared core logic for retry executors.

This module provides the helper functions used by both the synchronous
and the asynchronous retry executors: policy resolution, failure
classification and the construction of terminal and cancellation
errors. The executors only differ in how they invoke the operation and
how they sleep.
"""

from __future__ import annotations

__all__ = ["handle_failure", "raise_cancelled", "resolve_policy"]

import logging
from typing import TYPE_CHECKING, NoReturn

from agentretry.callbacks import AttemptOutcome
from agentretry.exceptions import ConfigurationError, RetryCancelledError, TerminalError
from agentretry.policy import RetryPolicy
from agentretry.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from agentretry.callbacks import CallbackManager

logger: logging.Logger = logging.getLogger(__name__)


def resolve_policy(policy: RetryPolicy | None, default: RetryPolicy) -> RetryPolicy:
    """Return the policy to use for one execution.

    Args:
        policy: The per-call policy, if any.
        default: The executor's default policy.

    Returns:
        ``policy`` if given, ``default`` otherwise.

    Raises:
        ConfigurationError: If the selected object is not a RetryPolicy.
    """
    selected = default if policy is None else policy
    if not isinstance(selected, RetryPolicy):
        msg = f"policy must be a RetryPolicy, got {type(selected).__qualname__}"
        raise ConfigurationError(msg, config_key="policy")
    return selected


def handle_failure(
    error: Exception,
    *,
    label: str,
    attempt: int,
    policy: RetryPolicy,
    callbacks: CallbackManager,
    start_time: float,
) -> AttemptOutcome:
    """Classify a failed attempt and decide what happens next.

    The failure is classified exactly once with ``policy.should_retry``.
    A non-retryable error is re-raised unchanged, except when the policy
    allows a single attempt: then every failure is wrapped into a
    ``TerminalError``, as is the last retryable failure of any policy.
    Otherwise the outcome of the attempt, including the backoff before
    the next one, is returned.

    Args:
        error: The exception raised by the attempt.
        label: The diagnostic label of the operation.
        attempt: The attempt that failed (1-indexed).
        policy: The retry policy of this execution.
        callbacks: The callback manager of the executor.
        start_time: The ``time.monotonic()`` value when execution started.

    Returns:
        The outcome of the attempt if it should be retried.

    Raises:
        Exception: The original error, if it is not retryable.
        TerminalError: If no attempt is left.
    """
    retryable = bool(policy.should_retry(error))
    error_type = type(error).__name__

    if not retryable and policy.max_attempts > 1:
        log_structured(
            logger,
            logging.DEBUG,
            f"{label}: non-retryable {error_type} on attempt {attempt}/{policy.max_attempts}",
            label=label,
            attempt=attempt,
            max_attempts=policy.max_attempts,
            error_type=error_type,
        )
        callbacks.on_failure(label, attempt, policy.max_attempts, error, retryable, start_time)
        raise error

    if attempt >= policy.max_attempts:
        terminal = TerminalError(
            label=label,
            attempts=attempt,
            max_attempts=policy.max_attempts,
            last_error=error,
        )
        log_structured(
            logger,
            logging.WARNING,
            str(terminal),
            label=label,
            attempt=attempt,
            max_attempts=policy.max_attempts,
            error_type=error_type,
        )
        callbacks.on_failure(label, attempt, policy.max_attempts, terminal, retryable, start_time)
        raise terminal from error

    outcome = AttemptOutcome(
        label=label,
        attempt=attempt,
        max_attempts=policy.max_attempts,
        error=error,
        backoff=policy.backoff_for(attempt),
    )
    log_structured(
        logger,
        logging.DEBUG,
        f"{label}: {error_type} on attempt {attempt}/{policy.max_attempts}, "
        f"retrying in {outcome.backoff:.3f}s",
        label=label,
        attempt=attempt,
        max_attempts=policy.max_attempts,
        backoff=outcome.backoff,
        error_type=error_type,
    )
    callbacks.on_retry(outcome)
    return outcome


def raise_cancelled(
    outcome: AttemptOutcome, *, callbacks: CallbackManager, start_time: float
) -> NoReturn:
    """Raise the error that ends a retry loop cancelled during backoff.

    Args:
        outcome: The outcome of the last failed attempt.
        callbacks: The callback manager of the executor.
        start_time: The ``time.monotonic()`` value when execution started.

    Raises:
        RetryCancelledError: Always.
    """
    error = RetryCancelledError(
        label=outcome.label, attempts=outcome.attempt, last_error=outcome.error
    )
    log_structured(
        logger,
        logging.INFO,
        str(error),
        label=outcome.label,
        attempt=outcome.attempt,
        max_attempts=outcome.max_attempts,
    )
    callbacks.on_failure(
        outcome.label, outcome.attempt, outcome.max_attempts, error, True, start_time
    )
    raise error from outcome.error
