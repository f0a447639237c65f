r"""Immutable retry policy shared by the retry executors."""

from __future__ import annotations

__all__ = ["RetryPolicy"]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agentretry.backoff import ExponentialBackoff
from agentretry.classify import default_should_retry
from agentretry.config import (
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF,
)
from agentretry.exceptions import ConfigurationError
from agentretry.validation import validate_duration

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration of a retry loop.

    A policy is immutable once built and can be shared by reference
    across threads and concurrent tasks.

    Args:
        max_attempts: Total number of attempts, including the first one.
            Must be >= 1. A value of 1 disables retries.
        initial_backoff: Delay in seconds after the first failed attempt.
            Must be >= 0.
        max_backoff: Upper bound in seconds for any delay. Must be > 0
            and >= initial_backoff.
        should_retry: Predicate deciding whether a failure is retryable.

    Raises:
        ConfigurationError: If any value is invalid.

    Example:
        ```pycon
        >>> from agentretry.policy import RetryPolicy
        >>> policy = RetryPolicy(max_attempts=5, initial_backoff=0.1, max_backoff=0.8)
        >>> [policy.backoff_for(attempt) for attempt in range(1, 6)]
        [0.1, 0.2, 0.4, 0.8, 0.8]

        ```
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF
    max_backoff: float = DEFAULT_MAX_BACKOFF
    should_retry: Callable[[Exception], bool] = default_should_retry
    _backoff: ExponentialBackoff = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            msg = f"max_attempts must be an int, got {self.max_attempts!r}"
            raise ConfigurationError(msg, config_key="max_attempts")
        if self.max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {self.max_attempts}"
            raise ConfigurationError(msg, config_key="max_attempts")
        validate_duration(self.initial_backoff, name="initial_backoff")
        validate_duration(self.max_backoff, name="max_backoff")
        if self.initial_backoff < 0:
            msg = f"initial_backoff must be >= 0, got {self.initial_backoff}"
            raise ConfigurationError(msg, config_key="initial_backoff")
        if self.max_backoff <= 0:
            msg = f"max_backoff must be > 0, got {self.max_backoff}"
            raise ConfigurationError(msg, config_key="max_backoff")
        if self.max_backoff < self.initial_backoff:
            msg = (
                f"max_backoff ({self.max_backoff}) must be >= "
                f"initial_backoff ({self.initial_backoff})"
            )
            raise ConfigurationError(msg, config_key="max_backoff")
        if not callable(self.should_retry):
            msg = f"should_retry must be callable, got {self.should_retry!r}"
            raise ConfigurationError(msg, config_key="should_retry")
        object.__setattr__(
            self,
            "_backoff",
            ExponentialBackoff(initial_delay=self.initial_backoff, max_delay=self.max_backoff),
        )

    def backoff_for(self, attempt: int) -> float:
        """Return the delay in seconds after the given failed attempt.

        Args:
            attempt: The number of the attempt that just failed (1-indexed).

        Returns:
            ``min(initial_backoff * 2 ** (attempt - 1), max_backoff)``.
        """
        return self._backoff.calculate(attempt)
