r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

import math

from agentretry.backoff.base import BaseBackoffStrategy
from agentretry.exceptions import ConfigurationError
from agentretry.validation import validate_duration


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy with an upper clamp.

    Calculates delay as: min(initial_delay * (2 ** (attempt - 1)), max_delay).

    Args:
        initial_delay: The delay after the first failed attempt, in seconds.
        max_delay: The upper bound for any delay, in seconds.

    Example:
        ```pycon
        >>> from agentretry.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(initial_delay=0.1, max_delay=0.8)
        >>> [backoff.calculate(attempt) for attempt in range(1, 6)]
        [0.1, 0.2, 0.4, 0.8, 0.8]

        ```
    """

    def __init__(self, initial_delay: float = 1.0, max_delay: float = 30.0) -> None:
        validate_duration(initial_delay, name="initial_delay")
        validate_duration(max_delay, name="max_delay")
        if initial_delay < 0:
            msg = f"initial_delay must be non-negative, got {initial_delay}"
            raise ConfigurationError(msg, config_key="initial_delay")
        if max_delay <= 0:
            msg = f"max_delay must be positive, got {max_delay}"
            raise ConfigurationError(msg, config_key="max_delay")

        self.initial_delay = initial_delay
        self.max_delay = max_delay

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(initial_delay={self.initial_delay}, "
            f"max_delay={self.max_delay})"
        )

    def calculate(self, attempt: int) -> float:
        """Calculate exponential backoff delay.

        Args:
            attempt: The number of the attempt that just failed (1-indexed).

        Returns:
            The calculated delay: initial_delay * (2 ** (attempt - 1)),
            capped at max_delay.

        Raises:
            ValueError: If attempt is lower than 1.
        """
        if attempt < 1:
            msg = f"attempt must be >= 1, got {attempt}"
            raise ValueError(msg)
        try:
            delay = math.ldexp(self.initial_delay, attempt - 1)
        except OverflowError:
            return self.max_delay
        return min(delay, self.max_delay)
