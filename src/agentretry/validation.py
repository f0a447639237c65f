r"""Parameter validation utilities shared by policies and channels.

This module checks durations before they reach ``time.sleep``,
``asyncio.sleep`` or an HTTP timeout, so that a bad value fails when
the configuration is built rather than in the middle of a retry loop.
"""

from __future__ import annotations

__all__ = ["validate_duration"]

import math

from agentretry.exceptions import ConfigurationError


def validate_duration(value: float, *, name: str) -> None:
    """Validate that a duration is a finite real number of seconds.

    Range checks (``>= 0``, ``> 0``) are left to the caller.

    Args:
        value: The duration to check.
        name: The name of the parameter, used as ``config_key``.

    Raises:
        ConfigurationError: If the value is not an int or a float, or
            if it is NaN or infinite.

    Example:
        ```pycon
        >>> from agentretry.validation import validate_duration
        >>> validate_duration(0.5, name="initial_backoff")
        >>> validate_duration(float("nan"), name="initial_backoff")  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        agentretry.exceptions.ConfigurationError: initial_backoff must be finite, got nan

        ```
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{name} must be a number, got {value!r}"
        raise ConfigurationError(msg, config_key=name)
    if not math.isfinite(value):
        msg = f"{name} must be finite, got {value}"
        raise ConfigurationError(msg, config_key=name)
