r"""Default configuration values and environment-based policy loading.

Retry policies are never fetched from process-wide state: callers build
one explicitly (or load one with ``load_policy``) and pass it to the
executor that needs it.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_ENV_PREFIX",
    "DEFAULT_INITIAL_BACKOFF",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_BACKOFF",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "load_policy",
]

import logging
import os
from typing import TYPE_CHECKING

from agentretry.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from agentretry.policy import RetryPolicy

logger: logging.Logger = logging.getLogger(__name__)

# Total number of attempts, including the first one
DEFAULT_MAX_ATTEMPTS = 3

# Delay in seconds after the first failed attempt
# With 1.0 and a 30.0 clamp: 1s, 2s, 4s, 8s, 16s, 30s, 30s, ...
DEFAULT_INITIAL_BACKOFF = 1.0

# Upper bound in seconds for any single backoff delay
DEFAULT_MAX_BACKOFF = 30.0

# Default timeout in seconds for outbound webhook calls
DEFAULT_TIMEOUT = 10.0

# HTTP status codes that indicate a transient failure
# 429: Too Many Requests - Rate limiting
# 500: Internal Server Error - Temporary server issue
# 502: Bad Gateway - Upstream server error
# 503: Service Unavailable - Server overloaded or down
# 504: Gateway Timeout - Upstream server timeout
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)

DEFAULT_ENV_PREFIX = "AGENTRETRY_"


def _read_value(
    environ: Mapping[str, str], key: str, parse: Callable[[str], float], default: float
) -> float:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError as exc:
        msg = f"invalid value for {key}: {raw!r}"
        raise ConfigurationError(msg, config_key=key) from exc


def load_policy(
    environ: Mapping[str, str] | None = None,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    should_retry: Callable[[Exception], bool] | None = None,
) -> RetryPolicy:
    """Build a retry policy from environment variables.

    The following keys are read, each optional:
    ``<prefix>MAX_ATTEMPTS``, ``<prefix>INITIAL_BACKOFF`` and
    ``<prefix>MAX_BACKOFF`` (backoffs in seconds).

    Args:
        environ: The mapping to read from. Defaults to ``os.environ``.
        prefix: The prefix of the variable names.
        should_retry: Optional retry predicate. Defaults to
            ``default_should_retry``.

    Returns:
        The retry policy.

    Raises:
        ConfigurationError: If a value cannot be parsed or the resulting
            policy is invalid.

    Example:
        ```pycon
        >>> from agentretry.config import load_policy
        >>> policy = load_policy({"AGENTRETRY_MAX_ATTEMPTS": "5"})
        >>> policy.max_attempts
        5
        >>> policy.initial_backoff
        1.0

        ```
    """
    from agentretry.classify import default_should_retry  # noqa: PLC0415
    from agentretry.policy import RetryPolicy  # noqa: PLC0415

    environ = os.environ if environ is None else environ
    max_attempts = _read_value(environ, f"{prefix}MAX_ATTEMPTS", int, DEFAULT_MAX_ATTEMPTS)
    initial_backoff = _read_value(
        environ, f"{prefix}INITIAL_BACKOFF", float, DEFAULT_INITIAL_BACKOFF
    )
    max_backoff = _read_value(environ, f"{prefix}MAX_BACKOFF", float, DEFAULT_MAX_BACKOFF)
    logger.debug(
        f"Loaded retry policy from environment: max_attempts={max_attempts}, "
        f"initial_backoff={initial_backoff}, max_backoff={max_backoff}"
    )
    return RetryPolicy(
        max_attempts=int(max_attempts),
        initial_backoff=initial_backoff,
        max_backoff=max_backoff,
        should_retry=should_retry or default_should_retry,
    )
