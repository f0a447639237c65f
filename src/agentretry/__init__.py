r"""agentretry - Retry-with-backoff core for the picks agent platform.

This package runs agent operations (row store calls, odds feed fetches,
notification deliveries) with bounded retries and clamped exponential
backoff, and surfaces either the operation's value or one well-typed
terminal failure.

Key Features:
    - Sync and async executors sharing one immutable ``RetryPolicy``
    - Pluggable ``should_retry`` predicate, classified once per failure
    - ``TerminalError`` carrying label, attempt counts and the last error
    - Optional cancellation of the backoff through an event
    - Callback hooks for logging, metrics and alerting
    - Webhook notification channels (Slack, Discord) built on httpx

Example:
    ```pycon
    >>> from agentretry import RetryExecutor, RetryPolicy
    >>> from agentretry.classify import retry_on
    >>> policy = RetryPolicy(
    ...     max_attempts=3,
    ...     initial_backoff=0.5,
    ...     max_backoff=5.0,
    ...     should_retry=retry_on(ConnectionError),
    ... )
    >>> executor = RetryExecutor(policy)
    >>> executor.execute(lambda: "graded", "grade picks")
    'graded'

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "CallbackConfig",
    "ConfigurationError",
    "RetryCancelledError",
    "RetryExecutor",
    "RetryPolicy",
    "RetryingRowStore",
    "RowStore",
    "TerminalError",
    "__version__",
    "default_should_retry",
    "load_policy",
    "retry_call",
    "retry_call_async",
    "with_retry",
]

from importlib.metadata import PackageNotFoundError, version

from agentretry.callbacks import CallbackConfig
from agentretry.classify import default_should_retry
from agentretry.config import load_policy
from agentretry.exceptions import ConfigurationError, RetryCancelledError, TerminalError
from agentretry.executor import RetryExecutor
from agentretry.executor_async import AsyncRetryExecutor
from agentretry.functional import retry_call, retry_call_async, with_retry
from agentretry.policy import RetryPolicy
from agentretry.store import RetryingRowStore, RowStore

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
