r"""Structured logging utilities for machine-readable log output.

The retry executors log through ``log_structured`` so every record
carries the operation label and attempt counters as fields. Configure
a handler with ``StructuredFormatter`` to get one JSON object per line,
suitable for log aggregation.

Example:
    ```python
    import logging
    from agentretry.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("agentretry")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Use correlation ids to tie together the records of one agent run:

    ```python
    from agentretry.utils.structured_logging import bind_correlation_id

    with bind_correlation_id("grading-run-42"):
        executor.execute(grade_picks, "grade picks")
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "bind_correlation_id",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Generator

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "agentretry_correlation_id", default=None
)

# Attributes set by logging.LogRecord itself; anything else came from ``extra``
_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str | None:
    """Get the correlation id of the current context.

    Returns:
        The current correlation id, or None if not set.
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation id for the current context.

    The id lives in a context variable, so it is isolated per thread and
    per asyncio task.

    Args:
        correlation_id: The correlation id (e.g. an agent run id).

    Example:
        ```pycon
        >>> from agentretry.utils.structured_logging import (
        ...     clear_correlation_id,
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("run-123")
        >>> get_correlation_id()
        'run-123'
        >>> clear_correlation_id()

        ```
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation id for the current context."""
    _correlation_id.set(None)


@contextmanager
def bind_correlation_id(correlation_id: str) -> Generator[None, None, None]:
    """Set a correlation id for the duration of a block.

    The previous value is restored on exit, even if the block raises.

    Args:
        correlation_id: The correlation id to bind.

    Example:
        ```pycon
        >>> from agentretry.utils.structured_logging import (
        ...     bind_correlation_id,
        ...     get_correlation_id,
        ... )
        >>> with bind_correlation_id("run-7"):
        ...     get_correlation_id()
        ...
        'run-7'
        >>> get_correlation_id() is None
        True

        ```
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each record is rendered as a JSON object with the fields
    ``timestamp`` (ISO 8601, UTC), ``level``, ``logger``, ``message``,
    ``module``, ``function`` and ``line``, plus ``correlation_id`` when
    one is bound, ``exception`` when exception info is attached, and
    every field passed through ``extra``. Values that are not JSON
    serializable are rendered with ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from agentretry.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured_formatter")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("graded", extra={"label": "grade picks"})
        >>> json.loads(stream.getvalue())["label"]
        'grade picks'

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = get_correlation_id()
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRIBUTES:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002, N802
        """Format the record creation time as ISO 8601 with millisecond
        precision, in UTC."""
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured fields.

    The fields are attached through ``extra``, so they show up as
    top-level keys with ``StructuredFormatter`` and as record attributes
    with any other formatter.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra=extra)
