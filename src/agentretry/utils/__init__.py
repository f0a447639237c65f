r"""Utility functions shared by the retry executors."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "bind_correlation_id",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

from agentretry.utils.structured_logging import (
    StructuredFormatter,
    bind_correlation_id,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)
