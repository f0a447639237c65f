r"""Backoff strategies for delays between retry attempts."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff"]

from agentretry.backoff.base import BaseBackoffStrategy
from agentretry.backoff.exponential import ExponentialBackoff
