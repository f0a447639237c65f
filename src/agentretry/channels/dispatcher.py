r"""Fan-out of one notification to several channels."""

from __future__ import annotations

__all__ = ["DispatchResult", "NotificationDispatcher"]

import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agentretry.exceptions import BaseError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agentretry.channels.base import NotificationChannel, NotificationPayload
    from agentretry.executor_async import AsyncRetryExecutor
    from agentretry.policy import RetryPolicy

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Per-channel outcome of a dispatch.

    Attributes:
        results: Whether each requested channel received the payload.
        errors: The error message of each failed channel.
    """

    results: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def status(self) -> str:
        """``"success"`` if every channel succeeded, ``"partial"`` if some
        did, ``"failed"`` otherwise."""
        delivered = sum(self.results.values())
        if delivered == len(self.results):
            return "success"
        if delivered:
            return "partial"
        return "failed"


class NotificationDispatcher:
    """Deliver notifications to named channels, retrying each channel
    independently.

    Channels are tried one after the other in the order of
    ``payload.channels``. A channel failure (after retries) is recorded
    in the result and does not prevent delivery on the remaining
    channels. Errors outside the platform taxonomy propagate.

    Args:
        channels: The available channels, by name.
        executor: The async retry executor.
        policy: Optional policy overriding the executor's default.

    Example:
        ```pycon
        >>> from agentretry import AsyncRetryExecutor
        >>> from agentretry.channels import (
        ...     NotificationDispatcher,
        ...     NotificationPayload,
        ...     SlackWebhookChannel,
        ...     WebhookConfig,
        ... )
        >>> dispatcher = NotificationDispatcher(
        ...     {"slack": SlackWebhookChannel(WebhookConfig("https://hooks.slack.com/x"))},
        ...     AsyncRetryExecutor(),
        ... )
        >>> payload = NotificationPayload(type="recap", message="3-1 today", channels=("slack",))
        >>> result = await dispatcher.dispatch(payload)  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        channels: Mapping[str, NotificationChannel],
        executor: AsyncRetryExecutor,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._channels = dict(channels)
        self._executor = executor
        self._policy = policy

    async def dispatch(self, payload: NotificationPayload) -> DispatchResult:
        """Deliver ``payload`` to every channel it names.

        Args:
            payload: The notification to deliver.

        Returns:
            The per-channel outcome.
        """
        result = DispatchResult()
        for name in payload.channels:
            channel = self._channels.get(name)
            if channel is None:
                result.results[name] = False
                result.errors[name] = f"unknown notification channel: {name}"
                logger.warning(f"Skipping unknown notification channel {name!r}")
                continue
            try:
                await self._executor.execute(
                    functools.partial(channel.send, payload), f"notify {name}", self._policy
                )
            except BaseError as exc:
                result.results[name] = False
                result.errors[name] = str(exc)
                logger.warning(f"Notification {payload.type!r} failed on {name}: {exc}")
            else:
                result.results[name] = True
        logger.info(f"Dispatched {payload.type!r} notification: {result.status}")
        return result
