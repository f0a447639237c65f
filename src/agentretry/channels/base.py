r"""Base types for outbound notification channels."""

from __future__ import annotations

__all__ = ["NotificationChannel", "NotificationPayload", "WebhookConfig"]

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from agentretry.config import DEFAULT_TIMEOUT
from agentretry.exceptions import ConfigurationError
from agentretry.validation import validate_duration


@dataclass(frozen=True)
class NotificationPayload:
    """A message to deliver on one or more channels.

    Attributes:
        type: The kind of notification (e.g. ``"pick_graded"``).
        message: The message body.
        title: Optional title.
        priority: One of ``"low"``, ``"normal"`` or ``"high"``.
        meta: Extra key/value pairs rendered below the message.
        channels: Names of the channels to deliver to.
    """

    type: str
    message: str
    title: str | None = None
    priority: str = "normal"
    meta: dict[str, Any] = field(default_factory=dict)
    channels: tuple[str, ...] = ()


@dataclass(frozen=True)
class WebhookConfig:
    """Configuration of a webhook-based channel.

    Attributes:
        webhook_url: The URL to POST messages to.
        enabled: Whether the channel may be used.
        timeout: Request timeout in seconds. Must be > 0.
    """

    webhook_url: str
    enabled: bool = True
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        validate_duration(self.timeout, name="timeout")
        if self.timeout <= 0:
            msg = f"timeout must be > 0, got {self.timeout}"
            raise ConfigurationError(msg, config_key="timeout")


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    ``send`` either completes or raises a ``BaseError`` subclass:
    configuration problems raise ``ConfigurationError`` (never worth a
    retry), transient delivery problems raise ``NetworkError`` or
    ``OperationTimeoutError``.
    """

    name: str

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> None:
        """Deliver ``payload`` on this channel.

        Args:
            payload: The notification to deliver.
        """
