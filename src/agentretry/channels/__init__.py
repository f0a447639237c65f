r"""Outbound notification channels and the dispatcher fanning a
notification out to them."""

from __future__ import annotations

__all__ = [
    "DiscordWebhookChannel",
    "DispatchResult",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationPayload",
    "SlackWebhookChannel",
    "WebhookChannel",
    "WebhookConfig",
]

from agentretry.channels.base import NotificationChannel, NotificationPayload, WebhookConfig
from agentretry.channels.dispatcher import DispatchResult, NotificationDispatcher
from agentretry.channels.webhook import (
    DiscordWebhookChannel,
    SlackWebhookChannel,
    WebhookChannel,
)
