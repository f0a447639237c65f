r"""Slack and Discord channels delivering notifications through
incoming webhooks."""

from __future__ import annotations

__all__ = ["DiscordWebhookChannel", "SlackWebhookChannel", "WebhookChannel"]

import logging
from abc import abstractmethod
from typing import Any

import httpx

from agentretry.channels.base import NotificationChannel, NotificationPayload, WebhookConfig
from agentretry.config import RETRY_STATUS_CODES
from agentretry.exceptions import (
    ConfigurationError,
    NetworkError,
    OperationTimeoutError,
    ValidationError,
)

logger: logging.Logger = logging.getLogger(__name__)

FOOTER = "Sent by Unit Talk Platform"

# Discord embed colours per priority
PRIORITY_COLORS = {"high": 0xED4245, "normal": 0x5865F2, "low": 0x2ECC71}


class WebhookChannel(NotificationChannel):
    """Channel that POSTs a JSON body to a webhook URL.

    Subclasses only build the body. Errors are translated into the
    platform taxonomy:

    - disabled channel or missing URL: ``ConfigurationError``
    - timeout: ``OperationTimeoutError``
    - connection failure, HTTP 429 or 5xx: ``NetworkError``
    - any other HTTP error status: ``ValidationError``

    Args:
        config: The webhook configuration.
        client: Optional shared ``httpx.AsyncClient``. When omitted, a
            client is created for each delivery.
    """

    name = "webhook"

    def __init__(self, config: WebhookConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(enabled={self.config.enabled})"

    @property
    def endpoint(self) -> str:
        """The webhook host, safe to log (the URL path holds the secret)."""
        url = httpx.URL(self.config.webhook_url)
        return f"{url.scheme}://{url.host}"

    @abstractmethod
    def build_body(self, payload: NotificationPayload) -> dict[str, Any]:
        """Build the JSON body for ``payload``."""

    async def send(self, payload: NotificationPayload) -> None:
        if not self.config.enabled:
            msg = f"{self.name} notifications are not enabled"
            raise ConfigurationError(msg, config_key=f"{self.name}.enabled")
        if not self.config.webhook_url:
            msg = f"{self.name} webhook URL is required"
            raise ConfigurationError(msg, config_key=f"{self.name}.webhook_url")

        body = self.build_body(payload)
        if self._client is not None:
            response = await self._post(self._client, body)
        else:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await self._post(client, body)
        self._check_response(response)
        logger.debug(f"Delivered {payload.type} notification on {self.name}")

    async def _post(self, client: httpx.AsyncClient, body: dict[str, Any]) -> httpx.Response:
        try:
            return await client.post(
                self.config.webhook_url, json=body, timeout=self.config.timeout
            )
        except httpx.TimeoutException as exc:
            msg = f"{self.name} webhook timed out after {self.config.timeout}s"
            raise OperationTimeoutError(
                msg, operation=f"{self.name}.send", timeout=self.config.timeout
            ) from exc
        except httpx.RequestError as exc:
            msg = f"{self.name} webhook request failed: {exc}"
            raise NetworkError(msg, endpoint=self.endpoint) from exc

    def _check_response(self, response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        details = {"status_code": response.status_code}
        msg = f"{self.name} webhook answered with status {response.status_code}"
        if response.status_code in RETRY_STATUS_CODES or response.status_code >= 500:
            raise NetworkError(msg, endpoint=self.endpoint, details=details)
        raise ValidationError(msg, field="payload", details=details)


class SlackWebhookChannel(WebhookChannel):
    """Slack incoming-webhook channel.

    Example:
        ```pycon
        >>> from agentretry.channels import NotificationPayload, SlackWebhookChannel, WebhookConfig
        >>> channel = SlackWebhookChannel(WebhookConfig("https://hooks.slack.com/services/T/B/X"))
        >>> body = channel.build_body(NotificationPayload(type="alert", message="Line moved"))
        >>> body["text"]
        'Line moved'
        >>> [block["type"] for block in body["blocks"]]
        ['section', 'divider', 'context']

        ```
    """

    name = "slack"

    def build_body(self, payload: NotificationPayload) -> dict[str, Any]:
        blocks: list[dict[str, Any]] = []
        if payload.title:
            blocks.append({"type": "header", "text": {"type": "plain_text", "text": payload.title}})
        blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": payload.message}})
        if payload.meta:
            fields = "\n".join(f"*{key}:* {value}" for key, value in payload.meta.items())
            blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": fields}})
        blocks.append({"type": "divider"})
        blocks.append(
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": f"{FOOTER} | Type: {payload.type} | Priority: {payload.priority}",
                    }
                ],
            }
        )
        return {"blocks": blocks, "text": payload.message}


class DiscordWebhookChannel(WebhookChannel):
    """Discord webhook channel, rendering the payload as one embed."""

    name = "discord"

    def build_body(self, payload: NotificationPayload) -> dict[str, Any]:
        embed: dict[str, Any] = {
            "description": payload.message,
            "color": PRIORITY_COLORS.get(payload.priority, PRIORITY_COLORS["normal"]),
            "footer": {"text": f"{FOOTER} | Type: {payload.type}"},
        }
        if payload.title:
            embed["title"] = payload.title
        if payload.meta:
            embed["fields"] = [
                {"name": str(key), "value": str(value), "inline": True}
                for key, value in payload.meta.items()
            ]
        return {"embeds": [embed]}
