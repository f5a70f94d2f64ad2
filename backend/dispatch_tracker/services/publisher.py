"""Publish rendered text to a webhook (edit-in-place) or to the log."""

import logging
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Where a rendered message goes; returns the placed message id, if any."""

    async def publish(self, text: str) -> str | None: ...


class LogPublisher:
    """Fallback publisher used when no webhook is configured."""

    def __init__(self, name: str = "status"):
        self.name = name

    async def publish(self, text: str) -> str | None:
        logger.info(f"[{self.name}] {len(text)} chars:\n{text}")
        return None


class WebhookPublisher:
    """
    Discord-style webhook publisher.

    Edits the remembered message when one is known; if it was deleted (404)
    or none exists yet, posts a new message and remembers its id.
    """

    def __init__(
        self,
        webhook_url: str,
        message_id: str | None = None,
        timeout: float = 15.0,
    ):
        self.webhook_url = webhook_url.rstrip("/")
        self.message_id = message_id
        self.timeout = timeout

    async def publish(self, text: str) -> str | None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            if self.message_id:
                response = await client.patch(
                    f"{self.webhook_url}/messages/{self.message_id}",
                    json={"content": text},
                )
                if response.status_code != 404:
                    response.raise_for_status()
                    logger.info(f"Edited message {self.message_id}")
                    return self.message_id
                logger.warning(f"Message {self.message_id} no longer exists, posting a new one")
                self.message_id = None

            response = await client.post(
                self.webhook_url,
                params={"wait": "true"},
                json={"content": text},
            )
            response.raise_for_status()
            self.message_id = str(response.json()["id"])
            logger.info(f"Created message {self.message_id}")
            return self.message_id


def build_publisher(
    webhook_url: str | None, message_id: str | None = None, name: str = "status"
) -> Publisher:
    if webhook_url:
        return WebhookPublisher(webhook_url, message_id=message_id)
    return LogPublisher(name)
