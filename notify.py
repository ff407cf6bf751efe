"""Discord webhook delivery.

All outbound HTTP goes through this module — no other module should import
``requests`` directly. Each call to ``send()`` is exactly one webhook POST;
there is no retry.
"""

import logging
from typing import Optional, Protocol

import requests

from config import DISCORD_MAX_MESSAGE_LENGTH, DISCORD_REQUEST_TIMEOUT
from exceptions import DeliveryError, MessageTooLongError

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can deliver one chat message."""

    def send(self, text: str) -> None:
        ...


class DiscordWebhookNotifier:
    """Posts messages to a Discord channel through a webhook URL.

    Args:
        webhook_url: Full webhook URL including the token.
        timeout: Seconds to wait for Discord before giving up.
        session: Optional ``requests.Session`` to reuse connections.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = DISCORD_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, text: str) -> None:
        """POST *text* as the ``content`` of one webhook message.

        Raises:
            MessageTooLongError: If *text* exceeds the Discord limit. Nothing
                is sent.
            DeliveryError: If the request fails or Discord answers with a
                non-2xx status.
        """
        if len(text) > DISCORD_MAX_MESSAGE_LENGTH:
            raise MessageTooLongError(len(text), DISCORD_MAX_MESSAGE_LENGTH)

        try:
            response = self.session.post(
                self.webhook_url,
                json={"content": text},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DeliveryError(None, str(exc)) from exc

        if not response.ok:
            raise DeliveryError(response.status_code, response.text[:200])

        logger.debug("Delivered %d character(s), status %d", len(text), response.status_code)


class DryRunNotifier:
    """Prints messages instead of sending them. Used by ``--dry-run``."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def send(self, text: str) -> None:
        self.messages.append(text)
        print(f"----- message {len(self.messages)} ({len(text)} chars) -----")
        print(text)
