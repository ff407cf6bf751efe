"""Tests for notify.py — Discord webhook delivery."""

from unittest.mock import MagicMock

import pytest
import requests

from config import DISCORD_REQUEST_TIMEOUT
from exceptions import DeliveryError, MessageTooLongError
from notify import DiscordWebhookNotifier, DryRunNotifier

WEBHOOK_URL = "https://discord.com/api/webhooks/123/abc"


def _response(status_code: int, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    return response


class TestDiscordWebhookNotifier:
    """Tests for DiscordWebhookNotifier.send()."""

    def test_posts_content_as_json(self):
        session = MagicMock()
        session.post.return_value = _response(204)
        notifier = DiscordWebhookNotifier(WEBHOOK_URL, session=session)

        notifier.send("hello")

        session.post.assert_called_once_with(
            WEBHOOK_URL,
            json={"content": "hello"},
            timeout=DISCORD_REQUEST_TIMEOUT,
        )

    def test_error_status_raises_delivery_error(self):
        session = MagicMock()
        session.post.return_value = _response(429, "You are being rate limited.")
        notifier = DiscordWebhookNotifier(WEBHOOK_URL, session=session)

        with pytest.raises(DeliveryError, match="429") as excinfo:
            notifier.send("hello")

        assert excinfo.value.status_code == 429
        assert "rate limited" in excinfo.value.detail

    def test_network_error_raises_delivery_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("connection refused")
        notifier = DiscordWebhookNotifier(WEBHOOK_URL, session=session)

        with pytest.raises(DeliveryError, match="no response") as excinfo:
            notifier.send("hello")

        assert excinfo.value.status_code is None

    def test_no_retry_on_failure(self):
        session = MagicMock()
        session.post.return_value = _response(500)
        notifier = DiscordWebhookNotifier(WEBHOOK_URL, session=session)

        with pytest.raises(DeliveryError):
            notifier.send("hello")

        assert session.post.call_count == 1

    def test_oversized_text_is_refused_before_posting(self):
        session = MagicMock()
        notifier = DiscordWebhookNotifier(WEBHOOK_URL, session=session)

        with pytest.raises(MessageTooLongError):
            notifier.send("x" * 2001)

        session.post.assert_not_called()

    def test_text_at_limit_is_sent(self):
        session = MagicMock()
        session.post.return_value = _response(204)
        notifier = DiscordWebhookNotifier(WEBHOOK_URL, session=session)

        notifier.send("x" * 2000)

        session.post.assert_called_once()


class TestDryRunNotifier:
    """Tests for the printing notifier used by --dry-run."""

    def test_records_and_prints(self, capsys):
        notifier = DryRunNotifier()
        notifier.send("first")
        notifier.send("second")

        assert notifier.messages == ["first", "second"]
        out = capsys.readouterr().out
        assert "message 1 (5 chars)" in out
        assert "second" in out
