"""Slack delivery for the task digest.

Two mutually exclusive transports: an incoming webhook (destination baked
into the URL) or the Web API chat.postMessage call with a bot token and
channel ID. Stdlib-only (urllib).
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from asana_digest.config import SlackConfig

logger = logging.getLogger(__name__)

SLACK_API_BASE = "https://slack.com/api"


class SlackAPIError(Exception):
    """Error delivering a message to Slack."""

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


@runtime_checkable
class Notifier(Protocol):
    """Anything that can post a single text message."""

    def post_message(self, text: str) -> Any: ...


def _post_json(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str],
    timeout: int,
    label: str,
) -> bytes:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    req = urllib.request.Request(url, data=body, headers=headers, method="POST")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read()
    except urllib.error.HTTPError as exc:
        raw = exc.read().decode("utf-8", errors="replace")
        raise SlackAPIError(f"{label} -> HTTP {exc.code}: {raw}") from exc
    except urllib.error.URLError as exc:
        raise SlackAPIError(f"{label} -> Connection failed: {exc.reason}") from exc


@dataclass
class SlackWebhook:
    """Incoming-webhook sender.

    Args:
        url: Incoming webhook URL.
        username: Display name override for the posting bot.
        icon_emoji: Emoji icon override (e.g. ':ribbon:').
    """

    url: str
    username: str = "Asana"
    icon_emoji: str = ":ribbon:"
    timeout: int = 30

    def post_message(self, text: str) -> None:
        """Post text to the webhook.

        Raises:
            SlackAPIError: On HTTP or connection errors.
        """
        payload = {
            "username": self.username,
            "icon_emoji": self.icon_emoji,
            "text": text,
        }
        _post_json(
            self.url,
            payload,
            {"Content-Type": "application/json"},
            self.timeout,
            "Slack webhook",
        )


@dataclass
class SlackClient:
    """Client for the Slack Web API.

    Args:
        bot_token: Bot User OAuth Token (xoxb-...).
        default_channel: Channel ID to post to.
    """

    bot_token: str
    default_channel: str = ""
    timeout: int = 30

    def _request(
        self,
        method: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an HTTP POST request to the Slack Web API.

        Args:
            method: Slack API method (e.g. 'chat.postMessage').
            params: JSON body parameters.

        Returns:
            Parsed JSON response dict.

        Raises:
            SlackAPIError: On HTTP errors or Slack API errors (ok=false).
        """
        headers = {
            "Authorization": f"Bearer {self.bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        raw = _post_json(
            f"{SLACK_API_BASE}/{method}", params or {}, headers, self.timeout, method
        )
        data = json.loads(raw.decode("utf-8"))

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            raise SlackAPIError(f"{method} -> Slack error: {error}", error_code=error)

        return data

    def post_message(self, text: str, channel: str = "") -> dict[str, Any]:
        """Post a message to a Slack channel.

        Args:
            text: Message text.
            channel: Channel ID. Falls back to default_channel.

        Returns:
            Slack API response dict (includes 'ts' of the posted message).

        Raises:
            SlackAPIError: If no channel is available or the call fails.
        """
        ch = channel or self.default_channel
        if not ch:
            raise SlackAPIError(
                "No channel specified and no default_channel configured"
            )
        return self._request("chat.postMessage", params={"channel": ch, "text": text})


def build_notifier(config: SlackConfig) -> SlackWebhook | SlackClient:
    """Pick the transport: webhook if configured, else bot token + channel.

    Raises:
        SlackAPIError: If neither transport is configured.
    """
    if config.uses_webhook:
        return SlackWebhook(
            url=config.webhook_url,
            username=config.username,
            icon_emoji=config.icon_emoji,
        )
    if config.bot_token and config.channel_id:
        return SlackClient(
            bot_token=config.bot_token, default_channel=config.channel_id
        )
    raise SlackAPIError("No Slack destination configured")


def deliver(notifier: Notifier, messages: Iterable[str]) -> int:
    """Post messages in order, one call each.

    The first failure propagates; later messages are not sent.

    Returns:
        Number of messages posted.
    """
    sent = 0
    for text in messages:
        notifier.post_message(text)
        sent += 1
        logger.debug("Posted message %d (%d chars)", sent, len(text))
    return sent
