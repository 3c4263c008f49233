"""Slack notification module."""

import logging
from typing import Optional, Sequence

import requests

from .formatter import build_messages
from .models import Notification

logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class SlackAPIError(RuntimeError):
    """Raised when Slack rejects a message."""

    def __init__(self, status_code: int, error: str) -> None:
        self.status_code = status_code
        self.error = error
        super().__init__(f"Slack chat.postMessage failed ({status_code}): {error}")


class SlackNotifier:
    """Posts notifications to a Slack channel with a bot token."""

    def __init__(self, token: str, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json; charset=utf-8",
        })

    def post_message(self, channel: str, message: dict) -> None:
        """
        Post a single message.

        Raises:
            SlackAPIError: On an HTTP error or an ``ok: false`` response.
        """
        payload = {"channel": channel, "unfurl_links": False, **message}
        response = self.session.post(SLACK_POST_MESSAGE_URL, json=payload, timeout=30)
        if response.status_code >= 400:
            raise SlackAPIError(response.status_code, response.text)

        body = response.json()
        if not body.get("ok"):
            error = body.get("error", "unknown_error")
            if error in ("invalid_auth", "not_authed", "missing_scope"):
                logger.error(
                    "Slack authentication failed. Check that SLACK_TOKEN is a bot token "
                    "with the chat:write scope."
                )
            elif error in ("channel_not_found", "not_in_channel"):
                logger.error(
                    f"Slack channel {channel} is not reachable. "
                    "Invite the bot to the channel or check SLACK_DESTINATION."
                )
            raise SlackAPIError(response.status_code, error)

    def send(
        self,
        channel: str,
        notifications: Sequence[Notification],
        rollup: bool = True,
        timezone: str = "UTC",
        date_format: str = "%b %d",
        time_format: str = "%I:%M %p",
    ) -> int:
        """
        Send notifications to a channel, in the given order.

        Returns:
            Number of Slack messages posted.
        """
        messages = build_messages(notifications, rollup, timezone, date_format, time_format)
        for message in messages:
            self.post_message(channel, message)
        logger.info(f"Posted {len(messages)} Slack message(s) to {channel}")
        return len(messages)
