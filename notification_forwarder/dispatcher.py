"""Order, deliver and mark notifications as read."""

import logging
from typing import List, Sequence

from .config import AppConfig
from .github_client import GitHubClient
from .models import Notification
from .slack_notifier import SlackNotifier

logger = logging.getLogger(__name__)


class MarkReadError(RuntimeError):
    """Raised when a thread could not be marked as read.

    Threads before the failing one stay marked.
    """

    def __init__(self, thread_id: str, marked: int) -> None:
        self.thread_id = thread_id
        self.marked = marked
        super().__init__(
            f"Unable to mark notification {thread_id} as read "
            f"({marked} notification(s) were already marked)."
        )


def order_notifications(
    notifications: Sequence[Notification],
    sort_oldest_first: bool = False,
) -> List[Notification]:
    """GitHub returns newest first; reverse to show the oldest first."""
    ordered = list(notifications)
    if sort_oldest_first:
        ordered.reverse()
    return ordered


def mark_as_read(client: GitHubClient, notifications: Sequence[Notification]) -> int:
    """
    Mark notification threads as read, one at a time and in order.

    Stops at the first failure.

    Returns:
        Number of threads marked.

    Raises:
        MarkReadError: If marking a thread fails.
    """
    marked = 0
    for notification in notifications:
        try:
            client.mark_thread_read(notification.id)
        except Exception as e:
            logger.error(f"Failed to mark notification {notification.id} as read: {e}")
            raise MarkReadError(notification.id, marked) from e
        marked += 1
    return marked


def dispatch(
    notifier: SlackNotifier,
    client: GitHubClient,
    notifications: Sequence[Notification],
    config: AppConfig,
) -> List[Notification]:
    """
    Send notifications to Slack, then optionally mark them as read.

    Nothing is marked as read if sending fails.

    Returns:
        The notifications in the order they were sent.
    """
    ordered = order_notifications(notifications, config.sort_oldest_first)

    logger.info(f"Forwarding {len(ordered)} notifications to Slack...")
    notifier.send(
        config.slack_destination,
        ordered,
        rollup=config.rollup_notifications,
        timezone=config.timezone,
        date_format=config.date_format,
        time_format=config.time_format,
    )
    logger.info("Notification message(s) sent!")

    if config.mark_as_read:
        logger.info(f"Marking {len(ordered)} notifications as read...")
        mark_as_read(client, ordered)

    return ordered
