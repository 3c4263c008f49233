"""Slack Block Kit rendering for notifications."""

from datetime import datetime
from typing import Any, Dict, List, Sequence
from zoneinfo import ZoneInfo

from .models import Notification

# Slack rejects messages with more than 50 blocks
SLACK_MAX_BLOCKS = 50

REASON_LABELS = {
    "approval_requested": "Approval requested",
    "assign": "Assigned",
    "author": "Author",
    "ci_activity": "CI activity",
    "comment": "Comment",
    "invitation": "Invitation",
    "manual": "Subscribed",
    "member_feature_requested": "Feature requested",
    "mention": "Mentioned",
    "review_requested": "Review requested",
    "security_advisory_credit": "Security advisory credit",
    "security_alert": "Security alert",
    "state_change": "State change",
    "subscribed": "Watching",
    "team_mention": "Team mentioned",
}

Block = Dict[str, Any]


def escape_mrkdwn(text: str) -> str:
    """Escape the characters Slack treats as control sequences."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def reason_label(reason: str) -> str:
    """Human readable label for a GitHub notification reason."""
    key = reason.lower()
    if key in REASON_LABELS:
        return REASON_LABELS[key]
    return key.replace("_", " ").capitalize()


def format_timestamp(
    value: datetime,
    timezone: str = "UTC",
    date_format: str = "%b %d",
    time_format: str = "%I:%M %p",
) -> str:
    local = value.astimezone(ZoneInfo(timezone))
    return f"{local.strftime(date_format)} {local.strftime(time_format)}"


def notification_block(
    notification: Notification,
    timezone: str = "UTC",
    date_format: str = "%b %d",
    time_format: str = "%I:%M %p",
) -> Block:
    """Render one notification as a mrkdwn section block."""
    subject = notification.subject
    title = escape_mrkdwn(subject.title or subject.subject_type or "Notification")
    link = notification.display_url or notification.repository.html_url
    details = " • ".join([
        f"`{notification.repository.full_name}`",
        reason_label(notification.reason),
        subject.subject_type or "Unknown",
        format_timestamp(notification.updated_at, timezone, date_format, time_format),
    ])
    return {
        "type": "section",
        "text": {"type": "mrkdwn", "text": f"*<{link}|{title}>*\n{details}"},
    }


def header_block(count: int) -> Block:
    noun = "notification" if count == 1 else "notifications"
    return {
        "type": "section",
        "text": {"type": "mrkdwn", "text": f"*{count} new GitHub {noun}*"},
    }


def build_messages(
    notifications: Sequence[Notification],
    rollup: bool = True,
    timezone: str = "UTC",
    date_format: str = "%b %d",
    time_format: str = "%I:%M %p",
) -> List[Dict[str, Any]]:
    """
    Build chat.postMessage payloads (without channel) for notifications.

    Args:
        notifications: Notifications in the order they should appear.
        rollup: Group notifications into as few messages as Slack allows.
            When False, every notification gets its own message.
        timezone: Timezone used to display timestamps.
        date_format: strftime format for the date part.
        time_format: strftime format for the time part.

    Returns:
        A list of message payloads with ``text`` and ``blocks``.
    """
    blocks = [
        notification_block(n, timezone, date_format, time_format)
        for n in notifications
    ]
    if not blocks:
        return []

    if not rollup:
        return [
            {"text": f"GitHub notification: {n.subject.title}", "blocks": [block]}
            for n, block in zip(notifications, blocks)
        ]

    messages = []
    # Leave room for the header and a divider in each message
    per_message = SLACK_MAX_BLOCKS - 2
    total = len(blocks)
    for offset in range(0, total, per_message):
        batch = blocks[offset:offset + per_message]
        message_blocks = [header_block(total), {"type": "divider"}] if offset == 0 else []
        message_blocks.extend(batch)
        messages.append({
            "text": f"{total} new GitHub notifications",
            "blocks": message_blocks,
        })
    return messages
