"""Factory functions for GitHub notification test data."""

from typing import Any, Dict, Optional

from notification_forwarder.models import Notification, parse_notification


def create_notification_payload(
    id: str = "1",
    reason: str = "mention",
    repo_full_name: str = "octo-org/octo-repo",
    subject_type: str = "PullRequest",
    title: str = "Add feature",
    url: Optional[str] = None,
    latest_comment_url: Optional[str] = None,
    updated_at: str = "2024-01-01T12:00:00Z",
    unread: bool = True,
) -> Dict[str, Any]:
    """
    Create a notification payload shaped like ``GET /notifications`` items.

    Args:
        id: Thread id
        reason: Notification reason
        repo_full_name: "owner/repo"
        subject_type: GitHub subject type (PullRequest, Issue, Commit, ...)
        title: Subject title
        url: Subject API url (defaults to a pulls url for the repository)
        latest_comment_url: Subject latest comment API url
        updated_at: ISO8601 timestamp
        unread: Unread flag

    Returns:
        Notification payload dictionary
    """
    if url is None and subject_type == "PullRequest":
        url = f"https://api.github.com/repos/{repo_full_name}/pulls/{id}"

    return {
        "id": id,
        "reason": reason,
        "unread": unread,
        "updated_at": updated_at,
        "last_read_at": None,
        "url": f"https://api.github.com/notifications/threads/{id}",
        "repository": {
            "full_name": repo_full_name,
            "html_url": f"https://github.com/{repo_full_name}",
        },
        "subject": {
            "title": title,
            "url": url,
            "latest_comment_url": latest_comment_url,
            "type": subject_type,
        },
    }


def create_notification(**kwargs) -> Notification:
    """Create a parsed Notification. Accepts create_notification_payload() arguments."""
    return parse_notification(create_notification_payload(**kwargs))
