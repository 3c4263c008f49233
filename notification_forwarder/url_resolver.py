"""Resolve a browser URL for each notification."""

import concurrent.futures
import logging
from typing import List, Optional, Sequence

from .github_client import GitHubClient
from .models import (
    CheckSuiteSubject,
    CommitSubject,
    DiscussionSubject,
    IssueSubject,
    Notification,
    PullRequestSubject,
    ReleaseSubject,
)

logger = logging.getLogger(__name__)

DISCUSSION_SEARCH_QUERY = """
query($search: String!) {
  search(query: $search, type: DISCUSSION, first: 1) {
    nodes {
      ... on Discussion { url }
    }
  }
}
"""


def _html_url_of(client: GitHubClient, api_url: Optional[str]) -> Optional[str]:
    """Look up an API resource and return its ``html_url``."""
    if not api_url:
        return None
    return client.get_json(api_url).get("html_url")


def _discussion_url(client: GitHubClient, notification: Notification) -> str:
    repo = notification.repository
    title = notification.subject.title.replace('"', '\\"')
    data = client.graphql(
        DISCUSSION_SEARCH_QUERY,
        {"search": f'repo:{repo.full_name} in:title "{title}"'},
    )
    nodes = (data.get("search") or {}).get("nodes") or []
    for node in nodes:
        if node and node.get("url"):
            return node["url"]
    return f"{repo.html_url}/discussions"


def _resolve(client: GitHubClient, notification: Notification) -> Optional[str]:
    subject = notification.subject
    repo_url = notification.repository.html_url

    if isinstance(subject, (PullRequestSubject, IssueSubject, ReleaseSubject)):
        return _html_url_of(client, subject.url)
    if isinstance(subject, CommitSubject):
        # The latest comment links straight to the anchored comment
        return _html_url_of(client, subject.latest_comment_url or subject.url)
    if isinstance(subject, DiscussionSubject):
        return _discussion_url(client, notification)
    if isinstance(subject, CheckSuiteSubject):
        return f"{repo_url}/actions"
    return repo_url


def determine_url(client: GitHubClient, notification: Notification) -> str:
    """
    Determine the URL a person should open for a notification.

    Never raises: lookup failures and unknown subject types fall back to
    the repository page.
    """
    try:
        url = _resolve(client, notification)
    except Exception as e:
        logger.debug(f"Falling back to repository URL for notification {notification.id}: {e}")
        url = None
    return url or notification.repository.html_url


def resolve_urls(
    client: GitHubClient,
    notifications: Sequence[Notification],
    max_workers: Optional[int] = None,
) -> List[Notification]:
    """Resolve ``display_url`` for all notifications in parallel, keeping order."""
    resolved = list(notifications)
    if not resolved:
        return resolved

    def task(notification: Notification, index: int):
        return index, determine_url(client, notification)

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(task, n, idx) for idx, n in enumerate(resolved)]
        for future in concurrent.futures.as_completed(futures):
            index, url = future.result()
            resolved[index].display_url = url

    return resolved
