"""GitHub REST/GraphQL client for fetching and updating notifications."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from .models import Notification, parse_notification

logger = logging.getLogger(__name__)

PER_PAGE = 100
REQUEST_TIMEOUT = 30  # seconds


class GitHubAPIError(RuntimeError):
    """Raised when a GitHub API call returns an error status."""

    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        super().__init__(f"GitHub API request failed ({status_code}): {text}")


class GitHubAuthError(GitHubAPIError):
    """Raised on 401/403: bad token or missing scope."""


class FetchError(RuntimeError):
    """Raised when listing notifications fails."""


class GitHubClient:
    """Thin wrapper over the GitHub API using a shared requests session."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    def _check(self, response: requests.Response) -> requests.Response:
        if response.status_code in (401, 403):
            raise GitHubAuthError(response.status_code, response.text)
        if response.status_code >= 400:
            raise GitHubAPIError(response.status_code, response.text)
        return response

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith("http"):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    def get(self, path_or_url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """GET an API path or an absolute API url."""
        response = self.session.get(self._url(path_or_url), params=params, timeout=REQUEST_TIMEOUT)
        return self._check(response)

    def get_json(self, path_or_url: str) -> Dict[str, Any]:
        """GET a single resource and return its JSON body."""
        return self.get(path_or_url).json()

    def graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run a GraphQL query and return its ``data`` payload."""
        response = self.session.post(
            self._url("graphql"),
            json={"query": query, "variables": variables},
            timeout=REQUEST_TIMEOUT,
        )
        payload = self._check(response).json()
        if payload.get("errors"):
            raise GitHubAPIError(response.status_code, str(payload["errors"]))
        return payload.get("data") or {}

    def list_notifications(
        self,
        since: str,
        all: bool,
        participating: bool,
        per_page: int = PER_PAGE,
    ) -> List[Dict[str, Any]]:
        """Fetch a single page of notifications."""
        params = {
            "all": str(all).lower(),
            "participating": str(participating).lower(),
            "since": since,
            "per_page": per_page,
        }
        return self.get("notifications", params=params).json()

    def paginate_notifications(
        self,
        since: str,
        all: bool,
        participating: bool,
        per_page: int = PER_PAGE,
    ) -> List[Dict[str, Any]]:
        """Fetch every page of notifications by following ``Link: rel=next``."""
        params: Optional[Dict[str, Any]] = {
            "all": str(all).lower(),
            "participating": str(participating).lower(),
            "since": since,
            "per_page": per_page,
        }
        url = self._url("notifications")
        items: List[Dict[str, Any]] = []

        while url:
            response = self.get(url, params=params)
            page = response.json()
            items.extend(page)
            logger.debug(f"Fetched page with {len(page)} notifications")
            # The next link already carries the query string
            params = None
            url = response.links.get("next", {}).get("url")

        return items

    def mark_thread_read(self, thread_id: str) -> None:
        """Mark a notification thread as read."""
        response = self.session.patch(
            self._url(f"notifications/threads/{thread_id}"),
            timeout=REQUEST_TIMEOUT,
        )
        self._check(response)


def _format_since(since: datetime) -> str:
    return since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def fetch_notifications(
    client: GitHubClient,
    since: datetime,
    only_unread: bool = True,
    only_participating: bool = False,
    paginate_all: bool = False,
) -> List[Notification]:
    """
    Fetch notifications updated since the given time.

    Args:
        client: GitHub client.
        since: Start of the run window.
        only_unread: Only return unread threads.
        only_participating: Only return threads the user participates in.
        paginate_all: Follow pagination instead of reading a single page.

    Returns:
        Notifications in GitHub's order (newest first).

    Raises:
        FetchError: If the listing call fails.
    """
    params = {
        "since": _format_since(since),
        "all": not only_unread,
        "participating": only_participating,
    }

    if paginate_all:
        try:
            payloads = client.paginate_notifications(**params)
        except (GitHubAPIError, requests.RequestException) as e:
            logger.error(f"Error paginating notifications: {e}")
            raise FetchError(
                "Unable to fetch all notifications using PAGINATE_ALL. "
                "Are you using a properly scoped GITHUB_TOKEN?"
            ) from e
    else:
        try:
            payloads = client.list_notifications(per_page=PER_PAGE, **params)
        except (GitHubAPIError, requests.RequestException) as e:
            logger.error(f"Error fetching notifications: {e}")
            raise FetchError(
                "Unable to fetch notifications. "
                "Are you using a properly scoped GITHUB_TOKEN?"
            ) from e

    return [parse_notification(payload) for payload in payloads]
