"""Data models for GitHub notifications."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class PullRequestSubject:
    title: str
    url: Optional[str]  # API url, e.g. https://api.github.com/repos/o/r/pulls/1

    subject_type = "PullRequest"


@dataclass(frozen=True)
class IssueSubject:
    title: str
    url: Optional[str]

    subject_type = "Issue"


@dataclass(frozen=True)
class CommitSubject:
    title: str
    url: Optional[str]
    latest_comment_url: Optional[str]

    subject_type = "Commit"


@dataclass(frozen=True)
class ReleaseSubject:
    title: str
    url: Optional[str]

    subject_type = "Release"


@dataclass(frozen=True)
class DiscussionSubject:
    title: str

    subject_type = "Discussion"


@dataclass(frozen=True)
class CheckSuiteSubject:
    title: str

    subject_type = "CheckSuite"


@dataclass(frozen=True)
class UnknownSubject:
    """Any subject type without a dedicated URL rule."""
    title: str
    type: str

    @property
    def subject_type(self) -> str:
        return self.type


Subject = Union[
    PullRequestSubject,
    IssueSubject,
    CommitSubject,
    ReleaseSubject,
    DiscussionSubject,
    CheckSuiteSubject,
    UnknownSubject,
]


@dataclass(frozen=True)
class Repository:
    """Repository a notification belongs to."""
    full_name: str   # "owner/repo"
    html_url: str    # https://github.com/owner/repo


@dataclass
class Notification:
    """Represents a GitHub notification thread."""
    id: str
    reason: str
    unread: bool
    updated_at: datetime  # timezone-aware UTC
    repository: Repository
    subject: Subject
    last_read_at: Optional[datetime] = None
    display_url: str = ""  # filled in by the URL resolver
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class RunOutcome:
    """Result of one pipeline run that did not fail."""
    status: str      # no_notifications_fetched | no_notifications_after_filters | forwarded | dry_run
    forwarded: int
    message: str


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO8601 timestamp ("2024-01-01T00:00:00Z")."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_subject(payload: Dict[str, Any]) -> Subject:
    """Build the subject variant matching the payload's ``type``."""
    subject_type = payload.get("type") or ""
    title = payload.get("title") or ""
    url = payload.get("url")

    if subject_type == "PullRequest":
        return PullRequestSubject(title=title, url=url)
    if subject_type == "Issue":
        return IssueSubject(title=title, url=url)
    if subject_type == "Commit":
        return CommitSubject(
            title=title,
            url=url,
            latest_comment_url=payload.get("latest_comment_url"),
        )
    if subject_type == "Release":
        return ReleaseSubject(title=title, url=url)
    if subject_type == "Discussion":
        return DiscussionSubject(title=title)
    if subject_type == "CheckSuite":
        return CheckSuiteSubject(title=title)
    return UnknownSubject(title=title, type=subject_type)


def parse_notification(payload: Dict[str, Any]) -> Notification:
    """
    Build a Notification from a ``GET /notifications`` item.

    Args:
        payload: One notification thread as returned by the GitHub API.

    Returns:
        A Notification with an empty ``display_url``.
    """
    repo = payload.get("repository") or {}
    full_name = repo.get("full_name") or ""
    html_url = repo.get("html_url") or (f"https://github.com/{full_name}" if full_name else "")

    return Notification(
        id=str(payload["id"]),
        reason=payload.get("reason") or "",
        unread=bool(payload.get("unread", False)),
        updated_at=_parse_timestamp(payload.get("updated_at")),
        last_read_at=_parse_timestamp(payload.get("last_read_at")),
        repository=Repository(full_name=full_name, html_url=html_url),
        subject=parse_subject(payload.get("subject") or {}),
        raw=payload,
    )
