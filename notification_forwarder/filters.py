"""Reason and repository filtering for fetched notifications."""

from typing import List, Sequence

from .config import AppConfig, FilterSet
from .models import Notification


def filter_notifications(
    notifications: Sequence[Notification],
    filters: FilterSet,
) -> List[Notification]:
    """
    Apply the include/exclude filters to notifications.

    Stages run in a fixed order (reason include, reason exclude, repository
    include, repository exclude) and each is skipped when its list is empty.
    Matching is case-insensitive and the input order is preserved.
    """
    result = list(notifications)

    if filters.include_reasons:
        result = [n for n in result if n.reason.lower() in filters.include_reasons]
    if filters.exclude_reasons:
        result = [n for n in result if n.reason.lower() not in filters.exclude_reasons]

    if filters.include_repositories:
        result = [
            n for n in result
            if n.repository.full_name.lower() in filters.include_repositories
        ]
    if filters.exclude_repositories:
        result = [
            n for n in result
            if n.repository.full_name.lower() not in filters.exclude_repositories
        ]

    return result


def _format_list(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "[]"


def describe_filters(config: AppConfig) -> str:
    """Render the active filter settings for log messages."""
    filters = config.filters
    return "\n".join([
        f"  FILTER_ONLY_UNREAD: {config.only_unread}",
        f"  FILTER_ONLY_PARTICIPATING: {config.only_participating}",
        f"  FILTER_INCLUDE_REASONS: {_format_list(filters.include_reasons)}",
        f"  FILTER_EXCLUDE_REASONS: {_format_list(filters.exclude_reasons)}",
        f"  FILTER_INCLUDE_REPOSITORIES: {_format_list(filters.include_repositories)}",
        f"  FILTER_EXCLUDE_REPOSITORIES: {_format_list(filters.exclude_repositories)}",
    ])
