"""Configuration management."""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv


@dataclass(frozen=True)
class FilterSet:
    """Include/exclude matchers for notification reasons and repositories.

    Every entry is lowercase. An empty tuple disables that stage.
    """
    include_reasons: Tuple[str, ...] = ()
    exclude_reasons: Tuple[str, ...] = ()
    include_repositories: Tuple[str, ...] = ()  # "owner/repo"
    exclude_repositories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    github_token: str
    slack_token: str
    slack_destination: str  # channel id or name, e.g. "#notifications"
    action_schedule: str    # same cron string that schedules the job
    timezone: str = "UTC"
    github_api_url: str = "https://api.github.com"
    paginate_all: bool = False
    only_unread: bool = True
    only_participating: bool = False
    filters: FilterSet = field(default_factory=FilterSet)
    sort_oldest_first: bool = False
    mark_as_read: bool = False
    rollup_notifications: bool = True
    date_format: str = "%b %d"
    time_format: str = "%I:%M %p"
    debug_logging: bool = False


def _parse_bool_env(key: str, default: bool) -> bool:
    """Parse a boolean flag from an environment variable."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes"}


def _parse_list_env(key: str) -> Tuple[str, ...]:
    """Parse comma-separated, lowercased list from environment variable."""
    value = os.getenv(key, "")
    if not value:
        return ()
    return tuple(item.strip().lower() for item in value.split(",") if item.strip())


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """
    Load configuration from environment variables.

    Args:
        env_file: Optional path of a .env file to load first. Variables
            already present in the environment win.

    Raises:
        ValueError: If required configuration values are missing.
    """
    load_dotenv(env_file)

    github_token = os.getenv("GITHUB_TOKEN")
    slack_token = os.getenv("SLACK_TOKEN")
    slack_destination = os.getenv("SLACK_DESTINATION")
    action_schedule = os.getenv("ACTION_SCHEDULE")

    missing = [
        name
        for name, value in {
            "GITHUB_TOKEN": github_token,
            "SLACK_TOKEN": slack_token,
            "SLACK_DESTINATION": slack_destination,
            "ACTION_SCHEDULE": action_schedule,
        }.items()
        if not value
    ]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    filters = FilterSet(
        include_reasons=_parse_list_env("FILTER_INCLUDE_REASONS"),
        exclude_reasons=_parse_list_env("FILTER_EXCLUDE_REASONS"),
        include_repositories=_parse_list_env("FILTER_INCLUDE_REPOSITORIES"),
        exclude_repositories=_parse_list_env("FILTER_EXCLUDE_REPOSITORIES"),
    )

    return AppConfig(
        github_token=github_token,
        slack_token=slack_token,
        slack_destination=slack_destination,
        action_schedule=action_schedule.strip(),
        timezone=os.getenv("TIMEZONE", "UTC").strip() or "UTC",
        github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/"),
        paginate_all=_parse_bool_env("PAGINATE_ALL", False),
        only_unread=_parse_bool_env("FILTER_ONLY_UNREAD", True),
        only_participating=_parse_bool_env("FILTER_ONLY_PARTICIPATING", False),
        filters=filters,
        sort_oldest_first=_parse_bool_env("SORT_OLDEST_FIRST", False),
        mark_as_read=_parse_bool_env("MARK_AS_READ", False),
        rollup_notifications=_parse_bool_env("ROLLUP_NOTIFICATIONS", True),
        date_format=os.getenv("DATE_FORMAT", "%b %d"),
        time_format=os.getenv("TIME_FORMAT", "%I:%M %p"),
        debug_logging=_parse_bool_env("DEBUG_LOGGING", False),
    )
