"""Main entry point for the GitHub notification forwarder."""

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime
from typing import Optional

from .config import AppConfig, load_config
from .dispatcher import dispatch, order_notifications
from .filters import describe_filters, filter_notifications
from .github_client import GitHubClient, fetch_notifications
from .models import RunOutcome
from .scheduler import resolve_window
from .slack_notifier import SlackNotifier
from .url_resolver import resolve_urls

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def forward_notifications(
    config: AppConfig,
    github: GitHubClient,
    notifier: SlackNotifier,
    now: Optional[datetime] = None,
    dry_run: bool = False,
) -> RunOutcome:
    """
    Run the pipeline once: window, fetch, filter, resolve URLs, dispatch.

    Empty results at any stage are a successful outcome, not an error.
    Every failure propagates to the caller.
    """
    window = resolve_window(config.action_schedule, config.timezone, now)

    logger.info(
        f"Fetching notifications between {window.start.isoformat()} "
        f"and now, {window.end.isoformat()}..."
    )
    notifications = fetch_notifications(
        github,
        window.start,
        only_unread=config.only_unread,
        only_participating=config.only_participating,
        paginate_all=config.paginate_all,
    )

    if not notifications:
        message = (
            "No new notifications fetched since last run with given filters:\n"
            f"  FILTER_ONLY_UNREAD: {config.only_unread}\n"
            f"  FILTER_ONLY_PARTICIPATING: {config.only_participating}"
        )
        logger.info(message)
        return RunOutcome(status="no_notifications_fetched", forwarded=0, message=message)

    logger.info(f"{len(notifications)} notifications fetched before filtering.")

    if config.debug_logging:
        logger.info("Every fetched notification:")
        for notification in notifications:
            logger.info(json.dumps(notification.raw, indent=2))

    notifications = filter_notifications(notifications, config.filters)

    if not notifications:
        message = (
            "No new notifications since last run after running through all filters:\n"
            f"{describe_filters(config)}"
        )
        logger.info(message)
        return RunOutcome(status="no_notifications_after_filters", forwarded=0, message=message)

    logger.info(f"{len(notifications)} notifications left after filtering.")
    notifications = resolve_urls(github, notifications)

    if dry_run:
        for notification in order_notifications(notifications, config.sort_oldest_first):
            logger.info(
                f"[DRY RUN] Would forward {notification.repository.full_name} "
                f"({notification.reason}): {notification.subject.title} -> {notification.display_url}"
            )
        message = f"Dry run: {len(notifications)} notifications would be forwarded."
        logger.info(message)
        return RunOutcome(status="dry_run", forwarded=0, message=message)

    sent = dispatch(notifier, github, notifications, config)

    message = f"Forwarded {len(sent)} notifications."
    logger.info("Run completed successfully.")
    return RunOutcome(status="forwarded", forwarded=len(sent), message=message)


def run_once(args=None) -> int:
    """Run the forwarder once and return the process exit code."""
    try:
        logger.info("Loading configuration...")
        config = load_config(getattr(args, "env_file", None))

        if args is not None:
            if args.mark_as_read is not None:
                config = replace(config, mark_as_read=args.mark_as_read)
            if args.paginate_all:
                config = replace(config, paginate_all=True)

        github = GitHubClient(config.github_token, base_url=config.github_api_url)
        notifier = SlackNotifier(config.slack_token)

        forward_notifications(
            config,
            github,
            notifier,
            dry_run=bool(args and args.dry_run),
        )
        return 0

    except Exception as e:
        logger.error(f"Fatal error in run_once: {e}", exc_info=True)
        logger.error(f"Run failed: {e}")
        return 1


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Forward GitHub notifications to a Slack channel"
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (default: search for .env from the working directory)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch, filter and resolve notifications, but don't post to Slack or mark anything as read"
    )
    parser.add_argument(
        "--mark-as-read",
        dest="mark_as_read",
        action="store_true",
        default=None,
        help="Mark forwarded notifications as read (overrides MARK_AS_READ)"
    )
    parser.add_argument(
        "--no-mark-as-read",
        dest="mark_as_read",
        action="store_false",
        help="Leave forwarded notifications unread (overrides MARK_AS_READ)"
    )
    parser.add_argument(
        "--paginate-all",
        action="store_true",
        help="Fetch every page of notifications instead of the first 100 (overrides PAGINATE_ALL)"
    )
    return parser.parse_args(argv)


def main():
    """Main entry point with command-line argument parsing."""
    args = parse_args()
    sys.exit(run_once(args))


if __name__ == "__main__":
    main()
