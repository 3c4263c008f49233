"""Forward GitHub notifications to Slack on a cron schedule."""
