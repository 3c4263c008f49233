"""Derive the lookback window of a run from its cron schedule."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from croniter import croniter

logger = logging.getLogger(__name__)


class InvalidScheduleError(RuntimeError):
    """Raised when the cron schedule or its timezone cannot be evaluated."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        super().__init__(
            f'Invalid ACTION_SCHEDULE, "{expression}". '
            "Please use the same cron string you use to schedule this job."
        )


@dataclass(frozen=True)
class RunWindow:
    """Time range covered by one run. Both ends are timezone-aware UTC."""
    start: datetime
    end: datetime


def _make_aware_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_window(
    schedule: str,
    tz_name: str = "UTC",
    now: Optional[datetime] = None,
) -> RunWindow:
    """
    Compute the window of notifications a scheduled run is responsible for.

    The schedule is walked back twice from ``now``: the first step only
    reaches the start of the interval ``now`` sits in, the second reaches
    the start of the previous, completed interval.

    Args:
        schedule: Cron expression the job is scheduled with.
        tz_name: IANA timezone the schedule is evaluated in.
        now: Current time, defaults to the wall clock.

    Returns:
        RunWindow whose ``start`` is the second previous firing before ``now``.

    Raises:
        InvalidScheduleError: If the expression or timezone is invalid.
    """
    end = _make_aware_utc(now or datetime.now(timezone.utc))

    try:
        local_now = end.astimezone(ZoneInfo(tz_name))
        interval = croniter(schedule, local_now)
        interval.get_prev(datetime)
        last_run = interval.get_prev(datetime)
    except Exception as e:
        logger.error(f"Could not evaluate schedule '{schedule}' in {tz_name}: {e}")
        raise InvalidScheduleError(schedule) from e

    return RunWindow(start=_make_aware_utc(last_run), end=end)
