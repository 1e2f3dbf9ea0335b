"""
Sample instant generation for balance charts.

Instants are anchored at the requested start time and spaced one interval
apart. Hourly, daily and weekly intervals are fixed durations; monthly steps
by calendar month.
"""
import enum
from datetime import datetime, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from balance_history.exceptions import InvalidIntervalError, InvalidRangeError


class Interval(str, enum.Enum):
    """Chart granularities."""
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


_FIXED_STEPS = {
    Interval.HOURLY: timedelta(hours=1),
    Interval.DAILY: timedelta(days=1),
    Interval.WEEKLY: timedelta(weeks=1),
}


def parse_interval(value: str) -> Interval:
    """Parse an interval name, case-insensitively."""
    try:
        return Interval(value.strip().lower())
    except (ValueError, AttributeError):
        valid = [i.value for i in Interval]
        raise InvalidIntervalError(f"Invalid interval '{value}'. Valid intervals: {valid}")


def instant_at(start_time: datetime, interval: Interval, index: int) -> datetime:
    """The index-th sample instant after start_time.

    Monthly instants are always computed from the anchor, never from the
    previous instant: a series anchored on Jan 31 goes Feb 28 (or 29),
    Mar 31, Apr 30, ... keeping the anchor day whenever the month has it.
    """
    if interval == Interval.MONTHLY:
        return start_time + relativedelta(months=index)
    return start_time + _FIXED_STEPS[interval] * index


def generate_sample_instants(
    start_time: datetime,
    end_time: datetime,
    interval: Interval,
    max_points: Optional[int] = None,
) -> List[datetime]:
    """
    Build the ordered sample instants covering [start_time, end_time].

    Args:
        start_time: First instant (always included)
        end_time: Inclusive upper bound
        interval: Spacing between instants
        max_points: Reject ranges that would produce more instants than this

    Returns:
        Strictly increasing, non-empty list starting at start_time

    Raises:
        InvalidRangeError: start_time is after end_time, or max_points exceeded
    """
    if start_time > end_time:
        raise InvalidRangeError(
            f"start_time {start_time.isoformat()} is after end_time {end_time.isoformat()}"
        )

    instants = []
    index = 0
    current = start_time
    while current <= end_time:
        instants.append(current)
        if max_points is not None and len(instants) > max_points:
            raise InvalidRangeError(
                f"Requested range produces more than {max_points} {interval.value} points"
            )
        index += 1
        try:
            current = instant_at(start_time, interval, index)
        except (OverflowError, ValueError):
            # Past year 9999, so necessarily past end_time
            break

    return instants
