"""
Contribution calendar for the GitLab activity heatmap.

Builds the range of days shown by a widget family, folds event timestamps
into per-day counts and maps counts to intensity levels and colors.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

# Number of weeks (columns) rendered for each supported widget family.
FAMILY_WEEKS = {
    "small": 7,
    "medium": 17,
}

# Hour used when stepping back from "now" so a DST change can't move the date.
NORMALIZED_HOUR = 12

PALETTE = {
    "gray": "#eaedf6",
    "light": "#acd5f2",
    "main": "#7fa8c9",
    "dark": "#527ba0",
    "darker": "#254e77",
}

LEVEL_COLORS = [
    PALETTE["gray"],
    PALETTE["light"],
    PALETTE["main"],
    PALETTE["dark"],
    PALETTE["darker"],
]


class UnsupportedConfigurationError(Exception):
    """Raised when a widget family has no graph layout."""

    pass


@dataclass
class DateRange:
    """Days covered by a contribution graph."""

    family: str
    weeks: int
    day_of_week: int
    days_count: int
    start_date: date
    end_date: date

    @property
    def after(self) -> str:
        """
        Value for the events API ``after`` filter.

        GitLab treats ``after`` as exclusive, so this is the day before
        start_date.
        """
        return (self.start_date - timedelta(days=1)).isoformat()


def get_day_of_week(day: date) -> int:
    """Return the weekday of a date, with 0 for Sunday and 6 for Saturday."""
    return day.isoweekday() % 7


def get_date_range(family: str, now: Optional[datetime] = None) -> DateRange:
    """
    Calculate the days shown by a widget family.

    The last column is only filled up to today's weekday, so the range starts
    on the Sunday of the first column and ends today.

    Args:
        family: Widget family ('small' or 'medium')
        now: Override for the current time (for testing)

    Returns:
        DateRange describing the columns and the first and last day

    Raises:
        UnsupportedConfigurationError: If the family is not supported
    """
    if family not in FAMILY_WEEKS:
        raise UnsupportedConfigurationError(
            "GitLab Contribution Graph only supports small and medium families. "
            "Please select one of those variations."
        )

    if now is None:
        now = datetime.now()

    weeks = FAMILY_WEEKS[family]
    day_of_week = get_day_of_week(now.date())
    days_count = weeks * 7 - (7 - day_of_week)

    noon = now.replace(hour=NORMALIZED_HOUR, minute=0, second=0, microsecond=0)
    start_date = (noon - timedelta(days=days_count)).date()

    return DateRange(
        family=family,
        weeks=weeks,
        day_of_week=day_of_week,
        days_count=days_count,
        start_date=start_date,
        end_date=now.date(),
    )


def build_calendar(start_date: date, end_date: date) -> dict[str, int]:
    """
    Create a calendar with a zero count for every day in the range.

    Args:
        start_date: First day (inclusive)
        end_date: Last day (inclusive)

    Returns:
        Dictionary of YYYY-MM-DD -> 0, ordered from oldest to newest
    """
    if end_date < start_date:
        raise ValueError(
            f"end_date {end_date.isoformat()} is before start_date {start_date.isoformat()}"
        )

    calendar = {}
    current_date = start_date
    while current_date <= end_date:
        calendar[current_date.isoformat()] = 0
        current_date += timedelta(days=1)

    return calendar


def parse_event_date(timestamp: str, tz: Optional[tzinfo] = None) -> date:
    """
    Get the calendar day of an event timestamp.

    Aware timestamps are converted to tz (the local time zone when None)
    before the date is taken.
    """
    moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def update_calendar_with_events(
    calendar: dict[str, int],
    events: Iterable[str],
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Add one contribution per event to the matching day of the calendar.

    Events outside the calendar's range, or with an unreadable timestamp,
    are skipped.

    Args:
        calendar: Calendar from build_calendar(), updated in place
        events: ISO 8601 created_at timestamps
        tz: Time zone the calendar days are in (local time zone when None)

    Returns:
        Number of events that were counted
    """
    counted = 0
    for timestamp in events:
        try:
            key = parse_event_date(timestamp, tz).isoformat()
        except (AttributeError, TypeError, ValueError):
            logger.debug("Skipping event with unreadable timestamp %r", timestamp)
            continue

        if key not in calendar:
            logger.debug("Skipping event outside calendar range: %s", timestamp)
            continue

        calendar[key] += 1
        counted += 1

    return counted


def get_contribution_level(count: int) -> int:
    """
    Calculate intensity level for heatmap coloring.

    Args:
        count: Number of contributions for the day

    Returns:
        Level from 0-4:
            0: No contributions
            1: 1-9 contributions
            2: 10-19 contributions
            3: 20-29 contributions
            4: 30+ contributions
    """
    if count <= 0:
        return 0
    elif count >= 30:
        return 4
    elif count >= 20:
        return 3
    elif count >= 10:
        return 2
    else:
        return 1


def get_contribution_color(count: int) -> str:
    """Return the palette color for a day's contribution count."""
    return LEVEL_COLORS[get_contribution_level(count)]
