"""
DateTime utilities for the booking calendar.
Dates travel as YYYY-MM-DD strings; "now" is evaluated in the office timezone.
"""
from datetime import datetime, timedelta, date
from typing import List, Optional

import pytz

from core.settings import settings


# Timezone configuration
TIMEZONE = pytz.timezone(settings.timezone)

DATE_FORMAT = "%Y-%m-%d"
WORKING_DAYS_PER_WEEK = 5


def get_current_datetime() -> datetime:
    """Get current datetime in the office timezone."""
    return datetime.now(TIMEZONE)


def format_date(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return value.strftime(DATE_FORMAT)


def parse_date(text: str) -> date:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        ValueError: If the string is not a valid calendar date
    """
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


def get_today_date(now: Optional[datetime] = None) -> str:
    """Get today's date in YYYY-MM-DD format."""
    now = now or get_current_datetime()
    return format_date(now.date())


def is_past_cutoff(
    now: datetime,
    cutoff_weekday: int = 4,
    cutoff_hour: int = 15
) -> bool:
    """
    Check whether the booking window has rolled over to next week.

    The window rolls over at cutoff_hour on cutoff_weekday (Friday 15:00 by
    default) and stays rolled over through the weekend.
    """
    weekday = now.weekday()
    if weekday > cutoff_weekday:
        return True
    return weekday == cutoff_weekday and now.hour >= cutoff_hour


def get_booking_window(
    now: Optional[datetime] = None,
    weeks: int = 2,
    cutoff_weekday: int = 4,
    cutoff_hour: int = 15
) -> List[str]:
    """
    Get the bookable weekdays.

    Starts at this week's Monday (or next week's Monday once the cutoff has
    passed) and covers Monday to Friday for the given number of weeks.
    Dates before today are dropped.

    Args:
        now: Reference datetime (defaults to current office time)
        weeks: Number of weeks in the window
        cutoff_weekday: Weekday (0 = Monday) on which the window rolls over
        cutoff_hour: Hour on the cutoff weekday at which it rolls over

    Returns:
        List of YYYY-MM-DD strings in ascending order
    """
    now = now or get_current_datetime()
    today = now.date()

    monday = today - timedelta(days=today.weekday())
    if is_past_cutoff(now, cutoff_weekday, cutoff_hour):
        monday += timedelta(days=7)

    dates = []
    for week in range(weeks):
        for day in range(WORKING_DAYS_PER_WEEK):
            candidate = monday + timedelta(weeks=week, days=day)
            if candidate < today:
                continue
            dates.append(format_date(candidate))
    return dates


def get_first_available_date(
    now: Optional[datetime] = None,
    weeks: int = 2,
    cutoff_weekday: int = 4,
    cutoff_hour: int = 15
) -> str:
    """Get the first date of the booking window, falling back to today."""
    window = get_booking_window(now, weeks, cutoff_weekday, cutoff_hour)
    if window:
        return window[0]
    return get_today_date(now)


def is_bookable_date(
    value: str,
    now: Optional[datetime] = None,
    weeks: int = 2,
    cutoff_weekday: int = 4,
    cutoff_hour: int = 15
) -> bool:
    """Check whether a YYYY-MM-DD date falls inside the booking window."""
    return value in get_booking_window(now, weeks, cutoff_weekday, cutoff_hour)
