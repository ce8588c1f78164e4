"""Calendar day helpers.

Day keys are timezone-naive ``YYYY-MM-DD`` strings for the local wall-clock
day a record was created on. All arithmetic is done on ``date`` objects so
subtracting days is calendar subtraction, never 24h blocks.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

DateLike = Union[date, datetime, str]

DAY_KEY_FORMAT = "%Y-%m-%d"

# Fixed English labels so chart axes don't depend on the process locale
WEEKDAY_SHORT_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_SHORT_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def today() -> date:
    """Return the local calendar day."""
    return date.today()


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time, pass naive through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or day key to a ``date``."""
    if isinstance(value, datetime):
        return to_local_naive(value).date()
    if isinstance(value, date):
        return value
    return parse_day_key(value)


def parse_day_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key.

    Raises:
        ValueError: If the key is not a valid calendar day.
    """
    return datetime.strptime(key.strip()[:10], DAY_KEY_FORMAT).date()


def day_key(value: DateLike) -> str:
    """Format a date or timestamp as its ``YYYY-MM-DD`` day key."""
    return to_date(value).strftime(DAY_KEY_FORMAT)


def days_before(value: DateLike, n: int) -> date:
    """Return the calendar day ``n`` days before ``value``."""
    return to_date(value) - timedelta(days=n)


def days_between(later: DateLike, earlier: DateLike) -> int:
    """Whole calendar days from ``earlier`` to ``later`` (negative if reversed)."""
    return (to_date(later) - to_date(earlier)).days


def day_range(end: DateLike, window: int) -> List[date]:
    """Days ``end-(window-1)`` .. ``end``, oldest first."""
    end_day = to_date(end)
    return [end_day - timedelta(days=i) for i in range(window - 1, -1, -1)]


def weekday_short_label(value: DateLike) -> str:
    """Three-letter day name for chart axis labels."""
    return WEEKDAY_SHORT_LABELS[to_date(value).weekday()]


def format_relative_date(created_at: datetime, reference: Optional[date] = None) -> str:
    """Human label for when an entry was written.

    "Today", "Yesterday", "N days ago" within a week, else "Mar 4, 2024".
    """
    reference = reference or today()
    day = to_date(created_at)
    days_ago = days_between(reference, day)
    if days_ago == 0:
        return "Today"
    if days_ago == 1:
        return "Yesterday"
    if 1 < days_ago < 7:
        return f"{days_ago} days ago"
    return f"{MONTH_SHORT_LABELS[day.month - 1]} {day.day}, {day.year}"


def format_clock_time(created_at: datetime) -> str:
    """12-hour clock time such as ``9:05 PM``."""
    local = to_local_naive(created_at)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"
