"""Date and duration formatting for feed fields."""

import math
from datetime import datetime, timezone

RSS_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


def now_utc() -> datetime:
    """Get the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_rss_date(moment: datetime) -> str:
    """Format a datetime as an RFC-822 style GMT string.

    Naive datetimes are assumed to already be UTC.

    Example:
        >>> format_rss_date(datetime(2024, 1, 5, 9, 30, tzinfo=timezone.utc))
        'Fri, 05 Jan 2024 09:30:00 GMT'
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(RSS_DATE_FORMAT)


def format_timestamp(timestamp: float) -> str:
    """Format a POSIX timestamp as an RSS date."""
    return format_rss_date(datetime.fromtimestamp(timestamp, tz=timezone.utc))


def format_hhmmss(total_seconds: float) -> str:
    """Format seconds as ``HH:MM:SS``, rounding to the nearest second.

    Halves round up. Hours are not capped at 24.

    Raises:
        ValueError: If ``total_seconds`` is infinite or NaN
    """
    if not math.isfinite(total_seconds):
        raise ValueError(f"Duration is not a finite number: {total_seconds}")
    seconds = int(max(total_seconds, 0.0) + 0.5)
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
