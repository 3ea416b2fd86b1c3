"""Relative timestamps for notification lists."""
from datetime import UTC, datetime


def format_time_ago(value: datetime, now: datetime | None = None) -> str:
    """
    Format a timestamp relative to now.

    Under a minute is "Just now", then minutes, hours and days up to a week
    ("5m ago", "3h ago", "2d ago"). Older timestamps show the date.
    """
    now = now or datetime.now(UTC)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    diff = (now - value).total_seconds()

    if diff < 60:
        return "Just now"
    if diff < 3600:
        return f"{int(diff // 60)}m ago"
    if diff < 86400:
        return f"{int(diff // 3600)}h ago"
    if diff < 604800:
        return f"{int(diff // 86400)}d ago"
    return value.strftime("%b %d, %Y")
