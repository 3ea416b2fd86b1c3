"""Build iCalendar files for an event's winning date."""
import re
from datetime import UTC, datetime, timedelta

from app.core.config import settings
from app.planning.winner import winning_datetime

ICS_MIME_TYPE = "text/calendar"


def _format_utc(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def _escape(text: str) -> str:
    """Escape text for an iCalendar TEXT value."""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _fold(line: str, limit: int = 75) -> str:
    """Fold a content line so no physical line exceeds ``limit`` octets."""
    parts = []
    current = ""
    size = 0
    budget = limit
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > budget:
            parts.append(current)
            # Continuation lines start with a space, which counts too
            current, size, budget = "", 0, limit - 1
        current += char
        size += width
    parts.append(current)
    return "\r\n ".join(parts)


def build_ics(event, now: datetime | None = None) -> str:
    """
    Build a VCALENDAR containing one VEVENT for the winning date.

    The event lasts a fixed number of hours (two by default) from the
    winning date. Raises NoDateOptionsError or InvalidDateError when there
    is no usable winning date, in which case nothing is produced.
    """
    start = winning_datetime(event)
    end = start + timedelta(hours=settings.event_duration_hours)
    stamp = now or datetime.now(UTC)
    base_url = settings.public_base_url.rstrip("/")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{settings.app_name}//Event Planner//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{event.id}@{settings.calendar_uid_domain}",
        f"DTSTAMP:{_format_utc(stamp)}",
        f"DTSTART:{_format_utc(start)}",
        f"DTEND:{_format_utc(end)}",
        f"SUMMARY:{_escape(event.name or '')}",
        f"DESCRIPTION:{_escape(event.description or '')}",
    ]
    if event.location:
        lines.append(f"LOCATION:{_escape(event.location)}")
    lines += [
        f"URL:{base_url}/events/{event.id}",
        "STATUS:CONFIRMED",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(_fold(line) for line in lines) + "\r\n"


def ics_filename(name: str | None) -> str:
    """Derive a download filename by stripping non-alphanumeric characters."""
    stem = re.sub(r"[^A-Za-z0-9]", "", name or "")
    return f"{stem or 'event'}.ics"
