"""Voting and RSVP windows.

Voting closes one hour before the winning date and RSVPs close six hours
before it (both configurable). When no date is decided, or the winning
option is not a valid date, both stay open.
"""
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel

from app.core.config import settings
from app.planning.errors import PlanningError, WindowClosedError
from app.planning.winner import ensure_aware, winning_datetime


class WindowState(StrEnum):
    OPEN = "open"
    CLOSED_PAST = "closed_past"
    CLOSED_IMMINENT = "closed_imminent"
    UNDECIDED = "undecided"


class WindowStatus(BaseModel):
    """Countdown shown next to the vote and RSVP controls."""
    label: str
    state: WindowState
    is_open: bool
    deadline: datetime | None = None
    days: int = 0
    hours: int = 0
    minutes: int = 0
    urgent: bool = False
    message: str


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def _deadline(event, cutoff: timedelta) -> tuple[datetime, datetime] | None:
    try:
        winning = winning_datetime(event)
    except PlanningError:
        return None
    return winning, winning - cutoff


def voting_deadline(event, cutoff: timedelta | None = None) -> datetime | None:
    """Return when voting closes, or None if no valid date is decided."""
    cutoff = cutoff if cutoff is not None else timedelta(hours=settings.voting_cutoff_hours)
    resolved = _deadline(event, cutoff)
    return resolved[1] if resolved else None


def rsvp_deadline(event, cutoff: timedelta | None = None) -> datetime | None:
    """Return when RSVPs close, or None if no valid date is decided."""
    cutoff = cutoff if cutoff is not None else timedelta(hours=settings.rsvp_cutoff_hours)
    resolved = _deadline(event, cutoff)
    return resolved[1] if resolved else None


def is_voting_open(event, now: datetime | None = None, cutoff: timedelta | None = None) -> bool:
    """Voting is allowed while now is before the voting deadline."""
    deadline = voting_deadline(event, cutoff)
    if deadline is None:
        return True
    return ensure_aware(now or datetime.now(UTC)) < deadline


def is_rsvp_open(event, now: datetime | None = None, cutoff: timedelta | None = None) -> bool:
    """RSVPs are allowed while now is before the RSVP deadline."""
    deadline = rsvp_deadline(event, cutoff)
    if deadline is None:
        return True
    return ensure_aware(now or datetime.now(UTC)) < deadline


def window_status(
    event, label: str, cutoff: timedelta, now: datetime | None = None
) -> WindowStatus:
    """
    Describe a window relative to now.

    The remaining time is reported in the largest nonzero unit: days,
    then hours, then minutes. Minute-level countdowns are flagged urgent.
    """
    now = ensure_aware(now or datetime.now(UTC))
    resolved = _deadline(event, cutoff)
    if resolved is None:
        return WindowStatus(
            label=label,
            state=WindowState.UNDECIDED,
            is_open=True,
            message=f"{label} is open",
        )

    winning, deadline = resolved
    if now >= winning:
        return WindowStatus(
            label=label,
            state=WindowState.CLOSED_PAST,
            is_open=False,
            deadline=deadline,
            message=f"{label} closed - this event has passed",
        )
    if now >= deadline:
        return WindowStatus(
            label=label,
            state=WindowState.CLOSED_IMMINENT,
            is_open=False,
            deadline=deadline,
            message=f"{label} closed - the event starts soon",
        )

    remaining = deadline - now
    days = remaining.days
    hours = remaining.seconds // 3600
    minutes = (remaining.seconds % 3600) // 60
    status = WindowStatus(
        label=label,
        state=WindowState.OPEN,
        is_open=True,
        deadline=deadline,
        days=days,
        hours=hours,
        minutes=minutes,
        message="",
    )
    if days > 0:
        status.message = f"{label} closes in {_plural(days, 'day')}"
    elif hours > 0:
        status.message = f"{label} closes in {_plural(hours, 'hour')}"
    else:
        status.urgent = True
        if minutes > 0:
            status.message = f"{label} closes in {_plural(minutes, 'minute')}!"
        else:
            status.message = f"{label} closes in less than a minute!"
    return status


def voting_window(event, now: datetime | None = None) -> WindowStatus:
    return window_status(
        event, "Voting", timedelta(hours=settings.voting_cutoff_hours), now
    )


def rsvp_window(event, now: datetime | None = None) -> WindowStatus:
    return window_status(
        event, "RSVP", timedelta(hours=settings.rsvp_cutoff_hours), now
    )


def require_voting_open(event, now: datetime | None = None) -> None:
    """Raise WindowClosedError if voting is closed."""
    if not is_voting_open(event, now):
        raise WindowClosedError("Voting has closed for this event")


def require_rsvp_open(event, now: datetime | None = None) -> None:
    """Raise WindowClosedError if RSVPs are closed."""
    if not is_rsvp_open(event, now):
        raise WindowClosedError("RSVPs have closed for this event")
