"""Event status classification.

Two views exist over the same event and are deliberately kept apart:

- ``classify_event_status`` compares the winning date's calendar day with
  today and is the one that matters for voting and RSVP gating.
- ``classify_freshness`` only looks at how long ago the event was created
  and drives the simple activity badge on event cards.
"""
from datetime import UTC, datetime
from enum import StrEnum

from app.planning.errors import PlanningError
from app.planning.winner import ensure_aware, winning_datetime


class EventStatus(StrEnum):
    UPCOMING = "upcoming"
    HAPPENING = "happening"
    PAST = "past"


class Freshness(StrEnum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


def classify_event_status(event, now: datetime | None = None) -> EventStatus:
    """
    Classify an event as past, happening or upcoming.

    Compares the local calendar day of the winning date with the local
    calendar day of ``now``. Time of day is ignored. Events without a
    decided or parseable date are upcoming.
    """
    try:
        winning = winning_datetime(event)
    except PlanningError:
        return EventStatus.UPCOMING

    event_day = winning.astimezone().date()
    today = ensure_aware(_now(now)).astimezone().date()

    if event_day < today:
        return EventStatus.PAST
    if event_day == today:
        return EventStatus.HAPPENING
    return EventStatus.UPCOMING


def classify_freshness(event, now: datetime | None = None) -> Freshness:
    """Classify an event by the days elapsed since it was created."""
    elapsed = ensure_aware(_now(now)) - ensure_aware(event.created_at)
    days = elapsed.days
    if days > 30:
        return Freshness.COMPLETED
    if days > 7:
        return Freshness.ACTIVE
    return Freshness.UPCOMING
