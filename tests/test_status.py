"""Tests for event status and freshness classification."""

from datetime import UTC, datetime, timedelta

from app.models import Event
from app.planning.status import (
    EventStatus,
    Freshness,
    classify_event_status,
    classify_freshness,
)


def _event_on(day_offset: int, now: datetime, time: str = "23:59:00") -> Event:
    """Event whose only option falls on a local calendar day relative to now."""
    local_day = now.astimezone().date() + timedelta(days=day_offset)
    return Event(
        name="Picnic",
        host_id="h",
        date_options=[f"{local_day.isoformat()}T{time}"],
    )


class TestClassifyEventStatus:
    def test_today_is_happening(self):
        now = datetime.now(UTC)
        assert classify_event_status(_event_on(0, now), now) == EventStatus.HAPPENING

    def test_today_early_morning_is_still_happening(self):
        now = datetime.now(UTC)
        event = _event_on(0, now, time="00:01:00")
        assert classify_event_status(event, now) == EventStatus.HAPPENING

    def test_yesterday_is_past(self):
        now = datetime.now(UTC)
        assert classify_event_status(_event_on(-1, now), now) == EventStatus.PAST

    def test_tomorrow_is_upcoming(self):
        now = datetime.now(UTC)
        assert classify_event_status(_event_on(1, now), now) == EventStatus.UPCOMING

    def test_unparseable_date_is_upcoming(self):
        event = Event(name="Picnic", host_id="h", date_options=["when it stops raining"])
        assert classify_event_status(event) == EventStatus.UPCOMING

    def test_no_options_is_upcoming(self):
        event = Event(name="Picnic", host_id="h", date_options=[])
        assert classify_event_status(event) == EventStatus.UPCOMING

    def test_uses_winning_option(self):
        now = datetime.now(UTC)
        yesterday = (now.astimezone().date() - timedelta(days=1)).isoformat()
        tomorrow = (now.astimezone().date() + timedelta(days=1)).isoformat()
        event = Event(
            name="Picnic",
            host_id="h",
            date_options=[yesterday, tomorrow],
            votes={tomorrow: 2, yesterday: 1},
        )
        assert classify_event_status(event, now) == EventStatus.UPCOMING


class TestClassifyFreshness:
    def _created(self, days_ago: int, now: datetime) -> Event:
        return Event(name="Picnic", host_id="h", created_at=now - timedelta(days=days_ago))

    def test_new_event_is_upcoming(self):
        now = datetime.now(UTC)
        assert classify_freshness(self._created(2, now), now) == Freshness.UPCOMING

    def test_seven_days_is_still_upcoming(self):
        now = datetime.now(UTC)
        assert classify_freshness(self._created(7, now), now) == Freshness.UPCOMING

    def test_over_a_week_is_active(self):
        now = datetime.now(UTC)
        assert classify_freshness(self._created(8, now), now) == Freshness.ACTIVE

    def test_over_a_month_is_completed(self):
        now = datetime.now(UTC)
        assert classify_freshness(self._created(31, now), now) == Freshness.COMPLETED

    def test_naive_created_at_is_treated_as_utc(self):
        now = datetime.now(UTC)
        event = Event(
            name="Picnic",
            host_id="h",
            created_at=(now - timedelta(days=40)).replace(tzinfo=None),
        )
        assert classify_freshness(event, now) == Freshness.COMPLETED
