"""Tests for notification creation and vote deadline reminders."""

from datetime import UTC, datetime, timedelta

import pytest

from app.core.notifications import (
    interested_user_ids,
    notify_users,
    send_vote_deadline_reminders,
)
from app.core.store import DocumentStore
from app.models import Event, NotificationType


def _create_event(store: DocumentStore, start: datetime, **extra) -> str:
    data = {
        "name": "Board Game Night",
        "host_id": "host",
        "date_options": [start.replace(microsecond=0).isoformat()],
        **extra,
    }
    return store.create("events", data)


class TestInterestedUsers:
    def test_collects_host_participants_rsvps_and_voters(self):
        event = Event(
            name="Picnic",
            host_id="host",
            participants=["p1", "host"],
            rsvps=[{"user_id": "r1", "name": "R", "status": "going", "timestamp": ""}],
            votes={"2026-06-01": {"count": 2, "voters": [{"id": "v1"}, {"id": "p1"}]}, "2026-06-02": 3},
        )
        assert interested_user_ids(event) == ["host", "p1", "r1", "v1"]


class TestNotifyUsers:
    def test_one_notification_per_user(self, store: DocumentStore):
        event_id = store.create("events", {"name": "Picnic", "host_id": "host"})
        event = store.get("events", event_id)

        created = notify_users(store, ["a", "b"], "comment", "New comment", "Hi", event)

        assert created == 2
        notes = store.query("notifications", user_id="a")
        assert len(notes) == 1
        assert notes[0].event_id == event_id
        assert notes[0].event_name == "Picnic"
        assert notes[0].read is False

    def test_unknown_type_rejected(self, store: DocumentStore):
        with pytest.raises(ValueError):
            notify_users(store, ["a"], "birthday", "Hi", "Hi")
        assert store.query("notifications") == []

    def test_accepts_enum_members(self, store: DocumentStore):
        notify_users(store, ["a"], NotificationType.EVENT_UPDATED, "Updated", "Changed")
        assert store.query("notifications")[0].type == "event_updated"


class TestVoteDeadlineReminders:
    def test_reminds_once_when_deadline_is_near(self, store: DocumentStore):
        now = datetime.now(UTC)
        event_id = _create_event(store, now + timedelta(hours=10), participants=["p1"])

        stats = send_vote_deadline_reminders(store, now)

        assert stats == {"events": 1, "notifications": 2}
        assert store.get("events", event_id).vote_reminder_sent is True
        reminders = store.query("notifications", type="vote_deadline")
        assert sorted(n.user_id for n in reminders) == ["host", "p1"]

        again = send_vote_deadline_reminders(store, now)
        assert again == {"events": 0, "notifications": 0}

    def test_reminder_uses_countdown_message(self, store: DocumentStore):
        now = datetime.now(UTC).replace(microsecond=0)
        _create_event(store, now + timedelta(hours=1, minutes=40))

        send_vote_deadline_reminders(store, now)

        reminder = store.query("notifications", type="vote_deadline")[0]
        assert reminder.message == "Board Game Night: Voting closes in 40 minutes!"

    def test_reminder_message_in_hours(self, store: DocumentStore):
        now = datetime.now(UTC).replace(microsecond=0)
        _create_event(store, now + timedelta(hours=6))

        send_vote_deadline_reminders(store, now)

        reminder = store.query("notifications", type="vote_deadline")[0]
        assert reminder.message == "Board Game Night: Voting closes in 5 hours"

    def test_skips_distant_events(self, store: DocumentStore):
        now = datetime.now(UTC)
        _create_event(store, now + timedelta(days=5))

        assert send_vote_deadline_reminders(store, now)["events"] == 0

    def test_skips_closed_voting(self, store: DocumentStore):
        now = datetime.now(UTC)
        _create_event(store, now + timedelta(minutes=20))

        assert send_vote_deadline_reminders(store, now)["events"] == 0

    def test_skips_undecided_events(self, store: DocumentStore):
        store.create("events", {"name": "Someday", "host_id": "host", "date_options": []})

        assert send_vote_deadline_reminders(store)["events"] == 0
