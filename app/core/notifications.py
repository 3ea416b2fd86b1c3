"""Create notifications for event activity and vote deadlines."""
import logging
from datetime import UTC, datetime, timedelta

from app.core.config import settings
from app.core.store import DocumentStore, QueryDescriptor
from app.models import Event, NotificationType
from app.planning.votes import normalize_votes
from app.planning.windows import is_voting_open, voting_deadline, voting_window
from app.planning.winner import ensure_aware

logger = logging.getLogger(__name__)


def interested_user_ids(event: Event) -> list[str]:
    """Host, participants, RSVP'd users and voters, without duplicates."""
    ids: list[str] = []
    candidates = [event.host_id, *event.participants]
    candidates += [r.get("user_id") for r in event.rsvps]
    for record in normalize_votes(event.votes).values():
        candidates += [v.id for v in record.voters]

    for user_id in candidates:
        if user_id and user_id not in ids:
            ids.append(user_id)
    return ids


def notify_users(
    store: DocumentStore,
    user_ids: list[str],
    type: str,
    title: str,
    message: str,
    event: Event | None = None,
) -> int:
    """
    Create one notification per user. Returns the number created.

    Raises ValueError if ``type`` is not a NotificationType.
    """
    kind = NotificationType(type)
    for user_id in user_ids:
        store.create(
            "notifications",
            {
                "user_id": user_id,
                "type": kind.value,
                "title": title,
                "message": message,
                "event_id": event.id if event else None,
                "event_name": event.name if event else None,
            },
        )
    if user_ids:
        logger.info(f"Sent {len(user_ids)} '{kind}' notifications")
    return len(user_ids)


def send_vote_deadline_reminders(store: DocumentStore, now: datetime | None = None) -> dict:
    """
    Remind interested users when an event's voting deadline is near.

    An event qualifies once its voting deadline is within
    ``settings.vote_reminder_hours`` and voting is still open. Each event
    is reminded at most once; ``vote_reminder_sent`` records that.

    Returns dict with reminder statistics.
    """
    now = ensure_aware(now or datetime.now(UTC))
    horizon = now + timedelta(hours=settings.vote_reminder_hours)
    stats = {"events": 0, "notifications": 0}

    pending = store.run(
        QueryDescriptor(collection="events", filters={"vote_reminder_sent": False})
    )
    for event in pending:
        deadline = voting_deadline(event)
        if deadline is None or deadline > horizon or not is_voting_open(event, now):
            continue

        # Collect before writing; commits expire the loaded event
        event_id = event.id
        recipients = interested_user_ids(event)
        sent = notify_users(
            store,
            recipients,
            NotificationType.VOTE_DEADLINE,
            "Voting closes soon",
            f"{event.name}: {voting_window(event, now).message}",
            event,
        )
        store.update("events", event_id, {"vote_reminder_sent": True})
        stats["events"] += 1
        stats["notifications"] += sent

    return stats
