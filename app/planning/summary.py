"""Derived view state for an event.

Combines the individual planning rules into what an event page or a
dashboard card shows. Nothing here is stored; it is recomputed on every
read.
"""
from datetime import UTC, datetime

from app.planning.category import event_category
from app.planning.rsvp import rsvp_counts
from app.planning.status import classify_event_status, classify_freshness
from app.planning.votes import total_votes, vote_count
from app.planning.windows import rsvp_window, voting_window
from app.planning.winner import ensure_aware, resolve_winning_date


def summarize_event(event, now: datetime | None = None) -> dict:
    """Compute the derived fields for one event snapshot."""
    now = ensure_aware(now or datetime.now(UTC))
    winning_date = resolve_winning_date(event.date_options, event.votes)

    return {
        "winning_date": winning_date,
        "date_decided": winning_date is not None,
        "status": classify_event_status(event, now),
        "freshness": classify_freshness(event, now),
        "category": event_category(event),
        "total_votes": total_votes(event.votes),
        "date_tallies": {
            option: vote_count(event.votes, option) for option in event.date_options
        },
        "item_tallies": {
            item: vote_count(event.item_votes, item) for item in event.items
        },
        "rsvp_counts": rsvp_counts(event.rsvps),
        "date_options_count": len(event.date_options),
        "participants_count": len(event.participants),
        "comments_count": len(event.comments),
        "voting": voting_window(event, now).model_dump(mode="json"),
        "rsvp": rsvp_window(event, now).model_dump(mode="json"),
    }
