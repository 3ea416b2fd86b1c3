"""RSVP list handling.

An event keeps at most one RSVP per user. Submitting again replaces the
previous entry (last write wins).
"""
from collections.abc import Sequence
from datetime import UTC, datetime

RSVP_STATUSES = ("going", "maybe", "not-going")


def find_rsvp(rsvps: Sequence[dict] | None, user_id: str) -> dict | None:
    """Return the user's RSVP entry, if any."""
    return next((r for r in rsvps or [] if r.get("user_id") == user_id), None)


def upsert_rsvp(
    rsvps: Sequence[dict] | None,
    user_id: str,
    name: str,
    status: str,
    now: datetime | None = None,
) -> list[dict]:
    """
    Return a new RSVP list with the user's entry set to ``status``.

    An existing entry for the user is replaced in place; otherwise the new
    entry is appended.
    """
    if status not in RSVP_STATUSES:
        raise ValueError(f"Invalid RSVP status: {status}")

    entry = {
        "user_id": user_id,
        "name": name,
        "status": status,
        "timestamp": (now or datetime.now(UTC)).isoformat(),
    }
    updated = []
    replaced = False
    for existing in rsvps or []:
        if existing.get("user_id") == user_id:
            if not replaced:
                updated.append(entry)
                replaced = True
        else:
            updated.append(dict(existing))
    if not replaced:
        updated.append(entry)
    return updated


def rsvp_counts(rsvps: Sequence[dict] | None) -> dict[str, int]:
    """Count RSVPs per status."""
    counts = dict.fromkeys(RSVP_STATUSES, 0)
    for rsvp in rsvps or []:
        status = rsvp.get("status")
        if status in counts:
            counts[status] += 1
    return counts
