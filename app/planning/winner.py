"""Winning date resolution."""
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from app.planning.errors import InvalidDateError, NoDateOptionsError
from app.planning.votes import vote_count

# Accepted besides ISO 8601, for options typed by hand
_FALLBACK_FORMATS = (
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%B %d, %Y",
    "%b %d, %Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
)


def ensure_aware(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware values pass through."""
    # SQLite hands back naive datetimes; they were stored as UTC
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def resolve_winning_date(
    date_options: Sequence[str] | None, votes: Mapping[str, Any] | None
) -> str | None:
    """
    Return the date option with the most votes.

    Options are scanned in order and the winner only changes on a strictly
    greater count, so the earliest listed option wins a tie. Returns None
    when there are no options ("date not decided yet").
    """
    if not date_options:
        return None

    winner = date_options[0]
    best = vote_count(votes, winner)
    for option in date_options[1:]:
        count = vote_count(votes, option)
        if count > best:
            winner, best = option, count
    return winner


def parse_date_option(value: str) -> datetime:
    """
    Parse a free-form date option into an aware datetime.

    Options without a UTC offset (including date-only options) are read as
    local time. Raises InvalidDateError if nothing matches.
    """
    text = (value or "").strip()
    if not text:
        raise InvalidDateError(f"Invalid date: {value!r}")

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            raise InvalidDateError(f"Invalid date: {value!r}")

    if parsed.tzinfo is None:
        # Interpret as local wall-clock time
        parsed = parsed.astimezone()
    return parsed


def winning_datetime(event) -> datetime:
    """
    Resolve and parse the winning date of an event.

    Raises NoDateOptionsError when the event has no options and
    InvalidDateError when the winning option does not parse.
    """
    winner = resolve_winning_date(event.date_options, event.votes)
    if winner is None:
        raise NoDateOptionsError()
    return parse_date_option(winner)
