"""Vote tallying for date and item votes.

Two vote record shapes exist in stored events. Early events stored a bare
count per option; later events store ``{"count": n, "voters": [...]}`` so
that a user can only vote once per option. Records are normalized to the
structured shape when read and are always written back structured.

All functions here are pure: they never modify the mapping they are given.
"""
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from app.planning.errors import AlreadyVotedError, NotVotedError


class Voter(BaseModel):
    """Identity recorded against a vote."""
    id: str
    name: str = ""


class VoteRecord(BaseModel):
    """Votes cast for a single option."""
    count: int = Field(default=0, ge=0)
    voters: list[Voter] = Field(default_factory=list)


def normalize_vote_record(raw: Any) -> VoteRecord:
    """
    Normalize a stored vote entry.

    A legacy number ``n`` becomes ``VoteRecord(count=n)`` with no voters,
    a missing entry becomes an empty record, and a mapping is validated
    as a structured record. A structured record without ``count`` takes
    its count from the voter list.
    """
    if raw is None:
        return VoteRecord()
    if isinstance(raw, VoteRecord):
        return raw
    if isinstance(raw, bool):
        raise TypeError(f"Unsupported vote record: {raw!r}")
    if isinstance(raw, (int, float)):
        return VoteRecord(count=max(int(raw), 0))
    if isinstance(raw, Mapping):
        voters = [Voter.model_validate(v) for v in raw.get("voters") or []]
        count = raw.get("count")
        return VoteRecord(
            count=max(int(count), 0) if count is not None else len(voters),
            voters=voters,
        )
    raise TypeError(f"Unsupported vote record: {raw!r}")


def normalize_votes(votes: Mapping[str, Any] | None) -> dict[str, VoteRecord]:
    """Normalize every entry of a vote mapping."""
    return {option: normalize_vote_record(raw) for option, raw in (votes or {}).items()}


def dump_votes(votes: Mapping[str, VoteRecord]) -> dict[str, dict]:
    """Convert normalized records back to the stored (structured) shape."""
    return {option: record.model_dump() for option, record in votes.items()}


def vote_count(votes: Mapping[str, Any] | None, option: str) -> int:
    """Return the number of votes for one option (0 if absent)."""
    return normalize_vote_record((votes or {}).get(option)).count


def total_votes(votes: Mapping[str, Any] | None) -> int:
    """Return the sum of counts across all options.

    A user may vote for several options, and each of those votes counts.
    """
    return sum(record.count for record in normalize_votes(votes).values())


def has_voted(votes: Mapping[str, Any] | None, option: str, voter_id: str) -> bool:
    """Check whether a user appears in an option's voter list."""
    record = normalize_vote_record((votes or {}).get(option))
    return any(v.id == voter_id for v in record.voters)


def apply_vote(votes: Mapping[str, Any] | None, option: str, voter: Voter) -> dict[str, dict]:
    """
    Return a new vote mapping with ``voter`` added to ``option``.

    Raises AlreadyVotedError if the voter is already listed for the option;
    the input mapping is left untouched either way.
    """
    normalized = normalize_votes(votes)
    record = normalized.get(option, VoteRecord())
    if has_voted(normalized, option, voter.id):
        raise AlreadyVotedError()

    normalized[option] = VoteRecord(
        count=record.count + 1,
        voters=[*record.voters, voter],
    )
    return dump_votes(normalized)


def remove_vote(votes: Mapping[str, Any] | None, option: str, voter_id: str) -> dict[str, dict]:
    """
    Return a new vote mapping with ``voter_id`` removed from ``option``.

    The count is decremented with a floor of zero. Raises NotVotedError if
    the user is not listed for the option.
    """
    normalized = normalize_votes(votes)
    record = normalized.get(option, VoteRecord())
    if not has_voted(normalized, option, voter_id):
        raise NotVotedError()

    normalized[option] = VoteRecord(
        count=max(record.count - 1, 0),
        voters=[v for v in record.voters if v.id != voter_id],
    )
    return dump_votes(normalized)
