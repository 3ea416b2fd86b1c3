"""Event model for planned gatherings.

This module defines the Event model, the central document of the planner.
An event carries the candidate dates people vote on, suggested items,
comments, RSVPs, and the votes themselves. List and map fields are stored
as JSON so the document is always read and written as a whole.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Event(SQLModel, table=True):
    """A planned event whose date is decided by vote.

    Events are created by an admin with a list of candidate dates. Users
    then vote on dates and items, comment, and RSVP once a date is winning.

    Attributes:
        id: Opaque identifier assigned by the store.
        name: Event title.
        description: Free text description.
        location: Free text location, optional.
        date_options: Ordered candidate dates. Free-form strings, not
            guaranteed to parse. Order decides ties between options.
        votes: Date option -> vote record. Either a legacy bare count or
            ``{"count": n, "voters": [{"id", "name"}]}``.
        item_votes: Item -> vote record, same shapes as ``votes``.
        items: Suggested items or activities.
        comments: Append-only list of ``{"text", "author", "timestamp"}``.
        rsvps: ``{"user_id", "name", "status", "timestamp"}`` entries, at
            most one per user. Status is "going", "maybe" or "not-going".
        participants: Legacy participant identifiers.
        host_id: User ID of the creator.
        host_name: Display name of the creator.
        privacy: "public" or "private". Private events are visible only to
            the host and to admins.
        category: Explicit category override ("social", "work" or
            "celebration"). When empty the category is inferred from text.
        created_at: Set once at creation.
        version: Incremented on every update, used for compare-and-swap.
        vote_reminder_sent: Whether vote deadline reminders went out.
    """
    __tablename__ = "events"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    description: str = ""
    location: str | None = None
    date_options: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    votes: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    item_votes: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    items: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    comments: list[dict] = Field(default_factory=list, sa_column=Column(JSON))
    rsvps: list[dict] = Field(default_factory=list, sa_column=Column(JSON))
    participants: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    host_id: str = Field(index=True)
    host_name: str = ""
    privacy: str = Field(default="public")
    category: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: int = Field(default=0)
    vote_reminder_sent: bool = Field(default=False)
