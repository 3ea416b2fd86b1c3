"""Notification model for in-app messages.

Notifications are created by background triggers (such as the vote deadline
reminder job) and read by their recipient, who can only flip ``read``.
"""

from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from sqlmodel import Field, SQLModel


class NotificationType(StrEnum):
    EVENT_CREATED = "event_created"
    VOTE_DEADLINE = "vote_deadline"
    COMMENT = "comment"
    EVENT_UPDATED = "event_updated"


class Notification(SQLModel, table=True):
    """A message addressed to a single user.

    Attributes:
        id: Unique identifier.
        user_id: Recipient.
        type: A NotificationType value.
        title: Short heading.
        message: Body text.
        event_id: Related event, if any.
        event_name: Name of the related event at the time of creation.
        read: Whether the recipient has seen it.
        created_at: Creation timestamp, used for ordering.
    """
    __tablename__ = "notifications"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    type: str
    title: str
    message: str
    event_id: str | None = None
    event_name: str | None = None
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
