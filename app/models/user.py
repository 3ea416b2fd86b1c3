"""User profile model.

Profiles are keyed by the identity provider's user ID. The role is the
only authorization signal: admins create, edit and delete events, every
other user may vote, comment and RSVP.
"""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class UserProfile(SQLModel, table=True):
    """Profile for an authenticated user.

    Attributes:
        id: User ID from the identity provider.
        name: Display name.
        email: Email address.
        role: "admin" or "user".
        created_at: When the profile was created.
    """
    __tablename__ = "users"

    id: str = Field(primary_key=True)
    name: str
    email: str = ""
    role: str = Field(default="user")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
