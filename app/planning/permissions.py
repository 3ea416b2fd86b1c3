"""Role checks for event actions.

The caller's identity is always passed in explicitly as a CurrentUser.
"""
from pydantic import BaseModel

from app.planning.errors import UnauthorizedError

ADMIN_ROLE = "admin"
USER_ROLE = "user"


class CurrentUser(BaseModel):
    """The authenticated user making a request."""
    id: str
    name: str = ""
    role: str = USER_ROLE

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def require_admin(user: CurrentUser, action: str = "manage events") -> None:
    """Raise UnauthorizedError unless the user is an admin."""
    if not user.is_admin:
        raise UnauthorizedError(f"Only admins can {action}")


def can_view_event(user: CurrentUser, event) -> bool:
    """Public events are visible to all; private ones to the host and admins."""
    if event.privacy != "private":
        return True
    return user.is_admin or event.host_id == user.id


def can_delete_event(user: CurrentUser, event) -> bool:
    return user.is_admin or event.host_id == user.id


def require_can_delete(user: CurrentUser, event) -> None:
    if not can_delete_event(user, event):
        raise UnauthorizedError("Only admins or the host can delete this event")
