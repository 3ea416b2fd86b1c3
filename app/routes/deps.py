"""Shared route dependencies."""
from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from app.core.database import get_session
from app.core.store import DocumentNotFoundError, DocumentStore
from app.planning.permissions import CurrentUser


def get_store(session: Session = Depends(get_session)) -> DocumentStore:
    """Dependency for a document store bound to the request's session."""
    return DocumentStore(session)


def get_current_user(
    x_user_id: str | None = Header(default=None),
    store: DocumentStore = Depends(get_store),
) -> CurrentUser:
    """
    Resolve the caller from the X-User-Id header.

    The identity provider authenticates the user upstream and forwards
    their ID; the profile supplies the name and role. Returns 401 if the
    header is missing or no profile exists.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not signed in")

    try:
        profile = store.get("users", x_user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=401, detail="No profile for this user") from None

    return CurrentUser(id=profile.id, name=profile.name, role=profile.role)
