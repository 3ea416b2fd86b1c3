"""User profile routes."""
from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, field_validator

from app.core.store import DocumentNotFoundError, DocumentStore, to_document
from app.planning.permissions import USER_ROLE, CurrentUser
from app.routes.deps import get_current_user, get_store

router = APIRouter(prefix="/users", tags=["users"])


class ProfileCreate(BaseModel):
    name: str
    email: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


@router.post("", status_code=201)
async def register_profile(
    body: ProfileCreate,
    x_user_id: str | None = Header(default=None),
    store: DocumentStore = Depends(get_store),
):
    """
    Create the caller's profile after sign-up.

    Self-registered profiles always get the "user" role; admins are created
    with ``scripts/create_admin.py``. Returns 409 if a profile exists.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not signed in")

    try:
        store.get("users", x_user_id)
    except DocumentNotFoundError:
        pass
    else:
        raise HTTPException(status_code=409, detail="Profile already exists")

    store.create(
        "users",
        {"id": x_user_id, "name": body.name, "email": body.email, "role": USER_ROLE},
    )
    return to_document(store.get("users", x_user_id))


@router.get("/me")
async def my_profile(
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Return the caller's profile."""
    return to_document(store.get("users", user.id))
