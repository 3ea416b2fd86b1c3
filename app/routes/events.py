"""Event routes for planning, voting, commenting and RSVPs."""
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, field_validator

from app.core.notifications import interested_user_ids, notify_users
from app.core.store import (
    ConflictError,
    DocumentNotFoundError,
    DocumentStore,
    QueryDescriptor,
    to_document,
)
from app.models import Event, NotificationType
from app.planning.ics import ICS_MIME_TYPE, build_ics, ics_filename
from app.planning.permissions import (
    CurrentUser,
    can_view_event,
    require_admin,
    require_can_delete,
)
from app.planning.rsvp import find_rsvp, rsvp_counts, upsert_rsvp
from app.planning.summary import summarize_event
from app.planning.votes import Voter, apply_vote, remove_vote, total_votes, vote_count
from app.planning.windows import require_rsvp_open, require_voting_open
from app.routes.deps import get_current_user, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

# Attempts for a read-modify-write before giving up on a version conflict
MAX_UPDATE_ATTEMPTS = 3


def _split_options(values: list[str]) -> list[str]:
    """Trim entries and drop empty ones, keeping order."""
    return [v.strip() for v in values if v and v.strip()]


class EventCreate(BaseModel):
    name: str
    description: str = ""
    location: str | None = None
    date_options: list[str] = []
    items: list[str] = []
    privacy: Literal["public", "private"] = "public"
    category: Literal["social", "work", "celebration"] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Event name is required")
        return v

    @field_validator("date_options", "items")
    @classmethod
    def clean_list(cls, v: list[str]) -> list[str]:
        return _split_options(v)


class EventUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    location: str | None = None
    date_options: list[str] | None = None
    items: list[str] | None = None
    privacy: Literal["public", "private"] | None = None
    category: Literal["social", "work", "celebration"] | None = None

    # Only location and category may be cleared with null
    @field_validator("name", "description", "date_options", "items", "privacy", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null; omit it to leave it unchanged")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Event name cannot be empty")
        return v.strip() if v else v

    @field_validator("date_options", "items")
    @classmethod
    def clean_list(cls, v: list[str] | None) -> list[str] | None:
        return _split_options(v) if v is not None else v


class VoteRequest(BaseModel):
    option: str


class CommentRequest(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class RSVPRequest(BaseModel):
    status: Literal["going", "maybe", "not-going"]


def _load_event(store: DocumentStore, event_id: str, user: CurrentUser) -> Event:
    """Fetch an event the user may see, or 404."""
    try:
        event = store.get("events", event_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found") from None
    if not can_view_event(user, event):
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _mutate_event(
    store: DocumentStore,
    event_id: str,
    user: CurrentUser,
    build: Callable[[Event], dict],
) -> Event:
    """
    Apply a read-modify-write to an event.

    ``build`` receives a fresh snapshot and returns the fields to write.
    The write is conditional on the snapshot's version; on a conflict the
    snapshot is re-read and ``build`` runs again. Planning errors raised by
    ``build`` abort without writing anything.
    """
    attempt = 1
    while True:
        event = _load_event(store, event_id, user)
        fields = build(event)
        try:
            store.update("events", event_id, fields, expected_version=event.version)
        except ConflictError:
            if attempt >= MAX_UPDATE_ATTEMPTS:
                raise
            logger.info(f"Retrying update of event {event_id} (attempt {attempt})")
            attempt += 1
            continue
        return store.get("events", event_id)


def _event_payload(event: Event, now: datetime | None = None) -> dict:
    return {**to_document(event), "view": summarize_event(event, now)}


@router.post("", status_code=201)
async def create_event(
    body: EventCreate,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Create a new event.

    Admin only. Vote, comment and RSVP collections start empty. Public
    events announce themselves to every other user with an
    "event_created" notification.
    """
    require_admin(user, "create events")

    data = body.model_dump()
    data.update(host_id=user.id, host_name=user.name)
    event_id = store.create("events", data)
    logger.info(f"Event {event_id} created by {user.id}")

    event = store.get("events", event_id)
    if event.privacy == "public":
        recipients = [u.id for u in store.query("users") if u.id != user.id]
        notify_users(
            store,
            recipients,
            NotificationType.EVENT_CREATED,
            "New event",
            f"{user.name or 'Someone'} invited you to vote on {event.name}.",
            event,
        )

    return _event_payload(store.get("events", event_id))


@router.get("")
async def list_events(
    mine: bool = Query(False),
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    List events visible to the caller, newest first.

    With ``mine=true`` only events hosted by the caller are returned. Each
    entry includes the derived view used by dashboard cards.
    """
    filters = {"host_id": user.id} if mine else {}
    events = store.run(
        QueryDescriptor(
            collection="events",
            filters=filters,
            order_by="created_at",
            descending=True,
        )
    )
    now = datetime.now(UTC)
    return [_event_payload(e, now) for e in events if can_view_event(user, e)]


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Return the event document with its winning date, status and windows."""
    return _event_payload(_load_event(store, event_id, user))


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    body: EventUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Edit event details.

    Admin only. When date options change, votes for options that no longer
    exist are dropped and the vote deadline reminder is re-armed.
    """
    require_admin(user, "edit events")
    changes = body.model_dump(exclude_unset=True)

    def build(event: Event) -> dict:
        fields = dict(changes)
        if "date_options" in fields:
            kept = set(fields["date_options"])
            fields["votes"] = {k: v for k, v in event.votes.items() if k in kept}
            fields["vote_reminder_sent"] = False
        if "items" in fields:
            kept = set(fields["items"])
            fields["item_votes"] = {k: v for k, v in event.item_votes.items() if k in kept}
        return fields

    event = _mutate_event(store, event_id, user, build)
    if changes:
        recipients = [uid for uid in interested_user_ids(event) if uid != user.id]
        notify_users(
            store,
            recipients,
            NotificationType.EVENT_UPDATED,
            "Event updated",
            f"{event.name} has been updated.",
            event,
        )
    return _event_payload(store.get("events", event_id))


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Delete an event. Allowed for admins and the event's host."""
    event = _load_event(store, event_id, user)
    require_can_delete(user, event)
    store.delete("events", event_id)
    return {"success": True, "event_id": event_id}


@router.post("/{event_id}/votes")
async def cast_vote(
    event_id: str,
    body: VoteRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Vote for a date option.

    A user may vote for several options but only once per option. Returns
    409 if the user already voted for it and 403 once voting has closed.
    """
    def build(event: Event) -> dict:
        if body.option not in event.date_options:
            raise HTTPException(status_code=400, detail="Unknown date option")
        require_voting_open(event)
        voter = Voter(id=user.id, name=user.name)
        return {"votes": apply_vote(event.votes, body.option, voter)}

    event = _mutate_event(store, event_id, user, build)
    return {
        "success": True,
        "option": body.option,
        "count": vote_count(event.votes, body.option),
        "total_votes": total_votes(event.votes),
    }


@router.post("/{event_id}/votes/remove")
async def retract_vote(
    event_id: str,
    body: VoteRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Remove the caller's vote for a date option (409 if there is none)."""
    def build(event: Event) -> dict:
        require_voting_open(event)
        return {"votes": remove_vote(event.votes, body.option, user.id)}

    event = _mutate_event(store, event_id, user, build)
    return {
        "success": True,
        "option": body.option,
        "count": vote_count(event.votes, body.option),
        "total_votes": total_votes(event.votes),
    }


@router.post("/{event_id}/item-votes")
async def cast_item_vote(
    event_id: str,
    body: VoteRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Vote for a suggested item. Item votes are not tied to the voting window."""
    def build(event: Event) -> dict:
        if body.option not in event.items:
            raise HTTPException(status_code=400, detail="Unknown item")
        voter = Voter(id=user.id, name=user.name)
        return {"item_votes": apply_vote(event.item_votes, body.option, voter)}

    event = _mutate_event(store, event_id, user, build)
    return {
        "success": True,
        "item": body.option,
        "count": vote_count(event.item_votes, body.option),
    }


@router.post("/{event_id}/item-votes/remove")
async def retract_item_vote(
    event_id: str,
    body: VoteRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Remove the caller's vote for an item."""
    def build(event: Event) -> dict:
        return {"item_votes": remove_vote(event.item_votes, body.option, user.id)}

    event = _mutate_event(store, event_id, user, build)
    return {
        "success": True,
        "item": body.option,
        "count": vote_count(event.item_votes, body.option),
    }


@router.post("/{event_id}/comments", status_code=201)
async def add_comment(
    event_id: str,
    body: CommentRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Append a comment. The host is notified of comments by others."""
    comment = {
        "text": body.text,
        "author": user.name or "Anonymous",
        "timestamp": datetime.now(UTC).isoformat(),
    }

    def build(event: Event) -> dict:
        return {"comments": [*event.comments, comment]}

    event = _mutate_event(store, event_id, user, build)
    if event.host_id != user.id:
        notify_users(
            store,
            [event.host_id],
            NotificationType.COMMENT,
            "New comment",
            f"{comment['author']} commented on {event.name}.",
            event,
        )
    return {"success": True, "comment": comment}


@router.post("/{event_id}/rsvp")
async def submit_rsvp(
    event_id: str,
    body: RSVPRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Record the caller's attendance intent.

    A second RSVP replaces the first. Returns 403 once RSVPs have closed
    (six hours before the winning date by default).
    """
    previous: dict = {}

    def build(event: Event) -> dict:
        require_rsvp_open(event)
        previous.clear()
        previous.update(find_rsvp(event.rsvps, user.id) or {})
        return {"rsvps": upsert_rsvp(event.rsvps, user.id, user.name, body.status)}

    event = _mutate_event(store, event_id, user, build)
    return {
        "success": True,
        "status": body.status,
        "previous_status": previous.get("status"),
        "rsvp_counts": rsvp_counts(event.rsvps),
    }


@router.get("/{event_id}/calendar.ics")
async def download_calendar(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Download the winning date as an iCalendar file.

    Fails with 422 and no file when no date is decided or the winning
    option is not a valid date.
    """
    event = _load_event(store, event_id, user)
    payload = build_ics(event)
    filename = ics_filename(event.name)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=payload, media_type=ICS_MIME_TYPE, headers=headers)
