"""Notification routes."""
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException

from app.core.store import DocumentNotFoundError, DocumentStore, QueryDescriptor, to_document
from app.planning.permissions import CurrentUser
from app.planning.timeago import format_time_ago
from app.routes.deps import get_current_user, get_store

router = APIRouter(prefix="/notifications", tags=["notifications"])

# Matches the dropdown size in the client
LATEST_LIMIT = 10


@router.get("")
async def list_notifications(
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Return the caller's latest notifications, newest first.

    Includes the unread count among them and a relative timestamp for each.
    """
    notifications = store.run(
        QueryDescriptor(
            collection="notifications",
            filters={"user_id": user.id},
            order_by="created_at",
            descending=True,
            limit=LATEST_LIMIT,
        )
    )
    now = datetime.now(UTC)
    return {
        "notifications": [
            {**to_document(n), "time_ago": format_time_ago(n.created_at, now)}
            for n in notifications
        ],
        "unread_count": sum(1 for n in notifications if not n.read),
    }


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Mark one of the caller's notifications as read."""
    try:
        notification = store.get("notifications", notification_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found") from None
    if notification.user_id != user.id:
        raise HTTPException(status_code=404, detail="Notification not found")

    store.update("notifications", notification_id, {"read": True})
    return {"success": True, "notification_id": notification_id}


@router.post("/read-all")
async def mark_all_read(
    user: CurrentUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Mark all of the caller's unread notifications as read."""
    unread = store.query("notifications", user_id=user.id, read=False)
    ids = [n.id for n in unread]
    for notification_id in ids:
        store.update("notifications", notification_id, {"read": True})
    return {"success": True, "marked": len(ids)}
