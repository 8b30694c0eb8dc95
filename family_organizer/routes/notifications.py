"""
Notifications API

In-app notifications for task assignments and completions.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import Literal

from ..services.database import db, Q
from ..services.principal import get_principal, require_admin
from ..services.visibility import Principal

router = APIRouter()


class NotificationCreate(BaseModel):
    user_id: str
    type: Literal["TASK_ASSIGNED", "TASK_COMPLETED", "TASK_OVERDUE", "DEADLINE_REMINDER", "FAMILY_NOTICE"]
    title: str
    message: str


@router.get("")
async def get_notifications(
    unread_only: bool = False,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal)
):
    """Get notifications for the caller."""
    db.initialize()

    all_notifications = db.notifications.search(Q.user_id == principal.member_id)
    unread_count = sum(1 for n in all_notifications if not n.get("read"))

    if unread_only:
        all_notifications = [n for n in all_notifications if not n.get("read")]

    # Sort by created_at descending
    all_notifications.sort(key=lambda x: x.get("created_at", ""), reverse=True)

    total = len(all_notifications)
    notifications = all_notifications[offset:offset + limit]

    return {
        "notifications": notifications,
        "unread_count": unread_count,
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "has_more": offset + limit < total
        }
    }


@router.post("", status_code=201)
async def create_notification(
    data: NotificationCreate,
    principal: Principal = Depends(require_admin)
):
    """Send a manual notification to a family member (admins only)."""
    db.initialize()

    recipient = db.members.get((Q.id == data.user_id) & (Q.family_id == principal.family_id))
    if not recipient:
        raise HTTPException(status_code=404, detail="Member not found")

    return db.notify(
        family_id=principal.family_id,
        user_id=data.user_id,
        type=data.type,
        title=data.title,
        message=data.message
    )


@router.post("/mark-all-read")
async def mark_all_read(principal: Principal = Depends(get_principal)):
    """Mark all of the caller's notifications as read."""
    db.initialize()
    updated = db.notifications.update(
        {"read": True},
        (Q.user_id == principal.member_id) & (Q.read == False)  # noqa: E712
    )
    return {"updated": len(updated)}


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: str, principal: Principal = Depends(get_principal)):
    """Mark one notification as read."""
    db.initialize()

    notification = db.notifications.get(
        (Q.id == notification_id) & (Q.user_id == principal.member_id)
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    db.notifications.update({"read": True}, Q.id == notification_id)
    return {**notification, "read": True}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, principal: Principal = Depends(get_principal)):
    """Delete one of the caller's notifications."""
    db.initialize()

    notification = db.notifications.get(
        (Q.id == notification_id) & (Q.user_id == principal.member_id)
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    db.notifications.remove(Q.id == notification_id)
    return {"deleted": True}
