"""Notifications API: per-user feed, read state and generation from activity."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..models.base import get_db
from ..services import notification_engine
from .common import CamelModel, MessageResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationResponse(CamelModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    priority: str
    is_read: bool
    read_at: Optional[datetime] = None
    action_url: Optional[str] = None
    related_entity_id: Optional[str] = None
    related_entity_type: Optional[str] = None
    created_at: datetime


class NotificationListEnvelope(CamelModel):
    success: bool = True
    notifications: List[NotificationResponse]
    unread_count: int


class NotificationEnvelope(CamelModel):
    success: bool = True
    message: str
    notification: NotificationResponse


class GeneratedEnvelope(CamelModel):
    success: bool = True
    message: str
    count: int
    notifications: List[NotificationResponse]


@router.get("", response_model=NotificationListEnvelope)
def list_notifications(
    limit: int = Query(20, ge=1),
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Newest first; notifications past their time-to-live are not returned."""
    items, unread = notification_engine.list_notifications(
        db, current_user.id, limit=limit, unread_only=unread_only
    )
    return NotificationListEnvelope(
        notifications=[NotificationResponse.model_validate(n) for n in items],
        unread_count=unread,
    )


# Registered before "/{notification_id}/read".
@router.put("/mark-all-read", response_model=MessageResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    notification_engine.mark_all_read(db, current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=NotificationEnvelope)
def mark_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    notification = notification_engine.mark_read(db, current_user.id, notification_id)
    return NotificationEnvelope(
        message="Notification marked as read",
        notification=NotificationResponse.model_validate(notification),
    )


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    notification_engine.delete_notification(db, current_user.id, notification_id)
    return MessageResponse(message="Notification deleted")


@router.post("/generate-sample", response_model=GeneratedEnvelope)
def generate_sample(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    created = notification_engine.generate_sample(db, current_user.id)
    return GeneratedEnvelope(
        message="Sample notifications generated",
        count=len(created),
        notifications=[NotificationResponse.model_validate(n) for n in created],
    )


@router.post("/generate-from-activities", response_model=GeneratedEnvelope)
def generate_from_activities(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    created = notification_engine.generate_from_activities(db, current_user.id)
    return GeneratedEnvelope(
        message="Notifications generated from recent activities",
        count=len(created),
        notifications=[NotificationResponse.model_validate(n) for n in created],
    )
