"""
Notification generation and per-user notification store.

Notifications are derived from recent store activity on demand; nothing here
runs on a schedule. Rows older than NOTIFICATION_TTL_DAYS are invisible to
listings and removed by ``purge_expired``.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from ..core.config import settings
from ..core.errors import NotFoundError, ValidationError
from ..models.appointment import Appointment, OPEN_STATUSES, URGENT_PRIORITIES
from ..models.notification import (
    MESSAGE_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Notification,
    NotificationPriority,
    NotificationType,
    RelatedEntityType,
)
from ..models.patient import Patient
from .dashboard import patient_display_name
from .validation import enum_value

logger = logging.getLogger(__name__)

SAMPLE_NOTIFICATIONS = [
    {
        "type": NotificationType.APPOINTMENT,
        "title": "New Appointment Scheduled",
        "message": "A new appointment has been scheduled for tomorrow at 10:00 AM",
        "priority": NotificationPriority.MEDIUM,
        "action_url": "/appointments",
    },
    {
        "type": NotificationType.PATIENT,
        "title": "New Patient Registration",
        "message": "Sarah Johnson has been registered as a new patient",
        "priority": NotificationPriority.LOW,
        "action_url": "/patients",
    },
    {
        "type": NotificationType.URGENT,
        "title": "Emergency Appointment Request",
        "message": "Emergency appointment requested by John Doe - requires immediate attention",
        "priority": NotificationPriority.HIGH,
        "action_url": "/appointments",
    },
    {
        "type": NotificationType.REMINDER,
        "title": "Daily Report Pending",
        "message": "Please review and submit today's clinical report",
        "priority": NotificationPriority.MEDIUM,
        "action_url": "/reports",
    },
    {
        "type": NotificationType.SYSTEM,
        "title": "System Maintenance Scheduled",
        "message": "Routine system maintenance scheduled for tonight at 2:00 AM",
        "priority": NotificationPriority.LOW,
        "action_url": None,
    },
]


def _expiry_cutoff(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) - timedelta(days=settings.NOTIFICATION_TTL_DAYS)


def _build_notification(
    user_id: str,
    type: str,
    title: str,
    message: str,
    priority: str = NotificationPriority.MEDIUM.value,
    action_url: Optional[str] = None,
    related_entity_id: Optional[str] = None,
    related_entity_type: Optional[str] = None,
) -> Notification:
    title = (title or "").strip()
    message = (message or "").strip()
    if not title or not message:
        raise ValidationError("Notification title and message are required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Notification title cannot exceed {TITLE_MAX_LENGTH} characters")
    if len(message) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"Notification message cannot exceed {MESSAGE_MAX_LENGTH} characters")

    return Notification(
        user_id=user_id,
        type=enum_value(type, NotificationType, "type"),
        title=title,
        message=message,
        priority=enum_value(priority, NotificationPriority, "priority"),
        is_read=False,
        action_url=action_url,
        related_entity_id=related_entity_id,
        related_entity_type=enum_value(related_entity_type, RelatedEntityType, "relatedEntityType"),
    )


def create_notification(db: Session, user_id: str, type: str, title: str, message: str, **kwargs) -> Notification:
    """Validate and persist a single notification owned by ``user_id``."""
    notification = _build_notification(user_id, type, title, message, **kwargs)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def _save_all(db: Session, notifications: List[Notification]) -> List[Notification]:
    if notifications:
        db.add_all(notifications)
        db.commit()
        for n in notifications:
            db.refresh(n)
    return notifications


def generate_sample(db: Session, user_id: str) -> List[Notification]:
    notifications = [_build_notification(user_id, **sample) for sample in SAMPLE_NOTIFICATIONS]
    _save_all(db, notifications)
    logger.info("Generated %d sample notifications for user %s", len(notifications), user_id)
    return notifications


def generate_from_activities(db: Session, user_id: str, now: Optional[datetime] = None) -> List[Notification]:
    """
    One notification per appointment and per patient created in the trailing
    window, plus one per open urgent/high-priority appointment (capped).
    Running it twice produces duplicates.
    """
    now = now or datetime.utcnow()
    since = now - timedelta(hours=settings.RECENT_ACTIVITY_WINDOW_HOURS)
    notifications: List[Notification] = []

    recent_appointments = (
        db.query(Appointment)
        .options(joinedload(Appointment.patient))
        .filter(Appointment.created_at >= since)
        .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        .all()
    )
    for a in recent_appointments:
        notifications.append(_build_notification(
            user_id,
            NotificationType.APPOINTMENT,
            "New Appointment Scheduled",
            f"Appointment scheduled for {patient_display_name(a.patient)}",
            NotificationPriority.MEDIUM,
            "/appointments",
            related_entity_id=a.id,
            related_entity_type=RelatedEntityType.APPOINTMENT,
        ))

    recent_patients = (
        db.query(Patient)
        .filter(Patient.created_at >= since)
        .order_by(Patient.created_at.desc(), Patient.id.desc())
        .all()
    )
    for p in recent_patients:
        notifications.append(_build_notification(
            user_id,
            NotificationType.PATIENT,
            "New Patient Registered",
            f"{p.full_name} has been registered",
            NotificationPriority.LOW,
            "/patients",
            related_entity_id=p.id,
            related_entity_type=RelatedEntityType.PATIENT,
        ))

    urgent_appointments = (
        db.query(Appointment)
        .options(joinedload(Appointment.patient))
        .filter(
            Appointment.priority.in_(URGENT_PRIORITIES),
            Appointment.status.in_(OPEN_STATUSES),
        )
        .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        .limit(settings.URGENT_NOTIFICATION_CAP)
        .all()
    )
    for a in urgent_appointments:
        notifications.append(_build_notification(
            user_id,
            NotificationType.URGENT,
            "Urgent Appointment",
            f"High priority appointment for {patient_display_name(a.patient)}",
            NotificationPriority.HIGH,
            "/appointments",
            related_entity_id=a.id,
            related_entity_type=RelatedEntityType.APPOINTMENT,
        ))

    _save_all(db, notifications)
    logger.info(
        "Generated %d notifications from recent activity for user %s", len(notifications), user_id
    )
    return notifications


def list_notifications(
    db: Session,
    user_id: str,
    limit: int = 20,
    unread_only: bool = False,
    now: Optional[datetime] = None,
) -> Tuple[List[Notification], int]:
    """Newest unexpired notifications of one user plus their unread count."""
    live = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.created_at >= _expiry_cutoff(now),
    )
    unread = live.filter(Notification.is_read == False)  # noqa: E712
    q = unread if unread_only else live
    items = (
        q.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    return items, unread.count()


def _owned(db: Session, user_id: str, notification_id: str, now: Optional[datetime] = None) -> Notification:
    notification = (
        db.query(Notification)
        .filter(
            Notification.id == notification_id,
            Notification.user_id == user_id,
            Notification.created_at >= _expiry_cutoff(now),
        )
        .first()
    )
    if not notification:
        raise NotFoundError("Notification")
    return notification


def mark_read(db: Session, user_id: str, notification_id: str) -> Notification:
    notification = _owned(db, user_id, notification_id)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


def delete_notification(db: Session, user_id: str, notification_id: str) -> None:
    db.delete(_owned(db, user_id, notification_id))
    db.commit()


def purge_expired(db: Session, now: Optional[datetime] = None) -> int:
    removed = (
        db.query(Notification)
        .filter(Notification.created_at < _expiry_cutoff(now))
        .delete(synchronize_session=False)
    )
    db.commit()
    if removed:
        logger.info("Purged %d expired notifications", removed)
    return removed
