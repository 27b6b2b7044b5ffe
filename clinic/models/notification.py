from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from .base import Base, TimestampMixin, generate_uuid


class NotificationType(str, Enum):
    APPOINTMENT = "appointment"
    PATIENT = "patient"
    DOCTOR = "doctor"
    RECORD = "record"
    URGENT = "urgent"
    REMINDER = "reminder"
    SYSTEM = "system"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RelatedEntityType(str, Enum):
    PATIENT = "Patient"
    DOCTOR = "Doctor"
    APPOINTMENT = "Appointment"
    MEDICAL_RECORD = "MedicalRecord"


TITLE_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 500


class Notification(Base, TimestampMixin):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),
    )

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    message = Column(String(MESSAGE_MAX_LENGTH), nullable=False)
    priority = Column(String(10), nullable=False, default=NotificationPriority.MEDIUM.value)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    action_url = Column(String(200), nullable=True)
    related_entity_id = Column(String, nullable=True)
    related_entity_type = Column(String(20), nullable=True)
