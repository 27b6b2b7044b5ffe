import re
from enum import Enum
from typing import Optional
from sqlalchemy import Column, String, Date, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, generate_uuid


class VisitType(str, Enum):
    CONSULTATION = "consultation"
    FOLLOW_UP = "follow-up"
    EMERGENCY = "emergency"
    ROUTINE_CHECKUP = "routine-checkup"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


# Any status may overwrite any other; there is no transition table.
OPEN_STATUSES = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.CONFIRMED.value)


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


URGENT_PRIORITIES = (Priority.URGENT.value, Priority.HIGH.value)

_TIME_RE = re.compile(
    r"^\s*(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::\d{2})?\s*(?P<meridiem>[AaPp][Mm])?\s*$"
)


def parse_time_of_day(value: Optional[str]) -> Optional[int]:
    """
    Convert "10:00 AM", "2:30pm", "14:30" or "09:05:00" into minutes after midnight.
    Returns None when the string is not a recognisable time of day.
    """
    if not value:
        return None
    match = _TIME_RE.match(value)
    if not match:
        return None
    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    meridiem = match.group("meridiem")
    if minute > 59:
        return None
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12
        if meridiem.lower() == "pm":
            hour += 12
    elif match.group("minute") is None or hour > 23:
        return None
    return hour * 60 + minute


class Appointment(Base, TimestampMixin):
    __tablename__ = "appointments"

    id = Column(String, primary_key=True, default=generate_uuid)
    appointment_id = Column(String(20), unique=True, nullable=False, index=True)  # APP000001

    patient_uid = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_uid = Column(String, ForeignKey("doctors.id"), nullable=False, index=True)

    # Date and time of day are stored separately; time_minutes is derived from
    # appointment_time and only used for ordering.
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(String(20), nullable=False)
    time_minutes = Column(Integer, nullable=True)

    duration = Column(Integer, nullable=False, default=30)  # minutes
    type = Column(String(20), nullable=False, default=VisitType.CONSULTATION.value)
    status = Column(String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value, index=True)
    priority = Column(String(10), nullable=False, default=Priority.MEDIUM.value)
    symptoms = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=True)

    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")
