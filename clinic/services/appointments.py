"""Appointment store: booking, listing, update and cancellation."""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..core.errors import ClinicError, ValidationError
from ..models.appointment import (
    Appointment,
    AppointmentStatus,
    Priority,
    VisitType,
    parse_time_of_day,
)
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import User
from .identity import persist_with_identity
from .lookup import find_entity, get_or_404, resolve_uid
from .pagination import Page, paginate
from .validation import enum_value, require_fields

logger = logging.getLogger(__name__)

SIMPLE_FIELDS = ("appointment_date", "duration", "symptoms", "notes")
REQUIRED_FIELDS = ("patient_uid", "doctor_uid", "appointment_date", "appointment_time")


def _apply(db: Session, appointment: Appointment, data: dict) -> None:
    if "patient" in data:
        appointment.patient_uid = resolve_uid(db, Patient, data["patient"])
    if "doctor" in data:
        appointment.doctor_uid = resolve_uid(db, Doctor, data["doctor"])

    for field in SIMPLE_FIELDS:
        if field in data:
            setattr(appointment, field, data[field])

    if "appointment_time" in data:
        time_value = (data["appointment_time"] or "").strip()
        minutes = parse_time_of_day(time_value)
        if time_value and minutes is None:
            raise ValidationError(
                f"appointmentTime '{time_value}' is not a time of day (e.g. 10:00 AM or 14:30)"
            )
        appointment.appointment_time = time_value or None
        appointment.time_minutes = minutes

    if data.get("type") is not None:
        appointment.type = enum_value(data["type"], VisitType, "type")
    if data.get("status") is not None:
        appointment.status = enum_value(data["status"], AppointmentStatus, "status")
    if data.get("priority") is not None:
        appointment.priority = enum_value(data["priority"], Priority, "priority")

    require_fields(appointment, REQUIRED_FIELDS, "Appointment")
    if appointment.duration is None or appointment.duration < 1:
        raise ValidationError("duration must be at least 1 minute")


def _with_references(q: Query) -> Query:
    return q.options(joinedload(Appointment.patient), joinedload(Appointment.doctor))


def _chronological(q: Query) -> Query:
    return q.order_by(
        Appointment.appointment_date.asc(),
        Appointment.time_minutes.is_(None),
        Appointment.time_minutes.asc(),
        Appointment.created_at.asc(),
        Appointment.id.asc(),
    )


def create_appointment(db: Session, data: dict, current_user: Optional[User]) -> Appointment:
    appointment = Appointment(
        appointment_id=data.get("appointment_id"),
        duration=30,
        type=VisitType.CONSULTATION.value,
        status=AppointmentStatus.SCHEDULED.value,
        priority=Priority.MEDIUM.value,
        created_by=current_user.id if current_user else None,
    )
    _apply(db, appointment, data)
    persist_with_identity(db, appointment)
    logger.info(
        "Scheduled appointment %s on %s at %s",
        appointment.appointment_id, appointment.appointment_date, appointment.appointment_time,
    )
    return appointment


def get_appointment(db: Session, appointment_id: str) -> Appointment:
    return get_or_404(db, Appointment, appointment_id)


def list_appointments(
    db: Session,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    status: Optional[str] = None,
    on_date: Optional[date] = None,
    doctor_id: Optional[str] = None,
    patient_id: Optional[str] = None,
) -> Page:
    q = _with_references(db.query(Appointment))
    if status:
        q = q.filter(Appointment.status == enum_value(status, AppointmentStatus, "status"))
    if on_date:
        q = q.filter(Appointment.appointment_date == on_date)
    if doctor_id:
        doctor = find_entity(db, Doctor, doctor_id)
        q = q.filter(Appointment.doctor_uid == (doctor.id if doctor else None))
    if patient_id:
        patient = find_entity(db, Patient, patient_id)
        q = q.filter(Appointment.patient_uid == (patient.id if patient else None))
    return paginate(_chronological(q), page, limit)


def list_todays_appointments(db: Session, today: Optional[date] = None) -> List[Appointment]:
    today = today or date.today()
    q = _with_references(db.query(Appointment)).filter(Appointment.appointment_date == today)
    return _chronological(q).all()


def update_appointment(db: Session, appointment_id: str, data: dict) -> Appointment:
    appointment = get_appointment(db, appointment_id)
    try:
        _apply(db, appointment, data)
    except ClinicError:
        db.rollback()
        raise
    db.commit()
    db.refresh(appointment)
    return appointment


def cancel_appointment(db: Session, appointment_id: str) -> Appointment:
    """Appointments are never purged; deleting one marks it cancelled."""
    appointment = get_appointment(db, appointment_id)
    appointment.status = AppointmentStatus.CANCELLED.value
    db.commit()
    db.refresh(appointment)
    logger.info("Cancelled appointment %s", appointment.appointment_id)
    return appointment
