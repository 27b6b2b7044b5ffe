"""Doctor store: create, read, list, update, soft delete and schedule lookup."""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..models.doctor import Doctor, Weekday
from ..models.user import User
from .identity import persist_with_identity
from .lookup import get_or_404
from .pagination import Page, like_term, paginate
from .validation import clean_email, enum_value, jsonable, require_fields

logger = logging.getLogger(__name__)

PERSONAL_FIELDS = ("first_name", "last_name", "phone", "email", "date_of_birth")
PROFESSIONAL_FIELDS = ("specialization", "license_number", "experience", "qualification", "department")
REQUIRED_FIELDS = (
    "first_name", "last_name", "phone", "email",
    "specialization", "license_number", "experience", "consultation_fee",
)


def _schedule(slots) -> List[dict]:
    result = []
    for slot in jsonable(slots) or []:
        slot["day"] = enum_value(slot.get("day"), Weekday, "schedule.day")
        if slot.get("is_available") is None:
            slot["is_available"] = True
        result.append(slot)
    return result


def _apply(doctor: Doctor, data: dict) -> None:
    personal = data.get("personal_info") or {}
    for field in PERSONAL_FIELDS:
        if field not in personal:
            continue
        value = personal[field]
        if field == "email":
            value = clean_email(value)
        elif field in ("first_name", "last_name") and value is not None:
            value = value.strip()
        setattr(doctor, field, value)

    professional = data.get("professional_info") or {}
    for field in PROFESSIONAL_FIELDS:
        if field not in professional:
            continue
        value = professional[field]
        if field == "qualification" and value is None:
            value = []
        setattr(doctor, field, value)

    if "schedule" in data:
        doctor.schedule = _schedule(data["schedule"])
    if "consultation_fee" in data:
        doctor.consultation_fee = data["consultation_fee"]
    if data.get("is_active") is not None:
        doctor.is_active = data["is_active"]

    require_fields(doctor, REQUIRED_FIELDS, "Doctor")
    if doctor.experience < 0:
        raise ValidationError("experience cannot be negative")
    if doctor.consultation_fee < 0:
        raise ValidationError("consultationFee cannot be negative")


def create_doctor(db: Session, data: dict, current_user: Optional[User]) -> Doctor:
    doctor = Doctor(
        doctor_id=data.get("doctor_id"),
        qualification=[],
        schedule=[],
        added_by=current_user.id if current_user else None,
    )
    _apply(doctor, data)
    persist_with_identity(db, doctor)
    logger.info("Added doctor %s (%s)", doctor.doctor_id, doctor.specialization)
    return doctor


def get_doctor(db: Session, doctor_id: str) -> Doctor:
    return get_or_404(db, Doctor, doctor_id)


def list_doctors(
    db: Session,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    specialization: Optional[str] = None,
    include_inactive: bool = False,
) -> Page:
    q = db.query(Doctor)
    if not include_inactive:
        q = q.filter(Doctor.is_active == True)  # noqa: E712
    if search:
        term = like_term(search.strip())
        q = q.filter(
            or_(
                Doctor.first_name.ilike(term, escape="\\"),
                Doctor.last_name.ilike(term, escape="\\"),
                Doctor.doctor_id.ilike(term, escape="\\"),
                Doctor.specialization.ilike(term, escape="\\"),
            )
        )
    if specialization:
        q = q.filter(Doctor.specialization.ilike(like_term(specialization.strip()), escape="\\"))
    q = q.order_by(Doctor.created_at.desc(), Doctor.id.desc())
    return paginate(q, page, limit)


def update_doctor(db: Session, doctor_id: str, data: dict) -> Doctor:
    doctor = get_doctor(db, doctor_id)
    try:
        _apply(doctor, data)
    except ValidationError:
        db.rollback()
        raise
    db.commit()
    db.refresh(doctor)
    return doctor


def deactivate_doctor(db: Session, doctor_id: str) -> Doctor:
    doctor = get_doctor(db, doctor_id)
    doctor.is_active = False
    db.commit()
    db.refresh(doctor)
    logger.info("Deactivated doctor %s", doctor.doctor_id)
    return doctor


def get_doctor_schedule(db: Session, doctor_id: str) -> List[dict]:
    return get_doctor(db, doctor_id).schedule or []
