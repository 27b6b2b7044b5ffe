"""Patient store: create, read, list, update and soft delete."""
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..models.patient import Patient, Gender, BloodType, DEFAULT_COUNTRY
from ..models.user import User
from .identity import persist_with_identity
from .lookup import get_or_404
from .pagination import Page, like_term, paginate
from .validation import clean_email, enum_value, jsonable, require_fields

logger = logging.getLogger(__name__)

PERSONAL_FIELDS = ("first_name", "last_name", "date_of_birth", "gender", "phone", "email", "address")
MEDICAL_FIELDS = ("blood_type", "allergies", "chronic_conditions", "current_medications", "emergency_contact")
REQUIRED_FIELDS = ("first_name", "last_name", "date_of_birth", "gender", "phone")


def _apply(patient: Patient, data: dict) -> None:
    personal = data.get("personal_info") or {}
    for field in PERSONAL_FIELDS:
        if field not in personal:
            continue
        value = personal[field]
        if field == "gender":
            value = enum_value(value, Gender, "gender")
        elif field == "email":
            value = clean_email(value)
        elif field in ("first_name", "last_name") and value is not None:
            value = value.strip()
        elif field == "address" and value is not None:
            value = jsonable(value)
            value.setdefault("country", DEFAULT_COUNTRY)
        setattr(patient, field, value)

    medical = data.get("medical_info") or {}
    for field in MEDICAL_FIELDS:
        if field not in medical:
            continue
        value = medical[field]
        if field == "blood_type":
            value = enum_value(value or None, BloodType, "bloodType")
        elif field == "emergency_contact":
            value = jsonable(value)
        elif value is None:
            value = []
        setattr(patient, field, value)

    if "insurance" in data:
        patient.insurance = jsonable(data["insurance"])
    if data.get("is_active") is not None:
        patient.is_active = data["is_active"]

    require_fields(patient, REQUIRED_FIELDS, "Patient")


def create_patient(db: Session, data: dict, current_user: Optional[User]) -> Patient:
    patient = Patient(
        patient_id=data.get("patient_id"),
        allergies=[],
        chronic_conditions=[],
        current_medications=[],
        registered_by=current_user.id if current_user else None,
    )
    _apply(patient, data)
    persist_with_identity(db, patient)
    logger.info("Registered patient %s (%s)", patient.patient_id, patient.id)
    return patient


def get_patient(db: Session, patient_id: str) -> Patient:
    return get_or_404(db, Patient, patient_id)


def list_patients(
    db: Session,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    include_inactive: bool = False,
) -> Page:
    q = db.query(Patient)
    if not include_inactive:
        q = q.filter(Patient.is_active == True)  # noqa: E712
    if search:
        term = like_term(search.strip())
        q = q.filter(
            or_(
                Patient.first_name.ilike(term, escape="\\"),
                Patient.last_name.ilike(term, escape="\\"),
                Patient.patient_id.ilike(term, escape="\\"),
                Patient.phone.ilike(term, escape="\\"),
            )
        )
    q = q.order_by(Patient.created_at.desc(), Patient.id.desc())
    return paginate(q, page, limit)


def update_patient(db: Session, patient_id: str, data: dict) -> Patient:
    patient = get_patient(db, patient_id)
    try:
        _apply(patient, data)
    except ValidationError:
        db.rollback()
        raise
    db.commit()
    db.refresh(patient)
    return patient


def deactivate_patient(db: Session, patient_id: str) -> Patient:
    """Soft delete: the patient stays retrievable for historical references."""
    patient = get_patient(db, patient_id)
    patient.is_active = False
    db.commit()
    db.refresh(patient)
    logger.info("Deactivated patient %s", patient.patient_id)
    return patient
