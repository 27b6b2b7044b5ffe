"""Medical record store. Records are the one entity that is hard-deleted."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..core.errors import ClinicError
from ..models.appointment import Appointment, VisitType
from ..models.doctor import Doctor
from ..models.medical_record import MedicalRecord
from ..models.patient import Patient
from .identity import persist_with_identity
from .lookup import find_entity, get_or_404, resolve_uid
from .pagination import Page, paginate
from .validation import enum_value, jsonable, require_fields

logger = logging.getLogger(__name__)

SIMPLE_FIELDS = ("chief_complaint", "diagnosis", "treatment", "notes", "follow_up_date")
LIST_FIELDS = ("symptoms", "prescriptions", "tests", "attachments")
REQUIRED_FIELDS = ("patient_uid", "doctor_uid", "visit_type")


def _apply(db: Session, record: MedicalRecord, data: dict) -> None:
    if "patient" in data:
        record.patient_uid = resolve_uid(db, Patient, data["patient"])
    if "doctor" in data:
        record.doctor_uid = resolve_uid(db, Doctor, data["doctor"])
    if "appointment" in data:
        record.appointment_uid = resolve_uid(db, Appointment, data["appointment"])

    if "visit_type" in data:
        record.visit_type = enum_value(data["visit_type"], VisitType, "visitType")
    for field in SIMPLE_FIELDS:
        if field in data:
            setattr(record, field, data[field])
    for field in LIST_FIELDS:
        if field in data:
            setattr(record, field, jsonable(data[field]) or [])
    if "vitals" in data:
        record.vitals = jsonable(data["vitals"])
    if data.get("follow_up_completed") is not None:
        record.follow_up_completed = data["follow_up_completed"]

    require_fields(record, REQUIRED_FIELDS, "MedicalRecord")


def _with_references(q: Query) -> Query:
    return q.options(
        joinedload(MedicalRecord.patient),
        joinedload(MedicalRecord.doctor),
        joinedload(MedicalRecord.appointment),
    )


def create_record(db: Session, data: dict) -> MedicalRecord:
    record = MedicalRecord(
        record_id=data.get("record_id"),
        symptoms=[],
        prescriptions=[],
        tests=[],
        attachments=[],
        follow_up_completed=False,
    )
    _apply(db, record, data)
    persist_with_identity(db, record)
    logger.info("Created medical record %s", record.record_id)
    return record


def get_record(db: Session, record_id: str) -> MedicalRecord:
    return get_or_404(db, MedicalRecord, record_id)


def list_records(
    db: Session,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    patient_id: Optional[str] = None,
    doctor_id: Optional[str] = None,
) -> Page:
    q = _with_references(db.query(MedicalRecord))
    if patient_id:
        patient = find_entity(db, Patient, patient_id)
        q = q.filter(MedicalRecord.patient_uid == (patient.id if patient else None))
    if doctor_id:
        doctor = find_entity(db, Doctor, doctor_id)
        q = q.filter(MedicalRecord.doctor_uid == (doctor.id if doctor else None))
    q = q.order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
    return paginate(q, page, limit)


def patient_history(db: Session, patient_id: str) -> List[MedicalRecord]:
    """All records of one patient, newest first."""
    patient = get_or_404(db, Patient, patient_id)
    return (
        _with_references(db.query(MedicalRecord))
        .filter(MedicalRecord.patient_uid == patient.id)
        .order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
        .all()
    )


def update_record(db: Session, record_id: str, data: dict) -> MedicalRecord:
    record = get_record(db, record_id)
    try:
        _apply(db, record, data)
    except ClinicError:
        db.rollback()
        raise
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, record_id: str) -> None:
    record = get_record(db, record_id)
    label = record.record_id
    db.delete(record)
    db.commit()
    logger.info("Deleted medical record %s", label)
