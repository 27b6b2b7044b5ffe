"""
Human-readable identity assignment (PAT000001, DOC0001, APP000001, REC000001).

Sequence numbers come from one counter row per entity kind, advanced with a
single ``UPDATE ... SET value = value + 1`` and committed before the entity
itself is written. Two concurrent creates therefore never draw the same
number. The first use of a kind seeds its counter from the current row count
so existing data sets keep their numbering.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Type

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import IdentityConflictError
from ..models.appointment import Appointment
from ..models.counter import IdentityCounter
from ..models.doctor import Doctor
from ..models.medical_record import MedicalRecord
from ..models.patient import Patient

logger = logging.getLogger(__name__)

MAX_SEED_ATTEMPTS = 3


@dataclass(frozen=True)
class IdentityFormat:
    kind: str
    prefix: str
    width: int
    column: str

    def format(self, sequence: int) -> str:
        return f"{self.prefix}{sequence:0{self.width}d}"


IDENTITY_FORMATS: Dict[Type, IdentityFormat] = {
    Patient: IdentityFormat("patient", "PAT", 6, "patient_id"),
    Doctor: IdentityFormat("doctor", "DOC", 4, "doctor_id"),
    Appointment: IdentityFormat("appointment", "APP", 6, "appointment_id"),
    MedicalRecord: IdentityFormat("record", "REC", 6, "record_id"),
}


def identity_format(model: Type) -> IdentityFormat:
    try:
        return IDENTITY_FORMATS[model]
    except KeyError:
        raise ValueError(f"No identity format registered for {model.__name__}")


def next_sequence(db: Session, model: Type) -> int:
    """Atomically advance and commit the counter for ``model``; return the new value."""
    fmt = identity_format(model)
    for _ in range(MAX_SEED_ATTEMPTS):
        result = db.execute(
            update(IdentityCounter)
            .where(IdentityCounter.kind == fmt.kind)
            .values(value=IdentityCounter.value + 1)
        )
        if result.rowcount:
            value = db.query(IdentityCounter.value).filter(IdentityCounter.kind == fmt.kind).scalar()
            db.commit()
            return value

        existing = db.query(func.count()).select_from(model).scalar() or 0
        db.add(IdentityCounter(kind=fmt.kind, value=existing + 1))
        try:
            db.commit()
            return existing + 1
        except IntegrityError:
            # Another request seeded the counter first; increment theirs.
            db.rollback()
    raise IdentityConflictError(f"Could not initialise the {fmt.kind} id counter, please retry")


def next_identifier(db: Session, model: Type) -> str:
    return identity_format(model).format(next_sequence(db, model))


def assign_identifier(db: Session, entity) -> bool:
    """
    Fill the entity's identity column when it is still empty.
    Returns True when an id was generated, False when a pre-seeded id was kept.
    """
    fmt = identity_format(type(entity))
    if getattr(entity, fmt.column):
        return False
    setattr(entity, fmt.column, next_identifier(db, type(entity)))
    return True


def _identity_taken(db: Session, entity) -> bool:
    model = type(entity)
    fmt = identity_format(model)
    column = getattr(model, fmt.column)
    return db.query(model.id).filter(column == getattr(entity, fmt.column)).first() is not None


def persist_with_identity(db: Session, entity):
    """
    Assign an identity if needed, insert and commit the entity.

    A uniqueness violation on a generated id is retried with a fresh number up
    to ``IDENTITY_MAX_ATTEMPTS`` times; a collision on an explicit id, or
    exhausted attempts, raises IdentityConflictError.
    """
    fmt = identity_format(type(entity))
    attempts = max(1, settings.IDENTITY_MAX_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        generated = assign_identifier(db, entity)
        db.add(entity)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if not _identity_taken(db, entity):
                raise
            label = getattr(entity, fmt.column)
            if not generated:
                raise IdentityConflictError(f"{fmt.prefix} id {label} already exists")
            logger.warning(
                "Generated %s id %s already taken (attempt %d/%d), retrying",
                fmt.kind, label, attempt, attempts,
            )
            setattr(entity, fmt.column, None)
            continue
        db.refresh(entity)
        return entity
    raise IdentityConflictError(f"Could not assign a unique {fmt.kind} id, please retry")
