"""Resolve path/query ids to entities.

An entity can be addressed by its UUID primary key or by its human-readable
identity (``PAT000001`` ...). Anything else is a malformed id.
"""
import re
import uuid
from typing import Optional, Type

from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationError
from .identity import identity_format

RESOURCE_NAMES = {
    "Patient": "Patient",
    "Doctor": "Doctor",
    "Appointment": "Appointment",
    "MedicalRecord": "Medical record",
}


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
        return True
    except ValueError:
        return False


def _is_label(model: Type, value: str) -> bool:
    fmt = identity_format(model)
    return re.fullmatch(rf"{fmt.prefix}\d+", value, flags=re.IGNORECASE) is not None


def find_entity(db: Session, model: Type, entity_id: str):
    """Return the entity or None; raise ValidationError on a malformed id."""
    entity_id = (entity_id or "").strip()
    if _is_uuid(entity_id):
        return db.query(model).filter(model.id == entity_id).first()
    if _is_label(model, entity_id):
        column = getattr(model, identity_format(model).column)
        return db.query(model).filter(column == entity_id.upper()).first()
    raise ValidationError(f"Invalid {RESOURCE_NAMES[model.__name__].lower()} id format")


def get_or_404(db: Session, model: Type, entity_id: str):
    entity = find_entity(db, model, entity_id)
    if entity is None:
        raise NotFoundError(RESOURCE_NAMES[model.__name__])
    return entity


def resolve_uid(db: Session, model: Type, entity_id: Optional[str]) -> Optional[str]:
    """Primary key for a reference given as UUID or label; NotFoundError when unknown."""
    if entity_id is None:
        return None
    return get_or_404(db, model, entity_id).id
