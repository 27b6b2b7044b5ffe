"""Field checks applied by the entity services after a create or update."""
from enum import Enum
from typing import Iterable, Optional, Type

from pydantic_core import to_jsonable_python

from ..core.errors import ValidationError


def enum_value(value, enum_cls: Type[Enum], field: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value.value
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}")
    return value


def require_fields(entity, fields: Iterable[str], resource: str) -> None:
    missing = [f for f in fields if getattr(entity, f) in (None, "")]
    if missing:
        raise ValidationError(f"{resource} validation failed: {', '.join(missing)} is required")


def jsonable(value):
    """Embedded sub-documents are stored as plain JSON (dates become ISO strings)."""
    if value is None:
        return None
    return to_jsonable_python(value)


def clean_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None
