"""Schema base and envelopes shared by every router."""
from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.permissions import has_permission


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire. Either spelling is accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Pagination(CamelModel):
    current: int
    pages: int
    total: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str


def payload(body: BaseModel) -> dict:
    """Fields the client actually sent, snake_case keyed; explicit nulls are kept."""
    return body.model_dump(exclude_unset=True)


def require_permission(current_user, permission: str) -> None:
    if not has_permission(current_user.role, permission):
        raise HTTPException(status_code=403, detail="Insufficient permissions for this action")
