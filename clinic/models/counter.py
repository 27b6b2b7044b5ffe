from sqlalchemy import Column, String, Integer
from .base import Base


class IdentityCounter(Base):
    """Last issued sequence number per entity kind ("patient", "doctor", ...)."""
    __tablename__ = "identity_counters"

    kind = Column(String(30), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
