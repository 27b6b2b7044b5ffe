from sqlalchemy import Column, String, Boolean, DateTime
from .base import Base, TimestampMixin, generate_uuid


class UserRole:
    ADMIN = "admin"
    DOCTOR = "doctor"
    RECEPTIONIST = "receptionist"
    NURSE = "nurse"

    ALL = [ADMIN, DOCTOR, RECEPTIONIST, NURSE]


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.RECEPTIONIST)
    phone = Column(String(30), nullable=True)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)
