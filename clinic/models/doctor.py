from enum import Enum
from sqlalchemy import Column, String, Date, Boolean, Integer, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, generate_uuid


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class Doctor(Base, TimestampMixin):
    __tablename__ = "doctors"

    id = Column(String, primary_key=True, default=generate_uuid)
    doctor_id = Column(String(20), unique=True, nullable=False, index=True)  # DOC0001

    # Personal info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), nullable=False)
    date_of_birth = Column(Date, nullable=True)

    # Professional info
    specialization = Column(String(100), nullable=False, index=True)
    license_number = Column(String(100), nullable=False)
    experience = Column(Integer, nullable=False)  # years
    qualification = Column(JSON, default=list)
    department = Column(String(100), nullable=True)

    # [{day, start_time, end_time, is_available}]; not checked against bookings
    schedule = Column(JSON, default=list)
    consultation_fee = Column(Float, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    added_by = Column(String, ForeignKey("users.id"), nullable=True)

    appointments = relationship("Appointment", back_populates="doctor")
    records = relationship("MedicalRecord", back_populates="doctor")

    @property
    def personal_info(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "email": self.email,
            "date_of_birth": self.date_of_birth,
        }

    @property
    def professional_info(self) -> dict:
        return {
            "specialization": self.specialization,
            "license_number": self.license_number,
            "experience": self.experience,
            "qualification": self.qualification or [],
            "department": self.department,
        }
