from enum import Enum
from sqlalchemy import Column, String, Date, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, generate_uuid


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BloodType(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


DEFAULT_COUNTRY = "India"


class Patient(Base, TimestampMixin):
    __tablename__ = "patients"

    id = Column(String, primary_key=True, default=generate_uuid)
    patient_id = Column(String(20), unique=True, nullable=False, index=True)  # PAT000001

    # Personal info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), nullable=True)
    address = Column(JSON, nullable=True)  # {street, city, state, zip_code, country}

    # Medical info
    blood_type = Column(String(3), nullable=True)
    allergies = Column(JSON, default=list)
    chronic_conditions = Column(JSON, default=list)
    current_medications = Column(JSON, default=list)
    emergency_contact = Column(JSON, nullable=True)  # {name, relationship, phone}

    insurance = Column(JSON, nullable=True)  # {provider, policy_number, group_number}

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    registered_by = Column(String, ForeignKey("users.id"), nullable=True)

    appointments = relationship("Appointment", back_populates="patient")
    records = relationship("MedicalRecord", back_populates="patient")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def personal_info(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "date_of_birth": self.date_of_birth,
            "gender": self.gender,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
        }

    @property
    def medical_info(self) -> dict:
        return {
            "blood_type": self.blood_type,
            "allergies": self.allergies or [],
            "chronic_conditions": self.chronic_conditions or [],
            "current_medications": self.current_medications or [],
            "emergency_contact": self.emergency_contact,
        }
