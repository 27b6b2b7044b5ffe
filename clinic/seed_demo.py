"""
Demo data seeder for the clinic.

Creates the admin account plus one demo doctor and one demo patient so a
fresh install can be logged into and browsed immediately.

Credentials:
  Admin : admin@clinic.com / admin123

This seeder is idempotent: it is safe to call on every startup.
"""
import logging
from datetime import date

from .models.base import SessionLocal, Base, engine
from .models.user import User, UserRole
from .models.patient import Patient
from .models.doctor import Doctor
from .models import appointment, counter, medical_record, notification  # noqa: F401  ensure tables are registered
from .core.security import get_password_hash
from .services.doctors import create_doctor
from .services.patients import create_patient

logger = logging.getLogger(__name__)

DEMO_ADMIN_EMAIL = "admin@clinic.com"
DEMO_ADMIN_PASSWORD = "admin123"

DEMO_DOCTOR_LICENSE = "MD-12345"
DEMO_PATIENT_EMAIL = "john.doe@email.com"

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def seed_demo_data() -> None:
    """Create the admin user, demo doctor and demo patient if they do not already exist."""
    # Ensure tables exist (no-op when already created by main.py)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin = _seed_admin(db)
        _seed_doctor(db, admin)
        _seed_patient(db, admin)
    finally:
        db.close()


# ── helpers ──────────────────────────────────────────────────────────────────

def _seed_admin(db) -> User:
    admin = db.query(User).filter(User.email == DEMO_ADMIN_EMAIL).first()
    if not admin:
        admin = User(
            email=DEMO_ADMIN_EMAIL,
            name="Admin User",
            hashed_password=get_password_hash(DEMO_ADMIN_PASSWORD),
            role=UserRole.ADMIN,
            phone="+1-234-567-8900",
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Created demo admin %s", DEMO_ADMIN_EMAIL)
    return admin


def _seed_doctor(db, admin: User) -> Doctor:
    doctor = db.query(Doctor).filter(Doctor.license_number == DEMO_DOCTOR_LICENSE).first()
    if not doctor:
        doctor = create_doctor(db, {
            "personal_info": {
                "first_name": "John",
                "last_name": "Smith",
                "phone": "+1-555-0101",
                "email": "john.smith@clinic.com",
                "date_of_birth": date(1975, 3, 15),
            },
            "professional_info": {
                "specialization": "Cardiology",
                "license_number": DEMO_DOCTOR_LICENSE,
                "experience": 15,
                "qualification": ["MBBS", "MD Cardiology"],
                "department": "Cardiology",
            },
            "schedule": [
                {"day": day, "start_time": "09:00", "end_time": "17:00", "is_available": True}
                for day in WEEKDAYS
            ],
            "consultation_fee": 200,
        }, admin)
        logger.info("Created demo doctor %s", doctor.doctor_id)
    return doctor


def _seed_patient(db, admin: User) -> Patient:
    patient = db.query(Patient).filter(Patient.email == DEMO_PATIENT_EMAIL).first()
    if not patient:
        patient = create_patient(db, {
            "personal_info": {
                "first_name": "John",
                "last_name": "Doe",
                "date_of_birth": date(1985, 6, 15),
                "gender": "male",
                "phone": "+1-234-567-8901",
                "email": DEMO_PATIENT_EMAIL,
                "address": {
                    "street": "123 Main St",
                    "city": "New York",
                    "state": "NY",
                    "zip_code": "10001",
                    "country": "USA",
                },
            },
            "medical_info": {
                "blood_type": "O+",
                "allergies": ["Penicillin"],
                "chronic_conditions": ["Hypertension"],
                "emergency_contact": {
                    "name": "Jane Doe",
                    "relationship": "Spouse",
                    "phone": "+1-234-567-8902",
                },
            },
        }, admin)
        logger.info("Created demo patient %s", patient.patient_id)
    return patient
