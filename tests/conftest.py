"""Shared fixtures: an isolated in-memory database per test and an authenticated API client."""
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic.core.security import create_access_token, get_password_hash
from clinic.main import app
from clinic.models.base import Base, get_db
from clinic.models.user import User, UserRole
from clinic.services.appointments import create_appointment
from clinic.services.doctors import create_doctor
from clinic.services.medical_records import create_record
from clinic.services.patients import create_patient


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _user(db, email: str, role: str) -> User:
    user = User(
        email=email,
        name=email.split("@")[0].title(),
        hashed_password=get_password_hash("secret123"),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_user(db):
    return _user(db, "admin@clinic.test", UserRole.ADMIN)


@pytest.fixture()
def receptionist_user(db):
    return _user(db, "desk@clinic.test", UserRole.RECEPTIONIST)


@pytest.fixture()
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    # No context manager: the lifespan (real database, demo seed) is not run.
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id, 'role': user.role})}"}


@pytest.fixture()
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture()
def receptionist_headers(receptionist_user):
    return auth_headers(receptionist_user)


# ── entity factories ─────────────────────────────────────────────────────────

@pytest.fixture()
def make_patient(db):
    def _make(first_name="John", last_name="Doe", phone="+1-234-567-8901", **extra):
        data = {
            "personal_info": {
                "first_name": first_name,
                "last_name": last_name,
                "date_of_birth": date(1985, 6, 15),
                "gender": "male",
                "phone": phone,
            },
        }
        data.update(extra)
        return create_patient(db, data, None)
    return _make


@pytest.fixture()
def make_doctor(db):
    def _make(first_name="Jane", last_name="Smith", specialization="Cardiology", fee=200, **extra):
        data = {
            "personal_info": {
                "first_name": first_name,
                "last_name": last_name,
                "phone": "+1-555-0101",
                "email": f"{first_name}.{last_name}@clinic.test".lower(),
            },
            "professional_info": {
                "specialization": specialization,
                "license_number": f"MD-{first_name[:3].upper()}{last_name[:3].upper()}",
                "experience": 10,
            },
            "consultation_fee": fee,
        }
        data.update(extra)
        return create_doctor(db, data, None)
    return _make


@pytest.fixture()
def make_appointment(db):
    def _make(patient, doctor, on_date=None, time="10:00 AM", **extra):
        data = {
            "patient": patient.id,
            "doctor": doctor.id,
            "appointment_date": on_date or date.today(),
            "appointment_time": time,
        }
        data.update(extra)
        return create_appointment(db, data, None)
    return _make


@pytest.fixture()
def make_record(db):
    def _make(patient, doctor, **extra):
        data = {"patient": patient.id, "doctor": doctor.id, "visit_type": "consultation"}
        data.update(extra)
        return create_record(db, data)
    return _make
