"""Tests for human-readable identity assignment."""
import threading
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic.core.errors import IdentityConflictError
from clinic.models.base import Base
from clinic.models.counter import IdentityCounter
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient
from clinic.services.identity import (
    IDENTITY_FORMATS,
    identity_format,
    next_identifier,
)
from clinic.services.medical_records import delete_record
from clinic.services.patients import create_patient


class TestIdentityFormat:
    def test_widths_per_kind(self):
        assert IDENTITY_FORMATS[Patient].format(1) == "PAT000001"
        assert IDENTITY_FORMATS[Doctor].format(1) == "DOC0001"
        assert identity_format(Patient).format(123456) == "PAT123456"

    def test_overflow_keeps_all_digits(self):
        assert IDENTITY_FORMATS[Doctor].format(12345) == "DOC12345"

    def test_unregistered_model_is_rejected(self):
        with pytest.raises(ValueError):
            identity_format(IdentityCounter)


class TestSequentialAssignment:
    def test_first_ids_are_one_based(self, make_patient, make_doctor, make_appointment, make_record):
        patient = make_patient()
        doctor = make_doctor()
        appointment = make_appointment(patient, doctor)
        record = make_record(patient, doctor)
        assert patient.patient_id == "PAT000001"
        assert doctor.doctor_id == "DOC0001"
        assert appointment.appointment_id == "APP000001"
        assert record.record_id == "REC000001"

    def test_sequence_increments(self, make_patient):
        ids = [make_patient(phone=f"555-000{i}").patient_id for i in range(3)]
        assert ids == ["PAT000001", "PAT000002", "PAT000003"]

    def test_explicit_id_is_kept(self, make_patient):
        patient = make_patient(patient_id="PAT000777")
        assert patient.patient_id == "PAT000777"

    def test_explicit_duplicate_is_a_conflict(self, make_patient):
        make_patient(patient_id="PAT000010")
        with pytest.raises(IdentityConflictError) as exc_info:
            make_patient(patient_id="PAT000010")
        assert exc_info.value.status_code == 409
        assert exc_info.value.retryable

    def test_counter_seeds_from_existing_rows(self, db, make_patient):
        make_patient(patient_id="PAT900001")
        make_patient(patient_id="PAT900002")
        assert next_identifier(db, Patient) == "PAT000003"

    def test_collision_is_retried_with_next_number(self, make_patient):
        # One existing row seeds the counter at 2, which is already taken.
        make_patient(patient_id="PAT000002")
        patient = make_patient(first_name="Ann")
        assert patient.patient_id == "PAT000003"

    def test_hard_delete_does_not_reissue(self, db, make_patient, make_doctor, make_record):
        patient, doctor = make_patient(), make_doctor()
        make_record(patient, doctor)
        second = make_record(patient, doctor)
        delete_record(db, second.record_id)
        third = make_record(patient, doctor)
        assert third.record_id == "REC000003"

    def test_ids_never_repeat(self, make_patient):
        ids = [make_patient(phone=str(i)).patient_id for i in range(20)]
        assert len(set(ids)) == 20


class TestConcurrentAssignment:
    WORKERS = 16

    @pytest.fixture()
    def file_sessions(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'identity.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
        engine.dispose()

    def test_parallel_creates_get_distinct_ids(self, file_sessions):
        start = threading.Barrier(self.WORKERS)
        ids, errors = [], []
        lock = threading.Lock()

        def register(n):
            db = file_sessions()
            try:
                start.wait()
                patient = create_patient(db, {
                    "personal_info": {
                        "first_name": f"Worker{n}",
                        "last_name": "Doe",
                        "date_of_birth": date(1990, 1, 1),
                        "gender": "female",
                        "phone": f"555-{n:04d}",
                    },
                }, None)
                with lock:
                    ids.append(patient.patient_id)
            except Exception as exc:
                with lock:
                    errors.append(exc)
            finally:
                db.close()

        threads = [threading.Thread(target=register, args=(n,)) for n in range(self.WORKERS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(set(ids)) == self.WORKERS
        assert all(label.startswith("PAT") and len(label) == 9 for label in ids)
