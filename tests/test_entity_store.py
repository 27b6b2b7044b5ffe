"""Tests for the entity stores: lookup, listing, partial update and delete semantics."""
from datetime import date, timedelta

import pytest

from clinic.core.errors import NotFoundError, ValidationError
from clinic.models.appointment import Appointment
from clinic.services import appointments, doctors, medical_records, patients
from clinic.services.pagination import like_term, normalize_paging, page_count


class TestPaging:
    def test_defaults(self):
        assert normalize_paging(None, None) == (1, 10)

    def test_limit_is_capped(self):
        assert normalize_paging(1, 10_000) == (1, 100)

    @pytest.mark.parametrize("page, limit", [(0, 10), (-1, 10), (1, 0)])
    def test_non_positive_values_are_rejected(self, page, limit):
        with pytest.raises(ValidationError):
            normalize_paging(page, limit)

    def test_page_count_rounds_up(self):
        assert page_count(0, 10) == 0
        assert page_count(10, 10) == 1
        assert page_count(11, 10) == 2

    def test_like_term_escapes_wildcards(self):
        assert like_term("50%_off") == "%50\\%\\_off%"


class TestLookup:
    def test_get_by_label_and_uuid(self, db, make_patient):
        patient = make_patient()
        assert patients.get_patient(db, patient.patient_id).id == patient.id
        assert patients.get_patient(db, patient.patient_id.lower()).id == patient.id
        assert patients.get_patient(db, patient.id).id == patient.id

    def test_malformed_id_is_a_validation_error(self, db):
        with pytest.raises(ValidationError) as exc_info:
            patients.get_patient(db, "not-an-id")
        assert "Invalid patient id format" in exc_info.value.message

    def test_label_of_another_kind_is_malformed(self, db):
        with pytest.raises(ValidationError):
            doctors.get_doctor(db, "PAT000001")

    def test_unknown_id_is_not_found(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            medical_records.get_record(db, "REC000042")
        assert exc_info.value.message == "Medical record not found"


class TestPatients:
    def test_create_normalises_fields(self, db, make_patient):
        patient = make_patient(
            first_name="  Maria ",
            medical_info={"blood_type": ""},
        )
        patient = patients.update_patient(db, patient.id, {
            "personal_info": {"email": "  Maria@Example.COM ", "address": {"city": "Pune"}},
        })
        assert patient.first_name == "Maria"
        assert patient.blood_type is None
        assert patient.email == "maria@example.com"
        assert patient.address == {"city": "Pune", "country": "India"}

    def test_missing_required_field(self, db):
        with pytest.raises(ValidationError) as exc_info:
            patients.create_patient(db, {"personal_info": {"first_name": "A"}}, None)
        assert "last_name" in exc_info.value.message

    def test_invalid_enum(self, make_patient):
        with pytest.raises(ValidationError):
            make_patient(medical_info={"blood_type": "C+"})

    def test_partial_update_keeps_other_fields(self, db, make_patient):
        patient = make_patient(medical_info={"allergies": ["Penicillin"]})
        updated = patients.update_patient(db, patient.patient_id, {"personal_info": {"phone": "999"}})
        assert updated.phone == "999"
        assert updated.first_name == "John"
        assert updated.allergies == ["Penicillin"]
        assert updated.patient_id == patient.patient_id

    def test_explicit_null_on_required_field_is_rejected(self, db, make_patient):
        patient = make_patient()
        with pytest.raises(ValidationError):
            patients.update_patient(db, patient.id, {"personal_info": {"first_name": None}})
        db.expire_all()
        assert patients.get_patient(db, patient.id).first_name == "John"

    def test_soft_delete_hides_from_default_listing(self, db, make_patient):
        keep = make_patient(first_name="Keep")
        gone = make_patient(first_name="Gone")
        patients.deactivate_patient(db, gone.id)

        listed = patients.list_patients(db)
        assert [p.id for p in listed.items] == [keep.id]
        assert listed.total == 1

        everyone = patients.list_patients(db, include_inactive=True)
        assert everyone.total == 2
        # still addressable
        assert patients.get_patient(db, gone.patient_id).is_active is False

    def test_search_is_case_insensitive_substring(self, db, make_patient):
        make_patient(first_name="Alice", last_name="Walker")
        make_patient(first_name="Bob", last_name="Stone", phone="777-1234")
        assert [p.first_name for p in patients.list_patients(db, search="walk").items] == ["Alice"]
        assert [p.first_name for p in patients.list_patients(db, search="777").items] == ["Bob"]
        assert patients.list_patients(db, search="PAT000002").items[0].first_name == "Bob"
        assert patients.list_patients(db, search="%").total == 0

    def test_pages_partition_the_result(self, db, make_patient):
        for i in range(7):
            make_patient(first_name=f"P{i}", phone=str(i))
        first = patients.list_patients(db, page=1, limit=3)
        assert (first.current, first.pages, first.total) == (1, 3, 7)
        seen = []
        for page in range(1, 4):
            seen.extend(p.id for p in patients.list_patients(db, page=page, limit=3).items)
        assert len(seen) == len(set(seen)) == 7
        assert patients.list_patients(db, page=4, limit=3).items == []


class TestDoctors:
    def test_create_with_schedule(self, make_doctor):
        doctor = make_doctor(schedule=[{"day": "Monday", "start_time": "09:00", "end_time": "17:00"}])
        assert doctor.schedule == [
            {"day": "Monday", "start_time": "09:00", "end_time": "17:00", "is_available": True}
        ]

    def test_invalid_weekday(self, make_doctor):
        with pytest.raises(ValidationError):
            make_doctor(schedule=[{"day": "Funday"}])

    def test_negative_fee_is_rejected(self, make_doctor):
        with pytest.raises(ValidationError):
            make_doctor(fee=-5)

    def test_specialization_filter(self, db, make_doctor):
        make_doctor(first_name="Ann", specialization="Cardiology")
        make_doctor(first_name="Ben", specialization="Pediatrics")
        result = doctors.list_doctors(db, specialization="pedia")
        assert [d.first_name for d in result.items] == ["Ben"]

    def test_schedule_lookup(self, db, make_doctor):
        doctor = make_doctor(schedule=[{"day": "Friday", "is_available": False}])
        schedule = doctors.get_doctor_schedule(db, doctor.doctor_id)
        assert schedule[0]["day"] == "Friday"
        assert schedule[0]["is_available"] is False

    def test_soft_delete(self, db, make_doctor):
        doctor = make_doctor()
        doctors.deactivate_doctor(db, doctor.id)
        assert doctors.list_doctors(db).total == 0
        assert doctors.get_doctor(db, doctor.doctor_id).is_active is False


class TestAppointments:
    def test_defaults(self, make_patient, make_doctor, make_appointment):
        appointment = make_appointment(make_patient(), make_doctor())
        assert appointment.status == "scheduled"
        assert appointment.type == "consultation"
        assert appointment.priority == "medium"
        assert appointment.duration == 30
        assert appointment.time_minutes == 600

    def test_unknown_reference_is_not_found(self, db, make_doctor):
        doctor = make_doctor()
        with pytest.raises(NotFoundError):
            appointments.create_appointment(db, {
                "patient": "PAT000099",
                "doctor": doctor.id,
                "appointment_date": date.today(),
                "appointment_time": "10:00",
            }, None)

    def test_unparseable_time_is_rejected(self, make_patient, make_doctor, make_appointment):
        with pytest.raises(ValidationError):
            make_appointment(make_patient(), make_doctor(), time="after lunch")

    def test_ordered_by_date_then_time_of_day(self, db, make_patient, make_doctor, make_appointment):
        patient, doctor = make_patient(), make_doctor()
        today = date.today()
        late = make_appointment(patient, doctor, on_date=today, time="02:00 PM")
        early = make_appointment(patient, doctor, on_date=today, time="10:00 AM")
        tomorrow = make_appointment(patient, doctor, on_date=today + timedelta(days=1), time="08:00")

        listed = appointments.list_appointments(db)
        assert [a.id for a in listed.items] == [early.id, late.id, tomorrow.id]

        todays = appointments.list_todays_appointments(db, today=today)
        assert [a.id for a in todays] == [early.id, late.id]

    def test_filters(self, db, make_patient, make_doctor, make_appointment):
        patient = make_patient()
        first, second = make_doctor(first_name="Ann"), make_doctor(first_name="Ben")
        make_appointment(patient, first)
        mine = make_appointment(patient, second, status="confirmed")

        assert [a.id for a in appointments.list_appointments(db, doctor_id=second.doctor_id).items] == [mine.id]
        assert [a.id for a in appointments.list_appointments(db, status="confirmed").items] == [mine.id]
        assert appointments.list_appointments(db, doctor_id="DOC0999").total == 0

    def test_cancel_keeps_the_row(self, db, make_patient, make_doctor, make_appointment):
        appointment = make_appointment(make_patient(), make_doctor())
        appointments.cancel_appointment(db, appointment.appointment_id)
        assert db.query(Appointment).count() == 1
        listed = appointments.list_appointments(db)
        assert listed.items[0].status == "cancelled"

    def test_any_status_may_follow_any_other(self, db, make_patient, make_doctor, make_appointment):
        appointment = make_appointment(make_patient(), make_doctor(), status="completed")
        updated = appointments.update_appointment(db, appointment.id, {"status": "scheduled"})
        assert updated.status == "scheduled"


class TestMedicalRecords:
    def test_embedded_documents_are_stored(self, make_patient, make_doctor, make_record):
        record = make_record(
            make_patient(), make_doctor(),
            prescriptions=[{"medication": "Amoxicillin", "dosage": "500mg"}],
            vitals={"temperature": 37.2, "blood_pressure": {"systolic": 120, "diastolic": 80}},
            tests=[{"test_name": "CBC", "test_date": date(2026, 1, 5)}],
        )
        assert record.prescriptions[0]["medication"] == "Amoxicillin"
        assert record.vitals["blood_pressure"]["systolic"] == 120
        assert record.tests[0]["test_date"] == "2026-01-05"
        assert record.follow_up_completed is False

    def test_visit_type_is_required(self, db, make_patient, make_doctor):
        with pytest.raises(ValidationError):
            medical_records.create_record(db, {"patient": make_patient().id, "doctor": make_doctor().id})

    def test_hard_delete(self, db, make_patient, make_doctor, make_record):
        record = make_record(make_patient(), make_doctor())
        medical_records.delete_record(db, record.id)
        with pytest.raises(NotFoundError):
            medical_records.get_record(db, record.record_id)

    def test_patient_history_newest_first(self, db, make_patient, make_doctor, make_record):
        patient, other, doctor = make_patient(), make_patient(first_name="Other"), make_doctor()
        older = make_record(patient, doctor)
        newer = make_record(patient, doctor)
        make_record(other, doctor)
        older.created_at = older.created_at - timedelta(days=1)
        db.commit()

        history = medical_records.patient_history(db, patient.patient_id)
        assert [r.id for r in history] == [newer.id, older.id]

    def test_patient_history_of_unknown_patient(self, db):
        with pytest.raises(NotFoundError):
            medical_records.patient_history(db, "PAT000404")

    def test_dangling_appointment_reference_is_tolerated(
        self, db, make_patient, make_doctor, make_appointment, make_record
    ):
        patient, doctor = make_patient(), make_doctor()
        appointment = make_appointment(patient, doctor)
        record = make_record(patient, doctor, appointment=appointment.id)
        db.delete(appointment)
        db.commit()
        db.expire_all()
        fetched = medical_records.get_record(db, record.id)
        assert fetched.appointment is None
