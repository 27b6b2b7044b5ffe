from sqlalchemy import Column, String, Date, Text, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, generate_uuid


class MedicalRecord(Base, TimestampMixin):
    """Visit record. Unlike the other entities it is hard-deleted."""
    __tablename__ = "medical_records"

    id = Column(String, primary_key=True, default=generate_uuid)
    record_id = Column(String(20), unique=True, nullable=False, index=True)  # REC000001

    patient_uid = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_uid = Column(String, ForeignKey("doctors.id"), nullable=False, index=True)
    # Weak reference: the appointment may be absent or no longer resolve
    appointment_uid = Column(String, nullable=True)

    visit_type = Column(String(20), nullable=False)
    chief_complaint = Column(Text, nullable=True)
    symptoms = Column(JSON, default=list)
    diagnosis = Column(Text, nullable=True)
    treatment = Column(Text, nullable=True)

    # Embedded sub-records without identity of their own
    prescriptions = Column(JSON, default=list)  # [{medication, dosage, frequency, duration, instructions}]
    vitals = Column(JSON, nullable=True)        # {temperature, blood_pressure{systolic, diastolic}, heart_rate, weight, height}
    tests = Column(JSON, default=list)          # [{test_name, result, date, attachments}]

    follow_up_date = Column(Date, nullable=True, index=True)
    follow_up_completed = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    attachments = Column(JSON, default=list)

    patient = relationship("Patient", back_populates="records")
    doctor = relationship("Doctor", back_populates="records")
    appointment = relationship(
        "Appointment",
        primaryjoin="foreign(MedicalRecord.appointment_uid) == Appointment.id",
        viewonly=True,
    )
