from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.orm import Session

from ..core.permissions import PERM_DELETE_RECORDS
from ..core.security import get_current_user
from ..models.base import get_db
from ..services import medical_records as record_store
from .appointments import DoctorRef, PatientRef
from .common import CamelModel, MessageResponse, Pagination, payload, require_permission

router = APIRouter(prefix="/records", tags=["records"])


class Prescription(CamelModel):
    medication: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    instructions: Optional[str] = None


class BloodPressure(CamelModel):
    systolic: Optional[float] = None
    diastolic: Optional[float] = None


class Vitals(CamelModel):
    temperature: Optional[float] = None
    blood_pressure: Optional[BloodPressure] = None
    heart_rate: Optional[float] = None
    weight: Optional[float] = None
    height: Optional[float] = None


class TestResult(CamelModel):
    test_name: Optional[str] = None
    result: Optional[str] = None
    test_date: Optional[date] = Field(None, alias="date")
    attachments: Optional[List[str]] = None


class AppointmentRef(CamelModel):
    id: str
    appointment_id: str
    appointment_date: date
    appointment_time: str


class RecordPayload(CamelModel):
    record_id: Optional[str] = None
    patient: Optional[str] = None
    doctor: Optional[str] = None
    appointment: Optional[str] = None
    visit_type: Optional[str] = None
    chief_complaint: Optional[str] = None
    symptoms: Optional[List[str]] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    prescriptions: Optional[List[Prescription]] = None
    vitals: Optional[Vitals] = None
    tests: Optional[List[TestResult]] = None
    follow_up_date: Optional[date] = None
    follow_up_completed: Optional[bool] = None
    notes: Optional[str] = None
    attachments: Optional[List[str]] = None


class RecordResponse(CamelModel):
    id: str
    record_id: str
    patient: Optional[PatientRef] = None
    doctor: Optional[DoctorRef] = None
    appointment: Optional[AppointmentRef] = None
    visit_type: str
    chief_complaint: Optional[str] = None
    symptoms: Optional[List[str]] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    prescriptions: Optional[List[Prescription]] = None
    vitals: Optional[Vitals] = None
    tests: Optional[List[TestResult]] = None
    follow_up_date: Optional[date] = None
    follow_up_completed: bool
    notes: Optional[str] = None
    attachments: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime


class RecordEnvelope(CamelModel):
    success: bool = True
    record: RecordResponse


class RecordMutationEnvelope(RecordEnvelope):
    message: str


class RecordListEnvelope(CamelModel):
    success: bool = True
    records: List[RecordResponse]
    pagination: Pagination


class PatientHistoryEnvelope(CamelModel):
    success: bool = True
    records: List[RecordResponse]
    count: int


@router.get("", response_model=RecordListEnvelope)
def list_records(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    patient_id: Optional[str] = Query(None, alias="patientId"),
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    result = record_store.list_records(db, page, limit, patient_id=patient_id, doctor_id=doctor_id)
    return RecordListEnvelope(
        records=[RecordResponse.model_validate(r) for r in result.items],
        pagination=result.pagination,
    )


@router.get("/patient/{patient_id}", response_model=PatientHistoryEnvelope)
def patient_history(
    patient_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    records = record_store.patient_history(db, patient_id)
    return PatientHistoryEnvelope(
        records=[RecordResponse.model_validate(r) for r in records],
        count=len(records),
    )


@router.post("", response_model=RecordMutationEnvelope, status_code=status.HTTP_201_CREATED)
def create_record(
    body: RecordPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    record = record_store.create_record(db, payload(body))
    return RecordMutationEnvelope(
        message="Medical record created successfully",
        record=RecordResponse.model_validate(record),
    )


@router.get("/{record_id}", response_model=RecordEnvelope)
def get_record(
    record_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return RecordEnvelope(record=RecordResponse.model_validate(record_store.get_record(db, record_id)))


@router.put("/{record_id}", response_model=RecordMutationEnvelope)
def update_record(
    record_id: str,
    body: RecordPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    record = record_store.update_record(db, record_id, payload(body))
    return RecordMutationEnvelope(
        message="Medical record updated successfully",
        record=RecordResponse.model_validate(record),
    )


@router.delete("/{record_id}", response_model=MessageResponse)
def delete_record(
    record_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    require_permission(current_user, PERM_DELETE_RECORDS)
    record_store.delete_record(db, record_id)
    return MessageResponse(message="Medical record deleted successfully")
