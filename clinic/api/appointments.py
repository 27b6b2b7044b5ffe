from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..models.base import get_db
from ..services import appointments as appointment_store
from .common import CamelModel, Pagination, payload
from .doctors import DoctorPersonalInfo, DoctorProfessionalInfo
from .patients import PatientPersonalInfo

router = APIRouter(prefix="/appointments", tags=["appointments"])


class PatientRef(CamelModel):
    id: str
    patient_id: str
    personal_info: PatientPersonalInfo


class DoctorRef(CamelModel):
    id: str
    doctor_id: str
    personal_info: DoctorPersonalInfo
    professional_info: DoctorProfessionalInfo


class AppointmentPayload(CamelModel):
    appointment_id: Optional[str] = None
    patient: Optional[str] = None
    doctor: Optional[str] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    duration: Optional[int] = None
    type: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    symptoms: Optional[str] = None
    notes: Optional[str] = None


class AppointmentResponse(CamelModel):
    id: str
    appointment_id: str
    patient: Optional[PatientRef] = None
    doctor: Optional[DoctorRef] = None
    appointment_date: date
    appointment_time: str
    duration: int
    type: str
    status: str
    priority: str
    symptoms: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AppointmentEnvelope(CamelModel):
    success: bool = True
    appointment: AppointmentResponse


class AppointmentMutationEnvelope(AppointmentEnvelope):
    message: str


class AppointmentListEnvelope(CamelModel):
    success: bool = True
    appointments: List[AppointmentResponse]
    pagination: Pagination


class TodaysAppointmentsEnvelope(CamelModel):
    success: bool = True
    appointments: List[AppointmentResponse]
    count: int


# Must be registered before "/{appointment_id}" so "today" is not taken for an id.
@router.get("/today/all", response_model=TodaysAppointmentsEnvelope)
def todays_appointments(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    appointments = appointment_store.list_todays_appointments(db)
    return TodaysAppointmentsEnvelope(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments],
        count=len(appointments),
    )


@router.get("", response_model=AppointmentListEnvelope)
def list_appointments(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    on_date: Optional[date] = Query(None, alias="date"),
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    patient_id: Optional[str] = Query(None, alias="patientId"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    result = appointment_store.list_appointments(
        db, page, limit, status=status_filter, on_date=on_date,
        doctor_id=doctor_id, patient_id=patient_id,
    )
    return AppointmentListEnvelope(
        appointments=[AppointmentResponse.model_validate(a) for a in result.items],
        pagination=result.pagination,
    )


@router.post("", response_model=AppointmentMutationEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment(
    body: AppointmentPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    appointment = appointment_store.create_appointment(db, payload(body), current_user)
    return AppointmentMutationEnvelope(
        message="Appointment scheduled successfully",
        appointment=AppointmentResponse.model_validate(appointment),
    )


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
def get_appointment(
    appointment_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    appointment = appointment_store.get_appointment(db, appointment_id)
    return AppointmentEnvelope(appointment=AppointmentResponse.model_validate(appointment))


@router.put("/{appointment_id}", response_model=AppointmentMutationEnvelope)
def update_appointment(
    appointment_id: str,
    body: AppointmentPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    appointment = appointment_store.update_appointment(db, appointment_id, payload(body))
    return AppointmentMutationEnvelope(
        message="Appointment updated successfully",
        appointment=AppointmentResponse.model_validate(appointment),
    )


@router.delete("/{appointment_id}", response_model=AppointmentMutationEnvelope)
def cancel_appointment(
    appointment_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Deleting an appointment cancels it; the row is kept."""
    appointment = appointment_store.cancel_appointment(db, appointment_id)
    return AppointmentMutationEnvelope(
        message="Appointment cancelled successfully",
        appointment=AppointmentResponse.model_validate(appointment),
    )
