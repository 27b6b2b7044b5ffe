from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.permissions import PERM_MANAGE_DOCTORS
from ..core.security import get_current_user
from ..models.base import get_db
from ..services import doctors as doctor_store
from .common import CamelModel, Pagination, payload, require_permission

router = APIRouter(prefix="/doctors", tags=["doctors"])


class DoctorPersonalInfo(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Optional[date] = None


class DoctorProfessionalInfo(CamelModel):
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    experience: Optional[int] = None
    qualification: Optional[List[str]] = None
    department: Optional[str] = None


class ScheduleSlot(CamelModel):
    day: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: Optional[bool] = None


class DoctorPayload(CamelModel):
    doctor_id: Optional[str] = None
    personal_info: Optional[DoctorPersonalInfo] = None
    professional_info: Optional[DoctorProfessionalInfo] = None
    schedule: Optional[List[ScheduleSlot]] = None
    consultation_fee: Optional[float] = None
    is_active: Optional[bool] = None


class DoctorResponse(CamelModel):
    id: str
    doctor_id: str
    personal_info: DoctorPersonalInfo
    professional_info: DoctorProfessionalInfo
    schedule: Optional[List[ScheduleSlot]] = None
    consultation_fee: float
    is_active: bool
    added_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DoctorEnvelope(CamelModel):
    success: bool = True
    doctor: DoctorResponse


class DoctorMutationEnvelope(DoctorEnvelope):
    message: str


class DoctorListEnvelope(CamelModel):
    success: bool = True
    doctors: List[DoctorResponse]
    pagination: Pagination


class ScheduleEnvelope(CamelModel):
    success: bool = True
    schedule: List[ScheduleSlot]


@router.get("", response_model=DoctorListEnvelope)
def list_doctors(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    specialization: Optional[str] = None,
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    result = doctor_store.list_doctors(db, page, limit, search, specialization, include_inactive)
    return DoctorListEnvelope(
        doctors=[DoctorResponse.model_validate(d) for d in result.items],
        pagination=result.pagination,
    )


@router.post("", response_model=DoctorMutationEnvelope, status_code=status.HTTP_201_CREATED)
def create_doctor(
    body: DoctorPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    doctor = doctor_store.create_doctor(db, payload(body), current_user)
    return DoctorMutationEnvelope(
        message="Doctor added successfully",
        doctor=DoctorResponse.model_validate(doctor),
    )


@router.get("/{doctor_id}", response_model=DoctorEnvelope)
def get_doctor(
    doctor_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return DoctorEnvelope(doctor=DoctorResponse.model_validate(doctor_store.get_doctor(db, doctor_id)))


@router.put("/{doctor_id}", response_model=DoctorMutationEnvelope)
def update_doctor(
    doctor_id: str,
    body: DoctorPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    doctor = doctor_store.update_doctor(db, doctor_id, payload(body))
    return DoctorMutationEnvelope(
        message="Doctor updated successfully",
        doctor=DoctorResponse.model_validate(doctor),
    )


@router.delete("/{doctor_id}", response_model=DoctorMutationEnvelope)
def deactivate_doctor(
    doctor_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    require_permission(current_user, PERM_MANAGE_DOCTORS)
    doctor = doctor_store.deactivate_doctor(db, doctor_id)
    return DoctorMutationEnvelope(
        message="Doctor deactivated successfully",
        doctor=DoctorResponse.model_validate(doctor),
    )


@router.get("/{doctor_id}/schedule", response_model=ScheduleEnvelope)
def get_doctor_schedule(
    doctor_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ScheduleEnvelope(schedule=doctor_store.get_doctor_schedule(db, doctor_id))
