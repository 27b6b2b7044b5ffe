from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..models.base import get_db
from ..services import patients as patient_store
from .common import CamelModel, Pagination, payload

router = APIRouter(prefix="/patients", tags=["patients"])


class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class EmergencyContact(CamelModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None


class Insurance(CamelModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    group_number: Optional[str] = None


class PatientPersonalInfo(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[Address] = None


class PatientMedicalInfo(CamelModel):
    blood_type: Optional[str] = None
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    emergency_contact: Optional[EmergencyContact] = None


class PatientPayload(CamelModel):
    """Create and update body; required fields are checked by the store."""
    patient_id: Optional[str] = None
    personal_info: Optional[PatientPersonalInfo] = None
    medical_info: Optional[PatientMedicalInfo] = None
    insurance: Optional[Insurance] = None
    is_active: Optional[bool] = None


class PatientResponse(CamelModel):
    id: str
    patient_id: str
    personal_info: PatientPersonalInfo
    medical_info: PatientMedicalInfo
    insurance: Optional[Insurance] = None
    is_active: bool
    registered_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PatientEnvelope(CamelModel):
    success: bool = True
    patient: PatientResponse


class PatientMutationEnvelope(PatientEnvelope):
    message: str


class PatientListEnvelope(CamelModel):
    success: bool = True
    patients: List[PatientResponse]
    pagination: Pagination


@router.get("", response_model=PatientListEnvelope)
def list_patients(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    result = patient_store.list_patients(db, page, limit, search, include_inactive)
    return PatientListEnvelope(
        patients=[PatientResponse.model_validate(p) for p in result.items],
        pagination=result.pagination,
    )


@router.post("", response_model=PatientMutationEnvelope, status_code=status.HTTP_201_CREATED)
def create_patient(
    body: PatientPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    patient = patient_store.create_patient(db, payload(body), current_user)
    return PatientMutationEnvelope(
        message="Patient registered successfully",
        patient=PatientResponse.model_validate(patient),
    )


@router.get("/{patient_id}", response_model=PatientEnvelope)
def get_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    patient = patient_store.get_patient(db, patient_id)
    return PatientEnvelope(patient=PatientResponse.model_validate(patient))


@router.put("/{patient_id}", response_model=PatientMutationEnvelope)
def update_patient(
    patient_id: str,
    body: PatientPayload,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    patient = patient_store.update_patient(db, patient_id, payload(body))
    return PatientMutationEnvelope(
        message="Patient updated successfully",
        patient=PatientResponse.model_validate(patient),
    )


@router.delete("/{patient_id}", response_model=PatientMutationEnvelope)
def deactivate_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Soft delete; the patient stays addressable by id."""
    patient = patient_store.deactivate_patient(db, patient_id)
    return PatientMutationEnvelope(
        message="Patient deactivated successfully",
        patient=PatientResponse.model_validate(patient),
    )
