from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..models.base import get_db
from ..services.dashboard import dashboard_service
from .common import CamelModel

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class StatCardResponse(CamelModel):
    value: int
    trend: str


class StatsResponse(CamelModel):
    total_patients: StatCardResponse
    active_doctors: StatCardResponse
    todays_appointments: StatCardResponse
    medical_records: StatCardResponse


class ActivityResponse(CamelModel):
    id: str
    type: str
    message: str
    time: str
    priority: str
    created_at: datetime


class TodaysAppointmentResponse(CamelModel):
    id: str
    patient: str
    doctor: str
    time: str
    type: str
    status: str


class SummaryResponse(CamelModel):
    appointments_completed: str
    pending_tasks: str
    todays_revenue: str


class StatsEnvelope(CamelModel):
    success: bool = True
    stats: StatsResponse


class ActivitiesEnvelope(CamelModel):
    success: bool = True
    activities: List[ActivityResponse]


class TodaysAppointmentsEnvelope(CamelModel):
    success: bool = True
    appointments: List[TodaysAppointmentResponse]
    count: int


class SummaryEnvelope(CamelModel):
    success: bool = True
    summary: SummaryResponse


@router.get("/stats", response_model=StatsEnvelope)
def get_stats(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Headline counters with their period-over-period trends."""
    stats = dashboard_service.get_stats(db)
    return StatsEnvelope(stats=StatsResponse.model_validate(stats))


@router.get("/recent-activities", response_model=ActivitiesEnvelope)
def get_recent_activities(
    limit: int = Query(10, ge=1),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    activities = dashboard_service.get_recent_activities(db, limit=limit)
    return ActivitiesEnvelope(activities=[ActivityResponse.model_validate(a) for a in activities])


@router.get("/todays-appointments", response_model=TodaysAppointmentsEnvelope)
def get_todays_appointments(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    appointments = dashboard_service.get_todays_appointments(db)
    return TodaysAppointmentsEnvelope(
        appointments=[TodaysAppointmentResponse.model_validate(a) for a in appointments],
        count=len(appointments),
    )


@router.get("/summary", response_model=SummaryEnvelope)
def get_summary(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    summary = dashboard_service.get_summary(db)
    return SummaryEnvelope(summary=SummaryResponse.model_validate(summary))
