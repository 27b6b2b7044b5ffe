"""
Dashboard aggregation - counts, period-over-period trends, activity feed and
the daily summary.

Every method takes optional ``now`` (naive UTC) and ``today`` (local calendar
day) arguments so results are reproducible. Store errors are not caught here:
one failing query fails the whole aggregation.
"""
import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..core.config import settings
from ..models.appointment import (
    Appointment,
    AppointmentStatus,
    OPEN_STATUSES,
    URGENT_PRIORITIES,
)
from ..models.doctor import Doctor
from ..models.medical_record import MedicalRecord
from ..models.patient import Patient
from .appointments import list_todays_appointments


@dataclass
class StatCard:
    value: int
    trend: str


@dataclass
class DashboardStats:
    total_patients: StatCard
    active_doctors: StatCard
    todays_appointments: StatCard
    medical_records: StatCard


@dataclass
class Activity:
    id: str
    type: str  # "appointment", "patient", "record"
    message: str
    time: str
    priority: str  # "high" or "normal"
    created_at: datetime


@dataclass
class TodaysAppointment:
    id: str
    patient: str
    doctor: str
    time: str
    type: str
    status: str


@dataclass
class DashboardSummary:
    completed_today: int
    total_today: int
    urgent_open: int
    pending_follow_ups: int
    revenue_today: float

    @property
    def completion_rate(self) -> int:
        if self.total_today == 0:
            return 0
        return round_half_up((self.completed_today / self.total_today) * 100)

    @property
    def appointments_completed(self) -> str:
        return f"{self.completed_today} out of {self.total_today} appointments"

    @property
    def pending_tasks(self) -> str:
        return f"{self.urgent_open} urgent, {self.pending_follow_ups} follow-ups"

    @property
    def todays_revenue(self) -> str:
        text = f"${format_amount(self.revenue_today)}"
        if self.completed_today > 0:
            text += f" (+{self.completion_rate}% completion)"
        return text


# ── helpers ──────────────────────────────────────────────────────────────────

def round_half_up(value: float) -> int:
    """Nearest int with ties going up: 12.5 -> 13, -12.5 -> -12."""
    return math.floor(value + 0.5)


def compute_trend(current: int, baseline: int, empty_baseline: Optional[int] = None) -> int:
    """
    Percentage change of ``current`` against ``baseline``, rounded to an int.
    A zero baseline yields ``empty_baseline`` when given, otherwise +100 for
    growth from nothing and 0 when both are zero.
    """
    if baseline > 0:
        return round_half_up(((current - baseline) / baseline) * 100)
    if empty_baseline is not None:
        return empty_baseline
    return 100 if current > 0 else 0


def format_trend(pct: int) -> str:
    return f"+{pct}%" if pct >= 0 else f"{pct}%"


def format_amount(amount: float) -> str:
    amount = float(amount or 0)
    return str(int(amount)) if amount.is_integer() else f"{amount:.2f}"


def one_month_before(moment: datetime) -> datetime:
    """Same wall-clock time one calendar month earlier, clamped to month end."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def local_day_bounds_utc(day: date):
    """[start, end) of a local calendar day, as naive UTC datetimes."""
    def to_utc(d: date) -> datetime:
        return datetime.combine(d, time.min).astimezone(timezone.utc).replace(tzinfo=None)
    return to_utc(day), to_utc(day + timedelta(days=1))


def time_ago(then: datetime, now: datetime) -> str:
    minutes = int((now - then).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days > 1 else ''} ago"


def patient_display_name(patient: Optional[Patient]) -> str:
    return patient.full_name if patient else "Unknown patient"


def doctor_display_name(doctor: Optional[Doctor]) -> str:
    return f"Dr. {doctor.last_name}" if doctor else "Unknown doctor"


class DashboardService:
    """
    Cross-collection statistics for the dashboard.
    Nothing is cached or denormalised; every call reads the current state.
    """

    def get_stats(
        self, db: Session, now: Optional[datetime] = None, today: Optional[date] = None
    ) -> DashboardStats:
        now = now or datetime.utcnow()
        today = today or date.today()
        yesterday = today - timedelta(days=1)

        total_patients = db.query(Patient).filter(Patient.is_active == True).count()  # noqa: E712
        month_ago_patients = (
            db.query(Patient)
            .filter(Patient.is_active == True, Patient.created_at < one_month_before(now))  # noqa: E712
            .count()
        )
        active_doctors = db.query(Doctor).filter(Doctor.is_active == True).count()  # noqa: E712
        total_doctors = db.query(Doctor).count()
        todays_appointments = (
            db.query(Appointment).filter(Appointment.appointment_date == today).count()
        )
        yesterdays_appointments = (
            db.query(Appointment).filter(Appointment.appointment_date == yesterday).count()
        )
        total_records = db.query(MedicalRecord).count()
        day_start, day_end = local_day_bounds_utc(today)
        todays_records = (
            db.query(MedicalRecord)
            .filter(MedicalRecord.created_at >= day_start, MedicalRecord.created_at < day_end)
            .count()
        )

        patients_trend = compute_trend(total_patients, month_ago_patients, empty_baseline=100)
        appointments_trend = compute_trend(todays_appointments, yesterdays_appointments)
        if total_doctors > 0:
            doctors_trend = f"{round_half_up((active_doctors / total_doctors) * 100)}% active"
        else:
            doctors_trend = "+0%"

        return DashboardStats(
            total_patients=StatCard(total_patients, format_trend(patients_trend)),
            active_doctors=StatCard(active_doctors, doctors_trend),
            todays_appointments=StatCard(todays_appointments, format_trend(appointments_trend)),
            medical_records=StatCard(
                total_records,
                f"+{todays_records} today" if todays_records > 0 else "No records today",
            ),
        )

    def get_recent_activities(
        self, db: Session, limit: int = 10, now: Optional[datetime] = None
    ) -> List[Activity]:
        """Latest creations of the trailing window, merged newest first."""
        now = now or datetime.utcnow()
        since = now - timedelta(hours=settings.RECENT_ACTIVITY_WINDOW_HOURS)
        per_kind = settings.RECENT_ACTIVITY_PER_KIND

        appointments = (
            db.query(Appointment)
            .options(joinedload(Appointment.patient), joinedload(Appointment.doctor))
            .filter(Appointment.created_at >= since)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .limit(per_kind)
            .all()
        )
        patients = (
            db.query(Patient)
            .filter(Patient.created_at >= since)
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .limit(per_kind)
            .all()
        )
        records = (
            db.query(MedicalRecord)
            .options(joinedload(MedicalRecord.patient))
            .filter(MedicalRecord.created_at >= since)
            .order_by(MedicalRecord.created_at.desc(), MedicalRecord.id.desc())
            .limit(per_kind)
            .all()
        )

        activities: List[Activity] = []
        for a in appointments:
            activities.append(Activity(
                id=f"apt_{a.id}",
                type="appointment",
                message=f"New appointment scheduled with {doctor_display_name(a.doctor)}",
                time=time_ago(a.created_at, now),
                priority="high" if a.priority == "urgent" else "normal",
                created_at=a.created_at,
            ))
        for p in patients:
            activities.append(Activity(
                id=f"pat_{p.id}",
                type="patient",
                message=f"New patient {p.full_name} registered",
                time=time_ago(p.created_at, now),
                priority="normal",
                created_at=p.created_at,
            ))
        for r in records:
            activities.append(Activity(
                id=f"rec_{r.id}",
                type="record",
                message=f"Medical record updated for {patient_display_name(r.patient)}",
                time=time_ago(r.created_at, now),
                priority="normal",
                created_at=r.created_at,
            ))

        activities.sort(key=lambda act: act.created_at, reverse=True)
        return activities[:limit]

    def get_todays_appointments(
        self, db: Session, limit: int = 10, today: Optional[date] = None
    ) -> List[TodaysAppointment]:
        return [
            TodaysAppointment(
                id=a.id,
                patient=patient_display_name(a.patient),
                doctor=doctor_display_name(a.doctor),
                time=a.appointment_time,
                type=a.type,
                status=a.status,
            )
            for a in list_todays_appointments(db, today=today)[:limit]
        ]

    def get_summary(self, db: Session, today: Optional[date] = None) -> DashboardSummary:
        today = today or date.today()
        todays = db.query(Appointment).filter(Appointment.appointment_date == today)

        completed = todays.filter(Appointment.status == AppointmentStatus.COMPLETED.value).count()
        total = todays.count()
        urgent = (
            db.query(Appointment)
            .filter(
                Appointment.priority.in_(URGENT_PRIORITIES),
                Appointment.status.in_(OPEN_STATUSES),
            )
            .count()
        )
        follow_ups = (
            db.query(MedicalRecord)
            .filter(
                MedicalRecord.follow_up_date >= today,
                MedicalRecord.follow_up_completed == False,  # noqa: E712
            )
            .count()
        )
        # Read-time join: the doctor's current fee applies, also retroactively.
        revenue = (
            db.query(func.coalesce(func.sum(Doctor.consultation_fee), 0))
            .select_from(Appointment)
            .outerjoin(Doctor, Appointment.doctor_uid == Doctor.id)
            .filter(
                Appointment.appointment_date == today,
                Appointment.status == AppointmentStatus.COMPLETED.value,
            )
            .scalar()
        )

        return DashboardSummary(
            completed_today=completed,
            total_today=total,
            urgent_open=urgent,
            pending_follow_ups=follow_ups,
            revenue_today=float(revenue or 0),
        )


dashboard_service = DashboardService()
