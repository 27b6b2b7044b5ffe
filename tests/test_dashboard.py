"""Tests for dashboard aggregation: trends, relative times, activity feed and summary."""
from datetime import date, datetime, timedelta

import pytest

from clinic.services.dashboard import (
    DashboardSummary,
    compute_trend,
    dashboard_service,
    format_amount,
    format_trend,
    one_month_before,
    time_ago,
)

NOW = datetime(2026, 3, 31, 12, 0, 0)


class TestTrend:
    @pytest.mark.parametrize("current, baseline, expected", [
        (12, 10, 20),
        (8, 10, -20),
        (10, 10, 0),
        (1, 3, -67),
        (9, 8, 13),
        (7, 8, -12),
        (5, 0, 100),
        (0, 0, 0),
    ])
    def test_compute_trend(self, current, baseline, expected):
        assert compute_trend(current, baseline) == expected

    def test_empty_baseline_override(self):
        assert compute_trend(0, 0, empty_baseline=100) == 100

    def test_format_trend(self):
        assert format_trend(20) == "+20%"
        assert format_trend(0) == "+0%"
        assert format_trend(-15) == "-15%"


class TestTimeAgo:
    def setup_method(self):
        self.now = NOW

    @pytest.mark.parametrize("delta, expected", [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=59), "59 minutes ago"),
        (timedelta(minutes=60), "1 hour ago"),
        (timedelta(hours=23, minutes=59), "23 hours ago"),
        (timedelta(hours=24), "1 day ago"),
        (timedelta(days=3, hours=5), "3 days ago"),
    ])
    def test_buckets(self, delta, expected):
        assert time_ago(self.now - delta, self.now) == expected


class TestCalendarHelpers:
    def test_one_month_before_clamps_to_month_end(self):
        assert one_month_before(datetime(2026, 3, 31, 8, 0)) == datetime(2026, 2, 28, 8, 0)

    def test_one_month_before_crosses_year(self):
        assert one_month_before(datetime(2026, 1, 15)) == datetime(2025, 12, 15)

    def test_format_amount(self):
        assert format_amount(450.0) == "450"
        assert format_amount(99.5) == "99.50"
        assert format_amount(None) == "0"


class TestSummaryText:
    def test_strings_with_completions(self):
        summary = DashboardSummary(
            completed_today=1, total_today=3, urgent_open=2, pending_follow_ups=4, revenue_today=200.0
        )
        assert summary.appointments_completed == "1 out of 3 appointments"
        assert summary.pending_tasks == "2 urgent, 4 follow-ups"
        assert summary.todays_revenue == "$200 (+33% completion)"

    def test_completion_rate_rounds_ties_up(self):
        summary = DashboardSummary(1, 8, 0, 0, 100.0)
        assert summary.completion_rate == 13
        assert summary.todays_revenue == "$100 (+13% completion)"

    def test_no_completions_means_no_rate(self):
        summary = DashboardSummary(0, 0, 0, 0, 0.0)
        assert summary.completion_rate == 0
        assert summary.todays_revenue == "$0"


class TestStats:
    def test_empty_store(self, db):
        stats = dashboard_service.get_stats(db, now=NOW, today=NOW.date())
        assert stats.total_patients.value == 0
        assert stats.total_patients.trend == "+100%"
        assert stats.active_doctors.trend == "+0%"
        assert stats.todays_appointments.trend == "+0%"
        assert stats.medical_records.trend == "No records today"

    def test_counts_and_trends(self, db, make_patient, make_doctor, make_appointment, make_record):
        today = date.today()
        now = datetime.utcnow()
        old = make_patient(first_name="Old")
        old.created_at = now - timedelta(days=60)
        make_patient(first_name="New")
        inactive = make_patient(first_name="Gone")
        inactive.is_active = False
        db.commit()

        doctor = make_doctor(first_name="Ann")
        retired = make_doctor(first_name="Ben")
        retired.is_active = False
        db.commit()

        patient = old
        make_appointment(patient, doctor, on_date=today)
        make_appointment(patient, doctor, on_date=today, time="11:00")
        make_appointment(patient, doctor, on_date=today - timedelta(days=1))
        make_record(patient, doctor)

        stats = dashboard_service.get_stats(db, now=now, today=today)
        assert stats.total_patients.value == 2
        assert stats.total_patients.trend == "+100%"  # 2 active now vs 1 a month ago
        assert stats.active_doctors.value == 1
        assert stats.active_doctors.trend == "50% active"
        assert stats.todays_appointments.value == 2
        assert stats.todays_appointments.trend == "+100%"
        assert stats.medical_records.value == 1
        assert stats.medical_records.trend == "+1 today"

    def test_active_doctor_share_rounds_ties_up(self, db, make_doctor):
        names = ["Ann", "Ben", "Cid", "Dee", "Eve", "Fay", "Gus", "Hal"]
        for i, name in enumerate(names):
            doctor = make_doctor(first_name=name)
            doctor.is_active = i == 0
        db.commit()

        stats = dashboard_service.get_stats(db, now=NOW, today=NOW.date())
        assert stats.active_doctors.value == 1
        assert stats.active_doctors.trend == "13% active"


class TestRecentActivities:
    def test_merged_newest_first_and_limited(self, db, make_patient, make_doctor, make_appointment, make_record):
        now = datetime.utcnow()
        patient = make_patient()
        doctor = make_doctor(last_name="House")
        appointment = make_appointment(patient, doctor, priority="urgent")
        record = make_record(patient, doctor)
        stale = make_patient(first_name="Stale")

        patient.created_at = now - timedelta(hours=3)
        appointment.created_at = now - timedelta(hours=2)
        record.created_at = now - timedelta(minutes=5)
        stale.created_at = now - timedelta(hours=30)
        db.commit()

        activities = dashboard_service.get_recent_activities(db, limit=10, now=now)
        assert [a.type for a in activities] == ["record", "appointment", "patient"]
        assert activities[0].id == f"rec_{record.id}"
        assert activities[0].time == "5 minutes ago"
        assert activities[0].message == "Medical record updated for John Doe"
        assert activities[1].message == "New appointment scheduled with Dr. House"
        assert activities[1].priority == "high"
        assert activities[2].message == "New patient John Doe registered"
        assert activities[2].priority == "normal"

        assert len(dashboard_service.get_recent_activities(db, limit=2, now=now)) == 2

    def test_at_most_five_per_kind(self, db, make_patient):
        for i in range(7):
            make_patient(phone=str(i))
        activities = dashboard_service.get_recent_activities(db, limit=10)
        assert len(activities) == 5


class TestTodaysAppointments:
    def test_display_fields(self, db, make_patient, make_doctor, make_appointment):
        today = date.today()
        patient = make_patient(first_name="John", last_name="Doe")
        doctor = make_doctor(first_name="Jane", last_name="Smith")
        make_appointment(patient, doctor, on_date=today, time="02:00 PM")
        make_appointment(patient, doctor, on_date=today, time="10:00 AM", type="follow-up")
        make_appointment(patient, doctor, on_date=today + timedelta(days=1))

        entries = dashboard_service.get_todays_appointments(db, today=today)
        assert [e.time for e in entries] == ["10:00 AM", "02:00 PM"]
        first = entries[0]
        assert first.patient == "John Doe"
        assert first.doctor == "Dr. Smith"
        assert first.type == "follow-up"
        assert first.status == "scheduled"


class TestSummary:
    def test_counts_and_live_fee_revenue(self, db, make_patient, make_doctor, make_appointment, make_record):
        today = date.today()
        patient = make_patient()
        cheap = make_doctor(first_name="Ann", fee=100)
        pricey = make_doctor(first_name="Ben", fee=250)
        make_appointment(patient, cheap, on_date=today, status="completed")
        make_appointment(patient, pricey, on_date=today, status="completed")
        make_appointment(patient, pricey, on_date=today, priority="urgent")
        make_appointment(patient, pricey, on_date=today + timedelta(days=3), priority="high", status="confirmed")
        make_appointment(patient, pricey, on_date=today, priority="high", status="cancelled")
        make_record(patient, cheap, follow_up_date=today + timedelta(days=7))
        make_record(patient, cheap, follow_up_date=today, follow_up_completed=True)
        make_record(patient, cheap, follow_up_date=today - timedelta(days=1))

        summary = dashboard_service.get_summary(db, today=today)
        assert (summary.completed_today, summary.total_today) == (2, 4)
        assert summary.urgent_open == 2
        assert summary.pending_follow_ups == 1
        assert summary.revenue_today == 350
        assert summary.todays_revenue == "$350 (+50% completion)"

        # Revenue follows the doctor's current fee.
        cheap.consultation_fee = 150
        db.commit()
        assert dashboard_service.get_summary(db, today=today).revenue_today == 400
