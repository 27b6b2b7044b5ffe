"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "identity_counters",
        sa.Column("kind", sa.String(30), primary_key=True),
        sa.Column("value", sa.Integer(), nullable=False),
    )

    op.create_table(
        "patients",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("patient_id", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("blood_type", sa.String(3), nullable=True),
        sa.Column("allergies", sa.JSON(), nullable=True),
        sa.Column("chronic_conditions", sa.JSON(), nullable=True),
        sa.Column("current_medications", sa.JSON(), nullable=True),
        sa.Column("emergency_contact", sa.JSON(), nullable=True),
        sa.Column("insurance", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("registered_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_patients_patient_id", "patients", ["patient_id"], unique=True)
    op.create_index("ix_patients_is_active", "patients", ["is_active"])
    op.create_index("ix_patients_created_at", "patients", ["created_at"])

    op.create_table(
        "doctors",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("doctor_id", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("specialization", sa.String(100), nullable=False),
        sa.Column("license_number", sa.String(100), nullable=False),
        sa.Column("experience", sa.Integer(), nullable=False),
        sa.Column("qualification", sa.JSON(), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("schedule", sa.JSON(), nullable=True),
        sa.Column("consultation_fee", sa.Float(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("added_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_doctors_doctor_id", "doctors", ["doctor_id"], unique=True)
    op.create_index("ix_doctors_specialization", "doctors", ["specialization"])
    op.create_index("ix_doctors_is_active", "doctors", ["is_active"])
    op.create_index("ix_doctors_created_at", "doctors", ["created_at"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("appointment_id", sa.String(20), nullable=False),
        sa.Column("patient_uid", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("doctor_uid", sa.String(), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.String(20), nullable=False),
        sa.Column("time_minutes", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("symptoms", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_appointments_appointment_id", "appointments", ["appointment_id"], unique=True)
    op.create_index("ix_appointments_patient_uid", "appointments", ["patient_uid"])
    op.create_index("ix_appointments_doctor_uid", "appointments", ["doctor_uid"])
    op.create_index("ix_appointments_appointment_date", "appointments", ["appointment_date"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appointments_created_at", "appointments", ["created_at"])

    op.create_table(
        "medical_records",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("record_id", sa.String(20), nullable=False),
        sa.Column("patient_uid", sa.String(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("doctor_uid", sa.String(), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("appointment_uid", sa.String(), nullable=True),
        sa.Column("visit_type", sa.String(20), nullable=False),
        sa.Column("chief_complaint", sa.Text(), nullable=True),
        sa.Column("symptoms", sa.JSON(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("treatment", sa.Text(), nullable=True),
        sa.Column("prescriptions", sa.JSON(), nullable=True),
        sa.Column("vitals", sa.JSON(), nullable=True),
        sa.Column("tests", sa.JSON(), nullable=True),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        sa.Column("follow_up_completed", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_medical_records_record_id", "medical_records", ["record_id"], unique=True)
    op.create_index("ix_medical_records_patient_uid", "medical_records", ["patient_uid"])
    op.create_index("ix_medical_records_doctor_uid", "medical_records", ["doctor_uid"])
    op.create_index("ix_medical_records_follow_up_date", "medical_records", ["follow_up_date"])
    op.create_index("ix_medical_records_created_at", "medical_records", ["created_at"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("action_url", sa.String(200), nullable=True),
        sa.Column("related_entity_id", sa.String(), nullable=True),
        sa.Column("related_entity_type", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])
    op.create_index(
        "ix_notifications_user_read_created", "notifications", ["user_id", "is_read", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("medical_records")
    op.drop_table("appointments")
    op.drop_table("doctors")
    op.drop_table("patients")
    op.drop_table("identity_counters")
    op.drop_table("users")
