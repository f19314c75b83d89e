"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Table,
    Text,
    Uuid,
    text,
)

from app.models.base import UTCDateTime, metadata, utcnow

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Ownership / references
    Column(
        "patient_id",
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("doctor_id", Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    # Appointment details
    Column("date", UTCDateTime, nullable=False),
    Column("reason", Text, nullable=False),
    Column("notes", Text, nullable=True),
    # Status management
    Column(
        "status",
        Text,
        nullable=False,
        server_default=text("'scheduled'"),
    ),
    # Audit fields
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
    Column("updated_at", UTCDateTime, nullable=False, default=utcnow),
    Column("completed_at", UTCDateTime, nullable=True),
    Column("cancelled_at", UTCDateTime, nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('scheduled', 'completed', 'cancelled')",
        name="appointments_status_check",
    ),
    Index("idx_appointments_patient_date", "patient_id", "date"),
    Index("idx_appointments_date", "date"),
)
