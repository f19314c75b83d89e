"""Prescription models using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Integer,
    Table,
    Text,
    Uuid,
    text,
)

from app.models.base import UTCDateTime, metadata, utcnow

# One prescription per appointment
prescriptions = Table(
    "prescriptions",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "appointment_id",
        Uuid,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("doctor_id", Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    Column("notes", Text, nullable=True),
    Column("diagnosis", Text, nullable=True),
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
)

prescription_items = Table(
    "prescription_items",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "prescription_id",
        Uuid,
        ForeignKey("prescriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("position", Integer, nullable=False, server_default=text("0")),
    Column("type", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("dosage", Text, nullable=True),
    Column("frequency", Text, nullable=True),
    # Both optional; an item is active while end_date >= today or is_ongoing
    Column("duration", Text, nullable=True),
    Column("end_date", Date, nullable=True),
    Column("is_ongoing", Boolean, nullable=False, server_default=text("false")),
    # Informational catalog links
    Column(
        "plant_id",
        Uuid,
        ForeignKey("medicinal_plants.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "treatment_id",
        Uuid,
        ForeignKey("traditional_treatments.id", ondelete="SET NULL"),
        nullable=True,
    ),
    CheckConstraint(
        "type IN ('allopathic', 'traditional')",
        name="prescription_items_type_check",
    ),
)
