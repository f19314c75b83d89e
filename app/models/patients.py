"""Patient model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Date, Table, Text, Uuid, text

from app.models.base import UTCDateTime, metadata, utcnow

patients = Table(
    "patients",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Demographics
    Column("name", Text, nullable=False),
    Column("mother_name", Text),
    Column("date_of_birth", Date),
    Column("village", Text),
    Column("image_url", Text),
    # Resting status; "waiting" is also derived from today's schedule at read time
    Column("status", Text, nullable=False, server_default=text("'waiting'")),
    # Metadata
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
    Column("updated_at", UTCDateTime, nullable=False, default=utcnow),
    CheckConstraint(
        "status IN ('waiting', 'in_treatment', 'completed', 'deceased', 'archived')",
        name="patients_status_check",
    ),
)
